# src/udon/arena/arena.py

import itertools
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_arena_ids = itertools.count(1)


@dataclass(frozen=True)
class ChunkSlice:
    """Non-owning handle to a contiguous byte range held by a ChunkArena.

    Cheap to copy. Carries no bytes. Only the arena that issued it can
    resolve it, and only while that arena is alive.
    """

    owner: int
    chunk: int
    offset: int
    length: int


class ChunkArena:
    """Append-only store of immutable byte chunks.

    - Chunks are never mutated or reordered
    - Slices are zero-copy views into a single chunk
    - Resolving a bad handle returns None, never raises
    """

    def __init__(self) -> None:
        self._id = next(_arena_ids)
        self._chunks: list[bytes] = []
        self._size = 0
        self._reassembled = 0
        self._released = False

    @property
    def id(self) -> int:
        return self._id

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    @property
    def size(self) -> int:
        """Total bytes held across every chunk."""
        return self._size

    @property
    def reassembled_bytes(self) -> int:
        """Bytes copied into the arena to join content split across feeds."""
        return self._reassembled

    @property
    def released(self) -> bool:
        return self._released

    def append(self, data: bytes) -> int:
        """Store a chunk and return its base offset in arena storage."""
        if self._released:
            raise ValueError("arena has been released")
        base = self._size
        self._chunks.append(bytes(data))
        self._size += len(data)
        return base

    def chunk(self, index: int) -> bytes:
        return self._chunks[index]

    def slice(self, chunk: int, offset: int, length: int) -> ChunkSlice:
        if chunk < 0 or chunk >= len(self._chunks):
            raise ValueError(f"chunk index {chunk} out of range")
        if offset < 0 or length < 0 or offset + length > len(self._chunks[chunk]):
            raise ValueError(
                f"slice {offset}+{length} exceeds chunk {chunk} "
                f"of {len(self._chunks[chunk])} bytes"
            )
        return ChunkSlice(owner=self._id, chunk=chunk, offset=offset, length=length)

    def reassemble(self, pieces: list[memoryview | bytes]) -> ChunkSlice:
        """Join pieces from several chunks into one new chunk and slice it."""
        joined = b"".join(pieces)
        self.append(joined)
        self._reassembled += len(joined)
        logger.debug("Reassembled %d bytes into chunk %d", len(joined), self.chunk_count - 1)
        return ChunkSlice(
            owner=self._id, chunk=self.chunk_count - 1, offset=0, length=len(joined)
        )

    def resolve(self, handle: ChunkSlice) -> memoryview | None:
        if self._released or handle.owner != self._id:
            return None
        if handle.chunk < 0 or handle.chunk >= len(self._chunks):
            return None
        data = self._chunks[handle.chunk]
        end = handle.offset + handle.length
        if handle.offset < 0 or handle.length < 0 or end > len(data):
            return None
        return memoryview(data)[handle.offset : end]

    def resolve_bytes(self, handle: ChunkSlice) -> bytes | None:
        view = self.resolve(handle)
        return None if view is None else view.tobytes()

    def release(self) -> None:
        """Drop every chunk. Outstanding slices stop resolving."""
        if self._released:
            return
        logger.debug(
            "Releasing arena %d: chunks=%d, bytes=%d",
            self._id,
            len(self._chunks),
            self._size,
        )
        self._chunks.clear()
        self._released = True
