import pytest

from udon.arena import ChunkArena, ChunkSlice


@pytest.fixture
def arena() -> ChunkArena:
    arena = ChunkArena()
    arena.append(b"hello ")
    arena.append(b"world")
    return arena


class TestAppend:
    def test_returns_cumulative_base_offset(self) -> None:
        """Each chunk's base is the total size before it."""
        arena = ChunkArena()

        assert arena.append(b"abc") == 0
        assert arena.append(b"de") == 3
        assert arena.size == 5
        assert arena.chunk_count == 2

    def test_empty_chunk_is_accepted(self) -> None:
        """Empty input is legal and still counts as a chunk."""
        arena = ChunkArena()

        assert arena.append(b"") == 0
        assert arena.chunk_count == 1
        assert arena.size == 0

    def test_chunks_are_copied(self) -> None:
        """Mutating the caller's buffer does not change stored bytes."""
        arena = ChunkArena()
        buffer = bytearray(b"abc")
        arena.append(buffer)
        buffer[0] = ord("z")

        assert arena.chunk(0) == b"abc"

    def test_append_after_release_raises(self, arena: ChunkArena) -> None:
        arena.release()

        with pytest.raises(ValueError, match="released"):
            arena.append(b"more")


class TestSlice:
    def test_resolve_returns_view_of_chunk(self, arena: ChunkArena) -> None:
        handle = arena.slice(1, 1, 3)

        view = arena.resolve(handle)

        assert isinstance(view, memoryview)
        assert view.tobytes() == b"orl"

    def test_zero_length_slice_at_chunk_end(self, arena: ChunkArena) -> None:
        """A slice may point just past the last byte of a chunk."""
        handle = arena.slice(0, 6, 0)

        assert arena.resolve_bytes(handle) == b""

    def test_out_of_range_slice_raises(self, arena: ChunkArena) -> None:
        with pytest.raises(ValueError, match="exceeds chunk"):
            arena.slice(1, 3, 10)

    def test_unknown_chunk_raises(self, arena: ChunkArena) -> None:
        with pytest.raises(ValueError, match="out of range"):
            arena.slice(7, 0, 1)

    def test_handle_is_cheap_value(self, arena: ChunkArena) -> None:
        """Two handles to the same range compare equal."""
        assert arena.slice(0, 0, 5) == arena.slice(0, 0, 5)


class TestResolve:
    def test_foreign_handle_does_not_resolve(self, arena: ChunkArena) -> None:
        other = ChunkArena()
        other.append(b"hello ")
        handle = other.slice(0, 0, 5)

        assert arena.resolve(handle) is None

    def test_bogus_handle_does_not_resolve(self, arena: ChunkArena) -> None:
        handle = ChunkSlice(owner=arena.id, chunk=0, offset=4, length=100)

        assert arena.resolve(handle) is None
        assert arena.resolve_bytes(handle) is None

    def test_release_invalidates_every_slice(self, arena: ChunkArena) -> None:
        handle = arena.slice(0, 0, 5)
        arena.release()

        assert arena.released
        assert arena.resolve(handle) is None

    def test_release_is_idempotent(self, arena: ChunkArena) -> None:
        arena.release()
        arena.release()

        assert arena.released


class TestReassemble:
    def test_joins_pieces_into_new_chunk(self, arena: ChunkArena) -> None:
        """Cross-chunk content is copied once into a fresh chunk."""
        pieces = [memoryview(arena.chunk(0))[4:], memoryview(arena.chunk(1))[:3]]

        handle = arena.reassemble(pieces)

        assert arena.resolve_bytes(handle) == b"o wor"
        assert handle.chunk == 2
        assert arena.chunk_count == 3
        assert arena.reassembled_bytes == 5

    def test_reassembled_bytes_accumulate(self, arena: ChunkArena) -> None:
        arena.reassemble([b"ab", b"c"])
        arena.reassemble([b"d", b"e"])

        assert arena.reassembled_bytes == 5
