# src/udon/parser/streaming.py

import logging
from collections import deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from time import monotonic
from typing import Any, overload

from udon.arena import ChunkArena
from udon.events import Event, to_records
from udon.observability import names
from udon.observability.base import MetricsHook, NoOpMetricsHook
from udon.scanner import Scanner

from .config import ParserConfig
from .structural import StructuralParser

logger = logging.getLogger(__name__)


class ParserState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    FINISHED = "finished"
    FAULTED = "faulted"
    CLOSED = "closed"


class StreamingParser:
    """Push parser: feed bytes in any chunking, read events in order.

    - `feed()` may be called any number of times before `finish()`
    - Events become readable as soon as they are complete
    - After a fault, further input is ignored and the queue ends in one Error
    - Event slices resolve against `arena` until `close()`
    """

    def __init__(
        self,
        capacity_hint: int | None = None,
        *,
        config: ParserConfig | None = None,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        if config is not None and capacity_hint is not None:
            logger.error("Both capacity_hint and config passed to StreamingParser")
            raise ValueError("Pass capacity_hint or config, not both")
        if config is None:
            config = ParserConfig()
            if capacity_hint is not None:
                config = ParserConfig(capacity_hint=capacity_hint)
        self.config = config
        if self.config.capacity_hint < 0:
            logger.error("Invalid capacity_hint: %d", self.config.capacity_hint)
            raise ValueError("capacity_hint must be >= 0")

        self.metrics_hook = metrics_hook
        self._arena = ChunkArena()
        self._queue: deque[Event] = deque()
        self._scanner = Scanner(self._arena)
        self._structural = StructuralParser(
            self._queue.append, emit_warnings=self.config.emit_warnings
        )
        self._bytes_fed = 0
        self._reassembled_seen = 0
        self._finished = False
        self._closed = False
        self._fault_reported = False

    @property
    def arena(self) -> ChunkArena:
        return self._arena

    @property
    def state(self) -> ParserState:
        if self._closed:
            return ParserState.CLOSED
        if self._structural.faulted:
            return ParserState.FAULTED
        if self._finished:
            return ParserState.FINISHED
        if self._bytes_fed:
            return ParserState.SCANNING
        return ParserState.IDLE

    @property
    def pending(self) -> int:
        """Events queued and not yet read."""
        return len(self._queue)

    @property
    def bytes_fed(self) -> int:
        return self._bytes_fed

    def feed(self, data: bytes | bytearray | memoryview | str) -> int:
        """Scan one chunk of input.

        Returns:
            Number of events enqueued by this call.

        Raises:
            ValueError: If called after `finish()` or `close()`.
            TypeError: If `data` is not bytes-like or str.
        """
        if self._closed or self._finished:
            logger.error("feed() called on a %s parser", self.state.value)
            raise ValueError(f"Cannot feed a {self.state.value} parser")
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Expected bytes-like or str, got {type(data).__name__}")

        if self._structural.faulted:
            logger.debug("Ignoring %d bytes fed after fault", len(data))
            return 0

        start = monotonic()
        before = self._structural.emitted
        self._bytes_fed += len(data)
        self._structural.feed(self._scanner.scan(bytes(data)))
        produced = self._structural.emitted - before

        elapsed_ms = 1000 * (monotonic() - start)
        self.metrics_hook.record_latency(names.PARSER_FEED_DURATION, elapsed_ms)
        self.metrics_hook.increment(names.PARSER_BYTES_FED, len(data))
        self._record_progress(produced)
        logger.debug(
            "Fed %d bytes (total=%d): %d events", len(data), self._bytes_fed, produced
        )
        return produced

    def finish(self) -> int:
        """Signal end of input and flush every remaining event.

        Idempotent: later calls return 0.

        Raises:
            ValueError: If the parser has been closed.
        """
        if self._closed:
            logger.error("finish() called on a closed parser")
            raise ValueError("Cannot finish a closed parser")
        if self._finished:
            return 0
        self._finished = True
        if self._structural.faulted:
            return 0

        start = monotonic()
        before = self._structural.emitted
        self._structural.feed(self._scanner.finish())
        produced = self._structural.emitted - before

        elapsed_ms = 1000 * (monotonic() - start)
        self.metrics_hook.record_latency(names.PARSER_FINISH_DURATION, elapsed_ms)
        self._record_progress(produced)
        logger.info(
            "Finished parse: bytes=%d, events=%d, reassembled_bytes=%d",
            self._bytes_fed,
            self._structural.emitted,
            self._arena.reassembled_bytes,
        )
        return produced

    def read(self) -> Event | None:
        """Pop the next event, or None when nothing is queued."""
        if not self._queue:
            return None
        return self._queue.popleft()

    def drain(self) -> list[Event]:
        events = list(self._queue)
        self._queue.clear()
        return events

    def __iter__(self) -> Iterator[Event]:
        while self._queue:
            yield self._queue.popleft()

    def close(self) -> None:
        """Release the arena. Slices of every emitted event stop resolving."""
        if self._closed:
            return
        self._closed = True
        self._queue.clear()
        self._arena.release()

    def __enter__(self) -> "StreamingParser":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _record_progress(self, produced: int) -> None:
        if produced:
            self.metrics_hook.increment(names.PARSER_EVENTS_EMITTED, produced)
        self.metrics_hook.record_gauge(names.PARSER_QUEUE_DEPTH, len(self._queue))

        reassembled = self._arena.reassembled_bytes - self._reassembled_seen
        if reassembled:
            self._reassembled_seen = self._arena.reassembled_bytes
            self.metrics_hook.increment(names.ARENA_REASSEMBLED_BYTES, reassembled)

        error = self._structural.error
        if error is not None and not self._fault_reported:
            self._fault_reported = True
            self.metrics_hook.increment(
                names.PARSER_ERRORS_TOTAL, labels={"code": error.code.value}
            )
            logger.warning(
                "Parse faulted: %s at %d..%d",
                error.code.value,
                error.span.start,
                error.span.end,
            )


@dataclass(frozen=True)
class ParseResult(Sequence):
    """Events of a one-shot parse together with the arena backing them."""

    events: tuple[Event, ...]
    arena: ChunkArena

    @overload
    def __getitem__(self, index: int) -> Event: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Event, ...]: ...

    def __getitem__(self, index):
        return self.events[index]

    def __len__(self) -> int:
        return len(self.events)

    def to_records(self) -> list[dict[str, Any]]:
        return to_records(list(self.events), self.arena)


def parse_all(
    data: bytes | bytearray | memoryview | str,
    *,
    config: ParserConfig | None = None,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> ParseResult:
    """Parse a complete document in one call."""
    parser = StreamingParser(config=config, metrics_hook=metrics_hook)
    parser.feed(data)
    parser.finish()
    return ParseResult(events=tuple(parser.drain()), arena=parser.arena)
