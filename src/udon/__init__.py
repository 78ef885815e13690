from .arena import ChunkArena, ChunkSlice
from .events import ErrorCode, Event, EventKind, Span, to_record, to_records
from .parser import (
    ParserConfig,
    ParseResult,
    ParserState,
    StreamingParser,
    parse_all,
)

__all__ = [
    # Parsing
    "StreamingParser",
    "ParserConfig",
    "ParserState",
    "ParseResult",
    "parse_all",
    # Arena
    "ChunkArena",
    "ChunkSlice",
    # Events
    "Event",
    "EventKind",
    "ErrorCode",
    "Span",
    "to_record",
    "to_records",
]
