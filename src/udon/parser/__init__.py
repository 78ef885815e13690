from .config import ParserConfig
from .streaming import ParserState, ParseResult, StreamingParser, parse_all
from .structural import Frame, FrameKind, StructuralParser

__all__ = [
    "ParserConfig",
    "ParserState",
    "ParseResult",
    "StreamingParser",
    "StructuralParser",
    "Frame",
    "FrameKind",
    "parse_all",
]
