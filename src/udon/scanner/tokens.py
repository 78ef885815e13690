# src/udon/scanner/tokens.py

from dataclasses import dataclass, field
from enum import Enum

from udon.arena import ChunkSlice
from udon.events import ErrorCode, ParseWarning, ScalarValue, Span


class TokenKind(str, Enum):
    LINE = "line"
    HEADER = "header"
    ATTR_KEY = "attr_key"
    VALUE = "value"
    ARRAY_OPEN = "array_open"
    ARRAY_CLOSE = "array_close"
    BRACE_CLOSE = "brace_close"
    TEXT = "text"
    COMMENT = "comment"
    DIRECTIVE = "directive"
    RAW_CONTENT = "raw_content"
    INTERPOLATION = "interpolation"
    INLINE_DIRECTIVE = "inline_directive"
    FREEFORM_OPEN = "freeform_open"
    FREEFORM_CLOSE = "freeform_close"
    ID_REFERENCE = "id_reference"
    ATTRIBUTE_MERGE = "attribute_merge"
    ERROR = "error"
    EOF = "eof"


@dataclass(frozen=True)
class Header:
    """Opening of an element or embedded element."""

    embedded: bool
    name: ChunkSlice | None = None
    id: ScalarValue | None = None
    classes: tuple[ChunkSlice, ...] = ()
    suffix: ChunkSlice | None = None


@dataclass(frozen=True)
class Token:
    """One lexical unit.

    Which optional fields are set depends on `kind`:
    - content: TEXT, COMMENT, RAW_CONTENT, ATTR_KEY, INTERPOLATION,
      INLINE_DIRECTIVE, ID_REFERENCE, ATTRIBUTE_MERGE
    - value: VALUE
    - header: HEADER
    - name / namespace / is_raw: DIRECTIVE, INLINE_DIRECTIVE
    - indent: LINE
    - code: ERROR
    """

    kind: TokenKind
    span: Span
    content: ChunkSlice | None = None
    value: ScalarValue | None = None
    header: Header | None = None
    name: ChunkSlice | None = None
    namespace: ChunkSlice | None = None
    is_raw: bool = False
    indent: int = 0
    code: ErrorCode | None = None
    warnings: tuple[ParseWarning, ...] = field(default_factory=tuple)
