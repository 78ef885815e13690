# src/udon/events/base.py

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Span:
    """Half-open byte range [start, end) into the logical input."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError("span start must be >= 0")
        if self.end < self.start:
            raise ValueError("span end must be >= start")

    def __len__(self) -> int:
        return self.end - self.start


class EventKind(str, Enum):
    """Wire name of every event the parser can emit."""

    # Structural pairs
    ELEMENT_START = "element_start"
    ELEMENT_END = "element_end"
    EMBEDDED_START = "embedded_start"
    EMBEDDED_END = "embedded_end"
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    DIRECTIVE_START = "directive_start"
    DIRECTIVE_END = "directive_end"
    FREEFORM_START = "freeform_start"
    FREEFORM_END = "freeform_end"

    # Attributes and references
    ATTRIBUTE = "attribute"
    ID_REFERENCE = "id_reference"
    ATTRIBUTE_MERGE = "attribute_merge"

    # Scalar values
    NIL_VALUE = "nil_value"
    BOOL_VALUE = "bool_value"
    INTEGER_VALUE = "integer_value"
    FLOAT_VALUE = "float_value"
    RATIONAL_VALUE = "rational_value"
    COMPLEX_VALUE = "complex_value"
    STRING_VALUE = "string_value"
    QUOTED_STRING_VALUE = "quoted_string_value"

    # Content
    TEXT = "text"
    COMMENT = "comment"
    RAW_CONTENT = "raw_content"
    INTERPOLATION = "interpolation"
    INLINE_DIRECTIVE = "inline_directive"

    # Diagnostics
    WARNING = "warning"
    ERROR = "error"
