from .base import EventKind, Span
from .errors import ErrorCode
from .events import (
    END_FOR_START,
    EVENT_TYPES,
    SCALAR_TYPES,
    START_KINDS,
    ArrayEnd,
    ArrayStart,
    Attribute,
    AttributeMerge,
    BoolValue,
    Comment,
    ComplexValue,
    DirectiveEnd,
    DirectiveStart,
    ElementEnd,
    ElementStart,
    EmbeddedEnd,
    EmbeddedStart,
    Error,
    Event,
    FloatValue,
    FreeformEnd,
    FreeformStart,
    IdReference,
    InlineDirective,
    IntegerValue,
    Interpolation,
    NilValue,
    ParseWarning,
    QuotedStringValue,
    RationalValue,
    RawContent,
    ScalarValue,
    StringValue,
    Text,
)
from .values import classify, unescape
from .wire import EventRecord, SpanRecord, to_record, to_records

__all__ = [
    # Base
    "EventKind",
    "Span",
    "ErrorCode",
    # Structural
    "ElementStart",
    "ElementEnd",
    "EmbeddedStart",
    "EmbeddedEnd",
    "ArrayStart",
    "ArrayEnd",
    "DirectiveStart",
    "DirectiveEnd",
    "FreeformStart",
    "FreeformEnd",
    # Attributes
    "Attribute",
    "IdReference",
    "AttributeMerge",
    # Scalars
    "ScalarValue",
    "NilValue",
    "BoolValue",
    "IntegerValue",
    "FloatValue",
    "RationalValue",
    "ComplexValue",
    "StringValue",
    "QuotedStringValue",
    # Content
    "Text",
    "Comment",
    "RawContent",
    "Interpolation",
    "InlineDirective",
    # Diagnostics
    "ParseWarning",
    "Error",
    # Union and tables
    "Event",
    "EVENT_TYPES",
    "SCALAR_TYPES",
    "START_KINDS",
    "END_FOR_START",
    # Literals
    "classify",
    "unescape",
    # Wire
    "EventRecord",
    "SpanRecord",
    "to_record",
    "to_records",
]
