# src/udon/events/events.py

"""Event types emitted by the UDON parser.

Every event is an immutable value object carrying a Span. Content is never
copied into an event: content-bearing fields are ChunkSlice handles that must
be resolved against the arena of the parser that produced them.

The set of kinds is closed. `Event` is the union of every concrete type and
`EVENT_TYPES` maps each EventKind to its class.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Union

from udon.arena import ChunkSlice

from .base import EventKind, Span
from .errors import ErrorCode

# ============================================================================
# Scalar values
# ============================================================================


@dataclass(frozen=True)
class NilValue:
    kind: ClassVar[EventKind] = EventKind.NIL_VALUE

    span: Span
    content: ChunkSlice


@dataclass(frozen=True)
class BoolValue:
    kind: ClassVar[EventKind] = EventKind.BOOL_VALUE

    span: Span
    content: ChunkSlice
    value: bool


@dataclass(frozen=True)
class IntegerValue:
    kind: ClassVar[EventKind] = EventKind.INTEGER_VALUE

    span: Span
    content: ChunkSlice
    value: int


@dataclass(frozen=True)
class FloatValue:
    kind: ClassVar[EventKind] = EventKind.FLOAT_VALUE

    span: Span
    content: ChunkSlice
    value: float


@dataclass(frozen=True)
class RationalValue:
    kind: ClassVar[EventKind] = EventKind.RATIONAL_VALUE

    span: Span
    content: ChunkSlice
    numerator: int
    denominator: int


@dataclass(frozen=True)
class ComplexValue:
    kind: ClassVar[EventKind] = EventKind.COMPLEX_VALUE

    span: Span
    content: ChunkSlice
    real: float
    imag: float


@dataclass(frozen=True)
class StringValue:
    """Bare literal that is not a keyword or number."""

    kind: ClassVar[EventKind] = EventKind.STRING_VALUE

    span: Span
    content: ChunkSlice


@dataclass(frozen=True)
class QuotedStringValue:
    """Quoted literal. `content` holds the raw bytes between the quotes,
    escapes included; see `udon.events.values.unescape`."""

    kind: ClassVar[EventKind] = EventKind.QUOTED_STRING_VALUE

    span: Span
    content: ChunkSlice


ScalarValue = Union[
    NilValue,
    BoolValue,
    IntegerValue,
    FloatValue,
    RationalValue,
    ComplexValue,
    StringValue,
    QuotedStringValue,
]

SCALAR_TYPES: tuple[type, ...] = (
    NilValue,
    BoolValue,
    IntegerValue,
    FloatValue,
    RationalValue,
    ComplexValue,
    StringValue,
    QuotedStringValue,
)


# ============================================================================
# Structural pairs
# ============================================================================


@dataclass(frozen=True)
class ElementStart:
    kind: ClassVar[EventKind] = EventKind.ELEMENT_START

    span: Span
    name: ChunkSlice | None = None
    id: ScalarValue | None = None
    classes: tuple[ChunkSlice, ...] = field(default_factory=tuple)
    suffix: ChunkSlice | None = None


@dataclass(frozen=True)
class ElementEnd:
    kind: ClassVar[EventKind] = EventKind.ELEMENT_END

    span: Span


@dataclass(frozen=True)
class EmbeddedStart:
    kind: ClassVar[EventKind] = EventKind.EMBEDDED_START

    span: Span
    name: ChunkSlice | None = None
    id: ScalarValue | None = None
    classes: tuple[ChunkSlice, ...] = field(default_factory=tuple)
    suffix: ChunkSlice | None = None


@dataclass(frozen=True)
class EmbeddedEnd:
    kind: ClassVar[EventKind] = EventKind.EMBEDDED_END

    span: Span


@dataclass(frozen=True)
class ArrayStart:
    kind: ClassVar[EventKind] = EventKind.ARRAY_START

    span: Span


@dataclass(frozen=True)
class ArrayEnd:
    kind: ClassVar[EventKind] = EventKind.ARRAY_END

    span: Span


@dataclass(frozen=True)
class DirectiveStart:
    kind: ClassVar[EventKind] = EventKind.DIRECTIVE_START

    span: Span
    name: ChunkSlice
    namespace: ChunkSlice | None = None
    is_raw: bool = False


@dataclass(frozen=True)
class DirectiveEnd:
    kind: ClassVar[EventKind] = EventKind.DIRECTIVE_END

    span: Span


@dataclass(frozen=True)
class FreeformStart:
    kind: ClassVar[EventKind] = EventKind.FREEFORM_START

    span: Span


@dataclass(frozen=True)
class FreeformEnd:
    kind: ClassVar[EventKind] = EventKind.FREEFORM_END

    span: Span


# ============================================================================
# Attributes and references
# ============================================================================


@dataclass(frozen=True)
class Attribute:
    """`:key value`.

    `value` is None for a presence-only key. When `is_array` is set the
    value follows as an ArrayStart ... ArrayEnd group.
    """

    kind: ClassVar[EventKind] = EventKind.ATTRIBUTE

    span: Span
    key: ChunkSlice
    value: ScalarValue | None = None
    is_array: bool = False


@dataclass(frozen=True)
class IdReference:
    kind: ClassVar[EventKind] = EventKind.ID_REFERENCE

    span: Span
    id: ChunkSlice


@dataclass(frozen=True)
class AttributeMerge:
    kind: ClassVar[EventKind] = EventKind.ATTRIBUTE_MERGE

    span: Span
    id: ChunkSlice


# ============================================================================
# Content
# ============================================================================


@dataclass(frozen=True)
class Text:
    kind: ClassVar[EventKind] = EventKind.TEXT

    span: Span
    content: ChunkSlice


@dataclass(frozen=True)
class Comment:
    kind: ClassVar[EventKind] = EventKind.COMMENT

    span: Span
    content: ChunkSlice


@dataclass(frozen=True)
class RawContent:
    kind: ClassVar[EventKind] = EventKind.RAW_CONTENT

    span: Span
    content: ChunkSlice


@dataclass(frozen=True)
class Interpolation:
    kind: ClassVar[EventKind] = EventKind.INTERPOLATION

    span: Span
    expression: ChunkSlice


@dataclass(frozen=True)
class InlineDirective:
    kind: ClassVar[EventKind] = EventKind.INLINE_DIRECTIVE

    span: Span
    name: ChunkSlice
    content: ChunkSlice
    namespace: ChunkSlice | None = None
    is_raw: bool = False


# ============================================================================
# Diagnostics
# ============================================================================


@dataclass(frozen=True)
class ParseWarning:
    """Advisory diagnostic. Does not end the stream."""

    kind: ClassVar[EventKind] = EventKind.WARNING

    span: Span
    message: str


@dataclass(frozen=True)
class Error:
    """Terminal diagnostic. Nothing structural follows it."""

    kind: ClassVar[EventKind] = EventKind.ERROR

    span: Span
    code: ErrorCode

    @property
    def message(self) -> str:
        return self.code.message


Event = Union[
    ElementStart,
    ElementEnd,
    EmbeddedStart,
    EmbeddedEnd,
    ArrayStart,
    ArrayEnd,
    DirectiveStart,
    DirectiveEnd,
    FreeformStart,
    FreeformEnd,
    Attribute,
    IdReference,
    AttributeMerge,
    NilValue,
    BoolValue,
    IntegerValue,
    FloatValue,
    RationalValue,
    ComplexValue,
    StringValue,
    QuotedStringValue,
    Text,
    Comment,
    RawContent,
    Interpolation,
    InlineDirective,
    ParseWarning,
    Error,
]

EVENT_TYPES: dict[EventKind, type] = {
    cls.kind: cls
    for cls in (
        ElementStart,
        ElementEnd,
        EmbeddedStart,
        EmbeddedEnd,
        ArrayStart,
        ArrayEnd,
        DirectiveStart,
        DirectiveEnd,
        FreeformStart,
        FreeformEnd,
        Attribute,
        IdReference,
        AttributeMerge,
        *SCALAR_TYPES,
        Text,
        Comment,
        RawContent,
        Interpolation,
        InlineDirective,
        ParseWarning,
        Error,
    )
}

START_KINDS: frozenset[EventKind] = frozenset(
    {
        EventKind.ELEMENT_START,
        EventKind.EMBEDDED_START,
        EventKind.ARRAY_START,
        EventKind.DIRECTIVE_START,
        EventKind.FREEFORM_START,
    }
)

END_FOR_START: dict[EventKind, EventKind] = {
    EventKind.ELEMENT_START: EventKind.ELEMENT_END,
    EventKind.EMBEDDED_START: EventKind.EMBEDDED_END,
    EventKind.ARRAY_START: EventKind.ARRAY_END,
    EventKind.DIRECTIVE_START: EventKind.DIRECTIVE_END,
    EventKind.FREEFORM_START: EventKind.FREEFORM_END,
}
