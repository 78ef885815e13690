# src/udon/parser/structural.py

"""Turns scanner tokens into the flat event stream.

Keeps the stack of open constructs. Elements and block directives close on
dedent and at end of input; embedded elements, arrays and freeform blocks
close on their explicit closer. An attribute key with no value is emitted as
a presence-only Attribute once the next token shows no value follows.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from udon.events import (
    ArrayEnd,
    ArrayStart,
    Attribute,
    AttributeMerge,
    Comment,
    DirectiveEnd,
    DirectiveStart,
    ElementEnd,
    ElementStart,
    EmbeddedEnd,
    EmbeddedStart,
    Error,
    Event,
    FreeformEnd,
    FreeformStart,
    IdReference,
    InlineDirective,
    Interpolation,
    ParseWarning,
    RawContent,
    Span,
    Text,
)
from udon.scanner import Token, TokenKind

logger = logging.getLogger(__name__)


class FrameKind(str, Enum):
    ELEMENT = "element"
    EMBEDDED = "embedded"
    ARRAY = "array"
    DIRECTIVE = "directive"
    FREEFORM = "freeform"


_END_EVENTS: dict[FrameKind, type] = {
    FrameKind.ELEMENT: ElementEnd,
    FrameKind.EMBEDDED: EmbeddedEnd,
    FrameKind.ARRAY: ArrayEnd,
    FrameKind.DIRECTIVE: DirectiveEnd,
    FrameKind.FREEFORM: FreeformEnd,
}

# Frames closed by indentation rather than by an explicit closer.
_INDENTED = frozenset((FrameKind.ELEMENT, FrameKind.DIRECTIVE))


@dataclass(frozen=True)
class Frame:
    kind: FrameKind
    indent: int


class StructuralParser:
    def __init__(
        self,
        emit: Callable[[Event], None],
        *,
        emit_warnings: bool = True,
    ) -> None:
        self._emit = emit
        self._emit_warnings = emit_warnings
        self._stack: list[Frame] = []
        self._pending_key: Token | None = None
        self._line_indent = 0
        self._emitted = 0
        self._last_start = 0
        self._error: Error | None = None

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def emitted(self) -> int:
        """Events handed to the sink so far."""
        return self._emitted

    @property
    def faulted(self) -> bool:
        return self._error is not None

    @property
    def error(self) -> Error | None:
        return self._error

    def feed(self, tokens: Iterable[Token]) -> None:
        for token in tokens:
            if self._error is not None:
                break
            self._handle(token)

    def _push(self, event: Event) -> None:
        self._emitted += 1
        self._last_start = max(self._last_start, event.span.start)
        self._emit(event)

    def _warn(self, warnings: tuple[ParseWarning, ...]) -> None:
        if self._emit_warnings:
            for warning in warnings:
                self._push(warning)

    def _flush_key(self) -> None:
        key = self._pending_key
        if key is None:
            return
        self._pending_key = None
        assert key.content is not None
        self._push(Attribute(span=key.span, key=key.content))

    def _close(self, frame: Frame, at: int) -> None:
        self._push(_END_EVENTS[frame.kind](span=Span(at, at)))

    def _handle(self, token: Token) -> None:
        kind = token.kind
        if self._pending_key is not None and kind not in (
            TokenKind.VALUE,
            TokenKind.ARRAY_OPEN,
            TokenKind.ERROR,
        ):
            self._flush_key()

        if kind is TokenKind.LINE:
            self._line_indent = token.indent
            at = token.span.start
            while (
                self._stack
                and self._stack[-1].kind in _INDENTED
                and self._stack[-1].indent >= token.indent
            ):
                self._close(self._stack.pop(), at)

        elif kind is TokenKind.HEADER:
            header = token.header
            assert header is not None
            cls = EmbeddedStart if header.embedded else ElementStart
            self._push(
                cls(
                    span=token.span,
                    name=header.name,
                    id=header.id,
                    classes=header.classes,
                    suffix=header.suffix,
                )
            )
            frame_kind = FrameKind.EMBEDDED if header.embedded else FrameKind.ELEMENT
            self._stack.append(Frame(frame_kind, self._line_indent))
            self._warn(token.warnings)

        elif kind is TokenKind.ATTR_KEY:
            self._pending_key = token

        elif kind is TokenKind.VALUE:
            assert token.value is not None
            key = self._pending_key
            if key is not None:
                self._pending_key = None
                assert key.content is not None
                self._push(
                    Attribute(
                        span=Span(key.span.start, token.span.end),
                        key=key.content,
                        value=token.value,
                    )
                )
            else:
                self._push(token.value)
            self._warn(token.warnings)

        elif kind is TokenKind.ARRAY_OPEN:
            key = self._pending_key
            if key is not None:
                self._pending_key = None
                assert key.content is not None
                self._push(Attribute(span=key.span, key=key.content, is_array=True))
            self._push(ArrayStart(span=token.span))
            self._stack.append(Frame(FrameKind.ARRAY, self._line_indent))

        elif kind is TokenKind.ARRAY_CLOSE:
            self._pop(FrameKind.ARRAY)
            self._push(ArrayEnd(span=token.span))

        elif kind is TokenKind.BRACE_CLOSE:
            self._pop(FrameKind.EMBEDDED)
            self._push(EmbeddedEnd(span=token.span))

        elif kind is TokenKind.DIRECTIVE:
            assert token.name is not None
            self._push(
                DirectiveStart(
                    span=token.span,
                    name=token.name,
                    namespace=token.namespace,
                    is_raw=token.is_raw,
                )
            )
            self._stack.append(Frame(FrameKind.DIRECTIVE, self._line_indent))

        elif kind is TokenKind.FREEFORM_OPEN:
            self._push(FreeformStart(span=token.span))
            self._stack.append(Frame(FrameKind.FREEFORM, self._line_indent))

        elif kind is TokenKind.FREEFORM_CLOSE:
            self._pop(FrameKind.FREEFORM)
            self._push(FreeformEnd(span=token.span))

        elif kind is TokenKind.INLINE_DIRECTIVE:
            assert token.name is not None and token.content is not None
            self._push(
                InlineDirective(
                    span=token.span,
                    name=token.name,
                    content=token.content,
                    namespace=token.namespace,
                    is_raw=token.is_raw,
                )
            )

        elif kind is TokenKind.ERROR:
            assert token.code is not None
            self._pending_key = None
            # A fault found at end of input may point back at an opener that
            # precedes events already emitted; never start before them.
            start = max(token.span.start, self._last_start)
            span = Span(start, max(token.span.end, start))
            self._error = Error(span=span, code=token.code)
            self._push(self._error)

        elif kind is TokenKind.EOF:
            at = token.span.start
            while self._stack:
                self._close(self._stack.pop(), at)

        else:
            self._push(self._content_event(token))

    def _content_event(self, token: Token) -> Event:
        content = token.content
        assert content is not None
        kind = token.kind
        if kind is TokenKind.TEXT:
            return Text(span=token.span, content=content)
        if kind is TokenKind.COMMENT:
            return Comment(span=token.span, content=content)
        if kind is TokenKind.RAW_CONTENT:
            return RawContent(span=token.span, content=content)
        if kind is TokenKind.INTERPOLATION:
            return Interpolation(span=token.span, expression=content)
        if kind is TokenKind.ID_REFERENCE:
            return IdReference(span=token.span, id=content)
        if kind is TokenKind.ATTRIBUTE_MERGE:
            return AttributeMerge(span=token.span, id=content)
        raise ValueError(f"Unhandled token kind: {kind}")

    def _pop(self, kind: FrameKind) -> None:
        if not self._stack or self._stack[-1].kind is not kind:
            top = self._stack[-1].kind if self._stack else None
            logger.error("Closer for %s does not match open frame %s", kind, top)
            raise ValueError(f"Closer for {kind.value} does not match open frame")
        self._stack.pop()
