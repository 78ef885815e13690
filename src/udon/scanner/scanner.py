# src/udon/scanner/scanner.py

"""Resumable byte-level scanner for UDON.

The scanner is a state machine driven one byte at a time. Everything it needs
to continue (mode, token marks, brace and array nesting, quote state, pending
raw-block lines) is kept on the instance, so `scan()` can be called with input
split at any byte and produces the same tokens as a single call.

Token content is referenced by input offsets and turned into ChunkSlice
handles on completion. A range inside one fed chunk is sliced in place; a
range crossing fed chunks is joined once and appended to the arena.
"""

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum, auto

from udon.arena import ChunkArena, ChunkSlice
from udon.events import ErrorCode, ParseWarning, QuotedStringValue, ScalarValue, Span
from udon.events.values import VALID_ESCAPES, classify

from .tokens import Header, Token, TokenKind

logger = logging.getLogger(__name__)

EOF = -1

SP = 0x20
TAB = 0x09
CR = 0x0D
NL = 0x0A
PIPE = ord("|")
BANG = ord("!")
SEMI = ord(";")
COLON = ord(":")
DOT = ord(".")
AT = ord("@")
TICK = ord("`")
BACKSLASH = ord("\\")
DQUOTE = ord('"')
SQUOTE = ord("'")
LBRACE = ord("{")
RBRACE = ord("}")
LBRACKET = ord("[")
RBRACKET = ord("]")

NAME_BYTES = frozenset(
    b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"
) | frozenset(range(0x80, 0x100))
SUFFIX_BYTES = frozenset(b"?!*+")
QUOTES = frozenset((DQUOTE, SQUOTE))
BLANK = frozenset((SP, TAB, CR))
WORD_END = frozenset((SP, TAB, CR, NL, EOF))

_TEXT_STOP = re.compile(rb"[\n|!`}]")


class Mode(Enum):
    LINE_START = auto()
    TEXT = auto()
    TEXT_LEAD = auto()
    EMBED_NEWLINE = auto()
    LITERAL = auto()
    COMMENT = auto()
    ELEMENT_BAR = auto()
    HEADER = auto()
    HEADER_NAME = auto()
    CLASS_START = auto()
    CLASS_NAME = auto()
    ID_WAIT = auto()
    ID_BARE = auto()
    ID_CLOSE = auto()
    ATTR_SPACE = auto()
    ATTR_KEY_START = auto()
    ATTR_KEY = auto()
    ATTR_VALUE_WAIT = auto()
    BARE_ATTR = auto()
    ARRAY = auto()
    BARE_ARRAY = auto()
    QUOTED = auto()
    MERGE_ID = auto()
    AT = auto()
    REF_ID = auto()
    BANG = auto()
    DIRECTIVE_NAME = auto()
    RAW_REST = auto()
    RAW_LINE = auto()
    BANG_BRACE = auto()
    INTERP = auto()
    INLINE_NAME = auto()
    INLINE_CONTENT = auto()
    FREEFORM = auto()


# Modes that only react to a newline; runs of other bytes are skipped in bulk.
_LINE_RUN_MODES = frozenset((Mode.COMMENT, Mode.RAW_LINE, Mode.LITERAL))


@dataclass
class _HeaderBuilder:
    start: int
    embedded: bool
    phase: int = 0  # 0 name allowed, 1 id allowed, 2 classes/suffix allowed, 3 done
    id_open: int = 0
    name: ChunkSlice | None = None
    id: ScalarValue | None = None
    classes: list[ChunkSlice] = field(default_factory=list)
    suffix: ChunkSlice | None = None
    warnings: list[ParseWarning] = field(default_factory=list)


class Scanner:
    """Turns fed bytes into Tokens.

    - `scan(data)` stores `data` in the arena and returns completed tokens
    - `finish()` flushes at end of input and returns the final tokens
    - After an ERROR token nothing else is produced
    """

    def __init__(self, arena: ChunkArena) -> None:
        self._arena = arena
        self._input_starts: list[int] = []
        self._input_chunks: list[int] = []
        self._offset = 0
        self._tokens: list[Token] = []
        self._failed = False
        self._finished = False

        self._mode = Mode.LINE_START
        self._prev = EOF
        self._mark = 0
        self._opener = 0

        self._indent = 0
        self._line_start = 0
        self._line_indent = 0

        self._text_mark: int | None = None
        self._pend: int | None = None
        self._pend_pos = 0
        self._ticks = 0

        self._braces: list[int] = []
        self._arrays: list[int] = []
        self._header: _HeaderBuilder | None = None

        self._quote = DQUOTE
        self._quote_open = 0
        self._quote_ctx = Mode.ATTR_SPACE
        self._escape = False
        self._quote_warnings: list[ParseWarning] = []

        self._colon: int | None = None
        self._closing = False
        self._depth = 0
        self._inline: tuple[ChunkSlice, ChunkSlice | None, bool] | None = None
        self._freeform_open = 0

        self._raw_indent: int | None = None
        self._raw_content_indent: int | None = None
        self._raw_blanks: list[int] = []

        self._handlers = {
            Mode.LINE_START: self._line_start_byte,
            Mode.TEXT: self._text_byte,
            Mode.TEXT_LEAD: self._text_lead_byte,
            Mode.EMBED_NEWLINE: self._embed_newline_byte,
            Mode.LITERAL: self._literal_byte,
            Mode.COMMENT: self._comment_byte,
            Mode.ELEMENT_BAR: self._element_bar_byte,
            Mode.HEADER: self._header_byte,
            Mode.HEADER_NAME: self._header_name_byte,
            Mode.CLASS_START: self._class_start_byte,
            Mode.CLASS_NAME: self._class_name_byte,
            Mode.ID_WAIT: self._id_wait_byte,
            Mode.ID_BARE: self._id_bare_byte,
            Mode.ID_CLOSE: self._id_close_byte,
            Mode.ATTR_SPACE: self._attr_space_byte,
            Mode.ATTR_KEY_START: self._attr_key_start_byte,
            Mode.ATTR_KEY: self._attr_key_byte,
            Mode.ATTR_VALUE_WAIT: self._attr_value_wait_byte,
            Mode.BARE_ATTR: self._bare_attr_byte,
            Mode.ARRAY: self._array_byte,
            Mode.BARE_ARRAY: self._bare_array_byte,
            Mode.QUOTED: self._quoted_byte,
            Mode.MERGE_ID: self._merge_id_byte,
            Mode.AT: self._at_byte,
            Mode.REF_ID: self._ref_id_byte,
            Mode.BANG: self._bang_byte,
            Mode.DIRECTIVE_NAME: self._directive_name_byte,
            Mode.RAW_REST: self._raw_rest_byte,
            Mode.RAW_LINE: self._raw_line_byte,
            Mode.BANG_BRACE: self._bang_brace_byte,
            Mode.INTERP: self._interp_byte,
            Mode.INLINE_NAME: self._inline_name_byte,
            Mode.INLINE_CONTENT: self._inline_content_byte,
            Mode.FREEFORM: self._freeform_byte,
        }

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def offset(self) -> int:
        """Input bytes consumed so far."""
        return self._offset

    @property
    def failed(self) -> bool:
        return self._failed

    @property
    def finished(self) -> bool:
        return self._finished

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------

    def scan(self, data: bytes) -> list[Token]:
        if self._finished:
            raise ValueError("scan() called after finish()")
        if self._failed or not data:
            return []

        base = self._offset
        self._arena.append(data)
        self._input_starts.append(base)
        self._input_chunks.append(self._arena.chunk_count - 1)
        self._offset += len(data)

        handlers = self._handlers
        i = 0
        n = len(data)
        while i < n:
            mode = self._mode
            if mode in _LINE_RUN_MODES:
                j = data.find(b"\n", i)
                if j == -1:
                    j = n
                if j > i:
                    self._prev = data[j - 1]
                    i = j
                    continue
            elif mode is Mode.TEXT and self._pend is None:
                match = _TEXT_STOP.search(data, i)
                j = match.start() if match else n
                if j > i:
                    if self._text_mark is None:
                        self._text_mark = base + i
                    self._prev = data[j - 1]
                    i = j
                    continue

            b = data[i]
            if handlers[mode](b, base + i):
                self._prev = b
                i += 1
            if self._failed:
                break

        return self._take()

    def finish(self) -> list[Token]:
        if self._finished:
            return []
        self._finished = True
        if self._failed:
            return []

        pos = self._offset
        while not self._failed:
            if self._handlers[self._mode](EOF, pos):
                break
        if not self._failed:
            self._emit(TokenKind.EOF, pos, pos)
        return self._take()

    def _take(self) -> list[Token]:
        tokens = self._tokens
        self._tokens = []
        return tokens

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _capture(self, start: int, end: int) -> ChunkSlice:
        """Slice input range [start, end), copying only if it spans chunks."""
        k = bisect_right(self._input_starts, start) - 1
        chunk_start = self._input_starts[k]
        index = self._input_chunks[k]
        chunk = self._arena.chunk(index)
        if end <= chunk_start + len(chunk):
            return self._arena.slice(index, start - chunk_start, end - start)

        pieces: list[memoryview] = []
        pos = start
        while pos < end:
            k = bisect_right(self._input_starts, pos) - 1
            chunk_start = self._input_starts[k]
            chunk = self._arena.chunk(self._input_chunks[k])
            stop = min(end, chunk_start + len(chunk))
            pieces.append(memoryview(chunk)[pos - chunk_start : stop - chunk_start])
            pos = stop
        return self._arena.reassemble(pieces)

    def _emit(self, kind: TokenKind, start: int, end: int, **fields) -> None:
        self._tokens.append(Token(kind=kind, span=Span(start, end), **fields))

    def _fail(self, code: ErrorCode, start: int, end: int) -> bool:
        logger.debug("Scanner fault %s at %d..%d", code.value, start, end)
        self._emit(TokenKind.ERROR, start, end, code=code)
        self._failed = True
        return True

    def _trim_cr(self, start: int, pos: int) -> int:
        if self._prev == CR and pos - 1 >= start:
            return pos - 1
        return pos

    def _new_line(self, pos: int) -> None:
        self._indent = 0
        self._line_start = pos + 1
        self._mode = Mode.LINE_START

    def _end_line(self, pos: int) -> None:
        if self._braces:
            self._mode = Mode.EMBED_NEWLINE
        else:
            self._new_line(pos)

    def _flush_text(self, end: int) -> None:
        mark = self._text_mark
        self._text_mark = None
        if mark is not None and end > mark:
            self._emit(TokenKind.TEXT, mark, end, content=self._capture(mark, end))

    def _close_brace(self, pos: int) -> None:
        self._braces.pop()
        self._emit(TokenKind.BRACE_CLOSE, pos, pos + 1)
        self._mode = Mode.TEXT

    def _value(self, start: int, end: int) -> ScalarValue:
        content = self._capture(start, end)
        raw = self._arena.resolve_bytes(content) or b""
        return classify(raw, Span(start, end), content)

    def _split_name(
        self, start: int, end: int
    ) -> tuple[ChunkSlice, ChunkSlice | None, bool] | None:
        """Split `ns:name` at the first colon. Namespace `raw` marks raw."""
        colon = self._colon
        self._colon = None
        if colon is None:
            return self._capture(start, end), None, False
        if colon == start or colon + 1 == end:
            return None
        namespace = self._capture(start, colon)
        name = self._capture(colon + 1, end)
        if self._arena.resolve_bytes(namespace) == b"raw":
            return name, None, True
        return name, namespace, False

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def _line_start_byte(self, b: int, pos: int) -> bool:
        if b == SP:
            self._indent += 1
            return True
        if b == TAB:
            return self._fail(ErrorCode.NO_TABS, pos, pos + 1)
        if b == CR:
            return True
        if b == NL:
            if self._raw_content_indent is not None:
                self._raw_blanks.append(self._line_start)
            self._new_line(pos)
            return True
        if b == EOF:
            return True

        if self._raw_indent is not None:
            if self._indent > self._raw_indent:
                return self._raw_line_start(pos)
            self._raw_indent = None
            self._raw_content_indent = None
            self._raw_blanks.clear()

        self._line_indent = self._indent
        self._emit(TokenKind.LINE, pos, pos, indent=self._indent)
        self._opener = pos
        if b == PIPE:
            self._mode = Mode.ELEMENT_BAR
        elif b == SEMI:
            self._mark = pos + 1
            self._mode = Mode.COMMENT
        elif b == BANG:
            self._mode = Mode.BANG
        elif b == SQUOTE:
            self._mark = pos + 1
            self._mode = Mode.LITERAL
        elif b == COLON:
            self._mode = Mode.ATTR_KEY_START
        elif b == AT:
            self._mode = Mode.AT
        else:
            self._mode = Mode.TEXT
            return False
        return True

    def _raw_line_start(self, pos: int) -> bool:
        if self._raw_content_indent is None:
            self._raw_content_indent = self._indent
        for blank in self._raw_blanks:
            self._emit(
                TokenKind.RAW_CONTENT, blank, blank, content=self._capture(blank, blank)
            )
        self._raw_blanks.clear()
        self._mark = self._line_start + min(self._indent, self._raw_content_indent)
        self._mode = Mode.RAW_LINE
        return False

    def _comment_byte(self, b: int, pos: int) -> bool:
        if b == NL or b == EOF:
            end = self._trim_cr(self._mark, pos)
            self._emit(
                TokenKind.COMMENT,
                self._opener,
                end,
                content=self._capture(self._mark, end),
            )
            if b == NL:
                self._new_line(pos)
        return True

    def _literal_byte(self, b: int, pos: int) -> bool:
        if b == NL or b == EOF:
            end = self._trim_cr(self._mark, pos)
            if end > self._mark:
                self._emit(
                    TokenKind.TEXT, self._mark, end, content=self._capture(self._mark, end)
                )
            if b == NL:
                self._new_line(pos)
        return True

    def _raw_line_byte(self, b: int, pos: int) -> bool:
        if b == NL or b == EOF:
            end = self._trim_cr(self._mark, pos)
            self._emit(
                TokenKind.RAW_CONTENT,
                self._mark,
                end,
                content=self._capture(self._mark, end),
            )
            if b == NL:
                self._new_line(pos)
        return True

    # ------------------------------------------------------------------
    # Inline content
    # ------------------------------------------------------------------

    def _text_byte(self, b: int, pos: int) -> bool:
        pend = self._pend
        if pend is not None:
            self._pend = None
            if b == LBRACE and pend == PIPE:
                self._flush_text(self._pend_pos)
                self._open_header(self._pend_pos, embedded=True)
                return True
            if b == LBRACE and pend == BANG:
                self._flush_text(self._pend_pos)
                self._opener = self._pend_pos
                self._mode = Mode.BANG_BRACE
                return True
            if b == TICK and pend == TICK:
                self._ticks += 1
                if self._ticks < 3:
                    self._pend = TICK
                    return True
                self._flush_text(self._pend_pos)
                self._emit(TokenKind.FREEFORM_OPEN, self._pend_pos, pos + 1)
                self._freeform_open = self._pend_pos
                self._mark = pos + 1
                self._ticks = 0
                self._mode = Mode.FREEFORM
                return True

        if b == NL or b == EOF:
            if b == EOF and self._braces:
                if self._text_mark is not None:
                    return self._fail(ErrorCode.UNCLOSED_TEXT, self._text_mark, pos)
                return self._fail(ErrorCode.UNCLOSED, self._braces[-1], pos)
            mark = self._text_mark
            self._flush_text(pos if mark is None else self._trim_cr(mark, pos))
            if b == NL:
                self._end_line(pos)
            return True

        if b == RBRACE and self._braces:
            self._flush_text(pos)
            self._close_brace(pos)
            return True

        if self._text_mark is None:
            self._text_mark = pos
        if b == PIPE or b == BANG or b == TICK:
            self._pend = b
            self._pend_pos = pos
            self._ticks = 1
        return True

    def _text_lead_byte(self, b: int, pos: int) -> bool:
        if b == SP or b == TAB:
            return True
        self._mode = Mode.TEXT
        return False

    def _embed_newline_byte(self, b: int, pos: int) -> bool:
        if b in BLANK or b == NL:
            return True
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._braces[-1], pos)
        self._mode = Mode.TEXT
        return False

    # ------------------------------------------------------------------
    # Element headers
    # ------------------------------------------------------------------

    def _open_header(self, start: int, embedded: bool) -> None:
        if embedded:
            self._braces.append(start)
        self._header = _HeaderBuilder(start=start, embedded=embedded)
        self._mode = Mode.HEADER

    def _element_bar_byte(self, b: int, pos: int) -> bool:
        if b == LBRACE:
            self._open_header(self._opener, embedded=True)
            return True
        self._open_header(self._opener, embedded=False)
        return False

    def _header_byte(self, b: int, pos: int) -> bool:
        header = self._header
        assert header is not None
        if header.phase == 0 and b in NAME_BYTES:
            self._mark = pos
            self._mode = Mode.HEADER_NAME
            return True
        if header.phase <= 1 and b == LBRACKET:
            header.id_open = pos
            self._mode = Mode.ID_WAIT
            return True
        if header.phase <= 2 and b == DOT:
            self._mode = Mode.CLASS_START
            return True
        if header.phase <= 2 and b in SUFFIX_BYTES:
            header.suffix = self._capture(pos, pos + 1)
            header.phase = 3
            return True
        if b in WORD_END or (b == RBRACE and header.embedded):
            self._emit(
                TokenKind.HEADER,
                header.start,
                pos,
                header=Header(
                    embedded=header.embedded,
                    name=header.name,
                    id=header.id,
                    classes=tuple(header.classes),
                    suffix=header.suffix,
                ),
                warnings=tuple(header.warnings),
            )
            self._header = None
            self._mode = Mode.ATTR_SPACE
            return False
        return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

    def _header_name_byte(self, b: int, pos: int) -> bool:
        if b in NAME_BYTES:
            return True
        assert self._header is not None
        self._header.name = self._capture(self._mark, pos)
        self._header.phase = 1
        self._mode = Mode.HEADER
        return False

    def _class_start_byte(self, b: int, pos: int) -> bool:
        if b in NAME_BYTES:
            self._mark = pos
            self._mode = Mode.CLASS_NAME
            return True
        if b == EOF:
            return self._fail(ErrorCode.UNEXPECTED_EOF, pos, pos)
        return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

    def _class_name_byte(self, b: int, pos: int) -> bool:
        if b in NAME_BYTES:
            return True
        assert self._header is not None
        self._header.classes.append(self._capture(self._mark, pos))
        self._header.phase = 2
        self._mode = Mode.HEADER
        return False

    def _id_wait_byte(self, b: int, pos: int) -> bool:
        assert self._header is not None
        if b in QUOTES:
            self._open_quote(b, pos, Mode.ID_CLOSE)
            return True
        if b == RBRACKET:
            self._header.phase = 2
            self._mode = Mode.HEADER
            return True
        if b == NL or b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._header.id_open, pos)
        self._mark = pos
        self._mode = Mode.ID_BARE
        return True

    def _id_bare_byte(self, b: int, pos: int) -> bool:
        assert self._header is not None
        if b == RBRACKET:
            self._header.id = self._value(self._mark, pos)
            self._header.phase = 2
            self._mode = Mode.HEADER
            return True
        if b == NL or b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._header.id_open, pos)
        return True

    def _id_close_byte(self, b: int, pos: int) -> bool:
        assert self._header is not None
        if b == RBRACKET:
            self._header.phase = 2
            self._mode = Mode.HEADER
            return True
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._header.id_open, pos)
        return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

    # ------------------------------------------------------------------
    # Attributes and values
    # ------------------------------------------------------------------

    def _attr_space_byte(self, b: int, pos: int) -> bool:
        if b in BLANK:
            return True
        if b == NL:
            self._end_line(pos)
            return True
        if b == COLON:
            self._opener = pos
            self._mode = Mode.ATTR_KEY_START
            return True
        if b == RBRACE and self._braces:
            self._close_brace(pos)
            return True
        if b == EOF:
            if self._braces:
                return self._fail(ErrorCode.UNCLOSED, self._braces[-1], pos)
            return True
        self._mode = Mode.TEXT
        return False

    def _attr_key_start_byte(self, b: int, pos: int) -> bool:
        if b == LBRACKET:
            self._mark = pos + 1
            self._mode = Mode.MERGE_ID
            return True
        if b in NAME_BYTES:
            self._mark = pos
            self._mode = Mode.ATTR_KEY
            return True
        if b == EOF:
            return self._fail(ErrorCode.UNEXPECTED_EOF, self._opener, pos)
        return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

    def _attr_key_byte(self, b: int, pos: int) -> bool:
        if b in NAME_BYTES:
            return True
        if b == SP or b == TAB:
            self._emit_key(pos)
            self._mode = Mode.ATTR_VALUE_WAIT
            return True
        if b == NL or b == CR or b == EOF or (b == RBRACE and self._braces):
            self._emit_key(pos)
            self._mode = Mode.ATTR_SPACE
            return False
        return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

    def _emit_key(self, pos: int) -> None:
        self._emit(
            TokenKind.ATTR_KEY,
            self._opener,
            pos,
            content=self._capture(self._mark, pos),
        )

    def _attr_value_wait_byte(self, b: int, pos: int) -> bool:
        if b == SP or b == TAB:
            return True
        if b in (NL, CR, COLON, EOF) or (b == RBRACE and self._braces):
            self._mode = Mode.ATTR_SPACE
            return False
        if b in QUOTES:
            self._open_quote(b, pos, Mode.ATTR_SPACE)
            return True
        if b == LBRACKET:
            self._open_array(pos)
            return True
        if b == RBRACKET:
            return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)
        self._mark = pos
        self._mode = Mode.BARE_ATTR
        return True

    def _bare_attr_byte(self, b: int, pos: int) -> bool:
        if b in WORD_END or (b == RBRACE and self._braces):
            value = self._value(self._mark, pos)
            self._emit(TokenKind.VALUE, self._mark, pos, value=value)
            self._mode = Mode.ATTR_SPACE
            return False
        return True

    def _open_array(self, pos: int) -> None:
        self._arrays.append(pos)
        self._emit(TokenKind.ARRAY_OPEN, pos, pos + 1)
        self._mode = Mode.ARRAY

    def _array_byte(self, b: int, pos: int) -> bool:
        if b in BLANK or b == NL:
            return True
        if b == LBRACKET:
            self._open_array(pos)
            return True
        if b == RBRACKET:
            self._arrays.pop()
            self._emit(TokenKind.ARRAY_CLOSE, pos, pos + 1)
            if not self._arrays:
                self._mode = Mode.ATTR_SPACE
            return True
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED_ARRAY, self._arrays[0], pos)
        if b in QUOTES:
            self._open_quote(b, pos, Mode.ARRAY)
            return True
        self._mark = pos
        self._mode = Mode.BARE_ARRAY
        return True

    def _bare_array_byte(self, b: int, pos: int) -> bool:
        if b in WORD_END or b == LBRACKET or b == RBRACKET:
            value = self._value(self._mark, pos)
            self._emit(TokenKind.VALUE, self._mark, pos, value=value)
            self._mode = Mode.ARRAY
            return False
        return True

    def _open_quote(self, quote: int, pos: int, ctx: Mode) -> None:
        self._quote = quote
        self._quote_open = pos
        self._quote_ctx = ctx
        self._mark = pos + 1
        self._escape = False
        self._quote_warnings = []
        self._mode = Mode.QUOTED

    def _quoted_byte(self, b: int, pos: int) -> bool:
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED_STRING_VALUE, self._quote_open, pos)
        if self._escape:
            self._escape = False
            if b not in VALID_ESCAPES:
                self._quote_warnings.append(
                    ParseWarning(
                        span=Span(pos - 1, pos + 1),
                        message="Unknown escape sequence",
                    )
                )
            return True
        if b == BACKSLASH:
            self._escape = True
            return True
        if b != self._quote:
            return True

        value = QuotedStringValue(
            span=Span(self._quote_open, pos + 1),
            content=self._capture(self._mark, pos),
        )
        warnings = tuple(self._quote_warnings)
        self._quote_warnings = []
        if self._quote_ctx is Mode.ID_CLOSE:
            assert self._header is not None
            self._header.id = value
            self._header.warnings.extend(warnings)
        else:
            self._emit(
                TokenKind.VALUE,
                self._quote_open,
                pos + 1,
                value=value,
                warnings=warnings,
            )
        self._mode = self._quote_ctx
        return True

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def _merge_id_byte(self, b: int, pos: int) -> bool:
        if b == RBRACKET:
            self._emit(
                TokenKind.ATTRIBUTE_MERGE,
                self._opener,
                pos + 1,
                content=self._capture(self._mark, pos),
            )
            self._mode = Mode.ATTR_SPACE
            return True
        if b == NL or b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._opener, pos)
        return True

    def _at_byte(self, b: int, pos: int) -> bool:
        if b == LBRACKET:
            self._mark = pos + 1
            self._mode = Mode.REF_ID
            return True
        self._text_mark = self._opener
        self._mode = Mode.TEXT
        return False

    def _ref_id_byte(self, b: int, pos: int) -> bool:
        if b == RBRACKET:
            self._emit(
                TokenKind.ID_REFERENCE,
                self._opener,
                pos + 1,
                content=self._capture(self._mark, pos),
            )
            self._mode = Mode.TEXT_LEAD
            return True
        if b == NL or b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._opener, pos)
        return True

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def _bang_byte(self, b: int, pos: int) -> bool:
        if b == LBRACE:
            self._mode = Mode.BANG_BRACE
            return True
        if b in NAME_BYTES:
            self._mark = pos
            self._colon = None
            self._mode = Mode.DIRECTIVE_NAME
            return True
        if b == EOF:
            return self._fail(ErrorCode.UNEXPECTED_EOF, self._opener, pos)
        return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

    def _directive_name_byte(self, b: int, pos: int) -> bool:
        if b in NAME_BYTES:
            return True
        if b == COLON and self._colon is None:
            self._colon = pos
            return True
        if b not in WORD_END:
            return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

        parts = self._split_name(self._mark, pos)
        if parts is None:
            if b == EOF:
                return self._fail(ErrorCode.UNEXPECTED_EOF, self._opener, pos)
            return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)
        name, namespace, is_raw = parts
        self._emit(
            TokenKind.DIRECTIVE,
            self._opener,
            pos,
            name=name,
            namespace=namespace,
            is_raw=is_raw,
        )
        if is_raw:
            self._raw_indent = self._line_indent
            self._raw_content_indent = None
            self._raw_blanks.clear()
            self._mode = Mode.RAW_REST
        else:
            self._mode = Mode.TEXT_LEAD
        return False

    def _raw_rest_byte(self, b: int, pos: int) -> bool:
        if b in BLANK or b == EOF:
            return True
        if b == NL:
            self._new_line(pos)
            return True
        self._mark = pos
        self._mode = Mode.RAW_LINE
        return False

    def _bang_brace_byte(self, b: int, pos: int) -> bool:
        if b == LBRACE:
            self._mark = pos + 1
            self._closing = False
            self._mode = Mode.INTERP
            return True
        if b in NAME_BYTES:
            self._mark = pos
            self._colon = None
            self._mode = Mode.INLINE_NAME
            return True
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._opener, pos)
        return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

    def _interp_byte(self, b: int, pos: int) -> bool:
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED_INTERPOLATION, self._opener, pos)
        if b != RBRACE:
            self._closing = False
            return True
        if not self._closing:
            self._closing = True
            return True
        self._closing = False
        self._emit(
            TokenKind.INTERPOLATION,
            self._opener,
            pos + 1,
            content=self._capture(self._mark, pos - 1),
        )
        self._mode = Mode.TEXT
        return True

    def _inline_name_byte(self, b: int, pos: int) -> bool:
        if b in NAME_BYTES:
            return True
        if b == COLON and self._colon is None:
            self._colon = pos
            return True
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._opener, pos)
        if b != SP and b != RBRACE:
            return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)

        parts = self._split_name(self._mark, pos)
        if parts is None:
            return self._fail(ErrorCode.UNEXPECTED_CHAR, pos, pos + 1)
        if b == SP:
            self._inline = parts
            self._mark = pos + 1
            self._depth = 1
            self._mode = Mode.INLINE_CONTENT
            return True
        self._emit_inline(parts, self._capture(pos, pos), pos + 1)
        return True

    def _inline_content_byte(self, b: int, pos: int) -> bool:
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED, self._opener, pos)
        if b == LBRACE:
            self._depth += 1
        elif b == RBRACE:
            self._depth -= 1
            if self._depth == 0:
                assert self._inline is not None
                self._emit_inline(self._inline, self._capture(self._mark, pos), pos + 1)
                self._inline = None
        return True

    def _emit_inline(
        self,
        parts: tuple[ChunkSlice, ChunkSlice | None, bool],
        content: ChunkSlice,
        end: int,
    ) -> None:
        name, namespace, is_raw = parts
        self._emit(
            TokenKind.INLINE_DIRECTIVE,
            self._opener,
            end,
            name=name,
            namespace=namespace,
            is_raw=is_raw,
            content=content,
        )
        self._mode = Mode.TEXT

    # ------------------------------------------------------------------
    # Freeform
    # ------------------------------------------------------------------

    def _freeform_byte(self, b: int, pos: int) -> bool:
        if b == EOF:
            return self._fail(ErrorCode.UNCLOSED_FREEFORM, self._freeform_open, pos)
        if b != TICK:
            self._ticks = 0
            return True
        self._ticks += 1
        if self._ticks < 3:
            return True

        end = pos - 2
        if end > self._mark:
            self._emit(
                TokenKind.RAW_CONTENT, self._mark, end, content=self._capture(self._mark, end)
            )
        self._emit(TokenKind.FREEFORM_CLOSE, end, pos + 1)
        self._ticks = 0
        self._mode = Mode.TEXT
        return True
