import dataclasses

import pytest

from udon.arena import ChunkArena
from udon.events import (
    END_FOR_START,
    EVENT_TYPES,
    START_KINDS,
    Error,
    ErrorCode,
    EventKind,
    ParseWarning,
    Span,
    Text,
)


class TestSpan:
    def test_length(self) -> None:
        assert len(Span(3, 10)) == 7

    def test_empty_span_is_valid(self) -> None:
        assert len(Span(5, 5)) == 0

    def test_end_before_start_raises(self) -> None:
        with pytest.raises(ValueError, match="end must be >= start"):
            Span(5, 4)

    def test_negative_start_raises(self) -> None:
        with pytest.raises(ValueError, match="start must be >= 0"):
            Span(-1, 2)


class TestEventTypes:
    def test_every_kind_has_a_class(self) -> None:
        """The kind table is closed over EventKind."""
        assert set(EVENT_TYPES) == set(EventKind)

    def test_class_kind_matches_table_key(self) -> None:
        for kind, cls in EVENT_TYPES.items():
            assert cls.kind is kind

    def test_every_event_carries_a_span_first(self) -> None:
        for cls in EVENT_TYPES.values():
            assert dataclasses.fields(cls)[0].name == "span"

    def test_every_start_has_an_end(self) -> None:
        assert set(END_FOR_START) == START_KINDS
        assert all(end.value.endswith("_end") for end in END_FOR_START.values())

    def test_events_are_immutable(self) -> None:
        arena = ChunkArena()
        arena.append(b"hi")
        text = Text(span=Span(0, 2), content=arena.slice(0, 0, 2))

        with pytest.raises(dataclasses.FrozenInstanceError):
            text.span = Span(0, 1)  # type: ignore[misc]


class TestDiagnostics:
    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_every_error_code_has_message(self, code: ErrorCode) -> None:
        error = Error(span=Span(0, 1), code=code)

        assert error.message
        assert error.message == code.message

    def test_error_code_wire_names(self) -> None:
        assert {code.value for code in ErrorCode} == {
            "unexpected_eof",
            "unexpected_char",
            "unclosed",
            "unclosed_string_value",
            "unclosed_array",
            "unclosed_freeform",
            "unclosed_text",
            "unclosed_interpolation",
            "no_tabs",
        }

    def test_warning_kind(self) -> None:
        warning = ParseWarning(span=Span(0, 2), message="Unknown escape sequence")

        assert warning.kind is EventKind.WARNING
