import pytest
from pydantic import ValidationError

from udon.arena import ChunkArena
from udon.events import (
    Attribute,
    ElementStart,
    Error,
    ErrorCode,
    IntegerValue,
    Span,
    StringValue,
    Text,
    to_record,
    to_records,
)


@pytest.fixture
def arena() -> ChunkArena:
    arena = ChunkArena()
    arena.append(b"|div[main] :n 5 caf\xc3\xa9")
    return arena


class TestToRecord:
    def test_text_content_is_raw_bytes(self, arena: ChunkArena) -> None:
        """Content passes through undecoded."""
        text = Text(span=Span(16, 21), content=arena.slice(0, 16, 5))

        record = to_record(text, arena).model_dump()

        assert record == {
            "type": "text",
            "span": {"start": 16, "end": 21},
            "content": b"caf\xc3\xa9",
        }

    def test_nested_scalars_become_records(self, arena: ChunkArena) -> None:
        start = ElementStart(
            span=Span(0, 10),
            name=arena.slice(0, 1, 3),
            id=StringValue(span=Span(5, 9), content=arena.slice(0, 5, 4)),
        )

        record = to_record(start, arena).model_dump()

        assert record["type"] == "element_start"
        assert record["name"] == b"div"
        assert record["id"] == {
            "type": "string_value",
            "span": {"start": 5, "end": 9},
            "content": b"main",
        }
        assert record["classes"] == []
        assert record["suffix"] is None

    def test_attribute_with_typed_value(self, arena: ChunkArena) -> None:
        attribute = Attribute(
            span=Span(11, 15),
            key=arena.slice(0, 12, 1),
            value=IntegerValue(span=Span(14, 15), content=arena.slice(0, 14, 1), value=5),
        )

        record = to_record(attribute, arena).model_dump()

        assert record["key"] == b"n"
        assert record["value"]["type"] == "integer_value"
        assert record["value"]["value"] == 5
        assert record["is_array"] is False

    def test_error_carries_code_and_message(self, arena: ChunkArena) -> None:
        error = Error(span=Span(3, 4), code=ErrorCode.NO_TABS)

        record = to_record(error, arena).model_dump()

        assert record["code"] == "no_tabs"
        assert record["message"] == ErrorCode.NO_TABS.message

    def test_released_arena_raises(self, arena: ChunkArena) -> None:
        text = Text(span=Span(0, 1), content=arena.slice(0, 0, 1))
        arena.release()

        with pytest.raises(LookupError, match="does not resolve"):
            to_record(text, arena)

    def test_records_are_frozen(self, arena: ChunkArena) -> None:
        record = to_record(Error(span=Span(0, 0), code=ErrorCode.UNCLOSED), arena)

        with pytest.raises(ValidationError):
            record.type = "text"  # type: ignore[misc]


class TestToRecords:
    def test_preserves_order(self, arena: ChunkArena) -> None:
        events = [
            Text(span=Span(0, 1), content=arena.slice(0, 0, 1)),
            Error(span=Span(1, 1), code=ErrorCode.UNEXPECTED_EOF),
        ]

        records = to_records(events, arena)

        assert [r["type"] for r in records] == ["text", "error"]
