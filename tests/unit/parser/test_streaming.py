from unittest.mock import MagicMock

import pytest

from udon.events import ErrorCode, EventKind, Text, to_records
from udon.parser import ParserConfig, ParseResult, ParserState, StreamingParser, parse_all


@pytest.fixture
def parser() -> StreamingParser:
    return StreamingParser()


class TestFeed:
    def test_returns_number_of_events_enqueued(self, parser: StreamingParser) -> None:
        """Only completed events are counted."""
        assert parser.feed(b"|a hello\n") == 2
        assert parser.pending == 2

    def test_accepts_str_as_utf8(self, parser: StreamingParser) -> None:
        parser.feed("|p café")
        parser.finish()

        text = [e for e in parser.drain() if isinstance(e, Text)][0]
        assert parser.arena.resolve_bytes(text.content) == b"caf\xc3\xa9"

    def test_accepts_bytearray_and_memoryview(self, parser: StreamingParser) -> None:
        parser.feed(bytearray(b"|a "))
        parser.feed(memoryview(b"hi"))
        parser.finish()

        assert [e.kind for e in parser.drain()] == [
            EventKind.ELEMENT_START,
            EventKind.TEXT,
            EventKind.ELEMENT_END,
        ]

    def test_rejects_other_types(self, parser: StreamingParser) -> None:
        with pytest.raises(TypeError, match="bytes-like"):
            parser.feed(42)  # type: ignore[arg-type]

    def test_feed_after_finish_raises(self, parser: StreamingParser) -> None:
        parser.finish()

        with pytest.raises(ValueError, match="finished"):
            parser.feed(b"|a")

    def test_feed_after_close_raises(self, parser: StreamingParser) -> None:
        parser.close()

        with pytest.raises(ValueError, match="closed"):
            parser.feed(b"|a")

    def test_input_after_fault_is_ignored(self, parser: StreamingParser) -> None:
        parser.feed(b"\t|a")

        assert parser.state is ParserState.FAULTED
        assert parser.feed(b"|b hello") == 0
        assert [e.kind for e in parser.drain()] == [EventKind.ERROR]

    def test_single_byte_feeds(self, parser: StreamingParser) -> None:
        source = b"|a :n 1 text\n  |b"
        for i in range(len(source)):
            parser.feed(source[i : i + 1])
        parser.finish()

        assert to_records(parser.drain(), parser.arena) == parse_all(source).to_records()


class TestFinish:
    def test_flushes_pending_token(self, parser: StreamingParser) -> None:
        parser.feed(b"|a hello")
        parser.drain()

        assert parser.finish() == 2
        assert [e.kind for e in parser.drain()] == [EventKind.TEXT, EventKind.ELEMENT_END]

    def test_is_idempotent(self, parser: StreamingParser) -> None:
        parser.feed(b"|a")
        parser.finish()

        assert parser.finish() == 0
        assert parser.state is ParserState.FINISHED

    def test_reports_unclosed_construct(self, parser: StreamingParser) -> None:
        parser.feed(b'|a :v "abc')
        assert parser.pending == 1

        assert parser.finish() == 1
        error = parser.drain()[-1]
        assert error.kind is EventKind.ERROR
        assert error.code is ErrorCode.UNCLOSED_STRING_VALUE

    def test_finish_after_close_raises(self, parser: StreamingParser) -> None:
        parser.close()

        with pytest.raises(ValueError, match="closed"):
            parser.finish()


class TestRead:
    def test_reads_in_document_order(self, parser: StreamingParser) -> None:
        parser.feed(b"|a\n|b")
        parser.finish()

        kinds = []
        while (event := parser.read()) is not None:
            kinds.append(event.kind)

        assert kinds == [
            EventKind.ELEMENT_START,
            EventKind.ELEMENT_END,
            EventKind.ELEMENT_START,
            EventKind.ELEMENT_END,
        ]

    def test_read_on_empty_queue_is_idempotent(self, parser: StreamingParser) -> None:
        """Repeated reads on an empty queue return None without faulting."""
        for _ in range(5):
            assert parser.read() is None
        assert parser.state is ParserState.IDLE

    def test_no_duplicate_delivery(self, parser: StreamingParser) -> None:
        parser.feed(b"|a")
        parser.finish()
        first = parser.read()
        parser.read()

        assert parser.read() is None
        assert parser.read() is None
        assert first is not None

    def test_iteration_drains_queue(self, parser: StreamingParser) -> None:
        parser.feed(b"|a")
        parser.finish()

        assert len(list(parser)) == 2
        assert parser.pending == 0

    def test_interleaved_feed_and_read(self, parser: StreamingParser) -> None:
        parser.feed(b"|a one\n")
        first = parser.drain()
        parser.feed(b"|b two\n")
        parser.finish()
        rest = parser.drain()

        assert len(first) + len(rest) == 6


class TestLifecycle:
    def test_state_transitions(self, parser: StreamingParser) -> None:
        assert parser.state is ParserState.IDLE
        parser.feed(b"|a")
        assert parser.state is ParserState.SCANNING
        parser.finish()
        assert parser.state is ParserState.FINISHED
        parser.close()
        assert parser.state is ParserState.CLOSED

    def test_close_releases_arena(self, parser: StreamingParser) -> None:
        parser.feed(b"|a hello")
        parser.finish()
        text = [e for e in parser.drain() if isinstance(e, Text)][0]

        parser.close()

        assert parser.arena.released
        assert parser.arena.resolve(text.content) is None
        assert parser.read() is None

    def test_context_manager_closes(self) -> None:
        with StreamingParser() as parser:
            parser.feed(b"|a")

        assert parser.state is ParserState.CLOSED

    def test_negative_capacity_hint_raises(self) -> None:
        with pytest.raises(ValueError, match="capacity_hint"):
            StreamingParser(-1)

    def test_capacity_hint_never_bounds_output(self) -> None:
        parser = StreamingParser(0)
        parser.feed(b"|a\n" * 50)
        parser.finish()

        assert parser.pending == 100

    def test_config_is_used_as_given(self) -> None:
        config = ParserConfig(capacity_hint=8, emit_warnings=False)
        parser = StreamingParser(config=config)

        assert parser.config is config

    def test_capacity_hint_builds_config(self) -> None:
        parser = StreamingParser(16)

        assert parser.config.capacity_hint == 16
        assert StreamingParser().config.capacity_hint == 64

    def test_capacity_hint_with_config_raises(self) -> None:
        with pytest.raises(ValueError, match="not both"):
            StreamingParser(8, config=ParserConfig(capacity_hint=8))

    def test_instances_do_not_share_state(self) -> None:
        first = StreamingParser()
        second = StreamingParser()
        first.feed(b"|a")

        assert second.pending == 0
        assert first.arena.id != second.arena.id


class TestConfig:
    def test_defaults(self) -> None:
        config = ParserConfig()

        assert config.capacity_hint == 64
        assert config.emit_warnings is True

    def test_is_frozen(self) -> None:
        config = ParserConfig()

        with pytest.raises(AttributeError):
            config.emit_warnings = False  # type: ignore[misc]

    def test_emit_warnings_false_drops_warnings(self) -> None:
        result = parse_all(b'|a :v "\\q"', config=ParserConfig(emit_warnings=False))

        assert EventKind.WARNING not in [e.kind for e in result]


class TestParseAll:
    def test_returns_sequence_with_arena(self) -> None:
        result = parse_all(b"|a hi")

        assert isinstance(result, ParseResult)
        assert len(result) == 3
        assert result[1].kind is EventKind.TEXT
        assert result.arena.resolve_bytes(result[1].content) == b"hi"

    def test_slicing_returns_events(self) -> None:
        result = parse_all(b"|a hi")

        assert [e.kind for e in result[:2]] == [EventKind.ELEMENT_START, EventKind.TEXT]

    def test_empty_input(self) -> None:
        assert len(parse_all(b"")) == 0

    def test_to_records(self) -> None:
        records = parse_all(b"|a hi").to_records()

        assert records[1] == {
            "type": "text",
            "span": {"start": 3, "end": 5},
            "content": b"hi",
        }


class TestMetrics:
    def test_feed_records_latency_and_bytes(self) -> None:
        metrics_hook = MagicMock()
        parser = StreamingParser(metrics_hook=metrics_hook)

        parser.feed(b"|a hi\n")

        call_args = metrics_hook.record_latency.call_args
        assert call_args[0][0] == "udon_parser_feed_duration"
        assert call_args[0][1] >= 0
        metrics_hook.increment.assert_any_call("udon_parser_bytes_fed", 6)
        metrics_hook.increment.assert_any_call("udon_parser_events_emitted", 2)

    def test_fault_is_counted_once_with_code(self) -> None:
        metrics_hook = MagicMock()
        parser = StreamingParser(metrics_hook=metrics_hook)

        parser.feed(b"\t")
        parser.feed(b"more")
        parser.finish()

        error_calls = [
            c
            for c in metrics_hook.increment.call_args_list
            if c[0][0] == "udon_parser_errors_total"
        ]
        assert len(error_calls) == 1
        assert error_calls[0][1]["labels"] == {"code": "no_tabs"}
