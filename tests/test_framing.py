"""Unit tests for the stream framing helpers."""
from hypothesis import given
from hypothesis import strategies as st

from pyask.llm.framing import (
    LineBuffer,
    data_payload,
    iter_data_events,
    iter_lines,
    object_field,
    object_items,
)


class TestLineBuffer:
    """Tests for LineBuffer."""

    def test_partial_line_is_held_back(self):
        buffer = LineBuffer()

        assert buffer.feed("data: {\"a\"") == []
        assert buffer.pending == "data: {\"a\""
        assert buffer.feed(": 1}\nnext") == ["data: {\"a\": 1}"]
        assert buffer.pending == "next"

    def test_several_lines_in_one_chunk(self):
        buffer = LineBuffer()

        assert buffer.feed("one\ntwo\r\nthree\n") == ["one", "two", "three"]
        assert buffer.pending == ""

    def test_flush_returns_unterminated_line(self):
        buffer = LineBuffer()
        buffer.feed("tail")

        assert buffer.flush() == ["tail"]
        assert buffer.flush() == []


class TestIterLines:
    """Tests for iter_lines."""

    def test_multibyte_character_split_across_chunks(self):
        encoded = "héllo\n".encode("utf-8")
        chunks = [encoded[:2], encoded[2:]]

        assert list(iter_lines(chunks)) == ["héllo"]

    def test_last_line_without_newline(self):
        assert list(iter_lines([b"a\nb"])) == ["a", "b"]

    @given(st.lists(st.text(alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\r\n")), max_size=8),
           st.data())
    def test_lines_independent_of_chunking(self, lines, data):
        """Property test: chunk boundaries never change the lines produced."""
        body = "".join(f"{line}\n" for line in lines).encode("utf-8")
        cuts = sorted(data.draw(st.lists(st.integers(0, len(body)), max_size=6)))
        chunks = [body[start:end] for start, end in zip([0, *cuts], [*cuts, len(body)])]

        assert list(iter_lines(chunks)) == lines


class TestDataEvents:
    """Tests for data: line decoding."""

    def test_data_payload(self):
        assert data_payload("data: {}") == "{}"
        assert data_payload("data:{}") == "{}"
        assert data_payload("event: ping") is None
        assert data_payload("") is None

    def test_malformed_line_is_skipped(self):
        lines = ['data: {"n": 1}', "data: {not json", 'data: {"n": 2}']

        assert [event["n"] for event in iter_data_events(lines)] == [1, 2]

    def test_non_object_payload_is_skipped(self):
        assert list(iter_data_events(["data: [1, 2]", "data: 3"])) == []

    def test_sentinel_ends_stream(self):
        lines = ['data: {"n": 1}', "data: [DONE]", 'data: {"n": 2}']

        assert list(iter_data_events(lines)) == [{"n": 1}]

    def test_without_sentinel_runs_to_end(self):
        lines = ['data: {"n": 1}', "data: [DONE]", 'data: {"n": 2}']

        events = list(iter_data_events(lines, sentinel=None))

        assert events == [{"n": 1}, {"n": 2}]

    def test_other_lines_are_ignored(self):
        lines = ["event: message_start", ": comment", "", 'data: {"n": 1}']

        assert list(iter_data_events(lines)) == [{"n": 1}]


class TestFieldAccess:
    """Tests for reading nested event fields of unknown shape."""

    def test_object_field(self):
        assert object_field({"delta": {"text": "a"}}, "delta") == {"text": "a"}
        assert object_field({"delta": "a"}, "delta") == {}
        assert object_field({}, "delta") == {}

    def test_object_items_keeps_only_objects(self):
        assert object_items([{"a": 1}, "x", 3, {"b": 2}]) == [{"a": 1}, {"b": 2}]

    def test_object_items_of_non_array(self):
        assert object_items({"a": 1}) == []
        assert object_items("abc") == []
        assert object_items(None) == []
