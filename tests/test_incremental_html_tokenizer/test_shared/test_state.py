"""Tests for parser state and position tracking."""

import pytest

from incremental_html_tokenizer.shared import (
    HTMLParseError,
    ParserState,
    SourcePosition,
    TokenizerMode,
    UnexpectedEOFError,
)
from incremental_html_tokenizer.shared.state import count_lines

SAMPLE_DOCUMENT = (
    "<html>\n"
    "<head>\n"
    "<title>Test HTML piece</title>\n"
    "</head>\n"
    "<body>\n"
    "</body>\n"
    "</html>\n"
)


class TestSourcePosition:
    """Tests for SourcePosition."""

    def test_position_creation(self):
        """Test SourcePosition creation with valid values."""
        position = SourcePosition(line=3, column=0)
        assert position.line == 3
        assert position.column == 0

    def test_position_validation(self):
        """Test SourcePosition validation for invalid values."""
        with pytest.raises(ValueError, match="Line number must be >= 1"):
            SourcePosition(line=0, column=0)

        with pytest.raises(ValueError, match="Column number must be >= 0"):
            SourcePosition(line=1, column=-1)


class TestCountLines:
    """Tests for newline counting."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("", 0),
            ("abc", 0),
            ("abc\n", 1),
            ("abc\ndef", 1),
            ("abc\ndef\n", 2),
            (SAMPLE_DOCUMENT, 7),
        ],
    )
    def test_count_lines(self, text, expected):
        """Test counting newline characters."""
        assert count_lines(text) == expected


class TestParserState:
    """Tests for ParserState."""

    def test_initial_state(self):
        """Test a fresh state starts at line 1, column 0."""
        state = ParserState()

        assert state.buffer == ""
        assert state.line == 1
        assert state.column == 0
        assert state.mode is TokenizerMode.NORMAL
        assert state.last_tag == "???"
        assert state.start_tag_text is None
        assert state.decl_other_chars == ""
        assert state.position == SourcePosition(1, 0)

    def test_update_position_across_lines(self):
        """Test a span containing newlines moves to the next lines."""
        state = ParserState()
        state.buffer = SAMPLE_DOCUMENT

        assert state.update_position(3, len(SAMPLE_DOCUMENT)) == len(SAMPLE_DOCUMENT)
        assert state.line == 8
        assert state.column == 0

    def test_update_position_within_line(self):
        """Test a span without newlines only advances the column."""
        state = ParserState()
        state.buffer = SAMPLE_DOCUMENT

        assert state.update_position(3, 5) == 5
        assert state.line == 1
        assert state.column == 2

    def test_update_position_empty_span(self):
        """Test an empty or inverted span is a no-op."""
        state = ParserState()
        state.buffer = SAMPLE_DOCUMENT

        assert state.update_position(7, 5) == 5
        assert state.update_position(5, 5) == 5
        assert state.position == SourcePosition(1, 0)

    def test_update_position_column_after_last_newline(self):
        """Test the column counts characters after the last newline."""
        state = ParserState()
        state.buffer = "ab\ncd\nefg<p>"

        state.update_position(0, 9)
        assert state.position == SourcePosition(3, 3)

    def test_update_position_accumulates(self):
        """Test consecutive spans add up."""
        state = ParserState()
        state.buffer = "abc\ndef"

        state.update_position(0, 2)
        state.update_position(2, 5)
        state.update_position(5, 7)
        assert state.position == SourcePosition(2, 3)

    def test_locate_does_not_mutate(self):
        """Test locate computes a position without moving the counters."""
        state = ParserState()
        state.buffer = "a\nbc"

        assert state.locate(0, 4) == SourcePosition(2, 2)
        assert state.position == SourcePosition(1, 0)

    def test_error_context(self):
        """Test the diagnostic snippet is limited in length."""
        state = ParserState(error_context_length=5)
        state.buffer = "<body background='green'>"

        assert state.error_context(0) == "<body"
        assert state.error_context(22) == "n'>"

    def test_error_located_at_span_end(self):
        """Test errors point at the end of the given span."""
        state = ParserState()
        state.buffer = "<a\nb=>"

        error = state.error("bad attribute", 0, 5, context_pos=0)

        assert isinstance(error, HTMLParseError)
        assert error.message == "bad attribute"
        assert (error.line, error.column) == (2, 2)
        assert error.context == "<a\nb=>"
        assert state.position == SourcePosition(1, 0)

    def test_error_without_span(self):
        """Test errors without a span point at the current position."""
        state = ParserState()
        state.buffer = "x\n<!--"
        state.update_position(0, 2)

        error = state.error("EOF in middle of construct", error_type=UnexpectedEOFError)

        assert isinstance(error, UnexpectedEOFError)
        assert (error.line, error.column) == (2, 0)
        assert error.context is None

    def test_reset(self):
        """Test reset restores the initial values."""
        state = ParserState(decl_other_chars="%")
        state.buffer = "abc\n"
        state.update_position(0, 4)
        state.mode = TokenizerMode.RAW_TEXT
        state.last_tag = "script"
        state.start_tag_text = "<script>"
        state.decl_other_chars = "%;"

        state.reset()

        assert state.buffer == ""
        assert state.position == SourcePosition(1, 0)
        assert state.mode is TokenizerMode.NORMAL
        assert state.last_tag == "???"
        assert state.start_tag_text is None
        assert state.decl_other_chars == "%"
