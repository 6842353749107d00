"""Mutable parsing state shared by the declaration grammar and the tokenizer.

A ``ParserState`` belongs to exactly one tokenizer session. It holds the
unconsumed input, the line/column of the first unconsumed character and the
tokenizer mode, and it is the single place where diagnostics get their
location from.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Type

from .config import DEFAULT_ERROR_CONTEXT_LENGTH
from .errors import HTMLParseError

INITIAL_LAST_TAG = "???"


class TokenizerMode(Enum):
    """Which characters can start markup in the current content."""

    NORMAL = auto()     # '<' and '&' are both significant
    RAW_TEXT = auto()   # only '</' is significant (script, style)


@dataclass(frozen=True)
class SourcePosition:
    """Location in the source text: 1-based line, 0-based column."""

    line: int
    column: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 0:
            raise ValueError("Column number must be >= 0")


def count_lines(text: str) -> int:
    """Return the number of newline characters in ``text``."""
    return text.count("\n")


class ParserState:
    """Buffer, position counters and mode of one tokenizing session."""

    def __init__(
        self,
        decl_other_chars: str = "",
        error_context_length: int = DEFAULT_ERROR_CONTEXT_LENGTH
    ) -> None:
        self._initial_decl_other_chars = decl_other_chars
        self.error_context_length = error_context_length
        self.reset()

    def reset(self) -> None:
        """Return to the state of a freshly created session."""
        self.buffer = ""
        self.line = 1
        self.column = 0
        self.mode = TokenizerMode.NORMAL
        self.last_tag = INITIAL_LAST_TAG
        self.start_tag_text: Optional[str] = None
        self.decl_other_chars = self._initial_decl_other_chars

    @property
    def position(self) -> SourcePosition:
        """Location of the first unconsumed buffer character."""
        return SourcePosition(self.line, self.column)

    def locate(self, begin: int, end: int) -> SourcePosition:
        """Compute where ``update_position(begin, end)`` would move to.

        The state is not modified; this is how diagnostics point past the
        last consumed position without corrupting the counters.
        """
        if begin >= end:
            return self.position
        span = self.buffer[begin:end]
        nlines = count_lines(span)
        if nlines:
            return SourcePosition(
                self.line + nlines, (end - begin) - (span.rindex("\n") + 1)
            )
        return SourcePosition(self.line, self.column + (end - begin))

    def update_position(self, begin: int, end: int) -> int:
        """Advance line/column over ``buffer[begin:end]`` and return ``end``."""
        if begin >= end:
            return end
        position = self.locate(begin, end)
        self.line = position.line
        self.column = position.column
        return end

    def error_context(self, pos: int) -> str:
        """Return a short snippet of the buffer starting at ``pos``."""
        return self.buffer[pos:pos + self.error_context_length]

    def error(
        self,
        message: str,
        begin: Optional[int] = None,
        end: Optional[int] = None,
        context_pos: Optional[int] = None,
        error_type: Type[HTMLParseError] = HTMLParseError
    ) -> HTMLParseError:
        """Build a fatal error located at the end of ``buffer[begin:end]``.

        Without a span the error points at the current position. The
        caller raises the returned exception.
        """
        if begin is not None and end is not None:
            position = self.locate(begin, end)
        else:
            position = self.position
        context = None
        if context_pos is not None:
            context = self.error_context(context_pos)
        return error_type(message, position.line, position.column, context)
