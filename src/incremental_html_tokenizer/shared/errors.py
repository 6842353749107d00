"""Exception types raised by the tokenizer and declaration grammar.

Incomplete input is never an exception; it is signalled by the
``NEED_MORE_INPUT`` sentinel. Only provably invalid input raises.
"""

from typing import Optional


class HTMLParseError(Exception):
    """Fatal syntax error with the location of the offending construct."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        context: Optional[str] = None
    ) -> None:
        """Initialize parse error.

        Args:
            message: Human readable description of the problem
            line: 1-based line of the offending location
            column: 0-based column of the offending location
            context: Short source snippet near the offending location
        """
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.context = context

    @property
    def position(self) -> Optional[dict]:
        """Location as a dict, the shape diagnostics entries use."""
        if self.line is None:
            return None
        return {"line": self.line, "column": self.column or 0}

    def __str__(self) -> str:
        result = self.message
        if self.line is not None:
            result = f"{result}, at line {self.line}, column {self.column}"
        return result


class UnexpectedEOFError(HTMLParseError):
    """Input ended inside a construct that was still waiting for more data."""
