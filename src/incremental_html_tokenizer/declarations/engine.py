"""Declaration grammar for comments, ``<!...>`` declarations and marked sections.

Every parse method takes a buffer position and returns either the position
just past the construct it consumed or ``NEED_MORE_INPUT`` when the buffer ends
before the construct is closed. Input that can never become valid raises
``HTMLParseError`` immediately.

Grammar overview::

    <!-- comment -->               parse_comment
    <!DOCTYPE name ... [subset]>   parse_declaration -> DoctypeSubsetParser
    <!NAME ...>                    parse_declaration (unknown declaration)
    <![CDATA[ ... ]]>              parse_marked_section
    <![if ...]> ... <![endif]>     parse_marked_section
"""

import re
from typing import TYPE_CHECKING, Union

from incremental_html_tokenizer.shared import (
    NEED_MORE_INPUT,
    Incomplete,
    ParserState,
    ScannedName,
    ScanResult,
)

from .doctype import DoctypeSubsetParser

if TYPE_CHECKING:
    from incremental_html_tokenizer.tokenization.events import TokenSink

COMMENT_CLOSE = re.compile(r"--\s*>")
DECL_NAME = re.compile(r"\s*[a-zA-Z][-_.:a-zA-Z0-9]*\s*")
DECL_STRING_LITERAL = re.compile(r"('[^']*'|\"[^\"]*\")\s*")
MARKED_SECTION_CLOSE = re.compile(r"]\s*]\s*>")
MS_MARKED_SECTION_CLOSE = re.compile(r"]\s*>")

# Marked section keywords and the closer each family uses
SGML_SECTION_KEYWORDS = frozenset({"temp", "cdata", "ignore", "include", "rcdata"})
MS_SECTION_KEYWORDS = frozenset({"if", "else", "endif"})

# Declarations that may not open a subset with '['
SUBSET_UNSUPPORTED_DECLARATIONS = frozenset({"attlist", "linktype", "link", "element"})


class DeclarationEngine:
    """Parses SGML declarations out of the buffer held by a ``ParserState``."""

    def __init__(self, state: ParserState, sink: "TokenSink") -> None:
        self.state = state
        self.sink = sink
        self.doctype = DoctypeSubsetParser(self)

    def scan_name(self, pos: int, decl_start: int) -> Union[ScannedName, Incomplete]:
        """Scan a name token starting exactly at ``pos``.

        Leading and trailing whitespace belong to the match. A match that
        reaches the end of the buffer might continue in the next chunk, so it
        is reported as incomplete.

        Returns:
            ScannedName with the lowercased name and the position after the
            trailing whitespace, or NEED_MORE_INPUT
        """
        rawdata = self.state.buffer
        if pos == len(rawdata):
            return NEED_MORE_INPUT
        match = DECL_NAME.match(rawdata, pos)
        if not match:
            raise self.state.error(
                f"expected name token at {self.state.error_context(decl_start)!r}",
                decl_start, pos, context_pos=decl_start,
            )
        if match.end() == len(rawdata):
            return NEED_MORE_INPUT
        return ScannedName(match.group().strip().lower(), match.end())

    def scan_string_literal(self, pos: int) -> ScanResult:
        """Skip a quoted literal and the whitespace after it."""
        match = DECL_STRING_LITERAL.match(self.state.buffer, pos)
        if not match:
            return NEED_MORE_INPUT
        return match.end()

    def parse_comment(self, pos: int, report: bool = True) -> ScanResult:
        """Parse ``<!-- ... -->`` starting at ``pos``."""
        rawdata = self.state.buffer
        if not rawdata.startswith("<!--", pos):
            raise self.state.error(
                "unexpected call to parse_comment()", context_pos=pos
            )
        match = COMMENT_CLOSE.search(rawdata, pos + 4)
        if not match:
            return NEED_MORE_INPUT
        if report:
            self.sink.handle_comment(rawdata[pos + 4:match.start()])
        return match.end()

    def parse_declaration(self, pos: int) -> ScanResult:
        """Parse a ``<!...>`` markup declaration starting at ``pos``.

        DOCTYPE bodies go to ``handle_decl``; every other keyword goes to
        ``unknown_decl``.
        """
        rawdata = self.state.buffer
        n = len(rawdata)
        if not rawdata.startswith("<!", pos):
            raise self.state.error(
                "unexpected call to parse_declaration()", context_pos=pos
            )
        j = pos + 2
        if j >= n:
            return NEED_MORE_INPUT
        c = rawdata[j]
        if c == ">":
            # empty declaration <!>
            return j + 1
        if c == "-":
            if rawdata.startswith("<!--", pos):
                return self.parse_comment(pos)
            if j + 1 >= n:
                return NEED_MORE_INPUT
            raise self.state.error(
                "unexpected '-' char in declaration", pos, j, context_pos=pos
            )
        if c == "[":
            return self.parse_marked_section(pos)

        scanned = self.scan_name(j, pos)
        if scanned is NEED_MORE_INPUT:
            return NEED_MORE_INPUT
        decltype, j = scanned
        while j < n:
            c = rawdata[j]
            if c == ">":
                data = rawdata[pos + 2:j]
                if decltype == "doctype":
                    self.sink.handle_decl(data)
                else:
                    self.sink.unknown_decl(data)
                return j + 1
            if c in "\"'":
                end = self.scan_string_literal(j)
                if end is NEED_MORE_INPUT:
                    return NEED_MORE_INPUT
                j = end
            elif c.isascii() and c.isalpha():
                scanned = self.scan_name(j, pos)
                if scanned is NEED_MORE_INPUT:
                    return NEED_MORE_INPUT
                j = scanned.end
            elif c in self.state.decl_other_chars:
                j += 1
            elif c == "[":
                if decltype == "doctype":
                    end = self.doctype.parse_subset(j + 1, pos)
                    if end is NEED_MORE_INPUT:
                        return NEED_MORE_INPUT
                    j = end
                elif decltype in SUBSET_UNSUPPORTED_DECLARATIONS:
                    raise self.state.error(
                        f"unsupported '[' char in {decltype} declaration",
                        pos, j, context_pos=pos,
                    )
                else:
                    raise self.state.error(
                        "unexpected '[' char in declaration", pos, j, context_pos=pos
                    )
            else:
                raise self.state.error(
                    f"unexpected {c!r} char in declaration", pos, j, context_pos=pos
                )
        return NEED_MORE_INPUT

    def parse_marked_section(self, pos: int, report: bool = True) -> ScanResult:
        """Parse a marked section such as ``<![CDATA[ ... ]]>``."""
        rawdata = self.state.buffer
        if not rawdata.startswith("<![", pos):
            raise self.state.error(
                "unexpected call to parse_marked_section()", context_pos=pos
            )
        scanned = self.scan_name(pos + 3, pos)
        if scanned is NEED_MORE_INPUT:
            return NEED_MORE_INPUT
        keyword = scanned.name
        if keyword in SGML_SECTION_KEYWORDS:
            match = MARKED_SECTION_CLOSE.search(rawdata, pos + 3)
        elif keyword in MS_SECTION_KEYWORDS:
            match = MS_MARKED_SECTION_CLOSE.search(rawdata, pos + 3)
        else:
            raise self.state.error(
                f"unknown status keyword {rawdata[pos + 3:scanned.end]!r} in marked section",
                pos, scanned.end, context_pos=pos,
            )
        if not match:
            return NEED_MORE_INPUT
        if report:
            self.sink.unknown_decl(rawdata[pos + 3:match.start()])
        return match.end()
