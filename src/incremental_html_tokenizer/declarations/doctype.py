"""Sub-grammars for the DOCTYPE internal subset.

The internal subset is the ``[...]`` block of a DOCTYPE declaration::

    <!DOCTYPE img [
        <!ELEMENT img EMPTY>
        <!ATTLIST img src ENTITY #REQUIRED>
        <!ENTITY logo SYSTEM "http://www.example.com/logo.gif" NDATA gif>
        <!NOTATION gif PUBLIC "gif viewer">
        %entity_name;
    ]>

Only the boundaries of each sub-declaration are checked. Content models are
skipped verbatim and nothing is validated against the declared DTD.
"""

from typing import TYPE_CHECKING

from incremental_html_tokenizer.shared import NEED_MORE_INPUT, ScanResult

if TYPE_CHECKING:
    from .engine import DeclarationEngine


class DoctypeSubsetParser:
    """Parses the internal subset on behalf of a ``DeclarationEngine``."""

    def __init__(self, engine: "DeclarationEngine") -> None:
        self.engine = engine
        self.state = engine.state
        self._declarations = {
            "attlist": self.parse_attlist,
            "element": self.parse_element,
            "entity": self.parse_entity,
            "notation": self.parse_notation,
        }

    def _skip_whitespace(self, pos: int) -> int:
        rawdata = self.state.buffer
        while pos < len(rawdata) and rawdata[pos].isspace():
            pos += 1
        return pos

    def _skip_group(self, pos: int) -> ScanResult:
        """Skip a parenthesized group ``(...)`` and the whitespace after it."""
        close = self.state.buffer.find(")", pos)
        if close < 0:
            return NEED_MORE_INPUT
        return self._skip_whitespace(close + 1)

    def parse_subset(self, pos: int, decl_start: int) -> ScanResult:
        """Parse the internal subset starting just after its ``[``.

        Returns:
            Position of the ``>`` that closes the whole DOCTYPE declaration,
            or NEED_MORE_INPUT
        """
        rawdata = self.state.buffer
        n = len(rawdata)
        j = pos
        while j < n:
            c = rawdata[j]
            if c == "<":
                if j + 2 >= n:
                    return NEED_MORE_INPUT
                opener = rawdata[j:j + 2]
                if opener != "<!":
                    raise self.state.error(
                        f"unexpected char in internal subset (in {opener!r})",
                        decl_start, j + 1, context_pos=decl_start,
                    )
                if rawdata[j + 2] == "-":
                    if j + 4 > n:
                        return NEED_MORE_INPUT
                    if rawdata.startswith("<!--", j):
                        j = self.engine.parse_comment(j, report=False)
                        if j is NEED_MORE_INPUT:
                            return NEED_MORE_INPUT
                        continue
                scanned = self.engine.scan_name(j + 2, decl_start)
                if scanned is NEED_MORE_INPUT:
                    return NEED_MORE_INPUT
                parse = self._declarations.get(scanned.name)
                if parse is None:
                    raise self.state.error(
                        f"unknown declaration {scanned.name!r} in internal subset",
                        decl_start, j + 2, context_pos=decl_start,
                    )
                j = parse(scanned.end, decl_start)
                if j is NEED_MORE_INPUT:
                    return NEED_MORE_INPUT
            elif c == "%":
                # parameter entity reference
                if j + 1 == n:
                    return NEED_MORE_INPUT
                scanned = self.engine.scan_name(j + 1, decl_start)
                if scanned is NEED_MORE_INPUT:
                    return NEED_MORE_INPUT
                j = scanned.end
                if rawdata[j] == ";":
                    j += 1
            elif c == "]":
                j = self._skip_whitespace(j + 1)
                if j >= n:
                    return NEED_MORE_INPUT
                if rawdata[j] == ">":
                    return j
                raise self.state.error(
                    "unexpected char after internal subset",
                    decl_start, j, context_pos=decl_start,
                )
            elif c.isspace():
                j += 1
            else:
                raise self.state.error(
                    f"unexpected char {c!r} in internal subset",
                    decl_start, j, context_pos=decl_start,
                )
        return NEED_MORE_INPUT

    def parse_attlist(self, pos: int, decl_start: int) -> ScanResult:
        """Parse the body of ``<!ATTLIST element attr type [#constraint] [default]>``.

        ``pos`` points just past the ATTLIST keyword.
        """
        rawdata = self.state.buffer
        n = len(rawdata)
        scanned = self.engine.scan_name(pos, decl_start)
        if scanned is NEED_MORE_INPUT:
            return NEED_MORE_INPUT
        j = scanned.end
        if rawdata[j] == ">":
            return j + 1
        while True:
            # attribute name
            scanned = self.engine.scan_name(j, decl_start)
            if scanned is NEED_MORE_INPUT:
                return NEED_MORE_INPUT
            j = scanned.end
            # attribute type: enumeration or keyword such as CDATA
            if rawdata[j] == "(":
                j = self._skip_group(j)
            else:
                scanned = self.engine.scan_name(j, decl_start)
                j = NEED_MORE_INPUT if scanned is NEED_MORE_INPUT else scanned.end
            if j is NEED_MORE_INPUT or j >= n:
                return NEED_MORE_INPUT
            c = rawdata[j]
            if c == "(":
                # NOTATION enumeration
                j = self._skip_group(j)
                if j is NEED_MORE_INPUT or j >= n:
                    return NEED_MORE_INPUT
                c = rawdata[j]
            if c == "#":
                # #REQUIRED, #IMPLIED or #FIXED
                if j == n - 1:
                    return NEED_MORE_INPUT
                scanned = self.engine.scan_name(j + 1, decl_start)
                if scanned is NEED_MORE_INPUT:
                    return NEED_MORE_INPUT
                j = scanned.end
                c = rawdata[j]
            if c in "\"'":
                # default value
                j = self.engine.scan_string_literal(j)
                if j is NEED_MORE_INPUT or j >= n:
                    return NEED_MORE_INPUT
                c = rawdata[j]
            if c == ">":
                return j + 1

    def parse_element(self, pos: int, decl_start: int) -> ScanResult:
        """Parse the body of ``<!ELEMENT name content-model>``."""
        scanned = self.engine.scan_name(pos, decl_start)
        if scanned is NEED_MORE_INPUT:
            return NEED_MORE_INPUT
        close = self.state.buffer.find(">", scanned.end)
        if close < 0:
            return NEED_MORE_INPUT
        return close + 1

    def parse_entity(self, pos: int, decl_start: int) -> ScanResult:
        """Parse the body of ``<!ENTITY [%] name (literal | SYSTEM ... | PUBLIC ...)>``."""
        rawdata = self.state.buffer
        n = len(rawdata)
        j = pos
        if rawdata[j] == "%":
            j = self._skip_whitespace(j + 1)
            if j >= n:
                return NEED_MORE_INPUT
        scanned = self.engine.scan_name(j, decl_start)
        if scanned is NEED_MORE_INPUT:
            return NEED_MORE_INPUT
        return self._parse_external_id(scanned.end, decl_start)

    def parse_notation(self, pos: int, decl_start: int) -> ScanResult:
        """Parse the body of ``<!NOTATION name (SYSTEM "uri" | PUBLIC "id" ["uri"])>``."""
        scanned = self.engine.scan_name(pos, decl_start)
        if scanned is NEED_MORE_INPUT:
            return NEED_MORE_INPUT
        return self._parse_external_id(scanned.end, decl_start)

    def _parse_external_id(self, pos: int, decl_start: int) -> ScanResult:
        """Skip literals and keywords (SYSTEM, PUBLIC, NDATA ...) up to ``>``."""
        rawdata = self.state.buffer
        j = pos
        while j < len(rawdata):
            c = rawdata[j]
            if c == ">":
                return j + 1
            if c in "\"'":
                j = self.engine.scan_string_literal(j)
                if j is NEED_MORE_INPUT:
                    return NEED_MORE_INPUT
            else:
                scanned = self.engine.scan_name(j, decl_start)
                if scanned is NEED_MORE_INPUT:
                    return NEED_MORE_INPUT
                j = scanned.end
        return NEED_MORE_INPUT
