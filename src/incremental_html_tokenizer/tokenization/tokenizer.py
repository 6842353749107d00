"""Incremental tag and reference tokenizer.

``HTMLTokenizer`` accepts markup in arbitrary chunks through ``feed`` and
reports structural events to a ``TokenSink`` as soon as each construct is
proven complete. Anything that might still continue in the next chunk stays
buffered; ``close`` declares the end of input, after which an unfinished
construct is an error.

Example:
    >>> collector = EventCollector()
    >>> tokenizer = HTMLTokenizer(collector)
    >>> tokenizer.feed('<p class="intro">Hi')
    >>> tokenizer.feed(' there</p>')
    >>> tokenizer.close()
"""

import logging
from typing import List, Optional, Pattern

from incremental_html_tokenizer.declarations import DeclarationEngine
from incremental_html_tokenizer.shared import (
    NEED_MORE_INPUT,
    HTMLParseError,
    ParserState,
    ScanResult,
    SourcePosition,
    TokenizerConfig,
    TokenizerMode,
    UnexpectedEOFError,
    get_logger,
)

from .entities import unescape
from .events import Attribute, TokenSink
from .patterns import (
    ATTRFIND,
    CHAR_REF,
    ENDTAGFIND,
    ENTITY_REF,
    INCOMPLETE_CHAR_REF,
    INCOMPLETE_REF,
    INTERESTING_NORMAL,
    INTERESTING_RAW_TEXT,
    LOCATE_START_TAG_END,
    STARTTAG_OPEN,
    TAGFIND,
)

EOF_IN_CONSTRUCT = "EOF in middle of construct"
EOF_IN_REFERENCE = "EOF in middle of entity or char ref"


class HTMLTokenizer:
    """Incremental SGML/HTML tokenizer delivering events to a sink.

    One tokenizer handles one stream at a time and is not safe to share
    between threads. Call ``reset`` to reuse it for another stream.
    """

    def __init__(
        self,
        sink: Optional[TokenSink] = None,
        config: Optional[TokenizerConfig] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            sink: Receiver of events; a no-op sink is used when omitted
            config: Tokenizer configuration, defaults to ``TokenizerConfig()``
        """
        self.config = config or TokenizerConfig()
        self.sink = sink if sink is not None else TokenSink()
        self.state = ParserState(
            decl_other_chars=self.config.decl_other_chars,
            error_context_length=self.config.error_context_length,
        )
        self.declarations = DeclarationEngine(self.state, self.sink)
        self.logger = get_logger(__name__, self.config.correlation_id, "html_tokenizer")

    def reset(self) -> None:
        """Discard buffered input and return to the initial state."""
        self.state.reset()
        self.logger.debug("Tokenizer reset")

    def feed(self, data: str) -> None:
        """Append ``data`` to the buffer and tokenize as far as possible."""
        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                "Feeding chunk",
                extra={
                    "chunk_length": len(data),
                    "buffered_length": len(self.state.buffer),
                }
            )
        self.state.buffer += data
        self.goahead(False)

    def close(self) -> None:
        """Declare the end of input and flush everything still buffered.

        Raises:
            UnexpectedEOFError: if the input ends inside a construct
            HTMLParseError: if the remaining input is malformed
        """
        self.logger.debug(
            "Closing tokenizer", extra={"buffered_length": len(self.state.buffer)}
        )
        self.goahead(True)

    # Accessors
    @property
    def line(self) -> int:
        """Line of the first unconsumed character (1-based)."""
        return self.state.line

    @property
    def column(self) -> int:
        """Column of the first unconsumed character (0-based)."""
        return self.state.column

    @property
    def position(self) -> SourcePosition:
        """Line and column of the first unconsumed character."""
        return self.state.position

    @property
    def mode(self) -> TokenizerMode:
        """Current tokenizer mode."""
        return self.state.mode

    @property
    def last_tag(self) -> str:
        """Lowercased name of the most recent start tag."""
        return self.state.last_tag

    def get_starttag_text(self) -> Optional[str]:
        """Return the verbatim source of the most recent start tag."""
        return self.state.start_tag_text

    def set_raw_text_mode(self) -> None:
        """Stop recognizing markup other than end tags."""
        if self.state.mode is not TokenizerMode.RAW_TEXT:
            self.logger.debug(
                "Entering raw text mode", extra={"tag": self.state.last_tag}
            )
        self.state.mode = TokenizerMode.RAW_TEXT

    def clear_raw_text_mode(self) -> None:
        """Return to normal tokenizing."""
        if self.state.mode is not TokenizerMode.NORMAL:
            self.logger.debug("Leaving raw text mode")
        self.state.mode = TokenizerMode.NORMAL

    def _interesting(self) -> Pattern[str]:
        if self.state.mode is TokenizerMode.RAW_TEXT:
            return INTERESTING_RAW_TEXT
        return INTERESTING_NORMAL

    def goahead(self, end: bool) -> None:
        """Run one scan pass over the buffer.

        Consumes every construct that is complete and keeps the rest for the
        next pass. With ``end`` set, the input is treated as finished.
        """
        state = self.state
        sink = self.sink
        rawdata = state.buffer
        n = len(rawdata)
        i = 0
        try:
            while i < n:
                match = self._interesting().search(rawdata, i)
                j = match.start() if match else n
                if i < j:
                    sink.handle_data(rawdata[i:j])
                i = state.update_position(i, j)
                if i == n:
                    break

                if rawdata[i] == "<":
                    if STARTTAG_OPEN.match(rawdata, i):
                        k = self.parse_starttag(i)
                    elif rawdata.startswith("<!--", i):
                        k = self.declarations.parse_comment(i)
                    elif rawdata.startswith("<!", i):
                        k = self.declarations.parse_declaration(i)
                    elif rawdata.startswith("</", i):
                        k = self.parse_endtag(i)
                    elif rawdata.startswith("<?", i):
                        k = self.parse_pi(i)
                    elif i + 1 < n:
                        sink.handle_data("<")
                        k = i + 1
                    else:
                        k = NEED_MORE_INPUT
                    if k is NEED_MORE_INPUT:
                        if end:
                            raise state.error(
                                EOF_IN_CONSTRUCT, context_pos=i,
                                error_type=UnexpectedEOFError,
                            )
                        break
                    i = state.update_position(i, k)

                elif rawdata.startswith("&#", i):
                    match = CHAR_REF.match(rawdata, i)
                    if match:
                        sink.handle_charref(match.group()[2:-1])
                        k = match.end()
                        if rawdata[k - 1] != ";":
                            k -= 1
                        i = state.update_position(i, k)
                        continue
                    if INCOMPLETE_CHAR_REF.match(rawdata, i):
                        if end:
                            raise state.error(
                                EOF_IN_REFERENCE, context_pos=i,
                                error_type=UnexpectedEOFError,
                            )
                        break
                    # not a numeric reference
                    sink.handle_data("&#")
                    i = state.update_position(i, i + 2)

                else:
                    match = ENTITY_REF.match(rawdata, i)
                    if match:
                        sink.handle_entityref(match.group(1))
                        k = match.end()
                        if rawdata[k - 1] != ";":
                            k -= 1
                        i = state.update_position(i, k)
                        continue
                    if INCOMPLETE_REF.match(rawdata, i):
                        # the name runs up to the end of the buffer
                        if end:
                            raise state.error(
                                EOF_IN_REFERENCE, context_pos=i,
                                error_type=UnexpectedEOFError,
                            )
                        break
                    if i + 1 < n:
                        sink.handle_data("&")
                        i = state.update_position(i, i + 1)
                    else:
                        break

            if end and i < n:
                sink.handle_data(rawdata[i:n])
                i = state.update_position(i, n)
        except HTMLParseError as e:
            self.logger.warning(
                "Fatal parse error",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "final_pass": end,
                }
            )
            raise
        finally:
            state.buffer = rawdata[i:]

    def parse_starttag(self, pos: int) -> ScanResult:
        """Parse a start tag beginning at ``pos``.

        Returns:
            Position after the tag, or NEED_MORE_INPUT
        """
        state = self.state
        state.start_tag_text = None
        endpos = self.check_for_whole_start_tag(pos)
        if endpos is NEED_MORE_INPUT:
            return NEED_MORE_INPUT
        rawdata = state.buffer
        state.start_tag_text = rawdata[pos:endpos]

        match = TAGFIND.match(rawdata, pos + 1)
        if not match:
            raise state.error("unexpected call to parse_starttag()", context_pos=pos)
        k = match.end()
        tag = rawdata[pos + 1:k].lower()
        state.last_tag = tag

        attrs: List[Attribute] = []
        after_unquoted = False
        while k < endpos:
            match = ATTRFIND.match(rawdata, k)
            if not match:
                break
            attrname, rest, attrvalue = match.group(1, 2, 3)
            if not rest:
                if after_unquoted and self.config.strict_unquoted_values:
                    raise state.error(
                        f"malformed start tag: unquoted attribute value "
                        f"followed by {attrname!r}",
                        pos, match.start(1), context_pos=pos,
                    )
                attrvalue = ""
                after_unquoted = False
            elif attrvalue[:1] in ("'", '"'):
                attrvalue = unescape(attrvalue[1:-1], self.config.decode_named_entities)
                after_unquoted = False
            else:
                after_unquoted = bool(attrvalue)
            attrs.append(Attribute(attrname.lower(), attrvalue))
            k = match.end()

        end = rawdata[k:endpos].strip()
        if end not in (">", "/>"):
            raise state.error(
                f"junk characters in start tag: {state.error_context(k)!r}",
                pos, k, context_pos=pos,
            )
        if end.endswith("/>"):
            # XHTML-style empty tag: <span attr="value" />
            self.handle_startendtag(tag, attrs)
        else:
            self.sink.handle_starttag(tag, attrs)
            if tag in self.config.raw_text_elements:
                self.set_raw_text_mode()
        return endpos

    def check_for_whole_start_tag(self, pos: int) -> ScanResult:
        """Find where the start tag beginning at ``pos`` ends.

        Returns:
            Position just past ``>`` or ``/>``, or NEED_MORE_INPUT when the
            tag can still be completed by more input
        """
        state = self.state
        rawdata = state.buffer
        n = len(rawdata)
        match = LOCATE_START_TAG_END.match(rawdata, pos)
        if not match:
            raise state.error(
                "unexpected call to check_for_whole_start_tag()", context_pos=pos
            )
        j = match.end()
        if j >= n:
            return NEED_MORE_INPUT
        next_char = rawdata[j]
        if next_char == ">":
            return j + 1
        if next_char == "/":
            if j + 1 >= n:
                return NEED_MORE_INPUT
            if rawdata[j + 1] == ">":
                return j + 2
            raise state.error("malformed empty start tag", pos, j + 1, context_pos=pos)
        if next_char == "=":
            # an attribute value that has not been completed yet
            k = j + 1
            while k < n and rawdata[k].isspace():
                k += 1
            if k >= n or rawdata[k] in "\"'":
                return NEED_MORE_INPUT
            raise state.error(
                f"malformed attribute value in start tag: {state.error_context(pos)!r}",
                pos, k, context_pos=pos,
            )
        if next_char.isalpha():
            raise state.error(
                f"attributes not separated by whitespace in start tag: "
                f"{state.error_context(pos)!r}",
                pos, j, context_pos=pos,
            )
        raise state.error(
            f"malformed start tag: {state.error_context(pos)!r}",
            pos, j, context_pos=pos,
        )

    def handle_startendtag(self, tag: str, attrs: List[Attribute]) -> None:
        """Report a self-closing tag as a start tag followed by its end tag."""
        self.sink.handle_starttag(tag, attrs)
        self.sink.handle_endtag(tag)

    def parse_endtag(self, pos: int) -> ScanResult:
        """Parse an end tag beginning at ``pos``.

        Any end tag leaves raw text mode, whatever element entered it.
        """
        state = self.state
        rawdata = state.buffer
        if not rawdata.startswith("</", pos):
            raise state.error("unexpected call to parse_endtag()", context_pos=pos)
        close = rawdata.find(">", pos + 1)
        if close < 0:
            return NEED_MORE_INPUT
        j = close + 1
        match = ENDTAGFIND.match(rawdata, pos)
        if not match:
            raise state.error(f"bad end tag: {rawdata[pos:j]!r}", context_pos=pos)
        self.sink.handle_endtag(match.group(1).lower())
        self.clear_raw_text_mode()
        return j

    def parse_pi(self, pos: int) -> ScanResult:
        """Parse a processing instruction ``<? ... >`` beginning at ``pos``."""
        state = self.state
        rawdata = state.buffer
        if not rawdata.startswith("<?", pos):
            raise state.error("unexpected call to parse_pi()", context_pos=pos)
        close = rawdata.find(">", pos + 2)
        if close < 0:
            return NEED_MORE_INPUT
        self.sink.handle_pi(rawdata[pos + 2:close])
        return close + 1
