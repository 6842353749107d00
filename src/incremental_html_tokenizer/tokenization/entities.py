"""Character and entity reference decoding.

The tokenizer reports references in text undecoded; decoding is applied to
quoted attribute values and is available to consumers through these helpers.
"""

import re
from html.entities import name2codepoint
from typing import Optional

ATTRIBUTE_REFERENCE = re.compile(r"&(#?[xX]?(?:[0-9a-fA-F]+|\w{1,8}));")

# apos is not part of the HTML 4 table but is common in XHTML documents
NAMED_CODEPOINTS = dict(name2codepoint, apos=0x27)


def decode_charref(name: str) -> str:
    """Decode the body of a numeric reference: ``"65"`` or ``"x41"``.

    Raises:
        ValueError: if ``name`` is not a decimal or hex number, or does not
            denote a Unicode code point
    """
    if name[:1] in ("x", "X"):
        codepoint = int(name[1:], 16)
    else:
        codepoint = int(name, 10)
    return chr(codepoint)


def decode_entityref(name: str) -> Optional[str]:
    """Decode a named reference, or return None for unknown names."""
    codepoint = NAMED_CODEPOINTS.get(name)
    if codepoint is None:
        return None
    return chr(codepoint)


def unescape(value: str, decode_named: bool = True) -> str:
    """Resolve ``;``-terminated references inside an attribute value.

    References that cannot be decoded are left as written.
    """
    if "&" not in value:
        return value

    def replace(match: "re.Match[str]") -> str:
        body = match.group(1)
        if body.startswith("#"):
            try:
                return decode_charref(body[1:])
            except (ValueError, OverflowError):
                return match.group()
        if decode_named:
            decoded = decode_entityref(body)
            if decoded is not None:
                return decoded
        return match.group()

    return ATTRIBUTE_REFERENCE.sub(replace, value)
