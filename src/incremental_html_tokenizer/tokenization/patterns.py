"""Compiled matchers used by the tokenizer scan loop.

All token matchers are applied with ``pattern.match(buffer, pos)`` so that a
match always starts exactly at the cursor. Only the ``INTERESTING_*``
patterns are searched.
"""

import re

# Next character that can start markup, per tokenizer mode
INTERESTING_NORMAL = re.compile(r"[&<]")
INTERESTING_RAW_TEXT = re.compile(r"<(/|\Z)")

STARTTAG_OPEN = re.compile(r"<[a-zA-Z]")

# References need the character after them to prove the name has ended
CHAR_REF = re.compile(r"&#(?:[0-9]+|[xX][0-9a-fA-F]+)[^0-9a-fA-F]")
ENTITY_REF = re.compile(r"&([a-zA-Z][-.a-zA-Z0-9]*)[^-.a-zA-Z0-9]")
INCOMPLETE_REF = re.compile(r"&[a-zA-Z#]")
INCOMPLETE_CHAR_REF = re.compile(r"&#(?:[0-9]*|[xX][0-9a-fA-F]*)\Z")

TAGFIND = re.compile(r"[a-zA-Z][-.a-zA-Z0-9:_]*")
ATTRFIND = re.compile(
    r"\s*([a-zA-Z_][-.:a-zA-Z_0-9]*)"
    r"(\s*=\s*"
    r"('[^']*'|\"[^\"]*\"|[-a-zA-Z0-9./,:;+*%?!&$\(\)_#=~@]*))?"
)
ENDTAGFIND = re.compile(r"</\s*([a-zA-Z][-.a-zA-Z0-9:_]*)\s*>")

LOCATE_START_TAG_END = re.compile(r"""
  <[a-zA-Z][-.a-zA-Z0-9:_]*          # tag name
  (?:\s+                             # whitespace before attribute name
    (?:[a-zA-Z_][-.:a-zA-Z0-9_]*     # attribute name
      (?:\s*=\s*                     # value indicator
        (?:'[^']*'                   # LITA-enclosed value
          |\"[^\"]*\"                # LIT-enclosed value
          |[^'\">\s]+                # bare value
         )
       )?
     )
   )*
  \s*                                # trailing whitespace
""", re.VERBOSE)
