"""Declaration grammar engine for incremental HTML tokenization.

This module parses the SGML side of the markup: comments, ``<!...>``
declarations, the DOCTYPE internal subset and marked sections.

Key Components:
    DeclarationEngine: Comment, declaration and marked section parsing
    DoctypeSubsetParser: ATTLIST, ELEMENT, ENTITY and NOTATION sub-grammars
"""

from .doctype import DoctypeSubsetParser
from .engine import DeclarationEngine

__all__ = [
    "DeclarationEngine",
    "DoctypeSubsetParser",
]
