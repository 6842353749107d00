"""Incremental HTML Tokenizer.

An incremental SGML/HTML tokenizer: markup is fed in arbitrary chunks and
structural events (tags, data, comments, processing instructions, references
and declarations) are reported as soon as each construct is complete.

Progressive API Disclosure:
- Level 1: Simple functions - tokenize_string(), tokenize_chunks(), iter_events()
- Level 2: Incremental tokenizer - HTMLTokenizer with a TokenSink
"""

__version__ = "0.1.0"
__author__ = "Incremental HTML Tokenizer Team"

# Level 1: Simple functions
from .api import TokenizationResult, iter_events, tokenize_chunks, tokenize_string

# Configuration and errors
from .shared import (
    ConfigError,
    ConfigValidationError,
    HTMLParseError,
    TokenizerConfig,
    UnexpectedEOFError,
)

# Level 2: Incremental tokenizer and the consumer port
from .tokenization import (
    Attribute,
    CallbackSink,
    Event,
    EventCollector,
    EventType,
    HTMLTokenizer,
    TokenSink,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple tokenization functions
    "tokenize_string",
    "tokenize_chunks",
    "iter_events",
    "TokenizationResult",

    # Level 2: Incremental tokenizer
    "HTMLTokenizer",
    "TokenSink",
    "CallbackSink",
    "EventCollector",
    "Event",
    "EventType",
    "Attribute",

    # Configuration and errors
    "TokenizerConfig",
    "ConfigError",
    "ConfigValidationError",
    "HTMLParseError",
    "UnexpectedEOFError",
]
