"""Document-level tokenization API."""

from .parser import TokenizationResult, iter_events, tokenize_chunks, tokenize_string

__all__ = [
    "TokenizationResult",
    "iter_events",
    "tokenize_chunks",
    "tokenize_string",
]
