"""Shared utilities for incremental HTML tokenization.

This module provides the parser state, scan results, configuration objects,
error types and logging helpers used by both parsing layers.
"""

from .config import (
    BenchmarkConfig,
    ConfigError,
    ConfigValidationError,
    TokenizerConfig,
)
from .errors import HTMLParseError, UnexpectedEOFError
from .logging import CorrelationLogger, get_logger
from .result import (
    NEED_MORE_INPUT,
    DiagnosticEntry,
    DiagnosticSeverity,
    Incomplete,
    PerformanceMetrics,
    ScannedName,
    ScanResult,
)
from .state import ParserState, SourcePosition, TokenizerMode

__all__ = [
    "BenchmarkConfig",
    "ConfigError",
    "ConfigValidationError",
    "TokenizerConfig",
    "HTMLParseError",
    "UnexpectedEOFError",
    "CorrelationLogger",
    "get_logger",
    "NEED_MORE_INPUT",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "Incomplete",
    "PerformanceMetrics",
    "ScannedName",
    "ScanResult",
    "ParserState",
    "SourcePosition",
    "TokenizerMode",
]
