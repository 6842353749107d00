"""Configuration classes for incremental HTML tokenization.

This module provides immutable configuration objects for the tokenizer and the
benchmark suite, with validation, JSON round-tripping and named presets.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

DEFAULT_RAW_TEXT_ELEMENTS = frozenset({"script", "style"})
DEFAULT_ERROR_CONTEXT_LENGTH = 20

# Characters that already have a meaning inside a markup declaration
RESERVED_DECL_CHARS = frozenset({">", "[", '"', "'"})


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class TokenizerConfig:
    """Configuration for the tokenizer and its declaration grammar.

    Instances are immutable and can be shared between tokenizers; each
    tokenizer still owns its own parsing state.
    """

    raw_text_elements: FrozenSet[str] = DEFAULT_RAW_TEXT_ELEMENTS
    decl_other_chars: str = ""
    error_context_length: int = DEFAULT_ERROR_CONTEXT_LENGTH
    decode_named_entities: bool = True
    strict_unquoted_values: bool = True

    correlation_id: Optional[str] = None
    enable_diagnostics: bool = True

    def __post_init__(self) -> None:
        """Validate and normalize tokenizer configuration."""
        if isinstance(self.raw_text_elements, str):
            raise ConfigValidationError(
                "raw_text_elements must be a collection of element names",
                field_name="raw_text_elements",
                suggestions=["Wrap a single name in a set: {'script'}"],
            )
        names = frozenset(name.strip().lower() for name in self.raw_text_elements)
        if "" in names:
            raise ConfigValidationError(
                "raw_text_elements cannot contain empty names",
                field_name="raw_text_elements",
            )
        object.__setattr__(self, "raw_text_elements", names)

        reserved = RESERVED_DECL_CHARS.intersection(self.decl_other_chars)
        if reserved:
            raise ConfigValidationError(
                f"decl_other_chars cannot contain {''.join(sorted(reserved))!r}",
                field_name="decl_other_chars",
            )
        if self.error_context_length <= 0:
            raise ConfigValidationError(
                "error_context_length must be > 0",
                field_name="error_context_length",
            )

    def override(self, **kwargs: Any) -> "TokenizerConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = TokenizerConfig().override(strict_unquoted_values=False)
        """
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if isinstance(value, frozenset):
                value = sorted(value)
            result[config_field.name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenizerConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos do not silently fall back to
        defaults.
        """
        known = {config_field.name for config_field in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {', '.join(sorted(unknown))}",
                suggestions=sorted(known),
            )
        values = dict(data)
        if "raw_text_elements" in values:
            values["raw_text_elements"] = frozenset(values["raw_text_elements"])
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "TokenizerConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def html(cls) -> "TokenizerConfig":
        """Default preset: script/style are raw text, named entities decoded."""
        return cls()

    @classmethod
    def lenient(cls) -> "TokenizerConfig":
        """Accept bare words after unquoted attribute values as valueless attributes."""
        return cls(strict_unquoted_values=False)

    @classmethod
    def sgml(cls) -> "TokenizerConfig":
        """Plain SGML preset: no raw-text elements, only numeric references decoded."""
        return cls(raw_text_elements=frozenset(), decode_named_entities=False)


@dataclass
class BenchmarkConfig:
    """Configuration for tokenizer benchmarking."""

    warmup_runs: int = 2
    benchmark_runs: int = 5
    chunk_sizes: Tuple[int, ...] = (64, 1024)
    include_reference_parser: bool = True
    correlation_id: Optional[str] = None
    test_cases: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate benchmark configuration."""
        if self.warmup_runs < 0:
            raise ConfigValidationError("warmup_runs must be >= 0", field_name="warmup_runs")
        if self.benchmark_runs <= 0:
            raise ConfigValidationError(
                "benchmark_runs must be > 0", field_name="benchmark_runs"
            )
        if not self.chunk_sizes:
            raise ConfigValidationError(
                "chunk_sizes cannot be empty", field_name="chunk_sizes"
            )
        if any(size <= 0 for size in self.chunk_sizes):
            raise ConfigValidationError(
                "chunk_sizes must all be > 0", field_name="chunk_sizes"
            )
