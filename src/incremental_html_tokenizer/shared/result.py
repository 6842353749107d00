"""Result objects and diagnostic types for incremental HTML tokenization.

Sub-parsers report progress with ``ScanResult``: either the integer position
just past the construct they consumed, or ``NEED_MORE_INPUT`` when the buffer
ends before the construct can be proven complete.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, NamedTuple, Optional, Union


class Incomplete(Enum):
    """Marker for constructs that are valid so far but not yet closed."""

    NEED_MORE_INPUT = auto()


NEED_MORE_INPUT = Incomplete.NEED_MORE_INPUT

ScanResult = Union[int, Incomplete]


class ScannedName(NamedTuple):
    """Name token found by the declaration name scanner."""

    name: str
    end: int


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CRITICAL = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class PerformanceMetrics:
    """Performance metrics for tokenization operations."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    events_generated: int = 0
    chunks_fed: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def events_per_second(self) -> float:
        """Calculate events generated per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_generated * 1000.0) / self.processing_time_ms
