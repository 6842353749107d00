"""Convenience API for tokenizing complete documents and chunk streams.

The functions here wrap ``HTMLTokenizer`` for callers that want a list of
events rather than a sink. ``tokenize_string`` and ``tokenize_chunks`` never
raise for malformed markup: a fatal parse error is reported through the
returned ``TokenizationResult``. ``iter_events`` streams events lazily and lets
parse errors propagate.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from incremental_html_tokenizer.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    HTMLParseError,
    PerformanceMetrics,
    TokenizerConfig,
    get_logger,
)
from incremental_html_tokenizer.tokenization import (
    Event,
    EventCollector,
    EventType,
    HTMLTokenizer,
    coalesce_data,
)

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion


@dataclass
class TokenizationResult:
    """Events produced for one document, with diagnostics and metrics.

    When ``success`` is False, ``events`` holds everything delivered before
    the fatal error and ``error`` holds the error itself.
    """

    events: List[Event] = field(default_factory=list)
    success: bool = True
    error: Optional[HTMLParseError] = None

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def event_count(self) -> int:
        """Get number of events produced."""
        return len(self.events)

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def coalesced_events(self) -> List[Event]:
        """Events with adjacent DATA events merged."""
        return coalesce_data(self.events)

    def get_events_by_type(self, event_type: EventType) -> List[Event]:
        """Get all events of a specific type."""
        return [event for event in self.events if event.type == event_type]

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        entry = DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        )
        self.diagnostics.append(entry)

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get tokenization statistics."""
        counts: Dict[str, int] = {}
        for event in self.events:
            counts[event.type.name] = counts.get(event.type.name, 0) + 1
        return {
            "success": self.success,
            "event_count": self.event_count,
            "event_counts": counts,
            "error": str(self.error) if self.error else None,
            "processing_time_ms": self.performance.processing_time_ms,
            "characters_processed": self.performance.characters_processed,
            "chunks_fed": self.performance.chunks_fed,
            "diagnostics_count": len(self.diagnostics),
        }


def _resolve_config(
    config: Optional[TokenizerConfig],
    correlation_id: Optional[str]
) -> TokenizerConfig:
    config = config or TokenizerConfig()
    if correlation_id is not None and correlation_id != config.correlation_id:
        config = config.override(correlation_id=correlation_id)
    return config


def tokenize_chunks(
    chunks: Iterable[str],
    config: Optional[TokenizerConfig] = None,
    correlation_id: Optional[str] = None
) -> TokenizationResult:
    """Tokenize a document delivered as a sequence of text chunks.

    Every chunk is fed in order and the stream is closed afterwards. The
    events are the same whatever the chunking, up to how character data is
    split between adjacent DATA events.

    Args:
        chunks: Decoded text pieces of one document
        config: Tokenizer configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        TokenizationResult with events, diagnostics and performance metrics

    Examples:
        >>> result = tokenize_chunks(['<p cla', 'ss="x">hi</p>'])
        >>> [e.name for e in result.events if e.name]
        ['p', 'p']
    """
    config = _resolve_config(config, correlation_id)
    logger = get_logger(__name__, config.correlation_id, "tokenize_chunks")
    result = TokenizationResult(correlation_id=config.correlation_id)
    collector = EventCollector()
    tokenizer = HTMLTokenizer(collector, config)

    logger.info("Starting chunked tokenization")
    start_time = time.perf_counter()
    characters = 0
    chunks_fed = 0

    try:
        for chunk in chunks:
            characters += len(chunk)
            chunks_fed += 1
            tokenizer.feed(chunk)
        tokenizer.close()
    except HTMLParseError as e:
        result.success = False
        result.error = e
        result.add_diagnostic(
            DiagnosticSeverity.ERROR,
            str(e),
            "html_tokenizer",
            position=e.position,
            details={"error_type": type(e).__name__, "context": e.context}
        )

    result.events = collector.events
    result.performance = PerformanceMetrics(
        processing_time_ms=(time.perf_counter() - start_time) * MS_PER_SECOND,
        characters_processed=characters,
        events_generated=len(result.events),
        chunks_fed=chunks_fed,
    )

    if result.success and config.enable_diagnostics:
        result.add_diagnostic(
            DiagnosticSeverity.INFO,
            f"Tokenized {characters} characters into {len(result.events)} events",
            "api_parser",
            details={"chunks_fed": chunks_fed}
        )

    logger.info(
        "Chunked tokenization completed",
        extra={
            "success": result.success,
            "event_count": result.event_count,
            "chunks_fed": chunks_fed,
            "processing_time_ms": result.performance.processing_time_ms
        }
    )
    return result


def tokenize_string(
    text: str,
    config: Optional[TokenizerConfig] = None,
    correlation_id: Optional[str] = None
) -> TokenizationResult:
    """Tokenize a complete document held in memory.

    Args:
        text: Decoded document text
        config: Tokenizer configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        TokenizationResult with events, diagnostics and performance metrics

    Examples:
        >>> result = tokenize_string('<BODY Background="green">')
        >>> result.events[0].attrs
        (Attribute(name='background', value='green'),)

        Malformed markup:
        >>> result = tokenize_string('<!--never closed')
        >>> result.success
        False
    """
    logger = get_logger(__name__, correlation_id, "tokenize_string")
    logger.info(
        "Starting string tokenization",
        extra={
            "content_length": len(text),
            "preview": (
                text[:PREVIEW_LENGTH] + "..."
                if len(text) > PREVIEW_LENGTH else text
            )
        }
    )
    return tokenize_chunks([text], config, correlation_id)


def iter_events(
    chunks: Iterable[str],
    config: Optional[TokenizerConfig] = None
) -> Iterator[Event]:
    """Yield events as soon as each fed chunk makes them available.

    Unlike ``tokenize_chunks`` this does not catch parse errors: an
    ``HTMLParseError`` is raised from the iterator once the events before it
    have been yielded.

    Example:
        >>> for event in iter_events(open_chunks()):
        ...     handle(event)
    """
    collector = EventCollector()
    tokenizer = HTMLTokenizer(collector, config)
    for chunk in chunks:
        yield from _drain_after(collector, tokenizer.feed, chunk)
    yield from _drain_after(collector, tokenizer.close)


def _drain_after(
    collector: EventCollector,
    step: Callable[..., None],
    *args: Any
) -> Iterator[Event]:
    """Run one tokenizer step and yield what it delivered, then any error."""
    error: Optional[HTMLParseError] = None
    try:
        step(*args)
    except HTMLParseError as e:
        error = e
    yield from collector.drain()
    if error is not None:
        raise error
