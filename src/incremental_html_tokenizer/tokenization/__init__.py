"""Incremental tokenization of SGML/HTML markup.

This module turns markup fed in arbitrary chunks into structural events
delivered to a sink as soon as each construct is complete.

Key Components:
    HTMLTokenizer: Incremental tokenizer driving the scan loop
    TokenSink: Consumer port with no-op event handlers
    CallbackSink: Sink forwarding events to plain callables
    EventCollector: Sink recording events as Event values
    Event, EventType, Attribute: Recorded event representation
    TokenizationBenchmark: Throughput and memory benchmark suite
"""

from .benchmarks import BenchmarkResult, BenchmarkSuite, TokenizationBenchmark
from .entities import decode_charref, decode_entityref, unescape
from .events import (
    Attribute,
    CallbackSink,
    Event,
    EventCollector,
    EventType,
    TokenSink,
    coalesce_data,
)
from .tokenizer import HTMLTokenizer

__all__ = [
    "Attribute",
    "BenchmarkResult",
    "BenchmarkSuite",
    "CallbackSink",
    "Event",
    "EventCollector",
    "EventType",
    "HTMLTokenizer",
    "TokenSink",
    "TokenizationBenchmark",
    "coalesce_data",
    "decode_charref",
    "decode_entityref",
    "unescape",
]
