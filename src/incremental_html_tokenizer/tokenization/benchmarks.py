"""Performance benchmarking for incremental HTML tokenization.

This module measures tokenizer throughput and memory use on whole documents
and on documents fed in fixed-size chunks, and compares the results with the
standard library's ``html.parser`` as a reference point.
"""

import gc
import statistics
import time
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, Callable, Dict, List, Optional

import psutil

from incremental_html_tokenizer.shared import (
    BenchmarkConfig,
    HTMLParseError,
    TokenizerConfig,
    get_logger,
)

from .events import TokenSink
from .tokenizer import HTMLTokenizer

TOKENIZER_NAME = "incremental_html_tokenizer"
REFERENCE_PARSER_NAME = "html.parser"


@dataclass
class BenchmarkResult:
    """Result of a single benchmark run."""

    parser_name: str
    test_case: str
    processing_time_ms: float
    memory_used_mb: float
    characters_processed: int
    events_generated: int
    success: bool
    chunk_size: Optional[int] = None
    error_message: Optional[str] = None

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

    @property
    def memory_per_character(self) -> float:
        """Calculate memory usage per character."""
        if self.characters_processed <= 0:
            return 0.0
        return (self.memory_used_mb * 1024 * 1024) / self.characters_processed


@dataclass
class BenchmarkSuite:
    """Collection of benchmark results with statistical analysis."""

    results: List[BenchmarkResult] = field(default_factory=list)
    suite_name: str = "Tokenization Benchmark"
    timestamp: float = field(default_factory=time.time)

    def add_result(self, result: BenchmarkResult) -> None:
        """Add a benchmark result to the suite."""
        self.results.append(result)

    def get_results_by_parser(self, parser_name: str) -> List[BenchmarkResult]:
        """Get all results for a specific parser."""
        return [r for r in self.results if r.parser_name == parser_name]

    def get_results_by_test_case(self, test_case: str) -> List[BenchmarkResult]:
        """Get all results for a specific test case."""
        return [r for r in self.results if r.test_case == test_case]

    def get_statistics(self, parser_name: str, metric: str) -> Dict[str, float]:
        """Get statistical analysis for a parser and metric."""
        parser_results = self.get_results_by_parser(parser_name)
        if not parser_results:
            return {}

        values = [
            getattr(result, metric) for result in parser_results
            if hasattr(result, metric)
        ]
        if not values:
            return {}

        return {
            "min": min(values),
            "max": max(values),
            "mean": statistics.mean(values),
            "median": statistics.median(values),
            "stdev": statistics.stdev(values) if len(values) > 1 else 0.0,
            "count": len(values)
        }

    def generate_report(self) -> Dict[str, Any]:
        """Generate benchmark report with summary and per test case details."""
        parsers = sorted(set(r.parser_name for r in self.results))
        test_cases = sorted(set(r.test_case for r in self.results))

        report: Dict[str, Any] = {
            "suite_name": self.suite_name,
            "timestamp": self.timestamp,
            "total_results": len(self.results),
            "parsers": parsers,
            "test_cases": test_cases,
            "summary": {},
            "detailed_results": {}
        }

        for parser in parsers:
            parser_results = self.get_results_by_parser(parser)
            successful_results = [r for r in parser_results if r.success]

            report["summary"][parser] = {
                "total_runs": len(parser_results),
                "successful_runs": len(successful_results),
                "success_rate": len(successful_results) / len(parser_results),
                "performance": self.get_statistics(parser, "characters_per_second"),
                "memory": self.get_statistics(parser, "memory_used_mb")
            }

        for test_case in test_cases:
            case_results = self.get_results_by_test_case(test_case)
            report["detailed_results"][test_case] = {}

            for result in case_results:
                report["detailed_results"][test_case][result.parser_name] = {
                    "processing_time_ms": result.processing_time_ms,
                    "memory_used_mb": result.memory_used_mb,
                    "characters_per_second": result.characters_per_second,
                    "events_per_second": result.events_per_second,
                    "chunk_size": result.chunk_size,
                    "success": result.success,
                    "error": result.error_message
                }

        return report


class _CountingSink(TokenSink):
    """Sink that only counts events, keeping benchmark overhead low."""

    def __init__(self) -> None:
        self.count = 0

    def handle_starttag(self, name, attrs):
        self.count += 1

    def handle_endtag(self, name):
        self.count += 1

    def handle_data(self, text):
        self.count += 1

    def handle_comment(self, text):
        self.count += 1

    def handle_pi(self, data):
        self.count += 1

    def handle_charref(self, name):
        self.count += 1

    def handle_entityref(self, name):
        self.count += 1

    def handle_decl(self, text):
        self.count += 1

    def unknown_decl(self, text):
        self.count += 1


class _CountingHTMLParser(HTMLParser):
    """Standard library parser counting the events it reports."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self.count = 0

    def handle_starttag(self, tag, attrs):
        self.count += 1

    def handle_endtag(self, tag):
        self.count += 1

    def handle_data(self, data):
        self.count += 1

    def handle_comment(self, data):
        self.count += 1

    def handle_pi(self, data):
        self.count += 1

    def handle_charref(self, name):
        self.count += 1

    def handle_entityref(self, name):
        self.count += 1

    def handle_decl(self, decl):
        self.count += 1

    def unknown_decl(self, data):
        self.count += 1


def split_chunks(text: str, chunk_size: int) -> List[str]:
    """Split ``text`` into consecutive pieces of at most ``chunk_size`` characters."""
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


class TokenizationBenchmark:
    """Tokenization throughput and memory benchmark."""

    def __init__(
        self,
        config: Optional[BenchmarkConfig] = None,
        tokenizer_config: Optional[TokenizerConfig] = None
    ) -> None:
        """Initialize benchmark.

        Args:
            config: Benchmark configuration, defaults to ``BenchmarkConfig()``
            tokenizer_config: Configuration for the benchmarked tokenizer
        """
        self.config = config or BenchmarkConfig()
        self.tokenizer_config = tokenizer_config or TokenizerConfig()
        self.logger = get_logger(__name__, self.config.correlation_id, "benchmark")
        self.test_cases = dict(self.config.test_cases) or self._create_test_cases()

    def _create_test_cases(self) -> Dict[str, str]:
        """Create test cases for benchmarking."""
        return {
            "small_document": '''<!DOCTYPE html>
<html>
  <head><title>Small</title></head>
  <body class="main">
    <p>Hello &amp; welcome &#8212; <br/> enjoy.</p>
    <!-- Comment -->
  </body>
</html>''',

            "medium_document": '''<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Medium Document</title>
    <style>body > p { margin: 0 }</style>
    <script>if (a < b && c > d) { render("<b>"); }</script>
  </head>
  <body>
    <div id="intro" class='section'>
      <h1>Introduction</h1>
      <p>This is a test document with <em>several</em> elements &copy; 2024.</p>
      <ul>
        <li><a href="/first?x=1&amp;y=2">First item</a></li>
        <li><a href="/second">Second item</a></li>
        <li><a href="/third">Third item</a></li>
      </ul>
    </div>
    <?php echo "processing instruction"; ?>
    <img src="logo.png" alt="Logo" width=120 height=40 />
  </body>
</html>''',

            "doctype_subset": '''<!DOCTYPE img [
  <!ELEMENT img EMPTY>
  <!ATTLIST img src ENTITY #REQUIRED alt CDATA #IMPLIED>
  <!ENTITY logo SYSTEM "http://www.example.com/logo.gif" NDATA gif>
  <!NOTATION gif PUBLIC "gif viewer">
]>
<img src="logo">''',

            "large_document": self._generate_large_html(),
        }

    def _generate_large_html(self) -> str:
        """Generate large HTML document for benchmarking."""
        rows = ['<!DOCTYPE html>', '<html><body><table id="data">']
        for i in range(1000):
            parity = "odd" if i % 2 else "even"
            rows.append(f'''
  <tr id="row-{i}" class="{parity}" data-priority={i % 10}>
    <td>Item {i}</td>
    <td title="Description &amp; notes">Description for item {i} &lt;{i * 2}&gt;</td>
    <td><a href="/items/{i}?view=full&amp;lang=en">Open</a><br/></td>
  </tr>''')
        rows.append('</table></body></html>')
        return '\n'.join(rows)

    def _measure_memory_usage(self) -> float:
        """Get current memory usage in MB."""
        process = psutil.Process()
        return process.memory_info().rss / 1024 / 1024

    def _timed_run(
        self,
        parser_name: str,
        test_case: str,
        content: str,
        run: Callable[[], int],
        chunk_size: Optional[int] = None
    ) -> BenchmarkResult:
        """Run ``run`` once, recording time, memory and the event count it returns."""
        gc.collect()
        memory_before = self._measure_memory_usage()
        start_time = time.perf_counter()

        try:
            events_generated = run()
            success = True
            error_message = None
        except HTMLParseError as e:
            events_generated = 0
            success = False
            error_message = str(e)

        processing_time = (time.perf_counter() - start_time) * 1000
        memory_after = self._measure_memory_usage()

        return BenchmarkResult(
            parser_name=parser_name,
            test_case=test_case,
            processing_time_ms=processing_time,
            memory_used_mb=max(0.0, memory_after - memory_before),
            characters_processed=len(content),
            events_generated=events_generated,
            success=success,
            chunk_size=chunk_size,
            error_message=error_message
        )

    def benchmark_tokenizer(
        self,
        test_case: str,
        content: str,
        chunk_size: Optional[int] = None
    ) -> BenchmarkResult:
        """Benchmark the tokenizer on ``content``, whole or in chunks."""
        chunks = [content] if chunk_size is None else split_chunks(content, chunk_size)

        def run() -> int:
            sink = _CountingSink()
            tokenizer = HTMLTokenizer(sink, self.tokenizer_config)
            for chunk in chunks:
                tokenizer.feed(chunk)
            tokenizer.close()
            return sink.count

        parser_name = TOKENIZER_NAME
        if chunk_size is not None:
            parser_name = f"{TOKENIZER_NAME}[chunk={chunk_size}]"
        return self._timed_run(parser_name, test_case, content, run, chunk_size)

    def benchmark_reference_parser(self, test_case: str, content: str) -> BenchmarkResult:
        """Benchmark the standard library ``html.parser`` on ``content``."""

        def run() -> int:
            parser = _CountingHTMLParser()
            parser.feed(content)
            parser.close()
            return parser.count

        return self._timed_run(REFERENCE_PARSER_NAME, test_case, content, run)

    def _runners(self, content: str) -> List[Callable[[str], BenchmarkResult]]:
        runners: List[Callable[[str], BenchmarkResult]] = [
            lambda case: self.benchmark_tokenizer(case, content)
        ]
        for size in self.config.chunk_sizes:
            runners.append(
                lambda case, size=size: self.benchmark_tokenizer(case, content, size)
            )
        if self.config.include_reference_parser:
            runners.append(lambda case: self.benchmark_reference_parser(case, content))
        return runners

    def run_benchmark(self) -> BenchmarkSuite:
        """Run the benchmark suite.

        Returns:
            BenchmarkSuite with one averaged result per parser and test case
        """
        suite = BenchmarkSuite(suite_name="Incremental Tokenization Benchmark")

        self.logger.info(
            "Starting benchmark suite",
            extra={
                "test_cases": len(self.test_cases),
                "chunk_sizes": list(self.config.chunk_sizes),
                "warmup_runs": self.config.warmup_runs,
                "benchmark_runs": self.config.benchmark_runs
            }
        )

        for test_case, content in self.test_cases.items():
            self.logger.info(f"Benchmarking test case: {test_case}")

            for runner in self._runners(content):
                for _ in range(self.config.warmup_runs):
                    runner(test_case)

                run_results = [runner(test_case) for _ in range(self.config.benchmark_runs)]
                suite.add_result(self._average(run_results))

        self.logger.info(
            "Benchmark suite completed",
            extra={
                "total_results": len(suite.results),
                "suite_duration_seconds": time.time() - suite.timestamp
            }
        )

        return suite

    @staticmethod
    def _average(run_results: List[BenchmarkResult]) -> BenchmarkResult:
        """Collapse repeated runs into one result; a single failure marks it failed."""
        first = run_results[0]
        failed = [r for r in run_results if not r.success]
        if failed:
            return BenchmarkResult(
                parser_name=first.parser_name,
                test_case=first.test_case,
                processing_time_ms=0.0,
                memory_used_mb=0.0,
                characters_processed=first.characters_processed,
                events_generated=0,
                success=False,
                chunk_size=first.chunk_size,
                error_message=failed[0].error_message
            )
        return BenchmarkResult(
            parser_name=first.parser_name,
            test_case=first.test_case,
            processing_time_ms=statistics.mean([r.processing_time_ms for r in run_results]),
            memory_used_mb=statistics.mean([r.memory_used_mb for r in run_results]),
            characters_processed=first.characters_processed,
            events_generated=int(statistics.mean([r.events_generated for r in run_results])),
            success=True,
            chunk_size=first.chunk_size
        )

    def compare_performance(
        self,
        baseline_suite: BenchmarkSuite,
        current_suite: BenchmarkSuite,
        threshold: float = 0.05
    ) -> Dict[str, Any]:
        """Compare processing times between two benchmark suites.

        Args:
            baseline_suite: Baseline benchmark results
            current_suite: Current benchmark results
            threshold: Relative change below which a difference is ignored

        Returns:
            Performance comparison report
        """
        comparison: Dict[str, Any] = {
            "baseline_timestamp": baseline_suite.timestamp,
            "current_timestamp": current_suite.timestamp,
            "improvements": {},
            "regressions": {},
            "summary": {}
        }

        for baseline_result in baseline_suite.results:
            current_result = next(
                (
                    r for r in current_suite.get_results_by_test_case(baseline_result.test_case)
                    if r.parser_name == baseline_result.parser_name
                ),
                None
            )
            if not (current_result and baseline_result.success and current_result.success):
                continue
            if baseline_result.processing_time_ms <= 0:
                continue

            time_change = (
                (current_result.processing_time_ms - baseline_result.processing_time_ms)
                / baseline_result.processing_time_ms
            )
            key = f"{baseline_result.parser_name}_{baseline_result.test_case}"
            entry = {
                "baseline_time_ms": baseline_result.processing_time_ms,
                "current_time_ms": current_result.processing_time_ms
            }
            if time_change < -threshold:
                entry["time_improvement_percent"] = abs(time_change) * 100
                comparison["improvements"][key] = entry
            elif time_change > threshold:
                entry["time_regression_percent"] = time_change * 100
                comparison["regressions"][key] = entry

        comparison["summary"] = {
            "total_improvements": len(comparison["improvements"]),
            "total_regressions": len(comparison["regressions"]),
            "has_regressions": len(comparison["regressions"]) > 0
        }

        return comparison
