"""Tests for tokenization performance benchmarking.

This module tests the benchmark data structures, the benchmark runner with
whole and chunked input, and performance regression detection.
"""

from unittest.mock import Mock, patch

import pytest

from incremental_html_tokenizer.shared import BenchmarkConfig
from incremental_html_tokenizer.tokenization import HTMLTokenizer
from incremental_html_tokenizer.tokenization.benchmarks import (
    REFERENCE_PARSER_NAME,
    TOKENIZER_NAME,
    BenchmarkResult,
    BenchmarkSuite,
    TokenizationBenchmark,
    split_chunks,
)


def make_result(parser_name="parser", test_case="case", processing_time_ms=10.0, **kwargs):
    """Create a successful benchmark result."""
    values = {
        "memory_used_mb": 1.0,
        "characters_processed": 1000,
        "events_generated": 50,
        "success": True,
    }
    values.update(kwargs)
    return BenchmarkResult(
        parser_name=parser_name,
        test_case=test_case,
        processing_time_ms=processing_time_ms,
        **values
    )


class TestBenchmarkResult:
    """Test benchmark result data structure."""

    def test_benchmark_result_creation(self):
        """Test basic benchmark result creation."""
        result = make_result(chunk_size=64)

        assert result.parser_name == "parser"
        assert result.chunk_size == 64
        assert result.error_message is None

    def test_performance_metrics_calculation(self):
        """Test throughput calculations."""
        result = make_result(processing_time_ms=100.0, memory_used_mb=1.0)

        assert result.characters_per_second == 10000.0
        assert result.events_per_second == 500.0
        assert result.memory_per_character == pytest.approx(1048.576)

    def test_zero_division_handling(self):
        """Test metrics with zero time or no characters."""
        result = make_result(processing_time_ms=0.0, characters_processed=0)

        assert result.characters_per_second == 0.0
        assert result.events_per_second == 0.0
        assert result.memory_per_character == 0.0


class TestBenchmarkSuite:
    """Test benchmark suite aggregation and reporting."""

    def setup_method(self):
        """Set up a suite with two parsers and two test cases."""
        self.suite = BenchmarkSuite(suite_name="Test Suite")
        self.suite.add_result(make_result("parser_a", "case_1", 10.0))
        self.suite.add_result(make_result("parser_a", "case_2", 20.0))
        self.suite.add_result(make_result("parser_b", "case_1", 40.0))
        self.suite.add_result(
            make_result("parser_b", "case_2", 0.0, success=False, error_message="boom")
        )

    def test_result_filtering(self):
        """Test filtering by parser and test case."""
        assert len(self.suite.get_results_by_parser("parser_a")) == 2
        assert len(self.suite.get_results_by_test_case("case_1")) == 2
        assert self.suite.get_results_by_parser("missing") == []

    def test_statistics_calculation(self):
        """Test statistics over one metric."""
        stats = self.suite.get_statistics("parser_a", "processing_time_ms")

        assert stats["min"] == 10.0
        assert stats["max"] == 20.0
        assert stats["mean"] == 15.0
        assert stats["median"] == 15.0
        assert stats["count"] == 2
        assert stats["stdev"] > 0

    def test_empty_statistics(self):
        """Test statistics for unknown parsers or metrics."""
        assert self.suite.get_statistics("missing", "processing_time_ms") == {}
        assert self.suite.get_statistics("parser_a", "no_such_metric") == {}

    def test_single_value_statistics(self):
        """Test the standard deviation of a single value is zero."""
        suite = BenchmarkSuite()
        suite.add_result(make_result())

        assert suite.get_statistics("parser", "processing_time_ms")["stdev"] == 0.0

    def test_report_generation(self):
        """Test the report summary and details."""
        report = self.suite.generate_report()

        assert report["suite_name"] == "Test Suite"
        assert report["total_results"] == 4
        assert report["parsers"] == ["parser_a", "parser_b"]
        assert report["test_cases"] == ["case_1", "case_2"]
        assert report["summary"]["parser_a"]["success_rate"] == 1.0
        assert report["summary"]["parser_b"]["success_rate"] == 0.5
        assert report["summary"]["parser_b"]["successful_runs"] == 1
        assert report["detailed_results"]["case_2"]["parser_b"]["error"] == "boom"
        assert report["detailed_results"]["case_1"]["parser_a"]["chunk_size"] is None


class TestSplitChunks:
    """Test chunking of benchmark input."""

    def test_split(self):
        """Test consecutive pieces cover the text."""
        assert split_chunks("abcdefg", 3) == ["abc", "def", "g"]

    def test_empty_text(self):
        """Test empty text produces no chunks."""
        assert split_chunks("", 4) == []


class TestTokenizationBenchmark:
    """Test tokenization benchmark execution."""

    def setup_method(self):
        """Set up a fast benchmark configuration."""
        self.config = BenchmarkConfig(
            warmup_runs=1,
            benchmark_runs=2,
            chunk_sizes=(7,),
            correlation_id="test-123",
            test_cases={"tiny": "<p class='x'>a &amp; b</p>"},
        )
        self.benchmark = TokenizationBenchmark(self.config)

    def test_benchmark_initialization(self):
        """Test configured test cases replace the built-in ones."""
        assert self.benchmark.config is self.config
        assert self.benchmark.logger.correlation_id == "test-123"
        assert list(self.benchmark.test_cases) == ["tiny"]

    def test_builtin_test_cases(self):
        """Test the built-in documents tokenize without errors."""
        benchmark = TokenizationBenchmark()
        expected_cases = ["small_document", "medium_document", "doctype_subset", "large_document"]

        assert list(benchmark.test_cases) == expected_cases
        for content in benchmark.test_cases.values():
            tokenizer = HTMLTokenizer()
            tokenizer.feed(content)
            tokenizer.close()

    def test_large_html_generation(self):
        """Test large document generation."""
        large_html = self.benchmark._generate_large_html()

        assert len(large_html) > 10000
        assert large_html.startswith("<!DOCTYPE html>")
        assert large_html.count("<tr ") == 1000
        assert large_html.endswith("</table></body></html>")

    @patch("psutil.Process")
    def test_memory_measurement(self, mock_process):
        """Test memory usage measurement."""
        mock_memory = Mock()
        mock_memory.rss = 1024 * 1024 * 50
        mock_process.return_value.memory_info.return_value = mock_memory

        assert self.benchmark._measure_memory_usage() == 50.0

    def test_tokenizer_benchmark(self):
        """Test benchmarking the tokenizer on whole input."""
        content = "<root><element>Content</element></root>"

        with patch.object(self.benchmark, "_measure_memory_usage", side_effect=[10.0, 12.0]):
            result = self.benchmark.benchmark_tokenizer("test_case", content)

        assert result.parser_name == TOKENIZER_NAME
        assert result.test_case == "test_case"
        assert result.success is True
        assert result.events_generated == 5
        assert result.memory_used_mb == 2.0
        assert result.characters_processed == len(content)
        assert result.chunk_size is None

    def test_chunked_tokenizer_benchmark(self):
        """Test chunked runs are named after their chunk size."""
        content = "<root><element>Content</element></root>"

        result = self.benchmark.benchmark_tokenizer("test_case", content, chunk_size=4)

        assert result.parser_name == f"{TOKENIZER_NAME}[chunk=4]"
        assert result.chunk_size == 4
        assert result.success is True
        assert result.events_generated >= 5

    def test_tokenizer_error_handling(self):
        """Test parse errors produce a failed result."""
        with patch.object(self.benchmark, "_measure_memory_usage", side_effect=[5.0, 4.0]):
            result = self.benchmark.benchmark_tokenizer("broken", "<p><!--")

        assert result.success is False
        assert result.events_generated == 0
        assert result.memory_used_mb == 0.0
        assert "EOF in middle of construct" in result.error_message

    def test_reference_parser_benchmark(self):
        """Test benchmarking the standard library parser."""
        result = self.benchmark.benchmark_reference_parser(
            "test_case", "<root><element>Content</element></root>"
        )

        assert result.parser_name == REFERENCE_PARSER_NAME
        assert result.success is True
        assert result.events_generated == 5

    def test_full_benchmark_run(self):
        """Test full benchmark execution."""
        suite = self.benchmark.run_benchmark()

        assert isinstance(suite, BenchmarkSuite)
        assert [r.parser_name for r in suite.results] == [
            TOKENIZER_NAME,
            f"{TOKENIZER_NAME}[chunk=7]",
            REFERENCE_PARSER_NAME,
        ]
        assert all(r.success for r in suite.results)
        assert all(r.test_case == "tiny" for r in suite.results)

    def test_warmup_and_benchmark_runs(self):
        """Test each runner is called for warmup and measured runs."""
        config = BenchmarkConfig(
            warmup_runs=2,
            benchmark_runs=3,
            chunk_sizes=(16,),
            include_reference_parser=False,
            test_cases={"tiny": "<p>x</p>"},
        )
        benchmark = TokenizationBenchmark(config)

        with patch.object(
            benchmark, "benchmark_tokenizer", return_value=make_result()
        ) as mock_tokenizer:
            suite = benchmark.run_benchmark()

        assert mock_tokenizer.call_count == 2 * (2 + 3)
        assert len(suite.results) == 2

    def test_average_marks_failures(self):
        """Test a single failed run marks the averaged result failed."""
        averaged = TokenizationBenchmark._average([
            make_result(processing_time_ms=10.0),
            make_result(processing_time_ms=0.0, success=False, error_message="bad"),
        ])

        assert averaged.success is False
        assert averaged.error_message == "bad"
        assert averaged.events_generated == 0

    def test_average_of_runs(self):
        """Test successful runs are averaged."""
        averaged = TokenizationBenchmark._average([
            make_result(processing_time_ms=10.0, memory_used_mb=1.0),
            make_result(processing_time_ms=30.0, memory_used_mb=3.0),
        ])

        assert averaged.success is True
        assert averaged.processing_time_ms == 20.0
        assert averaged.memory_used_mb == 2.0
        assert averaged.events_generated == 50

    def test_performance_comparison(self):
        """Test performance comparison between benchmark suites."""
        baseline = BenchmarkSuite(suite_name="Baseline")
        baseline.add_result(make_result(processing_time_ms=100.0))
        current = BenchmarkSuite(suite_name="Current")
        current.add_result(make_result(processing_time_ms=80.0))

        comparison = self.benchmark.compare_performance(baseline, current)

        assert comparison["summary"]["has_regressions"] is False
        improvement = comparison["improvements"]["parser_case"]
        assert improvement["time_improvement_percent"] == pytest.approx(20.0)
        assert improvement["baseline_time_ms"] == 100.0
        assert improvement["current_time_ms"] == 80.0

    def test_performance_regression_detection(self):
        """Test detection of performance regressions."""
        baseline = BenchmarkSuite(suite_name="Baseline")
        baseline.add_result(make_result(processing_time_ms=100.0))
        current = BenchmarkSuite(suite_name="Current")
        current.add_result(make_result(processing_time_ms=130.0))

        comparison = self.benchmark.compare_performance(baseline, current)

        assert comparison["improvements"] == {}
        assert comparison["regressions"]["parser_case"]["time_regression_percent"] == pytest.approx(30.0)
        assert comparison["summary"]["has_regressions"] is True

    def test_changes_within_threshold_ignored(self):
        """Test small changes are neither improvements nor regressions."""
        baseline = BenchmarkSuite(suite_name="Baseline")
        baseline.add_result(make_result(processing_time_ms=100.0))
        current = BenchmarkSuite(suite_name="Current")
        current.add_result(make_result(processing_time_ms=103.0))

        comparison = self.benchmark.compare_performance(baseline, current)

        assert comparison["summary"]["total_improvements"] == 0
        assert comparison["summary"]["total_regressions"] == 0
