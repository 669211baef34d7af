import io

import pytest

from deidentify.infrastructure.tables import CsvSink
from deidentify.orchestrator import _merge_result, run_pipeline
from deidentify.pipelines.abstract import PipelineResult
from deidentify.utils.profiler import ProfileStats

# Expected values after orchestrator merges profiler stats into pipeline counters
EXPECTED_DURATION = 2.0
EXPECTED_THROUGHPUT = 50.0  # 100 rows read / 2.0 seconds
EXPECTED_PEAK_RSS = 123
EXPECTED_CPU = 12.3  # rounded to 1 decimal


def test_merge_result_adds_profiler_stats():
    result = PipelineResult(tables=2, rows_read=100, rows_written=98, rows_skipped=2)
    stats = ProfileStats(
        label="join",
        start_ts=1.0,
        end_ts=3.0,
        duration_seconds=2.0,
        peak_rss_bytes=123,
        cpu_percent=12.34,
    )

    merged = _merge_result(result, stats)

    assert merged["duration_seconds"] == EXPECTED_DURATION
    assert merged["throughput_rows_per_sec"] == EXPECTED_THROUGHPUT
    assert merged["peak_rss_bytes"] == EXPECTED_PEAK_RSS
    assert merged["cpu_percent"] == EXPECTED_CPU
    assert merged["rows_skipped"] == 2


def test_merge_result_fills_missing_counters():
    merged = _merge_result(PipelineResult(), ProfileStats(label="clean"))

    assert merged["rows_read"] == 0
    assert merged["throughput_rows_per_sec"] == 0.0
    assert merged["cpu_percent"] is None


class _ProbePipeline:
    name = "probe"
    description = "test pipeline writing a fixed row"

    def run(self, sources, sink):
        sink.open(["a"])
        sink.write({"a": "1"})
        return PipelineResult(tables=len(sources), rows_read=1, rows_written=1, rows_skipped=0)


class _FailingPipeline(_ProbePipeline):
    name = "failing"

    def run(self, sources, sink):
        raise RuntimeError("intentional failure")


def test_run_pipeline_returns_summary():
    out = io.StringIO()
    summary = run_pipeline(_ProbePipeline(), [], CsvSink(out))

    assert summary["pipeline"] == "probe"
    assert summary["rows_written"] == 1
    assert summary["duration_seconds"] >= 0.0
    assert out.getvalue() == "a\n1\n"


def test_run_pipeline_propagates_failures():
    with pytest.raises(RuntimeError, match="intentional failure"):
        run_pipeline(_FailingPipeline(), [], CsvSink(io.StringIO()))
