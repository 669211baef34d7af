"""
Orchestrator for running a de-identification pipeline end to end.

Usage (example from CLI):
    from deidentify.orchestrator import run_join

    summary = run_join("people.csv", "purchases/", salt="secret", output="out.csv")
    print(summary["rows_written"])

Each run is profiled; the returned summary merges the pipeline's row counters
with timing, throughput and peak memory figures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from deidentify.config import get_settings
from deidentify.infrastructure.tables import CsvSink, iter_sources, open_sink
from deidentify.pipelines.abstract import Pipeline, PipelineResult
from deidentify.pipelines.clean import CleanPipeline
from deidentify.pipelines.join import JoinPipeline, load_people
from deidentify.privacy.codec import PseudonymCodec
from deidentify.utils.logging import get_logger
from deidentify.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


def _round_float(value: float, decimals: int = 2) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _merge_result(result: PipelineResult, stats: ProfileStats) -> dict:
    """Merge pipeline counters with profiler stats, rounding floats for readability."""
    merged = dict(result)
    for counter in ("tables", "rows_read", "rows_written", "rows_skipped"):
        merged.setdefault(counter, 0)
    merged["duration_seconds"] = _round_float(stats.duration_seconds)
    merged["throughput_rows_per_sec"] = (
        _round_float(merged["rows_read"] / stats.duration_seconds) if stats.duration_seconds else 0.0
    )
    merged["peak_rss_bytes"] = stats.peak_rss_bytes
    merged["cpu_percent"] = _round_float(stats.cpu_percent, 1) if stats.cpu_percent else None
    return merged


def run_pipeline(pipeline: Pipeline, sources: Sequence[Path], sink: CsvSink) -> dict:
    """
    Run a pipeline under the profiler and return its summary.

    Errors are logged and re-raised; a failed run has no summary.
    """
    log.info(
        f"[PIPELINE START] {pipeline.name}",
        extra={"pipeline": pipeline.name, "tables": len(sources)},
    )
    with profile_block(pipeline.name) as stats:
        try:
            result = pipeline.run(sources, sink)
        except Exception:
            log.error(f"[PIPELINE FAILED] {pipeline.name}", extra={"pipeline": pipeline.name})
            raise

    summary = _merge_result(result, stats)
    summary["pipeline"] = pipeline.name
    log.info(
        f"[PIPELINE SUCCESS] {pipeline.name}",
        extra={
            "pipeline": pipeline.name,
            "rows_written": summary["rows_written"],
            "rows_skipped": summary["rows_skipped"],
            "duration": summary["duration_seconds"],
        },
    )
    return summary


def run_join(
    people: Path | str,
    purchases: Path | str,
    salt: str,
    output: Optional[Path | str] = None,
    reject_duplicates: Optional[bool] = None,
) -> dict:
    """
    Mode A: join purchase tables to the person table and write de-identified records.

    Parameters
    ----------
    people : Path | str
        Person table.
    purchases : Path | str
        A purchase table or a directory of them.
    salt : str
        Pseudonym salt.
    output : Path | str | None
        Output CSV path; stdout when None.
    reject_duplicates : bool | None
        Fail on duplicate person ids. Defaults to settings.reject_duplicate_people.
    """
    settings = get_settings()
    if reject_duplicates is None:
        reject_duplicates = settings.reject_duplicate_people

    codec = PseudonymCodec(salt)
    sources = iter_sources(purchases, settings.source_pattern)
    lookup = load_people(people, reject_duplicates=reject_duplicates)
    pipeline = JoinPipeline(lookup, codec)
    with open_sink(output) as sink:
        return run_pipeline(pipeline, sources, sink)


def run_clean(
    source: Path | str,
    salt: str,
    output: Optional[Path | str] = None,
    first_only: Optional[bool] = None,
) -> dict:
    """
    Mode B: clean merged tables in place of their raw ids and postal codes.

    Parameters
    ----------
    source : Path | str
        A merged table or a directory of them.
    salt : str
        Pseudonym salt.
    output : Path | str | None
        Output CSV path; stdout when None.
    first_only : bool | None
        Emit only the first row of each table. Defaults to settings.first_only.
    """
    settings = get_settings()
    if first_only is None:
        first_only = settings.first_only

    codec = PseudonymCodec(salt)
    sources = iter_sources(source, settings.source_pattern)
    pipeline = CleanPipeline(codec, first_only=first_only)
    with open_sink(output) as sink:
        return run_pipeline(pipeline, sources, sink)


__all__ = [
    "run_clean",
    "run_join",
    "run_pipeline",
]
