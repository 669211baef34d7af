"""
Pipeline interfaces and result contracts.

Both de-identification modes implement the Pipeline protocol and return a
PipelineResult TypedDict so the orchestrator and reporter can treat them
uniformly.
"""

from __future__ import annotations

import abc
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Sequence, TypedDict, runtime_checkable

from deidentify.infrastructure.tables import CsvSink


class PipelineResult(TypedDict, total=False):
    """
    Counters returned by a pipeline run.

    The orchestrator enriches these with timing and memory figures.
    """

    tables: int
    rows_read: int
    rows_written: int
    rows_skipped: int
    notes: Optional[str]
    extra: Dict[str, Any]


@runtime_checkable
class Pipeline(Protocol):
    """
    Common interface of the join and clean pipelines.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the mode.
    """

    name: str
    description: str

    def run(self, sources: Sequence[Path], sink: CsvSink) -> PipelineResult:
        """
        Stream every source table through the pipeline into `sink`.

        Parameters
        ----------
        sources : Sequence[Path]
            Tables to read, in order.
        sink : CsvSink
            Destination for the de-identified rows. The pipeline writes the header.

        Returns
        -------
        PipelineResult
            Row counters for the run.
        """
        ...


class AbstractPipeline(abc.ABC):
    """
    ABC helper for class-based pipelines.

    Subclasses set `name` and `description` and implement `run`.
    """

    name: str
    description: str

    @abc.abstractmethod
    def run(self, sources: Sequence[Path], sink: CsvSink) -> PipelineResult:  # pragma: no cover - interface only
        """Run the pipeline and return counters."""
        raise NotImplementedError


__all__ = [
    "AbstractPipeline",
    "Pipeline",
    "PipelineResult",
]
