"""
Pipelines package.

Re-exports the pipeline interfaces and both de-identification modes so
downstream code can import from `deidentify.pipelines` directly.
"""

from deidentify.pipelines.abstract import AbstractPipeline, Pipeline, PipelineResult
from deidentify.pipelines.clean import CleanPipeline, clean
from deidentify.pipelines.join import JoinPipeline, augment, build_lookup, load_people

__all__ = [
    # Abstracts
    "AbstractPipeline",
    "Pipeline",
    "PipelineResult",
    # Mode A
    "JoinPipeline",
    "augment",
    "build_lookup",
    "load_people",
    # Mode B
    "CleanPipeline",
    "clean",
]
