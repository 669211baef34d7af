"""
Transaction de-identifier.

Prepares purchase records for release outside a controlled environment:

- Joins purchase tables to a person reference table
- Replaces person ids with reversible, salt-keyed pseudonyms
- Generalizes postal codes into 3-character buckets, suppressing
  low-population buckets
- Cleans already-merged tables in place, idempotently

Pseudonyms can be decoded by whoever holds the salt; this is a
de-identification tool, not an anonymizer.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from deidentify.config import Settings, get_settings
from deidentify.errors import (
    DeidentifyError,
    InvalidConfiguration,
    MissingPersonError,
    RowParseError,
    SchemaError,
)
from deidentify.orchestrator import run_clean, run_join, run_pipeline
from deidentify.pipelines import CleanPipeline, JoinPipeline, augment, build_lookup, clean
from deidentify.privacy import NULL_ZCTA, RESTRICTED_ZCTAS, PseudonymCodec, generalize
from deidentify.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "DeidentifyError",
    "InvalidConfiguration",
    "MissingPersonError",
    "RowParseError",
    "SchemaError",
    # Primitives
    "NULL_ZCTA",
    "PseudonymCodec",
    "RESTRICTED_ZCTAS",
    "generalize",
    # Pipelines
    "CleanPipeline",
    "JoinPipeline",
    "augment",
    "build_lookup",
    "clean",
    # Orchestration
    "run_clean",
    "run_join",
    "run_pipeline",
    # Logging
    "configure_logging",
    "get_logger",
]
