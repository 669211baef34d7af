"""
In-place cleaner (Mode B): de-identify an already-merged table.

Each row's `person_id` is either a raw number or an existing pseudonym. Raw
ids are encoded, pseudonyms are left alone, and the postal column is
generalized, so cleaning a cleaned table changes nothing. All other columns
pass through untouched and in their original order.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Sequence

from deidentify.domain.models import PseudonymPersonId, RawPersonId, parse_person_id
from deidentify.errors import SchemaError
from deidentify.infrastructure.tables import CsvSink, TableReader, read_header
from deidentify.pipelines.abstract import AbstractPipeline, PipelineResult
from deidentify.privacy.codec import PseudonymCodec
from deidentify.privacy.generalizer import generalize
from deidentify.utils.logging import get_logger

log = get_logger(__name__)

PERSON_ID_COLUMN = "person_id"

# First match wins.
POSTAL_COLUMNS = ("zcta", "postal_code")


def postal_column_for(columns: Sequence[str], source: Path | str = "<table>") -> str:
    """Pick the postal column of a merged table, failing if there is none."""
    for candidate in POSTAL_COLUMNS:
        if candidate in columns:
            return candidate
    raise SchemaError(source, [" or ".join(POSTAL_COLUMNS)])


def clean(row: Dict[str, str], codec: PseudonymCodec, postal_column: str = "zcta") -> Dict[str, str]:
    """
    Return a de-identified copy of one merged row.
    """
    cleaned = dict(row)
    match parse_person_id(row[PERSON_ID_COLUMN] or ""):
        case RawPersonId(value=raw):
            cleaned[PERSON_ID_COLUMN] = codec.encode(raw)
        case PseudonymPersonId():
            pass
    cleaned[postal_column] = generalize(row[postal_column] or "")
    return cleaned


class CleanPipeline(AbstractPipeline):
    """
    Clean one or more merged tables row by row.

    With `first_only` set, only the first row of each table is emitted. Older
    exports were produced that way; it is off by default.
    """

    name: str = "clean"
    description: str = "Pseudonymize raw ids and generalize postal codes in merged tables."

    def __init__(self, codec: PseudonymCodec, first_only: bool = False) -> None:
        self._codec = codec
        self.first_only = first_only

    def _check_schemas(self, sources: Sequence[Path]) -> list[str]:
        header: list[str] = []
        for path in sources:
            columns = read_header(path, required=[PERSON_ID_COLUMN])
            postal_column_for(columns, path)
            if not header:
                header = columns
            elif set(columns) != set(header):
                raise SchemaError(path, set(header) - set(columns), set(columns) - set(header))
        return header

    def run(self, sources: Sequence[Path], sink: CsvSink) -> PipelineResult:
        header = self._check_schemas(sources)
        if header:
            sink.open(header)

        rows_read = 0
        rows_written = 0
        for path in sources:
            log.info(f"Cleaning {path.name}", extra={"table": str(path)})
            with TableReader(path, required=[PERSON_ID_COLUMN]) as reader:
                postal_column = postal_column_for(reader.columns, path)
                for row in reader.rows():
                    rows_read += 1
                    sink.write(clean(row, self._codec, postal_column))
                    rows_written += 1
                    if self.first_only:
                        break

        return PipelineResult(
            tables=len(sources),
            rows_read=rows_read,
            rows_written=rows_written,
            rows_skipped=0,
            notes="first row of each table only" if self.first_only else None,
        )


__all__ = ["CleanPipeline", "POSTAL_COLUMNS", "clean", "postal_column_for"]
