"""
CSV table access for the de-identification pipelines.

Provides source enumeration (a single file or a directory of tables), lazy
row readers that validate headers and parse rows into domain models, and a
streaming CSV sink. Keep this layer focused on I/O; pipelines never touch
file handles directly.
"""

from __future__ import annotations

import csv
import sys
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import (
    IO,
    Any,
    Dict,
    Generator,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)

from pydantic import BaseModel, ValidationError

from deidentify.errors import InvalidConfiguration, RowParseError, SchemaError
from deidentify.utils.logging import get_logger

log = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def iter_sources(path: Path | str, pattern: str = "*") -> List[Path]:
    """
    Resolve a table location into the list of tables to read.

    A file is returned as-is. A directory yields its regular, non-hidden files
    matching `pattern`, sorted by name so runs are reproducible.
    """
    location = Path(path)
    if location.is_file():
        return [location]
    if not location.is_dir():
        raise InvalidConfiguration(f"no such file or directory: {location}")
    sources = sorted(
        entry
        for entry in location.glob(pattern)
        if entry.is_file() and not entry.name.startswith(".")
    )
    log.debug("Resolved table sources", extra={"location": str(location), "tables": len(sources)})
    return sources


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "row"
        parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts)


class TableReader:
    """
    Lazy reader over one CSV table.

    The header is read and checked on open; rows are read one at a time.
    """

    def __init__(self, path: Path | str, required: Iterable[str] = ()) -> None:
        self.path = Path(path)
        self._required = tuple(required)
        self._handle: Optional[IO[str]] = None
        self._reader: Optional[csv.DictReader] = None

    def __enter__(self) -> "TableReader":
        try:
            self._handle = self.path.open("r", newline="", encoding="utf-8")
        except OSError as exc:
            raise InvalidConfiguration(f"cannot read table {self.path}: {exc.strerror}") from exc
        self._reader = csv.DictReader(self._handle)
        missing = set(self._required) - set(self.columns)
        if missing:
            self.close()
            raise SchemaError(self.path, missing)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    @property
    def columns(self) -> List[str]:
        assert self._reader is not None, "reader is not open"
        return list(self._reader.fieldnames or [])

    @property
    def line_num(self) -> int:
        assert self._reader is not None, "reader is not open"
        return self._reader.line_num

    def rows(self) -> Iterator[Dict[str, str]]:
        assert self._reader is not None, "reader is not open"
        for row in self._reader:
            if None in row:
                raise RowParseError(self.path, self.line_num, "row has more cells than the header")
            yield row

    def models(self, model: Type[ModelT]) -> Iterator[ModelT]:
        """Parse each row into `model`; the first bad row aborts the read."""
        for row in self.rows():
            try:
                parsed = model.model_validate(row)
            except ValidationError as exc:
                raise RowParseError(self.path, self.line_num, _format_validation_error(exc)) from exc
            yield parsed


def read_header(path: Path | str, required: Iterable[str] = ()) -> List[str]:
    """Open a table just long enough to read and check its header."""
    with TableReader(path, required=required) as reader:
        return reader.columns


def check_headers(paths: Iterable[Path], required: Iterable[str]) -> None:
    """Fail with SchemaError before any row is processed if a table lacks columns."""
    columns = tuple(required)
    for path in paths:
        read_header(path, columns)


def read_table(path: Path | str, model: Type[ModelT]) -> Iterator[ModelT]:
    """Stream one table as parsed models, checking its header against the model fields."""
    with TableReader(path, required=model.model_fields) as reader:
        yield from reader.models(model)


def read_tables(paths: Sequence[Path], model: Type[ModelT]) -> Iterator[ModelT]:
    """Stream several tables one after another, in the given order."""
    for path in paths:
        log.info(f"Reading {path.name}", extra={"table": str(path)})
        yield from read_table(path, model)


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class CsvSink:
    """
    Incremental CSV writer.

    The header is written once by `open`; each `write` emits one row and
    nothing is buffered beyond the underlying stream.
    """

    def __init__(self, stream: IO[str]) -> None:
        self._stream = stream
        self._writer = csv.writer(stream, lineterminator="\n")
        self.columns: Optional[Tuple[str, ...]] = None
        self.rows_written = 0

    @property
    def is_open(self) -> bool:
        return self.columns is not None

    def open(self, columns: Sequence[str]) -> None:
        if self.columns is not None:
            raise RuntimeError("sink header already written")
        self.columns = tuple(columns)
        self._writer.writerow(self.columns)

    def write(self, row: BaseModel | Dict[str, Any]) -> None:
        if self.columns is None:
            raise RuntimeError("sink header not written")
        values = row.model_dump() if isinstance(row, BaseModel) else row
        self._writer.writerow([format_cell(values.get(column)) for column in self.columns])
        self.rows_written += 1

    def flush(self) -> None:
        self._stream.flush()


@contextmanager
def open_sink(path: Optional[Path | str] = None) -> Generator[CsvSink, None, None]:
    """
    Open a CSV sink on `path`, or on stdout when no path is given.

    File output goes to a hidden partial file next to `path` and is renamed
    into place only when the block completes. On error the partial file is
    removed and any existing file at `path` is left untouched.
    """
    if path is None:
        sink = CsvSink(sys.stdout)
        try:
            yield sink
        finally:
            sink.flush()
        return

    target = Path(path)
    partial = target.with_name(f".{target.name}.partial")
    try:
        handle = partial.open("w", newline="", encoding="utf-8")
    except OSError as exc:
        raise InvalidConfiguration(f"cannot write output {target}: {exc.strerror}") from exc
    try:
        with handle:
            yield CsvSink(handle)
    except BaseException:
        partial.unlink(missing_ok=True)
        log.debug("Discarded partial output", extra={"output": str(target)})
        raise
    partial.replace(target)


__all__ = [
    "CsvSink",
    "TableReader",
    "check_headers",
    "format_cell",
    "iter_sources",
    "open_sink",
    "read_header",
    "read_table",
    "read_tables",
]
