"""
Infrastructure package for the de-identification tool.

Centralizes table I/O concerns (source enumeration, CSV readers, the output
sink). Keep this layer focused on I/O and resource management, decoupled from
pipeline logic.
"""

from deidentify.infrastructure.tables import (
    CsvSink,
    TableReader,
    check_headers,
    iter_sources,
    open_sink,
    read_header,
    read_table,
    read_tables,
)

__all__ = [
    "CsvSink",
    "TableReader",
    "check_headers",
    "iter_sources",
    "open_sink",
    "read_header",
    "read_table",
    "read_tables",
]
