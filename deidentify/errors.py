"""
Error taxonomy for the de-identification pipelines.

Errors fall into two groups:
- Fatal: startup problems (salt, paths, table schema) and rows that fail to
  parse. These unwind to the CLI and end the run with a non-zero status.
- Recoverable: a purchase referencing an unknown person. Handled per row
  inside the join pipeline and never raised past it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional


class DeidentifyError(Exception):
    """Base class for all errors raised by this package."""

    fatal: bool = True


class InvalidConfiguration(DeidentifyError):
    """Salt, paths or settings rejected at startup."""


class SchemaError(DeidentifyError):
    """A table header is missing required columns."""

    def __init__(self, source: Path | str, missing: Iterable[str], unexpected: Iterable[str] = ()) -> None:
        self.source = str(source)
        self.missing = sorted(missing)
        self.unexpected = sorted(unexpected)
        problems = []
        if self.missing:
            problems.append(f"missing required columns: {', '.join(self.missing)}")
        if self.unexpected:
            problems.append(f"unexpected columns: {', '.join(self.unexpected)}")
        super().__init__(f"{self.source}: {'; '.join(problems)}")


class DuplicatePersonError(DeidentifyError):
    """The person table contains the same id more than once."""

    def __init__(self, id: int) -> None:
        self.id = id
        super().__init__(f"duplicate person with id: {id}")


class RowParseError(DeidentifyError):
    """A row field does not parse under its expected type or format."""

    def __init__(self, source: Path | str, line: Optional[int], detail: str) -> None:
        self.source = str(source)
        self.line = line
        self.detail = detail
        where = f"{self.source}:{line}" if line is not None else self.source
        super().__init__(f"{where}: {detail}")


class InvalidIdentifier(DeidentifyError):
    """A person id outside the signed 64-bit range."""

    def __init__(self, id: int) -> None:
        self.id = id
        super().__init__(f"person id out of signed 64-bit range: {id}")


class InvalidPseudonym(DeidentifyError):
    """A string that does not decode under the active salt."""

    def __init__(self, pseudonym: str) -> None:
        self.pseudonym = pseudonym
        super().__init__(f"not a pseudonym under this salt: {pseudonym!r}")


class MissingPersonError(DeidentifyError):
    """A purchase whose person_id has no match in the person table."""

    fatal = False

    def __init__(self, id: int) -> None:
        self.id = id
        super().__init__(f"missing person with id: {id}")


__all__ = [
    "DeidentifyError",
    "DuplicatePersonError",
    "InvalidConfiguration",
    "InvalidIdentifier",
    "InvalidPseudonym",
    "MissingPersonError",
    "RowParseError",
    "SchemaError",
]
