"""
Pytest configuration for the de-identification tool.

Provides fixtures for:
- A codec built from a fixed test salt
- Writing small person/purchase/merged CSV tables into tmp_path
- Resetting cached settings between tests
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

import pytest

from deidentify.config import get_settings
from deidentify.domain.models import PERSON_COLUMNS, PURCHASE_COLUMNS
from deidentify.privacy.codec import PseudonymCodec

TEST_SALT = "test salt for de-identification"

WriteCsv = Callable[[Path, Sequence[str], Iterable[Dict[str, object]]], Path]


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """
    Clear cached settings and the salt env var around every test.
    """
    monkeypatch.delenv("DEID_SALT", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def salt() -> str:
    return TEST_SALT


@pytest.fixture(scope="session")
def codec(salt: str) -> PseudonymCodec:
    return PseudonymCodec(salt)


def _write_csv(path: Path, columns: Sequence[str], rows: Iterable[Dict[str, object]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(columns), lineterminator="\n")
        writer.writeheader()
        for row in rows:
            writer.writerow({column: row.get(column, "") for column in columns})
    return path


@pytest.fixture
def write_csv() -> WriteCsv:
    """Write rows (dicts, missing keys become blank cells) to a CSV table."""
    return _write_csv


def make_purchase(person_id: object, **overrides: object) -> Dict[str, object]:
    """A purchase row with plausible defaults for every column."""
    row: Dict[str, object] = {
        "person_id": person_id,
        "product_id": 7,
        "event_id": 301,
        "start": "2019-06-01",
        "end": "2019-06-02",
        "product": "Tournament Entry",
        "event": "Summer Open",
        "division": "Adult",
        "registration_status": "registered",
        "total_cost": "40.00",
        "total_paid": "40.00",
        "total_paid_refund": "0.00",
        "total_paid_waived": "0.00",
        "status": "complete",
        "processed_at": "2019-05-20 14:03:59",
        "quantity": 1,
    }
    row.update(overrides)
    return row


def make_person(id: object, **overrides: object) -> Dict[str, object]:
    row: Dict[str, object] = {
        "id": id,
        "birth_date": "1990-05-04",
        "gender": "F",
        "postal_code": "02138-1234",
    }
    row.update(overrides)
    return row


@pytest.fixture
def people_csv(tmp_path: Path, write_csv: WriteCsv) -> Path:
    """Person table: 1 (full), 2 (no birth date, restricted postal bucket), 3."""
    return write_csv(
        tmp_path / "people.csv",
        PERSON_COLUMNS,
        [
            make_person(1),
            make_person(2, birth_date="", gender="M", postal_code="03601"),
            make_person(3, birth_date="1975-12-31", gender="X", postal_code="941"),
        ],
    )


@pytest.fixture
def purchases_dir(tmp_path: Path, write_csv: WriteCsv) -> Path:
    """Two purchase tables; person 99 does not exist."""
    directory = tmp_path / "purchases"
    write_csv(
        directory / "a.csv",
        PURCHASE_COLUMNS,
        [make_purchase(1), make_purchase(99), make_purchase(2, event_id="", start="", end="")],
    )
    write_csv(directory / "b.csv", PURCHASE_COLUMNS, [make_purchase(3, quantity=2)])
    return directory


def read_csv(path: Path) -> List[Dict[str, str]]:
    with path.open("r", newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))
