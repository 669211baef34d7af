from __future__ import annotations

import io
from datetime import date, datetime

import pytest

from deidentify.domain.models import PERSON_COLUMNS, Person
from deidentify.errors import InvalidConfiguration, RowParseError, SchemaError
from deidentify.infrastructure.tables import (
    CsvSink,
    format_cell,
    iter_sources,
    open_sink,
    read_table,
)
from tests.conftest import make_person


def test_iter_sources_single_file(people_csv):
    assert iter_sources(people_csv) == [people_csv]


def test_iter_sources_sorts_and_skips_hidden(tmp_path):
    for name in ["c.csv", "a.csv", ".hidden.csv", "b.csv"]:
        (tmp_path / name).write_text("x\n", encoding="utf-8")
    (tmp_path / "nested").mkdir()

    assert [p.name for p in iter_sources(tmp_path)] == ["a.csv", "b.csv", "c.csv"]


def test_iter_sources_pattern(tmp_path):
    (tmp_path / "a.csv").write_text("x\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("x\n", encoding="utf-8")
    assert [p.name for p in iter_sources(tmp_path, "*.csv")] == ["a.csv"]


def test_iter_sources_missing_path(tmp_path):
    with pytest.raises(InvalidConfiguration):
        iter_sources(tmp_path / "nope")


def test_read_table_parses_models(people_csv):
    people = list(read_table(people_csv, Person))
    assert [p.id for p in people] == [1, 2, 3]
    assert people[1].birth_date is None


def test_read_table_rejects_missing_columns(tmp_path, write_csv):
    path = write_csv(tmp_path / "people.csv", ["id", "gender"], [{"id": 1, "gender": "F"}])
    with pytest.raises(SchemaError) as excinfo:
        list(read_table(path, Person))
    assert excinfo.value.missing == ["birth_date", "postal_code"]


def test_read_table_rejects_unparseable_field(tmp_path, write_csv):
    path = write_csv(tmp_path / "people.csv", PERSON_COLUMNS, [make_person("one")])
    with pytest.raises(RowParseError) as excinfo:
        list(read_table(path, Person))
    assert excinfo.value.line == 2
    assert "id" in excinfo.value.detail


def test_read_table_rejects_rows_with_extra_cells(tmp_path):
    path = tmp_path / "people.csv"
    path.write_text("id,birth_date,gender,postal_code\n1,,F,02138,surplus\n", encoding="utf-8")
    with pytest.raises(RowParseError):
        list(read_table(path, Person))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        (date(2019, 6, 1), "2019-06-01"),
        (datetime(2019, 5, 20, 14, 3, 59), "2019-05-20T14:03:59"),
        (12.5, "12.5"),
        (1990, "1990"),
        ("text", "text"),
    ],
)
def test_format_cell(value, expected):
    assert format_cell(value) == expected


def test_sink_writes_header_once_then_rows():
    out = io.StringIO()
    sink = CsvSink(out)
    sink.open(["a", "b"])
    sink.write({"a": 1, "b": None})
    sink.write({"b": "x, y", "a": 2})

    assert out.getvalue() == 'a,b\n1,\n2,"x, y"\n'
    assert sink.rows_written == 2
    with pytest.raises(RuntimeError):
        sink.open(["a"])


def test_sink_requires_header():
    with pytest.raises(RuntimeError):
        CsvSink(io.StringIO()).write({"a": 1})


def test_open_sink_unwritable_path(tmp_path):
    with pytest.raises(InvalidConfiguration):
        with open_sink(tmp_path / "missing-dir" / "out.csv"):
            pass


def test_open_sink_renames_into_place_on_success(tmp_path):
    out_path = tmp_path / "out.csv"
    with open_sink(out_path) as sink:
        sink.open(["a"])
        sink.write({"a": 1})
        assert not out_path.exists()

    assert out_path.read_text(encoding="utf-8") == "a\n1\n"
    assert list(tmp_path.iterdir()) == [out_path]


def test_open_sink_leaves_nothing_behind_on_error(tmp_path):
    out_path = tmp_path / "out.csv"
    with pytest.raises(SchemaError):
        with open_sink(out_path) as sink:
            sink.open(["a"])
            sink.write({"a": 1})
            raise SchemaError(tmp_path / "in.csv", ["id"])

    assert list(tmp_path.iterdir()) == []


def test_open_sink_keeps_existing_output_on_error(tmp_path):
    out_path = tmp_path / "out.csv"
    out_path.write_text("previous\n", encoding="utf-8")
    with pytest.raises(RowParseError):
        with open_sink(out_path) as sink:
            sink.open(["a"])
            raise RowParseError(tmp_path / "in.csv", 2, "bad row")

    assert out_path.read_text(encoding="utf-8") == "previous\n"
    assert list(tmp_path.iterdir()) == [out_path]
