"""
Join pipeline (Mode A): augment purchases with de-identified person attributes.

The person table is loaded once into a read-only lookup keyed by id. Purchase
tables are then streamed row by row; each purchase is joined to its person,
whose id is replaced by a pseudonym and whose postal code is generalized.
Purchases referencing an unknown person are logged and skipped.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from deidentify.domain.models import PURCHASE_COLUMNS, RECORD_COLUMNS, Person, Purchase, Record
from deidentify.errors import DuplicatePersonError, MissingPersonError
from deidentify.infrastructure.tables import CsvSink, check_headers, read_table, read_tables
from deidentify.pipelines.abstract import AbstractPipeline, PipelineResult
from deidentify.privacy.codec import PseudonymCodec
from deidentify.privacy.generalizer import generalize
from deidentify.utils.logging import get_logger

log = get_logger(__name__)

Lookup = Mapping[int, Person]


def build_lookup(people: Iterable[Person], reject_duplicates: bool = False) -> Lookup:
    """
    Index people by id.

    Duplicate ids keep the last row seen and log a warning, unless
    `reject_duplicates` is set, in which case the first duplicate raises
    DuplicatePersonError.
    """
    index: dict[int, Person] = {}
    for person in people:
        if person.id in index:
            if reject_duplicates:
                raise DuplicatePersonError(person.id)
            log.warning(
                f"duplicate person with id: {person.id}; keeping the last row",
                extra={"person_id": person.id},
            )
        index[person.id] = person
    return MappingProxyType(index)


def load_people(path: Path | str, reject_duplicates: bool = False) -> Lookup:
    """Read the whole person table into a lookup."""
    lookup = build_lookup(read_table(path, Person), reject_duplicates=reject_duplicates)
    log.info(f"Loaded {len(lookup)} people", extra={"people": len(lookup), "table": str(path)})
    return lookup


def augment(purchase: Purchase, lookup: Lookup, codec: PseudonymCodec) -> Record:
    """
    Join one purchase to its person and de-identify the result.

    Raises
    ------
    MissingPersonError
        If `purchase.person_id` is not in the lookup.
    """
    person = lookup.get(purchase.person_id)
    if person is None:
        raise MissingPersonError(purchase.person_id)
    return Record(
        person_id=codec.encode(person.id),
        gender=person.gender,
        birth_year=person.birth_date.year if person.birth_date else None,
        zcta=generalize(person.postal_code),
        product_id=purchase.product_id,
        product=purchase.product,
        event_id=purchase.event_id,
        event=purchase.event,
        start=purchase.start,
        end=purchase.end,
        division=purchase.division,
        registration_status=purchase.registration_status,
        total_cost=purchase.total_cost,
        total_paid=purchase.total_paid,
        total_paid_refund=purchase.total_paid_refund,
        total_paid_waived=purchase.total_paid_waived,
        status=purchase.status,
        processed_at=purchase.processed_at,
        quantity=purchase.quantity,
    )


class JoinPipeline(AbstractPipeline):
    """
    Stream purchase tables, joining each row to the person lookup.
    """

    name: str = "join"
    description: str = "Join purchases to people; pseudonymize ids and generalize postal codes."

    def __init__(self, lookup: Lookup, codec: PseudonymCodec) -> None:
        self._lookup = lookup
        self._codec = codec

    @classmethod
    def from_people(
        cls, people: Iterable[Person], codec: PseudonymCodec, reject_duplicates: bool = False
    ) -> "JoinPipeline":
        return cls(build_lookup(people, reject_duplicates=reject_duplicates), codec)

    def run(self, sources: Sequence[Path], sink: CsvSink) -> PipelineResult:
        check_headers(sources, PURCHASE_COLUMNS)
        sink.open(RECORD_COLUMNS)

        rows_read = 0
        rows_skipped = 0
        for purchase in read_tables(sources, Purchase):
            rows_read += 1
            try:
                record = augment(purchase, self._lookup, self._codec)
            except MissingPersonError as err:
                rows_skipped += 1
                log.warning(f"skipping purchase: {err}", extra={"person_id": err.id})
                continue
            sink.write(record)

        return PipelineResult(
            tables=len(sources),
            rows_read=rows_read,
            rows_written=rows_read - rows_skipped,
            rows_skipped=rows_skipped,
            notes=f"{len(self._lookup)} people in lookup.",
        )


__all__ = ["JoinPipeline", "Lookup", "augment", "build_lookup", "load_people"]
