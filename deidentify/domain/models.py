"""
Domain models for the de-identification pipelines.

Person and Purchase mirror the columns of the input tables and do the field
parsing (blank optional cells, the fixed `processed_at` format, integer
ranges). Record is the de-identified output row. The person identifier of an
already-merged table is modelled as a two-variant union, RawPersonId or
PseudonymPersonId.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator

from deidentify.privacy.codec import INT64_MAX, INT64_MIN

UINT64_MAX = 2**64 - 1

PROCESSED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"

_INTEGER_LITERAL = re.compile(r"^[+-]?\d+$")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Person(BaseModel):
    """
    One row of the person reference table.
    """

    id: int = Field(..., ge=INT64_MIN, le=INT64_MAX, description="Person primary key.")
    birth_date: Optional[date] = Field(None, description="Birth date, absent when blank.")
    gender: str = Field(..., description="Free-text gender code.")
    postal_code: str = Field(..., description="Residential postal code.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @field_validator("birth_date", mode="before")
    @classmethod
    def blank_birth_date(cls, value: Any) -> Any:
        return _blank_to_none(value)


class Purchase(BaseModel):
    """
    One row of a transaction table.
    """

    person_id: int = Field(..., ge=INT64_MIN, le=INT64_MAX, description="Foreign key into Person.")
    product_id: int = Field(..., ge=0, le=UINT64_MAX)
    event_id: Optional[int] = Field(None, ge=0, le=UINT64_MAX)
    start: Optional[date] = None
    end: Optional[date] = None
    product: str
    event: str
    division: str
    registration_status: str
    total_cost: float
    total_paid: float
    total_paid_refund: float
    total_paid_waived: float
    status: str
    processed_at: datetime = Field(..., description="Parsed with PROCESSED_AT_FORMAT only.")
    quantity: int = Field(..., ge=0, le=UINT64_MAX)

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @field_validator("event_id", "start", "end", mode="before")
    @classmethod
    def blank_optionals(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("processed_at", mode="before")
    @classmethod
    def parse_processed_at(cls, value: Any) -> Any:
        if isinstance(value, str):
            return datetime.strptime(value, PROCESSED_AT_FORMAT)
        return value


class Record(BaseModel):
    """
    De-identified output row: a person's generalized attributes joined to a purchase.

    Field order is the output column order.
    """

    person_id: str = Field(..., description="Pseudonym of the person id.")
    gender: str
    birth_year: Optional[int] = None
    zcta: str = Field(..., description="Generalized 3-character postal bucket.")
    product_id: int
    product: str
    event_id: Optional[int] = None
    event: str
    start: Optional[date] = None
    end: Optional[date] = None
    division: str
    registration_status: str
    total_cost: float
    total_paid: float
    total_paid_refund: float
    total_paid_waived: float
    status: str
    processed_at: datetime
    quantity: int

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }


PERSON_COLUMNS = tuple(Person.model_fields)
PURCHASE_COLUMNS = tuple(Purchase.model_fields)
RECORD_COLUMNS = tuple(Record.model_fields)


@dataclass(frozen=True)
class RawPersonId:
    """A numeric person id that still needs pseudonymizing."""

    value: int


@dataclass(frozen=True)
class PseudonymPersonId:
    """A person id already in pseudonym form."""

    value: str


PersonId = Union[RawPersonId, PseudonymPersonId]


def parse_person_id(text: str) -> PersonId:
    """
    Classify a `person_id` cell from an already-merged table.

    Every integer literal is a raw id. Pseudonyms never contain digits, so
    they cannot be mistaken for one.
    """
    cell = text.strip()
    if _INTEGER_LITERAL.match(cell):
        return RawPersonId(int(cell))
    return PseudonymPersonId(text)


__all__ = [
    "PERSON_COLUMNS",
    "PROCESSED_AT_FORMAT",
    "PURCHASE_COLUMNS",
    "Person",
    "PersonId",
    "PseudonymPersonId",
    "Purchase",
    "RECORD_COLUMNS",
    "RawPersonId",
    "Record",
    "parse_person_id",
]
