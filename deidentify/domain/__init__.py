"""
Domain package for the de-identification pipelines.

Exports the row models and the person identifier union. Keep this package
focused on data definitions and validation concerns.
"""

from deidentify.domain.models import (
    PersonId,
    Person,
    PseudonymPersonId,
    Purchase,
    RawPersonId,
    Record,
    parse_person_id,
)

__all__ = [
    "Person",
    "PersonId",
    "PseudonymPersonId",
    "Purchase",
    "RawPersonId",
    "Record",
    "parse_person_id",
]
