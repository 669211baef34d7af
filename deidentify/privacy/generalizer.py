"""
Postal code generalization into 3-character geographic buckets.

Buckets whose population is too small to report safely are replaced with
NULL_ZCTA.
"""

from __future__ import annotations

RESTRICTED_ZCTAS: frozenset[str] = frozenset(
    {
        "036", "692", "878", "059", "790", "879", "063", "821", "884",
        "102", "823", "890", "203", "830", "893", "556", "831",
    }
)  # fmt: skip

NULL_ZCTA = "000"

ZCTA_LENGTH = 3


def generalize(postal_code: str) -> str:
    """
    Reduce a postal code to its 3-character bucket.

    Shorter inputs are kept whole, without padding. Restricted buckets map to
    NULL_ZCTA. Applying this twice gives the same result as applying it once.
    """
    zcta = postal_code[:ZCTA_LENGTH]
    if zcta in RESTRICTED_ZCTAS:
        return NULL_ZCTA
    return zcta


__all__ = ["NULL_ZCTA", "RESTRICTED_ZCTAS", "generalize"]
