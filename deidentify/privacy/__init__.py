"""
Privacy primitives shared by both pipelines.

Exports the pseudonym codec and the postal code generalizer. Keep this package
free of I/O so both primitives stay pure.
"""

from deidentify.privacy.codec import PseudonymCodec, initialize
from deidentify.privacy.generalizer import NULL_ZCTA, RESTRICTED_ZCTAS, generalize

__all__ = [
    "NULL_ZCTA",
    "PseudonymCodec",
    "RESTRICTED_ZCTAS",
    "generalize",
    "initialize",
]
