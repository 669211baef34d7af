"""
Reversible, salt-keyed pseudonyms for person identifiers.

Pseudonyms use the hashids scheme: anyone holding the salt can decode them back
to the original id, recipients without it cannot. This is a keyed encoding,
not a one-way hash.

Usage:
    from deidentify.privacy.codec import PseudonymCodec

    codec = PseudonymCodec("my salt")
    token = codec.encode(42)
    assert codec.decode(token) == 42
"""

from __future__ import annotations

from hashids import Hashids

from deidentify.errors import InvalidConfiguration, InvalidIdentifier, InvalidPseudonym

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Negative ids are encoded as the pair (NEGATIVE_TAG, -id).
NEGATIVE_TAG = 1

# Letters only, so no pseudonym can be read back as an integer id.
ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


class PseudonymCodec:
    """
    Deterministic mapping from signed 64-bit ids to printable pseudonyms.

    Non-negative ids encode exactly as a single-number hashid. Negative ids
    encode as a two-number hashid, so the two halves of the domain never
    collide.
    """

    def __init__(self, salt: str) -> None:
        if not isinstance(salt, str) or not salt.strip():
            raise InvalidConfiguration("salt must be a non-empty string")
        try:
            self._hashids = Hashids(salt=salt, alphabet=ALPHABET)
        except ValueError as exc:
            raise InvalidConfiguration(f"salt rejected by encoder: {exc}") from exc

    def encode(self, id: int) -> str:
        if isinstance(id, bool) or not isinstance(id, int):
            raise InvalidIdentifier(id)
        if not INT64_MIN <= id <= INT64_MAX:
            raise InvalidIdentifier(id)
        if id < 0:
            return self._hashids.encode(NEGATIVE_TAG, -id)
        return self._hashids.encode(id)

    def decode(self, pseudonym: str) -> int:
        """
        Recover the id behind a pseudonym.

        Raises
        ------
        InvalidPseudonym
            If the string is not the encoding of any id under this salt.
        """
        numbers = self._hashids.decode(pseudonym) if pseudonym else ()
        if len(numbers) == 1 and numbers[0] <= INT64_MAX:
            return numbers[0]
        if len(numbers) == 2 and numbers[0] == NEGATIVE_TAG and 0 < numbers[1] <= -INT64_MIN:
            return -numbers[1]
        raise InvalidPseudonym(pseudonym)

    def is_pseudonym(self, text: str) -> bool:
        try:
            self.decode(text)
        except InvalidPseudonym:
            return False
        return True


def initialize(salt: str) -> PseudonymCodec:
    """Build a codec for the given salt, rejecting empty salts."""
    return PseudonymCodec(salt)


__all__ = ["ALPHABET", "INT64_MAX", "INT64_MIN", "PseudonymCodec", "initialize"]
