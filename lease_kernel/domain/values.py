"""
Value objects for the lease domain.

Responsibility:
    Party identity and the closed vocabularies (lease type, currency) used
    on lease records.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - PartyId is compared by value only; it carries no other semantics.
    - UNSET_PARTY is the distinguished "not configured" identity that the
      governance collaborator addresses default to.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

UNSET_ADDRESS = "SP000000000000000000002Q6VF78"


@dataclass(frozen=True)
class PartyId:
    """
    Opaque party identifier.

    Contract:
        Wraps the host's principal string.  Equality and hashing are by
        value.  Construction rejects empty identifiers.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("PartyId requires a non-empty string")

    @property
    def is_unset(self) -> bool:
        """True for the sentinel "unset" address."""
        return self.value == UNSET_ADDRESS

    def __str__(self) -> str:
        return self.value


UNSET_PARTY = PartyId(UNSET_ADDRESS)


class LeaseType(str, Enum):
    """Allowed lease classifications."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    SHORT_TERM = "short-term"


class Currency(str, Enum):
    """Symbolic currency tags. No conversion logic is attached."""

    STX = "STX"
    USD = "USD"
    BTC = "BTC"


LEASE_TYPE_VALUES: frozenset[str] = frozenset(t.value for t in LeaseType)
CURRENCY_VALUES: frozenset[str] = frozenset(c.value for c in Currency)
