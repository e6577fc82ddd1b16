"""
Collaborator interfaces the kernel calls into.

The kernel never moves value itself.  On every successful lease creation it
asks a ``FeeTransfer`` to move the creation fee from the creator to the
governance authority, exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from lease_kernel.domain.values import PartyId


class FeeTransfer(Protocol):
    """Pluggable interface for the host's value transfer."""

    def transfer(self, amount: int, sender: PartyId, recipient: PartyId) -> None:
        """Move ``amount`` from ``sender`` to ``recipient``."""
        ...


@dataclass(frozen=True)
class FeeTransferRecord:
    amount: int
    sender: PartyId
    recipient: PartyId


@dataclass
class RecordingFeeTransfer:
    """
    In-process fee transfer that only records what was requested.

    Used by hosts that settle fees out of band, and by tests.
    """

    transfers: list[FeeTransferRecord] = field(default_factory=list)

    def transfer(self, amount: int, sender: PartyId, recipient: PartyId) -> None:
        self.transfers.append(FeeTransferRecord(amount, sender, recipient))

    @property
    def total(self) -> int:
        return sum(t.amount for t in self.transfers)
