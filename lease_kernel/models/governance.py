"""
Module: lease_kernel.models.governance
Responsibility: ORM persistence for the process-wide governance record:
    the lease id counter, the capacity cap, the creation fee, the authority
    and the four collaborator addresses.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - Singleton: exactly one row, id == GOVERNANCE_ROW_ID.
    - authority_address is written at most once (enforced by the
      governance rules; the column itself is plain nullable).
    - next_lease_id only increases.
"""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from lease_kernel.db.base import TrackedBase
from lease_kernel.domain.values import UNSET_PARTY, PartyId

GOVERNANCE_ROW_ID = 1


class GovernanceConfig(TrackedBase):
    """Process-wide governance configuration."""

    __tablename__ = "governance_config"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        default=GOVERNANCE_ROW_ID,
    )

    next_lease_id: Mapped[int] = mapped_column(nullable=False, default=0)
    max_leases: Mapped[int] = mapped_column(nullable=False)
    creation_fee: Mapped[int] = mapped_column(nullable=False)

    authority_address: Mapped[PartyId | None] = mapped_column(nullable=True)
    payment_address: Mapped[PartyId] = mapped_column(nullable=False, default=UNSET_PARTY)
    escrow_address: Mapped[PartyId] = mapped_column(nullable=False, default=UNSET_PARTY)
    verifier_address: Mapped[PartyId] = mapped_column(nullable=False, default=UNSET_PARTY)
    arbiter_address: Mapped[PartyId] = mapped_column(nullable=False, default=UNSET_PARTY)

    def __repr__(self) -> str:
        return (
            f"<GovernanceConfig next={self.next_lease_id} "
            f"authority={self.authority_address}>"
        )
