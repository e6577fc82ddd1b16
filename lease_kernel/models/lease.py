"""
Module: lease_kernel.models.lease
Responsibility: ORM persistence for lease records, their latest amendment,
    and the location index.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.  MUST NOT import from services/, selectors/, or
    outer layers.

Invariants enforced:
    - Lease ids are allocated by the governance counter (autoincrement off),
      so they stay dense and are never reused.
    - One LeaseUpdate row per lease; an amendment overwrites it.
    - Location entries are insert-only; ordering by lease id reproduces
      creation order.

Failure modes:
    - IntegrityError on a duplicate lease id or a duplicate
      (location, lease_id) entry.  Either indicates a bypassed counter lock.
"""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from lease_kernel.db.base import TrackedBase
from lease_kernel.domain.values import PartyId


class Lease(TrackedBase):
    """
    One rental agreement and its lifecycle state.

    Contract:
        Only LeaseService writes these rows, and only after the lease rules
        accepted the request.  ``state`` holds a ``LeaseState`` value.

    Non-goals:
        - No ORM-level validation of term ranges; the lease rules own that.
    """

    __tablename__ = "leases"

    __table_args__ = (
        Index("idx_lease_state", "state"),
        Index("idx_lease_landlord", "landlord"),
        Index("idx_lease_tenant", "tenant"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)

    landlord: Mapped[PartyId] = mapped_column(nullable=False)
    tenant: Mapped[PartyId] = mapped_column(nullable=False)

    # Terms
    duration: Mapped[int] = mapped_column(nullable=False)
    rent_amount: Mapped[int] = mapped_column(nullable=False)
    deposit_amount: Mapped[int] = mapped_column(nullable=False)
    grace_period: Mapped[int] = mapped_column(nullable=False)
    start_time: Mapped[int] = mapped_column(nullable=False)
    lease_type: Mapped[str] = mapped_column(String(20), nullable=False)
    penalty_rate: Mapped[int] = mapped_column(nullable=False)
    max_renews: Mapped[int] = mapped_column(nullable=False)
    termination_fee: Mapped[int] = mapped_column(nullable=False)
    renewal_threshold: Mapped[int] = mapped_column(nullable=False)
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    # Lifecycle
    state: Mapped[str] = mapped_column(String(20), nullable=False)
    last_payment_time: Mapped[int] = mapped_column(nullable=False, default=0)
    end_time: Mapped[int | None] = mapped_column(nullable=True)
    dispute_filed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    renew_count: Mapped[int] = mapped_column(nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Lease {self.id}: {self.landlord} -> {self.tenant} ({self.state})>"


class LeaseUpdate(TrackedBase):
    """The most recent amendment of a pending lease."""

    __tablename__ = "lease_updates"

    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"),
        primary_key=True,
        autoincrement=False,
    )
    update_duration: Mapped[int] = mapped_column(nullable=False)
    update_rent: Mapped[int] = mapped_column(nullable=False)
    update_timestamp: Mapped[int] = mapped_column(nullable=False)
    updater: Mapped[PartyId] = mapped_column(nullable=False)


class LeaseLocationEntry(TrackedBase):
    """Location index entry: one row per lease, keyed by its location."""

    __tablename__ = "lease_locations"

    location: Mapped[str] = mapped_column(String(100), primary_key=True)
    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"),
        primary_key=True,
        autoincrement=False,
    )
