"""
Lease selector -- the query surface of the registry store.

Read-only accessors with no authorization checks: look up a lease, count
leases, list the leases created at a location, and read the latest
amendment or the governance snapshot.
"""

from __future__ import annotations

from sqlalchemy import select

from lease_kernel.domain.lease import (
    GovernanceInfo,
    LeaseInfo,
    LeaseState,
    LeaseUpdateInfo,
)
from lease_kernel.domain.values import Currency, LeaseType
from lease_kernel.models.governance import GOVERNANCE_ROW_ID, GovernanceConfig
from lease_kernel.models.lease import Lease, LeaseLocationEntry, LeaseUpdate
from lease_kernel.selectors.base import BaseSelector


def to_lease_info(lease: Lease) -> LeaseInfo:
    """Convert an ORM Lease to a LeaseInfo DTO."""
    return LeaseInfo(
        lease_id=lease.id,
        landlord=lease.landlord,
        tenant=lease.tenant,
        duration=lease.duration,
        rent_amount=lease.rent_amount,
        deposit_amount=lease.deposit_amount,
        grace_period=lease.grace_period,
        start_time=lease.start_time,
        state=LeaseState(lease.state),
        lease_type=LeaseType(lease.lease_type),
        penalty_rate=lease.penalty_rate,
        max_renews=lease.max_renews,
        termination_fee=lease.termination_fee,
        renewal_threshold=lease.renewal_threshold,
        location=lease.location,
        currency=Currency(lease.currency),
        last_payment_time=lease.last_payment_time,
        end_time=lease.end_time,
        dispute_filed=lease.dispute_filed,
        renew_count=lease.renew_count,
    )


def to_lease_update_info(update: LeaseUpdate) -> LeaseUpdateInfo:
    return LeaseUpdateInfo(
        lease_id=update.lease_id,
        update_duration=update.update_duration,
        update_rent=update.update_rent,
        update_timestamp=update.update_timestamp,
        updater=update.updater,
    )


def to_governance_info(config: GovernanceConfig) -> GovernanceInfo:
    return GovernanceInfo(
        next_lease_id=config.next_lease_id,
        max_leases=config.max_leases,
        creation_fee=config.creation_fee,
        authority_address=config.authority_address,
        payment_address=config.payment_address,
        escrow_address=config.escrow_address,
        verifier_address=config.verifier_address,
        arbiter_address=config.arbiter_address,
    )


class LeaseSelector(BaseSelector[Lease]):
    """
    Read-only queries over leases and governance.

    Returns DTOs only; never ORM instances.
    """

    def get_lease(self, lease_id: int) -> LeaseInfo | None:
        """
        Get a lease by id.

        Returns:
            LeaseInfo DTO, or None when no lease has that id.
        """
        return self._get_as(Lease, lease_id, to_lease_info)

    def get_lease_count(self) -> int:
        """Number of leases ever created (the id counter)."""
        config = self.session.get(GovernanceConfig, GOVERNANCE_ROW_ID)
        return config.next_lease_id if config is not None else 0

    def get_leases_by_location(self, location: str) -> tuple[int, ...]:
        """
        Lease ids created at ``location``, in creation order.

        Returns:
            Tuple of lease ids; empty when none exist.
        """
        stmt = (
            select(LeaseLocationEntry.lease_id)
            .where(LeaseLocationEntry.location == location)
            .order_by(LeaseLocationEntry.lease_id)
        )
        return self._scalar_tuple(stmt)

    def get_lease_update(self, lease_id: int) -> LeaseUpdateInfo | None:
        """Latest amendment of a lease, or None if it was never amended."""
        return self._get_as(LeaseUpdate, lease_id, to_lease_update_info)

    def get_governance(self) -> GovernanceInfo | None:
        """Governance snapshot, or None before the record is initialized."""
        return self._get_as(GovernanceConfig, GOVERNANCE_ROW_ID, to_governance_info)
