"""
Lease domain types (``lease_kernel.domain.lease``).

Responsibility
--------------
Pure value objects for the lease lifecycle: the state enumeration and
transition graph, the numeric limits on lease terms, the creation request,
and the immutable DTOs returned by services and selectors.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  May import only
from ``domain/values`` and ``domain/workflow``.

Invariants enforced
-------------------
* ``LEASE_TRANSITIONS`` is derived from ``LEASE_WORKFLOW`` and is the only
  graph a lease state may follow.
* Terminal states (the two dispute resolutions) have no outgoing edges.
* ``end_time`` is None exactly while a lease has never been active.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lease_kernel.domain.values import Currency, LeaseType, PartyId
from lease_kernel.domain.workflow import Guard, Transition, Workflow

# =========================================================================
# Limits
# =========================================================================

MAX_DURATION = 3650
MAX_GRACE_PERIOD = 30
MAX_PENALTY_RATE = 100
MAX_RENEWS_CAP = 10
MAX_RENEWAL_THRESHOLD = 100
MAX_LOCATION_LENGTH = 100


# =========================================================================
# Lease State Lifecycle
# =========================================================================


class LeaseState(str, Enum):
    """Lease lifecycle states."""

    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"
    DISPUTED = "disputed"
    RESOLVED_REFUND = "resolved-refund"
    RESOLVED_DEDUCT = "resolved-deduct"


RESOLUTION_OUTCOMES: frozenset[LeaseState] = frozenset({
    LeaseState.RESOLVED_REFUND,
    LeaseState.RESOLVED_DEDUCT,
})

TERMINAL_LEASE_STATES: frozenset[LeaseState] = RESOLUTION_OUTCOMES


LEASE_WORKFLOW = Workflow(
    name="lease",
    description="Rental agreement lifecycle from creation to dispute resolution",
    initial_state=LeaseState.PENDING.value,
    states=tuple(s.value for s in LeaseState),
    transitions=(
        Transition(
            from_state=LeaseState.PENDING.value,
            to_state=LeaseState.PENDING.value,
            action="update",
            actor="landlord",
        ),
        Transition(
            from_state=LeaseState.PENDING.value,
            to_state=LeaseState.ACTIVE.value,
            action="activate",
            actor="tenant",
            guard=Guard("start_reached", "current time >= start_time"),
        ),
        Transition(
            from_state=LeaseState.ACTIVE.value,
            to_state=LeaseState.ACTIVE.value,
            action="renew",
            actor="tenant",
            guard=Guard(
                "near_expiry",
                "renew_count < max_renews and end_time - now <= renewal_threshold",
            ),
        ),
        Transition(
            from_state=LeaseState.ACTIVE.value,
            to_state=LeaseState.ACTIVE.value,
            action="record_payment",
            actor="payment",
            guard=Guard("increasing", "payment_time > last_payment_time"),
        ),
        Transition(
            from_state=LeaseState.ACTIVE.value,
            to_state=LeaseState.ENDED.value,
            action="end",
            actor="landlord_or_tenant",
            guard=Guard("term_elapsed", "current time >= start_time + duration"),
        ),
        Transition(
            from_state=LeaseState.ENDED.value,
            to_state=LeaseState.DISPUTED.value,
            action="file_dispute",
            actor="landlord",
            guard=Guard("within_grace", "current time <= end_time + grace_period"),
        ),
        Transition(
            from_state=LeaseState.DISPUTED.value,
            to_state=LeaseState.RESOLVED_REFUND.value,
            action="resolve_dispute",
            actor="arbiter",
        ),
        Transition(
            from_state=LeaseState.DISPUTED.value,
            to_state=LeaseState.RESOLVED_DEDUCT.value,
            action="resolve_dispute",
            actor="arbiter",
        ),
    ),
    terminal_states=tuple(s.value for s in TERMINAL_LEASE_STATES),
)


LEASE_TRANSITIONS: dict[LeaseState, frozenset[LeaseState]] = {
    state: frozenset(LeaseState(s) for s in LEASE_WORKFLOW.successors(state.value))
    for state in LeaseState
}


def can_transition(from_state: LeaseState, to_state: LeaseState) -> bool:
    """True if the lease graph has an edge ``from_state -> to_state``."""
    return to_state in LEASE_TRANSITIONS[from_state]


# =========================================================================
# Requests and records
# =========================================================================


@dataclass(frozen=True)
class LeaseTerms:
    """Terms submitted to create a lease.

    Contract: unvalidated input.  ``lease_type`` and ``currency`` are raw
    tags so that unknown values reach the validation rules instead of
    failing at construction.
    """

    landlord: PartyId
    tenant: PartyId
    duration: int
    rent_amount: int
    deposit_amount: int
    grace_period: int
    start_time: int
    lease_type: str
    penalty_rate: int
    max_renews: int
    termination_fee: int
    renewal_threshold: int
    location: str
    currency: str


@dataclass(frozen=True)
class LeaseInfo:
    """
    Immutable DTO for a lease record.

    Pure domain object, no ORM dependencies.
    """

    lease_id: int
    landlord: PartyId
    tenant: PartyId
    duration: int
    rent_amount: int
    deposit_amount: int
    grace_period: int
    start_time: int
    state: LeaseState
    lease_type: LeaseType
    penalty_rate: int
    max_renews: int
    termination_fee: int
    renewal_threshold: int
    location: str
    currency: Currency
    last_payment_time: int
    end_time: int | None
    dispute_filed: bool
    renew_count: int

    @property
    def nominal_end(self) -> int:
        """Start time plus the current duration."""
        return self.start_time + self.duration

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_LEASE_STATES


@dataclass(frozen=True)
class LeaseUpdateInfo:
    """The most recent amendment of a pending lease."""

    lease_id: int
    update_duration: int
    update_rent: int
    update_timestamp: int
    updater: PartyId


@dataclass(frozen=True)
class GovernanceDefaults:
    """Values the governance record starts with."""

    max_leases: int = 10000
    creation_fee: int = 500


@dataclass(frozen=True)
class GovernanceInfo:
    """Snapshot of the process-wide governance configuration."""

    next_lease_id: int
    max_leases: int
    creation_fee: int
    authority_address: PartyId | None
    payment_address: PartyId
    escrow_address: PartyId
    verifier_address: PartyId
    arbiter_address: PartyId

    @property
    def has_authority(self) -> bool:
        return self.authority_address is not None
