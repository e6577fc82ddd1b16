"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from lease_kernel.domain.clock import (
    CallableClock,
    DeterministicClock,
    LogicalClock,
    SequentialClock,
)
from lease_kernel.domain.collaborators import (
    FeeTransfer,
    FeeTransferRecord,
    RecordingFeeTransfer,
)
from lease_kernel.domain.lease import (
    LEASE_TRANSITIONS,
    LEASE_WORKFLOW,
    RESOLUTION_OUTCOMES,
    TERMINAL_LEASE_STATES,
    GovernanceDefaults,
    GovernanceInfo,
    LeaseInfo,
    LeaseState,
    LeaseTerms,
    LeaseUpdateInfo,
    can_transition,
)
from lease_kernel.domain.results import LeaseResult
from lease_kernel.domain.values import (
    UNSET_ADDRESS,
    UNSET_PARTY,
    Currency,
    LeaseType,
    PartyId,
)
from lease_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    # Values
    "PartyId",
    "UNSET_ADDRESS",
    "UNSET_PARTY",
    "LeaseType",
    "Currency",
    # Lease lifecycle
    "LeaseState",
    "LEASE_TRANSITIONS",
    "LEASE_WORKFLOW",
    "RESOLUTION_OUTCOMES",
    "TERMINAL_LEASE_STATES",
    "can_transition",
    # DTOs
    "LeaseTerms",
    "LeaseInfo",
    "LeaseUpdateInfo",
    "GovernanceDefaults",
    "GovernanceInfo",
    "LeaseResult",
    # Clock
    "LogicalClock",
    "CallableClock",
    "DeterministicClock",
    "SequentialClock",
    # Collaborators
    "FeeTransfer",
    "FeeTransferRecord",
    "RecordingFeeTransfer",
    # Workflow
    "Guard",
    "Transition",
    "Workflow",
]
