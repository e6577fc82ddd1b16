"""
Lease rules -- pure validation for every mutating operation.

Responsibility:
    Decide whether a request against a lease (or against governance) is
    admissible, raising the typed error of the first violated clause.
    The order of checks inside each function is part of the contract:
    callers may depend on receiving the first applicable error.

Architecture position:
    Kernel > Domain -- pure functional core.  Operates on DTOs
    (``LeaseInfo``, ``GovernanceInfo``) and plain values.  ZERO I/O.

Failure modes:
    Each check raises a ``LeaseKernelError`` subclass; nothing is returned
    on failure and nothing is mutated.
"""

from __future__ import annotations

from lease_kernel.domain.lease import (
    MAX_DURATION,
    MAX_GRACE_PERIOD,
    MAX_LOCATION_LENGTH,
    MAX_PENALTY_RATE,
    MAX_RENEWAL_THRESHOLD,
    MAX_RENEWS_CAP,
    RESOLUTION_OUTCOMES,
    GovernanceInfo,
    LeaseInfo,
    LeaseState,
    LeaseTerms,
)
from lease_kernel.domain.values import CURRENCY_VALUES, LEASE_TYPE_VALUES, PartyId
from lease_kernel.exceptions import (
    AuthorityAlreadySetError,
    AuthorityNotSetError,
    DisputeAlreadyFiledError,
    IntegrationNotVerifiedError,
    InvalidCurrencyError,
    InvalidDepositError,
    InvalidDurationError,
    InvalidGracePeriodError,
    InvalidLeaseTypeError,
    InvalidLocationError,
    InvalidMaxRenewsError,
    InvalidParameterError,
    InvalidPartyError,
    InvalidPenaltyRateError,
    InvalidRenewalThresholdError,
    InvalidRentError,
    InvalidStartTimeError,
    InvalidStateError,
    InvalidStatusError,
    InvalidTerminationFeeError,
    LeaseExpiredError,
    MaxLeasesExceededError,
    NotAuthorizedError,
    UpdateNotAllowedError,
)


# =========================================================================
# Field checks
# =========================================================================


def check_duration(duration: int) -> None:
    if duration <= 0 or duration > MAX_DURATION:
        raise InvalidDurationError(duration)


def check_rent(rent_amount: int) -> None:
    if rent_amount <= 0:
        raise InvalidRentError(rent_amount)


def _require_state(lease: LeaseInfo, required: LeaseState) -> None:
    if lease.state != required:
        raise InvalidStateError(lease.lease_id, lease.state.value, required.value)


# =========================================================================
# Governance
# =========================================================================


def check_set_authority(candidate: PartyId, governance: GovernanceInfo) -> None:
    """Authority is write-once and never the sentinel."""
    if candidate.is_unset:
        raise NotAuthorizedError(str(candidate), "authority candidate")
    if governance.authority_address is not None:
        raise AuthorityAlreadySetError(str(governance.authority_address))


def check_set_creation_fee(fee: int, governance: GovernanceInfo) -> None:
    if not governance.has_authority:
        raise AuthorityNotSetError()
    if fee < 0:
        raise InvalidParameterError("creation_fee", fee)


def check_set_collaborator(
    address: PartyId, collaborator: str, governance: GovernanceInfo
) -> None:
    """Collaborator addresses need an authority and a real address."""
    if not governance.has_authority:
        raise AuthorityNotSetError()
    if address.is_unset:
        raise NotAuthorizedError(str(address), f"{collaborator} address")


# =========================================================================
# Creation
# =========================================================================


def check_create(
    terms: LeaseTerms,
    *,
    now: int,
    caller: PartyId,
    governance: GovernanceInfo,
) -> None:
    """
    Validate a creation request in the documented fail-fast order.

    Preconditions:
        ``governance`` is the locked, current governance snapshot.

    Raises:
        The error of the first violated clause, from
        ``MaxLeasesExceededError`` through ``AuthorityNotSetError``.
    """
    if governance.next_lease_id >= governance.max_leases:
        raise MaxLeasesExceededError(governance.max_leases)
    check_duration(terms.duration)
    check_rent(terms.rent_amount)
    if terms.deposit_amount < 0:
        raise InvalidDepositError(terms.deposit_amount)
    if terms.grace_period < 0 or terms.grace_period > MAX_GRACE_PERIOD:
        raise InvalidGracePeriodError(terms.grace_period)
    if terms.start_time < now:
        raise InvalidStartTimeError(terms.start_time)
    if terms.lease_type not in LEASE_TYPE_VALUES:
        raise InvalidLeaseTypeError(terms.lease_type)
    if terms.penalty_rate < 0 or terms.penalty_rate > MAX_PENALTY_RATE:
        raise InvalidPenaltyRateError(terms.penalty_rate)
    if terms.max_renews < 0 or terms.max_renews > MAX_RENEWS_CAP:
        raise InvalidMaxRenewsError(terms.max_renews)
    if terms.termination_fee < 0:
        raise InvalidTerminationFeeError(terms.termination_fee)
    if terms.renewal_threshold <= 0 or terms.renewal_threshold > MAX_RENEWAL_THRESHOLD:
        raise InvalidRenewalThresholdError(terms.renewal_threshold)
    if not terms.location or len(terms.location) > MAX_LOCATION_LENGTH:
        raise InvalidLocationError(terms.location)
    if terms.currency not in CURRENCY_VALUES:
        raise InvalidCurrencyError(terms.currency)
    # Creator must be a neutral third party.
    if caller == terms.landlord or caller == terms.tenant:
        raise InvalidPartyError(str(caller))
    if not governance.has_authority:
        raise AuthorityNotSetError()


# =========================================================================
# Lifecycle transitions
# =========================================================================


def check_activate(lease: LeaseInfo, *, now: int, caller: PartyId) -> None:
    _require_state(lease, LeaseState.PENDING)
    if caller != lease.tenant:
        raise NotAuthorizedError(str(caller), "tenant")
    if now < lease.start_time:
        raise InvalidStartTimeError(lease.start_time)


def check_end(lease: LeaseInfo, *, now: int, caller: PartyId) -> None:
    _require_state(lease, LeaseState.ACTIVE)
    if caller != lease.landlord and caller != lease.tenant:
        raise NotAuthorizedError(str(caller), "landlord or tenant")
    # LEASE_EXPIRED doubles as "term not yet elapsed" here.
    if now < lease.nominal_end:
        raise LeaseExpiredError(lease.lease_id, now, lease.nominal_end)


def check_file_dispute(lease: LeaseInfo, *, now: int, caller: PartyId) -> None:
    _require_state(lease, LeaseState.ENDED)
    if caller != lease.landlord:
        raise NotAuthorizedError(str(caller), "landlord")
    if lease.dispute_filed:
        raise DisputeAlreadyFiledError(lease.lease_id)
    if lease.end_time is None:
        raise InvalidStateError(lease.lease_id, lease.state.value, "a recorded end time")
    grace_end = lease.end_time + lease.grace_period
    if now > grace_end:
        raise LeaseExpiredError(lease.lease_id, now, grace_end)


def check_resolve_dispute(
    lease: LeaseInfo,
    outcome: str,
    *,
    caller: PartyId,
    governance: GovernanceInfo,
) -> LeaseState:
    """Validate a resolution and return the outcome as a ``LeaseState``."""
    _require_state(lease, LeaseState.DISPUTED)
    if caller != governance.arbiter_address:
        raise NotAuthorizedError(str(caller), "arbiter")
    try:
        resolved = LeaseState(outcome)
    except ValueError:
        raise InvalidStatusError(str(outcome)) from None
    if resolved not in RESOLUTION_OUTCOMES:
        raise InvalidStatusError(resolved.value)
    return resolved


def check_renew(lease: LeaseInfo, *, now: int, caller: PartyId) -> None:
    _require_state(lease, LeaseState.ACTIVE)
    if caller != lease.tenant:
        raise NotAuthorizedError(str(caller), "tenant")
    if lease.renew_count >= lease.max_renews:
        raise InvalidMaxRenewsError(lease.max_renews)
    if lease.end_time is None:
        raise InvalidStateError(lease.lease_id, lease.state.value, "a recorded end time")
    if lease.end_time - now > lease.renewal_threshold:
        raise InvalidRenewalThresholdError(lease.renewal_threshold)


def renewal_schedule(lease: LeaseInfo) -> tuple[int, int]:
    """
    Duration and end time after one renewal.

    The duration doubles and the end time extends by the *new* duration.
    """
    assert lease.end_time is not None
    new_duration = lease.duration * 2
    return new_duration, lease.end_time + new_duration


def check_update(
    lease: LeaseInfo,
    new_duration: int,
    new_rent: int,
    *,
    caller: PartyId,
) -> None:
    if lease.state != LeaseState.PENDING:
        raise UpdateNotAllowedError(lease.lease_id, lease.state.value)
    if caller != lease.landlord:
        raise NotAuthorizedError(str(caller), "landlord")
    check_duration(new_duration)
    check_rent(new_rent)


def check_record_payment(
    lease: LeaseInfo,
    payment_time: int,
    *,
    caller: PartyId,
    governance: GovernanceInfo,
) -> None:
    _require_state(lease, LeaseState.ACTIVE)
    if caller != governance.payment_address:
        raise NotAuthorizedError(str(caller), "payment address")
    if payment_time <= lease.last_payment_time:
        raise InvalidStartTimeError(payment_time)


def check_integration(caller: PartyId, expected: PartyId, collaborator: str) -> None:
    if caller != expected:
        raise IntegrationNotVerifiedError(str(caller), collaborator)
