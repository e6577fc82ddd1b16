"""
Lease service -- the lease state machine.

The LeaseService is responsible for:
- Validating every mutating lease request against the lease rules
- Applying the accepted transition to the registry store
- Allocating dense lease ids from the governance counter
- Requesting the creation fee transfer, exactly once per created lease

The LeaseService does NOT:
- Decide validity itself (that's ``domain.rules``)
- Produce logical time (that's the injected ``LogicalClock``)
- Move value (that's the injected ``FeeTransfer``)

Each operation reads the clock once, locks the rows it needs (governance
first, exclusive for creation and shared for collaborator checks, then the
lease), runs the rules on DTO snapshots, and only then writes.  A rejected
call returns a failed ``LeaseResult`` and leaves the store untouched.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from lease_kernel.domain.clock import LogicalClock
from lease_kernel.domain.collaborators import FeeTransfer
from lease_kernel.domain.lease import (
    GovernanceDefaults,
    LeaseState,
    LeaseTerms,
    can_transition,
)
from lease_kernel.domain.results import LeaseResult
from lease_kernel.domain.rules import (
    check_activate,
    check_create,
    check_end,
    check_file_dispute,
    check_integration,
    check_record_payment,
    check_renew,
    check_resolve_dispute,
    check_update,
    renewal_schedule,
)
from lease_kernel.domain.values import PartyId
from lease_kernel.exceptions import LeaseNotFoundError
from lease_kernel.logging_config import get_logger
from lease_kernel.models.lease import Lease, LeaseLocationEntry, LeaseUpdate
from lease_kernel.selectors.lease_selector import to_governance_info, to_lease_info
from lease_kernel.services.base import BaseService
from lease_kernel.services.governance_service import GovernanceService

logger = get_logger("services.lease")


class LeaseService(BaseService[Lease]):
    """
    Write side of the lease registry.

    Every public method takes the caller's ``PartyId`` first and returns a
    ``LeaseResult``.  All writes happen within the caller's transaction
    unless ``auto_commit`` is set.
    """

    _logger = logger

    def __init__(
        self,
        session: Session,
        clock: LogicalClock,
        fee_transfer: FeeTransfer,
        defaults: GovernanceDefaults | None = None,
        auto_commit: bool = False,
    ):
        """
        Args:
            session: SQLAlchemy session.
            clock: Source of logical time.
            fee_transfer: Collaborator that moves the creation fee.
            defaults: Governance values used if the record is bootstrapped
                by this service.
            auto_commit: Commit after each successful operation.
        """
        super().__init__(session, auto_commit=auto_commit)
        self._clock = clock
        self._fee_transfer = fee_transfer
        self._governance = GovernanceService(session, defaults)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_lease(self, lease_id: int) -> Lease:
        """Load a lease with a row lock, raising if it does not exist."""
        lease = self.session.execute(
            select(Lease)
            .where(Lease.id == lease_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if lease is None:
            raise LeaseNotFoundError(lease_id)
        return lease

    def _transition(self, lease: Lease, to_state: LeaseState) -> None:
        from_state = LeaseState(lease.state)
        # INVARIANT: every state write follows the lease workflow graph.
        assert can_transition(from_state, to_state), (
            f"Illegal lease transition {from_state.value} -> {to_state.value}"
        )
        lease.state = to_state.value
        if from_state != to_state:
            logger.info(
                "lease_state_changed",
                extra={"from_state": from_state.value, "to_state": to_state.value},
            )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_lease(self, caller: PartyId, terms: LeaseTerms) -> LeaseResult[int]:
        """
        Create a pending lease.

        Preconditions:
            ``caller`` is neither the landlord nor the tenant, and an
            authority is configured.

        Postconditions:
            - The returned id equals the counter before the call; the
              counter is incremented by exactly one.
            - The creation fee was transferred caller -> authority once.
            - The id is appended to the location index.

        Returns:
            LeaseResult with the new lease id, or the first violated rule
            (MAX_LEASES_EXCEEDED ... AUTHORITY_NOT_SET).
        """

        def _create() -> int:
            now = self._clock.now()
            config = self._governance.lock()
            check_create(
                terms,
                now=now,
                caller=caller,
                governance=to_governance_info(config),
            )

            lease_id = config.next_lease_id
            self.session.add(
                Lease(
                    id=lease_id,
                    landlord=terms.landlord,
                    tenant=terms.tenant,
                    duration=terms.duration,
                    rent_amount=terms.rent_amount,
                    deposit_amount=terms.deposit_amount,
                    grace_period=terms.grace_period,
                    start_time=terms.start_time,
                    lease_type=terms.lease_type,
                    penalty_rate=terms.penalty_rate,
                    max_renews=terms.max_renews,
                    termination_fee=terms.termination_fee,
                    renewal_threshold=terms.renewal_threshold,
                    location=terms.location,
                    currency=terms.currency,
                    state=LeaseState.PENDING.value,
                    last_payment_time=0,
                    end_time=None,
                    dispute_filed=False,
                    renew_count=0,
                )
            )
            self.session.flush()
            self.session.add(LeaseLocationEntry(location=terms.location, lease_id=lease_id))
            config.next_lease_id = lease_id + 1
            self.session.flush()

            # Value moves only once the lease, index row and counter are flushed.
            self._fee_transfer.transfer(
                config.creation_fee, caller, config.authority_address
            )

            logger.info(
                "lease_created",
                extra={
                    "new_lease_id": lease_id,
                    "location": terms.location,
                    "creation_fee": config.creation_fee,
                },
            )
            return lease_id

        return self._execute("create_lease", _create, caller=caller)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate_lease(self, caller: PartyId, lease_id: int) -> LeaseResult[bool]:
        """
        Tenant activates a pending lease once its start time is reached.

        Effect: active; last_payment_time <- now; end_time <- start + duration.
        """

        def _activate() -> bool:
            now = self._clock.now()
            lease = self._lock_lease(lease_id)
            check_activate(to_lease_info(lease), now=now, caller=caller)

            self._transition(lease, LeaseState.ACTIVE)
            lease.last_payment_time = now
            lease.end_time = lease.start_time + lease.duration
            self.session.flush()
            return True

        return self._execute("activate_lease", _activate, caller=caller, lease_id=lease_id)

    def end_lease(self, caller: PartyId, lease_id: int) -> LeaseResult[bool]:
        """
        Landlord or tenant ends an active lease after its nominal end.

        Effect: ended; end_time <- now (the actual end replaces the nominal one).
        """

        def _end() -> bool:
            now = self._clock.now()
            lease = self._lock_lease(lease_id)
            check_end(to_lease_info(lease), now=now, caller=caller)

            self._transition(lease, LeaseState.ENDED)
            lease.end_time = now
            self.session.flush()
            return True

        return self._execute("end_lease", _end, caller=caller, lease_id=lease_id)

    def file_dispute(self, caller: PartyId, lease_id: int) -> LeaseResult[bool]:
        """Landlord disputes an ended lease within its grace period."""

        def _file() -> bool:
            now = self._clock.now()
            lease = self._lock_lease(lease_id)
            check_file_dispute(to_lease_info(lease), now=now, caller=caller)

            self._transition(lease, LeaseState.DISPUTED)
            lease.dispute_filed = True
            self.session.flush()
            return True

        return self._execute("file_dispute", _file, caller=caller, lease_id=lease_id)

    def resolve_dispute(
        self, caller: PartyId, lease_id: int, outcome: str
    ) -> LeaseResult[bool]:
        """
        Arbiter settles a disputed lease.

        Args:
            outcome: ``"resolved-refund"`` or ``"resolved-deduct"``.
        """

        def _resolve() -> bool:
            config = self._governance.read_shared()
            lease = self._lock_lease(lease_id)
            resolved = check_resolve_dispute(
                to_lease_info(lease),
                outcome,
                caller=caller,
                governance=to_governance_info(config),
            )

            self._transition(lease, resolved)
            self.session.flush()
            return True

        return self._execute("resolve_dispute", _resolve, caller=caller, lease_id=lease_id)

    def renew_lease(self, caller: PartyId, lease_id: int) -> LeaseResult[bool]:
        """
        Tenant renews an active lease close to its end.

        Effect: duration doubles; end_time extends by the doubled duration;
        renew_count += 1.
        """

        def _renew() -> bool:
            now = self._clock.now()
            lease = self._lock_lease(lease_id)
            info = to_lease_info(lease)
            check_renew(info, now=now, caller=caller)

            lease.duration, lease.end_time = renewal_schedule(info)
            lease.renew_count = info.renew_count + 1
            self._transition(lease, LeaseState.ACTIVE)
            self.session.flush()
            logger.info(
                "lease_renewed",
                extra={
                    "duration": lease.duration,
                    "end_time": lease.end_time,
                    "renew_count": lease.renew_count,
                },
            )
            return True

        return self._execute("renew_lease", _renew, caller=caller, lease_id=lease_id)

    def update_lease(
        self,
        caller: PartyId,
        lease_id: int,
        new_duration: int,
        new_rent: int,
    ) -> LeaseResult[bool]:
        """
        Landlord amends duration and rent of a pending lease.

        The amendment snapshot replaces any earlier one for this lease.
        """

        def _update() -> bool:
            now = self._clock.now()
            lease = self._lock_lease(lease_id)
            check_update(to_lease_info(lease), new_duration, new_rent, caller=caller)

            lease.duration = new_duration
            lease.rent_amount = new_rent
            self._transition(lease, LeaseState.PENDING)

            update = self.session.get(LeaseUpdate, lease_id)
            if update is None:
                update = LeaseUpdate(lease_id=lease_id)
                self.session.add(update)
            update.update_duration = new_duration
            update.update_rent = new_rent
            update.update_timestamp = now
            update.updater = caller
            self.session.flush()
            return True

        return self._execute("update_lease", _update, caller=caller, lease_id=lease_id)

    def record_payment(
        self, caller: PartyId, lease_id: int, payment_time: int
    ) -> LeaseResult[bool]:
        """Payment collaborator records a rent payment at ``payment_time``."""

        def _record() -> bool:
            config = self._governance.read_shared()
            lease = self._lock_lease(lease_id)
            check_record_payment(
                to_lease_info(lease),
                payment_time,
                caller=caller,
                governance=to_governance_info(config),
            )

            lease.last_payment_time = payment_time
            self._transition(lease, LeaseState.ACTIVE)
            self.session.flush()
            return True

        return self._execute("record_payment", _record, caller=caller, lease_id=lease_id)

    # ------------------------------------------------------------------
    # Integration checkpoints
    # ------------------------------------------------------------------

    def integrate_with_escrow(self, caller: PartyId, lease_id: int) -> LeaseResult[bool]:
        """Succeeds iff the lease exists and the caller is the escrow address."""
        return self._integrate("escrow", caller, lease_id)

    def integrate_with_verifier(self, caller: PartyId, lease_id: int) -> LeaseResult[bool]:
        """Succeeds iff the lease exists and the caller is the verifier address."""
        return self._integrate("verifier", caller, lease_id)

    def _integrate(self, collaborator: str, caller: PartyId, lease_id: int) -> LeaseResult[bool]:
        def _check() -> bool:
            config = self._governance.read_shared()
            if self.session.get(Lease, lease_id) is None:
                raise LeaseNotFoundError(lease_id)
            expected = getattr(to_governance_info(config), f"{collaborator}_address")
            check_integration(caller, expected, collaborator)
            return True

        return self._execute(
            f"integrate_with_{collaborator}", _check, caller=caller, lease_id=lease_id
        )
