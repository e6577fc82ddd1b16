"""
Tests for LeaseService.

Covers:
- Creation: id allocation, fee transfer, location index, validation order
- The reference lifecycle: create -> activate -> end -> dispute -> resolve
- Renewal, amendment and payment recording
- Integration checkpoints
- Not-found handling and no-partial-write on rejection
"""

import pytest
from sqlalchemy.exc import IntegrityError

from lease_kernel.domain.clock import SequentialClock
from lease_kernel.domain.collaborators import FeeTransferRecord
from lease_kernel.domain.lease import GovernanceDefaults, LeaseState
from lease_kernel.domain.values import Currency, LeaseType
from lease_kernel.services.governance_service import GovernanceService
from lease_kernel.services.lease_service import LeaseService
from tests.conftest import (
    ARBITER,
    AUTHORITY,
    CREATOR,
    ESCROW,
    LANDLORD,
    PAYMENT,
    STRANGER,
    TENANT,
    VERIFIER,
    make_terms,
)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestCreateLease:
    """Lease creation."""

    def test_reference_lease(self, configured_governance, lease_service, selector, fees):
        result = lease_service.create_lease(CREATOR, make_terms())

        assert result.ok
        assert result.value == 0
        lease = selector.get_lease(0)
        assert lease.state == LeaseState.PENDING
        assert lease.lease_type == LeaseType.RESIDENTIAL
        assert lease.currency == Currency.STX
        assert lease.last_payment_time == 0
        assert lease.end_time is None
        assert lease.dispute_filed is False
        assert lease.renew_count == 0
        assert fees.transfers == [FeeTransferRecord(500, CREATOR, AUTHORITY)]

    def test_ids_dense_from_counter(self, configured_governance, lease_service, selector):
        for expected in range(3):
            before = selector.get_lease_count()
            result = lease_service.create_lease(CREATOR, make_terms())
            assert result.value == before == expected
            assert selector.get_lease_count() == before + 1

    def test_location_index_in_creation_order(
        self, configured_governance, lease_service, selector
    ):
        lease_service.create_lease(CREATOR, make_terms(location="CityA"))
        lease_service.create_lease(CREATOR, make_terms(location="CityB"))
        lease_service.create_lease(CREATOR, make_terms(location="CityA"))

        assert selector.get_leases_by_location("CityA") == (0, 2)
        assert selector.get_leases_by_location("CityB") == (1,)
        assert selector.get_leases_by_location("Nowhere") == ()

    def test_current_fee_charged(self, configured_governance, lease_service, fees):
        configured_governance.set_creation_fee(75)
        lease_service.create_lease(CREATOR, make_terms())
        assert fees.total == 75

    @pytest.mark.parametrize("caller", [LANDLORD, TENANT])
    def test_self_dealing(self, configured_governance, lease_service, selector, fees, caller):
        result = lease_service.create_lease(caller, make_terms())
        assert result.error_code == "INVALID_PARTY"
        assert result.error_number == 122
        assert selector.get_lease_count() == 0
        assert fees.transfers == []

    def test_authority_not_set(self, lease_service, selector, fees):
        result = lease_service.create_lease(CREATOR, make_terms())
        assert result.error_code == "AUTHORITY_NOT_SET"
        assert selector.get_lease_count() == 0
        assert fees.transfers == []

    def test_start_time_in_past(self, configured_governance, lease_service, clock):
        clock.set_time(11)
        result = lease_service.create_lease(CREATOR, make_terms())
        assert result.error_code == "INVALID_START_TIME"
        assert result.error_number == 108

    def test_capacity(self, session, clock, fees, selector):
        defaults = GovernanceDefaults(max_leases=1)
        GovernanceService(session, defaults).set_authority(AUTHORITY)
        service = LeaseService(session, clock, fees, defaults)

        assert service.create_lease(CREATOR, make_terms()).ok
        result = service.create_lease(CREATOR, make_terms())
        assert result.error_code == "MAX_LEASES_EXCEEDED"
        assert result.error_number == 114
        assert selector.get_lease_count() == 1
        assert len(fees.transfers) == 1

    def test_first_violation_reported(self, configured_governance, lease_service):
        result = lease_service.create_lease(
            LANDLORD, make_terms(rent_amount=0, currency="EUR")
        )
        assert result.error_code == "INVALID_RENT"

    def test_fee_moves_after_lease_stored(
        self, configured_governance, session, clock, selector
    ):
        seen = []

        class _Inspecting:
            def transfer(self, amount, sender, recipient):
                seen.append((selector.get_lease_count(), selector.get_lease(0) is not None))

        LeaseService(session, clock, _Inspecting()).create_lease(CREATOR, make_terms())
        assert seen == [(1, True)]

    def test_store_conflict_moves_no_fee(
        self, configured_governance, lease_service, session, fees
    ):
        assert lease_service.create_lease(CREATOR, make_terms()).ok
        session.expunge_all()
        # Rewind the counter so the next id collides with lease 0.
        configured_governance.lock().next_lease_id = 0
        session.flush()

        with pytest.raises(IntegrityError):
            lease_service.create_lease(CREATOR, make_terms())
        assert len(fees.transfers) == 1


# ---------------------------------------------------------------------------
# Reference lifecycle
# ---------------------------------------------------------------------------


class TestActivateLease:

    def test_activate_at_start(self, pending_lease, lease_service, selector, clock):
        clock.set_time(10)
        assert lease_service.activate_lease(TENANT, pending_lease).ok
        lease = selector.get_lease(pending_lease)
        assert lease.state == LeaseState.ACTIVE
        assert lease.last_payment_time == 10
        assert lease.end_time == 375

    def test_too_early(self, pending_lease, lease_service, selector, clock):
        clock.set_time(9)
        result = lease_service.activate_lease(TENANT, pending_lease)
        assert result.error_code == "INVALID_START_TIME"
        assert selector.get_lease(pending_lease).state == LeaseState.PENDING

    def test_landlord_cannot_activate(self, pending_lease, lease_service, clock):
        clock.set_time(10)
        result = lease_service.activate_lease(LANDLORD, pending_lease)
        assert result.error_code == "NOT_AUTHORIZED"

    def test_twice(self, active_lease, lease_service):
        result = lease_service.activate_lease(TENANT, active_lease)
        assert result.error_code == "INVALID_STATE"
        assert result.error_number == 105


class TestEndLease:

    def test_end_at_nominal_end(self, active_lease, lease_service, selector, clock):
        clock.set_time(375)
        assert lease_service.end_lease(TENANT, active_lease).ok
        lease = selector.get_lease(active_lease)
        assert lease.state == LeaseState.ENDED
        assert lease.end_time == 375

    def test_late_end_records_actual_time(self, active_lease, lease_service, selector, clock):
        clock.set_time(400)
        assert lease_service.end_lease(LANDLORD, active_lease).ok
        assert selector.get_lease(active_lease).end_time == 400

    def test_too_early_is_lease_expired(self, active_lease, lease_service, selector, clock):
        clock.set_time(300)
        result = lease_service.end_lease(LANDLORD, active_lease)
        assert result.error_code == "LEASE_EXPIRED"
        assert result.error_number == 123
        assert selector.get_lease(active_lease).state == LeaseState.ACTIVE

    def test_stranger(self, active_lease, lease_service, clock):
        clock.set_time(375)
        assert lease_service.end_lease(STRANGER, active_lease).error_code == "NOT_AUTHORIZED"


class TestDisputes:

    def test_file_within_grace(self, ended_lease, lease_service, selector, clock):
        clock.set_time(380)
        assert lease_service.file_dispute(LANDLORD, ended_lease).ok
        lease = selector.get_lease(ended_lease)
        assert lease.state == LeaseState.DISPUTED
        assert lease.dispute_filed is True

    def test_file_after_grace(self, ended_lease, lease_service, selector, clock):
        clock.set_time(383)
        result = lease_service.file_dispute(LANDLORD, ended_lease)
        assert result.error_code == "LEASE_EXPIRED"
        assert selector.get_lease(ended_lease).state == LeaseState.ENDED

    def test_second_filing_rejected_by_state(self, disputed_lease, lease_service):
        result = lease_service.file_dispute(LANDLORD, disputed_lease)
        assert result.error_code == "INVALID_STATE"

    @pytest.mark.parametrize(
        "outcome, state",
        [
            ("resolved-refund", LeaseState.RESOLVED_REFUND),
            ("resolved-deduct", LeaseState.RESOLVED_DEDUCT),
        ],
    )
    def test_resolve(self, disputed_lease, lease_service, selector, outcome, state):
        assert lease_service.resolve_dispute(ARBITER, disputed_lease, outcome).ok
        lease = selector.get_lease(disputed_lease)
        assert lease.state == state
        assert lease.is_terminal

    def test_resolve_invalid_outcome(self, disputed_lease, lease_service, selector):
        result = lease_service.resolve_dispute(ARBITER, disputed_lease, "active")
        assert result.error_code == "INVALID_STATUS"
        assert result.error_number == 120
        assert selector.get_lease(disputed_lease).state == LeaseState.DISPUTED

    def test_resolve_requires_arbiter(self, disputed_lease, lease_service):
        result = lease_service.resolve_dispute(LANDLORD, disputed_lease, "resolved-refund")
        assert result.error_code == "NOT_AUTHORIZED"

    def test_terminal_lease_is_frozen(self, disputed_lease, lease_service, clock):
        lease_service.resolve_dispute(ARBITER, disputed_lease, "resolved-deduct")
        clock.advance(1)
        assert lease_service.resolve_dispute(
            ARBITER, disputed_lease, "resolved-refund"
        ).error_code == "INVALID_STATE"
        assert lease_service.file_dispute(
            LANDLORD, disputed_lease
        ).error_code == "INVALID_STATE"


# ---------------------------------------------------------------------------
# Renewal, amendment, payments
# ---------------------------------------------------------------------------


class TestRenewLease:

    def test_reference_renewal(self, active_lease, lease_service, selector, clock):
        clock.set_time(350)
        assert lease_service.renew_lease(TENANT, active_lease).ok
        lease = selector.get_lease(active_lease)
        assert lease.duration == 730
        assert lease.end_time == 1105
        assert lease.renew_count == 1
        assert lease.state == LeaseState.ACTIVE

    def test_too_far_from_expiry(self, active_lease, lease_service, clock):
        clock.set_time(300)
        result = lease_service.renew_lease(TENANT, active_lease)
        assert result.error_code == "INVALID_RENEWAL_THRESHOLD"

    def test_bounded_by_max_renews(self, active_lease, lease_service, selector, clock):
        clock.set_time(350)
        assert lease_service.renew_lease(TENANT, active_lease).ok
        clock.set_time(1100)
        assert lease_service.renew_lease(TENANT, active_lease).ok

        clock.set_time(selector.get_lease(active_lease).end_time - 1)
        result = lease_service.renew_lease(TENANT, active_lease)
        assert result.error_code == "INVALID_MAX_RENEWS"
        assert selector.get_lease(active_lease).renew_count == 2

    def test_landlord_cannot_renew(self, active_lease, lease_service, clock):
        clock.set_time(350)
        assert lease_service.renew_lease(LANDLORD, active_lease).error_code == "NOT_AUTHORIZED"


class TestUpdateLease:

    def test_amend_pending(self, pending_lease, lease_service, selector, clock):
        clock.set_time(3)
        assert lease_service.update_lease(LANDLORD, pending_lease, 400, 1200).ok

        lease = selector.get_lease(pending_lease)
        assert (lease.duration, lease.rent_amount) == (400, 1200)
        assert lease.state == LeaseState.PENDING
        update = selector.get_lease_update(pending_lease)
        assert update.update_duration == 400
        assert update.update_rent == 1200
        assert update.update_timestamp == 3
        assert update.updater == LANDLORD

    def test_latest_amendment_replaces_previous(
        self, pending_lease, lease_service, selector, clock
    ):
        lease_service.update_lease(LANDLORD, pending_lease, 400, 1200)
        clock.set_time(5)
        lease_service.update_lease(LANDLORD, pending_lease, 500, 900)
        update = selector.get_lease_update(pending_lease)
        assert (update.update_duration, update.update_rent, update.update_timestamp) == (
            500, 900, 5,
        )

    def test_never_amended(self, pending_lease, selector):
        assert selector.get_lease_update(pending_lease) is None

    def test_after_activation(self, active_lease, lease_service, selector):
        result = lease_service.update_lease(LANDLORD, active_lease, 400, 1200)
        assert result.error_code == "UPDATE_NOT_ALLOWED"
        assert result.error_number == 112
        assert selector.get_lease_update(active_lease) is None

    def test_invalid_rent_leaves_terms(self, pending_lease, lease_service, selector):
        result = lease_service.update_lease(LANDLORD, pending_lease, 400, 0)
        assert result.error_code == "INVALID_RENT"
        assert selector.get_lease(pending_lease).duration == 365

    def test_activation_uses_amended_duration(
        self, pending_lease, lease_service, selector, clock
    ):
        lease_service.update_lease(LANDLORD, pending_lease, 100, 1000)
        clock.set_time(10)
        lease_service.activate_lease(TENANT, pending_lease)
        assert selector.get_lease(pending_lease).end_time == 110


class TestRecordPayment:

    def test_strictly_increasing(self, active_lease, lease_service, selector):
        assert lease_service.record_payment(PAYMENT, active_lease, 40).ok
        assert selector.get_lease(active_lease).last_payment_time == 40

    @pytest.mark.parametrize("payment_time", [10, 3])
    def test_not_increasing(self, active_lease, lease_service, selector, payment_time):
        result = lease_service.record_payment(PAYMENT, active_lease, payment_time)
        assert result.error_code == "INVALID_START_TIME"
        assert selector.get_lease(active_lease).last_payment_time == 10

    def test_requires_payment_address(self, active_lease, lease_service):
        result = lease_service.record_payment(TENANT, active_lease, 40)
        assert result.error_code == "NOT_AUTHORIZED"

    def test_requires_active(self, pending_lease, lease_service):
        result = lease_service.record_payment(PAYMENT, pending_lease, 40)
        assert result.error_code == "INVALID_STATE"


# ---------------------------------------------------------------------------
# Integration checkpoints
# ---------------------------------------------------------------------------


class TestIntegration:

    def test_escrow(self, pending_lease, lease_service):
        assert lease_service.integrate_with_escrow(ESCROW, pending_lease).ok
        result = lease_service.integrate_with_escrow(VERIFIER, pending_lease)
        assert result.error_code == "INTEGRATION_NOT_VERIFIED"
        assert result.error_number == 121

    def test_verifier(self, pending_lease, lease_service):
        assert lease_service.integrate_with_verifier(VERIFIER, pending_lease).ok
        result = lease_service.integrate_with_verifier(ESCROW, pending_lease)
        assert result.error_code == "INTEGRATION_NOT_VERIFIED"

    def test_no_state_change(self, pending_lease, lease_service, selector):
        before = selector.get_lease(pending_lease)
        lease_service.integrate_with_escrow(ESCROW, pending_lease)
        assert selector.get_lease(pending_lease) == before


# ---------------------------------------------------------------------------
# Not found, atomicity, result boundary
# ---------------------------------------------------------------------------


class TestLeaseNotFound:

    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.activate_lease(TENANT, 99),
            lambda s: s.end_lease(LANDLORD, 99),
            lambda s: s.file_dispute(LANDLORD, 99),
            lambda s: s.resolve_dispute(ARBITER, 99, "resolved-refund"),
            lambda s: s.renew_lease(TENANT, 99),
            lambda s: s.update_lease(LANDLORD, 99, 400, 1200),
            lambda s: s.record_payment(PAYMENT, 99, 40),
            lambda s: s.integrate_with_escrow(STRANGER, 99),
            lambda s: s.integrate_with_verifier(STRANGER, 99),
        ],
    )
    def test_checked_first(self, configured_governance, lease_service, call):
        result = call(lease_service)
        assert result.error_code == "LEASE_NOT_FOUND"
        assert result.error_number == 107

    def test_selector_returns_none(self, selector):
        assert selector.get_lease(99) is None


class TestRejectionLeavesNoTrace:

    def test_failed_renew_changes_nothing(self, active_lease, lease_service, selector, clock):
        before = selector.get_lease(active_lease)
        clock.set_time(100)
        assert not lease_service.renew_lease(TENANT, active_lease)
        assert selector.get_lease(active_lease) == before

    def test_clock_read_once_per_operation(self, configured_governance, session, fees, selector):
        """A second clock reading would see the start time as past."""
        service = LeaseService(session, SequentialClock([10, 11]), fees)
        assert service.create_lease(CREATOR, make_terms(start_time=10)).ok


class TestAutoCommit:

    def test_rejection_rolls_back(self, session, clock, fees, selector):
        service = LeaseService(session, clock, fees, auto_commit=True)
        result = service.create_lease(CREATOR, make_terms())
        assert result.error_code == "AUTHORITY_NOT_SET"
        assert selector.get_governance() is None

    def test_success_commits(self, session, clock, fees, selector):
        service = LeaseService(session, clock, fees, auto_commit=True)
        GovernanceService(session).set_authority(AUTHORITY)
        session.commit()
        assert service.create_lease(CREATOR, make_terms()).ok
        session.rollback()
        assert selector.get_lease_count() == 1


class TestServiceLogging:

    def test_completed_event(self, pending_lease, lease_service, clock, captured_logs):
        clock.set_time(10)
        lease_service.activate_lease(TENANT, pending_lease)
        records = [r for r in captured_logs() if r["message"] == "activate_lease_completed"]
        assert len(records) == 1
        assert records[0]["lease_id"] == str(pending_lease)
        assert records[0]["caller"] == str(TENANT)
        assert records[0]["result"] is True

    def test_rejected_event(self, pending_lease, lease_service, clock, captured_logs):
        lease_service.activate_lease(TENANT, pending_lease)
        records = [r for r in captured_logs() if r["message"] == "activate_lease_rejected"]
        assert records[0]["error_code"] == "INVALID_START_TIME"
        assert records[0]["error_number"] == 108

    def test_state_change_logged(self, pending_lease, lease_service, clock, captured_logs):
        clock.set_time(10)
        lease_service.activate_lease(TENANT, pending_lease)
        changes = [r for r in captured_logs() if r["message"] == "lease_state_changed"]
        assert changes[0]["from_state"] == "pending"
        assert changes[0]["to_state"] == "active"


class TestGovernanceLockModes:
    """Creation locks governance exclusively; collaborator checks share it."""

    @pytest.fixture
    def lock_modes(self, monkeypatch):
        modes = []
        select_locked = GovernanceService._select_locked

        def _spy(service, *, shared):
            modes.append("shared" if shared else "exclusive")
            return select_locked(service, shared=shared)

        monkeypatch.setattr(GovernanceService, "_select_locked", _spy)
        return modes

    def test_create_exclusive(self, configured_governance, lease_service, lock_modes):
        assert lease_service.create_lease(CREATOR, make_terms()).ok
        assert lock_modes == ["exclusive"]

    def test_payment_and_integration_shared(self, active_lease, lease_service, lock_modes):
        assert lease_service.record_payment(PAYMENT, active_lease, 20).ok
        assert lease_service.integrate_with_escrow(ESCROW, active_lease).ok
        assert lease_service.integrate_with_verifier(VERIFIER, active_lease).ok
        assert lock_modes == ["shared", "shared", "shared"]

    def test_resolve_shared(self, disputed_lease, lease_service, lock_modes):
        assert lease_service.resolve_dispute(ARBITER, disputed_lease, "resolved-refund").ok
        assert lock_modes == ["shared"]

    def test_lease_only_operations_skip_governance(
        self, pending_lease, lease_service, clock, lock_modes
    ):
        clock.set_time(10)
        assert lease_service.activate_lease(TENANT, pending_lease).ok
        assert lock_modes == []
