"""
Pytest fixtures for the lease kernel test suite.

Provides:
- An in-memory SQLite registry store, created once per test session
- Per-test sessions rolled back at teardown
- A controllable logical clock and a recording fee transfer
- Service and selector fixtures, plus a governance record with every
  collaborator address configured

Environment Variables:
- DATABASE_URL: SQLAlchemy URL to run the suite against another backend.
  If not set, uses in-memory SQLite.
"""

import json
import logging
import os
from dataclasses import replace
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from lease_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from lease_kernel.domain.clock import DeterministicClock
from lease_kernel.domain.collaborators import RecordingFeeTransfer
from lease_kernel.domain.lease import LeaseTerms
from lease_kernel.domain.values import PartyId
from lease_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from lease_kernel.selectors.lease_selector import LeaseSelector
from lease_kernel.services.governance_service import GovernanceService
from lease_kernel.services.lease_service import LeaseService

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"


# =============================================================================
# Parties
# =============================================================================

AUTHORITY = PartyId("SP1AUTHORITY00000000000000000000000")
CREATOR = PartyId("SP2CREATOR0000000000000000000000000")
LANDLORD = PartyId("SP3LANDLORD000000000000000000000000")
TENANT = PartyId("SP4TENANT00000000000000000000000000")
PAYMENT = PartyId("SP5PAYMENT00000000000000000000000000")
ESCROW = PartyId("SP6ESCROW000000000000000000000000000")
VERIFIER = PartyId("SP7VERIFIER00000000000000000000000000")
ARBITER = PartyId("SP8ARBITER000000000000000000000000000")
STRANGER = PartyId("SP9STRANGER00000000000000000000000000")


def make_terms(**overrides) -> LeaseTerms:
    """Reference terms: a one-year residential lease starting at time 10."""
    terms = LeaseTerms(
        landlord=LANDLORD,
        tenant=TENANT,
        duration=365,
        rent_amount=1000,
        deposit_amount=2000,
        grace_period=7,
        start_time=10,
        lease_type="residential",
        penalty_rate=5,
        max_renews=2,
        termination_fee=500,
        renewal_threshold=30,
        location="CityA",
        currency="STX",
    )
    return replace(terms, **overrides)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture lease_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, lease_service):
            lease_service.create_lease(CREATOR, make_terms())
            logs = captured_logs()
            assert any(r["message"] == "create_lease_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("lease_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


# =============================================================================
# Session-scoped DB infrastructure (create engine + tables ONCE per suite)
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    yield eng
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Create all tables once per session, drop once at end."""
    drop_tables()
    create_tables()
    yield
    drop_tables()


# =============================================================================
# Per-test session with automatic rollback
# =============================================================================


@pytest.fixture(scope="function")
def session(db_tables, db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing.

    - Opens a dedicated connection with an outer transaction
    - Creates a session that *joins* the outer transaction
    - Any ``session.commit()`` inside the test releases a savepoint; it
      does NOT actually commit to the database
    - At teardown the outer transaction is rolled back, undoing ALL data
      changes made during the test
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# =============================================================================
# Kernel collaborators
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(start=0)


@pytest.fixture
def fees() -> RecordingFeeTransfer:
    return RecordingFeeTransfer()


@pytest.fixture
def governance(session) -> GovernanceService:
    return GovernanceService(session)


@pytest.fixture
def lease_service(session, clock, fees) -> LeaseService:
    return LeaseService(session, clock, fees)


@pytest.fixture
def selector(session) -> LeaseSelector:
    return LeaseSelector(session)


@pytest.fixture
def configured_governance(governance) -> GovernanceService:
    """Governance record with authority and all four collaborators set."""
    assert governance.set_authority(AUTHORITY).ok
    assert governance.set_payment_address(PAYMENT).ok
    assert governance.set_escrow_address(ESCROW).ok
    assert governance.set_verifier_address(VERIFIER).ok
    assert governance.set_arbiter_address(ARBITER).ok
    return governance


@pytest.fixture
def pending_lease(configured_governance, lease_service) -> int:
    """Id of a freshly created reference lease (state: pending)."""
    result = lease_service.create_lease(CREATOR, make_terms())
    assert result.ok, result.message
    return result.value


@pytest.fixture
def active_lease(pending_lease, lease_service, clock) -> int:
    """Reference lease activated at time 10 (end_time 375)."""
    clock.set_time(10)
    result = lease_service.activate_lease(TENANT, pending_lease)
    assert result.ok, result.message
    return pending_lease


@pytest.fixture
def ended_lease(active_lease, lease_service, clock) -> int:
    """Reference lease ended at time 375."""
    clock.set_time(375)
    result = lease_service.end_lease(LANDLORD, active_lease)
    assert result.ok, result.message
    return active_lease


@pytest.fixture
def disputed_lease(ended_lease, lease_service, clock) -> int:
    """Reference lease with a dispute filed at time 380."""
    clock.set_time(380)
    result = lease_service.file_dispute(LANDLORD, ended_lease)
    assert result.ok, result.message
    return ended_lease
