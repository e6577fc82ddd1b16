"""
Service layer for governance configuration.

Owns the singleton governance record: the write-once authority, the
creation fee and the four collaborator addresses (payment, escrow,
verifier, arbiter).  Setters are gated only on an authority existing;
they do not compare the caller against it.

Every read that feeds a decision locks the row.  Setters and lease creation
take it exclusively (SELECT ... FOR UPDATE); the collaborator-gated lease
operations take it shared (SELECT ... FOR SHARE), so they run in parallel
with each other yet still linearize against the setters.
"""

from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from lease_kernel.domain.lease import GovernanceDefaults, GovernanceInfo
from lease_kernel.domain.results import LeaseResult
from lease_kernel.domain.rules import (
    check_set_authority,
    check_set_collaborator,
    check_set_creation_fee,
)
from lease_kernel.domain.values import UNSET_PARTY, PartyId
from lease_kernel.logging_config import get_logger
from lease_kernel.models.governance import GOVERNANCE_ROW_ID, GovernanceConfig
from lease_kernel.selectors.lease_selector import to_governance_info
from lease_kernel.services.base import BaseService

logger = get_logger("services.governance")

COLLABORATORS = ("payment", "escrow", "verifier", "arbiter")


def governance_row_select(*, shared: bool) -> Select:
    """SELECT of the singleton row: FOR SHARE when ``shared``, else FOR UPDATE."""
    return (
        select(GovernanceConfig)
        .where(GovernanceConfig.id == GOVERNANCE_ROW_ID)
        .with_for_update(read=shared)
        .execution_options(populate_existing=True)
    )


class GovernanceService(BaseService[GovernanceConfig]):
    """
    Service for the governance record.

    All setters return ``LeaseResult[bool]``.
    """

    _logger = logger

    def __init__(
        self,
        session: Session,
        defaults: GovernanceDefaults | None = None,
        auto_commit: bool = False,
    ):
        super().__init__(session, auto_commit=auto_commit)
        self._defaults = defaults or GovernanceDefaults()

    def initialize(self) -> GovernanceInfo:
        """
        Bootstrap the governance record (idempotent).

        Hosts call this once at system start.  Later calls return the
        existing record unchanged.
        """
        info = to_governance_info(self.lock())
        if self._auto_commit:
            self.session.commit()
        return info

    def lock(self) -> GovernanceConfig:
        """
        Load the governance row with a row lock, creating it if missing.

        Postconditions:
            The returned row is locked until the caller's transaction ends.
        """
        config = self._select_locked(shared=False)
        if config is None:
            config = GovernanceConfig(
                id=GOVERNANCE_ROW_ID,
                next_lease_id=0,
                max_leases=self._defaults.max_leases,
                creation_fee=self._defaults.creation_fee,
                authority_address=None,
                payment_address=UNSET_PARTY,
                escrow_address=UNSET_PARTY,
                verifier_address=UNSET_PARTY,
                arbiter_address=UNSET_PARTY,
            )
            self.session.add(config)
            self.session.flush()
            logger.info(
                "governance_initialized",
                extra={
                    "max_leases": config.max_leases,
                    "creation_fee": config.creation_fee,
                },
            )
        return config

    def read_shared(self) -> GovernanceConfig:
        """
        Load the governance row under a shared row lock.

        Bootstraps the row (exclusively) when it does not exist yet.
        """
        config = self._select_locked(shared=True)
        return config if config is not None else self.lock()

    def _select_locked(self, *, shared: bool) -> GovernanceConfig | None:
        return self.session.execute(governance_row_select(shared=shared)).scalar_one_or_none()

    def set_authority(self, address: PartyId) -> LeaseResult[bool]:
        """
        Record the governance authority. Write-once.

        Errors (in order):
            NOT_AUTHORIZED: ``address`` is the sentinel.
            AUTHORITY_ALREADY_SET: an authority is already recorded.
        """

        def _set() -> bool:
            config = self.lock()
            check_set_authority(address, to_governance_info(config))
            config.authority_address = address
            self.session.flush()
            return True

        return self._execute("set_authority", _set)

    def set_creation_fee(self, fee: int) -> LeaseResult[bool]:
        """
        Change the fee charged on lease creation.

        Errors (in order):
            AUTHORITY_NOT_SET, INVALID_PARAMETER (negative fee).
        """

        def _set() -> bool:
            config = self.lock()
            check_set_creation_fee(fee, to_governance_info(config))
            config.creation_fee = fee
            self.session.flush()
            return True

        return self._execute("set_creation_fee", _set)

    def set_payment_address(self, address: PartyId) -> LeaseResult[bool]:
        return self._set_collaborator("payment", address)

    def set_escrow_address(self, address: PartyId) -> LeaseResult[bool]:
        return self._set_collaborator("escrow", address)

    def set_verifier_address(self, address: PartyId) -> LeaseResult[bool]:
        return self._set_collaborator("verifier", address)

    def set_arbiter_address(self, address: PartyId) -> LeaseResult[bool]:
        return self._set_collaborator("arbiter", address)

    def _set_collaborator(self, collaborator: str, address: PartyId) -> LeaseResult[bool]:
        """Errors (in order): AUTHORITY_NOT_SET, NOT_AUTHORIZED (sentinel)."""
        assert collaborator in COLLABORATORS

        def _set() -> bool:
            config = self.lock()
            check_set_collaborator(address, collaborator, to_governance_info(config))
            setattr(config, f"{collaborator}_address", address)
            self.session.flush()
            return True

        return self._execute(f"set_{collaborator}_address", _set)
