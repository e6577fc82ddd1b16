"""ORM models for the lease registry store."""

from lease_kernel.models.governance import GOVERNANCE_ROW_ID, GovernanceConfig
from lease_kernel.models.lease import Lease, LeaseLocationEntry, LeaseUpdate

__all__ = [
    "GOVERNANCE_ROW_ID",
    "GovernanceConfig",
    "Lease",
    "LeaseLocationEntry",
    "LeaseUpdate",
]
