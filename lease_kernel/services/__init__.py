"""Services for the lease kernel (write side)."""

from lease_kernel.services.base import BaseService
from lease_kernel.services.governance_service import GovernanceService
from lease_kernel.services.lease_service import LeaseService

__all__ = [
    "BaseService",
    "GovernanceService",
    "LeaseService",
]
