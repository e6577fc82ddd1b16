"""
Config -> Kernel Bridges.

Functions that convert ``LeaseKernelConfig`` into kernel-compatible
inputs.  These live in lease_config (the producer) because the kernel
must NEVER import lease_config.

Usage:
    from lease_config import get_active_config
    from lease_config.bridges import governance_defaults, init_engine_from_config

    config = get_active_config()
    init_engine_from_config(config)
    service = LeaseService(session, clock, fees, governance_defaults(config))
"""

from __future__ import annotations

from sqlalchemy import Engine

from lease_config.schema import LeaseKernelConfig
from lease_kernel.db.engine import init_engine_from_url
from lease_kernel.domain.lease import GovernanceDefaults
from lease_kernel.logging_config import configure_logging


def governance_defaults(config: LeaseKernelConfig) -> GovernanceDefaults:
    """Initial governance values for a fresh registry."""
    return GovernanceDefaults(
        max_leases=config.governance.max_leases,
        creation_fee=config.governance.creation_fee,
    )


def init_engine_from_config(config: LeaseKernelConfig) -> Engine:
    return init_engine_from_url(config.database.url, echo=config.database.echo)


def configure_logging_from_config(config: LeaseKernelConfig) -> None:
    configure_logging(level=config.logging.level)
