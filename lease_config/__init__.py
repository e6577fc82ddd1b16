"""
lease_config -- single public entrypoint for lease kernel configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``LeaseKernelConfig``.

Architecture position:
    Configuration -- YAML-driven settings.  This package sits above
    ``lease_kernel``.  The kernel MUST NEVER import from ``lease_config``;
    ``lease_config.bridges`` translates settings into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` / ``KeyError`` -- schema or structural failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``LEASE_CONFIG_TRACE`` log entry containing the config_id, version
    and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lease_config.loader import load_yaml_file, parse_config
from lease_config.schema import (
    DatabaseSettings,
    GovernanceSettings,
    LeaseKernelConfig,
    LoggingSettings,
)

_logger = logging.getLogger("lease_kernel.config")

# Default configuration set
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> LeaseKernelConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a YAML configuration document.
            Defaults to lease_config/sets/default.yaml.

    Returns:
        LeaseKernelConfig parsed from the document.

    Raises:
        FileNotFoundError: If the document does not exist.
        ValueError: If a section fails validation.
        KeyError: If ``config_id`` or ``version`` is missing.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(path))

    _logger.info(
        "LEASE_CONFIG_TRACE",
        extra={
            "trace_type": "LEASE_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "max_leases": config.governance.max_leases,
            "creation_fee": config.governance.creation_fee,
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DatabaseSettings",
    "GovernanceSettings",
    "LeaseKernelConfig",
    "LoggingSettings",
    "get_active_config",
]
