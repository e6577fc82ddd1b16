"""
LeaseKernelConfig schema.

Typed, frozen view of a configuration set.  YAML documents are parsed
into these types by the loader; the kernel consumes them only through
``lease_config.bridges``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GovernanceSettings:
    """Initial values of the governance record."""

    max_leases: int = 10000
    creation_fee: int = 500


@dataclass(frozen=True)
class DatabaseSettings:
    """Where the registry store lives."""

    url: str = "sqlite:///lease_registry.db"
    echo: bool = False


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeaseKernelConfig:
    """
    A complete, validated configuration set.

    Attributes:
        config_id: Stable identifier of the set (e.g. ``"default"``).
        version: Integer version, bumped on every reviewed change.
        checksum: SHA-256 of the canonical serialization of the source.
    """

    config_id: str
    version: int
    governance: GovernanceSettings = field(default_factory=GovernanceSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""
