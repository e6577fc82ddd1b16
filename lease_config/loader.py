"""
Configuration Loader (``lease_config.loader``).

Responsibility
--------------
Loads a YAML configuration document and parses it into typed
``lease_config.schema`` dataclass instances.  The single public entry
point for runtime config is ``lease_config.get_active_config()``.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``config_id``/``version``  -> ``KeyError`` propagates.
* Out-of-range values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from lease_config.schema import (
    DatabaseSettings,
    GovernanceSettings,
    LeaseKernelConfig,
    LoggingSettings,
)

_LOG_LEVELS = frozenset(logging.getLevelNamesMapping())


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _int_field(data: dict[str, Any], key: str, default: int, *, minimum: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return value


def parse_governance(data: dict[str, Any]) -> GovernanceSettings:
    """Parse GovernanceSettings; ``max_leases`` must be positive, the fee non-negative."""
    defaults = GovernanceSettings()
    return GovernanceSettings(
        max_leases=_int_field(data, "max_leases", defaults.max_leases, minimum=1),
        creation_fee=_int_field(data, "creation_fee", defaults.creation_fee, minimum=0),
    )


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    defaults = DatabaseSettings()
    url = data.get("url", defaults.url)
    if not isinstance(url, str) or not url:
        raise ValueError(f"database.url must be a non-empty string, got {url!r}")
    return DatabaseSettings(url=url, echo=bool(data.get("echo", defaults.echo)))


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    level = str(data.get("level", LoggingSettings().level)).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Unknown logging level {level!r}")
    return LoggingSettings(level=level)


def parse_config(data: dict[str, Any]) -> LeaseKernelConfig:
    """
    Parse a full configuration document.

    Preconditions:
        - ``data`` carries ``config_id`` and ``version``.
    Postconditions:
        - Returns a frozen ``LeaseKernelConfig`` whose ``checksum`` is the
          checksum of ``data``.
    """
    return LeaseKernelConfig(
        config_id=str(data["config_id"]),
        version=int(data["version"]),
        governance=parse_governance(data.get("governance") or {}),
        database=parse_database(data.get("database") or {}),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums
          (deterministic).
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
