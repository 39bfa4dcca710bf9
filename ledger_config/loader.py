"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses them into typed
``ledger_config.schema`` dataclass instances.  Runtime callers go through
``ledger_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* ``app_timezone`` must name a zone known to ``zoneinfo``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unknown timezone, non-boolean ``force_utc`` or unknown log level
  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from ledger_config.schema import LedgerConfiguration, LedgerSettings

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_timezone(value: Any) -> str:
    """Validate an IANA timezone name and return it."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"app_timezone must be a non-empty string, got {value!r}")
    name = value.strip()
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name!r}") from exc
    return name


def parse_ledger_settings(data: dict[str, Any]) -> LedgerSettings:
    """
    Parse ``LedgerSettings`` from the ``ledger`` section of a config file.

    Missing keys take the schema defaults.

    Raises:
        ValueError: if a value is of the wrong kind.
    """
    force_utc = data.get("force_utc", False)
    if not isinstance(force_utc, bool):
        raise ValueError(f"force_utc must be a boolean, got {force_utc!r}")

    log_level = str(data.get("log_level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log level: {log_level!r}")

    return LedgerSettings(
        app_timezone=parse_timezone(data.get("app_timezone", "UTC")),
        force_utc=force_utc,
        log_level=log_level,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed configuration dict."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_configuration(data: dict[str, Any]) -> LedgerConfiguration:
    """
    Parse a whole configuration file.

    Raises:
        KeyError: if ``config_id`` or ``version`` is missing.
        ValueError: if the ``ledger`` section is invalid.
    """
    return LedgerConfiguration(
        config_id=data["config_id"],
        version=int(data["version"]),
        settings=parse_ledger_settings(data.get("ledger") or {}),
        checksum=compute_checksum(data),
    )


def load_configuration(path: Path) -> LedgerConfiguration:
    """Load and parse the configuration file at ``path``."""
    return parse_configuration(load_yaml_file(path))
