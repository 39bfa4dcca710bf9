"""
Ledger configuration schema.

Human-authored YAML is parsed by the loader into these frozen dataclasses.
Nothing here is imported by the kernel; ``ledger_config.bridges`` converts
them into kernel inputs.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerSettings:
    """Runtime settings of the journal update engine."""

    app_timezone: str = "UTC"  # IANA zone name
    force_utc: bool = False
    log_level: str = "INFO"


@dataclass(frozen=True)
class LedgerConfiguration:
    """A loaded configuration set: identity plus settings."""

    config_id: str
    version: int
    settings: LedgerSettings
    checksum: str = ""
