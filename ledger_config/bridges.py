"""
Config -> Kernel Bridges.

Functions that convert loaded configuration into kernel-compatible inputs.
They live in ledger_config (the producer) because the kernel must NEVER
import ledger_config.

Usage:
    from ledger_config import get_active_config
    from ledger_config.bridges import build_update_settings

    config = get_active_config()
    service = JournalUpdateService(session, build_update_settings(config))
"""

from __future__ import annotations

from ledger_config.schema import LedgerConfiguration, LedgerSettings
from ledger_kernel.domain.dtos import UpdateSettings
from ledger_kernel.logging_config import configure_logging


def build_update_settings(config: LedgerConfiguration | LedgerSettings) -> UpdateSettings:
    """Time settings for JournalUpdateService."""
    settings = config.settings if isinstance(config, LedgerConfiguration) else config
    return UpdateSettings(
        app_timezone=settings.app_timezone,
        force_utc=settings.force_utc,
    )


def configure_kernel_logging(config: LedgerConfiguration | LedgerSettings, **kwargs) -> None:
    """Configure the kernel's structured logging at the configured level."""
    settings = config.settings if isinstance(config, LedgerConfiguration) else config
    configure_logging(level=settings.log_level, **kwargs)
