"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``LedgerConfiguration``.

Architecture position:
    Configuration -- sits above ``ledger_kernel``.  The kernel MUST NEVER
    import from ``ledger_config``; ``ledger_config.bridges`` translates
    configuration into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` / ``ValueError`` -- schema validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``LEDGER_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying journal updates to the configuration that governed
    their date handling.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.loader import load_configuration
from ledger_config.schema import LedgerConfiguration, LedgerSettings

_logger = logging.getLogger("ledger_kernel.config")

# Default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | None = None) -> LedgerConfiguration:
    """
    The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a configuration file.  Defaults to
            ledger_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        KeyError: If required keys are missing.
        ValueError: If a setting is invalid.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_configuration(path)

    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "app_timezone": config.settings.app_timezone,
            "force_utc": config.settings.force_utc,
        },
    )
    return config


__all__ = ["LedgerConfiguration", "LedgerSettings", "get_active_config"]
