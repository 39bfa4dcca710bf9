"""
Date parsing and timezone normalization.

Journal dates are entered in the application timezone (naive input is read
as local time), optionally forced to UTC, and stored as a UTC instant plus
the label of the zone they were resolved in.  Metadata dates follow the same
parsing rules but are never forced to UTC and keep the zone they were
submitted in.
"""

from datetime import UTC, date, datetime, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from ledger_kernel.domain.dtos import UpdateSettings


def parse_datetime(value: Any, zone: tzinfo) -> datetime:
    """
    Parse ``value`` into an aware datetime; naive values are placed in ``zone``.

    Accepts ``datetime``, ``date`` and ISO-8601 strings.

    Raises:
        ValueError: value is empty or not a recognizable date.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"Cannot parse a date from {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def timezone_label(moment: datetime) -> str:
    """Name of the zone ``moment`` is expressed in ("Europe/Amsterdam", "UTC", "+02:00")."""
    tz = moment.tzinfo
    if isinstance(tz, ZoneInfo):
        return tz.key
    if tz is UTC:
        return "UTC"
    offset = moment.strftime("%z")
    return f"{offset[:3]}:{offset[3:]}" if offset else "UTC"


def resolve_journal_date(value: Any, settings: UpdateSettings) -> datetime:
    """
    Resolve a journal date to the application timezone (or UTC when forced).

    Raises:
        ValueError: value is not a recognizable date.
    """
    zone = settings.zone
    moment = parse_datetime(value, zone).astimezone(zone)
    if settings.force_utc:
        moment = moment.astimezone(ZoneInfo("UTC"))
    return moment


def resolve_meta_date(value: Any, settings: UpdateSettings) -> datetime:
    """
    Resolve a metadata date.

    Naive values are read in the application timezone; values that carry an
    offset or zone keep it, so ``<name>_tz`` records the submitted zone.

    Raises:
        ValueError: value is not a recognizable date.
    """
    return parse_datetime(value, settings.zone)


def to_utc(moment: datetime) -> datetime:
    """Aware UTC instant; naive values (as read back from SQLite) are already UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
