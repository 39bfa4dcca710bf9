"""
Deterministic hashing utilities.

All hashing in the ledger kernel must be deterministic and reproducible: the
change-detection guard relies on equal content always producing an equal
digest, whatever order rows were loaded in and whatever scale a Decimal was
read back with.
"""

import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, Decimal):
        # "45.00" and "45.000000000" must hash the same
        return str(obj.normalize())
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string.

    Keys are sorted, no whitespace, Decimal/datetime/UUID rendered consistently.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict) -> str:
    """Hex-encoded SHA-256 hash (64 characters) of a canonicalized payload."""
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_group_snapshot(group_id: str, journals: list[dict]) -> str:
    """
    Compute the comparison fingerprint of a transaction group.

    Args:
        group_id: Transaction group ID.
        journals: One dict per journal, each carrying ``order`` and
            ``journal_id`` for deterministic ordering.

    Returns:
        Hex-encoded SHA-256 hash.
    """
    sorted_journals = sorted(
        journals, key=lambda j: (j.get("order", 0), str(j.get("journal_id", "")))
    )
    return hash_payload({"group_id": str(group_id), "journals": sorted_journals})
