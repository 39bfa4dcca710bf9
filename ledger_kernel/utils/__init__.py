"""Utility modules for the ledger kernel."""

from ledger_kernel.utils.hashing import canonicalize_json, hash_group_snapshot, hash_payload

__all__ = [
    "canonicalize_json",
    "hash_group_snapshot",
    "hash_payload",
]
