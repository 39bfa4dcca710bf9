"""
Sparse journal update request.

Responsibility:
    Wraps the key/value map a caller submits and answers the only question
    the update pipeline asks of it: is this key present?  Presence and value
    are distinct -- ``{"notes": ""}`` means "clear the notes", a missing
    ``notes`` key means "leave them alone".

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping
from uuid import UUID

from ledger_kernel.domain.dtos import AccountCandidate

SCALAR_FIELDS: tuple[str, ...] = ("description", "date", "order")

META_STRING_FIELDS: tuple[str, ...] = (
    "sepa_cc",
    "sepa_ct_op",
    "sepa_ct_id",
    "sepa_db",
    "sepa_country",
    "sepa_ep",
    "sepa_ci",
    "sepa_batch_id",
    "recurrence_id",
    "internal_reference",
    "bunq_payment_id",
    "external_id",
    "external_url",
)

META_DATE_FIELDS: tuple[str, ...] = (
    "interest_date",
    "book_date",
    "process_date",
    "due_date",
    "payment_date",
    "invoice_date",
)

FOREIGN_FIELDS: tuple[str, ...] = (
    "foreign_currency_id",
    "foreign_currency_code",
    "foreign_amount",
)


def normalize_type_name(value: str) -> str:
    """
    Turn a request ``type`` into a transaction type display name.

    ``opening-balance`` -> ``Opening balance``; otherwise only the first
    letter is upper-cased (``withdrawal`` -> ``Withdrawal``).
    """
    value = str(value)
    if value == "opening-balance":
        value = "opening balance"
    return value[:1].upper() + value[1:]


def coerce_uuid(value: Any) -> UUID | None:
    """Interpret an id from request data; anything unparseable is no id."""
    if value is None or value == "":
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value)
    return value or None


@dataclass(frozen=True)
class UpdateRequest:
    """Read-only view of a sparse update map."""

    data: Mapping[str, Any]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UpdateRequest:
        return cls(MappingProxyType(dict(data)))

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def has(self, *fields: str) -> bool:
        """True if at least one of ``fields`` is present."""
        return any(f in self.data for f in fields)

    def get(self, key: str, default: Any = None) -> Any:
        value = self.data.get(key, default)
        return default if value is None else value

    def raw(self, key: str) -> Any:
        """Value exactly as submitted, None when absent."""
        return self.data.get(key)

    @property
    def reconciled(self) -> bool | None:
        """The ``reconciled`` value, only when it is a genuine boolean."""
        value = self.data.get("reconciled")
        return value if isinstance(value, bool) else None

    @property
    def type_name(self) -> str | None:
        if "type" not in self.data or self.data["type"] is None:
            return None
        return normalize_type_name(self.data["type"])

    def has_account_fields(self, role: str) -> bool:
        return self.has(f"{role}_id", f"{role}_name")

    def account_candidate(self, role: str) -> AccountCandidate:
        """Account identity submitted for ``role`` ("source" or "destination")."""
        return AccountCandidate(
            id=coerce_uuid(self.data.get(f"{role}_id")),
            name=_optional_str(self.data.get(f"{role}_name")),
            iban=_optional_str(self.data.get(f"{role}_iban")),
            number=_optional_str(self.data.get(f"{role}_number")),
            bic=_optional_str(self.data.get(f"{role}_bic")),
        )
