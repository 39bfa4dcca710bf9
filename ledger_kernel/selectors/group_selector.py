"""
Module: ledger_kernel.selectors.group_selector
Responsibility: Derive the comparison fingerprint of a transaction group --
    the change-detection guard of the journal update service.
Architecture position: Kernel > Selectors.  Read-only.

Invariants enforced:
    - The fingerprint is a pure function of the group's observable content
      (types, dates, descriptions, ordering, currencies, accounts, amounts,
      foreign amounts, reconciliation, bill, categories, budgets, tags,
      notes and metadata of every journal).  Equal fingerprints mean no
      observable change.  There is no time-based component.
    - Reads the ORM objects as they are in the session, so the caller must
      flush pending relationship changes before comparing.
"""

from typing import Any

from ledger_kernel.domain.dates import to_utc
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalLeg, TransactionGroup, TransactionJournal
from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.utils.hashing import hash_group_snapshot

logger = get_logger("selectors.group")


def _leg_snapshot(leg: JournalLeg) -> dict[str, Any]:
    return {
        "leg_id": leg.id,
        "account_id": leg.account.id,
        "amount": leg.amount,
        "currency": leg.currency.code,
        "foreign_currency": leg.foreign_currency.code if leg.foreign_currency else None,
        "foreign_amount": leg.foreign_amount,
        "reconciled": bool(leg.reconciled),
    }


def _journal_snapshot(journal: TransactionJournal) -> dict[str, Any]:
    return {
        "journal_id": journal.id,
        "order": journal.order,
        "type": journal.transaction_type.type,
        "date": to_utc(journal.date),
        "date_tz": journal.date_tz,
        "description": journal.description,
        "currency": journal.currency.code,
        "bill_id": journal.bill.id if journal.bill else None,
        "categories": sorted(c.name for c in journal.categories),
        "budgets": sorted(b.name for b in journal.budgets),
        "tags": sorted(t.tag for t in journal.tags),
        "notes": journal.note.text if journal.note else None,
        "meta": {m.name: m.data for m in journal.meta},
        "legs": sorted(
            (_leg_snapshot(leg) for leg in journal.legs),
            key=lambda leg: str(leg["leg_id"]),
        ),
    }


class GroupSelector(BaseSelector[TransactionGroup]):
    """Read-side queries over transaction groups."""

    def snapshot(self, group: TransactionGroup) -> list[dict[str, Any]]:
        """Observable content of every journal in the group."""
        return [_journal_snapshot(journal) for journal in group.journals]

    def compare_hash(self, group: TransactionGroup) -> str:
        """SHA-256 fingerprint of the group's observable content."""
        digest = hash_group_snapshot(str(group.id), self.snapshot(group))
        logger.debug("group_compare_hash", extra={"group_id": str(group.id), "hash": digest})
        return digest
