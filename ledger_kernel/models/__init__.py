"""Domain models for the ledger kernel."""

from ledger_kernel.models.account import LIABILITY_TYPES, Account, AccountType
from ledger_kernel.models.audit_log import AuditLogEntry
from ledger_kernel.models.currency import TransactionCurrency
from ledger_kernel.models.journal import (
    JournalLeg,
    TransactionGroup,
    TransactionJournal,
    TransactionType,
    TransactionTypeName,
)
from ledger_kernel.models.journal_meta import JournalMeta
from ledger_kernel.models.reference import (
    Bill,
    Budget,
    Category,
    Note,
    Tag,
    budget_journal,
    category_journal,
    tag_journal,
)

__all__ = [
    "Account",
    "AccountType",
    "LIABILITY_TYPES",
    "AuditLogEntry",
    "TransactionCurrency",
    "JournalLeg",
    "TransactionGroup",
    "TransactionJournal",
    "TransactionType",
    "TransactionTypeName",
    "JournalMeta",
    "Bill",
    "Budget",
    "Category",
    "Note",
    "Tag",
    "budget_journal",
    "category_journal",
    "tag_journal",
]
