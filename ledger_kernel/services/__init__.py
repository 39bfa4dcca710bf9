"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.account_validator import AccountValidator
from ledger_kernel.services.annotation_service import JournalMetaService, NoteService
from ledger_kernel.services.audit_log_service import AuditLogService, AuditSink
from ledger_kernel.services.classification_service import (
    BillService,
    BudgetService,
    CategoryService,
    TagService,
)
from ledger_kernel.services.currency_service import CurrencyService
from ledger_kernel.services.journal_update_service import JournalUpdateService
from ledger_kernel.services.leg_resolver import LegPair, LegResolver
from ledger_kernel.services.transaction_type_service import TransactionTypeService

__all__ = [
    "AccountValidator",
    "AuditLogService",
    "AuditSink",
    "BillService",
    "BudgetService",
    "CategoryService",
    "CurrencyService",
    "JournalMetaService",
    "JournalUpdateService",
    "LegPair",
    "LegResolver",
    "NoteService",
    "TagService",
    "TransactionTypeService",
]
