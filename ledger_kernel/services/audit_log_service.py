"""
AuditLogService -- persist per-field change events of journals.

Responsibility:
    Receives JournalAuditEvent values from the update service and appends
    them to the audit_log_entries table.

Architecture position:
    Kernel > Services.  The default AuditSink of JournalUpdateService;
    callers may inject any object satisfying the AuditSink protocol
    instead (a message bus publisher, an in-memory recorder in tests).

Invariants enforced:
    - Append-only: entries are inserted, never updated or deleted.

Audit relevance:
    This IS the audit trail for journal edits.  Each entry carries actor,
    subject, action and the before/after values.
"""

from typing import Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import JournalAuditEvent
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.audit_log import AuditLogEntry
from ledger_kernel.services.base import BaseService

logger = get_logger("services.audit_log")

JOURNAL_AUDITABLE_TYPE = "TransactionJournal"


@runtime_checkable
class AuditSink(Protocol):
    """Anything that accepts journal audit events."""

    def record(self, event: JournalAuditEvent) -> None:
        ...


class AuditLogService(BaseService[AuditLogEntry]):
    """
    Database-backed AuditSink.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def record(self, event: JournalAuditEvent) -> AuditLogEntry:
        entry = AuditLogEntry(
            auditable_type=JOURNAL_AUDITABLE_TYPE,
            auditable_id=event.journal_id,
            actor_id=event.actor_id,
            action=event.action,
            before=event.before,
            after=event.after,
            occurred_at=event.occurred_at or self._clock.now(),
        )
        self.session.add(entry)
        self.session.flush()

        logger.info(
            "audit_log_recorded",
            extra={
                "action": event.action,
                "journal_id": str(event.journal_id),
                "actor_id": str(event.actor_id),
            },
        )
        return entry

    def entries_for(self, journal_id) -> list[AuditLogEntry]:
        """Entries recorded for one journal, oldest first."""
        return list(
            self.session.scalars(
                select(AuditLogEntry)
                .where(
                    AuditLogEntry.auditable_type == JOURNAL_AUDITABLE_TYPE,
                    AuditLogEntry.auditable_id == journal_id,
                )
                .order_by(AuditLogEntry.occurred_at, AuditLogEntry.action)
            )
        )
