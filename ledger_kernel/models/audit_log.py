"""
Module: ledger_kernel.models.audit_log
Responsibility: ORM persistence for per-field audit log entries raised when a
    journal field changes.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: entries are written by AuditLogService and never updated.
    - before/after hold JSON-safe renderings of the old and new values.

Audit relevance:
    Every overwrite of a journal's description, date or order produces one
    entry carrying (action, before, after, actor, subject).
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, UUIDString


class AuditLogEntry(Base):
    """Audit record of one field change on one auditable entity."""

    __tablename__ = "audit_log_entries"

    __table_args__ = (
        Index("idx_audit_log_subject", "auditable_type", "auditable_id"),
        Index("idx_audit_log_action", "action"),
    )

    # Type of entity changed (e.g. "TransactionJournal")
    auditable_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    auditable_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    actor_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    # e.g. "update_description"
    action: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    before: Mapped[Any] = mapped_column(
        JSON,
        nullable=True,
    )

    after: Mapped[Any] = mapped_column(
        JSON,
        nullable=True,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AuditLogEntry {self.action} on {self.auditable_type}:{self.auditable_id}>"
