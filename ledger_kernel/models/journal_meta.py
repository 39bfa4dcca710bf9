"""
Module: ledger_kernel.models.journal_meta
Responsibility: ORM persistence for free-form journal metadata (SEPA codes,
    external ids, book/interest/due dates and their timezone labels).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one entry per (journal, name) (uq_journal_meta_name).
    - Date entries store an ISO-8601 string; their companion "<name>_tz"
      entry stores the timezone label.
"""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from ledger_kernel.models.journal import TransactionJournal


class JournalMeta(TrackedBase):
    """One named metadata value on a journal."""

    __tablename__ = "journal_meta"

    __table_args__ = (
        UniqueConstraint("transaction_journal_id", "name", name="uq_journal_meta_name"),
    )

    transaction_journal_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_journals.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    data: Mapped[str | None] = mapped_column(
        JSON,
        nullable=True,
    )

    journal: Mapped["TransactionJournal"] = relationship(
        back_populates="meta",
    )

    def __repr__(self) -> str:
        return f"<JournalMeta {self.name}={self.data!r}>"
