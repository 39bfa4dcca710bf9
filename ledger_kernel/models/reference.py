"""
Module: ledger_kernel.models.reference
Responsibility: ORM persistence for the user-owned reference data a journal
    points at: bills, categories, budgets, tags and notes, plus the
    association tables linking them to journals.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - A journal has at most one note (unique transaction_journal_id).
    - Category and tag names are unique per user.
"""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Column, ForeignKey, String, Table, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import Base, TrackedBase, UUIDString

if TYPE_CHECKING:
    from ledger_kernel.models.journal import TransactionJournal


category_journal = Table(
    "category_journal",
    Base.metadata,
    Column("category_id", UUIDString(), ForeignKey("categories.id"), primary_key=True),
    Column("transaction_journal_id", UUIDString(), ForeignKey("transaction_journals.id"), primary_key=True),
)

budget_journal = Table(
    "budget_journal",
    Base.metadata,
    Column("budget_id", UUIDString(), ForeignKey("budgets.id"), primary_key=True),
    Column("transaction_journal_id", UUIDString(), ForeignKey("transaction_journals.id"), primary_key=True),
)

tag_journal = Table(
    "tag_journal",
    Base.metadata,
    Column("tag_id", UUIDString(), ForeignKey("tags.id"), primary_key=True),
    Column("transaction_journal_id", UUIDString(), ForeignKey("transaction_journals.id"), primary_key=True),
)


class Bill(TrackedBase):
    """A recurring expense a withdrawal can be linked to."""

    __tablename__ = "bills"

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    name: Mapped[str] = mapped_column(String(1024), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Bill {self.name}>"


class Category(TrackedBase):
    __tablename__ = "categories"

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    name: Mapped[str] = mapped_column(String(1024), nullable=False)

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class Budget(TrackedBase):
    __tablename__ = "budgets"

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    name: Mapped[str] = mapped_column(String(1024), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Budget {self.name}>"


class Tag(TrackedBase):
    __tablename__ = "tags"

    __table_args__ = (
        UniqueConstraint("user_id", "tag", name="uq_tag_user_tag"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    tag: Mapped[str] = mapped_column(String(1024), nullable=False)

    def __repr__(self) -> str:
        return f"<Tag {self.tag}>"


class Note(TrackedBase):
    """Free-text note attached to exactly one journal."""

    __tablename__ = "notes"

    __table_args__ = (
        UniqueConstraint("transaction_journal_id", name="uq_note_journal"),
    )

    transaction_journal_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_journals.id"),
        nullable=False,
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)

    journal: Mapped["TransactionJournal"] = relationship(
        back_populates="note",
    )
