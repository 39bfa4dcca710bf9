"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for transaction groups, journals and journal
    legs -- the financial record the update service mutates.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Double entry: a journal has exactly one leg with a negative amount
      (source) and one with a positive amount (destination), equal in
      absolute value and in the same primary currency.  Checked by
      LegResolver on read; preserved by JournalUpdateService on write.
    - A leg's foreign currency is never its journal's primary currency.
    - Journal date is stored as a UTC instant; date_tz keeps the timezone
      label it was entered in.

Failure modes:
    - LegNotFoundError when a journal lacks either leg.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.currency import TransactionCurrency
    from ledger_kernel.models.journal_meta import JournalMeta
    from ledger_kernel.models.reference import Bill, Budget, Category, Note, Tag


class TransactionTypeName(str, Enum):
    """Display names of the known transaction types."""

    WITHDRAWAL = "Withdrawal"
    DEPOSIT = "Deposit"
    TRANSFER = "Transfer"
    OPENING_BALANCE = "Opening balance"
    RECONCILIATION = "Reconciliation"
    LIABILITY_CREDIT = "Liability credit"
    INVALID = "Invalid"


class TransactionType(TrackedBase):
    """Lookup row for a transaction type."""

    __tablename__ = "transaction_types"

    type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    def __repr__(self) -> str:
        return f"<TransactionType {self.type}>"


class TransactionGroup(TrackedBase):
    """
    Ordered collection of one or more journals (splits).

    Non-goals:
        - The group's comparison fingerprint is derived on demand by
          GroupSelector; nothing about it is stored.
    """

    __tablename__ = "transaction_groups"

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    title: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
    )

    journals: Mapped[list["TransactionJournal"]] = relationship(
        back_populates="group",
        order_by=lambda: [TransactionJournal.order, TransactionJournal.id],
    )

    def __repr__(self) -> str:
        return f"<TransactionGroup {self.id} journals={len(self.journals)}>"


class TransactionJournal(TrackedBase):
    """
    One logical financial event, booked as a source and a destination leg.

    Guarantees:
        - transaction_type, currency and group are always set.
        - bill is optional and only meaningful for withdrawals.
    """

    __tablename__ = "transaction_journals"

    __table_args__ = (
        Index("idx_journal_group", "transaction_group_id"),
        Index("idx_journal_user", "user_id"),
        Index("idx_journal_date", "date"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    transaction_group_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_groups.id"),
        nullable=False,
    )

    transaction_type_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_types.id"),
        nullable=False,
    )

    transaction_currency_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_currencies.id"),
        nullable=False,
    )

    bill_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("bills.id"),
        nullable=True,
    )

    description: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )

    # UTC instant; see date_tz for the label it was entered in
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    date_tz: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    order: Mapped[int] = mapped_column(
        "order",
        Integer,
        default=0,
        nullable=False,
    )

    group: Mapped["TransactionGroup"] = relationship(
        back_populates="journals",
    )

    transaction_type: Mapped["TransactionType"] = relationship()

    currency: Mapped["TransactionCurrency"] = relationship(
        foreign_keys=[transaction_currency_id],
    )

    bill: Mapped["Bill | None"] = relationship()

    legs: Mapped[list["JournalLeg"]] = relationship(
        back_populates="journal",
        cascade="all, delete-orphan",
    )

    categories: Mapped[list["Category"]] = relationship(
        secondary="category_journal",
    )

    budgets: Mapped[list["Budget"]] = relationship(
        secondary="budget_journal",
    )

    tags: Mapped[list["Tag"]] = relationship(
        secondary="tag_journal",
    )

    note: Mapped["Note | None"] = relationship(
        back_populates="journal",
        cascade="all, delete-orphan",
        uselist=False,
    )

    meta: Mapped[list["JournalMeta"]] = relationship(
        back_populates="journal",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<TransactionJournal {self.id} {self.transaction_type.type}>"

    @property
    def type_name(self) -> str:
        """Display name of the journal's current transaction type."""
        return self.transaction_type.type

    @property
    def is_transfer(self) -> bool:
        return self.type_name == TransactionTypeName.TRANSFER.value

    @property
    def is_withdrawal(self) -> bool:
        return self.type_name == TransactionTypeName.WITHDRAWAL.value


class JournalLeg(TrackedBase):
    """
    One signed ledger line of a journal (a.k.a. transaction).

    Guarantees:
        - amount < 0 marks the source leg, amount > 0 the destination leg.
        - foreign_currency and foreign_amount are either both set or both
          absent.
        - balance_dirty signals that cached account balances must be
          recomputed after the amount changed.
    """

    __tablename__ = "journal_legs"

    __table_args__ = (
        Index("idx_leg_journal", "transaction_journal_id"),
        Index("idx_leg_account", "account_id"),
    )

    transaction_journal_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_journals.id"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    transaction_currency_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_currencies.id"),
        nullable=False,
    )

    foreign_currency_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_currencies.id"),
        nullable=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        nullable=False,
    )

    foreign_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(38, 9),
        nullable=True,
    )

    reconciled: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    balance_dirty: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    journal: Mapped["TransactionJournal"] = relationship(
        back_populates="legs",
    )

    account: Mapped["Account"] = relationship(
        back_populates="legs",
    )

    currency: Mapped["TransactionCurrency"] = relationship(
        foreign_keys=[transaction_currency_id],
    )

    foreign_currency: Mapped["TransactionCurrency | None"] = relationship(
        foreign_keys=[foreign_currency_id],
    )

    def __repr__(self) -> str:
        return f"<JournalLeg {self.amount} {self.currency.code}>"

    @property
    def is_source(self) -> bool:
        return self.amount < 0

    @property
    def is_destination(self) -> bool:
        return self.amount > 0
