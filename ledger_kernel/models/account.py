"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for user-owned accounts -- the target of
    every journal leg.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - account_type is one of the AccountType display names.  The account
      validator uses it to decide which accounts may appear as source or
      destination for each transaction type.
    - Liability class is exactly {Loan, Debt, Mortgage}.

Failure modes:
    - AccountResolutionError when an update references an account that does
      not exist for the user and may not be created.
"""

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from ledger_kernel.models.journal import JournalLeg


class AccountType(str, Enum):
    """Types of accounts a journal leg can be booked on."""

    ASSET = "Asset account"
    EXPENSE = "Expense account"
    REVENUE = "Revenue account"
    CASH = "Cash account"
    INITIAL_BALANCE = "Initial balance account"
    RECONCILIATION = "Reconciliation account"
    LOAN = "Loan"
    DEBT = "Debt"
    MORTGAGE = "Mortgage"
    LIABILITY_CREDIT = "Liability credit account"


LIABILITY_TYPES: frozenset[AccountType] = frozenset(
    {AccountType.LOAN, AccountType.DEBT, AccountType.MORTGAGE}
)


class Account(TrackedBase):
    """
    Account owned by a single user.

    Guarantees:
        - name and account_type are non-null.
        - iban, account_number and bic are optional alternate identities used
          when resolving an account from request data.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        Index("idx_account_user", "user_id"),
        Index("idx_account_type", "account_type"),
        Index("idx_account_user_name", "user_id", "name"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )

    account_type: Mapped[AccountType] = mapped_column(
        String(40),
        nullable=False,
    )

    iban: Mapped[str | None] = mapped_column(
        String(34),
        nullable=True,
    )

    account_number: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    bic: Mapped[str | None] = mapped_column(
        String(11),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    legs: Mapped[list["JournalLeg"]] = relationship(
        back_populates="account",
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<Account {self.name} ({self.type.value})>"

    @property
    def type(self) -> AccountType:
        """account_type as an AccountType member (rows load it as a plain str)."""
        return AccountType(self.account_type)

    @property
    def is_asset(self) -> bool:
        return self.type == AccountType.ASSET

    @property
    def is_liability(self) -> bool:
        """True for loan, debt and mortgage accounts."""
        return self.type in LIABILITY_TYPES
