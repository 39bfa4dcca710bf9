"""
Module: ledger_kernel.models.currency
Responsibility: ORM persistence for transaction currencies.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - code is a unique ISO 4217 code (validated by CurrencyService before
      a currency is created).
"""

from sqlalchemy import Boolean, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class TransactionCurrency(TrackedBase):
    """A currency journals and legs can be denominated in."""

    __tablename__ = "transaction_currencies"

    __table_args__ = (
        UniqueConstraint("code", name="uq_currency_code"),
    )

    code: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    symbol: Mapped[str] = mapped_column(
        String(12),
        nullable=False,
    )

    decimal_places: Mapped[int] = mapped_column(
        Integer,
        default=2,
        nullable=False,
    )

    enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TransactionCurrency {self.code}>"
