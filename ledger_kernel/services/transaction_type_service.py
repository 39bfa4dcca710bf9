"""
TransactionTypeService -- look up transaction types by display name.
"""

from sqlalchemy import select

from ledger_kernel.domain.request import normalize_type_name
from ledger_kernel.exceptions import TransactionTypeNotFoundError
from ledger_kernel.models.journal import TransactionType
from ledger_kernel.services.base import BaseService


class TransactionTypeService(BaseService[TransactionType]):

    def find(self, name: str) -> TransactionType:
        """
        Find a transaction type by name.

        Accepts request spellings ("withdrawal", "opening-balance") as well
        as display names ("Opening balance").

        Raises:
            TransactionTypeNotFoundError: no such type.
        """
        display_name = normalize_type_name(name)
        transaction_type = self.session.scalars(
            select(TransactionType).where(TransactionType.type == display_name)
        ).first()
        if transaction_type is None:
            raise TransactionTypeNotFoundError(display_name)
        return transaction_type
