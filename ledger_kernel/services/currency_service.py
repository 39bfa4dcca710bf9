"""
CurrencyService -- resolve transaction currencies from request data.

Responsibility:
    Finds a currency by id, then by ISO 4217 code.  A valid ISO code that is
    not yet in the currency table is created on the fly, enabled, with the
    code doubling as name and symbol.

Architecture position:
    Kernel > Services.  Used by the currency and foreign-amount steps of
    JournalUpdateService.

Failure modes:
    - CurrencyNotFoundError when neither id nor code resolves.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.db.types import is_valid_currency
from ledger_kernel.domain.request import coerce_uuid
from ledger_kernel.exceptions import CurrencyNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.currency import TransactionCurrency
from ledger_kernel.services.base import BaseService

logger = get_logger("services.currency")


class CurrencyService(BaseService[TransactionCurrency]):
    """Currency lookup (and creation of missing ISO currencies)."""

    def __init__(self, session: Session, actor_id: UUID):
        super().__init__(session)
        self.actor_id = actor_id

    def find_currency(
        self,
        currency_id: object = None,
        currency_code: object = None,
    ) -> TransactionCurrency:
        """
        Resolve a currency by id, then by code.

        Raises:
            CurrencyNotFoundError: neither id nor code identify a currency.
        """
        uid = coerce_uuid(currency_id)
        if uid is not None:
            currency = self.session.get(TransactionCurrency, uid)
            if currency is not None:
                return currency

        code = str(currency_code).strip().upper() if currency_code else ""
        if code:
            currency = self.session.scalars(
                select(TransactionCurrency).where(TransactionCurrency.code == code)
            ).first()
            if currency is not None:
                return currency
            if is_valid_currency(code):
                return self._create(code)

        raise CurrencyNotFoundError(
            str(currency_id) if currency_id is not None else None,
            str(currency_code) if currency_code is not None else None,
        )

    def find_currency_or_none(
        self,
        currency_id: object = None,
        currency_code: object = None,
    ) -> TransactionCurrency | None:
        """Like find_currency, but None instead of raising."""
        if currency_id is None and currency_code is None:
            return None
        try:
            return self.find_currency(currency_id, currency_code)
        except CurrencyNotFoundError as exc:
            logger.debug(
                "currency_not_found",
                extra={"currency_id": exc.currency_id, "currency_code": exc.currency_code},
            )
            return None

    def _create(self, code: str) -> TransactionCurrency:
        currency = TransactionCurrency(
            code=code,
            name=code,
            symbol=code,
            decimal_places=2,
            enabled=True,
            created_by_id=self.actor_id,
        )
        self.session.add(currency)
        self.session.flush()
        logger.info("currency_created", extra={"currency_code": code})
        return currency
