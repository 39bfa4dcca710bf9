"""
Amount parsing and sign helpers.

Amounts arrive as strings (or numbers) in the update request.  A leg's sign
is never taken from the request: the source leg always gets the negated
absolute value and the destination leg the absolute value.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from ledger_kernel.db.types import money_from_str
from ledger_kernel.exceptions import AmountParseError

ZERO = Decimal("0")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise AmountParseError(value, "not a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = money_from_str(str(value))
        except InvalidOperation:
            raise AmountParseError(value, "not a number") from None
    if not result.is_finite():
        raise AmountParseError(value, "not a finite number")
    return result


def parse_amount(value: Any) -> Decimal:
    """
    Parse a primary amount.

    Raises:
        AmountParseError: empty, zero or non-numeric value.
    """
    if value is None or str(value).strip() == "":
        raise AmountParseError("" if value is None else value, "amount cannot be empty")
    amount = _to_decimal(value)
    if amount == ZERO:
        raise AmountParseError(value, "amount seems to be zero")
    return amount


def parse_foreign_amount(value: Any) -> Decimal | None:
    """
    Parse a foreign amount; None, empty and zero all mean "no foreign amount".

    Raises:
        AmountParseError: non-numeric value.
    """
    if value is None or str(value).strip() == "":
        return None
    amount = _to_decimal(value)
    if amount == ZERO:
        return None
    return amount


def negative(amount: Decimal) -> Decimal:
    return -abs(amount)


def positive(amount: Decimal) -> Decimal:
    return abs(amount)
