"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A journal update touches up to thirty independent fields.  Most of them may
fail on their own (a bad date, an unknown currency, a self-transfer) without
invalidating the rest of the update.  Those failures are reported back to the
caller as StepOutcome values that carry the exception's CODE, so callers can
react to them by type and code instead of parsing log lines.

Only structural failures (a journal that does not have both legs) are raised
out of the update: they mean the ledger data itself is corrupt.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- JournalError
    |   +-- LegNotFoundError
    |
    +-- AccountError
    |   +-- AccountValidationError
    |   +-- AccountResolutionError
    |   +-- SelfTransferError
    |
    +-- CurrencyError
    |   +-- CurrencyNotFoundError
    |   +-- ForeignCurrencyConflictError
    |
    +-- ParseError
    |   +-- AmountParseError
    |   +-- DateParseError
    |   +-- InvalidOrderError
    |
    +-- TransactionTypeNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                            | Fatal | When Raised
-----------|---------------------------------|-------|-----------------------------
Journal    | LEG_NOT_FOUND                   | yes   | Journal lacks a source or
           |                                 |       | destination leg
-----------|---------------------------------|-------|-----------------------------
Account    | INVALID_ACCOUNTS                | no    | Accounts incompatible with
           |                                 |       | the (new) transaction type
           | ACCOUNT_RESOLUTION_FAILED       | no    | No account matches and none
           |                                 |       | may be created
           | SELF_TRANSFER                   | no    | Source == destination
-----------|---------------------------------|-------|-----------------------------
Currency   | CURRENCY_NOT_FOUND              | no    | Unknown currency id/code
           | FOREIGN_CURRENCY_EQUALS_PRIMARY | no    | Foreign == primary currency
-----------|---------------------------------|-------|-----------------------------
Parse      | INVALID_AMOUNT                  | no    | Empty, zero or non-numeric
           | INVALID_DATE                    | no    | Unparseable date value
           | INVALID_ORDER                   | no    | Non-integer order
-----------|---------------------------------|-------|-----------------------------
Type       | TRANSACTION_TYPE_NOT_FOUND      | no    | Unknown transaction type
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Journal structure


class JournalError(LedgerKernelError):
    """Base exception for journal structure errors."""

    code: str = "JOURNAL_ERROR"


class LegNotFoundError(JournalError):
    """
    Journal has no leg on the requested side.

    A journal must have exactly one negative (source) and one positive
    (destination) leg.  Missing either one means the stored ledger data is
    corrupt; this error is never converted into a step outcome.
    """

    code: str = "LEG_NOT_FOUND"

    def __init__(self, journal_id: str, side: str):
        self.journal_id = journal_id
        self.side = side
        super().__init__(f"Journal {journal_id} has no {side} leg")


# Accounts


class AccountError(LedgerKernelError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class AccountValidationError(AccountError):
    """Source/destination accounts are not valid for the expected type."""

    code: str = "INVALID_ACCOUNTS"

    def __init__(self, transaction_type: str, role: str):
        self.transaction_type = transaction_type
        self.role = role
        super().__init__(
            f"The {role} account is not valid for a {transaction_type.lower()}"
        )


class AccountResolutionError(AccountError):
    """No account matches the given identity and none may be created."""

    code: str = "ACCOUNT_RESOLUTION_FAILED"

    def __init__(self, transaction_type: str, role: str, reason: str):
        self.transaction_type = transaction_type
        self.role = role
        self.reason = reason
        super().__init__(
            f"Cannot resolve {role} account for {transaction_type}: {reason}"
        )


class SelfTransferError(AccountError):
    """Source and destination resolve to the same account."""

    code: str = "SELF_TRANSFER"

    def __init__(self, account_id: str, account_name: str):
        self.account_id = account_id
        self.account_name = account_name
        super().__init__(
            f"Source and destination accounts are equal ({account_id}, \"{account_name}\")"
        )


# Currencies


class CurrencyError(LedgerKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class CurrencyNotFoundError(CurrencyError):
    """No currency matches the given id or code."""

    code: str = "CURRENCY_NOT_FOUND"

    def __init__(self, currency_id: str | None, currency_code: str | None):
        self.currency_id = currency_id
        self.currency_code = currency_code
        super().__init__(
            f"Currency not found (id={currency_id}, code={currency_code})"
        )


class ForeignCurrencyConflictError(CurrencyError):
    """Foreign currency is the same as the journal's primary currency."""

    code: str = "FOREIGN_CURRENCY_EQUALS_PRIMARY"

    def __init__(self, currency_code: str):
        self.currency_code = currency_code
        super().__init__(
            f"Foreign currency is equal to normal currency ({currency_code})"
        )


# Parsing


class ParseError(LedgerKernelError):
    """Base exception for request values that cannot be parsed."""

    code: str = "PARSE_ERROR"


class AmountParseError(ParseError):
    """Amount is empty, zero or not a number."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, value: object, reason: str):
        self.value = str(value)
        self.reason = reason
        super().__init__(f"Invalid amount \"{value}\": {reason}")


class DateParseError(ParseError):
    """Date value cannot be parsed."""

    code: str = "INVALID_DATE"

    def __init__(self, field_name: str, value: object):
        self.field_name = field_name
        self.value = str(value)
        super().__init__(f"{value} is not a valid date value for {field_name}")


class InvalidOrderError(ParseError):
    """Ordering index is not an integer."""

    code: str = "INVALID_ORDER"

    def __init__(self, value: object):
        self.value = str(value)
        super().__init__(f"Order must be an integer, got \"{value}\"")


# Transaction types


class TransactionTypeNotFoundError(LedgerKernelError):
    """Request names a transaction type that does not exist."""

    code: str = "TRANSACTION_TYPE_NOT_FOUND"

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Unknown transaction type: {type_name}")
