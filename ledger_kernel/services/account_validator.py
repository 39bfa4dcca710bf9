"""
AccountValidator -- which accounts may sit on either side of a journal.

Responsibility:
    Validates requested (or current) source and destination accounts
    against a transaction type, and resolves account identities from
    request data into concrete Account rows.

Architecture position:
    Kernel > Services.  Called by JournalUpdateService before any account
    or type change is applied.

Invariants enforced:
    - Every transaction type has a fixed set of permissible source account
      types, destination account types and (source, destination) pairs.
    - Lookups never leave the user's own accounts.
    - Accounts are only created by name, and only where the transaction
      type implies what they are: the destination of a withdrawal becomes an
      expense account, the source of a deposit a revenue account.

Failure modes:
    - validate_source / validate_destination return False; they never raise.
    - AccountResolutionError from resolve() when nothing matches and
      nothing may be created.
"""

from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.dtos import AccountCandidate
from ledger_kernel.domain.request import normalize_type_name
from ledger_kernel.exceptions import AccountResolutionError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.journal import TransactionTypeName
from ledger_kernel.services.base import UserScopedService

logger = get_logger("services.account_validator")

SOURCE = "source"
DESTINATION = "destination"

_A = AccountType
_LIABILITIES = (_A.LOAN, _A.DEBT, _A.MORTGAGE)
_T = TransactionTypeName

ALLOWED_SOURCE_TYPES: dict[str, frozenset[AccountType]] = {
    _T.WITHDRAWAL.value: frozenset({_A.ASSET, *_LIABILITIES}),
    _T.DEPOSIT.value: frozenset({_A.REVENUE, _A.CASH, *_LIABILITIES}),
    _T.TRANSFER.value: frozenset({_A.ASSET, *_LIABILITIES}),
    _T.OPENING_BALANCE.value: frozenset({_A.INITIAL_BALANCE, _A.ASSET, *_LIABILITIES}),
    _T.RECONCILIATION.value: frozenset({_A.RECONCILIATION, _A.ASSET}),
    _T.LIABILITY_CREDIT.value: frozenset({_A.LIABILITY_CREDIT, *_LIABILITIES}),
}

ALLOWED_DESTINATION_TYPES: dict[str, frozenset[AccountType]] = {
    _T.WITHDRAWAL.value: frozenset({_A.EXPENSE, _A.CASH, *_LIABILITIES}),
    _T.DEPOSIT.value: frozenset({_A.ASSET, *_LIABILITIES}),
    _T.TRANSFER.value: frozenset({_A.ASSET, *_LIABILITIES}),
    _T.OPENING_BALANCE.value: frozenset({_A.INITIAL_BALANCE, _A.ASSET, *_LIABILITIES}),
    _T.RECONCILIATION.value: frozenset({_A.RECONCILIATION, _A.ASSET}),
    _T.LIABILITY_CREDIT.value: frozenset({_A.LIABILITY_CREDIT, *_LIABILITIES}),
}


def _pairs(sources, destinations) -> set[tuple[AccountType, AccountType]]:
    return {(s, d) for s in sources for d in destinations}


ALLOWED_COMBINATIONS: dict[str, frozenset[tuple[AccountType, AccountType]]] = {
    _T.WITHDRAWAL.value: frozenset(
        _pairs([_A.ASSET], [_A.EXPENSE, _A.CASH, *_LIABILITIES])
        | _pairs(_LIABILITIES, [_A.EXPENSE, _A.CASH])
    ),
    _T.DEPOSIT.value: frozenset(
        _pairs([_A.REVENUE, _A.CASH], [_A.ASSET, *_LIABILITIES])
        | _pairs(_LIABILITIES, [_A.ASSET])
    ),
    _T.TRANSFER.value: frozenset(
        _pairs([_A.ASSET, *_LIABILITIES], [_A.ASSET, *_LIABILITIES])
    ),
    _T.OPENING_BALANCE.value: frozenset(
        _pairs([_A.ASSET, *_LIABILITIES], [_A.INITIAL_BALANCE])
        | _pairs([_A.INITIAL_BALANCE], [_A.ASSET, *_LIABILITIES])
    ),
    _T.RECONCILIATION.value: frozenset(
        {(_A.RECONCILIATION, _A.ASSET), (_A.ASSET, _A.RECONCILIATION)}
    ),
    _T.LIABILITY_CREDIT.value: frozenset(
        _pairs([_A.LIABILITY_CREDIT], _LIABILITIES)
        | _pairs(_LIABILITIES, [_A.LIABILITY_CREDIT])
    ),
}

# (transaction type, role) -> type of an account created by name
CREATABLE: dict[tuple[str, str], AccountType] = {
    (_T.WITHDRAWAL.value, DESTINATION): _A.EXPENSE,
    (_T.DEPOSIT.value, SOURCE): _A.REVENUE,
}


def _allowed_types(transaction_type: str, role: str) -> frozenset[AccountType]:
    table = ALLOWED_SOURCE_TYPES if role == SOURCE else ALLOWED_DESTINATION_TYPES
    return table.get(transaction_type, frozenset())


class AccountValidator(UserScopedService[Account]):
    """
    Validates and resolves journal accounts for one user.

    Contract:
        ``transaction_type`` arguments accept display names ("Withdrawal")
        and request spellings ("withdrawal", "opening-balance").
    """

    def validate_source(self, transaction_type: str, candidate: AccountCandidate) -> bool:
        """True if ``candidate`` may be the source of a ``transaction_type``."""
        transaction_type = normalize_type_name(transaction_type)
        valid = self._account_type_for(transaction_type, SOURCE, candidate) is not None
        if not valid:
            logger.info(
                "source_account_invalid",
                extra={"transaction_type": transaction_type, "account_id": str(candidate.id), "account_name": candidate.name},
            )
        return valid

    def validate_destination(
        self,
        transaction_type: str,
        candidate: AccountCandidate,
        source: AccountCandidate | None = None,
    ) -> bool:
        """
        True if ``candidate`` may be the destination of a ``transaction_type``.

        When ``source`` is given, the (source type, destination type) pair
        must also be permitted for the transaction type.
        """
        transaction_type = normalize_type_name(transaction_type)
        destination_type = self._account_type_for(transaction_type, DESTINATION, candidate)
        valid = destination_type is not None

        if valid and source is not None:
            source_type = self._account_type_for(transaction_type, SOURCE, source)
            if source_type is not None:
                pair = (source_type, destination_type)
                valid = pair in ALLOWED_COMBINATIONS.get(transaction_type, frozenset())

        if not valid:
            logger.info(
                "destination_account_invalid",
                extra={"transaction_type": transaction_type, "account_id": str(candidate.id), "account_name": candidate.name},
            )
        return valid

    def resolve(
        self,
        transaction_type: str,
        role: str,
        candidate: AccountCandidate,
    ) -> Account:
        """
        Find (or create) the account ``candidate`` names for ``role``.

        Raises:
            AccountResolutionError: no matching account and none may be
                created.
        """
        transaction_type = normalize_type_name(transaction_type)
        allowed = _allowed_types(transaction_type, role)
        if not allowed:
            raise AccountResolutionError(transaction_type, role, "unsupported transaction type")

        account = self._find(candidate, allowed)
        if account is not None:
            return account

        creatable = CREATABLE.get((transaction_type, role))
        if creatable is None or not candidate.name:
            raise AccountResolutionError(
                transaction_type, role, f"no account matches {candidate.id or candidate.name!r}"
            )
        return self._create(candidate, creatable)

    def _account_type_for(
        self,
        transaction_type: str,
        role: str,
        candidate: AccountCandidate,
    ) -> AccountType | None:
        """Type the candidate has (or would be created with), None if invalid."""
        allowed = _allowed_types(transaction_type, role)
        if not allowed or candidate.is_empty:
            return None
        account = self._find(candidate, allowed)
        if account is not None:
            return account.type
        if candidate.name:
            return CREATABLE.get((transaction_type, role))
        return None

    def _find(self, candidate: AccountCandidate, allowed: frozenset[AccountType]) -> Account | None:
        allowed_values = [t.value for t in allowed]

        if candidate.id is not None:
            account = self.session.get(Account, candidate.id)
            if (
                account is not None
                and account.user_id == self.user_id
                and account.account_type in allowed_values
            ):
                return account

        lookups = (
            (Account.iban, candidate.iban),
            (Account.account_number, candidate.number),
            (Account.name, candidate.name),
        )
        for column, value in lookups:
            if not value:
                continue
            account = self.session.scalars(
                select(Account)
                .where(
                    Account.user_id == self.user_id,
                    Account.account_type.in_(allowed_values),
                    column == value,
                )
                .order_by(Account.created_at, Account.id)
            ).first()
            if account is not None:
                return account
        return None

    def _create(self, candidate: AccountCandidate, account_type: AccountType) -> Account:
        account = Account(
            user_id=self.user_id,
            name=candidate.name,
            account_type=account_type.value,
            iban=candidate.iban,
            account_number=candidate.number,
            bic=candidate.bic,
            is_active=True,
            created_by_id=self.actor_id,
        )
        self.session.add(account)
        self.session.flush()
        logger.info(
            "account_created",
            extra={"account_id": str(account.id), "account_name": account.name, "account_type": account_type.value},
        )
        return account
