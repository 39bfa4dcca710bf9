"""
JournalUpdateService -- apply a sparse change map to one journal.

Responsibility:
    Orchestrates a partial update of a two-leg journal.  Only the fields
    present in the request are touched; the invariants a partial change can
    break (account compatibility with the journal type, currency consistency
    across legs, foreign-currency bookkeeping, double-entry balance) are
    re-established along the way.

Architecture position:
    Kernel > Services -- imperative shell.  Coordinates LegResolver,
    AccountValidator, TransactionTypeService, the classification and
    annotation services, CurrencyService, the audit sink and GroupSelector.

Invariants enforced:
    - Steps run in a fixed order, each gated on the presence of its fields:
      accounts + type (only if both accounts validate), bill, description,
      date, order, category, budget, tags, reconciled, notes, string
      metadata, date metadata, currency, amount, foreign amount.
    - Source leg amount is always -|x|, destination +|x|.
    - A leg's foreign currency never equals the journal's primary currency.
    - Transfers never carry budgets.
    - ``changed`` is derived from the group's content fingerprint taken
      before and after the update; re-applying the same request reports
      ``changed=False``.

Failure modes:
    - Step failures (validation, resolution, parsing) are returned as
      FAILED StepOutcome values and the remaining steps still run.
    - LegNotFoundError, and any unexpected exception, roll back the
      SAVEPOINT wrapping the update and propagate.

Audit relevance:
    Changes to description, date and order emit one JournalAuditEvent each
    (``update_<field>``, old value, new value, actor, journal).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC
from typing import Any, Callable, Mapping
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.amounts import negative, parse_amount, parse_foreign_amount, positive
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dates import resolve_journal_date, resolve_meta_date, timezone_label, to_utc
from ledger_kernel.domain.dtos import (
    AccountCandidate,
    JournalAuditEvent,
    JournalUpdateResult,
    StepOutcome,
    UpdateSettings,
)
from ledger_kernel.domain.request import (
    FOREIGN_FIELDS,
    META_DATE_FIELDS,
    META_STRING_FIELDS,
    UpdateRequest,
)
from ledger_kernel.exceptions import (
    AccountResolutionError,
    AccountValidationError,
    AmountParseError,
    CurrencyNotFoundError,
    DateParseError,
    ForeignCurrencyConflictError,
    InvalidOrderError,
    SelfTransferError,
    TransactionTypeNotFoundError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import TransactionGroup, TransactionJournal
from ledger_kernel.selectors.group_selector import GroupSelector
from ledger_kernel.services.account_validator import DESTINATION, SOURCE, AccountValidator
from ledger_kernel.services.annotation_service import JournalMetaService, NoteService
from ledger_kernel.services.audit_log_service import AuditLogService, AuditSink
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.classification_service import (
    BillService,
    BudgetService,
    CategoryService,
    TagService,
)
from ledger_kernel.services.currency_service import CurrencyService
from ledger_kernel.services.leg_resolver import LegPair, LegResolver
from ledger_kernel.services.transaction_type_service import TransactionTypeService

logger = get_logger("services.journal_update")

STEP_ACCOUNTS = "accounts"
STEP_TYPE = "type"
STEP_BILL = "bill"
STEP_CATEGORY = "category"
STEP_BUDGET = "budget"
STEP_TAGS = "tags"
STEP_RECONCILED = "reconciled"
STEP_NOTES = "notes"
STEP_CURRENCY = "currency"
STEP_AMOUNT = "amount"
STEP_FOREIGN_AMOUNT = "foreign_amount"


def _is_blank(value: Any) -> bool:
    return value is None or str(value) == ""


@dataclass(frozen=True)
class UpdateContext:
    """Everything one update call works with; built per call, never reused."""

    journal: TransactionJournal
    group: TransactionGroup
    request: UpdateRequest
    actor_id: UUID
    legs: LegPair
    accounts: AccountValidator
    bills: BillService
    categories: CategoryService
    budgets: BudgetService
    tags: TagService
    currencies: CurrencyService
    notes: NoteService
    meta: JournalMetaService


class JournalUpdateService(BaseService[TransactionJournal]):
    """
    Applies update requests to journals.

    Contract:
        ``update(journal, data, actor_id)`` mutates the journal, its legs and
        its relations in the caller's session and returns a
        JournalUpdateResult.  The caller commits.

    Non-goals:
        - Does NOT recompute account balances; legs whose amount changed
          are flagged ``balance_dirty`` for a later pass.
        - Does NOT update more than one journal per call.
    """

    def __init__(
        self,
        session: Session,
        settings: UpdateSettings | None = None,
        clock: Clock | None = None,
        audit_sink: AuditSink | None = None,
    ):
        super().__init__(session)
        self._settings = settings or UpdateSettings()
        self._clock = clock or SystemClock()
        self._audit_sink = audit_sink or AuditLogService(session, self._clock)
        self._leg_resolver = LegResolver(session)
        self._group_selector = GroupSelector(session)
        self._transaction_types = TransactionTypeService(session)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def update(
        self,
        journal: TransactionJournal,
        data: Mapping[str, Any] | UpdateRequest,
        actor_id: UUID,
        group: TransactionGroup | None = None,
    ) -> JournalUpdateResult:
        """
        Apply ``data`` to ``journal``.

        Args:
            journal: The journal to update.
            data: Sparse map of requested changes.  Absent keys are left
                alone; see UpdateRequest for presence semantics.
            actor_id: User performing the update (audit + row stamps).
            group: The journal's group, if already loaded.

        Returns:
            JournalUpdateResult with per-step outcomes and the change flag.

        Raises:
            LegNotFoundError: The journal lacks a source or destination leg.
        """
        group = group if group is not None else journal.group
        request = data if isinstance(data, UpdateRequest) else UpdateRequest.from_dict(data)

        with LogContext.bind(journal_id=journal.id, group_id=group.id, actor_id=actor_id):
            logger.info("journal_update_started", extra={"fields": sorted(request.data)})

            self.session.flush()
            start_hash = self._group_selector.compare_hash(group)
            outcomes: list[StepOutcome] = []

            savepoint = self.session.begin_nested()
            try:
                context = self._build_context(journal, group, request, actor_id)
                for step in self._steps():
                    outcomes.extend(step(context))
                    self.session.flush()
                self._leg_resolver.refresh(context.legs)
                savepoint.commit()
            except Exception:
                savepoint.rollback()
                logger.error("journal_update_rolled_back", exc_info=True)
                raise

            end_hash = self._group_selector.compare_hash(group)
            changed = start_hash != end_hash
            if changed:
                journal.updated_by_id = actor_id
                self.session.flush()

            result = JournalUpdateResult(
                journal_id=journal.id,
                changed=changed,
                start_hash=start_hash,
                end_hash=end_hash,
                outcomes=tuple(outcomes),
            )
            logger.info(
                "journal_update_completed",
                extra={
                    "changed": changed,
                    "applied": list(result.applied_steps),
                    "failed": [o.code for o in result.failures],
                },
            )
            return result

    def _build_context(
        self,
        journal: TransactionJournal,
        group: TransactionGroup,
        request: UpdateRequest,
        actor_id: UUID,
    ) -> UpdateContext:
        user_id = journal.user_id
        return UpdateContext(
            journal=journal,
            group=group,
            request=request,
            actor_id=actor_id,
            legs=self._leg_resolver.resolve(journal),
            accounts=AccountValidator(self.session, user_id, actor_id),
            bills=BillService(self.session, user_id, actor_id),
            categories=CategoryService(self.session, user_id, actor_id),
            budgets=BudgetService(self.session, user_id, actor_id),
            tags=TagService(self.session, user_id, actor_id),
            currencies=CurrencyService(self.session, actor_id),
            notes=NoteService(self.session, actor_id),
            meta=JournalMetaService(self.session, actor_id),
        )

    def _steps(self) -> tuple[Callable[[UpdateContext], list[StepOutcome]], ...]:
        return (
            self._update_accounts_and_type,
            self._update_bill,
            self._update_scalar_fields,
            self._update_category,
            self._update_budget,
            self._update_tags,
            self._update_reconciled,
            self._update_notes,
            self._update_meta_fields,
            self._update_meta_dates,
            self._update_currency,
            self._update_amount,
            self._update_foreign_amount,
        )

    # ------------------------------------------------------------------
    # Accounts and type
    # ------------------------------------------------------------------

    def _expected_type(self, ctx: UpdateContext) -> str:
        """Requested type if any, else the journal's current one."""
        return ctx.request.type_name or ctx.journal.type_name

    def _candidate(self, ctx: UpdateContext, role: str) -> AccountCandidate:
        candidate = ctx.request.account_candidate(role)
        if ctx.request.has_account_fields(role):
            return candidate
        leg = ctx.legs.source if role == SOURCE else ctx.legs.destination
        return replace(candidate, id=leg.account.id, name=leg.account.name)

    def _update_accounts_and_type(self, ctx: UpdateContext) -> list[StepOutcome]:
        expected = self._expected_type(ctx)
        source = self._candidate(ctx, SOURCE)
        destination = self._candidate(ctx, DESTINATION)
        requested = (
            ctx.request.has_account_fields(SOURCE)
            or ctx.request.has_account_fields(DESTINATION)
            or "type" in ctx.request
        )

        if not ctx.accounts.validate_source(expected, source):
            return self._invalid_accounts(expected, SOURCE, requested)
        if not ctx.accounts.validate_destination(expected, destination, source):
            return self._invalid_accounts(expected, DESTINATION, requested)

        outcomes = self._update_accounts(ctx, expected, source, destination)
        outcomes.extend(self._update_type(ctx))
        return outcomes

    def _invalid_accounts(self, expected: str, role: str, requested: bool) -> list[StepOutcome]:
        error = AccountValidationError(expected, role)
        logger.warning("journal_accounts_invalid", extra={"transaction_type": expected, "role": role})
        return [StepOutcome.failed(STEP_ACCOUNTS, error)] if requested else []

    def _resolve_account(
        self,
        ctx: UpdateContext,
        expected: str,
        role: str,
        candidate: AccountCandidate,
        current: Account,
    ) -> Account:
        try:
            return ctx.accounts.resolve(expected, role, candidate)
        except AccountResolutionError as exc:
            logger.error(
                "account_resolution_failed",
                extra={"role": role, "reason": exc.reason, "fallback_account_id": str(current.id)},
            )
            return current

    def _update_accounts(
        self,
        ctx: UpdateContext,
        expected: str,
        source_candidate: AccountCandidate,
        destination_candidate: AccountCandidate,
    ) -> list[StepOutcome]:
        requested = ctx.request.has_account_fields(SOURCE) or ctx.request.has_account_fields(DESTINATION)
        source = self._resolve_account(ctx, expected, SOURCE, source_candidate, ctx.legs.source.account)
        destination = self._resolve_account(
            ctx, expected, DESTINATION, destination_candidate, ctx.legs.destination.account
        )

        if source.id == destination.id:
            error = SelfTransferError(str(source.id), source.name)
            logger.error("self_transfer_rejected", extra={"account_id": str(source.id)})
            return [StepOutcome.failed(STEP_ACCOUNTS, error)]

        ctx.legs.source.account = source
        ctx.legs.destination.account = destination
        self._leg_resolver.refresh(ctx.legs)
        logger.debug(
            "journal_accounts_updated",
            extra={"source_account_id": str(source.id), "destination_account_id": str(destination.id)},
        )
        return [StepOutcome.applied(STEP_ACCOUNTS)] if requested else []

    def _update_type(self, ctx: UpdateContext) -> list[StepOutcome]:
        name = ctx.request.type_name
        if not name:
            return []
        try:
            transaction_type = self._transaction_types.find(name)
        except TransactionTypeNotFoundError as exc:
            logger.warning("transaction_type_not_found", extra={"type_name": exc.type_name})
            return [StepOutcome.skipped(STEP_TYPE, str(exc), exc.code)]

        if ctx.journal.transaction_type is not transaction_type:
            ctx.journal.transaction_type = transaction_type
        return [StepOutcome.applied(STEP_TYPE, transaction_type.type)]

    # ------------------------------------------------------------------
    # Bill and scalar fields
    # ------------------------------------------------------------------

    def _update_bill(self, ctx: UpdateContext) -> list[StepOutcome]:
        if not ctx.request.has("bill_id", "bill_name"):
            return []
        if not ctx.journal.is_withdrawal:
            return [StepOutcome.skipped(STEP_BILL, "bills only apply to withdrawals")]

        bill = ctx.bills.find(ctx.request.raw("bill_id"), ctx.request.raw("bill_name"))
        ctx.journal.bill = bill
        return [StepOutcome.applied(STEP_BILL, bill.name if bill else None)]

    def _update_scalar_fields(self, ctx: UpdateContext) -> list[StepOutcome]:
        outcomes: list[StepOutcome] = []
        handlers = (
            ("description", self._set_description),
            ("date", self._set_date),
            ("order", self._set_order),
        )
        for field_name, handler in handlers:
            if field_name not in ctx.request or _is_blank(ctx.request.raw(field_name)):
                continue
            outcomes.append(handler(ctx, ctx.request.raw(field_name)))
        return outcomes

    def _set_description(self, ctx: UpdateContext, value: Any) -> StepOutcome:
        new = str(value)
        old = ctx.journal.description
        if new != old:
            ctx.journal.description = new
            self._audit(ctx, "update_description", old, new)
        return StepOutcome.applied("description")

    def _set_date(self, ctx: UpdateContext, value: Any) -> StepOutcome:
        try:
            moment = resolve_journal_date(value, self._settings)
        except ValueError:
            error = DateParseError("date", value)
            logger.warning("journal_date_invalid", extra={"value": str(value)})
            return StepOutcome.failed("date", error)

        new_utc = moment.astimezone(UTC)
        new_tz = timezone_label(moment)
        old_utc = to_utc(ctx.journal.date)
        if new_utc != old_utc or new_tz != ctx.journal.date_tz:
            ctx.journal.date = new_utc
            ctx.journal.date_tz = new_tz
            self._audit(ctx, "update_date", old_utc.isoformat(), moment.isoformat())
        return StepOutcome.applied("date")

    def _set_order(self, ctx: UpdateContext, value: Any) -> StepOutcome:
        try:
            new = int(str(value).strip())
        except ValueError:
            error = InvalidOrderError(value)
            logger.warning("journal_order_invalid", extra={"value": str(value)})
            return StepOutcome.failed("order", error)

        old = ctx.journal.order
        if new != old:
            ctx.journal.order = new
            self._audit(ctx, "update_order", old, new)
        return StepOutcome.applied("order")

    def _audit(self, ctx: UpdateContext, action: str, before: Any, after: Any) -> None:
        self._audit_sink.record(
            JournalAuditEvent(
                journal_id=ctx.journal.id,
                actor_id=ctx.actor_id,
                action=action,
                before=before,
                after=after,
                occurred_at=self._clock.now(),
            )
        )

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _update_category(self, ctx: UpdateContext) -> list[StepOutcome]:
        if not ctx.request.has("category_id", "category_name"):
            return []
        category = ctx.categories.find_or_create(
            ctx.request.raw("category_id"), ctx.request.raw("category_name")
        )
        ctx.journal.categories = [category] if category is not None else []
        return [StepOutcome.applied(STEP_CATEGORY, category.name if category else None)]

    def _update_budget(self, ctx: UpdateContext) -> list[StepOutcome]:
        outcomes: list[StepOutcome] = []
        if ctx.request.has("budget_id", "budget_name"):
            budget = ctx.budgets.find(ctx.request.raw("budget_id"), ctx.request.raw("budget_name"))
            ctx.journal.budgets = [budget] if budget is not None else []
            outcomes.append(StepOutcome.applied(STEP_BUDGET, budget.name if budget else None))

        if ctx.journal.is_transfer and ctx.journal.budgets:
            ctx.journal.budgets = []
            logger.debug("transfer_budgets_cleared")
            outcomes.append(StepOutcome.applied(STEP_BUDGET, "cleared for transfer"))
        return outcomes

    def _update_tags(self, ctx: UpdateContext) -> list[StepOutcome]:
        if "tags" not in ctx.request:
            return []
        tags = ctx.tags.find_or_create_all(ctx.request.raw("tags"))
        ctx.journal.tags = tags
        return [StepOutcome.applied(STEP_TAGS, ", ".join(t.tag for t in tags) or None)]

    def _update_reconciled(self, ctx: UpdateContext) -> list[StepOutcome]:
        if "reconciled" not in ctx.request:
            return []
        reconciled = ctx.request.reconciled
        if reconciled is None:
            return [StepOutcome.skipped(STEP_RECONCILED, "reconciled must be a boolean")]
        ctx.legs.source.reconciled = reconciled
        ctx.legs.destination.reconciled = reconciled
        return [StepOutcome.applied(STEP_RECONCILED)]

    # ------------------------------------------------------------------
    # Notes and metadata
    # ------------------------------------------------------------------

    def _update_notes(self, ctx: UpdateContext) -> list[StepOutcome]:
        if "notes" not in ctx.request:
            return []
        note = ctx.notes.update_or_delete(ctx.journal, ctx.request.raw("notes"))
        return [StepOutcome.applied(STEP_NOTES, None if note else "deleted")]

    def _update_meta_fields(self, ctx: UpdateContext) -> list[StepOutcome]:
        outcomes: list[StepOutcome] = []
        for field_name in META_STRING_FIELDS:
            if field_name not in ctx.request:
                continue
            value = ctx.request.raw(field_name)
            data = None if _is_blank(value) else str(value)
            ctx.meta.update_or_create(ctx.journal, field_name, data)
            outcomes.append(StepOutcome.applied(field_name, None if data else "deleted"))
        return outcomes

    def _update_meta_dates(self, ctx: UpdateContext) -> list[StepOutcome]:
        outcomes: list[StepOutcome] = []
        for field_name in META_DATE_FIELDS:
            if field_name not in ctx.request:
                continue
            value = ctx.request.raw(field_name)
            if _is_blank(value):
                moment = None
            else:
                try:
                    moment = resolve_meta_date(value, self._settings)
                except ValueError:
                    error = DateParseError(field_name, value)
                    logger.debug("meta_date_invalid", extra={"field": field_name, "value": str(value)})
                    outcomes.append(StepOutcome.failed(field_name, error))
                    return outcomes

            ctx.meta.update_or_create(ctx.journal, field_name, moment.isoformat() if moment else None)
            ctx.meta.update_or_create(
                ctx.journal, f"{field_name}_tz", timezone_label(moment) if moment else None
            )
            outcomes.append(StepOutcome.applied(field_name, None if moment else "deleted"))
        return outcomes

    # ------------------------------------------------------------------
    # Currency and amounts
    # ------------------------------------------------------------------

    def _update_currency(self, ctx: UpdateContext) -> list[StepOutcome]:
        if not ctx.request.has("currency_id", "currency_code"):
            return []
        try:
            currency = ctx.currencies.find_currency(
                ctx.request.raw("currency_id"), ctx.request.raw("currency_code")
            )
        except CurrencyNotFoundError as exc:
            logger.error(
                "currency_not_found",
                extra={"currency_id": exc.currency_id, "currency_code": exc.currency_code},
            )
            return [StepOutcome.failed(STEP_CURRENCY, exc)]

        ctx.journal.currency = currency
        ctx.legs.source.currency = currency
        ctx.legs.destination.currency = currency
        self._leg_resolver.refresh(ctx.legs)
        return [StepOutcome.applied(STEP_CURRENCY, currency.code)]

    def _update_amount(self, ctx: UpdateContext) -> list[StepOutcome]:
        if "amount" not in ctx.request:
            return []
        try:
            amount = parse_amount(ctx.request.raw("amount"))
        except AmountParseError as exc:
            logger.debug("amount_invalid", extra={"value": exc.value, "reason": exc.reason})
            return [StepOutcome.failed(STEP_AMOUNT, exc)]

        source, destination = ctx.legs.source, ctx.legs.destination
        source.amount = negative(amount)
        source.balance_dirty = True
        destination.amount = positive(amount)
        destination.balance_dirty = True
        self._leg_resolver.refresh(ctx.legs)
        return [StepOutcome.applied(STEP_AMOUNT, str(positive(amount)))]

    def _update_foreign_amount(self, ctx: UpdateContext) -> list[StepOutcome]:
        if not ctx.request.has(*FOREIGN_FIELDS):
            return []
        source, destination = ctx.legs.source, ctx.legs.destination
        raw_amount = ctx.request.raw("foreign_amount")

        try:
            foreign_amount = parse_foreign_amount(raw_amount)
        except AmountParseError as exc:
            logger.debug("foreign_amount_invalid", extra={"value": exc.value, "reason": exc.reason})
            self._leg_resolver.refresh(ctx.legs)
            return [StepOutcome.failed(STEP_FOREIGN_AMOUNT, exc)]

        foreign_currency = ctx.currencies.find_currency_or_none(
            ctx.request.raw("foreign_currency_id"), ctx.request.raw("foreign_currency_code")
        )
        if foreign_currency is None:
            foreign_currency = source.foreign_currency

        if foreign_currency is not None and foreign_currency.id == ctx.journal.currency.id:
            error = ForeignCurrencyConflictError(foreign_currency.code)
            logger.error("foreign_currency_equals_primary", extra={"currency_code": foreign_currency.code})
            return [StepOutcome.failed(STEP_FOREIGN_AMOUNT, error)]

        if foreign_currency is not None and foreign_amount is not None:
            source.foreign_currency = foreign_currency
            source.foreign_amount = negative(foreign_amount)
            self.session.flush()

            if ctx.journal.is_transfer or self._is_between_asset_and_liability(ctx.legs):
                destination.currency = foreign_currency
                destination.amount = positive(foreign_amount)
                destination.foreign_currency = source.currency
                destination.foreign_amount = positive(source.amount)
                detail = "swapped"
            else:
                destination.foreign_currency = foreign_currency
                destination.foreign_amount = positive(foreign_amount)
                detail = "set"
            self._leg_resolver.refresh(ctx.legs)
            logger.debug(
                "foreign_amount_updated",
                extra={"currency_code": foreign_currency.code, "mode": detail},
            )
            return [StepOutcome.applied(STEP_FOREIGN_AMOUNT, detail)]

        if raw_amount == "0":
            for leg in (source, destination):
                leg.foreign_currency = None
                leg.foreign_amount = None
            self._leg_resolver.refresh(ctx.legs)
            return [StepOutcome.applied(STEP_FOREIGN_AMOUNT, "cleared")]

        self._leg_resolver.refresh(ctx.legs)
        return [StepOutcome.skipped(STEP_FOREIGN_AMOUNT, "no foreign currency and amount to apply")]

    def _is_between_asset_and_liability(self, legs: LegPair) -> bool:
        """True when one side is an asset and the other a loan, debt or mortgage."""
        source, destination = legs.source, legs.destination
        if source.account is None or destination.account is None:
            return False
        if source.account.is_liability and destination.account.is_asset:
            return True
        return source.account.is_asset and destination.account.is_liability
