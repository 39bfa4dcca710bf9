"""
Data Transfer Objects for the journal update pipeline.

Responsibility:
    Immutable value objects that cross the boundary between the update
    service and its callers: settings in, per-step outcomes and the overall
    result out.  No ORM types appear here.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from ledger_kernel.exceptions import LedgerKernelError


@dataclass(frozen=True)
class UpdateSettings:
    """
    Time settings the field patcher needs.

    Built by ``ledger_config.bridges.build_update_settings`` and passed
    explicitly to the update service; the kernel never reads configuration
    on its own.
    """

    app_timezone: str = "UTC"
    force_utc: bool = False

    @property
    def zone(self) -> tzinfo:
        return ZoneInfo(self.app_timezone)


@dataclass(frozen=True)
class AccountCandidate:
    """Identity of a requested or current account, as far as it is known."""

    id: UUID | None = None
    name: str | None = None
    iban: str | None = None
    number: str | None = None
    bic: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.id or self.name or self.iban or self.number)


class StepStatus(str, Enum):
    """What happened to one requested sub-update."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepOutcome:
    """
    Result of one presence-gated step of a journal update.

    ``code`` carries the exception code for FAILED steps (and for SKIPPED
    steps that were skipped because of a typed condition).
    """

    step: str
    status: StepStatus
    code: str | None = None
    detail: str | None = None

    @classmethod
    def applied(cls, step: str, detail: str | None = None) -> StepOutcome:
        return cls(step=step, status=StepStatus.APPLIED, detail=detail)

    @classmethod
    def skipped(cls, step: str, detail: str, code: str | None = None) -> StepOutcome:
        return cls(step=step, status=StepStatus.SKIPPED, code=code, detail=detail)

    @classmethod
    def failed(cls, step: str, error: LedgerKernelError) -> StepOutcome:
        return cls(step=step, status=StepStatus.FAILED, code=error.code, detail=str(error))


@dataclass(frozen=True)
class JournalUpdateResult:
    """
    Outcome of one ``JournalUpdateService.update`` call.

    ``changed`` compares the group's content fingerprint before and after the
    update; ``outcomes`` lists every step the request triggered, in order.
    """

    journal_id: UUID
    changed: bool
    start_hash: str
    end_hash: str
    outcomes: tuple[StepOutcome, ...] = field(default_factory=tuple)

    @property
    def failures(self) -> tuple[StepOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status == StepStatus.FAILED)

    @property
    def skipped(self) -> tuple[StepOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status == StepStatus.SKIPPED)

    @property
    def applied_steps(self) -> tuple[str, ...]:
        return tuple(o.step for o in self.outcomes if o.status == StepStatus.APPLIED)

    def outcome_for(self, step: str) -> StepOutcome | None:
        """Last outcome recorded for ``step``, if any."""
        for outcome in reversed(self.outcomes):
            if outcome.step == step:
                return outcome
        return None


@dataclass(frozen=True)
class JournalAuditEvent:
    """A single field change to be handed to the audit sink."""

    journal_id: UUID
    actor_id: UUID
    action: str
    before: Any
    after: Any
    occurred_at: datetime
