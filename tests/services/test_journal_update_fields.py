"""
Tests for the description, date and order steps of JournalUpdateService.

Covers:
- Overwrite only when present and non-empty
- Timezone handling (application zone, force_utc)
- Audit events for changed fields only
- Parse failures reported as step outcomes
"""

from datetime import datetime, timezone

import pytest

from ledger_kernel.domain.dates import to_utc
from ledger_kernel.domain.dtos import JournalAuditEvent, StepStatus, UpdateSettings
from ledger_kernel.services.audit_log_service import AuditLogService, AuditSink
from ledger_kernel.services.journal_update_service import JournalUpdateService


class RecordingSink:
    """In-memory audit sink."""

    def __init__(self):
        self.events: list[JournalAuditEvent] = []

    def record(self, event: JournalAuditEvent) -> None:
        self.events.append(event)


class TestDescription:

    def test_description_overwritten_and_audited(self, session, make_journal, update, clock, test_actor_id):
        journal = make_journal(description="Groceries")

        result = update(journal, {"description": "Weekly groceries"})

        assert journal.description == "Weekly groceries"
        assert result.changed is True
        entries = AuditLogService(session).entries_for(journal.id)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.action == "update_description"
        assert entry.before == "Groceries"
        assert entry.after == "Weekly groceries"
        assert entry.actor_id == test_actor_id
        assert to_utc(entry.occurred_at) == clock.now()

    def test_empty_description_ignored(self, session, make_journal, update):
        journal = make_journal(description="Groceries")

        result = update(journal, {"description": ""})

        assert journal.description == "Groceries"
        assert result.outcome_for("description") is None
        assert AuditLogService(session).entries_for(journal.id) == []

    def test_unchanged_description_not_audited(self, session, make_journal, update):
        journal = make_journal(description="Groceries")

        result = update(journal, {"description": "Groceries"})

        assert result.changed is False
        assert AuditLogService(session).entries_for(journal.id) == []


class TestDate:

    def test_naive_date_read_in_app_timezone(self, session, make_journal, clock, test_actor_id):
        service = JournalUpdateService(session, UpdateSettings(app_timezone="Europe/Amsterdam"), clock=clock)
        journal = make_journal()

        service.update(journal, {"date": "2024-03-01T10:00:00"}, test_actor_id)

        assert to_utc(journal.date) == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        assert journal.date_tz == "Europe/Amsterdam"

    def test_force_utc_labels_date_utc(self, session, make_journal, clock, test_actor_id):
        settings = UpdateSettings(app_timezone="Europe/Amsterdam", force_utc=True)
        service = JournalUpdateService(session, settings, clock=clock)
        journal = make_journal()

        service.update(journal, {"date": "2024-07-01T10:00:00"}, test_actor_id)

        assert to_utc(journal.date) == datetime(2024, 7, 1, 8, 0, tzinfo=timezone.utc)
        assert journal.date_tz == "UTC"

    def test_aware_date_converted(self, make_journal, update):
        journal = make_journal()

        update(journal, {"date": "2024-05-02T08:00:00+05:00"})

        assert to_utc(journal.date) == datetime(2024, 5, 2, 3, 0, tzinfo=timezone.utc)
        assert journal.date_tz == "UTC"

    def test_datetime_value_accepted(self, make_journal, update):
        journal = make_journal()

        update(journal, {"date": datetime(2024, 5, 9, 7, 30, tzinfo=timezone.utc)})

        assert to_utc(journal.date) == datetime(2024, 5, 9, 7, 30, tzinfo=timezone.utc)

    def test_date_change_audited(self, session, make_journal, update):
        journal = make_journal(date=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))

        update(journal, {"date": "2024-05-02T12:00:00+00:00"})

        [entry] = AuditLogService(session).entries_for(journal.id)
        assert entry.action == "update_date"
        assert entry.before == "2024-05-01T12:00:00+00:00"
        assert entry.after == "2024-05-02T12:00:00+00:00"

    def test_invalid_date_reported(self, make_journal, update):
        original = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        journal = make_journal(date=original)

        result = update(journal, {"date": "first of may", "description": "Still applied"})

        outcome = result.outcome_for("date")
        assert outcome.status == StepStatus.FAILED
        assert outcome.code == "INVALID_DATE"
        assert to_utc(journal.date) == original
        assert journal.description == "Still applied"


class TestOrder:

    def test_order_overwritten(self, session, make_journal, update):
        journal = make_journal(order=0)

        update(journal, {"order": "3"})

        assert journal.order == 3
        [entry] = AuditLogService(session).entries_for(journal.id)
        assert entry.action == "update_order"
        assert (entry.before, entry.after) == (0, 3)

    @pytest.mark.parametrize("value", ["x", "1.5"])
    def test_invalid_order_reported(self, make_journal, update, value):
        journal = make_journal(order=2)

        result = update(journal, {"order": value})

        assert result.outcome_for("order").code == "INVALID_ORDER"
        assert journal.order == 2


class TestAuditSink:

    def test_custom_sink_receives_events(self, session, make_journal, clock, test_actor_id):
        sink = RecordingSink()
        assert isinstance(sink, AuditSink)
        service = JournalUpdateService(session, clock=clock, audit_sink=sink)
        journal = make_journal(description="Old", order=0)

        service.update(journal, {"description": "New", "order": 1}, test_actor_id)

        assert [e.action for e in sink.events] == ["update_description", "update_order"]
        assert sink.events[0].journal_id == journal.id
        assert sink.events[0].occurred_at == clock.now()
        assert AuditLogService(session).entries_for(journal.id) == []
