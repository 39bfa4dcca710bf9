"""
Tests for the currency, amount and foreign-amount steps of
JournalUpdateService.

Covers:
- Relabelling journal and legs with a new currency
- Amount signs and balance_dirty flags
- Foreign amounts: set, transfer swap, asset/liability swap, clear, conflicts
"""

from decimal import Decimal

import pytest

from ledger_kernel.domain.dtos import StepStatus
from ledger_kernel.models import TransactionCurrency


class TestCurrency:

    def test_currency_relabels_journal_and_legs(self, make_journal, update, legs, currencies):
        journal = make_journal(amount="45.00", currency="EUR")

        result = update(journal, {"currency_code": "USD"})

        pair = legs(journal)
        assert journal.currency is currencies["USD"]
        assert pair.source.currency is currencies["USD"]
        assert pair.destination.currency is currencies["USD"]
        assert pair.destination.amount == Decimal("45.00")
        assert result.outcome_for("currency").detail == "USD"

    def test_currency_by_id(self, make_journal, update, currencies):
        journal = make_journal(currency="EUR")

        update(journal, {"currency_id": str(currencies["GBP"].id)})

        assert journal.currency.code == "GBP"

    def test_known_iso_code_created(self, session, make_journal, update):
        journal = make_journal(currency="EUR")

        update(journal, {"currency_code": "chf"})

        assert journal.currency.code == "CHF"
        assert session.query(TransactionCurrency).filter_by(code="CHF").count() == 1

    def test_unknown_currency_reported(self, make_journal, update, currencies):
        journal = make_journal(currency="EUR")

        result = update(journal, {"currency_code": "XYZ"})

        outcome = result.outcome_for("currency")
        assert outcome.status == StepStatus.FAILED
        assert outcome.code == "CURRENCY_NOT_FOUND"
        assert journal.currency is currencies["EUR"]


class TestAmount:

    def test_amount_signed_by_role(self, make_journal, update, legs):
        journal = make_journal(amount="45.00")

        update(journal, {"amount": "50.10"})

        pair = legs(journal)
        assert pair.source.amount == Decimal("-50.10")
        assert pair.destination.amount == Decimal("50.10")
        assert pair.source.balance_dirty is True
        assert pair.destination.balance_dirty is True

    def test_negative_input_still_balanced(self, make_journal, update, legs):
        journal = make_journal(amount="45.00")

        update(journal, {"amount": "-12"})

        pair = legs(journal)
        assert pair.source.amount == Decimal("-12")
        assert pair.destination.amount == Decimal("12")

    @pytest.mark.parametrize("value", ["0", "", "0.00", "twelve", None])
    def test_invalid_amount_reported(self, make_journal, update, legs, value):
        journal = make_journal(amount="45.00")

        result = update(journal, {"amount": value})

        outcome = result.outcome_for("amount")
        assert outcome.status == StepStatus.FAILED
        assert outcome.code == "INVALID_AMOUNT"
        assert legs(journal).destination.amount == Decimal("45.00")
        assert legs(journal).destination.balance_dirty is False


class TestForeignAmount:

    def test_foreign_amount_on_withdrawal(self, make_journal, update, legs, currencies):
        journal = make_journal("Withdrawal", "checking", "groceries", "45.00", "EUR")

        result = update(journal, {"foreign_currency_code": "USD", "foreign_amount": "50.00"})

        pair = legs(journal)
        assert pair.source.foreign_currency is currencies["USD"]
        assert pair.source.foreign_amount == Decimal("-50.00")
        assert pair.destination.foreign_currency is currencies["USD"]
        assert pair.destination.foreign_amount == Decimal("50.00")
        assert pair.destination.currency is currencies["EUR"]
        assert pair.destination.amount == Decimal("45.00")
        assert result.outcome_for("foreign_amount").detail == "set"

    def test_transfer_swaps_destination(self, make_journal, update, legs, currencies):
        journal = make_journal("Transfer", "checking", "car_loan", "45.00", "EUR")

        result = update(journal, {"foreign_currency_code": "USD", "foreign_amount": "50.00"})

        pair = legs(journal)
        assert pair.source.amount == Decimal("-45.00")
        assert pair.source.currency is currencies["EUR"]
        assert pair.source.foreign_currency is currencies["USD"]
        assert pair.source.foreign_amount == Decimal("-50.00")
        assert pair.destination.currency is currencies["USD"]
        assert pair.destination.amount == Decimal("50.00")
        assert pair.destination.foreign_currency is currencies["EUR"]
        assert pair.destination.foreign_amount == Decimal("45.00")
        assert result.outcome_for("foreign_amount").detail == "swapped"

    @pytest.mark.parametrize(
        "type_name, source, destination",
        [
            ("Withdrawal", "checking", "car_loan"),
            ("Deposit", "car_loan", "checking"),
        ],
    )
    def test_asset_liability_swaps_on_first_write(
        self, make_journal, update, legs, currencies, type_name, source, destination
    ):
        journal = make_journal(type_name, source, destination, "45.00", "EUR")

        result = update(journal, {"foreign_currency_code": "USD", "foreign_amount": "50.00"})

        pair = legs(journal)
        assert result.outcome_for("foreign_amount").detail == "swapped"
        assert pair.source.currency is currencies["EUR"]
        assert pair.source.foreign_amount == Decimal("-50.00")
        assert pair.destination.currency is currencies["USD"]
        assert pair.destination.amount == Decimal("50.00")
        assert pair.destination.foreign_currency is currencies["EUR"]
        assert pair.destination.foreign_amount == Decimal("45.00")

    def test_repeated_swap_is_unchanged(self, make_journal, update, legs, currencies):
        journal = make_journal("Withdrawal", "checking", "car_loan", "45.00", "EUR")
        request = {"foreign_currency_code": "USD", "foreign_amount": "50.00"}

        first = update(journal, request)
        second = update(journal, request)

        pair = legs(journal)
        assert first.changed is True
        assert second.changed is False
        assert pair.destination.currency is currencies["USD"]
        assert pair.destination.foreign_amount == Decimal("45.00")

    def test_foreign_equal_to_primary_rejected(self, make_journal, update, legs):
        journal = make_journal(currency="EUR")

        result = update(journal, {"foreign_currency_code": "EUR", "foreign_amount": "10"})

        outcome = result.outcome_for("foreign_amount")
        assert outcome.status == StepStatus.FAILED
        assert outcome.code == "FOREIGN_CURRENCY_EQUALS_PRIMARY"
        assert legs(journal).source.foreign_amount is None

    def test_existing_foreign_currency_reused(self, make_journal, update, legs, currencies):
        journal = make_journal(currency="EUR")
        update(journal, {"foreign_currency_code": "USD", "foreign_amount": "50.00"})

        update(journal, {"foreign_amount": "55.00"})

        pair = legs(journal)
        assert pair.source.foreign_currency is currencies["USD"]
        assert pair.source.foreign_amount == Decimal("-55.00")
        assert pair.destination.foreign_amount == Decimal("55.00")

    def test_zero_string_clears_foreign_fields(self, make_journal, update, legs):
        journal = make_journal(currency="EUR")
        update(journal, {"foreign_currency_code": "USD", "foreign_amount": "50.00"})

        result = update(journal, {"foreign_amount": "0"})

        pair = legs(journal)
        for leg in (pair.source, pair.destination):
            assert leg.foreign_currency is None
            assert leg.foreign_amount is None
        assert result.outcome_for("foreign_amount").detail == "cleared"

    def test_amount_without_currency_is_skipped(self, make_journal, update, legs):
        journal = make_journal(currency="EUR")

        result = update(journal, {"foreign_amount": "50.00"})

        assert result.outcome_for("foreign_amount").status == StepStatus.SKIPPED
        assert legs(journal).source.foreign_amount is None
        assert result.changed is False

    def test_unknown_foreign_currency_is_skipped(self, make_journal, update, legs):
        journal = make_journal(currency="EUR")

        result = update(journal, {"foreign_currency_code": "XYZ", "foreign_amount": "50.00"})

        assert result.outcome_for("foreign_amount").status == StepStatus.SKIPPED
        assert legs(journal).source.foreign_currency is None

    def test_non_numeric_foreign_amount_reported(self, make_journal, update):
        journal = make_journal(currency="EUR")

        result = update(journal, {"foreign_currency_code": "USD", "foreign_amount": "lots"})

        assert result.outcome_for("foreign_amount").code == "INVALID_AMOUNT"

    def test_currency_and_amount_in_one_request(self, make_journal, update, legs, currencies):
        """Currency runs before amount, amount before foreign amount."""
        journal = make_journal("Withdrawal", "checking", "groceries", "45.00", "EUR")

        update(
            journal,
            {
                "currency_code": "GBP",
                "amount": "40.00",
                "foreign_currency_code": "EUR",
                "foreign_amount": "46.50",
            },
        )

        pair = legs(journal)
        assert journal.currency is currencies["GBP"]
        assert pair.source.amount == Decimal("-40.00")
        assert pair.source.foreign_currency is currencies["EUR"]
        assert pair.destination.foreign_amount == Decimal("46.50")
