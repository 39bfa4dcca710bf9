"""Unit tests for the sparse update request."""

from uuid import uuid4

import pytest

from ledger_kernel.domain.request import (
    UpdateRequest,
    coerce_uuid,
    normalize_type_name,
)


class TestPresence:

    def test_present_with_empty_value(self):
        request = UpdateRequest.from_dict({"notes": ""})

        assert "notes" in request
        assert request.raw("notes") == ""

    def test_absent_key(self):
        request = UpdateRequest.from_dict({})

        assert "notes" not in request
        assert request.raw("notes") is None

    def test_has_any(self):
        request = UpdateRequest.from_dict({"bill_name": "Rent"})

        assert request.has("bill_id", "bill_name")
        assert not request.has("budget_id", "budget_name")

    def test_get_treats_none_as_absent(self):
        request = UpdateRequest.from_dict({"description": None})
        assert request.get("description", "default") == "default"

    def test_request_is_read_only(self):
        data = {"description": "x"}
        request = UpdateRequest.from_dict(data)
        data["description"] = "y"

        assert request.raw("description") == "x"
        with pytest.raises(TypeError):
            request.data["description"] = "z"


class TestReconciled:

    @pytest.mark.parametrize("value, expected", [(True, True), (False, False), ("true", None), (1, None)])
    def test_only_genuine_booleans(self, value, expected):
        assert UpdateRequest.from_dict({"reconciled": value}).reconciled is expected


class TestTypeName:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("withdrawal", "Withdrawal"),
            ("deposit", "Deposit"),
            ("opening-balance", "Opening balance"),
            ("liability credit", "Liability credit"),
        ],
    )
    def test_normalize(self, value, expected):
        assert normalize_type_name(value) == expected

    def test_absent_type(self):
        assert UpdateRequest.from_dict({"type": None}).type_name is None


class TestAccountCandidate:

    def test_fields_per_role(self):
        account_id = uuid4()
        request = UpdateRequest.from_dict(
            {
                "source_id": str(account_id),
                "source_iban": "NL91ABNA0417164300",
                "destination_name": "Groceries",
            }
        )

        source = request.account_candidate("source")
        destination = request.account_candidate("destination")

        assert source.id == account_id
        assert source.iban == "NL91ABNA0417164300"
        assert source.name is None
        assert destination.name == "Groceries"
        assert request.has_account_fields("destination")
        assert request.has_account_fields("source")

    def test_empty_strings_mean_nothing(self):
        candidate = UpdateRequest.from_dict({"source_id": "", "source_name": ""}).account_candidate("source")
        assert candidate.is_empty


class TestCoerceUuid:

    def test_values(self):
        uid = uuid4()
        assert coerce_uuid(uid) is uid
        assert coerce_uuid(str(uid)) == uid
        assert coerce_uuid("not-a-uuid") is None
        assert coerce_uuid(None) is None
        assert coerce_uuid(42) is None
