"""Unit tests for ledger_kernel.utils.hashing."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.utils.hashing import (
    canonicalize_json,
    hash_group_snapshot,
    hash_payload,
)


class TestCanonicalizeJson:

    def test_key_order_irrelevant(self):
        assert canonicalize_json({"b": 1, "a": 2}) == canonicalize_json({"a": 2, "b": 1})

    def test_decimal_scale_irrelevant(self):
        assert canonicalize_json({"x": Decimal("45.00")}) == canonicalize_json({"x": Decimal("45.000000000")})

    def test_datetime_and_uuid(self):
        uid = uuid4()
        moment = datetime(2024, 5, 1, tzinfo=timezone.utc)

        assert canonicalize_json({"id": uid, "at": moment}) == (
            f'{{"at":"2024-05-01T00:00:00+00:00","id":"{uid}"}}'
        )

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            canonicalize_json({"x": object()})


class TestGroupSnapshotHash:

    def test_journal_order_irrelevant(self):
        first = {"journal_id": "a", "order": 0, "description": "one"}
        second = {"journal_id": "b", "order": 1, "description": "two"}

        assert hash_group_snapshot("g", [first, second]) == hash_group_snapshot("g", [second, first])

    def test_group_id_included(self):
        journals = [{"journal_id": "a", "order": 0}]
        assert hash_group_snapshot("g1", journals) != hash_group_snapshot("g2", journals)

    def test_is_sha256_hex(self):
        digest = hash_payload({"a": 1})
        assert len(digest) == 64
        int(digest, 16)
