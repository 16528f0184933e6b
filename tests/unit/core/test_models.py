"""Unit tests for data models."""

import json
import typing as t

import pytest

from linkcache.core.models import (
    AnyRecord,
    ExpiredRecord,
    ExpiryEntry,
    ExpiryKind,
    ExpiryPolicy,
    HeapInsertRecord,
    LinkRecord,
    LookupOutcome,
    LookupResult,
    OperationKind,
    RecordCategory,
    SetRecord,
)


class TestExpiryPolicy:
    """Test ExpiryPolicy constructors."""

    def test_none_policy(self):
        policy = ExpiryPolicy.none()
        assert policy.kind == ExpiryKind.NONE
        assert policy.is_time_based is False

    def test_time_policy(self):
        policy = ExpiryPolicy.at(123.5)
        assert policy.kind == ExpiryKind.TIME
        assert policy.expires_at == 123.5
        assert policy.is_time_based is True
        assert policy.reason() == "time limit reached"

    def test_click_policy(self):
        policy = ExpiryPolicy.after_clicks(3)
        assert policy.kind == ExpiryKind.CLICKS
        assert policy.max_clicks == 3
        assert policy.reason() == "click limit reached"

    def test_click_policy_rejects_zero(self):
        with pytest.raises(ValueError):
            ExpiryPolicy.after_clicks(0)


class TestLinkRecord:
    """Test LinkRecord expiry checks and serialization."""

    def test_never_expires_without_policy(self):
        record = LinkRecord(key="a", value="https://a.example/")
        assert record.is_expired(now=1e12) is False

    def test_time_expiry(self):
        record = LinkRecord(key="a", value="v", policy=ExpiryPolicy.at(100.0))
        assert record.is_expired(now=99.9) is False
        assert record.is_expired(now=100.0) is True
        assert record.is_expired(now=150.0) is True

    def test_click_expiry(self):
        record = LinkRecord(key="a", value="v", policy=ExpiryPolicy.after_clicks(2), clicks=1)
        assert record.is_expired(now=0) is False
        record.clicks = 2
        assert record.is_expired(now=0) is True

    def test_dict_round_trip_through_json(self):
        record = LinkRecord(key="a", value="v", policy=ExpiryPolicy.at(50.0), clicks=4, created_at=10.0)
        restored = LinkRecord.from_dict(json.loads(json.dumps(record.to_dict())))
        assert restored == record

    def test_from_dict_defaults(self):
        restored = LinkRecord.from_dict({"key": "a", "value": "v", "expiry_type": None})
        assert restored.policy.kind == ExpiryKind.NONE
        assert restored.clicks == 0


class TestOperationRecords:
    """Test the closed set of operation record types."""

    def test_every_kind_has_a_record_type(self):
        kinds = [record_cls.kind for record_cls in t.get_args(AnyRecord)]
        assert sorted(kinds) == sorted(OperationKind)

    def test_categories(self):
        assert SetRecord.category == RecordCategory.CACHE
        assert ExpiredRecord.category == RecordCategory.CACHE
        assert HeapInsertRecord.category == RecordCategory.HEAP

    def test_heap_records_default_complexity(self):
        assert HeapInsertRecord(key="a").complexity == "O(log n)"
        assert SetRecord(key="a").complexity == "O(1)"

    def test_records_are_immutable(self):
        record = SetRecord(key="a")
        with pytest.raises(AttributeError):
            record.key = "b"

    def test_to_dict(self):
        record = ExpiredRecord(key="a", duration_ms=1.23456, detail="time limit reached", size=2, timestamp=5.0)
        assert record.to_dict() == {
            "type": "EXPIRED",
            "key": "a",
            "duration_ms": 1.2346,
            "complexity": "O(1)",
            "detail": "time limit reached",
            "size": 2,
            "timestamp": 5.0,
        }


class TestMisc:
    def test_expiry_entry_ordering_ignores_key(self):
        early = ExpiryEntry(expires_at=1.0, seq=5, key="z")
        late = ExpiryEntry(expires_at=2.0, seq=0, key="a")
        tie = ExpiryEntry(expires_at=1.0, seq=6, key="a")
        assert early < late
        assert early < tie

    def test_lookup_result_found(self):
        assert LookupResult("v", LookupOutcome.CACHE_HIT).found is True
        assert LookupResult("v", LookupOutcome.CACHE_MISS_STORE_HIT).found is True
        assert LookupResult(None, LookupOutcome.EXPIRED).found is False
        assert LookupResult(None, LookupOutcome.NOT_FOUND).found is False
