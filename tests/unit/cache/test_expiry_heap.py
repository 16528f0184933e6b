"""Unit tests for ExpiryScheduler."""

import random

import pytest

from linkcache.cache.expiry_heap import ExpiryScheduler
from linkcache.core.errors import InvariantViolation
from linkcache.core.models import ExpiryEntry, OperationKind, RecordCategory
from linkcache.monitoring.recorder import EventRecorder


class TestExpiryScheduler:
    """Test ExpiryScheduler min-heap behavior."""

    def test_empty_heap(self):
        heap = ExpiryScheduler()
        assert heap.peek_min() is None
        assert heap.extract_min() is None
        assert heap.size() == 0
        assert heap.snapshot() == []

    def test_peek_and_extract_scenario(self):
        """+30s, +10s, +20s: the +10s entry comes out first, then +20s."""
        heap = ExpiryScheduler()
        now = 1000.0
        heap.insert("thirty", now + 30)
        heap.insert("ten", now + 10)
        heap.insert("twenty", now + 20)

        assert heap.peek_min().key == "ten"
        assert heap.size() == 3

        extracted = heap.extract_min()
        assert extracted.key == "ten"
        assert heap.peek_min().key == "twenty"
        assert heap.size() == 2

    def test_peek_does_not_mutate(self):
        heap = ExpiryScheduler()
        heap.insert("a", 5.0)
        heap.peek_min()
        heap.peek_min()
        assert heap.size() == 1

    def test_ties_come_out_in_insertion_order(self):
        heap = ExpiryScheduler()
        for key in ("first", "second", "third"):
            heap.insert(key, 42.0)

        assert [heap.extract_min().key for _ in range(3)] == ["first", "second", "third"]

    def test_remove_by_key(self):
        heap = ExpiryScheduler()
        for i, deadline in enumerate([50, 10, 40, 20, 30, 60]):
            heap.insert(f"k{i}", float(deadline))

        assert heap.remove("k3") is True
        heap.validate()
        assert "k3" not in [e.key for e in heap.snapshot()]
        assert heap.size() == 5

    def test_remove_absent_key_is_noop(self):
        heap = ExpiryScheduler()
        heap.insert("a", 1.0)

        assert heap.remove("missing") is False
        assert heap.remove("a") is True
        assert heap.remove("a") is False
        assert heap.size() == 0

    def test_remove_last_element(self):
        heap = ExpiryScheduler()
        heap.insert("a", 1.0)
        heap.insert("b", 2.0)

        assert heap.remove("b") is True
        assert heap.snapshot()[0].key == "a"

    def test_reinsert_replaces_deadline(self):
        heap = ExpiryScheduler()
        heap.insert("a", 100.0)
        heap.insert("b", 50.0)
        heap.insert("a", 10.0)

        assert heap.size() == 2
        assert heap.peek_min().key == "a"
        assert heap.peek_min().expires_at == 10.0

    def test_snapshot_sorted_and_extract_returns_global_min(self):
        """Randomised operations keep snapshot sorted and extraction minimal."""
        rng = random.Random(11)
        heap = ExpiryScheduler()
        live = {}

        for step in range(400):
            roll = rng.random()
            if roll < 0.5:
                key = f"k{step}"
                deadline = float(rng.randrange(1000))
                heap.insert(key, deadline)
                live[key] = deadline
            elif roll < 0.75 and live:
                expected = min(live.values())
                entry = heap.extract_min()
                assert entry.expires_at == expected
                del live[entry.key]
            elif live:
                key = rng.choice(sorted(live))
                assert heap.remove(key) is True
                del live[key]

            snapshot = heap.snapshot()
            assert [e.expires_at for e in snapshot] == sorted(e.expires_at for e in snapshot)
            assert heap.size() == len(live)
            heap.validate()

    def test_validate_detects_corruption(self):
        heap = ExpiryScheduler()
        heap.insert("a", 1.0)
        heap.insert("b", 2.0)
        heap._heap[0], heap._heap[1] = heap._heap[1], heap._heap[0]

        with pytest.raises(InvariantViolation):
            heap.validate()

    def test_snapshot_is_a_copy(self):
        heap = ExpiryScheduler()
        heap.insert("a", 1.0)
        snap = heap.snapshot()
        snap.clear()
        assert heap.size() == 1
        assert isinstance(heap.peek_min(), ExpiryEntry)


class TestExpirySchedulerRecording:
    """Test heap operation records."""

    def test_insert_and_extract_records(self):
        recorder = EventRecorder()
        heap = ExpiryScheduler(recorder=recorder)
        heap.insert("a", 10.0)
        heap.insert("b", 5.0)
        heap.peek_min()
        heap.extract_min()

        records = recorder.recent(RecordCategory.HEAP)
        assert [r.kind for r in records] == [
            OperationKind.HEAP_INSERT,
            OperationKind.HEAP_INSERT,
            OperationKind.HEAP_EXTRACT,
        ]
        assert all(r.complexity == "O(log n)" for r in records)
        assert records[-1].key == "b"
        assert records[-1].size == 1
        assert recorder.recent(RecordCategory.CACHE) == []

    def test_empty_extract_records_nothing(self):
        recorder = EventRecorder()
        heap = ExpiryScheduler(recorder=recorder)
        heap.extract_min()
        assert len(recorder) == 0
