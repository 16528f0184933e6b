"""Unit tests for EventRecorder."""

from linkcache.core.models import (
    ExpiredRecord,
    HeapExtractRecord,
    HeapInsertRecord,
    MissRecord,
    RecordCategory,
    SetRecord,
)
from linkcache.monitoring.recorder import EventRecorder


class TestEventRecorder:
    """Test bounded per-category retention."""

    def test_default_retention(self):
        recorder = EventRecorder()
        assert recorder.retention(RecordCategory.CACHE) == 100
        assert recorder.retention(RecordCategory.HEAP) == 50

    def test_routes_by_category(self):
        recorder = EventRecorder()
        recorder.record(SetRecord(key="a"))
        recorder.record(HeapInsertRecord(key="a"))
        recorder.record(MissRecord(key="b"))

        assert [r.key for r in recorder.recent(RecordCategory.CACHE)] == ["a", "b"]
        assert [r.key for r in recorder.recent("heap")] == ["a"]
        assert len(recorder) == 3

    def test_oldest_dropped_past_retention(self):
        recorder = EventRecorder(cache_retention=100, heap_retention=50)
        for i in range(130):
            recorder.record(SetRecord(key=f"k{i}"))
        for i in range(60):
            recorder.record(HeapExtractRecord(key=f"h{i}"))

        cache = recorder.recent(RecordCategory.CACHE)
        heap = recorder.recent(RecordCategory.HEAP)
        assert len(cache) == 100
        assert cache[0].key == "k30"
        assert cache[-1].key == "k129"
        assert len(heap) == 50
        assert heap[0].key == "h10"

    def test_recent_n_most_recent_last(self):
        recorder = EventRecorder()
        for i in range(5):
            recorder.record(ExpiredRecord(key=f"k{i}"))

        assert [r.key for r in recorder.recent(RecordCategory.CACHE, 2)] == ["k3", "k4"]
        assert recorder.recent(RecordCategory.CACHE, 0) == []
        assert len(recorder.recent(RecordCategory.CACHE, 50)) == 5

    def test_recent_returns_copy(self):
        recorder = EventRecorder()
        recorder.record(SetRecord(key="a"))
        snapshot = recorder.recent(RecordCategory.CACHE)
        snapshot.clear()
        assert len(recorder.recent(RecordCategory.CACHE)) == 1

    def test_clear(self):
        recorder = EventRecorder()
        recorder.record(SetRecord(key="a"))
        recorder.record(HeapInsertRecord(key="a"))
        recorder.clear()
        assert len(recorder) == 0
