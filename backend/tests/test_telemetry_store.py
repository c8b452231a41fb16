"""
Tests for the telemetry ring buffer.
"""

import threading

import pytest

from services.telemetry_store import (
    STEP_IMAGE,
    STEP_MODEL,
    ExecutionStep,
    TelemetryRecord,
    TelemetryStore,
    summarize_records,
)

from conftest import make_record


class TestRecord:
    def test_wire_format(self):
        record = TelemetryRecord(
            composite=True,
            models_used=("m", "img"),
            total_duration_ms=1500,
            execution_trace=(ExecutionStep(STEP_MODEL, "m", 1000), ExecutionStep(STEP_IMAGE, "img", 500)),
            text_length=42,
            image_generated=True,
        )
        data = record.to_dict()
        assert data["intent"] == "composite"
        assert data["modelsUsed"] == ["m", "img"]
        assert data["totalDurationMs"] == 1500
        assert data["executionTrace"][1] == {"step": "image", "model": "img", "durationMs": 500}
        assert data["textLength"] == 42
        assert data["imageGenerated"] is True
        assert data["error"] is False
        assert isinstance(data["id"], str) and data["id"]
        assert isinstance(data["timestamp"], int)

    def test_ids_are_unique(self):
        assert make_record().id != make_record().id

    def test_single_intent(self):
        assert make_record().intent == "single"


class TestTelemetryStore:
    def setup_method(self):
        self.store = TelemetryStore()

    def test_newest_first(self):
        first, second = make_record("a"), make_record("b")
        self.store.record(first)
        self.store.record(second)
        assert self.store.get_all() == [second, first]

    @pytest.mark.parametrize("pushed", [101, 105, 150])
    def test_capacity_evicts_oldest(self, pushed):
        records = [make_record(f"m{i}") for i in range(pushed)]
        for r in records:
            self.store.record(r)
        stored = self.store.get_all()
        assert len(stored) == 100
        assert stored == list(reversed(records[-100:]))
        assert stored[0] is records[-1]
        assert stored[-1] is records[pushed - 100]

    def test_get_all_returns_copy(self):
        self.store.record(make_record())
        snapshot = self.store.get_all()
        snapshot.clear()
        assert len(self.store) == 1

    def test_subscriber_gets_single_record(self):
        received = []
        self.store.subscribe(received.append)
        record = make_record()
        self.store.record(record)
        assert received == [record.to_dict()]

    def test_snapshot_subscriber_gets_full_list(self):
        received = []
        self.store.subscribe(received.append, snapshot=True)
        self.store.record(make_record("a"))
        self.store.record(make_record("b"))
        assert len(received) == 2
        assert [r["modelsUsed"][0] for r in received[-1]] == ["b", "a"]

    def test_unsubscribe_is_idempotent(self):
        received = []
        unsubscribe = self.store.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        self.store.record(make_record())
        assert received == []
        assert self.store.subscriber_count == 0

    def test_same_handler_twice_unsubscribes_separately(self):
        received = []
        unsub_a = self.store.subscribe(received.append)
        self.store.subscribe(received.append)
        unsub_a()
        self.store.record(make_record())
        assert len(received) == 1

    def test_failing_subscriber_does_not_block_others(self):
        received = []

        def broken(_payload):
            raise RuntimeError("subscriber bug")

        self.store.subscribe(broken)
        self.store.subscribe(received.append)
        self.store.record(make_record())
        assert len(received) == 1
        assert len(self.store) == 1

    def test_subscriber_may_read_store(self):
        sizes = []
        self.store.subscribe(lambda _payload: sizes.append(len(self.store.get_all())))
        self.store.record(make_record())
        assert sizes == [1]

    def test_concurrent_writers_respect_capacity(self):
        store = TelemetryStore(capacity=50)

        def writer():
            for _ in range(100):
                store.record(make_record())

        threads = [threading.Thread(target=writer) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store) == 50


class TestSummary:
    def test_empty(self):
        summary = summarize_records([])
        assert summary["totalRequests"] == 0
        assert summary["avgLatencyMs"] == 0
        assert summary["modelUsage"] == {}
        assert summary["timeline"] == {}

    def test_aggregates(self):
        records = [
            make_record("a", 1000),
            make_record("a", 2000, error=True),
            TelemetryRecord(
                composite=True,
                models_used=("b", "img"),
                total_duration_ms=3001,
                execution_trace=(ExecutionStep(STEP_MODEL, "b", 2000), ExecutionStep(STEP_IMAGE, "img", 1000)),
                image_generated=True,
            ),
        ]
        summary = summarize_records(records)
        assert summary["totalRequests"] == 3
        assert summary["compositeCount"] == 1
        assert summary["imageCount"] == 1
        assert summary["errorCount"] == 1
        assert summary["avgLatencyMs"] == 2000
        assert summary["modelUsage"] == {"a": 2, "b": 1, "img": 1}
        assert sum(summary["timeline"].values()) == 3
        assert all(key.endswith(":00") for key in summary["timeline"])
