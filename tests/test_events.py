"""
Tests for Event Bus, Interaction Logger and Performance Monitor
===============================================================
"""

import time

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.events import EventBus, Events
from modules.utils.logger import InteractionLogger, log_timing
from modules.utils.performance_monitor import PerformanceMonitor


class TestEventBus:

    def test_singleton(self):
        assert EventBus() is EventBus()

    def test_emit_reaches_subscribers(self, bus):
        received = []
        bus.subscribe(Events.NODE_PICKED, lambda **kw: received.append(kw))
        bus.emit(Events.NODE_PICKED, hand_index=1, node_id="x")
        assert received == [{"hand_index": 1, "node_id": "x"}]

    def test_priority_order(self, bus):
        order = []
        bus.subscribe("e", lambda **_: order.append("low"), priority=0)
        bus.subscribe("e", lambda **_: order.append("high"), priority=10)
        bus.emit("e")
        assert order == ["high", "low"]

    def test_failing_handler_is_isolated(self, bus):
        received = []

        def broken(**_):
            raise RuntimeError("boom")

        bus.subscribe("e", broken, priority=1)
        bus.subscribe("e", lambda **_: received.append(True))
        bus.emit("e")
        assert received == [True]

    def test_unsubscribe(self, bus):
        received = []
        handler = lambda **_: received.append(True)  # noqa: E731
        bus.subscribe("e", handler)
        bus.unsubscribe("e", handler)
        bus.emit("e")
        assert received == []
        assert bus.listener_count == 0

    def test_history(self, bus):
        bus.emit(Events.MODE_CHANGED, previous="drag", current="zoom")
        bus.emit(Events.HAND_LOST, hand_index=0)
        assert [e["event"] for e in bus.get_history()] == [Events.MODE_CHANGED, Events.HAND_LOST]
        assert bus.events_named(Events.HAND_LOST)[0]["data"] == {"hand_index": 0}

    def test_reset(self, bus):
        bus.subscribe("e", lambda **_: None)
        bus.emit("e")
        bus.reset()
        assert bus.listener_count == 0
        assert bus.get_history() == []


class TestInteractionLogger:

    def test_records_interaction_events(self, bus):
        log = InteractionLogger(bus).attach()
        bus.emit(Events.NODE_PICKED, hand_index=0, node_id="a")
        bus.emit(Events.NODE_RELEASED, hand_index=0, node_id="a", reason="hand_lost")
        bus.emit(Events.MODE_CHANGED, previous="drag", current="rotate")
        bus.emit(Events.AUTO_ROTATE_CHANGED, enabled=True)
        bus.emit(Events.HOVER_CHANGED, previous=None, current="a")
        kinds = [entry["kind"] for entry in log.get_history()]
        assert kinds == ["pick", "release", "mode", "auto_rotate"]
        assert log.get_history(1)[0]["enabled"] is True

    def test_detach(self, bus):
        log = InteractionLogger(bus).attach()
        log.detach()
        bus.emit(Events.NODE_PICKED, hand_index=0, node_id="a")
        assert log.total_events == 0

    def test_detach_bound_methods(self, bus):
        log = InteractionLogger(bus).attach()
        assert bus.listener_count == 4
        log.detach()
        assert bus.listener_count == 0

    def test_history_is_capped(self, bus):
        log = InteractionLogger(bus, max_history=3).attach()
        for i in range(5):
            bus.emit(Events.AUTO_ROTATE_CHANGED, enabled=bool(i % 2))
        assert log.total_events == 3
        assert [e["enabled"] for e in log.get_history()] == [False, True, False]
        assert len(log.get_history(2)) == 2

    def test_log_timing_returns_result(self):
        @log_timing
        def add(a, b):
            return a + b
        assert add(2, 3) == 5
        assert add.__name__ == "add"


class TestPerformanceMonitor:

    def test_measure_records_stage(self):
        perf = PerformanceMonitor()
        with perf.measure("controller"):
            time.sleep(0.002)
        assert perf.get_stage_latency("controller") > 0
        assert perf.get_stage_latency("hover") == 0.0

    def test_measure_records_on_error(self):
        perf = PerformanceMonitor()
        with pytest.raises(ValueError):
            with perf.measure("smoothing"):
                raise ValueError("bad frame")
        assert perf.get_stage_latency("smoothing") >= 0
        assert perf.get_report()["latencies_ms"]["smoothing"] >= 0

    def test_frames_and_skips(self):
        perf = PerformanceMonitor()
        for _ in range(3):
            perf.tick()
        perf.record_skip()
        report = perf.get_report()
        assert report["frames"] == 3
        assert report["skipped_frames"] == 1
        perf.reset()
        assert perf.frame_count == 0 and perf.skipped_frames == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
