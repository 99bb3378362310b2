"""
Per-stage latency and FPS tracking for the interaction loop.
"""

import time
import threading
import logging
from collections import deque
from contextlib import contextmanager

logger = logging.getLogger(__name__)

STAGES = ("detection", "smoothing", "controller", "hover", "render", "total")


class PerformanceMonitor:
    """Rolling-window latency per stage plus frame rate."""

    def __init__(self, window_size=100):
        self._window_size = window_size
        self._lock = threading.Lock()
        self._frame_times = deque(maxlen=window_size)
        self._last_frame_time = None
        self._stage_times = {name: deque(maxlen=window_size) for name in STAGES}
        self._frame_count = 0
        self._skipped_frames = 0
        self._start_time = time.time()

    @contextmanager
    def measure(self, stage_name: str):
        """Context manager timing one stage of the current tick."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            with self._lock:
                times = self._stage_times.setdefault(
                    stage_name, deque(maxlen=self._window_size))
                times.append(elapsed_ms)

    def tick(self):
        """Call once per processed frame."""
        now = time.perf_counter()
        with self._lock:
            if self._last_frame_time is not None:
                self._frame_times.append(now - self._last_frame_time)
            self._last_frame_time = now
            self._frame_count += 1

    def record_skip(self):
        """Record a frame skipped by the timestamp guard."""
        with self._lock:
            self._skipped_frames += 1

    @property
    def fps(self) -> float:
        with self._lock:
            if len(self._frame_times) < 2:
                return 0.0
            avg_interval = sum(self._frame_times) / len(self._frame_times)
            return 1.0 / avg_interval if avg_interval > 0 else 0.0

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def skipped_frames(self) -> int:
        return self._skipped_frames

    def get_stage_latency(self, stage_name: str) -> float:
        """Average latency of a stage in ms (0.0 when never measured)."""
        with self._lock:
            times = self._stage_times.get(stage_name)
            if not times:
                return 0.0
            return sum(times) / len(times)

    @property
    def total_latency_ms(self) -> float:
        return self.get_stage_latency("total")

    def get_report(self) -> dict:
        with self._lock:
            stage_names = list(self._stage_times)
        return {
            "fps": round(self.fps, 1),
            "frames": self._frame_count,
            "skipped_frames": self._skipped_frames,
            "uptime_seconds": round(time.time() - self._start_time, 1),
            "latencies_ms": {name: round(self.get_stage_latency(name), 2)
                             for name in stage_names},
        }

    def print_report(self):
        report = self.get_report()
        logger.info("=" * 50)
        logger.info("PERFORMANCE REPORT")
        logger.info("FPS: %.1f | Frames: %d | Skipped: %d | Uptime: %.1fs",
                    report["fps"], report["frames"], report["skipped_frames"],
                    report["uptime_seconds"])
        for stage, latency in report["latencies_ms"].items():
            logger.info("  %-16s %7.2f ms", stage, latency)
        logger.info("=" * 50)

    def reset(self):
        with self._lock:
            self._frame_times.clear()
            self._last_frame_time = None
            for times in self._stage_times.values():
                times.clear()
            self._frame_count = 0
            self._skipped_frames = 0
            self._start_time = time.time()
