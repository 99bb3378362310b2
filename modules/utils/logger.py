"""
Structured logging with interaction event logging.
"""

import os
import logging
import logging.handlers
import time
from collections import deque
from functools import wraps

from core.events import EventBus, Events


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure structured logging for the application."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-30s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class InteractionLogger:
    """Records drag, mode and auto-rotate milestones published on the bus."""

    def __init__(self, event_bus: EventBus = None, max_history: int = 500):
        self.logger = logging.getLogger("interaction_events")
        self._history = deque(maxlen=max_history)
        self._bus = event_bus or EventBus()

    def attach(self):
        """Subscribe to the interaction events this logger tracks."""
        self._bus.subscribe(Events.NODE_PICKED, self.log_pick)
        self._bus.subscribe(Events.NODE_RELEASED, self.log_release)
        self._bus.subscribe(Events.MODE_CHANGED, self.log_mode_change)
        self._bus.subscribe(Events.AUTO_ROTATE_CHANGED, self.log_auto_rotate)
        return self

    def detach(self):
        self._bus.unsubscribe(Events.NODE_PICKED, self.log_pick)
        self._bus.unsubscribe(Events.NODE_RELEASED, self.log_release)
        self._bus.unsubscribe(Events.MODE_CHANGED, self.log_mode_change)
        self._bus.unsubscribe(Events.AUTO_ROTATE_CHANGED, self.log_auto_rotate)

    def _record(self, kind, **data):
        entry = {"timestamp": time.time(), "kind": kind}
        entry.update(data)
        self._history.append(entry)
        return entry

    def log_pick(self, hand_index=-1, node_id=None, **_):
        self._record("pick", hand_index=hand_index, node_id=node_id)
        self.logger.info("Hand %d picked up node: %s", hand_index, node_id)

    def log_release(self, hand_index=-1, node_id=None, reason="pinch_end", **_):
        self._record("release", hand_index=hand_index, node_id=node_id, reason=reason)
        self.logger.info("Hand %d released node: %s (%s)", hand_index, node_id, reason)

    def log_mode_change(self, previous=None, current=None, **_):
        self._record("mode", previous=previous, current=current)
        self.logger.info("Interaction mode changed: %s -> %s", previous, current)

    def log_auto_rotate(self, enabled=False, **_):
        self._record("auto_rotate", enabled=enabled)
        self.logger.info("Auto-Rotation %s", "ON" if enabled else "OFF")

    def get_history(self, last_n=None):
        if last_n:
            return list(self._history)[-last_n:]
        return list(self._history)

    @property
    def total_events(self):
        return len(self._history)


def log_timing(func):
    """Decorator to log function execution time."""
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
