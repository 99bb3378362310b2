"""
Lightweight event bus for decoupled inter-module communication.

Controllers publish interaction milestones (pick, release, mode change)
here instead of calling loggers or UI code directly.

Usage:
    bus = EventBus()
    bus.subscribe(Events.NODE_PICKED, my_handler)
    bus.emit(Events.NODE_PICKED, hand_index=0, node_id="a")
"""

import time
import logging
import threading
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Thread-safe publish/subscribe event bus with priority ordering."""

    _instance = None

    def __new__(cls):
        """Singleton pattern: one bus per application."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._lock = threading.Lock()
        self._event_history = []
        self._max_history = 100
        self._enabled = True
        self._initialized = True

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register a listener for an event.

        Args:
            event_name: Event to listen for
            callback: Function to call. Receives **kwargs from emit().
            priority: Higher priority callbacks run first (default 0)
        """
        with self._lock:
            self._listeners[event_name].append((priority, callback))
            self._listeners[event_name].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event_name, getattr(callback, "__name__", callback), priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        """Remove a listener for an event."""
        with self._lock:
            self._listeners[event_name] = [
                (p, cb) for p, cb in self._listeners[event_name] if cb != callback
            ]

    def emit(self, event_name: str, **kwargs):
        """Dispatch an event to all listeners.

        A failing listener is logged and skipped so one bad subscriber
        cannot abort a frame.
        """
        if not self._enabled:
            return

        with self._lock:
            listeners = list(self._listeners.get(event_name, []))
            self._event_history.append({
                "event": event_name,
                "time": time.time(),
                "data": dict(kwargs),
            })
            if len(self._event_history) > self._max_history:
                self._event_history = self._event_history[-self._max_history:]

        for _, callback in listeners:
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event_name, getattr(callback, "__name__", callback), e)

    def clear(self, event_name: str = None):
        """Remove all listeners, optionally for a specific event."""
        with self._lock:
            if event_name:
                self._listeners.pop(event_name, None)
            else:
                self._listeners.clear()

    @property
    def listener_count(self) -> int:
        with self._lock:
            return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Get recent event history."""
        with self._lock:
            return self._event_history[-last_n:]

    def events_named(self, event_name: str) -> list:
        """All recorded events with the given name, oldest first."""
        with self._lock:
            return [e for e in self._event_history if e["event"] == event_name]

    def reset(self):
        """Reset singleton state (for testing)."""
        with self._lock:
            self._listeners.clear()
            self._event_history.clear()
        self._enabled = True


# =============================================================================
# Standard Event Names (constants to avoid typos)
# =============================================================================

class Events:
    """Standard event names used throughout the system."""

    # Hand lifecycle
    HAND_DETECTED = "hand_detected"
    HAND_LOST = "hand_lost"

    # Gestures
    PINCH_STARTED = "pinch_started"
    PINCH_ENDED = "pinch_ended"
    FIST_CLOSED = "fist_closed"
    FIST_OPENED = "fist_opened"

    # Scene interaction
    NODE_PICKED = "node_picked"
    NODE_RELEASED = "node_released"
    HOVER_CHANGED = "hover_changed"
    ZOOM_BASELINE_CAPTURED = "zoom_baseline_captured"

    # Mode control
    MODE_CHANGED = "mode_changed"
    AUTO_ROTATE_CHANGED = "auto_rotate_changed"

    # Lifecycle
    SYSTEM_STARTED = "system_started"
    SYSTEM_SHUTDOWN = "system_shutdown"
    SETUP_FAILED = "setup_failed"
