"""
Gesture Graph Control core
==========================

Shared types, the event bus and the per-frame gesture engine.
"""

from .events import EventBus, Events
from .types import InteractionMode, SetMode, ToggleAutoRotate, TickResult

__version__ = "1.0.0"

__all__ = ["EventBus", "Events", "InteractionMode", "SetMode", "ToggleAutoRotate", "TickResult"]
