"""
Shared domain types for the Gesture Graph Control system.

Centralizes enums, per-hand state, drag/zoom bookkeeping and the engine
context so that controllers never import each other and the frame engine
can be driven from tests with synthetic landmark frames.
"""

from enum import Enum
from typing import NamedTuple, Optional, List
import numpy as np


NUM_HAND_SLOTS = 2


# =============================================================================
# Interaction Modes
# =============================================================================

class InteractionMode(Enum):
    """The three mutually exclusive interaction modes."""
    DRAG = "drag"
    ROTATE = "rotate"
    ZOOM = "zoom"

    @classmethod
    def from_string(cls, name: str) -> Optional['InteractionMode']:
        """Convert a mode name to InteractionMode, or None if unknown."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            return None


MODE_INSTRUCTIONS = {
    InteractionMode.DRAG: "Pinch thumb and index finger together to grab and drag nodes",
    InteractionMode.ROTATE: "Make a fist and move your hand to rotate the graph",
    InteractionMode.ZOOM: "Use both hands - move wrists closer/apart to change zoom",
}


# =============================================================================
# Requests from asynchronous sources (menu, keyboard, voice)
# =============================================================================

class SetMode(NamedTuple):
    """Request to switch the interaction mode."""
    mode: InteractionMode


class ToggleAutoRotate(NamedTuple):
    """Request to flip the camera auto-rotation on or off."""
    enabled: Optional[bool] = None


# =============================================================================
# Per-hand and per-controller state
# =============================================================================

class HandSlot:
    """Engine-owned state for one of the two positional hand slots."""

    __slots__ = (
        "index", "landmarks", "anchor_screen_pos",
        "is_pinching", "pinch_screen_pos",
        "is_fist_closed", "last_fist_screen_pos",
    )

    def __init__(self, index: int):
        self.index = index
        self.landmarks: Optional[np.ndarray] = None        # (L, 3) smoothed
        self.anchor_screen_pos: Optional[np.ndarray] = None
        self.is_pinching = False
        self.pinch_screen_pos = np.zeros(2)
        self.is_fist_closed = False
        self.last_fist_screen_pos = np.zeros(2)

    @property
    def visible(self) -> bool:
        return self.landmarks is not None

    def clear_gestures(self):
        """Drop both gesture flags. Callers release drags first."""
        self.is_pinching = False
        self.is_fist_closed = False

    def __repr__(self):
        return (f"HandSlot({self.index}, visible={self.visible}, "
                f"pinch={self.is_pinching}, fist={self.is_fist_closed})")


class DraggedNodeInfo:
    """The single active drag. Holds a node id, never the node itself."""

    __slots__ = ("hand_index", "node_id", "screen_offset", "initial_world_pos")

    def __init__(self, hand_index: int, node_id, screen_offset: np.ndarray,
                 initial_world_pos: np.ndarray):
        self.hand_index = hand_index
        self.node_id = node_id
        self.screen_offset = np.asarray(screen_offset, dtype=float)
        self.initial_world_pos = np.asarray(initial_world_pos, dtype=float)

    def __repr__(self):
        return f"DraggedNodeInfo(hand={self.hand_index}, node={self.node_id!r})"


class ZoomBaseline:
    """Wrist/camera distance pair captured when a two-hand zoom starts."""

    __slots__ = ("initial_wrist_distance", "initial_camera_distance")

    def __init__(self, initial_wrist_distance: float, initial_camera_distance: float):
        self.initial_wrist_distance = initial_wrist_distance
        self.initial_camera_distance = initial_camera_distance


# =============================================================================
# Engine Context
# =============================================================================

class EngineContext:
    """All mutable interaction state, passed explicitly to every component.

    Only ModeStateMachine.transition() writes ``mode``. Everything else is
    touched from inside a tick.
    """

    def __init__(self, scene, settings, mode: InteractionMode = InteractionMode.DRAG):
        self.scene = scene
        self.settings = settings
        self.mode = mode
        self.hands: List[HandSlot] = [HandSlot(i) for i in range(NUM_HAND_SLOTS)]
        self.dragged: Optional[DraggedNodeInfo] = None
        self.zoom_baseline: Optional[ZoomBaseline] = None
        self.hovered_node_id = None
        self.auto_rotating = False

        # Refreshed every tick
        self.video_params = None
        self.canvas_width = 0
        self.canvas_height = 0

    def owns_drag(self, hand_index: int) -> bool:
        return self.dragged is not None and self.dragged.hand_index == hand_index

    @property
    def visible_hand_count(self) -> int:
        return sum(1 for hand in self.hands if hand.visible)


class TickResult:
    """Outcome of a single engine tick."""

    __slots__ = (
        "processed", "timestamp", "mode", "visible_hands",
        "pinching", "fist_closed", "dragged_node_id",
        "hovered_node_id", "auto_rotating", "latency_ms",
    )

    def __init__(self, timestamp: float = 0.0):
        self.processed = False
        self.timestamp = timestamp
        self.mode: Optional[InteractionMode] = None
        self.visible_hands = 0
        self.pinching = (False,) * NUM_HAND_SLOTS
        self.fist_closed = (False,) * NUM_HAND_SLOTS
        self.dragged_node_id = None
        self.hovered_node_id = None
        self.auto_rotating = False
        self.latency_ms = 0.0

    def __repr__(self):
        mode = self.mode.value if self.mode else None
        return (f"TickResult(processed={self.processed}, mode={mode}, "
                f"hands={self.visible_hands}, drag={self.dragged_node_id!r})")
