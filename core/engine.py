"""
Frame engine for the gesture interaction system.

Runs one synchronous tick per new camera frame:

    pending requests -> timestamp guard -> projection params
    -> Smoother -> Classifiers + mode controller -> Hover Highlighter

Mode changes and auto-rotate toggles may be requested from any thread;
they are queued and applied atomically at the start of the next tick so
a controller never observes a mode switch mid-frame.
"""

import time
import logging
import threading

from core.events import EventBus, Events
from core.types import (
    EngineContext, InteractionMode, SetMode, ToggleAutoRotate, TickResult,
    NUM_HAND_SLOTS,
)
from modules.control.drag_controller import DragController
from modules.control.hover_highlighter import HoverHighlighter
from modules.control.mode_state_machine import ModeStateMachine
from modules.control.rotate_controller import RotateController
from modules.control.zoom_controller import ZoomController
from modules.detection.landmarks import MIDDLE_MCP, has_landmarks, to_landmark_array
from modules.recognition.gesture_classifier import GestureClassifier
from modules.recognition.projection import compute_video_params, project_landmark
from modules.recognition.smoother import LandmarkSmoother
from modules.utils.config import InteractionSettings
from modules.utils.performance_monitor import PerformanceMonitor

logger = logging.getLogger(__name__)


class GestureEngine:
    """Maps per-frame hand landmarks to scene interactions.

    Args:
        scene: Object implementing GraphSceneInterface
        settings: InteractionSettings (defaults when omitted)
        event_bus: EventBus to publish on
        performance_monitor: PerformanceMonitor for stage timing
        initial_mode: Starting interaction mode
    """

    def __init__(self, scene, settings: InteractionSettings = None,
                 event_bus: EventBus = None, performance_monitor: PerformanceMonitor = None,
                 initial_mode: InteractionMode = InteractionMode.DRAG):
        self._settings = settings or InteractionSettings()
        self._bus = event_bus or EventBus()
        self._perf = performance_monitor or PerformanceMonitor()
        self._ctx = EngineContext(scene, self._settings, mode=initial_mode)

        self._smoother = LandmarkSmoother(alpha=self._settings.smoothing_factor,
                                          num_slots=NUM_HAND_SLOTS)
        self._classifier = GestureClassifier(self._settings)
        self._drag = DragController(self._classifier, self._bus)
        self._rotate = RotateController(self._classifier, self._bus)
        self._zoom = ZoomController(self._classifier, self._bus)
        self._hover = HoverHighlighter(self._bus)
        self._modes = ModeStateMachine(self._drag, self._rotate, self._bus)

        self._dispatch = {
            InteractionMode.DRAG: self._run_drag,
            InteractionMode.ROTATE: self._run_rotate,
            InteractionMode.ZOOM: self._run_zoom,
        }
        missing = set(InteractionMode) - set(self._dispatch)
        if missing:
            raise ValueError(f"No controller registered for modes: {missing}")

        self._requests = []
        self._request_lock = threading.Lock()
        self._last_timestamp = None

    # =========================================================================
    # Requests from UI / voice (any thread)
    # =========================================================================

    def submit(self, request):
        """Queue a SetMode or ToggleAutoRotate request for the next tick."""
        if not isinstance(request, (SetMode, ToggleAutoRotate)):
            logger.warning("Ignoring unsupported request: %r", request)
            return False
        with self._request_lock:
            self._requests.append(request)
        return True

    def request_mode(self, mode) -> bool:
        target = InteractionMode.from_string(mode)
        if target is None:
            logger.warning("Ignoring request for unknown mode: %r", mode)
            return False
        return self.submit(SetMode(target))

    def request_toggle_auto_rotate(self, enabled=None) -> bool:
        return self.submit(ToggleAutoRotate(enabled))

    def _apply_pending_requests(self):
        with self._request_lock:
            pending, self._requests = self._requests, []
        for request in pending:
            if isinstance(request, SetMode):
                self._modes.transition(self._ctx, request.mode)
            else:
                self._rotate.set_auto_rotate(self._ctx, request.enabled)

    # =========================================================================
    # Tick
    # =========================================================================

    def tick(self, hands, frame_size, surface_size, timestamp: float = None) -> TickResult:
        """Process one detection result.

        Args:
            hands: 0-2 landmark lists (each (21, 3) normalized), positional
            frame_size: (width, height) of the native camera frame
            surface_size: (width, height) of the render surface
            timestamp: Monotonic frame time; frames not newer than the last
                processed one are skipped

        Returns:
            TickResult describing the post-tick state
        """
        if timestamp is None:
            timestamp = time.monotonic()
        result = TickResult(timestamp)

        self._apply_pending_requests()

        if self._last_timestamp is not None and timestamp <= self._last_timestamp:
            self._perf.record_skip()
            return self._fill(result)
        self._last_timestamp = timestamp

        params = compute_video_params(frame_size[0], frame_size[1],
                                      surface_size[0], surface_size[1])
        if params is None:
            logger.debug("Projection unavailable (frame %s, surface %s), frame skipped",
                         frame_size, surface_size)
            return self._fill(result)

        ctx = self._ctx
        ctx.video_params = params
        ctx.canvas_width, ctx.canvas_height = surface_size
        hands = list(hands) if hands is not None else []

        start = time.perf_counter()
        with self._perf.measure("smoothing"):
            for slot in ctx.hands:
                raw = to_landmark_array(hands[slot.index]) if slot.index < len(hands) else None
                if raw is None:
                    self._lose_hand(slot)
                else:
                    self._update_hand(slot, raw)

        with self._perf.measure("controller"):
            self._dispatch[ctx.mode]()

        with self._perf.measure("hover"):
            self._hover.update(ctx)

        result.latency_ms = (time.perf_counter() - start) * 1000
        self._perf.tick()
        result.processed = True
        return self._fill(result)

    def _update_hand(self, slot, raw):
        was_visible = slot.visible
        slot.landmarks = self._smoother.smooth(slot.index, raw)
        if has_landmarks(slot.landmarks, MIDDLE_MCP):
            anchor = project_landmark(slot.landmarks[MIDDLE_MCP], self._ctx.video_params,
                                      self._ctx.canvas_width, self._ctx.canvas_height)
            if anchor is not None:
                slot.anchor_screen_pos = anchor
        if not was_visible:
            self._bus.emit(Events.HAND_DETECTED, hand_index=slot.index)

    def _lose_hand(self, slot):
        """Absent hand: drop its drag and gesture flags regardless of mode."""
        was_visible = slot.visible
        slot.landmarks = None
        slot.anchor_screen_pos = None
        if self._ctx.owns_drag(slot.index):
            self._drag.release(self._ctx, slot.index, reason="hand_lost")
        slot.clear_gestures()
        if was_visible:
            self._bus.emit(Events.HAND_LOST, hand_index=slot.index)

    # =========================================================================
    # Per-mode controllers
    # =========================================================================

    def _run_drag(self):
        for hand in self._ctx.hands:
            if not hand.visible:
                continue
            self._drag.update(self._ctx, hand)
            hand.is_fist_closed = False

    def _run_rotate(self):
        for hand in self._ctx.hands:
            if not hand.visible:
                continue
            self._rotate.update(self._ctx, hand)
            if hand.is_pinching:
                self._drag.release(self._ctx, hand.index)
            hand.is_pinching = False

    def _run_zoom(self):
        self._zoom.update(self._ctx)
        # Zoom pre-empts the other gesture channels
        for hand in self._ctx.hands:
            if hand.is_pinching:
                self._drag.release(self._ctx, hand.index)
            hand.clear_gestures()

    # =========================================================================
    # State access
    # =========================================================================

    def _fill(self, result: TickResult) -> TickResult:
        ctx = self._ctx
        result.mode = ctx.mode
        result.visible_hands = ctx.visible_hand_count
        result.pinching = tuple(h.is_pinching for h in ctx.hands)
        result.fist_closed = tuple(h.is_fist_closed for h in ctx.hands)
        result.dragged_node_id = ctx.dragged.node_id if ctx.dragged else None
        result.hovered_node_id = ctx.hovered_node_id
        result.auto_rotating = ctx.auto_rotating
        return result

    def reset_frame_guard(self):
        """Accept the next frame regardless of its timestamp (after restart)."""
        self._last_timestamp = None

    def reset(self):
        """Release everything and forget smoothing state."""
        ctx = self._ctx
        self._drag.release_any(ctx, reason="reset")
        for slot in ctx.hands:
            self._lose_hand(slot)
        ctx.zoom_baseline = None
        self._hover.clear(ctx)
        self._smoother.reset()
        self.reset_frame_guard()

    @property
    def context(self) -> EngineContext:
        return self._ctx

    @property
    def mode(self) -> InteractionMode:
        return self._ctx.mode

    @property
    def settings(self) -> InteractionSettings:
        return self._settings

    @property
    def scene(self):
        return self._ctx.scene

    @property
    def smoother(self) -> LandmarkSmoother:
        return self._smoother

    @property
    def performance(self) -> PerformanceMonitor:
        return self._perf
