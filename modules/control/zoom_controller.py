"""
Two-hand zoom: camera distance follows the wrist-to-wrist spread.

    scale        = (current_spread / baseline_spread) ** exponent
    new_distance = clamp(baseline_camera_distance * scale, min, max)

The camera moves along its current viewing direction; changes within the
deadband are ignored.
"""

import logging

import numpy as np

from core.events import EventBus, Events
from core.types import ZoomBaseline

logger = logging.getLogger(__name__)

_DEGENERATE_SPREAD = 0.001
_MIN_BASELINE_SPREAD = 0.01


class ZoomController:
    """Zoom-mode controller."""

    def __init__(self, classifier, event_bus: EventBus = None):
        self._classifier = classifier
        self._bus = event_bus or EventBus()

    def update(self, ctx) -> bool:
        """Apply zoom for this frame. Returns True if the camera moved."""
        first, second = ctx.hands[0], ctx.hands[1]
        if not (first.visible and second.visible):
            ctx.zoom_baseline = None
            return False

        spread = self._classifier.spread(first.landmarks, second.landmarks)
        if spread is None:
            ctx.zoom_baseline = None
            return False

        camera = ctx.scene.camera
        target = np.array(ctx.scene.controls.target, dtype=float)
        offset = camera.position - target
        camera_distance = float(np.linalg.norm(offset))

        baseline = ctx.zoom_baseline
        if baseline is None or not baseline.initial_wrist_distance \
                or not baseline.initial_camera_distance:
            ctx.zoom_baseline = ZoomBaseline(spread, camera_distance)
            self._bus.emit(Events.ZOOM_BASELINE_CAPTURED,
                           wrist_distance=spread, camera_distance=camera_distance)
            return False

        if baseline.initial_wrist_distance < _DEGENERATE_SPREAD:
            ctx.zoom_baseline = ZoomBaseline(max(spread, _MIN_BASELINE_SPREAD), camera_distance)
            return False

        settings = ctx.settings
        scale = (spread / baseline.initial_wrist_distance) ** settings.zoom_exponent
        new_distance = float(np.clip(baseline.initial_camera_distance * scale,
                                     settings.min_camera_distance,
                                     settings.max_camera_distance))

        if abs(new_distance - camera_distance) <= settings.zoom_deadband:
            return False
        if camera_distance == 0:
            return False

        direction = offset / camera_distance
        ctx.scene.set_camera_pose(target + direction * new_distance, target)
        return True
