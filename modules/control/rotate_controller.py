"""
Fist-driven camera orbit and the auto-rotate toggle.
"""

import math
import logging

import numpy as np

from core.events import EventBus, Events
from modules.detection.landmarks import WRIST, MIDDLE_MCP, has_landmarks
from modules.recognition.gesture_classifier import Edge, detect_edge
from modules.recognition.projection import project_landmark

logger = logging.getLogger(__name__)


class RotateController:
    """Rotate-mode controller."""

    def __init__(self, classifier, event_bus: EventBus = None):
        self._classifier = classifier
        self._bus = event_bus or EventBus()

    def update(self, ctx, hand):
        """Process one visible hand for the current frame."""
        previous = hand.is_fist_closed
        hand.is_fist_closed = self._classifier.fist(hand.landmarks)

        reference = self._reference_landmark(hand.landmarks)
        fist_pos = project_landmark(reference, ctx.video_params,
                                    ctx.canvas_width, ctx.canvas_height)
        if fist_pos is None:
            hand.is_fist_closed = False
            return

        edge = detect_edge(previous, hand.is_fist_closed)
        if edge is Edge.RISING:
            hand.last_fist_screen_pos = fist_pos
            if ctx.auto_rotating:
                self.set_auto_rotate(ctx, False)
            self._bus.emit(Events.FIST_CLOSED, hand_index=hand.index)
        elif edge is Edge.HELD:
            # A gripping hand always wins over auto-rotation
            if ctx.auto_rotating:
                self.set_auto_rotate(ctx, False)
            self.orbit(ctx, fist_pos - hand.last_fist_screen_pos)
            hand.last_fist_screen_pos = fist_pos
        elif edge is Edge.FALLING:
            self._bus.emit(Events.FIST_OPENED, hand_index=hand.index)

    @staticmethod
    def _reference_landmark(landmarks):
        if has_landmarks(landmarks, WRIST):
            return landmarks[WRIST]
        if has_landmarks(landmarks, MIDDLE_MCP):
            return landmarks[MIDDLE_MCP]
        return None

    def orbit(self, ctx, delta) -> bool:
        """Orbit the camera around the controls target by a screen delta."""
        settings = ctx.settings
        camera = ctx.scene.camera
        target = np.array(ctx.scene.controls.target, dtype=float)

        offset = camera.position - target
        radius = float(np.linalg.norm(offset))
        if radius == 0:
            return False

        phi = math.acos(min(max(offset[1] / radius, -1.0), 1.0))
        theta = math.atan2(offset[0], offset[2])

        theta += delta[0] * settings.rotation_sensitivity_x
        phi -= delta[1] * settings.rotation_sensitivity_y
        phi = min(max(phi, settings.polar_epsilon), math.pi - settings.polar_epsilon)

        new_offset = np.array([
            radius * math.sin(phi) * math.sin(theta),
            radius * math.cos(phi),
            radius * math.sin(phi) * math.cos(theta),
        ])
        ctx.scene.set_camera_pose(target + new_offset, target)
        return True

    def set_auto_rotate(self, ctx, enabled=None) -> bool:
        """Toggle auto-rotation, or force it when ``enabled`` is a bool.

        Returns:
            The new auto-rotation state.
        """
        new_state = (not ctx.auto_rotating) if enabled is None else bool(enabled)
        changed = new_state != ctx.auto_rotating
        ctx.auto_rotating = new_state
        speed = ctx.settings.auto_rotate_speed if new_state else 0.0
        ctx.scene.set_auto_rotate(new_state, speed)
        if changed:
            self._bus.emit(Events.AUTO_ROTATE_CHANGED, enabled=new_state)
        return new_state
