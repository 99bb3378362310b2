"""
Perspective camera and orbit controls for the 3D graph view.

Screen coordinates used here match the gesture remapper: pixels relative
to the canvas center, x to the right, y up.
"""

import math
import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

_EPS = 1e-9


def _normalize(v: np.ndarray) -> np.ndarray:
    n = np.linalg.norm(v)
    return v / n if n > _EPS else v


class PerspectiveCamera:
    """Pinhole camera looking from ``position`` towards ``target``."""

    def __init__(self, position=(0.0, 0.0, 500.0), target=(0.0, 0.0, 0.0),
                 fov: float = 50.0, near: float = 0.1, far: float = 50000.0,
                 up=(0.0, 1.0, 0.0)):
        self.position = np.array(position, dtype=float)
        self.target = np.array(target, dtype=float)
        self.up = np.array(up, dtype=float)
        self.fov = fov
        self.near = near
        self.far = far

    def basis(self):
        """(right, up, forward) unit vectors of the view."""
        forward = _normalize(self.target - self.position)
        right = np.cross(forward, self.up)
        if np.linalg.norm(right) < _EPS:
            # Looking straight along the up vector
            right = np.cross(forward, np.array([0.0, 0.0, 1.0]))
        right = _normalize(right)
        true_up = np.cross(right, forward)
        return right, true_up, forward

    def forward(self) -> np.ndarray:
        return _normalize(self.target - self.position)

    def distance_to_target(self) -> float:
        return float(np.linalg.norm(self.position - self.target))

    def _focal(self) -> float:
        return 1.0 / math.tan(math.radians(self.fov) / 2.0)

    def world_to_screen(self, point, canvas_width, canvas_height) -> Optional[np.ndarray]:
        """Project a world point to canvas-centered pixels.

        Returns:
            np.ndarray([x, y]), or None for points at or behind the camera
            or when the canvas has no extent.
        """
        if point is None or not canvas_width or not canvas_height:
            return None
        right, up, forward = self.basis()
        rel = np.asarray(point, dtype=float) - self.position
        depth = float(np.dot(rel, forward))
        if depth <= _EPS:
            return None
        aspect = canvas_width / canvas_height
        focal = self._focal()
        ndc_x = (focal / aspect) * float(np.dot(rel, right)) / depth
        ndc_y = focal * float(np.dot(rel, up)) / depth
        return np.array([ndc_x * canvas_width / 2.0, ndc_y * canvas_height / 2.0])

    def screen_ray(self, screen_pos, canvas_width, canvas_height) -> np.ndarray:
        """Unit direction of the ray from the camera through a screen point."""
        right, up, forward = self.basis()
        aspect = canvas_width / canvas_height
        focal = self._focal()
        ndc_x = screen_pos[0] / (canvas_width / 2.0)
        ndc_y = screen_pos[1] / (canvas_height / 2.0)
        direction = right * (ndc_x * aspect / focal) + up * (ndc_y / focal) + forward
        return _normalize(direction)

    def screen_to_world_on_plane(self, screen_pos, plane_point,
                                 canvas_width, canvas_height) -> Optional[np.ndarray]:
        """Intersect the ray through ``screen_pos`` with a view-aligned plane.

        The plane passes through ``plane_point`` and is perpendicular to the
        camera's viewing axis.

        Returns:
            World point, or None if the canvas has no extent or the plane
            is not in front of the camera.
        """
        if screen_pos is None or plane_point is None or not canvas_width or not canvas_height:
            return None
        forward = self.forward()
        direction = self.screen_ray(screen_pos, canvas_width, canvas_height)
        denom = float(np.dot(direction, forward))
        if abs(denom) < _EPS:
            return None
        t = float(np.dot(np.asarray(plane_point, dtype=float) - self.position, forward)) / denom
        if t <= 0:
            return None
        return self.position + direction * t

    def look_at(self, target):
        self.target = np.array(target, dtype=float)


class OrbitControls:
    """Orbit target and auto-rotation around it."""

    def __init__(self, target=(0.0, 0.0, 0.0)):
        self.target = np.array(target, dtype=float)
        self.auto_rotate = False
        self.auto_rotate_speed = 0.0

    def update(self, camera: PerspectiveCamera, dt: float) -> bool:
        """Advance auto-rotation by ``dt`` seconds.

        A speed of 2.0 is one full orbit every 30 seconds.

        Returns:
            True if the camera moved.
        """
        if not self.auto_rotate or not self.auto_rotate_speed or dt <= 0:
            return False
        angle = 2 * math.pi / 60 * self.auto_rotate_speed * dt
        offset = camera.position - self.target
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        x, z = offset[0], offset[2]
        offset[0] = x * cos_a + z * sin_a
        offset[2] = -x * sin_a + z * cos_a
        camera.position = self.target + offset
        camera.look_at(self.target)
        return True
