"""
Rule-based classifiers for the three interaction gestures.

    Pinch  - thumb tip / index tip distance in *screen* space, so picking
             matches what the user sees on the canvas.
    Fist   - fingertip-to-wrist curl ratio in *3D* landmark space, so the
             test is depth aware and independent of the crop.
    Spread - 3D wrist-to-wrist distance between the two hands.

All functions return None/False on missing input instead of raising.
"""

import logging
from enum import Enum
from typing import Optional

import numpy as np

from modules.detection.landmarks import (
    WRIST, THUMB_TIP, INDEX_TIP, MIDDLE_MCP, FIST_FINGERTIPS, has_landmarks,
)
from modules.recognition.projection import project_landmark

logger = logging.getLogger(__name__)


class Edge(Enum):
    """Transition of a boolean gesture flag between two frames."""
    NONE = "none"
    RISING = "rising"
    HELD = "held"
    FALLING = "falling"


def detect_edge(previous: bool, current: bool) -> Edge:
    if current and not previous:
        return Edge.RISING
    if current and previous:
        return Edge.HELD
    if previous and not current:
        return Edge.FALLING
    return Edge.NONE


# =============================================================================
# Pinch
# =============================================================================

def pinch_points(landmarks, params, canvas_width, canvas_height):
    """Screen positions of the thumb tip and index tip, or None."""
    if not has_landmarks(landmarks, THUMB_TIP, INDEX_TIP):
        return None
    thumb = project_landmark(landmarks[THUMB_TIP], params, canvas_width, canvas_height)
    index = project_landmark(landmarks[INDEX_TIP], params, canvas_width, canvas_height)
    if thumb is None or index is None:
        return None
    return thumb, index


def pinch_distance(landmarks, params, canvas_width, canvas_height) -> Optional[float]:
    """Screen-space thumb/index distance in pixels, or None."""
    points = pinch_points(landmarks, params, canvas_width, canvas_height)
    if points is None:
        return None
    thumb, index = points
    return float(np.linalg.norm(thumb - index))


def classify_pinch(distance: Optional[float], threshold: float) -> bool:
    """Single threshold for both engage and release (strictly below)."""
    return distance is not None and distance < threshold


# =============================================================================
# Fist
# =============================================================================

def _distance_sq(a, b) -> float:
    d = np.asarray(a, dtype=float) - np.asarray(b, dtype=float)
    return float(np.dot(d, d))


def curled_finger_count(landmarks, curl_ratio: float = 0.75) -> int:
    """Number of fingertips whose wrist distance is under curl_ratio * palm size.

    Palm size is the wrist to middle-finger MCP distance. Returns 0 when the
    reference distance is exactly zero.
    """
    if not has_landmarks(landmarks, WRIST, MIDDLE_MCP, *FIST_FINGERTIPS):
        return 0
    wrist = landmarks[WRIST]
    reference_sq = _distance_sq(wrist, landmarks[MIDDLE_MCP])
    if reference_sq == 0:
        return 0
    threshold_sq = curl_ratio ** 2
    return sum(
        1 for tip in FIST_FINGERTIPS
        if _distance_sq(landmarks[tip], wrist) / reference_sq < threshold_sq
    )


def is_fist(landmarks, curl_ratio: float = 0.75, min_curled: int = 3) -> bool:
    return curled_finger_count(landmarks, curl_ratio) >= min_curled


# =============================================================================
# Two-hand spread
# =============================================================================

def wrist_distance(first, second) -> Optional[float]:
    """3D distance between the wrists of two hands, or None."""
    if not has_landmarks(first, WRIST) or not has_landmarks(second, WRIST):
        return None
    return float(np.linalg.norm(np.asarray(first[WRIST]) - np.asarray(second[WRIST])))


class GestureClassifier:
    """Applies the configured thresholds to the per-hand classifiers."""

    def __init__(self, settings):
        self._settings = settings

    def pinch(self, landmarks, params, canvas_width, canvas_height):
        """Classify a pinch.

        Returns:
            (is_pinching, pinch_screen_pos or None). The position is the
            midpoint of the projected thumb and index tips.
        """
        points = pinch_points(landmarks, params, canvas_width, canvas_height)
        if points is None:
            return False, None
        thumb, index = points
        distance = float(np.linalg.norm(thumb - index))
        pinching = classify_pinch(distance, self._settings.pinch_threshold_px)
        return pinching, (thumb + index) / 2.0

    def fist(self, landmarks) -> bool:
        return is_fist(landmarks,
                       curl_ratio=self._settings.fist_curl_ratio,
                       min_curled=self._settings.min_fingers_curled)

    def spread(self, first, second) -> Optional[float]:
        return wrist_distance(first, second)
