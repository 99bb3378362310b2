"""
MediaPipe hand landmark indices and conversion of provider output into
the (L, 3) float arrays the engine works with.
"""

import logging
import numpy as np

logger = logging.getLogger(__name__)

NUM_LANDMARKS = 21

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC = 1
THUMB_MCP = 2
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_DIP = 7
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_DIP = 11
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_DIP = 15
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_DIP = 19
PINKY_TIP = 20

# Fingertips tested for curl by the fist classifier (thumb excluded)
FIST_FINGERTIPS = (INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)

# Landmarks drawn as circles in the preview
DISPLAY_TIPS = (WRIST, THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)

HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),          # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),          # Index
    (0, 9), (9, 10), (10, 11), (11, 12),     # Middle
    (0, 13), (13, 14), (14, 15), (15, 16),   # Ring
    (0, 17), (17, 18), (18, 19), (19, 20),   # Pinky
    (5, 9), (9, 13), (13, 17),               # Palm
]


def to_landmark_array(hand) -> np.ndarray:
    """Convert one hand's landmarks to a float array of shape (L, 3).

    Accepts an (L, 3) array, a sequence of (x, y, z) tuples, or a sequence
    of objects with ``x``/``y``/``z`` attributes (MediaPipe landmarks).

    Returns:
        np.ndarray, or None when the input cannot be interpreted as a
        finite, non-empty landmark list.
    """
    if hand is None:
        return None
    try:
        if isinstance(hand, np.ndarray):
            arr = hand.astype(float, copy=True)
        else:
            points = list(hand)
            if points and hasattr(points[0], "x"):
                arr = np.array([[p.x, p.y, getattr(p, "z", 0.0)] for p in points], dtype=float)
            else:
                arr = np.array(points, dtype=float)
    except (TypeError, ValueError, AttributeError) as e:
        logger.debug("Unreadable landmark list dropped: %s", e)
        return None

    if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] != 3:
        logger.debug("Landmark list with shape %s dropped", arr.shape)
        return None
    if not np.all(np.isfinite(arr)):
        logger.debug("Landmark list with non-finite values dropped")
        return None
    return arr


def has_landmarks(landmarks, *indices) -> bool:
    """True when every requested index exists in the landmark array."""
    return landmarks is not None and len(landmarks) > max(indices)
