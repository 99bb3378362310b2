"""
Exponential smoothing of raw hand landmarks.

Each landmark of each hand slot is filtered independently per axis:
    smoothed = alpha * raw + (1 - alpha) * previous
A slot whose stored landmark count differs from the incoming one is
treated as re-acquired and seeded with the raw observation.
"""

import logging
import numpy as np

logger = logging.getLogger(__name__)


class LandmarkSmoother:
    """Per-slot exponential landmark filter."""

    def __init__(self, alpha: float = 0.4, num_slots: int = 2):
        if not 0.0 < alpha <= 1.0:
            logger.warning("Smoothing factor %.3f outside (0, 1], clamping", alpha)
            alpha = min(max(alpha, 1e-3), 1.0)
        self._alpha = alpha
        self._previous = [None] * num_slots

    def smooth(self, slot_index: int, raw: np.ndarray) -> np.ndarray:
        """Smooth one hand's landmarks and update the stored state.

        Args:
            slot_index: Hand slot (0 or 1)
            raw: (L, 3) landmarks for this frame

        Returns:
            (L, 3) smoothed landmarks (a new array)
        """
        raw = np.asarray(raw, dtype=float)
        previous = self._previous[slot_index]

        if previous is None or previous.shape != raw.shape:
            if previous is not None:
                logger.debug("Hand %d re-acquired (%d -> %d landmarks), reseeding",
                             slot_index, len(previous), len(raw))
            previous = raw.copy()

        smoothed = self._alpha * raw + (1.0 - self._alpha) * previous
        self._previous[slot_index] = smoothed.copy()
        return smoothed

    def seed(self, slot_index: int, landmarks: np.ndarray):
        """Overwrite the stored state for a slot."""
        self._previous[slot_index] = np.array(landmarks, dtype=float)

    def previous(self, slot_index: int):
        """Stored state for a slot, or None."""
        return self._previous[slot_index]

    def reset(self, slot_index: int = None):
        """Forget stored state for one slot, or for all of them."""
        if slot_index is None:
            self._previous = [None] * len(self._previous)
        else:
            self._previous[slot_index] = None

    @property
    def alpha(self) -> float:
        return self._alpha
