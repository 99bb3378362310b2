"""
Hand landmark provider backed by the MediaPipe Tasks HandLandmarker.

Produces up to two (21, 3) normalized landmark arrays per frame, in the
order MediaPipe reports them. Slot order is positional; there is no
left/right assignment.
"""

import logging
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from modules.detection.landmarks import to_landmark_array

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)
DEFAULT_MODEL_PATH = Path(__file__).parent.parent.parent / "models" / "hand_landmarker.task"


@dataclass
class HandDetectorConfig:
    """Settings for the landmarker (``mediapipe`` config section)."""
    model_path: str = ""
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    running_mode: str = "VIDEO"

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        d = d or {}
        return cls(
            model_path=d.get("model_path", ""),
            max_num_hands=int(d.get("max_num_hands", 2)),
            min_detection_confidence=float(d.get("min_detection_confidence", 0.5)),
            min_tracking_confidence=float(d.get("min_tracking_confidence", 0.5)),
            min_presence_confidence=float(d.get("min_presence_confidence", 0.5)),
            running_mode=str(d.get("running_mode", "VIDEO")).upper(),
        )


def download_model(url: str, save_path: Path) -> bool:
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        logger.info("Model already exists at %s", save_path)
        return True

    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading hand landmarker model to %s...", save_path)
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete")
        return True
    except OSError as e:
        logger.error("Failed to download model: %s", e)
        return False


class HandDetector:
    """
    HandLandmarker wrapper returning plain numpy landmark arrays.

    Example:
        >>> detector = HandDetector(HandDetectorConfig())
        >>> detector.start()
        >>> hands = detector.detect(rgb_image, timestamp_ms)  # RGB input
        >>> detector.stop()
    """

    _RUNNING_MODES = {
        "IMAGE": vision.RunningMode.IMAGE,
        "VIDEO": vision.RunningMode.VIDEO,
    }

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker = None
        self._last_timestamp_ms = -1

    def start(self) -> bool:
        """Create the landmarker. Returns False on any setup failure."""
        model_path = Path(self.config.model_path or DEFAULT_MODEL_PATH)
        if not model_path.exists():
            if not download_model(HAND_LANDMARKER_MODEL_URL, model_path):
                logger.error("Could not obtain hand landmarker model")
                return False

        running_mode = self._RUNNING_MODES.get(self.config.running_mode)
        if running_mode is None:
            logger.warning("Unsupported running mode %r, using VIDEO", self.config.running_mode)
            running_mode = vision.RunningMode.VIDEO

        options = vision.HandLandmarkerOptions(
            base_options=python.BaseOptions(model_asset_path=str(model_path)),
            running_mode=running_mode,
            num_hands=self.config.max_num_hands,
            min_hand_detection_confidence=self.config.min_detection_confidence,
            min_hand_presence_confidence=self.config.min_presence_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )
        try:
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            logger.error("Failed to initialize HandLandmarker: %s", e)
            return False

        self._last_timestamp_ms = -1
        logger.info("HandLandmarker initialized (model=%s, max_hands=%d)",
                    model_path, self.config.max_num_hands)
        return True

    def stop(self):
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker stopped")

    def detect(self, rgb_image: np.ndarray, timestamp_ms: int) -> List[np.ndarray]:
        """Detect hands in an RGB frame.

        Args:
            rgb_image: (H, W, 3) uint8 RGB array
            timestamp_ms: Frame time in milliseconds; VIDEO mode requires
                strictly increasing values

        Returns:
            List of (21, 3) landmark arrays, at most ``max_num_hands`` long
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return []

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_image)
        if self.config.running_mode == "IMAGE":
            result = self._landmarker.detect(mp_image)
        else:
            timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
            self._last_timestamp_ms = timestamp_ms
            result = self._landmarker.detect_for_video(mp_image, timestamp_ms)

        hands = []
        for hand_landmarks in result.hand_landmarks:
            landmarks = to_landmark_array(hand_landmarks)
            if landmarks is not None:
                hands.append(landmarks)
        return hands

    @property
    def is_running(self) -> bool:
        return self._landmarker is not None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
