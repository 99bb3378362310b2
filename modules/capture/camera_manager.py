"""
Async camera capture with threaded buffering for minimal latency.

Frames are delivered unmirrored; mirroring happens once, in the
coordinate remapper and the preview renderer.
"""

import time
import threading
import logging
import cv2

logger = logging.getLogger(__name__)


class CameraManager:
    """Threaded capture that always holds the newest frame and its timestamp."""

    _BACKENDS = {
        "v4l2": cv2.CAP_V4L2,
        "dshow": cv2.CAP_DSHOW,
        "gstreamer": cv2.CAP_GSTREAMER,
        "auto": cv2.CAP_ANY,
    }

    def __init__(self, config: dict):
        self._device_id = config.get("device_id", 0)
        self._width = config.get("width", 640)
        self._height = config.get("height", 480)
        self._fps = config.get("fps", 30)
        self._backend = config.get("backend", "auto")
        self._buffer_size = config.get("buffer_size", 1)
        self._warmup_frames = config.get("warmup_frames", 5)

        self._cap = None
        self._frame = None
        self._frame_id = 0
        self._timestamp = None
        self._frame_size = (0, 0)
        self._lock = threading.Lock()
        self._running = False
        self._thread = None
        self._capture_times = []

    def open(self) -> bool:
        """Open the device. Returns False if it cannot be opened."""
        backend = self._BACKENDS.get(self._backend, cv2.CAP_ANY)
        self._cap = cv2.VideoCapture(self._device_id, backend)
        if not self._cap.isOpened():
            logger.error("Failed to open camera %s with backend %s", self._device_id, self._backend)
            self._cap = None
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        self._cap.set(cv2.CAP_PROP_FPS, self._fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._buffer_size)

        actual_w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self._frame_size = (actual_w, actual_h)
        logger.info("Camera opened: %dx%d (requested %dx%d @ %d)",
                    actual_w, actual_h, self._width, self._height, self._fps)

        for _ in range(self._warmup_frames):
            self._cap.read()
        return True

    def start_async(self):
        """Start threaded frame capture."""
        if self._running or self._cap is None:
            return
        self._running = True
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()
        logger.info("Async capture started")

    def _capture_loop(self):
        while self._running:
            start = time.perf_counter()
            ret, frame = self._cap.read()
            elapsed_ms = (time.perf_counter() - start) * 1000

            if ret and frame is not None:
                with self._lock:
                    self._frame = frame
                    self._frame_id += 1
                    self._timestamp = time.monotonic()
                    self._frame_size = (frame.shape[1], frame.shape[0])
                    self._capture_times.append(elapsed_ms)
                    if len(self._capture_times) > 100:
                        self._capture_times = self._capture_times[-100:]
            else:
                time.sleep(0.001)

    def read(self):
        """Get the latest frame (non-blocking).

        Returns:
            tuple: (frame_id, frame, timestamp) or (None, None, None)
        """
        with self._lock:
            if self._frame is not None:
                return self._frame_id, self._frame.copy(), self._timestamp
            return None, None, None

    @property
    def frame_size(self) -> tuple:
        """Native (width, height) of the delivered frames."""
        return self._frame_size

    @property
    def avg_capture_time_ms(self) -> float:
        if not self._capture_times:
            return 0.0
        return sum(self._capture_times) / len(self._capture_times)

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def stop(self):
        """Stop async capture and release the camera."""
        self._running = False
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        self._thread = None
        if self._cap:
            self._cap.release()
            self._cap = None
        with self._lock:
            self._frame = None
        logger.info("Camera stopped")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.stop()
