#!/usr/bin/env python3
"""
Gesture Graph Control
Main application entry point: camera -> hand landmarks -> gesture engine
-> 3D graph scene, shown in an OpenCV preview window.

Usage:
    python main.py                          # Default config and sample graph
    python main.py --graph my_graph.json    # Load another graph
    python main.py --camera 1               # Use another camera device
    python main.py --voice-stdin            # Read voice transcripts from stdin

Keys:
    1 / 2 / 3   drag / rotate / zoom mode
    a           toggle auto-rotation
    r           retry setup after a failure
    p           print performance report
    q           quit
"""

import sys
import os
import time
import signal
import argparse
import logging
from enum import Enum

import cv2

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from modules.utils.config import Config
from modules.utils.logger import setup_logging, InteractionLogger
from modules.utils.performance_monitor import PerformanceMonitor
from modules.capture.camera_manager import CameraManager
from modules.detection.hand_detector import HandDetector, HandDetectorConfig
from modules.control.voice_commands import VoiceCommandRouter, StreamTranscriptSource
from modules.scene.graph_scene import GraphScene
from modules.visualization.graph_view import GraphView

from core.engine import GestureEngine
from core.events import EventBus, Events
from core.types import InteractionMode

logger = logging.getLogger(__name__)


class AppState(Enum):
    LOADING = "loading"
    TRACKING = "tracking"
    ERROR = "error"


class GestureGraphApp:
    """Owns the camera, detector, scene and engine, and runs the frame loop.

    The engine is only ticked while tracking. Setup failures leave the app
    in the error state with a restart hint until the user retries.
    """

    _MODE_KEYS = {
        ord("1"): InteractionMode.DRAG,
        ord("2"): InteractionMode.ROTATE,
        ord("3"): InteractionMode.ZOOM,
    }

    def __init__(self, config: Config, graph_path: str = None):
        self._config = config
        self._running = False
        self._state = AppState.LOADING
        self._status_message = "Loading..."

        self._bus = EventBus()
        self._perf = PerformanceMonitor(
            window_size=config.get("performance.metrics_window", 100)
        )

        self._scene = self._load_scene(graph_path or config.get("scene.graph_file"))
        self._engine = GestureEngine(
            self._scene,
            settings=config.interaction,
            event_bus=self._bus,
            performance_monitor=self._perf,
        )

        self._camera = CameraManager(config.camera)
        self._detector = HandDetector(HandDetectorConfig.from_dict(config.mediapipe))
        self._view = GraphView(config.visualization)

        self._interaction_logger = InteractionLogger(self._bus)
        self._interaction_logger.attach()

        self._voice_router = VoiceCommandRouter(self._engine)
        self._voice_source = None

        self._last_frame_id = None
        self._last_update = None

        logger.info("GestureGraphApp initialized (%d nodes)", len(self._scene.nodes))

    def _load_scene(self, graph_path) -> GraphScene:
        scene_cfg = self._config.scene
        if graph_path:
            if not os.path.isabs(graph_path):
                graph_path = os.path.join(self._config.base_dir, graph_path)
            try:
                return GraphScene.from_json_file(graph_path, config=scene_cfg)
            except (OSError, ValueError) as e:
                logger.error("Could not load graph %s: %s", graph_path, e)
        logger.info("Starting with an empty graph")
        return GraphScene.from_dict({}, config=scene_cfg)

    # =========================================================================
    # Setup
    # =========================================================================

    def setup(self) -> bool:
        """Open the camera and start the landmarker; enter tracking or error."""
        self._state = AppState.LOADING
        self._status_message = "Loading..."

        if not self._camera.open():
            return self._fail("Camera access denied or unavailable")
        self._camera.start_async()

        if not self._detector.start():
            self._camera.stop()
            return self._fail("Hand tracking model failed to load")

        self._engine.reset_frame_guard()
        self._last_frame_id = None
        self._state = AppState.TRACKING
        self._status_message = ""
        logger.info("Tracking started")
        return True

    def _fail(self, message: str) -> bool:
        logger.error("Setup failed: %s", message)
        self._state = AppState.ERROR
        self._status_message = message
        self._bus.emit(Events.SETUP_FAILED, message=message)
        return False

    def restart(self):
        """Retry setup from the error state."""
        if self._state is not AppState.ERROR:
            return
        logger.info("Retrying setup...")
        self._camera.stop()
        self._detector.stop()
        self.setup()

    def enable_voice_stdin(self):
        self._voice_source = StreamTranscriptSource(sys.stdin, self._voice_router)
        self._voice_source.start()

    # =========================================================================
    # Main loop
    # =========================================================================

    def run(self):
        """Start the main application loop."""
        self.setup()
        self._running = True
        self._bus.emit(Events.SYSTEM_STARTED)
        window_name = self._config.get("visualization.window_name", "Gesture Graph Control")
        show_window = self._config.get("visualization.enabled", True)

        while self._running:
            with self._perf.measure("total"):
                if self._state is AppState.TRACKING:
                    canvas = self._track_once()
                elif self._state is AppState.ERROR:
                    canvas = self._view.render_status(
                        self._status_message, "Press 'r' to retry, 'q' to quit", error=True)
                else:
                    canvas = self._view.render_status(self._status_message)

                self._update_scene()

            if show_window and canvas is not None:
                with self._perf.measure("render"):
                    cv2.imshow(window_name, canvas)
            self._handle_key(cv2.waitKey(1) & 0xFF)

        self._shutdown()

    def _track_once(self):
        frame_id, frame, timestamp = self._camera.read()
        if frame is None:
            return None
        if frame_id == self._last_frame_id:
            # No new camera frame yet; keep the scene live
            return self._view.render(frame, self._engine.context,
                                     {"fps": self._perf.fps})
        self._last_frame_id = frame_id

        with self._perf.measure("detection"):
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            hands = self._detector.detect(rgb, int(timestamp * 1000))

        self._engine.tick(hands, self._camera.frame_size, self._view.surface_size, timestamp)
        return self._view.render(frame, self._engine.context, {"fps": self._perf.fps})

    def _update_scene(self):
        now = time.monotonic()
        if self._last_update is not None:
            self._scene.update(now - self._last_update)
        self._last_update = now

    def _handle_key(self, key: int):
        if key == 255:
            return
        if key == ord("q"):
            self._running = False
        elif key in self._MODE_KEYS:
            self._engine.request_mode(self._MODE_KEYS[key])
        elif key == ord("a"):
            self._engine.request_toggle_auto_rotate()
        elif key == ord("r"):
            self.restart()
        elif key == ord("p"):
            self._perf.print_report()

    def _shutdown(self):
        """Clean shutdown of all modules."""
        logger.info("Shutting down...")
        self._running = False
        if self._voice_source is not None:
            self._voice_source.stop()
        self._engine.reset()
        self._camera.stop()
        self._detector.stop()
        self._interaction_logger.detach()
        cv2.destroyAllWindows()
        self._bus.emit(Events.SYSTEM_SHUTDOWN)

        self._perf.print_report()
        logger.info("Shutdown complete (%d interaction events).",
                    self._interaction_logger.total_events)

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._running = False

    @property
    def state(self) -> AppState:
        return self._state


def parse_args():
    parser = argparse.ArgumentParser(
        description="Gesture Graph Control - hand-gesture manipulation of a 3D graph"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config.yaml"
    )
    parser.add_argument(
        "--graph", type=str, default=None,
        help="Path to a graph JSON file ({nodes: [...], links: [...]})"
    )
    parser.add_argument(
        "--camera", type=int, default=None,
        help="Camera device ID"
    )
    parser.add_argument(
        "--voice-stdin", action="store_true",
        help="Read voice command transcripts from stdin, one per line"
    )
    return parser.parse_args()


def main():
    args = parse_args()

    config = Config()
    config.load(config_path=args.config)

    if args.camera is not None:
        config.set("camera.device_id", args.camera)

    log_cfg = config.get_section("logging")
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  GESTURE GRAPH CONTROL")
    logger.info("  Version: %s", config.get("system.version", "1.0.0"))
    logger.info("=" * 60)

    app = GestureGraphApp(config, graph_path=args.graph)

    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    if args.voice_stdin:
        app.enable_voice_stdin()

    app.run()


if __name__ == "__main__":
    main()
