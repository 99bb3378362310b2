"""
Preview window renderer: mirrored camera feed, projected graph, hand
skeletons, mode bar and status screens.
"""

import logging
import cv2
import numpy as np

from core.types import MODE_INSTRUCTIONS, InteractionMode
from modules.detection.landmarks import DISPLAY_TIPS, HAND_CONNECTIONS
from modules.recognition.projection import project_landmark, screen_to_pixel

logger = logging.getLogger(__name__)

_GROUP_PALETTE = [
    (230, 160, 60), (90, 200, 120), (80, 120, 240), (200, 90, 200),
    (60, 200, 220), (160, 160, 160), (40, 140, 255), (255, 120, 120),
]


def cover_crop(frame: np.ndarray, params) -> np.ndarray:
    """Crop a native frame to the visible window described by ``params``."""
    x0 = int(round(params.offset_x))
    y0 = int(round(params.offset_y))
    x1 = x0 + int(round(params.visible_width))
    y1 = y0 + int(round(params.visible_height))
    return frame[y0:y1, x0:x1]


class GraphView:
    """Draws the interaction state onto an OpenCV canvas."""

    def __init__(self, config: dict):
        self._width = int(config.get("width", 960))
        self._height = int(config.get("height", 720))
        self._show_video = config.get("show_video", True)
        self._show_landmarks = config.get("show_landmarks", True)
        self._show_instructions = config.get("show_instructions", True)
        self._show_fps = config.get("show_fps", True)
        self._video_dim = float(config.get("video_dim", 0.5))
        self._node_radius = int(config.get("node_radius", 8))

        colors = config.get("colors", {})
        self._color_text = tuple(colors.get("text", [255, 255, 255]))
        self._color_link = tuple(colors.get("link", [120, 120, 120]))
        self._color_hover = tuple(colors.get("hover", [0, 255, 255]))
        self._color_drag = tuple(colors.get("drag", [0, 128, 255]))
        self._color_hand = tuple(colors.get("hand", [0, 255, 0]))
        self._color_pinch = tuple(colors.get("pinch", [0, 0, 255]))
        self._color_error = tuple(colors.get("error", [60, 60, 230]))
        self._group_colors = {}

    @property
    def surface_size(self) -> tuple:
        return (self._width, self._height)

    def _blank(self) -> np.ndarray:
        return np.zeros((self._height, self._width, 3), dtype=np.uint8)

    # =========================================================================
    # Tracking view
    # =========================================================================

    def render(self, frame, ctx, state: dict = None) -> np.ndarray:
        """Render one tracking frame.

        Args:
            frame: Native BGR camera frame (unmirrored) or None
            ctx: EngineContext after the latest tick
            state: Extra overlay values (fps, latency_ms)
        """
        state = state or {}
        canvas = self._blank()
        if self._show_video and frame is not None and ctx.video_params is not None:
            self._draw_video(canvas, frame, ctx.video_params)

        self._draw_graph(canvas, ctx)
        if self._show_landmarks:
            self._draw_hands(canvas, ctx)
        self._draw_mode_bar(canvas, ctx, state)
        return canvas

    def _draw_video(self, canvas, frame, params):
        visible = cover_crop(frame, params)
        if visible.size == 0:
            return
        resized = cv2.resize(visible, (self._width, self._height))
        mirrored = cv2.flip(resized, 1)
        cv2.addWeighted(mirrored, self._video_dim, canvas, 1 - self._video_dim, 0, canvas)

    def _to_pixel(self, screen_pos):
        return screen_to_pixel(screen_pos, self._width, self._height)

    def _draw_graph(self, canvas, ctx):
        scene = ctx.scene
        camera = scene.camera
        projected = {}
        for node in scene.positioned_nodes():
            screen = camera.world_to_screen(node.position, self._width, self._height)
            if screen is not None:
                projected[node.id] = self._to_pixel(screen)

        for source, target in getattr(scene, "links", []):
            if source in projected and target in projected:
                cv2.line(canvas, projected[source], projected[target], self._color_link, 1)

        dragged_id = ctx.dragged.node_id if ctx.dragged else None
        for node in scene.positioned_nodes():
            pixel = projected.get(node.id)
            if pixel is None:
                continue
            color = self._group_color(node.group)
            cv2.circle(canvas, pixel, self._node_radius, color, -1)
            if node.id == dragged_id:
                cv2.circle(canvas, pixel, self._node_radius + 4, self._color_drag, 2)
            elif node.highlighted:
                cv2.circle(canvas, pixel, self._node_radius + 3, self._color_hover, 2)

    def _group_color(self, group):
        if group not in self._group_colors:
            self._group_colors[group] = _GROUP_PALETTE[len(self._group_colors) % len(_GROUP_PALETTE)]
        return self._group_colors[group]

    def _draw_hands(self, canvas, ctx):
        params = ctx.video_params
        for hand in ctx.hands:
            if not hand.visible:
                continue
            points = {}
            for i, landmark in enumerate(hand.landmarks):
                screen = project_landmark(landmark, params, self._width, self._height)
                if screen is not None:
                    points[i] = self._to_pixel(screen)

            for start, end in HAND_CONNECTIONS:
                if start in points and end in points:
                    cv2.line(canvas, points[start], points[end], self._color_hand, 2)
            for i in DISPLAY_TIPS:
                if i in points:
                    cv2.circle(canvas, points[i], 4, self._color_hand, -1)

            if hand.is_pinching and hand.pinch_screen_pos is not None:
                cv2.circle(canvas, self._to_pixel(hand.pinch_screen_pos), 10, self._color_pinch, 2)
            if hand.is_fist_closed and hand.anchor_screen_pos is not None:
                cv2.circle(canvas, self._to_pixel(hand.anchor_screen_pos), 18, self._color_drag, 2)

    def _draw_mode_bar(self, canvas, ctx, state):
        overlay = canvas.copy()
        cv2.rectangle(overlay, (0, 0), (self._width, 70), (20, 20, 20), -1)
        cv2.addWeighted(overlay, 0.7, canvas, 0.3, 0, canvas)

        x = 15
        for key, mode in enumerate(InteractionMode, start=1):
            active = mode is ctx.mode
            color = self._color_hover if active else self._color_text
            label = f"[{key}] {mode.value.upper()}"
            cv2.putText(canvas, label, (x, 28), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color,
                        2 if active else 1)
            x += 130

        if ctx.auto_rotating:
            cv2.putText(canvas, "AUTO-ROTATE", (x + 10, 28), cv2.FONT_HERSHEY_SIMPLEX,
                        0.6, self._color_drag, 2)

        if self._show_fps and "fps" in state:
            cv2.putText(canvas, f"FPS: {state['fps']:.1f}", (self._width - 130, 28),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, self._color_text, 1)

        if self._show_instructions:
            cv2.putText(canvas, MODE_INSTRUCTIONS[ctx.mode], (15, 56),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, self._color_text, 1)

    # =========================================================================
    # Status screens
    # =========================================================================

    def render_status(self, message: str, hint: str = "", error: bool = False) -> np.ndarray:
        """Full-screen status message (loading or setup failure)."""
        canvas = self._blank()
        color = self._color_error if error else self._color_text
        self._centered_text(canvas, message, self._height // 2 - 10, 0.8, color, 2)
        if hint:
            self._centered_text(canvas, hint, self._height // 2 + 30, 0.55, self._color_text, 1)
        return canvas

    def _centered_text(self, canvas, text, y, scale, color, thickness):
        (text_w, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, thickness)
        x = max(10, (self._width - text_w) // 2)
        cv2.putText(canvas, text, (x, y), cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness)
