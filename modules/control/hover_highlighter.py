"""
Highlights the node closest to any free index fingertip (drag mode only).
"""

import logging

import numpy as np

from core.events import EventBus, Events
from core.types import InteractionMode
from modules.detection.landmarks import INDEX_TIP, has_landmarks
from modules.recognition.projection import project_landmark

logger = logging.getLogger(__name__)


class HoverHighlighter:
    """Tracks a single hovered node id and keeps the scene highlight in sync."""

    def __init__(self, event_bus: EventBus = None):
        self._bus = event_bus or EventBus()

    def update(self, ctx):
        if ctx.mode is not InteractionMode.DRAG:
            self._apply(ctx, None)
            return

        scene = ctx.scene
        hovered = None
        min_distance_sq = ctx.settings.hover_threshold_px ** 2

        for hand in ctx.hands:
            if not hand.visible or ctx.owns_drag(hand.index):
                continue
            if not has_landmarks(hand.landmarks, INDEX_TIP):
                continue
            tip = project_landmark(hand.landmarks[INDEX_TIP], ctx.video_params,
                                   ctx.canvas_width, ctx.canvas_height)
            if tip is None:
                continue
            for node in scene.positioned_nodes():
                node_screen = scene.camera.world_to_screen(
                    node.position, ctx.canvas_width, ctx.canvas_height)
                if node_screen is None:
                    continue
                d = node_screen - tip
                distance_sq = float(np.dot(d, d))
                if distance_sq < min_distance_sq:
                    min_distance_sq = distance_sq
                    hovered = node.id

        self._apply(ctx, hovered)

    def clear(self, ctx):
        self._apply(ctx, None)

    def _apply(self, ctx, node_id):
        previous = ctx.hovered_node_id
        if previous == node_id:
            return
        if previous is not None:
            ctx.scene.set_node_highlight(previous, False)
        if node_id is not None:
            ctx.scene.set_node_highlight(node_id, True)
        ctx.hovered_node_id = node_id
        self._bus.emit(Events.HOVER_CHANGED, previous=previous, current=node_id)
