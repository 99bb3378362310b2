"""
Pinch-driven node dragging.

Pinch rising edge picks the nearest projected node under the pick
threshold and pins it. While the pinch is held, the node follows the
pinch point (keeping the original grab offset) on a view-aligned plane
through its initial position. Pinch falling edge unpins it.

At most one drag exists at any time; a node therefore has at most one
owner and a hand at most one node.
"""

import logging
from typing import Optional

import numpy as np

from core.events import EventBus, Events
from core.types import DraggedNodeInfo
from modules.recognition.gesture_classifier import Edge, detect_edge

logger = logging.getLogger(__name__)


class DragController:
    """Drag-mode controller. Owns DraggedNodeInfo creation and release."""

    def __init__(self, classifier, event_bus: EventBus = None):
        self._classifier = classifier
        self._bus = event_bus or EventBus()

    def update(self, ctx, hand):
        """Process one visible hand for the current frame."""
        pinching, pinch_pos = self._classifier.pinch(
            hand.landmarks, ctx.video_params, ctx.canvas_width, ctx.canvas_height)

        if pinch_pos is None:
            if hand.is_pinching:
                self.release(ctx, hand.index)
            hand.is_pinching = False
            return

        previous = hand.is_pinching
        hand.is_pinching = pinching
        if pinching:
            hand.pinch_screen_pos = pinch_pos

        edge = detect_edge(previous, pinching)
        if edge is Edge.RISING:
            self._bus.emit(Events.PINCH_STARTED, hand_index=hand.index,
                           position=tuple(pinch_pos))
            self.pick(ctx, hand.index, pinch_pos)
        elif edge is Edge.FALLING:
            self._bus.emit(Events.PINCH_ENDED, hand_index=hand.index)
            self.release(ctx, hand.index)
        elif edge is Edge.HELD and ctx.owns_drag(hand.index):
            self.move(ctx, hand.index, pinch_pos)

    def find_node_near(self, ctx, screen_pos, threshold: float):
        """Nearest positioned node strictly within ``threshold`` pixels.

        Ties keep the first node encountered.

        Returns:
            (node, node_screen_pos) or (None, None)
        """
        scene = ctx.scene
        best_node, best_screen = None, None
        best_sq = float("inf")
        limit_sq = threshold ** 2
        for node in scene.positioned_nodes():
            node_screen = scene.camera.world_to_screen(
                node.position, ctx.canvas_width, ctx.canvas_height)
            if node_screen is None:
                continue
            d = node_screen - screen_pos
            distance_sq = float(np.dot(d, d))
            if distance_sq < best_sq and distance_sq < limit_sq:
                best_sq = distance_sq
                best_node, best_screen = node, node_screen
        return best_node, best_screen

    def pick(self, ctx, hand_index: int, pinch_pos) -> Optional[object]:
        """Try to start a drag for ``hand_index``. Returns the node id or None."""
        if ctx.dragged is not None:
            logger.debug("Hand %d pinch ignored: node %r already held by hand %d",
                         hand_index, ctx.dragged.node_id, ctx.dragged.hand_index)
            return None

        node, node_screen = self.find_node_near(
            ctx, pinch_pos, ctx.settings.node_pick_threshold_px)
        if node is None:
            return None

        ctx.dragged = DraggedNodeInfo(
            hand_index=hand_index,
            node_id=node.id,
            screen_offset=node_screen - pinch_pos,
            initial_world_pos=node.position.copy(),
        )
        ctx.scene.set_node_pinned(node.id, node.position.copy())
        self._bus.emit(Events.NODE_PICKED, hand_index=hand_index, node_id=node.id)
        return node.id

    def move(self, ctx, hand_index: int, pinch_pos) -> bool:
        """Re-project the held node under the pinch point."""
        info = ctx.dragged
        if info is None or info.hand_index != hand_index:
            return False

        scene = ctx.scene
        if scene.get_node(info.node_id) is None:
            logger.warning("Dragged node %r vanished from the scene", info.node_id)
            ctx.dragged = None
            return False

        target_screen = np.asarray(pinch_pos, dtype=float) + info.screen_offset
        world = scene.camera.screen_to_world_on_plane(
            target_screen, info.initial_world_pos, ctx.canvas_width, ctx.canvas_height)
        if world is None:
            return False

        scene.set_node_pinned(info.node_id, world)
        scene.set_node_position(info.node_id, world)
        scene.request_reheat()
        return True

    def release(self, ctx, hand_index: int, reason: str = "pinch_end") -> bool:
        """Unpin the node held by ``hand_index``, if any."""
        info = ctx.dragged
        if info is None or info.hand_index != hand_index:
            return False

        ctx.scene.set_node_pinned(info.node_id, None)
        ctx.scene.request_reheat()
        ctx.dragged = None
        self._bus.emit(Events.NODE_RELEASED, hand_index=hand_index,
                       node_id=info.node_id, reason=reason)
        return True

    def release_any(self, ctx, reason: str) -> bool:
        if ctx.dragged is None:
            return False
        return self.release(ctx, ctx.dragged.hand_index, reason)
