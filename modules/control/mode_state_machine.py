"""
Interaction mode state machine.

The only writer of ``EngineContext.mode``. A transition releases any
active drag, stops auto-rotation and clears the gesture state that does
not belong to the target mode, all before the next frame is dispatched.
"""

import logging

from core.events import EventBus, Events
from core.types import InteractionMode

logger = logging.getLogger(__name__)


class ModeStateMachine:
    """drag <-> rotate <-> zoom, starting in drag."""

    def __init__(self, drag_controller, rotate_controller, event_bus: EventBus = None):
        self._drag = drag_controller
        self._rotate = rotate_controller
        self._bus = event_bus or EventBus()

    def transition(self, ctx, target) -> bool:
        """Switch ``ctx`` to ``target``.

        Args:
            ctx: EngineContext
            target: InteractionMode or mode name

        Returns:
            True if the mode changed.
        """
        mode = InteractionMode.from_string(target)
        if mode is None:
            logger.warning("Ignoring request for unknown mode: %r", target)
            return False
        if mode is ctx.mode:
            return False

        previous = ctx.mode

        if ctx.dragged is not None:
            self._drag.release(ctx, ctx.dragged.hand_index, reason="mode_change")

        if ctx.auto_rotating:
            self._rotate.set_auto_rotate(ctx, False)

        for hand in ctx.hands:
            if mode is not InteractionMode.ROTATE:
                hand.is_fist_closed = False
            if mode is not InteractionMode.DRAG:
                if hand.is_pinching:
                    self._drag.release(ctx, hand.index, reason="mode_change")
                hand.is_pinching = False

        if mode is not InteractionMode.ZOOM:
            ctx.zoom_baseline = None

        ctx.mode = mode
        logger.debug("Mode transition %s -> %s", previous.value, mode.value)
        self._bus.emit(Events.MODE_CHANGED, previous=previous.value, current=mode.value)
        return True
