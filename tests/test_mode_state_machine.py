"""
Tests for Interaction Mode State Machine
========================================
"""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.events import Events
from core.types import DraggedNodeInfo, EngineContext, InteractionMode, ZoomBaseline
from modules.control.drag_controller import DragController
from modules.control.mode_state_machine import ModeStateMachine
from modules.control.rotate_controller import RotateController
from modules.recognition.gesture_classifier import GestureClassifier


@pytest.fixture
def ctx(scene, settings):
    return EngineContext(scene, settings)


@pytest.fixture
def machine(settings, bus):
    classifier = GestureClassifier(settings)
    return ModeStateMachine(DragController(classifier, bus),
                            RotateController(classifier, bus), bus)


def _hold_node(ctx, hand_index=0, node_id="a"):
    ctx.dragged = DraggedNodeInfo(hand_index, node_id, np.zeros(2), np.zeros(3))
    ctx.scene.set_node_pinned(node_id, (0, 0, 0))
    ctx.hands[hand_index].is_pinching = True


class TestTransitions:

    def test_starts_in_drag(self, ctx):
        assert ctx.mode is InteractionMode.DRAG

    def test_switch_emits_mode_changed(self, ctx, machine, bus):
        assert machine.transition(ctx, InteractionMode.ROTATE)
        assert ctx.mode is InteractionMode.ROTATE
        events = bus.events_named(Events.MODE_CHANGED)
        assert events[-1]["data"] == {"previous": "drag", "current": "rotate"}

    def test_accepts_mode_names(self, ctx, machine):
        assert machine.transition(ctx, "Zoom")
        assert ctx.mode is InteractionMode.ZOOM

    def test_same_mode_is_a_no_op(self, ctx, machine, bus):
        assert not machine.transition(ctx, InteractionMode.DRAG)
        assert bus.events_named(Events.MODE_CHANGED) == []

    def test_unknown_mode_is_ignored(self, ctx, machine):
        assert not machine.transition(ctx, "spin")
        assert ctx.mode is InteractionMode.DRAG


class TestTransitionCleanup:

    def test_leaving_drag_releases_node(self, ctx, machine, bus, scene):
        _hold_node(ctx)
        machine.transition(ctx, InteractionMode.ROTATE)
        assert ctx.dragged is None
        assert not scene.get_node("a").is_pinned
        assert not ctx.hands[0].is_pinching
        released = bus.events_named(Events.NODE_RELEASED)
        assert len(released) == 1
        assert released[0]["data"]["reason"] == "mode_change"

    def test_release_happens_before_mode_changes(self, ctx, machine, bus):
        _hold_node(ctx)
        seen = []
        bus.subscribe(Events.NODE_RELEASED, lambda **_: seen.append(ctx.mode))
        machine.transition(ctx, InteractionMode.ZOOM)
        assert seen == [InteractionMode.DRAG]

    def test_auto_rotate_stops(self, ctx, machine, scene):
        ctx.auto_rotating = True
        scene.set_auto_rotate(True, 0.8)
        machine.transition(ctx, InteractionMode.ROTATE)
        assert not ctx.auto_rotating
        assert not scene.controls.auto_rotate

    def test_fist_flags_cleared_unless_rotating(self, ctx, machine):
        machine.transition(ctx, InteractionMode.ROTATE)
        ctx.hands[0].is_fist_closed = True
        machine.transition(ctx, InteractionMode.DRAG)
        assert not ctx.hands[0].is_fist_closed

    def test_zoom_baseline_cleared_when_leaving_zoom(self, ctx, machine):
        machine.transition(ctx, InteractionMode.ZOOM)
        ctx.zoom_baseline = ZoomBaseline(0.2, 500.0)
        machine.transition(ctx, InteractionMode.DRAG)
        assert ctx.zoom_baseline is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
