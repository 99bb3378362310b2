"""
Tests for the Preview Renderer
==============================
"""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.recognition.projection import compute_video_params
from modules.visualization.graph_view import GraphView, cover_crop
from synthetic_hands import FRAME_SIZE, pinch_hand_at


@pytest.fixture
def view():
    return GraphView({"width": 640, "height": 480})


class TestGraphView:

    def test_cover_crop_shape(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        params = compute_video_params(640, 480, 500, 500)
        assert cover_crop(frame, params).shape == (480, 480, 3)

    def test_render_tracking_frame(self, view, engine):
        engine.tick([pinch_hand_at((0, 0))], FRAME_SIZE, view.surface_size, 1.0)
        frame = np.full((480, 640, 3), 90, dtype=np.uint8)
        canvas = view.render(frame, engine.context, {"fps": 30.0})
        assert canvas.shape == (480, 640, 3)
        assert canvas.dtype == np.uint8
        assert canvas.any()

    def test_render_before_first_tick(self, view, engine):
        canvas = view.render(None, engine.context)
        assert canvas.shape == (480, 640, 3)

    def test_status_screen(self, view):
        canvas = view.render_status("Camera access denied", "Press 'r' to retry", error=True)
        assert canvas.shape == (480, 640, 3)
        assert canvas.any()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
