"""
Tests for Gesture Classifiers
=============================
"""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.detection.landmarks import (
    WRIST, MIDDLE_MCP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP, to_landmark_array,
)
from modules.recognition.gesture_classifier import (
    Edge, GestureClassifier, classify_pinch, curled_finger_count, detect_edge,
    is_fist, pinch_distance, wrist_distance,
)
from modules.recognition.projection import compute_video_params
from modules.utils.config import InteractionSettings
from synthetic_hands import FRAME_W, FRAME_H, make_hand, pinch_hand_at


@pytest.fixture
def params():
    return compute_video_params(FRAME_W, FRAME_H, FRAME_W, FRAME_H)


@pytest.fixture
def classifier():
    return GestureClassifier(InteractionSettings())


class TestEdges:

    @pytest.mark.parametrize("previous,current,expected", [
        (False, True, Edge.RISING),
        (True, True, Edge.HELD),
        (True, False, Edge.FALLING),
        (False, False, Edge.NONE),
    ])
    def test_detect_edge(self, previous, current, expected):
        assert detect_edge(previous, current) is expected


class TestPinch:

    def test_threshold_is_strict(self):
        assert classify_pinch(49.9, 50.0)
        assert not classify_pinch(50.0, 50.0)
        assert not classify_pinch(None, 50.0)

    def test_pinching_hand(self, classifier, params):
        pinching, pos = classifier.pinch(pinch_hand_at((10, 20)), params, FRAME_W, FRAME_H)
        assert pinching
        np.testing.assert_allclose(pos, [10.0, 20.0], atol=1e-9)

    def test_open_hand_is_not_pinching(self, classifier, params):
        hand = make_hand((0, 0))
        pinching, pos = classifier.pinch(hand, params, FRAME_W, FRAME_H)
        assert not pinching
        assert pos is not None
        assert pinch_distance(hand, params, FRAME_W, FRAME_H) > 100

    def test_distance_is_in_screen_pixels(self, params):
        distance = pinch_distance(pinch_hand_at((0, 0)), params, FRAME_W, FRAME_H)
        assert distance == pytest.approx(np.hypot(10, 10))

    def test_missing_tips(self, classifier, params):
        short = make_hand((0, 0))[:4]
        assert classifier.pinch(short, params, FRAME_W, FRAME_H) == (False, None)
        assert classifier.pinch(None, params, FRAME_W, FRAME_H) == (False, None)


class TestFist:

    def test_open_hand(self, classifier):
        hand = make_hand((0, 0))
        assert curled_finger_count(hand) == 0
        assert not classifier.fist(hand)

    def test_closed_fist(self, classifier):
        hand = make_hand((0, 0), fist=True)
        assert curled_finger_count(hand) == 4
        assert classifier.fist(hand)

    def test_three_curled_fingers_are_enough(self):
        hand = make_hand((0, 0), fist=True)
        hand[INDEX_TIP] = make_hand((0, 0))[INDEX_TIP]
        assert curled_finger_count(hand) == 3
        assert is_fist(hand, min_curled=3)
        assert not is_fist(hand, min_curled=4)

    def test_two_curled_fingers_are_not(self):
        hand = make_hand((0, 0), fist=True)
        open_hand = make_hand((0, 0))
        hand[INDEX_TIP] = open_hand[INDEX_TIP]
        hand[MIDDLE_TIP] = open_hand[MIDDLE_TIP]
        assert not is_fist(hand)

    def test_zero_palm_size_counts_nothing(self):
        hand = make_hand((0, 0), fist=True)
        hand[MIDDLE_MCP] = hand[WRIST]
        assert curled_finger_count(hand) == 0

    def test_depth_is_taken_into_account(self):
        hand = make_hand((0, 0), fist=True)
        for tip in (INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP):
            hand[tip, 2] = 1.0
        assert curled_finger_count(hand) == 0

    def test_short_landmark_list(self):
        assert curled_finger_count(make_hand((0, 0))[:10]) == 0


class TestSpread:

    def test_wrist_distance(self):
        first = np.zeros((21, 3))
        second = np.zeros((21, 3))
        second[WRIST] = (0.3, 0.4, 0.0)
        assert wrist_distance(first, second) == pytest.approx(0.5)

    def test_missing_hand(self, classifier):
        assert classifier.spread(None, np.zeros((21, 3))) is None


class TestLandmarkConversion:

    def test_accepts_objects_with_coordinates(self):
        class Point:
            def __init__(self, x, y, z):
                self.x, self.y, self.z = x, y, z
        arr = to_landmark_array([Point(0.1, 0.2, 0.3)] * 21)
        assert arr.shape == (21, 3)
        np.testing.assert_allclose(arr[0], [0.1, 0.2, 0.3])

    def test_rejects_malformed_input(self):
        assert to_landmark_array(None) is None
        assert to_landmark_array([]) is None
        assert to_landmark_array(np.zeros((21, 2))) is None
        bad = np.zeros((21, 3))
        bad[3, 1] = np.nan
        assert to_landmark_array(bad) is None

    def test_copies_input(self):
        raw = np.zeros((21, 3))
        arr = to_landmark_array(raw)
        arr[0, 0] = 1.0
        assert raw[0, 0] == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
