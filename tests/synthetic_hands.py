"""
Synthetic MediaPipe-style hands for engine tests.

Hands are laid out in canvas pixels (origin at the canvas center, y up)
and converted to normalized camera coordinates for a FRAME_W x FRAME_H
frame shown on a canvas of the same size, so no crop is involved and the
mirror/flip is the only transform:

    nx = 1 - (sx + W/2) / W
    ny = 1 - (sy + H/2) / H
"""

import numpy as np

FRAME_W, FRAME_H = 640, 480
FRAME_SIZE = (FRAME_W, FRAME_H)
SURFACE_SIZE = (FRAME_W, FRAME_H)

# Offsets from the middle-finger MCP (the hand anchor), in canvas pixels
_OPEN_HAND = [
    (0, -100),                                   # wrist
    (-30, -80), (-50, -60), (-65, -40), (-80, -20),   # thumb
    (-25, 0), (-27, 40), (-28, 70), (-30, 100),       # index
    (0, 0), (0, 45), (0, 80), (0, 110),               # middle
    (22, -3), (24, 38), (25, 68), (26, 95),           # ring
    (42, -10), (45, 20), (47, 45), (48, 65),          # pinky
]

# Fingertips folded back towards the wrist
_FIST_TIPS = {
    6: (-24, -20), 7: (-22, -35), 8: (-20, -40),
    10: (0, -20), 11: (0, -35), 12: (0, -40),
    14: (20, -22), 15: (19, -36), 16: (18, -40),
    18: (38, -30), 19: (36, -40), 20: (35, -45),
}

# Thumb tip brought next to the index tip (about 14 px apart)
_PINCH_THUMB_TIP = (-20, 90)

# Pinch midpoint relative to the anchor
PINCH_OFFSET = np.array([-25.0, 95.0])
WRIST_OFFSET = np.array([0.0, -100.0])
INDEX_TIP_OFFSET = np.array([-30.0, 100.0])


def screen_to_normalized(sx, sy, width=FRAME_W, height=FRAME_H):
    return 1.0 - (sx + width / 2) / width, 1.0 - (sy + height / 2) / height


def make_hand(anchor=(0.0, 0.0), pinch=False, fist=False):
    """Build a (21, 3) normalized landmark array.

    Args:
        anchor: Canvas position of the middle-finger MCP
        pinch: Bring thumb and index tips together
        fist: Curl all four fingers
    """
    offsets = list(_OPEN_HAND)
    if fist:
        for index, offset in _FIST_TIPS.items():
            offsets[index] = offset
    if pinch:
        offsets[4] = _PINCH_THUMB_TIP

    ax, ay = anchor
    landmarks = []
    for dx, dy in offsets:
        nx, ny = screen_to_normalized(ax + dx, ay + dy)
        landmarks.append((nx, ny, 0.0))
    return np.array(landmarks, dtype=float)


def pinch_hand_at(screen_pos):
    """Pinching hand whose pinch midpoint lands on ``screen_pos``."""
    anchor = np.asarray(screen_pos, dtype=float) - PINCH_OFFSET
    return make_hand(anchor, pinch=True)


def open_hand_with_index_at(screen_pos):
    """Open (non-pinching) hand whose index fingertip lands on ``screen_pos``."""
    anchor = np.asarray(screen_pos, dtype=float) - INDEX_TIP_OFFSET
    return make_hand(anchor)


def fist_with_wrist_at(screen_pos):
    """Closed fist whose wrist lands on ``screen_pos``."""
    anchor = np.asarray(screen_pos, dtype=float) - WRIST_OFFSET
    return make_hand(anchor, fist=True)


def open_hand_with_wrist_at(screen_pos):
    anchor = np.asarray(screen_pos, dtype=float) - WRIST_OFFSET
    return make_hand(anchor)


def hand_with_pinch_gap(gap_px, anchor=(0.0, 0.0)):
    """Open hand with the thumb tip ``gap_px`` to the right of the index tip."""
    hand = make_hand(anchor)
    ax, ay = anchor
    tip_x, tip_y = ax + INDEX_TIP_OFFSET[0], ay + INDEX_TIP_OFFSET[1]
    nx, ny = screen_to_normalized(tip_x + gap_px, tip_y)
    hand[4] = (nx, ny, 0.0)
    return hand
