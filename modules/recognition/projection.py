"""
Video-to-canvas coordinate remapping.

The camera image is shown "cover" style: scaled to fill the render
surface, with the overflowing dimension cropped evenly on both sides.
Landmarks (normalized to the full camera frame) are mapped through that
crop window into a canvas-centered, y-up pixel space, mirrored
horizontally to match a front-facing camera.
"""

import logging
from typing import NamedTuple, Optional

import numpy as np

logger = logging.getLogger(__name__)


class VideoProjectionParams(NamedTuple):
    """Visible crop window of the native video frame, in native pixels."""
    offset_x: float
    offset_y: float
    visible_width: float
    visible_height: float
    native_width: float
    native_height: float


def compute_video_params(native_width, native_height,
                         surface_width, surface_height) -> Optional[VideoProjectionParams]:
    """Compute the cover-crop window for the current frame and surface.

    Returns:
        VideoProjectionParams, or None if any dimension is zero.
    """
    if not native_width or not native_height or not surface_width or not surface_height:
        return None

    video_ar = native_width / native_height
    surface_ar = surface_width / surface_height

    if video_ar > surface_ar:
        # Video wider than the surface - crop horizontally
        scale = surface_height / native_height
        cropped_x = (native_width * scale - surface_width) / scale
        offset_x, offset_y = cropped_x / 2, 0.0
        visible_width, visible_height = native_width - cropped_x, native_height
    else:
        # Video taller than the surface - crop vertically
        scale = surface_width / native_width
        cropped_y = (native_height * scale - surface_height) / scale
        offset_x, offset_y = 0.0, cropped_y / 2
        visible_width, visible_height = native_width, native_height - cropped_y

    if visible_width <= 0 or visible_height <= 0:
        logger.warning("Visible video extent is not positive (%.1f x %.1f), using full frame",
                       visible_width, visible_height)
        return VideoProjectionParams(0.0, 0.0, float(native_width), float(native_height),
                                     float(native_width), float(native_height))

    return VideoProjectionParams(float(offset_x), float(offset_y),
                                 float(visible_width), float(visible_height),
                                 float(native_width), float(native_height))


def normalized_in_crop(landmark, params: VideoProjectionParams):
    """Position of a landmark inside the crop window, clamped to [0, 1]."""
    x = landmark[0] * params.native_width
    y = landmark[1] * params.native_height
    norm_x = min(max((x - params.offset_x) / params.visible_width, 0.0), 1.0)
    norm_y = min(max((y - params.offset_y) / params.visible_height, 0.0), 1.0)
    return norm_x, norm_y


def project_landmark(landmark, params: Optional[VideoProjectionParams],
                     canvas_width, canvas_height) -> Optional[np.ndarray]:
    """Map a normalized landmark to mirrored, centered canvas pixels.

    Landmarks outside the visible crop are clamped to its edge.

    Returns:
        np.ndarray([x, y]) with the origin at the canvas center and y up,
        or None when projection is not possible.
    """
    if landmark is None or params is None:
        return None
    if not params.native_width or not params.visible_width or not params.visible_height:
        return None
    if not canvas_width or not canvas_height:
        return None

    norm_x, norm_y = normalized_in_crop(landmark, params)
    screen_x = (1.0 - norm_x) * canvas_width - canvas_width / 2
    screen_y = (1.0 - norm_y) * canvas_height - canvas_height / 2
    return np.array([screen_x, screen_y])


def screen_to_pixel(screen_pos, canvas_width, canvas_height):
    """Convert centered y-up canvas coordinates to top-left pixel coordinates."""
    return (int(round(screen_pos[0] + canvas_width / 2)),
            int(round(canvas_height / 2 - screen_pos[1])))
