"""Landmark smoothing, video-to-canvas projection and gesture classifiers."""
from .smoother import LandmarkSmoother
from .projection import VideoProjectionParams, compute_video_params, project_landmark
from .gesture_classifier import GestureClassifier, Edge, detect_edge

__all__ = [
    "LandmarkSmoother",
    "VideoProjectionParams",
    "compute_video_params",
    "project_landmark",
    "GestureClassifier",
    "Edge",
    "detect_edge",
]
