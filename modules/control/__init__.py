"""Interaction mode state machine and per-mode controllers."""
from .drag_controller import DragController
from .rotate_controller import RotateController
from .zoom_controller import ZoomController
from .hover_highlighter import HoverHighlighter
from .mode_state_machine import ModeStateMachine
from .voice_commands import parse_voice_command, VoiceCommandRouter

__all__ = [
    "DragController",
    "RotateController",
    "ZoomController",
    "HoverHighlighter",
    "ModeStateMachine",
    "parse_voice_command",
    "VoiceCommandRouter",
]
