"""
Narrow mutation surface between the gesture engine and the 3D scene.

The engine reads node positions and the camera, and writes only through
the methods below. Renderers read the scene between ticks.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

import numpy as np


class SceneNode:
    """A graph node as seen by the engine."""

    __slots__ = ("id", "group", "position", "pinned", "highlighted")

    def __init__(self, node_id, position=None, group=None):
        self.id = node_id
        self.group = group
        self.position: Optional[np.ndarray] = (
            None if position is None else np.array(position, dtype=float))
        self.pinned: Optional[np.ndarray] = None
        self.highlighted = False

    @property
    def has_position(self) -> bool:
        return self.position is not None

    @property
    def is_pinned(self) -> bool:
        return self.pinned is not None

    def __repr__(self):
        return f"SceneNode({self.id!r}, pos={self.position}, pinned={self.is_pinned})"


class GraphSceneInterface(ABC):
    """Operations the engine is allowed to perform on the scene."""

    @property
    @abstractmethod
    def camera(self):
        """The PerspectiveCamera used for projection."""

    @property
    @abstractmethod
    def controls(self):
        """The OrbitControls holding the orbit target."""

    @abstractmethod
    def get_node(self, node_id) -> Optional[SceneNode]:
        """Look up a node by id; None if it no longer exists."""

    @abstractmethod
    def positioned_nodes(self) -> Iterable[SceneNode]:
        """Nodes that currently have a defined 3D position."""

    @abstractmethod
    def set_node_position(self, node_id, position):
        """Set the visual position of a node."""

    @abstractmethod
    def set_node_pinned(self, node_id, position):
        """Pin a node at ``position``, or release it when position is None."""

    @abstractmethod
    def set_camera_pose(self, position, target):
        """Move the camera and orbit target."""

    @abstractmethod
    def request_reheat(self):
        """Ask the physics collaborator to resume its simulation."""

    @abstractmethod
    def set_node_highlight(self, node_id, highlighted: bool):
        """Toggle the hover highlight of a node."""

    @abstractmethod
    def set_auto_rotate(self, enabled: bool, speed: float):
        """Start or stop constant-speed orbit rotation."""
