"""3D graph scene: nodes, perspective camera and orbit controls."""
from .base import GraphSceneInterface, SceneNode
from .camera import PerspectiveCamera, OrbitControls
from .graph_scene import GraphScene

__all__ = ["GraphSceneInterface", "SceneNode", "PerspectiveCamera", "OrbitControls", "GraphScene"]
