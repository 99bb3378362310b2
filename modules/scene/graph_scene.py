"""
In-memory graph scene: node table, camera and orbit controls.

Physics is not simulated here; reheat requests are only counted so a
force-layout collaborator (or a test) can observe them.
"""

import json
import logging

import numpy as np

from modules.scene.base import GraphSceneInterface, SceneNode
from modules.scene.camera import PerspectiveCamera, OrbitControls
from modules.utils.logger import log_timing

logger = logging.getLogger(__name__)


class GraphScene(GraphSceneInterface):
    """Node/link container implementing the engine's scene interface."""

    def __init__(self, camera: PerspectiveCamera = None, controls: OrbitControls = None):
        self._camera = camera or PerspectiveCamera()
        self._controls = controls or OrbitControls(target=self._camera.target)
        self._nodes = {}
        self.links = []
        self.reheat_count = 0

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    @log_timing
    def from_dict(cls, data: dict, config: dict = None, seed: int = 7) -> "GraphScene":
        """Build a scene from ``{"nodes": [...], "links": [...]}``.

        Nodes without x/y/z get a deterministic position inside a sphere of
        ``layout_radius`` around the origin.
        """
        config = config or {}
        camera = PerspectiveCamera(
            position=config.get("camera_position", (0.0, 0.0, 500.0)),
            target=config.get("camera_target", (0.0, 0.0, 0.0)),
            fov=config.get("fov", 50.0),
            near=config.get("near", 0.1),
            far=config.get("far", 50000.0),
        )
        scene = cls(camera=camera)
        rng = np.random.default_rng(seed)
        radius = config.get("layout_radius", 150.0)

        for raw in data.get("nodes", []):
            if "id" not in raw:
                logger.warning("Graph node without id skipped: %r", raw)
                continue
            if all(k in raw for k in ("x", "y", "z")):
                position = (raw["x"], raw["y"], raw["z"])
            else:
                direction = rng.normal(size=3)
                direction /= max(np.linalg.norm(direction), 1e-9)
                position = direction * radius * rng.random() ** (1 / 3)
            scene.add_node(raw["id"], position, group=raw.get("group"))

        for link in data.get("links", []):
            source, target = link.get("source"), link.get("target")
            if source in scene._nodes and target in scene._nodes:
                scene.links.append((source, target))
            else:
                logger.debug("Dangling link %r -> %r skipped", source, target)

        logger.info("Graph scene built: %d nodes, %d links",
                    len(scene._nodes), len(scene.links))
        return scene

    @classmethod
    def from_json_file(cls, path: str, config: dict = None) -> "GraphScene":
        with open(path, "r") as f:
            return cls.from_dict(json.load(f), config=config)

    def add_node(self, node_id, position=None, group=None) -> SceneNode:
        node = SceneNode(node_id, position, group)
        self._nodes[node_id] = node
        return node

    def remove_node(self, node_id):
        self._nodes.pop(node_id, None)
        self.links = [(s, t) for s, t in self.links if node_id not in (s, t)]

    # ------------------------------------------------------------------
    # Engine interface
    # ------------------------------------------------------------------

    @property
    def camera(self) -> PerspectiveCamera:
        return self._camera

    @property
    def controls(self) -> OrbitControls:
        return self._controls

    @property
    def nodes(self) -> list:
        return list(self._nodes.values())

    def get_node(self, node_id):
        return self._nodes.get(node_id)

    def positioned_nodes(self):
        return [node for node in self._nodes.values() if node.has_position]

    def set_node_position(self, node_id, position):
        node = self._nodes.get(node_id)
        if node is not None:
            node.position = np.array(position, dtype=float)

    def set_node_pinned(self, node_id, position):
        node = self._nodes.get(node_id)
        if node is None:
            return
        node.pinned = None if position is None else np.array(position, dtype=float)

    def set_camera_pose(self, position, target):
        self._camera.position = np.array(position, dtype=float)
        self._controls.target = np.array(target, dtype=float)
        self._camera.look_at(self._controls.target)

    def request_reheat(self):
        self.reheat_count += 1

    def set_node_highlight(self, node_id, highlighted: bool):
        node = self._nodes.get(node_id)
        if node is not None:
            node.highlighted = highlighted

    def set_auto_rotate(self, enabled: bool, speed: float):
        self._controls.auto_rotate = enabled
        self._controls.auto_rotate_speed = speed if enabled else 0.0

    # ------------------------------------------------------------------
    # Render side
    # ------------------------------------------------------------------

    def update(self, dt: float) -> bool:
        """Advance time-based camera motion between ticks."""
        return self._controls.update(self._camera, dt)
