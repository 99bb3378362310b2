"""
Shared fixtures: a fresh event bus, a small scene and an engine with
smoothing disabled so synthetic hands land exactly where they are placed.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.engine import GestureEngine
from core.events import EventBus
from modules.scene.graph_scene import GraphScene
from modules.utils.config import Config, InteractionSettings
from modules.utils.performance_monitor import PerformanceMonitor


@pytest.fixture(autouse=True)
def fresh_singletons():
    EventBus().reset()
    Config.reset()
    yield
    EventBus().reset()
    Config.reset()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def scene():
    """Two nodes on the z=0 plane; "a" projects to the canvas center."""
    return GraphScene.from_dict({
        "nodes": [
            {"id": "a", "group": 1, "x": 0, "y": 0, "z": 0},
            {"id": "b", "group": 2, "x": 150, "y": 0, "z": 0},
        ],
        "links": [{"source": "a", "target": "b"}],
    })


@pytest.fixture
def settings():
    return InteractionSettings(smoothing_factor=1.0)


@pytest.fixture
def engine(scene, settings, bus):
    return GestureEngine(scene, settings=settings, event_bus=bus,
                         performance_monitor=PerformanceMonitor())
