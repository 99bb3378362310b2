"""
Centralized configuration manager.
Loads the YAML config and provides typed access with defaults.

The ``interaction`` section feeds InteractionSettings, which carries every
tunable threshold the gesture engine uses. Nothing else is exposed at
runtime.
"""

import os
import logging
from dataclasses import dataclass, fields, asdict

import yaml

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

# Schema: sections and their expected types
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "fps": int,
    },
    "mediapipe": {
        "max_num_hands": int,
        "min_detection_confidence": float,
        "min_tracking_confidence": float,
    },
    "interaction": {
        "pinch_threshold_px": float,
        "node_pick_threshold_px": float,
        "hover_threshold_px": float,
        "fist_curl_ratio": float,
        "min_fingers_curled": int,
        "smoothing_factor": float,
        "zoom_exponent": float,
    },
    "scene": {
        "fov": float,
    },
    "visualization": {
        "width": int,
        "height": int,
    },
}


@dataclass
class InteractionSettings:
    """Tunable constants of the gesture interaction engine."""
    pinch_threshold_px: float = 50.0
    node_pick_threshold_px: float = 80.0
    hover_threshold_px: float = 40.0
    fist_curl_ratio: float = 0.75
    min_fingers_curled: int = 3
    smoothing_factor: float = 0.4
    rotation_sensitivity_x: float = 0.006    # azimuth, radians per pixel
    rotation_sensitivity_y: float = 0.004    # polar, radians per pixel
    polar_epsilon: float = 1e-6
    zoom_exponent: float = 2.0
    min_camera_distance: float = 100.0
    max_camera_distance: float = 1100.0
    zoom_deadband: float = 0.5
    auto_rotate_speed: float = 0.8

    @classmethod
    def from_dict(cls, d: dict) -> "InteractionSettings":
        """Create settings from a config section; unknown keys are ignored."""
        d = d or {}
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for name, value in d.items():
            if name not in known:
                logger.warning("Unknown interaction setting ignored: %s", name)
                continue
            default = getattr(cls, name)
            if isinstance(default, int) and isinstance(value, float) \
                    and not value.is_integer():
                logger.warning("Non-integral value for interaction.%s: %r, using %r",
                               name, value, default)
                continue
            try:
                kwargs[name] = type(default)(value)
            except (TypeError, ValueError):
                logger.warning("Invalid value for interaction.%s: %r, using %r",
                               name, value, default)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return asdict(self)


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration manager."""

    _instance = None
    _data = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path=None, overrides: dict = None):
        """Load configuration from a YAML file, then apply overrides."""
        config_path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")

        try:
            with open(config_path, "r") as f:
                self._data = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            self._data = {}
        except yaml.YAMLError as e:
            logger.warning("Config file %s is not valid YAML (%s), using defaults",
                           config_path, e)
            self._data = {}

        if not isinstance(self._data, dict):
            logger.warning("Config root should be a mapping, got %s",
                           type(self._data).__name__)
            self._data = {}

        if overrides:
            self._data = _deep_merge(self._data, overrides)

        self._validate()
        return self

    def _validate(self):
        """Validate config fields against schema. Problems are warnings only."""
        warnings = []
        for section_name, section_fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if section is None:
                continue
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in section_fields.items():
                if field_name not in section:
                    continue
                value = section[field_name]
                # Allow int where float is expected
                if expected_type is float and isinstance(value, (int, float)) \
                        and not isinstance(value, bool):
                    continue
                if not isinstance(value, expected_type):
                    warnings.append(
                        f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                        f"got {type(value).__name__} ({value!r})"
                    )

        for w in warnings:
            logger.warning("Config validation: %s", w)
        if not warnings:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'camera.width'."""
        value = self._data
        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        value = self._data.get(section, {})
        return value if isinstance(value, dict) else {}

    def set(self, key_path: str, value):
        """Set a nested value, creating intermediate sections."""
        keys = key_path.split(".")
        node = self._data
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node[keys[-1]] = value

    @property
    def camera(self) -> dict:
        return self.get_section("camera")

    @property
    def mediapipe(self) -> dict:
        return self.get_section("mediapipe")

    @property
    def scene(self) -> dict:
        return self.get_section("scene")

    @property
    def visualization(self) -> dict:
        return self.get_section("visualization")

    @property
    def interaction(self) -> InteractionSettings:
        return InteractionSettings.from_dict(self.get_section("interaction"))

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._data = {}
