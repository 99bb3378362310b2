"""
Tests for Configuration
=======================
"""

import logging

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.utils.config import Config, InteractionSettings


class TestInteractionSettings:

    def test_defaults(self):
        s = InteractionSettings()
        assert s.pinch_threshold_px == 50.0
        assert s.node_pick_threshold_px == 80.0
        assert s.hover_threshold_px == 40.0
        assert s.fist_curl_ratio == 0.75
        assert s.min_fingers_curled == 3
        assert s.smoothing_factor == 0.4
        assert (s.rotation_sensitivity_x, s.rotation_sensitivity_y) == (0.006, 0.004)
        assert s.zoom_exponent == 2.0
        assert (s.min_camera_distance, s.max_camera_distance) == (100.0, 1100.0)
        assert s.zoom_deadband == 0.5
        assert s.auto_rotate_speed == 0.8

    def test_from_dict_casts_values(self):
        s = InteractionSettings.from_dict({"pinch_threshold_px": 60, "min_fingers_curled": "4"})
        assert s.pinch_threshold_px == 60.0
        assert isinstance(s.pinch_threshold_px, float)
        assert s.min_fingers_curled == 4

    def test_unknown_and_invalid_keys_fall_back(self):
        s = InteractionSettings.from_dict({"warp_speed": 9, "hover_threshold_px": "wide"})
        assert s.hover_threshold_px == 40.0
        assert not hasattr(s, "warp_speed")

    def test_non_integral_int_setting_is_rejected(self, caplog):
        with caplog.at_level(logging.WARNING):
            s = InteractionSettings.from_dict({"min_fingers_curled": 2.9})
        assert s.min_fingers_curled == 3
        assert "min_fingers_curled" in caplog.text

    def test_integral_float_for_int_setting(self):
        s = InteractionSettings.from_dict({"min_fingers_curled": 4.0})
        assert s.min_fingers_curled == 4
        assert isinstance(s.min_fingers_curled, int)

    def test_empty(self):
        assert InteractionSettings.from_dict(None) == InteractionSettings()


class TestConfig:

    def test_singleton(self):
        assert Config() is Config()

    def test_default_file_loads(self):
        config = Config().load()
        assert config.get("camera.width") == 640
        assert config.interaction == InteractionSettings()
        assert config.get("scene.camera_position") == [0.0, 0.0, 500.0]

    def test_missing_file_uses_defaults(self, tmp_path):
        config = Config().load(str(tmp_path / "missing.yaml"))
        assert config.get("camera.width", 123) == 123
        assert config.interaction == InteractionSettings()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("camera: [unclosed\n")
        config = Config().load(str(path))
        assert config.get_section("camera") == {}

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        assert Config().load(str(path)).get_section("camera") == {}

    def test_overrides_merge(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("interaction:\n  pinch_threshold_px: 45\n  hover_threshold_px: 30\n")
        config = Config().load(str(path), overrides={"interaction": {"hover_threshold_px": 20}})
        assert config.interaction.pinch_threshold_px == 45.0
        assert config.interaction.hover_threshold_px == 20.0

    def test_validation_reports_type_mismatch(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("camera:\n  width: wide\ninteraction:\n  pinch_threshold_px: 50\n")
        config = Config().load(str(path))
        warnings = config._validate()
        assert len(warnings) == 1
        assert "camera.width" in warnings[0]

    def test_set_creates_sections(self, tmp_path):
        config = Config().load(str(tmp_path / "missing.yaml"))
        config.set("camera.device_id", 2)
        assert config.camera == {"device_id": 2}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
