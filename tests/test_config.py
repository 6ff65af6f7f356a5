"""Tests for engine configuration."""

import math

import pytest
import yaml

from handgesture.config import EngineConfig


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.distance_tolerance == 0.02
        assert config.pinch_distance_threshold == 0.03
        assert config.pinch_validity_duration == 0.25
        assert config.smoothing_factor == 0.3
        assert config.angle_tolerance == pytest.approx(math.radians(15.0))
        assert config.frame_budget_ms == pytest.approx(1000.0 / 90.0)

    @pytest.mark.parametrize("field,value", [
        ("angle_tolerance_deg", 0.0),
        ("distance_tolerance", -0.01),
        ("pinch_distance_threshold", 0.0),
        ("pinch_validity_duration", -1.0),
        ("smoothing_factor", 0.0),
        ("smoothing_factor", 1.5),
        ("display_rate", 0.0),
    ])
    def test_validate_rejects(self, field, value):
        with pytest.raises(ValueError):
            EngineConfig(**{field: value}).validate()

    def test_validate_returns_self(self):
        config = EngineConfig(smoothing_factor=1.0)
        assert config.validate() is config


class TestYaml:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "engine.yaml"
        EngineConfig(distance_tolerance=0.025, enable_profiling=False).to_yaml(path)
        loaded = EngineConfig.from_yaml(path)
        assert loaded.distance_tolerance == 0.025
        assert loaded.enable_profiling is False

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("pinch_validity_duration: 0.5\n")
        config = EngineConfig.from_yaml(path)
        assert config.pinch_validity_duration == 0.5
        assert config.smoothing_factor == 0.3

    def test_empty_file(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("")
        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_unknown_key_warns(self, tmp_path, caplog):
        path = tmp_path / "engine.yaml"
        path.write_text("smoothing_factor: 0.4\nframe_rate: 90\n")
        with caplog.at_level("WARNING", logger="handgesture.config"):
            config = EngineConfig.from_yaml(path)
        assert config.smoothing_factor == 0.4
        assert "frame_rate" in caplog.text

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            EngineConfig.from_yaml(path)

    def test_invalid_value_rejected(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("smoothing_factor: 2.0\n")
        with pytest.raises(ValueError):
            EngineConfig.from_yaml(path)

    def test_wrong_type_rejected(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("distance_tolerance: abc\n")
        with pytest.raises(ValueError, match="distance_tolerance"):
            EngineConfig.from_yaml(path)

    def test_numeric_string_coerced(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("smoothing_factor: \"0.5\"\n")
        assert EngineConfig.from_yaml(path).smoothing_factor == 0.5

    def test_boolean_for_number_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(display_rate=True).validate()

    def test_non_boolean_profiling_flag_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(enable_profiling="sometimes").validate()

    def test_malformed_yaml_raises_yaml_error(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("distance_tolerance: [0.02\n")
        with pytest.raises(yaml.YAMLError):
            EngineConfig.from_yaml(path)

    def test_dumps(self):
        text = EngineConfig().dumps()
        assert "pinch_distance_threshold: 0.03" in text
