"""Unit tests for the road configuration."""

import tempfile
from pathlib import Path

import pytest

from src.roadmesh.config import RoadConfig

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"


class TestRoadConfig:
    """Test suite for RoadConfig."""

    def test_defaults(self):
        """Test default values."""
        config = RoadConfig()

        assert config.road_width == 2.0
        assert config.road_resolution == 10
        assert config.curve_steps == 8
        assert config.sort_reference == "center"

    def test_from_yaml(self):
        """Test loading a road section and ignoring unknown keys."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "road.yaml"
            path.write_text(
                "road:\n  road_width: 3.5\n  curve_steps: 12\n  colour: grey\n",
                encoding='utf-8',
            )

            config = RoadConfig.from_yaml(path)

        assert config.road_width == 3.5
        assert config.curve_steps == 12
        assert config.road_resolution == 10

    def test_missing_file_gives_defaults(self):
        """Test that a missing file falls back to the defaults."""
        config = RoadConfig.from_yaml("does/not/exist.yaml")

        assert config == RoadConfig()

    def test_shipped_config(self):
        """Test that the repository config loads."""
        config = RoadConfig.from_yaml(CONFIG_DIR / "road.yaml")

        assert config.to_dict() == RoadConfig().to_dict()

    @pytest.mark.parametrize("kwargs", [
        {"road_width": -1.0},
        {"road_resolution": -2},
        {"curve_steps": 0},
        {"default_blend_weight": 1.5},
        {"sort_reference": "north"},
    ])
    def test_invalid_values(self, kwargs):
        """Test that invalid values are rejected."""
        with pytest.raises(ValueError):
            RoadConfig(**kwargs)
