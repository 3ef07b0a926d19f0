"""Road generation parameters.

`RoadConfig` carries the road-wide defaults that new per-curve
settings are initialised with, plus the parameters of the intersection
fill.  Values can be read from a YAML file such as
``configs/road.yaml``::

    road:
      road_width: 2.0
      road_resolution: 10
      curve_steps: 8
      default_blend_weight: 0.5
      sort_reference: center
"""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Union

from src.utils.config import load_config

SORT_REFERENCES = ("center", "world_x")


@dataclass
class RoadConfig:
    """Road-wide mesh generation parameters."""

    road_width: float = 2.0
    """Default half width (offset from the centre line) for new curves."""

    road_resolution: int = 10
    """Default number of quads per curve for new curves."""

    curve_steps: int = 8
    """Number of Bezier samples per intersection fill arc."""

    default_blend_weight: float = 0.5
    """Blend weight assigned to every gap of a newly built intersection."""

    sort_reference: str = "center"
    """Reference direction for the angular junction sort.

    ``"center"`` measures angles from the normalised intersection
    centre; ``"world_x"`` measures them from the world X axis.
    """

    def __post_init__(self):
        if self.road_width < 0:
            raise ValueError("road_width must be non-negative")
        if self.road_resolution < 0:
            raise ValueError("road_resolution must be non-negative")
        if self.curve_steps < 1:
            raise ValueError("curve_steps must be at least 1")
        if not 0.0 <= self.default_blend_weight <= 1.0:
            raise ValueError("default_blend_weight must lie in [0, 1]")
        if self.sort_reference not in SORT_REFERENCES:
            raise ValueError(
                f"sort_reference must be one of {SORT_REFERENCES}, got {self.sort_reference!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the configuration to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoadConfig":
        """Build a configuration from a mapping, ignoring unknown keys."""
        if "road" in data and isinstance(data["road"], dict):
            data = data["road"]
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "RoadConfig":
        """Load configuration from a YAML file.

        A missing file yields the default configuration.
        """
        return cls.from_dict(load_config(path))
