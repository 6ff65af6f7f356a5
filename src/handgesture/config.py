"""Engine configuration: tolerances, pinch thresholds and smoothing.

Defaults match the values the predicates were tuned with. Override them
from a YAML file:

    angle_tolerance_deg: 15.0
    distance_tolerance: 0.02
    pinch_distance_threshold: 0.03
    pinch_validity_duration: 0.25
    smoothing_factor: 0.3
    display_rate: 90.0
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml

logger = logging.getLogger("handgesture.config")

_FLOAT_FIELDS = (
    "angle_tolerance_deg",
    "distance_tolerance",
    "pinch_distance_threshold",
    "pinch_validity_duration",
    "smoothing_factor",
    "display_rate",
)


@dataclass
class EngineConfig:
    angle_tolerance_deg: float = 15.0
    distance_tolerance: float = 0.02  # meters
    pinch_distance_threshold: float = 0.03  # meters
    pinch_validity_duration: float = 0.25  # seconds
    smoothing_factor: float = 0.3
    display_rate: float = 90.0  # Hz
    enable_profiling: bool = True

    @property
    def angle_tolerance(self) -> float:
        """Angle tolerance in radians."""
        return math.radians(self.angle_tolerance_deg)

    @property
    def frame_budget_ms(self) -> float:
        """Time one tick may take at the display rate."""
        return 1000.0 / self.display_rate

    def validate(self) -> EngineConfig:
        """Coerce numeric fields to float and raise ValueError on unusable values."""
        for name in _FLOAT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool):
                raise ValueError(f"{name} must be a number, got {value!r}")
            try:
                setattr(self, name, float(value))
            except (TypeError, ValueError) as e:
                raise ValueError(f"{name} must be a number, got {value!r}") from e
        if not isinstance(self.enable_profiling, bool):
            raise ValueError(
                f"enable_profiling must be true or false, got {self.enable_profiling!r}"
            )

        if self.angle_tolerance_deg <= 0:
            raise ValueError(f"angle_tolerance_deg must be positive, got {self.angle_tolerance_deg}")
        if self.distance_tolerance <= 0:
            raise ValueError(f"distance_tolerance must be positive, got {self.distance_tolerance}")
        if self.pinch_distance_threshold <= 0:
            raise ValueError(
                f"pinch_distance_threshold must be positive, got {self.pinch_distance_threshold}"
            )
        if self.pinch_validity_duration < 0:
            raise ValueError(
                f"pinch_validity_duration must be >= 0, got {self.pinch_validity_duration}"
            )
        if not 0.0 < self.smoothing_factor <= 1.0:
            raise ValueError(f"smoothing_factor must be in (0, 1], got {self.smoothing_factor}")
        if self.display_rate <= 0:
            raise ValueError(f"display_rate must be positive, got {self.display_rate}")
        return self

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> EngineConfig:
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
        config = cls(**{k: v for k, v in data.items() if k in known})
        return config.validate()

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        """Load a config file. Missing keys keep their defaults."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def dumps(self) -> str:
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
