"""Painter configuration.

Defaults reproduce the reference sketch: a 620x352 canvas, ten-particle
bursts that live for ten frames, and a fixed colour per fingertip.
Any field can be overridden from a YAML file:

    width: 1280
    height: 720
    burst_size: 20
    finger_colors:
      index_finger: [255, 0, 128]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any

import yaml

from light_trails.landmarks import Finger

logger = logging.getLogger("light_trails.config")

Color = tuple[int, int, int]

WHITE: Color = (255, 255, 255)
ORANGE: Color = (255, 204, 0)
BLUE: Color = (25, 255, 255)


def default_finger_colors() -> dict[Finger, Color]:
    return {
        Finger.THUMB: WHITE,
        Finger.INDEX: ORANGE,
        Finger.MIDDLE: BLUE,
        Finger.RING: ORANGE,
        Finger.PINKY: WHITE,
    }


@dataclass
class PainterConfig:
    """All tunables for the particle painter."""
    # Canvas
    width: int = 620
    height: int = 352
    background: int = 20
    camera_opacity: int = 50  # 0-255, tint applied to the camera feed
    trail_opacity: float = 1.0

    # Particles
    burst_size: int = 10
    lifespan: float = 100.0
    decay: float = 10.0
    min_speed: float = 1.0
    max_speed: float = 8.0
    particle_size: float = 1.0
    finger_colors: dict[Finger, Color] = field(default_factory=default_finger_colors)

    # Hand tracking
    max_num_hands: int = 1
    min_detection_confidence: float = 0.7
    min_tracking_confidence: float = 0.5
    camera_index: int = 0

    # Window / export
    window_name: str = "light-trails"
    screenshot_key: str = " "
    screenshot_name: str = "screenshot"

    @property
    def speed_range(self) -> tuple[float, float]:
        return (self.min_speed, self.max_speed)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def color_for(self, finger: Finger) -> Color:
        return self.finger_colors.get(finger, WHITE)

    def validate(self) -> PainterConfig:
        """Raise ValueError on any setting the painter cannot work with."""
        for f in fields(self):
            if f.name != "finger_colors":
                _coerce(f.name, getattr(self, f.name), type(f.default))
        for color in self.finger_colors.values():
            _check_color(color)
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas size must be positive, got {self.width}x{self.height}")
        if not 0 <= self.background <= 255:
            raise ValueError(f"background must be in [0, 255], got {self.background}")
        if not 0 <= self.camera_opacity <= 255:
            raise ValueError(f"camera_opacity must be in [0, 255], got {self.camera_opacity}")
        if not 0.0 <= self.trail_opacity <= 1.0:
            raise ValueError(f"trail_opacity must be in [0, 1], got {self.trail_opacity}")
        if self.burst_size <= 0:
            raise ValueError(f"burst_size must be positive, got {self.burst_size}")
        if self.lifespan <= 0 or self.decay <= 0:
            raise ValueError("lifespan and decay must be positive")
        if self.min_speed < 0 or self.min_speed > self.max_speed:
            raise ValueError(
                f"Invalid speed range [{self.min_speed}, {self.max_speed}]"
            )
        if self.particle_size <= 0:
            raise ValueError(f"particle_size must be positive, got {self.particle_size}")
        if self.max_num_hands < 1:
            raise ValueError("max_num_hands must be at least 1")
        for finger, color in self.finger_colors.items():
            if len(color) != 3 or any(not 0 <= c <= 255 for c in color):
                raise ValueError(f"Color for {finger.value} must be an RGB triple in [0, 255]: {color}")
        if len(self.screenshot_key) != 1:
            raise ValueError(f"screenshot_key must be a single character, got {self.screenshot_key!r}")
        return self

    def to_dict(self) -> dict:
        data = asdict(self)
        data["finger_colors"] = {
            finger.value: list(color) for finger, color in self.finger_colors.items()
        }
        return data

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PainterConfig:
        """Build from plain data (e.g. parsed YAML).

        Raises:
            ValueError: a value has the wrong type or is out of range.
        """
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            if key == "finger_colors":
                kwargs[key] = _parse_finger_colors(value)
            else:
                kwargs[key] = _coerce(key, value, type(known[key].default))

        return cls(**kwargs).validate()

    @classmethod
    def from_yaml(cls, path: str | Path) -> PainterConfig:
        """Load a config file; missing keys keep their defaults."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        logger.debug("Loaded config from %s", path)
        return cls.from_dict(data)


def _coerce(name: str, value: Any, expected: type) -> Any:
    """Return ``value`` as ``expected`` or raise ValueError.

    Ints are accepted for float fields; bools are never accepted as numbers.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{name} must be {expected.__name__}, got {value!r}")
    if expected is float and isinstance(value, (int, float)):
        return float(value)
    if expected is int and isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, expected):
        raise ValueError(f"{name} must be {expected.__name__}, got {value!r}")
    return value


def _check_color(color: Any) -> Color:
    if (
        not isinstance(color, (list, tuple))
        or len(color) != 3
        or any(isinstance(c, bool) or not isinstance(c, int) for c in color)
    ):
        raise ValueError(f"Color must be an RGB triple of integers, got {color!r}")
    return tuple(color)


def _parse_finger_colors(value: Any) -> dict[Finger, Color]:
    if value is None:
        return default_finger_colors()
    if not isinstance(value, dict):
        raise ValueError(f"finger_colors must be a mapping of finger name to RGB, got {value!r}")

    colors = default_finger_colors()
    for name, color in value.items():
        finger = Finger.from_name(str(name))
        try:
            colors[finger] = _check_color(color)
        except ValueError as e:
            raise ValueError(f"finger_colors.{finger.value}: {e}") from None
    return colors
