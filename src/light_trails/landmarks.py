"""Fingertip landmark types and landmark sources.

A landmark source hands the frame loop a snapshot of the latest hand
predictions. Each prediction maps the five fingers to raw (un-mirrored)
pixel coordinates in the camera frame.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

import numpy as np


class Finger(Enum):
    THUMB = "thumb"
    INDEX = "index_finger"
    MIDDLE = "middle_finger"
    RING = "ring_finger"
    PINKY = "pinky"

    @property
    def tip_index(self) -> int:
        """MediaPipe landmark index of this finger's tip."""
        return _TIP_INDICES[self]

    @classmethod
    def from_name(cls, name: str) -> Finger:
        """Accept "index_finger", "indexFinger" or the short "index"."""
        key = re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()
        for finger in cls:
            if key == finger.value or key == finger.value.split("_")[0]:
                return finger
        raise ValueError(f"Unknown finger: {name!r}")


_TIP_INDICES = {
    Finger.THUMB: 4,
    Finger.INDEX: 8,
    Finger.MIDDLE: 12,
    Finger.RING: 16,
    Finger.PINKY: 20,
}

FINGERS = tuple(Finger)


@dataclass(frozen=True)
class FingertipSample:
    """One fingertip in one frame, raw camera pixel coordinates."""
    finger: Finger
    x: float
    y: float


@dataclass
class HandPrediction:
    """Fingertip positions of a single detected hand."""
    tips: dict[Finger, tuple[float, float]]

    def samples(self) -> Iterator[FingertipSample]:
        for finger in FINGERS:
            if finger in self.tips:
                x, y = self.tips[finger]
                yield FingertipSample(finger, float(x), float(y))

    @classmethod
    def from_landmarks(cls, landmarks: np.ndarray, width: int, height: int) -> HandPrediction:
        """Build from a MediaPipe (21, 3) array normalized to [0, 1]."""
        tips = {
            finger: (float(landmarks[finger.tip_index][0]) * width,
                     float(landmarks[finger.tip_index][1]) * height)
            for finger in FINGERS
        }
        return cls(tips)

    def to_dict(self) -> dict[str, list[float]]:
        return {finger.value: [round(x, 2), round(y, 2)] for finger, (x, y) in self.tips.items()}

    @classmethod
    def from_dict(cls, data: dict) -> HandPrediction:
        return cls({Finger.from_name(k): (float(v[0]), float(v[1])) for k, v in data.items()})


class LandmarkSource:
    """Base class for anything that produces hand predictions.

    Subclasses replace ``self._latest`` as a whole list whenever a new
    prediction arrives; ``latest()`` is read once at the start of a frame.
    """

    def __init__(self):
        self._latest: list[HandPrediction] = []

    @property
    def ready(self) -> bool:
        return True

    def submit(self, frame_rgb: np.ndarray) -> None:
        """Offer a camera frame for prediction. No-op by default."""

    def latest(self) -> list[HandPrediction]:
        if not self.ready:
            return []
        return self._latest

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class StaticLandmarkSource(LandmarkSource):
    """Feeds a fixed sequence of per-frame predictions, one per submit().

    Useful for tests and scripted demos. Once the sequence runs out,
    no hand is reported.
    """

    def __init__(self, frames: Iterable[list[HandPrediction]], ready: bool = True):
        super().__init__()
        self._frames = iter(frames)
        self._ready = ready

    @property
    def ready(self) -> bool:
        return self._ready

    def set_ready(self, value: bool = True):
        self._ready = value

    def submit(self, frame_rgb: Optional[np.ndarray]) -> None:
        if not self._ready:
            return
        self._latest = next(self._frames, [])
