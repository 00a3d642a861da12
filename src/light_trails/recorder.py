"""Fingertip recording and replay.

Record a live session's fingertip predictions so it can be re-painted
later without a camera:
- Deterministic renders (same recording + same seed = same image)
- Tests and CI on headless machines
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from light_trails.landmarks import FINGERS, HandPrediction, LandmarkSource

logger = logging.getLogger("light_trails.recorder")

FORMAT_VERSION = 1


@dataclass
class RecordedFrame:
    """Predictions captured in one frame."""
    timestamp: float  # seconds from recording start
    hands: list[HandPrediction]


class FingertipRecorder:
    """Collects per-frame hand predictions and writes them to disk.

    Usage:
        recorder = FingertipRecorder(width=620, height=352)
        recorder.start()
        # In the frame loop:
        recorder.add_frame(source.latest())
        recorder.save("session.json")
    """

    def __init__(self, width: int = 620, height: int = 352):
        self.width = width
        self.height = height
        self._frames: list[RecordedFrame] = []
        self._start_time: Optional[float] = None
        self._recording = False

    def start(self):
        self._frames = []
        self._start_time = time.monotonic()
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of frames captured."""
        self._recording = False
        return len(self._frames)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def add_frame(self, hands: list[HandPrediction], timestamp: Optional[float] = None):
        if not self._recording:
            return
        if timestamp is None:
            timestamp = time.monotonic() - self._start_time
        self._frames.append(RecordedFrame(timestamp=timestamp, hands=list(hands)))

    def save(self, path: str | Path) -> Path:
        """Save as JSON, or as compressed npz when the suffix is ``.npz``."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix == ".npz":
            self._save_compact(path)
        else:
            data = {
                "version": FORMAT_VERSION,
                "frame_count": len(self._frames),
                "duration": self.duration,
                "width": self.width,
                "height": self.height,
                "frames": [
                    {"timestamp": f.timestamp, "hands": [h.to_dict() for h in f.hands]}
                    for f in self._frames
                ],
            }
            with open(path, "w") as f:
                json.dump(data, f)

        logger.info("Saved %d frames (%.1fs) to %s", len(self._frames), self.duration, path)
        return path

    def _save_compact(self, path: Path):
        # hands[i, j, k] = (x, y) of finger k in hand j of frame i; NaN = finger missing
        max_hands = max((len(f.hands) for f in self._frames), default=0)
        hands_array = np.full(
            (len(self._frames), max(max_hands, 1), len(FINGERS), 2), np.nan, dtype=np.float32,
        )
        for i, frame in enumerate(self._frames):
            for j, hand in enumerate(frame.hands):
                for k, finger in enumerate(FINGERS):
                    if finger in hand.tips:
                        hands_array[i, j, k] = hand.tips[finger]

        np.savez_compressed(
            path,
            timestamps=np.array([f.timestamp for f in self._frames], dtype=np.float64),
            hands=hands_array,
            hand_counts=np.array([len(f.hands) for f in self._frames], dtype=np.int32),
            size=np.array([self.width, self.height], dtype=np.int32),
        )


class RecordingPlayer:
    """Replays a recorded session frame by frame."""

    def __init__(self, frames: list[RecordedFrame], width: int = 620, height: int = 352):
        self._frames = frames
        self.width = width
        self.height = height

    @classmethod
    def load(cls, path: str | Path) -> RecordingPlayer:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Recording not found: {path}")

        if path.suffix == ".npz":
            return cls._load_compact(path)

        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Recording {path} must contain a JSON object")

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version {version} in {path}")

        raw_frames = data.get("frames")
        if not isinstance(raw_frames, list):
            raise ValueError(f"Recording {path} has no frames")

        frames = [
            RecordedFrame(
                timestamp=float(f["timestamp"]),
                hands=[HandPrediction.from_dict(h) for h in f.get("hands", [])],
            )
            for f in raw_frames
        ]
        return cls(frames, data.get("width", 620), data.get("height", 352))

    @classmethod
    def _load_compact(cls, path: Path) -> RecordingPlayer:
        data = np.load(path, allow_pickle=False)
        timestamps = data["timestamps"]
        hands_array = data["hands"]
        hand_counts = data["hand_counts"]
        width, height = (int(v) for v in data["size"])

        frames = []
        for i in range(len(timestamps)):
            hands = []
            for j in range(int(hand_counts[i])):
                tips = {
                    finger: (float(hands_array[i, j, k, 0]), float(hands_array[i, j, k, 1]))
                    for k, finger in enumerate(FINGERS)
                    if not np.isnan(hands_array[i, j, k, 0])
                }
                hands.append(HandPrediction(tips))
            frames.append(RecordedFrame(timestamp=float(timestamps[i]), hands=hands))
        return cls(frames, width, height)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def play(self) -> Iterator[RecordedFrame]:
        """Iterate through all frames with no timing."""
        yield from self._frames

    def play_realtime(self, speed: float = 1.0) -> Iterator[RecordedFrame]:
        """Replay at the original pace, scaled by ``speed``."""
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        start = time.monotonic()
        for frame in self._frames:
            target = frame.timestamp / speed
            elapsed = time.monotonic() - start
            if target > elapsed:
                time.sleep(target - elapsed)
            yield frame

    def get_frame(self, index: int) -> Optional[RecordedFrame]:
        if 0 <= index < len(self._frames):
            return self._frames[index]
        return None


class ReplayLandmarkSource(LandmarkSource):
    """Landmark source that advances one recorded frame per ``submit``.

    With ``realtime`` set, ``submit`` also waits until the frame is due at
    the recorded pace (scaled by ``speed``).
    """

    def __init__(self, player: RecordingPlayer, realtime: bool = False, speed: float = 1.0):
        super().__init__()
        if realtime and speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self.player = player
        self._frames = player.play_realtime(speed) if realtime else player.play()
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def submit(self, frame_rgb: Optional[np.ndarray] = None) -> None:
        frame = next(self._frames, None)
        if frame is None:
            self._exhausted = True
            self._latest = []
        else:
            self._latest = frame.hands
