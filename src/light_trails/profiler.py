"""Per-frame profiling for the painting loop.

Every frame becomes one ``FrameSample``: how long each stage took and how
much particle work the frame did (bursts emitted, particles alive, pixels
blended onto the trail). Samples are kept over a rolling window.

Usage:
    profiler = FrameProfiler()

    with profiler.stage("simulation"):
        drawn = system.frame_step(trail)
    profiler.end_frame(emitted=0, live=system.count, pixels_drawn=drawn)

    print(profiler.fps, profiler.summary())
"""

from __future__ import annotations

import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional


@dataclass
class FrameSample:
    """Work done in one frame."""
    started: float  # perf_counter at the first stage of the frame
    stage_ms: dict[str, float] = field(default_factory=dict)
    emitted: int = 0
    live: int = 0
    pixels_drawn: int = 0

    @property
    def busy_ms(self) -> float:
        return self.stage_ms.get("total", sum(self.stage_ms.values()))


class FrameProfiler:
    """Collects one sample per frame.

    A frame opens implicitly at its first ``stage()`` and closes at
    ``end_frame()``. Stages entered twice in one frame accumulate.
    """

    def __init__(self, window_size: int = 120):
        self._samples: deque[FrameSample] = deque(maxlen=window_size)
        self._current: Optional[FrameSample] = None
        self._frames = 0
        self.enabled = True

    def _open(self) -> FrameSample:
        if self._current is None:
            self._current = FrameSample(started=time.perf_counter())
        return self._current

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        if not self.enabled:
            yield
            return

        sample = self._open()
        t0 = time.perf_counter()
        try:
            yield
        finally:
            elapsed = (time.perf_counter() - t0) * 1000.0
            sample.stage_ms[name] = sample.stage_ms.get(name, 0.0) + elapsed

    def end_frame(self, emitted: int = 0, live: int = 0, pixels_drawn: int = 0):
        if not self.enabled:
            return
        sample = self._open()
        sample.emitted = emitted
        sample.live = live
        sample.pixels_drawn = pixels_drawn
        self._samples.append(sample)
        self._current = None
        self._frames += 1

    @property
    def frame_count(self) -> int:
        """Frames profiled since the last reset, including ones out of the window."""
        return self._frames

    @property
    def samples(self) -> list[FrameSample]:
        return list(self._samples)

    @property
    def fps(self) -> float:
        """Frame rate from the wall-clock spacing of frame starts in the window."""
        if len(self._samples) < 2:
            return 0.0
        span = self._samples[-1].started - self._samples[0].started
        if span <= 0:
            return 0.0
        return (len(self._samples) - 1) / span

    def stage_ms(self, name: str) -> Optional[float]:
        """Average time of a stage over the frames that ran it."""
        times = [s.stage_ms[name] for s in self._samples if name in s.stage_ms]
        if not times:
            return None
        return sum(times) / len(times)

    def summary(self) -> dict:
        if not self._samples:
            return {}

        n = len(self._samples)
        stages: dict[str, dict] = {}
        for name in sorted({k for s in self._samples for k in s.stage_ms}):
            times = [s.stage_ms[name] for s in self._samples if name in s.stage_ms]
            stages[name] = {
                "avg_ms": round(sum(times) / len(times), 3),
                "max_ms": round(max(times), 3),
            }

        return {
            "frames": self._frames,
            "fps": round(self.fps, 1),
            "stages": stages,
            "avg_emitted": round(sum(s.emitted for s in self._samples) / n, 1),
            "avg_live": round(sum(s.live for s in self._samples) / n, 1),
            "avg_pixels_drawn": round(sum(s.pixels_drawn for s in self._samples) / n, 1),
            "peak_live": max(s.live for s in self._samples),
        }

    def reset(self):
        self._samples.clear()
        self._current = None
        self._frames = 0
