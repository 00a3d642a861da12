"""Frame loop controller: landmarks → particles → trail → display."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from light_trails.canvas import TrailSurface
from light_trails.compositor import FrameCompositor
from light_trails.config import PainterConfig
from light_trails.landmarks import HandPrediction, LandmarkSource
from light_trails.particles import ParticleEmitter, ParticleSystem
from light_trails.profiler import FrameProfiler

logger = logging.getLogger("light_trails.pipeline")


@dataclass
class FrameResult:
    """Outcome of one frame."""
    image: np.ndarray  # copy of the composited RGB canvas
    frame_index: int
    hand_detected: bool
    emitted: int
    live_particles: int
    pixels_drawn: int = 0


@dataclass
class PipelineStats:
    """Runtime statistics."""
    total_frames: int
    hand_frames: int
    particles_emitted: int
    live_particles: int
    peak_live_particles: int
    pixels_drawn: int
    fps: float
    profiler_summary: dict = field(default_factory=dict)


class PaintingPipeline:
    """Owns all painting state and advances it one frame at a time.

    Each frame the camera feed is composited under the trail, the particle
    system is stepped (whether or not a hand is visible, so old particles keep
    fading), and if a hand was predicted every fingertip of the first hand
    emits a burst at its mirrored position.
    """

    def __init__(
        self,
        config: Optional[PainterConfig] = None,
        source: Optional[LandmarkSource] = None,
        rng: Optional[np.random.Generator] = None,
        enable_profiling: bool = True,
    ):
        self.config = (config or PainterConfig()).validate()
        self.source = source

        cfg = self.config
        self.trail = TrailSurface(cfg.width, cfg.height, background=cfg.background)
        self.compositor = FrameCompositor(
            self.trail,
            camera_opacity=cfg.camera_opacity,
            trail_opacity=cfg.trail_opacity,
        )
        self.particles = ParticleSystem(particle_size=cfg.particle_size)
        self.emitter = ParticleEmitter(
            self.particles,
            rng=rng,
            burst_size=cfg.burst_size,
            speed_range=cfg.speed_range,
            lifespan=cfg.lifespan,
            decay=cfg.decay,
        )
        self.profiler = FrameProfiler()
        self.profiler.enabled = enable_profiling

        self._frame_index = 0
        self._hand_frames = 0
        self._emitted = 0
        self._pixels_drawn = 0
        self._peak_live = 0
        self._waiting_logged = False

    def process_frame(
        self,
        camera_frame: Optional[np.ndarray],
        predictions: list[HandPrediction],
    ) -> FrameResult:
        """Run one frame against an explicit prediction snapshot."""
        with self.profiler.stage("total"):
            with self.profiler.stage("composite"):
                image = self.compositor.compose(camera_frame)

            with self.profiler.stage("simulation"):
                drawn = self.particles.frame_step(self.trail)

            emitted = 0
            hand_detected = len(predictions) > 0
            if hand_detected:
                with self.profiler.stage("emission"):
                    emitted = self.emitter.emit_hand(
                        predictions[0], self.config.finger_colors, self.config.width,
                    )
                self._hand_frames += 1

        self.profiler.end_frame(emitted=emitted, live=self.particles.count, pixels_drawn=drawn)
        self._emitted += emitted
        self._pixels_drawn += drawn
        self._peak_live = max(self._peak_live, self.particles.count)
        self._frame_index += 1
        logger.debug(
            "frame %d: hand=%s emitted=%d live=%d",
            self._frame_index, hand_detected, emitted, self.particles.count,
        )

        return FrameResult(
            image=image.copy(),
            frame_index=self._frame_index,
            hand_detected=hand_detected,
            emitted=emitted,
            live_particles=self.particles.count,
            pixels_drawn=drawn,
        )

    def step(self, camera_frame: Optional[np.ndarray] = None) -> FrameResult:
        """Feed the attached landmark source and run one frame.

        The camera frame is scaled to canvas size before detection so
        fingertip coordinates are in canvas pixels.
        """
        predictions: list[HandPrediction] = []
        if self.source is not None:
            if camera_frame is not None:
                camera_frame = self._fit_to_canvas(camera_frame)
            with self.profiler.stage("detection"):
                self.source.submit(camera_frame)
            if self.source.ready:
                predictions = self.source.latest()
            elif not self._waiting_logged:
                logger.info("Waiting for landmark source; rendering without particles")
                self._waiting_logged = True
        return self.process_frame(camera_frame, predictions)

    def _fit_to_canvas(self, frame: np.ndarray) -> np.ndarray:
        h, w = frame.shape[:2]
        if (w, h) != self.config.size:
            frame = cv2.resize(frame, self.config.size, interpolation=cv2.INTER_LINEAR)
        return frame

    def export(self, path: str | Path) -> Path:
        """Write the current trail surface to an image file."""
        return self.trail.save(path)

    def reset(self):
        """Drop all particles and reseed the trail background."""
        self.particles.clear()
        self.trail.reset()
        logger.info("Trail cleared")

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def stats(self) -> PipelineStats:
        return PipelineStats(
            total_frames=self._frame_index,
            hand_frames=self._hand_frames,
            particles_emitted=self._emitted,
            live_particles=self.particles.count,
            peak_live_particles=self._peak_live,
            pixels_drawn=self._pixels_drawn,
            fps=self.profiler.fps,
            profiler_summary=self.profiler.summary(),
        )

    def close(self):
        if self.source is not None:
            self.source.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def next_screenshot_path(directory: str | Path, name: str = "screenshot") -> Path:
    """``name.png``, or ``name-<n>.png`` with the first free n."""
    directory = Path(directory)
    path = directory / f"{name}.png"
    n = 1
    while path.exists():
        path = directory / f"{name}-{n}.png"
        n += 1
    return path
