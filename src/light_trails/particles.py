"""Particle emission and decay.

Each fingertip emits a burst of particles every frame a hand is visible.
A particle flies in a straight line and fades out as its lifespan counts
down; the lifespan doubles as the draw alpha on the 0-255 scale.

Usage:
    system = ParticleSystem()
    emitter = ParticleEmitter(system, rng=np.random.default_rng(7))
    emitter.emit_burst((120.0, 80.0), (255, 204, 0))
    # Once per frame:
    system.frame_step(trail)
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from light_trails.canvas import TrailSurface
from light_trails.landmarks import Finger, HandPrediction

DEFAULT_LIFESPAN = 100.0
DEFAULT_DECAY = 10.0
DEFAULT_SPEED_RANGE = (1.0, 8.0)
DEFAULT_BURST_SIZE = 10


def random_velocity(
    rng: np.random.Generator,
    speed_range: tuple[float, float] = DEFAULT_SPEED_RANGE,
) -> np.ndarray:
    """Uniform direction scaled by a uniform magnitude in ``speed_range``."""
    angle = rng.uniform(0.0, 2.0 * math.pi)
    speed = rng.uniform(speed_range[0], speed_range[1])
    return np.array([math.cos(angle), math.sin(angle)], dtype=np.float64) * speed


def mirror_x(x: float, width: float) -> float:
    """Flip a raw camera x coordinate to match the mirrored display."""
    return width - x


class Particle:
    """A single decaying point."""

    __slots__ = ("position", "velocity", "color", "lifespan", "decay")

    def __init__(
        self,
        position,
        velocity,
        color: tuple[int, int, int],
        lifespan: float = DEFAULT_LIFESPAN,
        decay: float = DEFAULT_DECAY,
    ):
        self.position = np.array(position, dtype=np.float64)
        self.velocity = np.array(velocity, dtype=np.float64)
        self.color = tuple(int(c) for c in color)
        self.lifespan = float(lifespan)
        self.decay = float(decay)

    @classmethod
    def create(
        cls,
        position,
        color: tuple[int, int, int],
        rng: Optional[np.random.Generator] = None,
        speed_range: tuple[float, float] = DEFAULT_SPEED_RANGE,
        lifespan: float = DEFAULT_LIFESPAN,
        decay: float = DEFAULT_DECAY,
    ) -> Particle:
        rng = rng if rng is not None else np.random.default_rng()
        return cls(position, random_velocity(rng, speed_range), color, lifespan, decay)

    def advance(self):
        self.position += self.velocity
        self.lifespan -= self.decay

    def is_expired(self) -> bool:
        return self.lifespan <= 0

    @property
    def alpha(self) -> float:
        return min(max(self.lifespan, 0.0), 255.0)

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    def render(self, surface: TrailSurface, diameter: float = 1.0) -> int:
        return surface.fill_circle(
            float(self.position[0]), float(self.position[1]),
            diameter, self.color, self.alpha,
        )

    def __repr__(self) -> str:
        x, y = self.position
        return f"Particle(pos=({x:.1f}, {y:.1f}), color={self.color}, lifespan={self.lifespan:g})"


class ParticleSystem:
    """Owns the live particles; steps and draws them once per frame."""

    def __init__(self, particle_size: float = 1.0):
        self.particle_size = particle_size
        self._particles: list[Particle] = []
        self._total_spawned = 0
        self._total_expired = 0

    def add(self, particles: list[Particle]):
        self._particles.extend(particles)
        self._total_spawned += len(particles)

    def update(self):
        """Advance every particle once and drop the expired ones."""
        survivors = []
        for p in self._particles:
            p.advance()
            if not p.is_expired():
                survivors.append(p)
        self._total_expired += len(self._particles) - len(survivors)
        self._particles = survivors

    def render_all(self, surface: TrailSurface) -> int:
        """Draw every live particle; returns the number of pixels blended."""
        return sum(p.render(surface, self.particle_size) for p in self._particles)

    def frame_step(self, surface: TrailSurface) -> int:
        self.update()
        return self.render_all(surface)

    def clear(self):
        self._particles = []

    @property
    def particles(self) -> list[Particle]:
        return list(self._particles)

    @property
    def count(self) -> int:
        return len(self._particles)

    @property
    def total_spawned(self) -> int:
        return self._total_spawned

    @property
    def total_expired(self) -> int:
        return self._total_expired

    def __len__(self) -> int:
        return len(self._particles)


class ParticleEmitter:
    """Spawns bursts of particles into a ParticleSystem."""

    def __init__(
        self,
        system: ParticleSystem,
        rng: Optional[np.random.Generator] = None,
        burst_size: int = DEFAULT_BURST_SIZE,
        speed_range: tuple[float, float] = DEFAULT_SPEED_RANGE,
        lifespan: float = DEFAULT_LIFESPAN,
        decay: float = DEFAULT_DECAY,
    ):
        self.system = system
        self.rng = rng if rng is not None else np.random.default_rng()
        self.burst_size = burst_size
        self.speed_range = speed_range
        self.lifespan = lifespan
        self.decay = decay

    def emit_burst(self, position, color: tuple[int, int, int]) -> list[Particle]:
        """Add ``burst_size`` particles at ``position``; returns them."""
        burst = [
            Particle.create(
                position, color, self.rng,
                speed_range=self.speed_range,
                lifespan=self.lifespan,
                decay=self.decay,
            )
            for _ in range(self.burst_size)
        ]
        self.system.add(burst)
        return burst

    def emit_hand(
        self,
        hand: HandPrediction,
        colors: dict[Finger, tuple[int, int, int]],
        canvas_width: int,
    ) -> int:
        """One burst per fingertip at its mirrored position.

        Returns:
            Number of particles emitted.
        """
        emitted = 0
        for sample in hand.samples():
            position = (mirror_x(sample.x, canvas_width), sample.y)
            color = colors.get(sample.finger, (255, 255, 255))
            emitted += len(self.emit_burst(position, color))
        return emitted
