"""light-trails - Fingertip light painting with decaying particle trails."""

__version__ = "0.1.0"

from light_trails.config import PainterConfig
from light_trails.landmarks import Finger, FingertipSample, HandPrediction, LandmarkSource, StaticLandmarkSource
from light_trails.canvas import TrailSurface
from light_trails.particles import Particle, ParticleEmitter, ParticleSystem
from light_trails.compositor import FrameCompositor
from light_trails.pipeline import PaintingPipeline, FrameResult
from light_trails.recorder import FingertipRecorder, RecordingPlayer, ReplayLandmarkSource
from light_trails.profiler import FrameProfiler
