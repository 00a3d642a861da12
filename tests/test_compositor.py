"""Tests for camera/trail compositing."""

import numpy as np

from light_trails.canvas import TrailSurface
from light_trails.compositor import FrameCompositor


def make_camera(width=64, height=32):
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, : width // 2] = (255, 0, 0)  # left half red
    return frame


class TestFrameCompositor:
    def test_opaque_trail_covers_camera(self):
        trail = TrailSurface(64, 32)
        comp = FrameCompositor(trail)
        out = comp.compose(make_camera())
        np.testing.assert_array_equal(out, trail.image)

    def test_camera_is_mirrored(self):
        trail = TrailSurface(64, 32)
        comp = FrameCompositor(trail, camera_opacity=255, trail_opacity=0.0)
        out = comp.compose(make_camera())
        assert tuple(out[0, 0]) == (0, 0, 0)
        assert tuple(out[0, 63]) == (255, 0, 0)

    def test_camera_tint(self):
        trail = TrailSurface(64, 32)
        comp = FrameCompositor(trail, camera_opacity=50, trail_opacity=0.0)
        out = comp.compose(make_camera())
        assert tuple(out[0, 63]) == (50, 0, 0)

    def test_canvas_persists_between_frames(self):
        trail = TrailSurface(64, 32)
        comp = FrameCompositor(trail, camera_opacity=50, trail_opacity=0.0)
        comp.compose(make_camera())
        out = comp.compose(make_camera())
        assert out[0, 63, 0] > 50

    def test_camera_resized_to_canvas(self):
        trail = TrailSurface(64, 32)
        comp = FrameCompositor(trail, camera_opacity=255, trail_opacity=0.0)
        out = comp.compose(make_camera(128, 64))
        assert out.shape == (32, 64, 3)
        assert tuple(out[10, 60]) == (255, 0, 0)

    def test_no_camera_frame(self):
        trail = TrailSurface(16, 8)
        trail.fill_circle(3, 3, 1, (255, 255, 255), 255)
        comp = FrameCompositor(trail)
        out = comp.compose(None)
        np.testing.assert_array_equal(out, trail.image)

    def test_half_transparent_trail(self):
        trail = TrailSurface(16, 8, background=100)
        comp = FrameCompositor(trail, camera_opacity=255, trail_opacity=0.5)
        camera = np.full((8, 16, 3), 200, dtype=np.uint8)
        out = comp.compose(camera)
        assert np.all(out == 150)

    def test_to_bgr(self):
        trail = TrailSurface(16, 8)
        trail.fill_circle(2, 2, 1, (255, 0, 0), 255)
        comp = FrameCompositor(trail)
        comp.compose(None)
        assert tuple(comp.to_bgr()[2, 2]) == (0, 0, 255)
