"""Tests for the persistent trail surface."""

import cv2
import numpy as np
import pytest

from light_trails.canvas import TrailSurface, blend


class TestTrailSurface:
    def test_seeded_background(self):
        surface = TrailSurface(620, 352)
        assert surface.image.shape == (352, 620, 3)
        assert surface.image.dtype == np.uint8
        assert np.all(surface.image == 20)

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            TrailSurface(0, 10)

    def test_sub_pixel_disc_marks_one_pixel(self):
        surface = TrailSurface(10, 10, background=0)
        assert surface.fill_circle(3.4, 7.9, 1.0, (255, 255, 255), 255) == 1
        assert tuple(surface.image[7, 3]) == (255, 255, 255)
        assert int(surface.image.sum()) == 255 * 3

    def test_larger_disc(self):
        surface = TrailSurface(30, 30, background=0)
        touched = surface.fill_circle(10.5, 10.5, 5.0, (0, 255, 0), 255)
        assert touched == 21
        assert int((surface.image[:, :, 1] == 255).sum()) == 21

    def test_zero_alpha_is_noop(self):
        surface = TrailSurface(10, 10)
        assert surface.fill_circle(5, 5, 1, (255, 0, 0), 0) == 0
        assert surface.fill_circle(5, 5, 1, (255, 0, 0), -30) == 0
        assert np.all(surface.image == 20)
        assert surface.draw_count == 0

    def test_off_surface_ignored(self):
        surface = TrailSurface(10, 10)
        assert surface.fill_circle(-50, 5, 1, (255, 0, 0), 100) == 0
        assert surface.fill_circle(5, 500, 1, (255, 0, 0), 100) == 0
        assert np.all(surface.image == 20)

    def test_non_finite_position_ignored(self):
        surface = TrailSurface(10, 10)
        assert surface.fill_circle(float("nan"), 5, 1, (255, 0, 0), 100) == 0

    def test_clipped_at_edge(self):
        surface = TrailSurface(10, 10, background=0)
        touched = surface.fill_circle(0.5, 0.5, 5.0, (255, 255, 255), 255)
        assert touched == 8
        assert surface.image[0, 0, 0] == 255

    def test_draws_accumulate(self):
        surface = TrailSurface(10, 10, background=20)
        surface.fill_circle(5, 5, 1, (255, 255, 255), 100)
        first = int(surface.image[5, 5, 0])
        surface.fill_circle(5, 5, 1, (255, 255, 255), 100)
        second = int(surface.image[5, 5, 0])
        assert 20 < first < second < 255

    def test_alpha_above_255_clamped(self):
        surface = TrailSurface(4, 4, background=0)
        surface.fill_circle(1, 1, 1, (200, 100, 50), 1000)
        assert tuple(surface.image[1, 1]) == (200, 100, 50)

    def test_image_is_read_only(self):
        surface = TrailSurface(4, 4)
        with pytest.raises(ValueError):
            surface.image[0, 0] = 0

    def test_snapshot_is_independent(self):
        surface = TrailSurface(10, 10)
        snap = surface.snapshot()
        surface.fill_circle(5, 5, 1, (255, 0, 0), 255)
        assert np.all(snap == 20)

    def test_reset(self):
        surface = TrailSurface(10, 10)
        surface.fill_circle(5, 5, 3, (255, 0, 0), 255)
        surface.reset()
        assert np.all(surface.image == 20)
        assert surface.draw_count == 0

    def test_save_roundtrip(self, tmp_path):
        surface = TrailSurface(40, 20)
        surface.fill_circle(10, 10, 4, (255, 204, 0), 100)
        path = surface.save(tmp_path / "shot")
        assert path.suffix == ".png"
        loaded = cv2.cvtColor(cv2.imread(str(path)), cv2.COLOR_BGR2RGB)
        np.testing.assert_array_equal(loaded, surface.snapshot())


class TestBlend:
    def test_full_opacity_copies(self):
        dst = np.zeros((2, 2, 3), dtype=np.uint8)
        src = np.full((2, 2, 3), 200, dtype=np.uint8)
        blend(dst, src, 1.0)
        assert np.all(dst == 200)

    def test_zero_opacity_keeps(self):
        dst = np.full((2, 2, 3), 7, dtype=np.uint8)
        blend(dst, np.zeros_like(dst), 0.0)
        assert np.all(dst == 7)

    def test_partial(self):
        dst = np.zeros((1, 1, 3), dtype=np.uint8)
        blend(dst, np.full((1, 1, 3), 255, dtype=np.uint8), 50 / 255)
        assert np.all(dst == 50)
