"""Persistent trail surface.

Particles are drawn onto this raster every frame and it is never cleared,
so each draw leaves a faint mark that accumulates into light trails.
Pixels are stored as RGB uint8, shape (height, width, 3).

Usage:
    trail = TrailSurface(width=620, height=352)
    trail.fill_circle(310.0, 176.0, diameter=1.0, color=(255, 204, 0), alpha=100)
    trail.save("screenshot.png")
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import cv2
import numpy as np

logger = logging.getLogger("light_trails.canvas")


def blend(dst: np.ndarray, src: np.ndarray, opacity: float) -> np.ndarray:
    """Alpha-blend ``src`` over ``dst`` in place and return ``dst``."""
    if opacity <= 0:
        return dst
    if opacity >= 1:
        dst[...] = src
        return dst
    mixed = dst.astype(np.float32) * (1.0 - opacity) + src.astype(np.float32) * opacity
    dst[...] = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)
    return dst


class TrailSurface:
    """Fixed-size RGB raster seeded once with an opaque dark background."""

    def __init__(self, width: int, height: int, background: int = 20):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.background = background
        self._pixels = np.full((height, width, 3), background, dtype=np.uint8)
        self._draw_count = 0

    @property
    def image(self) -> np.ndarray:
        """Read-only view of the current pixels."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    @property
    def draw_count(self) -> int:
        return self._draw_count

    def fill_circle(
        self,
        x: float,
        y: float,
        diameter: float,
        color: tuple[int, int, int],
        alpha: float,
    ) -> int:
        """Blend a filled, unstroked disc onto the surface.

        Alpha is on the 0-255 scale. Every pixel whose centre lies inside the
        disc is blended; a disc smaller than one pixel still marks the pixel
        under its centre. Off-surface parts are clipped.

        Returns:
            Number of pixels touched.
        """
        if alpha <= 0 or not (math.isfinite(x) and math.isfinite(y)):
            return 0

        radius = diameter / 2.0
        # Pixel (i, j) covers [j, j+1) x [i, i+1); its centre is (j+0.5, i+0.5)
        x0 = max(0, int(math.floor(x - radius)))
        x1 = min(self.width, int(math.ceil(x + radius)) + 1)
        y0 = max(0, int(math.floor(y - radius)))
        y1 = min(self.height, int(math.ceil(y + radius)) + 1)
        if x0 >= x1 or y0 >= y1:
            return 0

        cols = np.arange(x0, x1, dtype=np.float32) + 0.5
        rows = np.arange(y0, y1, dtype=np.float32) + 0.5
        dist2 = (cols[None, :] - x) ** 2 + (rows[:, None] - y) ** 2
        mask = dist2 <= radius * radius

        cx, cy = int(math.floor(x)), int(math.floor(y))
        if 0 <= cx < self.width and 0 <= cy < self.height:
            mask[cy - y0, cx - x0] = True

        touched = int(mask.sum())
        if touched == 0:
            return 0

        a = min(float(alpha), 255.0) / 255.0
        region = self._pixels[y0:y1, x0:x1]
        src = region[mask].astype(np.float32)
        mixed = src * (1.0 - a) + np.asarray(color, dtype=np.float32) * a
        region[mask] = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)

        self._draw_count += 1
        return touched

    def snapshot(self) -> np.ndarray:
        """Independent copy of the current pixels."""
        return self._pixels.copy()

    def reset(self):
        """Reseed the background. Only used by an explicit clear command."""
        self._pixels[...] = self.background
        self._draw_count = 0

    def to_bgr(self) -> np.ndarray:
        return cv2.cvtColor(self._pixels, cv2.COLOR_RGB2BGR)

    def save(self, path: str | Path) -> Path:
        """Write the surface as an image file (format from the suffix)."""
        path = Path(path)
        if not path.suffix:
            path = path.with_suffix(".png")
        path.parent.mkdir(parents=True, exist_ok=True)

        if not cv2.imwrite(str(path), self.to_bgr()):
            raise IOError(f"Failed to write image: {path}")

        logger.info("Trail saved to %s (%dx%d)", path, self.width, self.height)
        return path
