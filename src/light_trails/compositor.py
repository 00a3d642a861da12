"""Per-frame compositing of camera feed and trail surface."""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from light_trails.canvas import TrailSurface, blend


class FrameCompositor:
    """Draws the mirrored, tinted camera feed, then the trail, onto a display canvas.

    The display canvas persists between frames: the camera is blended onto
    whatever the previous frame left behind rather than onto a cleared buffer.
    With the default ``trail_opacity`` of 1.0 the opaque trail surface covers
    the feed completely; lower it to see the camera through the trails.
    """

    def __init__(
        self,
        trail: TrailSurface,
        camera_opacity: int = 50,
        trail_opacity: float = 1.0,
    ):
        self.trail = trail
        self.camera_opacity = camera_opacity
        self.trail_opacity = trail_opacity
        self._canvas = np.zeros((trail.height, trail.width, 3), dtype=np.uint8)

    @property
    def canvas(self) -> np.ndarray:
        return self._canvas

    @property
    def size(self) -> tuple[int, int]:
        return (self.trail.width, self.trail.height)

    def prepare_camera(self, frame_rgb: np.ndarray) -> np.ndarray:
        """Resize to canvas dimensions and mirror horizontally."""
        h, w = frame_rgb.shape[:2]
        if (w, h) != self.size:
            frame_rgb = cv2.resize(frame_rgb, self.size, interpolation=cv2.INTER_LINEAR)
        return cv2.flip(frame_rgb, 1)

    def compose(self, camera_frame: Optional[np.ndarray] = None) -> np.ndarray:
        """Run the camera pass (if a frame is given) then the trail pass.

        Returns:
            The display canvas, RGB uint8. The array is reused across calls.
        """
        if camera_frame is not None:
            blend(self._canvas, self.prepare_camera(camera_frame), self.camera_opacity / 255.0)
        blend(self._canvas, self.trail.image, self.trail_opacity)
        return self._canvas

    def to_bgr(self) -> np.ndarray:
        return cv2.cvtColor(self._canvas, cv2.COLOR_RGB2BGR)
