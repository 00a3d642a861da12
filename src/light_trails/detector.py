"""Fingertip detection using MediaPipe Hands."""

from __future__ import annotations

import logging
import threading
from functools import partial
from typing import Callable, Optional

import numpy as np

from light_trails.landmarks import HandPrediction, LandmarkSource

try:
    import mediapipe as mp
except ImportError:
    mp = None

logger = logging.getLogger("light_trails.detector")


class HandDetector:
    """Runs MediaPipe Hands on RGB frames and returns raw (21, 3) landmarks.

    Landmarks are normalized to [0, 1] relative to the frame. Use
    ``detect_fingertips`` to get pixel-space fingertip predictions instead.
    """

    def __init__(
        self,
        max_hands: int = 1,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.5,
    ):
        if mp is None:
            raise ImportError(
                "mediapipe is required. Install with: pip install mediapipe"
            )

        self.max_hands = max_hands
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def detect(self, frame_rgb: np.ndarray) -> list[np.ndarray]:
        results = self._hands.process(frame_rgb)
        if not results.multi_hand_landmarks:
            return []

        return [
            np.array([[lm.x, lm.y, lm.z] for lm in hand.landmark], dtype=np.float32)
            for hand in results.multi_hand_landmarks
        ]

    def detect_fingertips(self, frame_rgb: np.ndarray) -> list[HandPrediction]:
        """Detect hands and return fingertip pixel coordinates per hand."""
        h, w = frame_rgb.shape[:2]
        return [HandPrediction.from_landmarks(lm, w, h) for lm in self.detect(frame_rgb)]

    def close(self):
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class MediaPipeLandmarkSource(LandmarkSource):
    """Live landmark source. The model loads on a background thread.

    Until the model is ready ``submit`` does nothing and ``latest`` reports no
    hand, so the frame loop can render the camera feed in the meantime.
    Camera frames are scaled to the canvas size before detection so
    fingertip coordinates land in canvas pixel space.
    """

    def __init__(
        self,
        max_hands: int = 1,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.5,
        on_ready: Optional[Callable[[], None]] = None,
        detector_factory: Optional[Callable[[], HandDetector]] = None,
    ):
        super().__init__()
        if detector_factory is None:
            if mp is None:
                raise ImportError(
                    "mediapipe is required. Install with: pip install mediapipe"
                )
            detector_factory = partial(
                HandDetector,
                max_hands=max_hands,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )
        self._factory = detector_factory
        self._on_ready = on_ready
        self._detector: Optional[HandDetector] = None
        self._ready = threading.Event()
        self._loader: Optional[threading.Thread] = None
        self._load_error: Optional[BaseException] = None
        self._lock = threading.Lock()
        self._closed = False

    def load(self, block: bool = False) -> MediaPipeLandmarkSource:
        """Start loading the model. Safe to call more than once."""
        if self._loader is None:
            logger.info("Loading hand landmark model...")
            self._loader = threading.Thread(target=self._load, daemon=True)
            self._loader.start()
        if block:
            self._loader.join()
            if self._load_error is not None:
                raise self._load_error
        return self

    def _load(self):
        try:
            detector = self._factory()
        except Exception as e:
            self._load_error = e
            logger.error("Hand landmark model failed to load: %s", e)
            return
        with self._lock:
            if self._closed:
                detector.close()
                logger.info("Source closed while loading; model discarded")
                return
            self._detector = detector
            self._ready.set()
        logger.info("Model ready!")
        if self._on_ready is not None:
            self._on_ready()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def load_error(self) -> Optional[BaseException]:
        return self._load_error

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    def submit(self, frame_rgb: np.ndarray) -> None:
        detector = self._detector
        if not self.ready or detector is None:
            return
        self._latest = detector.detect_fingertips(frame_rgb)

    def close(self):
        with self._lock:
            self._closed = True
            detector, self._detector = self._detector, None
            self._ready.clear()
        if detector is not None:
            detector.close()
