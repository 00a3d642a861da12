#!/usr/bin/env python3
"""Minimal live light-painting loop without the CLI.

Usage:
    python examples/demo_webcam.py [--camera 0] [--seed 7]
"""

import argparse
import sys

import cv2
import numpy as np

sys.path.insert(0, "src")
from light_trails import PaintingPipeline, PainterConfig
from light_trails.detector import MediaPipeLandmarkSource


def draw_status(frame_bgr, result, ready):
    label = f"particles: {result.live_particles}" if ready else "loading model..."
    cv2.putText(
        frame_bgr, label, (10, 20),
        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 255, 0), 1,
    )
    return frame_bgr


def main():
    parser = argparse.ArgumentParser(description="light-trails webcam demo")
    parser.add_argument("--camera", type=int, default=0, help="Camera index")
    parser.add_argument("--seed", type=int, default=None, help="Particle RNG seed")
    args = parser.parse_args()

    cap = cv2.VideoCapture(args.camera)
    if not cap.isOpened():
        print(f"Error: Cannot open camera {args.camera}")
        sys.exit(1)

    config = PainterConfig()
    source = MediaPipeLandmarkSource(on_ready=lambda: print("Model ready!")).load()
    print("Press space for a screenshot, 'q' to quit\n")

    with PaintingPipeline(config, source=source, rng=np.random.default_rng(args.seed)) as pipeline:
        while True:
            ret, frame = cap.read()
            if not ret:
                break

            result = pipeline.step(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
            cv2.imshow("light-trails", draw_status(pipeline.compositor.to_bgr(), result, source.ready))

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                break
            if key == ord(" "):
                print(f"Screenshot taken! {pipeline.export('screenshot.png')}")

    cap.release()
    cv2.destroyAllWindows()

    stats = pipeline.stats
    print(f"\nRendered {stats.total_frames} frames, {stats.particles_emitted} particles")


if __name__ == "__main__":
    main()
