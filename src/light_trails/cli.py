"""light-trails CLI.

Usage:
    light-trails run       : Paint with your fingertips from the camera
    light-trails replay    : Render a recorded session to an image
    light-trails record    : Record fingertip positions from the camera
    light-trails config    : Show the effective configuration
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer

from light_trails.config import PainterConfig

app = typer.Typer(
    name="light-trails",
    help="✨ Fingertip light painting with particle trails.",
    add_completion=False,
)

logger = logging.getLogger("light_trails.cli")

ESC = 27


@app.callback()
def main_options(
    log_level: str = typer.Option("warning", help="Log level"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _load_config(config_path: Optional[str]) -> PainterConfig:
    try:
        if config_path:
            return PainterConfig.from_yaml(config_path)
        return PainterConfig()
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


def _open_camera(index: int, config: PainterConfig):
    import cv2

    cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        typer.echo(f"❌ Could not open camera {index}", err=True)
        raise typer.Exit(1)
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, config.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, config.height)
    return cap


def _live_source(config: PainterConfig):
    from light_trails.detector import MediaPipeLandmarkSource

    try:
        return MediaPipeLandmarkSource(
            max_hands=config.max_num_hands,
            min_detection_confidence=config.min_detection_confidence,
            min_tracking_confidence=config.min_tracking_confidence,
            on_ready=lambda: typer.echo("🤚 Model ready!"),
        ).load()
    except ImportError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


@app.command()
def run(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config YAML"),
    camera: Optional[int] = typer.Option(None, help="Camera device index (overrides config)"),
    output_dir: str = typer.Option(".", help="Where screenshots are written"),
    record: Optional[str] = typer.Option(None, help="Also record fingertips to this file"),
    seed: Optional[int] = typer.Option(None, help="Random seed for particle velocities"),
):
    """Paint light trails with your fingertips."""
    import cv2
    import numpy as np
    from light_trails.pipeline import PaintingPipeline, next_screenshot_path
    from light_trails.recorder import FingertipRecorder

    config = _load_config(config_path)
    if camera is not None:
        config.camera_index = camera

    cap = _open_camera(config.camera_index, config)
    source = _live_source(config)
    recorder = FingertipRecorder(config.width, config.height) if record else None
    if recorder:
        recorder.start()

    cv2.namedWindow(config.window_name, cv2.WINDOW_AUTOSIZE)
    typer.echo("🎥 Loading hand model... (painting starts once it is ready)")
    typer.echo(f"   Press '{config.screenshot_key}' for a screenshot, 'c' to clear, 'q' to quit")

    screenshot_key = ord(config.screenshot_key)
    with PaintingPipeline(config, source=source, rng=np.random.default_rng(seed)) as pipeline:
        try:
            while True:
                ret, frame = cap.read()
                if not ret:
                    logger.warning("Dropped camera frame")
                    continue

                frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                pipeline.step(frame_rgb)
                if recorder:
                    recorder.add_frame(source.latest())

                cv2.imshow(config.window_name, pipeline.compositor.to_bgr())
                key = cv2.waitKey(1) & 0xFF
                if key in (ord("q"), ESC):
                    break
                if key == screenshot_key:
                    path = pipeline.export(next_screenshot_path(output_dir, config.screenshot_name))
                    typer.echo(f"📸 Screenshot taken! {path}")
                elif key == ord("c"):
                    pipeline.reset()
        except KeyboardInterrupt:
            pass
        finally:
            cap.release()
            cv2.destroyAllWindows()

        stats = pipeline.stats

    typer.echo(f"\n✅ {stats.total_frames} frames, {stats.particles_emitted} particles emitted")
    if recorder:
        recorder.stop()
        path = recorder.save(record)
        typer.echo(f"💾 Recording saved to: {path}")


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to a .json or .npz recording"),
    output: str = typer.Option("trail.png", "-o", help="Output image path"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config YAML"),
    seed: Optional[int] = typer.Option(0, help="Random seed for particle velocities"),
    frames_dir: Optional[str] = typer.Option(None, help="Also write every composited frame here"),
    drain: bool = typer.Option(True, help="Keep stepping until all particles have faded"),
    realtime: bool = typer.Option(False, help="Pace frames at the recorded timestamps"),
    speed: float = typer.Option(1.0, help="Playback speed multiplier for --realtime"),
):
    """Render a recorded session headless and save the final trail."""
    import cv2
    import numpy as np
    from light_trails.pipeline import PaintingPipeline
    from light_trails.recorder import RecordingPlayer, ReplayLandmarkSource

    config = _load_config(config_path)
    try:
        player = RecordingPlayer.load(recording)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    if (player.width, player.height) != config.size:
        logger.info("Using recording canvas size %dx%d", player.width, player.height)
        config.width, config.height = player.width, player.height

    typer.echo(f"▶️  Replaying {Path(recording).name} ({player.frame_count} frames, {player.duration:.1f}s)")

    frames_path = Path(frames_dir) if frames_dir else None
    if frames_path:
        frames_path.mkdir(parents=True, exist_ok=True)

    try:
        source = ReplayLandmarkSource(player, realtime=realtime, speed=speed)
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)
    with PaintingPipeline(config, source=source, rng=np.random.default_rng(seed)) as pipeline:
        while True:
            result = pipeline.step()
            if frames_path:
                cv2.imwrite(
                    str(frames_path / f"frame_{result.frame_index:05d}.png"),
                    pipeline.compositor.to_bgr(),
                )
            if source.exhausted and (not drain or result.live_particles == 0):
                break

        path = pipeline.export(output)
        stats = pipeline.stats

    typer.echo(f"✅ Rendered {stats.total_frames} frames, {stats.particles_emitted} particles")
    typer.echo(f"🖼  Saved to: {path}")


@app.command()
def record(
    output: str = typer.Option("recording.json", "-o", help="Output file (.json or .npz)"),
    duration: float = typer.Option(0, help="Recording duration in seconds (0 = until Ctrl+C)"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config YAML"),
    camera: Optional[int] = typer.Option(None, help="Camera device index (overrides config)"),
):
    """Record fingertip positions from the camera without painting."""
    import cv2
    from light_trails.recorder import FingertipRecorder

    config = _load_config(config_path)
    if camera is not None:
        config.camera_index = camera

    cap = _open_camera(config.camera_index, config)
    source = _live_source(config)
    try:
        source.load(block=True)
    except Exception as e:
        cap.release()
        typer.echo(f"❌ Hand landmark model failed to load: {e}", err=True)
        raise typer.Exit(1)

    recorder = FingertipRecorder(config.width, config.height)
    typer.echo(f"🎥 Recording from camera {config.camera_index}...")
    typer.echo("   Press Ctrl+C to stop")
    recorder.start()
    start = time.monotonic()

    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                logger.warning("Dropped camera frame")
                continue

            frame = cv2.resize(frame, config.size)
            source.submit(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
            hands = source.latest()
            recorder.add_frame(hands)

            if recorder.frame_count % 30 == 0:
                elapsed = time.monotonic() - start
                typer.echo(f"\r   Frames: {recorder.frame_count} | Duration: {elapsed:.1f}s | Hands: {len(hands)}", nl=False)

            if duration > 0 and (time.monotonic() - start) >= duration:
                break
    except KeyboardInterrupt:
        pass
    finally:
        recorder.stop()
        cap.release()
        source.close()

    path = recorder.save(output)
    typer.echo(f"\n\n📼 Recorded {recorder.frame_count} frames ({recorder.duration:.1f}s)")
    typer.echo(f"💾 Saved to: {path}")


@app.command("config")
def show_config(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config YAML"),
):
    """Print the effective configuration as YAML."""
    typer.echo(_load_config(config_path).to_yaml())


def main():
    app()


if __name__ == "__main__":
    main()
