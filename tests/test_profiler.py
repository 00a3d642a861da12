"""Tests for the frame profiler."""

import time

import pytest

from light_trails.profiler import FrameProfiler


def run_frame(profiler, emitted=0, live=0, pixels_drawn=0, stages=("simulation",)):
    for name in stages:
        with profiler.stage(name):
            pass
    profiler.end_frame(emitted=emitted, live=live, pixels_drawn=pixels_drawn)


class TestFrameSamples:
    def test_stage_timing(self):
        profiler = FrameProfiler()
        with profiler.stage("simulation"):
            time.sleep(0.001)
        profiler.end_frame()

        assert profiler.frame_count == 1
        assert profiler.stage_ms("simulation") >= 0.5

    def test_repeated_stage_accumulates_within_frame(self):
        profiler = FrameProfiler()
        for _ in range(3):
            with profiler.stage("simulation"):
                time.sleep(0.001)
        profiler.end_frame()

        sample = profiler.samples[0]
        assert list(sample.stage_ms) == ["simulation"]
        assert sample.stage_ms["simulation"] >= 1.5

    def test_end_frame_records_particle_work(self):
        profiler = FrameProfiler()
        run_frame(profiler, emitted=50, live=50, pixels_drawn=0)
        run_frame(profiler, emitted=0, live=50, pixels_drawn=47)

        first, second = profiler.samples
        assert (first.emitted, first.live, first.pixels_drawn) == (50, 50, 0)
        assert (second.emitted, second.live, second.pixels_drawn) == (0, 50, 47)

    def test_frame_without_stages(self):
        profiler = FrameProfiler()
        profiler.end_frame(live=3)
        assert profiler.frame_count == 1
        assert profiler.samples[0].stage_ms == {}

    def test_busy_ms_prefers_total(self):
        profiler = FrameProfiler()
        with profiler.stage("total"):
            with profiler.stage("composite"):
                pass
        profiler.end_frame()
        sample = profiler.samples[0]
        assert sample.busy_ms == sample.stage_ms["total"]

    def test_window_drops_old_frames(self):
        profiler = FrameProfiler(window_size=4)
        for i in range(10):
            run_frame(profiler, live=i)
        assert profiler.frame_count == 10
        assert [s.live for s in profiler.samples] == [6, 7, 8, 9]


class TestFps:
    def test_needs_two_frames(self):
        profiler = FrameProfiler()
        assert profiler.fps == 0.0
        run_frame(profiler)
        assert profiler.fps == 0.0

    def test_from_frame_spacing(self):
        profiler = FrameProfiler()
        run_frame(profiler)
        time.sleep(0.01)
        run_frame(profiler)
        assert 0 < profiler.fps <= 100


class TestSummary:
    def test_empty(self):
        assert FrameProfiler().summary() == {}

    def test_stages_and_counts(self):
        profiler = FrameProfiler()
        run_frame(profiler, emitted=50, live=50, pixels_drawn=0,
                  stages=("composite", "simulation", "emission"))
        run_frame(profiler, emitted=0, live=40, pixels_drawn=40,
                  stages=("composite", "simulation"))

        summary = profiler.summary()
        assert summary["frames"] == 2
        assert set(summary["stages"]) == {"composite", "simulation", "emission"}
        assert "avg_ms" in summary["stages"]["emission"]
        assert "max_ms" in summary["stages"]["emission"]
        assert summary["avg_emitted"] == pytest.approx(25.0)
        assert summary["avg_live"] == pytest.approx(45.0)
        assert summary["avg_pixels_drawn"] == pytest.approx(20.0)
        assert summary["peak_live"] == 50

    def test_unused_stage_absent(self):
        profiler = FrameProfiler()
        run_frame(profiler, stages=("composite",))
        assert "emission" not in profiler.summary()["stages"]
        assert profiler.stage_ms("emission") is None


class TestControl:
    def test_disabled(self):
        profiler = FrameProfiler()
        profiler.enabled = False
        run_frame(profiler, live=5)
        assert profiler.frame_count == 0
        assert profiler.summary() == {}

    def test_reset(self):
        profiler = FrameProfiler()
        run_frame(profiler)
        with profiler.stage("composite"):
            pass
        profiler.reset()
        assert profiler.frame_count == 0
        assert profiler.samples == []
        run_frame(profiler, stages=("simulation",))
        assert list(profiler.samples[0].stage_ms) == ["simulation"]
