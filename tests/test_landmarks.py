"""Tests for fingertip landmark types and sources."""

import numpy as np
import pytest

from light_trails.landmarks import (
    FINGERS, Finger, FingertipSample, HandPrediction, LandmarkSource, StaticLandmarkSource,
)


class TestFinger:
    @pytest.mark.parametrize("name,expected", [
        ("thumb", Finger.THUMB),
        ("index_finger", Finger.INDEX),
        ("indexFinger", Finger.INDEX),
        ("middle", Finger.MIDDLE),
        ("ringFinger", Finger.RING),
        ("pinky", Finger.PINKY),
    ])
    def test_from_name(self, name, expected):
        assert Finger.from_name(name) is expected

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            Finger.from_name("palmBase")

    def test_tip_indices(self):
        assert [f.tip_index for f in FINGERS] == [4, 8, 12, 16, 20]


class TestHandPrediction:
    def test_from_landmarks_scales_to_pixels(self):
        lm = np.zeros((21, 3), dtype=np.float32)
        lm[8] = [0.5, 0.25, 0.0]
        hand = HandPrediction.from_landmarks(lm, 620, 352)
        assert hand.tips[Finger.INDEX] == pytest.approx((310.0, 88.0))
        assert len(hand.tips) == 5

    def test_samples_in_finger_order(self):
        hand = HandPrediction({Finger.PINKY: (1, 2), Finger.THUMB: (3, 4)})
        samples = list(hand.samples())
        assert samples == [
            FingertipSample(Finger.THUMB, 3.0, 4.0),
            FingertipSample(Finger.PINKY, 1.0, 2.0),
        ]

    def test_dict_roundtrip(self):
        hand = HandPrediction({f: (i * 10.0, i * 5.0) for i, f in enumerate(FINGERS)})
        assert HandPrediction.from_dict(hand.to_dict()) == hand


class TestSources:
    def test_base_source_empty(self):
        assert LandmarkSource().latest() == []

    def test_static_source_advances_per_submit(self):
        hand = HandPrediction({Finger.THUMB: (1, 1)})
        source = StaticLandmarkSource([[hand], []])
        source.submit(None)
        assert source.latest() == [hand]
        source.submit(None)
        assert source.latest() == []
        source.submit(None)
        assert source.latest() == []

    def test_not_ready_reports_no_hand(self):
        hand = HandPrediction({Finger.THUMB: (1, 1)})
        source = StaticLandmarkSource([[hand]], ready=False)
        source.submit(None)
        assert source.latest() == []
        source.set_ready()
        source.submit(None)
        assert source.latest() == [hand]
