"""Tests for pinch debounce, release and smoothing."""

import numpy as np
import pytest

from handgesture.config import EngineConfig
from handgesture.joints import Chirality
from handgesture.pinch import PinchPhase, PinchTracker

THUMB = np.array([0.0, 1.0, -0.3])


def index_at(gap):
    return THUMB + np.array([gap, 0.0, 0.0])


@pytest.fixture
def tracker():
    return PinchTracker(Chirality.RIGHT)


class TestDebounce:
    def test_first_close_frame_is_candidate(self, tracker):
        state = tracker.update(THUMB, index_at(0.01), timestamp=10.0)
        assert state.is_pinching
        assert not state.is_valid
        assert not state.active
        assert state.pinch_start_time == 10.0
        assert state.phase == PinchPhase.CANDIDATE

    def test_valid_after_duration(self, tracker):
        tracker.update(THUMB, index_at(0.01), timestamp=10.0)
        state = tracker.update(THUMB, index_at(0.01), timestamp=10.25)
        assert state.is_valid
        assert state.active
        assert state.phase == PinchPhase.VALID

    def test_not_valid_before_duration(self, tracker):
        for i in range(4):
            state = tracker.update(THUMB, index_at(0.01), timestamp=10.0 + i * 0.0625)
        # Last frame at 10.1875
        assert state.is_pinching
        assert not state.is_valid

    def test_valid_on_fifth_frame(self, tracker):
        states = [
            tracker.update(THUMB, index_at(0.01), timestamp=10.0 + i * 0.0625)
            for i in range(6)
        ]
        assert [s.is_valid for s in states] == [False, False, False, False, True, True]
        assert all(s.pinch_start_time == 10.0 for s in states)

    def test_brief_touch_never_valid(self, tracker):
        tracker.update(THUMB, index_at(0.01), timestamp=0.0)
        tracker.update(THUMB, index_at(0.01), timestamp=0.125)
        state = tracker.update(THUMB, index_at(0.05), timestamp=0.25)
        assert not state.is_pinching
        assert not state.is_valid

    def test_gap_at_threshold_is_not_pinch(self, tracker):
        state = tracker.update(THUMB, THUMB + np.array([0.03, 0.0, 0.0]), timestamp=0.0)
        assert not state.is_pinching
        assert state.phase == PinchPhase.IDLE

    def test_custom_duration(self):
        tracker = PinchTracker(validity_duration=0.0)
        assert tracker.update(THUMB, index_at(0.01), timestamp=5.0).active


class TestRelease:
    def test_release_resets_immediately(self, tracker):
        tracker.update(THUMB, index_at(0.01), timestamp=0.0)
        tracker.update(THUMB, index_at(0.01), timestamp=0.5)
        assert tracker.state.active

        state = tracker.update(THUMB, index_at(0.04), timestamp=0.5625)
        assert not state.is_pinching
        assert not state.is_valid
        assert state.pinch_start_time is None

    def test_repinch_restarts_timer(self, tracker):
        tracker.update(THUMB, index_at(0.01), timestamp=0.0)
        tracker.update(THUMB, index_at(0.01), timestamp=0.5)
        tracker.update(THUMB, index_at(0.04), timestamp=0.5625)
        state = tracker.update(THUMB, index_at(0.01), timestamp=0.625)
        assert state.is_pinching
        assert not state.is_valid
        assert state.pinch_start_time == 0.625

    def test_missing_tip_counts_as_release(self, tracker):
        tracker.update(THUMB, index_at(0.01), timestamp=0.0)
        state = tracker.update(None, index_at(0.01), timestamp=0.0625)
        assert not state.is_pinching
        assert state.pinch_start_time is None


class TestSmoothing:
    def test_first_frame_takes_raw_midpoint(self, tracker):
        state = tracker.update(THUMB, index_at(0.01), timestamp=0.0)
        np.testing.assert_allclose(state.smoothed_position, THUMB + [0.005, 0.0, 0.0])

    def test_converges_geometrically(self, tracker):
        start = np.array([0.0, 0.0, 0.0])
        target = np.array([0.1, 0.0, 0.0])
        tracker.update(start, start, timestamp=0.0)
        n = 10
        for i in range(n):
            state = tracker.update(target, target, timestamp=0.0625 * (i + 1))
        expected = target - (1 - 0.3) ** n * (target - start)
        np.testing.assert_allclose(state.smoothed_position, expected, rtol=1e-9)

    def test_smoothing_runs_without_pinch(self, tracker):
        tracker.update(THUMB, index_at(0.1), timestamp=0.0)
        state = tracker.update(THUMB, index_at(0.2), timestamp=0.0625)
        assert not state.is_pinching
        first = THUMB + [0.05, 0.0, 0.0]
        second = THUMB + [0.1, 0.0, 0.0]
        np.testing.assert_allclose(state.smoothed_position, first * 0.7 + second * 0.3)

    def test_smoothing_survives_release(self, tracker):
        tracker.update(THUMB, index_at(0.01), timestamp=0.0)
        before = tracker.update(THUMB, index_at(0.01), timestamp=0.5).smoothed_position
        state = tracker.update(THUMB, index_at(0.05), timestamp=0.5625)
        raw = THUMB + [0.025, 0.0, 0.0]
        np.testing.assert_allclose(state.smoothed_position, before * 0.7 + raw * 0.3)

    def test_missing_tip_skips_smoothing(self, tracker):
        before = tracker.update(THUMB, index_at(0.01), timestamp=0.0).smoothed_position
        state = tracker.update(THUMB, None, timestamp=0.0625)
        np.testing.assert_array_equal(state.smoothed_position, before)

    def test_returned_state_is_a_copy(self, tracker):
        state = tracker.update(THUMB, index_at(0.01), timestamp=0.0)
        state.is_pinching = False
        assert tracker.state.is_pinching

    def test_mutating_returned_position_keeps_history(self, tracker):
        state = tracker.update([0.0, 0.0, 0.0], [0.01, 0.0, 0.0], timestamp=0.0)
        state.smoothed_position += 100.0
        np.testing.assert_allclose(tracker.state.smoothed_position, [0.005, 0.0, 0.0])

        state = tracker.update([0.0, 0.0, 0.0], [0.01, 0.0, 0.0], timestamp=0.0625)
        np.testing.assert_allclose(state.smoothed_position, [0.005, 0.0, 0.0])


class TestReset:
    def test_reset_keeps_smoothing(self, tracker):
        before = tracker.update(THUMB, index_at(0.01), timestamp=0.0).smoothed_position
        tracker.reset()
        state = tracker.state
        assert state.phase == PinchPhase.IDLE
        np.testing.assert_array_equal(state.smoothed_position, before)

    def test_reset_clear_smoothing(self, tracker):
        tracker.update(THUMB, index_at(0.01), timestamp=0.0)
        tracker.reset(clear_smoothing=True)
        assert tracker.state.smoothed_position is None


class TestFromConfig:
    def test_uses_config_values(self):
        config = EngineConfig(
            pinch_distance_threshold=0.05,
            pinch_validity_duration=0.5,
            smoothing_factor=0.5,
        )
        tracker = PinchTracker.from_config(config, Chirality.LEFT)
        assert tracker.chirality == Chirality.LEFT
        assert tracker.distance_threshold == 0.05
        assert tracker.validity_duration == 0.5
        assert tracker.smoothing_factor == 0.5
        assert tracker.update(THUMB, index_at(0.04), timestamp=0.0).is_pinching
