"""Tests for frame-budget timing."""

import pytest

from handgesture.joints import Chirality
from handgesture.profiler import FrameProfiler


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def profiler(clock):
    return FrameProfiler(frame_budget_ms=10.0, clock=clock)


class TestFrameBudget:
    def test_frame_within_budget(self, profiler, clock):
        with profiler.frame():
            clock.advance(4.0)
        budget = profiler.budget()
        assert budget.frames == 1
        assert budget.over_budget_frames == 0
        assert budget.worst_ms == pytest.approx(4.0)
        assert budget.headroom_ms == pytest.approx(6.0)

    def test_frame_over_budget(self, profiler, clock):
        for ms in (4.0, 12.0, 9.0, 15.0):
            with profiler.frame():
                clock.advance(ms)
        budget = profiler.budget()
        assert budget.frames == 4
        assert budget.over_budget_frames == 2
        assert budget.over_budget_ratio == pytest.approx(0.5)
        assert budget.headroom_ms == pytest.approx(-5.0)

    def test_exactly_on_budget_is_not_over(self, clock):
        profiler = FrameProfiler(frame_budget_ms=250.0, clock=clock)
        with profiler.frame():
            clock.advance(250.0)
        assert profiler.budget().over_budget_frames == 0

    def test_no_frames(self, profiler):
        assert profiler.budget().over_budget_ratio == 0.0

    def test_frame_counted_when_tick_raises(self, profiler, clock):
        with pytest.raises(RuntimeError):
            with profiler.frame():
                clock.advance(20.0)
                raise RuntimeError("tick failed")
        assert profiler.budget().over_budget_frames == 1


class TestStages:
    def test_per_hand_keys(self, profiler, clock):
        with profiler.stage("pinch", Chirality.LEFT):
            clock.advance(1.0)
        with profiler.stage("pinch", Chirality.RIGHT):
            clock.advance(3.0)
        assert profiler.timing("pinch", Chirality.LEFT).mean_ms == pytest.approx(1.0)
        assert profiler.timing("pinch", Chirality.RIGHT).mean_ms == pytest.approx(3.0)
        assert profiler.timing("pinch") is None

    def test_statistics(self, profiler, clock):
        for ms in range(1, 21):
            with profiler.stage("two_hand"):
                clock.advance(float(ms))
        timing = profiler.timing("two_hand")
        assert timing.calls == 20
        assert timing.mean_ms == pytest.approx(10.5)
        assert timing.max_ms == pytest.approx(20.0)
        assert 19.0 <= timing.p95_ms <= 20.0

    def test_window_keeps_call_count(self, clock):
        profiler = FrameProfiler(frame_budget_ms=10.0, window_size=5, clock=clock)
        for ms in range(10):
            with profiler.stage("snapshot", Chirality.RIGHT):
                clock.advance(float(ms))
        timing = profiler.timing("snapshot", Chirality.RIGHT)
        assert timing.calls == 10
        assert timing.mean_ms == pytest.approx(7.0)  # last five samples: 5..9

    def test_summary_keys(self, profiler, clock):
        with profiler.frame():
            with profiler.stage("snapshot", Chirality.LEFT):
                clock.advance(2.0)
        summary = profiler.summary()
        assert set(summary) == {"frame", "snapshot.left"}
        assert summary["snapshot.left"] == {
            "calls": 1, "mean_ms": 2.0, "p95_ms": 2.0, "max_ms": 2.0,
        }

    def test_disabled(self, profiler, clock):
        profiler.enabled = False
        with profiler.frame():
            with profiler.stage("classification", Chirality.LEFT):
                clock.advance(50.0)
        assert profiler.summary() == {}
        assert profiler.budget().frames == 0

    def test_reset(self, profiler, clock):
        with profiler.frame():
            clock.advance(30.0)
        profiler.reset()
        assert profiler.summary() == {}
        budget = profiler.budget()
        assert budget.frames == 0
        assert budget.over_budget_frames == 0
        assert budget.worst_ms == 0.0
