"""Frame-budget timing for the gesture tick.

The tick runs inside the host's render loop, so a whole frame of snapshot
building, classification and pinch tracking has to finish inside one
display frame. `frame()` times a tick and checks it against that budget;
`stage()` times the pieces of a tick, keyed per hand for the stages that
run once per hand ("pinch.left", "pinch.right").

    profiler = FrameProfiler(frame_budget_ms=1000 / 90)
    with profiler.frame():
        with profiler.stage("snapshot", Chirality.LEFT):
            ...
    if profiler.budget().over_budget_frames:
        ...
"""

from __future__ import annotations

import logging
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

import numpy as np

from handgesture.joints import Chirality

logger = logging.getLogger("handgesture.profiler")

FRAME_KEY = "frame"


@dataclass
class StageTiming:
    """Rolling-window timings of one stage, in milliseconds."""
    key: str
    calls: int
    mean_ms: float
    p95_ms: float
    max_ms: float

    def to_dict(self) -> dict:
        return {
            "calls": self.calls,
            "mean_ms": round(self.mean_ms, 3),
            "p95_ms": round(self.p95_ms, 3),
            "max_ms": round(self.max_ms, 3),
        }


@dataclass
class FrameBudget:
    """How the ticks measured so far fit the display frame."""
    budget_ms: float
    frames: int
    over_budget_frames: int
    worst_ms: float

    @property
    def over_budget_ratio(self) -> float:
        return self.over_budget_frames / self.frames if self.frames else 0.0

    @property
    def headroom_ms(self) -> float:
        """Budget left over by the slowest tick (negative when it overran)."""
        return self.budget_ms - self.worst_ms


class FrameProfiler:
    """Times ticks against a per-frame budget and breaks them down by stage.

    Args:
        frame_budget_ms: Time available to one tick.
        window_size: Samples kept per stage for the rolling statistics.
        clock: Seconds counter, `time.perf_counter` unless replaced.
    """

    def __init__(
        self,
        frame_budget_ms: float,
        window_size: int = 120,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.frame_budget_ms = frame_budget_ms
        self.enabled = True
        self._window_size = window_size
        self._clock = clock
        self._samples: dict[str, deque[float]] = {}
        self._calls: dict[str, int] = {}
        self._frames = 0
        self._over_budget = 0
        self._worst_ms = 0.0

    @staticmethod
    def stage_key(name: str, chirality: Optional[Chirality] = None) -> str:
        return name if chirality is None else f"{name}.{chirality.value}"

    @contextmanager
    def stage(self, name: str, chirality: Optional[Chirality] = None) -> Iterator[None]:
        if not self.enabled:
            yield
            return
        t0 = self._clock()
        try:
            yield
        finally:
            self._record(self.stage_key(name, chirality), (self._clock() - t0) * 1000.0)

    @contextmanager
    def frame(self) -> Iterator[None]:
        """Time one whole tick and count it against the budget."""
        if not self.enabled:
            yield
            return
        t0 = self._clock()
        try:
            yield
        finally:
            elapsed_ms = (self._clock() - t0) * 1000.0
            self._record(FRAME_KEY, elapsed_ms)
            self._frames += 1
            self._worst_ms = max(self._worst_ms, elapsed_ms)
            if elapsed_ms > self.frame_budget_ms:
                self._over_budget += 1
                logger.debug(
                    "Tick took %.3fms, over the %.3fms frame budget",
                    elapsed_ms, self.frame_budget_ms,
                )

    def _record(self, key: str, elapsed_ms: float):
        samples = self._samples.get(key)
        if samples is None:
            samples = self._samples[key] = deque(maxlen=self._window_size)
        samples.append(elapsed_ms)
        self._calls[key] = self._calls.get(key, 0) + 1

    def timing(self, name: str, chirality: Optional[Chirality] = None) -> Optional[StageTiming]:
        key = self.stage_key(name, chirality)
        samples = self._samples.get(key)
        if not samples:
            return None
        values = np.fromiter(samples, dtype=np.float64)
        return StageTiming(
            key=key,
            calls=self._calls[key],
            mean_ms=float(values.mean()),
            p95_ms=float(np.percentile(values, 95)),
            max_ms=float(values.max()),
        )

    def budget(self) -> FrameBudget:
        return FrameBudget(
            budget_ms=self.frame_budget_ms,
            frames=self._frames,
            over_budget_frames=self._over_budget,
            worst_ms=self._worst_ms,
        )

    def summary(self) -> dict[str, dict]:
        """Stage key -> rounded timings, for every stage seen in the window."""
        return {key: self.timing(key).to_dict() for key in sorted(self._samples) if self._samples[key]}

    def reset(self):
        self._samples.clear()
        self._calls.clear()
        self._frames = 0
        self._over_budget = 0
        self._worst_ms = 0.0
