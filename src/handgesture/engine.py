"""Per-frame gesture tick: snapshots, pose classification and pinch tracking.

The engine is driven by the host's render loop. Each call reads the latest
anchor for each hand once, classifies poses for every hand that has data,
advances that hand's pinch tracker and, when both hands are present,
evaluates the two-hand poses. The aggregated result is returned to the
caller; nothing is published through globals.

Usage:
    engine = GestureFrameEngine(provider=provider)
    engine.on_frame(lambda result: ui.render(result))
    # In the render loop:
    result = engine.update()
    if result.hand(Chirality.RIGHT) and result.hand(Chirality.RIGHT).pinch_active:
        ...
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

import numpy as np

from handgesture.config import EngineConfig
from handgesture.joints import Chirality, JointId
from handgesture.pinch import PinchState, PinchTracker
from handgesture.poses import PoseClassifier, PoseLabel, TwoHandPoseLabel
from handgesture.profiler import FrameProfiler
from handgesture.provider import HandTrackingProvider
from handgesture.skeleton import HandAnchor, HandSnapshot

logger = logging.getLogger("handgesture.engine")


@dataclass
class HandFrameResult:
    """What one hand did this frame."""
    chirality: Chirality
    pinch_active: bool
    position: Optional[np.ndarray]  # smoothed pinch midpoint
    poses: frozenset[PoseLabel]
    is_pinching: bool = False
    is_valid: bool = False

    def to_dict(self) -> dict:
        return {
            "chirality": self.chirality.value,
            "pinch_active": self.pinch_active,
            "is_pinching": self.is_pinching,
            "is_valid": self.is_valid,
            "position": None if self.position is None else [float(v) for v in self.position],
            "poses": sorted(p.value for p in self.poses),
        }


@dataclass
class GestureFrameResult:
    """Everything the engine found in one frame.

    `hands` only holds hands that had sensor data this frame.
    `two_hand_poses` is empty unless both hands did.
    """
    timestamp: float
    hands: dict[Chirality, HandFrameResult] = field(default_factory=dict)
    two_hand_poses: frozenset[TwoHandPoseLabel] = frozenset()

    def hand(self, chirality: Chirality) -> Optional[HandFrameResult]:
        return self.hands.get(chirality)

    @property
    def left(self) -> Optional[HandFrameResult]:
        return self.hands.get(Chirality.LEFT)

    @property
    def right(self) -> Optional[HandFrameResult]:
        return self.hands.get(Chirality.RIGHT)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "hands": {c.value: h.to_dict() for c, h in self.hands.items()},
            "two_hand_poses": sorted(p.value for p in self.two_hand_poses),
        }


@dataclass
class HandTrackingState:
    """Pinch flags and positions polled by UI collaborators.

    A hand's flag is only true while its pinch is valid. The position is
    updated while the pinch is valid and otherwise keeps its last value.
    """
    is_pinching_left_hand: bool = False
    is_pinching_right_hand: bool = False
    left_pinch_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    right_pinch_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    two_hand_poses: frozenset[TwoHandPoseLabel] = frozenset()

    def is_pinching(self, chirality: Chirality) -> bool:
        if chirality == Chirality.LEFT:
            return self.is_pinching_left_hand
        elif chirality == Chirality.RIGHT:
            return self.is_pinching_right_hand
        raise ValueError(f"Unknown chirality: {chirality!r}")

    def pinch_position(self, chirality: Chirality) -> np.ndarray:
        if chirality == Chirality.LEFT:
            return self.left_pinch_position
        elif chirality == Chirality.RIGHT:
            return self.right_pinch_position
        raise ValueError(f"Unknown chirality: {chirality!r}")

    def set_pinch(
        self, chirality: Chirality, pinching: bool, position: Optional[np.ndarray] = None
    ):
        if chirality == Chirality.LEFT:
            self.is_pinching_left_hand = pinching
            if pinching and position is not None:
                self.left_pinch_position = position
        elif chirality == Chirality.RIGHT:
            self.is_pinching_right_hand = pinching
            if pinching and position is not None:
                self.right_pinch_position = position
        else:
            raise ValueError(f"Unknown chirality: {chirality!r}")

    def reset_pinch_states(self):
        self.is_pinching_left_hand = False
        self.is_pinching_right_hand = False
        self.left_pinch_position = np.zeros(3)
        self.right_pinch_position = np.zeros(3)


@dataclass
class EngineStats:
    """Runtime statistics for the gesture tick."""
    total_frames: int
    two_hand_frames: int
    avg_latency_ms: float
    frame_budget_ms: float = 0.0
    over_budget_frames: int = 0
    profiler_summary: dict = field(default_factory=dict)


class GestureFrameEngine:
    """Runs snapshot building, pose classification and pinch tracking per frame.

    Owns one PinchTracker per hand for its whole lifetime. A hand without
    data in a frame is skipped: its tracker is not advanced and it is
    absent from the result.
    """

    def __init__(
        self,
        provider: Optional[HandTrackingProvider] = None,
        config: Optional[EngineConfig] = None,
        classifier: Optional[PoseClassifier] = None,
        state: Optional[HandTrackingState] = None,
    ):
        self.config = (config or EngineConfig()).validate()
        self.provider = provider
        self.classifier = classifier or PoseClassifier.from_config(self.config)
        self.state = state or HandTrackingState()

        self._trackers: dict[Chirality, PinchTracker] = {
            c: PinchTracker.from_config(self.config, c) for c in Chirality
        }
        self._callbacks: list[Callable[[GestureFrameResult], None]] = []
        self._frame_times: deque = deque(maxlen=60)
        self._total_frames = 0
        self._two_hand_frames = 0

        self.profiler = FrameProfiler(frame_budget_ms=self.config.frame_budget_ms)
        self.profiler.enabled = self.config.enable_profiling

    def on_frame(self, callback: Callable[[GestureFrameResult], None]):
        """Register a callback that receives every frame result."""
        self._callbacks.append(callback)

    def tracker(self, chirality: Chirality) -> PinchTracker:
        return self._trackers[chirality]

    def update(self, timestamp: Optional[float] = None) -> GestureFrameResult:
        """Run one frame against the provider's latest anchors."""
        if self.provider is None:
            raise RuntimeError("GestureFrameEngine.update() needs a HandTrackingProvider")
        return self.process(self.provider.snapshot(), timestamp)

    def process(
        self,
        anchors: Mapping[Chirality, Optional[HandAnchor]],
        timestamp: Optional[float] = None,
    ) -> GestureFrameResult:
        """Run one frame on explicit anchors.

        Args:
            anchors: Chirality -> latest anchor, or None / missing for no data.
            timestamp: Frame time in seconds (monotonic clock if None).

        Returns:
            The aggregated GestureFrameResult.
        """
        now = timestamp if timestamp is not None else time.monotonic()
        t_start = time.perf_counter()
        self._total_frames += 1

        snapshots: dict[Chirality, HandSnapshot] = {}
        hands: dict[Chirality, HandFrameResult] = {}
        two_hand: frozenset[TwoHandPoseLabel] = frozenset()

        with self.profiler.frame():
            for chirality in (Chirality.LEFT, Chirality.RIGHT):
                anchor = anchors.get(chirality)
                if anchor is None or not anchor.is_tracked:
                    # No ghost pinch while the hand is out of view
                    self.state.set_pinch(chirality, False)
                    continue

                with self.profiler.stage("snapshot", chirality):
                    snapshot = HandSnapshot.from_anchor(anchor)

                with self.profiler.stage("classification", chirality):
                    poses = self.classifier.classify_single_hand(snapshot)

                with self.profiler.stage("pinch", chirality):
                    pinch = self._trackers[chirality].update(
                        snapshot.joint(JointId.THUMB_TIP),
                        snapshot.joint(JointId.INDEX_FINGER_TIP),
                        now,
                    )
                self._publish_pinch(chirality, pinch, snapshot)

                if poses:
                    logger.debug(
                        "%s hand matched poses: %s",
                        chirality.value,
                        sorted(p.value for p in poses),
                    )

                snapshots[chirality] = snapshot
                hands[chirality] = HandFrameResult(
                    chirality=chirality,
                    pinch_active=pinch.active,
                    position=pinch.smoothed_position,
                    poses=poses,
                    is_pinching=pinch.is_pinching,
                    is_valid=pinch.is_valid,
                )

            if len(snapshots) == 2:
                with self.profiler.stage("two_hand"):
                    two_hand = self.classifier.classify_two_hand(
                        snapshots[Chirality.LEFT], snapshots[Chirality.RIGHT]
                    )
                self._two_hand_frames += 1
                if two_hand:
                    logger.debug(
                        "Matched two-hand poses: %s", sorted(p.value for p in two_hand)
                    )

        self.state.two_hand_poses = two_hand
        result = GestureFrameResult(timestamp=now, hands=hands, two_hand_poses=two_hand)
        self._frame_times.append(time.perf_counter() - t_start)

        for cb in self._callbacks:
            try:
                cb(result)
            except Exception as e:
                logger.error("Frame callback error: %s", e)

        return result

    def _publish_pinch(
        self, chirality: Chirality, pinch: PinchState, snapshot: HandSnapshot
    ):
        if not pinch.active:
            self.state.set_pinch(chirality, False)
            return
        thumb = snapshot.joint(JointId.THUMB_TIP)
        index = snapshot.joint(JointId.INDEX_FINGER_TIP)
        self.state.set_pinch(chirality, True, (thumb + index) * 0.5)

    @property
    def stats(self) -> EngineStats:
        if self._frame_times:
            avg_latency = sum(self._frame_times) / len(self._frame_times)
        else:
            avg_latency = 0.0
        budget = self.profiler.budget()
        return EngineStats(
            total_frames=self._total_frames,
            two_hand_frames=self._two_hand_frames,
            avg_latency_ms=avg_latency * 1000,
            frame_budget_ms=budget.budget_ms,
            over_budget_frames=budget.over_budget_frames,
            profiler_summary=self.profiler.summary(),
        )

    def reset(self):
        """Clear pinch trackers, observable state and statistics."""
        for tracker in self._trackers.values():
            tracker.reset(clear_smoothing=True)
        self.state.reset_pinch_states()
        self.state.two_hand_poses = frozenset()
        self._frame_times.clear()
        self._total_frames = 0
        self._two_hand_frames = 0
        self.profiler.reset()
