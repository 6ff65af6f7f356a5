"""Thumb-index pinch detection with debounce and positional smoothing.

A pinch only counts once the fingertips have stayed closer than the
distance threshold for the validity duration, so brushing the fingers past
each other does not register. The reported position is an exponential
moving average of the fingertip midpoint.

Usage:
    tracker = PinchTracker(Chirality.RIGHT)
    state = tracker.update(thumb_tip, index_tip, timestamp=now)
    if state.active:
        place_marker(state.smoothed_position)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

import numpy as np

from handgesture.config import EngineConfig
from handgesture.geometry import as_vector, distance
from handgesture.joints import Chirality

logger = logging.getLogger("handgesture.pinch")

PINCH_DISTANCE_THRESHOLD = 0.03  # meters
PINCH_VALIDITY_DURATION = 0.25  # seconds
SMOOTHING_FACTOR = 0.3


class PinchPhase(Enum):
    IDLE = "idle"
    CANDIDATE = "candidate"
    VALID = "valid"


@dataclass
class PinchState:
    """Pinch status of one hand after the latest update."""
    is_pinching: bool = False
    pinch_start_time: Optional[float] = None
    is_valid: bool = False
    smoothed_position: Optional[np.ndarray] = None

    @property
    def active(self) -> bool:
        """Pinch held long enough to show to the user."""
        return self.is_pinching and self.is_valid

    @property
    def phase(self) -> PinchPhase:
        if not self.is_pinching:
            return PinchPhase.IDLE
        return PinchPhase.VALID if self.is_valid else PinchPhase.CANDIDATE


class PinchTracker:
    """Per-hand pinch state machine: IDLE -> CANDIDATE -> VALID.

    Any frame where the fingertips are at or beyond the threshold drops the
    hand straight back to IDLE. Smoothing runs on every tracked frame and is
    kept across pinches.
    """

    def __init__(
        self,
        chirality: Optional[Chirality] = None,
        distance_threshold: float = PINCH_DISTANCE_THRESHOLD,
        validity_duration: float = PINCH_VALIDITY_DURATION,
        smoothing_factor: float = SMOOTHING_FACTOR,
    ):
        self.chirality = chirality
        self.distance_threshold = distance_threshold
        self.validity_duration = validity_duration
        self.smoothing_factor = smoothing_factor
        self._state = PinchState()

    @classmethod
    def from_config(
        cls, config: EngineConfig, chirality: Optional[Chirality] = None
    ) -> PinchTracker:
        return cls(
            chirality=chirality,
            distance_threshold=config.pinch_distance_threshold,
            validity_duration=config.pinch_validity_duration,
            smoothing_factor=config.smoothing_factor,
        )

    @property
    def state(self) -> PinchState:
        smoothed = self._state.smoothed_position
        return replace(
            self._state, smoothed_position=None if smoothed is None else smoothed.copy()
        )

    def update(
        self,
        thumb: Optional[np.ndarray],
        index: Optional[np.ndarray],
        timestamp: float,
    ) -> PinchState:
        """Advance one frame.

        Args:
            thumb: World position of the thumb tip, or None if not reported.
            index: World position of the index fingertip, or None.
            timestamp: Frame time in seconds.

        Returns:
            Copy of the state after this frame.
        """
        state = self._state

        if thumb is None or index is None:
            self._release(timestamp)
            return self.state

        thumb = as_vector(thumb)
        index = as_vector(index)

        raw = (thumb + index) * 0.5
        if state.smoothed_position is None:
            state.smoothed_position = raw
        else:
            a = self.smoothing_factor
            state.smoothed_position = state.smoothed_position * (1.0 - a) + raw * a

        if distance(thumb, index) >= self.distance_threshold:
            self._release(timestamp)
            return self.state

        if not state.is_pinching:
            state.is_pinching = True
            state.pinch_start_time = timestamp
            logger.debug("%s pinch candidate at %.3f", self._name, timestamp)

        if not state.is_valid and timestamp - state.pinch_start_time >= self.validity_duration:
            state.is_valid = True
            logger.debug(
                "%s pinch valid after %.3fs", self._name, timestamp - state.pinch_start_time
            )

        return self.state

    def reset(self, clear_smoothing: bool = False):
        """Return to IDLE. Smoothing history survives unless asked otherwise."""
        smoothed = None if clear_smoothing else self._state.smoothed_position
        self._state = PinchState(smoothed_position=smoothed)

    def _release(self, timestamp: float):
        if self._state.is_pinching:
            logger.debug("%s pinch released at %.3f", self._name, timestamp)
        self._state.is_pinching = False
        self._state.pinch_start_time = None
        self._state.is_valid = False

    @property
    def _name(self) -> str:
        return self.chirality.value if self.chirality else "hand"
