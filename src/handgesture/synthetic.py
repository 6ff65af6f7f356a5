"""Synthetic hand skeletons for benchmarks, demos and tests.

Layouts are anchor-local positions in meters for a right hand with the arm
horizontal, fingers pointing forward (-z) and the elbow behind the wrist
(+z). Left hands are mirrored across the x axis.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

import numpy as np

from handgesture.geometry import translation
from handgesture.joints import FINGER_CHAINS, Chirality, JointId
from handgesture.skeleton import HandAnchor

_METACARPAL_X = {"index": 0.02, "middle": 0.0, "ring": -0.02, "little": -0.04}
_METACARPAL_Z = -0.03
_THUMB_KNUCKLE = np.array([0.04, 0.0, -0.01])


def _arm() -> dict[JointId, np.ndarray]:
    return {
        JointId.WRIST: np.array([0.0, 0.0, 0.0]),
        JointId.FOREARM_WRIST: np.array([0.0, 0.0, 0.05]),
        JointId.FOREARM_ARM: np.array([0.0, 0.0, 0.25]),
    }


def _extended_finger(finger: str) -> dict[JointId, np.ndarray]:
    x = _METACARPAL_X[finger]
    depths = [_METACARPAL_Z, -0.08, -0.11, -0.13, -0.15]
    return {
        joint: np.array([x, 0.0, z]) for joint, z in zip(FINGER_CHAINS[finger], depths)
    }


def _curled_finger(finger: str) -> dict[JointId, np.ndarray]:
    base = np.array([_METACARPAL_X[finger], 0.0, _METACARPAL_Z])
    offsets = [
        [0.0, 0.0, 0.0],
        [0.0, -0.004, 0.0],
        [0.0, -0.008, 0.0],
        [0.0, -0.010, 0.002],
        [0.0, -0.010, 0.006],
    ]
    return {
        joint: base + np.array(off) for joint, off in zip(FINGER_CHAINS[finger], offsets)
    }


def _extended_thumb() -> dict[JointId, np.ndarray]:
    step = np.array([0.02, 0.0, -0.02])
    return {
        joint: _THUMB_KNUCKLE + step * i
        for i, joint in enumerate(FINGER_CHAINS["thumb"])
    }


def _curled_thumb() -> dict[JointId, np.ndarray]:
    offsets = [
        [0.0, 0.0, 0.0],
        [0.0, -0.004, 0.0],
        [0.0, -0.008, 0.0],
        [0.0, -0.010, 0.004],
    ]
    return {
        joint: _THUMB_KNUCKLE + np.array(off)
        for joint, off in zip(FINGER_CHAINS["thumb"], offsets)
    }


def open_hand_positions() -> dict[JointId, np.ndarray]:
    positions = {**_arm(), **_extended_thumb()}
    for finger in ("index", "middle", "ring", "little"):
        positions.update(_extended_finger(finger))
    return positions


def fist_positions() -> dict[JointId, np.ndarray]:
    positions = {**_arm(), **_curled_thumb()}
    for finger in ("index", "middle", "ring", "little"):
        positions.update(_curled_finger(finger))
    return positions


def point_positions() -> dict[JointId, np.ndarray]:
    """Index extended, everything else curled."""
    positions = fist_positions()
    positions.update(_extended_finger("index"))
    return positions


def pinch_positions(gap: float = 0.01) -> dict[JointId, np.ndarray]:
    """Open hand with thumb and index tips `gap` meters apart."""
    positions = open_hand_positions()
    positions[JointId.THUMB_TIP] = np.array([0.035, 0.0, -0.10])
    positions[JointId.INDEX_FINGER_TIP] = np.array([0.035, 0.0, -0.10 - gap])
    return positions


POSES: dict[str, Callable[[], dict[JointId, np.ndarray]]] = {
    "open": open_hand_positions,
    "fist": fist_positions,
    "point": point_positions,
    "pinch": pinch_positions,
}


def mirror(positions: Mapping[JointId, np.ndarray]) -> dict[JointId, np.ndarray]:
    """Reflect a right-hand layout into a left-hand one."""
    flip = np.array([-1.0, 1.0, 1.0])
    return {joint: np.asarray(pos) * flip for joint, pos in positions.items()}


def make_anchor(
    chirality: Chirality,
    positions: Mapping[JointId, np.ndarray],
    origin_from_anchor: Optional[np.ndarray] = None,
    timestamp: Optional[float] = None,
) -> HandAnchor:
    """Wrap anchor-local joint positions as translation-only joint transforms."""
    return HandAnchor(
        chirality=chirality,
        origin_from_anchor=np.eye(4) if origin_from_anchor is None else np.asarray(origin_from_anchor),
        joint_transforms={joint: translation(pos) for joint, pos in positions.items()},
        timestamp=timestamp,
    )


def make_hand(
    pose: str,
    chirality: Chirality = Chirality.RIGHT,
    offset=(0.0, 0.0, 0.0),
    timestamp: Optional[float] = None,
) -> HandAnchor:
    """Named pose placed at `offset` in world space."""
    if pose not in POSES:
        raise ValueError(f"Unknown pose '{pose}', expected one of {sorted(POSES)}")
    positions = POSES[pose]()
    if chirality == Chirality.LEFT:
        positions = mirror(positions)
    return make_anchor(chirality, positions, translation(offset), timestamp)
