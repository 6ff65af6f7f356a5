"""World-space hand snapshots built from per-joint anchor transforms.

The tracking provider reports each joint relative to the hand anchor and the
anchor relative to the world origin. A snapshot composes the two once per
frame and derives the palm center, palm normal, wrist and forearm positions
that the pose predicates read.

Usage:
    snapshot = build_snapshot(Chirality.RIGHT, joint_transforms, origin_from_anchor)
    if snapshot.has(JointId.THUMB_TIP, JointId.INDEX_FINGER_TIP):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

import numpy as np

from handgesture.geometry import ZERO, normalize, transform_position
from handgesture.joints import (
    PALM_JOINTS,
    PALM_NORMAL_JOINTS,
    Chirality,
    JointId,
)


@dataclass
class HandAnchor:
    """Latest sensor reading for one hand."""
    chirality: Chirality
    origin_from_anchor: np.ndarray  # 4x4, anchor -> world
    joint_transforms: dict[JointId, np.ndarray]  # 4x4, joint -> anchor
    is_tracked: bool = True
    timestamp: Optional[float] = None


@dataclass
class HandSnapshot:
    """World-space joint positions of one hand for a single frame.

    Joints the sensor did not report are absent from `joint_positions`.
    Derived fields fall back to the zero vector when their inputs are
    missing; predicates must check `has()` rather than trust those zeros.
    """

    chirality: Chirality
    joint_positions: dict[JointId, np.ndarray] = field(default_factory=dict)
    palm_position: np.ndarray = field(default_factory=lambda: ZERO.copy())
    palm_normal: np.ndarray = field(default_factory=lambda: ZERO.copy())
    wrist_position: np.ndarray = field(default_factory=lambda: ZERO.copy())
    forearm_position: np.ndarray = field(default_factory=lambda: ZERO.copy())

    def joint(self, joint: JointId) -> Optional[np.ndarray]:
        return self.joint_positions.get(joint)

    def has(self, *joints: JointId) -> bool:
        return all(j in self.joint_positions for j in joints)

    @property
    def has_palm(self) -> bool:
        return self.has(*PALM_JOINTS)

    @property
    def has_palm_normal(self) -> bool:
        return self.has(*PALM_NORMAL_JOINTS)

    @property
    def arm_vector(self) -> Optional[np.ndarray]:
        """Wrist minus forearm, or None when either joint is missing."""
        if not self.has(JointId.WRIST, JointId.FOREARM_ARM):
            return None
        return self.wrist_position - self.forearm_position

    @classmethod
    def from_positions(
        cls, chirality: Chirality, positions: Mapping[JointId, np.ndarray]
    ) -> HandSnapshot:
        """Build a snapshot from joint positions already in world space."""
        joints = {
            joint: np.asarray(pos, dtype=np.float64).reshape(3)
            for joint, pos in positions.items()
        }
        return cls(
            chirality=chirality,
            joint_positions=joints,
            palm_position=_palm_center(joints),
            palm_normal=_palm_normal(joints),
            wrist_position=joints.get(JointId.WRIST, ZERO).copy(),
            forearm_position=joints.get(JointId.FOREARM_ARM, ZERO).copy(),
        )

    @classmethod
    def from_anchor(cls, anchor: HandAnchor) -> HandSnapshot:
        return build_snapshot(
            anchor.chirality, anchor.joint_transforms, anchor.origin_from_anchor
        )


def build_snapshot(
    chirality: Chirality,
    joint_transforms: Mapping[JointId, np.ndarray],
    origin_from_anchor: Optional[np.ndarray] = None,
) -> HandSnapshot:
    """Convert anchor-relative joint transforms into a world-space snapshot.

    Args:
        chirality: Which hand the transforms belong to.
        joint_transforms: JointId -> 4x4 anchor-from-joint transform.
        origin_from_anchor: 4x4 anchor-to-world transform (identity if None).

    Returns:
        HandSnapshot. An empty input yields an empty joint map and zero
        derived fields.
    """
    world = np.eye(4) if origin_from_anchor is None else np.asarray(
        origin_from_anchor, dtype=np.float64
    )
    positions = {
        joint: transform_position(world @ np.asarray(local, dtype=np.float64))
        for joint, local in joint_transforms.items()
    }
    return HandSnapshot.from_positions(chirality, positions)


def _palm_center(joints: Mapping[JointId, np.ndarray]) -> np.ndarray:
    if not all(j in joints for j in PALM_JOINTS):
        return ZERO.copy()
    return np.mean([joints[j] for j in PALM_JOINTS], axis=0)


def _palm_normal(joints: Mapping[JointId, np.ndarray]) -> np.ndarray:
    if not all(j in joints for j in PALM_NORMAL_JOINTS):
        return ZERO.copy()
    wrist = joints[JointId.WRIST]
    v1 = joints[JointId.INDEX_FINGER_METACARPAL] - wrist
    v2 = joints[JointId.MIDDLE_FINGER_METACARPAL] - wrist
    return normalize(np.cross(v1, v2))
