"""Skeletal joint identifiers and the hand topology used by pose predicates."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Chirality(Enum):
    LEFT = "left"
    RIGHT = "right"


class JointId(Enum):
    """The fixed set of joints reported for one tracked hand."""
    WRIST = "wrist"

    THUMB_KNUCKLE = "thumb_knuckle"
    THUMB_INTERMEDIATE_BASE = "thumb_intermediate_base"
    THUMB_INTERMEDIATE_TIP = "thumb_intermediate_tip"
    THUMB_TIP = "thumb_tip"

    INDEX_FINGER_METACARPAL = "index_finger_metacarpal"
    INDEX_FINGER_KNUCKLE = "index_finger_knuckle"
    INDEX_FINGER_INTERMEDIATE_BASE = "index_finger_intermediate_base"
    INDEX_FINGER_INTERMEDIATE_TIP = "index_finger_intermediate_tip"
    INDEX_FINGER_TIP = "index_finger_tip"

    MIDDLE_FINGER_METACARPAL = "middle_finger_metacarpal"
    MIDDLE_FINGER_KNUCKLE = "middle_finger_knuckle"
    MIDDLE_FINGER_INTERMEDIATE_BASE = "middle_finger_intermediate_base"
    MIDDLE_FINGER_INTERMEDIATE_TIP = "middle_finger_intermediate_tip"
    MIDDLE_FINGER_TIP = "middle_finger_tip"

    RING_FINGER_METACARPAL = "ring_finger_metacarpal"
    RING_FINGER_KNUCKLE = "ring_finger_knuckle"
    RING_FINGER_INTERMEDIATE_BASE = "ring_finger_intermediate_base"
    RING_FINGER_INTERMEDIATE_TIP = "ring_finger_intermediate_tip"
    RING_FINGER_TIP = "ring_finger_tip"

    LITTLE_FINGER_METACARPAL = "little_finger_metacarpal"
    LITTLE_FINGER_KNUCKLE = "little_finger_knuckle"
    LITTLE_FINGER_INTERMEDIATE_BASE = "little_finger_intermediate_base"
    LITTLE_FINGER_INTERMEDIATE_TIP = "little_finger_intermediate_tip"
    LITTLE_FINGER_TIP = "little_finger_tip"

    FOREARM_WRIST = "forearm_wrist"
    FOREARM_ARM = "forearm_arm"


# Joint chains from the hand root outwards, one per digit
FINGER_CHAINS: dict[str, list[JointId]] = {
    "thumb": [
        JointId.THUMB_KNUCKLE,
        JointId.THUMB_INTERMEDIATE_BASE,
        JointId.THUMB_INTERMEDIATE_TIP,
        JointId.THUMB_TIP,
    ],
    "index": [
        JointId.INDEX_FINGER_METACARPAL,
        JointId.INDEX_FINGER_KNUCKLE,
        JointId.INDEX_FINGER_INTERMEDIATE_BASE,
        JointId.INDEX_FINGER_INTERMEDIATE_TIP,
        JointId.INDEX_FINGER_TIP,
    ],
    "middle": [
        JointId.MIDDLE_FINGER_METACARPAL,
        JointId.MIDDLE_FINGER_KNUCKLE,
        JointId.MIDDLE_FINGER_INTERMEDIATE_BASE,
        JointId.MIDDLE_FINGER_INTERMEDIATE_TIP,
        JointId.MIDDLE_FINGER_TIP,
    ],
    "ring": [
        JointId.RING_FINGER_METACARPAL,
        JointId.RING_FINGER_KNUCKLE,
        JointId.RING_FINGER_INTERMEDIATE_BASE,
        JointId.RING_FINGER_INTERMEDIATE_TIP,
        JointId.RING_FINGER_TIP,
    ],
    "little": [
        JointId.LITTLE_FINGER_METACARPAL,
        JointId.LITTLE_FINGER_KNUCKLE,
        JointId.LITTLE_FINGER_INTERMEDIATE_BASE,
        JointId.LITTLE_FINGER_INTERMEDIATE_TIP,
        JointId.LITTLE_FINGER_TIP,
    ],
}

FINGERTIP_JOINTS: list[JointId] = [chain[-1] for chain in FINGER_CHAINS.values()]

# Tip -> the joint a curled finger folds back onto
BASE_JOINTS: dict[JointId, JointId] = {
    chain[-1]: chain[0] for chain in FINGER_CHAINS.values()
}

# Every joint strictly between a chain's root and its tip
INTERMEDIATE_JOINTS: list[JointId] = [
    joint for chain in FINGER_CHAINS.values() for joint in chain[1:-1]
]

PALM_JOINTS: list[JointId] = [
    JointId.WRIST,
    JointId.INDEX_FINGER_METACARPAL,
    JointId.MIDDLE_FINGER_METACARPAL,
    JointId.RING_FINGER_METACARPAL,
    JointId.LITTLE_FINGER_METACARPAL,
]

PALM_NORMAL_JOINTS: list[JointId] = [
    JointId.WRIST,
    JointId.INDEX_FINGER_METACARPAL,
    JointId.MIDDLE_FINGER_METACARPAL,
]

_PARENTS: dict[JointId, JointId] = {}
_CHILDREN: dict[JointId, JointId] = {}
for _chain in FINGER_CHAINS.values():
    for _parent, _child in zip(_chain, _chain[1:]):
        _PARENTS[_child] = _parent
        _CHILDREN[_parent] = _child
_PARENTS[JointId.WRIST] = JointId.FOREARM_WRIST
_PARENTS[JointId.FOREARM_WRIST] = JointId.FOREARM_ARM


def base_joint(tip: JointId) -> JointId:
    """Base joint for a fingertip: thumb knuckle or the finger's metacarpal."""
    return BASE_JOINTS[tip]


def parent_joint(joint: JointId) -> Optional[JointId]:
    """Joint one step closer to the forearm, or None at the chain root."""
    return _PARENTS.get(joint)


def child_joint(joint: JointId) -> Optional[JointId]:
    """Joint one step closer to the fingertip, or None at a tip."""
    return _CHILDREN.get(joint)
