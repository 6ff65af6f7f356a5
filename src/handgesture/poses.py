"""Static pose classification from world-space joint geometry.

Every predicate is evaluated independently each frame, so a hand can match
several poses at once (or none). Predicates that need a joint the sensor
did not report evaluate to False.

Usage:
    classifier = PoseClassifier()
    poses = classifier.classify_single_hand(snapshot)
    if PoseLabel.FIST in poses:
        ...
    combined = classifier.classify_two_hand(left_snapshot, right_snapshot)
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from handgesture.config import EngineConfig
from handgesture.geometry import FORWARD, UP, angle_between, distance
from handgesture.joints import (
    FINGERTIP_JOINTS,
    INTERMEDIATE_JOINTS,
    JointId,
    base_joint,
    child_joint,
    parent_joint,
)
from handgesture.skeleton import HandSnapshot

ANGLE_TOLERANCE = math.radians(15.0)
DISTANCE_TOLERANCE = 0.02  # meters


class PoseLabel(Enum):
    FIST = "fist"
    OPEN_HAND = "open_hand"
    POINT_INDEX = "point_index"
    CUSTOM1 = "custom1"  # thumb and little fingertips touching
    CUSTOM2 = "custom2"  # palm facing forward


class TwoHandPoseLabel(Enum):
    PALMS_TOGETHER_ARMS_HORIZONTAL = "palms_together_arms_horizontal"
    RIGHT_FIST_ABOVE_LEFT_OPEN_HAND = "right_fist_above_left_open_hand"
    FINGERS_BENT_90 = "fingers_bent_90"
    TSHAPE_FINGERTIPS_TOUCH = "tshape_fingertips_touch"


class PoseClassifier:
    """Stateless geometric pose matcher.

    Distances are in meters, angles in radians. All comparisons are
    inclusive at the tolerance boundary.
    """

    def __init__(
        self,
        angle_tolerance: float = ANGLE_TOLERANCE,
        distance_tolerance: float = DISTANCE_TOLERANCE,
    ):
        self.angle_tolerance = angle_tolerance
        self.distance_tolerance = distance_tolerance

    @classmethod
    def from_config(cls, config: EngineConfig) -> PoseClassifier:
        return cls(
            angle_tolerance=config.angle_tolerance,
            distance_tolerance=config.distance_tolerance,
        )

    # --- Single hand ---

    def classify_single_hand(self, snapshot: HandSnapshot) -> frozenset[PoseLabel]:
        checks = {
            PoseLabel.FIST: self.is_fist,
            PoseLabel.OPEN_HAND: self.is_open_hand,
            PoseLabel.POINT_INDEX: self.is_point_index,
            PoseLabel.CUSTOM1: self.is_thumb_little_touch,
            PoseLabel.CUSTOM2: self.is_palm_forward,
        }
        return frozenset(label for label, check in checks.items() if check(snapshot))

    def is_fist(self, snapshot: HandSnapshot) -> bool:
        """Every fingertip folded onto its base joint."""
        for tip in FINGERTIP_JOINTS:
            d = self._joint_distance(snapshot, tip, base_joint(tip))
            if d is None or d > self.distance_tolerance:
                return False
        return True

    def is_open_hand(self, snapshot: HandSnapshot) -> bool:
        """Every fingertip well clear of the palm center."""
        if not snapshot.has_palm:
            return False
        for tip in FINGERTIP_JOINTS:
            pos = snapshot.joint(tip)
            if pos is None:
                return False
            if distance(pos, snapshot.palm_position) < self.distance_tolerance * 5:
                return False
        return True

    def is_point_index(self, snapshot: HandSnapshot) -> bool:
        index = self._joint_distance(
            snapshot, JointId.INDEX_FINGER_TIP, JointId.INDEX_FINGER_METACARPAL
        )
        middle = self._joint_distance(
            snapshot, JointId.MIDDLE_FINGER_TIP, JointId.MIDDLE_FINGER_METACARPAL
        )
        ring = self._joint_distance(
            snapshot, JointId.RING_FINGER_TIP, JointId.RING_FINGER_METACARPAL
        )
        if index is None or middle is None or ring is None:
            return False
        return (
            index >= self.distance_tolerance * 3
            and middle <= self.distance_tolerance
            and ring <= self.distance_tolerance
        )

    def is_thumb_little_touch(self, snapshot: HandSnapshot) -> bool:
        d = self._joint_distance(snapshot, JointId.THUMB_TIP, JointId.LITTLE_FINGER_TIP)
        return d is not None and d <= self.distance_tolerance * 2

    def is_palm_forward(self, snapshot: HandSnapshot) -> bool:
        if not snapshot.has_palm_normal:
            return False
        return angle_between(snapshot.palm_normal, FORWARD) <= self.angle_tolerance

    # --- Two hands ---

    def classify_two_hand(
        self, left: Optional[HandSnapshot], right: Optional[HandSnapshot]
    ) -> frozenset[TwoHandPoseLabel]:
        """Match combined poses. Empty whenever either hand is missing."""
        if left is None or right is None:
            return frozenset()

        checks = {
            TwoHandPoseLabel.PALMS_TOGETHER_ARMS_HORIZONTAL: self.is_palms_together,
            TwoHandPoseLabel.RIGHT_FIST_ABOVE_LEFT_OPEN_HAND: self.is_fist_above_open_hand,
            TwoHandPoseLabel.FINGERS_BENT_90: self.is_fingers_bent_90,
            TwoHandPoseLabel.TSHAPE_FINGERTIPS_TOUCH: self.is_tshape,
        }
        return frozenset(
            label for label, check in checks.items() if check(left, right)
        )

    def is_palms_together(self, left: HandSnapshot, right: HandSnapshot) -> bool:
        if not (left.has_palm and right.has_palm and right.has_palm_normal):
            return False
        if distance(left.palm_position, right.palm_position) > self.distance_tolerance:
            return False
        if not self._arm_horizontal(left):
            return False
        # Right wrist bent at a right angle: palm normal perpendicular to vertical
        wrist_angle = angle_between(right.palm_normal, UP)
        return abs(wrist_angle - math.pi / 2) <= self.angle_tolerance

    def is_fist_above_open_hand(self, left: HandSnapshot, right: HandSnapshot) -> bool:
        if not self.is_fist(right) or not self.is_open_hand(left):
            return False
        if not (self._arm_horizontal(right) and self._arm_horizontal(left)):
            return False
        if not right.has_palm:
            return False
        return right.palm_position[1] > left.palm_position[1]

    def is_fingers_bent_90(self, left: HandSnapshot, right: HandSnapshot) -> bool:
        """Every intermediate joint of the right hand bent at about 90 degrees."""
        for joint in INTERMEDIATE_JOINTS:
            parent = right.joint(parent_joint(joint))
            child = right.joint(child_joint(joint))
            pos = right.joint(joint)
            if pos is None or parent is None or child is None:
                return False
            angle = angle_between(parent - pos, child - pos)
            if abs(angle - math.pi / 2) > self.angle_tolerance:
                return False
        return True

    def is_tshape(self, left: HandSnapshot, right: HandSnapshot) -> bool:
        right_arm = right.arm_vector
        if right_arm is None:
            return False
        # Right forearm upright, wrist above elbow
        if abs(right_arm[0]) > self.distance_tolerance or abs(right_arm[2]) > self.distance_tolerance:
            return False
        if right_arm[1] <= 0:
            return False
        if not self.is_open_hand(right):
            return False
        if not self._arm_horizontal(left):
            return False
        if not self.is_open_hand(left):
            return False
        for tip in FINGERTIP_JOINTS:
            left_tip = left.joint(tip)
            right_tip = right.joint(tip)
            if left_tip is None or right_tip is None:
                return False
            if distance(left_tip, right_tip) > self.distance_tolerance:
                return False
        return True

    # --- Helpers ---

    def _arm_horizontal(self, snapshot: HandSnapshot) -> bool:
        arm = snapshot.arm_vector
        return arm is not None and abs(arm[1]) <= self.distance_tolerance

    @staticmethod
    def _joint_distance(
        snapshot: HandSnapshot, a: JointId, b: JointId
    ) -> Optional[float]:
        pa = snapshot.joint(a)
        pb = snapshot.joint(b)
        if pa is None or pb is None:
            return None
        return distance(pa, pb)
