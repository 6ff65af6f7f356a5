"""handgesture - Hand pose and pinch classification from skeletal joint streams."""

__version__ = "0.1.0"

from handgesture.joints import Chirality, JointId
from handgesture.skeleton import HandAnchor, HandSnapshot, build_snapshot
from handgesture.poses import PoseClassifier, PoseLabel, TwoHandPoseLabel
from handgesture.pinch import PinchPhase, PinchState, PinchTracker
from handgesture.provider import HandTrackingProvider, LatestValue
from handgesture.engine import (
    GestureFrameEngine,
    GestureFrameResult,
    HandFrameResult,
    HandTrackingState,
)
from handgesture.config import EngineConfig
from handgesture.recorder import AnchorRecorder, AnchorPlayer
from handgesture.profiler import FrameProfiler
