"""Record and replay hand anchor streams.

A recording captures, per frame, the anchor and joint transforms of every
tracked hand. Replaying it through `GestureFrameEngine.process` reproduces
a session deterministically without a headset:

    player = AnchorPlayer.load("session.json")
    engine = GestureFrameEngine()
    for frame in player.play():
        result = engine.process(frame.anchors, timestamp=frame.timestamp)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping, Optional

import numpy as np

from handgesture.joints import Chirality, JointId
from handgesture.skeleton import HandAnchor

logger = logging.getLogger("handgesture.recorder")

FORMAT_VERSION = 1


@dataclass
class RecordedFrame:
    """A single frame in a recording."""
    timestamp: float  # seconds from recording start
    anchors: dict[Chirality, HandAnchor] = field(default_factory=dict)


def _anchor_to_dict(anchor: HandAnchor) -> dict:
    return {
        "origin_from_anchor": np.asarray(anchor.origin_from_anchor).tolist(),
        "is_tracked": anchor.is_tracked,
        "joints": {
            joint.value: np.asarray(m).tolist()
            for joint, m in anchor.joint_transforms.items()
        },
    }


def _anchor_from_dict(chirality: Chirality, data: dict, timestamp: float) -> HandAnchor:
    joints = {}
    for name, matrix in data.get("joints", {}).items():
        try:
            joint = JointId(name)
        except ValueError:
            logger.warning("Skipping unknown joint '%s' in recording", name)
            continue
        joints[joint] = np.array(matrix, dtype=np.float64)
    return HandAnchor(
        chirality=chirality,
        origin_from_anchor=np.array(data["origin_from_anchor"], dtype=np.float64),
        joint_transforms=joints,
        is_tracked=data.get("is_tracked", True),
        timestamp=timestamp,
    )


class AnchorRecorder:
    """Collects anchor frames and writes them to JSON.

    Usage:
        recorder = AnchorRecorder()
        recorder.start()
        # In the frame loop:
        recorder.add_frame(provider.snapshot())
        # When done:
        recorder.save("session.json")
    """

    def __init__(self):
        self._frames: list[RecordedFrame] = []
        self._start_time: Optional[float] = None
        self._recording = False

    def start(self):
        self._frames = []
        self._start_time = time.monotonic()
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of frames captured."""
        self._recording = False
        return len(self._frames)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def add_frame(
        self,
        anchors: Mapping[Chirality, Optional[HandAnchor]],
        timestamp: Optional[float] = None,
    ):
        """Append a frame. Hands mapped to None are left out.

        Args:
            anchors: Chirality -> anchor for the hands seen this frame.
            timestamp: Seconds from recording start; measured if None.
        """
        if not self._recording:
            return

        if timestamp is None:
            timestamp = time.monotonic() - self._start_time

        self._frames.append(RecordedFrame(
            timestamp=timestamp,
            anchors={c: a for c, a in anchors.items() if a is not None},
        ))

    def save(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": FORMAT_VERSION,
            "frame_count": len(self._frames),
            "duration": self.duration,
            "frames": [
                {
                    "timestamp": f.timestamp,
                    "hands": {
                        c.value: _anchor_to_dict(a) for c, a in f.anchors.items()
                    },
                }
                for f in self._frames
            ],
        }

        with open(path, "w") as f:
            json.dump(data, f)
        logger.info("Saved %d frames (%.1fs) to %s", len(self._frames), self.duration, path)


class AnchorPlayer:
    """Replays a recorded anchor session."""

    def __init__(self, frames: list[RecordedFrame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> AnchorPlayer:
        path = Path(path)
        with open(path) as f:
            data = json.load(f)

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version {version} in {path}")

        frames = []
        for entry in data["frames"]:
            ts = float(entry["timestamp"])
            anchors = {
                Chirality(name): _anchor_from_dict(Chirality(name), hand, ts)
                for name, hand in entry.get("hands", {}).items()
            }
            frames.append(RecordedFrame(timestamp=ts, anchors=anchors))

        logger.info("Loaded %d frames from %s", len(frames), path)
        return cls(frames)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def play(self) -> Iterator[RecordedFrame]:
        """Iterate through all frames instantly (no timing)."""
        yield from self._frames

    def play_realtime(self, speed: float = 1.0) -> Iterator[RecordedFrame]:
        """Replay at original timing, scaled by `speed` (2.0 = double speed)."""
        if not self._frames:
            return

        start = time.monotonic()
        for frame in self.play():
            target_time = frame.timestamp / speed
            elapsed = time.monotonic() - start
            if target_time > elapsed:
                time.sleep(target_time - elapsed)
            yield frame

    def get_frame(self, index: int) -> Optional[RecordedFrame]:
        if 0 <= index < len(self._frames):
            return self._frames[index]
        return None
