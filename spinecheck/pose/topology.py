"""
BlazePose (MediaPipe Pose) joint topology.

The upstream model emits a fixed-length landmark array where positions carry
anatomical meaning. Everything downstream addresses joints through the names
and constants below, and `BodyJoints.from_pixels` is the one place where the
array length is checked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from spinecheck.pose.types import PixelJoint


BLAZEPOSE_NAMES = (
	"nose",
	"left_eye_inner",
	"left_eye",
	"left_eye_outer",
	"right_eye_inner",
	"right_eye",
	"right_eye_outer",
	"left_ear",
	"right_ear",
	"mouth_left",
	"mouth_right",
	"left_shoulder",
	"right_shoulder",
	"left_elbow",
	"right_elbow",
	"left_wrist",
	"right_wrist",
	"left_pinky",
	"right_pinky",
	"left_index",
	"right_index",
	"left_thumb",
	"right_thumb",
	"left_hip",
	"right_hip",
	"left_knee",
	"right_knee",
	"left_ankle",
	"right_ankle",
	"left_heel",
	"right_heel",
	"left_foot_index",
	"right_foot_index",
)

EXPECTED_JOINT_COUNT = len(BLAZEPOSE_NAMES)

NOSE = 0
LEFT_SHOULDER = 11
RIGHT_SHOULDER = 12
LEFT_ELBOW = 13
RIGHT_ELBOW = 14
LEFT_WRIST = 15
RIGHT_WRIST = 16
LEFT_HIP = 23
RIGHT_HIP = 24
LEFT_KNEE = 25
RIGHT_KNEE = 26
LEFT_ANKLE = 27
RIGHT_ANKLE = 28

# Joints the spine model and feedback depend on.
CORE_JOINTS = (NOSE, LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_HIP, RIGHT_HIP)

# Stick-figure bones: arms, shoulder line, hip line, torso sides, legs.
SKELETON_BONES: Tuple[Tuple[int, int], ...] = (
	(LEFT_SHOULDER, LEFT_ELBOW),
	(LEFT_ELBOW, LEFT_WRIST),
	(RIGHT_SHOULDER, RIGHT_ELBOW),
	(RIGHT_ELBOW, RIGHT_WRIST),
	(LEFT_SHOULDER, RIGHT_SHOULDER),
	(LEFT_HIP, RIGHT_HIP),
	(LEFT_SHOULDER, LEFT_HIP),
	(RIGHT_SHOULDER, RIGHT_HIP),
	(LEFT_HIP, LEFT_KNEE),
	(LEFT_KNEE, LEFT_ANKLE),
	(RIGHT_HIP, RIGHT_KNEE),
	(RIGHT_KNEE, RIGHT_ANKLE),
)


def has_full_topology(joints: Optional[Sequence[object]]) -> bool:
	return joints is not None and len(joints) >= EXPECTED_JOINT_COUNT


@dataclass(frozen=True)
class BodyJoints:
	"""
	Named view over the joints used by the spine model and feedback rules.
	"""

	nose: PixelJoint
	left_shoulder: PixelJoint
	right_shoulder: PixelJoint
	left_hip: PixelJoint
	right_hip: PixelJoint

	@classmethod
	def from_pixels(cls, pixels: Optional[Sequence[PixelJoint]]) -> Optional["BodyJoints"]:
		if not has_full_topology(pixels):
			return None
		return cls(
			nose=pixels[NOSE],
			left_shoulder=pixels[LEFT_SHOULDER],
			right_shoulder=pixels[RIGHT_SHOULDER],
			left_hip=pixels[LEFT_HIP],
			right_hip=pixels[RIGHT_HIP],
		)
