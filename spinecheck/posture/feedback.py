"""
Human-readable feedback for one analysed frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from spinecheck.pose.topology import BodyJoints
from spinecheck.pose.types import PixelJoint
from spinecheck.posture.alignment import AlignmentResult, Severity


NOT_DETECTED_MESSAGE = "Posture not detected. Please position yourself facing the camera."
SHOULDER_TILT_MESSAGE = "⚠️ Keep your shoulders straight."
TURNED_RIGHT_MESSAGE = "Body is slightly turned to the right."
TURNED_LEFT_MESSAGE = "Body is slightly turned to the left."
FACING_CAMERA_MESSAGE = "Body is facing the camera."

SHOULDER_TILT_LIMIT_PX = 15.0
TURNED_RIGHT_RATIO = 1.2
TURNED_LEFT_RATIO = 0.8
# Below this a nose-to-shoulder distance counts as zero.
_DIST_EPS = 1e-9


class FeedbackStatus(str, Enum):
	CHECKING = "checking"
	EXCELLENT = "excellent"
	GOOD = "good"
	MODERATE = "moderate"
	SEVERE = "severe"

	@property
	def label(self) -> str:
		return _STATUS_LABELS[self]


_STATUS_LABELS = {
	FeedbackStatus.CHECKING: "⏳ Checking...",
	FeedbackStatus.EXCELLENT: "🌟 Excellent",
	FeedbackStatus.GOOD: "✅ Good",
	FeedbackStatus.MODERATE: "⚠️ Needs Improvement",
	FeedbackStatus.SEVERE: "🚨 Critical",
}

_SEVERITY_FEEDBACK = {
	Severity.EXCELLENT: ("✅ Excellent spine posture!", FeedbackStatus.EXCELLENT),
	Severity.GOOD: ("✅ Good spine posture.", FeedbackStatus.GOOD),
	Severity.MODERATE: ("⚠️ Spine alignment needs improvement.", FeedbackStatus.MODERATE),
	Severity.SEVERE: ("🚨 Major posture correction needed!", FeedbackStatus.SEVERE),
}


@dataclass(frozen=True)
class FeedbackState:
	message: str
	status: FeedbackStatus

	def to_dict(self) -> Dict[str, Any]:
		return {
			"message": self.message,
			"status": self.status.value,
			"status_text": self.status.label,
		}


NOT_DETECTED_FEEDBACK = FeedbackState(message=NOT_DETECTED_MESSAGE, status=FeedbackStatus.CHECKING)


def facing_direction_message(nose: PixelJoint, left_shoulder: PixelJoint, right_shoulder: PixelJoint) -> str:
	"""
	Compare horizontal nose-to-shoulder distances.

	A zero right-hand distance is an unbounded ratio (turned right), unless the
	left-hand distance is zero as well, which reads as facing the camera.
	"""
	left_dist = abs(nose.x - left_shoulder.x)
	right_dist = abs(nose.x - right_shoulder.x)
	if right_dist <= _DIST_EPS:
		return FACING_CAMERA_MESSAGE if left_dist <= _DIST_EPS else TURNED_RIGHT_MESSAGE

	ratio = left_dist / right_dist
	if ratio > TURNED_RIGHT_RATIO:
		return TURNED_RIGHT_MESSAGE
	if ratio < TURNED_LEFT_RATIO:
		return TURNED_LEFT_MESSAGE
	return FACING_CAMERA_MESSAGE


def deviation_summary(alignment: AlignmentResult) -> str:
	return f"Average deviation: {alignment.avg_deviation}px, Maximum: {alignment.max_deviation}px"


def feedback_fragments(body: BodyJoints, alignment: AlignmentResult) -> List[str]:
	fragments: List[str] = []
	if abs(body.left_shoulder.y - body.right_shoulder.y) > SHOULDER_TILT_LIMIT_PX:
		fragments.append(SHOULDER_TILT_MESSAGE)
	fragments.append(_SEVERITY_FEEDBACK[alignment.severity][0])
	fragments.append(facing_direction_message(body.nose, body.left_shoulder, body.right_shoulder))
	fragments.append(deviation_summary(alignment))
	return fragments


def synthesize_feedback(pixels: Optional[Sequence[PixelJoint]], alignment: AlignmentResult) -> FeedbackState:
	body = BodyJoints.from_pixels(pixels)
	if body is None:
		return NOT_DETECTED_FEEDBACK
	return FeedbackState(
		message=" ".join(feedback_fragments(body, alignment)),
		status=_SEVERITY_FEEDBACK[alignment.severity][1],
	)
