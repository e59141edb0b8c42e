from __future__ import annotations

import logging
from typing import Optional

from spinecheck.pose.base import PoseProvider
from spinecheck.pose.topology import EXPECTED_JOINT_COUNT
from spinecheck.pose.types import NormalizedJoint, PoseFrame

logger = logging.getLogger(__name__)


class MediaPipePoseProvider(PoseProvider):
	"""
	MediaPipe Pose provider that outputs the full 33-landmark BlazePose set.

	Notes:
	- Landmarks stay normalized; projection to pixels happens in the posture pipeline.
	- `visibility` is passed through untouched.
	"""

	def __init__(
		self,
		model_complexity: int = 1,
		smooth_landmarks: bool = True,
		min_detection_confidence: float = 0.5,
		min_tracking_confidence: float = 0.5,
	) -> None:
		try:
			import mediapipe as mp  # type: ignore
		except ImportError as e:
			raise RuntimeError(
				"MediaPipe is not installed. Install pose deps with: pip install mediapipe"
			) from e

		self._pose = mp.solutions.pose.Pose(
			static_image_mode=False,
			model_complexity=int(model_complexity),
			smooth_landmarks=bool(smooth_landmarks),
			enable_segmentation=False,
			smooth_segmentation=False,
			min_detection_confidence=float(min_detection_confidence),
			min_tracking_confidence=float(min_tracking_confidence),
		)

	def name(self) -> str:
		return "mediapipe_pose"

	def infer_rgb(self, rgb, t_host: Optional[float] = None) -> PoseFrame:
		# rgb: HxWx3
		h, w = int(rgb.shape[0]), int(rgb.shape[1])
		res = self._pose.process(rgb)
		if not res or not getattr(res, "pose_landmarks", None):
			return PoseFrame(backend=self.name(), width=w, height=h, t_host=t_host)

		lm = res.pose_landmarks.landmark
		if len(lm) < EXPECTED_JOINT_COUNT:
			logger.debug("MediaPipe returned %d landmarks, expected %d", len(lm), EXPECTED_JOINT_COUNT)
		landmarks = tuple(
			NormalizedJoint(
				x=float(p.x),
				y=float(p.y),
				z=float(p.z),
				visibility=float(getattr(p, "visibility", 0.0) or 0.0),
			)
			for p in lm
		)
		return PoseFrame(backend=self.name(), width=w, height=h, landmarks=landmarks, t_host=t_host)

	def close(self) -> None:
		if self._pose is not None:
			self._pose.close()
			self._pose = None
