"""Pydantic request body models."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from spinecheck.pose.types import NormalizedJoint


class LandmarkModel(BaseModel):
	"""One normalized pose landmark, as emitted by MediaPipe Pose."""

	model_config = ConfigDict(allow_inf_nan=False)

	x: float = Field(..., description="Horizontal position normalized to image width")
	y: float = Field(..., description="Vertical position normalized to image height")
	z: float = Field(0.0, description="Relative depth (unused by the analysis)")
	visibility: float = Field(1.0, ge=0.0, le=1.0, description="Landmark visibility [0..1]")

	def to_joint(self) -> NormalizedJoint:
		return NormalizedJoint(x=self.x, y=self.y, z=self.z, visibility=self.visibility)


class AnalyzePayload(BaseModel):
	"""Request body for POST /posture/analyze and /posture/render.png. Null landmarks = no body detected."""

	landmarks: Optional[List[LandmarkModel]] = Field(None, description="Landmarks in model order (33 for BlazePose)")
	width: int = Field(640, gt=0, le=8192, description="Surface width in pixels")
	height: int = Field(480, gt=0, le=8192, description="Surface height in pixels")

	def joints(self) -> Optional[List[NormalizedJoint]]:
		if self.landmarks is None:
			return None
		return [lm.to_joint() for lm in self.landmarks]
