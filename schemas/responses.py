"""Pydantic response models for API docs."""
from typing import Dict, Optional

from pydantic import BaseModel


class FeedbackResponse(BaseModel):
	"""Latest feedback; status is one of checking/excellent/good/moderate/severe."""

	message: str
	status: str
	status_text: str


class AlignmentResponse(BaseModel):
	is_aligned: bool
	avg_deviation: int
	max_deviation: int
	severity: str
	detected: bool


class AnalyzeResponse(BaseModel):
	"""Response from POST /posture/analyze and GET /posture/analysis."""

	detected: bool
	width: int
	height: int
	spine: Optional[Dict[str, Dict[str, float]]] = None
	alignment: AlignmentResponse
	feedback: FeedbackResponse
