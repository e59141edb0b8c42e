"""Pydantic request/response models for API validation and docs."""
from schemas.requests import AnalyzePayload, LandmarkModel
from schemas.responses import AlignmentResponse, AnalyzeResponse, FeedbackResponse

__all__ = [
	"AnalyzePayload",
	"LandmarkModel",
	"AlignmentResponse",
	"AnalyzeResponse",
	"FeedbackResponse",
]
