"""
Posture analysis pipeline: projection, spine model, alignment scoring,
feedback and overlay rendering, sequenced per frame by the orchestrator.
"""

from spinecheck.posture.alignment import AlignmentResult, Severity, score_alignment
from spinecheck.posture.feedback import FeedbackState, FeedbackStatus, synthesize_feedback
from spinecheck.posture.orchestrator import FrameAnalysis, FrameOrchestrator, analyze_frame
from spinecheck.posture.projector import project_landmarks
from spinecheck.posture.spine import SpineModel, build_spine_model

__all__ = [
	"AlignmentResult",
	"FeedbackState",
	"FeedbackStatus",
	"FrameAnalysis",
	"FrameOrchestrator",
	"Severity",
	"SpineModel",
	"analyze_frame",
	"build_spine_model",
	"project_landmarks",
	"score_alignment",
	"synthesize_feedback",
]
