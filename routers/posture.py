"""Posture analysis routes. Routes: /posture/feedback, analysis, analyze, render.png."""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from deps import get_min_visibility, get_orchestrator
from schemas.requests import AnalyzePayload
from schemas.responses import AnalyzeResponse, FeedbackResponse
from spinecheck.posture.orchestrator import FrameOrchestrator, analyze_frame
from spinecheck.posture.surface import PillowSurface

router = APIRouter(prefix="/posture", tags=["posture"])


@router.get("/feedback", response_model=FeedbackResponse)
async def posture_feedback(orchestrator: FrameOrchestrator = Depends(get_orchestrator)):
	"""Latest feedback from the live stream (checking until a body is seen)."""
	return orchestrator.feedback.to_dict()


@router.get("/analysis", response_model=AnalyzeResponse)
async def posture_analysis(orchestrator: FrameOrchestrator = Depends(get_orchestrator)):
	"""Full analysis of the most recent live frame."""
	latest = orchestrator.latest
	if latest is None:
		raise HTTPException(status_code=404, detail="No frame analysed yet")
	return latest.to_dict()


# Plain def: analysis and rendering are CPU work, so they run in the threadpool.
@router.post("/analyze", response_model=AnalyzeResponse)
def posture_analyze(payload: AnalyzePayload, min_visibility: float = Depends(get_min_visibility)):
	"""Analyse a submitted landmark set. Does not touch the live feedback."""
	analysis = analyze_frame(payload.joints(), payload.width, payload.height, min_visibility=min_visibility)
	return analysis.to_dict()


@router.post("/render.png")
def posture_render(payload: AnalyzePayload, min_visibility: float = Depends(get_min_visibility)):
	"""Render the overlay for a submitted landmark set as PNG."""
	surface = PillowSurface(payload.width, payload.height)
	analysis = analyze_frame(
		payload.joints(),
		payload.width,
		payload.height,
		surface=surface,
		min_visibility=min_visibility,
	)
	return Response(
		content=surface.to_png(),
		media_type="image/png",
		headers={
			"X-Posture-Status": analysis.feedback.status.value,
			"X-Posture-Severity": analysis.alignment.severity.value,
		},
	)
