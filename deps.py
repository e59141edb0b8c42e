"""
FastAPI dependencies for the posture app.

Routes take the live pipeline pieces through Depends(...) instead of reaching
into app.state directly.
"""
from fastapi import Depends, HTTPException, Request

from app_state import AppState
from spinecheck.posture.orchestrator import FrameOrchestrator
from spinecheck.video_backend import VideoBackend


def get_state(request: Request) -> AppState:
	"""Return the app state instance attached in lifespan."""
	return request.app.state.state


def get_orchestrator(state: AppState = Depends(get_state)) -> FrameOrchestrator:
	if state.orchestrator is None:
		raise HTTPException(status_code=503, detail="Posture pipeline not ready")
	return state.orchestrator


def get_video(state: AppState = Depends(get_state)) -> VideoBackend:
	if state.video is None:
		raise HTTPException(status_code=503, detail="Video backend not ready")
	return state.video


def get_min_visibility(state: AppState = Depends(get_state)) -> float:
	return state.cfg.analysis.min_visibility if state.cfg else 0.0
