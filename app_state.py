"""
Explicit app state – single source of truth for runtime lifecycle.
Created in lifespan, attached to app.state.state; injected into routes via Depends(get_state).
"""
from typing import Any, Callable, Optional

from spinecheck.config import AppConfig
from spinecheck.posture.orchestrator import FrameOrchestrator
from spinecheck.video_backend import VideoBackend


class AppState:
	"""
	Holds all runtime state for the app. Populated in server lifespan.
	"""
	# WebSocket manager (routers.ws.ConnectionManager)
	manager: Any = None

	# Config and the live pipeline
	cfg: Optional[AppConfig] = None
	orchestrator: Optional[FrameOrchestrator] = None
	video: Optional[VideoBackend] = None

	# Helpers (callables set in server after creation)
	log_to_clients: Optional[Callable[[str], None]] = None
	unsubscribe_feedback: Optional[Callable[[], None]] = None

	def __init__(self, cfg: Optional[AppConfig] = None) -> None:
		self.cfg = cfg
