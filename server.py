import argparse
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app_state import AppState
from routers import posture, video, ws
from routers.ws import ConnectionManager, feedback_message
from spinecheck import __version__
from spinecheck.config import AppConfig, get_config, set_config_path
from spinecheck.posture.orchestrator import FrameAnalysis, FrameOrchestrator
from spinecheck.video_backend import get_video_backend

logger = logging.getLogger("spinecheck.server")


def _make_client_logger(manager: ConnectionManager, loop: asyncio.AbstractEventLoop):
	def _log_to_clients(message: str) -> None:
		"""
		Send a log line to all connected WebSocket clients.
		Fire-and-forget; safe to call from the capture thread.
		"""
		logger.info(message)
		if loop.is_closed():
			return
		asyncio.run_coroutine_threadsafe(manager.broadcast_json({"type": "log", "msg": message}), loop)

	return _log_to_clients


def _make_feedback_broadcaster(manager: ConnectionManager, loop: asyncio.AbstractEventLoop):
	def _on_frame(analysis: FrameAnalysis) -> None:
		# Runs on the capture thread; hand the send to the event loop.
		if loop.is_closed() or manager.client_count == 0:
			return
		asyncio.run_coroutine_threadsafe(manager.broadcast_json(feedback_message(analysis.feedback)), loop)

	return _on_frame


def create_app(cfg: Optional[AppConfig] = None) -> FastAPI:
	@asynccontextmanager
	async def lifespan(app: FastAPI):
		conf = cfg or get_config()
		state = AppState(conf)
		loop = asyncio.get_running_loop()

		state.manager = ConnectionManager()
		state.log_to_clients = _make_client_logger(state.manager, loop)
		state.orchestrator = FrameOrchestrator(min_visibility=conf.analysis.min_visibility)
		state.unsubscribe_feedback = state.orchestrator.subscribe(_make_feedback_broadcaster(state.manager, loop))
		state.video = get_video_backend(state.orchestrator, conf)
		app.state.state = state
		logger.info("SpineCheck %s ready (video source: %s)", __version__, state.video.name())

		if conf.video.autostart and conf.video.source != "none":
			try:
				state.video.start()
			except RuntimeError as e:
				logger.warning("Video autostart failed: %s", e)
		try:
			yield
		finally:
			state.video.stop()
			if state.unsubscribe_feedback:
				state.unsubscribe_feedback()

	app = FastAPI(title="SpineCheck", version=__version__, lifespan=lifespan)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=["*"],
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.include_router(posture.router)
	app.include_router(video.router)
	app.include_router(ws.router)

	@app.get("/health")
	async def health():
		return {"status": "ok", "version": __version__}

	return app


app = create_app()


def main() -> None:
	parser = argparse.ArgumentParser(description="SpineCheck posture analysis server.")
	parser.add_argument("--config", help="Path to config.json (default: repo root).")
	parser.add_argument("--host", help="Bind host (overrides config).")
	parser.add_argument("--port", type=int, help="Bind port (overrides config).")
	parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
	args = parser.parse_args()

	if args.config:
		set_config_path(args.config)
	cfg = get_config()
	level = "DEBUG" if args.debug else cfg.logging.level
	logging.basicConfig(level=getattr(logging, level), format="%(levelname)s:%(name)s:%(message)s")

	import uvicorn

	uvicorn.run(create_app(cfg), host=args.host or cfg.server.host, port=args.port or cfg.server.port)


if __name__ == "__main__":
	main()
