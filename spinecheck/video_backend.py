from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Callable, Dict, Optional

from spinecheck.config import AppConfig, get_config
from spinecheck.pose.base import FrameSource
from spinecheck.posture.orchestrator import FrameOrchestrator


class VideoBackend(ABC):
	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def start(self) -> None: ...

	@abstractmethod
	def stop(self) -> None: ...

	@abstractmethod
	def get_status(self) -> Dict[str, Any]: ...

	@abstractmethod
	def get_latest_jpeg(self) -> tuple[Optional[bytes], Optional[float]]: ...

	async def mjpeg_stream(self, fps: float) -> AsyncIterator[bytes]:
		async for chunk in mjpeg_from_latest(self.get_latest_jpeg, fps):
			yield chunk

	async def snapshot_jpeg(self) -> Optional[bytes]:
		jpeg, _t = self.get_latest_jpeg()
		return jpeg


class NullVideoBackend(VideoBackend):
	"""
	No frame feed configured (video.source = "none"). Analysis is still
	available through the stateless HTTP routes.
	"""

	def name(self) -> str:
		return "none"

	def start(self) -> None:
		raise RuntimeError("No video source configured (video.source is 'none')")

	def stop(self) -> None:
		return None

	def get_status(self) -> Dict[str, Any]:
		return {"backend": self.name(), "running": False, "has_frame": False, "error": None}

	def get_latest_jpeg(self) -> tuple[Optional[bytes], Optional[float]]:
		return None, None


def make_source_factory(cfg: AppConfig) -> Optional[Callable[[], FrameSource]]:
	"""
	Build a zero-arg callable that opens the configured frame source. Sources are
	opened lazily (on backend start) so a missing camera or model only fails
	when streaming is requested.
	"""
	source = (cfg.video.source or "camera").strip().lower()
	if source == "none":
		return None

	if source == "replay":
		from spinecheck.pose.sources import JsonlFrameSource

		def _open_replay() -> FrameSource:
			return JsonlFrameSource(
				cfg.video.replay_path,
				width=cfg.video.replay_width,
				height=cfg.video.replay_height,
				loop=cfg.video.replay_loop,
			)

		return _open_replay

	def _open_camera() -> FrameSource:
		from spinecheck.pose.mediapipe_provider import MediaPipePoseProvider
		from spinecheck.pose.sources import CameraFrameSource

		provider = MediaPipePoseProvider(
			model_complexity=cfg.pose.model_complexity,
			smooth_landmarks=cfg.pose.smooth_landmarks,
			min_detection_confidence=cfg.pose.min_detection_confidence,
			min_tracking_confidence=cfg.pose.min_tracking_confidence,
		)
		return CameraFrameSource(provider, camera_index=cfg.camera.index, width=cfg.camera.width, height=cfg.camera.height)

	return _open_camera


def get_video_backend(orchestrator: FrameOrchestrator, cfg: Optional[AppConfig] = None) -> VideoBackend:
	cfg = cfg or get_config()
	factory = make_source_factory(cfg)
	if factory is None:
		return NullVideoBackend()

	from spinecheck.posture_stream import PostureStreamBackend

	# Camera sources are paced by the device; replay is paced to max_fps.
	pace = cfg.video.max_fps if cfg.video.source == "replay" else None
	return PostureStreamBackend(
		factory,
		orchestrator,
		label=cfg.video.source,
		max_fps=pace,
		jpeg_quality=cfg.video.jpeg_quality,
	)


async def mjpeg_from_latest(get_latest_jpeg_fn, fps: float) -> AsyncIterator[bytes]:
	"""
	Reusable MJPEG generator for backends that expose get_latest_jpeg().
	Yields full multipart chunks including boundary and headers.
	"""
	boundary = b"frame"
	last_t = None
	last_sent_mono = 0.0
	try:
		max_fps = float(fps)
	except (TypeError, ValueError):
		max_fps = 15.0
	if not (max_fps > 0.0):
		max_fps = 15.0
	min_interval = 1.0 / max_fps

	while True:
		jpeg, t = get_latest_jpeg_fn()
		if jpeg is None or t is None:
			await asyncio.sleep(0.05)
			continue
		if last_t is not None and t == last_t:
			await asyncio.sleep(0.01)
			continue
		now_mono = time.monotonic()
		elapsed = now_mono - last_sent_mono
		if elapsed < min_interval:
			await asyncio.sleep(min_interval - elapsed)
			continue
		last_t = t
		last_sent_mono = time.monotonic()
		yield b"--" + boundary + b"\r\n"
		yield b"Content-Type: image/jpeg\r\n"
		yield b"Content-Length: " + str(len(jpeg)).encode("ascii") + b"\r\n\r\n"
		yield jpeg + b"\r\n"
