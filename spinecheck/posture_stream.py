from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from spinecheck.pose.base import FrameSource
from spinecheck.posture.orchestrator import FrameOrchestrator
from spinecheck.posture.surface import PillowSurface
from spinecheck.video_backend import VideoBackend

logger = logging.getLogger(__name__)


@dataclass
class OverlayFrame:
	"""
	Holds the latest rendered overlay and timing metadata.
	"""
	jpeg: bytes
	t_host: float
	frame_idx: int = 0
	width: int = 0
	height: int = 0


class PostureStreamBackend(VideoBackend):
	"""
	Runs the frame source and the posture orchestrator on one capture thread.

	Responsibilities:
	- Open the frame source on start() and release it when the loop exits.
	- Analyse and render each delivered frame synchronously; there is no queue,
	  so a slow frame simply delays the next read (latest frame wins).
	- Provide a thread-safe "latest JPEG" buffer for /video/mjpeg and snapshots.
	"""

	def __init__(
		self,
		source_factory: Callable[[], FrameSource],
		orchestrator: FrameOrchestrator,
		label: str = "posture",
		max_fps: Optional[float] = None,
		jpeg_quality: int = 80,
		stop_timeout: float = 3.0,
	) -> None:
		self._source_factory = source_factory
		self._orchestrator = orchestrator
		self._label = str(label or "posture")
		self._min_interval = 1.0 / float(max_fps) if max_fps and max_fps > 0 else 0.0
		self._jpeg_quality = int(jpeg_quality)
		self._stop_timeout = float(stop_timeout)

		self._lock = threading.Lock()
		self._running = False
		self._thread: Optional[threading.Thread] = None
		# One event per run; a run only ever watches its own.
		self._stop_event: Optional[threading.Event] = None
		self._latest: Optional[OverlayFrame] = None
		self._last_error: Optional[str] = None
		self._frames = 0

	def name(self) -> str:
		return self._label

	def is_running(self) -> bool:
		with self._lock:
			return bool(self._running)

	def get_status(self) -> Dict[str, Any]:
		with self._lock:
			return {
				"backend": self._label,
				"running": bool(self._running),
				"has_frame": self._latest is not None,
				"t_last_frame": self._latest.t_host if self._latest else None,
				"frame_idx": self._latest.frame_idx if self._latest else None,
				"size": [self._latest.width, self._latest.height] if self._latest else None,
				"frames": int(self._frames),
				"error": self._last_error,
			}

	def get_latest_jpeg(self) -> Tuple[Optional[bytes], Optional[float]]:
		with self._lock:
			if self._latest is None:
				return None, None
			return self._latest.jpeg, self._latest.t_host

	def start(self) -> None:
		prev = self._thread
		if prev is not None and prev.is_alive() and not self.is_running() and prev is not threading.current_thread():
			# Let a run that is already winding down finish first.
			prev.join(timeout=0.5)
		with self._lock:
			if self._running:
				return
			prev = self._thread
			if prev is not None and prev.is_alive():
				# A stopped run that has not exited yet still owns the source.
				raise RuntimeError(f"{self._label} capture is still shutting down; retry shortly")
			self._running = True
			self._last_error = None
			stop_event = threading.Event()
			self._stop_event = stop_event

		t = threading.Thread(target=self._run_capture_loop, args=(stop_event,), name=f"{self._label}-capture", daemon=True)
		self._thread = t
		t.start()
		logger.info("Posture stream started (%s)", self._label)

	def stop(self) -> None:
		with self._lock:
			self._running = False
			stop_event = self._stop_event
		if stop_event is not None:
			stop_event.set()

		# Source close happens in the capture thread; we just wait briefly for exit.
		t = self._thread
		if t and t.is_alive() and t is not threading.current_thread():
			t.join(timeout=self._stop_timeout)
		if t is not None and not t.is_alive():
			self._thread = None

	def wait(self, timeout: Optional[float] = None) -> None:
		t = self._thread
		if t is not None:
			t.join(timeout=timeout)

	def _run_capture_loop(self, stop_event: threading.Event) -> None:
		source: Optional[FrameSource] = None
		try:
			source = self._source_factory()
			last_mono = 0.0
			while not stop_event.is_set():
				frame = source.read()
				if frame is None:
					logger.info("Frame source %s exhausted", source.name())
					break
				if stop_event.is_set():
					break

				surface = PillowSurface(frame.width, frame.height)
				self._orchestrator.process_frame(frame.landmarks, frame.width, frame.height, surface=surface)
				jpeg = surface.to_jpeg(quality=self._jpeg_quality)

				with self._lock:
					self._frames += 1
					self._latest = OverlayFrame(
						jpeg=jpeg,
						t_host=time.time(),
						frame_idx=self._frames,
						width=surface.width,
						height=surface.height,
					)

				if self._min_interval > 0.0:
					now = time.monotonic()
					delay = self._min_interval - (now - last_mono)
					if delay > 0:
						stop_event.wait(delay)
					last_mono = time.monotonic()
		except Exception as e:
			logger.exception("Posture stream loop failed")
			with self._lock:
				self._last_error = f"stream loop error: {e!r}"
		finally:
			if source is not None:
				try:
					source.close()
				except Exception:
					logger.exception("Closing frame source failed")
			with self._lock:
				if self._stop_event is stop_event:
					self._running = False
			logger.info("Posture stream stopped (%s)", self._label)
