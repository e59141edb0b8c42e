"""
Per-frame posture pipeline.

`analyze_frame` is the pure pass (project -> spine -> score -> feedback ->
render). `FrameOrchestrator` wraps it for a live stream: it keeps the latest
FeedbackState, the only value that survives between frames, and pushes every
new FrameAnalysis to its subscribers.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from spinecheck.pose.base import FrameSource
from spinecheck.pose.topology import CORE_JOINTS, has_full_topology
from spinecheck.pose.types import NormalizedJoint, PixelJoint
from spinecheck.posture.alignment import UNDETECTED_ALIGNMENT, AlignmentResult, score_alignment
from spinecheck.posture.feedback import NOT_DETECTED_FEEDBACK, FeedbackState, synthesize_feedback
from spinecheck.posture.projector import project_landmarks
from spinecheck.posture.renderer import draw_alignment_guide, draw_background, render_frame
from spinecheck.posture.spine import SpineModel, build_spine_model
from spinecheck.posture.surface import DrawingSurface

logger = logging.getLogger(__name__)

Listener = Callable[["FrameAnalysis"], None]
SurfaceFactory = Callable[[int, int], DrawingSurface]


@dataclass(frozen=True)
class FrameAnalysis:
	detected: bool
	width: int
	height: int
	pixels: Tuple[PixelJoint, ...]
	spine: Optional[SpineModel]
	alignment: AlignmentResult
	feedback: FeedbackState

	def to_dict(self) -> Dict[str, Any]:
		return {
			"detected": self.detected,
			"width": self.width,
			"height": self.height,
			"spine": self.spine.to_dict() if self.spine is not None else None,
			"alignment": self.alignment.to_dict(),
			"feedback": self.feedback.to_dict(),
		}


def is_detected(landmarks: Optional[Sequence[NormalizedJoint]], min_visibility: float = 0.0) -> bool:
	"""
	Detected means a full landmark set whose nose, shoulders and hips have
	finite coordinates; with min_visibility > 0 those joints must also be at
	least that visible.
	"""
	if not has_full_topology(landmarks):
		return False
	core = [landmarks[i] for i in CORE_JOINTS]
	if not all(math.isfinite(j.x) and math.isfinite(j.y) for j in core):
		return False
	if min_visibility > 0.0:
		return all(j.visibility >= min_visibility for j in core)
	return True


# Far beyond any real frame; keeps midpoints, sums and rounding finite.
MAX_PIXEL_COORD = 1e12


def _pixels_usable(pixels: Sequence[PixelJoint]) -> bool:
	return all(abs(p.x) < MAX_PIXEL_COORD and abs(p.y) < MAX_PIXEL_COORD for p in pixels)


def _undetected(width: int, height: int, surface: Optional[DrawingSurface]) -> FrameAnalysis:
	if surface is not None:
		draw_background(surface)
		draw_alignment_guide(surface)
	return FrameAnalysis(
		detected=False,
		width=int(width),
		height=int(height),
		pixels=(),
		spine=None,
		alignment=UNDETECTED_ALIGNMENT,
		feedback=NOT_DETECTED_FEEDBACK,
	)


def analyze_frame(
	landmarks: Optional[Sequence[NormalizedJoint]],
	width: int,
	height: int,
	surface: Optional[DrawingSurface] = None,
	min_visibility: float = 0.0,
) -> FrameAnalysis:
	if not is_detected(landmarks, min_visibility):
		return _undetected(width, height, surface)

	pixels = project_landmarks(landmarks, width, height)
	if not _pixels_usable(pixels):
		return _undetected(width, height, surface)
	spine = build_spine_model(pixels)
	alignment = score_alignment(spine, width)
	feedback = synthesize_feedback(pixels, alignment)
	if surface is not None:
		render_frame(surface, pixels, spine, alignment.is_aligned)

	return FrameAnalysis(
		detected=True,
		width=int(width),
		height=int(height),
		pixels=tuple(pixels),
		spine=spine,
		alignment=alignment,
		feedback=feedback,
	)


class FrameOrchestrator:
	"""
	Runs one synchronous analysis pass per delivered frame.

	Listeners are called on the thread that delivered the frame; a failing
	listener is logged and does not affect the frame or other listeners.
	"""

	def __init__(self, min_visibility: float = 0.0) -> None:
		self.min_visibility = max(0.0, float(min_visibility))
		self._lock = threading.Lock()
		self._feedback: FeedbackState = NOT_DETECTED_FEEDBACK
		self._latest: Optional[FrameAnalysis] = None
		self._listeners: List[Listener] = []
		self.frames_processed = 0

	@property
	def feedback(self) -> FeedbackState:
		with self._lock:
			return self._feedback

	@property
	def latest(self) -> Optional[FrameAnalysis]:
		with self._lock:
			return self._latest

	def subscribe(self, listener: Listener) -> Callable[[], None]:
		with self._lock:
			self._listeners.append(listener)

		def _unsubscribe() -> None:
			with self._lock:
				if listener in self._listeners:
					self._listeners.remove(listener)

		return _unsubscribe

	def process_frame(
		self,
		landmarks: Optional[Sequence[NormalizedJoint]],
		width: int,
		height: int,
		surface: Optional[DrawingSurface] = None,
	) -> FrameAnalysis:
		analysis = analyze_frame(landmarks, width, height, surface=surface, min_visibility=self.min_visibility)
		with self._lock:
			self._feedback = analysis.feedback
			self._latest = analysis
			self.frames_processed += 1
			listeners = list(self._listeners)
		logger.debug(
			"frame %d: detected=%s severity=%s avg=%dpx max=%dpx",
			self.frames_processed,
			analysis.detected,
			analysis.alignment.severity.value,
			analysis.alignment.avg_deviation,
			analysis.alignment.max_deviation,
		)
		for listener in listeners:
			try:
				listener(analysis)
			except Exception:
				logger.exception("Frame listener %r failed", listener)
		return analysis

	def run(
		self,
		source: FrameSource,
		surface_factory: Optional[SurfaceFactory] = None,
		max_frames: Optional[int] = None,
	) -> int:
		"""
		Drive `source` until it is exhausted (or max_frames). Returns the number
		of frames processed by this call.
		"""
		count = 0
		while max_frames is None or count < max_frames:
			frame = source.read()
			if frame is None:
				break
			surface = surface_factory(frame.width, frame.height) if surface_factory else None
			self.process_frame(frame.landmarks, frame.width, frame.height, surface=surface)
			count += 1
		return count
