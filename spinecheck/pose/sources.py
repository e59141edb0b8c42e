"""
Frame sources: where per-frame landmarks come from.

- SequenceFrameSource: in-memory synthetic frames (tests, demos).
- JsonlFrameSource: replays a landmark recording, one JSON object per line.
- CameraFrameSource: OpenCV webcam capture + a PoseProvider.
"""

from __future__ import annotations

import json
import logging
import math
import time
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from spinecheck.pose.base import FrameSource, PoseProvider
from spinecheck.pose.types import NormalizedJoint, PoseFrame

logger = logging.getLogger(__name__)


def joint_from_json(obj: Any) -> NormalizedJoint:
	"""
	Accepts {"x","y","z","visibility"} dicts or [x, y, z?, visibility?] lists.
	NaN/Infinity (which json.loads lets through) are rejected.
	"""
	if isinstance(obj, dict):
		joint = NormalizedJoint(
			x=float(obj["x"]),
			y=float(obj["y"]),
			z=float(obj.get("z", 0.0) or 0.0),
			visibility=float(obj.get("visibility", 1.0) if obj.get("visibility") is not None else 1.0),
		)
	elif isinstance(obj, (list, tuple)) and len(obj) >= 2:
		vals = [float(v) for v in obj]
		z = vals[2] if len(vals) > 2 else 0.0
		vis = vals[3] if len(vals) > 3 else 1.0
		joint = NormalizedJoint(x=vals[0], y=vals[1], z=z, visibility=vis)
	else:
		raise ValueError(f"Unsupported landmark entry: {obj!r}")
	if not all(math.isfinite(v) for v in (joint.x, joint.y, joint.z, joint.visibility)):
		raise ValueError(f"Non-finite landmark value: {obj!r}")
	return joint


def landmarks_from_json(obj: Any) -> Optional[Tuple[NormalizedJoint, ...]]:
	if obj is None:
		return None
	if not isinstance(obj, (list, tuple)):
		raise ValueError(f"Landmarks must be a list or null, got {type(obj).__name__}")
	return tuple(joint_from_json(j) for j in obj)


def landmarks_to_json(landmarks: Optional[Sequence[NormalizedJoint]]) -> Optional[List[List[float]]]:
	if landmarks is None:
		return None
	return [[j.x, j.y, j.z, j.visibility] for j in landmarks]


class SequenceFrameSource(FrameSource):
	"""
	Yields a fixed sequence of landmark sets at a fixed surface size.
	Each item is a landmark sequence or None ("no body detected").
	"""

	def __init__(self, frames: Iterable[Optional[Sequence[NormalizedJoint]]], width: int = 640, height: int = 480) -> None:
		self._it: Iterator[Optional[Sequence[NormalizedJoint]]] = iter(frames)
		self._width = int(width)
		self._height = int(height)

	def name(self) -> str:
		return "sequence"

	def read(self) -> Optional[PoseFrame]:
		try:
			lm = next(self._it)
		except StopIteration:
			return None
		return PoseFrame(
			backend=self.name(),
			width=self._width,
			height=self._height,
			landmarks=tuple(lm) if lm is not None else None,
			t_host=time.time(),
		)


class JsonlFrameSource(FrameSource):
	"""
	Replays recorded frames from a JSON-lines file.

	Each line is either `null` / a bare landmark list, or an object:
	    {"landmarks": [[x, y, z, v], ...] | null, "width": 640, "height": 480}
	width/height default to the constructor values. Blank lines are skipped.
	"""

	def __init__(self, path: str | Path, width: int = 640, height: int = 480, loop: bool = False) -> None:
		self._path = Path(path).expanduser()
		if not self._path.exists():
			raise RuntimeError(f"Landmark recording not found: {self._path}")
		self._width = int(width)
		self._height = int(height)
		self._loop = bool(loop)
		self._fh = open(self._path, "r", encoding="utf-8")
		self._line_no = 0
		self._frames_this_pass = 0

	def name(self) -> str:
		return "replay"

	def _parse_line(self, line: str) -> PoseFrame:
		raw = json.loads(line)
		width, height = self._width, self._height
		t_host = None
		if isinstance(raw, dict):
			width = int(raw.get("width") or width)
			height = int(raw.get("height") or height)
			t_host = raw.get("t")
			lm = landmarks_from_json(raw.get("landmarks"))
		else:
			lm = landmarks_from_json(raw)
		return PoseFrame(
			backend=self.name(),
			width=width,
			height=height,
			landmarks=lm,
			t_host=float(t_host) if t_host is not None else time.time(),
		)

	def read(self) -> Optional[PoseFrame]:
		while True:
			if self._fh is None:
				return None
			line = self._fh.readline()
			if not line:
				# Rewind only after a pass that yielded frames; a blank file ends.
				if self._loop and self._frames_this_pass > 0:
					self._fh.seek(0)
					self._line_no = 0
					self._frames_this_pass = 0
					continue
				return None
			self._line_no += 1
			line = line.strip()
			if not line:
				continue
			try:
				frame = self._parse_line(line)
			except (ValueError, KeyError, TypeError) as e:
				raise ValueError(f"{self._path}:{self._line_no}: bad landmark frame: {e}") from e
			self._frames_this_pass += 1
			return frame

	def close(self) -> None:
		if self._fh is not None:
			self._fh.close()
			self._fh = None


class CameraFrameSource(FrameSource):
	"""
	Webcam capture via OpenCV, one pose inference per captured frame.

	The capture device and the provider are both released in close().
	"""

	def __init__(self, provider: PoseProvider, camera_index: int = 0, width: int = 640, height: int = 480) -> None:
		import cv2  # type: ignore

		self._cv2 = cv2
		self._provider = provider
		self._cap = cv2.VideoCapture(int(camera_index))
		if not self._cap.isOpened():
			self._cap.release()
			provider.close()
			raise RuntimeError(f"Camera {camera_index} could not be opened")
		self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, int(width))
		self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, int(height))
		self._camera_index = int(camera_index)

	def name(self) -> str:
		return f"camera{self._camera_index}:{self._provider.name()}"

	def read(self) -> Optional[PoseFrame]:
		if self._cap is None:
			return None
		ok, bgr = self._cap.read()
		if not ok or bgr is None:
			logger.warning("Camera %d returned no frame; stopping source", self._camera_index)
			return None
		rgb = self._cv2.cvtColor(bgr, self._cv2.COLOR_BGR2RGB)
		return self._provider.infer_rgb(rgb, t_host=time.time())

	def close(self) -> None:
		if self._cap is not None:
			self._cap.release()
			self._cap = None
		self._provider.close()
