from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from spinecheck.pose.types import PoseFrame


class PoseProvider(ABC):
	"""
	Model adapter interface.

	Implementations should take an RGB image (H,W,3 uint8) and return a PoseFrame
	whose landmarks are normalized to the image size (or None when no body is found).
	"""

	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def infer_rgb(self, rgb, t_host: Optional[float] = None) -> PoseFrame: ...

	@abstractmethod
	def close(self) -> None: ...


class FrameSource(ABC):
	"""
	Per-tick landmark feed consumed by the posture orchestrator.

	`read()` blocks until the next frame is available and returns None once the
	source is exhausted (end of a recording, camera closed).
	"""

	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def read(self) -> Optional[PoseFrame]: ...

	def close(self) -> None:
		return None

	def __enter__(self) -> "FrameSource":
		return self

	def __exit__(self, *exc) -> None:
		self.close()
