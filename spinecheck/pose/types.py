from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class NormalizedJoint:
	"""
	A single landmark as produced by the pose model.

	x/y are normalized to the image size ([0..1]); z and visibility are carried
	through but only visibility is ever consulted (and only when enabled).
	"""

	x: float
	y: float
	z: float = 0.0
	visibility: float = 1.0


@dataclass(frozen=True)
class PixelJoint:
	"""
	A 2D point in drawing-surface pixel space.
	"""

	x: float
	y: float


@dataclass(frozen=True)
class PoseFrame:
	"""
	Model-agnostic pose output for a single video frame.

	- `landmarks` is None when the model reported no body for this frame.
	- width/height are the pixel dimensions the landmarks should be projected to.
	"""

	backend: str
	width: int
	height: int
	landmarks: Optional[Tuple[NormalizedJoint, ...]] = None
	t_host: Optional[float] = None

	@property
	def detected(self) -> bool:
		return self.landmarks is not None
