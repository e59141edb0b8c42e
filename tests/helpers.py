from typing import Dict, List, Optional, Sequence, Tuple

from spinecheck.pose.topology import EXPECTED_JOINT_COUNT, LEFT_HIP, LEFT_SHOULDER, NOSE, RIGHT_HIP, RIGHT_SHOULDER
from spinecheck.pose.types import NormalizedJoint, PixelJoint
from spinecheck.posture.surface import DrawingSurface, Path2D


class RecordingSurface(DrawingSurface):
	"""DrawingSurface that records every primitive call in order."""

	def __init__(self, width: int = 800, height: int = 600) -> None:
		self._w = width
		self._h = height
		self.calls: List[tuple] = []

	@property
	def width(self) -> int:
		return self._w

	@property
	def height(self) -> int:
		return self._h

	def fill_rect(self, x, y, w, h, color):
		self.calls.append(("fill_rect", (x, y, w, h), color))

	def stroke_path(self, path: Path2D, color, line_width, dash=None):
		self.calls.append(("stroke_path", list(path.ops), color, line_width, tuple(dash) if dash else None))

	def fill_circle(self, x, y, radius, color):
		self.calls.append(("fill_circle", (x, y), radius, color))

	def fill_text(self, text, x, y, color, size=14, align="center"):
		self.calls.append(("fill_text", text, (x, y), color))

	def kinds(self) -> List[str]:
		return [c[0] for c in self.calls]


def make_pixels(
	points: Optional[Dict[int, Tuple[float, float]]] = None,
	count: int = EXPECTED_JOINT_COUNT,
	default: Tuple[float, float] = (400.0, 300.0),
) -> List[PixelJoint]:
	pixels = [PixelJoint(*default) for _ in range(count)]
	for idx, (x, y) in (points or {}).items():
		pixels[idx] = PixelJoint(float(x), float(y))
	return pixels


def body_points(
	nose=(400, 150),
	left_shoulder=(300, 200),
	right_shoulder=(500, 200),
	left_hip=(320, 400),
	right_hip=(480, 400),
	dx: float = 0.0,
) -> Dict[int, Tuple[float, float]]:
	pts = {
		NOSE: nose,
		LEFT_SHOULDER: left_shoulder,
		RIGHT_SHOULDER: right_shoulder,
		LEFT_HIP: left_hip,
		RIGHT_HIP: right_hip,
	}
	return {i: (x + dx, y) for i, (x, y) in pts.items()}


def to_landmarks(
	pixels: Sequence[PixelJoint],
	width: float,
	height: float,
	visibility: float = 1.0,
) -> List[NormalizedJoint]:
	return [NormalizedJoint(x=p.x / width, y=p.y / height, z=0.0, visibility=visibility) for p in pixels]
