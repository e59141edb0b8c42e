"""
Spine model derived from sparse body landmarks.

Pose models expose no vertebral joints, so the spine is approximated by fixed
interpolation weights along the shoulder-centre / hip-centre axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from spinecheck.pose.topology import BodyJoints
from spinecheck.pose.types import PixelJoint


def midpoint(a: PixelJoint, b: PixelJoint) -> PixelJoint:
	return PixelJoint(x=(a.x + b.x) / 2.0, y=(a.y + b.y) / 2.0)


def _blend(a: PixelJoint, b: PixelJoint, weight_a: float) -> PixelJoint:
	wb = 1.0 - weight_a
	return PixelJoint(x=a.x * weight_a + b.x * wb, y=a.y * weight_a + b.y * wb)


@dataclass(frozen=True)
class SpineModel:
	nose: PixelJoint
	neck: PixelJoint
	upper_spine: PixelJoint
	mid_spine: PixelJoint
	lower_spine: PixelJoint
	hip_center: PixelJoint

	def points(self) -> Tuple[PixelJoint, ...]:
		"""Head-to-pelvis order; scoring and drawing both walk this sequence."""
		return (
			self.nose,
			self.neck,
			self.upper_spine,
			self.mid_spine,
			self.lower_spine,
			self.hip_center,
		)

	def to_dict(self) -> dict:
		"""
		JSON form, keyed head-to-pelvis. upper_spine is the third of the
		shoulder-hip axis nearest the shoulders and lower_spine the third
		nearest the hips; older clients that placed "upperSpine" at the hip
		end see the two labels swapped (same points, same scores).
		"""
		return {
			name: {"x": p.x, "y": p.y}
			for name, p in (
				("nose", self.nose),
				("neck", self.neck),
				("upper_spine", self.upper_spine),
				("mid_spine", self.mid_spine),
				("lower_spine", self.lower_spine),
				("hip_center", self.hip_center),
			)
		}


def build_spine_model(pixels: Optional[Sequence[PixelJoint]]) -> Optional[SpineModel]:
	"""
	Returns None when the landmark set does not cover the full topology.
	"""
	body = BodyJoints.from_pixels(pixels)
	if body is None:
		return None

	shoulder_center = midpoint(body.left_shoulder, body.right_shoulder)
	hip_center = midpoint(body.left_hip, body.right_hip)

	return SpineModel(
		nose=body.nose,
		neck=midpoint(body.nose, shoulder_center),
		# Thirds along shoulder-centre -> hip-centre, so the sequence stays head-to-pelvis.
		upper_spine=_blend(shoulder_center, hip_center, 2.0 / 3.0),
		mid_spine=midpoint(shoulder_center, hip_center),
		lower_spine=_blend(shoulder_center, hip_center, 1.0 / 3.0),
		hip_center=hip_center,
	)
