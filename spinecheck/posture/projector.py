from __future__ import annotations

from typing import List, Sequence

from spinecheck.pose.types import NormalizedJoint, PixelJoint


def project_landmarks(joints: Sequence[NormalizedJoint], width: float, height: float) -> List[PixelJoint]:
	"""
	Scale normalized landmarks to surface pixels, preserving length and order.
	"""
	w = float(width)
	h = float(height)
	return [PixelJoint(x=j.x * w, y=j.y * h) for j in joints]
