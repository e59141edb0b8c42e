"""
Overlay renderer. Layers are drawn in a fixed order, later ones on top:
background, centre guide, skeleton, spine curve.
"""

from __future__ import annotations

from typing import Optional, Sequence

from spinecheck.pose.topology import SKELETON_BONES, has_full_topology
from spinecheck.pose.types import PixelJoint
from spinecheck.posture.spine import SpineModel
from spinecheck.posture.surface import Color, DrawingSurface, Path2D


BACKGROUND_COLOR: Color = (26, 26, 26, 255)
GUIDE_COLOR: Color = (255, 255, 255, 77)
GUIDE_LABEL_COLOR: Color = (255, 255, 255, 128)
SKELETON_COLOR: Color = (0, 255, 0, 255)
ALIGNED_COLOR: Color = (0, 255, 0, 255)
MISALIGNED_COLOR: Color = (255, 51, 51, 255)

GUIDE_DASH = (10.0, 10.0)
GUIDE_LINE_WIDTH = 2.0
GUIDE_LABEL = "Center Reference"
GUIDE_LABEL_Y = 30.0
GUIDE_LABEL_SIZE = 14

SKELETON_LINE_WIDTH = 3.0
JOINT_RADIUS = 4.0

SPINE_LINE_WIDTH = 5.0
SPINE_HEAD_RADIUS = 8.0
SPINE_POINT_RADIUS = 6.0


def draw_background(surface: DrawingSurface) -> None:
	surface.fill_rect(0, 0, surface.width, surface.height, BACKGROUND_COLOR)


def draw_alignment_guide(surface: DrawingSurface) -> None:
	cx = surface.width / 2.0
	path = Path2D().move_to(cx, 0).line_to(cx, surface.height)
	surface.stroke_path(path, GUIDE_COLOR, GUIDE_LINE_WIDTH, dash=GUIDE_DASH)
	surface.fill_text(GUIDE_LABEL, cx, GUIDE_LABEL_Y, GUIDE_LABEL_COLOR, size=GUIDE_LABEL_SIZE, align="center")


def draw_stick_figure(surface: DrawingSurface, pixels: Sequence[PixelJoint]) -> None:
	if not has_full_topology(pixels):
		return
	for a, b in SKELETON_BONES:
		start, end = pixels[a], pixels[b]
		surface.stroke_path(Path2D().move_to(start.x, start.y).line_to(end.x, end.y), SKELETON_COLOR, SKELETON_LINE_WIDTH)
	for joint in pixels:
		surface.fill_circle(joint.x, joint.y, JOINT_RADIUS, SKELETON_COLOR)


def spine_path(spine: SpineModel) -> Path2D:
	"""
	Successive-midpoint smoothing: each interior point is the control point of
	a quadratic ending halfway to the next point; the last point is a straight
	segment.
	"""
	pts = spine.points()
	path = Path2D().move_to(pts[0].x, pts[0].y)
	for current, nxt in zip(pts[1:-1], pts[2:]):
		path.quadratic_curve_to(current.x, current.y, (current.x + nxt.x) / 2.0, (current.y + nxt.y) / 2.0)
	path.line_to(pts[-1].x, pts[-1].y)
	return path


def draw_spine_line(surface: DrawingSurface, spine: Optional[SpineModel], is_aligned: bool) -> None:
	if spine is None:
		return
	color = ALIGNED_COLOR if is_aligned else MISALIGNED_COLOR
	surface.stroke_path(spine_path(spine), color, SPINE_LINE_WIDTH)
	for i, point in enumerate(spine.points()):
		surface.fill_circle(point.x, point.y, SPINE_HEAD_RADIUS if i == 0 else SPINE_POINT_RADIUS, color)


def render_frame(
	surface: DrawingSurface,
	pixels: Optional[Sequence[PixelJoint]],
	spine: Optional[SpineModel],
	is_aligned: bool,
) -> None:
	draw_background(surface)
	draw_alignment_guide(surface)
	if pixels:
		draw_stick_figure(surface, pixels)
	draw_spine_line(surface, spine, is_aligned)
