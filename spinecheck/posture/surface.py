"""
2D drawing surface used by the frame renderer.

`DrawingSurface` is the small imperative subset of a canvas API the overlay
needs; `PillowSurface` implements it on a Pillow image so frames can be
streamed as JPEG or saved as PNG.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from functools import lru_cache
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

Color = Tuple[int, int, int, int]
Point = Tuple[float, float]


class Path2D:
	"""
	Minimal path builder: move/line/quadratic segments, flattened on demand.
	"""

	def __init__(self) -> None:
		self.ops: List[tuple] = []

	def move_to(self, x: float, y: float) -> "Path2D":
		self.ops.append(("move", (float(x), float(y))))
		return self

	def line_to(self, x: float, y: float) -> "Path2D":
		self.ops.append(("line", (float(x), float(y))))
		return self

	def quadratic_curve_to(self, cx: float, cy: float, x: float, y: float) -> "Path2D":
		self.ops.append(("quad", (float(cx), float(cy)), (float(x), float(y))))
		return self

	def flatten(self, curve_steps: int = 16) -> List[List[Point]]:
		polylines: List[List[Point]] = []
		current: List[Point] = []
		for op in self.ops:
			kind = op[0]
			if kind == "move":
				if len(current) > 1:
					polylines.append(current)
				current = [op[1]]
			elif not current:
				# Canvas semantics: a segment without a current point starts one.
				current = [op[-1]]
			elif kind == "line":
				current.append(op[1])
			else:
				(x0, y0) = current[-1]
				(cx, cy), (x1, y1) = op[1], op[2]
				for i in range(1, curve_steps + 1):
					t = i / curve_steps
					mt = 1.0 - t
					current.append((
						mt * mt * x0 + 2 * mt * t * cx + t * t * x1,
						mt * mt * y0 + 2 * mt * t * cy + t * t * y1,
					))
		if len(current) > 1:
			polylines.append(current)
		return polylines


def dash_polyline(points: Sequence[Point], pattern: Sequence[float]) -> List[List[Point]]:
	"""
	Split a polyline into the "on" runs of a dash pattern; the phase carries
	across vertices the way a canvas dashed stroke does.
	"""
	pattern = [float(p) for p in pattern if float(p) > 0]
	if not pattern or len(points) < 2:
		return [list(points)] if len(points) > 1 else []
	if len(pattern) % 2:
		pattern = pattern * 2

	runs: List[List[Point]] = []
	idx = 0
	remaining = pattern[0]
	on = True
	run: List[Point] = [points[0]]
	for (x0, y0), (x1, y1) in zip(points, points[1:]):
		seg_len = math.hypot(x1 - x0, y1 - y0)
		pos = 0.0
		while seg_len - pos > remaining:
			pos += remaining
			t = pos / seg_len
			p = (x0 + (x1 - x0) * t, y0 + (y1 - y0) * t)
			if on:
				run.append(p)
				runs.append(run)
				run = []
			else:
				run = [p]
			on = not on
			idx = (idx + 1) % len(pattern)
			remaining = pattern[idx]
		remaining -= seg_len - pos
		if on:
			run.append((x1, y1))
	if on and len(run) > 1:
		runs.append(run)
	return runs


class DrawingSurface(ABC):
	@property
	@abstractmethod
	def width(self) -> int: ...

	@property
	@abstractmethod
	def height(self) -> int: ...

	@abstractmethod
	def fill_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None: ...

	@abstractmethod
	def stroke_path(self, path: Path2D, color: Color, line_width: float, dash: Optional[Sequence[float]] = None) -> None: ...

	@abstractmethod
	def fill_circle(self, x: float, y: float, radius: float, color: Color) -> None: ...

	@abstractmethod
	def fill_text(self, text: str, x: float, y: float, color: Color, size: int = 14, align: str = "center") -> None: ...


@lru_cache(maxsize=8)
def _font(size: int) -> ImageFont.ImageFont:
	return ImageFont.load_default(size=size)


# Pillow draws with C ints; far off-canvas points are pinned to this range.
_COORD_LIMIT = float(1 << 20)


def _pin(v: float) -> float:
	return min(_COORD_LIMIT, max(-_COORD_LIMIT, v))


class PillowSurface(DrawingSurface):
	"""
	RGB Pillow image; translucent colors are alpha-blended onto it.
	"""

	def __init__(self, width: int, height: int) -> None:
		self._image = Image.new("RGB", (max(1, int(width)), max(1, int(height))), (0, 0, 0))
		self._draw = ImageDraw.Draw(self._image, "RGBA")

	@property
	def width(self) -> int:
		return self._image.width

	@property
	def height(self) -> int:
		return self._image.height

	@property
	def image(self) -> Image.Image:
		return self._image

	def fill_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None:
		if w <= 0 or h <= 0:
			return
		self._draw.rectangle([x, y, x + w - 1, y + h - 1], fill=tuple(color))

	def stroke_path(self, path: Path2D, color: Color, line_width: float, dash: Optional[Sequence[float]] = None) -> None:
		lw = max(1, int(round(line_width)))
		for poly in path.flatten():
			poly = [(_pin(x), _pin(y)) for x, y in poly]
			runs = dash_polyline(poly, dash) if dash else [poly]
			for run in runs:
				if len(run) > 1:
					self._draw.line(run, fill=tuple(color), width=lw, joint="curve")

	def fill_circle(self, x: float, y: float, radius: float, color: Color) -> None:
		x, y = _pin(x), _pin(y)
		self._draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=tuple(color))

	def fill_text(self, text: str, x: float, y: float, color: Color, size: int = 14, align: str = "center") -> None:
		# (x, y) is the baseline anchor, as with a canvas fillText.
		font = _font(int(size))
		left, top, right, bottom = self._draw.textbbox((0, 0), text, font=font)
		tw = right - left
		if align == "center":
			tx = x - tw / 2.0
		elif align == "right":
			tx = x - tw
		else:
			tx = x
		self._draw.text((tx - left, y - bottom), text, fill=tuple(color), font=font)

	def to_jpeg(self, quality: int = 80) -> bytes:
		buf = BytesIO()
		self._image.save(buf, format="JPEG", quality=int(quality))
		return buf.getvalue()

	def to_png(self) -> bytes:
		buf = BytesIO()
		self._image.save(buf, format="PNG")
		return buf.getvalue()
