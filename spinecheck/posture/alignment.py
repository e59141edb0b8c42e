"""
Lateral alignment scoring against the vertical centre line of the surface.

Thresholds are absolute pixel constants; they are not normalized to subject
distance or shoulder width.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from spinecheck.posture.spine import SpineModel


# is_aligned requires both averages under these limits (px).
ALIGNED_AVG_LIMIT_PX = 25.0
ALIGNED_MAX_LIMIT_PX = 40.0

# Severity bands keyed on the maximum deviation (px, exclusive upper bounds).
EXCELLENT_MAX_PX = 25.0
GOOD_MAX_PX = 40.0
MODERATE_MAX_PX = 60.0


class Severity(str, Enum):
	EXCELLENT = "excellent"
	GOOD = "good"
	MODERATE = "moderate"
	SEVERE = "severe"

	@property
	def rank(self) -> int:
		return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = (Severity.EXCELLENT, Severity.GOOD, Severity.MODERATE, Severity.SEVERE)


def classify_severity(max_deviation: float) -> Severity:
	if max_deviation < EXCELLENT_MAX_PX:
		return Severity.EXCELLENT
	if max_deviation < GOOD_MAX_PX:
		return Severity.GOOD
	if max_deviation < MODERATE_MAX_PX:
		return Severity.MODERATE
	return Severity.SEVERE


def round_half_up(value: float) -> int:
	return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class AlignmentResult:
	"""
	avg/max deviation are whole pixels. `detected` is False only for the
	UNDETECTED_ALIGNMENT sentinel, whose zero deviations carry no meaning.
	"""

	is_aligned: bool
	avg_deviation: int
	max_deviation: int
	severity: Severity
	detected: bool = True

	def to_dict(self) -> Dict[str, Any]:
		return {
			"is_aligned": self.is_aligned,
			"avg_deviation": self.avg_deviation,
			"max_deviation": self.max_deviation,
			"severity": self.severity.value,
			"detected": self.detected,
		}


UNDETECTED_ALIGNMENT = AlignmentResult(
	is_aligned=False,
	avg_deviation=0,
	max_deviation=0,
	severity=Severity.SEVERE,
	detected=False,
)


def score_alignment(spine: Optional[SpineModel], width: float) -> AlignmentResult:
	if spine is None:
		return UNDETECTED_ALIGNMENT

	center = float(width) / 2.0
	deviations = [abs(p.x - center) for p in spine.points()]
	avg_dev = sum(deviations) / len(deviations)
	max_dev = max(deviations)

	return AlignmentResult(
		is_aligned=avg_dev < ALIGNED_AVG_LIMIT_PX and max_dev < ALIGNED_MAX_LIMIT_PX,
		avg_deviation=round_half_up(avg_dev),
		max_deviation=round_half_up(max_dev),
		severity=classify_severity(max_dev),
	)
