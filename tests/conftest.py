from typing import List

import pytest

from spinecheck.pose.types import NormalizedJoint, PixelJoint
from tests.helpers import RecordingSurface, body_points, make_pixels, to_landmarks


@pytest.fixture
def surface() -> RecordingSurface:
	return RecordingSurface(800, 600)


@pytest.fixture
def scenario_a_pixels() -> List[PixelJoint]:
	return make_pixels(body_points())


@pytest.fixture
def scenario_a_landmarks(scenario_a_pixels) -> List[NormalizedJoint]:
	return to_landmarks(scenario_a_pixels, 800, 600)
