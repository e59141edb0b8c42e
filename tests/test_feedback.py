import pytest

from spinecheck.pose.types import PixelJoint
from spinecheck.posture.alignment import AlignmentResult, Severity, score_alignment
from spinecheck.posture.feedback import (
	FACING_CAMERA_MESSAGE,
	NOT_DETECTED_FEEDBACK,
	NOT_DETECTED_MESSAGE,
	SHOULDER_TILT_MESSAGE,
	TURNED_LEFT_MESSAGE,
	TURNED_RIGHT_MESSAGE,
	FeedbackStatus,
	facing_direction_message,
	synthesize_feedback,
)
from spinecheck.posture.spine import build_spine_model
from tests.helpers import body_points, make_pixels

GOOD = AlignmentResult(is_aligned=True, avg_deviation=12, max_deviation=30, severity=Severity.GOOD)


def test_centered_body_message(scenario_a_pixels):
	alignment = score_alignment(build_spine_model(scenario_a_pixels), 800)
	feedback = synthesize_feedback(scenario_a_pixels, alignment)
	assert feedback.status == FeedbackStatus.EXCELLENT
	assert feedback.message == (
		"✅ Excellent spine posture! Body is facing the camera. Average deviation: 0px, Maximum: 0px"
	)


def test_shoulder_tilt_warning_comes_first():
	pixels = make_pixels(body_points(left_shoulder=(300, 100), right_shoulder=(500, 120)))
	feedback = synthesize_feedback(pixels, GOOD)
	assert feedback.message.startswith(SHOULDER_TILT_MESSAGE + " ")
	assert feedback.message == (
		"⚠️ Keep your shoulders straight. ✅ Good spine posture. Body is facing the camera. "
		"Average deviation: 12px, Maximum: 30px"
	)


def test_small_shoulder_tilt_is_tolerated():
	pixels = make_pixels(body_points(left_shoulder=(300, 100), right_shoulder=(500, 115)))
	assert SHOULDER_TILT_MESSAGE not in synthesize_feedback(pixels, GOOD).message


@pytest.mark.parametrize(
	"severity,status,text",
	[
		(Severity.EXCELLENT, FeedbackStatus.EXCELLENT, "✅ Excellent spine posture!"),
		(Severity.GOOD, FeedbackStatus.GOOD, "✅ Good spine posture."),
		(Severity.MODERATE, FeedbackStatus.MODERATE, "⚠️ Spine alignment needs improvement."),
		(Severity.SEVERE, FeedbackStatus.SEVERE, "🚨 Major posture correction needed!"),
	],
)
def test_severity_sets_message_and_status(scenario_a_pixels, severity, status, text):
	alignment = AlignmentResult(is_aligned=False, avg_deviation=50, max_deviation=70, severity=severity)
	feedback = synthesize_feedback(scenario_a_pixels, alignment)
	assert feedback.status == status
	assert feedback.message.startswith(text + " ")
	assert feedback.message.endswith("Average deviation: 50px, Maximum: 70px")


@pytest.mark.parametrize(
	"nose_x,expected",
	[
		(400, FACING_CAMERA_MESSAGE),
		(450, TURNED_RIGHT_MESSAGE),
		(350, TURNED_LEFT_MESSAGE),
	],
)
def test_facing_direction(nose_x, expected):
	pixels = make_pixels(body_points(nose=(nose_x, 150)))
	assert expected in synthesize_feedback(pixels, GOOD).message


def test_ratio_thresholds_are_exclusive():
	left, right = PixelJoint(0, 0), PixelJoint(220, 0)
	# 120 / 100 == 1.2
	assert facing_direction_message(PixelJoint(120, 0), left, right) == FACING_CAMERA_MESSAGE
	# 80 / 100 == 0.8
	assert facing_direction_message(PixelJoint(80, 0), PixelJoint(0, 0), PixelJoint(180, 0)) == FACING_CAMERA_MESSAGE


def test_zero_right_distance_reads_as_turned_right():
	assert facing_direction_message(PixelJoint(500, 0), PixelJoint(300, 0), PixelJoint(500, 0)) == TURNED_RIGHT_MESSAGE


def test_zero_distances_on_both_sides_read_as_facing():
	p = PixelJoint(400, 0)
	assert facing_direction_message(p, p, p) == FACING_CAMERA_MESSAGE


@pytest.mark.parametrize("count", [0, 20, 32])
def test_short_landmark_sets_report_not_detected(count):
	feedback = synthesize_feedback(make_pixels(count=count), GOOD)
	assert feedback is NOT_DETECTED_FEEDBACK
	assert feedback.status == FeedbackStatus.CHECKING
	assert feedback.message == NOT_DETECTED_MESSAGE


def test_feedback_dict_carries_badge_text():
	assert NOT_DETECTED_FEEDBACK.to_dict() == {
		"message": NOT_DETECTED_MESSAGE,
		"status": "checking",
		"status_text": "⏳ Checking...",
	}
	assert FeedbackStatus.MODERATE.label == "⚠️ Needs Improvement"
