from spinecheck.posture.orchestrator import analyze_frame
from spinecheck.posture.surface import Path2D, PillowSurface, dash_polyline
from tests.helpers import body_points, make_pixels, to_landmarks

BG = (26, 26, 26)


def test_path_flattening_keeps_endpoints():
	path = Path2D().move_to(0, 0).quadratic_curve_to(10, 0, 10, 10).line_to(20, 20)
	(poly,) = path.flatten(curve_steps=16)
	assert poly[0] == (0.0, 0.0)
	assert poly[16] == (10.0, 10.0)
	assert poly[-1] == (20.0, 20.0)
	assert len(poly) == 18


def test_move_starts_a_new_polyline():
	path = Path2D().move_to(0, 0).line_to(5, 0).move_to(10, 10).line_to(10, 20)
	assert path.flatten() == [[(0.0, 0.0), (5.0, 0.0)], [(10.0, 10.0), (10.0, 20.0)]]


def test_dash_pattern_splits_runs():
	runs = dash_polyline([(0.0, 0.0), (0.0, 40.0)], (10, 10))
	assert runs == [[(0.0, 0.0), (0.0, 10.0)], [(0.0, 20.0), (0.0, 30.0)]]


def test_dash_phase_carries_across_vertices():
	runs = dash_polyline([(0.0, 0.0), (5.0, 0.0), (5.0, 10.0)], (10, 10))
	assert runs[0] == [(0.0, 0.0), (5.0, 0.0), (5.0, 5.0)]


def test_undetected_frame_renders_background_and_guide():
	surface = PillowSurface(800, 600)
	analyze_frame(None, 800, 600, surface=surface)
	img = surface.image
	assert (img.width, img.height) == (800, 600)
	assert img.getpixel((10, 300)) == BG
	assert any(img.getpixel((x, 205))[0] > BG[0] for x in (399, 400, 401))
	assert all(img.getpixel((x, 215)) == BG for x in (398, 399, 400, 401, 402))


def test_spine_marker_color_matches_alignment():
	surface = PillowSurface(800, 600)
	analyze_frame(to_landmarks(make_pixels(body_points()), 800, 600), 800, 600, surface=surface)
	assert surface.image.getpixel((400, 150)) == (0, 255, 0)

	surface = PillowSurface(800, 600)
	analyze_frame(to_landmarks(make_pixels(body_points(dx=150)), 800, 600), 800, 600, surface=surface)
	assert surface.image.getpixel((550, 150)) == (255, 51, 51)


def test_encoders_produce_images():
	surface = PillowSurface(64, 48)
	surface.fill_rect(0, 0, 64, 48, (26, 26, 26, 255))
	assert surface.to_png().startswith(b"\x89PNG")
	assert surface.to_jpeg(quality=70).startswith(b"\xff\xd8")


def test_far_off_canvas_points_still_draw():
	surface = PillowSurface(100, 100)
	surface.stroke_path(Path2D().move_to(50, 50).line_to(1e11, 50), (255, 255, 255, 255), 3)
	surface.fill_circle(-1e11, 5e10, 6, (255, 0, 0, 255))
	assert surface.image.getpixel((80, 50)) == (255, 255, 255)


def test_subject_far_off_canvas_renders_as_severe():
	pixels = make_pixels(body_points(nose=(4e9, 150)))
	surface = PillowSurface(800, 600)
	analysis = analyze_frame(to_landmarks(pixels, 800, 600), 800, 600, surface=surface)
	assert analysis.detected is True
	assert analysis.alignment.severity.value == "severe"
	assert surface.to_png().startswith(b"\x89PNG")
