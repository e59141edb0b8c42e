import inspect
import json

import pytest
from fastapi.testclient import TestClient

import spinecheck
from routers import posture
from server import create_app
from spinecheck.config import AppConfig, VideoConfig
from spinecheck.pose.sources import landmarks_to_json
from spinecheck.posture.feedback import NOT_DETECTED_MESSAGE
from tests.helpers import body_points, make_pixels, to_landmarks


def _payload(dx=0.0, count=33):
	landmarks = to_landmarks(make_pixels(body_points(dx=dx)), 800, 600)[:count]
	return {
		"landmarks": [{"x": j.x, "y": j.y, "z": j.z, "visibility": j.visibility} for j in landmarks],
		"width": 800,
		"height": 600,
	}


@pytest.fixture
def client():
	app = create_app(AppConfig(video=VideoConfig(source="none")))
	with TestClient(app) as c:
		yield c


def test_health(client):
	assert client.get("/health").json()["status"] == "ok"


def test_feedback_starts_as_checking(client):
	body = client.get("/posture/feedback").json()
	assert body == {"message": NOT_DETECTED_MESSAGE, "status": "checking", "status_text": "⏳ Checking..."}
	assert client.get("/posture/analysis").status_code == 404


def test_analyze_centered_subject(client):
	res = client.post("/posture/analyze", json=_payload())
	assert res.status_code == 200
	body = res.json()
	assert body["detected"] is True
	assert body["alignment"]["is_aligned"] is True
	assert body["alignment"]["severity"] == "excellent"
	assert body["feedback"]["status"] == "excellent"
	assert list(body["spine"]) == ["nose", "neck", "upper_spine", "mid_spine", "lower_spine", "hip_center"]
	# Stateless: the live feedback is untouched.
	assert client.get("/posture/feedback").json()["status"] == "checking"


def test_analyze_shifted_and_partial_subjects(client):
	body = client.post("/posture/analyze", json=_payload(dx=150)).json()
	assert body["alignment"]["severity"] == "severe"
	assert body["alignment"]["avg_deviation"] == 150

	body = client.post("/posture/analyze", json=_payload(count=20)).json()
	assert body["detected"] is False
	assert body["alignment"]["detected"] is False
	assert body["feedback"]["message"] == NOT_DETECTED_MESSAGE

	body = client.post("/posture/analyze", json={"landmarks": None}).json()
	assert body["feedback"]["status"] == "checking"


def test_analyze_rejects_bad_payloads(client):
	assert client.post("/posture/analyze", json={"landmarks": [{"x": 0.1}]}).status_code == 422
	assert client.post("/posture/analyze", json={"width": 0}).status_code == 422


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_analyze_rejects_non_finite_coordinates(client, token):
	body = _payload()
	raw = json.dumps(body).replace(json.dumps(body["landmarks"][0]["x"]), token, 1)
	res = client.post("/posture/analyze", content=raw, headers={"Content-Type": "application/json"})
	assert res.status_code == 422


def test_analyze_treats_overflowing_coordinates_as_undetected(client):
	body = _payload()
	body["landmarks"][0]["x"] = 1e308
	res = client.post("/posture/analyze", json=body)
	assert res.status_code == 200
	assert res.json()["detected"] is False
	assert res.json()["feedback"]["message"] == NOT_DETECTED_MESSAGE

	res = client.post("/posture/render.png", json=body)
	assert res.status_code == 200
	assert res.headers["x-posture-status"] == "checking"


def test_render_png(client):
	res = client.post("/posture/render.png", json=_payload(dx=150))
	assert res.status_code == 200
	assert res.headers["content-type"] == "image/png"
	assert res.headers["x-posture-severity"] == "severe"
	assert res.content.startswith(b"\x89PNG")


def test_video_without_source(client):
	assert client.post("/video/connect").status_code == 503
	assert client.get("/video/status").json()["running"] is False
	assert client.get("/video/snapshot.jpg").status_code == 404


def test_websocket_sends_current_and_new_feedback(client):
	state = client.app.state.state
	with client.websocket_connect("/ws") as ws:
		first = ws.receive_json()
		assert first["type"] == "feedback"
		assert first["status"] == "checking"

		landmarks = to_landmarks(make_pixels(body_points(dx=150)), 800, 600)
		state.orchestrator.process_frame(landmarks, 800, 600)
		pushed = ws.receive_json()
		assert pushed["type"] == "feedback"
		assert pushed["status"] == "severe"


def test_replay_stream_updates_live_feedback(tmp_path):
	rows = [
		{"landmarks": landmarks_to_json(to_landmarks(make_pixels(body_points()), 800, 600)), "width": 800, "height": 600},
		{"landmarks": landmarks_to_json(to_landmarks(make_pixels(body_points(dx=150)), 800, 600)), "width": 800, "height": 600},
	]
	path = tmp_path / "rec.jsonl"
	path.write_text("\n".join(json.dumps(r) for r in rows) + "\n", encoding="utf-8")

	cfg = AppConfig(video=VideoConfig(source="replay", replay_path=str(path), replay_loop=False, max_fps=200.0))
	with TestClient(create_app(cfg)) as c:
		assert c.post("/video/connect").status_code == 200
		state = c.app.state.state
		state.video.wait(timeout=5.0)

		status = c.get("/video/status").json()
		assert status["running"] is False
		assert status["frames"] == 2
		assert status["error"] is None
		assert c.get("/posture/feedback").json()["status"] == "severe"
		assert c.get("/posture/analysis").json()["alignment"]["avg_deviation"] == 150

		snap = c.get("/video/snapshot.jpg")
		assert snap.status_code == 200
		assert snap.content.startswith(b"\xff\xd8")


def test_health_reports_package_version(client):
	assert client.get("/health").json()["version"] == spinecheck.__version__


@pytest.mark.parametrize("endpoint", [posture.posture_analyze, posture.posture_render])
def test_cpu_bound_routes_run_in_the_threadpool(endpoint):
	assert not inspect.iscoroutinefunction(endpoint)


def test_routes_report_unready_pipeline(client):
	state = client.app.state.state
	orchestrator, state.orchestrator = state.orchestrator, None
	try:
		assert client.get("/posture/feedback").status_code == 503
	finally:
		state.orchestrator = orchestrator
