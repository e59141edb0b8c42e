import json

from spinecheck.config import AppConfig, load_config


def test_missing_file_gives_defaults(tmp_path):
	cfg = load_config(tmp_path / "nope.json")
	assert cfg == AppConfig()
	assert cfg.video.source == "camera"
	assert cfg.analysis.min_visibility == 0.0


def test_malformed_file_gives_defaults(tmp_path):
	p = tmp_path / "config.json"
	p.write_text("{not json", encoding="utf-8")
	assert load_config(p) == AppConfig()
	p.write_text("[1, 2]", encoding="utf-8")
	assert load_config(p) == AppConfig()


def test_values_are_parsed_and_clamped(tmp_path):
	p = tmp_path / "config.json"
	p.write_text(
		json.dumps(
			{
				"camera": {"index": "1", "width": -5, "height": 720},
				"pose": {"model_complexity": 7, "smooth_landmarks": "no", "min_detection_confidence": 0.7},
				"analysis": {"min_visibility": 3},
				"video": {"source": "REPLAY", "replay_path": "rec.jsonl", "max_fps": 0, "jpeg_quality": 500, "autostart": "yes"},
				"server": {"port": "9001"},
				"logging": {"level": "debug"},
			}
		),
		encoding="utf-8",
	)
	cfg = load_config(p)
	assert cfg.camera.index == 1
	assert cfg.camera.width == 640
	assert cfg.camera.height == 720
	assert cfg.pose.model_complexity == 2
	assert cfg.pose.smooth_landmarks is False
	assert cfg.pose.min_detection_confidence == 0.7
	assert cfg.analysis.min_visibility == 1.0
	assert cfg.video.source == "replay"
	assert cfg.video.replay_path == "rec.jsonl"
	assert cfg.video.max_fps == 15.0
	assert cfg.video.jpeg_quality == 95
	assert cfg.video.autostart is True
	assert cfg.server.port == 9001
	assert cfg.logging.level == "DEBUG"


def test_unknown_video_source_falls_back_to_camera(tmp_path):
	p = tmp_path / "config.json"
	p.write_text(json.dumps({"video": {"source": "webrtc"}}), encoding="utf-8")
	assert load_config(p).video.source == "camera"
