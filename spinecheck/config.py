from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraConfig:
	index: int = 0
	# Requested capture size; the camera may deliver something else.
	width: int = 640
	height: int = 480


@dataclass(frozen=True)
class PoseConfig:
	model_complexity: int = 1
	smooth_landmarks: bool = True
	min_detection_confidence: float = 0.5
	min_tracking_confidence: float = 0.5


@dataclass(frozen=True)
class AnalysisConfig:
	# 0.0 ignores landmark visibility. Above 0, a frame whose nose/shoulder/hip
	# visibility falls below this is treated as undetected.
	min_visibility: float = 0.0


@dataclass(frozen=True)
class VideoConfig:
	source: str = "camera"  # camera / replay / none
	replay_path: str = str(Path("data") / "landmarks.jsonl")
	replay_loop: bool = True
	replay_width: int = 640
	replay_height: int = 480
	max_fps: float = 15.0
	jpeg_quality: int = 80
	autostart: bool = False


@dataclass(frozen=True)
class ServerConfig:
	host: str = "127.0.0.1"
	port: int = 8000


@dataclass(frozen=True)
class LoggingConfig:
	level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
	camera: CameraConfig = field(default_factory=CameraConfig)
	pose: PoseConfig = field(default_factory=PoseConfig)
	analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
	video: VideoConfig = field(default_factory=VideoConfig)
	server: ServerConfig = field(default_factory=ServerConfig)
	logging: LoggingConfig = field(default_factory=LoggingConfig)


_CONFIG_PATH: Optional[Path] = None
_CONFIG_CACHE: Optional[AppConfig] = None

_VIDEO_SOURCES = ("camera", "replay", "none")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _repo_root() -> Path:
	# spinecheck/config.py -> repo root is one level up.
	return Path(__file__).resolve().parents[1]


def get_default_config_path() -> Path:
	return _repo_root() / "config.json"


def set_config_path(path: str | Path) -> None:
	"""
	Override the config path (must be called before first get_config()).
	Intended for CLI/tooling use; the server normally uses the default path.
	"""
	global _CONFIG_PATH
	global _CONFIG_CACHE
	_CONFIG_PATH = Path(path).expanduser().resolve()
	_CONFIG_CACHE = None


def _deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
	cur: Any = d
	for k in keys:
		if not isinstance(cur, dict):
			return default
		cur = cur.get(k)
	return cur if cur is not None else default


def _as_int(v: Any, default: int) -> int:
	try:
		return int(v)
	except (TypeError, ValueError):
		return int(default)


def _as_bool(v: Any, default: bool) -> bool:
	if isinstance(v, bool):
		return v
	if isinstance(v, (int, float)):
		return bool(v)
	if isinstance(v, str):
		return v.strip().lower() in ("1", "true", "yes", "on")
	return bool(default)


def _as_str(v: Any, default: str = "") -> str:
	return str(v) if v is not None else str(default)


def _as_float(v: Any, default: float) -> float:
	try:
		return float(v)
	except (TypeError, ValueError):
		return float(default)


def _positive_int(v: Any, default: int) -> int:
	n = _as_int(v, default)
	return n if n > 0 else int(default)


def load_config(path: Optional[str | Path] = None) -> AppConfig:
	p = Path(path).expanduser().resolve() if path else (_CONFIG_PATH or get_default_config_path())
	if not p.exists():
		# Defaults-only config; app can still run.
		return AppConfig()
	try:
		raw = json.loads(p.read_text(encoding="utf-8"))
	except (OSError, ValueError) as e:
		# If config is malformed, fail safe to defaults (but keep app running).
		logger.warning("Ignoring unreadable config %s: %s", p, e)
		return AppConfig()

	if not isinstance(raw, dict):
		logger.warning("Ignoring config %s: top level must be an object", p)
		return AppConfig()

	cam_index = _as_int(_deep_get(raw, ["camera", "index"], 0), 0)
	cam_w = _positive_int(_deep_get(raw, ["camera", "width"], 640), 640)
	cam_h = _positive_int(_deep_get(raw, ["camera", "height"], 480), 480)

	model_complexity = _as_int(_deep_get(raw, ["pose", "model_complexity"], 1), 1)
	model_complexity = min(2, max(0, model_complexity))
	smooth = _as_bool(_deep_get(raw, ["pose", "smooth_landmarks"], True), True)
	det_conf = _as_float(_deep_get(raw, ["pose", "min_detection_confidence"], 0.5), 0.5)
	trk_conf = _as_float(_deep_get(raw, ["pose", "min_tracking_confidence"], 0.5), 0.5)

	min_vis = _as_float(_deep_get(raw, ["analysis", "min_visibility"], 0.0), 0.0)
	min_vis = min(1.0, max(0.0, min_vis))

	source = _as_str(_deep_get(raw, ["video", "source"], "camera"), "camera").strip().lower()
	if source not in _VIDEO_SOURCES:
		logger.warning("Unknown video.source %r; using 'camera'", source)
		source = "camera"
	replay_path = _as_str(_deep_get(raw, ["video", "replay_path"], VideoConfig.replay_path), VideoConfig.replay_path)
	replay_loop = _as_bool(_deep_get(raw, ["video", "replay_loop"], True), True)
	replay_w = _positive_int(_deep_get(raw, ["video", "replay_width"], 640), 640)
	replay_h = _positive_int(_deep_get(raw, ["video", "replay_height"], 480), 480)
	max_fps = _as_float(_deep_get(raw, ["video", "max_fps"], 15.0), 15.0)
	jpeg_quality = _as_int(_deep_get(raw, ["video", "jpeg_quality"], 80), 80)
	autostart = _as_bool(_deep_get(raw, ["video", "autostart"], False), False)

	host = _as_str(_deep_get(raw, ["server", "host"], "127.0.0.1"), "127.0.0.1")
	port = _positive_int(_deep_get(raw, ["server", "port"], 8000), 8000)

	level = _as_str(_deep_get(raw, ["logging", "level"], "INFO"), "INFO").strip().upper()
	if level not in _LOG_LEVELS:
		level = "INFO"

	return AppConfig(
		camera=CameraConfig(index=cam_index, width=cam_w, height=cam_h),
		pose=PoseConfig(
			model_complexity=model_complexity,
			smooth_landmarks=smooth,
			min_detection_confidence=min(1.0, max(0.0, det_conf)),
			min_tracking_confidence=min(1.0, max(0.0, trk_conf)),
		),
		analysis=AnalysisConfig(min_visibility=min_vis),
		video=VideoConfig(
			source=source,
			replay_path=replay_path,
			replay_loop=replay_loop,
			replay_width=replay_w,
			replay_height=replay_h,
			max_fps=max_fps if max_fps > 0.0 else 15.0,
			jpeg_quality=min(95, max(1, jpeg_quality)),
			autostart=autostart,
		),
		server=ServerConfig(host=host, port=port),
		logging=LoggingConfig(level=level),
	)


def get_config() -> AppConfig:
	global _CONFIG_CACHE
	if _CONFIG_CACHE is None:
		_CONFIG_CACHE = load_config()
	return _CONFIG_CACHE
