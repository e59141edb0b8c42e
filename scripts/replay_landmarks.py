#!/usr/bin/env python3
"""
Run a recorded landmark stream (JSON lines) through the posture pipeline.

Prints one line per frame with the feedback status and message; with
--out-dir, also writes the rendered overlay of every frame as PNG.
"""

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from spinecheck.config import get_config, set_config_path  # noqa: E402
from spinecheck.pose.sources import JsonlFrameSource  # noqa: E402
from spinecheck.posture.orchestrator import FrameAnalysis, FrameOrchestrator  # noqa: E402
from spinecheck.posture.surface import PillowSurface  # noqa: E402

logger = logging.getLogger("spinecheck.replay")


def main() -> int:
	parser = argparse.ArgumentParser(description="Replay recorded pose landmarks through the posture analysis.")
	parser.add_argument("path", help="JSON-lines landmark recording.")
	parser.add_argument("--width", type=int, default=640, help="Surface width for frames without one.")
	parser.add_argument("--height", type=int, default=480, help="Surface height for frames without one.")
	parser.add_argument("--max-frames", type=int, default=None, help="Stop after this many frames.")
	parser.add_argument("--out-dir", help="Write overlay PNGs (frame_00001.png, ...) here.")
	parser.add_argument("--config", help="Path to config.json (for analysis.min_visibility).")
	parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
	args = parser.parse_args()

	logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
	if args.config:
		set_config_path(args.config)
	cfg = get_config()

	out_dir = Path(args.out_dir) if args.out_dir else None
	if out_dir is not None:
		out_dir.mkdir(parents=True, exist_ok=True)

	orchestrator = FrameOrchestrator(min_visibility=cfg.analysis.min_visibility)
	surfaces = []

	def _report(analysis: FrameAnalysis) -> None:
		n = orchestrator.frames_processed
		print(f"[{n:05d}] {analysis.feedback.status.value:9s} {analysis.feedback.message}")
		if out_dir is not None and surfaces:
			surfaces[-1].image.save(out_dir / f"frame_{n:05d}.png")

	def _surface(width: int, height: int) -> PillowSurface:
		surface = PillowSurface(width, height)
		surfaces[:] = [surface]
		return surface

	orchestrator.subscribe(_report)
	try:
		with JsonlFrameSource(args.path, width=args.width, height=args.height) as source:
			count = orchestrator.run(source, surface_factory=_surface, max_frames=args.max_frames)
	except (RuntimeError, ValueError) as e:
		logger.error("%s", e)
		return 1

	logger.info("Processed %d frame(s); final status: %s", count, orchestrator.feedback.status.value)
	return 0


if __name__ == "__main__":
	raise SystemExit(main())
