"""
Pose input utilities.

This package defines the model-agnostic landmark types, the joint topology the
analysis relies on, and the provider/source adapters (e.g., MediaPipe Pose,
recorded JSONL frames) that feed landmarks into the posture pipeline.
"""
