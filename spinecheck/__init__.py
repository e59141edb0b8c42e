"""
SpineCheck application package.

Real-time spinal alignment analysis on top of a per-frame pose landmark stream.
"""

__version__ = "0.1.0"
