"""Utility components for the segment display renderer."""

from segment_display.utils.logging import setup_logging, get_logger
from segment_display.utils.color import parse_color, normalize_color
from segment_display.utils.profiler import FrameProfiler

__all__ = [
    "setup_logging",
    "get_logger",
    "parse_color",
    "normalize_color",
    "FrameProfiler",
]
