"""
Error types raised by the segment display renderer.

- LoadError: a shape resource is missing or malformed (fatal at load)
- ConfigurationError: grid or option values give a degenerate geometry (fatal)
- StaleStateError: composite called with mismatched state (recoverable, skip frame)
"""


class SegmentDisplayError(Exception):
    """Base class for all segment display errors."""


class LoadError(SegmentDisplayError):
    """A required segment shape resource is missing or malformed."""


class ConfigurationError(SegmentDisplayError, ValueError):
    """Configuration produces a degenerate or non-finite geometry."""


class StaleStateError(SegmentDisplayError):
    """
    Composite invoked with state that does not belong together.

    Raised for a frame length mismatch, a missing or outdated atlas, or a
    destination of the wrong size. The render loop should skip the frame
    and retry on the next one.
    """
