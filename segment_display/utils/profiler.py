"""
Frame profiler for the segment display render loop.

Lightweight frame-level timing, frame counting and frame-rate estimation.
The profiler is injected into SegmentDisplay rather than living on the
renderer, so compositing itself carries no timing state.

Usage:
    profiler = FrameProfiler(interval=5.0)

    # In render loop:
    profiler.begin_frame()
    draw_background()
    profiler.mark("background")
    draw_segments()
    profiler.mark("segments")
    profiler.end_frame()
"""

import time
import collections
from typing import Callable, Dict, List, Optional

from segment_display.utils.logging import get_logger

logger = get_logger(__name__)


class _Stats:
    """Rolling statistics tracker using a fixed-size deque."""

    __slots__ = ("_values",)

    def __init__(self, window: int = 300):
        self._values = collections.deque(maxlen=window)

    def add(self, value: float):
        self._values.append(value)

    @property
    def count(self) -> int:
        return len(self._values)

    @property
    def max(self) -> float:
        return max(self._values) if self._values else 0.0

    @property
    def avg(self) -> float:
        return sum(self._values) / len(self._values) if self._values else 0.0

    @property
    def p95(self) -> float:
        if not self._values:
            return 0.0
        sorted_vals = sorted(self._values)
        idx = int(len(sorted_vals) * 0.95)
        return sorted_vals[min(idx, len(sorted_vals) - 1)]


def _fmt_ms(seconds: float) -> str:
    """Format seconds as milliseconds string."""
    return f"{seconds * 1000:.2f}ms"


class FrameProfiler:
    """Collects per-frame section timings and estimates the frame rate.

    Sections are defined dynamically by calls to mark(name) between
    begin_frame() and end_frame().

    Args:
        interval: Seconds between summary log outputs (0 disables reporting).
        window: Number of recent samples to keep for statistics.
        clock: Monotonic time source in seconds.
    """

    def __init__(self, interval: float = 5.0, window: int = 300,
                 clock: Optional[Callable[[], float]] = None):
        self._interval = interval
        self._window = window
        self._clock = clock or time.perf_counter

        self._sections: Dict[str, _Stats] = {}
        self._section_order: List[str] = []
        self._frame_stats = _Stats(window)

        self._frame_start: float = 0.0
        self._last_mark: float = 0.0

        self._started_at: Optional[float] = None
        self._frame_count: int = 0
        self._last_report: float = self._clock()
        self._frames_since_report: int = 0

    @property
    def frame_count(self) -> int:
        """Total frames completed since the first begin_frame()."""
        return self._frame_count

    @property
    def fps(self) -> float:
        """Average frame rate since the first begin_frame()."""
        if self._started_at is None:
            return 0.0
        elapsed = self._clock() - self._started_at
        return self._frame_count / (elapsed if elapsed > 0 else 1.0)

    def begin_frame(self):
        """Call at the start of each render frame."""
        now = self._clock()
        if self._started_at is None:
            self._started_at = now
        self._frame_start = now
        self._last_mark = now

    def mark(self, section: str):
        """Record time elapsed since last mark (or begin_frame) as a named section."""
        now = self._clock()
        elapsed = now - self._last_mark
        self._last_mark = now

        if section not in self._sections:
            self._sections[section] = _Stats(self._window)
            self._section_order.append(section)
        self._sections[section].add(elapsed)

    def end_frame(self):
        """Call at the end of each render frame. Triggers periodic reporting."""
        now = self._clock()
        self._frame_stats.add(now - self._frame_start)
        self._frame_count += 1
        self._frames_since_report += 1

        if self._interval > 0 and now - self._last_report >= self._interval:
            self._report(now - self._last_report)
            self._last_report = now

    def _report(self, period: float):
        """Log a profiling summary."""
        if self._frame_stats.count == 0:
            return

        fps = self._frames_since_report / period if period > 0 else 0
        lines = [
            f"=== PROFILE ({self._frame_stats.count} frames, {fps:.1f} FPS) ===",
            f"  {'Section':<20s} {'avg':>8s} {'p95':>8s} {'max':>8s}",
        ]
        for name in self._section_order:
            s = self._sections[name]
            if s.count > 0:
                lines.append(
                    f"  {name:<20s} {_fmt_ms(s.avg):>8s} {_fmt_ms(s.p95):>8s} {_fmt_ms(s.max):>8s}"
                )
        s = self._frame_stats
        lines.append(
            f"  {'TOTAL':<20s} {_fmt_ms(s.avg):>8s} {_fmt_ms(s.p95):>8s} {_fmt_ms(s.max):>8s}"
        )
        logger.info("\n".join(lines))

        self._frames_since_report = 0
