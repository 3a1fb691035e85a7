"""
Frame-rate text overlay.

Draws "FPS: n" and "Frames: n" in the top-left corner from an injected
FrameProfiler. Purely diagnostic; not part of the display image.
"""

from typing import Dict, Tuple

import pygame

from segment_display.utils.profiler import FrameProfiler


class FpsOverlay:
    """Renders frame-rate counters read from a FrameProfiler."""

    def __init__(self, profiler: FrameProfiler,
                 color: Tuple[int, int, int] = (255, 255, 255),
                 font_size: int = 14):
        self.profiler = profiler
        self.color = color
        self.font_size = font_size
        self._fonts: Dict[int, pygame.font.Font] = {}  # Cache for fonts

    def _font(self) -> pygame.font.Font:
        if not pygame.font.get_init():
            pygame.font.init()
        if self.font_size not in self._fonts:
            self._fonts[self.font_size] = pygame.font.Font(None, self.font_size)
        return self._fonts[self.font_size]

    def draw(self, surface: pygame.Surface):
        """Draw the counters onto the surface."""
        font = self._font()
        fps_text = font.render(f"FPS: {self.profiler.fps:.0f}", True, self.color)
        frames_text = font.render(f"Frames: {self.profiler.frame_count}", True, self.color)
        surface.blit(fps_text, (0, 0))
        surface.blit(frames_text, (fps_text.get_width() + 10, 0))
