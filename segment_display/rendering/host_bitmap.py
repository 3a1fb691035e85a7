"""
Host bitmap: a caller-owned 32-bit RGBA pixel buffer.

Stands in for the presenting side's bitmap type. The compositor writes
into it through a pygame surface that shares the buffer memory, and only
while the bitmap is locked.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Tuple

import numpy as np
import pygame


class HostBitmap:
    """
    Fixed-size RGBA pixel buffer with scoped write locking.

    Args:
        width, height: Size in pixels
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Bitmap size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self._lock = threading.Lock()

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def is_locked(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def locked(self) -> Iterator[pygame.Surface]:
        """
        Lock the bitmap and yield a surface writing straight into its pixels.

        The lock is released on every exit path, including exceptions raised
        by the code drawing into the surface.
        """
        self._lock.acquire()
        try:
            surface = pygame.image.frombuffer(self.pixels, self.size, 'RGBA')
            yield surface
        finally:
            self._lock.release()

    def to_surface(self) -> pygame.Surface:
        """Independent surface copy of the current pixels, for presenting or saving."""
        with self._lock:
            return pygame.image.frombuffer(self.pixels.tobytes(), self.size, 'RGBA').copy()
