"""
Frame compositor.

Stamps pre-rasterized atlas surfaces into a destination surface for one
DisplayFrame:

1. Clear to the canvas background color
2. Background pass: the dim silhouette at every cell
3. Segment pass: for each cell in row-major order, every segment whose
   bit is set, in ascending bit order

Blits are batched with Surface.blits(); cell positions are cached per
geometry.
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

import pygame

from segment_display.core.frame import DisplayFrame, as_frame
from segment_display.core.geometry import CellGeometry
from segment_display.errors import StaleStateError
from segment_display.rendering.atlas import Atlas
from segment_display.utils.color import Color
from segment_display.utils.profiler import FrameProfiler

logger = logging.getLogger(__name__)

DEFAULT_CANVAS_BACKGROUND: Color = (0, 0, 0, 255)


class FrameCompositor:
    """Composites DisplayFrames using the current atlas and geometry."""

    def __init__(self, canvas_background_color: Color = DEFAULT_CANVAS_BACKGROUND):
        self.canvas_background_color = canvas_background_color
        self._positions_geometry: Optional[CellGeometry] = None
        self._positions: List[Tuple[int, int]] = []

    def cell_positions(self, geometry: CellGeometry) -> List[Tuple[int, int]]:
        """Top-left blit positions for every cell, cached until the geometry changes."""
        if self._positions_geometry != geometry:
            self._positions = geometry.cell_positions()
            self._positions_geometry = geometry
        return self._positions

    def _validate(self, atlas: Optional[Atlas], geometry: Optional[CellGeometry],
                  frame: Optional[DisplayFrame], destination: Optional[pygame.Surface],
                  lines: int, cells_per_line: int, padding_px: float):
        if atlas is None or geometry is None:
            raise StaleStateError("No atlas has been built yet")
        if frame is None:
            raise StaleStateError("No frame to composite")
        if destination is None:
            raise StaleStateError("No destination surface")
        if atlas.released:
            raise StaleStateError(f"Atlas version {atlas.version} has been released")
        if atlas.geometry != geometry:
            raise StaleStateError(f"Atlas version {atlas.version} was built for another geometry")
        if (lines, cells_per_line) != (geometry.lines, geometry.cells_per_line):
            raise StaleStateError(
                f"Grid {lines}x{cells_per_line} does not match geometry "
                f"{geometry.lines}x{geometry.cells_per_line}"
            )
        if padding_px != geometry.padding_px:
            raise StaleStateError(
                f"Padding {padding_px} does not match geometry padding {geometry.padding_px}"
            )
        expected = lines * cells_per_line
        if len(frame) != expected:
            raise StaleStateError(f"Frame has {len(frame)} cells, expected {expected}")
        if tuple(destination.get_size()) != tuple(geometry.canvas_size):
            raise StaleStateError(
                f"Destination is {destination.get_size()}, geometry is for {geometry.canvas_size}"
            )

    def draw_background(self, atlas: Atlas, geometry: CellGeometry,
                        destination: pygame.Surface):
        """Clear and draw the silhouette underlay into every cell."""
        destination.fill(self.canvas_background_color)
        silhouette = atlas.silhouette
        destination.blits([(silhouette, pos) for pos in self.cell_positions(geometry)],
                          doreturn=False)

    def draw_segments(self, atlas: Atlas, geometry: CellGeometry,
                      frame: DisplayFrame, destination: pygame.Surface) -> int:
        """
        Draw every lit segment of the frame.

        Returns:
            Number of segment surfaces drawn
        """
        segments = atlas.segments
        positions = self.cell_positions(geometry)
        blits = [(segments[bit], positions[cell]) for cell, bit in frame.lit_segments()]
        if blits:
            destination.blits(blits, doreturn=False)
        return len(blits)

    def composite(self, atlas: Optional[Atlas], geometry: Optional[CellGeometry],
                  frame: Union[DisplayFrame, Sequence[int], None],
                  destination: pygame.Surface,
                  lines: int, cells_per_line: int, padding_px: float,
                  profiler: Optional[FrameProfiler] = None) -> int:
        """
        Render one frame into the destination surface.

        Args:
            atlas: Atlas built for `geometry`
            geometry: Current cell geometry
            frame: One 16-bit mask per cell, row-major
            destination: Surface of exactly geometry.canvas_size
            lines, cells_per_line, padding_px: Grid the caller expects
            profiler: Optional profiler receiving "background" and "segments" marks

        Returns:
            Number of segment surfaces drawn

        Raises:
            StaleStateError: If the inputs do not belong together. Raised
                before any pixel is written.
        """
        if frame is not None:
            frame = as_frame(frame)
        self._validate(atlas, geometry, frame, destination, lines, cells_per_line, padding_px)

        self.draw_background(atlas, geometry, destination)
        if profiler:
            profiler.mark("background")

        drawn = self.draw_segments(atlas, geometry, frame, destination)
        if profiler:
            profiler.mark("segments")

        return drawn
