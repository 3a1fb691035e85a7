"""
Cell geometry for the segment display grid.

Sizes one character cell so that `cells_per_line` skewed glyphs tile
edge-to-edge across the canvas width:

    skewed_width(w, h) = w + |tan(skew) * h|
    skew_factor        = skewed_width(ref_w, ref_h) / ref_w
    cell_width         = (target_width - 2 * padding) / (cells_per_line - 1 + skew_factor)

Cells advance by `cell_width`; only the last cell contributes its full
skewed width, so the skew overhang is counted once per line. Skew is
horizontal only, so the grid height does not depend on it.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

from segment_display.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_LINES = 2
DEFAULT_CELLS_PER_LINE = 20
DEFAULT_SKEW_ANGLE = -15.0  # degrees, negative leans glyph tops to the right
DEFAULT_PADDING = 20  # px
DEFAULT_ROW_GAP = 10  # px


def skewed_width(width: float, height: float, skew_angle_degrees: float) -> float:
    """Width of a width x height box after a horizontal skew."""
    return width + abs(math.tan(math.radians(skew_angle_degrees)) * height)


@dataclass(frozen=True)
class CellGeometry:
    """Layout parameters derived from one canvas size. Recomputed on resize."""
    cell_width: float
    cell_height: float
    scale_factor: float
    skew_angle_degrees: float
    padding_px: float
    raster_width: int
    raster_height: int
    canvas_size: Tuple[int, int]
    lines: int
    cells_per_line: int
    row_gap_px: float = DEFAULT_ROW_GAP

    @property
    def skew(self) -> float:
        """Horizontal shear factor tan(skew angle)."""
        return math.tan(math.radians(self.skew_angle_degrees))

    @property
    def cell_count(self) -> int:
        return self.lines * self.cells_per_line

    @property
    def grid_size(self) -> Tuple[float, float]:
        """(width, height) covered by the grid including padding."""
        width = (2 * self.padding_px
                 + self.cell_width * (self.cells_per_line - 1)
                 + skewed_width(self.cell_width, self.cell_height, self.skew_angle_degrees))
        height = (2 * self.padding_px
                  + self.lines * self.cell_height
                  + (self.lines - 1) * self.row_gap_px)
        return (width, height)

    def cell_origin(self, row: int, col: int) -> Tuple[float, float]:
        """Top-left position of the raster for the cell at (row, col)."""
        return (self.padding_px + col * self.cell_width,
                self.padding_px + row * (self.cell_height + self.row_gap_px))

    def cell_positions(self) -> List[Tuple[int, int]]:
        """Integer top-left blit positions of all cells in row-major order."""
        positions = []
        for row in range(self.lines):
            for col in range(self.cells_per_line):
                x, y = self.cell_origin(row, col)
                positions.append((int(round(x)), int(round(y))))
        return positions


def compute_geometry(target_width: int, target_height: int,
                     lines: int = DEFAULT_LINES,
                     cells_per_line: int = DEFAULT_CELLS_PER_LINE,
                     skew_angle_degrees: float = DEFAULT_SKEW_ANGLE,
                     padding_px: float = DEFAULT_PADDING,
                     reference_bounds: Tuple[float, float] = (1.0, 1.0),
                     row_gap_px: float = DEFAULT_ROW_GAP) -> CellGeometry:
    """
    Derive the cell geometry for a canvas size and grid shape.

    Args:
        target_width, target_height: Canvas size in pixels
        lines, cells_per_line: Grid shape
        skew_angle_degrees: Horizontal skew applied to every glyph
        padding_px: Margin around the grid
        reference_bounds: (width, height) of the reference shape canvas
        row_gap_px: Vertical gap between lines

    Returns:
        CellGeometry for the canvas

    Raises:
        ConfigurationError: If the inputs give a degenerate or non-finite geometry
    """
    if cells_per_line <= 1:
        raise ConfigurationError(f"cells_per_line must be > 1, got {cells_per_line}")
    if lines < 1:
        raise ConfigurationError(f"lines must be >= 1, got {lines}")
    if not -90.0 < skew_angle_degrees < 90.0:
        raise ConfigurationError(f"skew angle must be within (-90, 90), got {skew_angle_degrees}")

    ref_w, ref_h = reference_bounds
    if not (ref_w > 0 and ref_h > 0):
        raise ConfigurationError(f"Reference shape bounds must be positive, got {reference_bounds}")

    usable_width = target_width - 2 * padding_px
    if usable_width <= 0:
        raise ConfigurationError(
            f"Canvas width {target_width} leaves no room inside padding {padding_px}"
        )

    skew_factor = skewed_width(ref_w, ref_h, skew_angle_degrees) / ref_w
    cell_width = usable_width / (cells_per_line - 1 + skew_factor)
    scale_factor = cell_width / ref_w
    cell_height = ref_h * scale_factor
    raster_width = skewed_width(cell_width, cell_height, skew_angle_degrees)

    if not all(math.isfinite(v) and v > 0 for v in (cell_width, cell_height, raster_width)):
        raise ConfigurationError(
            f"Degenerate geometry: cell {cell_width}x{cell_height}, raster width {raster_width}"
        )

    geometry = CellGeometry(
        cell_width=cell_width,
        cell_height=cell_height,
        scale_factor=scale_factor,
        skew_angle_degrees=skew_angle_degrees,
        padding_px=padding_px,
        raster_width=max(1, math.ceil(raster_width - 1e-9)),
        raster_height=max(1, math.ceil(cell_height - 1e-9)),
        canvas_size=(int(target_width), int(target_height)),
        lines=lines,
        cells_per_line=cells_per_line,
        row_gap_px=row_gap_px,
    )

    grid_height = geometry.grid_size[1]
    if grid_height > target_height:
        logger.warning(f"Grid height {grid_height:.1f}px exceeds canvas height {target_height}px")

    return geometry
