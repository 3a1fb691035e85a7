"""
Segment atlas: pre-rasterized, skewed, tinted segment surfaces.

Each of the 16 segment shapes and the silhouette is rendered once per
geometry into a transparent surface of raster_width x raster_height:

1. Scale shape units by geometry.scale_factor
2. Skew horizontally by geometry.skew_angle_degrees
3. Translate so the shape's right edge meets the raster's right edge
4. Fill each SVG path anti-aliased with its own fill rule (OpenCV
   fillPoly, sub-pixel precision) and composite the paths at their own
   opacity
5. Tint source-in: color replaced by the tint, alpha kept

Per-frame compositing then only blits these surfaces, so frame cost does
not depend on the vector complexity of the shapes.
"""

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np
import pygame

from segment_display.core.geometry import CellGeometry
from segment_display.core.shape_library import (
    SEGMENT_COUNT,
    SegmentShape,
    ShapeLibrary,
    ShapePath,
)
from segment_display.utils.color import Color

logger = logging.getLogger(__name__)

# Fractional bits used for sub-pixel polygon coordinates in cv2.fillPoly
_SUBPIXEL_SHIFT = 4


def shape_transform(geometry: CellGeometry) -> np.ndarray:
    """
    2x3 affine matrix mapping shape units to raster pixels.

    Composes scale, horizontal skew and the right-edge alignment offset.
    """
    s = geometry.scale_factor
    k = geometry.skew
    # Right edge of the skewed glyph box lands on the raster's right edge
    tx = geometry.raster_width - geometry.cell_width - max(0.0, k * geometry.cell_height)
    return np.array([
        [s, k * s, tx],
        [0.0, s, 0.0],
    ], dtype=np.float64)


def _contour(polygon: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Transform a shape-unit polygon into fixed-point OpenCV contour points."""
    points = polygon @ matrix[:, :2].T + matrix[:, 2]
    # Pixel centers sit at +0.5 in shape space, at integer coords in OpenCV
    points = np.round((points - 0.5) * (1 << _SUBPIXEL_SHIFT)).astype(np.int32)
    return points.reshape(-1, 1, 2)


def _fill(contours: List[np.ndarray], size: Tuple[int, int]) -> np.ndarray:
    mask = np.zeros(size, dtype=np.uint8)
    cv2.fillPoly(mask, contours, 255, lineType=cv2.LINE_AA, shift=_SUBPIXEL_SHIFT)
    return mask


def _signed_area(polygon: np.ndarray) -> float:
    x, y = polygon[:, 0], polygon[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def path_coverage(path: ShapePath, matrix: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """
    Anti-aliased coverage of one path, filled with its own fill rule.

    cv2.fillPoly fills a set of contours even-odd. For nonzero, every
    sub-path is filled alone and added with the sign of its winding
    direction, so same-direction overlaps stay filled and reversed inner
    sub-paths cut holes.

    Returns:
        float32 array of `size` in 0.0-1.0
    """
    contours = [_contour(polygon, matrix) for polygon in path.polygons]
    if path.fill_rule == "evenodd" or len(contours) == 1:
        return _fill(contours, size).astype(np.float32) / 255.0

    winding = np.zeros(size, dtype=np.float32)
    for polygon, contour in zip(path.polygons, contours):
        direction = 1.0 if _signed_area(polygon) >= 0 else -1.0
        winding += direction * (_fill([contour], size).astype(np.float32) / 255.0)
    return np.minimum(np.abs(winding), 1.0)


def rasterize_coverage(shape: SegmentShape, geometry: CellGeometry) -> np.ndarray:
    """
    Render the shape as an anti-aliased uint8 alpha mask.

    Paths are composited source-over in document order, each at its own
    opacity, the way an SVG renderer paints sibling paths.

    Returns:
        (raster_height, raster_width) array, 255 where fully covered and opaque
    """
    matrix = shape_transform(geometry)
    size = (geometry.raster_height, geometry.raster_width)

    transparency = np.ones(size, dtype=np.float32)
    for path in shape.paths:
        transparency *= 1.0 - path_coverage(path, matrix, size) * path.opacity
    return np.round((1.0 - transparency) * 255.0).astype(np.uint8)


def tint_coverage(coverage: np.ndarray, color: Color, opacity: float = 1.0) -> np.ndarray:
    """
    Source-in blend of a solid color onto a coverage mask.

    Returns:
        (h, w, 4) uint8 RGBA array with straight (non-premultiplied) alpha
    """
    h, w = coverage.shape
    rgba = np.empty((h, w, 4), dtype=np.uint8)
    rgba[:, :, 0] = color[0]
    rgba[:, :, 1] = color[1]
    rgba[:, :, 2] = color[2]
    alpha_scale = opacity * color[3] / 255.0
    rgba[:, :, 3] = np.round(coverage.astype(np.float32) * alpha_scale).astype(np.uint8)
    return rgba


def rasterize_segment(shape: SegmentShape, geometry: CellGeometry,
                      color: Color) -> pygame.Surface:
    """Render one shape at the geometry, tinted, into a per-pixel-alpha surface."""
    rgba = tint_coverage(rasterize_coverage(shape, geometry), color)
    return pygame.image.frombuffer(rgba.tobytes(),
                                   (geometry.raster_width, geometry.raster_height),
                                   'RGBA')


class Atlas:
    """
    The raster surfaces for one geometry.

    `segments` is a fixed 16-tuple indexed by bit position; the silhouette
    has its own slot. `version` increases with every rebuild.
    """

    __slots__ = ("segments", "silhouette", "geometry", "version", "_released")

    def __init__(self, segments: Tuple[pygame.Surface, ...], silhouette: pygame.Surface,
                 geometry: CellGeometry, version: int):
        if len(segments) != SEGMENT_COUNT:
            raise ValueError(f"Atlas needs {SEGMENT_COUNT} segment surfaces, got {len(segments)}")
        self.segments = tuple(segments)
        self.silhouette = silhouette
        self.geometry = geometry
        self.version = version
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self):
        """Drop every surface. A released atlas can no longer be composited."""
        self.segments = ()
        self.silhouette = None
        self._released = True

    def __repr__(self) -> str:
        g = self.geometry
        return (f"Atlas(version={self.version}, raster={g.raster_width}x{g.raster_height}, "
                f"released={self._released})")


class SegmentAtlasBuilder:
    """
    Builds and owns the current atlas.

    A rebuild renders the complete new atlas first, swaps it in, and only
    then releases the surfaces of the previous one.
    """

    def __init__(self):
        self._current: Optional[Atlas] = None
        self._version = 0

    @property
    def current(self) -> Optional[Atlas]:
        """The most recently built atlas, or None before the first build."""
        return self._current

    def build(self, shape_library: ShapeLibrary, geometry: CellGeometry,
              foreground_color: Color, background_dim_color: Color,
              release_previous: bool = True) -> Atlas:
        """
        Rasterize all segments and the silhouette for a geometry.

        Args:
            shape_library: Source outlines
            geometry: Target cell geometry
            foreground_color: RGBA tint of lit segments
            background_dim_color: RGBA tint of the silhouette underlay
            release_previous: Release the replaced atlas right away. Callers that
                publish the atlas themselves pass False and release after the swap.

        Returns:
            The new current Atlas
        """
        logger.info(
            f"Width = {geometry.cell_width:.2f}, Height = {geometry.cell_height:.2f}, "
            f"SkewedWidth = {geometry.raster_width}"
        )

        segments = tuple(
            rasterize_segment(shape, geometry, foreground_color)
            for shape in shape_library.segments
        )
        silhouette = rasterize_segment(shape_library.silhouette, geometry, background_dim_color)

        self._version += 1
        atlas = Atlas(segments, silhouette, geometry, self._version)

        previous, self._current = self._current, atlas
        if previous is not None and release_previous:
            previous.release()
            logger.debug(f"Released atlas version {previous.version}")

        return atlas

    def release(self):
        """Release the current atlas, if any."""
        if self._current is not None:
            self._current.release()
            self._current = None

