"""Core components: shapes, geometry and frames."""

from segment_display.core.shape_library import (
    SEGMENT_COUNT,
    SEGMENT_NAMES,
    SegmentShape,
    ShapePath,
    ShapeLibrary,
    load_shape,
)
from segment_display.core.geometry import CellGeometry, compute_geometry, skewed_width
from segment_display.core.frame import DisplayFrame, as_frame

__all__ = [
    "SEGMENT_COUNT",
    "SEGMENT_NAMES",
    "SegmentShape",
    "ShapePath",
    "ShapeLibrary",
    "load_shape",
    "CellGeometry",
    "compute_geometry",
    "skewed_width",
    "DisplayFrame",
    "as_frame",
]
