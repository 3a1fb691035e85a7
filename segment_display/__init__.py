"""
Segment Display - simulated 16-segment alphanumeric display renderer.

This package renders a grid of 16-segment glyph cells into a bitmap:
- Segment outlines are loaded once from SVG (ShapeLibrary)
- Cell geometry is derived from the canvas size (compute_geometry)
- Outlines are rasterized, skewed and tinted once per geometry (SegmentAtlasBuilder)
- Every frame, per-cell 16-bit masks select which rasters are stamped (FrameCompositor)
"""

from segment_display.core.shape_library import ShapeLibrary, SegmentShape
from segment_display.core.geometry import CellGeometry, compute_geometry
from segment_display.core.frame import DisplayFrame
from segment_display.rendering.atlas import Atlas, SegmentAtlasBuilder
from segment_display.rendering.compositor import FrameCompositor
from segment_display.rendering.host_bitmap import HostBitmap
from segment_display.config import DisplayConfig, load_config
from segment_display.display import SegmentDisplay
from segment_display.errors import (
    SegmentDisplayError,
    LoadError,
    ConfigurationError,
    StaleStateError,
)

__version__ = "1.0.0"
__all__ = [
    "ShapeLibrary",
    "SegmentShape",
    "CellGeometry",
    "compute_geometry",
    "DisplayFrame",
    "Atlas",
    "SegmentAtlasBuilder",
    "FrameCompositor",
    "HostBitmap",
    "DisplayConfig",
    "load_config",
    "SegmentDisplay",
    "SegmentDisplayError",
    "LoadError",
    "ConfigurationError",
    "StaleStateError",
]
