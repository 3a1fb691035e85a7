"""Rendering components: atlas, compositor and host bitmap."""

from segment_display.rendering.atlas import Atlas, SegmentAtlasBuilder, rasterize_segment
from segment_display.rendering.compositor import FrameCompositor
from segment_display.rendering.host_bitmap import HostBitmap
from segment_display.rendering.overlay import FpsOverlay

__all__ = [
    "Atlas",
    "SegmentAtlasBuilder",
    "rasterize_segment",
    "FrameCompositor",
    "HostBitmap",
    "FpsOverlay",
]
