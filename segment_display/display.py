"""
Segment display: geometry, atlas and frame compositing wired together.

Architecture:
    SegmentDisplay
    ├── ShapeLibrary          (loaded once, shared read-only)
    ├── RenderState           (version, geometry, atlas; swapped on resize)
    │     ├── CellGeometry
    │     └── Atlas           (built by SegmentAtlasBuilder)
    ├── FrameCompositor       (one composite per DisplayFrame)
    └── FrameProfiler / FpsOverlay   (optional, injected)

A resize computes the geometry and the complete atlas before publishing the
new RenderState with a single assignment, so a reader sees either the old
or the new pair, never a partial rebuild.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import pygame

from segment_display.config import DisplayConfig
from segment_display.core.frame import DisplayFrame, as_frame
from segment_display.core.geometry import CellGeometry, compute_geometry
from segment_display.core.shape_library import ShapeLibrary
from segment_display.errors import StaleStateError
from segment_display.rendering.atlas import Atlas, SegmentAtlasBuilder
from segment_display.rendering.compositor import FrameCompositor
from segment_display.rendering.host_bitmap import HostBitmap
from segment_display.rendering.overlay import FpsOverlay
from segment_display.utils.profiler import FrameProfiler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderState:
    """Geometry and the atlas built for it, published together."""
    version: int
    geometry: CellGeometry
    atlas: Atlas


class SegmentDisplay:
    """
    Renders DisplayFrames of a lines x cells_per_line 16-segment display.

    Args:
        shapes: Loaded segment shapes
        config: Display options (defaults to DisplayConfig())
        compositor: Frame compositor (defaults to one using the config's canvas color)
        profiler: Optional frame profiler, marked around each composite
        overlay: Optional diagnostics overlay drawn after compositing
    """

    def __init__(self, shapes: ShapeLibrary,
                 config: Optional[DisplayConfig] = None,
                 compositor: Optional[FrameCompositor] = None,
                 profiler: Optional[FrameProfiler] = None,
                 overlay: Optional[FpsOverlay] = None):
        self.shapes = shapes
        self.config = (config or DisplayConfig()).validate()
        self.compositor = compositor or FrameCompositor(self.config.canvas_background_color)
        self.profiler = profiler
        self.overlay = overlay

        self._builder = SegmentAtlasBuilder()
        self._state: Optional[RenderState] = None
        self._frame: Optional[DisplayFrame] = None

    @classmethod
    def from_config(cls, config: DisplayConfig, **kwargs) -> "SegmentDisplay":
        """Load the configured shapes and create a display."""
        return cls(ShapeLibrary.load(config.shapes_dir), config, **kwargs)

    @property
    def state(self) -> Optional[RenderState]:
        """Current geometry/atlas pair, or None before the first resize."""
        return self._state

    @property
    def geometry(self) -> Optional[CellGeometry]:
        state = self._state
        return state.geometry if state else None

    @property
    def frame(self) -> Optional[DisplayFrame]:
        """Most recent frame passed to update_frame()."""
        return self._frame

    def resize(self, width: int, height: int) -> RenderState:
        """
        Recompute the geometry for a canvas size and rebuild the atlas.

        Raises:
            ConfigurationError: If the size gives a degenerate geometry. The
                previous state stays in place.
        """
        cfg = self.config
        geometry = compute_geometry(
            width, height,
            lines=cfg.lines,
            cells_per_line=cfg.cells_per_line,
            skew_angle_degrees=cfg.skew_angle_degrees,
            padding_px=cfg.padding_px,
            reference_bounds=self.shapes.reference_bounds,
            row_gap_px=cfg.row_gap_px,
        )
        atlas = self._builder.build(self.shapes, geometry,
                                    cfg.foreground_color, cfg.background_dim_color,
                                    release_previous=False)

        previous = self._state
        self._state = RenderState(version=atlas.version, geometry=geometry, atlas=atlas)
        if previous is not None:
            previous.atlas.release()

        logger.info(f"Display resized to {width}x{height} (atlas version {atlas.version})")
        return self._state

    def create_image(self, width: int, height: int) -> HostBitmap:
        """Set up the geometry for a canvas size and return a matching bitmap."""
        self.resize(width, height)
        return HostBitmap(width, height)

    def update_frame(self, frame: Union[DisplayFrame, Sequence[int]]):
        """
        Store the frame to draw next.

        Raises:
            ValueError: If a mask is outside 0x0000-0xFFFF or not an integer.
                The previously stored frame is kept.
        """
        self._frame = as_frame(frame)

    def _composite(self, state: Optional[RenderState], surface: pygame.Surface) -> int:
        cfg = self.config
        p = self.profiler
        if p:
            p.begin_frame()

        drawn = self.compositor.composite(
            state.atlas if state else None,
            state.geometry if state else None,
            self._frame,
            surface,
            cfg.lines, cfg.cells_per_line, cfg.padding_px,
            profiler=p,
        )

        if p:
            p.end_frame()
        if self.overlay:
            self.overlay.draw(surface)
        return drawn

    def draw_image(self, target: Union[HostBitmap, pygame.Surface]) -> bool:
        """
        Composite the latest frame into a host bitmap or a surface.

        A HostBitmap is locked for the duration of the composite and
        released on every exit path.

        Returns:
            True if the frame was drawn, False if it was skipped because no
            frame or atlas is available or the state was stale
        """
        state = self._state
        if self._frame is None or state is None:
            return False

        try:
            if isinstance(target, HostBitmap):
                with target.locked() as surface:
                    self._composite(state, surface)
            else:
                self._composite(state, target)
        except StaleStateError as e:
            logger.debug(f"Skipping frame: {e}")
            return False
        return True

    def render(self, frame: Union[DisplayFrame, Sequence[int], None] = None) -> pygame.Surface:
        """
        Render a frame to a new offscreen surface of the current canvas size.

        Raises:
            StaleStateError: If no geometry has been set up yet or the frame
                does not fit the grid
        """
        if frame is not None:
            self.update_frame(frame)
        state = self._state
        if state is None:
            raise StaleStateError("No atlas has been built yet; call resize() first")

        surface = pygame.Surface(state.geometry.canvas_size, pygame.SRCALPHA, 32)
        self._composite(state, surface)
        return surface

    def close(self):
        """Release the current atlas."""
        self._builder.release()
        self._state = None
