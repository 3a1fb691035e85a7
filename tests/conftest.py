"""Shared test fixtures."""

import os

# Use the dummy drivers before importing pygame
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import numpy as np
import pygame
import pytest

from segment_display.core.geometry import compute_geometry
from segment_display.core.shape_library import SEGMENT_COUNT, SegmentShape, ShapeLibrary, ShapePath

BOX_CANVAS = (40.0, 40.0)

# Reference scenario: 800x300 canvas, 2 lines of 20 cells
SCENARIO = dict(target_width=800, target_height=300, lines=2, cells_per_line=20,
                skew_angle_degrees=-15, padding_px=20)

FOREGROUND = (255, 69, 0, 255)
BACKGROUND_DIM = (255, 255, 255, 0x1d)

SVG_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" {canvas}>
  {body}
</svg>
"""


def rect_shape(name, x0, y0, x1, y1, canvas=BOX_CANVAS, opacity=1.0):
    polygon = np.array([[x0, y0], [x1, y0], [x1, y1], [x0, y1]], dtype=np.float64)
    return SegmentShape(name=name, paths=(ShapePath((polygon,), opacity),), canvas_size=canvas)


def write_svg(path, body, canvas='viewBox="0 0 100 100"'):
    path.write_text(SVG_TEMPLATE.format(canvas=canvas, body=body))
    return path


def make_box_library():
    """
    16 non-overlapping 6x6 squares on a 4x4 grid inside a 40x40 canvas,
    plus a silhouette covering the union of all squares.
    """
    segments = []
    for i in range(SEGMENT_COUNT):
        row, col = divmod(i, 4)
        x0, y0 = 4 + col * 9, 4 + row * 9
        segments.append(rect_shape(f"box-{i}", x0, y0, x0 + 6, y0 + 6))
    silhouette = rect_shape("full", 4, 4, 37, 37)
    return ShapeLibrary(segments, silhouette)


@pytest.fixture(scope="session", autouse=True)
def pygame_session():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture(scope="session")
def bundled_shapes():
    return ShapeLibrary.load()


@pytest.fixture
def box_shapes():
    return make_box_library()


@pytest.fixture
def scenario_geometry(bundled_shapes):
    return compute_geometry(reference_bounds=bundled_shapes.reference_bounds, **SCENARIO)


def is_bright(rgb):
    """Mask of pixels lit by the foreground color."""
    return (rgb[..., 0] > 150) & (rgb[..., 1] < 150)


def is_dim(rgb):
    """Mask of pixels lit only by the dim silhouette."""
    r, g, b = (rgb[..., i].astype(int) for i in range(3))
    return (r > 0) & (r < 80) & (r == g) & (g == b)


def surface_rgba(surface):
    """(h, w, 4) uint8 copy of a surface's pixels."""
    width, height = surface.get_size()
    data = pygame.image.tobytes(surface, "RGBA")
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
