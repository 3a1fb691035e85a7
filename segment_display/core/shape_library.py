"""
Segment shape library.

Holds the 16 elemental segment outlines of a 16-segment glyph plus the
"full glyph" silhouette used as the dim always-on underlay. Shapes are
loaded from SVG files, parsed with svgpathtools and flattened into closed
polygons in shape units (the SVG viewBox coordinate system).

The order of SEGMENT_NAMES is load-bearing: bit j of a DisplayFrame cell
selects the shape at index j.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union
from xml.parsers.expat import ExpatError

import numpy as np
from svgpathtools import Line, svg2paths2

from segment_display.errors import LoadError

logger = logging.getLogger(__name__)

SEGMENT_COUNT = 16

SEGMENT_NAMES: Tuple[str, ...] = (
    "00-top",
    "01-top-right",
    "02-bottom-right",
    "03-bottom",
    "04-bottom-left",
    "05-top-left",
    "06-middle-left",
    "07-comma",
    "08-diag-top-left",
    "09-center-top",
    "10-diag-top-right",
    "11-middle-right",
    "12-diag-bottom-right",
    "13-center-bottom",
    "14-diag-bottom-left",
    "15-dot",
)
SILHOUETTE_NAME = "full"

# Bundled shape resources
DEFAULT_SHAPES_DIR = Path(__file__).resolve().parent.parent / "shapes"

# Points sampled per curved path segment (lines contribute their start point)
CURVE_SAMPLES = 16

FILL_RULES = ("nonzero", "evenodd")

_STYLE_RE = re.compile(r'(?:^|;)\s*([a-zA-Z-]+)\s*:\s*([^;]+)')
_LENGTH_RE = re.compile(r'^\s*([0-9.]+)')
_RGBA_RE = re.compile(r'^rgba\(\s*[^,]+,\s*[^,]+,\s*[^,]+,\s*([0-9.]+)(%?)\s*\)$')
_HEX_ALPHA_RE = re.compile(r'^#(?:[0-9a-fA-F]{3}([0-9a-fA-F])|[0-9a-fA-F]{6}([0-9a-fA-F]{2}))$')


@dataclass(frozen=True, eq=False)
class ShapePath:
    """
    One filled SVG <path> element.

    Attributes:
        polygons: Closed sub-path outlines, each an (N, 2) read-only float array
        opacity: Fill opacity 0.0-1.0 (opacity x fill-opacity x fill color alpha)
        fill_rule: "nonzero" or "evenodd", applied across this path's sub-paths only
    """
    polygons: Tuple[np.ndarray, ...]
    opacity: float = 1.0
    fill_rule: str = "nonzero"


@dataclass(frozen=True, eq=False)
class SegmentShape:
    """
    Immutable vector outline of one segment (or the silhouette).

    Attributes:
        name: Stable resource name, e.g. "00-top"
        paths: Filled paths in document order, each filled on its own
        canvas_size: (width, height) of the shape's canvas in shape units
    """
    name: str
    paths: Tuple[ShapePath, ...]
    canvas_size: Tuple[float, float]

    @property
    def polygons(self) -> Tuple[np.ndarray, ...]:
        """Every sub-path outline of every path."""
        return tuple(polygon for path in self.paths for polygon in path.polygons)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) of the outline points."""
        points = np.concatenate(self.polygons)
        min_x, min_y = points.min(axis=0)
        max_x, max_y = points.max(axis=0)
        return (float(min_x), float(min_y), float(max_x), float(max_y))


def _parse_length(value: Optional[str]) -> Optional[float]:
    """Parse an SVG length like "115", "115px" or "115.5pt"; None if absent."""
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    return float(match.group(1)) if match else None


def _canvas_from_attributes(svg_attributes: Dict[str, str]) -> Tuple[float, float, float, float]:
    """Return (origin_x, origin_y, width, height) of the SVG canvas."""
    view_box = svg_attributes.get('viewBox')
    if view_box:
        parts = view_box.replace(',', ' ').split()
        if len(parts) == 4:
            x, y, w, h = (float(p) for p in parts)
            return (x, y, w, h)

    width = _parse_length(svg_attributes.get('width'))
    height = _parse_length(svg_attributes.get('height'))
    if width is None or height is None:
        raise ValueError("SVG has neither a viewBox nor width/height")
    return (0.0, 0.0, width, height)


def _presentation(attributes: Dict[str, str]) -> Dict[str, str]:
    """Presentation attributes of an element, with `style` declarations taking precedence."""
    props = {key: value.strip() for key, value in attributes.items()}
    for key, value in _STYLE_RE.findall(attributes.get('style', '')):
        props[key.lower()] = value.strip()
    return props


def _fill_color_alpha(fill: str) -> float:
    """Alpha carried by the fill color itself: #RGBA, #RRGGBBAA or rgba()."""
    match = _RGBA_RE.match(fill)
    if match:
        value = float(match.group(1))
        return value / 100.0 if match.group(2) else value
    match = _HEX_ALPHA_RE.match(fill)
    if match:
        digits = match.group(1) or match.group(2)
        if len(digits) == 1:
            digits *= 2
        return int(digits, 16) / 255.0
    return 1.0


def _fill_style(attributes: Dict[str, str]) -> Optional[Tuple[float, str]]:
    """
    (opacity, fill_rule) of a path element, or None if the path is not filled.

    Raises:
        ValueError: On an unparsable opacity or an unknown fill-rule
    """
    props = _presentation(attributes)
    fill = props.get('fill', '')
    if fill.lower() in ('none', 'transparent'):
        return None

    opacity = _fill_color_alpha(fill)
    for key in ('opacity', 'fill-opacity'):
        if key in props:
            opacity *= float(props[key])

    fill_rule = props.get('fill-rule', 'nonzero').lower()
    if fill_rule not in FILL_RULES:
        raise ValueError(f"Unsupported fill-rule: {fill_rule}")
    return (max(0.0, min(1.0, opacity)), fill_rule)


def _flatten(subpath, origin: Tuple[float, float]) -> np.ndarray:
    """Flatten a continuous svgpathtools subpath into a closed polygon."""
    points: List[complex] = []
    for segment in subpath:
        if isinstance(segment, Line):
            points.append(segment.start)
        else:
            points.extend(segment.point(t) for t in np.linspace(0.0, 1.0, CURVE_SAMPLES,
                                                                endpoint=False))
    polygon = np.array([(p.real - origin[0], p.imag - origin[1]) for p in points],
                       dtype=np.float64)
    polygon.flags.writeable = False
    return polygon


def load_shape(path: Union[str, Path], name: Optional[str] = None) -> SegmentShape:
    """
    Load one SVG file as a SegmentShape.

    Each filled <path> keeps its own sub-paths, opacity and fill rule.

    Raises:
        LoadError: If the file is missing, unparsable or has no filled outline
    """
    path = Path(path)
    name = name or path.stem
    if not path.is_file():
        raise LoadError(f"Shape resource not found: {path}")

    try:
        svg_paths, attributes, svg_attributes = svg2paths2(str(path))
        origin_x, origin_y, width, height = _canvas_from_attributes(svg_attributes)
        shape_paths = []
        for svg_path, attrs in zip(svg_paths, attributes):
            style = _fill_style(attrs)
            if style is None:
                continue
            polygons = [_flatten(subpath, (origin_x, origin_y))
                        for subpath in svg_path.continuous_subpaths()]
            polygons = [p for p in polygons if len(p) >= 3]
            if polygons:
                opacity, fill_rule = style
                shape_paths.append(ShapePath(tuple(polygons), opacity, fill_rule))
    except (OSError, ValueError, IndexError, ExpatError) as e:
        raise LoadError(f"Malformed shape resource {path}: {e}") from e

    if not shape_paths:
        raise LoadError(f"Shape resource {path} has no filled outline")
    if width <= 0 or height <= 0:
        raise LoadError(f"Shape resource {path} has an empty canvas ({width}x{height})")

    return SegmentShape(name=name, paths=tuple(shape_paths), canvas_size=(width, height))


class ShapeLibrary:
    """
    The fixed set of 16 segment shapes plus the silhouette.

    Read-only after construction; safe to share across atlas rebuilds.
    """

    def __init__(self, segments: Sequence[SegmentShape], silhouette: SegmentShape):
        if len(segments) != SEGMENT_COUNT:
            raise LoadError(
                f"Expected {SEGMENT_COUNT} segment shapes, got {len(segments)}"
            )
        self._segments: Tuple[SegmentShape, ...] = tuple(segments)
        self._silhouette = silhouette

    @classmethod
    def load(cls, directory: Optional[Union[str, Path]] = None) -> "ShapeLibrary":
        """
        Load the 16 segment SVGs and the silhouette SVG.

        Args:
            directory: Folder holding "00-top.svg" ... "15-dot.svg" and
                       "full.svg". Defaults to the bundled shapes.

        Raises:
            LoadError: If any resource is missing or malformed
        """
        directory = Path(directory) if directory else DEFAULT_SHAPES_DIR
        logger.info(f"Loading segment SVGs from {directory}...")

        segments = [load_shape(directory / f"{name}.svg", name) for name in SEGMENT_NAMES]
        silhouette = load_shape(directory / f"{SILHOUETTE_NAME}.svg", SILHOUETTE_NAME)

        library = cls(segments, silhouette)
        logger.info(f"Loaded {len(segments)} segments + silhouette, "
                    f"reference size {library.reference_bounds}")
        return library

    @property
    def segments(self) -> Tuple[SegmentShape, ...]:
        """Segment shapes indexed 0-15 by bit position."""
        return self._segments

    @property
    def silhouette(self) -> SegmentShape:
        """The full-glyph background shape."""
        return self._silhouette

    @property
    def reference_bounds(self) -> Tuple[float, float]:
        """(width, height) of the canvas of segment 0, used for geometry."""
        return self._segments[0].canvas_size

    def __getitem__(self, index: int) -> SegmentShape:
        return self._segments[index]

    def __len__(self) -> int:
        return len(self._segments)
