"""
Color parsing for display tints.

Accepted inputs, all normalized to an RGBA tuple with 0-255 components:
- Named colors: "orangered", "black", "white", ... (case-insensitive)
- HEX: "#RRGGBB" or "#RRGGBBAA"
- CSV string: "255,69,0" or "(255, 255, 255, 29)"
- RGB/RGBA list or tuple with 0-255 integers, or 0.0-1.0 floats
"""

import re
from typing import Dict, List, Optional, Tuple, Union

Color = Tuple[int, int, int, int]  # RGBA
ColorInput = Union[str, List, Tuple]

NAMED_COLORS: Dict[str, Color] = {
    "black": (0, 0, 0, 255),
    "white": (255, 255, 255, 255),
    "orangered": (255, 69, 0, 255),
    "orange": (255, 165, 0, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 128, 0, 255),
    "lime": (0, 255, 0, 255),
    "blue": (0, 0, 255, 255),
    "yellow": (255, 255, 0, 255),
    "cyan": (0, 255, 255, 255),
    "transparent": (0, 0, 0, 0),
}

HEX_COLOR_PATTERN = re.compile(r'^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')
CSV_COLOR_PATTERN = re.compile(
    r'^[\(\[]?\s*([0-9.]+)\s*,\s*([0-9.]+)\s*,\s*([0-9.]+)(?:\s*,\s*([0-9.]+))?\s*[\)\]]?$'
)


def normalize_color(color: Tuple[Union[int, float], ...]) -> Color:
    """
    Normalize a 3 or 4 component tuple to clamped RGBA.

    All-float tuples within 0.0-1.0 are scaled to 0-255.

    Examples:
        >>> normalize_color((255, 69, 0))
        (255, 69, 0, 255)
        >>> normalize_color((1.0, 1.0, 1.0, 0.5))
        (255, 255, 255, 128)
    """
    if len(color) not in (3, 4):
        raise ValueError(f"Color must have 3 or 4 components, got {len(color)}")

    if all(isinstance(c, float) for c in color) and all(0.0 <= c <= 1.0 for c in color):
        values = [int(round(c * 255)) for c in color]
    else:
        values = [int(c) for c in color]

    clamped = [max(0, min(255, v)) for v in values]
    if len(clamped) == 3:
        clamped.append(255)
    return (clamped[0], clamped[1], clamped[2], clamped[3])


def parse_hex_color(hex_str: str) -> Optional[Color]:
    """Parse "#RRGGBB" / "#RRGGBBAA" ('#' optional), or None if not hex."""
    match = HEX_COLOR_PATTERN.match(hex_str.strip())
    if not match:
        return None
    hex_value = match.group(1)
    components = [int(hex_value[i:i + 2], 16) for i in range(0, len(hex_value), 2)]
    return normalize_color(tuple(components))


def parse_csv_color(csv_str: str) -> Optional[Color]:
    """Parse "r,g,b[,a]" with optional brackets, or None if not CSV."""
    match = CSV_COLOR_PATTERN.match(csv_str.strip())
    if not match:
        return None
    values = [match.group(i) for i in range(1, 5) if match.group(i) is not None]
    try:
        if any('.' in v for v in values):
            return normalize_color(tuple(float(v) for v in values))
        return normalize_color(tuple(int(v) for v in values))
    except ValueError:
        return None


def parse_color(color: ColorInput) -> Color:
    """
    Parse a color from any supported format to an RGBA tuple.

    Raises:
        ValueError: If the color format is invalid or unrecognized

    Examples:
        >>> parse_color("OrangeRed")
        (255, 69, 0, 255)
        >>> parse_color("#FFFFFF1D")
        (255, 255, 255, 29)
        >>> parse_color([0, 0, 0])
        (0, 0, 0, 255)
    """
    if isinstance(color, str):
        named = NAMED_COLORS.get(color.strip().lower())
        if named is not None:
            return named
        result = parse_hex_color(color)
        if result is None:
            result = parse_csv_color(color)
        if result is None:
            raise ValueError(f"Invalid color format: {color}")
        return result

    if isinstance(color, (list, tuple)):
        return normalize_color(tuple(color))

    raise ValueError(f"Unsupported color type: {type(color).__name__}")
