"""
RGB <-> hex conversion for palette output.
"""

import math
from typing import Tuple


def _to_channel(value) -> int:
    """Round half-up and clamp a channel value to [0, 255]."""
    value = float(value)
    if math.isnan(value):
        return 0
    value = min(255.0, max(0.0, value))
    return int(math.floor(value + 0.5))


def rgb_to_hex(r, g, b) -> str:
    """
    Convert an RGB triple to an uppercase ``#RRGGBB`` string.

    Channels may be ints, floats or numpy scalars. Out-of-range values
    are clamped, never rejected.
    """
    return "#{:02X}{:02X}{:02X}".format(_to_channel(r), _to_channel(g), _to_channel(b))


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple."""
    value = hex_color.lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    try:
        return tuple(int(value[i:i+2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
