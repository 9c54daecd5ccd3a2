"""
Complementary palette generation.

Builds a suggestion palette from a few base colors picked out of an
extracted palette: tints and shades of each base fill the first half,
the same treatment applied to each base's +180° hue complement fills
the second half.

Hue, lightness and saturation follow ``colorsys`` HLS conventions, all
in [0, 1].
"""

import colorsys
import math
from typing import Dict, List, Sequence, Tuple

from loguru import logger

from .encoding import hex_to_rgb, rgb_to_hex

TINT_STEP = 0.1
MAX_LIGHTNESS = 0.95
MIN_LIGHTNESS = 0.05


def hex_to_hls(hex_color: str) -> Tuple[float, float, float]:
    """
    Convert hex color to HLS color space.

    Returns:
        Tuple of (H, L, S) where H ∈ [0,1), L ∈ [0,1], S ∈ [0,1]
    """
    r, g, b = hex_to_rgb(hex_color)
    return colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)


def hls_to_hex(h: float, l: float, s: float) -> str:
    """Convert HLS color to an uppercase ``#RRGGBB`` string."""
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return rgb_to_hex(r * 255.0, g * 255.0, b * 255.0)


def rotate_hue(h: float, degrees: float) -> float:
    """Rotate hue by ``degrees``, wrapping into [0, 1)."""
    return (h + degrees / 360.0) % 1.0


def tints_and_shades(h: float, l: float, s: float, count: int) -> List[str]:
    """
    The color itself followed by alternating lighter and darker steps.

    Step ``i`` moves lightness by ``i * 0.1``, held within [0.05, 0.95].
    """
    shades = [hls_to_hex(h, l, s)]
    step = 1
    while len(shades) < count:
        shades.append(hls_to_hex(h, min(MAX_LIGHTNESS, l + step * TINT_STEP), s))
        if len(shades) >= count:
            break
        shades.append(hls_to_hex(h, max(MIN_LIGHTNESS, l - step * TINT_STEP), s))
        step += 1
    return shades[:count]


def _distribute(bases: List[Tuple[float, float, float]], size: int, palette: Dict[str, None]) -> None:
    """Spread ``size`` slots over the bases, adding each base's tints and shades."""
    added = 0
    for index, (h, l, s) in enumerate(bases):
        count = math.ceil(size / len(bases)) + (1 if index < size % len(bases) else 0)
        for shade in tints_and_shades(h, l, s, count):
            if added < size:
                # Repeated colors keep their first slot
                palette.setdefault(shade, None)
                added += 1


def generate_complementary_palette(base_colors: Sequence[str], total_colors: int = 10) -> List[str]:
    """
    Generate a suggestion palette from selected base colors.

    Args:
        base_colors: Hex colors chosen from an extracted palette
        total_colors: Palette size before duplicate removal

    Returns:
        At most ``total_colors`` distinct hex colors: base-derived colors
        first, then complement-derived ones. Colors that collide after
        rounding are kept once, so the palette can come out shorter.

    Raises:
        ValueError: If no base colors are given or a color is malformed
    """
    if not base_colors:
        raise ValueError("At least one base color is required")

    bases = [hex_to_hls(color) for color in base_colors]
    complements = [(rotate_hue(h, 180.0), l, s) for h, l, s in bases]

    base_size = total_colors // 2
    palette: Dict[str, None] = {}
    _distribute(bases, base_size, palette)
    _distribute(complements, total_colors - base_size, palette)

    result = list(palette)[:total_colors]
    logger.debug(f"Complementary palette: {len(base_colors)} bases -> {len(result)} colors")
    return result
