"""
Swatch Rendering Module

Renders a palette as a horizontal strip of color chips for quick visual
checks of extraction output.
"""

import base64
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from loguru import logger

from .encoding import hex_to_rgb


def hex_to_bgr(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to BGR tuple for OpenCV."""
    r, g, b = hex_to_rgb(hex_color)
    return (b, g, r)


def _chip_widths(k: int, chip_size: int, weights: Optional[Sequence[float]]) -> List[int]:
    """Equal chips, or chips sharing k * chip_size pixels in proportion to weights."""
    if not weights:
        return [chip_size] * k

    total_width = chip_size * k
    total_weight = float(sum(weights))
    if total_weight <= 0:
        return [chip_size] * k

    widths = [max(1, int(total_width * w / total_weight)) for w in weights]
    # Give rounding leftovers to the widest chip
    widths[int(np.argmax(widths))] += total_width - sum(widths)
    return widths


def render_swatch_strip(hex_colors: List[str],
                        chip_size: int = 40,
                        weights: Optional[Sequence[float]] = None) -> str:
    """
    Render a horizontal strip of color swatches.

    Args:
        hex_colors: List of hex color strings
        chip_size: Height of the strip and mean width of each chip
        weights: Optional per-color weights; chip widths follow them

    Returns:
        Base64-encoded PNG image string
    """
    if not hex_colors:
        raise ValueError("Empty hex_colors list provided")
    if weights is not None and len(weights) != len(hex_colors):
        raise ValueError("hex_colors and weights must have same length")

    k = len(hex_colors)
    widths = _chip_widths(k, chip_size, weights)
    img = np.zeros((chip_size, sum(widths), 3), dtype=np.uint8)

    x_start = 0
    for hex_color, width in zip(hex_colors, widths):
        img[:, x_start:x_start + width, :] = hex_to_bgr(hex_color)
        x_start += width

    success, buffer = cv2.imencode('.png', img)
    if not success:
        raise RuntimeError("Failed to encode image as PNG")

    b64_string = base64.b64encode(buffer.tobytes()).decode('ascii')
    logger.debug(f"Encoded swatch strip: {img.shape[1]}×{img.shape[0]} -> {len(b64_string)} chars")
    return b64_string
