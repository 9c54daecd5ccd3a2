"""
Exact-frequency histogram strategy.

Counts every distinct color in a PixelSet and orders the colors by
descending count, ties kept in first-encountered order.
"""

from typing import List

import numpy as np

from .encoding import rgb_to_hex
from .models import ColorCount


def pack_rgb(pixels: np.ndarray) -> np.ndarray:
    """Pack (N, 3) uint8 pixels into (N,) uint32 0xRRGGBB codes."""
    pixels = pixels.astype(np.uint32, copy=False)
    return (pixels[:, 0] << 16) | (pixels[:, 1] << 8) | pixels[:, 2]


def code_to_hex(code: int) -> str:
    code = int(code)
    return rgb_to_hex((code >> 16) & 0xFF, (code >> 8) & 0xFF, code & 0xFF)


def build_histogram(pixels: np.ndarray) -> List[ColorCount]:
    """
    Build the color histogram for a PixelSet.

    Args:
        pixels: Opaque RGB pixels (N, 3) uint8

    Returns:
        One entry per distinct color, sorted by count descending. Equal
        counts keep the order in which the colors first occur.
    """
    if len(pixels) == 0:
        return []

    codes = pack_rgb(np.asarray(pixels).reshape(-1, 3))
    unique_codes, first_index, counts = np.unique(codes, return_index=True, return_counts=True)

    # lexsort keys run last-to-first: count descending, then first occurrence
    order = np.lexsort((first_index, -counts))
    return [ColorCount(code_to_hex(unique_codes[i]), int(counts[i])) for i in order]
