"""
Bound the pixel count submitted to quantization.
"""

import math
from typing import Tuple

import cv2
import numpy as np

from palettesnap.config import config


def compute_downsampled_size(width: int, height: int, max_dimension: int = None) -> Tuple[int, int]:
    """
    Compute dimensions whose larger side is at most ``max_dimension``.

    The aspect ratio is preserved up to rounding and both sides are at
    least 1. Images already within the bound are returned unchanged.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        max_dimension: Largest allowed side (default from config)

    Returns:
        Tuple of (width, height)
    """
    if max_dimension is None:
        max_dimension = config.MAX_DIMENSION
    width = max(1, int(width))
    height = max(1, int(height))
    max_dimension = max(1, int(max_dimension))

    if max(width, height) <= max_dimension:
        return width, height

    if width >= height:
        scaled = height * max_dimension / width
        return max_dimension, max(1, int(math.floor(scaled + 0.5)))

    scaled = width * max_dimension / height
    return max(1, int(math.floor(scaled + 0.5))), max_dimension


def downsample_rgba(rgba: np.ndarray, max_dimension: int = None) -> np.ndarray:
    """
    Resize an RGBA image so the longest edge is at most max_dimension pixels.

    Args:
        rgba: Input image, (H, W, 4) uint8
        max_dimension: Largest allowed side (default from config)

    Returns:
        Resized image, or the input itself when already small enough
    """
    height, width = rgba.shape[:2]
    new_width, new_height = compute_downsampled_size(width, height, max_dimension)

    if (new_width, new_height) == (width, height):
        return rgba

    # Resample premultiplied color so transparent pixels add no RGB
    rgba_f = rgba.astype(np.float32)
    alpha = rgba_f[:, :, 3:4]
    premultiplied = np.concatenate([rgba_f[:, :, :3] * (alpha / 255.0), alpha], axis=2)

    # Use INTER_AREA for downscaling (better quality)
    resized = cv2.resize(premultiplied, (new_width, new_height), interpolation=cv2.INTER_AREA)

    out_alpha = resized[:, :, 3:4]
    rgb = np.where(out_alpha > 0, resized[:, :, :3] * 255.0 / np.maximum(out_alpha, 1e-6), 0.0)
    out = np.concatenate([rgb, out_alpha], axis=2)
    return np.clip(np.floor(out + 0.5), 0, 255).astype(np.uint8)
