"""
Pixel extraction for palette quantization.

Turns decoded RGBA pixel data into the flat set of opaque RGB samples
that the quantizers consume. Filtering rules:

- pixels whose alpha is below ``alpha_threshold`` are dropped
- optionally, near-white (every channel > 250) and near-black
  (every channel < 5) pixels are dropped so flat backgrounds do not
  dominate the palette

An empty result is valid; the quantizers return an empty palette for it.
"""

from typing import Optional, Union

import numpy as np
from loguru import logger

from palettesnap.config import config

PixelBuffer = Union[np.ndarray, bytes, bytearray, memoryview]


def as_rgba_array(data: PixelBuffer, width: Optional[int] = None,
                  height: Optional[int] = None) -> np.ndarray:
    """
    Normalize pixel input to an (H, W, 4) uint8 array.

    Args:
        data: (H, W, 4) array, or a flat row-major RGBA byte buffer
        width: Buffer width, required for flat buffers
        height: Buffer height, required for flat buffers

    Raises:
        ValueError: If the buffer does not hold width * height RGBA pixels
    """
    if isinstance(data, np.ndarray) and data.ndim == 3:
        if data.shape[2] != 4:
            raise ValueError(f"Expected RGBA image with 4 channels, got {data.shape[2]}")
        return data.astype(np.uint8, copy=False)

    if width is None or height is None:
        raise ValueError("width and height are required for flat pixel buffers")

    if isinstance(data, np.ndarray):
        flat = data.astype(np.uint8, copy=False).ravel()
    else:
        flat = np.frombuffer(bytes(data), dtype=np.uint8)
    expected = int(width) * int(height) * 4
    if flat.size != expected:
        raise ValueError(
            f"Pixel buffer size mismatch: got {flat.size} bytes, "
            f"expected {expected} for {width}x{height} RGBA"
        )
    return flat.reshape(int(height), int(width), 4)


def extract_pixels(data: PixelBuffer, width: Optional[int] = None, height: Optional[int] = None,
                   alpha_threshold: int = None,
                   exclude_near_white_black: bool = None) -> np.ndarray:
    """
    Filter decoded RGBA pixels into an (N, 3) uint8 PixelSet.

    Args:
        data: (H, W, 4) array or flat RGBA buffer
        width: Buffer width, required for flat buffers
        height: Buffer height, required for flat buffers
        alpha_threshold: Pixels with alpha below this are dropped (default from config)
        exclude_near_white_black: Drop near-white and near-black pixels (default from config)

    Returns:
        Opaque RGB pixels in row-major source order
    """
    if alpha_threshold is None:
        alpha_threshold = config.ALPHA_THRESHOLD
    if exclude_near_white_black is None:
        exclude_near_white_black = config.EXCLUDE_NEAR_WHITE_BLACK

    rgba = as_rgba_array(data, width, height).reshape(-1, 4)
    total = rgba.shape[0]

    keep_mask = rgba[:, 3] >= alpha_threshold
    logger.debug(f"Alpha filter: kept {int(np.sum(keep_mask))}/{total} pixels")

    if exclude_near_white_black:
        rgb = rgba[:, :3]
        near_white = np.all(rgb > config.NEAR_WHITE_MIN, axis=1)
        near_black = np.all(rgb < config.NEAR_BLACK_MAX, axis=1)
        keep_mask &= ~(near_white | near_black)
        logger.debug(f"Near white/black filter: kept {int(np.sum(keep_mask))}/{total} pixels")

    pixels = np.ascontiguousarray(rgba[keep_mask, :3])
    if pixels.shape[0] == 0:
        logger.info(f"No pixels left after filtering {total} candidates")
    return pixels
