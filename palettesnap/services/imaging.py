"""
PaletteSnap Imaging Utilities
Decodes uploaded, on-disk or fetched images into RGBA pixel arrays.
"""
import io
import os
from typing import Union

import numpy as np
import requests
from loguru import logger
from PIL import Image, UnidentifiedImageError

from palettesnap.config import config
from palettesnap.errors import DecodeFailure

ImageSource = Union[bytes, bytearray, str, os.PathLike]


def decode_image(file_bytes: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (PNG, JPEG, ...) to an RGBA array.

    Args:
        file_bytes: Raw file bytes

    Returns:
        numpy array (H, W, 4) uint8

    Raises:
        DecodeFailure: For empty, oversized, corrupt or unsupported data
    """
    if not file_bytes:
        raise DecodeFailure("Empty image data")

    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise DecodeFailure(f"File too large. Maximum size: {config.MAX_FILE_MB}MB")

    try:
        pil_image = Image.open(io.BytesIO(file_bytes))
        pil_image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError,
            OSError, SyntaxError, ValueError) as e:
        raise DecodeFailure(f"Failed to decode image: {str(e)}") from e

    # Convert to RGBA so transparency survives into pixel extraction
    if pil_image.mode != 'RGBA':
        pil_image = pil_image.convert('RGBA')

    return np.array(pil_image, dtype=np.uint8)


def fetch_image_bytes(url: str, timeout: float = None) -> bytes:
    """
    Download image bytes from an http(s) URL.

    Raises:
        DecodeFailure: On network errors or non-2xx responses
    """
    if timeout is None:
        timeout = config.FETCH_TIMEOUT_SECONDS

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise DecodeFailure(f"Could not load the image: {str(e)}", source=url) from e

    logger.debug(f"Fetched {len(response.content)} bytes from {url}")
    return response.content


def load_image(source: ImageSource) -> np.ndarray:
    """
    Load an image from bytes, a local path, or an http(s) URL.

    Returns:
        numpy array (H, W, 4) uint8
    """
    if isinstance(source, (bytes, bytearray)):
        return decode_image(bytes(source))

    source = os.fspath(source)
    if source.startswith(("http://", "https://")):
        data = fetch_image_bytes(source)
    else:
        try:
            with open(source, "rb") as f:
                data = f.read()
        except OSError as e:
            raise DecodeFailure(f"Failed to read file: {str(e)}", source=source) from e

    try:
        return decode_image(data)
    except DecodeFailure as e:
        e.source = source
        raise
