"""
Palette engine.

Runs the full pipeline for one image:

    RGBA pixels -> downsample -> filter -> quantize -> hex entries

Every call is synchronous and self-contained. No state is shared
between calls, so hosts may run it inline, in a thread pool or in a
separate process.
"""

import colorsys
import time
from typing import List, Optional

import numpy as np
from loguru import logger

from palettesnap.schemas import PaletteOptions
from palettesnap.services.imaging import ImageSource, load_image
from .downsample import downsample_rgba
from .encoding import hex_to_rgb
from .extraction import PixelBuffer, as_rgba_array, extract_pixels
from .histogram import build_histogram
from .kmeans import RandomSource, kmeans_palette
from .models import ColorCount, PaletteResult


def quantize(pixels: np.ndarray, options: Optional[PaletteOptions] = None,
             rng: RandomSource = None) -> PaletteResult:
    """
    Quantize a PixelSet with the strategy named in ``options``.

    Args:
        pixels: Opaque RGB pixels (N, 3) uint8
        options: Engine options (defaults from config)
        rng: Overrides ``options.seed`` for k-means++ seeding

    Returns:
        PaletteResult. The histogram strategy keeps every distinct color;
        use ``result.palette(k)`` for a fixed-size prefix.
    """
    options = options or PaletteOptions()
    if rng is None:
        rng = options.seed

    if options.strategy == "histogram":
        entries = build_histogram(pixels)
        return PaletteResult(
            strategy="histogram",
            entries=entries,
            pixel_count=int(len(pixels)),
            requested_colors=options.target_color_count,
        )

    if options.strategy == "kmeans":
        return kmeans_palette(
            pixels,
            options.target_color_count,
            max_iterations=options.max_iterations,
            rng=rng,
        )

    raise ValueError(f"Unknown quantizer strategy: {options.strategy!r}")


def extract_palette(data: PixelBuffer, options: Optional[PaletteOptions] = None,
                    width: Optional[int] = None, height: Optional[int] = None,
                    rng: RandomSource = None) -> PaletteResult:
    """
    Extract a palette from decoded RGBA pixels.

    Args:
        data: (H, W, 4) uint8 array or flat row-major RGBA buffer
        options: Engine options (defaults from config)
        width: Buffer width, required for flat buffers
        height: Buffer height, required for flat buffers
        rng: Overrides ``options.seed`` for k-means++ seeding
    """
    options = options or PaletteOptions()
    start_time = time.time()

    rgba = as_rgba_array(data, width, height)
    source_height, source_width = rgba.shape[:2]
    small = downsample_rgba(rgba, options.max_dimension)
    downsample_ms = (time.time() - start_time) * 1000

    filter_start = time.time()
    pixels = extract_pixels(
        small,
        alpha_threshold=options.alpha_threshold,
        exclude_near_white_black=options.exclude_near_white_black,
    )
    filter_ms = (time.time() - filter_start) * 1000

    quantize_start = time.time()
    result = quantize(pixels, options, rng=rng)
    quantize_ms = (time.time() - quantize_start) * 1000

    logger.bind(
        strategy=result.strategy,
        source_size=f"{source_width}x{source_height}",
        sampled_size=f"{small.shape[1]}x{small.shape[0]}",
    ).debug(
        f"Palette extracted: {len(result.entries)} colors from {result.pixel_count} pixels "
        f"(downsample {downsample_ms:.1f}ms, filter {filter_ms:.1f}ms, quantize {quantize_ms:.1f}ms)"
    )
    return result


def generate_palette_from_image(source: ImageSource, options: Optional[PaletteOptions] = None,
                                rng: RandomSource = None) -> PaletteResult:
    """
    Decode an image from bytes, a path or a URL and extract its palette.

    Raises:
        DecodeFailure: If the image cannot be read, fetched or decoded
    """
    rgba = load_image(source)
    return extract_palette(rgba, options, rng=rng)


def sort_by_hue(entries: List[ColorCount]) -> List[ColorCount]:
    """
    Order palette entries by hue, then saturation, then lightness.

    Ordering is a presentation choice; quantizer output order is left
    untouched.
    """
    if not entries:
        return []

    hls = [colorsys.rgb_to_hls(*(channel / 255.0 for channel in hex_to_rgb(entry.hex)))
           for entry in entries]

    # colorsys gives (H, L, S); sort on hue, saturation, lightness
    order = sorted(range(len(entries)), key=lambda i: (hls[i][0], hls[i][2], hls[i][1]))
    return [entries[i] for i in order]
