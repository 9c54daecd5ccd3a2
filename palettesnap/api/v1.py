"""
PaletteSnap v1 API Routes
Implements /v1/palette endpoints on top of the palette engine.
"""
import time
from typing import Optional

import numpy as np
from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from loguru import logger
from starlette.concurrency import run_in_threadpool

from palettesnap.config import config
from palettesnap.errors import DecodeFailure
from palettesnap.schemas import (
    ComplementaryPaletteRequest, ComplementaryPaletteResponse, ErrorResponse,
    PaletteByUrlRequest, PaletteColor, PaletteOptions, PaletteResponse
)
from palettesnap.services.colors.encoding import hex_to_rgb, rgb_to_hex
from palettesnap.services.colors.engine import extract_palette, sort_by_hue
from palettesnap.services.colors.harmony import generate_complementary_palette
from palettesnap.services.colors.models import PaletteResult
from palettesnap.services.colors.swatches import render_swatch_strip
from palettesnap.services.imaging import decode_image, fetch_image_bytes
from palettesnap.utils.ids import generate_request_id
from palettesnap.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["Palette"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Image could not be decoded"},
    422: {"model": ErrorResponse, "description": "Invalid parameters"},
}


def _ordered_entries(result: PaletteResult, order: str):
    if order == "hue":
        return sort_by_hue(result.entries)
    if order == "weight":
        return sorted(result.entries, key=lambda entry: -entry.count)
    return list(result.entries)


def build_palette_response(request_id: str, rgba: np.ndarray, result: PaletteResult,
                           order: str = "engine", include_swatch: bool = False) -> PaletteResponse:
    """Shape an engine result into the API response model."""
    height, width = rgba.shape[:2]
    entries = _ordered_entries(result, order)
    total = result.pixel_count

    palette = [
        PaletteColor(
            hex=entry.hex,
            count=entry.count,
            ratio=(entry.count / total) if total else 0.0
        )
        for entry in entries
    ]

    swatch = None
    if include_swatch and entries:
        swatch = render_swatch_strip(
            [entry.hex for entry in entries],
            weights=[entry.count for entry in entries]
        )

    return PaletteResponse(
        request_id=request_id,
        strategy=result.strategy,
        width=width,
        height=height,
        pixel_count=total,
        palette=palette,
        is_empty=result.is_empty,
        is_degenerate=result.is_degenerate,
        iterations=result.iterations,
        swatch_png_b64=swatch
    )


async def _process(request_id: str, image_bytes: Optional[bytes], options: PaletteOptions,
                   order: str, include_swatch: bool, image_url: Optional[str] = None) -> PaletteResponse:
    metrics = get_metrics()
    metrics.increment_request_count()
    request_logger = logger.bind(request_id=request_id)
    start_time = time.time()

    try:
        if image_url is not None:
            image_bytes = await run_in_threadpool(fetch_image_bytes, image_url)
        # Decoding and quantization are CPU-bound; keep them off the event loop
        rgba = await run_in_threadpool(decode_image, image_bytes)
        result = await run_in_threadpool(extract_palette, rgba, options)
    except DecodeFailure as e:
        metrics.increment_failure_count("decode")
        request_logger.warning(f"Image decode failed: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        metrics.increment_failure_count("invalid_input")
        request_logger.warning(f"Invalid palette request: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    metrics.increment_strategy_count(result.strategy)
    if result.is_empty:
        metrics.increment_empty_count()

    response = build_palette_response(request_id, rgba, result, order, include_swatch)

    duration_ms = (time.time() - start_time) * 1000
    metrics.record_timing("palette", duration_ms)
    request_logger.info(
        f"Palette complete: {len(response.palette)} colors via {result.strategy} in {duration_ms:.1f}ms"
    )
    return response


@router.post("/palette",
             response_model=PaletteResponse,
             responses=ERROR_RESPONSES,
             summary="Extract Palette",
             description="Extract a representative color palette from an uploaded image")
async def create_palette(
    file: UploadFile = File(..., description="Image file (PNG, JPEG, ...)"),
    strategy: str = Query(config.DEFAULT_STRATEGY, pattern="^(histogram|kmeans)$", description="Quantizer strategy"),
    k: int = Query(config.TARGET_COLOR_COUNT, ge=1, le=64, description="Palette size for k-means"),
    max_dimension: int = Query(config.MAX_DIMENSION, ge=1, le=4096, description="Downsampling bound"),
    alpha_threshold: int = Query(config.ALPHA_THRESHOLD, ge=0, le=255, description="Transparency cutoff"),
    exclude_near_white_black: bool = Query(config.EXCLUDE_NEAR_WHITE_BLACK, description="Drop near-white/black pixels"),
    max_iterations: int = Query(config.KMEANS_MAX_ITERATIONS, ge=1, le=100, description="K-means round cap"),
    seed: Optional[int] = Query(None, ge=0, description="Seed for reproducible k-means"),
    order: str = Query("engine", pattern="^(engine|weight|hue)$", description="Palette ordering"),
    include_swatch: bool = Query(False, description="Include swatch PNG in response")
) -> PaletteResponse:
    """
    Extract a palette from a multipart image upload.

    **Strategies:**
    - **histogram**: every distinct color with its exact pixel count
    - **kmeans**: exactly ``k`` colors (fewer if the image has fewer)
    """
    request_id = generate_request_id()
    options = PaletteOptions(
        strategy=strategy,
        target_color_count=k,
        max_dimension=max_dimension,
        alpha_threshold=alpha_threshold,
        exclude_near_white_black=exclude_near_white_black,
        max_iterations=max_iterations,
        seed=seed
    )
    content = await file.read()
    return await _process(request_id, content, options, order, include_swatch)


@router.post("/palette/by-url",
             response_model=PaletteResponse,
             responses=ERROR_RESPONSES,
             summary="Extract Palette By URL",
             description="Fetch an image over http(s) and extract its palette")
async def create_palette_by_url(body: PaletteByUrlRequest) -> PaletteResponse:
    request_id = generate_request_id()
    return await _process(
        request_id, None, body.options, body.order, body.include_swatch, image_url=body.image_url
    )


@router.post("/palette/complementary",
             response_model=ComplementaryPaletteResponse,
             responses={422: ERROR_RESPONSES[422]},
             summary="Suggest Complementary Palette",
             description="Build tints, shades and +180° complements from selected base colors")
def create_complementary_palette(body: ComplementaryPaletteRequest) -> ComplementaryPaletteResponse:
    request_id = generate_request_id("cmp")
    try:
        palette = generate_complementary_palette(body.base_colors, body.total_colors)
    except ValueError as e:
        get_metrics().increment_failure_count("invalid_input")
        raise HTTPException(status_code=422, detail=str(e))

    logger.bind(request_id=request_id).info(
        f"Complementary palette: {len(body.base_colors)} bases -> {len(palette)} colors"
    )
    return ComplementaryPaletteResponse(
        request_id=request_id,
        base_colors=[rgb_to_hex(*hex_to_rgb(color)) for color in body.base_colors],
        palette=palette
    )
