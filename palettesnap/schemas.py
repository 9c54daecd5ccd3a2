"""
PaletteSnap Schemas
Pydantic models for engine options and palette request/response validation.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from palettesnap.config import config


class PaletteOptions(BaseModel):
    """Caller-supplied configuration for one palette extraction."""
    strategy: Literal["histogram", "kmeans"] = Field(
        default_factory=lambda: config.DEFAULT_STRATEGY,
        description="Quantizer: exact-frequency 'histogram' or fixed-size 'kmeans'"
    )
    max_dimension: int = Field(
        default_factory=lambda: config.MAX_DIMENSION,
        ge=1,
        le=4096,
        description="Largest image side after downsampling"
    )
    target_color_count: int = Field(
        default_factory=lambda: config.TARGET_COLOR_COUNT,
        ge=1,
        le=64,
        description="Palette size K for the k-means strategy"
    )
    alpha_threshold: int = Field(
        default_factory=lambda: config.ALPHA_THRESHOLD,
        ge=0,
        le=255,
        description="Pixels with alpha below this are ignored"
    )
    exclude_near_white_black: bool = Field(
        default_factory=lambda: config.EXCLUDE_NEAR_WHITE_BLACK,
        description="Ignore near-white (>250) and near-black (<5) pixels"
    )
    max_iterations: int = Field(
        default_factory=lambda: config.KMEANS_MAX_ITERATIONS,
        ge=1,
        le=100,
        description="K-means assignment round cap"
    )
    seed: Optional[int] = Field(
        None,
        ge=0,
        description="Seed for k-means++ seeding; omit for non-deterministic runs"
    )


class PaletteColor(BaseModel):
    """Single palette color with its pixel weight."""
    hex: str = Field(
        ...,
        pattern=r"^#[0-9A-F]{6}$",
        description="Hex color code in format #RRGGBB"
    )
    count: int = Field(..., ge=0, description="Sampled pixels represented by this color")
    ratio: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Share of filtered pixels represented by this color"
    )


class PaletteResponse(BaseModel):
    """Palette extraction response."""
    request_id: str = Field(..., description="Request identifier")
    strategy: str = Field(..., description="Quantizer strategy used")
    width: int = Field(..., description="Source image width in pixels")
    height: int = Field(..., description="Source image height in pixels")
    pixel_count: int = Field(..., description="Pixels left after filtering")
    palette: List[PaletteColor] = Field(..., description="Palette colors")
    is_empty: bool = Field(..., description="No pixels survived filtering")
    is_degenerate: bool = Field(..., description="Fewer colors than requested were found")
    iterations: int = Field(0, description="K-means assignment rounds run")
    swatch_png_b64: Optional[str] = Field(
        None,
        description="Base64-encoded PNG showing the palette strip"
    )


class PaletteByUrlRequest(BaseModel):
    """Palette request for an image reachable over http(s)."""
    image_url: str = Field(..., pattern=r"^https?://", description="Image URL to fetch")
    options: PaletteOptions = Field(default_factory=PaletteOptions)
    order: Literal["engine", "weight", "hue"] = Field("engine", description="Palette ordering")
    include_swatch: bool = Field(False, description="Include swatch PNG in response")


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("palettesnap", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")


class ComplementaryPaletteRequest(BaseModel):
    """Suggestion palette request built from selected base colors."""
    base_colors: List[str] = Field(
        ...,
        min_length=1,
        max_length=10,
        description="Hex colors (#RRGGBB) selected from an extracted palette"
    )
    total_colors: int = Field(10, ge=2, le=20, description="Suggested palette size")


class ComplementaryPaletteResponse(BaseModel):
    """Suggested palette of tints, shades and complements."""
    request_id: str = Field(..., description="Request identifier")
    base_colors: List[str] = Field(..., description="Base colors used")
    palette: List[str] = Field(..., description="Suggested hex colors")
