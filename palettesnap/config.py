"""
PaletteSnap Configuration
Manages environment variables and defaults for the palette engine and API.
"""
import os
from typing import Literal


class Config:
    """Configuration class for PaletteSnap services."""

    # Downsampling bound (largest image side submitted to quantization)
    MAX_DIMENSION: int = int(os.environ.get("PALETTESNAP_MAX_DIMENSION", "150"))

    # Quantizer defaults
    DEFAULT_STRATEGY: Literal["histogram", "kmeans"] = os.environ.get("PALETTESNAP_DEFAULT_STRATEGY", "kmeans")
    TARGET_COLOR_COUNT: int = int(os.environ.get("PALETTESNAP_TARGET_COLOR_COUNT", "6"))
    KMEANS_MAX_ITERATIONS: int = int(os.environ.get("PALETTESNAP_KMEANS_MAX_ITERATIONS", "20"))

    # Pixel filtering
    ALPHA_THRESHOLD: int = int(os.environ.get("PALETTESNAP_ALPHA_THRESHOLD", "128"))
    EXCLUDE_NEAR_WHITE_BLACK: bool = bool(int(os.environ.get("PALETTESNAP_EXCLUDE_NEAR_WHITE_BLACK", "0")))
    NEAR_WHITE_MIN: int = 250
    NEAR_BLACK_MAX: int = 5

    # Logging
    LOG_LEVEL: str = os.environ.get("PALETTESNAP_LOG_LEVEL", "INFO")

    # Image input
    MAX_FILE_MB: int = int(os.environ.get("PALETTESNAP_MAX_FILE_MB", "10"))
    FETCH_TIMEOUT_SECONDS: float = float(os.environ.get("PALETTESNAP_FETCH_TIMEOUT_SECONDS", "10"))


# Global config instance
config = Config()
