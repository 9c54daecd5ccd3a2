"""
Test configuration and fixtures for PaletteSnap tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from palettesnap.main import app


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from palettesnap.utils.metrics import reset_metrics
    reset_metrics()


@pytest.fixture
def solid_rgba():
    """Factory for (H, W, 4) images filled with one RGBA value."""
    def make(width, height, rgba=(255, 0, 0, 255)):
        img = np.zeros((height, width, 4), dtype=np.uint8)
        img[:, :] = rgba
        return img
    return make


@pytest.fixture
def checkerboard_rgba():
    """10x10 opaque checkerboard of white and black pixels."""
    ys, xs = np.indices((10, 10))
    white = (xs + ys) % 2 == 0
    img = np.zeros((10, 10, 4), dtype=np.uint8)
    img[white] = (255, 255, 255, 255)
    img[~white] = (0, 0, 0, 255)
    return img


@pytest.fixture
def encode_png():
    """Encode an RGBA array as PNG bytes."""
    def encode(rgba):
        buffer = io.BytesIO()
        Image.fromarray(rgba).save(buffer, format="PNG")
        return buffer.getvalue()
    return encode
