"""
Unit tests for image decoding and fetching.
"""
import io

import numpy as np
import pytest
import requests
from PIL import Image

from palettesnap.errors import DecodeFailure
from palettesnap.services import imaging
from palettesnap.services.imaging import decode_image, fetch_image_bytes, load_image


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class TestDecodeImage:
    """Test image decoding into RGBA arrays"""

    def test_png_keeps_alpha(self, encode_png):
        img = np.zeros((4, 6, 4), dtype=np.uint8)
        img[:, :3] = (10, 20, 30, 0)
        img[:, 3:] = (40, 50, 60, 255)

        decoded = decode_image(encode_png(img))

        assert decoded.shape == (4, 6, 4)
        np.testing.assert_array_equal(decoded, img)

    def test_rgb_jpeg_becomes_opaque_rgba(self):
        buffer = io.BytesIO()
        Image.new("RGB", (8, 8), (200, 100, 50)).save(buffer, format="JPEG")

        decoded = decode_image(buffer.getvalue())

        assert decoded.shape == (8, 8, 4)
        assert np.all(decoded[:, :, 3] == 255)

    def test_garbage_raises_decode_failure(self):
        with pytest.raises(DecodeFailure):
            decode_image(b"\x00\x01\x02not-an-image")

    def test_empty_raises_decode_failure(self):
        with pytest.raises(DecodeFailure):
            decode_image(b"")

    def test_truncated_png_raises_decode_failure(self, encode_png):
        rng = np.random.default_rng(0)
        noise = rng.integers(0, 256, size=(64, 64, 4), dtype=np.uint8)
        data = encode_png(noise)
        with pytest.raises(DecodeFailure):
            decode_image(data[: len(data) // 2])


class TestFetchImageBytes:
    """Test URL fetching"""

    def test_returns_content(self, monkeypatch):
        monkeypatch.setattr(imaging.requests, "get", lambda url, timeout: FakeResponse(b"payload"))
        assert fetch_image_bytes("https://example.com/a.png") == b"payload"

    def test_http_error_is_decode_failure(self, monkeypatch):
        monkeypatch.setattr(imaging.requests, "get", lambda url, timeout: FakeResponse(status_code=404))
        with pytest.raises(DecodeFailure) as exc_info:
            fetch_image_bytes("https://example.com/missing.png")
        assert exc_info.value.source == "https://example.com/missing.png"

    def test_network_error_is_decode_failure(self, monkeypatch):
        def boom(url, timeout):
            raise requests.ConnectionError("unreachable")

        monkeypatch.setattr(imaging.requests, "get", boom)
        with pytest.raises(DecodeFailure):
            fetch_image_bytes("https://example.com/a.png")


class TestLoadImage:
    def test_from_url(self, monkeypatch, solid_rgba, encode_png):
        png = encode_png(solid_rgba(5, 5))
        monkeypatch.setattr(imaging.requests, "get", lambda url, timeout: FakeResponse(png))
        assert load_image("https://example.com/red.png").shape == (5, 5, 4)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeFailure) as exc_info:
            load_image(tmp_path / "nope.png")
        assert exc_info.value.source.endswith("nope.png")
