"""Unit tests for the Pillow codec adapter."""

import io

import pytest
from PIL import Image

from image_renderer.core.codec import PillowCodec
from image_renderer.core.exceptions import DecodeError, EncodeError, InternalError
from image_renderer.core.models import TargetFormat
from image_renderer.testing.fakes import create_test_image


@pytest.fixture
def codec():
    return PillowCodec()


class TestDecode:
    def test_decode_png(self, codec):
        image = codec.decode(io.BytesIO(create_test_image(40, 30)))
        assert image.size == (40, 30)

    def test_decode_jpeg(self, codec):
        image = codec.decode(io.BytesIO(create_test_image(20, 10, image_format="JPEG")))
        assert image.size == (20, 10)

    def test_decode_garbage(self, codec):
        with pytest.raises(DecodeError) as excinfo:
            codec.decode(io.BytesIO(b"this is not an image"))
        assert excinfo.value.reason.startswith("decode failed:")

    def test_decode_truncated(self, codec):
        data = create_test_image(200, 200, image_format="JPEG")
        with pytest.raises(DecodeError):
            codec.decode(io.BytesIO(data[: len(data) // 3]))

    def test_decode_without_stream_is_internal_error(self, codec):
        with pytest.raises(InternalError):
            codec.decode(None)


class TestResize:
    def test_resize_to_exact_size(self, codec):
        image = Image.new("RGB", (100, 50), "red")
        resized = codec.resize(image, 30, 70)
        assert resized.size == (30, 70)

    def test_upscale(self, codec):
        image = Image.new("RGB", (4, 4), "red")
        assert codec.resize(image, 1024, 1024).size == (1024, 1024)

    def test_non_positive_size_returns_none(self, codec):
        image = Image.new("RGB", (10, 10), "red")
        assert codec.resize(image, 0, 10) is None
        assert codec.resize(image, 10, -1) is None


class TestEncode:
    @pytest.mark.parametrize("target_format", list(TargetFormat))
    def test_encode_every_format_from_rgb(self, codec, target_format):
        image = Image.new("RGB", (32, 32), "blue")
        data = codec.encode(image, target_format, 75)
        decoded = Image.open(io.BytesIO(data))
        assert decoded.format == target_format.pillow_format

    @pytest.mark.parametrize("target_format", list(TargetFormat))
    def test_encode_every_format_from_rgba(self, codec, target_format):
        image = Image.new("RGBA", (16, 16), (255, 0, 0, 128))
        data = codec.encode(image, target_format, 50)
        assert len(data) > 0

    def test_quality_affects_jpeg_size(self, codec):
        image = Image.open(io.BytesIO(create_test_image(256, 256))).convert("RGB")
        low = codec.encode(image, TargetFormat.JPEG, 25)
        ultra = codec.encode(image, TargetFormat.JPEG, 100)
        assert len(low) < len(ultra)

    @pytest.mark.parametrize("side", [8, 16, 48, 256])
    def test_ico_keeps_exact_size(self, codec, side):
        image = Image.new("RGB", (side, side), "blue")
        data = codec.encode(image, TargetFormat.ICO, 75)
        with Image.open(io.BytesIO(data)) as decoded:
            assert decoded.format == "ICO"
            assert decoded.size == (side, side)

    @pytest.mark.parametrize("size", [(300, 300), (1024, 1024), (16, 257)])
    def test_ico_too_large_is_encode_error(self, codec, size):
        with pytest.raises(EncodeError) as excinfo:
            codec.encode(Image.new("RGB", size, "blue"), TargetFormat.ICO, 75)
        assert excinfo.value.reason.startswith("encode failed:")
