"""Tests for the Pillow-backed codec helpers."""

import io

import pytest
from PIL import Image

from thumbnail_pipeline.core.exceptions import DecodeError, EncodeError
from thumbnail_pipeline.core.image_utils import decode_image, encode_image, resize_image
from thumbnail_pipeline.core.models import OutputFormat, ResampleFilter
from thumbnail_pipeline.testing.fakes import create_test_image


class TestDecodeImage:
    """Tests for decode_image."""

    @pytest.mark.parametrize("fmt", ["JPEG", "PNG", "WEBP", "GIF"])
    def test_detects_format_from_content(self, fmt):
        image = decode_image(create_test_image(40, 30, format=fmt))

        assert image.format == fmt
        assert image.size == (40, 30)

    def test_malformed_bytes_raise_decode_error(self):
        with pytest.raises(DecodeError):
            decode_image(b"not an image")

    def test_truncated_image_raises_decode_error(self):
        data = create_test_image(200, 200, format="PNG")

        with pytest.raises(DecodeError):
            decode_image(data[: len(data) // 2])

    def test_empty_body_raises_decode_error(self):
        with pytest.raises(DecodeError):
            decode_image(b"")


class TestResizeImage:
    """Tests for resize_image."""

    def test_resizes_to_exact_size(self):
        image = Image.new("RGB", (100, 50))

        resized = resize_image(image, (40, 20))

        assert resized.size == (40, 20)

    def test_same_size_returns_original(self):
        image = Image.new("RGB", (100, 50))

        assert resize_image(image, (100, 50)) is image

    @pytest.mark.parametrize("resample", list(ResampleFilter))
    def test_every_filter_is_supported(self, resample):
        image = Image.new("RGB", (64, 64))

        assert resize_image(image, (16, 16), resample).size == (16, 16)

    def test_zero_height_raises_encode_error(self):
        image = Image.new("RGB", (100, 1))

        with pytest.raises(EncodeError):
            resize_image(image, (10, 0))


class TestEncodeImage:
    """Tests for encode_image."""

    @pytest.mark.parametrize("output_format", list(OutputFormat))
    def test_round_trips_dimensions(self, output_format):
        image = Image.new("RGB", (32, 16), color="blue")

        body = encode_image(image, output_format)
        decoded = Image.open(io.BytesIO(body))

        assert decoded.format == output_format.pillow_format
        assert decoded.size == (32, 16)

    def test_rgba_to_jpeg_is_flattened(self):
        image = Image.new("RGBA", (10, 10), color=(255, 0, 0, 128))

        decoded = Image.open(io.BytesIO(encode_image(image, OutputFormat.JPEG)))

        assert decoded.mode == "RGB"

    def test_rgba_to_webp_keeps_alpha(self):
        image = Image.new("RGBA", (10, 10), color=(255, 0, 0, 128))

        decoded = Image.open(io.BytesIO(encode_image(image, OutputFormat.WEBP)))

        assert decoded.mode == "RGBA"

    def test_jpeg_quality_changes_output(self):
        image = decode_image(create_test_image(200, 200))

        low = encode_image(image, OutputFormat.JPEG, jpeg_quality=10)
        high = encode_image(image, OutputFormat.JPEG, jpeg_quality=95)

        assert len(low) < len(high)
