"""Pillow-backed decode, resize and encode helpers for the thumbnail pipeline."""

import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, EncodeError
from .models import OutputFormat, ResampleFilter

RESAMPLE_FILTERS = {
    ResampleFilter.NEAREST: Image.Resampling.NEAREST,
    ResampleFilter.BILINEAR: Image.Resampling.BILINEAR,
    ResampleFilter.BICUBIC: Image.Resampling.BICUBIC,
    ResampleFilter.LANCZOS: Image.Resampling.LANCZOS,
}

# Modes each encoder accepts without conversion
ENCODABLE_MODES = {
    OutputFormat.JPEG: ("RGB", "L", "CMYK"),
    OutputFormat.PNG: ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"),
    OutputFormat.WEBP: ("RGB", "RGBA"),
}


def decode_image(image_bytes: bytes) -> "Image.Image":
    """
    Decode image bytes, detecting the format from the content itself.

    The declared content type of the object is not trusted here: mislabeled
    uploads decode by their actual signature or fail.

    Args:
        image_bytes: Raw object body

    Returns:
        Fully loaded PIL Image

    Raises:
        DecodeError: If the bytes are not a decodable image or have no width
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as err:
        raise DecodeError(f"Failed to decode image: {err}") from err

    if image.width <= 0 or image.height <= 0:
        raise DecodeError(f"Decoded image has degenerate size {image.size}")
    return image


def resize_image(
    image: "Image.Image",
    size: Tuple[int, int],
    resample: ResampleFilter = ResampleFilter.NEAREST,
) -> "Image.Image":
    """
    Resize to exactly ``size``; returns the image itself when nothing changes.

    Raises:
        EncodeError: If Pillow rejects the target size
    """
    if image.size == tuple(size):
        return image
    try:
        return image.resize(size, RESAMPLE_FILTERS[resample])
    except (ValueError, OSError) as err:
        raise EncodeError(f"Failed to resize image to {size[0]}x{size[1]}: {err}") from err


def _prepare_mode(image: "Image.Image", output_format: OutputFormat) -> "Image.Image":
    if image.mode in ENCODABLE_MODES[output_format]:
        return image
    has_alpha = image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )
    if output_format is OutputFormat.WEBP and has_alpha:
        return image.convert("RGBA")
    return image.convert("RGB")


def encode_image(
    image: "Image.Image",
    output_format: OutputFormat,
    jpeg_quality: int = 90,
) -> bytes:
    """
    Encode an image fully into memory.

    Args:
        image: PIL Image to encode
        output_format: Target encoding
        jpeg_quality: Quality used for JPEG output

    Returns:
        The complete encoded body

    Raises:
        EncodeError: If Pillow cannot encode the image
    """
    buffer = io.BytesIO()
    save_kwargs = {}
    if output_format is OutputFormat.JPEG:
        save_kwargs["quality"] = jpeg_quality

    try:
        prepared = _prepare_mode(image, output_format)
        prepared.save(buffer, format=output_format.pillow_format, **save_kwargs)
    except (OSError, ValueError, KeyError) as err:
        raise EncodeError(
            f"Failed to encode image as {output_format.pillow_format}: {err}"
        ) from err
    return buffer.getvalue()
