"""Mapping between content types and output formats."""

from typing import Dict, Optional, Tuple

from .exceptions import UnsupportedFormatError
from .models import OutputFormat

IMAGE_CONTENT_PREFIX = "image/"

CONTENT_TYPES: Dict[str, OutputFormat] = {
    "image/jpeg": OutputFormat.JPEG,
    "image/png": OutputFormat.PNG,
    "image/webp": OutputFormat.WEBP,
}


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a content type and drop parameters such as ``; charset=``."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_image_content_type(content_type: Optional[str]) -> bool:
    return normalize_content_type(content_type).startswith(IMAGE_CONTENT_PREFIX)


def resolve_output(
    source_content_type: Optional[str],
    force_format: Optional[OutputFormat] = None,
) -> Tuple[OutputFormat, str]:
    """
    Choose the output format and extension for a variant.

    A forced format always wins. Otherwise the source content type must be
    one of JPEG, PNG or WebP.

    Raises:
        UnsupportedFormatError: If no format can be chosen
    """
    if force_format is not None:
        return force_format, force_format.extension

    output_format = CONTENT_TYPES.get(normalize_content_type(source_content_type))
    if output_format is None:
        raise UnsupportedFormatError(
            f"Unsupported image format: {source_content_type or '<none>'}"
        )
    return output_format, output_format.extension


def content_type_for(output_format: OutputFormat) -> str:
    return output_format.content_type
