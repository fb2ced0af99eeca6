"""Custom exceptions for the thumbnail pipeline."""

from __future__ import annotations

from typing import Optional


class ThumbnailPipelineError(Exception):
    """Base exception for all thumbnail pipeline errors."""


class ConfigurationError(ThumbnailPipelineError):
    """Error raised for invalid configuration or an unusable store client."""


class ObjectStoreError(ThumbnailPipelineError):
    """Error raised for object store failures."""

    def __init__(
        self,
        message: str,
        bucket: str = "",
        key: str = "",
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.bucket = bucket
        self.key = key
        self.code = code


class ObjectNotFoundError(ObjectStoreError):
    """The object does not exist (deleted or moved since it was referenced)."""


class AccessDeniedError(ObjectStoreError):
    """The store refused access to the object."""


class ListingError(ObjectStoreError):
    """Listing the bucket failed; a backfill cannot continue."""


class ImageProcessingError(ThumbnailPipelineError):
    """Error raised when deriving an image fails."""


class DecodeError(ImageProcessingError):
    """The fetched bytes are not a decodable image."""


class EncodeError(ImageProcessingError):
    """Resizing or encoding a variant failed."""


class UnsupportedFormatError(ImageProcessingError):
    """No output format exists for the source content type."""
