"""Core utilities and shared components for the thumbnail pipeline."""

from .exceptions import (
    AccessDeniedError,
    ConfigurationError,
    DecodeError,
    EncodeError,
    ImageProcessingError,
    ListingError,
    ObjectNotFoundError,
    ObjectStoreError,
    ThumbnailPipelineError,
    UnsupportedFormatError,
)
from .formats import resolve_output
from .logging_config import get_logger, setup_logger
from .models import (
    BatchReport,
    DerivedVariant,
    ObjectOutcome,
    ObjectStatus,
    OutputFormat,
    OutputPolicy,
    PipelineConfig,
    SizeConfiguration,
    SizeOutcome,
    SizeStatus,
    SkipReason,
    SourceObject,
    WorkItem,
)
from .naming import DERIVED_KEY_MARKER, derive_key, is_derived_key, rewrite_width_uri
from .planner import plan_width

__all__ = [
    "AccessDeniedError",
    "BatchReport",
    "ConfigurationError",
    "DERIVED_KEY_MARKER",
    "DecodeError",
    "DerivedVariant",
    "EncodeError",
    "ImageProcessingError",
    "ListingError",
    "ObjectNotFoundError",
    "ObjectOutcome",
    "ObjectStatus",
    "ObjectStoreError",
    "OutputFormat",
    "OutputPolicy",
    "PipelineConfig",
    "SizeConfiguration",
    "SizeOutcome",
    "SizeStatus",
    "SkipReason",
    "SourceObject",
    "ThumbnailPipelineError",
    "UnsupportedFormatError",
    "WorkItem",
    "derive_key",
    "get_logger",
    "is_derived_key",
    "plan_width",
    "resolve_output",
    "rewrite_width_uri",
    "setup_logger",
]
