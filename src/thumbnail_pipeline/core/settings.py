"""Environment-driven settings, read once at process start."""

from typing import List, Optional, Union

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .models import (
    MULTI_SIZE_WIDTHS,
    ConcurrencyMode,
    OutputFormat,
    OutputPolicy,
    PipelineConfig,
    ResampleFilter,
    SizeConfiguration,
)


class PipelineSettings(BaseSettings):
    """
    Settings for both the event handler and the backfill.

    Environment Variables:
        THUMBNAIL_SIZES: Comma separated or JSON list of widths
        THUMBNAIL_FORCE_FORMAT: jpeg, png or webp; empty keeps the source format
        THUMBNAIL_SKIP_UPSCALING: Keep native size for narrow images
        THUMBNAIL_JPEG_QUALITY: JPEG quality, 1-100
        THUMBNAIL_RESAMPLE: nearest, bilinear, bicubic or lanczos
        THUMBNAIL_CONCURRENCY: serial or multithread
        THUMBNAIL_MAX_WORKERS: Thread pool size for multithread
        THUMBNAIL_PAGE_SIZE: Keys per listing page during backfill
        THUMBNAIL_VERIFY_WITH_HEAD: HEAD each derived key before writing it
        S3_BUCKET: Bucket scanned by the backfill
        S3_ENDPOINT_URL: Endpoint of an S3-compatible store
    """

    model_config = SettingsConfigDict(
        env_prefix="THUMBNAIL_",
        extra="ignore",
        populate_by_name=True,
    )

    sizes: Union[str, List[int]] = Field(default=list(MULTI_SIZE_WIDTHS))
    force_format: Optional[OutputFormat] = OutputFormat.WEBP
    skip_upscaling: bool = True
    jpeg_quality: int = Field(default=90, ge=1, le=100)
    resample: ResampleFilter = ResampleFilter.NEAREST
    concurrency: ConcurrencyMode = ConcurrencyMode.SERIAL
    max_workers: int = Field(default=8, ge=1)
    page_size: int = Field(default=1000, ge=1, le=1000)
    verify_with_head: bool = False

    bucket: Optional[str] = Field(
        default=None, validation_alias="S3_BUCKET"
    )
    endpoint_url: Optional[str] = Field(
        default=None, validation_alias="S3_ENDPOINT_URL"
    )

    @field_validator("sizes", mode="before")
    @classmethod
    def _parse_sizes(cls, value):
        if isinstance(value, int):
            return [value]
        if isinstance(value, str):
            parts = [part.strip() for part in value.strip("[]").split(",")]
            return [int(part) for part in parts if part]
        return value

    @field_validator("force_format", mode="before")
    @classmethod
    def _parse_force_format(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if value in ("", "none", "source"):
                return None
            if value == "jpg":
                return OutputFormat.JPEG
        return value

    @field_validator("bucket", "endpoint_url", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_config(self) -> PipelineConfig:
        """
        Build the immutable configuration passed to the pipeline.

        Raises:
            ConfigurationError: If the settings do not form a valid configuration
        """
        try:
            return PipelineConfig(
                sizes=SizeConfiguration(widths=tuple(self.sizes)),
                output=OutputPolicy(
                    force_format=self.force_format,
                    skip_upscaling=self.skip_upscaling,
                    jpeg_quality=self.jpeg_quality,
                    resample=self.resample,
                ),
                concurrency=self.concurrency,
                max_workers=self.max_workers,
                page_size=self.page_size,
                verify_with_head=self.verify_with_head,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid pipeline configuration: {e}") from e


def load_settings(**overrides) -> PipelineSettings:
    """
    Read settings from the environment.

    Raises:
        ConfigurationError: If a variable cannot be parsed
    """
    try:
        return PipelineSettings(**overrides)
    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e
