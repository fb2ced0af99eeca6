"""Shared data models for the thumbnail pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

MULTI_SIZE_WIDTHS: Tuple[int, ...] = (128, 256, 384, 640, 750, 828, 1080, 1200, 1440, 1920)
SINGLE_SIZE_WIDTHS: Tuple[int, ...] = (500,)


class OutputFormat(str, Enum):
    """Encodings a derived variant can be written in."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"

    @property
    def extension(self) -> str:
        return "jpg" if self is OutputFormat.JPEG else self.value

    @property
    def content_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pillow_format(self) -> str:
        return self.value.upper()


class ResampleFilter(str, Enum):
    """Resampling filters accepted by the resize step."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS = "lanczos"


class ConcurrencyMode(str, Enum):
    """How objects inside one batch or listing page are scheduled."""

    SERIAL = "serial"
    MULTITHREAD = "multithread"


class SizeConfiguration(BaseModel):
    """Ordered set of target widths."""

    model_config = ConfigDict(frozen=True)

    widths: Tuple[int, ...] = MULTI_SIZE_WIDTHS

    @field_validator("widths")
    @classmethod
    def _validate_widths(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if not value:
            raise ValueError("at least one target width is required")
        if any(width <= 0 for width in value):
            raise ValueError(f"target widths must be positive, got {list(value)}")
        # dict.fromkeys keeps first-seen order
        return tuple(dict.fromkeys(value))


class OutputPolicy(BaseModel):
    """How variants are encoded."""

    model_config = ConfigDict(frozen=True)

    force_format: Optional[OutputFormat] = None
    skip_upscaling: bool = True
    jpeg_quality: int = Field(default=90, ge=1, le=100)
    resample: ResampleFilter = ResampleFilter.NEAREST


class PipelineConfig(BaseModel):
    """Process-wide configuration, built once at startup."""

    model_config = ConfigDict(frozen=True)

    sizes: SizeConfiguration = Field(default_factory=SizeConfiguration)
    output: OutputPolicy = Field(default_factory=OutputPolicy)
    concurrency: ConcurrencyMode = ConcurrencyMode.SERIAL
    max_workers: int = Field(default=8, ge=1)
    page_size: int = Field(default=1000, ge=1, le=1000)
    verify_with_head: bool = False


class SourceObject(BaseModel):
    """An original image fetched from the store."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    content_type: Optional[str] = None
    body: bytes = b""


class DerivedVariant(BaseModel):
    """An encoded variant ready for upload."""

    model_config = ConfigDict(frozen=True)

    source_key: str
    target_width: int
    output_format: OutputFormat
    derived_key: str
    body: bytes
    dimensions: Tuple[int, int]

    @property
    def content_type(self) -> str:
        return self.output_format.content_type


class HeadResult(BaseModel):
    """Metadata returned by a HEAD on an object."""

    content_type: Optional[str] = None
    content_length: Optional[int] = None


class ListPage(BaseModel):
    """One page of a bucket listing."""

    keys: List[str] = Field(default_factory=list)
    next_token: Optional[str] = None


@dataclass(frozen=True)
class WorkItem:
    """A single object scheduled for derivation."""

    bucket: str
    key: str
    # Listing snapshot shared by every item of a page; None outside backfill
    existing_keys: Optional[FrozenSet[str]] = None


class SizeStatus(str, Enum):
    UPLOADED = "uploaded"
    SKIPPED = "skipped"
    FAILED = "failed"


class ObjectStatus(str, Enum):
    PROCESSED = "processed"
    PARTIAL = "partial"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    NOT_AN_IMAGE = "not_an_image"
    MISSING_CONTENT_TYPE = "missing_content_type"
    ALREADY_DERIVED = "already_derived"
    ALREADY_EXISTS = "already_exists"


class SizeOutcome(BaseModel):
    """Result of deriving one target width."""

    width: int
    status: SizeStatus
    derived_key: str = ""
    reason: str = ""
    dimensions: Optional[Tuple[int, int]] = None


class ObjectOutcome(BaseModel):
    """Result of running the pipeline on one source object."""

    bucket: str
    key: str
    status: ObjectStatus = ObjectStatus.PROCESSED
    skip_reason: Optional[SkipReason] = None
    error: str = ""
    sizes: List[SizeOutcome] = Field(default_factory=list)
    processing_time: float = 0.0

    @property
    def uploaded_keys(self) -> List[str]:
        return [s.derived_key for s in self.sizes if s.status is SizeStatus.UPLOADED]

    @property
    def failed_widths(self) -> List[int]:
        return [s.width for s in self.sizes if s.status is SizeStatus.FAILED]

    def finalize(self) -> "ObjectOutcome":
        """Derive the object status from its per-size outcomes."""
        if self.status in (ObjectStatus.SKIPPED, ObjectStatus.FAILED):
            return self
        uploaded = len(self.uploaded_keys)
        failed = len(self.failed_widths)
        if failed and not uploaded:
            self.status = ObjectStatus.FAILED
        elif failed:
            self.status = ObjectStatus.PARTIAL
        elif self.sizes and all(s.status is SizeStatus.SKIPPED for s in self.sizes):
            self.status = ObjectStatus.SKIPPED
            self.skip_reason = SkipReason.ALREADY_EXISTS
        else:
            self.status = ObjectStatus.PROCESSED
        return self


class BatchReport(BaseModel):
    """Aggregated outcomes of an event batch or a backfill run."""

    outcomes: List[ObjectOutcome] = Field(default_factory=list)
    pages: int = 0

    def extend(self, outcomes: List[ObjectOutcome]) -> None:
        self.outcomes.extend(outcomes)

    def _count(self, *statuses: ObjectStatus) -> int:
        return sum(1 for o in self.outcomes if o.status in statuses)

    @property
    def processed_count(self) -> int:
        return self._count(ObjectStatus.PROCESSED, ObjectStatus.PARTIAL)

    @property
    def skipped_count(self) -> int:
        return self._count(ObjectStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(ObjectStatus.FAILED)

    @property
    def uploaded_count(self) -> int:
        return sum(len(o.uploaded_keys) for o in self.outcomes)

    def summary(self) -> Dict[str, Any]:
        return {
            "total_items": len(self.outcomes),
            "processed_count": self.processed_count,
            "skipped_count": self.skipped_count,
            "failed_count": self.failed_count,
            "uploaded_count": self.uploaded_count,
            "pages": self.pages,
        }
