"""Eligibility checks run before an object is fetched."""

from dataclasses import dataclass
from typing import AbstractSet, List, Optional

from .exceptions import (
    AccessDeniedError,
    ObjectNotFoundError,
    ObjectStoreError,
    UnsupportedFormatError,
)
from .formats import is_image_content_type, resolve_output
from .models import ObjectOutcome, ObjectStatus, PipelineConfig, SkipReason
from .naming import derive_key, is_derived_key
from .observability import LogContext
from .protocols import LoggerProtocol, ObjectStoreProtocol


@dataclass
class FilterDecision:
    """Outcome of the eligibility checks for one object."""

    eligible: bool
    content_type: Optional[str] = None
    outcome: Optional[ObjectOutcome] = None


class ObjectFilter:
    """
    Decides whether an object should be derived.

    Checks short-circuit in this order: metadata retrievable, permission,
    other metadata errors, image content type, content type present, not
    itself a derived key.
    """

    def __init__(
        self,
        store: ObjectStoreProtocol,
        config: PipelineConfig,
        logger: LoggerProtocol,
    ):
        self._store = store
        self._config = config
        self._logger = logger

    def _skip(
        self, bucket: str, key: str, reason: SkipReason
    ) -> FilterDecision:
        outcome = ObjectOutcome(
            bucket=bucket, key=key, status=ObjectStatus.SKIPPED, skip_reason=reason
        )
        return FilterDecision(eligible=False, outcome=outcome)

    def check(
        self, bucket: str, key: str, context: Optional[LogContext] = None
    ) -> FilterDecision:
        context = context or LogContext.for_object(bucket, key, "object_filter")
        context = context.with_operation("filter")

        try:
            head = self._store.head(bucket, key)
        except ObjectNotFoundError:
            self._logger.warning("File not found, skipping", context)
            return self._skip(bucket, key, SkipReason.NOT_FOUND)
        except AccessDeniedError:
            self._logger.warning("Permission denied, skipping", context)
            return self._skip(bucket, key, SkipReason.ACCESS_DENIED)
        except ObjectStoreError as e:
            self._logger.error(
                "Failed to get object metadata", context, error=str(e)
            )
            outcome = ObjectOutcome(
                bucket=bucket, key=key, status=ObjectStatus.FAILED, error=str(e)
            )
            return FilterDecision(eligible=False, outcome=outcome)

        content_type = head.content_type
        if content_type and not is_image_content_type(content_type):
            self._logger.warning(
                "File is not an image, skipping", context, content_type=content_type
            )
            return self._skip(bucket, key, SkipReason.NOT_AN_IMAGE)

        if not content_type:
            self._logger.warning("No content type found, skipping", context)
            return self._skip(bucket, key, SkipReason.MISSING_CONTENT_TYPE)

        if is_derived_key(key):
            self._logger.info("Skipping file because it is already a resize file", context)
            return self._skip(bucket, key, SkipReason.ALREADY_DERIVED)

        return FilterDecision(eligible=True, content_type=content_type)

    def existing_widths(
        self,
        key: str,
        content_type: Optional[str],
        existing_keys: AbstractSet[str],
    ) -> List[int]:
        """
        Widths whose derived key already appears in ``existing_keys``.

        ``existing_keys`` is a point-in-time listing snapshot, so a variant
        written after the snapshot is not seen.
        """
        try:
            _, extension = resolve_output(content_type, self._config.output.force_format)
        except UnsupportedFormatError:
            return []
        return [
            width
            for width in self._config.sizes.widths
            if derive_key(key, width, extension) in existing_keys
        ]

    def variant_exists(
        self, bucket: str, derived_key: str, context: Optional[LogContext] = None
    ) -> bool:
        """HEAD the derived key; unknown answers count as absent."""
        try:
            self._store.head(bucket, derived_key)
        except ObjectNotFoundError:
            return False
        except ObjectStoreError as e:
            self._logger.warning(
                "Could not verify existing variant", context,
                derived_key=derived_key, error=str(e),
            )
            return False
        return True
