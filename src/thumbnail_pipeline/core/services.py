"""Derivation pipeline and the drivers that feed it."""

import time
from typing import AbstractSet, Any, Callable, Dict, Iterator, List, Optional, Tuple
from urllib.parse import unquote_plus

from PIL import Image

from .error_handling import BatchOperationContextManager
from .exceptions import (
    ImageProcessingError,
    ListingError,
    ObjectNotFoundError,
    ObjectStoreError,
    UnsupportedFormatError,
)
from .filters import ObjectFilter
from .formats import resolve_output
from .image_utils import decode_image, encode_image, resize_image
from .models import (
    BatchReport,
    DerivedVariant,
    ListPage,
    ObjectOutcome,
    ObjectStatus,
    OutputFormat,
    PipelineConfig,
    SizeOutcome,
    SizeStatus,
    SkipReason,
    SourceObject,
    WorkItem,
)
from .naming import derive_key, is_derived_key
from .observability import LogContext
from .planner import plan_width
from .protocols import LoggerProtocol, ObjectStoreProtocol
from ..processors.serial import process_batch as serial_process_batch

ProcessBatchFunction = Callable[["DerivationPipeline", List[WorkItem]], List[ObjectOutcome]]


class DerivationPipeline:
    """
    Derives every configured width for one source object.

    Fetch and decode failures abandon the object; a failure while deriving
    one width only abandons that width.
    """

    def __init__(
        self,
        store: ObjectStoreProtocol,
        config: PipelineConfig,
        logger: LoggerProtocol,
        object_filter: Optional[ObjectFilter] = None,
    ):
        self._store = store
        self._config = config
        self._logger = logger
        self._filter = object_filter or ObjectFilter(store, config, logger)

    @property
    def config(self) -> PipelineConfig:
        return self._config

    def process_item(self, item: WorkItem) -> ObjectOutcome:
        return self.process_object(item.bucket, item.key, item.existing_keys)

    def process_object(
        self,
        bucket: str,
        key: str,
        existing_keys: Optional[AbstractSet[str]] = None,
    ) -> ObjectOutcome:
        """
        Run the filter, fetch, decode and per-width fan-out for one object.

        Args:
            bucket: Bucket holding the object
            key: Object key
            existing_keys: Listing snapshot used to skip widths whose variant
                already exists (backfill only)

        Returns:
            The aggregated outcome for the object
        """
        start_time = time.time()
        context = LogContext.for_object(bucket, key, "derivation_pipeline")
        self._logger.info("Processing file", context)

        outcome = self._run(bucket, key, existing_keys, context)
        outcome.processing_time = time.time() - start_time

        if outcome.status is not ObjectStatus.SKIPPED:
            self._logger.info(
                "Finished file",
                context,
                status=outcome.status.value,
                uploaded=len(outcome.uploaded_keys),
                failed=len(outcome.failed_widths),
                processing_time_ms=round(outcome.processing_time * 1000, 1),
            )
        return outcome

    def _run(
        self,
        bucket: str,
        key: str,
        existing_keys: Optional[AbstractSet[str]],
        context: LogContext,
    ) -> ObjectOutcome:
        decision = self._filter.check(bucket, key, context)
        if not decision.eligible:
            return decision.outcome

        skip_widths = set()
        if existing_keys is not None:
            skip_widths = set(
                self._filter.existing_widths(key, decision.content_type, existing_keys)
            )
            if skip_widths.issuperset(self._config.sizes.widths):
                self._logger.info("Skipping file because every size already exists", context)
                return ObjectOutcome(
                    bucket=bucket,
                    key=key,
                    status=ObjectStatus.SKIPPED,
                    skip_reason=SkipReason.ALREADY_EXISTS,
                )

        outcome = ObjectOutcome(bucket=bucket, key=key)

        try:
            body = self.fetch(bucket, key)
        except ObjectNotFoundError:
            self._logger.warning("File disappeared before download, skipping", context)
            outcome.status = ObjectStatus.SKIPPED
            outcome.skip_reason = SkipReason.NOT_FOUND
            return outcome
        except ObjectStoreError as e:
            self._logger.error("Error getting object", context, error=str(e))
            outcome.status = ObjectStatus.FAILED
            outcome.error = str(e)
            return outcome

        source = SourceObject(
            bucket=bucket, key=key, content_type=decision.content_type, body=body
        )

        try:
            image = decode_image(source.body)
        except ImageProcessingError as e:
            self._logger.error("Failed to decode image", context, error=str(e))
            outcome.status = ObjectStatus.FAILED
            outcome.error = str(e)
            return outcome

        self._logger.debug(
            "Image decoded", context, format=image.format, size=f"{image.width}x{image.height}"
        )

        for width in self._config.sizes.widths:
            outcome.sizes.append(
                self._process_size(source, image, width, skip_widths, context)
            )

        return outcome.finalize()

    def fetch(self, bucket: str, key: str) -> bytes:
        """Read the whole object body into memory."""
        return self._store.get(bucket, key)

    def resolve(self, source: SourceObject) -> Tuple[OutputFormat, str]:
        return resolve_output(source.content_type, self._config.output.force_format)

    def derive_variant(
        self,
        source: SourceObject,
        image: "Image.Image",
        width: int,
    ) -> DerivedVariant:
        """
        Plan, resize and encode one width into an in-memory variant.

        Raises:
            ImageProcessingError: If the format is unsupported or Pillow fails
        """
        output_format, extension = self.resolve(source)
        policy = self._config.output

        planned = plan_width(image.width, image.height, width, policy.skip_upscaling)
        if planned is None:
            raise ImageProcessingError(f"Cannot plan width {width} for a zero-width image")

        resized = resize_image(image, planned, policy.resample)
        body = encode_image(resized, output_format, policy.jpeg_quality)
        return DerivedVariant(
            source_key=source.key,
            target_width=width,
            output_format=output_format,
            derived_key=derive_key(source.key, width, extension),
            body=body,
            dimensions=resized.size,
        )

    def upload(self, bucket: str, variant: DerivedVariant) -> None:
        self._store.put(bucket, variant.derived_key, variant.body, variant.content_type)

    def _process_size(
        self,
        source: SourceObject,
        image: "Image.Image",
        width: int,
        skip_widths: AbstractSet[int],
        context: LogContext,
    ) -> SizeOutcome:
        size_context = context.with_operation("derive_size").with_metadata(width=width)

        try:
            _, extension = self.resolve(source)
        except UnsupportedFormatError as e:
            self._logger.error("Unsupported image format", size_context, error=str(e))
            return SizeOutcome(width=width, status=SizeStatus.FAILED, reason=str(e))

        derived_key = derive_key(source.key, width, extension)
        if width in skip_widths or (
            self._config.verify_with_head
            and self._filter.variant_exists(source.bucket, derived_key, size_context)
        ):
            self._logger.info(
                "Skipping size because it already exists", size_context, derived_key=derived_key
            )
            return SizeOutcome(
                width=width,
                status=SizeStatus.SKIPPED,
                derived_key=derived_key,
                reason=SkipReason.ALREADY_EXISTS.value,
            )

        try:
            variant = self.derive_variant(source, image, width)
        except ImageProcessingError as e:
            self._logger.error("Failed to resize image", size_context, error=str(e))
            return SizeOutcome(
                width=width, status=SizeStatus.FAILED, derived_key=derived_key, reason=str(e)
            )

        try:
            self.upload(source.bucket, variant)
        except ObjectStoreError as e:
            self._logger.error(
                "Failed to upload thumbnail", size_context, derived_key=derived_key, error=str(e)
            )
            return SizeOutcome(
                width=width, status=SizeStatus.FAILED, derived_key=derived_key, reason=str(e)
            )

        self._logger.info("Uploaded thumbnail", size_context, derived_key=derived_key)
        return SizeOutcome(
            width=width,
            status=SizeStatus.UPLOADED,
            derived_key=derived_key,
            dimensions=variant.dimensions,
        )


class BackfillScanner:
    """Runs the pipeline over every object of a bucket, one listing page at a time."""

    def __init__(
        self,
        store: ObjectStoreProtocol,
        pipeline: DerivationPipeline,
        logger: LoggerProtocol,
        process_batch_fn: Optional[ProcessBatchFunction] = None,
    ):
        self._store = store
        self._pipeline = pipeline
        self._logger = logger
        self._process_batch = process_batch_fn or serial_process_batch

    def iter_pages(self, bucket: str) -> Iterator[ListPage]:
        """Yield listing pages, following continuation tokens."""
        token: Optional[str] = None
        while True:
            page = self._store.list_page(bucket, token)
            yield page
            if not page.next_token:
                return
            token = page.next_token

    def run(self, bucket: str) -> BatchReport:
        """
        Derive variants for every eligible object in ``bucket``.

        Lookahead de-duplication only sees the page being processed.

        Raises:
            ListingError: If any listing call fails; the scan is aborted
        """
        report = BatchReport()
        context = LogContext(component="backfill_scanner", metadata={"bucket": bucket})

        with BatchOperationContextManager(
            operation_name=f"Backfill of s3://{bucket}", logger=self._logger
        ) as batch_manager:
            try:
                for page in self.iter_pages(bucket):
                    report.pages += 1
                    self._logger.info(
                        "Processing listing page", context, page=report.pages, objects=len(page.keys)
                    )
                    outcomes = self.process_page(bucket, page)
                    report.extend(outcomes)
                    for outcome in outcomes:
                        if outcome.status in (ObjectStatus.FAILED, ObjectStatus.PARTIAL):
                            batch_manager.add_error(
                                outcome.error or f"failed widths {outcome.failed_widths}",
                                item_identifier=f"{outcome.bucket}/{outcome.key}",
                            )
            except ListingError as e:
                self._logger.critical("Error listing objects", context, error=str(e))
                raise

        self._logger.info("Done listing objects", context, **report.summary())
        return report

    def process_page(self, bucket: str, page: ListPage) -> List[ObjectOutcome]:
        """Outcomes for every key of ``page``, in listing order."""
        snapshot = frozenset(page.keys)
        outcomes: List[Optional[ObjectOutcome]] = [None] * len(page.keys)
        items: List[WorkItem] = []
        slots: List[int] = []

        for index, key in enumerate(page.keys):
            if is_derived_key(key):
                self._logger.debug(
                    "Skipping because it is already resized",
                    LogContext.for_object(bucket, key, "backfill_scanner"),
                )
                outcomes[index] = ObjectOutcome(
                    bucket=bucket,
                    key=key,
                    status=ObjectStatus.SKIPPED,
                    skip_reason=SkipReason.ALREADY_DERIVED,
                )
                continue
            items.append(WorkItem(bucket=bucket, key=key, existing_keys=snapshot))
            slots.append(index)

        for index, outcome in zip(slots, self._process_batch(self._pipeline, items)):
            outcomes[index] = outcome
        return outcomes  # type: ignore[return-value]


class EventDriver:
    """Runs the pipeline for each record of an object-created notification."""

    def __init__(
        self,
        pipeline: DerivationPipeline,
        logger: LoggerProtocol,
        process_batch_fn: Optional[ProcessBatchFunction] = None,
    ):
        self._pipeline = pipeline
        self._logger = logger
        self._process_batch = process_batch_fn or serial_process_batch

    def parse_records(self, event: Any) -> List[WorkItem]:
        """Extract ``(bucket, key)`` pairs, decoding ``+`` and ``%XX`` in keys."""
        records = event.get("Records") if isinstance(event, dict) else None
        if not records:
            self._logger.warning("No records found in the event")
            return []

        items: List[WorkItem] = []
        for index, record in enumerate(records):
            try:
                bucket = record["s3"]["bucket"]["name"]
                raw_key = record["s3"]["object"]["key"]
                if not isinstance(bucket, str) or not isinstance(raw_key, str):
                    raise TypeError(f"bucket and key must be strings, got {raw_key!r}")
                key = unquote_plus(raw_key)
            except (KeyError, TypeError):
                self._logger.error("Malformed event record, skipping", record_index=index)
                continue
            items.append(WorkItem(bucket=bucket, key=key))
        return items

    def handle(self, event: Dict[str, Any]) -> BatchReport:
        report = BatchReport()
        items = self.parse_records(event)
        if items:
            report.extend(self._process_batch(self._pipeline, items))
        return report
