"""Serial processor implementation - processes objects one by one."""

from typing import TYPE_CHECKING, List

from ..core.logging_config import get_logger
from ..core.models import ObjectOutcome, ObjectStatus, WorkItem

if TYPE_CHECKING:
    from ..core.services import DerivationPipeline


def failed_outcome(item: WorkItem, error: BaseException) -> ObjectOutcome:
    """Outcome for an object whose processing raised unexpectedly."""
    return ObjectOutcome(
        bucket=item.bucket, key=item.key, status=ObjectStatus.FAILED, error=str(error)
    )


def process_batch(
    pipeline: "DerivationPipeline", batch: List[WorkItem]
) -> List[ObjectOutcome]:
    """
    Processes a batch of objects serially, in the current thread.

    An unexpected exception for one object is logged and recorded as a
    failed outcome; the remaining objects are still processed.

    Args:
        pipeline: The derivation pipeline to run for each object.
        batch: Work items, one per source object.

    Returns:
        One `ObjectOutcome` per work item, in input order.
    """
    logger = get_logger("thumbnail-pipeline.processor")
    results = []

    for item in batch:
        try:
            results.append(pipeline.process_item(item))
        except Exception as e:  # noqa: BLE001
            logger.error(
                f"Unexpected error processing s3://{item.bucket}/{item.key}: {e}",
                exc_info=True,
            )
            results.append(failed_outcome(item, e))

    return results
