"""Multithreaded processor implementation - uses a thread pool for parallelism."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Dict, List, Optional

from ..core.logging_config import get_logger
from ..core.models import ObjectOutcome, WorkItem
from .serial import failed_outcome

if TYPE_CHECKING:
    from ..core.services import DerivationPipeline


def process_batch(
    pipeline: "DerivationPipeline", batch: List[WorkItem]
) -> List[ObjectOutcome]:
    """
    Process a batch of objects using a thread pool.

    Objects share only the store client, which is used read-only. Each
    object's width fan-out stays sequential inside its worker.

    Args:
        pipeline: The derivation pipeline to run for each object
        batch: Work items, one per source object

    Returns:
        One outcome per work item, in input order
    """
    if not batch:
        return []

    logger = get_logger("thumbnail-pipeline.processor")
    results: List[Optional[ObjectOutcome]] = [None] * len(batch)
    max_workers = min(pipeline.config.max_workers, len(batch))

    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="thumbnail"
    ) as executor:
        future_to_index: Dict = {
            executor.submit(pipeline.process_item, item): index
            for index, item in enumerate(batch)
        }

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                results[index] = future.result()
            except Exception as e:  # noqa: BLE001
                item = batch[index]
                logger.error(
                    f"Unexpected error processing s3://{item.bucket}/{item.key}: {e}",
                    exc_info=True,
                )
                results[index] = failed_outcome(item, e)

    return results  # type: ignore[return-value]
