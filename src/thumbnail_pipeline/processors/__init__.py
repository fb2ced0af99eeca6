"""Batch processors with different concurrency strategies."""

from typing import Callable, Dict

from ..core.models import ConcurrencyMode
from .serial import process_batch as serial_process_batch
from .multithread import process_batch as multithread_process_batch

PROCESSORS: Dict[ConcurrencyMode, Callable] = {
    ConcurrencyMode.SERIAL: serial_process_batch,
    ConcurrencyMode.MULTITHREAD: multithread_process_batch,
}


def get_batch_processor(mode: ConcurrencyMode) -> Callable:
    """Return the batch function for a concurrency mode."""
    return PROCESSORS[mode]


__all__ = [
    "serial_process_batch",
    "multithread_process_batch",
    "get_batch_processor",
]
