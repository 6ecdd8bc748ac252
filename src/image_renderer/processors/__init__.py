"""Batch processors with different concurrency strategies."""

from typing import Callable, Dict

from ..core.exceptions import ConfigurationError
from .serial import process_batch as serial_process_batch
from .multithread import process_batch as multithread_process_batch
from .asyncio_processor import process_batch as asyncio_process_batch
from .asyncio_processor import process_batch_async

PROCESSORS: Dict[str, Callable[..., None]] = {
    "serial": serial_process_batch,
    "multithread": multithread_process_batch,
    "asyncio": asyncio_process_batch,
}


def get_batch_processor(name: str) -> Callable[..., None]:
    """Look up a batch processor by strategy name."""
    try:
        return PROCESSORS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown processor '{name}', expected one of {sorted(PROCESSORS)}"
        ) from None


__all__ = [
    "PROCESSORS",
    "get_batch_processor",
    "serial_process_batch",
    "multithread_process_batch",
    "asyncio_process_batch",
    "process_batch_async",
]
