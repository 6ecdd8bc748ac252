"""Serial processor implementation - processes items one by one."""

from typing import Sequence

from ..core import OutcomeAggregator, ProcessType
from .common import DEFAULT_MAX_WORKERS, Describe, Worker, run_and_record


def process_batch(
    items: Sequence,
    worker: Worker,
    aggregator: OutcomeAggregator,
    max_workers: int = DEFAULT_MAX_WORKERS,
    describe: Describe = str,
    operation: ProcessType = ProcessType.UPLOAD,
) -> None:
    """
    Processes a batch serially, one by one, in the current thread.

    Useful for debugging and deterministic runs; `max_workers` is accepted
    for signature compatibility and ignored.

    Args:
        items: Items to hand to the worker.
        worker: Callable producing an `Outcome` for one item.
        aggregator: Receives every outcome.
        max_workers: Ignored.
        describe: Names an item in failures the worker did not report itself.
        operation: Kind of operation, used for such failures.
    """
    for item in items:
        run_and_record(worker, item, aggregator, describe, operation)
