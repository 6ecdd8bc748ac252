"""Multithreaded processor implementation - uses thread pool for parallelism."""

from typing import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

from ..core import OutcomeAggregator, ProcessType
from .common import (
    DEFAULT_MAX_WORKERS,
    Describe,
    Worker,
    pool_size,
    run_and_record,
    unexpected_failure,
)


def process_batch(
    items: Sequence,
    worker: Worker,
    aggregator: OutcomeAggregator,
    max_workers: int = DEFAULT_MAX_WORKERS,
    describe: Describe = str,
    operation: ProcessType = ProcessType.UPLOAD,
) -> None:
    """
    Process a batch using a bounded thread pool.

    One task is submitted per item and each task records its own outcome
    into the aggregator. Returns once every task has finished.

    Args:
        items: Items to hand to the worker
        worker: Callable producing an `Outcome` for one item
        aggregator: Thread-safe sink for outcomes
        max_workers: Upper bound on pool threads
        describe: Names an item in failures the worker did not report itself
        operation: Kind of operation, used for such failures
    """
    if not items:
        return

    with ThreadPoolExecutor(
        max_workers=pool_size(max_workers, len(items)),
        thread_name_prefix="image-renderer",
    ) as executor:
        future_to_item = {
            executor.submit(
                run_and_record, worker, item, aggregator, describe, operation
            ): item
            for item in items
        }

        for future in as_completed(future_to_item):
            try:
                future.result()
            except Exception as e:
                # run_and_record itself failed, so nothing was recorded yet
                item = future_to_item[future]
                aggregator.record(unexpected_failure(item, e, describe, operation))
