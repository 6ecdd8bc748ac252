"""AsyncIO processor implementation - uses async/await for concurrent I/O."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from ..core import OutcomeAggregator, ProcessType
from .common import (
    DEFAULT_MAX_WORKERS,
    Describe,
    Worker,
    pool_size,
    run_and_record,
    unexpected_failure,
)


async def process_batch_async(
    items: Sequence,
    worker: Worker,
    aggregator: OutcomeAggregator,
    max_workers: int = DEFAULT_MAX_WORKERS,
    describe: Describe = str,
    operation: ProcessType = ProcessType.UPLOAD,
) -> None:
    """Process a batch concurrently from a running event loop.

    Workers are blocking, so each one runs in the default executor; a
    semaphore caps how many run at once.
    """
    if not items:
        return

    semaphore = asyncio.Semaphore(pool_size(max_workers, len(items)))

    async def run_one(item):
        async with semaphore:
            return await asyncio.to_thread(
                run_and_record, worker, item, aggregator, describe, operation
            )

    results = await asyncio.gather(
        *(run_one(item) for item in items), return_exceptions=True
    )

    for item, result in zip(items, results):
        if isinstance(result, BaseException):
            aggregator.record(unexpected_failure(item, result, describe, operation))


def process_batch(
    items: Sequence,
    worker: Worker,
    aggregator: OutcomeAggregator,
    max_workers: int = DEFAULT_MAX_WORKERS,
    describe: Describe = str,
    operation: ProcessType = ProcessType.UPLOAD,
) -> None:
    """
    Process a batch using asyncio.

    This is the synchronous wrapper that runs the async function. When the
    caller is already inside a running event loop the batch gets its own
    loop on a helper thread, and this call blocks until it finishes.

    Args:
        items: Items to hand to the worker
        worker: Callable producing an `Outcome` for one item
        aggregator: Thread-safe sink for outcomes
        max_workers: Upper bound on concurrently running workers
        describe: Names an item in failures the worker did not report itself
        operation: Kind of operation, used for such failures
    """

    def run() -> None:
        asyncio.run(
            process_batch_async(
                items, worker, aggregator, max_workers, describe, operation
            )
        )

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        run()
        return

    # asyncio.run refuses to nest, so use a loop on a separate thread
    with ThreadPoolExecutor(
        max_workers=1, thread_name_prefix="image-renderer-loop"
    ) as executor:
        executor.submit(run).result()
