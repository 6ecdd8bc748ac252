"""Common functions shared across all processor implementations."""

from typing import Callable, TypeVar

from ..core import Outcome, OutcomeAggregator, ProcessType, get_logger
from ..core.models import ErrorCode

T = TypeVar("T")

# Signature shared by every per-item worker: never expected to raise.
Worker = Callable[[T], Outcome]
Describe = Callable[[T], str]

DEFAULT_MAX_WORKERS = 8


def unexpected_failure(
    item: T, exc: BaseException, describe: Describe, operation: ProcessType
) -> Outcome:
    """Turn an exception that escaped a worker into a failure outcome."""
    logger = get_logger("image-renderer.processor")
    identifier = describe(item)
    logger.error(f"[{identifier}] Worker raised unexpectedly: {exc}", exc_info=exc)
    return Outcome.failure(
        identifier,
        f"internal error: {exc}",
        code=ErrorCode.INTERNAL,
        operation=operation,
    )


def run_and_record(
    worker: Worker,
    item: T,
    aggregator: OutcomeAggregator,
    describe: Describe,
    operation: ProcessType,
) -> Outcome:
    """Run one worker and merge its outcome into the aggregator."""
    try:
        outcome = worker(item)
    except Exception as e:  # noqa: BLE001
        outcome = unexpected_failure(item, e, describe, operation)
    aggregator.record(outcome)
    return outcome


def pool_size(max_workers: int, item_count: int) -> int:
    """Bound the pool by both the configured limit and the batch size."""
    return max(1, min(max_workers, item_count))
