"""Tests for the batch processors."""

import asyncio
import random
import threading
import time

import pytest

from image_renderer.core import ConfigurationError, Outcome, OutcomeAggregator, ProcessType
from image_renderer.core.models import ErrorCode
from image_renderer.processors import (
    PROCESSORS,
    get_batch_processor,
    process_batch_async,
)
from image_renderer.processors.common import pool_size


def jittery_worker(item):
    """Worker that fails on multiples of three after a random pause."""
    time.sleep(random.uniform(0, 0.005))
    if item % 3 == 0:
        return Outcome.failure(f"item-{item}", "rejected")
    return Outcome.success(f"item-{item}")


@pytest.fixture(params=sorted(PROCESSORS))
def process_batch(request):
    return get_batch_processor(request.param)


class TestProcessBatch:
    """Behaviour shared by every strategy."""

    def test_every_item_recorded_once(self, process_batch):
        items = list(range(60))
        aggregator = OutcomeAggregator()

        process_batch(items, jittery_worker, aggregator, max_workers=8)

        result = aggregator.finalize()
        expected_failures = {f"item-{i}" for i in items if i % 3 == 0}
        assert {o.target for o in result.failures} == expected_failures
        assert len(result.successes) == len(items) - len(expected_failures)
        assert result.total == len(items)

    def test_empty_batch_records_nothing(self, process_batch):
        aggregator = OutcomeAggregator()
        process_batch([], jittery_worker, aggregator)
        assert len(aggregator) == 0

    def test_raising_worker_becomes_internal_failure(self, process_batch):
        def worker(item):
            if item == "bad":
                raise RuntimeError("kaboom")
            return Outcome.success(item)

        aggregator = OutcomeAggregator()
        process_batch(
            ["a", "bad", "b"],
            worker,
            aggregator,
            describe=lambda item: f"name:{item}",
            operation=ProcessType.DELETE,
        )

        result = aggregator.finalize()
        assert len(result.successes) == 2
        (failure,) = result.failures
        assert failure.target == "name:bad"
        assert failure.reason == "internal error: kaboom"
        assert failure.code is ErrorCode.INTERNAL
        assert failure.operation is ProcessType.DELETE

    def test_single_worker_still_completes(self, process_batch):
        aggregator = OutcomeAggregator()
        process_batch(list(range(5)), jittery_worker, aggregator, max_workers=1)
        assert len(aggregator) == 5


class TestConcurrencyBounds:
    """Tests that the concurrent strategies respect max_workers."""

    @pytest.mark.parametrize("name", ["multithread", "asyncio"])
    def test_max_workers_is_an_upper_bound(self, name):
        lock = threading.Lock()
        state = {"running": 0, "peak": 0}

        def worker(item):
            with lock:
                state["running"] += 1
                state["peak"] = max(state["peak"], state["running"])
            time.sleep(0.01)
            with lock:
                state["running"] -= 1
            return Outcome.success(str(item))

        aggregator = OutcomeAggregator()
        get_batch_processor(name)(list(range(20)), worker, aggregator, max_workers=3)

        assert len(aggregator) == 20
        assert 1 <= state["peak"] <= 3

    def test_multithread_runs_off_the_calling_thread(self):
        caller = threading.current_thread().name
        seen = []

        def worker(item):
            seen.append(threading.current_thread().name)
            return Outcome.success(str(item))

        get_batch_processor("multithread")([1, 2], worker, OutcomeAggregator())
        assert all(name != caller for name in seen)
        assert all(name.startswith("image-renderer") for name in seen)


class TestAsyncEntryPoint:
    def test_process_batch_async_inside_running_loop(self):
        aggregator = OutcomeAggregator()

        async def run():
            await process_batch_async(list(range(10)), jittery_worker, aggregator)

        asyncio.run(run())
        assert len(aggregator) == 10

    def test_sync_wrapper_inside_running_loop(self):
        aggregator = OutcomeAggregator()

        async def run():
            get_batch_processor("asyncio")(list(range(6)), jittery_worker, aggregator)

        asyncio.run(run())
        assert len(aggregator) == 6


class TestRegistry:
    def test_known_processors(self):
        assert set(PROCESSORS) == {"serial", "multithread", "asyncio"}

    def test_unknown_processor(self):
        with pytest.raises(ConfigurationError, match="Unknown processor 'multiprocess'"):
            get_batch_processor("multiprocess")

    @pytest.mark.parametrize(
        "max_workers,count,expected",
        [(8, 3, 3), (2, 10, 2), (8, 0, 1), (1, 1, 1)],
    )
    def test_pool_size(self, max_workers, count, expected):
        assert pool_size(max_workers, count) == expected

