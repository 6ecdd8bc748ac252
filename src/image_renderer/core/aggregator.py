"""Thread-safe accumulation of per-item outcomes."""

import logging
import threading
from typing import List

from .models import BatchResult, Outcome


class OutcomeAggregator:
    """
    Collects outcomes from concurrently running tasks into one BatchResult.

    Only ``record`` and ``finalize`` touch the underlying sequences, both
    under the same lock. Create one aggregator per batch call.

    Can be used as a context manager to log a summary of the batch:

        with OutcomeAggregator("Upload batch") as aggregator:
            ...
        result = aggregator.finalize()
    """

    def __init__(self, operation_name: str = "Batch Operation"):
        self.operation_name = operation_name
        self._lock = threading.Lock()
        self._successes: List[Outcome] = []
        self._failures: List[Outcome] = []
        self.logger = logging.getLogger(
            self.__class__.__module__ + "." + self.__class__.__name__
        )

    def record(self, outcome: Outcome) -> None:
        """Append an outcome to the success or failure sequence."""
        with self._lock:
            if outcome.is_success:
                self._successes.append(outcome)
            else:
                self._failures.append(outcome)
        if not outcome.is_success:
            self.logger.debug(
                f"Failure recorded for '{outcome.target}' in {self.operation_name}: "
                f"{outcome.reason}"
            )

    def finalize(self) -> BatchResult:
        """Snapshot everything recorded so far into an immutable result."""
        with self._lock:
            successes = tuple(self._successes)
            failures = tuple(self._failures)
        # Legacy semantics: one success is enough for overall_success.
        return BatchResult(
            overall_success=bool(successes),
            successes=successes,
            failures=failures,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._successes) + len(self._failures)

    def __enter__(self) -> "OutcomeAggregator":
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        with self._lock:
            failures = list(self._failures)
            success_count = len(self._successes)

        if exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),
            )
        elif failures:
            self.logger.warning(
                f"{self.operation_name} completed with {len(failures)} error(s) "
                f"and {success_count} success(es)."
            )
            for i, failure in enumerate(failures):
                self.logger.error(
                    f"  Error {i + 1}/{len(failures)} for item '{failure.target}': "
                    f"{failure.reason}"
                )
        else:
            self.logger.info(
                f"{self.operation_name} completed successfully "
                f"({success_count} item(s))."
            )
        return False
