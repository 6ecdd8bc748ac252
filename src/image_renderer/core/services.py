"""Service implementations for the ingestion and deletion pipelines."""

import time
from typing import BinaryIO, Callable, Iterable, List, Optional, Sequence, Tuple

from .aggregator import OutcomeAggregator
from .exceptions import (
    DeleteFailedError,
    ImageNotFoundError,
    ImageRendererError,
    InternalError,
    ResizeError,
    UploadValidationError,
    WriteError,
)
from .image_utils import build_image_name, join_storage_path
from .models import (
    BatchResult,
    ErrorCode,
    Outcome,
    ProcessType,
    RenderSpec,
    UploadCandidate,
    ValidationPolicy,
)
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .protocols import CodecProtocol, LoggerProtocol, StorageProtocol
from .validation import validate_candidate
from ..processors import process_batch_async
from ..processors.common import DEFAULT_MAX_WORKERS
from ..processors.multithread import process_batch as multithread_process_batch

BatchProcessorFn = Callable[..., None]

EMPTY_INPUT_REASON = "input is empty"


def _record_metric(
    collector: Optional[MetricsCollector],
    operation: str,
    start_time: float,
    outcome: Outcome,
) -> None:
    if collector is None:
        return
    collector.record_metric(
        PerformanceMetrics(
            operation=operation,
            start_time=start_time,
            end_time=time.time(),
            success=outcome.is_success,
            error_message=outcome.reason or None,
            metadata={"target": outcome.target},
        )
    )


class UploadService:
    """Runs validate → decode → resize → encode → write for one candidate."""

    def __init__(
        self,
        policy: ValidationPolicy,
        storage: StorageProtocol,
        codec: CodecProtocol,
        logger: LoggerProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._policy = policy
        self._storage = storage
        self._codec = codec
        self._logger = logger
        self._metrics_collector = metrics_collector

    @property
    def policy(self) -> ValidationPolicy:
        return self._policy

    def process_one(
        self,
        candidate: Optional[UploadCandidate],
        out_dir: str,
        spec: RenderSpec,
        label: str = "",
        ensure_directory: bool = True,
    ) -> Outcome:
        """Process a single candidate; failures come back as outcomes."""
        start_time = time.time()
        name = candidate.name if candidate is not None else ""
        log_context = LogContext(
            operation="upload", component="upload_service"
        ).with_metadata(file_name=name, out_dir=out_dir)

        try:
            outcome = self._process(
                candidate, out_dir, spec, label, ensure_directory, log_context
            )
        except UploadValidationError as e:
            self._logger.warning(
                f"Rejected by validation: {e.reason}",
                log_context.with_operation("validate"),
            )
            outcome = Outcome.failure(name, e.reason, code=e.code)
        except ImageRendererError as e:
            self._logger.error(
                "Image processing failed", log_context.with_metadata(error=e.reason)
            )
            outcome = Outcome.failure(name, e.reason, code=e.code)
        except Exception as e:  # noqa: BLE001
            self._logger.error(
                "Unexpected error while processing image",
                log_context.with_metadata(error=str(e)),
            )
            outcome = Outcome.failure(name, InternalError(str(e)).reason)

        _record_metric(self._metrics_collector, "upload", start_time, outcome)
        return outcome

    def _process(
        self,
        candidate: Optional[UploadCandidate],
        out_dir: str,
        spec: RenderSpec,
        label: str,
        ensure_directory: bool,
        log_context: LogContext,
    ) -> Outcome:
        validate_candidate(candidate, self._policy)

        if ensure_directory:
            self._storage.create_directory(out_dir)

        self._logger.debug("Decoding image", log_context.with_operation("decode"))
        image = self._codec.decode(candidate.stream)

        self._logger.debug(
            f"Resizing to {spec.width}x{spec.height}",
            log_context.with_operation("resize"),
        )
        resized = self._codec.resize(image, spec.width, spec.height)
        if resized is None:
            raise ResizeError()

        self._logger.debug(
            f"Encoding as {spec.target_format.value} at quality {spec.quality_value}",
            log_context.with_operation("encode"),
        )
        encoded = self._codec.encode(resized, spec.target_format, spec.quality_value)

        image_name = build_image_name(
            spec.width, spec.height, label, spec.target_format
        )
        path = join_storage_path(out_dir, image_name)
        try:
            self._storage.write_new_file(path, encoded)
        except OSError as e:
            raise WriteError(str(e)) from e

        self._logger.info(
            "Successfully stored image",
            log_context.with_operation("write"),
            path=path,
            size_bytes=len(encoded),
        )
        return Outcome.success(path)


class DeletionService:
    """Runs existence check → delete for one stored path."""

    def __init__(
        self,
        storage: StorageProtocol,
        logger: LoggerProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._storage = storage
        self._logger = logger
        self._metrics_collector = metrics_collector

    def delete_one(self, path: str) -> Outcome:
        """Delete a stored file; failures come back as outcomes."""
        start_time = time.time()
        log_context = LogContext(
            operation="delete", component="deletion_service"
        ).with_metadata(path=path)

        try:
            if not self._storage.exists(path):
                raise ImageNotFoundError()
            try:
                self._storage.delete(path)
            except Exception as e:  # noqa: BLE001
                raise DeleteFailedError(str(e)) from e
            self._logger.info("Deleted image", log_context)
            outcome = Outcome.success(path, operation=ProcessType.DELETE)
        except ImageNotFoundError as e:
            self._logger.warning("Nothing to delete", log_context)
            outcome = Outcome.failure(
                path, e.reason, code=e.code, operation=ProcessType.DELETE
            )
        except ImageRendererError as e:
            self._logger.error(
                "Delete failed", log_context.with_metadata(error=e.reason)
            )
            outcome = Outcome.failure(
                path, e.reason, code=e.code, operation=ProcessType.DELETE
            )
        except Exception as e:  # noqa: BLE001
            # exists() itself blew up
            self._logger.error(
                "Unexpected error while deleting",
                log_context.with_metadata(error=str(e)),
            )
            outcome = Outcome.failure(
                path,
                InternalError(str(e)).reason,
                code=ErrorCode.INTERNAL,
                operation=ProcessType.DELETE,
            )

        _record_metric(self._metrics_collector, "delete", start_time, outcome)
        return outcome


class ImageProcessor:
    """
    Caller-facing entry point for uploads and deletions.

    Each batch call builds its own `OutcomeAggregator`, so one processor
    can serve concurrent callers without outcomes leaking between calls.
    """

    def __init__(
        self,
        upload_service: UploadService,
        deletion_service: DeletionService,
        storage: StorageProtocol,
        logger: LoggerProtocol,
        batch_processor: BatchProcessorFn = multithread_process_batch,
        max_workers: int = DEFAULT_MAX_WORKERS,
        default_out_dir: str = "Images",
    ):
        self._upload_service = upload_service
        self._deletion_service = deletion_service
        self._storage = storage
        self._logger = logger
        self._batch_processor = batch_processor
        self._max_workers = max_workers
        self._default_out_dir = default_out_dir

    @property
    def policy(self) -> ValidationPolicy:
        return self._upload_service.policy

    def upload_one(
        self,
        stream: Optional[BinaryIO],
        name: str,
        size: int,
        out_dir: Optional[str] = None,
        label: str = "",
        spec: Optional[RenderSpec] = None,
    ) -> Outcome:
        """Validate, render and store one uploaded file."""
        candidate = UploadCandidate(name=name, size_bytes=size, stream=stream)
        return self.upload_candidate(candidate, out_dir, label, spec)

    def upload_candidate(
        self,
        candidate: Optional[UploadCandidate],
        out_dir: Optional[str] = None,
        label: str = "",
        spec: Optional[RenderSpec] = None,
    ) -> Outcome:
        return self._upload_service.process_one(
            candidate, out_dir or self._default_out_dir, spec or RenderSpec(), label
        )

    def _start_upload_batch(
        self, candidates: Optional[Iterable[UploadCandidate]], out_dir: str
    ) -> Tuple[Optional[BatchResult], List[Tuple[int, UploadCandidate]]]:
        """Reject empty input and create the output directory once."""
        items = list(enumerate(candidates or ()))
        if not items:
            self._logger.warning("Upload batch rejected: input is empty")
            return _empty_input_result(ProcessType.UPLOAD), []

        try:
            self._storage.create_directory(out_dir)
        except Exception as e:  # noqa: BLE001
            self._logger.error(f"Could not prepare output directory {out_dir}: {e}")
            outcome = Outcome.failure("", InternalError(str(e)).reason)
            return BatchResult.from_outcomes([outcome]), []

        return None, items

    def _upload_worker(
        self, out_dir: str, spec: RenderSpec, label: str
    ) -> Callable[[Tuple[int, UploadCandidate]], Outcome]:
        def worker(item: Tuple[int, UploadCandidate]) -> Outcome:
            index, candidate = item
            return self._upload_service.process_one(
                candidate, out_dir, spec, f"{label}{index}", ensure_directory=False
            )

        return worker

    def upload_many(
        self,
        candidates: Optional[Iterable[UploadCandidate]],
        out_dir: Optional[str] = None,
        label: str = "",
        spec: Optional[RenderSpec] = None,
    ) -> BatchResult:
        """Process every candidate concurrently and combine the outcomes."""
        out_dir = out_dir or self._default_out_dir
        early, items = self._start_upload_batch(candidates, out_dir)
        if early is not None:
            return early

        with OutcomeAggregator(f"Upload of {len(items)} image(s)") as aggregator:
            self._batch_processor(
                items,
                self._upload_worker(out_dir, spec or RenderSpec(), label),
                aggregator,
                max_workers=self._max_workers,
                describe=_describe_upload_item,
                operation=ProcessType.UPLOAD,
            )
        return aggregator.finalize()

    async def upload_many_async(
        self,
        candidates: Optional[Iterable[UploadCandidate]],
        out_dir: Optional[str] = None,
        label: str = "",
        spec: Optional[RenderSpec] = None,
    ) -> BatchResult:
        """Awaitable `upload_many` for callers already inside an event loop."""
        out_dir = out_dir or self._default_out_dir
        early, items = self._start_upload_batch(candidates, out_dir)
        if early is not None:
            return early

        with OutcomeAggregator(f"Upload of {len(items)} image(s)") as aggregator:
            await process_batch_async(
                items,
                self._upload_worker(out_dir, spec or RenderSpec(), label),
                aggregator,
                max_workers=self._max_workers,
                describe=_describe_upload_item,
                operation=ProcessType.UPLOAD,
            )
        return aggregator.finalize()

    def delete_one(self, path: str) -> Outcome:
        """Delete one stored file."""
        return self._deletion_service.delete_one(path)

    def delete_many(self, paths: Optional[Iterable[str]]) -> BatchResult:
        """Delete every path concurrently and combine the outcomes."""
        items: Sequence[str] = list(paths or ())
        if not items:
            self._logger.warning("Delete batch rejected: input is empty")
            return _empty_input_result(ProcessType.DELETE)

        with OutcomeAggregator(f"Deletion of {len(items)} file(s)") as aggregator:
            self._batch_processor(
                items,
                self._deletion_service.delete_one,
                aggregator,
                max_workers=self._max_workers,
                describe=str,
                operation=ProcessType.DELETE,
            )
        return aggregator.finalize()

    async def delete_many_async(self, paths: Optional[Iterable[str]]) -> BatchResult:
        """Awaitable `delete_many` for callers already inside an event loop."""
        items: Sequence[str] = list(paths or ())
        if not items:
            self._logger.warning("Delete batch rejected: input is empty")
            return _empty_input_result(ProcessType.DELETE)

        with OutcomeAggregator(f"Deletion of {len(items)} file(s)") as aggregator:
            await process_batch_async(
                items,
                self._deletion_service.delete_one,
                aggregator,
                max_workers=self._max_workers,
                describe=str,
                operation=ProcessType.DELETE,
            )
        return aggregator.finalize()


def _describe_upload_item(item: Tuple[int, UploadCandidate]) -> str:
    candidate = item[1]
    return candidate.name if candidate is not None else ""


def _empty_input_result(operation: ProcessType) -> BatchResult:
    outcome = Outcome.failure(
        "", EMPTY_INPUT_REASON, code=ErrorCode.EMPTY_INPUT, operation=operation
    )
    return BatchResult.from_outcomes([outcome])
