"""Core utilities and shared components for the image renderer."""

from .logging_config import get_logger, setup_logger
from .models import (
    BatchResult,
    ErrorCode,
    Outcome,
    OutcomeStatus,
    ProcessType,
    Quality,
    RenderSpec,
    TargetFormat,
    UploadCandidate,
    ValidationPolicy,
)
from .image_utils import (
    build_image_name,
    extract_extension,
    format_size,
    join_storage_path,
    mb_to_bytes,
)
from .exceptions import (
    ConfigurationError,
    DecodeError,
    DeleteFailedError,
    DeletionError,
    EmptyInputError,
    EncodeError,
    FileTooLargeError,
    ImageNotFoundError,
    ImageRendererError,
    InternalError,
    ProcessingError,
    ResizeError,
    UnsupportedExtensionError,
    UploadValidationError,
    WriteError,
    with_error_handling,
)
from .aggregator import OutcomeAggregator
from .validation import validate_candidate
from .codec import PillowCodec
from .storage import LocalFileStorage, S3Storage

__all__ = [
    "BatchResult",
    "ErrorCode",
    "Outcome",
    "OutcomeStatus",
    "ProcessType",
    "Quality",
    "RenderSpec",
    "TargetFormat",
    "UploadCandidate",
    "ValidationPolicy",
    "build_image_name",
    "extract_extension",
    "format_size",
    "join_storage_path",
    "mb_to_bytes",
    "setup_logger",
    "get_logger",
    "ImageRendererError",
    "ConfigurationError",
    "InternalError",
    "UploadValidationError",
    "EmptyInputError",
    "FileTooLargeError",
    "UnsupportedExtensionError",
    "ProcessingError",
    "DecodeError",
    "ResizeError",
    "EncodeError",
    "WriteError",
    "DeletionError",
    "ImageNotFoundError",
    "DeleteFailedError",
    "with_error_handling",
    "OutcomeAggregator",
    "validate_candidate",
    "PillowCodec",
    "LocalFileStorage",
    "S3Storage",
]
