"""Custom exceptions and error handling utilities for the image renderer."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, TypeVar

from .image_utils import format_size
from .logging_config import get_logger
from .models import ErrorCode


class ImageRendererError(Exception):
    """Base exception for all image renderer errors."""

    code: ErrorCode = ErrorCode.INTERNAL

    @property
    def reason(self) -> str:
        """Human readable reason reported in a failure outcome."""
        return str(self)


class ConfigurationError(ImageRendererError):
    """Error raised for invalid configuration options."""


class InternalError(ImageRendererError):
    """Catch-all for failures nobody anticipated."""

    @property
    def reason(self) -> str:
        return f"internal error: {self}"


class UploadValidationError(ImageRendererError):
    """A candidate was rejected by the validation policy."""


class EmptyInputError(UploadValidationError):
    code = ErrorCode.EMPTY_INPUT

    def __init__(self, message: str = "input is empty"):
        super().__init__(message)


class FileTooLargeError(UploadValidationError):
    code = ErrorCode.TOO_LARGE

    def __init__(self, limit_bytes: int, message: str = ""):
        self.limit_bytes = limit_bytes
        super().__init__(
            message
            or f"file exceeds the maximum allowed size of {format_size(limit_bytes)}"
        )


class UnsupportedExtensionError(UploadValidationError):
    code = ErrorCode.UNSUPPORTED_EXTENSION

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"unsupported file extension: '{extension}'")


class ProcessingError(ImageRendererError):
    """Decoding, resizing, encoding or writing an image failed."""


class DecodeError(ProcessingError):
    code = ErrorCode.DECODE_FAILED

    @property
    def reason(self) -> str:
        return f"decode failed: {self}"


class ResizeError(ProcessingError):
    code = ErrorCode.RESIZE_FAILED

    def __init__(self, message: str = "resizing failed"):
        super().__init__(message)


class EncodeError(ProcessingError):
    code = ErrorCode.ENCODE_FAILED

    @property
    def reason(self) -> str:
        return f"encode failed: {self}"


class WriteError(ProcessingError):
    code = ErrorCode.WRITE_FAILED

    @property
    def reason(self) -> str:
        return f"write failed: {self}"


class DeletionError(ImageRendererError):
    """Removing a stored file failed."""


class ImageNotFoundError(DeletionError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, message: str = "not found"):
        super().__init__(message)


class DeleteFailedError(DeletionError):
    code = ErrorCode.DELETE_FAILED

    @property
    def reason(self) -> str:
        return f"internal error: {self}"


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(func: F) -> F:
    """Wrap a function with standardized error handling.

    Renderer errors pass through untouched; anything else is logged and
    re-raised as :class:`InternalError` with the original message.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:  # type: ignore[override]
        logger = get_logger("image-renderer.errors")
        try:
            return func(*args, **kwargs)
        except ImageRendererError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Unhandled error in {func.__name__}: {exc}", exc_info=True)
            raise InternalError(str(exc)) from exc

    return wrapper  # type: ignore[return-value]
