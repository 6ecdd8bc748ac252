"""Shared data models for the image renderer."""

import io
import os
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, BinaryIO, FrozenSet, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

BYTES_PER_MEGABYTE = 1024 * 1024


class Quality(IntEnum):
    """Named encoder quality presets."""

    LOW = 25
    MEDIUM = 50
    HIGH = 75
    ULTRA = 100


class TargetFormat(str, Enum):
    """Output encodings supported by the codec."""

    WEBP = "webp"
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    ICO = "ico"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def pillow_format(self) -> str:
        return self.value.upper()

    @property
    def content_type(self) -> str:
        if self is TargetFormat.ICO:
            return "image/x-icon"
        return f"image/{self.value}"


class ProcessType(str, Enum):
    """The kind of operation an outcome reports on."""

    UPLOAD = "upload"
    DELETE = "delete"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class ErrorCode(str, Enum):
    """Machine readable failure categories."""

    EMPTY_INPUT = "empty_input"
    TOO_LARGE = "too_large"
    UNSUPPORTED_EXTENSION = "unsupported_extension"
    DECODE_FAILED = "decode_failed"
    RESIZE_FAILED = "resize_failed"
    ENCODE_FAILED = "encode_failed"
    WRITE_FAILED = "write_failed"
    NOT_FOUND = "not_found"
    DELETE_FAILED = "delete_failed"
    INTERNAL = "internal"


class ValidationPolicy(BaseModel):
    """Immutable validation rules for a processor instance.

    An empty ``allowed_extensions`` set accepts every extension and a
    ``max_size_bytes`` of zero disables the size check.
    """

    model_config = ConfigDict(frozen=True)

    allowed_extensions: FrozenSet[str] = frozenset()
    max_size_bytes: int = Field(default=0, ge=0)

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> FrozenSet[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(
            ext.strip().lstrip(".").lower() for ext in value if ext and ext.strip()
        )

    @classmethod
    def from_megabytes(
        cls, allowed_extensions: Optional[Iterable[str]], max_size_mb: int
    ) -> "ValidationPolicy":
        """Build a policy from a size limit expressed in megabytes."""
        return cls(
            allowed_extensions=frozenset(allowed_extensions or ()),
            max_size_bytes=max_size_mb * BYTES_PER_MEGABYTE,
        )

    @property
    def is_size_limited(self) -> bool:
        return self.max_size_bytes > 0

    def allows_extension(self, extension: str) -> bool:
        if not self.allowed_extensions:
            return True
        return extension.lstrip(".").lower() in self.allowed_extensions


class RenderSpec(BaseModel):
    """Requested output dimensions, encoding and quality."""

    model_config = ConfigDict(frozen=True)

    quality: int = Field(default=Quality.HIGH, ge=1, le=100)
    target_format: TargetFormat = TargetFormat.WEBP
    width: int = Field(default=1024, gt=0)
    height: int = Field(default=1024, gt=0)

    @property
    def quality_value(self) -> int:
        return int(self.quality)


@dataclass
class UploadCandidate:
    """A caller-submitted file awaiting validation.

    The stream is owned by the caller and read at most once.
    """

    name: str
    size_bytes: int
    stream: Optional[BinaryIO] = None

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "UploadCandidate":
        return cls(name=name, size_bytes=len(data), stream=io.BytesIO(data))

    @classmethod
    def from_path(cls, path: str, max_size_bytes: int = 0) -> "UploadCandidate":
        """Load a file from disk into memory.

        Empty files and files larger than a positive ``max_size_bytes`` are
        not read; they get no stream and fail validation on size alone.
        """
        name = os.path.basename(path)
        size_bytes = os.path.getsize(path)
        if size_bytes == 0 or (max_size_bytes and size_bytes > max_size_bytes):
            return cls(name=name, size_bytes=size_bytes)
        with open(path, "rb") as handle:
            data = handle.read()
        return cls.from_bytes(name, data)


class Outcome(BaseModel):
    """Result of processing a single item."""

    model_config = ConfigDict(frozen=True)

    status: OutcomeStatus
    target: str = ""
    reason: str = ""
    code: Optional[ErrorCode] = None
    operation: ProcessType = ProcessType.UPLOAD

    @classmethod
    def success(
        cls, path: str, operation: ProcessType = ProcessType.UPLOAD
    ) -> "Outcome":
        return cls(status=OutcomeStatus.SUCCESS, target=path, operation=operation)

    @classmethod
    def failure(
        cls,
        identifier: str,
        reason: str,
        code: ErrorCode = ErrorCode.INTERNAL,
        operation: ProcessType = ProcessType.UPLOAD,
    ) -> "Outcome":
        return cls(
            status=OutcomeStatus.FAILURE,
            target=identifier,
            reason=reason,
            code=code,
            operation=operation,
        )

    @property
    def is_success(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def message(self) -> str:
        verb = "uploaded" if self.operation is ProcessType.UPLOAD else "deleted"
        if self.is_success:
            return f"The file has been {verb} successfully. [{self.target}]"
        return f"The file named {self.target} could not be {verb}. [{self.reason}]"


class BatchResult(BaseModel):
    """Combined outcomes of a multi-item call.

    ``overall_success`` keeps the historical meaning: true as soon as one
    item succeeded, even when every other item failed. Use
    ``all_succeeded`` when the whole batch has to go through.
    """

    model_config = ConfigDict(frozen=True)

    overall_success: bool = False
    successes: Tuple[Outcome, ...] = ()
    failures: Tuple[Outcome, ...] = ()

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[Outcome]) -> "BatchResult":
        outcomes = list(outcomes)
        successes = tuple(o for o in outcomes if o.is_success)
        failures = tuple(o for o in outcomes if not o.is_success)
        return cls(
            overall_success=bool(successes), successes=successes, failures=failures
        )

    @property
    def any_succeeded(self) -> bool:
        return bool(self.successes)

    @property
    def all_succeeded(self) -> bool:
        return bool(self.successes) and not self.failures

    @property
    def total(self) -> int:
        return len(self.successes) + len(self.failures)
