"""Runtime settings for building an image processor."""

import os
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .models import ValidationPolicy

DEFAULT_ALLOWED_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "ico"]
DEFAULT_MAX_SIZE_MB = 10

ENV_PREFIX = "IMAGE_RENDERER_"


class RendererSettings(BaseModel):
    """Configuration for an image processor.

    ``allowed_extensions`` left as None falls back to the default image
    extensions; an explicit empty list accepts every extension.
    ``max_size_mb`` of 0 disables the size limit.
    """

    allowed_extensions: Optional[List[str]] = None
    max_size_mb: int = Field(default=DEFAULT_MAX_SIZE_MB, ge=0)
    output_dir: str = "Images"
    processor: Literal["serial", "multithread", "asyncio"] = "multithread"
    max_workers: int = Field(default=8, ge=1)
    storage: Literal["local", "s3"] = "local"
    s3_bucket: Optional[str] = None
    s3_prefix: str = ""

    @field_validator("allowed_extensions")
    @classmethod
    def _normalize_extensions(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return [ext.strip().lstrip(".").lower() for ext in value if ext.strip()]

    @property
    def effective_extensions(self) -> List[str]:
        if self.allowed_extensions is None:
            return list(DEFAULT_ALLOWED_EXTENSIONS)
        return list(self.allowed_extensions)

    def to_policy(self) -> ValidationPolicy:
        """Build the immutable validation policy these settings describe."""
        return ValidationPolicy.from_megabytes(
            self.effective_extensions, self.max_size_mb
        )

    @classmethod
    def from_env(cls, **overrides) -> "RendererSettings":
        """
        Build settings from environment variables.

        Environment Variables:
            IMAGE_RENDERER_ALLOWED_EXTENSIONS: Comma separated list, "" allows all
            IMAGE_RENDERER_MAX_SIZE_MB: Size limit in MB, 0 for unlimited
            IMAGE_RENDERER_OUTPUT_DIR: Default output directory
            IMAGE_RENDERER_PROCESSOR: serial, multithread or asyncio
            IMAGE_RENDERER_MAX_WORKERS: Upper bound on concurrent workers
            IMAGE_RENDERER_STORAGE: local or s3
            IMAGE_RENDERER_S3_BUCKET / IMAGE_RENDERER_S3_PREFIX: S3 location

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        values = {}
        raw_extensions = os.getenv(f"{ENV_PREFIX}ALLOWED_EXTENSIONS")
        if raw_extensions is not None:
            values["allowed_extensions"] = [
                ext for ext in raw_extensions.split(",") if ext.strip()
            ]
        for field_name in (
            "max_size_mb",
            "output_dir",
            "processor",
            "max_workers",
            "storage",
            "s3_bucket",
            "s3_prefix",
        ):
            raw = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
            if raw is not None:
                values[field_name] = raw
        values.update(overrides)
        return cls.build(**values)

    @classmethod
    def build(cls, **values) -> "RendererSettings":
        """Validate values, reporting problems as ConfigurationError."""
        try:
            settings = cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid renderer settings: {e}") from e
        if settings.storage == "s3" and not settings.s3_bucket:
            raise ConfigurationError("s3_bucket is required when storage is 's3'")
        return settings
