"""Validate, resize, re-encode and store uploaded images in concurrent batches."""

from .core import (
    BatchResult,
    Outcome,
    Quality,
    RenderSpec,
    TargetFormat,
    UploadCandidate,
    ValidationPolicy,
)
from .core.config import RendererSettings
from .core.factories import ImageProcessorFactory
from .core.services import ImageProcessor

__version__ = "0.1.0"

__all__ = [
    "BatchResult",
    "ImageProcessor",
    "ImageProcessorFactory",
    "Outcome",
    "Quality",
    "RenderSpec",
    "RendererSettings",
    "TargetFormat",
    "UploadCandidate",
    "ValidationPolicy",
    "__version__",
]
