"""Protocol definitions for dependency injection and testability."""

from typing import Any, BinaryIO, Optional, Protocol

from .models import TargetFormat


class StorageProtocol(Protocol):
    """Protocol for the storage the renderer persists into."""

    def exists(self, path: str) -> bool:
        """Return True when a file is stored at path."""
        ...

    def create_directory(self, path: str) -> None:
        """Create a directory, doing nothing if it is already there."""
        ...

    def write_new_file(self, path: str, data: bytes) -> None:
        """Write data to a fresh file; raise FileExistsError if path exists."""
        ...

    def delete(self, path: str) -> None:
        """Remove the file at path."""
        ...


class CodecProtocol(Protocol):
    """Protocol for image decode/resize/encode primitives."""

    def decode(self, stream: BinaryIO) -> Any:
        """Decode a byte stream into a raster image."""
        ...

    def resize(self, image: Any, width: int, height: int) -> Optional[Any]:
        """Resize an image, returning None when it cannot be resized."""
        ...

    def encode(self, image: Any, target_format: TargetFormat, quality: int) -> bytes:
        """Encode an image into bytes."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
