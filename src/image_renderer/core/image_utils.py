"""Naming and size helpers for the image renderer."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from .models import BYTES_PER_MEGABYTE, TargetFormat


def mb_to_bytes(megabytes: int) -> int:
    """
    Convert a size limit in megabytes to bytes.

    Args:
        megabytes: Size in binary megabytes (1 MB = 1024 * 1024 bytes)

    Returns:
        Size in bytes
    """
    if megabytes < 0:
        raise ValueError(f"Size cannot be negative: {megabytes}")
    return megabytes * BYTES_PER_MEGABYTE


def format_size(size_bytes: int) -> str:
    """Render a byte count the way limits are configured, in MB when exact."""
    if size_bytes and size_bytes % BYTES_PER_MEGABYTE == 0:
        return f"{size_bytes // BYTES_PER_MEGABYTE} MB"
    return f"{size_bytes} bytes"


def extract_extension(file_name: str) -> str:
    """
    Extract the lowercase extension of a file name without the leading dot.

    Only the final path component is considered, so a dotted directory
    does not leak into the result.

    Args:
        file_name: File name or path, e.g. "photos/Cat.JPG"

    Returns:
        Extension such as "jpg", or "" when the name has none
    """
    base_name = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in base_name:
        return ""
    return base_name.rsplit(".", 1)[-1].lower()


def build_image_name(
    width: int,
    height: int,
    label: str,
    target_format: TargetFormat,
    now: Optional[datetime] = None,
    unique_id: Optional[str] = None,
) -> str:
    """
    Build the stored file name for an encoded image.

    Format: ``{width}x{height}_{label}_{yyyyMMdd}_{random-hex}.{ext}``. The
    random component makes names unique per call; collisions are left to
    the exclusive write to detect.

    Args:
        width: Output width in pixels
        height: Output height in pixels
        label: Caller supplied label, may be empty
        target_format: Output encoding, decides the extension
        now: Timestamp override (UTC is used when omitted)
        unique_id: Random component override

    Returns:
        File name without directory
    """
    timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d")
    random_part = unique_id or uuid.uuid4().hex
    return (
        f"{width}x{height}_{label}_{timestamp}_{random_part}"
        f".{target_format.extension}"
    )


def join_storage_path(directory: str, file_name: str) -> str:
    """Join a directory and file name with forward slashes."""
    if not directory:
        return file_name
    return f"{directory.rstrip('/')}/{file_name}"
