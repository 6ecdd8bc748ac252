"""Tests for image_utils helpers."""

import re
from datetime import datetime, timezone

import pytest

from image_renderer.core.image_utils import (
    build_image_name,
    extract_extension,
    format_size,
    join_storage_path,
    mb_to_bytes,
)
from image_renderer.core.models import TargetFormat


class TestMbToBytes:
    """Lock in the byte/megabyte arithmetic used by size limits."""

    @pytest.mark.parametrize(
        "megabytes,expected",
        [(0, 0), (1, 1_048_576), (10, 10_485_760), (25, 26_214_400)],
    )
    def test_conversion(self, megabytes, expected):
        assert mb_to_bytes(megabytes) == expected

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            mb_to_bytes(-1)


class TestFormatSize:
    def test_exact_megabytes(self):
        assert format_size(10 * 1024 * 1024) == "10 MB"

    def test_odd_byte_count(self):
        assert format_size(1500) == "1500 bytes"

    def test_zero(self):
        assert format_size(0) == "0 bytes"


class TestExtractExtension:
    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("a.png", "png"),
            ("Photo.JPG", "jpg"),
            ("archive.tar.gz", "gz"),
            ("noext", ""),
            ("dir.v2/noext", ""),
            ("dir\\img.Gif", "gif"),
            ("trailing.", ""),
        ],
    )
    def test_extract(self, file_name, expected):
        assert extract_extension(file_name) == expected


class TestBuildImageName:
    def test_deterministic_parts(self):
        """Test the name layout with fixed timestamp and random part."""
        name = build_image_name(
            640,
            480,
            "avatar",
            TargetFormat.WEBP,
            now=datetime(2024, 3, 9, tzinfo=timezone.utc),
            unique_id="abc123",
        )
        assert name == "640x480_avatar_20240309_abc123.webp"

    def test_random_component_is_hex_and_unique(self):
        """Test names differ between calls and carry a 32 char hex id."""
        first = build_image_name(10, 10, "", TargetFormat.PNG)
        second = build_image_name(10, 10, "", TargetFormat.PNG)
        assert first != second
        assert re.fullmatch(r"10x10__\d{8}_[0-9a-f]{32}\.png", first)

    def test_extension_follows_format(self):
        name = build_image_name(1, 1, "x", TargetFormat.ICO)
        assert name.endswith(".ico")


class TestJoinStoragePath:
    def test_join(self):
        assert join_storage_path("Images", "a.webp") == "Images/a.webp"
        assert join_storage_path("Images/", "a.webp") == "Images/a.webp"
        assert join_storage_path("", "a.webp") == "a.webp"
