"""Testing utilities and fakes for the image renderer."""

from .fakes import (
    FakeStorage,
    FakeS3Client,
    FakeLogger,
    create_test_image,
    make_candidate,
)

__all__ = [
    "FakeStorage",
    "FakeS3Client",
    "FakeLogger",
    "create_test_image",
    "make_candidate",
]
