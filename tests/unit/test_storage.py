"""Unit tests for storage backends."""

import os

import pytest
from botocore.exceptions import ClientError

from image_renderer.core.storage import LocalFileStorage, S3Storage
from image_renderer.testing.fakes import FakeS3Client


class TestLocalFileStorage:
    """Tests for LocalFileStorage."""

    def test_create_directory_is_idempotent(self, tmp_path):
        storage = LocalFileStorage()
        target = str(tmp_path / "a" / "b")
        storage.create_directory(target)
        storage.create_directory(target)
        assert os.path.isdir(target)

    def test_write_then_exists_then_delete(self, tmp_path):
        storage = LocalFileStorage()
        path = str(tmp_path / "img.webp")
        assert storage.exists(path) is False

        storage.write_new_file(path, b"data")
        assert storage.exists(path) is True
        with open(path, "rb") as handle:
            assert handle.read() == b"data"

        storage.delete(path)
        assert storage.exists(path) is False

    def test_write_refuses_to_overwrite(self, tmp_path):
        storage = LocalFileStorage()
        path = str(tmp_path / "img.webp")
        storage.write_new_file(path, b"first")
        with pytest.raises(FileExistsError):
            storage.write_new_file(path, b"second")
        with open(path, "rb") as handle:
            assert handle.read() == b"first"

    def test_directory_is_not_a_file(self, tmp_path):
        assert LocalFileStorage().exists(str(tmp_path)) is False

    def test_relative_paths_use_root(self, tmp_path):
        storage = LocalFileStorage(root=str(tmp_path))
        storage.create_directory("Images")
        storage.write_new_file("Images/a.png", b"x")
        assert (tmp_path / "Images" / "a.png").read_bytes() == b"x"
        assert storage.exists("Images/a.png")

    def test_delete_missing_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalFileStorage().delete(str(tmp_path / "missing"))


class TestS3Storage:
    """Tests for S3Storage against the fake client."""

    @pytest.fixture
    def s3(self):
        client = FakeS3Client()
        client.create_bucket("images")
        return client

    def test_write_and_exists(self, s3):
        storage = S3Storage(s3, "images", prefix="uploads/")
        storage.create_directory("Images")
        storage.write_new_file("Images/a.webp", b"data")

        stored = s3.buckets["images"]["uploads/Images/a.webp"]
        assert stored["Body"] == b"data"
        assert stored["ContentType"] == "image/webp"
        assert storage.exists("Images/a.webp") is True
        assert storage.exists("Images/b.webp") is False

    def test_write_refuses_to_overwrite(self, s3):
        storage = S3Storage(s3, "images")
        storage.write_new_file("a.png", b"first")
        with pytest.raises(FileExistsError):
            storage.write_new_file("a.png", b"second")
        assert s3.buckets["images"]["a.png"]["Body"] == b"first"

    def test_delete(self, s3):
        storage = S3Storage(s3, "images")
        storage.write_new_file("a.jpeg", b"x")
        storage.delete("a.jpeg")
        assert storage.exists("a.jpeg") is False

    def test_unknown_extension_content_type(self, s3):
        storage = S3Storage(s3, "images")
        storage.write_new_file("blob.bin", b"x")
        assert s3.buckets["images"]["blob.bin"]["ContentType"] == "application/octet-stream"

    def test_other_errors_propagate(self, s3):
        storage = S3Storage(s3, "images")
        s3.set_failure_mode(True, "AccessDenied")
        with pytest.raises(ClientError):
            storage.exists("a.png")
        with pytest.raises(ClientError):
            storage.write_new_file("a.png", b"x")


class _FailingHandle:
    """File handle whose writes fail as if the disk filled up."""

    def __init__(self, handle):
        self._handle = handle

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self._handle.close()
        return False

    def write(self, data):
        self._handle.write(data[:1])
        raise OSError(28, "No space left on device")


def test_local_partial_write_is_removed(tmp_path, monkeypatch):
    real_open = open
    monkeypatch.setattr(
        "image_renderer.core.storage.open",
        lambda path, mode: _FailingHandle(real_open(path, mode)),
        raising=False,
    )
    path = tmp_path / "img.webp"

    with pytest.raises(OSError, match="No space left"):
        LocalFileStorage().write_new_file(str(path), b"data")

    assert not path.exists()


def test_local_existing_file_survives_failed_write(tmp_path):
    path = tmp_path / "img.webp"
    path.write_bytes(b"original")
    with pytest.raises(FileExistsError):
        LocalFileStorage().write_new_file(str(path), b"new")
    assert path.read_bytes() == b"original"
