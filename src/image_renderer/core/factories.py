"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3

from .codec import PillowCodec
from .config import RendererSettings
from .observability import MetricsCollector, StructuredLogger
from .protocols import CodecProtocol, LoggerProtocol, StorageProtocol
from .services import DeletionService, ImageProcessor, UploadService
from .storage import LocalFileStorage, S3Storage
from ..processors import get_batch_processor


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str = "image-renderer") -> LoggerProtocol:
        """Create a structured logger."""
        return StructuredLogger(name)


class StorageFactory:
    """Factory for creating storage backends."""

    @staticmethod
    def create_s3_client(**kwargs: Any) -> Any:
        """Create S3 client with optional configuration."""
        session = boto3.Session()
        return session.client("s3", **kwargs)

    @staticmethod
    def create_storage(
        settings: RendererSettings, s3_client: Optional[Any] = None
    ) -> StorageProtocol:
        """Create the storage backend the settings ask for."""
        if settings.storage == "s3":
            client = s3_client or StorageFactory.create_s3_client()
            return S3Storage(client, settings.s3_bucket or "", settings.s3_prefix)
        return LocalFileStorage()


class ImageProcessorFactory:
    """Factory for creating the complete upload/delete pipeline."""

    @staticmethod
    def create_processor(
        settings: Optional[RendererSettings] = None,
        storage: Optional[StorageProtocol] = None,
        codec: Optional[CodecProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> ImageProcessor:
        """Create a fully configured image processor."""
        if settings is None:
            settings = RendererSettings()

        # Create default dependencies if not provided
        if storage is None:
            storage = StorageFactory.create_storage(settings)

        if codec is None:
            codec = PillowCodec()

        if logger is None:
            logger = LoggerFactory.create_logger()

        upload_service = UploadService(
            policy=settings.to_policy(),
            storage=storage,
            codec=codec,
            logger=logger,
            metrics_collector=metrics_collector,
        )
        deletion_service = DeletionService(
            storage=storage, logger=logger, metrics_collector=metrics_collector
        )

        return ImageProcessor(
            upload_service=upload_service,
            deletion_service=deletion_service,
            storage=storage,
            logger=logger,
            batch_processor=get_batch_processor(settings.processor),
            max_workers=settings.max_workers,
            default_out_dir=settings.output_dir,
        )
