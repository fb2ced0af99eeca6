"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .exceptions import ConfigurationError
from .filters import ObjectFilter
from .models import PipelineConfig
from .observability import StructuredLogger
from .protocols import LoggerProtocol, S3ClientProtocol
from .services import BackfillScanner, DerivationPipeline, EventDriver
from .store import S3ObjectStore
from ..processors import get_batch_processor


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str = "thumbnail-pipeline") -> LoggerProtocol:
        """Create a structured logger configured from LOG_LEVEL/LOG_FORMAT."""
        return StructuredLogger(name)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(endpoint_url: Optional[str] = None, **kwargs: Any) -> S3ClientProtocol:
        """
        Create an S3 client using the default credential chain.

        Raises:
            ConfigurationError: If the client cannot be constructed
        """
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        try:
            session = boto3.Session()
            return session.client("s3", **kwargs)  # type: ignore
        except (BotoCoreError, ValueError) as e:
            raise ConfigurationError(f"Could not create S3 client: {e}") from e


class ProcessingPipelineFactory:
    """Factory for wiring the pipeline and its drivers."""

    @staticmethod
    def create_pipeline(
        config: PipelineConfig,
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> DerivationPipeline:
        """Create a derivation pipeline over an S3 client."""
        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client()
        if logger is None:
            logger = LoggerFactory.create_logger()

        store = S3ObjectStore(s3_client, page_size=config.page_size)
        object_filter = ObjectFilter(store, config, logger)
        return DerivationPipeline(store, config, logger, object_filter)

    @staticmethod
    def create_event_driver(
        config: PipelineConfig,
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> EventDriver:
        """Create the driver for object-created notifications."""
        logger = logger or LoggerFactory.create_logger()
        pipeline = ProcessingPipelineFactory.create_pipeline(config, s3_client, logger)
        return EventDriver(pipeline, logger, get_batch_processor(config.concurrency))

    @staticmethod
    def create_backfill_scanner(
        config: PipelineConfig,
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> BackfillScanner:
        """Create the driver for full-bucket backfills."""
        logger = logger or LoggerFactory.create_logger()
        s3_client = s3_client or S3ClientFactory.create_s3_client()
        store = S3ObjectStore(s3_client, page_size=config.page_size)
        pipeline = DerivationPipeline(store, config, logger, ObjectFilter(store, config, logger))
        return BackfillScanner(
            store, pipeline, logger, get_batch_processor(config.concurrency)
        )
