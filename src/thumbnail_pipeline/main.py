"""Backfill entry point: derive variants for every object already in a bucket."""

import sys
from typing import Optional

from .core.exceptions import ConfigurationError, ThumbnailPipelineError
from .core.factories import LoggerFactory, ProcessingPipelineFactory, S3ClientFactory
from .core.logging_config import get_logger
from .core.models import BatchReport
from .core.settings import load_settings


def run_backfill(bucket: Optional[str] = None, s3_client=None) -> BatchReport:
    """
    Scan ``bucket`` (default: ``S3_BUCKET``) and derive missing variants.

    Raises:
        ConfigurationError: If no bucket is configured or the client fails
        ListingError: If the bucket listing fails
    """
    settings = load_settings()
    bucket = bucket or settings.bucket
    if not bucket:
        raise ConfigurationError("`S3_BUCKET` env variable not set")

    config = settings.to_config()
    if s3_client is None:
        s3_client = S3ClientFactory.create_s3_client(settings.endpoint_url)

    logger = LoggerFactory.create_logger("thumbnail-pipeline.backfill")
    logger.info(
        f"Starting backfill of s3://{bucket}",
        widths=list(config.sizes.widths),
        force_format=config.output.force_format.value if config.output.force_format else "source",
        skip_upscaling=config.output.skip_upscaling,
        concurrency=config.concurrency.value,
    )
    scanner = ProcessingPipelineFactory.create_backfill_scanner(
        config, s3_client=s3_client, logger=logger
    )
    return scanner.run(bucket)


def main() -> None:
    """
    Run a backfill configured entirely from the environment.

    Exits with status 1 on a fatal error (configuration, client or listing
    failure); per-object failures are reported but do not change the status.
    """
    logger = get_logger("thumbnail-pipeline.backfill")
    try:
        report = run_backfill()
    except KeyboardInterrupt:
        logger.warning("Backfill interrupted by user.")
        sys.exit(130)
    except ThumbnailPipelineError as e:
        logger.error(f"Backfill aborted: {e}")
        sys.exit(1)

    summary = report.summary()
    logger.info(
        "Backfill finished: "
        + ", ".join(f"{name}={value}" for name, value in summary.items())
    )


if __name__ == "__main__":
    main()
