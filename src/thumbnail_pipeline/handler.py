"""Event-mode entry point: derive variants for objects named in a notification."""

from typing import Any, Dict, Optional

from .core.factories import LoggerFactory, ProcessingPipelineFactory, S3ClientFactory
from .core.services import EventDriver
from .core.settings import load_settings

_driver: Optional[EventDriver] = None


def get_driver() -> EventDriver:
    """Build the driver on first use and reuse it across warm invocations."""
    global _driver
    if _driver is None:
        settings = load_settings()
        logger = LoggerFactory.create_logger("thumbnail-pipeline.events")
        s3_client = S3ClientFactory.create_s3_client(settings.endpoint_url)
        _driver = ProcessingPipelineFactory.create_event_driver(
            settings.to_config(), s3_client=s3_client, logger=logger
        )
    return _driver


def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Process every record of an object-created notification.

    Per-record problems are logged and reported in the summary; they never
    fail the invocation.
    """
    report = get_driver().handle(event)
    return report.summary()
