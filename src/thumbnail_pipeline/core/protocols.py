"""Protocol definitions for dependency injection and testability."""

from typing import Any, Dict, Optional, Protocol

from .models import HeadResult, ListPage


class S3ClientProtocol(Protocol):
    """Subset of the boto3 S3 client used by the object store adapter."""

    def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object metadata from S3."""
        ...

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...

    def list_objects_v2(self, **kwargs: Any) -> Dict[str, Any]:
        """List one page of objects."""
        ...


class ObjectStoreProtocol(Protocol):
    """Object store capability consumed by the pipeline."""

    def head(self, bucket: str, key: str) -> HeadResult:
        """Return object metadata or raise ObjectNotFoundError/AccessDeniedError."""
        ...

    def get(self, bucket: str, key: str) -> bytes:
        """Return the full object body."""
        ...

    def put(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        """Store an object with the given content type."""
        ...

    def list_page(self, bucket: str, token: Optional[str] = None) -> ListPage:
        """Return one page of keys and the continuation token, if any."""
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

    def critical(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log critical message."""
        ...
