"""Fake implementations for testing purposes."""

import io
import time
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from botocore.exceptions import ClientError
from PIL import Image

ERROR_STATUS = {
    "404": 404,
    "NoSuchKey": 404,
    "NoSuchBucket": 404,
    "403": 403,
    "AccessDenied": 403,
    "InternalError": 500,
    "SlowDown": 503,
}


def make_client_error(code: str, operation: str, message: str = "") -> ClientError:
    """Build a botocore ClientError the way the real client reports it."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": message or code},
            "ResponseMetadata": {"HTTPStatusCode": ERROR_STATUS.get(code, 400)},
        },
        operation,
    )


@dataclass
class S3Object:
    """Fake S3 object for testing."""

    key: str
    body: bytes
    content_type: Optional[str] = "image/jpeg"
    size: int = 0

    def __post_init__(self):
        if self.size == 0:
            self.size = len(self.body)


@dataclass
class S3Bucket:
    """Fake S3 bucket for testing."""

    name: str
    objects: Dict[str, S3Object] = field(default_factory=dict)

    def add_object(
        self, key: str, body: bytes, content_type: Optional[str] = "image/jpeg"
    ) -> None:
        """Add object to bucket."""
        self.objects[key] = S3Object(key=key, body=body, content_type=content_type)

    def get_object(self, key: str) -> Optional[S3Object]:
        """Get object from bucket."""
        return self.objects.get(key)

    def list_keys(self) -> List[str]:
        """Keys in lexicographic order, as S3 lists them."""
        return sorted(self.objects)


class FakeS3Client:
    """Fake S3 client for testing."""

    def __init__(self):
        self.buckets: Dict[str, S3Bucket] = {}
        self.calls: List[Tuple[str, str, str]] = []
        self.failures: Dict[Tuple[str, str], str] = {}

    @property
    def operation_count(self) -> int:
        return len(self.calls)

    def create_bucket(self, name: str) -> S3Bucket:
        """Create a new bucket."""
        bucket = S3Bucket(name=name)
        self.buckets[name] = bucket
        return bucket

    def get_bucket(self, name: str) -> Optional[S3Bucket]:
        """Get bucket by name."""
        return self.buckets.get(name)

    def fail(self, operation: str, key: str = "*", code: str = "InternalError") -> None:
        """
        Make an operation fail with a ClientError.

        Args:
            operation: "HeadObject", "GetObject", "PutObject" or "ListObjectsV2"
            key: Key the failure applies to; "*" matches every key
            code: S3 error code to report
        """
        self.failures[(operation, key)] = code

    def calls_for(self, operation: str) -> List[str]:
        """Keys passed to ``operation``, in call order."""
        return [key for op, _, key in self.calls if op == operation]

    def _record(self, operation: str, bucket: str, key: str = "") -> None:
        self.calls.append((operation, bucket, key))
        code = self.failures.get((operation, key)) or self.failures.get((operation, "*"))
        if code:
            raise make_client_error(code, operation)

    def _bucket(self, name: str, operation: str) -> S3Bucket:
        bucket = self.buckets.get(name)
        if bucket is None:
            raise make_client_error("NoSuchBucket", operation, f"Bucket {name} not found")
        return bucket

    def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Head object in S3; a missing key reports the bare 404 code."""
        self._record("HeadObject", Bucket, Key)
        obj = self._bucket(Bucket, "HeadObject").get_object(Key)
        if obj is None:
            raise make_client_error("404", "HeadObject", "Not Found")

        response: Dict[str, Any] = {"ContentLength": obj.size}
        if obj.content_type is not None:
            response["ContentType"] = obj.content_type
        return response

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        self._record("GetObject", Bucket, Key)
        obj = self._bucket(Bucket, "GetObject").get_object(Key)
        if obj is None:
            raise make_client_error("NoSuchKey", "GetObject")

        response: Dict[str, Any] = {
            "Body": io.BytesIO(obj.body),
            "ContentLength": obj.size,
        }
        if obj.content_type is not None:
            response["ContentType"] = obj.content_type
        return response

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        """Put object to S3."""
        self._record("PutObject", Bucket, Key)
        self._bucket(Bucket, "PutObject").add_object(Key, Body, ContentType)
        return {
            "ETag": f'"fake-etag-{Key}"',
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }

    def list_objects_v2(
        self,
        Bucket: str,
        MaxKeys: int = 1000,
        ContinuationToken: Optional[str] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """List one page; the continuation token is the last key of the previous page."""
        self._record("ListObjectsV2", Bucket, ContinuationToken or "")
        keys = self._bucket(Bucket, "ListObjectsV2").list_keys()

        if ContinuationToken:
            keys = [key for key in keys if key > ContinuationToken]
        page_keys = keys[:MaxKeys]
        truncated = len(keys) > MaxKeys

        response: Dict[str, Any] = {
            "IsTruncated": truncated,
            "KeyCount": len(page_keys),
        }
        if page_keys:
            bucket = self.buckets[Bucket]
            response["Contents"] = [
                {"Key": key, "Size": bucket.objects[key].size} for key in page_keys
            ]
        if truncated:
            response["NextContinuationToken"] = page_keys[-1]
        return response


class FakeLogger:
    """Fake logger for testing with support for LogContext."""

    def __init__(self, name: str = "test_logger"):
        self.name = name
        self.logs: List[Dict[str, Any]] = []

    def _log(
        self, level: str, message: str, context: Any = None, **kwargs: Any
    ) -> None:
        log_entry = {
            "level": level,
            "message": message,
            "timestamp": time.time(),
            **kwargs,
        }

        if context is not None:
            if hasattr(context, "correlation_id"):
                log_entry["correlation_id"] = context.correlation_id
            if hasattr(context, "operation"):
                log_entry["operation"] = context.operation
            if hasattr(context, "component"):
                log_entry["component"] = context.component
            if hasattr(context, "metadata"):
                log_entry.update(context.metadata)

        self.logs.append(log_entry)

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        self._log("DEBUG", message, context, **kwargs)

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        self._log("INFO", message, context, **kwargs)

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        self._log("WARNING", message, context, **kwargs)

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        self._log("ERROR", message, context, **kwargs)

    def critical(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log critical message."""
        self._log("CRITICAL", message, context, **kwargs)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get logged messages, optionally filtered by level."""
        if level:
            return [log for log in self.logs if log["level"] == level]
        return self.logs.copy()

    def find(self, message: str) -> List[Dict[str, Any]]:
        """Entries whose message contains ``message``."""
        return [log for log in self.logs if message in log["message"]]

    def clear_logs(self) -> None:
        """Clear all logged messages."""
        self.logs.clear()


def create_test_image(
    width: int = 100,
    height: int = 100,
    format: str = "JPEG",
    mode: str = "RGB",
) -> bytes:
    """Create a test image in memory."""
    color = (255, 0, 0, 255) if mode == "RGBA" else "red"
    image = Image.new(mode, (width, height), color=color)

    # Blue checker squares so resampling has something to work on
    blue = (0, 0, 255, 255) if mode == "RGBA" else (0, 0, 255)
    for x in range(0, width, 20):
        for y in range(0, height, 20):
            if (x + y) % 40 == 0:
                image.paste(blue, (x, y, min(x + 10, width), min(y + 10, height)))

    img_bytes = io.BytesIO()
    save_kwargs = {"quality": 95} if format == "JPEG" else {}
    image.save(img_bytes, format=format, **save_kwargs)
    return img_bytes.getvalue()


def setup_test_s3_environment(bucket_name: str = "test-bucket") -> FakeS3Client:
    """Set up a bucket with a mix of images, derived variants and other files."""
    s3_client = FakeS3Client()

    bucket = s3_client.create_bucket(bucket_name)
    bucket.add_object("photos/cat.jpg", create_test_image(2000, 1000), "image/jpeg")
    bucket.add_object(
        "photos/dog.png", create_test_image(300, 200, format="PNG"), "image/png"
    )
    bucket.add_object(
        "photos/bird.webp", create_test_image(800, 600, format="WEBP"), "image/webp"
    )
    bucket.add_object("docs/readme.txt", b"This is not an image", "text/plain")
    bucket.add_object("docs/config.json", b'{"setting": "value"}', "application/json")

    return s3_client
