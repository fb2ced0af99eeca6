"""boto3-backed implementation of the object store capability."""

from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .error_handling import translate_store_errors
from .exceptions import ListingError
from .models import HeadResult, ListPage
from .protocols import S3ClientProtocol


class S3ObjectStore:
    """
    Thin adapter over an S3 client.

    Every method issues exactly one request. The client is shared read-only,
    so one instance can serve several worker threads.
    """

    def __init__(self, s3_client: S3ClientProtocol, page_size: int = 1000):
        self._s3_client = s3_client
        self._page_size = page_size

    @translate_store_errors("HeadObject")
    def head(self, bucket: str, key: str) -> HeadResult:
        response = self._s3_client.head_object(Bucket=bucket, Key=key)
        return HeadResult(
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength"),
        )

    @translate_store_errors("GetObject")
    def get(self, bucket: str, key: str) -> bytes:
        response = self._s3_client.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()

    @translate_store_errors("PutObject")
    def put(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        self._s3_client.put_object(
            Bucket=bucket, Key=key, Body=body, ContentType=content_type
        )

    def list_page(self, bucket: str, token: Optional[str] = None) -> ListPage:
        """
        Fetch one page of the bucket listing.

        Raises:
            ListingError: On any failure; a backfill cannot continue without it
        """
        request: Dict[str, Any] = {"Bucket": bucket, "MaxKeys": self._page_size}
        if token:
            request["ContinuationToken"] = token

        try:
            response = self._s3_client.list_objects_v2(**request)
        except (ClientError, BotoCoreError) as e:
            raise ListingError(f"Error listing objects in {bucket}: {e}", bucket=bucket) from e

        keys = [obj["Key"] for obj in response.get("Contents", []) if "Key" in obj]
        return ListPage(keys=keys, next_token=response.get("NextContinuationToken"))
