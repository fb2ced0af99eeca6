# src/thumbnail_pipeline/core/error_handling.py

import functools
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import (
    AccessDeniedError,
    ObjectNotFoundError,
    ObjectStoreError,
)

NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound", "NoSuchBucket")
ACCESS_DENIED_CODES = ("403", "AccessDenied", "Forbidden", "AllAccessDisabled")


def classify_client_error(error, bucket="", key=""):
    """
    Map a botocore ClientError onto the store exception hierarchy.

    HEAD responses carry no body, so botocore reports the bare HTTP status
    as the error code; GET/PUT responses carry the S3 error code.
    """
    response = getattr(error, "response", None) or {}
    code = str(response.get("Error", {}).get("Code", ""))
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")

    if code in NOT_FOUND_CODES or status == 404:
        return ObjectNotFoundError(
            f"s3://{bucket}/{key} not found", bucket=bucket, key=key, code=code
        )
    if code in ACCESS_DENIED_CODES or status == 403:
        return AccessDeniedError(
            f"Access denied to s3://{bucket}/{key}", bucket=bucket, key=key, code=code
        )
    return ObjectStoreError(
        f"S3 error on s3://{bucket}/{key}: {error}", bucket=bucket, key=key, code=code
    )


def translate_store_errors(operation):
    """
    Decorator for object store methods taking ``(self, bucket, key, ...)``.

    Converts botocore errors into ObjectStoreError subclasses. No retry is
    attempted: each store call is a single request.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, bucket, *args, **kwargs):
            logger = logging.getLogger(func.__module__ + '.' + func.__name__)
            key = args[0] if args else kwargs.get("key", "")
            try:
                return func(self, bucket, *args, **kwargs)
            except ObjectStoreError:
                raise
            except ClientError as e:
                translated = classify_client_error(e, bucket, key or "")
                logger.debug(f"{operation} on s3://{bucket}/{key or ''} failed: {e}")
                raise translated from e
            except BotoCoreError as e:
                logger.debug(f"{operation} on s3://{bucket}/{key or ''} failed: {e}")
                raise ObjectStoreError(
                    f"S3 {operation} failed on s3://{bucket}/{key or ''}: {e}",
                    bucket=bucket,
                    key=key or "",
                ) from e
        return wrapper
    return decorator


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.
    """
    def __init__(self, operation_name="Batch Operation", logger=None):
        self.operation_name = operation_name
        self.errors = []
        self.logger = logger or logging.getLogger(
            self.__class__.__module__ + '.' + self.__class__.__name__
        )

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(
                f"{self.operation_name} aborted: {exc_val}"
            )
        elif self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.warning(
                    f"  Error {i+1}/{len(self.errors)} for item "
                    f"'{error_detail['item']}': {error_detail['error']}"
                )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")
        return False

    def add_error(self, error_message: str, item_identifier: str = "Unknown item"):
        """
        Record a failure for one item of the batch.

        Args:
            error_message (str): The error message or exception string.
            item_identifier (str): The failing item, e.g. ``bucket/key``.
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
