"""S3 object reader."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from models.errors import ObjectNotFoundError, TransientFetchError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}


class S3ObjectStore:
    """Reads whole objects from a single bucket."""

    def __init__(self, bucket: str, client: Optional[Any] = None) -> None:
        self.bucket = bucket
        self.client = client if client is not None else boto3.client("s3")

    def fetch(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            logger.error(
                "Unable to fetch object",
                extra={"object_key": key, "reason": code or "ClientError"},
            )
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(
                    f"Object with key {key!r} not found in bucket {self.bucket!r}.", key=key
                ) from exc
            raise TransientFetchError(f"Unable to fetch {key!r}: {exc}", key=key) from exc
        except BotoCoreError as exc:
            logger.error("Unable to fetch object", extra={"object_key": key, "reason": type(exc).__name__})
            raise TransientFetchError(f"Unable to fetch {key!r}: {exc}", key=key) from exc
