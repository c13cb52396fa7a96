"""Turns object-created notifications into queued lookup requests."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from messaging.mock_sqs import MockSQSQueue
from messaging.sqs import SQSMessageQueue
from models.errors import DeliveryError, FetchError, PipelineError, ValidationError
from models.records import BatchResult, FileEvent, ProcessingFailure
from services.ports import MessageSender, ObjectFetcher
from services.transformer import encode_request, parse_rows, row_to_request
from settings import ErrorPolicy, IngestionSettings, get_ingestion_settings
from storage.mock_s3 import MockS3Bucket
from storage.s3 import S3ObjectStore

logger = logging.getLogger(__name__)


class IngestionService:
    """Fetches CSV objects, converts each data row and enqueues it.

    Failures are handled according to ``policy``: ``CONTINUE`` records the
    failure and moves on to the next row or file, ``ABORT`` stops the batch at
    the first failure and keeps whatever was delivered before it.
    """

    def __init__(
        self,
        store: ObjectFetcher,
        queue: MessageSender,
        policy: ErrorPolicy = ErrorPolicy.CONTINUE,
    ) -> None:
        self.store = store
        self.queue = queue
        self.policy = policy

    def process(self, events: Iterable[FileEvent]) -> BatchResult:
        result = BatchResult()
        for event in events:
            logger.info("Processing object", extra={"object_key": event.key})
            if not event.is_csv:
                logger.warning(
                    "Skipping object without a .csv suffix",
                    extra={"object_key": event.key},
                )
                continue
            if not self._process_file(event.key, result):
                result.aborted = True
                logger.error(
                    "Aborting batch after first failure",
                    extra={"object_key": event.key, "policy": self.policy.value},
                )
                break

        logger.info(
            "Batch processed",
            extra={
                "record_count": len(result.message_ids),
                "failed_count": len(result.failures),
                "policy": self.policy.value,
            },
        )
        return result

    def _process_file(self, key: str, result: BatchResult) -> bool:
        try:
            rows = parse_rows(self.store.fetch(key))
        except (FetchError, ValidationError) as exc:
            return self._record_failure(result, key, exc)

        if len(rows) <= 1:
            logger.info(
                "File has no data rows (first row reserved for column headings)",
                extra={"object_key": key, "row_count": len(rows)},
            )
            return True

        logger.info("Processing CSV file", extra={"object_key": key, "row_count": len(rows)})
        for row_number, row in enumerate(rows[1:], start=2):
            try:
                message_id = self.queue.send(encode_request(row_to_request(row)))
            except (ValidationError, DeliveryError) as exc:
                if not self._record_failure(result, key, exc, row_number):
                    return False
                continue

            logger.debug(
                "Message queued",
                extra={"object_key": key, "row_number": row_number, "message_id": message_id},
            )
            result.message_ids.append(message_id)
        return True

    def _record_failure(
        self,
        result: BatchResult,
        key: str,
        error: PipelineError,
        row_number: Optional[int] = None,
    ) -> bool:
        """Store the failure and report whether the batch may carry on."""
        failure = ProcessingFailure(key=key, error=error, row_number=row_number)
        result.failures.append(failure)
        message = "Skipping row" if row_number is not None else "Skipping file"
        logger.warning(
            "%s: %s",
            message,
            error,
            extra={"object_key": key, "row_number": row_number, "reason": type(error).__name__},
        )
        return self.policy is ErrorPolicy.CONTINUE


@lru_cache
def build_default_ingestion(settings: Optional[IngestionSettings] = None) -> IngestionService:
    """Factory that wires the service to S3 and SQS, or to local stand-ins when configured."""
    config = settings or get_ingestion_settings()
    store: ObjectFetcher
    queue: MessageSender
    if config.local_root:
        root = Path(config.local_root)
        store = MockS3Bucket(name=config.bucket_name, root_path=root / "s3")
        queue = MockSQSQueue(name=config.queue_url, persistence_path=root / "queue.json")
    else:
        store = S3ObjectStore(bucket=config.bucket_name)
        queue = SQSMessageQueue(queue_url=config.queue_url, delay_seconds=config.delay_seconds)
    return IngestionService(store=store, queue=queue, policy=config.error_policy)
