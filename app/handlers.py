"""Runtime entry points for the two pipelines."""

from __future__ import annotations

import logging
from typing import Any, Dict

from app.schemas import S3Event, SQSEvent
from logging_config import configure_logging
from models.errors import ValidationError
from models.records import FileEvent
from services.enrichment import build_default_enrichment
from services.ingestion import build_default_ingestion

logger = logging.getLogger(__name__)

configure_logging()


def handle_object_created(event: Dict[str, Any], _context: Any = None) -> Dict[str, Any]:
    """Queue one lookup request per CSV row of every created object."""
    notification = S3Event.model_validate(event)
    logger.info("Processing weather data", extra={"record_count": len(notification.records)})

    service = build_default_ingestion()
    result = service.process(FileEvent(key=record.s3.object.key) for record in notification.records)
    logger.info(
        "Event processing completed",
        extra={"record_count": len(result.message_ids), "failed_count": len(result.failures)},
    )
    # Poison records are reported, not retried; anything else goes back to the runtime.
    # An aborted batch left rows unprocessed, so it is surfaced as well.
    if result.aborted or any(
        not isinstance(failure.error, ValidationError) for failure in result.failures
    ):
        result.raise_for_failures()
    for failure in result.failures:
        logger.error(
            "Dropping invalid record: %s",
            failure.error,
            extra={"object_key": failure.key, "row_number": failure.row_number},
        )
    return {
        "message_ids": list(result.message_ids),
        "failed": len(result.failures),
        "failures": [failure.describe() for failure in result.failures],
    }


def handle_queue_messages(event: Dict[str, Any], _context: Any = None) -> Dict[str, Any]:
    """Look up the weather for every queued request, stopping at the first failure."""
    delivery = SQSEvent.model_validate(event)
    logger.info("Starting handler", extra={"record_count": len(delivery.records)})

    service = build_default_enrichment()
    service.process_batch(delivery.records)
    return {"processed": [record.message_id for record in delivery.records]}
