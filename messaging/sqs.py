"""SQS message sender."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from models.errors import DeliveryError

logger = logging.getLogger(__name__)


class SQSMessageQueue:
    """Sends payloads to one queue, delayed by ``delay_seconds``."""

    def __init__(
        self,
        queue_url: str,
        delay_seconds: int = 10,
        client: Optional[Any] = None,
    ) -> None:
        self.queue_url = queue_url
        self.delay_seconds = delay_seconds
        self.client = client if client is not None else boto3.client("sqs")

    def send(self, payload: str) -> str:
        try:
            response = self.client.send_message(
                QueueUrl=self.queue_url,
                MessageBody=payload,
                DelaySeconds=self.delay_seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Unable to send message", extra={"reason": type(exc).__name__})
            raise DeliveryError(f"Unable to send message to {self.queue_url}: {exc}") from exc

        message_id = response.get("MessageId")
        if not message_id:
            raise DeliveryError(f"Queue {self.queue_url} returned no message id.")
        return message_id
