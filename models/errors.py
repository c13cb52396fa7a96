"""Error taxonomy shared by both pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from models.records import ProcessingFailure


class PipelineError(Exception):
    """Base class for every error raised by the pipelines."""


class ValidationError(PipelineError):
    """Input data that can never be processed, no matter how often it is retried."""


class PayloadDecodeError(ValidationError):
    """A queued message body that is not a valid lookup request document."""


class FetchError(PipelineError):
    """The object could not be read from storage."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class ObjectNotFoundError(FetchError):
    pass


class TransientFetchError(FetchError):
    pass


class DeliveryError(PipelineError):
    """The queue refused or failed to accept a payload."""


class WeatherLookupError(PipelineError):
    """The weather API call failed; upstream status and body are kept when known."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ConfigurationError(PipelineError):
    """Required configuration is missing or invalid."""


class BatchError(PipelineError):
    """Several items of one ingestion batch failed."""

    def __init__(self, failures: Sequence["ProcessingFailure"]) -> None:
        self.failures = tuple(failures)
        first = self.failures[0] if self.failures else None
        summary = f"{len(self.failures)} item(s) failed"
        if first is not None:
            summary = f"{summary}; first: {first.describe()}"
        super().__init__(summary)
