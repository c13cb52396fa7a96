"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from models.errors import BatchError, PipelineError

CSV_SUFFIX = ".csv"


@dataclass(frozen=True, slots=True)
class FileEvent:
    """A single "object created" notification."""

    key: str

    @property
    def is_csv(self) -> bool:
        return self.key.endswith(CSV_SUFFIX)


@dataclass(frozen=True, slots=True)
class ProcessingFailure:
    """A file or row that could not be turned into a queued message."""

    key: str
    error: PipelineError
    row_number: Optional[int] = None

    def describe(self) -> str:
        location = self.key if self.row_number is None else f"{self.key} row {self.row_number}"
        return f"{location}: {self.error}"


@dataclass
class BatchResult:
    """Delivery identifiers and failures collected during one ingestion run."""

    message_ids: List[str] = field(default_factory=list)
    failures: List[ProcessingFailure] = field(default_factory=list)
    aborted: bool = False

    @property
    def error(self) -> Optional[PipelineError]:
        if not self.failures:
            return None
        if self.aborted or len(self.failures) == 1:
            return self.failures[0].error
        return BatchError(self.failures)

    def raise_for_failures(self) -> None:
        error = self.error
        if error is not None:
            raise error


@dataclass(frozen=True, slots=True)
class WeatherReport:
    """Result of enriching one lookup request."""

    lon: str
    lat: str
    description: str
    temperature: float
