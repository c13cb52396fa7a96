"""Resolves queued lookup requests against the weather API."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, List, Optional

from app.schemas import SQSMessage
from clients.weather import WeatherClient
from models.errors import ValidationError
from models.records import WeatherReport
from services.ports import WeatherLookup
from services.transformer import decode_request
from settings import EnrichmentSettings, get_enrichment_settings

logger = logging.getLogger(__name__)


class EnrichmentService:
    """Processes queued messages one at a time.

    Any failure is raised straight away and the remaining messages of the batch
    are left untouched, so the queue redelivers the whole unit.
    """

    def __init__(self, weather: WeatherLookup) -> None:
        self.weather = weather

    def process(self, body: str) -> WeatherReport:
        request = decode_request(body)
        response = self.weather.lookup(request.lon, request.lat)
        if not response.weather:
            raise ValidationError("weather response contained no conditions")

        report = WeatherReport(
            lon=request.lon,
            lat=request.lat,
            description=response.weather[0].description,
            temperature=response.main.temp,
        )
        logger.info(
            "Weather data retrieved",
            extra={"description": report.description, "temperature": report.temperature},
        )
        return report

    def process_batch(self, messages: Iterable[SQSMessage]) -> List[WeatherReport]:
        reports: List[WeatherReport] = []
        for message in messages:
            try:
                reports.append(self.process(message.body))
            except Exception:
                logger.error(
                    "Unable to process message",
                    extra={"message_id": message.message_id},
                    exc_info=True,
                )
                raise
        logger.info("Weather requests processed", extra={"record_count": len(reports)})
        return reports


@lru_cache
def build_default_enrichment(settings: Optional[EnrichmentSettings] = None) -> EnrichmentService:
    """Factory that wires the service to the configured weather API."""
    config = settings or get_enrichment_settings()
    client = WeatherClient(
        api_key=config.api_key,
        endpoint=config.api_endpoint,
        timeout=config.request_timeout,
    )
    return EnrichmentService(weather=client)
