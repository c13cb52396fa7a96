from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.schemas import LookupResponse
from models.errors import WeatherLookupError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0


class WeatherClient:
    """Minimal HTTP client for the current-weather endpoint."""

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = httpx.URL(endpoint)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def build_url(self, params: dict[str, str]) -> httpx.URL:
        return self.endpoint.copy_merge_params({"appid": self.api_key, **params})

    def lookup(self, lon: str, lat: str) -> LookupResponse:
        url = self.build_url({"lon": lon, "lat": lat})
        logger.info("Sending weather API request")
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise WeatherLookupError(f"weather API request failed: {exc}") from exc

        if not response.is_success:
            body = response.text
            raise WeatherLookupError(
                f"api failed to respond with a 2xx status code, got: {response.status_code}. body: {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            return LookupResponse.model_validate_json(response.content)
        except PydanticValidationError as exc:
            raise WeatherLookupError(
                f"unexpected weather API response: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc
