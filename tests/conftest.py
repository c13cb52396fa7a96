from __future__ import annotations

from typing import Any, Callable, Dict, List

import pytest

from app.schemas import LookupResponse
from models.errors import DeliveryError
from storage.mock_s3 import MockS3Bucket


def build_good_weather_response() -> Dict[str, Any]:
    return {
        "coord": {"lon": 1, "lat": 2},
        "main": {
            "temp": 20,
            "temp_min": 10,
            "temp_max": 30,
            "feels_like": 25,
            "humidity": 90,
        },
        "weather": [
            {"id": 1, "main": "main", "description": "warm", "icon": "icon"},
        ],
    }


class RecordingBucket(MockS3Bucket):
    """Bucket that remembers which keys were fetched."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.fetched_keys: List[str] = []

    def fetch(self, key: str) -> bytes:
        self.fetched_keys.append(key)
        return super().fetch(key)


class SequentialQueue:
    """Hands out predictable message ids and remembers every payload."""

    def __init__(self, fail_on_calls: tuple[int, ...] = ()) -> None:
        self.payloads: List[str] = []
        self.calls = 0
        self.fail_on_calls = set(fail_on_calls)

    def send(self, payload: str) -> str:
        self.calls += 1
        if self.calls in self.fail_on_calls:
            raise DeliveryError("message queue unavailable")
        self.payloads.append(payload)
        return f"msg-{len(self.payloads)}"


class StubWeather:
    def __init__(self, payload: Dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.payload = payload if payload is not None else build_good_weather_response()
        self.error = error
        self.calls: List[tuple[str, str]] = []

    def lookup(self, lon: str, lat: str) -> LookupResponse:
        self.calls.append((lon, lat))
        if self.error is not None:
            raise self.error
        return LookupResponse.model_validate(self.payload)


@pytest.fixture()
def good_weather_response() -> Dict[str, Any]:
    return build_good_weather_response()


@pytest.fixture()
def recording_bucket() -> RecordingBucket:
    return RecordingBucket("weather-data")


@pytest.fixture()
def make_queue() -> Callable[..., SequentialQueue]:
    return SequentialQueue


@pytest.fixture()
def make_weather() -> Callable[..., StubWeather]:
    return StubWeather
