"""Narrow capabilities the pipelines need from their collaborators."""

from __future__ import annotations

from typing import Protocol

from app.schemas import LookupResponse


class ObjectFetcher(Protocol):
    def fetch(self, key: str) -> bytes:
        """Return the raw object content or raise a ``FetchError``."""


class MessageSender(Protocol):
    def send(self, payload: str) -> str:
        """Enqueue ``payload`` and return its delivery identifier or raise a ``DeliveryError``."""


class WeatherLookup(Protocol):
    def lookup(self, lon: str, lat: str) -> LookupResponse:
        """Return current conditions for the coordinates or raise a ``WeatherLookupError``."""
