"""Pydantic schemas for the wire formats the pipelines consume and produce."""

from __future__ import annotations

from typing import List
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LookupRequest(BaseModel):
    """Queue payload asking for the weather at one coordinate pair."""

    model_config = ConfigDict(frozen=True)

    lat: str = ""
    lon: str = ""


class Coordinates(BaseModel):
    lon: float
    lat: float


class MainReadings(BaseModel):
    temp: float
    temp_min: float
    temp_max: float
    feels_like: float
    humidity: int


class WeatherCondition(BaseModel):
    id: int
    main: str
    description: str
    icon: str


class LookupResponse(BaseModel):
    """Subset of the weather API response used for reporting."""

    coord: Coordinates
    main: MainReadings
    weather: List[WeatherCondition] = Field(default_factory=list)


class S3Object(BaseModel):
    key: str

    @field_validator("key")
    @classmethod
    def _decode_key(cls, value: str) -> str:
        # Notification keys are URL-encoded, with "+" standing in for spaces.
        return unquote_plus(value)


class S3Entity(BaseModel):
    object: S3Object


class S3EventRecord(BaseModel):
    s3: S3Entity


class S3Event(BaseModel):
    """Object-created notification envelope."""

    records: List[S3EventRecord] = Field(default_factory=list, alias="Records")


class SQSMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(default="", alias="messageId")
    body: str


class SQSEvent(BaseModel):
    """Queue delivery envelope."""

    records: List[SQSMessage] = Field(default_factory=list, alias="Records")
