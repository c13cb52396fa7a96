"""Conversion between CSV rows and queued lookup requests."""

from __future__ import annotations

import csv
import io
from typing import List, Sequence

from pydantic import ValidationError as PydanticValidationError

from app.schemas import LookupRequest
from models.errors import PayloadDecodeError, ValidationError

Row = Sequence[str]


def parse_rows(raw: bytes, encoding: str = "utf-8") -> List[List[str]]:
    """Split CSV content into rows, header included. Blank lines are dropped."""
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise ValidationError(f"file is not valid {encoding}: {exc}") from exc

    try:
        return [row for row in csv.reader(io.StringIO(text, newline="")) if row]
    except csv.Error as exc:
        raise ValidationError(f"invalid CSV content: {exc}") from exc


def row_to_request(row: Row) -> LookupRequest:
    """Build a request from the longitude and latitude columns; extra columns are ignored."""
    lon = row[0] if len(row) > 0 else ""
    lat = row[1] if len(row) > 1 else ""
    if not lon or not lat:
        raise ValidationError("bad data provided")
    return LookupRequest(lon=lon, lat=lat)


def encode_request(request: LookupRequest) -> str:
    return request.model_dump_json()


def decode_request(body: str) -> LookupRequest:
    try:
        request = LookupRequest.model_validate_json(body)
    except PydanticValidationError as exc:
        reason = exc.errors()[0]["msg"] if exc.errors() else str(exc)
        raise PayloadDecodeError(f"unable to decode message: {reason}") from exc

    if not request.lon or not request.lat:
        raise ValidationError("invalid message, lon/lat required")
    return request
