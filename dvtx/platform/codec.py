"""
JSON encoding of record attribute bags.

Plain JSON types pass through. Values JSON cannot carry are written as
single-key tagged objects:

    {"@ref": {"logical_name": "account", "id": "<uuid>"}}
    {"@uuid": "<uuid>"}
    {"@decimal": "1500000.00"}
    {"@datetime": "2025-01-31T12:00:00+00:00"}
"""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from ..batch.models import RecordRef

_TAGS = ("@ref", "@uuid", "@decimal", "@datetime")


def _encode_value(value: Any) -> Any:
    if isinstance(value, RecordRef):
        return {"@ref": {"logical_name": value.logical_name, "id": str(value.id)}}
    if isinstance(value, UUID):
        return {"@uuid": str(value)}
    if isinstance(value, Decimal):
        return {"@decimal": str(value)}
    if isinstance(value, datetime):
        return {"@datetime": value.isoformat()}
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    raise TypeError(f"Unsupported attribute value type: {type(value).__name__}")


def _decode_value(value: Any) -> Any:
    if isinstance(value, dict) and len(value) == 1:
        (tag, payload), = value.items()
        if tag == "@ref":
            return RecordRef(payload["logical_name"], UUID(payload["id"]))
        if tag == "@uuid":
            return UUID(payload)
        if tag == "@decimal":
            return Decimal(payload)
        if tag == "@datetime":
            return datetime.fromisoformat(payload)
    return value


def encode_attributes(attributes: Mapping[str, Any]) -> str:
    """Serialize an attribute bag. Keys are sorted for a stable encoding."""
    return json.dumps(
        {name: _encode_value(value) for name, value in attributes.items()},
        sort_keys=True,
    )


def decode_attributes(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    data = json.loads(raw)
    return {name: _decode_value(value) for name, value in data.items()}
