"""Typed accessors over loosely typed vendor JSON.

Vendor payloads are nested dictionaries whose fields may be missing, null,
JSON numbers or numeric-looking strings. Every accessor here returns either
a value of the requested type or the supplied default; none of them raise.
"""

from __future__ import annotations

import json
import math
import re
from datetime import UTC, datetime
from typing import Any

from .errors import VehicleApiError

_NUMBER_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_INTEGER_PATTERN = re.compile(r"[+-]?\d+")


def load_json(data: bytes | str | None, api_name: str) -> Any:
    """Decode a response body.

    Raises:
        VehicleApiError: If the body is empty or not valid JSON.

    """
    if not data:
        raise VehicleApiError("Empty response body", api_name=api_name)
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as err:
        raise VehicleApiError(
            f"Invalid JSON response: {body_text(data)}", api_name=api_name
        ) from err


def load_json_object(data: bytes | str | None, api_name: str) -> dict[str, Any]:
    """Decode a response body that must be a JSON object."""
    payload = load_json(data, api_name)
    if not isinstance(payload, dict):
        raise VehicleApiError(
            f"Unexpected response shape: {body_text(data)}", api_name=api_name
        )
    return payload


def body_text(data: bytes | str | None) -> str:
    """Return a printable version of a response body for messages."""
    if data is None:
        return "<empty>"
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace") or "<empty>"
    return data or "<empty>"


def get_child_value(data: Any, path: str) -> Any:
    """Walk a dotted path through nested dictionaries.

    Returns None as soon as a segment is missing or a non-dict is reached.
    """
    value = data
    for key in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
        if value is None:
            return None
    return value


def get_dict(data: Any, path: str) -> dict[str, Any]:
    value = get_child_value(data, path)
    return value if isinstance(value, dict) else {}


def get_list(data: Any, path: str) -> list[Any]:
    value = get_child_value(data, path)
    return value if isinstance(value, list) else []


def _to_float(value: int | float | str) -> float | None:
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None


def extract_float(value: Any, default: float | None = None) -> float | None:
    """Convert a JSON number or numeric string to a finite float.

    Booleans are not numbers here, even though Python treats them as ints.
    Values too large for a float fall back to the default.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int | float) or (
        isinstance(value, str) and _NUMBER_PATTERN.fullmatch(value)
    ):
        number = _to_float(value)
        return default if number is None else number
    return default


def extract_int(value: Any, default: int | None = None) -> int | None:
    """Convert a JSON number or numeric string to int without losing data."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_PATTERN.fullmatch(value):
        try:
            return int(value)
        except ValueError:
            return default
    number = extract_float(value)
    if number is not None and number.is_integer():
        return int(number)
    return default


def extract_bool(value: Any, default: bool | None = None) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    return default


def extract_str(value: Any, default: str | None = None) -> str | None:
    if isinstance(value, str):
        return value
    return default


def float_at(data: Any, path: str, default: float | None = None) -> float | None:
    return extract_float(get_child_value(data, path), default)


def int_at(data: Any, path: str, default: int | None = None) -> int | None:
    return extract_int(get_child_value(data, path), default)


def bool_at(data: Any, path: str, default: bool | None = None) -> bool | None:
    return extract_bool(get_child_value(data, path), default)


def str_at(data: Any, path: str, default: str | None = None) -> str | None:
    return extract_str(get_child_value(data, path), default)


def parse_datetime(value: Any, pattern: str) -> datetime | None:
    """Parse a vendor timestamp in UTC, returning None when it does not match."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, pattern).replace(tzinfo=UTC)
    except ValueError:
        return None


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
