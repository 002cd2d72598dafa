"""Redaction of secrets and location data from HTTP log records."""

from __future__ import annotations

import re

from .const import LOCATION_REDACTED, REDACTED

_SECRET_FIELD_PATTERN = re.compile(r'("password"|"pin"|"PIN")\s*:\s*"[^"]*"')
_TOKEN_FIELD_PATTERN = re.compile(
    r'("access_token"|"refresh_token"|"accessToken"|"refreshToken")\s*:\s*"[^"]*"'
)
_FORM_SECRET_PATTERN = re.compile(
    r"(^|[?&])(password|pin|refresh_token|access_token|client_secret)=[^&\s]*",
    re.MULTILINE,
)
_BEARER_PATTERN = re.compile(r"Bearer\s+[A-Za-z0-9._-]+")
_COORDINATE_FIELD_PATTERN = re.compile(
    r'("latitude"|"longitude"|"lat"|"lng"|"lon")\s*:\s*[-+]?\d+\.?\d*'
)
_COORDINATE_PAIR_PATTERN = re.compile(
    r"[-+]?\d{1,3}\.\d{3,10}\s*,\s*[-+]?\d{1,3}\.\d{3,10}"
)


def redact_sensitive_data(text: str | None) -> str | None:
    """Mask credentials, tokens and coordinates in a request/response body.

    Args:
        text: Raw body text, or None when there was no body.

    Returns:
        The text with sensitive values replaced by fixed placeholders.

    """
    if text is None:
        return None

    redacted = _SECRET_FIELD_PATTERN.sub(rf'\1:"{REDACTED}"', text)
    redacted = _BEARER_PATTERN.sub(f"Bearer {REDACTED}", redacted)
    redacted = _TOKEN_FIELD_PATTERN.sub(rf'\1:"{REDACTED}"', redacted)
    redacted = _FORM_SECRET_PATTERN.sub(rf"\1\2={REDACTED}", redacted)
    redacted = _COORDINATE_FIELD_PATTERN.sub(rf"\1:{REDACTED}", redacted)
    return _COORDINATE_PAIR_PATTERN.sub(LOCATION_REDACTED, redacted)


def redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """Mask every header whose name mentions auth or token."""
    return {
        key: REDACTED if _is_sensitive_header(key) else value
        for key, value in headers.items()
    }


def _is_sensitive_header(name: str) -> bool:
    lowered = name.lower()
    return "auth" in lowered or "token" in lowered
