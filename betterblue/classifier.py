"""Error classification for vendor responses.

The generic checks run on every response the client receives; the vendor
tables run inside each provider's parser. Classification looks only at the
status code and body, never at the operation that produced them.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from .const import (
    EU_COMMAND_SUCCESS_CODE,
    HTTP_BAD_GATEWAY,
    HTTP_BAD_REQUEST,
    HTTP_UNAUTHORIZED,
    KIA_ERROR_CODE_SESSION_KEY,
    KIA_ERROR_CODES_VEHICLE_SESSION,
)
from .errors import ErrorType, VehicleApiError
from .parsing import extract_int, extract_str, get_child_value

_LOGGER = logging.getLogger(__name__)

GENERIC_API_NAME = "APIClient"


def is_http_error(status: int) -> bool:
    """Check if an HTTP status code indicates an error."""
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int, body: Any) -> bool:
    """Check if a response means the session token has expired.

    Args:
        status: HTTP status code.
        body: Decoded JSON body, or None when the body was not JSON.

    Returns:
        True for HTTP 401 or a top-level vendor ``errorCode`` of 401.

    """
    if status == HTTP_UNAUTHORIZED:
        return True
    if isinstance(body, dict):
        return extract_int(body.get("errorCode")) == HTTP_UNAUTHORIZED
    return False


def is_server_error(status: int) -> bool:
    """Check if a status is the gateway error the vendors return when busy."""
    return status == HTTP_BAD_GATEWAY


def decode_body(data: bytes | None) -> Any:
    """Best-effort JSON decode used for classification and log annotation."""
    if not data:
        return None
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError):
        return None


def classify_response(
    status: int, data: bytes | None, api_name: str = GENERIC_API_NAME
) -> VehicleApiError | None:
    """Map an HTTP response to a canonical error, or None if it succeeded.

    Args:
        status: HTTP status code.
        data: Raw response body.
        api_name: Name embedded in the resulting error.

    Returns:
        The classified error, or None when the response is not an error.

    """
    body = decode_body(data)
    text = data.decode("utf-8", errors="replace") if data else "Unknown error"

    if is_auth_error(status, body):
        return VehicleApiError(
            f"Authentication expired ({status}): {text}",
            code=status,
            api_name=api_name,
            error_type=ErrorType.INVALID_CREDENTIALS,
        )

    if is_server_error(status):
        return VehicleApiError(
            f"Server error ({status}): {text}",
            code=status,
            api_name=api_name,
            error_type=ErrorType.SERVER_ERROR,
        )

    if is_http_error(status):
        reason = httpx.codes.get_reason_phrase(status) or "Unknown status"
        return VehicleApiError(
            f"HTTP {status}: {reason}", code=status, api_name=api_name
        )

    return None


def validate_response(
    status: int, data: bytes | None, api_name: str = GENERIC_API_NAME
) -> None:
    """Raise the classified error for a response, if there is one."""
    error = classify_response(status, data, api_name)
    if error is not None:
        _LOGGER.debug("Response classified as %s: %s", error.error_type, error)
        raise error


def extract_api_error(data: bytes | None) -> str | None:
    """Summarize a vendor error embedded in a body for the HTTP log record."""
    body = decode_body(data)
    if not isinstance(body, dict):
        return None

    status = body.get("status")
    if isinstance(status, dict):
        error_code = extract_int(status.get("errorCode"))
        error_message = extract_str(status.get("errorMessage"))
        if error_code and error_message is not None:
            return f"API Error {error_code}: {error_message}"

    error_code = extract_int(body.get("errorCode"))
    if error_code == HTTP_UNAUTHORIZED:
        message = extract_str(body.get("errorMessage"), "Authentication error")
        return f"API Error {error_code}: {message}"
    if error_code == HTTP_BAD_GATEWAY:
        message = extract_str(body.get("errorMessage"), "Server error")
        return f"API Error {error_code}: {message}"

    error = extract_str(body.get("error"))
    if error is not None:
        return f"API Error: {error}"

    message = extract_str(body.get("message"))
    if message is not None and body.get("success") is False:
        return f"API Error: {message}"

    return None


def check_kia_errors(body: Any, api_name: str) -> None:
    """Apply the Kia error table to a decoded body.

    Raises:
        VehicleApiError: When ``status.errorCode`` is present and nonzero.

    """
    error_code = extract_int(get_child_value(body, "status.errorCode"))
    if not error_code:
        return

    error_message = extract_str(
        get_child_value(body, "status.errorMessage"), "Unknown Kia API error"
    )
    status_code = extract_int(get_child_value(body, "status.statusCode"), -1)
    error_type = extract_int(get_child_value(body, "status.errorType"), -1)
    message_lower = error_message.lower()

    if (
        status_code == 1
        and error_type == 1
        and error_code == 1
        and any(
            marker in message_lower
            for marker in ("valid email", "invalid", "credential")
        )
    ):
        raise VehicleApiError.invalid_credentials(
            "Invalid username or password", api_name=api_name
        )

    if error_code in KIA_ERROR_CODES_VEHICLE_SESSION:
        raise VehicleApiError.invalid_vehicle_session(error_message, api_name=api_name)

    if error_code == KIA_ERROR_CODE_SESSION_KEY and any(
        marker in message_lower for marker in ("session key", "invalid", "expired")
    ):
        raise VehicleApiError.invalid_credentials(
            "Session Key is either invalid or expired", api_name=api_name
        )

    raise VehicleApiError.log_error(
        f"Kia API error: {error_message} "
        f"(Code: {error_code}, Status: {status_code}, Type: {error_type})",
        code=error_code,
        api_name=api_name,
    )


def check_pin_rejection(body: Any, api_name: str) -> None:
    """Detect the BlueLink PIN rejection marker on an otherwise-200 body."""
    if not isinstance(body, dict):
        return
    if extract_str(body.get("isBlueLinkServicePinValid")) != "invalid":
        return
    remaining = body.get("remainingAttemptCount")
    remaining_text = "unknown" if remaining is None else str(remaining)
    raise VehicleApiError.invalid_pin(
        f"Invalid PIN, {remaining_text} attempts remaining", api_name=api_name
    )


def check_eu_command_errors(body: Any, api_name: str) -> None:
    """Raise if an EU command body carries a non-success ``errorCode``."""
    if not isinstance(body, dict):
        raise VehicleApiError("Invalid command response", api_name=api_name)
    error_code = body.get("errorCode")
    if error_code is None or str(error_code) == EU_COMMAND_SUCCESS_CODE:
        return
    error_message = extract_str(body.get("errorMessage"), "Unknown error")
    raise VehicleApiError.log_error(
        f"Command failed: {error_code} - {error_message}",
        code=extract_int(error_code),
        api_name=api_name,
    )
