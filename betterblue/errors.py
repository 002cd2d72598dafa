"""Canonical error type shared by every provider."""

from __future__ import annotations

import logging
from enum import StrEnum

from .const import (
    ERROR_CODE_INVALID_CREDENTIALS,
    ERROR_CODE_INVALID_VEHICLE_SESSION,
    ERROR_CODE_SERVER,
)

_LOGGER = logging.getLogger(__name__)


class ErrorType(StrEnum):
    """Canonical error kinds."""

    GENERAL = "general"
    INVALID_VEHICLE_SESSION = "invalidVehicleSession"
    INVALID_CREDENTIALS = "invalidCredentials"
    SERVER_ERROR = "serverError"
    INVALID_PIN = "invalidPin"
    CONCURRENT_REQUEST = "concurrentRequest"
    FAILED_RETRY_LOGIN = "failedRetryLogin"


class VehicleApiError(Exception):
    """Base exception for vehicle API errors.

    Attributes:
        message: Human readable description.
        code: Vendor or HTTP error code, when one is known.
        api_name: Name of the provider that raised the error.
        error_type: Canonical error kind.

    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        api_name: str | None = None,
        error_type: ErrorType = ErrorType.GENERAL,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.api_name = api_name
        self.error_type = error_type

    def __str__(self) -> str:
        text = f"[{self.api_name or 'Unknown'}] {self.message}"
        if self.code is not None:
            text += f" (code {self.code})"
        return text

    @property
    def is_auth_error(self) -> bool:
        """Return True if the caller should re-authenticate and retry."""
        return self.error_type == ErrorType.INVALID_CREDENTIALS

    @classmethod
    def log_error(
        cls,
        message: str,
        code: int | None = None,
        api_name: str | None = None,
        error_type: ErrorType = ErrorType.GENERAL,
    ) -> VehicleApiError:
        """Create an error and record it in the module log."""
        error = cls(message, code=code, api_name=api_name, error_type=error_type)
        _LOGGER.warning(
            "%s error from %s: %s (code=%s)",
            error_type.value,
            api_name or "Unknown",
            message,
            code,
        )
        return error

    @classmethod
    def invalid_vehicle_session(
        cls,
        message: str = "Invalid vehicle for current session",
        api_name: str | None = None,
    ) -> VehicleApiError:
        return cls.log_error(
            message,
            code=ERROR_CODE_INVALID_VEHICLE_SESSION,
            api_name=api_name,
            error_type=ErrorType.INVALID_VEHICLE_SESSION,
        )

    @classmethod
    def invalid_credentials(
        cls,
        message: str = "Invalid username or password",
        api_name: str | None = None,
    ) -> VehicleApiError:
        return cls.log_error(
            message,
            code=ERROR_CODE_INVALID_CREDENTIALS,
            api_name=api_name,
            error_type=ErrorType.INVALID_CREDENTIALS,
        )

    @classmethod
    def server_error(
        cls,
        message: str = "Server temporarily unavailable",
        api_name: str | None = None,
    ) -> VehicleApiError:
        return cls.log_error(
            message,
            code=ERROR_CODE_SERVER,
            api_name=api_name,
            error_type=ErrorType.SERVER_ERROR,
        )

    @classmethod
    def invalid_pin(cls, message: str, api_name: str | None = None) -> VehicleApiError:
        return cls.log_error(
            message, api_name=api_name, error_type=ErrorType.INVALID_PIN
        )

    @classmethod
    def concurrent_request(
        cls,
        message: str = (
            "Another request is already in progress. Please wait and try again."
        ),
        api_name: str | None = None,
    ) -> VehicleApiError:
        return cls.log_error(
            message,
            code=ERROR_CODE_SERVER,
            api_name=api_name,
            error_type=ErrorType.CONCURRENT_REQUEST,
        )

    @classmethod
    def failed_retry_login(
        cls,
        message: str = "Failed to reauthenticate",
        api_name: str | None = None,
    ) -> VehicleApiError:
        return cls.log_error(
            message,
            code=ERROR_CODE_SERVER,
            api_name=api_name,
            error_type=ErrorType.FAILED_RETRY_LOGIN,
        )


class ConfigurationError(VehicleApiError):
    """Invalid or missing client configuration."""

    def __init__(self, message: str) -> None:
        super().__init__(message, api_name="Configuration")
