"""BetterBlue: a client for Hyundai and Kia telematics APIs."""

from .client import (
    APIClient,
    HyundaiEUAPIClient,
    create_api_client,
    create_session_client,
)
from .config import ClientConfiguration
from .const import VERSION
from .errors import ConfigurationError, ErrorType, VehicleApiError
from .fake import FakeAPIClient, FakeVehicleProvider, InMemoryFakeVehicleProvider
from .models import (
    AuthToken,
    Brand,
    ClimateOptions,
    HTTPLog,
    Region,
    Vehicle,
    VehicleCommand,
    VehicleStatus,
)
from .session import AccountSession

__version__ = VERSION

__all__ = [
    "APIClient",
    "AccountSession",
    "AuthToken",
    "Brand",
    "ClientConfiguration",
    "ClimateOptions",
    "ConfigurationError",
    "ErrorType",
    "FakeAPIClient",
    "FakeVehicleProvider",
    "HTTPLog",
    "HyundaiEUAPIClient",
    "InMemoryFakeVehicleProvider",
    "Region",
    "Vehicle",
    "VehicleApiError",
    "VehicleCommand",
    "VehicleStatus",
    "create_api_client",
    "create_session_client",
]
