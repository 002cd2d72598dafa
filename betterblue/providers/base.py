"""Endpoint provider contract shared by every vendor dialect."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ..models import APIEndpoint, AuthToken, Vehicle, VehicleCommand, VehicleStatus

if TYPE_CHECKING:
    from ..config import ClientConfiguration


def encode_json(body: Any) -> bytes:
    """Serialize a request body the way the vendor apps do."""
    return json.dumps(body, separators=(",", ":")).encode()


class EndpointProvider(ABC):
    """Build request descriptors and parse responses for one dialect.

    Providers never perform I/O. The generic client sends what they build and
    hands the raw response body back to the matching ``parse_*`` method.
    """

    api_name = "APIClient"

    def __init__(self, configuration: ClientConfiguration) -> None:
        self.region = configuration.region
        self.username = configuration.username
        self.password = configuration.password
        self.pin = configuration.pin
        self.account_id: UUID = configuration.account_id

    @abstractmethod
    def login_endpoint(self) -> APIEndpoint:
        """Return the descriptor for the login request."""

    @abstractmethod
    def fetch_vehicles_endpoint(self, auth_token: AuthToken) -> APIEndpoint:
        """Return the descriptor listing the account's vehicles."""

    @abstractmethod
    def fetch_vehicle_status_endpoint(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> APIEndpoint:
        """Return the descriptor fetching one vehicle's status."""

    @abstractmethod
    def send_command_endpoint(
        self, vehicle: Vehicle, command: VehicleCommand, auth_token: AuthToken
    ) -> APIEndpoint:
        """Return the descriptor sending a remote command."""

    @abstractmethod
    def parse_login_response(
        self, data: bytes, headers: dict[str, str]
    ) -> AuthToken:
        """Parse a login response.

        Raises:
            VehicleApiError: If the response lacks the required token fields.

        """

    @abstractmethod
    def parse_vehicles_response(self, data: bytes) -> list[Vehicle]:
        """Parse a vehicle list, skipping incomplete entries."""

    @abstractmethod
    def parse_vehicle_status_response(
        self, data: bytes, vehicle: Vehicle
    ) -> VehicleStatus:
        """Parse a status response into the canonical model."""

    @abstractmethod
    def parse_command_response(self, data: bytes) -> None:
        """Raise if a 200 command response carries a vendor error."""
