"""Fake client for demos and tests, backed by a pluggable vehicle provider."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from .errors import VehicleApiError
from .models import (
    AuthToken,
    ClimateOptions,
    ClimateStatus,
    CommandKind,
    EVStatus,
    LockStatus,
    Vehicle,
    VehicleCommand,
    VehicleStatus,
    utcnow,
)

if TYPE_CHECKING:
    from .config import ClientConfiguration

_LOGGER = logging.getLogger(__name__)

FAKE_API_NAME = "FakeAPI"
FAKE_TOKEN_LIFETIME = 3600
SIMULATED_FAILURE_CODE = 500


class FakeVehicleProvider(Protocol):
    """Backing store and failure switches for `FakeAPIClient`."""

    async def get_fake_vehicles(self, username: str, account_id: UUID) -> list[Vehicle]:
        ...

    async def get_vehicle_status(self, vin: str, account_id: UUID) -> VehicleStatus:
        ...

    async def execute_command(
        self, command: VehicleCommand, vin: str, account_id: UUID
    ) -> None:
        ...

    async def should_fail_credential_validation(self, account_id: UUID) -> bool:
        ...

    async def should_fail_login(self, account_id: UUID) -> bool:
        ...

    async def should_fail_vehicle_fetch(self, account_id: UUID) -> bool:
        ...

    async def should_fail_status_fetch(self, vin: str, account_id: UUID) -> bool:
        ...

    async def should_fail_pin_validation(self, vin: str, account_id: UUID) -> bool:
        ...

    async def should_fail_command(
        self, command: VehicleCommand, vin: str, account_id: UUID
    ) -> bool:
        ...

    async def get_custom_credential_error_message(self, account_id: UUID) -> str:
        ...

    async def get_custom_pin_error_message(self, vin: str, account_id: UUID) -> str:
        ...


class FakeAPIClient:
    """Client with the same four operations as `APIClient`, without network."""

    api_name = FAKE_API_NAME

    def __init__(
        self, configuration: ClientConfiguration, vehicle_provider: FakeVehicleProvider
    ) -> None:
        self.configuration = configuration
        self.vehicle_provider = vehicle_provider
        _LOGGER.debug("Fake client initialized for %s", configuration.username)

    @property
    def account_id(self) -> UUID:
        return self.configuration.account_id

    async def login(self) -> AuthToken:
        """Return a fake token unless a credential or login failure is set."""
        provider = self.vehicle_provider
        if await provider.should_fail_credential_validation(self.account_id):
            message = await provider.get_custom_credential_error_message(self.account_id)
            raise VehicleApiError.invalid_credentials(message, api_name=self.api_name)

        if await provider.should_fail_login(self.account_id):
            raise VehicleApiError.log_error(
                "Debug: Simulated login failure",
                code=SIMULATED_FAILURE_CODE,
                api_name=self.api_name,
            )

        _LOGGER.debug("Fake login for %s", self.configuration.username)
        return AuthToken(
            access_token=f"fake_access_token_{uuid.uuid4()}",
            refresh_token=f"fake_refresh_token_{uuid.uuid4()}",
            expires_at=utcnow() + timedelta(seconds=FAKE_TOKEN_LIFETIME),
            pin=self.configuration.pin,
        )

    async def fetch_vehicles(self, auth_token: AuthToken) -> list[Vehicle]:
        if await self.vehicle_provider.should_fail_vehicle_fetch(self.account_id):
            raise VehicleApiError.log_error(
                "Debug: Simulated vehicle fetch failure",
                code=SIMULATED_FAILURE_CODE,
                api_name=self.api_name,
            )
        vehicles = await self.vehicle_provider.get_fake_vehicles(
            self.configuration.username, self.account_id
        )
        _LOGGER.debug(
            "Fetched %d fake vehicles: %s", len(vehicles), [v.vin for v in vehicles]
        )
        return vehicles

    async def fetch_vehicle_status(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> VehicleStatus:
        if await self.vehicle_provider.should_fail_status_fetch(
            vehicle.vin, self.account_id
        ):
            raise VehicleApiError.log_error(
                "Debug: Simulated status fetch failure",
                code=SIMULATED_FAILURE_CODE,
                api_name=self.api_name,
            )
        return await self.vehicle_provider.get_vehicle_status(
            vehicle.vin, self.account_id
        )

    async def send_command(
        self, vehicle: Vehicle, command: VehicleCommand, auth_token: AuthToken
    ) -> None:
        """Check the PIN hook, then apply the command to the stored status.

        Raises:
            VehicleApiError: If a PIN or per-command failure is configured.

        """
        provider = self.vehicle_provider
        if await provider.should_fail_pin_validation(vehicle.vin, self.account_id):
            message = await provider.get_custom_pin_error_message(
                vehicle.vin, self.account_id
            )
            raise VehicleApiError.invalid_pin(message, api_name=self.api_name)

        if await provider.should_fail_command(command, vehicle.vin, self.account_id):
            raise VehicleApiError.log_error(
                f"Debug: Simulated {command.kind} failure",
                code=SIMULATED_FAILURE_CODE,
                api_name=self.api_name,
            )

        await provider.execute_command(command, vehicle.vin, self.account_id)
        _LOGGER.debug("Fake %s completed for %s", command.kind, vehicle.vin)


def apply_command(status: VehicleStatus, command: VehicleCommand) -> VehicleStatus:
    """Return the status a vehicle would report after a successful command."""
    if command.kind == CommandKind.LOCK:
        return replace(status, lock_status=LockStatus.LOCKED)
    if command.kind == CommandKind.UNLOCK:
        return replace(status, lock_status=LockStatus.UNLOCKED)
    if command.kind == CommandKind.START_CLIMATE:
        options = command.climate_options or ClimateOptions()
        return replace(
            status,
            climate_status=ClimateStatus(
                defrost_on=options.defrost,
                air_control_on=options.climate,
                steering_wheel_heating_on=options.steering_wheel > 0,
                temperature=options.temperature,
            ),
        )
    if command.kind == CommandKind.STOP_CLIMATE:
        return replace(
            status,
            climate_status=replace(
                status.climate_status,
                air_control_on=False,
                defrost_on=False,
                steering_wheel_heating_on=False,
            ),
        )
    if status.ev_status is None:
        return status
    ev_status: EVStatus = status.ev_status
    charging = command.kind == CommandKind.START_CHARGE and ev_status.plugged_in
    return replace(status, ev_status=replace(ev_status, charging=charging))


@dataclass
class InMemoryFakeVehicleProvider:
    """`FakeVehicleProvider` keeping vehicles, statuses and failures in memory.

    Attributes:
        vehicles: Vehicles per account id.
        statuses: Current status per VIN.
        fail_credentials: Accounts whose logins are rejected as bad credentials.
        fail_login: Accounts whose logins fail with a general error.
        fail_vehicle_fetch: Accounts whose vehicle list fetch fails.
        fail_status_fetch: VINs whose status fetch fails.
        fail_pin: VINs whose commands are rejected with an invalid PIN.
        fail_commands: Command kinds that fail, per VIN.

    """

    vehicles: dict[UUID, list[Vehicle]] = field(default_factory=dict)
    statuses: dict[str, VehicleStatus] = field(default_factory=dict)
    fail_credentials: set[UUID] = field(default_factory=set)
    fail_login: set[UUID] = field(default_factory=set)
    fail_vehicle_fetch: set[UUID] = field(default_factory=set)
    fail_status_fetch: set[str] = field(default_factory=set)
    fail_pin: set[str] = field(default_factory=set)
    fail_commands: dict[str, set[CommandKind]] = field(default_factory=dict)
    credential_error_message: str = "Invalid username or password"
    pin_error_message: str = "Invalid PIN, 2 attempts remaining"

    def add_vehicle(self, vehicle: Vehicle, status: VehicleStatus | None = None) -> None:
        self.vehicles.setdefault(vehicle.account_id, []).append(vehicle)
        self.statuses[vehicle.vin] = status or VehicleStatus(
            vin=vehicle.vin, odometer=vehicle.odometer
        )

    async def get_fake_vehicles(self, username: str, account_id: UUID) -> list[Vehicle]:
        return list(self.vehicles.get(account_id, []))

    async def get_vehicle_status(self, vin: str, account_id: UUID) -> VehicleStatus:
        try:
            status = self.statuses[vin]
        except KeyError as err:
            raise VehicleApiError(
                f"Unknown fake vehicle {vin}", api_name=FAKE_API_NAME
            ) from err
        return replace(status, last_updated=utcnow())

    async def execute_command(
        self, command: VehicleCommand, vin: str, account_id: UUID
    ) -> None:
        status = await self.get_vehicle_status(vin, account_id)
        self.statuses[vin] = apply_command(status, command)

    async def should_fail_credential_validation(self, account_id: UUID) -> bool:
        return account_id in self.fail_credentials

    async def should_fail_login(self, account_id: UUID) -> bool:
        return account_id in self.fail_login

    async def should_fail_vehicle_fetch(self, account_id: UUID) -> bool:
        return account_id in self.fail_vehicle_fetch

    async def should_fail_status_fetch(self, vin: str, account_id: UUID) -> bool:
        return vin in self.fail_status_fetch

    async def should_fail_pin_validation(self, vin: str, account_id: UUID) -> bool:
        return vin in self.fail_pin

    async def should_fail_command(
        self, command: VehicleCommand, vin: str, account_id: UUID
    ) -> bool:
        return command.kind in self.fail_commands.get(vin, set())

    async def get_custom_credential_error_message(self, account_id: UUID) -> str:
        return self.credential_error_message

    async def get_custom_pin_error_message(self, vin: str, account_id: UUID) -> str:
        return self.pin_error_message
