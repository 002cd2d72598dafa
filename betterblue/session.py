"""Per-account orchestration on top of an API client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from .errors import VehicleApiError
from .models import AuthToken, Vehicle, VehicleCommand, VehicleStatus

if TYPE_CHECKING:
    from .client import APIClient
    from .fake import FakeAPIClient

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class AccountSession:
    """Reuse an account's token and re-authenticate once when it expires.

    Calls are serialized. With ``reject_concurrent`` set, a call arriving
    while another is in flight fails with a ``concurrent_request`` error
    instead of waiting.
    """

    def __init__(
        self,
        client: APIClient | FakeAPIClient,
        auth_token: AuthToken | None = None,
        reject_concurrent: bool = False,
    ) -> None:
        self.client = client
        self.auth_token = auth_token
        self.reject_concurrent = reject_concurrent
        self._lock = asyncio.Lock()

    @property
    def api_name(self) -> str:
        return self.client.api_name

    async def fetch_vehicles(self) -> list[Vehicle]:
        return await self._run(self.client.fetch_vehicles)

    async def fetch_vehicle_status(self, vehicle: Vehicle) -> VehicleStatus:
        return await self._run(
            lambda token: self.client.fetch_vehicle_status(vehicle, token)
        )

    async def send_command(self, vehicle: Vehicle, command: VehicleCommand) -> None:
        await self._run(lambda token: self.client.send_command(vehicle, command, token))

    async def set_charge_limit(self, vehicle: Vehicle, target_soc: int) -> None:
        """Set the charge limit on clients that support it.

        Raises:
            VehicleApiError: If the client has no charge limit support.

        """
        set_charge_limit = getattr(self.client, "set_charge_limit", None)
        if set_charge_limit is None:
            raise VehicleApiError(
                "Charge limit is not supported", api_name=self.api_name
            )
        await self._run(lambda token: set_charge_limit(vehicle, target_soc, token))

    async def _login(self) -> AuthToken:
        _LOGGER.info("Logging in to %s", self.api_name)
        self.auth_token = await self.client.login()
        return self.auth_token

    async def _valid_token(self) -> AuthToken:
        if self.auth_token is not None and self.auth_token.is_valid:
            return self.auth_token
        if self.auth_token is not None:
            _LOGGER.debug("Token expired at %s", self.auth_token.expires_at.isoformat())
        return await self._login()

    async def _run(self, operation: Callable[[AuthToken], Awaitable[T]]) -> T:
        if self.reject_concurrent and self._lock.locked():
            raise VehicleApiError.concurrent_request(api_name=self.api_name)

        async with self._lock:
            token = await self._valid_token()
            try:
                return await operation(token)
            except VehicleApiError as err:
                if not err.is_auth_error:
                    raise
                _LOGGER.warning(
                    "Token rejected by %s, attempting re-authentication: %s",
                    self.api_name,
                    err,
                )

            try:
                token = await self._login()
            except VehicleApiError as err:
                self.auth_token = None
                raise VehicleApiError.failed_retry_login(
                    f"Failed to reauthenticate: {err.message}", api_name=self.api_name
                ) from err

            _LOGGER.info("Re-authenticated with %s, retrying request", self.api_name)
            return await operation(token)
