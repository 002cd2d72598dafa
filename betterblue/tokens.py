"""Token lifecycle helpers for the EU command flow."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from .models import AuthToken, ControlToken, Vehicle, utcnow

_LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class DeviceRegistrar:
    """Run a one-time device registration shared by all callers.

    At most one registration is in flight at a time. A successful result is
    cached for the lifetime of the registrar; a failed attempt is forgotten so
    the next caller starts a new one.
    """

    def __init__(self, register: Callable[[], Awaitable[str]]) -> None:
        """Initialize the registrar.

        Args:
            register: Coroutine function performing the registration request
                and returning the device id.

        """
        self._register = register
        self._device_id: str | None = None
        self._task: asyncio.Task[str] | None = None

    @property
    def device_id(self) -> str | None:
        """Return the registered device id, if registration has completed."""
        return self._device_id

    @property
    def is_registered(self) -> bool:
        return self._device_id is not None

    def start(self) -> None:
        """Launch registration in the background unless done or in flight."""
        if self._device_id is not None or self._task is not None:
            return
        self._task = asyncio.ensure_future(self._run())
        self._task.add_done_callback(self._log_unobserved_failure)

    async def ensure(self) -> str:
        """Return the device id, registering first if necessary.

        Raises:
            VehicleApiError: If the registration request fails.

        """
        if self._device_id is not None:
            return self._device_id
        self.start()
        return await asyncio.shield(self._task)

    async def _run(self) -> str:
        _LOGGER.debug("Registering device for push notifications")
        try:
            device_id = await self._register()
        except BaseException:
            self._task = None
            raise
        self._device_id = device_id
        self._task = None
        _LOGGER.info("Device registered with id %s", device_id)
        return device_id

    @staticmethod
    def _log_unobserved_failure(task: asyncio.Task[str]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            _LOGGER.warning("Background device registration failed: %s", error)


class ControlTokenCache:
    """Cache the PIN-derived control token and refresh it on expiry.

    Lookups are serialized so concurrent commands trigger at most one fetch.
    """

    def __init__(
        self,
        fetch: Callable[[AuthToken, Vehicle], Awaitable[ControlToken]],
        clock: Clock = utcnow,
    ) -> None:
        self._fetch = fetch
        self._clock = clock
        self._token: ControlToken | None = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> ControlToken | None:
        return self._token

    def invalidate(self) -> None:
        self._token = None

    async def get(self, auth_token: AuthToken, vehicle: Vehicle) -> ControlToken:
        """Return a valid control token, fetching a new one if needed."""
        async with self._lock:
            if self._token is not None and self._token.is_valid_at(self._clock()):
                _LOGGER.debug("Using cached control token")
                return self._token

            _LOGGER.debug("Requesting new control token for %s", vehicle.vin)
            self._token = await self._fetch(auth_token, vehicle)
            _LOGGER.debug(
                "Control token received, expires at %s",
                self._token.expires_at.isoformat(),
            )
            return self._token
