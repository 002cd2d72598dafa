"""Generic API client and the Hyundai EU command flow.

`APIClient` drives any `EndpointProvider`: it builds the provider's request
descriptor, sends it over an `httpx.AsyncClient`, records a redacted
`HTTPLog`, classifies the response and hands the body back to the provider
parser.
"""

from __future__ import annotations

import logging
import time
import traceback
from typing import TYPE_CHECKING, Any

import httpx
from httpx_retries import Retry, RetryTransport

from .classifier import extract_api_error, validate_response
from .commands import validate_charge_limit
from .const import DEFAULT_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL, HTTP_OK, HTTP_TIMEOUT
from .errors import VehicleApiError
from .fake import FakeAPIClient, FakeVehicleProvider, InMemoryFakeVehicleProvider
from .models import (
    APIEndpoint,
    AuthToken,
    Brand,
    ControlToken,
    HTTPLog,
    HTTPRequestType,
    Region,
    Vehicle,
    VehicleCommand,
    VehicleStatus,
    utcnow,
)
from .parsing import body_text, load_json
from .polling import CommandPoller, CommandTransaction
from .providers import (
    EndpointProvider,
    HyundaiEndpointProvider,
    HyundaiEUEndpointProvider,
    KiaEndpointProvider,
)
from .redaction import redact_sensitive_data, redact_sensitive_headers
from .tokens import ControlTokenCache, DeviceRegistrar

if TYPE_CHECKING:
    from .config import ClientConfiguration

_LOGGER = logging.getLogger(__name__)


def create_session_client() -> httpx.AsyncClient:
    """Create an HTTP client with retry logic for the vendor APIs.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    retry = Retry(total=3, backoff_factor=0.5)
    return httpx.AsyncClient(
        timeout=HTTP_TIMEOUT,
        transport=RetryTransport(transport=httpx.AsyncHTTPTransport(), retry=retry),
    )


def _decode_text(data: bytes | None) -> str | None:
    if not data:
        return None
    return data.decode("utf-8", errors="replace")


class APIClient:
    """Vendor-agnostic client bound to one endpoint provider."""

    def __init__(
        self,
        configuration: ClientConfiguration,
        endpoint_provider: EndpointProvider,
        session: httpx.AsyncClient,
    ) -> None:
        self.configuration = configuration
        self.endpoint_provider = endpoint_provider
        self.session = session

    @property
    def api_name(self) -> str:
        return self.endpoint_provider.api_name

    async def login(self) -> AuthToken:
        """Authenticate and return the primary session token."""
        response = await self.perform_request(
            self.endpoint_provider.login_endpoint(), HTTPRequestType.LOGIN
        )
        return self.endpoint_provider.parse_login_response(
            response.content, dict(response.headers)
        )

    async def fetch_vehicles(self, auth_token: AuthToken) -> list[Vehicle]:
        """List the vehicles enrolled on the account.

        Args:
            auth_token: Valid primary token.

        Returns:
            Vehicles parsed by the provider; incomplete entries are skipped.

        """
        response = await self.perform_request(
            self.endpoint_provider.fetch_vehicles_endpoint(auth_token),
            HTTPRequestType.FETCH_VEHICLES,
        )
        vehicles = self.endpoint_provider.parse_vehicles_response(response.content)
        _LOGGER.debug("Retrieved %d vehicles from %s", len(vehicles), self.api_name)
        return vehicles

    async def fetch_vehicle_status(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> VehicleStatus:
        """Fetch and normalize the latest status of a vehicle.

        Args:
            vehicle: Vehicle to query.
            auth_token: Valid primary token.

        Returns:
            Canonical status snapshot.

        """
        response = await self.perform_request(
            self.endpoint_provider.fetch_vehicle_status_endpoint(vehicle, auth_token),
            HTTPRequestType.FETCH_VEHICLE_STATUS,
        )
        return self.endpoint_provider.parse_vehicle_status_response(
            response.content, vehicle
        )

    async def send_command(
        self, vehicle: Vehicle, command: VehicleCommand, auth_token: AuthToken
    ) -> None:
        """Send a remote command in a single request.

        Args:
            vehicle: Target vehicle.
            command: Command variant to send.
            auth_token: Valid primary token.

        Raises:
            VehicleApiError: If the request fails or the body reports an error.

        """
        _LOGGER.debug("Sending %s to %s", command.kind, vehicle.vin)
        response = await self.perform_request(
            self.endpoint_provider.send_command_endpoint(vehicle, command, auth_token),
            HTTPRequestType.SEND_COMMAND,
        )
        self.endpoint_provider.parse_command_response(response.content)

    async def perform_request(
        self, endpoint: APIEndpoint, request_type: HTTPRequestType
    ) -> httpx.Response:
        """Send a descriptor, record the exchange and classify the response.

        Args:
            endpoint: Request descriptor built by a provider.
            request_type: Operation kind recorded in the HTTP log.

        Returns:
            The response, whose status is below 400.

        Raises:
            VehicleApiError: On invalid URLs, transport failures and error
                responses.

        """
        request = self._build_request(endpoint)
        stack_trace = None
        if self.configuration.debug:
            stack_trace = "".join(traceback.format_stack())
        started = time.monotonic()

        try:
            response = await self.session.send(request)
        except httpx.RequestError as err:
            self._emit_log(
                request,
                request_type,
                response=None,
                error=str(err),
                duration=time.monotonic() - started,
                stack_trace=stack_trace,
            )
            _LOGGER.exception("Network error calling %s", endpoint.url)
            raise VehicleApiError(
                f"Network error: {err}", api_name=self.api_name
            ) from err

        self._emit_log(
            request,
            request_type,
            response=response,
            error=None,
            duration=time.monotonic() - started,
            stack_trace=stack_trace,
        )
        _LOGGER.debug(
            "%s %s -> %d (%s)",
            request.method,
            endpoint.url,
            response.status_code,
            request_type.display_name,
        )
        validate_response(response.status_code, response.content, self.api_name)
        return response

    def _build_request(self, endpoint: APIEndpoint) -> httpx.Request:
        try:
            url = httpx.URL(endpoint.url)
        except httpx.InvalidURL as err:
            raise VehicleApiError(
                f"Invalid URL: {endpoint.url}", api_name=self.api_name
            ) from err
        if url.scheme not in ("http", "https") or not url.host:
            raise VehicleApiError(
                f"Invalid URL: {endpoint.url}", api_name=self.api_name
            )

        headers = httpx.Headers(endpoint.headers)
        if "content-type" not in headers:
            headers["Content-Type"] = "application/json"
        return self.session.build_request(
            endpoint.method.value, url, headers=headers, content=endpoint.body
        )

    def _emit_log(
        self,
        request: httpx.Request,
        request_type: HTTPRequestType,
        response: httpx.Response | None,
        error: str | None,
        duration: float,
        stack_trace: str | None,
    ) -> None:
        sink = self.configuration.log_sink
        if sink is None:
            return

        request_headers = {
            key.decode("latin-1"): value.decode("latin-1")
            for key, value in request.headers.raw
        }
        response_body = _decode_text(response.content) if response is not None else None
        sink(
            HTTPLog(
                timestamp=utcnow(),
                account_id=self.configuration.account_id,
                request_type=request_type,
                method=request.method,
                url=str(request.url),
                request_headers=redact_sensitive_headers(request_headers),
                request_body=redact_sensitive_data(_decode_text(request.content)),
                response_status=response.status_code if response is not None else None,
                response_headers=(
                    redact_sensitive_headers(dict(response.headers))
                    if response is not None
                    else {}
                ),
                response_body=redact_sensitive_data(response_body),
                error=error,
                duration=duration,
                api_error=(
                    extract_api_error(response.content) if response is not None else None
                ),
                stack_trace=stack_trace,
            )
        )


class HyundaiEUAPIClient(APIClient):
    """Client for Hyundai Europe.

    Commands do not go through the single request flow. Each one needs the
    device registered, a control token, the command POST and then polling of
    the notification feed until the vehicle reports a result.
    """

    endpoint_provider: HyundaiEUEndpointProvider

    def __init__(
        self,
        configuration: ClientConfiguration,
        endpoint_provider: HyundaiEUEndpointProvider,
        session: httpx.AsyncClient,
        max_poll_attempts: int = DEFAULT_POLL_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        super().__init__(configuration, endpoint_provider, session)
        self.registrar = DeviceRegistrar(self._register_device)
        self.control_tokens = ControlTokenCache(self._fetch_control_token)
        self.max_poll_attempts = max_poll_attempts
        self.poll_interval = poll_interval
        self.last_transaction: CommandTransaction | None = None

    async def login(self) -> AuthToken:
        auth_token = await super().login()
        self.start_device_registration()
        return auth_token

    def start_device_registration(self) -> None:
        """Register the device in the background if it is not registered yet."""
        self.registrar.start()

    async def ensure_device_registered(self) -> str:
        """Return the device id, waiting for or starting registration."""
        return await self.registrar.ensure()

    async def fetch_vehicle_status(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> VehicleStatus:
        await self.ensure_device_registered()
        return await super().fetch_vehicle_status(vehicle, auth_token)

    async def send_command(
        self, vehicle: Vehicle, command: VehicleCommand, auth_token: AuthToken
    ) -> None:
        """Send a command and wait until the vehicle reports the outcome.

        Raises:
            VehicleApiError: If registration, the control token request or
                the send fails, or if the command fails or times out.

        """
        await self.ensure_device_registered()
        control_token = await self.control_tokens.get(auth_token, vehicle)

        endpoint = self.endpoint_provider.command_endpoint_with_control_token(
            vehicle, command, auth_token, control_token
        )
        try:
            response = await self.perform_request(
                endpoint, HTTPRequestType.SEND_COMMAND
            )
        except VehicleApiError as err:
            if err.is_auth_error:
                _LOGGER.debug("Command unauthorized, dropping control token")
                self.control_tokens.invalidate()
            raise
        if response.status_code != HTTP_OK:
            raise VehicleApiError.log_error(
                f"Command failed with status {response.status_code}: "
                f"{body_text(response.content)}",
                code=response.status_code,
                api_name=self.api_name,
            )
        transaction_id = self.endpoint_provider.parse_command_transaction_id(
            response.content
        )
        _LOGGER.info("Command %s sent, msgId %s", command.kind, transaction_id)

        transaction = CommandTransaction(
            transaction_id=transaction_id,
            vin=vehicle.vin,
            access_token=auth_token.access_token,
        )
        self.last_transaction = transaction
        poller = CommandPoller(
            lambda: self._fetch_notification_records(vehicle, auth_token),
            max_attempts=self.max_poll_attempts,
            poll_interval=self.poll_interval,
            api_name=self.api_name,
        )
        await poller.poll(transaction)

    async def set_charge_limit(
        self, vehicle: Vehicle, target_soc: int, auth_token: AuthToken
    ) -> None:
        """Set the AC and DC charge limit to ``target_soc`` percent."""
        validate_charge_limit(target_soc, self.api_name)
        await self.ensure_device_registered()

        response = await self.perform_request(
            self.endpoint_provider.charge_target_endpoint(
                vehicle, target_soc, auth_token
            ),
            HTTPRequestType.SEND_COMMAND,
        )
        if response.status_code != HTTP_OK:
            raise VehicleApiError.log_error(
                f"Set charge limit failed with status {response.status_code}",
                code=response.status_code,
                api_name=self.api_name,
            )
        self.endpoint_provider.parse_charge_target_response(response.content)
        _LOGGER.info("Charge limit set to %d%% for %s", target_soc, vehicle.vin)

    async def _register_device(self) -> str:
        response = await self.perform_request(
            self.endpoint_provider.register_device_endpoint(), HTTPRequestType.LOGIN
        )
        if response.status_code != HTTP_OK:
            raise VehicleApiError.log_error(
                "Device registration failed",
                code=response.status_code,
                api_name=self.api_name,
            )
        device_id = self.endpoint_provider.parse_device_registration(response.content)
        self.endpoint_provider.device_id = device_id
        return device_id

    async def _fetch_control_token(
        self, auth_token: AuthToken, vehicle: Vehicle
    ) -> ControlToken:
        response = await self.perform_request(
            self.endpoint_provider.control_token_endpoint(vehicle, auth_token),
            HTTPRequestType.SEND_COMMAND,
        )
        if response.status_code != HTTP_OK:
            raise VehicleApiError.log_error(
                f"Control token request failed with status {response.status_code}",
                code=response.status_code,
                api_name=self.api_name,
            )
        return self.endpoint_provider.parse_control_token(response.content)

    async def _fetch_notification_records(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> Any:
        response = await self.perform_request(
            self.endpoint_provider.notification_records_endpoint(vehicle, auth_token),
            HTTPRequestType.SEND_COMMAND,
        )
        if response.status_code != HTTP_OK:
            raise VehicleApiError(
                f"Poll request failed with status {response.status_code}",
                api_name=self.api_name,
            )
        return load_json(response.content, self.api_name)


def create_api_client(
    configuration: ClientConfiguration,
    session: httpx.AsyncClient,
    fake_vehicle_provider: FakeVehicleProvider | None = None,
) -> APIClient | FakeAPIClient:
    """Select the client for a configuration's brand and region.

    Args:
        configuration: Account configuration.
        session: HTTP client used for every vendor request.
        fake_vehicle_provider: Backing store for the fake brand; an empty
            in-memory provider is used when omitted.

    Returns:
        The client bound to exactly one provider.

    """
    if configuration.brand == Brand.FAKE:
        return FakeAPIClient(
            configuration, fake_vehicle_provider or InMemoryFakeVehicleProvider()
        )
    if configuration.brand == Brand.HYUNDAI and configuration.region == Region.EUROPE:
        return HyundaiEUAPIClient(
            configuration, HyundaiEUEndpointProvider(configuration), session
        )
    if configuration.brand == Brand.KIA:
        return APIClient(configuration, KiaEndpointProvider(configuration), session)
    return APIClient(configuration, HyundaiEndpointProvider(configuration), session)
