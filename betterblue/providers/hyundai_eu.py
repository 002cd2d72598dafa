"""Hyundai Europe (CCAPI) endpoint provider.

Besides the common endpoint set, this dialect needs a one-time device
registration, a PIN-derived control token for commands, a notification
feed polled for command results and a charge-target endpoint. The
provider builds and parses those requests; `HyundaiEUAPIClient` sequences
them.
"""

from __future__ import annotations

import base64
import logging
import secrets
import time
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from ..classifier import check_eu_command_errors, decode_body
from ..commands import charge_target_body, eu_command_body, eu_control_path
from ..const import (
    EU_APP_ID,
    EU_BASE_DOMAIN,
    EU_CCS_SERVICE_SECRET,
    EU_CCSP_SERVICE_ID,
    EU_CFB_BASE64,
    EU_CHARGE_LIMIT_SUCCESS,
    EU_LOGIN_HOST,
    EU_PORT,
    USER_AGENT_OKHTTP3,
)
from ..errors import VehicleApiError
from ..models import (
    APIEndpoint,
    AuthToken,
    ControlToken,
    Distance,
    DistanceUnits,
    HTTPMethod,
    Vehicle,
    VehicleCommand,
    VehicleStatus,
    utcnow,
)
from ..parsing import (
    body_text,
    extract_int,
    extract_str,
    get_list,
    load_json,
    load_json_object,
    str_at,
)
from ..status import is_ccs2, parse_eu_status
from .base import EndpointProvider, encode_json

if TYPE_CHECKING:
    from ..config import ClientConfiguration

_LOGGER = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json;charset=UTF-8"


def make_stamp(timestamp: int | None = None) -> str:
    """Return the ``Stamp`` header for a unix timestamp.

    The stamp is ``"{appId}:{timestamp}"`` XORed byte-wise with the app's CFB
    key, base64 encoded.
    """
    if timestamp is None:
        timestamp = int(time.time())
    raw = f"{EU_APP_ID}:{timestamp}".encode()
    cfb = base64.b64decode(EU_CFB_BASE64)
    return base64.b64encode(bytes(a ^ b for a, b in zip(cfb, raw))).decode()


class HyundaiEUEndpointProvider(EndpointProvider):
    """Endpoint provider for Hyundai vehicles in Europe."""

    api_name = "HyundaiEUAPI"

    def __init__(self, configuration: ClientConfiguration) -> None:
        super().__init__(configuration)
        self.device_id: str | None = None

    @property
    def base_url(self) -> str:
        return f"https://{EU_BASE_DOMAIN}:{EU_PORT}"

    @property
    def spa_url(self) -> str:
        return f"{self.base_url}/api/v1/spa/"

    def _authorized_headers(
        self, auth_token: AuthToken, ccs2: bool = True
    ) -> dict[str, str]:
        headers = {
            "Authorization": auth_token.access_token,
            "ccsp-device-id": self.device_id or "",
            "ccsp-application-id": EU_APP_ID,
            "ccsp-service-id": EU_CCSP_SERVICE_ID,
            "Stamp": make_stamp(),
            "Content-Type": JSON_CONTENT_TYPE,
            "User-Agent": USER_AGENT_OKHTTP3,
        }
        if ccs2:
            headers["ccuCCS2ProtocolSupport"] = "1"
        return headers

    def login_endpoint(self) -> APIEndpoint:
        form = urlencode(
            {
                "grant_type": "refresh_token",
                "refresh_token": self.password,
                "client_id": EU_CCSP_SERVICE_ID,
                "client_secret": EU_CCS_SERVICE_SECRET,
            }
        )
        return APIEndpoint(
            url=f"{EU_LOGIN_HOST}/auth/api/v2/user/oauth2/token",
            method=HTTPMethod.POST,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=form.encode(),
        )

    def fetch_vehicles_endpoint(self, auth_token: AuthToken) -> APIEndpoint:
        return APIEndpoint(
            url=f"{self.spa_url}vehicles",
            method=HTTPMethod.GET,
            headers=self._authorized_headers(auth_token),
        )

    def fetch_vehicle_status_endpoint(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> APIEndpoint:
        ccs2 = is_ccs2(vehicle)
        path = "ccs2/carstatus/latest" if ccs2 else "status/latest"
        return APIEndpoint(
            url=f"{self.spa_url}vehicles/{vehicle.reg_id}/{path}",
            method=HTTPMethod.GET,
            headers=self._authorized_headers(auth_token, ccs2=ccs2),
        )

    def send_command_endpoint(
        self, vehicle: Vehicle, command: VehicleCommand, auth_token: AuthToken
    ) -> APIEndpoint:
        """Build a command descriptor authorized with the primary token.

        The client swaps in the control token before sending.
        """
        return APIEndpoint(
            url=(
                f"{self.base_url}/api/v2/spa/vehicles/{vehicle.reg_id}"
                f"/ccs2/control/{eu_control_path(command)}"
            ),
            method=HTTPMethod.POST,
            headers=self._authorized_headers(auth_token),
            body=encode_json(eu_command_body(command)),
        )

    def command_endpoint_with_control_token(
        self,
        vehicle: Vehicle,
        command: VehicleCommand,
        auth_token: AuthToken,
        control_token: ControlToken,
    ) -> APIEndpoint:
        """Build a command send that authorizes with the control token."""
        endpoint = self.send_command_endpoint(vehicle, command, auth_token)
        headers = {**endpoint.headers, "Authorization": control_token.value}
        return APIEndpoint(
            url=endpoint.url, method=endpoint.method, headers=headers, body=endpoint.body
        )

    def register_device_endpoint(self) -> APIEndpoint:
        """Build the one-time push channel registration for this client."""
        body = {
            "pushRegId": secrets.token_hex(32),
            "pushType": "GCM",
            "uuid": str(uuid.uuid4()),
        }
        return APIEndpoint(
            url=f"{self.spa_url}notifications/register",
            method=HTTPMethod.POST,
            headers={
                "ccsp-service-id": EU_CCSP_SERVICE_ID,
                "ccsp-application-id": EU_APP_ID,
                "Stamp": make_stamp(),
                "Content-Type": JSON_CONTENT_TYPE,
            },
            body=encode_json(body),
        )

    def control_token_endpoint(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> APIEndpoint:
        """Build the PIN exchange that yields a command control token."""
        headers = self._authorized_headers(auth_token)
        headers["vehicleId"] = vehicle.reg_id
        return APIEndpoint(
            url=f"{self.base_url}/api/v1/user/pin",
            method=HTTPMethod.PUT,
            headers=headers,
            body=encode_json({"pin": self.pin, "deviceId": self.device_id or ""}),
        )

    def notification_records_endpoint(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> APIEndpoint:
        """Build the notification feed request polled after a command."""
        return APIEndpoint(
            url=f"{self.spa_url}notifications/{vehicle.reg_id}/records",
            method=HTTPMethod.GET,
            headers=self._authorized_headers(auth_token),
        )

    def charge_target_endpoint(
        self, vehicle: Vehicle, target_soc: int, auth_token: AuthToken
    ) -> APIEndpoint:
        """Build the AC and DC target SOC request.

        Args:
            vehicle: Target vehicle.
            target_soc: Charge limit in percent, already validated.
            auth_token: Valid primary token.

        Returns:
            Endpoint posting the same limit for both plug types.

        """
        return APIEndpoint(
            url=f"{self.spa_url}vehicles/{vehicle.reg_id}/charge/target",
            method=HTTPMethod.POST,
            headers=self._authorized_headers(auth_token),
            body=encode_json(charge_target_body(target_soc)),
        )

    def parse_login_response(
        self, data: bytes, headers: dict[str, str]
    ) -> AuthToken:
        """Parse the IdP token response.

        The IdP does not rotate the refresh token, so the configured one is
        kept. Device registration is started by the client, not here.
        """
        payload = load_json_object(data, self.api_name)
        token_type = extract_str(payload.get("token_type"))
        access_token = extract_str(payload.get("access_token"))
        expires_in = extract_int(payload.get("expires_in"))
        if token_type is None or access_token is None or expires_in is None:
            raise VehicleApiError.log_error(
                f"Invalid login response for {self.username}: {body_text(data)}",
                api_name=self.api_name,
            )

        return AuthToken(
            access_token=f"{token_type} {access_token}",
            refresh_token=self.password,
            expires_at=utcnow() + timedelta(seconds=expires_in),
            pin=self.pin,
        )

    def parse_vehicles_response(self, data: bytes) -> list[Vehicle]:
        payload = load_json_object(data, self.api_name)
        if not isinstance(payload.get("resMsg"), dict) or not isinstance(
            payload["resMsg"].get("vehicles"), list
        ):
            raise VehicleApiError.log_error(
                "Invalid vehicles response", api_name=self.api_name
            )

        vehicles = []
        for entry in get_list(payload, "resMsg.vehicles"):
            if not isinstance(entry, dict):
                continue
            reg_id = extract_str(entry.get("vehicleId"))
            vin = extract_str(entry.get("vin"))
            nickname = extract_str(entry.get("nickname"))
            vehicle_name = extract_str(entry.get("vehicleName"))
            if None in (reg_id, vin, nickname, vehicle_name):
                _LOGGER.debug("Skipping incomplete vehicle entry")
                continue
            vehicles.append(
                Vehicle(
                    vin=vin,
                    reg_id=reg_id,
                    model=nickname or vehicle_name,
                    account_id=self.account_id,
                    is_electric=extract_str(entry.get("type"), "") == "EV",
                    generation=extract_int(entry.get("generation"), 2),
                    odometer=Distance(0.0, DistanceUnits.KILOMETERS),
                )
            )
        return vehicles

    def parse_vehicle_status_response(
        self, data: bytes, vehicle: Vehicle
    ) -> VehicleStatus:
        payload = load_json_object(data, self.api_name)
        return parse_eu_status(payload, vehicle, self.api_name)

    def parse_command_response(self, data: bytes) -> None:
        check_eu_command_errors(decode_body(data), self.api_name)

    def parse_command_transaction_id(self, data: bytes) -> str:
        """Return the ``msgId`` of an accepted command."""
        payload = decode_body(data)
        check_eu_command_errors(payload, self.api_name)
        msg_id = extract_str(payload.get("msgId"))
        if not msg_id:
            raise VehicleApiError.log_error(
                "No msgId in command response", api_name=self.api_name
            )
        return msg_id

    def parse_device_registration(self, data: bytes) -> str:
        device_id = str_at(load_json(data, self.api_name), "resMsg.deviceId")
        if not device_id:
            raise VehicleApiError.log_error(
                "Invalid device registration response", api_name=self.api_name
            )
        return device_id

    def parse_control_token(
        self, data: bytes, now: datetime | None = None
    ) -> ControlToken:
        """Parse the control token and turn its lifetime into an expiry.

        Args:
            data: Raw response body.
            now: Reference time for the expiry, defaults to the current time.

        Returns:
            Bearer-prefixed control token.

        Raises:
            VehicleApiError: If the token or its lifetime is missing.

        """
        payload: Any = load_json(data, self.api_name)
        value = str_at(payload, "controlToken")
        expires_in = extract_int(
            payload.get("expiresTime") if isinstance(payload, dict) else None
        )
        if not value or expires_in is None:
            raise VehicleApiError.log_error(
                "Invalid control token response", api_name=self.api_name
            )
        return ControlToken(
            value=f"Bearer {value}",
            expires_at=(now or utcnow()) + timedelta(seconds=expires_in),
        )

    def parse_charge_target_response(self, data: bytes) -> None:
        if str_at(decode_body(data), "retCode") != EU_CHARGE_LIMIT_SUCCESS:
            raise VehicleApiError.log_error(
                "Invalid charge limit response", api_name=self.api_name
            )
