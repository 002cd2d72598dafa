"""Hyundai BlueLink endpoint provider (US and default regions)."""

from __future__ import annotations

import logging
from datetime import timedelta

from ..classifier import check_pin_rejection, decode_body
from ..commands import us_command_body
from ..const import (
    HYUNDAI_DEFAULT_CLIENT_ID,
    HYUNDAI_DEFAULT_CLIENT_SECRET,
    HYUNDAI_US_CLIENT_ID,
    HYUNDAI_US_CLIENT_SECRET,
    HYUNDAI_US_HOST,
    USER_AGENT_OKHTTP3,
)
from ..errors import VehicleApiError
from ..models import (
    APIEndpoint,
    AuthToken,
    Brand,
    CommandKind,
    Distance,
    DistanceUnits,
    HTTPMethod,
    Region,
    Vehicle,
    VehicleCommand,
    VehicleStatus,
    utcnow,
)
from ..parsing import (
    body_text,
    extract_int,
    float_at,
    get_list,
    load_json_object,
    str_at,
)
from ..status import parse_hyundai_us_status
from .base import EndpointProvider, encode_json

_LOGGER = logging.getLogger(__name__)

_COMMAND_PATHS = {
    CommandKind.UNLOCK: "/ac/v2/rcs/rdo/on",
    CommandKind.LOCK: "/ac/v2/rcs/rdo/off",
    CommandKind.START_CHARGE: "/ac/v2/evc/charge/start",
    CommandKind.STOP_CHARGE: "/ac/v2/evc/charge/stop",
}


class HyundaiEndpointProvider(EndpointProvider):
    """Endpoint provider for the BlueLink API."""

    api_name = "HyundaiAPI"

    @property
    def base_url(self) -> str:
        return self.region.api_base_url(Brand.HYUNDAI)

    @property
    def client_id(self) -> str:
        if self.region == Region.USA:
            return HYUNDAI_US_CLIENT_ID
        return HYUNDAI_DEFAULT_CLIENT_ID

    @property
    def client_secret(self) -> str:
        if self.region == Region.USA:
            return HYUNDAI_US_CLIENT_SECRET
        return HYUNDAI_DEFAULT_CLIENT_SECRET

    def _headers(self) -> dict[str, str]:
        return {
            "client_id": self.client_id,
            "clientSecret": self.client_secret,
            "Host": HYUNDAI_US_HOST,
            "User-Agent": USER_AGENT_OKHTTP3,
            "Content-Type": "application/json",
            "Accept": "application/json, text/plain, */*",
            "Accept-Encoding": "gzip, deflate, br",
            "Accept-Language": "en-US,en;q=0.9",
            "Connection": "Keep-Alive",
        }

    def _authorized_headers(
        self, auth_token: AuthToken, vehicle: Vehicle | None = None
    ) -> dict[str, str]:
        headers = self._headers()
        headers.update(
            {
                "accessToken": auth_token.access_token,
                "language": "0",
                "to": "ISS",
                "encryptFlag": "false",
                "from": "SPA",
                "offset": "-5",
                "brandIndicator": "H",
                "origin": f"https://{HYUNDAI_US_HOST}",
                "referer": f"https://{HYUNDAI_US_HOST}/login",
                "sec-fetch-dest": "empty",
                "sec-fetch-mode": "cors",
                "sec-fetch-site": "same-origin",
                "username": self.username,
                "blueLinkServicePin": self.pin,
                "refresh": "false",
                "payloadGenerated": utcnow().strftime("%Y%m%d%H%M%S"),
                "includeNonConnectedVehicles": "Y",
            }
        )
        if vehicle is not None:
            headers["gen"] = str(vehicle.generation)
            headers["registrationId"] = vehicle.reg_id
            headers["vin"] = vehicle.vin
            headers["APPCLOUD-VIN"] = vehicle.vin
        return headers

    def _command_url(self, command: VehicleCommand, vehicle: Vehicle) -> str:
        if command.kind == CommandKind.START_CLIMATE:
            path = (
                "/ac/v2/evc/fatc/start"
                if vehicle.is_electric
                else "/ac/v2/rcs/rsc/start"
            )
        elif command.kind == CommandKind.STOP_CLIMATE:
            path = (
                "/ac/v2/evc/fatc/stop" if vehicle.is_electric else "/ac/v2/rcs/rsc/stop"
            )
        else:
            path = _COMMAND_PATHS[command.kind]
        return f"{self.base_url}{path}"

    def login_endpoint(self) -> APIEndpoint:
        return APIEndpoint(
            url=f"{self.base_url}/v2/ac/oauth/token",
            method=HTTPMethod.POST,
            headers=self._headers(),
            body=encode_json({"username": self.username, "password": self.password}),
        )

    def fetch_vehicles_endpoint(self, auth_token: AuthToken) -> APIEndpoint:
        return APIEndpoint(
            url=f"{self.base_url}/ac/v2/enrollment/details/{self.username}",
            method=HTTPMethod.GET,
            headers=self._authorized_headers(auth_token),
        )

    def fetch_vehicle_status_endpoint(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> APIEndpoint:
        return APIEndpoint(
            url=f"{self.base_url}/ac/v2/rcs/rvs/vehicleStatus",
            method=HTTPMethod.GET,
            headers=self._authorized_headers(auth_token, vehicle),
        )

    def send_command_endpoint(
        self, vehicle: Vehicle, command: VehicleCommand, auth_token: AuthToken
    ) -> APIEndpoint:
        return APIEndpoint(
            url=self._command_url(command, vehicle),
            method=HTTPMethod.POST,
            headers=self._authorized_headers(auth_token, vehicle),
            body=encode_json(us_command_body(command, vehicle, self.username)),
        )

    def parse_login_response(
        self, data: bytes, headers: dict[str, str]
    ) -> AuthToken:
        """Parse the OAuth token response.

        ``expires_in`` arrives as a numeric string.
        """
        payload = load_json_object(data, self.api_name)
        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        expires_in = extract_int(payload.get("expires_in"))
        if (
            not isinstance(access_token, str)
            or not isinstance(refresh_token, str)
            or expires_in is None
        ):
            raise VehicleApiError.log_error(
                f"Invalid login response for {self.username}: {body_text(data)}",
                api_name=self.api_name,
            )

        _LOGGER.info("Authentication completed for user %s", self.username)
        return AuthToken(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=utcnow() + timedelta(seconds=expires_in),
            pin=self.pin,
        )

    def parse_vehicles_response(self, data: bytes) -> list[Vehicle]:
        payload = load_json_object(data, self.api_name)
        if not isinstance(payload.get("enrolledVehicleDetails"), list):
            raise VehicleApiError.log_error(
                f"Invalid vehicles response {body_text(data)}", api_name=self.api_name
            )

        vehicles = []
        for entry in get_list(payload, "enrolledVehicleDetails"):
            vin = str_at(entry, "vehicleDetails.vin")
            reg_id = str_at(entry, "vehicleDetails.regid")
            nickname = str_at(entry, "vehicleDetails.nickName")
            ev_status = str_at(entry, "vehicleDetails.evStatus")
            generation = str_at(entry, "vehicleDetails.vehicleGeneration")
            if None in (vin, reg_id, nickname, ev_status, generation):
                _LOGGER.debug("Skipping incomplete vehicle entry")
                continue
            vehicles.append(
                Vehicle(
                    vin=vin,
                    reg_id=reg_id,
                    model=nickname,
                    account_id=self.account_id,
                    is_electric=ev_status == "E",
                    generation=extract_int(generation, 1),
                    odometer=Distance(
                        float_at(entry, "vehicleDetails.odometer", 0.0),
                        DistanceUnits.MILES,
                    ),
                )
            )
        return vehicles

    def parse_vehicle_status_response(
        self, data: bytes, vehicle: Vehicle
    ) -> VehicleStatus:
        payload = load_json_object(data, self.api_name)
        return parse_hyundai_us_status(payload, vehicle, self.api_name)

    def parse_command_response(self, data: bytes) -> None:
        check_pin_rejection(decode_body(data), self.api_name)
