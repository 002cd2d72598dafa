"""Kia Connect endpoint provider (US and default regions)."""

from __future__ import annotations

import logging
import random
import string
import time
import uuid
from datetime import timedelta
from email.utils import formatdate
from typing import TYPE_CHECKING

from ..classifier import check_kia_errors, decode_body
from ..commands import us_command_body
from ..const import (
    KIA_APP_VERSION,
    KIA_CLIENT_ID,
    KIA_SECRET_KEY,
    KIA_SESSION_LIFETIME,
    USER_AGENT_OKHTTP4,
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
    Vehicle,
    VehicleCommand,
    VehicleStatus,
    utcnow,
)
from ..parsing import (
    body_text,
    extract_int,
    extract_str,
    float_at,
    get_list,
    load_json_object,
)
from ..status import parse_kia_us_status
from .base import EndpointProvider, encode_json

if TYPE_CHECKING:
    from ..config import ClientConfiguration

_LOGGER = logging.getLogger(__name__)

_COMMAND_PATHS = {
    CommandKind.LOCK: "rems/door/lock",
    CommandKind.UNLOCK: "rems/door/unlock",
    CommandKind.START_CLIMATE: "rems/start",
    CommandKind.STOP_CLIMATE: "rems/stop",
    CommandKind.START_CHARGE: "evc/charge",
    CommandKind.STOP_CHARGE: "evc/cancel",
}

_STATUS_REQUEST = {
    "vehicleConfigReq": {
        "airTempRange": "0",
        "maintenance": "1",
        "seatHeatCoolOption": "0",
        "vehicle": "1",
        "vehicleFeature": "0",
    },
    "vehicleInfoReq": {
        "drivingActivty": "0",
        "dtc": "1",
        "enrollment": "1",
        "functionalCards": "0",
        "location": "1",
        "vehicleStatus": "1",
        "weather": "0",
    },
}


def generate_device_id() -> str:
    """Return a device id in the format the Kia app sends."""
    prefix = "".join(random.choices(string.ascii_letters + string.digits, k=22))
    return f"{prefix}:{uuid.uuid4().hex}"


class KiaEndpointProvider(EndpointProvider):
    """Endpoint provider for the Kia Connect API."""

    api_name = "KiaAPI"

    def __init__(self, configuration: ClientConfiguration) -> None:
        super().__init__(configuration)
        self.device_id = generate_device_id()

    @property
    def base_url(self) -> str:
        return self.region.api_base_url(Brand.KIA)

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/apigw/v1/"

    def _headers(self) -> dict[str, str]:
        offset = time.localtime().tm_gmtoff // 3600
        return {
            "content-type": "application/json;charset=UTF-8",
            "accept": "application/json, text/plain, */*",
            "accept-encoding": "gzip, deflate, br",
            "accept-language": "en-US,en;q=0.9",
            "apptype": "L",
            "appversion": KIA_APP_VERSION,
            "clientid": KIA_CLIENT_ID,
            "from": "SPA",
            "host": self.base_url.removeprefix("https://"),
            "language": "0",
            "offset": str(offset),
            "ostype": "Android",
            "osversion": "11",
            "secretkey": KIA_SECRET_KEY,
            "to": "APIGW",
            "tokentype": "G",
            "user-agent": USER_AGENT_OKHTTP4,
            "deviceid": self.device_id,
            "date": formatdate(usegmt=True),
        }

    def _authorized_headers(
        self, auth_token: AuthToken, vehicle_key: str | None = None
    ) -> dict[str, str]:
        headers = self._headers()
        headers["sid"] = auth_token.access_token
        if vehicle_key is not None:
            headers["vinkey"] = vehicle_key
        return headers

    def login_endpoint(self) -> APIEndpoint:
        body = {
            "deviceKey": "",
            "deviceType": 2,
            "userCredential": {"userId": self.username, "password": self.password},
        }
        return APIEndpoint(
            url=f"{self.api_url}prof/authUser",
            method=HTTPMethod.POST,
            headers=self._headers(),
            body=encode_json(body),
        )

    def fetch_vehicles_endpoint(self, auth_token: AuthToken) -> APIEndpoint:
        return APIEndpoint(
            url=f"{self.api_url}ownr/gvl",
            method=HTTPMethod.GET,
            headers=self._authorized_headers(auth_token),
        )

    def fetch_vehicle_status_endpoint(
        self, vehicle: Vehicle, auth_token: AuthToken
    ) -> APIEndpoint:
        _LOGGER.debug(
            "Fetching status for %s with vehicle key %s", vehicle.vin, vehicle.vehicle_key
        )
        body = {**_STATUS_REQUEST, "vinKey": [vehicle.vehicle_key or ""]}
        return APIEndpoint(
            url=f"{self.api_url}cmm/gvi",
            method=HTTPMethod.POST,
            headers=self._authorized_headers(auth_token, vehicle.vehicle_key),
            body=encode_json(body),
        )

    def send_command_endpoint(
        self, vehicle: Vehicle, command: VehicleCommand, auth_token: AuthToken
    ) -> APIEndpoint:
        return APIEndpoint(
            url=f"{self.api_url}{_COMMAND_PATHS[command.kind]}",
            method=HTTPMethod.POST,
            headers=self._authorized_headers(auth_token, vehicle.vehicle_key),
            body=encode_json(us_command_body(command, vehicle, self.username)),
        )

    def parse_login_response(
        self, data: bytes, headers: dict[str, str]
    ) -> AuthToken:
        """Read the session id from the ``sid`` response header.

        The session id serves as both access and refresh token and is good
        for one hour.
        """
        check_kia_errors(decode_body(data), self.api_name)

        session_id = next(
            (value for key, value in headers.items() if key.lower() == "sid"), None
        )
        if not session_id:
            raise VehicleApiError.log_error(
                "Kia API login response missing session ID header",
                api_name=self.api_name,
            )

        _LOGGER.info("Authentication completed for user %s", self.username)
        return AuthToken(
            access_token=session_id,
            refresh_token=session_id,
            expires_at=utcnow() + timedelta(seconds=KIA_SESSION_LIFETIME),
            pin=self.pin,
        )

    def parse_vehicles_response(self, data: bytes) -> list[Vehicle]:
        payload = load_json_object(data, self.api_name)
        check_kia_errors(payload, self.api_name)
        summary = payload.get("payload", {})
        if not isinstance(summary, dict) or not isinstance(
            summary.get("vehicleSummary"), list
        ):
            raise VehicleApiError.log_error(
                f"Invalid Kia vehicles response {body_text(data)}",
                api_name=self.api_name,
            )

        vehicles = []
        for entry in get_list(summary, "vehicleSummary"):
            if not isinstance(entry, dict):
                continue
            vin = extract_str(entry.get("vin"))
            reg_id = extract_str(entry.get("vehicleIdentifier"))
            nickname = extract_str(entry.get("nickName"))
            vehicle_key = extract_str(entry.get("vehicleKey"))
            generation = extract_int(entry.get("genType"))
            fuel_type = extract_int(entry.get("fuelType"))
            if None in (vin, reg_id, nickname, vehicle_key, generation, fuel_type):
                _LOGGER.debug("Skipping incomplete vehicle entry")
                continue
            vehicles.append(
                Vehicle(
                    vin=vin,
                    reg_id=reg_id,
                    model=nickname,
                    account_id=self.account_id,
                    is_electric=fuel_type != 3,
                    generation=generation,
                    odometer=Distance(
                        float_at(entry, "mileage", 0.0), DistanceUnits.MILES
                    ),
                    vehicle_key=vehicle_key,
                )
            )
        return vehicles

    def parse_vehicle_status_response(
        self, data: bytes, vehicle: Vehicle
    ) -> VehicleStatus:
        payload = load_json_object(data, self.api_name)
        check_kia_errors(payload, self.api_name)
        return parse_kia_us_status(payload, vehicle, self.api_name)

    def parse_command_response(self, data: bytes) -> None:
        check_kia_errors(decode_body(data), self.api_name)
