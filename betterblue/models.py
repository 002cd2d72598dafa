"""Data models for the BetterBlue Hyundai/Kia client."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum, StrEnum
from uuid import UUID

from .const import (
    AUTH_TOKEN_SAFETY_MARGIN,
    FAKE_BASE_URL,
    HYUNDAI_BASE_URLS,
    KIA_BASE_URLS,
)

MILES_TO_KILOMETERS = 1.609344


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Region(StrEnum):
    """Vendor backend regions."""

    USA = "US"
    CANADA = "CA"
    EUROPE = "EU"
    AUSTRALIA = "AU"
    CHINA = "CN"
    INDIA = "IN"

    def api_base_url(self, brand: Brand) -> str:
        """Return the API base URL for this region and brand."""
        if brand == Brand.HYUNDAI:
            return HYUNDAI_BASE_URLS[self.value]
        if brand == Brand.KIA:
            return KIA_BASE_URLS[self.value]
        return FAKE_BASE_URL


class Brand(StrEnum):
    """Supported brands."""

    HYUNDAI = "hyundai"
    KIA = "kia"
    FAKE = "fake"


class FuelType(StrEnum):
    """Fuel type tag attached to vendor range reports."""

    GAS = "gas"
    ELECTRIC = "electric"

    @classmethod
    def from_vendor(cls, number: int) -> FuelType:
        return cls.ELECTRIC if number == 2 else cls.GAS


class DistanceUnits(StrEnum):
    """Distance units."""

    MILES = "miles"
    KILOMETERS = "kilometers"

    @classmethod
    def from_vendor(cls, number: int | None) -> DistanceUnits:
        return cls.KILOMETERS if number == 1 else cls.MILES

    def convert(self, length: float, to: DistanceUnits) -> float:
        if self == to:
            return length
        if self == DistanceUnits.MILES:
            return length * MILES_TO_KILOMETERS
        return length / MILES_TO_KILOMETERS


@dataclass(frozen=True)
class Distance:
    """A length with its units."""

    length: float
    units: DistanceUnits

    def to(self, units: DistanceUnits) -> Distance:
        return Distance(self.units.convert(self.length, units), units)


class TemperatureUnits(StrEnum):
    """Temperature units."""

    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"

    @classmethod
    def from_vendor(cls, number: int | None) -> TemperatureUnits:
        return cls.FAHRENHEIT if number == 1 else cls.CELSIUS

    def to_vendor(self) -> int:
        return 1 if self == TemperatureUnits.FAHRENHEIT else 0

    def convert(self, value: float, to: TemperatureUnits) -> float:
        if self == to:
            return value
        if self == TemperatureUnits.CELSIUS:
            return value * 9.0 / 5.0 + 32.0
        return (value - 32.0) * 5.0 / 9.0


@dataclass(frozen=True)
class Temperature:
    """A temperature value with its units."""

    value: float
    units: TemperatureUnits

    MINIMUM = 62.0
    MAXIMUM = 82.0

    @classmethod
    def from_vendor(cls, units: int | None, value: str | None) -> Temperature:
        """Build a temperature from the vendor unit code and string value.

        The vendor reports "HI" when the cabin target is pinned to maximum;
        any other non-numeric value falls back to the minimum.
        """
        if value == "HI":
            number = cls.MAXIMUM
        else:
            try:
                number = float(value) if value is not None else cls.MINIMUM
            except ValueError:
                number = cls.MINIMUM
        return cls(value=number, units=TemperatureUnits.from_vendor(units))


@dataclass(frozen=True)
class AuthToken:
    """Primary session credentials returned by a login."""

    access_token: str
    refresh_token: str
    expires_at: datetime
    pin: str

    def is_valid_at(self, now: datetime) -> bool:
        margin = timedelta(seconds=AUTH_TOKEN_SAFETY_MARGIN)
        return now < self.expires_at - margin

    @property
    def is_valid(self) -> bool:
        """Return True while more than five minutes remain before expiry."""
        return self.is_valid_at(utcnow())


@dataclass(frozen=True)
class ControlToken:
    """Short-lived PIN-derived credential for remote commands."""

    value: str
    expires_at: datetime

    def is_valid_at(self, now: datetime) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class Vehicle:
    """A vehicle enrolled on an account.

    Attributes:
        vin: Vehicle identification number, the global identity.
        reg_id: Vendor registration id used in status and command URLs.
        model: Display name (nickname or model).
        account_id: Owning account.
        is_electric: True for battery electric vehicles.
        generation: Telematics generation; drives dialect selection.
        odometer: Odometer reading reported by the vehicle list.
        vehicle_key: Kia vehicle key, required by Kia status/command calls.

    """

    vin: str
    reg_id: str
    model: str
    account_id: UUID
    is_electric: bool
    generation: int
    odometer: Distance
    vehicle_key: str | None = None

    @property
    def id(self) -> str:
        return self.vin


@dataclass(frozen=True)
class FuelRange:
    """Remaining range and fill level for one energy source."""

    range: Distance
    percentage: float


@dataclass(frozen=True)
class EVStatus:
    """Traction battery and charging state."""

    charging: bool
    charge_speed: float
    plugged_in: bool
    ev_range: FuelRange
    charge_limit: int | None = None  # target SOC, 50-100
    estimated_charging_time: int | None = None  # minutes until target SOC


@dataclass(frozen=True)
class Location:
    """GPS position."""

    latitude: float = 0.0
    longitude: float = 0.0


class LockStatus(StrEnum):
    """Tri-state door lock status."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"
    UNKNOWN = "unknown"

    @classmethod
    def from_locked(cls, locked: bool | None) -> LockStatus:
        if locked is None:
            return cls.UNKNOWN
        return cls.LOCKED if locked else cls.UNLOCKED


@dataclass(frozen=True)
class ClimateStatus:
    """Cabin climate state."""

    defrost_on: bool = False
    air_control_on: bool = False
    steering_wheel_heating_on: bool = False
    temperature: Temperature = field(
        default_factory=lambda: Temperature.from_vendor(None, None)
    )


@dataclass(frozen=True)
class VehicleStatus:
    """Canonical status snapshot, built fresh on every fetch."""

    vin: str
    location: Location = field(default_factory=Location)
    lock_status: LockStatus = LockStatus.UNKNOWN
    climate_status: ClimateStatus = field(default_factory=ClimateStatus)
    gas_range: FuelRange | None = None
    ev_status: EVStatus | None = None
    odometer: Distance | None = None
    sync_date: datetime | None = None
    battery_health: int | None = None  # state of health, 0-100
    battery_12v: int | None = None  # auxiliary battery, 0-100
    average_consumption: float | None = None
    last_updated: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ClimateOptions:
    """Options for a climate start command."""

    climate: bool = True
    temperature: Temperature = field(
        default_factory=lambda: Temperature(72.0, TemperatureUnits.FAHRENHEIT)
    )
    defrost: bool = False
    heating: bool = False
    duration: int = 10
    front_left_seat: int = 0
    front_right_seat: int = 0
    rear_left_seat: int = 0
    rear_right_seat: int = 0
    steering_wheel: int = 0


class CommandKind(StrEnum):
    """Remote command variants."""

    LOCK = "lock"
    UNLOCK = "unlock"
    START_CLIMATE = "startClimate"
    STOP_CLIMATE = "stopClimate"
    START_CHARGE = "startCharge"
    STOP_CHARGE = "stopCharge"


@dataclass(frozen=True)
class VehicleCommand:
    """A remote command. Pure value data; see `commands` for wire bodies."""

    kind: CommandKind
    climate_options: ClimateOptions | None = None

    def __post_init__(self) -> None:
        if self.kind == CommandKind.START_CLIMATE and self.climate_options is None:
            object.__setattr__(self, "climate_options", ClimateOptions())

    @classmethod
    def lock(cls) -> VehicleCommand:
        return cls(CommandKind.LOCK)

    @classmethod
    def unlock(cls) -> VehicleCommand:
        return cls(CommandKind.UNLOCK)

    @classmethod
    def start_climate(cls, options: ClimateOptions | None = None) -> VehicleCommand:
        return cls(CommandKind.START_CLIMATE, options or ClimateOptions())

    @classmethod
    def stop_climate(cls) -> VehicleCommand:
        return cls(CommandKind.STOP_CLIMATE)

    @classmethod
    def start_charge(cls) -> VehicleCommand:
        return cls(CommandKind.START_CHARGE)

    @classmethod
    def stop_charge(cls) -> VehicleCommand:
        return cls(CommandKind.STOP_CHARGE)


class HTTPMethod(StrEnum):
    """HTTP verbs used by the vendor APIs."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class APIEndpoint:
    """Behaviour-free request descriptor built by an endpoint provider."""

    url: str
    method: HTTPMethod
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


class HTTPRequestType(Enum):
    """Operation kinds recorded in HTTP logs."""

    LOGIN = "login"
    FETCH_VEHICLES = "fetchVehicles"
    FETCH_VEHICLE_STATUS = "fetchVehicleStatus"
    SEND_COMMAND = "sendCommand"

    @property
    def display_name(self) -> str:
        return {
            HTTPRequestType.LOGIN: "Login",
            HTTPRequestType.FETCH_VEHICLES: "Fetch Vehicles",
            HTTPRequestType.FETCH_VEHICLE_STATUS: "Fetch Status",
            HTTPRequestType.SEND_COMMAND: "Send Command",
        }[self]


@dataclass(frozen=True)
class HTTPLog:
    """Redacted record of one HTTP exchange."""

    timestamp: datetime
    account_id: UUID
    request_type: HTTPRequestType
    method: str
    url: str
    request_headers: dict[str, str]
    request_body: str | None
    response_status: int | None
    response_headers: dict[str, str]
    response_body: str | None
    error: str | None
    duration: float
    api_error: str | None = None
    stack_trace: str | None = None

    @property
    def status_text(self) -> str:
        if self.response_status is None:
            return "Error" if self.error is not None else "Pending"
        if self.api_error is not None:
            return f"{self.response_status} (API Error)"
        return str(self.response_status)

    @property
    def is_success(self) -> bool:
        if self.response_status is None:
            return False
        return (
            200 <= self.response_status <= 299
            and self.error is None
            and self.api_error is None
        )

    @property
    def formatted_duration(self) -> str:
        return f"{self.duration:.2f}s"


HTTPLogSink = Callable[[HTTPLog], None]
