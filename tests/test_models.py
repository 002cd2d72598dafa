"""Tests for the BetterBlue data models."""

from datetime import UTC, datetime, timedelta

import pytest

from betterblue.models import (
    AuthToken,
    Brand,
    ClimateOptions,
    CommandKind,
    ControlToken,
    Distance,
    DistanceUnits,
    HTTPLog,
    HTTPRequestType,
    LockStatus,
    Region,
    Temperature,
    TemperatureUnits,
    VehicleCommand,
)
from tests.factories import ACCOUNT_ID, make_vehicle

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


def make_log(
    status: int | None, error: str | None = None, api_error: str | None = None
) -> HTTPLog:
    """Create an HTTP log record with the given outcome."""
    return HTTPLog(
        timestamp=NOW,
        account_id=ACCOUNT_ID,
        request_type=HTTPRequestType.LOGIN,
        method="POST",
        url="https://example.com/login",
        request_headers={},
        request_body=None,
        response_status=status,
        response_headers={},
        response_body=None,
        error=error,
        duration=1.234,
        api_error=api_error,
    )


class TestAuthToken:
    """Tests for AuthToken validity."""

    def test_token_valid_with_more_than_five_minutes_left(self) -> None:
        """Test that a token is valid while over 300 seconds remain."""
        token = AuthToken("a", "r", NOW + timedelta(seconds=301), "1234")
        assert token.is_valid_at(NOW)

    def test_token_invalid_at_exactly_five_minutes_left(self) -> None:
        """Test that a token is invalid once 300 seconds or less remain."""
        token = AuthToken("a", "r", NOW + timedelta(seconds=300), "1234")
        assert not token.is_valid_at(NOW)

    def test_token_invalid_after_expiry(self) -> None:
        """Test that an expired token is invalid."""
        token = AuthToken("a", "r", NOW - timedelta(seconds=1), "1234")
        assert not token.is_valid_at(NOW)


class TestControlToken:
    """Tests for ControlToken validity."""

    def test_control_token_has_no_safety_margin(self) -> None:
        """Test that a control token is valid right up to its expiry."""
        token = ControlToken("Bearer c", NOW + timedelta(seconds=1))
        assert token.is_valid_at(NOW)
        assert not token.is_valid_at(NOW + timedelta(seconds=1))


class TestUnits:
    """Tests for unit conversions and vendor codes."""

    def test_distance_miles_to_kilometers(self) -> None:
        """Test that miles convert to kilometers."""
        distance = Distance(100.0, DistanceUnits.MILES).to(DistanceUnits.KILOMETERS)
        assert distance.length == pytest.approx(160.9344)
        assert distance.units == DistanceUnits.KILOMETERS

    def test_distance_same_unit_is_unchanged(self) -> None:
        """Test that converting to the same unit keeps the length."""
        distance = Distance(42.0, DistanceUnits.KILOMETERS)
        assert distance.to(DistanceUnits.KILOMETERS) == distance

    def test_distance_vendor_codes(self) -> None:
        """Test that vendor code 1 is kilometers and anything else miles."""
        assert DistanceUnits.from_vendor(1) == DistanceUnits.KILOMETERS
        assert DistanceUnits.from_vendor(3) == DistanceUnits.MILES
        assert DistanceUnits.from_vendor(None) == DistanceUnits.MILES

    def test_temperature_conversion(self) -> None:
        """Test that Celsius and Fahrenheit convert both ways."""
        assert TemperatureUnits.CELSIUS.convert(
            100.0, TemperatureUnits.FAHRENHEIT
        ) == pytest.approx(212.0)
        assert TemperatureUnits.FAHRENHEIT.convert(
            32.0, TemperatureUnits.CELSIUS
        ) == pytest.approx(0.0)

    def test_temperature_from_vendor_hi(self) -> None:
        """Test that the vendor "HI" value maps to the maximum."""
        temperature = Temperature.from_vendor(1, "HI")
        assert temperature.value == Temperature.MAXIMUM
        assert temperature.units == TemperatureUnits.FAHRENHEIT

    def test_temperature_from_vendor_non_numeric_falls_back(self) -> None:
        """Test that non-numeric values fall back to the minimum."""
        assert Temperature.from_vendor(0, "LO").value == Temperature.MINIMUM
        assert Temperature.from_vendor(0, None).value == Temperature.MINIMUM

    def test_temperature_from_vendor_numeric_string(self) -> None:
        """Test that numeric strings are parsed."""
        temperature = Temperature.from_vendor(0, "21.5")
        assert temperature.value == pytest.approx(21.5)
        assert temperature.units == TemperatureUnits.CELSIUS


class TestLockStatus:
    """Tests for LockStatus."""

    def test_from_locked(self) -> None:
        """Test the tri-state mapping from an optional boolean."""
        assert LockStatus.from_locked(True) == LockStatus.LOCKED
        assert LockStatus.from_locked(False) == LockStatus.UNLOCKED
        assert LockStatus.from_locked(None) == LockStatus.UNKNOWN


class TestRegionAndBrand:
    """Tests for Region and Brand."""

    def test_api_base_url(self) -> None:
        """Test that base URLs are chosen by brand and region."""
        assert (
            Region.USA.api_base_url(Brand.HYUNDAI)
            == "https://api.telematics.hyundaiusa.com"
        )
        assert Region.USA.api_base_url(Brand.KIA) == "https://api.owners.kia.com"
        assert Region.EUROPE.api_base_url(Brand.FAKE) == "https://fake.api.testing.com"


class TestVehicleCommand:
    """Tests for VehicleCommand."""

    def test_start_climate_gets_default_options(self) -> None:
        """Test that a climate start without options gets the defaults."""
        command = VehicleCommand(CommandKind.START_CLIMATE)
        assert command.climate_options == ClimateOptions()

    def test_other_commands_have_no_options(self) -> None:
        """Test that non-climate commands carry no options."""
        assert VehicleCommand.lock().climate_options is None
        assert VehicleCommand.stop_charge().kind == CommandKind.STOP_CHARGE

    def test_vehicle_id_is_vin(self) -> None:
        """Test that a vehicle is identified by its VIN."""
        vehicle = make_vehicle(vin="VIN123")
        assert vehicle.id == "VIN123"


class TestHTTPLog:
    """Tests for HTTPLog presentation helpers."""

    def test_success(self) -> None:
        """Test that a clean 2xx exchange is a success."""
        log = make_log(200)
        assert log.is_success
        assert log.status_text == "200"
        assert log.formatted_duration == "1.23s"

    def test_api_error_is_not_success(self) -> None:
        """Test that an embedded API error marks the exchange as failed."""
        log = make_log(200, api_error="API Error: boom")
        assert not log.is_success
        assert log.status_text == "200 (API Error)"

    def test_network_error(self) -> None:
        """Test the status text of a request that got no response."""
        assert make_log(None, error="timeout").status_text == "Error"
        assert make_log(None).status_text == "Pending"
        assert not make_log(None, error="timeout").is_success
