"""Pytest configuration and fixtures for BetterBlue tests."""

from datetime import timedelta

import pytest

from betterblue.config import ClientConfiguration
from betterblue.models import AuthToken, Brand, HTTPLog, Region, Vehicle, utcnow
from tests.factories import ACCOUNT_ID, make_vehicle


@pytest.fixture
def http_logs() -> list[HTTPLog]:
    """Fixture collecting the HTTP log records emitted by a client."""
    return []


@pytest.fixture
def hyundai_us_config(http_logs: list[HTTPLog]) -> ClientConfiguration:
    """Fixture providing a Hyundai US configuration."""
    return ClientConfiguration(
        region=Region.USA,
        brand=Brand.HYUNDAI,
        username="driver@example.com",
        password="secret123",
        pin="1234",
        account_id=ACCOUNT_ID,
        log_sink=http_logs.append,
    )


@pytest.fixture
def kia_config(http_logs: list[HTTPLog]) -> ClientConfiguration:
    """Fixture providing a Kia US configuration."""
    return ClientConfiguration(
        region=Region.USA,
        brand=Brand.KIA,
        username="driver@example.com",
        password="secret123",
        pin="1234",
        account_id=ACCOUNT_ID,
        log_sink=http_logs.append,
    )


@pytest.fixture
def eu_config(http_logs: list[HTTPLog]) -> ClientConfiguration:
    """Fixture providing a Hyundai Europe configuration."""
    return ClientConfiguration(
        region=Region.EUROPE,
        brand=Brand.HYUNDAI,
        username="driver@example.com",
        password="eu-refresh-token",
        pin="1234",
        account_id=ACCOUNT_ID,
        log_sink=http_logs.append,
    )


@pytest.fixture
def auth_token() -> AuthToken:
    """Fixture providing a primary token valid for one hour."""
    return AuthToken(
        access_token="Bearer primary-token",
        refresh_token="refresh-token",
        expires_at=utcnow() + timedelta(hours=1),
        pin="1234",
    )


@pytest.fixture
def ev() -> Vehicle:
    """Fixture providing a CCS2 generation electric vehicle."""
    return make_vehicle()


@pytest.fixture
def legacy_ev() -> Vehicle:
    """Fixture providing a first generation electric vehicle."""
    return make_vehicle(vin="KMHKR81CPNU000002", reg_id="reg-2", generation=1)


@pytest.fixture
def ccs2_status_response() -> dict:
    """Fixture providing an EU CCS2 status response for a charging vehicle.

    Returns:
        A dictionary representing a ``ccs2/carstatus/latest`` response.

    """
    return {
        "retCode": "S",
        "resCode": "0000",
        "resMsg": {
            "state": {
                "Vehicle": {
                    "Date": "20250115103000.123",
                    "Green": {
                        "BatteryManagement": {
                            "BatteryRemain": {"Ratio": 73},
                            "SoH": {"Ratio": 98},
                        },
                        "ChargingInformation": {
                            "ConnectorFastening": {"State": 1},
                            "Charging": {"RemainTime": 45},
                            "TargetSoC": {"Standard": 80, "Quick": 90},
                        },
                        "Electric": {"SmartGrid": {"RealTimePower": 10.5}},
                    },
                    "Drivetrain": {
                        "Odometer": 15234.5,
                        "FuelSystem": {
                            "DTE": {"Total": 310, "Unit": 1},
                            "AverageFuelEconomy": {"Drive": 16.8},
                        },
                    },
                    "Electronics": {"Battery": {"Level": 88}},
                    "Location": {
                        "GeoCoord": {"Latitude": 52.52, "Longitude": 13.405}
                    },
                    "Cabin": {
                        "Door": {"Row1": {"Driver": {"Open": 0}}},
                        "HVAC": {
                            "Row1": {
                                "Driver": {
                                    "Blower": {"SpeedLevel": 2},
                                    "Temperature": {"Value": "21", "Unit": 0},
                                }
                            }
                        },
                        "SteeringWheel": {"Heat": {"State": 1}},
                    },
                    "Body": {"Windshield": {"Front": {"Defog": {"State": 0}}}},
                }
            }
        },
    }


@pytest.fixture
def legacy_status_response() -> dict:
    """Fixture providing an EU legacy status response reporting no battery.

    Returns:
        A dictionary representing a ``status/latest`` response.

    """
    return {
        "retCode": "S",
        "resMsg": {
            "vehicleStatusInfo": {
                "vehicleStatus": {
                    "time": "20250115103000",
                    "doorLock": True,
                    "airCtrlOn": False,
                    "defrost": False,
                    "steerWheelHeat": 0,
                    "airTemp": {"value": "HI", "unit": 0},
                    "battery": {"batSoc": 81},
                    "evStatus": {
                        "batteryStatus": 0,
                        "batteryCharge": False,
                        "batteryPlugin": 0,
                        "drvDistance": [
                            {
                                "rangeByFuel": {
                                    "evModeRange": {"value": 0, "unit": 1}
                                }
                            }
                        ],
                    },
                },
                "vehicleLocation": {"coord": {"lat": 48.85, "lon": 2.35}},
                "odometer": {"value": 8200.0, "unit": 1},
            }
        },
    }
