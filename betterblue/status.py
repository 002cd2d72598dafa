"""Status normalization for the vendor payload dialects.

Each parser takes the decoded response body and the vehicle it belongs to and
returns a fresh `VehicleStatus`. A malformed field falls back to its default
without failing the whole parse; only a missing status envelope raises.
"""

from __future__ import annotations

import logging
from typing import Any

from .const import CHARGE_LIMIT_MAX, CHARGE_LIMIT_MIN
from .errors import VehicleApiError
from .models import (
    ClimateStatus,
    Distance,
    DistanceUnits,
    EVStatus,
    FuelRange,
    FuelType,
    Location,
    LockStatus,
    Temperature,
    Vehicle,
    VehicleStatus,
)
from .parsing import (
    bool_at,
    extract_float,
    extract_int,
    float_at,
    get_dict,
    get_list,
    int_at,
    parse_datetime,
    parse_iso_datetime,
    str_at,
)

_LOGGER = logging.getLogger(__name__)

CCS2_DATE_FORMAT = "%Y%m%d%H%M%S.%f"
LEGACY_DATE_FORMAT = "%Y%m%d%H%M%S"


def _battery_percentage(value: Any) -> float | None:
    """Return the battery percentage, treating zero as "no EV data"."""
    percentage = extract_float(value)
    if not percentage:
        return None
    return percentage


def _charge_speed(ev_data: dict[str, Any]) -> float:
    return max(
        float_at(ev_data, "batteryStndChrgPower", 0.0),
        float_at(ev_data, "batteryFstChrgPower", 0.0),
    )


def _distance(data: Any, value_path: str, unit_path: str, default_unit: int) -> Distance:
    return Distance(
        length=float_at(data, value_path, 0.0),
        units=DistanceUnits.from_vendor(int_at(data, unit_path, default_unit)),
    )


def _flat_location(data: Any) -> Location:
    return Location(
        latitude=float_at(data, "coord.lat", 0.0),
        longitude=float_at(data, "coord.lon", 0.0),
    )


def _flat_temperature(air_temp: dict[str, Any]) -> Temperature:
    value = air_temp.get("value")
    return Temperature.from_vendor(
        extract_int(air_temp.get("unit")), value if isinstance(value, str) else None
    )


def _flat_climate(data: dict[str, Any], air_control_key: str, steering_path: str) -> ClimateStatus:
    return ClimateStatus(
        defrost_on=bool_at(data, "defrost", False),
        air_control_on=bool_at(data, air_control_key, False),
        steering_wheel_heating_on=int_at(data, steering_path, 0) != 0,
        temperature=_flat_temperature(get_dict(data, "airTemp")),
    )


def _fuel_ranges(ev_data: dict[str, Any]) -> dict[FuelType, Distance]:
    ranges: dict[FuelType, Distance] = {}
    for entry in get_list(ev_data, "drvDistance"):
        fuel_type = FuelType.from_vendor(int_at(entry, "type", 0))
        ranges[fuel_type] = _distance(
            entry,
            "rangeByFuel.totalAvailableRange.value",
            "rangeByFuel.totalAvailableRange.unit",
            2,
        )
    return ranges


def parse_hyundai_us_status(
    payload: Any, vehicle: Vehicle, api_name: str
) -> VehicleStatus:
    """Normalize a BlueLink US ``vehicleStatus`` body.

    An electric vehicle that reports exactly one range uses it whatever its
    fuel-type tag says, because the vendor sometimes tags the EV range as gas.
    This has not been verified for plug-in hybrids.
    """
    status = get_dict(payload, "vehicleStatus")
    if not status:
        raise VehicleApiError.log_error(
            "Invalid vehicle status response", api_name=api_name
        )

    ev_data = get_dict(status, "evStatus")
    ranges = _fuel_ranges(ev_data)

    ev_status = None
    percentage = _battery_percentage(ev_data.get("batteryStatus"))
    if vehicle.is_electric and ev_data and percentage is not None:
        if len(ranges) == 1:
            ev_range = next(iter(ranges.values()))
        else:
            ev_range = ranges.get(FuelType.ELECTRIC)
        if ev_range is not None:
            ev_status = EVStatus(
                charging=bool_at(ev_data, "batteryCharge", False),
                charge_speed=_charge_speed(ev_data),
                plugged_in=int_at(ev_data, "batteryPlugin", 0) != 0,
                ev_range=FuelRange(range=ev_range, percentage=percentage),
            )

    gas_range = None
    fuel_level = float_at(status, "fuelLevel")
    if not vehicle.is_electric and fuel_level is not None and FuelType.GAS in ranges:
        gas_range = FuelRange(range=ranges[FuelType.GAS], percentage=fuel_level)

    return VehicleStatus(
        vin=vehicle.vin,
        location=_flat_location(get_dict(status, "vehicleLocation")),
        lock_status=LockStatus.from_locked(bool_at(status, "doorLock")),
        climate_status=_flat_climate(status, "airCtrlOn", "steerWheelHeat"),
        gas_range=gas_range,
        ev_status=ev_status,
        odometer=vehicle.odometer,
        sync_date=parse_iso_datetime(status.get("dateTime")),
        battery_12v=int_at(status, "battery.batSoc"),
    )


def parse_kia_us_status(payload: Any, vehicle: Vehicle, api_name: str) -> VehicleStatus:
    """Normalize a Kia Connect ``cmm/gvi`` body."""
    info_list = get_list(payload, "payload.vehicleInfoList")
    last_info = get_dict(info_list[0], "lastVehicleInfo") if info_list else {}
    status = get_dict(last_info, "vehicleStatusRpt.vehicleStatus")
    if not status:
        raise VehicleApiError.log_error(
            "Invalid Kia vehicle status response", api_name=api_name
        )

    ev_data = get_dict(status, "evStatus")
    ev_status = None
    percentage = _battery_percentage(ev_data.get("batteryStatus"))
    if percentage is not None:
        distances = get_list(ev_data, "drvDistance")
        first = distances[0] if distances else {}
        ev_status = EVStatus(
            charging=bool_at(ev_data, "batteryCharge", False),
            charge_speed=_charge_speed(ev_data),
            plugged_in=int_at(ev_data, "batteryPlugin", 0) != 0,
            ev_range=FuelRange(
                range=_distance(
                    first,
                    "rangeByFuel.evModeRange.value",
                    "rangeByFuel.evModeRange.unit",
                    3,
                ),
                percentage=percentage,
            ),
        )

    gas_range = None
    dte_value = float_at(status, "distanceToEmpty.value")
    dte_unit = int_at(status, "distanceToEmpty.unit")
    fuel_level = float_at(status, "fuelLevel")
    if (
        not vehicle.is_electric
        and dte_value is not None
        and dte_unit is not None
        and fuel_level is not None
    ):
        gas_range = FuelRange(
            range=Distance(dte_value, DistanceUnits.from_vendor(dte_unit)),
            percentage=fuel_level,
        )

    climate = get_dict(status, "climate")
    return VehicleStatus(
        vin=vehicle.vin,
        location=_flat_location(get_dict(last_info, "location")),
        lock_status=LockStatus.from_locked(bool_at(status, "doorLock")),
        climate_status=_flat_climate(
            climate, "airCtrl", "heatingAccessory.steeringWheel"
        ),
        gas_range=gas_range,
        ev_status=ev_status,
        odometer=vehicle.odometer,
        sync_date=parse_datetime(str_at(status, "syncDate.utc"), LEGACY_DATE_FORMAT),
        battery_12v=int_at(status, "batteryStatus.stateOfCharge"),
    )


def parse_eu_legacy_status(res_msg: dict[str, Any], vehicle: Vehicle) -> VehicleStatus:
    """Normalize an EU ``status/latest`` message (flat dialect)."""
    info = get_dict(res_msg, "vehicleStatusInfo")
    status = get_dict(info, "vehicleStatus")

    ev_status = None
    ev_data = get_dict(status, "evStatus")
    percentage = _battery_percentage(ev_data.get("batteryStatus"))
    if vehicle.is_electric and percentage is not None:
        distances = get_list(ev_data, "drvDistance")
        first = distances[0] if distances else {}
        ev_status = EVStatus(
            charging=bool_at(ev_data, "batteryCharge", False),
            charge_speed=_charge_speed(ev_data),
            plugged_in=int_at(ev_data, "batteryPlugin", 0) != 0,
            ev_range=FuelRange(
                range=_distance(
                    first,
                    "rangeByFuel.evModeRange.value",
                    "rangeByFuel.evModeRange.unit",
                    1,
                ),
                percentage=percentage,
            ),
        )

    gas_range = None
    fuel_level = float_at(status, "fuelLevel")
    if not vehicle.is_electric and fuel_level is not None and get_dict(status, "dte"):
        gas_range = FuelRange(
            range=_distance(status, "dte.value", "dte.unit", 1),
            percentage=fuel_level,
        )

    location_data = get_dict(info, "vehicleLocation") or get_dict(
        status, "vehicleLocation"
    )
    odometer_data = get_dict(info, "odometer") or get_dict(status, "odo")
    odometer = vehicle.odometer
    if float_at(odometer_data, "value") is not None:
        odometer = _distance(odometer_data, "value", "unit", 1)

    return VehicleStatus(
        vin=vehicle.vin,
        location=_flat_location(location_data),
        lock_status=LockStatus.from_locked(bool_at(status, "doorLock")),
        climate_status=_flat_climate(status, "airCtrlOn", "steerWheelHeat"),
        gas_range=gas_range,
        ev_status=ev_status,
        odometer=odometer,
        sync_date=parse_datetime(str_at(status, "time"), LEGACY_DATE_FORMAT),
        battery_12v=int_at(status, "battery.batSoc"),
    )


def _ccs2_range(state: dict[str, Any]) -> Distance:
    return _distance(
        state, "Drivetrain.FuelSystem.DTE.Total", "Drivetrain.FuelSystem.DTE.Unit", 1
    )


def _ccs2_ev_status(state: dict[str, Any]) -> EVStatus | None:
    percentage = _battery_percentage(
        get_dict(state, "Green.BatteryManagement.BatteryRemain").get("Ratio")
    )
    if percentage is None:
        return None

    charging_info = get_dict(state, "Green.ChargingInformation")
    plugged_in = int_at(charging_info, "ConnectorFastening.State", 0) != 0
    remain_time = int_at(charging_info, "Charging.RemainTime", 0)
    charging = plugged_in and remain_time > 0

    charge_limit = int_at(charging_info, "TargetSoC.Standard")
    if charge_limit is not None and not (
        CHARGE_LIMIT_MIN <= charge_limit <= CHARGE_LIMIT_MAX
    ):
        _LOGGER.debug("Ignoring out of range charge limit %s", charge_limit)
        charge_limit = None

    return EVStatus(
        charging=charging,
        charge_speed=float_at(state, "Green.Electric.SmartGrid.RealTimePower", 0.0),
        plugged_in=plugged_in,
        ev_range=FuelRange(range=_ccs2_range(state), percentage=percentage),
        charge_limit=charge_limit,
        estimated_charging_time=remain_time if charging else None,
    )


def _ccs2_lock_status(state: dict[str, Any]) -> LockStatus:
    door_open = bool_at(state, "Cabin.Door.Row1.Driver.Open")
    if door_open is None:
        return LockStatus.UNKNOWN
    return LockStatus.from_locked(not door_open)


def _ccs2_climate(state: dict[str, Any]) -> ClimateStatus:
    driver = get_dict(state, "Cabin.HVAC.Row1.Driver")
    temperature = get_dict(driver, "Temperature")
    value = temperature.get("Value")
    return ClimateStatus(
        defrost_on=int_at(state, "Body.Windshield.Front.Defog.State", 0) != 0,
        air_control_on=int_at(driver, "Blower.SpeedLevel", 0) > 0,
        steering_wheel_heating_on=int_at(state, "Cabin.SteeringWheel.Heat.State", 0)
        != 0,
        temperature=Temperature.from_vendor(
            extract_int(temperature.get("Unit")),
            value if isinstance(value, str) else None,
        ),
    )


def parse_eu_ccs2_status(state: dict[str, Any], vehicle: Vehicle) -> VehicleStatus:
    """Normalize the ``state.Vehicle`` tree of an EU CCS2 status message."""
    ev_status = _ccs2_ev_status(state) if vehicle.is_electric else None

    gas_range = None
    fuel_level = float_at(state, "Drivetrain.FuelSystem.Level")
    if not vehicle.is_electric and fuel_level is not None:
        gas_range = FuelRange(range=_ccs2_range(state), percentage=fuel_level)

    odometer_value = float_at(state, "Drivetrain.Odometer")
    odometer = (
        Distance(odometer_value, DistanceUnits.KILOMETERS)
        if odometer_value is not None
        else vehicle.odometer
    )

    return VehicleStatus(
        vin=vehicle.vin,
        location=Location(
            latitude=float_at(state, "Location.GeoCoord.Latitude", 0.0),
            longitude=float_at(state, "Location.GeoCoord.Longitude", 0.0),
        ),
        lock_status=_ccs2_lock_status(state),
        climate_status=_ccs2_climate(state),
        gas_range=gas_range,
        ev_status=ev_status,
        odometer=odometer,
        sync_date=parse_datetime(str_at(state, "Date"), CCS2_DATE_FORMAT),
        battery_health=int_at(state, "Green.BatteryManagement.SoH.Ratio"),
        battery_12v=int_at(state, "Electronics.Battery.Level"),
        average_consumption=float_at(
            state, "Drivetrain.FuelSystem.AverageFuelEconomy.Drive"
        ),
    )


def is_ccs2(vehicle: Vehicle) -> bool:
    return vehicle.generation >= 2


def parse_eu_status(payload: Any, vehicle: Vehicle, api_name: str) -> VehicleStatus:
    """Select the EU dialect by vehicle generation and normalize the body.

    Raises:
        VehicleApiError: If the dialect's status envelope is missing.

    """
    res_msg = get_dict(payload, "resMsg")
    if not res_msg:
        raise VehicleApiError.log_error("Invalid status response", api_name=api_name)

    if is_ccs2(vehicle):
        state = get_dict(res_msg, "state.Vehicle")
        if not state:
            raise VehicleApiError.log_error(
                "Invalid CCS2 status structure", api_name=api_name
            )
        return parse_eu_ccs2_status(state, vehicle)

    if not get_dict(res_msg, "vehicleStatusInfo.vehicleStatus"):
        raise VehicleApiError.log_error(
            "Invalid status structure", api_name=api_name
        )
    return parse_eu_legacy_status(res_msg, vehicle)
