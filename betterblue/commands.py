"""Wire payload builders for remote commands."""

from __future__ import annotations

from typing import Any

from .const import CHARGE_LIMIT_MAX, CHARGE_LIMIT_MIN
from .errors import VehicleApiError
from .models import ClimateOptions, CommandKind, TemperatureUnits, Vehicle, VehicleCommand


def _seat_heater_vent_info(options: ClimateOptions) -> dict[str, int]:
    return {
        "drvSeatHeatState": options.front_left_seat,
        "astSeatHeatState": options.front_right_seat,
        "rlSeatHeatState": options.rear_left_seat,
        "rrSeatHeatState": options.rear_right_seat,
    }


def us_command_body(
    command: VehicleCommand, vehicle: Vehicle, username: str
) -> dict[str, Any]:
    """Build the BlueLink / Kia Connect body for a command.

    Electric vehicles take a string temperature and an integer heating flag;
    seat and duration fields are only sent from generation 3 onward. Other
    vehicles always send the full remote-start body.

    Args:
        command: Command to encode.
        vehicle: Target vehicle.
        username: Account username, embedded in the remote-start body.

    Returns:
        JSON-serializable request body. Empty for commands without options.

    """
    if command.kind == CommandKind.START_CHARGE:
        return {"chargeRatio": 100}
    if command.kind != CommandKind.START_CLIMATE:
        return {}

    options = command.climate_options or ClimateOptions()
    temperature = options.temperature

    if vehicle.is_electric:
        body: dict[str, Any] = {
            "airCtrl": 1 if options.climate else 0,
            "airTemp": {
                "value": str(int(temperature.value)),
                "unit": temperature.units.to_vendor(),
            },
            "defrost": options.defrost,
            "heating1": 1 if options.heating else 0,
        }
        if vehicle.generation >= 3:
            body["igniOnDuration"] = options.duration
            body["seatHeaterVentInfo"] = _seat_heater_vent_info(options)
        return body

    return {
        "Ims": 0,
        "airCtrl": 1 if options.climate else 0,
        "airTemp": {
            "unit": temperature.units.to_vendor(),
            "value": int(temperature.value),
        },
        "defrost": options.defrost,
        "heating1": options.heating,
        "igniOnDuration": options.duration,
        "seatHeaterVentInfo": _seat_heater_vent_info(options),
        "username": username,
        "vin": vehicle.vin,
    }


def eu_command_body(command: VehicleCommand) -> dict[str, Any]:
    """Build the CCS2 control body for a command."""
    if command.kind == CommandKind.LOCK:
        return {"command": "close"}
    if command.kind == CommandKind.UNLOCK:
        return {"command": "open"}
    if command.kind == CommandKind.START_CLIMATE:
        options = command.climate_options or ClimateOptions()
        temperature = options.temperature
        return {
            "command": "start",
            "drvSeatLoc": "L",
            "hvacTemp": float(temperature.value),
            "tempUnit": (
                "F" if temperature.units == TemperatureUnits.FAHRENHEIT else "C"
            ),
            "hvacTempType": 1 if options.climate else 0,
            "windshieldFrontDefogState": options.defrost,
            # heating level is 0-4 on this dialect
            "heating1": 4 if options.heating else 0,
        }
    if command.kind in (CommandKind.STOP_CLIMATE, CommandKind.STOP_CHARGE):
        return {"command": "stop"}
    return {"command": "start"}


def eu_control_path(command: VehicleCommand) -> str:
    """Return the CCS2 control resource a command is posted to."""
    if command.kind in (CommandKind.LOCK, CommandKind.UNLOCK):
        return "door"
    if command.kind in (CommandKind.START_CLIMATE, CommandKind.STOP_CLIMATE):
        return "temperature"
    return "charge"


def validate_charge_limit(target_soc: int, api_name: str) -> None:
    """Raise unless the target state of charge is within 50-100."""
    if not CHARGE_LIMIT_MIN <= target_soc <= CHARGE_LIMIT_MAX:
        raise VehicleApiError(
            f"Charge limit must be between {CHARGE_LIMIT_MIN} and "
            f"{CHARGE_LIMIT_MAX}",
            api_name=api_name,
        )


def charge_target_body(target_soc: int) -> dict[str, Any]:
    """Build the charge-target body, same level for AC and DC charging."""
    return {
        "targetSOClist": [
            {"plugType": 0, "targetSOClevel": target_soc},
            {"plugType": 1, "targetSOClevel": target_soc},
        ]
    }
