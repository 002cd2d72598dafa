"""Shared builders for BetterBlue tests."""

from uuid import UUID

from betterblue.models import Distance, DistanceUnits, Vehicle

ACCOUNT_ID = UUID("12345678-1234-5678-1234-567812345678")


def make_vehicle(
    vin: str = "KMHKR81CPNU000001",
    reg_id: str = "reg-1",
    is_electric: bool = True,
    generation: int = 2,
    vehicle_key: str | None = None,
) -> Vehicle:
    """Create a test vehicle on the shared test account."""
    return Vehicle(
        vin=vin,
        reg_id=reg_id,
        model="Ioniq 5",
        account_id=ACCOUNT_ID,
        is_electric=is_electric,
        generation=generation,
        odometer=Distance(12000.0, DistanceUnits.MILES),
        vehicle_key=vehicle_key,
    )
