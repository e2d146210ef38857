"""
Pydantic schemas and range checks for tonnage calculation input.
"""

from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, Field

VOLUME_MESSAGE = "Volume must be a positive number"
DENSITY_MESSAGE = "Density must be between 700-1000 kg/m³"
TEMPERATURE_MESSAGE = "Temperature must be between -20°C and 60°C"

DENSITY_MIN, DENSITY_MAX = Decimal(700), Decimal(1000)
TEMPERATURE_MIN, TEMPERATURE_MAX = Decimal(-20), Decimal(60)

FIELD_MESSAGES = {
    "volume": VOLUME_MESSAGE,
    "density": DENSITY_MESSAGE,
    "temperature": TEMPERATURE_MESSAGE,
}


class CalculateRequest(BaseModel):
    """Request schema for a tonnage calculation."""

    volume: Decimal = Field(..., gt=0, description="Observed volume, litres")
    density: Decimal = Field(
        ..., ge=DENSITY_MIN, le=DENSITY_MAX, description="Density, kg/m³"
    )
    temperature: Decimal = Field(
        ..., ge=TEMPERATURE_MIN, le=TEMPERATURE_MAX, description="Temperature, °C"
    )


def _as_decimal(value) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def check_ranges(volume, density, temperature) -> list[str]:
    """Return the messages for every out-of-range input; empty when all are valid."""
    errors = []
    v = _as_decimal(volume)
    if v is None or v <= 0:
        errors.append(VOLUME_MESSAGE)
    d = _as_decimal(density)
    if d is None or not DENSITY_MIN <= d <= DENSITY_MAX:
        errors.append(DENSITY_MESSAGE)
    t = _as_decimal(temperature)
    if t is None or not TEMPERATURE_MIN <= t <= TEMPERATURE_MAX:
        errors.append(TEMPERATURE_MESSAGE)
    return errors
