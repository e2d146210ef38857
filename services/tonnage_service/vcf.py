"""
VCF (Volume Correction Factor) resolution against the reference table.

Inputs are snapped to the reference grid (density step 0.5 kg/m³, temperature
step 0.25 °C). An exact grid hit is returned as is. Otherwise the lookup is
two-stage: the closest stored density first, then the closest temperature
stored for that density. This is not a 2D nearest neighbour and there is no
interpolation between grid points.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from tonnage_service.errors import NotFoundError
from tonnage_service.models import VCFEntry

DENSITY_STEP = Decimal("0.5")
TEMPERATURE_STEP = Decimal("0.25")


class ReferenceTable(Protocol):
    def exact(self, density: Decimal, temperature: Decimal) -> VCFEntry | None: ...

    def nearest_density(self, density: Decimal) -> Decimal | None: ...

    def nearest_temperature(self, density: Decimal, temperature: Decimal) -> VCFEntry | None: ...


@dataclass(frozen=True)
class VCFResult:
    vcf: Decimal
    used_density: Decimal
    used_temperature: Decimal
    exact: bool


def round_to_step(value, step: Decimal) -> Decimal:
    """Snap `value` to the nearest multiple of `step`, halves rounded away from zero."""
    scaled = (Decimal(str(value)) / step).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    snapped = (scaled * step).quantize(step)
    # -0.1 snaps to -0.00; stored rows come back as 0.00
    return snapped.copy_abs() if snapped.is_zero() else snapped


class VCFResolver:
    def __init__(self, reference: ReferenceTable):
        self.reference = reference

    def resolve(self, density, temperature) -> VCFResult:
        rounded_density = round_to_step(density, DENSITY_STEP)
        rounded_temperature = round_to_step(temperature, TEMPERATURE_STEP)

        entry = self.reference.exact(rounded_density, rounded_temperature)
        if entry is not None:
            return VCFResult(
                vcf=Decimal(entry.vcf),
                used_density=rounded_density,
                used_temperature=rounded_temperature,
                exact=True,
            )

        closest_density = self.reference.nearest_density(rounded_density)
        if closest_density is not None:
            entry = self.reference.nearest_temperature(closest_density, rounded_temperature)

        if entry is None:
            raise NotFoundError("VCF data not found for given parameters")

        return VCFResult(
            vcf=Decimal(entry.vcf),
            used_density=Decimal(entry.density),
            used_temperature=Decimal(entry.temperature),
            exact=False,
        )
