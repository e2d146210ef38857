from dataclasses import dataclass
from decimal import Decimal

from tonnage_service.errors import ValidationError
from tonnage_service.models import CalculationRecord
from tonnage_service.schemas import check_ranges
from tonnage_service.store import CalculationStore
from tonnage_service.tonnage import compute_tonnage
from tonnage_service.vcf import VCFResolver, VCFResult


@dataclass(frozen=True)
class Calculation:
    record: CalculationRecord
    vcf: VCFResult


class TonnageService:
    """Resolve VCF, compute tonnage and persist the result.

    Nothing is written when the input is out of range or no VCF entry resolves.
    """

    def __init__(self, resolver: VCFResolver, store: CalculationStore):
        self.resolver = resolver
        self.store = store

    def calculate(self, volume, density, temperature) -> Calculation:
        errors = check_ranges(volume, density, temperature)
        if errors:
            raise ValidationError(errors)

        volume, density, temperature = (
            Decimal(str(volume)),
            Decimal(str(density)),
            Decimal(str(temperature)),
        )
        result = self.resolver.resolve(density, temperature)
        record = CalculationRecord(
            volume=volume,
            density=density,
            temperature=temperature,
            vcf=result.vcf,
            used_density=result.used_density,
            used_temperature=result.used_temperature,
            tonnage=compute_tonnage(volume, density, result.vcf),
        )
        self.store.insert(record)
        return Calculation(record=record, vcf=result)
