from decimal import Decimal

import pytest

from tonnage_service.errors import NotFoundError, ValidationError
from tonnage_service.schemas import DENSITY_MESSAGE, TEMPERATURE_MESSAGE, VOLUME_MESSAGE, check_ranges
from tonnage_service.service import TonnageService
from tonnage_service.store import CalculationStore, VCFReferenceStore
from tonnage_service.vcf import VCFResolver


@pytest.fixture
def store(database):
    return CalculationStore(database)


@pytest.fixture
def service(database, store):
    return TonnageService(VCFResolver(VCFReferenceStore(database)), store)


def test_calculate_persists_record(service, store, vcf_grid):
    calculation = service.calculate(Decimal("2500"), Decimal("890"), Decimal("30"))
    record = calculation.record

    assert calculation.vcf.exact is True
    assert record.id is not None
    assert record.vcf == Decimal("0.9884")
    assert record.tonnage == Decimal("2.19919")
    assert store.list().rows[0].id == record.id


def test_raw_and_used_values_stored_side_by_side(service, store, vcf_grid):
    record = service.calculate(2000, Decimal("896.3"), Decimal("29.1")).record

    assert record.density == Decimal("896.3")
    assert record.temperature == Decimal("29.1")
    assert record.used_density == Decimal("900.0")
    assert record.used_temperature == Decimal("25.00")
    # tonnage uses the raw density with the resolved vcf
    assert record.tonnage == Decimal("2000") * Decimal("896.3") * Decimal("0.9923") / Decimal(1_000_000)


def test_unresolvable_vcf_writes_nothing(service, store):
    with pytest.raises(NotFoundError):
        service.calculate(2500, 890, 30)

    assert store.list().total == 0


def test_out_of_range_input_writes_nothing(service, store, vcf_grid):
    with pytest.raises(ValidationError) as excinfo:
        service.calculate(0, 650, 75)

    assert excinfo.value.details == [VOLUME_MESSAGE, DENSITY_MESSAGE, TEMPERATURE_MESSAGE]
    assert store.list().total == 0


@pytest.mark.parametrize(
    "volume, density, temperature, expected",
    [
        (2500, 890, 30, []),
        (1, 700, -20, []),
        (1, 1000, 60, []),
        (-1, 890, 30, [VOLUME_MESSAGE]),
        ("abc", 890, 30, [VOLUME_MESSAGE]),
        (2500, 699.99, 30, [DENSITY_MESSAGE]),
        (2500, 1000.01, 30, [DENSITY_MESSAGE]),
        (2500, 890, None, [TEMPERATURE_MESSAGE]),
        (2500, 890, -20.5, [TEMPERATURE_MESSAGE]),
        (2500, 890, float("nan"), [TEMPERATURE_MESSAGE]),
        (True, 890, 30, [VOLUME_MESSAGE]),
    ],
)
def test_check_ranges(volume, density, temperature, expected):
    assert check_ranges(volume, density, temperature) == expected
