"""
Pytest fixtures for the tonnage service.

Tests run offline against an in-memory SQLite database (one shared connection
via StaticPool) seeded with a small VCF grid.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tonnage_service.db import Database
from tonnage_service.models import Base, CalculationRecord, VCFEntry
from tonnage_service.tonnage import compute_tonnage

# density (kg/m³), temperature (°C), vcf
VCF_GRID = [
    ("850.0", "15.00", "1.000000"),
    ("850.0", "20.00", "0.995900"),
    ("850.0", "30.00", "0.987700"),
    ("890.0", "15.00", "1.000000"),
    ("890.0", "20.00", "0.996200"),
    ("890.0", "30.00", "0.988400"),
    ("900.0", "25.00", "0.992300"),
]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def database(engine):
    return Database(engine)


@pytest.fixture
def seed_vcf(database):
    """Insert (density, temperature, vcf) rows into the reference table."""

    def seed(rows=VCF_GRID):
        with database.session() as session:
            session.add_all(
                VCFEntry(density=Decimal(d), temperature=Decimal(t), vcf=Decimal(v))
                for d, t, v in rows
            )

    return seed


@pytest.fixture
def vcf_grid(seed_vcf):
    seed_vcf()
    return VCF_GRID


@pytest.fixture
def make_record():
    """Build an unsaved CalculationRecord with a consistent tonnage."""

    def make(volume, density, temperature, vcf="1.0", created_at=None):
        volume, density, temperature, vcf = (
            Decimal(str(volume)),
            Decimal(str(density)),
            Decimal(str(temperature)),
            Decimal(str(vcf)),
        )
        return CalculationRecord(
            volume=volume,
            density=density,
            temperature=temperature,
            vcf=vcf,
            used_density=density,
            used_temperature=temperature,
            tonnage=compute_tonnage(volume, density, vcf),
            created_at=created_at,
        )

    return make


@pytest.fixture
def make_client(database):
    """TestClient factory bound to the in-memory database (lifespan runs on enter)."""
    from tonnage_service.main import create_app

    def make(**kwargs):
        return TestClient(create_app(database=database), **kwargs)

    return make


@pytest.fixture
def client(make_client, vcf_grid):
    with make_client() as test_client:
        yield test_client
