"""
SQLAlchemy models for the tonnage service
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Index, Integer, Numeric
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    # naive UTC, stored in a TIMESTAMP WITHOUT TIME ZONE column
    return datetime.now(UTC).replace(tzinfo=None)


class VCFEntry(Base):
    """Reference VCF table, populated by an external import (vcftable.sql)."""

    __tablename__ = "vcftable"

    density = Column(Numeric(8, 2), primary_key=True)
    temperature = Column(Numeric(6, 2), primary_key=True)
    vcf = Column(Numeric(10, 6), nullable=False)

    def __repr__(self) -> str:
        return f"VCFEntry(density={self.density}, temperature={self.temperature}, vcf={self.vcf})"


class CalculationRecord(Base):
    """One persisted tonnage calculation. Rows are inserted and deleted, never updated."""

    __tablename__ = "oil_tonnages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    volume = Column(Numeric(15, 2), nullable=False)
    density = Column(Numeric(8, 2), nullable=False)
    temperature = Column(Numeric(6, 2), nullable=False)
    vcf = Column(Numeric(10, 6), nullable=False)
    used_density = Column(Numeric(8, 2), nullable=False)
    used_temperature = Column(Numeric(6, 2), nullable=False)
    tonnage = Column(Numeric(15, 8), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_tonnage_created_at", "created_at"),
        Index("idx_tonnage_density_temp", "density", "temperature"),
    )

    @property
    def timestamp(self) -> str:
        return self.created_at.isoformat() + "Z"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "volume": self.volume,
            "density": self.density,
            "temperature": self.temperature,
            "vcf": self.vcf,
            "used_density": self.used_density,
            "used_temperature": self.used_temperature,
            "tonnage": self.tonnage,
            "created_at": self.created_at,
            "timestamp": self.timestamp,
        }
