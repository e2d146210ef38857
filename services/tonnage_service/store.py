"""
Read access to the VCF reference table and persistence of calculation history.

Each public method acquires its own session from `Database` and releases it
before returning.
"""

import math
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import String, cast, delete, func, or_, select

from tonnage_service.db import Database
from tonnage_service.models import CalculationRecord, VCFEntry, utcnow

# client-facing sort keys -> columns; nothing else ever reaches ORDER BY
SORT_COLUMNS = {
    "createdAt": CalculationRecord.created_at,
    "created_at": CalculationRecord.created_at,
    "volume": CalculationRecord.volume,
    "density": CalculationRecord.density,
    "temperature": CalculationRecord.temperature,
    "tonnage": CalculationRecord.tonnage,
}
DEFAULT_SORT = "created_at"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50


def sort_column(sort: str | None):
    return SORT_COLUMNS.get(sort or DEFAULT_SORT, SORT_COLUMNS[DEFAULT_SORT])


def normalize_order(order: str | None) -> str:
    return "ASC" if (order or "").upper() == "ASC" else "DESC"


def timestamp_text(column, dialect: str):
    """Render a timestamp column as 'YYYY-MM-DD HH:MM:SS' text in the given SQL dialect."""
    if dialect == "sqlite":
        return func.strftime("%Y-%m-%d %H:%M:%S", column, type_=String)
    if dialect in ("mysql", "mariadb"):
        return func.date_format(column, "%Y-%m-%d %H:%i:%s", type_=String)
    return func.to_char(column, "YYYY-MM-DD HH24:MI:SS", type_=String)


def search_clause(search: str, dialect: str):
    fields = [
        cast(CalculationRecord.volume, String),
        cast(CalculationRecord.density, String),
        cast(CalculationRecord.temperature, String),
        cast(CalculationRecord.tonnage, String),
        timestamp_text(CalculationRecord.created_at, dialect),
    ]
    return or_(*(f.contains(search, autoescape=True) for f in fields))


@dataclass
class HistoryPage:
    rows: list[CalculationRecord]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class VCFReferenceStore:
    """Read-only view of the externally populated `vcftable`.

    Equidistant candidates resolve to the lower value.
    """

    def __init__(self, database: Database):
        self.database = database

    def exact(self, density: Decimal, temperature: Decimal) -> VCFEntry | None:
        stmt = (
            select(VCFEntry)
            .where(VCFEntry.density == density, VCFEntry.temperature == temperature)
            .limit(1)
        )
        with self.database.session() as session:
            return session.scalars(stmt).first()

    def nearest_density(self, density: Decimal) -> Decimal | None:
        stmt = (
            select(VCFEntry.density)
            .order_by(func.abs(VCFEntry.density - density), VCFEntry.density)
            .limit(1)
        )
        with self.database.session() as session:
            return session.scalars(stmt).first()

    def nearest_temperature(self, density: Decimal, temperature: Decimal) -> VCFEntry | None:
        stmt = (
            select(VCFEntry)
            .where(VCFEntry.density == density)
            .order_by(func.abs(VCFEntry.temperature - temperature), VCFEntry.temperature)
            .limit(1)
        )
        with self.database.session() as session:
            return session.scalars(stmt).first()


class CalculationStore:
    def __init__(self, database: Database):
        self.database = database

    def insert(self, record: CalculationRecord) -> CalculationRecord:
        """Persist a new record; id and created_at are assigned here."""
        if record.created_at is None:
            record.created_at = utcnow()
        with self.database.session() as session:
            session.add(record)
            session.flush()
        return record

    def list(
        self,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        search: str = "",
        sort: str | None = DEFAULT_SORT,
        order: str | None = "DESC",
    ) -> HistoryPage:
        column = sort_column(sort)
        if normalize_order(order) == "ASC":
            ordering = (column.asc(), CalculationRecord.id.asc())
        else:
            ordering = (column.desc(), CalculationRecord.id.desc())

        count_stmt = select(func.count()).select_from(CalculationRecord)
        rows_stmt = select(CalculationRecord)
        if search:
            clause = search_clause(search, self.database.dialect)
            count_stmt = count_stmt.where(clause)
            rows_stmt = rows_stmt.where(clause)
        rows_stmt = rows_stmt.order_by(*ordering).limit(limit).offset((page - 1) * limit)

        with self.database.session() as session:
            total = session.scalar(count_stmt)
            rows = session.scalars(rows_stmt).all()
        return HistoryPage(rows=list(rows), total=total or 0, page=page, limit=limit)

    def delete_by_id(self, calc_id: int) -> bool:
        stmt = delete(CalculationRecord).where(CalculationRecord.id == calc_id)
        with self.database.session() as session:
            result = session.execute(stmt)
        return result.rowcount > 0

    def clear_all(self) -> int:
        with self.database.session() as session:
            result = session.execute(delete(CalculationRecord))
        return result.rowcount
