"""
Store handle provider: one pooled SQLAlchemy engine per process and short-lived
sessions scoped to a single store operation.

Pool exhaustion blocks the caller for `pool_timeout` seconds before failing.
Connectivity and pool failures surface as `StoreUnavailableError`, any other
driver error as `StoreError`. Every session is closed (and its connection
returned to the pool) on all exit paths.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from sqlalchemy import create_engine, func, inspect, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from tonnage_service.config import DatabaseConfig
from tonnage_service.errors import StoreError, StoreUnavailableError
from tonnage_service.models import Base, CalculationRecord, VCFEntry

REFERENCE_COLUMNS = ("density", "temperature", "vcf")

_UNAVAILABLE = (OperationalError, InterfaceError, PoolTimeoutError)


@dataclass
class ReferenceStatus:
    """What the external VCF reference table looks like in the connected database."""

    exists: bool
    missing_columns: list[str] = field(default_factory=list)
    row_count: int | None = None

    @property
    def ready(self) -> bool:
        return self.exists and not self.missing_columns


def _store_error(cls, exc: Exception) -> StoreError:
    orig = getattr(exc, "orig", None)
    return cls(str(orig or exc).strip(), code=getattr(orig, "pgcode", None))


@contextmanager
def translate_store_errors() -> Iterator[None]:
    try:
        yield
    except _UNAVAILABLE as exc:
        raise _store_error(StoreUnavailableError, exc) from exc
    except DBAPIError as exc:
        raise _store_error(StoreError, exc) from exc


class Database:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "Database":
        engine = create_engine(
            config.url,
            pool_size=config.pool_size,
            max_overflow=0,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=True,
        )
        return cls(engine)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Transaction-scoped session: commit on success, rollback on error, always closed."""
        with translate_store_errors():
            with self._session_factory() as session:
                with session.begin():
                    yield session

    def init_schema(self) -> None:
        """Create the calculation table and its indexes; the VCF table is never created here."""
        with translate_store_errors():
            Base.metadata.create_all(self.engine, tables=[CalculationRecord.__table__])

    def reference_status(self) -> ReferenceStatus:
        table = VCFEntry.__tablename__
        with translate_store_errors():
            with self.engine.connect() as conn:
                inspector = inspect(conn)
                if not inspector.has_table(table):
                    return ReferenceStatus(exists=False)
                existing = {col["name"] for col in inspector.get_columns(table)}
                missing = [name for name in REFERENCE_COLUMNS if name not in existing]
                if missing:
                    return ReferenceStatus(exists=True, missing_columns=missing)
                count = conn.execute(
                    select(func.count()).select_from(VCFEntry.__table__)
                ).scalar_one()
                return ReferenceStatus(exists=True, row_count=count)

    def ping(self) -> None:
        with translate_store_errors():
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()
