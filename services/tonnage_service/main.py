"""
Oil tonnage service - FastAPI application factory.

Computes shipment tonnage from volume, density and temperature using the VCF
reference table and keeps a searchable history of every calculation.

Usage:
    tonnage-service                                   # uvicorn on HOST:PORT (default 0.0.0.0:3000)
    uvicorn tonnage_service.main:app --port 3000
"""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from tonnage_common.audit_logger import setup_logging
from tonnage_common.fastapi.metrics import add_prometheus_middleware
from tonnage_service import __version__
from tonnage_service.config import AppConfig
from tonnage_service.db import Database
from tonnage_service.errors import StoreError, ValidationError
from tonnage_service.exceptions import (
    http_exception_handler,
    range_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from tonnage_service.routes import SERVICE_NAME, api

CONFIG = AppConfig.from_env()

log = setup_logging(SERVICE_NAME, CONFIG.server.log_level)


def get_request_id(x_request_id: str | None) -> str:
    try:
        return str(uuid.UUID(x_request_id)) if x_request_id else str(uuid.uuid4())
    except ValueError:
        return str(uuid.uuid4())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the pool, bootstrap the record table, dispose the pool on shutdown."""
    database = app.state.database
    owns_database = database is None
    if owns_database:
        database = Database.from_config(app.state.config.database)
        app.state.database = database

    try:
        database.init_schema()
        reference = database.reference_status()
    except StoreError as exc:
        log.error(f"Database initialization failed: {exc}")
        if owns_database:
            database.dispose()
        raise

    if not reference.exists:
        log.warning("VCF table (vcftable) not found, import vcftable.sql before calculating")
    elif reference.missing_columns:
        log.warning(f"VCF table is missing required columns: {', '.join(reference.missing_columns)}")
    else:
        log.info(f"VCF table found with {reference.row_count} records")
    log.info("Database tables initialized")

    yield

    log.info("Shutting down gracefully...")
    if owns_database:
        database.dispose()


def create_app(config: AppConfig | None = None, database: Database | None = None) -> FastAPI:
    """Application factory; pass `database` to reuse an existing pool (tests, scripts)."""
    app = FastAPI(
        title="Oil tonnage service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.config = config or CONFIG
    app.state.database = database

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, range_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    add_prometheus_middleware(app, SERVICE_NAME)

    @app.middleware("http")
    async def add_request_id_and_log(request: Request, call_next):
        rid = get_request_id(request.headers.get("X-Request-Id"))
        request.state.rid = rid
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-Id"] = rid
        log.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "request_id": rid,
                "endpoint": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response

    app.include_router(api)

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=CONFIG.server.host,
        port=CONFIG.server.port,
        log_level=CONFIG.server.log_level.lower(),
    )


if __name__ == "__main__":
    run()
