"""
HTTP routes for tonnage calculation and calculation history.

Endpoints:
  POST   /api/calculate              - resolve VCF, compute and store tonnage
  GET    /api/calculations           - paginated, searchable, sortable history
  DELETE /api/calculations/{calc_id} - delete one calculation
  DELETE /api/calculations           - clear the whole history
  GET    /api/health                 - store connectivity check

Endpoints are plain `def` functions: store calls block, so FastAPI runs them
in its threadpool.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from tonnage_common.audit_logger import get_service_logger
from tonnage_common.metrics import record_calculation, record_vcf_lookup
from tonnage_service.db import Database
from tonnage_service.errors import NotFoundError, StoreError, TonnageError
from tonnage_service.schemas import CalculateRequest
from tonnage_service.service import TonnageService
from tonnage_service.store import DEFAULT_LIMIT, DEFAULT_PAGE, CalculationStore, VCFReferenceStore
from tonnage_service.vcf import VCFResolver

SERVICE_NAME = "tonnage"

log = get_service_logger(SERVICE_NAME)

api = APIRouter(prefix="/api")


# ---------- dependencies ----------
def get_database(request: Request) -> Database:
    return request.app.state.database


def get_calculation_store(database: Database = Depends(get_database)) -> CalculationStore:
    return CalculationStore(database)


def get_tonnage_service(database: Database = Depends(get_database)) -> TonnageService:
    return TonnageService(
        VCFResolver(VCFReferenceStore(database)), CalculationStore(database)
    )


def _failure(error: str, exc: TonnageError, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": error, "message": exc.message, **extra},
    )


# ---------- endpoints ----------
@api.post("/calculate")
def calculate(
    req: CalculateRequest,
    request: Request,
    service: TonnageService = Depends(get_tonnage_service),
):
    rid = request.state.rid
    try:
        calculation = service.calculate(req.volume, req.density, req.temperature)
    except NotFoundError as exc:
        record_calculation(SERVICE_NAME, "not_found")
        log.warning(
            f"VCF lookup failed for density={req.density} temperature={req.temperature}: {exc}",
            extra={"request_id": rid},
        )
        return _failure("Failed to calculate tonnage", exc)
    except StoreError as exc:
        record_calculation(SERVICE_NAME, "store_error")
        log.error(f"Calculation error: {exc}", extra={"request_id": rid})
        return _failure("Failed to calculate tonnage", exc)

    record = calculation.record
    record_calculation(SERVICE_NAME, "ok")
    record_vcf_lookup(SERVICE_NAME, calculation.vcf.exact)
    log.info(
        f"Tonnage {record.tonnage} t for volume={record.volume} density={record.density} "
        f"temperature={record.temperature} (vcf={record.vcf}, exact={calculation.vcf.exact})",
        extra={"request_id": rid, "calculation_id": record.id},
    )
    return {
        "success": True,
        "data": {
            "id": record.id,
            "volume": record.volume,
            "density": record.density,
            "temperature": record.temperature,
            "vcf": record.vcf,
            "usedDensity": record.used_density,
            "usedTemp": record.used_temperature,
            "tonnage": record.tonnage,
            "timestamp": record.timestamp,
        },
    }


@api.get("/calculations")
def list_calculations(
    request: Request,
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    search: str = Query(""),
    sort: str = Query("created_at"),
    order: str = Query("DESC"),
    store: CalculationStore = Depends(get_calculation_store),
):
    rid = request.state.rid
    try:
        result = store.list(page=page, limit=limit, search=search, sort=sort, order=order)
    except StoreError as exc:
        log.error(f"Failed to fetch calculations: {exc}", extra={"request_id": rid})
        return _failure(
            "Failed to fetch calculations", exc, code=exc.code or "UNKNOWN_ERROR"
        )

    log.debug(
        f"History page {page}: {len(result.rows)} of {result.total} row(s) "
        f"(search={search!r}, sort={sort}, order={order})",
        extra={"request_id": rid},
    )
    return {
        "success": True,
        "data": [row.to_dict() for row in result.rows],
        "pagination": {
            "page": result.page,
            "limit": result.limit,
            "total": result.total,
            "pages": result.pages,
        },
    }


@api.delete("/calculations/{calc_id}")
def delete_calculation(
    calc_id: int,
    request: Request,
    store: CalculationStore = Depends(get_calculation_store),
):
    rid = request.state.rid
    try:
        deleted = store.delete_by_id(calc_id)
    except StoreError as exc:
        log.error(f"Error deleting calculation {calc_id}: {exc}", extra={"request_id": rid})
        return _failure("Failed to delete calculation", exc)

    if not deleted:
        return JSONResponse(status_code=404, content={"error": "Calculation not found"})

    log.info("Calculation deleted", extra={"request_id": rid, "calculation_id": calc_id})
    return {"success": True, "message": "Calculation deleted successfully"}


@api.delete("/calculations")
def clear_calculations(
    request: Request,
    store: CalculationStore = Depends(get_calculation_store),
):
    rid = request.state.rid
    try:
        removed = store.clear_all()
    except StoreError as exc:
        log.error(f"Error clearing calculations: {exc}", extra={"request_id": rid})
        return _failure("Failed to clear calculations", exc)

    log.info(f"Cleared {removed} calculation(s)", extra={"request_id": rid})
    return {"success": True, "message": "All calculations cleared successfully"}


@api.get("/health")
def health(database: Database = Depends(get_database)):
    try:
        database.ping()
    except StoreError as exc:
        log.error(f"Health check failed: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Database connection failed",
                "error": exc.message,
            },
        )
    return {
        "success": True,
        "message": "Server and database are healthy",
        "timestamp": datetime.now(UTC).isoformat(),
    }
