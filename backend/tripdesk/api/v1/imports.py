"""CSV bulk import endpoints for vendors, tags, service types, location tags and clients."""
import csv
import io
import logging
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripdesk.core.config import settings
from tripdesk.core.deps import require_role
from tripdesk.core.limiter import limiter
from tripdesk.core.security import ADMIN_ROLES
from tripdesk.db.session import get_session
from tripdesk.imports.coordinator import ImportCoordinator, ImportDefinition
from tripdesk.imports.registry import CLIENTS, LOCATION_TAGS, SERVICE_TYPES, TAGS, VENDORS
from tripdesk.imports.store import SqlAlchemyImportStore
from tripdesk.imports.validation import missing_columns
from tripdesk.schemas.imports import ImportResult
from tripdesk.services import audit as audit_svc

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Helpers ───

def _parse_csv(content: bytes) -> tuple[list[str], list[dict[str, str]]]:
    """Return (headers, rows); blank lines and all-empty rows are skipped.

    Raises UnicodeDecodeError for anything that is not UTF-8.
    """
    text = content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text))
    rows = []
    for row in reader:
        row.pop(None, None)  # cells beyond the header
        if any((v or "").strip() for v in row.values()):
            rows.append(row)
    return list(reader.fieldnames or []), rows


async def _reject(
    db: AsyncSession,
    current_user,
    definition: ImportDefinition,
    file: UploadFile,
    status_code: int,
    detail: str,
) -> NoReturn:
    """Audit a rejected upload, then abort the request."""
    await audit_svc.log(
        db,
        current_user,
        action="import.failed",
        resource_type=definition.table,
        details={"file_name": file.filename, "reason": detail},
    )
    raise HTTPException(status_code=status_code, detail=detail)


async def _run_import(
    definition: ImportDefinition,
    file: UploadFile,
    db: AsyncSession,
    current_user,
) -> ImportResult:
    if not (file.filename or "").lower().endswith(".csv") and file.content_type != "text/csv":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please upload a CSV file.",
        )

    try:
        headers, rows = _parse_csv(await file.read())
    except UnicodeDecodeError:
        await _reject(
            db, current_user, definition, file,
            status.HTTP_400_BAD_REQUEST, "File must be UTF-8 encoded.",
        )

    missing = missing_columns(headers, definition.required_columns)
    if missing:
        await _reject(
            db, current_user, definition, file,
            status.HTTP_422_UNPROCESSABLE_ENTITY, f"Missing required columns: {', '.join(missing)}",
        )
    if len(rows) > settings.IMPORT_MAX_ROWS:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"CSV has {len(rows)} rows; the limit is {settings.IMPORT_MAX_ROWS}.",
        )

    logger.info("Importing %d %s rows from %s", len(rows), definition.table, file.filename)
    result = await ImportCoordinator(SqlAlchemyImportStore(db), definition).run(rows)

    # rows were submitted but none landed: no valid data, or every insert failed
    failed = result.success_count == 0 and bool(result.errors)
    await audit_svc.log(
        db,
        current_user,
        action="import.failed" if failed else "import.completed",
        resource_type=definition.table,
        details={
            "file_name": file.filename,
            "rows": len(rows),
            "success_count": result.success_count,
            "error_count": len(result.errors),
            "message": result.message,
        },
    )
    return result


# ─── POST /import/vendors ───

@router.post("/vendors", response_model=ImportResult, summary="Bulk import vendors from CSV (Admin)")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def import_vendors(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
    file: UploadFile = File(...),
):
    return await _run_import(VENDORS, file, db, current_user)


# ─── POST /import/tags ───

@router.post("/tags", response_model=ImportResult, summary="Bulk import tags from CSV (Admin)")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def import_tags(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
    file: UploadFile = File(...),
):
    return await _run_import(TAGS, file, db, current_user)


# ─── POST /import/service-types ───

@router.post("/service-types", response_model=ImportResult, summary="Bulk import service types from CSV (Admin)")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def import_service_types(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
    file: UploadFile = File(...),
):
    return await _run_import(SERVICE_TYPES, file, db, current_user)


# ─── POST /import/location-tags ───

@router.post("/location-tags", response_model=ImportResult, summary="Bulk import location tags from CSV (Admin)")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def import_location_tags(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
    file: UploadFile = File(...),
):
    return await _run_import(LOCATION_TAGS, file, db, current_user)


# ─── POST /import/clients ───

@router.post("/clients", response_model=ImportResult, summary="Bulk import clients from CSV (Admin)")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def import_clients(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
    file: UploadFile = File(...),
):
    return await _run_import(CLIENTS, file, db, current_user)
