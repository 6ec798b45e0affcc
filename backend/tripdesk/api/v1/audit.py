"""Audit log API endpoints."""
import csv
import io
import json
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tripdesk.core.deps import require_role
from tripdesk.core.security import ADMIN_ROLES
from tripdesk.db.session import get_session
from tripdesk.models.audit import AuditLog
from tripdesk.schemas.audit import AuditLogListResponse, AuditLogOut

router = APIRouter()


def _filtered(stmt, action: str | None, resource_type: str | None):
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if resource_type:
        stmt = stmt.where(AuditLog.resource_type == resource_type)
    return stmt


@router.get("", response_model=AuditLogListResponse, summary="List audit log entries, newest first (Admin)")
async def list_audit_logs(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=200),
    action: str | None = Query(default=None),
    resource_type: str | None = Query(default=None),
):
    count_stmt = _filtered(select(func.count()).select_from(AuditLog), action, resource_type)
    total = (await db.execute(count_stmt)).scalar_one()

    stmt = (
        _filtered(select(AuditLog), action, resource_type)
        .order_by(AuditLog.timestamp.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    logs = (await db.execute(stmt)).scalars().all()

    return AuditLogListResponse(
        items=[AuditLogOut.model_validate(entry) for entry in logs],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/export", summary="Export audit logs as CSV (Admin)")
async def export_audit_logs(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
    action: str | None = Query(default=None),
    resource_type: str | None = Query(default=None),
):
    stmt = _filtered(select(AuditLog), action, resource_type).order_by(AuditLog.timestamp.asc())
    logs = (await db.execute(stmt)).scalars().all()

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["id", "timestamp", "user_email", "action", "resource_type", "resource_id", "details"])
    for entry in logs:
        writer.writerow([
            str(entry.id),
            entry.timestamp.isoformat() if entry.timestamp else "",
            entry.user_email or "",
            entry.action,
            entry.resource_type,
            entry.resource_id or "",
            json.dumps(entry.details) if entry.details is not None else "",
        ])

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="audit_logs.csv"'},
    )
