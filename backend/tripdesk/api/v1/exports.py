"""Spreadsheet export of importable tables."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tripdesk.core.deps import require_role
from tripdesk.core.security import ADMIN_ROLES
from tripdesk.db.session import get_session
from tripdesk.imports.registry import DEFINITIONS
from tripdesk.imports.store import TABLES
from tripdesk.services.export import XLSX_MEDIA_TYPE, export_filename, to_xlsx

router = APIRouter()


@router.get(
    "/{entity}",
    summary="Export vendors, tags, service types, location tags or clients as .xlsx (Admin)",
)
async def export_entity(
    entity: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(require_role(*ADMIN_ROLES))],
):
    definition = DEFINITIONS.get(entity)
    if definition is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown export '{entity}'. Expected one of: {', '.join(DEFINITIONS)}.",
        )

    table = TABLES[definition.table].__table__
    # clients keep the older date_created column name
    created = table.c.get("created_at", table.c.get("date_created"))
    rows = (await db.execute(select(table).order_by(created.asc()))).mappings().all()

    content = to_xlsx(rows)
    filename = export_filename(definition.table)
    return StreamingResponse(
        iter([content]),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
