"""Audit log helper: append-only writes to the audit_logs table."""
import logging
import uuid
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tripdesk.models.audit import AuditLog

logger = logging.getLogger(__name__)


async def log(
    db: AsyncSession,
    actor: Any | None,
    action: str,
    resource_type: str,
    resource_id: uuid.UUID | str | None = None,
    details: dict[str, Any] | None = None,
) -> AuditLog | None:
    """Write and commit a single audit entry.

    Args:
        db: Request session. The entry is committed on its own.
        actor: Profile performing the action; ``None`` skips logging.
        action: Short verb, e.g. 'import.completed', 'agent.created'.
        resource_type: Table/domain name, e.g. 'vendors', 'profiles'.
        resource_id: Affected record, if there is a single one.
        details: JSON-serialisable context (counts, payload summary).

    Never raises: a failed audit write is logged and the caller's action
    stands.
    """
    if actor is None:
        logger.warning("Cannot add audit log for %s: no current user", action)
        return None

    entry = AuditLog(
        user_id=actor.id,
        user_email=actor.email,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id else None,
        details=jsonable_encoder(details) if details is not None else None,
    )
    try:
        db.add(entry)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Error adding audit log %s: %s", action, exc)
        return None
    logger.debug("Audit: %s %s/%s", action, resource_type, resource_id)
    return entry
