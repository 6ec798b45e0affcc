"""Tests for the audit log helper."""
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from tripdesk.services import audit as audit_svc


class FakeProfile:
    def __init__(self):
        self.id = uuid.uuid4()
        self.email = "admin@tripdesk.example"


def _db():
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.mark.asyncio
async def test_entry_is_written_and_committed():
    db = _db()
    actor = FakeProfile()
    resource_id = uuid.uuid4()

    entry = await audit_svc.log(
        db, actor, action="agent.created", resource_type="profiles",
        resource_id=resource_id, details={"id": resource_id, "role": "Agent"},
    )

    db.add.assert_called_once_with(entry)
    db.commit.assert_awaited_once()
    assert entry.user_id == actor.id
    assert entry.user_email == actor.email
    assert entry.resource_id == str(resource_id)
    assert entry.details == {"id": str(resource_id), "role": "Agent"}


@pytest.mark.asyncio
async def test_missing_actor_skips_logging():
    db = _db()
    assert await audit_svc.log(db, None, action="import.completed", resource_type="tags") is None
    db.add.assert_not_called()


@pytest.mark.asyncio
async def test_failed_write_never_raises():
    db = _db()
    db.commit = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("db down")))

    entry = await audit_svc.log(db, FakeProfile(), action="import.completed", resource_type="tags")

    assert entry is None
    db.rollback.assert_awaited_once()
