"""Storage boundary for CSV imports.

The pipeline only ever needs two things from the database: insert a list of
rows into a named table and read a ``name -> id`` index of a catalog table.
``ImportStore`` captures that; ``SqlAlchemyImportStore`` is the Postgres
implementation used by the API. Failures surface as ``StoreError``, with
unique violations split out as ``ConflictError`` so callers can retry
row by row.
"""
import logging
import uuid
from typing import Any, Protocol

from sqlalchemy import insert, select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tripdesk.models import (
    Client,
    LocationTag,
    ServiceType,
    Tag,
    Vendor,
    VendorServiceType,
    VendorServiceTypeCommission,
    VendorTag,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

TABLES = {
    model.__tablename__: model
    for model in (
        Vendor,
        Tag,
        ServiceType,
        LocationTag,
        Client,
        VendorServiceType,
        VendorServiceTypeCommission,
        VendorTag,
    )
}


class StoreError(Exception):
    """Generic storage failure (schema, connectivity, permissions)."""

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.table = table


class ConflictError(StoreError):
    """A unique constraint rejected at least one row."""


class LookupFetchError(StoreError):
    """A catalog index needed before any row can be validated is unavailable."""


class ImportStore(Protocol):
    async def insert(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert ``rows`` atomically and return them as stored (ids included)."""
        ...

    async def fetch_name_index(self, table: str) -> dict[str, uuid.UUID]:
        """Return ``lower(name) -> id`` for every row of a catalog table."""
        ...


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return code
    return None


class SqlAlchemyImportStore:
    """Each insert runs in its own savepoint and is committed right away, so a
    failed chunk never undoes an earlier one."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(f"Unknown table '{table}'", table=table) from None

    async def insert(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        model = self._model(table)
        if not rows:
            return []
        stmt = insert(model).values(rows).returning(*model.__table__.c)
        try:
            async with self.db.begin_nested():
                result = await self.db.execute(stmt)
                stored = [dict(r) for r in result.mappings().all()]
            await self.db.commit()
        except IntegrityError as exc:
            if _sqlstate(exc) == UNIQUE_VIOLATION:
                raise ConflictError(str(exc.orig), table=table) from exc
            raise StoreError(str(exc.orig), table=table) from exc
        except DBAPIError as exc:
            raise StoreError(str(exc.orig), table=table) from exc
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(str(exc), table=table) from exc
        return stored

    async def fetch_name_index(self, table: str) -> dict[str, uuid.UUID]:
        model = self._model(table)
        try:
            result = await self.db.execute(select(model.id, model.name))
        except (SQLAlchemyError, OSError) as exc:
            raise LookupFetchError(
                f"Failed to fetch {table.replace('_', ' ')}: {exc}", table=table
            ) from exc
        return {name.lower(): row_id for row_id, name in result.all()}
