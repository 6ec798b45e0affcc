"""Shared test fixtures.

APP_ENV must be set before anything imports ``tripdesk.core.config``: it
disables the rate limiter.
"""
import os
import uuid

os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402

from tripdesk.imports.store import ConflictError, LookupFetchError  # noqa: E402

UNIQUE_KEYS = {
    "vendors": ("email",),
    "tags": ("name",),
    "service_types": ("name",),
    "location_tags": ("continent", "country", "state_province", "city"),
    "vendor_service_types": ("vendor_id", "service_type_id"),
    "vendor_tags": ("vendor_id", "tag_id"),
}


class FakeStore:
    """In-memory ImportStore.

    Inserts are all-or-nothing per call, like a single INSERT statement.
    ``failures`` maps a table to the exception every insert into it raises;
    ``row_failure(table, row)`` can return an exception for a specific row;
    it is consulted after the unique check. ``reverse_returning`` hands
    stored rows back in the opposite order to the one they were given in.
    """

    def __init__(
        self, tables=None, failures=None, row_failure=None, lookup_failure=None, reverse_returning=False
    ):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.failures = failures or {}
        self.row_failure = row_failure
        self.lookup_failure = lookup_failure
        self.reverse_returning = reverse_returning
        self.insert_calls: list[tuple[str, int]] = []

    def seed(self, table, **values):
        row = {"id": uuid.uuid4(), **values}
        self.tables.setdefault(table, []).append(row)
        return row["id"]

    async def insert(self, table, rows):
        self.insert_calls.append((table, len(rows)))
        if table in self.failures:
            raise self.failures[table]

        existing = self.tables.setdefault(table, [])
        keys = UNIQUE_KEYS.get(table)
        if keys:
            taken = {tuple(r.get(k) for k in keys) for r in existing}
            for row in rows:
                key = tuple(row.get(k) for k in keys)
                if key in taken:
                    raise ConflictError(
                        f'duplicate key value violates unique constraint "{table}_key"', table=table
                    )
                taken.add(key)

        if self.row_failure is not None:
            for row in rows:
                exc = self.row_failure(table, row)
                if exc is not None:
                    raise exc

        stored = [{"id": uuid.uuid4(), **row} for row in rows]
        existing.extend(stored)
        return stored[::-1] if self.reverse_returning else stored

    async def fetch_name_index(self, table):
        if self.lookup_failure is not None:
            raise LookupFetchError(self.lookup_failure, table=table)
        return {r["name"].lower(): r["id"] for r in self.tables.get(table, [])}


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def make_store():
    return FakeStore
