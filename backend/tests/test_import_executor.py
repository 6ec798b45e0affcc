"""Tests for chunk insertion and the row-by-row fallback on conflicts."""
import pytest

from tripdesk.imports.executor import insert_chunk
from tripdesk.imports.store import StoreError
from tripdesk.schemas.imports import ImportErrorKind, TagImportRecord


def _tags(*names: str) -> list[TagImportRecord]:
    return [TagImportRecord(row=i + 2, name=name) for i, name in enumerate(names)]


@pytest.mark.asyncio
async def test_clean_chunk_is_inserted_in_one_statement(store):
    outcome = await insert_chunk(store, "tags", _tags("Adventure", "Luxury", "Family"))

    assert outcome.success_count == 3
    assert outcome.errors == []
    assert store.insert_calls == [("tags", 3)]
    assert [stored["name"] for _, stored in outcome.inserted] == ["Adventure", "Luxury", "Family"]
    assert all("id" in stored for _, stored in outcome.inserted)


@pytest.mark.asyncio
async def test_conflict_falls_back_to_row_by_row(make_store):
    store = make_store()
    store.seed("tags", name="Luxury")
    store.seed("tags", name="Family")

    outcome = await insert_chunk(
        store,
        "tags",
        _tags("Adventure", "Luxury", "Beach", "Family"),
        describe_conflict=lambda r: f'Tag "{r.name}" already exists',
    )

    assert outcome.success_count == 2
    assert [(e.kind, e.row, e.message) for e in outcome.errors] == [
        (ImportErrorKind.conflict, 3, 'Tag "Luxury" already exists'),
        (ImportErrorKind.conflict, 5, 'Tag "Family" already exists'),
    ]
    # one failed bulk attempt, then one insert per row
    assert store.insert_calls == [("tags", 4)] + [("tags", 1)] * 4
    assert sorted(r["name"] for r in store.tables["tags"]) == ["Adventure", "Beach", "Family", "Luxury"]


@pytest.mark.asyncio
async def test_conflict_without_description_keeps_store_message(make_store):
    store = make_store()
    store.seed("tags", name="Luxury")

    outcome = await insert_chunk(store, "tags", _tags("Luxury"))

    assert outcome.errors[0].message.startswith("duplicate key value")
    assert outcome.errors[0].data == {"name": "Luxury"}


@pytest.mark.asyncio
@pytest.mark.parametrize("size", [1, 3, 50])
async def test_generic_failure_is_one_batch_error(make_store, size):
    store = make_store(failures={"tags": StoreError("connection reset", table="tags")})
    names = [f"Tag {i}" for i in range(size)]

    outcome = await insert_chunk(store, "tags", _tags(*names))

    assert outcome.success_count == 0
    assert len(outcome.errors) == 1
    error = outcome.errors[0]
    assert error.kind == ImportErrorKind.storage
    assert error.row is None
    assert error.message == "connection reset"
    assert [r["name"] for r in error.batch] == names
    # no per-row retry
    assert store.insert_calls == [("tags", size)]


@pytest.mark.asyncio
async def test_generic_failure_during_fallback_is_scoped_to_the_row(make_store):
    def broken_beach(table, row):
        if row["name"] == "Beach":
            return StoreError("value too long for type character varying(100)")
        return None

    store = make_store(row_failure=broken_beach)
    store.seed("tags", name="Luxury")

    outcome = await insert_chunk(store, "tags", _tags("Luxury", "Beach", "Adventure"))

    assert outcome.success_count == 1
    assert [(e.kind, e.row) for e in outcome.errors] == [
        (ImportErrorKind.conflict, 2),
        (ImportErrorKind.storage, 3),
    ]
    assert outcome.errors[1].message == "value too long for type character varying(100)"


@pytest.mark.asyncio
async def test_stored_rows_are_paired_by_key_columns(make_store):
    store = make_store(reverse_returning=True)

    outcome = await insert_chunk(store, "tags", _tags("Adventure", "Luxury", "Family"), key_columns=("name",))

    assert [(record.name, stored["name"]) for record, stored in outcome.inserted] == [
        ("Adventure", "Adventure"),
        ("Luxury", "Luxury"),
        ("Family", "Family"),
    ]
