"""End-to-end tests for the import coordinator against the in-memory store."""
import dataclasses

import pytest

from tripdesk.imports.coordinator import ImportCoordinator
from tripdesk.imports.registry import CLIENTS, LOCATION_TAGS, SERVICE_TYPES, TAGS, VENDORS
from tripdesk.imports.store import StoreError
from tripdesk.imports.validation import PRICE_RANGE_MESSAGE
from tripdesk.schemas.imports import ImportErrorKind


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _vendor(name: str, email: str, **overrides) -> dict[str, str]:
    row = {
        "name": name,
        "contactPerson": "Sarah Johnson",
        "email": email,
        "phone": "+1 (555) 987-6543",
        "address": "456 Luxury Blvd, Miami, FL",
        "serviceArea": "Local",
        "priceRange": "5",
        "commissionRate": "0.12",
        "serviceTypes": "Accommodation",
        "tags": "Luxury",
        "notes": "",
    }
    row.update(overrides)
    return row


@pytest.fixture
def vendor_store(make_store):
    store = make_store()
    store.accommodation_id = store.seed("service_types", name="Accommodation")
    store.tours_id = store.seed("service_types", name="Tours")
    store.luxury_id = store.seed("tags", name="Luxury")
    return store


# ─── Tags ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_existing_and_repeated_tag_scenario(make_store):
    """Adventure already stored and repeated in the file; only Luxury lands."""
    store = make_store()
    store.seed("tags", name="Adventure")

    result = await ImportCoordinator(store, TAGS).run(
        [{"name": "Adventure"}, {"name": "Adventure"}, {"name": "Luxury"}]
    )

    assert result.success_count == 1
    assert len(result.errors) == 1
    assert result.errors[0].kind == ImportErrorKind.conflict
    assert result.errors[0].row == 2
    assert result.errors[0].message == 'Tag "Adventure" already exists'
    assert result.warnings == ["Row 3: duplicate of row 2, skipped"]
    assert result.message == "Successfully imported 1 tags with 1 errors"
    assert sorted(r["name"] for r in store.tables["tags"]) == ["Adventure", "Luxury"]


@pytest.mark.asyncio
async def test_batches_are_submitted_in_order(store):
    rows = [{"name": f"Tag {i:03d}"} for i in range(120)]

    result = await ImportCoordinator(store, TAGS).run(rows)

    assert result.success_count == 120
    assert result.errors == []
    assert store.insert_calls == [("tags", 50), ("tags", 50), ("tags", 20)]
    assert [r["name"] for r in store.tables["tags"]] == [r["name"] for r in rows]


@pytest.mark.asyncio
async def test_failed_batch_does_not_stop_later_batches(make_store):
    calls = {"n": 0}

    def fail_first_batch(table, row):
        if row["name"] == "Tag 0":
            calls["n"] += 1
            return StoreError("statement timeout")
        return None

    store = make_store(row_failure=fail_first_batch)
    definition = dataclasses.replace(TAGS, batch_size=2)

    result = await ImportCoordinator(store, definition).run([{"name": f"Tag {i}"} for i in range(5)])

    assert result.success_count == 3
    assert len(result.errors) == 1
    assert result.errors[0].kind == ImportErrorKind.storage
    assert [r["name"] for r in result.errors[0].batch] == ["Tag 0", "Tag 1"]
    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_no_valid_rows_short_circuits(store):
    result = await ImportCoordinator(store, TAGS).run([{"name": ""}, {"name": "  "}])

    assert result.success_count == 0
    assert [e.row for e in result.errors] == [2, 3]
    assert result.message == "No valid tag data found"
    assert store.insert_calls == []


@pytest.mark.asyncio
async def test_service_types_and_location_tags_share_the_pipeline(make_store):
    store = make_store()
    store.seed("service_types", name="Tours")

    st_result = await ImportCoordinator(store, SERVICE_TYPES).run(
        [{"name": "Tours"}, {"name": "Transfers"}]
    )
    loc_result = await ImportCoordinator(store, LOCATION_TAGS).run([
        {"continent": "Europe", "country": "Italy", "state_province": "Lazio", "city": "Rome"},
        {"continent": "Europe", "country": "Italy", "state_province": "", "city": ""},
    ])

    assert st_result.success_count == 1
    assert st_result.errors[0].message == 'Service type "Tours" already exists'
    assert loc_result.success_count == 2
    assert store.tables["location_tags"][1]["state_province"] is None


# ─── Vendors ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_invalid_vendor_never_reaches_the_store(vendor_store):
    rows = [
        _vendor("Luxury Stays Hotel", "sarah@luxurystays.com"),
        _vendor("Budget Car Rentals", "mike@budgetcars.com"),
        _vendor("Overpriced Inc", "ops@overpriced.com", priceRange="7"),
    ]

    result = await ImportCoordinator(vendor_store, VENDORS).run(rows)

    assert result.success_count == 2
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.kind == ImportErrorKind.validation
    assert error.row == 4
    assert PRICE_RANGE_MESSAGE in error.message
    assert ("vendors", 2) in vendor_store.insert_calls
    assert "ops@overpriced.com" not in {v["email"] for v in vendor_store.tables["vendors"]}


@pytest.mark.asyncio
async def test_inserted_vendors_are_linked(vendor_store):
    result = await ImportCoordinator(vendor_store, VENDORS).run([
        _vendor("Luxury Stays Hotel", "sarah@luxurystays.com", serviceTypes="Accommodation, tours"),
    ])

    assert result.success_count == 1
    vendor_id = vendor_store.tables["vendors"][0]["id"]
    assert {r["service_type_id"] for r in vendor_store.tables["vendor_service_types"]} == {
        vendor_store.accommodation_id,
        vendor_store.tours_id,
    }
    commissions = vendor_store.tables["vendor_service_type_commissions"]
    assert len(commissions) == 2
    assert all(c["vendor_id"] == vendor_id and c["commission_rate"] == pytest.approx(0.12) for c in commissions)
    assert vendor_store.tables["vendor_tags"][0] == {
        "id": vendor_store.tables["vendor_tags"][0]["id"],
        "vendor_id": vendor_id,
        "tag_id": vendor_store.luxury_id,
    }


@pytest.mark.asyncio
async def test_link_failure_still_counts_vendor(vendor_store):
    vendor_store.failures["vendor_tags"] = StoreError("permission denied for table vendor_tags")

    result = await ImportCoordinator(vendor_store, VENDORS).run([
        _vendor("Luxury Stays Hotel", "sarah@luxurystays.com"),
    ])

    assert result.success_count == 1
    assert result.errors == []
    assert len(vendor_store.tables["vendors"]) == 1
    assert "vendor_tags" not in vendor_store.tables
    assert len(vendor_store.tables["vendor_service_types"]) == 1


@pytest.mark.asyncio
async def test_duplicate_vendor_email_is_isolated(vendor_store):
    vendor_store.seed("vendors", name="Old Name", email="sarah@luxurystays.com")

    result = await ImportCoordinator(vendor_store, VENDORS).run([
        _vendor("Luxury Stays Hotel", "sarah@luxurystays.com"),
        _vendor("Budget Car Rentals", "mike@budgetcars.com"),
    ])

    assert result.success_count == 1
    assert len(result.errors) == 1
    assert result.errors[0].kind == ImportErrorKind.conflict
    assert result.errors[0].message == "Vendor with email sarah@luxurystays.com already exists"
    # only the vendor that was actually inserted gets relations
    linked = {r["vendor_id"] for r in vendor_store.tables["vendor_service_types"]}
    new_vendor = next(v for v in vendor_store.tables["vendors"] if v["email"] == "mike@budgetcars.com")
    assert linked == {new_vendor["id"]}


@pytest.mark.asyncio
async def test_lookup_failure_marks_every_row(make_store):
    store = make_store(lookup_failure="Failed to fetch service types: connection refused")
    rows = [_vendor("A", "a@example.com"), _vendor("B", "b@example.com", priceRange="0")]

    result = await ImportCoordinator(store, VENDORS).run(rows)

    assert result.success_count == 0
    assert [(e.kind, e.row) for e in result.errors] == [
        (ImportErrorKind.setup, 2),
        (ImportErrorKind.setup, 3),
    ]
    assert all(e.message == "Failed to fetch service types: connection refused" for e in result.errors)
    assert result.message.startswith("Import failed")
    assert store.insert_calls == []


@pytest.mark.asyncio
async def test_lookups_are_read_fresh_on_every_run(vendor_store):
    coordinator = ImportCoordinator(vendor_store, VENDORS)
    first = await coordinator.run([_vendor("A", "a@example.com", tags="Beach")])
    vendor_store.seed("tags", name="Beach")
    second = await coordinator.run([_vendor("A", "a@example.com", tags="Beach")])

    assert first.errors[0].message == 'Tag "Beach" does not exist'
    assert second.success_count == 1


@pytest.mark.asyncio
async def test_vendors_are_linked_by_email_whatever_the_returning_order(make_store):
    store = make_store(reverse_returning=True)
    accommodation_id = store.seed("service_types", name="Accommodation")
    tours_id = store.seed("service_types", name="Tours")
    store.seed("tags", name="Luxury")

    result = await ImportCoordinator(store, VENDORS).run([
        _vendor("Luxury Stays Hotel", "sarah@luxurystays.com", serviceTypes="Accommodation"),
        _vendor("Peak Tours", "info@peaktours.com", serviceTypes="Tours"),
    ])

    assert result.success_count == 2
    ids = {v["email"]: v["id"] for v in store.tables["vendors"]}
    links = {(r["vendor_id"], r["service_type_id"]) for r in store.tables["vendor_service_types"]}
    assert links == {
        (ids["sarah@luxurystays.com"], accommodation_id),
        (ids["info@peaktours.com"], tours_id),
    }


# ─── Clients ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_clients_with_the_same_name_are_all_imported(store):
    result = await ImportCoordinator(store, CLIENTS).run([
        {"firstName": "John", "lastName": "Smith"},
        {"firstName": "John", "lastName": "Smith"},
        {"firstName": "Maria", "lastName": ""},
        {"firstName": "Aiko", "lastName": "Tanaka", "notes": "VIP"},
    ])

    assert result.entity == "clients"
    assert result.success_count == 3
    assert result.warnings == []
    assert [(e.row, e.message) for e in result.errors] == [(4, "lastName is required")]
    assert result.message == "Successfully imported 3 clients with 1 errors"
    assert store.tables["clients"][2] == {
        "id": store.tables["clients"][2]["id"],
        "first_name": "Aiko",
        "last_name": "Tanaka",
        "notes": "VIP",
    }


@pytest.mark.asyncio
async def test_client_insert_failure_reports_the_batch(make_store):
    store = make_store(failures={"clients": StoreError('relation "clients" does not exist')})

    result = await ImportCoordinator(store, CLIENTS).run([
        {"firstName": "John", "lastName": "Smith"},
        {"firstName": "Aiko", "lastName": "Tanaka"},
    ])

    assert result.success_count == 0
    assert len(result.errors) == 1
    assert result.errors[0].kind == ImportErrorKind.storage
    assert len(result.errors[0].batch) == 2
