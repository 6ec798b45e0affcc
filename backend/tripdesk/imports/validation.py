"""Row validation for CSV imports.

Every validator takes one raw CSV row (header -> cell), its 0-based position
and the run's lookup maps, and returns either a normalized record or the
list of errors explaining why the row cannot be inserted. Validators never
touch the database; catalog names are resolved against ``LookupMaps``, a
snapshot taken once at the start of each import.
"""
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tripdesk.imports.store import ImportStore
from tripdesk.schemas.imports import (
    ImportErrorKind,
    ImportRowError,
    ClientImportRecord,
    LocationTagImportRecord,
    ServiceTypeImportRecord,
    TagImportRecord,
    VendorImportRecord,
)

HEADER_OFFSET = 2  # header line + 1-based display

PRICE_RANGE_MESSAGE = "Price range must be a number between 1 and 5"
COMMISSION_RATE_MESSAGE = "Commission rate must be a number between 0 and 1 (e.g., 0.1 for 10%)"


# ─── Helpers ───

def get_cell(row: Mapping[str, Any], key: str) -> str:
    """Case-insensitive dict get, stripped."""
    for k, v in row.items():
        if k is not None and k.lower().strip() == key.lower():
            return ("" if v is None else str(v)).strip()
    return ""


def missing_columns(headers: Iterable[str], required: Iterable[str]) -> list[str]:
    lowered = {h.lower().strip() for h in headers if h}
    return [r for r in required if r.lower() not in lowered]


def csv_row_number(index: int) -> int:
    return index + HEADER_OFFSET


@dataclass(frozen=True)
class LookupMaps:
    """``lower(name) -> id`` snapshots for one import run."""

    service_types: Mapping[str, uuid.UUID] = field(default_factory=dict)
    tags: Mapping[str, uuid.UUID] = field(default_factory=dict)

    @classmethod
    async def load(cls, store: ImportStore) -> "LookupMaps":
        return cls(
            service_types=await store.fetch_name_index("service_types"),
            tags=await store.fetch_name_index("tags"),
        )


class _RowErrors:
    """Collects validation errors for one row."""

    def __init__(self, raw: Mapping[str, Any], index: int):
        self.row = csv_row_number(index)
        self.data = {k: v for k, v in raw.items() if k is not None}
        self.items: list[ImportRowError] = []

    def add(self, message: str, field: str | None = None) -> None:
        self.items.append(
            ImportRowError(
                kind=ImportErrorKind.validation,
                row=self.row,
                field=field,
                data=self.data,
                message=message,
            )
        )

    def __bool__(self) -> bool:
        return bool(self.items)


def _required(raw: Mapping[str, Any], fields: Iterable[str], errors: _RowErrors) -> dict[str, str]:
    values = {}
    for name in fields:
        value = get_cell(raw, name)
        if not value:
            errors.add(f"{name} is required", field=name)
        values[name] = value
    return values


def _resolve_names(
    cell: str,
    index: Mapping[str, uuid.UUID],
    noun: str,
    field_name: str,
    errors: _RowErrors,
) -> list[uuid.UUID]:
    """Resolve a comma-separated name list; unknown names are reported one by
    one and the known ones still come back."""
    ids: list[uuid.UUID] = []
    for name in (part.strip() for part in cell.split(",")):
        if not name:
            continue
        resolved = index.get(name.lower())
        if resolved is None:
            errors.add(f'{noun} "{name}" does not exist', field=field_name)
        elif resolved not in ids:
            ids.append(resolved)
    return ids


def _parse_price_range(value: str) -> int | None:
    # spreadsheets often export whole numbers as "4.0"
    try:
        price_range = int(value)
    except ValueError:
        try:
            as_float = float(value)
        except ValueError:
            return None
        if not as_float.is_integer():
            return None
        price_range = int(as_float)
    return price_range if 1 <= price_range <= 5 else None


def _parse_commission_rate(value: str) -> float | None:
    try:
        rate = float(value)
    except ValueError:
        return None
    return rate if 0 <= rate <= 1 else None


# ─── Validators ───

VENDOR_REQUIRED = ("name", "contactPerson", "email", "phone", "address", "serviceArea")
VENDOR_COLUMNS = VENDOR_REQUIRED + ("priceRange", "commissionRate")


def validate_vendor_row(raw, index: int, lookups: LookupMaps | None = None):
    lookups = lookups or LookupMaps()
    errors = _RowErrors(raw, index)

    values = _required(raw, VENDOR_REQUIRED, errors)

    price_range = _parse_price_range(get_cell(raw, "priceRange"))
    if price_range is None:
        errors.add(PRICE_RANGE_MESSAGE, field="priceRange")

    commission_rate = _parse_commission_rate(get_cell(raw, "commissionRate"))
    if commission_rate is None:
        errors.add(COMMISSION_RATE_MESSAGE, field="commissionRate")

    service_type_ids = _resolve_names(
        get_cell(raw, "serviceTypes"), lookups.service_types, "Service type", "serviceTypes", errors
    )
    tag_ids = _resolve_names(get_cell(raw, "tags"), lookups.tags, "Tag", "tags", errors)

    if errors:
        return None, errors.items

    record = VendorImportRecord(
        row=errors.row,
        name=values["name"],
        contact_person=values["contactPerson"],
        email=values["email"],
        phone=values["phone"],
        address=values["address"],
        service_area=values["serviceArea"],
        price_range=price_range,
        commission_rate=commission_rate,
        notes=get_cell(raw, "notes") or None,
        service_type_ids=service_type_ids,
        tag_ids=tag_ids,
    )
    return record, []


def validate_tag_row(raw, index: int, lookups: LookupMaps | None = None):
    errors = _RowErrors(raw, index)
    values = _required(raw, ("name",), errors)
    if errors:
        return None, errors.items
    return TagImportRecord(row=errors.row, name=values["name"]), []


def validate_service_type_row(raw, index: int, lookups: LookupMaps | None = None):
    errors = _RowErrors(raw, index)
    values = _required(raw, ("name",), errors)
    if errors:
        return None, errors.items
    return ServiceTypeImportRecord(row=errors.row, name=values["name"]), []


LOCATION_TAG_COLUMNS = ("continent", "country", "state_province", "city")


def validate_location_tag_row(raw, index: int, lookups: LookupMaps | None = None):
    # state_province and city may be blank for continent- or country-level nodes
    errors = _RowErrors(raw, index)
    values = _required(raw, ("continent", "country"), errors)
    if errors:
        return None, errors.items
    return LocationTagImportRecord(
        row=errors.row,
        continent=values["continent"],
        country=values["country"],
        state_province=get_cell(raw, "state_province") or None,
        city=get_cell(raw, "city") or None,
    ), []


CLIENT_COLUMNS = ("firstName", "lastName")


def validate_client_row(raw, index: int, lookups: LookupMaps | None = None):
    errors = _RowErrors(raw, index)
    values = _required(raw, CLIENT_COLUMNS, errors)
    if errors:
        return None, errors.items
    return ClientImportRecord(
        row=errors.row,
        first_name=values["firstName"],
        last_name=values["lastName"],
        notes=get_cell(raw, "notes") or None,
    ), []
