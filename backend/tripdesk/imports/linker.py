"""Attach service types, commissions and tags to a freshly inserted vendor.

Linking is best-effort: the vendor row is already committed when this runs,
so a failed join insert is logged and the vendor still counts as imported.
There is no compensating cleanup for a partially linked vendor.
"""
import logging
import uuid
from typing import Any

from tripdesk.imports.store import ImportStore, StoreError
from tripdesk.schemas.imports import VendorImportRecord

logger = logging.getLogger(__name__)


async def link_vendor_relations(
    store: ImportStore,
    record: VendorImportRecord,
    vendor: dict[str, Any],
) -> None:
    vendor_id: uuid.UUID = vendor["id"]

    if record.service_type_ids:
        await _insert_quietly(
            store,
            "vendor_service_types",
            [{"vendor_id": vendor_id, "service_type_id": st_id} for st_id in record.service_type_ids],
            vendor_id,
        )
        await _insert_quietly(
            store,
            "vendor_service_type_commissions",
            [
                {"vendor_id": vendor_id, "service_type_id": st_id, "commission_rate": record.commission_rate}
                for st_id in record.service_type_ids
            ],
            vendor_id,
        )

    if record.tag_ids:
        await _insert_quietly(
            store,
            "vendor_tags",
            [{"vendor_id": vendor_id, "tag_id": tag_id} for tag_id in record.tag_ids],
            vendor_id,
        )


async def _insert_quietly(
    store: ImportStore,
    table: str,
    rows: list[dict[str, Any]],
    vendor_id: uuid.UUID,
) -> None:
    try:
        await store.insert(table, rows)
    except StoreError as exc:
        logger.error("Error inserting %s for vendor %s: %s", table, vendor_id, exc)
