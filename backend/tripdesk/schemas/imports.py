"""Pydantic schemas for CSV bulk import records and results."""
import enum
import uuid
from typing import Any

from pydantic import BaseModel, Field


class ImportErrorKind(str, enum.Enum):
    validation = "validation"  # row excluded before insert
    conflict = "conflict"      # unique violation on the per-row retry
    storage = "storage"        # chunk-level failure, no retry
    setup = "setup"            # the run could not start (lookup fetch)


class ImportRowError(BaseModel):
    kind: ImportErrorKind
    message: str
    row: int | None = None          # 1-based CSV line (header is line 1)
    field: str | None = None
    data: dict[str, Any] | None = None
    batch: list[dict[str, Any]] | None = None


class ImportResult(BaseModel):
    entity: str
    success_count: int = 0
    errors: list[ImportRowError] = []
    warnings: list[str] = []
    message: str = ""


# ─── Normalized records ───
# One model per importable table. ``to_row`` gives the column dict for the
# parent insert; anything else on the model is pipeline metadata.

class ImportRecord(BaseModel):
    row: int = Field(exclude=True)

    def to_row(self) -> dict[str, Any]:
        return self.model_dump()


class TagImportRecord(ImportRecord):
    name: str


class ServiceTypeImportRecord(ImportRecord):
    name: str


class LocationTagImportRecord(ImportRecord):
    continent: str
    country: str
    state_province: str | None = None
    city: str | None = None


class VendorImportRecord(ImportRecord):
    name: str
    contact_person: str
    email: str
    phone: str
    address: str
    service_area: str
    price_range: int = Field(ge=1, le=5)
    commission_rate: float = Field(ge=0, le=1)
    notes: str | None = None
    service_type_ids: list[uuid.UUID] = Field(default_factory=list, exclude=True)
    tag_ids: list[uuid.UUID] = Field(default_factory=list, exclude=True)


class ClientImportRecord(ImportRecord):
    first_name: str
    last_name: str
    notes: str | None = None
