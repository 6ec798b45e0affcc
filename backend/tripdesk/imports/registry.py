"""Import definitions for every table that accepts CSV uploads."""
from tripdesk.core.config import settings
from tripdesk.imports.coordinator import ImportDefinition
from tripdesk.imports.linker import link_vendor_relations
from tripdesk.imports.validation import (
    CLIENT_COLUMNS,
    LOCATION_TAG_COLUMNS,
    VENDOR_COLUMNS,
    validate_client_row,
    validate_location_tag_row,
    validate_service_type_row,
    validate_tag_row,
    validate_vendor_row,
)

VENDORS = ImportDefinition(
    label="vendor",
    table="vendors",
    required_columns=VENDOR_COLUMNS,
    batch_size=settings.VENDOR_IMPORT_BATCH_SIZE,
    validate=validate_vendor_row,
    unique_key=lambda r: r.email.lower(),
    key_columns=("email",),
    describe_conflict=lambda r: f"Vendor with email {r.email} already exists",
    uses_lookups=True,
    link=link_vendor_relations,
)

TAGS = ImportDefinition(
    label="tag",
    table="tags",
    required_columns=("name",),
    batch_size=settings.TAG_IMPORT_BATCH_SIZE,
    validate=validate_tag_row,
    unique_key=lambda r: r.name,
    key_columns=("name",),
    describe_conflict=lambda r: f'Tag "{r.name}" already exists',
)

SERVICE_TYPES = ImportDefinition(
    label="service type",
    table="service_types",
    required_columns=("name",),
    batch_size=settings.TAG_IMPORT_BATCH_SIZE,
    validate=validate_service_type_row,
    unique_key=lambda r: r.name,
    key_columns=("name",),
    describe_conflict=lambda r: f'Service type "{r.name}" already exists',
)

LOCATION_TAGS = ImportDefinition(
    label="location tag",
    table="location_tags",
    required_columns=LOCATION_TAG_COLUMNS,
    batch_size=settings.TAG_IMPORT_BATCH_SIZE,
    validate=validate_location_tag_row,
    unique_key=lambda r: (r.continent, r.country, r.state_province, r.city),
    key_columns=LOCATION_TAG_COLUMNS,
    describe_conflict=lambda r: "Location tag "
    + " > ".join(p for p in (r.continent, r.country, r.state_province, r.city) if p)
    + " already exists",
)

CLIENTS = ImportDefinition(
    label="client",
    table="clients",
    required_columns=CLIENT_COLUMNS,
    batch_size=settings.CLIENT_IMPORT_BATCH_SIZE,
    validate=validate_client_row,
)

# URL slug -> definition
DEFINITIONS: dict[str, ImportDefinition] = {
    "vendors": VENDORS,
    "tags": TAGS,
    "service-types": SERVICE_TYPES,
    "location-tags": LOCATION_TAGS,
    "clients": CLIENTS,
}
