"""Drives one CSV import: validate -> batch -> insert -> link -> summarize."""
import logging
from collections.abc import Awaitable, Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from tripdesk.imports.batching import chunked
from tripdesk.imports.executor import insert_chunk
from tripdesk.imports.store import ImportStore, LookupFetchError
from tripdesk.imports.validation import LookupMaps, csv_row_number
from tripdesk.schemas.imports import ImportErrorKind, ImportRecord, ImportResult, ImportRowError

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ImportRecord)

RawRow = Mapping[str, Any]
Validator = Callable[[RawRow, int, LookupMaps | None], tuple[R | None, list[ImportRowError]]]
Linker = Callable[[ImportStore, R, dict[str, Any]], Awaitable[None]]


@dataclass(frozen=True)
class ImportDefinition(Generic[R]):
    """Everything that differs between the vendor, tag, ... imports."""

    label: str                      # singular, e.g. "location tag"
    table: str
    required_columns: tuple[str, ...]
    batch_size: int
    validate: Validator
    unique_key: Callable[[R], Hashable] | None = None  # None: repeats are allowed
    key_columns: tuple[str, ...] = ()  # pairs RETURNING rows with their records
    describe_conflict: Callable[[R], str] | None = None
    uses_lookups: bool = False
    link: Linker | None = None

    @property
    def plural(self) -> str:
        return f"{self.label}s"


class ImportCoordinator(Generic[R]):
    def __init__(self, store: ImportStore, definition: ImportDefinition[R]):
        self.store = store
        self.definition = definition

    async def run(self, raw_rows: Sequence[RawRow]) -> ImportResult:
        d = self.definition
        result = ImportResult(entity=d.table)

        try:
            lookups = await LookupMaps.load(self.store) if d.uses_lookups else None
        except LookupFetchError as exc:
            return self._abort(result, raw_rows, exc)

        valid = self._validate(raw_rows, lookups, result)
        if not valid:
            result.message = f"No valid {d.label} data found"
            logger.warning("%s import: %s (%d rows rejected)", d.label, result.message, len(raw_rows))
            return result

        # Batches go one at a time to keep load on the database bounded.
        for chunk in chunked(valid, d.batch_size):
            outcome = await insert_chunk(
                self.store, d.table, chunk, d.describe_conflict, key_columns=d.key_columns
            )
            result.errors.extend(outcome.errors)
            result.success_count += outcome.success_count
            if d.link is not None:
                for record, stored in outcome.inserted:
                    await d.link(self.store, record, stored)

        result.message = (
            f"Successfully imported {result.success_count} {d.plural} with {len(result.errors)} errors"
        )
        logger.info("%s import completed: %s", d.label, result.message)
        return result

    def _validate(
        self,
        raw_rows: Sequence[RawRow],
        lookups: LookupMaps | None,
        result: ImportResult,
    ) -> list[R]:
        valid: list[R] = []
        seen: dict[Hashable, int] = {}
        for index, raw in enumerate(raw_rows):
            record, errors = self.definition.validate(raw, index, lookups)
            if errors:
                result.errors.extend(errors)
                continue
            if self.definition.unique_key is None:
                valid.append(record)
                continue
            key = self.definition.unique_key(record)
            if key in seen:
                result.warnings.append(f"Row {record.row}: duplicate of row {seen[key]}, skipped")
                continue
            seen[key] = record.row
            valid.append(record)
        return valid

    def _abort(self, result: ImportResult, raw_rows: Sequence[RawRow], exc: Exception) -> ImportResult:
        logger.error("%s import aborted before any insert: %s", self.definition.label, exc)
        result.errors.extend(
            ImportRowError(
                kind=ImportErrorKind.setup,
                row=csv_row_number(index),
                data={k: v for k, v in raw.items() if k is not None},
                message=str(exc),
            )
            for index, raw in enumerate(raw_rows)
        )
        result.message = f"Import failed: {exc}"
        return result
