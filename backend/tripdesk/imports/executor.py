"""Chunk insertion with row-level fallback on unique conflicts."""
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from tripdesk.imports.store import ConflictError, ImportStore, StoreError
from tripdesk.schemas.imports import ImportErrorKind, ImportRecord, ImportRowError

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ImportRecord)


@dataclass
class ChunkOutcome(Generic[R]):
    inserted: list[tuple[R, dict[str, Any]]] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.inserted)


async def insert_chunk(
    store: ImportStore,
    table: str,
    chunk: Sequence[R],
    describe_conflict: Callable[[R], str] | None = None,
    key_columns: Sequence[str] = (),
) -> ChunkOutcome[R]:
    """Insert ``chunk`` in one statement.

    A unique conflict falls back to inserting row by row so only the rows
    that actually collide are reported. Any other failure is recorded once
    for the whole chunk and nothing from it is retried.

    ``key_columns`` name a unique key used to pair each stored row with the
    record it came from; RETURNING order is not guaranteed to follow VALUES.
    Without them rows are paired positionally.
    """
    rows = [record.to_row() for record in chunk]
    try:
        stored = await store.insert(table, rows)
    except ConflictError as exc:
        logger.info(
            "Unique conflict inserting %d rows into %s, retrying row by row: %s",
            len(rows), table, exc,
        )
        return await _insert_each(store, table, chunk, describe_conflict)
    except StoreError as exc:
        logger.warning("Batch insert into %s failed (%d rows): %s", table, len(rows), exc)
        return ChunkOutcome(
            errors=[ImportRowError(kind=ImportErrorKind.storage, batch=rows, message=str(exc))]
        )
    return ChunkOutcome(inserted=_pair(chunk, stored, key_columns))


def _pair(
    chunk: Sequence[R],
    stored: Sequence[dict[str, Any]],
    key_columns: Sequence[str],
) -> list[tuple[R, dict[str, Any]]]:
    if not key_columns:
        return list(zip(chunk, stored))
    by_key = {tuple(row[c] for c in key_columns): row for row in stored}
    pairs = []
    for record in chunk:
        row = record.to_row()
        pairs.append((record, by_key[tuple(row[c] for c in key_columns)]))
    return pairs


async def _insert_each(
    store: ImportStore,
    table: str,
    chunk: Sequence[R],
    describe_conflict: Callable[[R], str] | None,
) -> ChunkOutcome[R]:
    outcome: ChunkOutcome[R] = ChunkOutcome()
    for record in chunk:
        row = record.to_row()
        try:
            stored = await store.insert(table, [row])
        except ConflictError as exc:
            message = describe_conflict(record) if describe_conflict else str(exc)
            outcome.errors.append(
                ImportRowError(kind=ImportErrorKind.conflict, row=record.row, data=row, message=message)
            )
        except StoreError as exc:
            outcome.errors.append(
                ImportRowError(kind=ImportErrorKind.storage, row=record.row, data=row, message=str(exc))
            )
        else:
            outcome.inserted.extend(zip([record], stored))
    return outcome
