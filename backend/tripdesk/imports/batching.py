from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def chunked(records: Sequence[T], size: int) -> list[list[T]]:
    """Split ``records`` into consecutive chunks of ``size``; the last one may be shorter."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    return [list(records[i:i + size]) for i in range(0, len(records), size)]
