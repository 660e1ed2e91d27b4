from __future__ import annotations

from datetime import datetime, timezone
from typing import List, TypeVar

T = TypeVar("T")


def iso_timestamp(dt: datetime | None = None) -> str:
    """
    ISO-8601 UTC timestamp, used for approval records.
    """
    if dt is None:
        dt = datetime.now(timezone.utc)
    return dt.isoformat()


def push_bounded(stack: List[T], item: T, limit: int) -> None:
    """
    Append ``item`` and drop the oldest entries beyond ``limit``.
    """
    stack.append(item)
    if limit >= 0:
        del stack[: max(len(stack) - limit, 0)]
