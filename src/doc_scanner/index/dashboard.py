"""Dashboard aggregation over persisted task rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Sequence, Tuple

from loguru import logger

from ..database.models import DashboardRow, TaskStatus


class StatusFilter(Enum):
    ALL = "all"
    OPEN = "open"
    CLOSED = "closed"


class SortKey(Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    RECENTLY_CLOSED = "recently-closed"


@dataclass(frozen=True)
class DashboardView:
    """Filtered, ordered rows for the dashboard."""
    rows: List[DashboardRow]
    status_filter: StatusFilter
    sort_key: SortKey

    @property
    def count(self) -> int:
        return len(self.rows)


def _closed_sort_key(row: DashboardRow) -> Tuple[bool, datetime]:
    # Rows without a closed timestamp sort as the oldest possible value
    return (row.closed_at is not None, row.closed_at or datetime.min)


_SORTS: Dict[SortKey, Tuple[Callable[[DashboardRow], object], bool]] = {
    SortKey.NEWEST: (lambda row: row.created_at, True),
    SortKey.OLDEST: (lambda row: row.created_at, False),
    SortKey.RECENTLY_CLOSED: (_closed_sort_key, True),
}


def matches_status(row: DashboardRow, status_filter: StatusFilter) -> bool:
    if status_filter is StatusFilter.OPEN:
        return row.status is TaskStatus.OPEN
    if status_filter is StatusFilter.CLOSED:
        return row.status is TaskStatus.CLOSED
    return True


def aggregate(
    rows: Sequence[DashboardRow],
    status_filter: StatusFilter = StatusFilter.ALL,
    sort_key: SortKey = SortKey.NEWEST
) -> DashboardView:
    """Filter and order task rows.

    Stateless; call again whenever either parameter changes.

    Args:
        rows: Every persisted task row.
        status_filter: Which statuses to keep.
        sort_key: Ordering to apply.

    Returns:
        DashboardView with the ordered rows and their count.
    """
    selected = [row for row in rows if matches_status(row, status_filter)]
    key, descending = _SORTS[sort_key]
    ordered = sorted(selected, key=key, reverse=descending)  # type: ignore[arg-type]

    logger.debug(
        f"Dashboard: {len(ordered)}/{len(rows)} rows for status={status_filter.value}, sort={sort_key.value}"
    )
    return DashboardView(rows=ordered, status_filter=status_filter, sort_key=sort_key)
