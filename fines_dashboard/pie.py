"""Detection-method share of fines, arrests or charges."""

from typing import Dict, List, Optional

from .aggregation import DerivedEntry, Rows, ViewSpec, apply
from .config import DEFAULT_MIN_SHARE_PERCENT, METRIC_OPTIONS, SortOrder

METRIC_LABELS: Dict[str, str] = {value: label for label, value in METRIC_OPTIONS}


def pie_view_spec(
    metric: str = "fines",
    sort_order: SortOrder = "value",
    min_share_percent: Optional[float] = DEFAULT_MIN_SHARE_PERCENT,
) -> ViewSpec:
    if metric not in METRIC_LABELS:
        raise ValueError(f"Unsupported metric: {metric!r}")
    return ViewSpec(
        group_by="method",
        value_field=metric,
        sort_order=sort_order,
        min_share_percent=min_share_percent,
        drop_empty=True,
        title=f"{METRIC_LABELS[metric]} by Detection Method",
    )


def pie_entries(
    rows: Rows,
    metric: str = "fines",
    sort_order: SortOrder = "value",
    min_share_percent: Optional[float] = DEFAULT_MIN_SHARE_PERCENT,
) -> List[DerivedEntry]:
    """Segments at or above the minimum share, not renormalized."""
    return apply(rows, None, pie_view_spec(metric, sort_order, min_share_percent))


def pie_stats(entries: List[DerivedEntry]) -> Optional[Dict[str, object]]:
    """Total of the displayed segments and the largest one."""
    if not entries:
        return None
    largest = max(entries, key=lambda entry: entry.value)
    return {
        "total": sum(entry.value for entry in entries),
        "largest": largest.category,
    }
