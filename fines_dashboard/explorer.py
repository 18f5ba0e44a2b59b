"""Filtered fines explorer: monthly series, breakdowns and headline stats.

Filters come from three dropdowns (jurisdiction, age group, time range);
``"all"`` in any of them means no constraint.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd

from .aggregation import DateRange, DerivedEntry, ViewSpec, apply, filter_rows
from .config import ALL_OPTION, RECENT_ROWS, TIME_RANGE_YEARS

MONTH_FIELD = "month"


def time_window(time_range: str, now: Optional[Any] = None) -> Optional[DateRange]:
    """Date window for a time-range option, counted back from ``now``."""
    if time_range in (None, ALL_OPTION):
        return None
    if time_range not in TIME_RANGE_YEARS:
        raise ValueError(f"Unsupported time range: {time_range!r}")
    reference = pd.Timestamp(now) if now is not None else pd.Timestamp.now()
    return DateRange(start=reference - pd.DateOffset(years=TIME_RANGE_YEARS[time_range]))


def explorer_filters(
    jurisdiction: Optional[str] = ALL_OPTION,
    age_group: Optional[str] = ALL_OPTION,
    time_range: Optional[str] = ALL_OPTION,
    *,
    now: Optional[Any] = None,
) -> Dict[str, Any]:
    def choice(value: Optional[str]) -> Optional[str]:
        return None if value in (None, "", ALL_OPTION) else value

    return {
        "jurisdiction": choice(jurisdiction),
        "age_group": choice(age_group),
        "start_date": time_window(time_range, now),
    }


def with_month(rows: pd.DataFrame) -> pd.DataFrame:
    df = rows.copy()
    df[MONTH_FIELD] = pd.to_datetime(df["start_date"], errors="coerce").dt.strftime(
        "%Y-%m"
    )
    return df


def monthly_fines(rows: pd.DataFrame, filters: Dict[str, Any]) -> List[DerivedEntry]:
    """Fines per month (YYYY-MM), in chronological order."""
    if rows.empty:
        return []
    spec = ViewSpec(
        group_by=MONTH_FIELD,
        value_field="fines",
        sort_order="alphabetical",
        title="Fines per Month",
        x_label="Month",
        y_label="Fines",
    )
    return apply(with_month(rows), filters, spec)


def fines_by_spec(field: str) -> ViewSpec:
    label = {"age_group": "Age Group", "jurisdiction": "Jurisdiction"}.get(field, field)
    return ViewSpec(
        group_by=field,
        value_field="fines",
        title=f"Fines by {label}",
        x_label=label,
        y_label="Fines",
    )


def fines_by(
    rows: pd.DataFrame, filters: Dict[str, Any], field: str
) -> List[DerivedEntry]:
    """Fines per value of ``field``, largest first."""
    if rows.empty:
        return []
    return apply(rows, filters, fines_by_spec(field))


def explorer_stats(
    rows: pd.DataFrame, filters: Dict[str, Any]
) -> Optional[Dict[str, object]]:
    """Total fines, peak month, dominant age group and prediction rate."""
    filtered = filter_rows(rows, filters)
    if filtered.empty:
        return None
    months = apply(
        with_month(filtered), None, ViewSpec(group_by=MONTH_FIELD, value_field="fines")
    )
    ages = apply(filtered, None, ViewSpec(group_by="age_group", value_field="fines"))
    peak_month = months[0] if months else None
    return {
        "total_fines": float(filtered["fines"].sum()),
        "peak_month": peak_month.category if peak_month else None,
        "peak_month_fines": peak_month.value if peak_month else 0.0,
        "dominant_age_group": ages[0].category if ages else None,
        "prediction_rate": float(filtered["prediction"].sum()) / len(filtered) * 100,
    }


def recent_rows(
    rows: pd.DataFrame, filters: Dict[str, Any], limit: int = RECENT_ROWS
) -> pd.DataFrame:
    """Most recent rows by start date, with a risk label per row."""
    filtered = filter_rows(rows, filters)
    if filtered.empty:
        return filtered
    recent = filtered.sort_values("start_date", ascending=False).head(limit).copy()
    recent["risk"] = recent["prediction"].map(lambda p: "High Risk" if p else "Low Risk")
    return recent.reset_index(drop=True)
