"""
Annual fines timeline: year-over-year growth, overall statistics and the
annotated peaks.
"""

from typing import Dict, List, Optional

import pandas as pd

from .config import SIGNIFICANT_GROWTH_PERCENT
from .formatting import format_value


def add_growth(df: pd.DataFrame) -> pd.DataFrame:
    """
    Attach year-over-year change columns to an annual series.

    Parameters
    ----------
    df : pd.DataFrame
        Columns ``year`` and ``fines``; one row per year.

    Returns
    -------
    pd.DataFrame
        Sorted copy with ``growth`` (absolute change), ``growth_rate``
        (percent change) and ``performance`` ("increasing" or
        "decreasing").  The first year, and any year following a zero
        year, has a growth rate of 0.
    """
    out = df.sort_values("year", ignore_index=True).copy()
    previous = out["fines"].shift(1)
    change = out["fines"] - previous
    denom = previous.where(previous != 0)
    out["growth"] = change.fillna(0)
    out["growth_rate"] = (change / denom * 100).fillna(0.0)
    out["performance"] = out["growth"].gt(0).map(
        {True: "increasing", False: "decreasing"}
    )
    return out


def overall_stats(df: pd.DataFrame) -> Optional[Dict[str, object]]:
    """Total, yearly average, peak year and first-to-last growth."""
    if df.empty:
        return None
    series = df.sort_values("year", ignore_index=True)
    total = float(series["fines"].sum())
    peak = series.loc[series["fines"].idxmax()]
    first, last = float(series["fines"].iloc[0]), float(series["fines"].iloc[-1])
    total_growth = round((last - first) / first * 100, 1) if first else 0.0
    return {
        "total": total,
        "average": total / len(series),
        "peak_year": int(peak["year"]),
        "peak_fines": float(peak["fines"]),
        "total_growth": total_growth,
        "first_year": int(series["year"].iloc[0]),
        "last_year": int(series["year"].iloc[-1]),
    }


def significant_peaks(
    df: pd.DataFrame, threshold: float = SIGNIFICANT_GROWTH_PERCENT
) -> List[Dict[str, object]]:
    """
    Years worth annotating: the overall peak, then every year whose growth
    rate exceeds ``threshold`` percent.
    """
    if df.empty:
        return []
    series = df if "growth_rate" in df.columns else add_growth(df)
    peak = series.loc[series["fines"].idxmax()]
    peaks = [
        {
            "year": int(peak["year"]),
            "fines": float(peak["fines"]),
            "reason": f"Peak: {format_value(peak['fines'], precision=2)} fines",
        }
    ]
    for row in series.itertuples(index=False):
        if row.growth_rate > threshold:
            peaks.append(
                {
                    "year": int(row.year),
                    "fines": float(row.fines),
                    "reason": f"+{row.growth_rate:.1f}% growth",
                }
            )
    return peaks


def year_summary(df: pd.DataFrame, year: int) -> Optional[Dict[str, object]]:
    series = df if "growth_rate" in df.columns else add_growth(df)
    match = series[series["year"] == year]
    if match.empty:
        return None
    row = match.iloc[0]
    return {
        "year": int(row["year"]),
        "fines": float(row["fines"]),
        "growth": float(row["growth"]),
        "growth_rate": float(row["growth_rate"]),
        "performance": row["performance"],
    }


def next_year(df: pd.DataFrame, current: Optional[int]) -> Optional[int]:
    """Year after ``current`` for timeline playback, wrapping to the first."""
    years = sorted(int(y) for y in df["year"].unique())
    if not years:
        return None
    if current not in years:
        return years[0]
    return years[(years.index(current) + 1) % len(years)]
