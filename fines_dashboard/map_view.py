"""Per-state fines for the choropleth map."""

from typing import Any, Dict, List, Optional

import pandas as pd

from .aggregation import ViewSpec, apply
from .config import ALL_OPTION, JURISDICTION_NAMES

STATE_NAME_KEY = "STATE_NAME"


def state_name(code: str) -> str:
    return JURISDICTION_NAMES.get(code, code)


def year_options(rows: pd.DataFrame) -> List[int]:
    if rows.empty:
        return []
    return sorted(int(year) for year in rows["year"].dropna().unique())


def parse_year(value: Any) -> Optional[int]:
    """Slider value to a year; ``"all"`` (or nothing) selects every year."""
    if value is None or str(value).strip().lower() in ("", ALL_OPTION):
        return None
    return int(value)


def state_fines(rows: pd.DataFrame, year: Optional[int] = None) -> pd.DataFrame:
    """
    Fines and arrests per state for one year, or summed over all years.

    ``percentage`` is each state's share of the fines in the same year
    selection.
    """
    columns = ["jurisdiction", "state", "fines", "arrests", "percentage"]
    if rows.empty:
        return pd.DataFrame(columns=columns)
    filters = {"year": year}
    fines = apply(rows, filters, ViewSpec(group_by="jurisdiction", value_field="fines"))
    arrests = {
        entry.category: entry.value
        for entry in apply(
            rows, filters, ViewSpec(group_by="jurisdiction", value_field="arrests")
        )
    }
    return pd.DataFrame(
        [
            {
                "jurisdiction": entry.category,
                "state": state_name(entry.category),
                "fines": entry.value,
                "arrests": arrests.get(entry.category, 0.0),
                "percentage": entry.percentage,
            }
            for entry in fines
        ],
        columns=columns,
    )


def geojson_states(geojson: Dict[str, Any]) -> List[str]:
    return [
        feature.get("properties", {}).get(STATE_NAME_KEY)
        for feature in geojson.get("features", [])
        if feature.get("properties", {}).get(STATE_NAME_KEY)
    ]


def state_details(states: pd.DataFrame, state: Optional[str]) -> Optional[Dict[str, Any]]:
    """Info panel content for a clicked state, or ``None`` if it has no data."""
    if not state or states.empty:
        return None
    match = states[states["state"] == state]
    if match.empty:
        return None
    row = match.iloc[0]
    return {
        "state": row["state"],
        "fines": float(row["fines"]),
        "arrests": float(row["arrests"]),
        "percentage": round(float(row["percentage"]), 2),
    }


def toggle_selection(current: Optional[str], clicked: str) -> Optional[str]:
    """Clicking the selected state clears the selection."""
    return None if current == clicked else clicked
