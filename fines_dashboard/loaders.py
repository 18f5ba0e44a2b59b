"""Load and clean the dataset behind each dashboard page.

Every ``load_*`` function reads one source (a local path or an http(s)
URL), normalizes column names to snake case and coerces the numeric
columns.  Load failures are logged and produce an empty frame with the
expected columns so that the page can show a no-data message instead of
failing.  The ``prepare_*`` functions hold the cleaning logic and work on
already-read frames.
"""

from __future__ import annotations

import json
import logging
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from .config import (
    AGE_GROUP_COLUMNS,
    AGE_GROUP_FILE,
    DATA_DIR,
    FINES_COLUMNS,
    FINES_FILE,
    HTTP_TIMEOUT,
    MAP_COLUMNS,
    MAP_FINES_FILE,
    MAP_GEOJSON_FILE,
    PIE_CHART_FILE,
    PIE_COLUMNS,
    SAMPLE_TIMELINE,
    TIMELINE_COLUMNS,
    TIMELINE_FILE,
    URBAN_COLUMNS,
    URBAN_FILE,
)

logger = logging.getLogger(__name__)

LOAD_ERRORS = (OSError, ValueError, KeyError, requests.RequestException)


# ---------------------------------------------------------------------------
# Source helpers
# ---------------------------------------------------------------------------


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def resolve_source(name: str, data_dir: Optional[str] = None) -> str:
    """Join a dataset file name onto the data directory or base URL."""
    base = str(data_dir or DATA_DIR)
    if _is_url(base):
        return f"{base.rstrip('/')}/{name}"
    return str(Path(base) / name)


def read_text(source: str | Path) -> str:
    source_str = str(source)
    if _is_url(source_str):
        response = requests.get(source_str, timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        return response.text
    return Path(source_str).read_text(encoding="utf-8")


def read_csv(source: str | Path) -> pd.DataFrame:
    source_str = str(source)
    if _is_url(source_str):
        return pd.read_csv(StringIO(read_text(source_str)))
    return pd.read_csv(source_str)


def ensure_columns(df: pd.DataFrame, required: List[str]) -> None:
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise KeyError(f"Missing expected columns: {missing}")


def _strip_quotes(series: pd.Series) -> pd.Series:
    return series.astype(str).str.replace('"', "", regex=False).str.strip()


def _numericize(df: pd.DataFrame, cols: List[str]) -> pd.DataFrame:
    for col in cols:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)
    return df


def _rename(raw: pd.DataFrame, columns: Dict[str, str]) -> pd.DataFrame:
    ensure_columns(raw, list(columns))
    return raw[list(columns)].rename(columns=columns).copy()


def _empty(columns: Dict[str, str]) -> pd.DataFrame:
    return pd.DataFrame(columns=list(columns.values()))


def _load(
    label: str,
    source: Optional[str | Path],
    default_name: str,
    prepare,
    columns: Dict[str, str],
) -> pd.DataFrame:
    path = source or resolve_source(default_name)
    try:
        df = prepare(read_csv(path))
    except LOAD_ERRORS as exc:
        logger.warning("Could not load %s data from %s: %s", label, path, exc)
        return _empty(columns)
    logger.info("Loaded %d %s rows from %s", len(df), label, path)
    return df


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------


def prepare_age_groups(raw: pd.DataFrame) -> pd.DataFrame:
    df = _rename(raw, AGE_GROUP_COLUMNS)
    df["jurisdiction"] = df["jurisdiction"].astype(str).str.strip()
    df["age_group"] = df["age_group"].astype(str).str.strip()
    numeric = [c for c in df.columns if c not in ("jurisdiction", "age_group")]
    return _numericize(df, numeric)


def prepare_detection_methods(raw: pd.DataFrame) -> pd.DataFrame:
    df = _rename(raw, PIE_COLUMNS)
    df["method"] = df["method"].astype(str).str.strip()
    return _numericize(df, ["fines", "arrests", "charges"]).astype(
        {"fines": int, "arrests": int, "charges": int}
    )


def prepare_timeline(raw: pd.DataFrame) -> pd.DataFrame:
    df = _rename(raw, TIMELINE_COLUMNS)
    df = _numericize(df, ["year", "fines"])
    df["year"] = df["year"].astype(int)
    return df.sort_values("year", ignore_index=True)


def sample_timeline() -> pd.DataFrame:
    return pd.DataFrame(SAMPLE_TIMELINE, columns=["year", "fines"])


def prepare_fines(raw: pd.DataFrame) -> pd.DataFrame:
    df = _rename(raw, FINES_COLUMNS)
    df["start_date"] = pd.to_datetime(df["start_date"], errors="coerce")
    df["end_date"] = pd.to_datetime(df["end_date"], errors="coerce")
    for col in ("jurisdiction", "age_group", "metric", "detection_method"):
        df[col] = df[col].astype(str).str.strip()
    return _numericize(df, ["year", "fines", "arrests", "charges", "prediction"])


def prepare_jurisdiction_fines(raw: pd.DataFrame) -> pd.DataFrame:
    df = _rename(raw, MAP_COLUMNS)
    df["jurisdiction"] = df["jurisdiction"].astype(str).str.strip()
    df = _numericize(df, ["year", "fines", "arrests"])
    df["year"] = df["year"].astype(int)
    return df


def prepare_urban(raw: pd.DataFrame) -> pd.DataFrame:
    """Strip stray quote characters, then coerce the numeric columns."""
    df = _rename(raw, URBAN_COLUMNS)
    for col in df.columns:
        df[col] = _strip_quotes(df[col])
    numeric = [c for c in df.columns if c != "jurisdiction"]
    return _numericize(df, numeric)


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def load_age_groups(source: Optional[str | Path] = None) -> pd.DataFrame:
    return _load(
        "age group", source, AGE_GROUP_FILE, prepare_age_groups, AGE_GROUP_COLUMNS
    )


def load_detection_methods(source: Optional[str | Path] = None) -> pd.DataFrame:
    return _load(
        "detection method", source, PIE_CHART_FILE, prepare_detection_methods, PIE_COLUMNS
    )


def load_timeline(source: Optional[str | Path] = None) -> pd.DataFrame:
    """Annual fines series; the built-in sample series is used on failure."""
    df = _load("timeline", source, TIMELINE_FILE, prepare_timeline, TIMELINE_COLUMNS)
    if df.empty:
        logger.warning("Using built-in sample timeline data")
        return sample_timeline()
    return df


def load_fines(source: Optional[str | Path] = None) -> pd.DataFrame:
    return _load("fines", source, FINES_FILE, prepare_fines, FINES_COLUMNS)


def load_jurisdiction_fines(source: Optional[str | Path] = None) -> pd.DataFrame:
    return _load(
        "jurisdiction fines", source, MAP_FINES_FILE, prepare_jurisdiction_fines, MAP_COLUMNS
    )


def load_urban(source: Optional[str | Path] = None) -> pd.DataFrame:
    return _load("urban enforcement", source, URBAN_FILE, prepare_urban, URBAN_COLUMNS)


def load_geojson(source: Optional[str | Path] = None) -> Dict[str, Any]:
    """State boundaries as a GeoJSON mapping; empty collection on failure."""
    path = source or resolve_source(MAP_GEOJSON_FILE)
    try:
        geojson = json.loads(read_text(path))
    except LOAD_ERRORS as exc:
        logger.warning("Could not load map boundaries from %s: %s", path, exc)
        return {"type": "FeatureCollection", "features": []}
    logger.info(
        "Loaded %d map features from %s", len(geojson.get("features", [])), path
    )
    return geojson
