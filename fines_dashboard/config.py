"""
Configuration constants for the speeding fines dashboards.
"""

import os
from pathlib import Path
from typing import Dict, List, Literal, Tuple

# ======================================================
#  DATA SOURCES / CONSTANTS
# ======================================================
# Directory holding the page datasets. Override with FINES_DATA_DIR; the
# value may also be an http(s) base URL.
DATA_DIR: str = os.getenv(
    "FINES_DATA_DIR", str(Path(__file__).resolve().parent.parent / "data")
)

AGE_GROUP_FILE: str = "Age_Group.csv"
PIE_CHART_FILE: str = "pie_chart-data.csv"
TIMELINE_FILE: str = "fines_timeline.csv"
FINES_FILE: str = "fines.csv"
MAP_FINES_FILE: str = "jurisdiction_fines.csv"
MAP_GEOJSON_FILE: str = "map_data.json"
URBAN_FILE: str = "urban.csv"

HTTP_TIMEOUT: int = 30

ALL_AGES: str = "All ages"
ALL_OPTION: str = "all"

JURISDICTION_NAMES: Dict[str, str] = {
    "ACT": "Australian Capital Territory",
    "NSW": "New South Wales",
    "NT": "Northern Territory",
    "QLD": "Queensland",
    "SA": "South Australia",
    "TAS": "Tasmania",
    "VIC": "Victoria",
    "WA": "Western Australia",
}

# Raw CSV header -> internal column name
PIE_COLUMNS: Dict[str, str] = {
    "DETECTION_METHOD": "method",
    "Sum(FINES)": "fines",
    "Sum(ARRESTS)": "arrests",
    "Sum(CHARGES)": "charges",
}

TIMELINE_COLUMNS: Dict[str, str] = {
    "YEAR": "year",
    "Sum(FINES)": "fines",
}

FINES_COLUMNS: Dict[str, str] = {
    "YEAR": "year",
    "START_DATE": "start_date",
    "END_DATE": "end_date",
    "JURISDICTION": "jurisdiction",
    "AGE_GROUP": "age_group",
    "METRIC": "metric",
    "DETECTION_METHOD": "detection_method",
    "FINES": "fines",
    "ARRESTS": "arrests",
    "CHARGES": "charges",
    "prediction": "prediction",
}

AGE_GROUP_COLUMNS: Dict[str, str] = {
    "JURISDICTION": "jurisdiction",
    "AGE_GROUP": "age_group",
    "fines": "fines",
    "charges": "charges",
    "arrests": "arrests",
    "ARREST_RATE": "arrest_rate",
    "CHARGES_RATE": "charges_rate",
    "FINES_PER_CASE": "fines_per_case",
}

MAP_COLUMNS: Dict[str, str] = {
    "year": "year",
    "jurisdiction": "jurisdiction",
    "fines": "fines",
    "arrests": "arrests",
}

URBAN_COLUMNS: Dict[str, str] = {
    "JURISDICTION": "jurisdiction",
    "Camera_Fines": "camera_fines",
    "Police_Fines": "police_fines",
    "Total_Fines": "total_fines",
    "Camera_Percentage": "camera_percentage",
    "Police_Percentage": "police_percentage",
    "Urban_Score": "urban_score",
}

# Used when the timeline CSV cannot be loaded.
SAMPLE_TIMELINE: List[Tuple[int, int]] = [
    (2008, 2639479),
    (2009, 2576271),
    (2010, 2518363),
    (2011, 2856108),
    (2012, 3004162),
    (2013, 2907678),
    (2014, 3669800),
    (2015, 3797740),
    (2016, 3265399),
    (2017, 3691401),
    (2018, 4279816),
    (2019, 3696730),
    (2020, 3773473),
    (2021, 4867138),
    (2022, 4551342),
    (2023, 4236097),
    (2024, 3323227),
]

# ======================================================
#  AGGREGATION DEFAULTS
# ======================================================
SortOrder = Literal["value", "alphabetical"]
ShareBasis = Literal["filtered", "all"]

DEFAULT_SORT_ORDER: SortOrder = "value"
DEFAULT_SHARE_BASIS: ShareBasis = "filtered"
DEFAULT_MIN_SHARE_PERCENT: float = 4.0
SIGNIFICANT_GROWTH_PERCENT: float = 15.0
RECENT_ROWS: int = 10

TIME_RANGE_YEARS: Dict[str, int] = {
    "1year": 1,
    "2years": 2,
}

# ======================================================
#  UI DEFAULTS
# ======================================================
METRIC_OPTIONS: List[Tuple[str, str]] = [
    ("Fines", "fines"),
    ("Arrests", "arrests"),
    ("Charges", "charges"),
]

SORT_OPTIONS: List[Tuple[str, str]] = [
    ("By value", "value"),
    ("Alphabetical", "alphabetical"),
]

TIME_RANGE_OPTIONS: List[Tuple[str, str]] = [
    ("All time", "all"),
    ("Last year", "1year"),
    ("Last 2 years", "2years"),
]

URBAN_VIEW_OPTIONS: List[Tuple[str, str]] = [
    ("Camera share by jurisdiction", "urbanization"),
    ("Camera vs police", "comparison"),
]

CHART_TYPE_OPTIONS: List[Tuple[str, str]] = [
    ("Line", "line"),
    ("Bar", "bar"),
]

DEFAULT_METRIC: str = "fines"
PLAY_INTERVAL_SECONDS: float = 1.5
DEFAULT_URBAN_VIEW: str = "urbanization"

PIE_COLORS: List[str] = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
    "#F1948A", "#73C6B6",
]

JURISDICTION_COLORS: Dict[str, str] = {
    "NSW": "#ff6b6b",
    "VIC": "#4ecdc4",
    "QLD": "#45b7d1",
    "WA": "#96ceb4",
    "SA": "#feca57",
    "TAS": "#ff9ff3",
    "ACT": "#54a0ff",
    "NT": "#5f27cd",
}

NO_DATA_MESSAGE: str = "No data available for current selection"
