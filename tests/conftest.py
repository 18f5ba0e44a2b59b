"""
Shared fixtures for the fines dashboard tests.

Frames mirror the shape the loaders produce (snake_case columns, numeric
columns coerced), so page logic can be tested without touching disk.
"""

import pandas as pd
import pytest


@pytest.fixture
def overview_rows():
    return [
        {"jurisdiction": "NSW", "age_group": "All ages", "fines": 100},
        {"jurisdiction": "VIC", "age_group": "All ages", "fines": 50},
    ]


@pytest.fixture
def drilldown_rows(overview_rows):
    return overview_rows + [
        {"jurisdiction": "NSW", "age_group": "17-25", "fines": 40},
        {"jurisdiction": "NSW", "age_group": "26-39", "fines": 60},
    ]


@pytest.fixture
def age_group_frame():
    return pd.DataFrame(
        [
            ("NSW", "All ages", 1000, 80, 20, 0.02, 0.08, 1.2),
            ("VIC", "All ages", 600, 30, 10, 0.01, 0.05, 1.1),
            ("QLD", "All ages", 800, 40, 15, 0.02, 0.05, 1.3),
            ("NSW", "17-25", 300, 30, 8, 0.03, 0.1, 1.4),
            ("NSW", "26-39", 450, 35, 7, 0.02, 0.08, 1.2),
            ("NSW", "40-64", 250, 15, 5, 0.02, 0.06, 1.1),
            ("VIC", "17-25", 200, 10, 4, 0.02, 0.05, 1.0),
        ],
        columns=[
            "jurisdiction",
            "age_group",
            "fines",
            "charges",
            "arrests",
            "arrest_rate",
            "charges_rate",
            "fines_per_case",
        ],
    )


@pytest.fixture
def detection_frame():
    return pd.DataFrame(
        {
            "method": ["Camera", "Police", "Mobile camera", "Other"],
            "fines": [5000, 4600, 400, 0],
            "arrests": [0, 900, 0, 100],
            "charges": [0, 700, 10, 290],
        }
    )


@pytest.fixture
def timeline_frame():
    return pd.DataFrame(
        {
            "year": [2019, 2020, 2021, 2022],
            "fines": [1000, 800, 1000, 1200],
        }
    )


@pytest.fixture
def fines_frame():
    rows = [
        ("2023-01-05", "NSW", "17-25", 100, 2, 1, 1),
        ("2023-01-20", "NSW", "26-39", 50, 0, 0, 0),
        ("2023-02-10", "VIC", "17-25", 70, 1, 2, 1),
        ("2024-03-01", "VIC", "40-64", 200, 3, 1, 0),
        ("2024-03-15", "NSW", "40-64", 30, 0, 0, 0),
        ("2024-06-30", "QLD", "26-39", 90, 1, 0, 1),
    ]
    df = pd.DataFrame(
        rows,
        columns=[
            "start_date",
            "jurisdiction",
            "age_group",
            "fines",
            "arrests",
            "charges",
            "prediction",
        ],
    )
    df["start_date"] = pd.to_datetime(df["start_date"])
    df["end_date"] = df["start_date"] + pd.Timedelta(days=30)
    df["year"] = df["start_date"].dt.year
    return df


@pytest.fixture
def map_frame():
    return pd.DataFrame(
        {
            "year": [2022, 2022, 2022, 2023, 2023],
            "jurisdiction": ["NSW", "VIC", "QLD", "NSW", "VIC"],
            "fines": [600, 300, 100, 400, 100],
            "arrests": [60, 30, 10, 40, 5],
        }
    )


@pytest.fixture
def geojson():
    def feature(name):
        return {
            "type": "Feature",
            "properties": {"STATE_NAME": name},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[140, -30], [141, -30], [141, -31], [140, -30]]],
            },
        }

    return {
        "type": "FeatureCollection",
        "features": [
            feature("New South Wales"),
            feature("Victoria"),
            feature("Queensland"),
            feature("Tasmania"),
        ],
    }


@pytest.fixture
def urban_frame():
    return pd.DataFrame(
        {
            "jurisdiction": ["NSW", "VIC", "NT"],
            "camera_fines": [800.0, 900.0, 50.0],
            "police_fines": [200.0, 100.0, 150.0],
            "total_fines": [1000.0, 1000.0, 200.0],
            "camera_percentage": [80.0, 90.0, 25.0],
            "police_percentage": [20.0, 10.0, 75.0],
            "urban_score": [7.5, 8.0, 2.0],
        }
    )
