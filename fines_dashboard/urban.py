"""Camera versus police enforcement by jurisdiction."""

from typing import Dict, Optional

import pandas as pd

URBAN_VIEWS = ("urbanization", "comparison")


def enforcement_summary(df: pd.DataFrame) -> Optional[Dict[str, object]]:
    """Headline statistics for the enforcement page."""
    if df.empty:
        return None
    camera_total = float(df["camera_fines"].sum())
    police_total = float(df["police_fines"].sum())
    most = df.loc[df["camera_percentage"].idxmax()]
    least = df.loc[df["camera_percentage"].idxmin()]
    return {
        "camera_fines": camera_total,
        "police_fines": police_total,
        "total_fines": camera_total + police_total,
        "avg_camera_percentage": float(df["camera_percentage"].mean()),
        "avg_police_percentage": float(df["police_percentage"].mean()),
        "max_camera": (most["jurisdiction"], float(most["camera_percentage"])),
        "min_camera": (least["jurisdiction"], float(least["camera_percentage"])),
        "jurisdictions": int(len(df)),
    }


def comparison_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Long format with one row per jurisdiction and enforcement method."""
    columns = ["jurisdiction", "method", "percentage", "fines"]
    if df.empty:
        return pd.DataFrame(columns=columns)
    camera = df[["jurisdiction", "camera_percentage", "camera_fines"]].rename(
        columns={"camera_percentage": "percentage", "camera_fines": "fines"}
    )
    camera["method"] = "Camera"
    police = df[["jurisdiction", "police_percentage", "police_fines"]].rename(
        columns={"police_percentage": "percentage", "police_fines": "fines"}
    )
    police["method"] = "Police"
    return pd.concat([camera, police], ignore_index=True)[columns]
