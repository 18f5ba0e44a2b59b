"""Two-level jurisdiction / age-group navigation for the bar chart.

The state is an immutable value: ``Overview`` when nothing is selected,
``Detail(category)`` otherwise.  Transitions return a new state and each
state knows the filters and view needed to aggregate it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

import pandas as pd

from .aggregation import DerivedEntry, Exclude, Rows, ViewSpec, apply, filter_rows
from .config import ALL_AGES, ALL_OPTION


@dataclass(frozen=True)
class DrillDown:
    selected: Optional[str] = None
    top_field: str = "jurisdiction"
    detail_field: str = "age_group"
    value_field: str = "fines"
    all_label: str = ALL_AGES

    @property
    def is_detail(self) -> bool:
        return self.selected is not None

    def select(self, category: Optional[str]) -> "DrillDown":
        """Move to ``Detail(category)``; "All" or an empty choice resets."""
        if category is None or str(category).strip() in ("", ALL_OPTION, "All"):
            return self.reset()
        return replace(self, selected=str(category))

    def reset(self) -> "DrillDown":
        return replace(self, selected=None)

    def filters(self) -> Dict[str, Any]:
        if self.selected is None:
            return {self.detail_field: self.all_label}
        return {
            self.top_field: self.selected,
            self.detail_field: Exclude(self.all_label),
        }

    def view_spec(self) -> ViewSpec:
        if self.selected is None:
            return ViewSpec(
                group_by=self.top_field,
                value_field=self.value_field,
                title="Total Fines by Jurisdiction (All Ages)",
                x_label="Jurisdiction",
                y_label="Total Fines",
            )
        return ViewSpec(
            group_by=self.detail_field,
            value_field=self.value_field,
            title=f"Speeding Fines by Age Group for {self.selected}",
            x_label="Age Group",
            y_label="Total Fines",
        )

    def apply(self, rows: Rows) -> List[DerivedEntry]:
        return apply(rows, self.filters(), self.view_spec())

    def detail_rows(self, rows: Rows) -> pd.DataFrame:
        """Rows behind the current bars, used for hover details."""
        return filter_rows(rows, self.filters())


def jurisdiction_choices(rows: Rows, drilldown: DrillDown = DrillDown()) -> List[str]:
    """Jurisdictions that have an all-ages total, in first-seen order."""
    frame = filter_rows(rows, {drilldown.detail_field: drilldown.all_label})
    if frame.empty:
        return []
    return [str(value) for value in frame[drilldown.top_field].dropna().unique()]
