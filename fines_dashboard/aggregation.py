"""Filter, group and rank rows into the shape a chart needs.

Every dashboard page reduces its rows the same way: keep the rows that
match the active filters, sum one numeric field per category, express
each category as a share of the filtered total, optionally drop small
shares, then sort and rank what is left.  :func:`apply` performs that
pass and returns a fresh list of :class:`DerivedEntry` on every call; it
keeps no state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .config import (
    DEFAULT_SHARE_BASIS,
    DEFAULT_SORT_ORDER,
    ShareBasis,
    SortOrder,
)

logger = logging.getLogger(__name__)

MISSING_CATEGORY: str = "Unknown"

Rows = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]
Filters = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class AggregationError(Exception):
    """Base class for invalid aggregation requests."""

    kind = "field"

    def __init__(self, field: str, available: Iterable[Any]) -> None:
        self.field = field
        self.available = sorted(str(name) for name in available)
        super().__init__(
            f"Unknown {self.kind} {field!r}; available fields: {self.available}"
        )


class UnknownField(AggregationError):
    """The view references a field absent from the row schema."""

    kind = "group/value field"


class InvalidFilterField(AggregationError):
    """A filter references a field absent from the row schema."""

    kind = "filter field"


# ---------------------------------------------------------------------------
# Filter predicates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateRange:
    """Inclusive date window; either bound may be left open."""

    start: Optional[Any] = None
    end: Optional[Any] = None

    def mask(self, column: pd.Series) -> pd.Series:
        dates = pd.to_datetime(column, errors="coerce")
        keep = dates.notna()
        if self.start is not None:
            keep &= dates >= pd.Timestamp(self.start)
        if self.end is not None:
            keep &= dates <= pd.Timestamp(self.end)
        return keep


@dataclass(frozen=True)
class Exclude:
    """Keep every row whose value differs from ``value``."""

    value: Any

    def mask(self, column: pd.Series) -> pd.Series:
        return ~_equals(column, self.value)


# ---------------------------------------------------------------------------
# View model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ViewSpec:
    """How rows reduce to categories for one chart.

    ``min_share_percent`` of ``None`` or ``0`` keeps every category.
    ``share_basis`` picks the percentage denominator: ``"filtered"`` uses
    the total of the filtered rows, ``"all"`` the total of every row.
    """

    group_by: str
    value_field: str
    sort_order: SortOrder = DEFAULT_SORT_ORDER
    min_share_percent: Optional[float] = None
    drop_empty: bool = False
    share_basis: ShareBasis = DEFAULT_SHARE_BASIS
    title: str = ""
    x_label: str = ""
    y_label: str = ""

    def __post_init__(self) -> None:
        if self.sort_order not in ("value", "alphabetical"):
            raise ValueError(f"Unsupported sort order: {self.sort_order!r}")
        if self.share_basis not in ("filtered", "all"):
            raise ValueError(f"Unsupported share basis: {self.share_basis!r}")
        if self.min_share_percent is not None and self.min_share_percent < 0:
            raise ValueError("min_share_percent must be non-negative")


@dataclass(frozen=True)
class DerivedEntry:
    category: str
    value: float
    percentage: float
    rank: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def as_frame(rows: Rows) -> pd.DataFrame:
    """Return ``rows`` as a DataFrame; mappings become one row each."""
    if isinstance(rows, pd.DataFrame):
        return rows
    return pd.DataFrame.from_records(list(rows))


def numeric_values(series: pd.Series) -> pd.Series:
    """Coerce to float, treating non-numeric or missing values as 0."""
    return pd.to_numeric(series, errors="coerce").fillna(0).astype(float)


def category_label(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return MISSING_CATEGORY
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, pd.Timestamp) and value == value.normalize():
        return value.strftime("%Y-%m-%d")
    return str(value)


def _equals(column: pd.Series, value: Any) -> pd.Series:
    # CSV sources hand filters over as text: "2021" must match 2021 and 2021.0.
    if isinstance(value, str) and not (
        pd.api.types.is_object_dtype(column) or pd.api.types.is_string_dtype(column)
    ):
        as_text = column.astype(str) == value.strip()
        if pd.api.types.is_numeric_dtype(column) and not pd.api.types.is_bool_dtype(column):
            number = pd.to_numeric(value.strip(), errors="coerce")
            if not pd.isna(number):
                return (column == number).fillna(False).astype(bool) | as_text
        return as_text
    return (column == value).fillna(False).astype(bool)


def _constraint_mask(column: pd.Series, constraint: Any) -> pd.Series:
    if hasattr(constraint, "mask"):
        return constraint.mask(column)
    if isinstance(constraint, (list, tuple, set, frozenset)):
        mask = pd.Series(False, index=column.index, dtype=bool)
        for member in constraint:
            mask |= _equals(column, member)
        return mask
    return _equals(column, constraint)


def validate_filters(frame: pd.DataFrame, filters: Filters) -> None:
    for field in filters:
        if field not in frame.columns:
            raise InvalidFilterField(field, frame.columns)


def filter_mask(frame: pd.DataFrame, filters: Filters) -> pd.Series:
    """Boolean mask of rows satisfying every active constraint.

    A constraint of ``None`` is a wildcard and matches every row.
    """
    validate_filters(frame, filters)
    mask = pd.Series(True, index=frame.index, dtype=bool)
    for field, constraint in filters.items():
        if constraint is None:
            continue
        mask &= _constraint_mask(frame[field], constraint)
    return mask


def filter_rows(rows: Rows, filters: Optional[Filters] = None) -> pd.DataFrame:
    """Return the rows matching ``filters`` as a new DataFrame."""
    frame = as_frame(rows)
    if len(frame.index) == 0:
        return frame.copy()
    return frame.loc[filter_mask(frame, filters or {})].copy()


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def apply(
    rows: Rows,
    filters: Optional[Filters],
    spec: ViewSpec,
) -> List[DerivedEntry]:
    """Aggregate ``rows`` into ranked entries according to ``spec``.

    Parameters
    ----------
    rows : DataFrame or iterable of mappings
        Loaded observations.  An empty input yields an empty list.
    filters : mapping or None
        Field -> accepted value.  Values may be a plain value (equality),
        a collection (membership), :class:`DateRange`, :class:`Exclude`
        or ``None`` (no constraint).
    spec : ViewSpec
        Grouping field, summed field, ordering and share threshold.

    Returns
    -------
    list of DerivedEntry
        Entries ordered by ``spec.sort_order`` with ranks ``0..n-1``.

    Raises
    ------
    InvalidFilterField
        A filter names a field that no row carries.
    UnknownField
        ``spec.group_by`` or ``spec.value_field`` names such a field.
    """
    frame = as_frame(rows)
    if len(frame.index) == 0:
        return []

    filters = dict(filters or {})
    validate_filters(frame, filters)
    for field in (spec.group_by, spec.value_field):
        if field not in frame.columns:
            raise UnknownField(field, frame.columns)

    filtered = frame.loc[filter_mask(frame, filters)]
    values = numeric_values(filtered[spec.value_field])
    categories = filtered[spec.group_by].map(category_label)

    if spec.share_basis == "all":
        grand_total = float(numeric_values(frame[spec.value_field]).sum())
    else:
        grand_total = float(values.sum())

    grouped = (
        values.groupby(categories, sort=False)
        .sum()
        .rename_axis("category")
        .reset_index(name="value")
    )
    if grand_total:
        grouped["percentage"] = 100.0 * grouped["value"] / grand_total
    else:
        grouped["percentage"] = 0.0

    if spec.drop_empty:
        grouped = grouped[grouped["value"] > 0]
    if spec.min_share_percent:
        grouped = grouped[grouped["percentage"] >= spec.min_share_percent]

    if spec.sort_order == "alphabetical":
        grouped = grouped.sort_values("category", kind="mergesort")
    else:
        grouped = grouped.sort_values(
            ["value", "category"], ascending=[False, True], kind="mergesort"
        )

    entries = [
        DerivedEntry(
            category=str(row.category),
            value=float(row.value),
            percentage=float(row.percentage),
            rank=rank,
        )
        for rank, row in enumerate(grouped.itertuples(index=False))
    ]
    logger.debug(
        "Aggregated %d of %d rows into %d '%s' groups (total %s=%.2f)",
        len(filtered),
        len(frame),
        len(entries),
        spec.group_by,
        spec.value_field,
        grand_total,
    )
    return entries


def entries_to_frame(entries: List[DerivedEntry]) -> pd.DataFrame:
    """Tabulate entries for plotting or display."""
    return pd.DataFrame(
        [
            {
                "category": entry.category,
                "value": entry.value,
                "percentage": entry.percentage,
                "rank": entry.rank,
            }
            for entry in entries
        ],
        columns=["category", "value", "percentage", "rank"],
    )
