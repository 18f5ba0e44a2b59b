"""Owning state holder for one dashboard view.

UI events produce a new filter set or view; the controller runs
:func:`~fines_dashboard.aggregation.apply` and hands the result to every
subscriber.  Nothing is kept at module level.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from .aggregation import (
    AggregationError,
    DerivedEntry,
    Filters,
    Rows,
    ViewSpec,
    apply,
    as_frame,
)
from .drilldown import DrillDown

logger = logging.getLogger(__name__)

Subscriber = Callable[[List[DerivedEntry], ViewSpec], None]


class DashboardController:
    def __init__(
        self,
        rows: Rows,
        spec: ViewSpec,
        filters: Optional[Filters] = None,
    ) -> None:
        self._rows: pd.DataFrame = as_frame(rows)
        self._spec = spec
        self._filters: Dict[str, Any] = dict(filters or {})
        self._subscribers: List[Subscriber] = []

    @property
    def rows(self) -> pd.DataFrame:
        return self._rows

    @property
    def spec(self) -> ViewSpec:
        return self._spec

    @property
    def filters(self) -> Dict[str, Any]:
        return dict(self._filters)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; the returned function unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def update(
        self,
        *,
        filters: Optional[Filters] = None,
        spec: Optional[ViewSpec] = None,
    ) -> List[DerivedEntry]:
        """Replace filters and/or view, re-aggregate and notify subscribers.

        The new state is only committed when aggregation succeeds.
        """
        new_filters = dict(filters) if filters is not None else self._filters
        new_spec = spec if spec is not None else self._spec
        entries = apply(self._rows, new_filters, new_spec)
        self._filters = new_filters
        self._spec = new_spec
        self._notify(entries)
        return entries

    def set_filter(self, field: str, value: Any) -> List[DerivedEntry]:
        return self.update(filters={**self._filters, field: value})

    def clear_filter(self, field: str) -> List[DerivedEntry]:
        remaining = {k: v for k, v in self._filters.items() if k != field}
        return self.update(filters=remaining)

    def refresh(self) -> List[DerivedEntry]:
        return self.update()

    def _notify(self, entries: List[DerivedEntry]) -> None:
        logger.debug(
            "Publishing %d entries to %d subscriber(s)",
            len(entries),
            len(self._subscribers),
        )
        for callback in list(self._subscribers):
            callback(entries, self._spec)


class DrillDownController(DashboardController):
    """Controller for the jurisdiction bar chart and its age-group detail."""

    def __init__(self, rows: Rows, state: Optional[DrillDown] = None) -> None:
        self._state = state or DrillDown()
        super().__init__(rows, self._state.view_spec(), self._state.filters())

    @property
    def state(self) -> DrillDown:
        return self._state

    def select(self, category: Optional[str]) -> List[DerivedEntry]:
        return self._transition(self._state.select(category))

    def reset(self) -> List[DerivedEntry]:
        return self._transition(self._state.reset())

    def detail_rows(self) -> pd.DataFrame:
        return self._state.detail_rows(self._rows)

    def _transition(self, state: DrillDown) -> List[DerivedEntry]:
        previous, self._state = self._state, state
        try:
            return self.update(filters=state.filters(), spec=state.view_spec())
        except AggregationError:
            self._state = previous
            raise
