"""Data manager for loading and caching the dashboard datasets.

All page datasets are read once per process and kept in memory,
read-only, for the lifetime of the app.  ``load_payload(force_reload=True)``
drops the cached copy and reads every source again, which is handy after
the CSV files in ``FINES_DATA_DIR`` have been refreshed.
"""

import logging
from functools import lru_cache
from typing import Any, Dict

from . import loaders

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _load_all() -> Dict[str, Any]:
    """Read every page dataset."""
    return {
        "age_groups": loaders.load_age_groups(),
        "detection_methods": loaders.load_detection_methods(),
        "timeline": loaders.load_timeline(),
        "fines": loaders.load_fines(),
        "jurisdiction_fines": loaders.load_jurisdiction_fines(),
        "geojson": loaders.load_geojson(),
        "urban": loaders.load_urban(),
    }


def load_payload(force_reload: bool = False) -> Dict[str, Any]:
    """
    Return the cached datasets, loading them on first use.

    Parameters
    ----------
    force_reload : bool, optional
        If ``True``, discard the cached datasets and read the sources again.

    Returns
    -------
    Dict[str, Any]
        DataFrames keyed by page dataset name, plus the ``"geojson"``
        mapping used by the map page.
    """
    if force_reload:
        _load_all.cache_clear()

    payload = _load_all()
    empty = [name for name, df in payload.items() if name != "geojson" and df.empty]
    if empty:
        logger.warning("No rows loaded for: %s", ", ".join(empty))
    return payload
