"""
Command-line aggregation of a fines CSV.

Loads one CSV, applies ``--filter`` / ``--exclude`` constraints, groups by
one column while summing another, and prints the ranked result:

    python -m fines_dashboard.main data/Age_Group.csv \
        --group-by JURISDICTION --value fines --filter "AGE_GROUP=All ages"
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from .aggregation import AggregationError, Exclude, ViewSpec, apply, entries_to_frame
from .config import DEFAULT_SHARE_BASIS, DEFAULT_SORT_ORDER
from .loaders import LOAD_ERRORS, read_csv

logger = logging.getLogger(__name__)


def _split_pair(text: str) -> List[str]:
    field, sep, value = text.partition("=")
    if not sep or not field:
        raise argparse.ArgumentTypeError(f"Expected FIELD=VALUE, got {text!r}")
    return [field.strip(), value.strip()]


def _percent(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a number, got {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"Must be non-negative, got {text!r}")
    return value


def build_filters(
    include: Sequence[List[str]], exclude: Sequence[List[str]]
) -> Dict[str, Any]:
    filters: Dict[str, Any] = {}
    for field, value in include:
        filters[field] = value
    for field, value in exclude:
        filters[field] = Exclude(value)
    return filters


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Group a fines CSV by one column, sum another, and print each "
            "category's total, share of the filtered total and rank."
        )
    )
    parser.add_argument("source", help="Path or URL of the CSV file.")
    parser.add_argument("--group-by", required=True, help="Column to group by.")
    parser.add_argument("--value", required=True, help="Numeric column to sum.")
    parser.add_argument(
        "--filter",
        type=_split_pair,
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Keep rows where FIELD equals VALUE (repeatable).",
    )
    parser.add_argument(
        "--exclude",
        type=_split_pair,
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Drop rows where FIELD equals VALUE (repeatable).",
    )
    parser.add_argument(
        "--sort",
        choices=["value", "alphabetical"],
        default=DEFAULT_SORT_ORDER,
        help=f"Result ordering (default: '{DEFAULT_SORT_ORDER}').",
    )
    parser.add_argument(
        "--min-share",
        type=_percent,
        default=None,
        help="Drop categories below this percentage of the total.",
    )
    parser.add_argument(
        "--share-basis",
        choices=["filtered", "all"],
        default=DEFAULT_SHARE_BASIS,
        help="Percentage denominator: filtered rows or all rows.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        rows = read_csv(args.source)
    except LOAD_ERRORS as exc:
        logger.error("Could not load %s: %s", args.source, exc)
        return 1

    spec = ViewSpec(
        group_by=args.group_by,
        value_field=args.value,
        sort_order=args.sort,
        min_share_percent=args.min_share,
        share_basis=args.share_basis,
    )
    try:
        entries = apply(rows, build_filters(args.filter, args.exclude), spec)
    except AggregationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if not entries:
        print("No data available for current selection.")
        return 0

    table = entries_to_frame(entries)
    print(f"\n--- {args.value} by {args.group_by} ---")
    print(table.to_string(index=False, float_format=lambda v: f"{v:,.2f}"))
    print(f"\nCategories: {len(entries)} | Total: {table['value'].sum():,.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
