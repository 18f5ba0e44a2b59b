"""Tests for the shared filter / group / rank engine."""

import pandas as pd
import pytest

from fines_dashboard.aggregation import (
    MISSING_CATEGORY,
    DateRange,
    DerivedEntry,
    Exclude,
    InvalidFilterField,
    UnknownField,
    ViewSpec,
    apply,
    entries_to_frame,
    filter_rows,
)

BY_JURISDICTION = ViewSpec(group_by="jurisdiction", value_field="fines")


# ── Scenarios ────────────────────────────────────────────────────────────────


def test_overview_scenario(overview_rows):
    result = apply(overview_rows, {"age_group": "All ages"}, BY_JURISDICTION)

    assert [e.category for e in result] == ["NSW", "VIC"]
    assert [e.value for e in result] == [100, 50]
    assert result[0].percentage == pytest.approx(66.6667, abs=1e-3)
    assert result[1].percentage == pytest.approx(33.3333, abs=1e-3)
    assert [e.rank for e in result] == [0, 1]


def test_drilldown_scenario(drilldown_rows):
    spec = ViewSpec(group_by="age_group", value_field="fines")
    filters = {"jurisdiction": "NSW", "age_group": Exclude("All ages")}

    result = apply(drilldown_rows, filters, spec)

    assert [(e.category, e.value) for e in result] == [("26-39", 60), ("17-25", 40)]
    assert [e.percentage for e in result] == pytest.approx([60.0, 40.0])


def _three_way_rows():
    return [
        {"method": "A", "fines": 50},
        {"method": "B", "fines": 46},
        {"method": "C", "fines": 4},
    ]


def test_threshold_keeps_entries_at_the_boundary():
    spec = ViewSpec(group_by="method", value_field="fines", min_share_percent=4)
    result = apply(_three_way_rows(), None, spec)
    assert [e.category for e in result] == ["A", "B", "C"]


def test_threshold_drops_small_entries_without_renormalizing():
    spec = ViewSpec(group_by="method", value_field="fines", min_share_percent=5)
    result = apply(_three_way_rows(), None, spec)

    assert [e.category for e in result] == ["A", "B"]
    assert [e.percentage for e in result] == pytest.approx([50.0, 46.0])
    assert [e.rank for e in result] == [0, 1]


# ── Properties ───────────────────────────────────────────────────────────────


@pytest.fixture
def mixed_rows():
    return pd.DataFrame(
        {
            "jurisdiction": ["NSW", "VIC", "NSW", "QLD", "WA", "VIC", "TAS"],
            "year": [2020, 2020, 2021, 2021, 2021, 2022, 2022],
            "fines": [10.5, 20, 30, 5, 5, 12, 0.25],
        }
    )


def test_sum_of_values_matches_input_total(mixed_rows):
    result = apply(mixed_rows, None, BY_JURISDICTION)
    assert sum(e.value for e in result) == pytest.approx(mixed_rows["fines"].sum())


def test_percentages_sum_to_one_hundred(mixed_rows):
    result = apply(mixed_rows, {"year": 2021}, BY_JURISDICTION)
    assert sum(e.percentage for e in result) == pytest.approx(100.0)


def test_apply_is_idempotent(mixed_rows):
    spec = ViewSpec(group_by="jurisdiction", value_field="fines", min_share_percent=10)
    assert apply(mixed_rows, {}, spec) == apply(mixed_rows, {}, spec)


@pytest.mark.parametrize("threshold", [1, 10, 25, 40])
def test_threshold_law(mixed_rows, threshold):
    spec = ViewSpec(
        group_by="jurisdiction", value_field="fines", min_share_percent=threshold
    )
    result = apply(mixed_rows, None, spec)
    assert all(e.percentage >= threshold for e in result)
    assert sum(e.value for e in result) <= mixed_rows["fines"].sum()


def test_value_order_is_descending_with_alphabetical_ties():
    rows = [
        {"jurisdiction": "WA", "fines": 5},
        {"jurisdiction": "QLD", "fines": 5},
        {"jurisdiction": "NSW", "fines": 9},
        {"jurisdiction": "ACT", "fines": 1},
    ]
    result = apply(rows, None, BY_JURISDICTION)

    assert [e.category for e in result] == ["NSW", "QLD", "WA", "ACT"]
    assert [e.rank for e in result] == [0, 1, 2, 3]


def test_alphabetical_order(mixed_rows):
    spec = ViewSpec(
        group_by="jurisdiction", value_field="fines", sort_order="alphabetical"
    )
    result = apply(mixed_rows, None, spec)

    assert [e.category for e in result] == ["NSW", "QLD", "TAS", "VIC", "WA"]
    assert [e.rank for e in result] == list(range(5))


# ── Edge cases ───────────────────────────────────────────────────────────────


def test_empty_input_returns_empty_list():
    assert apply([], {"anything": 1}, BY_JURISDICTION) == []
    assert apply(pd.DataFrame(columns=["jurisdiction", "fines"]), None, BY_JURISDICTION) == []


def test_unknown_group_field_raises():
    with pytest.raises(UnknownField) as excinfo:
        apply([{"jurisdiction": "NSW", "fines": 1}], None, ViewSpec("state", "fines"))
    assert excinfo.value.field == "state"
    assert "jurisdiction" in excinfo.value.available


def test_unknown_value_field_raises():
    with pytest.raises(UnknownField):
        apply([{"jurisdiction": "NSW", "fines": 1}], None, ViewSpec("jurisdiction", "fine"))


def test_unknown_filter_field_raises():
    with pytest.raises(InvalidFilterField) as excinfo:
        apply([{"jurisdiction": "NSW", "fines": 1}], {"AGE": "All"}, BY_JURISDICTION)
    assert excinfo.value.field == "AGE"


def test_field_present_on_only_some_rows_is_known():
    rows = [{"jurisdiction": "NSW", "fines": 1}, {"jurisdiction": "VIC", "arrests": 3}]
    result = apply(rows, None, ViewSpec("jurisdiction", "arrests"))
    assert {e.category: e.value for e in result} == {"VIC": 3.0, "NSW": 0.0}


def test_non_numeric_values_count_as_zero():
    rows = [
        {"jurisdiction": "NSW", "fines": "12"},
        {"jurisdiction": "NSW", "fines": "n/a"},
        {"jurisdiction": "VIC", "fines": None},
    ]
    result = apply(rows, None, BY_JURISDICTION)
    assert {e.category: e.value for e in result} == {"NSW": 12.0, "VIC": 0.0}


def test_zero_total_gives_zero_percentages():
    rows = [{"jurisdiction": "NSW", "fines": 0}, {"jurisdiction": "VIC", "fines": 0}]
    result = apply(rows, None, BY_JURISDICTION)
    assert [e.percentage for e in result] == [0.0, 0.0]


def test_filters_matching_nothing_return_empty(mixed_rows):
    assert apply(mixed_rows, {"jurisdiction": "NT"}, BY_JURISDICTION) == []


def test_missing_categories_are_grouped():
    rows = [{"jurisdiction": None, "fines": 2}, {"jurisdiction": "NSW", "fines": 3}]
    result = apply(rows, None, BY_JURISDICTION)
    assert {e.category for e in result} == {MISSING_CATEGORY, "NSW"}


def test_wildcard_filter_matches_everything(mixed_rows):
    assert apply(mixed_rows, {"year": None}, BY_JURISDICTION) == apply(
        mixed_rows, None, BY_JURISDICTION
    )


def test_text_filter_matches_numeric_column(mixed_rows):
    assert apply(mixed_rows, {"year": "2021"}, BY_JURISDICTION) == apply(
        mixed_rows, {"year": 2021}, BY_JURISDICTION
    )


def test_collection_filter_is_membership(mixed_rows):
    result = apply(mixed_rows, {"jurisdiction": ["NSW", "WA"]}, BY_JURISDICTION)
    assert [e.category for e in result] == ["NSW", "WA"]


def test_date_range_filter():
    rows = pd.DataFrame(
        {
            "start_date": pd.to_datetime(["2023-01-01", "2023-06-01", "2024-01-01"]),
            "jurisdiction": ["NSW", "VIC", "QLD"],
            "fines": [1, 2, 3],
        }
    )
    result = apply(
        rows,
        {"start_date": DateRange(start="2023-03-01", end="2023-12-31")},
        BY_JURISDICTION,
    )
    assert [e.category for e in result] == ["VIC"]


def test_open_ended_date_range():
    rows = [
        {"start_date": "2023-01-01", "jurisdiction": "NSW", "fines": 1},
        {"start_date": "not a date", "jurisdiction": "VIC", "fines": 2},
        {"start_date": "2024-02-01", "jurisdiction": "QLD", "fines": 3},
    ]
    result = apply(rows, {"start_date": DateRange(start="2023-06-01")}, BY_JURISDICTION)
    assert [e.category for e in result] == ["QLD"]


def test_share_basis_all_uses_unfiltered_total(overview_rows):
    spec = ViewSpec(group_by="jurisdiction", value_field="fines", share_basis="all")
    result = apply(overview_rows, {"jurisdiction": "VIC"}, spec)
    assert result[0].percentage == pytest.approx(100 * 50 / 150)


def test_drop_empty_removes_zero_groups():
    rows = [{"m": "A", "v": 3}, {"m": "B", "v": 0}]
    result = apply(rows, None, ViewSpec(group_by="m", value_field="v", drop_empty=True))
    assert [e.category for e in result] == ["A"]


def test_integral_float_categories_render_without_decimal():
    rows = pd.DataFrame({"year": [2020.0, 2021.0], "fines": [1, 2]})
    result = apply(rows, None, ViewSpec(group_by="year", value_field="fines"))
    assert [e.category for e in result] == ["2021", "2020"]


def test_result_does_not_mutate_rows(mixed_rows):
    before = mixed_rows.copy()
    apply(mixed_rows, {"year": 2021}, BY_JURISDICTION)
    pd.testing.assert_frame_equal(mixed_rows, before)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"sort_order": "random"},
        {"share_basis": "subtotal"},
        {"min_share_percent": -1},
    ],
)
def test_view_spec_rejects_bad_options(kwargs):
    with pytest.raises(ValueError):
        ViewSpec(group_by="a", value_field="b", **kwargs)


def test_filter_rows_and_entries_frame(overview_rows):
    filtered = filter_rows(overview_rows, {"jurisdiction": "NSW"})
    assert list(filtered["fines"]) == [100]

    frame = entries_to_frame([DerivedEntry("NSW", 100.0, 100.0, 0)])
    assert list(frame.columns) == ["category", "value", "percentage", "rank"]
    assert entries_to_frame([]).empty


def test_text_filter_matches_float_column_with_gaps():
    rows = pd.DataFrame(
        {"jurisdiction": ["NSW", "VIC"], "year": [2021.0, None], "fines": [1, 2]}
    )
    assert rows["year"].dtype == float

    result = apply(rows, {"year": "2021"}, BY_JURISDICTION)
    assert [(e.category, e.value) for e in result] == [("NSW", 1.0)]


def test_collection_filter_coerces_text_like_scalar_filter(mixed_rows):
    assert apply(mixed_rows, {"year": ["2021"]}, BY_JURISDICTION) == apply(
        mixed_rows, {"year": "2021"}, BY_JURISDICTION
    )
    assert apply(mixed_rows, {"year": ["2020", 2022]}, BY_JURISDICTION) == apply(
        mixed_rows, {"year": [2020, 2022]}, BY_JURISDICTION
    )


def test_rows_without_fields_raise_unknown_field():
    with pytest.raises(UnknownField):
        apply([{}], None, BY_JURISDICTION)
    with pytest.raises(InvalidFilterField):
        filter_rows([{}], {"jurisdiction": "NSW"})
