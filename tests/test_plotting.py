"""Smoke tests for the figure builders."""

import plotly.graph_objects as go

from fines_dashboard import explorer, map_view, pie, plotting, timeline, urban
from fines_dashboard.drilldown import DrillDown


def test_empty_entries_give_message_figure():
    fig = plotting.create_bar_chart([], DrillDown().view_spec())
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == "No data available for current selection"


def test_overview_bar_chart(age_group_frame):
    state = DrillDown()
    fig = plotting.create_bar_chart(state.apply(age_group_frame), state.view_spec())

    bar = fig.data[0]
    assert list(bar.x) == ["NSW", "QLD", "VIC"]
    assert fig.layout.title.text == "<b>Total Fines by Jurisdiction (All Ages)</b>"
    assert fig.layout.xaxis.title.text == "Jurisdiction"


def test_detail_bar_chart_carries_age_group_details(age_group_frame):
    state = DrillDown().select("NSW")
    fig = plotting.create_bar_chart(
        state.apply(age_group_frame),
        state.view_spec(),
        details=state.detail_rows(age_group_frame),
    )

    bar = fig.data[0]
    assert list(bar.x) == ["26-39", "17-25", "40-64"]
    assert len(bar.customdata) == 3
    assert len(bar.customdata[0]) == 6
    assert "Arrest Rate" in bar.hovertemplate


def test_pie_chart_labels_show_unrenormalized_shares(detection_frame):
    entries = pie.pie_entries(detection_frame)
    fig = plotting.create_pie_chart(entries, pie.pie_view_spec())

    assert list(fig.data[0].labels) == ["Camera", "Police", "Mobile camera"]
    assert list(fig.data[0].text) == ["50.0%", "46.0%", "4.0%"]


def test_timeline_chart(timeline_frame):
    series = timeline.add_growth(timeline_frame)
    fig = plotting.create_timeline_chart(
        series, peaks=timeline.significant_peaks(series), selected_year=2021
    )

    assert len(fig.data) == 1
    assert len(fig.layout.annotations) == 3
    assert len(fig.layout.shapes) == 1


def test_monthly_chart_types(fines_frame):
    entries = explorer.monthly_fines(fines_frame, explorer.explorer_filters())
    assert plotting.create_monthly_chart(entries, "bar").data[0].type == "bar"
    assert plotting.create_monthly_chart(entries, "line").data[0].type == "scatter"


def test_choropleth_layers(map_frame, geojson):
    states = map_view.state_fines(map_frame, 2022)
    fig = plotting.create_choropleth(states, geojson, selected="Victoria")

    assert len(fig.data) == 2
    assert list(fig.data[1].marker.line.width) == [1, 3, 1]


def test_choropleth_without_boundaries(map_frame):
    fig = plotting.create_choropleth(
        map_view.state_fines(map_frame), {"type": "FeatureCollection", "features": []}
    )
    assert fig.layout.annotations[0].text == "Map boundaries not available"


def test_urban_chart_views(urban_frame):
    comparison = urban.comparison_frame(urban_frame)
    single = plotting.create_urban_chart(urban_frame, comparison, "urbanization")
    grouped = plotting.create_urban_chart(urban_frame, comparison, "comparison")

    assert len(single.data) == 1
    assert {trace.name for trace in grouped.data} == {"Camera", "Police"}
