import pandas as pd
from shiny import reactive, render
from shiny.express import input, ui
from shinywidgets import render_plotly

from fines_dashboard import explorer, map_view, pie, timeline, urban
from fines_dashboard.config import (
    ALL_AGES,
    ALL_OPTION,
    CHART_TYPE_OPTIONS,
    DEFAULT_METRIC,
    DEFAULT_SORT_ORDER,
    DEFAULT_URBAN_VIEW,
    METRIC_OPTIONS,
    NO_DATA_MESSAGE,
    PLAY_INTERVAL_SECONDS,
    SORT_OPTIONS,
    TIME_RANGE_OPTIONS,
    URBAN_VIEW_OPTIONS,
)
from fines_dashboard.dashboard import DrillDownController
from fines_dashboard.data_manager import load_payload
from fines_dashboard.drilldown import jurisdiction_choices
from fines_dashboard.formatting import (
    format_change,
    format_count,
    format_percent,
    format_value,
)
from fines_dashboard.plotting import (
    create_bar_chart,
    create_breakdown_chart,
    create_choropleth,
    create_monthly_chart,
    create_pie_chart,
    create_timeline_chart,
    create_urban_chart,
)

# Helpers for UI mapping
METRIC_MAPPING = {value: label for label, value in METRIC_OPTIONS}
SORT_MAPPING = {value: label for label, value in SORT_OPTIONS}
TIME_RANGE_MAPPING = {value: label for label, value in TIME_RANGE_OPTIONS}
CHART_TYPE_MAPPING = {value: label for label, value in CHART_TYPE_OPTIONS}
URBAN_VIEW_MAPPING = {value: label for label, value in URBAN_VIEW_OPTIONS}

# ======================================================
#  DATA
# ======================================================
# Loaded once; rows stay read-only for the life of the app.
payload = load_payload()

AGE_ROWS: pd.DataFrame = payload["age_groups"]
PIE_ROWS: pd.DataFrame = payload["detection_methods"]
FINES_ROWS: pd.DataFrame = payload["fines"]
MAP_ROWS: pd.DataFrame = payload["jurisdiction_fines"]
GEOJSON = payload["geojson"]
URBAN_ROWS: pd.DataFrame = payload["urban"]

TIMELINE_SERIES = timeline.add_growth(payload["timeline"])
TIMELINE_YEARS = [int(y) for y in TIMELINE_SERIES["year"]]
TIMELINE_PEAKS = timeline.significant_peaks(TIMELINE_SERIES)
TIMELINE_STATS = timeline.overall_stats(TIMELINE_SERIES)

URBAN_SUMMARY = urban.enforcement_summary(URBAN_ROWS)
URBAN_COMPARISON = urban.comparison_frame(URBAN_ROWS)

MAP_YEARS = map_view.year_options(MAP_ROWS)


def _distinct(df: pd.DataFrame, col: str) -> list:
    if df.empty:
        return []
    return sorted(str(v) for v in df[col].dropna().unique())


def _no_data():
    return ui.tags.p(NO_DATA_MESSAGE, class_="text-muted text-center")


def _stat(label: str, value: str):
    return ui.tags.div(
        ui.tags.span(label, class_="stat-label"),
        ui.tags.strong(f" {value}", class_="stat-value"),
        class_="stat-item",
    )


# ======================================================
#  REACTIVE STATE
# ======================================================
bar_controller = DrillDownController(AGE_ROWS)
bar_view = reactive.Value((bar_controller.refresh(), bar_controller.spec))
bar_controller.subscribe(lambda entries, spec: bar_view.set((entries, spec)))

timeline_playing = reactive.Value(False)
timeline_play_index = reactive.Value(0)

map_selection = reactive.Value(None)


# ======================================================
#  UI LAYOUT
# ======================================================
ui.page_opts(
    title="Speeding Fines in Australia",
    fillable=False,
    fillable_mobile=True,
    full_width=True,
    id="page",
    lang="en",
)

with ui.navset_tab(id="pages"):
    # --------------------------------------------------
    #  Age groups (drill-down bar chart)
    # --------------------------------------------------
    with ui.nav_panel("Age Groups"):
        with ui.layout_sidebar():
            with ui.sidebar(open="always", position="right"):
                ui.input_select(
                    "jurisdiction",
                    "Jurisdiction",
                    ["All", *jurisdiction_choices(AGE_ROWS)],
                    selected="All",
                )
                ui.input_action_button("reset_bar", "Reset", class_="btn-primary mt-3")

            @render_plotly
            def bar_chart():
                entries, spec = bar_view.get()
                details = (
                    bar_controller.detail_rows() if bar_controller.state.is_detail else None
                )
                return create_bar_chart(entries, spec, details=details)

    # --------------------------------------------------
    #  Detection methods (pie chart)
    # --------------------------------------------------
    with ui.nav_panel("Detection Methods"):
        with ui.layout_sidebar():
            with ui.sidebar(open="always", position="right"):
                ui.input_select(
                    "pie_metric", "Data type", METRIC_MAPPING, selected=DEFAULT_METRIC
                )
                ui.input_select(
                    "pie_sort", "Sort order", SORT_MAPPING, selected=DEFAULT_SORT_ORDER
                )

                @render.ui
                def pie_summary():
                    stats = pie.pie_stats(pie_data())
                    if stats is None:
                        return _no_data()
                    return ui.tags.div(
                        _stat("Total:", format_value(stats["total"])),
                        _stat("Largest segment:", str(stats["largest"])),
                    )

            @render_plotly
            def pie_chart():
                metric = input.pie_metric()
                return create_pie_chart(pie_data(), pie.pie_view_spec(metric))

    # --------------------------------------------------
    #  Timeline
    # --------------------------------------------------
    with ui.nav_panel("Timeline"):
        with ui.layout_sidebar():
            with ui.sidebar(open="always", position="right"):
                ui.input_select(
                    "timeline_year",
                    "Year",
                    [str(y) for y in TIMELINE_YEARS],
                    selected=str(TIMELINE_YEARS[0]) if TIMELINE_YEARS else None,
                )
                with ui.div(class_="d-flex gap-2 flex-wrap"):
                    ui.input_action_button("play_timeline", "Play")
                    ui.input_action_button("pause_timeline", "Pause")
                    ui.input_action_button("next_timeline", "Next")
                    ui.input_action_button("reset_timeline", "Reset")

                @render.ui
                def timeline_overview():
                    if TIMELINE_STATS is None:
                        return _no_data()
                    s = TIMELINE_STATS
                    return ui.tags.div(
                        ui.tags.h5(f"{s['first_year']}-{s['last_year']} Overview"),
                        _stat("Total:", format_value(s["total"])),
                        _stat("Avg/Year:", format_value(s["average"])),
                        _stat(
                            "Peak:",
                            f"{s['peak_year']} ({format_value(s['peak_fines'])})",
                        ),
                        _stat("Growth:", f"{s['total_growth']}% overall"),
                    )

            @render_plotly
            def timeline_chart():
                return create_timeline_chart(
                    TIMELINE_SERIES,
                    peaks=TIMELINE_PEAKS,
                    selected_year=selected_timeline_year(),
                )

            @render.ui
            def year_details():
                year = selected_timeline_year()
                summary = (
                    timeline.year_summary(TIMELINE_SERIES, year) if year else None
                )
                if summary is None:
                    return _no_data()
                trend = "Increasing" if summary["performance"] == "increasing" else "Decreasing"
                return ui.tags.div(
                    ui.tags.h4(f"{summary['year']} Summary"),
                    _stat("Total Fines:", format_count(summary["fines"])),
                    _stat(
                        "Growth Rate:",
                        format_change(summary["growth_rate"], percent=True),
                    ),
                    _stat("Change from Previous:", format_change(summary["growth"])),
                    _stat("Trend:", trend),
                    class_="year-detail-card",
                )

    # --------------------------------------------------
    #  Fines explorer
    # --------------------------------------------------
    with ui.nav_panel("Explorer"):
        with ui.layout_sidebar():
            with ui.sidebar(open="always", position="right"):
                ui.input_select(
                    "explorer_jurisdiction",
                    "Jurisdiction",
                    {ALL_OPTION: "All", **{j: j for j in _distinct(FINES_ROWS, "jurisdiction")}},
                )
                ui.input_select(
                    "explorer_age_group",
                    "Age group",
                    {ALL_OPTION: "All", **{a: a for a in _distinct(FINES_ROWS, "age_group")}},
                )
                ui.input_select("explorer_time_range", "Time range", TIME_RANGE_MAPPING)
                ui.input_select("explorer_chart_type", "Chart type", CHART_TYPE_MAPPING)
                ui.input_action_button(
                    "reset_explorer", "Reset filters", class_="btn-primary mt-3"
                )

                @render.ui
                def explorer_summary():
                    stats = explorer.explorer_stats(FINES_ROWS, explorer_filters())
                    if stats is None:
                        return _no_data()
                    return ui.tags.div(
                        _stat("Total fines:", format_count(stats["total_fines"])),
                        _stat(
                            "Peak month:",
                            f"{stats['peak_month']} ({format_count(stats['peak_month_fines'])} fines)",
                        ),
                        _stat("Dominant age group:", str(stats["dominant_age_group"])),
                        _stat("Prediction rate:", format_percent(stats["prediction_rate"])),
                    )

            @render_plotly
            def monthly_chart():
                entries = explorer.monthly_fines(FINES_ROWS, explorer_filters())
                return create_monthly_chart(entries, input.explorer_chart_type())

            with ui.layout_columns(col_widths=[6, 6]):

                @render_plotly
                def age_group_breakdown():
                    entries = explorer.fines_by(FINES_ROWS, explorer_filters(), "age_group")
                    return create_breakdown_chart(
                        [e for e in entries if e.category != ALL_AGES],
                        explorer.fines_by_spec("age_group"),
                    )

                @render_plotly
                def jurisdiction_breakdown():
                    entries = explorer.fines_by(FINES_ROWS, explorer_filters(), "jurisdiction")
                    return create_breakdown_chart(
                        entries, explorer.fines_by_spec("jurisdiction")
                    )

            @render.data_frame
            def recent_table():
                recent = explorer.recent_rows(FINES_ROWS, explorer_filters())
                if recent.empty:
                    return render.DataGrid(pd.DataFrame())
                table = pd.DataFrame(
                    {
                        "Date": recent["start_date"].dt.strftime("%d/%m/%Y"),
                        "Jurisdiction": recent["jurisdiction"],
                        "Age Group": recent["age_group"],
                        "Fines": recent["fines"].map(format_count),
                        "Arrests": recent["arrests"].astype(int),
                        "Charges": recent["charges"].astype(int),
                        "Risk": recent["risk"],
                    }
                )
                return render.DataGrid(table)

    # --------------------------------------------------
    #  Map
    # --------------------------------------------------
    with ui.nav_panel("Map"):
        with ui.layout_sidebar():
            with ui.sidebar(open="always", position="right"):
                ui.input_select(
                    "map_year",
                    "Year",
                    {ALL_OPTION: "All Years", **{str(y): str(y) for y in MAP_YEARS}},
                )
                ui.input_select(
                    "map_state",
                    "State",
                    {"": "None", **{s: s for s in map_view.geojson_states(GEOJSON)}},
                )

                @render.ui
                def map_info():
                    details = map_view.state_details(map_states(), map_selection.get())
                    if details is None:
                        return ui.tags.p("Select a state to see its share of fines.")
                    return ui.tags.div(
                        ui.tags.strong(details["state"]),
                        _stat("Total Fines:", format_count(details["fines"])),
                        _stat("Percentage of Total Fines:", f"{details['percentage']:.2f}%"),
                    )

            @render_plotly
            def choropleth():
                return create_choropleth(
                    map_states(), GEOJSON, selected=map_selection.get()
                )

    # --------------------------------------------------
    #  Urban enforcement
    # --------------------------------------------------
    with ui.nav_panel("Urban Enforcement"):
        with ui.layout_sidebar():
            with ui.sidebar(open="always", position="right"):
                ui.input_radio_buttons(
                    "urban_view", "View", URBAN_VIEW_MAPPING, selected=DEFAULT_URBAN_VIEW
                )

                @render.ui
                def urban_summary():
                    s = URBAN_SUMMARY
                    if s is None:
                        return _no_data()
                    most, least = s["max_camera"], s["min_camera"]
                    return ui.tags.div(
                        _stat("Total Camera Fines:", format_value(s["camera_fines"])),
                        _stat("Total Police Fines:", format_value(s["police_fines"])),
                        _stat(
                            "Avg Camera Enforcement:",
                            format_percent(s["avg_camera_percentage"]),
                        ),
                        _stat(
                            "Avg Police Enforcement:",
                            format_percent(s["avg_police_percentage"]),
                        ),
                        _stat("Most fines (Camera %):", f"{most[0]}: {most[1]:.1f}%"),
                        _stat("Least fines (Camera %):", f"{least[0]}: {least[1]:.1f}%"),
                        _stat("Total Jurisdictions:", str(s["jurisdictions"])),
                    )

            @render_plotly
            def urban_chart():
                return create_urban_chart(URBAN_ROWS, URBAN_COMPARISON, input.urban_view())


# ======================================================
#  REACTIVE CALCS
# ======================================================
@reactive.calc
def pie_data():
    return pie.pie_entries(PIE_ROWS, input.pie_metric(), input.pie_sort())


@reactive.calc
def selected_timeline_year():
    try:
        return int(input.timeline_year())
    except (TypeError, ValueError):
        return None


@reactive.calc
def explorer_filters():
    return explorer.explorer_filters(
        input.explorer_jurisdiction(),
        input.explorer_age_group(),
        input.explorer_time_range(),
    )


@reactive.calc
def map_states():
    return map_view.state_fines(MAP_ROWS, map_view.parse_year(input.map_year()))


# ======================================================
#  EVENTS
# ======================================================
@reactive.effect
@reactive.event(input.jurisdiction)
def _drill_down():
    bar_controller.select(input.jurisdiction())


@reactive.effect
@reactive.event(input.reset_bar)
def _reset_drill_down():
    bar_controller.reset()
    ui.update_select("jurisdiction", selected="All")


@reactive.effect
@reactive.event(input.play_timeline)
def _play_timeline():
    timeline_play_index.set(0)
    timeline_playing.set(True)


@reactive.effect
@reactive.event(input.pause_timeline)
def _pause_timeline():
    timeline_playing.set(False)


@reactive.effect
@reactive.event(input.next_timeline)
def _next_timeline():
    year = timeline.next_year(TIMELINE_SERIES, selected_timeline_year())
    if year is not None:
        ui.update_select("timeline_year", selected=str(year))


@reactive.effect
@reactive.event(input.reset_timeline)
def _reset_timeline():
    timeline_playing.set(False)
    if TIMELINE_YEARS:
        ui.update_select("timeline_year", selected=str(TIMELINE_YEARS[0]))


@reactive.effect
def _advance_timeline():
    # Steps through every year, looping, while playback is on.
    if not timeline_playing.get() or not TIMELINE_YEARS:
        return
    reactive.invalidate_later(PLAY_INTERVAL_SECONDS)
    with reactive.isolate():
        index = timeline_play_index.get()
        timeline_play_index.set(index + 1)
    ui.update_select(
        "timeline_year", selected=str(TIMELINE_YEARS[index % len(TIMELINE_YEARS)])
    )


@reactive.effect
@reactive.event(input.reset_explorer)
def _reset_explorer():
    ui.update_select("explorer_jurisdiction", selected=ALL_OPTION)
    ui.update_select("explorer_age_group", selected=ALL_OPTION)
    ui.update_select("explorer_time_range", selected=ALL_OPTION)
    ui.update_select("explorer_chart_type", selected="line")


@reactive.effect
@reactive.event(input.map_state)
def _select_state():
    map_selection.set(input.map_state() or None)


@reactive.effect
def _sync_state_select():
    ui.update_select("map_state", selected=map_selection.get() or "")


def _on_state_click(trace, points, _state):
    if not points.point_inds:
        return
    clicked = trace.locations[points.point_inds[0]]
    with reactive.isolate():
        current = map_selection.get()
    map_selection.set(map_view.toggle_selection(current, clicked))


@reactive.effect
def _register_map_clicks():
    widget = choropleth.widget
    if widget is None:
        return
    for trace in widget.data:
        trace.on_click(_on_state_click)
