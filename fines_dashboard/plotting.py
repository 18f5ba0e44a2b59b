from typing import Any, Dict, List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .aggregation import DerivedEntry, ViewSpec, entries_to_frame
from .config import JURISDICTION_COLORS, NO_DATA_MESSAGE, PIE_COLORS
from .formatting import contrast_color, format_axis, format_value
from .map_view import STATE_NAME_KEY, geojson_states


# ============================================================
# Configuration / constants
# ============================================================

CATEGORY_COLORS: List[str] = px.colors.qualitative.D3

HOVER_TEMPLATE_BAR = (
    "<b>%{x}</b><br>"
    "Total Fines: %{y:,}<br>"
    "Share: %{customdata[0]:.1f}%<extra></extra>"
)

HOVER_TEMPLATE_DETAIL = (
    "<b>Age Group: %{x}</b><br>"
    "Fines: %{y:,}<br>"
    "Charges: %{customdata[1]:,}<br>"
    "Arrests: %{customdata[2]:,}<br>"
    "Arrest Rate: %{customdata[3]}<br>"
    "Charges Rate: %{customdata[4]}<br>"
    "Fines per Case: %{customdata[5]}<extra></extra>"
)

HOVER_TEMPLATE_TIMELINE = (
    "<b>%{x}</b><br>"
    "%{y:,} fines<br>"
    "%{customdata[0]:+.1f}% from previous year<br>"
    "%{customdata[1]:+,} change<extra></extra>"
)

LAYOUT_DEFAULTS: Dict[str, Any] = dict(
    plot_bgcolor="#f5f7fb",
    margin=dict(t=80, l=80, r=40, b=60),
    font=dict(size=13),
)

NO_DATA_COLOR = "#cccccc"


# ============================================================
# Helper functions
# ============================================================


def _category_colors(categories: List[str], palette: List[str]) -> List[str]:
    return [palette[i % len(palette)] for i in range(len(categories))]


def empty_figure(message: str = NO_DATA_MESSAGE) -> go.Figure:
    """Blank figure carrying a centred message."""
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        x=0.5,
        y=0.5,
        xref="paper",
        yref="paper",
        showarrow=False,
        font=dict(size=16, color="#b0b0b0"),
    )
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    return fig


def _axis_ticks(max_value: float, steps: int = 5) -> Dict[str, List[Any]]:
    if max_value <= 0:
        return {}
    values = [max_value * i / steps for i in range(steps + 1)]
    return dict(tickvals=values, ticktext=[format_axis(v) for v in values])


# ============================================================
# Page figures
# ============================================================


def create_bar_chart(
    entries: List[DerivedEntry],
    spec: ViewSpec,
    *,
    details: Optional[pd.DataFrame] = None,
) -> go.Figure:
    """
    Bar per category, labelled with its compact value.

    Parameters
    ----------
    entries : list of DerivedEntry
        Aggregated bars in display order.
    spec : ViewSpec
        Supplies the title and axis labels.
    details : pd.DataFrame, optional
        Age-group rows for the drill-down view.  When given, hover text
        shows charges, arrests and the per-case rates of each bar.
    """
    if not entries:
        return empty_figure()

    frame = entries_to_frame(entries)
    customdata = frame[["percentage"]].to_numpy()
    hover = HOVER_TEMPLATE_BAR
    if details is not None and not details.empty:
        lookup = details.drop_duplicates("age_group").set_index("age_group")
        detail_cols = ["charges", "arrests", "arrest_rate", "charges_rate", "fines_per_case"]
        extra = lookup.reindex(frame["category"])[detail_cols].fillna(0)
        customdata = pd.concat(
            [frame[["percentage"]], extra.reset_index(drop=True)], axis=1
        ).to_numpy()
        hover = HOVER_TEMPLATE_DETAIL

    fig = go.Figure(
        go.Bar(
            x=frame["category"],
            y=frame["value"],
            marker_color=_category_colors(list(frame["category"]), CATEGORY_COLORS),
            text=[format_axis(v) for v in frame["value"]],
            textposition="outside",
            textfont=dict(size=15, color="#07204a"),
            customdata=customdata,
            hovertemplate=hover,
        )
    )
    fig.update_layout(
        title=dict(text=f"<b>{spec.title}</b>", x=0.5),
        xaxis_title=spec.x_label,
        yaxis_title=spec.y_label,
        **LAYOUT_DEFAULTS,
    )
    fig.update_yaxes(rangemode="tozero", **_axis_ticks(float(frame["value"].max())))
    return fig


def create_pie_chart(entries: List[DerivedEntry], spec: ViewSpec) -> go.Figure:
    """
    Pie of the kept segments.

    Slice labels show each segment's share of the full total, so the
    labels need not add up to 100% once small segments are dropped.
    """
    if not entries:
        return empty_figure()

    frame = entries_to_frame(entries)
    colors = _category_colors(list(frame["category"]), PIE_COLORS)
    fig = go.Figure(
        go.Pie(
            labels=frame["category"],
            values=frame["value"],
            sort=False,
            direction="clockwise",
            marker=dict(colors=colors, line=dict(color="rgba(255,255,255,0.3)", width=3)),
            text=[f"{p:.1f}%" for p in frame["percentage"]],
            textinfo="text",
            textfont=dict(color=[contrast_color(c) for c in colors], size=14),
            customdata=[format_value(v) for v in frame["value"]],
            hovertemplate=(
                "<b>%{label}</b><br>Value: %{customdata}<br>"
                "Percentage: %{text}<extra></extra>"
            ),
        )
    )
    fig.update_layout(
        title=dict(text=f"<b>{spec.title}</b>", x=0.5),
        height=600,
        legend=dict(orientation="v", x=1.02, y=0.5),
    )
    return fig


def create_timeline_chart(
    series: pd.DataFrame,
    *,
    peaks: Optional[List[Dict[str, object]]] = None,
    selected_year: Optional[int] = None,
) -> go.Figure:
    """
    Area/line chart of fines per year with peak annotations.

    ``series`` must already carry the ``growth`` and ``growth_rate``
    columns from :func:`fines_dashboard.timeline.add_growth`.
    """
    if series.empty:
        return empty_figure()

    # ------------------------------------------------------------------
    # 1. Line, area and points
    # ------------------------------------------------------------------
    fig = go.Figure(
        go.Scatter(
            x=series["year"],
            y=series["fines"],
            mode="lines+markers",
            line=dict(width=3, color="#67c1ff", shape="spline"),
            marker=dict(size=9, color="#c46bff"),
            fill="tozeroy",
            fillcolor="rgba(103,193,255,0.15)",
            customdata=series[["growth_rate", "growth"]].to_numpy(),
            hovertemplate=HOVER_TEMPLATE_TIMELINE,
            name="Fines",
        )
    )

    # ------------------------------------------------------------------
    # 2. Annotations and the selected year
    # ------------------------------------------------------------------
    for peak in peaks or []:
        fig.add_annotation(
            x=peak["year"],
            y=peak["fines"],
            text=peak["reason"],
            showarrow=True,
            arrowhead=2,
            ay=-40,
            font=dict(size=11, color="#ff6b6b"),
        )

    if selected_year is not None:
        fig.add_vline(
            x=selected_year,
            line_width=2,
            line_dash="dash",
            line_color="black",
            opacity=0.6,
        )

    fig.update_xaxes(title_text="Year", tickmode="linear", dtick=1)
    fig.update_yaxes(
        title_text="Number of Fines (Millions)",
        **_axis_ticks(float(series["fines"].max())),
    )
    fig.update_layout(showlegend=False, **LAYOUT_DEFAULTS)
    return fig


def create_monthly_chart(entries: List[DerivedEntry], chart_type: str = "line") -> go.Figure:
    if not entries:
        return empty_figure()
    frame = entries_to_frame(entries)
    if chart_type == "bar":
        trace = go.Bar(x=frame["category"], y=frame["value"], marker_color="#67c1ff")
    else:
        trace = go.Scatter(
            x=frame["category"],
            y=frame["value"],
            mode="lines+markers",
            line=dict(width=3, color="#67c1ff"),
        )
    fig = go.Figure(trace)
    fig.update_layout(xaxis_title="Month", yaxis_title="Fines", **LAYOUT_DEFAULTS)
    return fig


def create_breakdown_chart(entries: List[DerivedEntry], spec: ViewSpec) -> go.Figure:
    """Horizontal bars for the explorer's age-group / jurisdiction panels."""
    if not entries:
        return empty_figure()
    frame = entries_to_frame(entries)
    colors = [JURISDICTION_COLORS.get(c, "#67c1ff") for c in frame["category"]]
    fig = go.Figure(
        go.Bar(
            x=frame["value"],
            y=frame["category"],
            orientation="h",
            marker_color=colors,
            opacity=0.8,
        )
    )
    fig.update_layout(title=spec.title, xaxis_title=spec.y_label, **LAYOUT_DEFAULTS)
    fig.update_yaxes(autorange="reversed")
    return fig


def create_choropleth(
    states: pd.DataFrame,
    geojson: Dict[str, Any],
    *,
    selected: Optional[str] = None,
) -> go.Figure:
    """
    States shaded by fines; states without data are drawn grey.
    """
    names = geojson_states(geojson)
    if not names:
        return empty_figure("Map boundaries not available")

    featureidkey = f"properties.{STATE_NAME_KEY}"
    fig = go.Figure(
        go.Choropleth(
            geojson=geojson,
            locations=names,
            z=[0] * len(names),
            featureidkey=featureidkey,
            colorscale=[[0, NO_DATA_COLOR], [1, NO_DATA_COLOR]],
            showscale=False,
            hoverinfo="skip",
            marker_line_color="#ffffff",
        )
    )
    if not states.empty:
        fig.add_trace(
            go.Choropleth(
                geojson=geojson,
                locations=states["state"],
                z=states["fines"],
                featureidkey=featureidkey,
                colorscale="Blues",
                zmin=0,
                customdata=states[["arrests", "percentage"]].to_numpy(),
                hovertemplate=(
                    "<b>%{location}</b><br>Fines: %{z:,}<br>"
                    "Arrests: %{customdata[0]:,}<br>"
                    "Share of fines: %{customdata[1]:.2f}%<extra></extra>"
                ),
                marker_line_color="#ffffff",
                marker_line_width=[3 if s == selected else 1 for s in states["state"]],
                colorbar=dict(title="Fines"),
            )
        )
    fig.update_geos(fitbounds="locations", visible=False)
    fig.update_layout(height=600, margin=dict(t=20, l=0, r=0, b=0))
    return fig


def create_urban_chart(df: pd.DataFrame, comparison: pd.DataFrame, view: str) -> go.Figure:
    """Camera share per jurisdiction, or camera vs police side by side."""
    if df.empty:
        return empty_figure()

    if view == "comparison":
        fig = px.bar(
            comparison,
            x="jurisdiction",
            y="percentage",
            color="method",
            barmode="group",
            custom_data=["fines"],
            color_discrete_map={"Camera": "#67c1ff", "Police": "#c46bff"},
            title="Camera vs Police Enforcement Distribution",
        )
        fig.update_traces(
            hovertemplate=(
                "<b>%{x}</b><br>Enforcement: %{y:.1f}%<br>"
                "%{customdata[0]:,} fines<extra></extra>"
            )
        )
        y_title = "Enforcement Percentage (%)"
    else:
        fig = go.Figure(
            go.Bar(
                x=df["jurisdiction"],
                y=df["camera_percentage"],
                marker=dict(
                    color=df["camera_percentage"],
                    colorscale="RdBu",
                    cmin=0,
                    cmax=100,
                ),
                text=[f"{p:.1f}%" for p in df["camera_percentage"]],
                textposition="outside",
                customdata=df[
                    ["police_percentage", "urban_score", "camera_fines", "police_fines"]
                ].to_numpy(),
                hovertemplate=(
                    "<b>%{x}</b><br>Camera Enforcement: %{y:.1f}%<br>"
                    "Police Enforcement: %{customdata[0]:.1f}%<br>"
                    "Jurisdiction Score: %{customdata[1]:.1f}<br>"
                    "Total Camera Fines: %{customdata[2]:,}<br>"
                    "Total Police Fines: %{customdata[3]:,}<extra></extra>"
                ),
            )
        )
        fig.update_layout(title="Jurisdiction fines level by Camera %")
        y_title = "Camera Enforcement Percentage (%)"

    fig.update_yaxes(range=[0, 100], title_text=y_title)
    fig.update_xaxes(title_text="Jurisdiction")
    fig.update_layout(**LAYOUT_DEFAULTS)
    return fig
