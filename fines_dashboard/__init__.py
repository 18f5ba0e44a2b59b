"""fines_dashboard package initializer.

This package holds the data side of the speeding fines dashboards:
dataset loading, the shared filter/aggregate engine, per-page
derivations, and plotly figure builders used by the Shiny app.  See
individual module docstrings for details.
"""
