"""Number and colour formatting shared by the charts and summaries."""

from typing import Union

Number = Union[int, float]


def format_value(value: Number, precision: int = 1) -> str:
    """Compact display value.

    Examples:
        format_value(4867138) -> "4.9M"
        format_value(4867138, precision=2) -> "4.87M"
        format_value(3400) -> "3.4K"
        format_value(512) -> "512"
    """
    if value >= 1_000_000:
        return f"{value / 1_000_000:.{precision}f}M"
    if value >= 1_000:
        return f"{value / 1_000:.{precision}f}K"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_axis(value: Number) -> str:
    """Axis tick label: 1.2M, 250k, or the plain value below a thousand."""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.0f}k"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_count(value: Number) -> str:
    return f"{int(round(value)):,}"


def format_percent(value: Number, precision: int = 1) -> str:
    return f"{value:.{precision}f}%"


def format_change(value: Number, *, percent: bool = False) -> str:
    """Signed change, e.g. "+12.5%" or "-63,208"."""
    sign = "+" if value > 0 else ""
    if percent:
        return f"{sign}{value:.1f}%"
    return f"{sign}{int(round(value)):,}"


def contrast_color(hex_color: str) -> str:
    """Black or white text, whichever reads better on ``hex_color``."""
    r = int(hex_color[1:3], 16)
    g = int(hex_color[3:5], 16)
    b = int(hex_color[5:7], 16)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return "#000000" if luminance > 0.5 else "#FFFFFF"
