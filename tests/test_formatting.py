import pytest

from fines_dashboard.formatting import (
    contrast_color,
    format_axis,
    format_change,
    format_count,
    format_percent,
    format_value,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (4867138, "4.9M"),
        (3400, "3.4K"),
        (512, "512"),
        (2.5, "2.5"),
    ],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_format_value_precision():
    assert format_value(4867138, precision=2) == "4.87M"


def test_format_axis():
    assert format_axis(1_200_000) == "1.2M"
    assert format_axis(250_000) == "250k"
    assert format_axis(0) == "0"


def test_counts_percent_and_change():
    assert format_count(1234567.4) == "1,234,567"
    assert format_percent(12.345) == "12.3%"
    assert format_change(12.5, percent=True) == "+12.5%"
    assert format_change(-63208) == "-63,208"
    assert format_change(0) == "0"


@pytest.mark.parametrize(
    "color, expected",
    [
        ("#FFEAA7", "#000000"),
        ("#5f27cd", "#FFFFFF"),
        ("#000000", "#FFFFFF"),
    ],
)
def test_contrast_color(color, expected):
    assert contrast_color(color) == expected
