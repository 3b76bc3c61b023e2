import math

from choro.data.trend import TrendPoint, TrendSeries
from choro.render.color_scale import ThresholdColorScale
from choro.render.legend import build_legend, format_number
from choro.render.tooltip import TooltipPayload


def test_format_number():
    assert format_number(1000000) == "1,000,000"
    assert format_number(18.0) == "18"
    assert format_number(0.25) == "0.25"


def test_legend_without_scale_has_only_no_data():
    entries = build_legend(None, "#cccccc")
    assert len(entries) == 1
    assert entries[0].is_no_data
    assert entries[0].color == "#cccccc"


def test_fixed_legend_labels():
    scale = ThresholdColorScale.fixed([0, 1, 5000], ["#a", "#b", "#c"])
    entries = build_legend(scale)
    assert [e.label for e in entries] == ["No data", "0 – 1", "1 – 5,000", "≥ 5,000"]
    assert entries[-1].upper == math.inf
    assert [e.color for e in entries[1:]] == ["#a", "#b", "#c"]


def test_tooltip_texts():
    series = TrendSeries(
        "A", "X", "Rate",
        points=(TrendPoint(2019, 90.0), TrendPoint(2020, 10.0)),
        max_point=TrendPoint(2019, 90.0),
        min_point=TrendPoint(2020, 10.0),
    )
    tip = TooltipPayload("A", "Alpha", 2020, "Rate", 10.0, series)
    assert tip.has_value
    assert tip.value_text == "10"
    assert tip.max_text == "90 (2019)"


def test_tooltip_without_value():
    tip = TooltipPayload("D", "Delta", 2020, "Rate")
    assert not tip.has_value
    assert tip.value_text == "No data"
    assert tip.max_text == ""


def test_large_fractional_values_stay_in_fixed_point():
    assert format_number(2376543.71) == "2,376,543.71"
    assert format_number(12345.5) == "12,345.5"
    assert format_number(0.004) == "0"


def test_tooltip_for_large_values():
    series = TrendSeries(
        "CHN", "smoking", "Deaths",
        points=(TrendPoint(2019, 2376543.71),),
        max_point=TrendPoint(2019, 2376543.71),
        min_point=TrendPoint(2019, 2376543.71),
    )
    tip = TooltipPayload("CHN", "China", 2019, "Deaths", 2376543.71, series)
    assert tip.value_text == "2,376,543.71"
    assert tip.max_text == "2,376,543.71 (2019)"
