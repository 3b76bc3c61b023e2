from choro.data.observation import Observation
from choro.data.observation_index import ObservationIndex
from choro.data.trend import NoTrendData, TrendPoint, TrendSeriesBuilder


def test_series_sorted_by_year(index):
    series = TrendSeriesBuilder(index).build("A", "X", "Rate")
    assert series.has_data
    assert [p.year for p in series.points] == [2018, 2019, 2020]
    assert series.year_extent == (2018, 2020)
    assert series.max_point == TrendPoint(2019, 15.0)
    assert series.min_point == TrendPoint(2020, 10.0)


def test_extrema(index):
    series = TrendSeriesBuilder(index).build("B", "X", "Rate")
    assert series.max_point == TrendPoint(2020, 40.0)
    assert series.min_point == TrendPoint(2019, 35.0)
    assert series.value_at(2019) == 35.0
    assert series.value_at(2017) is None
    assert len(series) == 2


def test_entity_without_numeric_rows_is_explicit(index):
    result = TrendSeriesBuilder(index).build("Z", "X", "Rate")
    assert isinstance(result, NoTrendData)
    assert not result.has_data
    assert result.entity_code == "Z"


def test_only_non_numeric_rows_is_no_data():
    index = ObservationIndex([Observation("A", "Alpha", "X", "Rate", 2000, None)])
    assert not TrendSeriesBuilder(index).build("A", "X", "Rate").has_data


def test_max_ties_resolve_to_earliest_year():
    rows = [
        Observation("A", "Alpha", "X", "Rate", 2012, 5.0),
        Observation("A", "Alpha", "X", "Rate", 2010, 5.0),
        Observation("A", "Alpha", "X", "Rate", 2011, 1.0),
    ]
    series = TrendSeriesBuilder(ObservationIndex(rows)).build("A", "X", "Rate")
    assert series.max_point == TrendPoint(2010, 5.0)
    assert series.min_point == TrendPoint(2011, 1.0)
