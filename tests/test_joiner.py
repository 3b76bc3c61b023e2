import pytest

from choro.render.color_scale import ThresholdColorScale
from choro.render.joiner import NO_DATA_PATTERN, FillMode, GeometryJoiner


class SpyScale(ThresholdColorScale):
    def __init__(self):
        super().__init__([0, 10], ["#lo", "#hi"])
        self.calls = 0

    def color_of(self, value):
        self.calls += 1
        return super().color_of(value)

    def bucket_of(self, value):
        self.calls += 1
        return super().bucket_of(value)


def by_id(states):
    return {s.feature_id: s for s in states}


def test_world_scope_colours_and_no_data(features):
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    states = by_id(GeometryJoiner().resolve_fills(
        features, {"A": 10.0, "B": 40.0, "C": 90.0}, "world", scale,
    ))
    assert [states[k].fill_mode for k in "ABC"] == [FillMode.COLORED] * 3
    assert states["B"].color == scale.color_of(40)
    assert states["B"].value == 40.0
    assert states["D"].fill_mode is FillMode.NO_DATA
    assert states["D"].color == NO_DATA_PATTERN
    assert all(s.opacity == 1.0 for s in states.values())


def test_one_state_per_feature_in_order(features):
    states = GeometryJoiner().resolve_fills(features, {}, "world")
    assert [s.feature_id for s in states] == [f.feature_id for f in features]


def test_region_is_case_insensitive_and_suppresses_outside(features):
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    states = by_id(GeometryJoiner().resolve_fills(
        features, {"A": 10.0, "C": 90.0}, "EUROPE", scale,
    ))
    assert states["A"].fill_mode is FillMode.COLORED
    assert states["B"].fill_mode is FillMode.NO_DATA
    for fid in "CDE":
        assert states[fid].fill_mode is FillMode.SUPPRESSED
        assert states[fid].color is None
        assert states[fid].opacity == 0.1


def test_empty_value_map_never_consults_the_scale(features):
    spy = SpyScale()
    states = GeometryJoiner().resolve_fills(features, {}, "world", spy)
    assert spy.calls == 0
    assert {s.fill_mode for s in states} == {FillMode.NO_DATA}


def test_empty_value_map_in_region_keeps_suppression(features):
    states = by_id(GeometryJoiner().resolve_fills(features, {}, "asia"))
    assert states["C"].fill_mode is FillMode.NO_DATA
    assert states["A"].fill_mode is FillMode.SUPPRESSED


def test_missing_scale_with_values_is_an_error(features):
    with pytest.raises(ValueError):
        GeometryJoiner().resolve_fills(features, {"A": 1.0}, "world")


def test_custom_no_data_fill(features):
    states = GeometryJoiner(no_data_fill="#cccccc").resolve_fills(features, {}, "world")
    assert all(s.color == "#cccccc" for s in states)


def test_emphasize_bucket(features):
    joiner = GeometryJoiner()
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    states = joiner.resolve_fills(features, {"A": 10.0, "B": 40.0, "C": 90.0}, "world", scale)
    out = by_id(joiner.emphasize(states, 2, scale))
    assert out["B"].opacity == 1.0
    assert out["A"].opacity == 0.1
    assert out["D"].opacity == 0.1
    assert out["A"].color == by_id(states)["A"].color


def test_emphasize_no_data_and_keep_suppressed(features):
    joiner = GeometryJoiner()
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    states = joiner.resolve_fills(features, {"A": 10.0}, "europe", scale)
    out = by_id(joiner.emphasize(states, None, scale))
    assert out["B"].opacity == 1.0
    assert out["A"].opacity == 0.1
    assert out["C"] == by_id(states)["C"]
