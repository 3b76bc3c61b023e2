import math

import pytest

from choro.errors import EmptyDistribution
from choro.render.color_scale import BLUES, ThresholdColorScale, palette_for, scale_from_settings


def test_adaptive_domain_for_reference_values():
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    assert scale.domain == [0, 18, 36, 54, 72, 90]
    assert scale.palette == BLUES[6]


def test_adaptive_buckets_for_reference_values():
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    assert scale.bucket_of(10) == 0
    assert scale.bucket_of(40) == 2
    assert scale.bucket_of(90) == 5
    assert scale.color_of(40) == BLUES[6][2]


def test_top_bucket_is_unbounded():
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    assert scale.bucket_of(1e9) == 5
    assert scale.range_of(5) == (90, math.inf)
    assert scale.domain_max == 90


def test_values_below_domain_clamp_to_first_bucket():
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    assert scale.bucket_of(-5) == 0
    assert scale.range_of(0) == (0, 18)


def test_bucket_of_and_range_of_are_inverse():
    values = [0, 0.5, 3, 17.99, 18, 44, 71, 72, 89.9, 90, 120]
    scale = ThresholdColorScale.adaptive([v for v in values if v <= 90])
    for v in values:
        lower, upper = scale.range_of(scale.bucket_of(v))
        assert lower <= v < upper
    for i in range(scale.n_buckets):
        lower, _ = scale.range_of(i)
        assert scale.bucket_of(lower) == i


def test_range_of_out_of_range():
    scale = ThresholdColorScale.adaptive([10, 40, 90])
    with pytest.raises(IndexError):
        scale.range_of(6)
    with pytest.raises(IndexError):
        scale.range_of(-1)


def test_adaptive_small_max_still_six_boundaries():
    scale = ThresholdColorScale.adaptive([0.4, 3])
    assert scale.domain == [0, 1, 2, 3, 4, 5]


def test_adaptive_empty_degrades_to_flat_colour():
    scale = ThresholdColorScale.adaptive([])
    assert scale.n_buckets == 1
    assert scale.color_of(0) == scale.color_of(1000)


def test_adaptive_empty_strict_raises():
    with pytest.raises(EmptyDistribution):
        ThresholdColorScale.adaptive([], strict=True)


def test_adaptive_non_positive_max_is_flat():
    scale = ThresholdColorScale.adaptive([0, -3])
    assert scale.domain == [0]


def test_fixed_scale():
    scale = ThresholdColorScale.fixed([0, 1, 5000], ["#a", "#b", "#c"])
    assert scale.color_of(0.5) == "#a"
    assert scale.color_of(1) == "#b"
    assert scale.color_of(10 ** 7) == "#c"


@pytest.mark.parametrize("domain, palette", [
    ([], []),
    ([0, 1], ["#a"]),
    ([0, 5, 5], ["#a", "#b", "#c"]),
    ([3, 1], ["#a", "#b"]),
])
def test_invalid_domains_rejected(domain, palette):
    with pytest.raises(ValueError):
        ThresholdColorScale(domain, palette)


def test_palette_for_sizes():
    assert palette_for(6) == BLUES[6]
    assert len(palette_for(1)) == 1
    assert len(palette_for(12)) == 12


def test_scale_from_settings_modes():
    assert scale_from_settings("adaptive", [90]).domain == [0, 18, 36, 54, 72, 90]
    fixed = scale_from_settings("fixed", [90], fixed_domain=[0, 10], fixed_palette=["#a", "#b"])
    assert fixed.domain == [0, 10]
    with pytest.raises(ValueError):
        scale_from_settings("fixed", [90])
    with pytest.raises(ValueError):
        scale_from_settings("quantile", [90])
