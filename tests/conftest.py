import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from shapely.geometry import Point, box

from choro.data.observation import Observation
from choro.data.observation_index import ObservationIndex
from choro.geo.feature import GeoFeature
from choro.geo.projection import WorldProjection
from choro.geo.viewport import ViewportFitter
from choro.session.engine import VisualizationSession
from choro.settings import Settings


def obs(code, cat, measure, year, value, name=None):
    return Observation(code, name or f"Country {code}", cat, measure, year, value)


@pytest.fixture
def observations():
    return [
        # the reference slice: X / Rate / 2020
        obs("A", "X", "Rate", 2020, 10.0),
        obs("B", "X", "Rate", 2020, 40.0),
        obs("C", "X", "Rate", 2020, 90.0),
        # history for the trend tooltip
        obs("A", "X", "Rate", 2018, 12.0),
        obs("A", "X", "Rate", 2019, 15.0),
        obs("B", "X", "Rate", 2019, 35.0),
        # a slice with no numeric values at all
        obs("A", "X", "Rate", 2017, None),
        obs("B", "X", "Rate", 2017, None),
        # a second measure and category
        obs("A", "X", "Share", 2020, 0.5),
        obs("A", "Y", "Count", 2001, 7.0),
        obs("B", "Y", "Count", 2005, 3.0),
    ]


@pytest.fixture
def index(observations):
    return ObservationIndex(observations)


@pytest.fixture
def features():
    return [
        GeoFeature("A", "Alpha", "Europe", box(0, 40, 10, 50)),
        GeoFeature("B", "Beta", "Europe", box(10, 45, 20, 55)),
        GeoFeature("C", "Gamma", "Asia", box(70, 20, 90, 40)),
        GeoFeature("D", "Delta", "Oceania", box(150, -40, 175, -10)),
        GeoFeature("E", "Epsilon", "Oceania", box(-178, -20, -170, -12)),
    ]


@pytest.fixture
def projection():
    return WorldProjection("natural_earth", width=960, height=500, padding=20)


@pytest.fixture
def fitter(projection):
    return ViewportFitter(projection)


@pytest.fixture
def session(index, features):
    return VisualizationSession(index, features, Settings())


@pytest.fixture
def point_feature():
    return GeoFeature("P", "Pin", "Nowhere", Point(5, 5))
