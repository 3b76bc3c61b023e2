"""
Per-entity trend series for the hover tooltip.

``TrendSeriesBuilder.build`` answers "how did this country move over the
years for the current category/measure?".  The result is either a
``TrendSeries`` (points sorted by year plus extrema) or an explicit
``NoTrendData`` so the caller can tell "no data for this entity at all"
apart from "no data for this year".
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from .observation_index import ObservationIndex

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendPoint:
    year: int
    value: float


@dataclass(frozen=True)
class TrendSeries:
    """Ordered trend for one (entity, category, measure)."""

    entity_code: str
    category: str
    measure: str
    points: Tuple[TrendPoint, ...]
    max_point: TrendPoint
    min_point: TrendPoint

    has_data = True

    @property
    def year_extent(self) -> Tuple[int, int]:
        return self.points[0].year, self.points[-1].year

    def value_at(self, year: int) -> Optional[float]:
        for p in self.points:
            if p.year == year:
                return p.value
        return None

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class NoTrendData:
    """No numeric observation exists for the entity under this filter."""

    entity_code: str
    category: str
    measure: str

    has_data = False


TrendResult = Union[TrendSeries, NoTrendData]


class TrendSeriesBuilder:
    """Builds trend series from an ObservationIndex."""

    def __init__(self, index: ObservationIndex):
        self._index = index

    def build(self, entity_code: str, category: str, measure: str) -> TrendResult:
        # One point per year; later numeric rows replace earlier ones.
        by_year: Dict[int, float] = {}
        for obs in self._index.series_rows(entity_code, category, measure):
            if obs.value is not None:
                by_year[obs.year] = obs.value

        if not by_year:
            log.debug("No trend data for %s (%s / %s)", entity_code, category, measure)
            return NoTrendData(entity_code, category, measure)

        points = tuple(TrendPoint(y, by_year[y]) for y in sorted(by_year))

        # Ties resolve to the earliest year.
        max_point = points[0]
        min_point = points[0]
        for p in points[1:]:
            if p.value > max_point.value:
                max_point = p
            if p.value < min_point.value:
                min_point = p

        return TrendSeries(
            entity_code=entity_code,
            category=category,
            measure=measure,
            points=points,
            max_point=max_point,
            min_point=min_point,
        )
