"""
Visualization session — the single owner of the map's mutable state.

The session sits between the loaded datasets and the presentation shell.
For every selection change it:

1. Queries the observation index for the active slice.
2. Builds the colour scale (skipped when the slice is empty).
3. Resolves a fill for every feature.
4. Refits the camera when the region changed.
5. Returns all of it as one immutable Frame snapshot.

Hover requests return a TooltipPayload with the country's trend series.

Usage
-----
    session = VisualizationSession(index, features, settings)
    frame = session.select(category="Life expectancy")
    frame = session.select(region="europe")
    tip = session.tooltip("France")
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from ..data.observation import FilterKey
from ..data.observation_index import ObservationIndex
from ..data.trend import TrendSeriesBuilder
from ..errors import NoGeometryInSubset
from ..geo.feature import GeoFeature
from ..geo.projection import WorldProjection
from ..geo.viewport import CameraTransform, ViewportFitter
from ..render.color_scale import ThresholdColorScale, scale_from_settings
from ..render.joiner import GeometryJoiner, RenderState
from ..render.legend import LegendEntry, build_legend
from ..render.tooltip import TooltipPayload
from ..settings import Settings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """The externally chosen filter values."""
    category: str
    measure: str
    year: int
    region: str = "world"

    @property
    def key(self) -> FilterKey:
        return FilterKey(self.category, self.measure, self.year)


@dataclass(frozen=True)
class Frame:
    """Everything the renderer needs for one redraw."""
    selection: Selection
    states: List[RenderState]
    legend: List[LegendEntry]
    camera: CameraTransform
    camera_changed: bool
    title: str
    subtitle: str
    empty_distribution: bool
    scale: Optional[ThresholdColorScale] = None


def capitalize_words(text: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in text.split(" "))


class VisualizationSession:
    """Context object holding the current value map, scale and camera."""

    def __init__(
        self,
        index: ObservationIndex,
        features: Sequence[GeoFeature],
        settings: Optional[Settings] = None,
        projection: Optional[WorldProjection] = None,
    ):
        self.settings = settings or Settings()
        s = self.settings
        self.index = index
        self.features: List[GeoFeature] = list(features)
        self._by_id: Dict[str, GeoFeature] = {f.feature_id: f for f in self.features}

        self.projection = projection or WorldProjection(
            s.projection, s.viewport_width, s.viewport_height, s.padding,
        )
        self.joiner = GeometryJoiner(
            no_data_fill=s.no_data_fill,
            suppressed_opacity=s.suppressed_opacity,
            universal_region=s.universal_region,
        )
        self.fitter = ViewportFitter(
            self.projection,
            margin=s.fit_margin,
            min_scale=s.min_zoom,
            max_scale=s.max_zoom,
            region_offsets=s.region_offsets,
        )
        self.trends = TrendSeriesBuilder(index)

        self.selection: Optional[Selection] = None
        self.value_map: Dict[str, float] = {}
        self.scale: Optional[ThresholdColorScale] = None
        self.camera: CameraTransform = CameraTransform.identity()
        self._states: List[RenderState] = []
        self._fitted_region: Optional[str] = None

    # ── selector options ──────────────────────────────────────────────

    def categories(self) -> List[str]:
        return self.index.distinct_values("category")

    def measures(self, category: str) -> List[str]:
        return self.index.distinct_values("measure", category=category)

    def years(self, category: str) -> List[int]:
        return self.index.distinct_values("year", category=category)

    def regions(self) -> List[str]:
        """The universal scope followed by every feature region, lower case."""
        found = sorted({f.region.lower() for f in self.features if f.region})
        return [self.settings.universal_region] + found

    def play_years(self) -> List[int]:
        """Ascending years available for the current category/measure."""
        if self.selection is None:
            return []
        sel = self.selection
        return sorted(self.index.distinct_values(
            "year", category=sel.category, measure=sel.measure,
        ))

    # ── selection ─────────────────────────────────────────────────────

    def _default_selection(self, category: Optional[str]) -> Selection:
        cats = self.categories()
        if not cats:
            raise ValueError("Observation index is empty")
        category = category if category is not None else cats[0]
        measures = self.measures(category)
        years = self.years(category)
        if not measures or not years:
            raise ValueError(f"Unknown category '{category}'")
        return Selection(category, measures[0], years[0], self.settings.universal_region)

    def select(
        self,
        category: Optional[str] = None,
        measure: Optional[str] = None,
        year: Optional[int] = None,
        region: Optional[str] = None,
    ) -> Frame:
        """Apply a selection change and return the new frame.

        Changing the category resets measure and year to the first values
        available for it unless they are given explicitly.
        """
        current = self.selection
        if current is None or (category is not None and category != current.category):
            base = self._default_selection(category)
            if current is not None:
                base = replace(base, region=current.region)
        else:
            base = current

        sel = replace(
            base,
            measure=measure if measure is not None else base.measure,
            year=int(year) if year is not None else base.year,
            region=region.lower() if region is not None else base.region,
        )
        return self._render(sel)

    def refresh(self) -> Frame:
        if self.selection is None:
            return self.select()
        return self._render(self.selection)

    def _render(self, sel: Selection) -> Frame:
        self.selection = sel
        self.value_map = self.index.query(sel.key)

        empty = not self.value_map
        if empty:
            self.scale = None
            log.info(
                "No numeric data for %s / %s / %d — rendering all no-data",
                sel.category, sel.measure, sel.year,
            )
        else:
            s = self.settings
            self.scale = scale_from_settings(
                s.scale_mode, list(self.value_map.values()),
                steps=s.adaptive_steps, palette_name=s.palette,
                fixed_domain=s.fixed_domain, fixed_palette=s.fixed_palette,
            )

        self._states = self.joiner.resolve_fills(
            self.features, self.value_map, sel.region, self.scale,
        )

        camera_changed = sel.region != self._fitted_region
        if camera_changed:
            self.camera = self._fit_region(sel.region)
            self._fitted_region = sel.region

        title, subtitle = self.titles()
        return Frame(
            selection=sel,
            states=list(self._states),
            legend=build_legend(self.scale, self.settings.no_data_fill),
            camera=self.camera,
            camera_changed=camera_changed,
            title=title,
            subtitle=subtitle,
            empty_distribution=empty,
            scale=self.scale,
        )

    # ── camera ────────────────────────────────────────────────────────

    def world_camera(self) -> CameraTransform:
        s = self.settings
        return self.fitter.fit(self.features, s.viewport_width, s.viewport_height)

    def _fit_region(self, region: str) -> CameraTransform:
        s = self.settings
        if self.joiner.is_universal(region):
            return self.world_camera()
        subset = [f for f in self.features if f.in_region(region)]
        try:
            return self.fitter.fit(subset, s.viewport_width, s.viewport_height, region=region)
        except NoGeometryInSubset:
            fallback = self.camera if self._fitted_region is not None else self.world_camera()
            log.warning("Region '%s' has no features — keeping the previous view", region)
            return fallback

    # ── hover / legend interaction ────────────────────────────────────

    def emphasize(self, bucket: Optional[int]) -> List[RenderState]:
        """States with one legend bucket (None = no data) highlighted."""
        return self.joiner.emphasize(self._states, bucket, self.scale)

    def tooltip(self, feature_id: str) -> TooltipPayload:
        if self.selection is None:
            raise RuntimeError("tooltip() called before the first selection")
        sel = self.selection
        feat = self._by_id.get(feature_id)
        name = self.index.entity_name(feature_id) or (feat.name if feat else feature_id)

        value = self.value_map.get(feature_id)
        series = None
        if value is not None:
            result = self.trends.build(feature_id, sel.category, sel.measure)
            if result.has_data:
                series = result
        return TooltipPayload(
            feature_id=feature_id,
            entity_name=name,
            year=sel.year,
            measure=sel.measure,
            value=value,
            series=series,
        )

    def titles(self):
        sel = self.selection
        if sel is None:
            return "", ""
        title = f"{capitalize_words(sel.region)}: {sel.category} in {sel.year}"
        return title, f"Measure: {sel.measure}"
