"""
Value map → per-feature fill resolution.

The joiner decides, for every feature, how it should be painted in the
current frame.  It draws nothing itself; the renderer consumes the
resulting RenderState list.

Policy
------
  - world scope: every feature at opacity 1; COLORED when its id is in
    the value map, otherwise NO_DATA with the no-data fill marker.
  - named region: features whose region matches (case-insensitive) follow
    the world rule; the rest are SUPPRESSED (dimmed, no fill) so the
    surrounding context stays visible.
  - an empty value map never touches the colour scale.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Dict, Iterable, List, Optional

from ..geo.feature import GeoFeature
from .color_scale import ThresholdColorScale

log = logging.getLogger(__name__)

NO_DATA_PATTERN = "pattern:hatch"


class FillMode(Enum):
    COLORED = auto()
    NO_DATA = auto()
    SUPPRESSED = auto()


@dataclass(frozen=True)
class RenderState:
    """Resolved fill for one feature in one frame."""
    feature_id: str
    fill_mode: FillMode
    color: Optional[str]            # hex colour, no-data marker, or None ("none")
    opacity: float
    value: Optional[float] = None


class GeometryJoiner:
    """Joins a value map onto a feature set."""

    def __init__(
        self,
        no_data_fill: str = NO_DATA_PATTERN,
        suppressed_opacity: float = 0.1,
        universal_region: str = "world",
    ):
        self.no_data_fill = no_data_fill
        self.suppressed_opacity = suppressed_opacity
        self.universal_region = universal_region

    def is_universal(self, region: Optional[str]) -> bool:
        return not region or region.lower() == self.universal_region.lower()

    def in_scope(self, feature: GeoFeature, region: Optional[str]) -> bool:
        return self.is_universal(region) or feature.in_region(region)

    def resolve_fills(
        self,
        features: Iterable[GeoFeature],
        value_map: Dict[str, float],
        region: Optional[str],
        scale: Optional[ThresholdColorScale] = None,
    ) -> List[RenderState]:
        if value_map and scale is None:
            raise ValueError("A colour scale is required when the value map is not empty")

        states: List[RenderState] = []
        n_colored = n_missing = n_suppressed = 0
        for feat in features:
            if not self.in_scope(feat, region):
                states.append(RenderState(
                    feat.feature_id, FillMode.SUPPRESSED, None, self.suppressed_opacity,
                ))
                n_suppressed += 1
                continue

            value = value_map.get(feat.feature_id)
            if value is None:
                states.append(RenderState(
                    feat.feature_id, FillMode.NO_DATA, self.no_data_fill, 1.0,
                ))
                n_missing += 1
            else:
                states.append(RenderState(
                    feat.feature_id, FillMode.COLORED, scale.color_of(value), 1.0, value,
                ))
                n_colored += 1

        log.debug(
            "Resolved fills (%s): %d coloured, %d no-data, %d suppressed",
            region or self.universal_region, n_colored, n_missing, n_suppressed,
        )
        return states

    def emphasize(
        self,
        states: Iterable[RenderState],
        bucket: Optional[int],
        scale: Optional[ThresholdColorScale],
    ) -> List[RenderState]:
        """Dim everything except one legend bucket.

        ``bucket=None`` emphasises the NO_DATA features.  Fills are kept;
        only opacity changes.  Suppressed features stay dimmed.
        """
        out: List[RenderState] = []
        for st in states:
            if st.fill_mode is FillMode.SUPPRESSED:
                out.append(st)
                continue
            if bucket is None:
                hit = st.fill_mode is FillMode.NO_DATA
            else:
                hit = (
                    st.fill_mode is FillMode.COLORED
                    and scale is not None
                    and scale.bucket_of(st.value) == bucket
                )
            out.append(replace(st, opacity=1.0 if hit else self.suppressed_opacity))
        return out
