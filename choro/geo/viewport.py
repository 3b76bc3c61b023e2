"""
Camera fitting — zoom-to-bounds for a subset of features.

Given a set of features and a viewport, compute the scale/translate pair
that frames their projected bounding box with a margin:

    scale     = clamp(margin / max(dx / W, dy / H), min_scale, max_scale)
    translate = (W/2 - scale*cx, H/2 - scale*cy)

Some regions have visually lopsided boxes (Oceania spans the antimeridian,
so its box covers almost the whole map width).  A named override table
shifts those regions after the generic fit.  Offsets are fractions of the
viewport size.

The fitter returns end states only; animating between two transforms is
the renderer's job.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

import numpy as np
from shapely.geometry.base import BaseGeometry

from ..errors import NoGeometryInSubset
from .feature import GeoFeature
from .projection import WorldProjection

log = logging.getLogger(__name__)

# region id (lower case) → (dx, dy) as fractions of viewport width / height
DEFAULT_REGION_OFFSETS: Dict[str, Tuple[float, float]] = {
    "oceania": (-1.0 / 2.5, 0.0),
}


@dataclass(frozen=True)
class CameraTransform:
    """A uniform scale followed by a translation, in viewport pixels."""
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    @classmethod
    def identity(cls) -> "CameraTransform":
        return cls()

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        return self.translate_x + self.scale * x, self.translate_y + self.scale * y

    def is_close(self, other: "CameraTransform", tol: float = 1e-6) -> bool:
        return (
            abs(self.scale - other.scale) <= tol
            and abs(self.translate_x - other.translate_x) <= tol
            and abs(self.translate_y - other.translate_y) <= tol
        )


class ViewportFitter:
    """Computes camera transforms that frame feature subsets."""

    def __init__(
        self,
        projection: WorldProjection,
        margin: float = 0.9,
        min_scale: float = 1.0,
        max_scale: float = 8.0,
        region_offsets: Optional[Mapping[str, Tuple[float, float]]] = None,
    ):
        self.projection = projection
        self.margin = margin
        self.min_scale = min_scale
        self.max_scale = max_scale
        if region_offsets is None:
            region_offsets = DEFAULT_REGION_OFFSETS
        self.region_offsets = {k.lower(): tuple(v) for k, v in region_offsets.items()}
        self._projected: Dict[str, BaseGeometry] = {}

    def projected(self, feature: GeoFeature) -> BaseGeometry:
        """Screen-space geometry for one feature (computed once)."""
        geom = self._projected.get(feature.feature_id)
        if geom is None:
            geom = self.projection.project_geometry(feature.geometry)
            self._projected[feature.feature_id] = geom
        return geom

    def bounds(self, features: Iterable[GeoFeature]) -> Optional[Tuple[float, float, float, float]]:
        """Projected (minx, miny, maxx, maxy) of the subset, or None if empty."""
        boxes = [
            self.projected(f).bounds for f in features
            if f.geometry is not None and not f.geometry.is_empty
        ]
        if not boxes:
            return None
        arr = np.asarray(boxes, dtype=float)
        return (
            float(arr[:, 0].min()), float(arr[:, 1].min()),
            float(arr[:, 2].max()), float(arr[:, 3].max()),
        )

    def fit(
        self,
        features: Iterable[GeoFeature],
        width: float,
        height: float,
        region: Optional[str] = None,
    ) -> CameraTransform:
        """Frame *features* in a ``width`` × ``height`` viewport.

        *region* selects an entry of the offset override table; pass None
        for the generic fit only.
        """
        bbox = self.bounds(features)
        if bbox is None:
            raise NoGeometryInSubset(region or "")

        x0, y0, x1, y1 = bbox
        dx, dy = x1 - x0, y1 - y0
        cx, cy = (x0 + x1) / 2.0, (y0 + y1) / 2.0

        extent = max(dx / width, dy / height)
        if extent > 0:
            scale = self.margin / extent
        else:
            scale = self.max_scale  # a single point
        scale = max(self.min_scale, min(self.max_scale, scale))

        tx = width / 2.0 - scale * cx
        ty = height / 2.0 - scale * cy

        if region:
            off = self.region_offsets.get(region.lower())
            if off is not None:
                tx += off[0] * width
                ty += off[1] * height
                log.debug("Applied %s offset (%.3f, %.3f)", region, off[0], off[1])

        return CameraTransform(scale, tx, ty)
