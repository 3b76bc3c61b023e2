"""
World map projections.

Two projections are supported, both on a unit sphere and then scaled and
translated into viewport pixels (screen y grows downward):

  - ``natural_earth`` — Natural Earth I, scale ``(width - 2*padding) / (1.5*pi)``
  - ``mercator``      — spherical Mercator, scale ``width / 9.5``,
                        latitudes clipped to ±85.0511°

Usage
-----
    proj = WorldProjection("natural_earth", width=960, height=500)
    x, y = proj.project(2.35, 48.85)
    screen_geom = proj.project_geometry(feature.geometry)
"""
from __future__ import annotations

import logging
import math
from typing import Tuple

import numpy as np
import pyproj
import shapely
from shapely.geometry.base import BaseGeometry

log = logging.getLogger(__name__)

_SPHERE = pyproj.CRS.from_proj4("+proj=longlat +R=1 +no_defs")

_PROJ4 = {
    "natural_earth": "+proj=natearth +R=1 +no_defs",
    "mercator": "+proj=merc +R=1 +no_defs",
}

MERCATOR_MAX_LAT = 85.0511287798

PROJECTIONS = tuple(_PROJ4)


class WorldProjection:
    """lon/lat → viewport pixel coordinates."""

    def __init__(
        self,
        kind: str = "natural_earth",
        width: float = 960.0,
        height: float = 500.0,
        padding: float = 20.0,
    ):
        if kind not in _PROJ4:
            raise ValueError(f"Unknown projection '{kind}' (expected one of {PROJECTIONS})")
        self.kind = kind
        self.width = float(width)
        self.height = float(height)
        self.padding = float(padding)

        self._transformer = pyproj.Transformer.from_crs(
            _SPHERE, pyproj.CRS.from_proj4(_PROJ4[kind]), always_xy=True,
        )
        if kind == "natural_earth":
            self.scale = (self.width - 2 * self.padding) / (1.5 * math.pi)
        else:
            self.scale = self.width / 9.5
        self.translate: Tuple[float, float] = (self.width / 2.0, self.height / 2.0)

    def project(self, lon, lat):
        """Project lon/lat (scalars or arrays, degrees) to screen x/y."""
        lon = np.asarray(lon, dtype=float)
        lat = np.asarray(lat, dtype=float)
        if self.kind == "mercator":
            lat = np.clip(lat, -MERCATOR_MAX_LAT, MERCATOR_MAX_LAT)
        x, y = self._transformer.transform(lon, lat)
        tx, ty = self.translate
        return tx + self.scale * np.asarray(x), ty - self.scale * np.asarray(y)

    def project_geometry(self, geom: BaseGeometry) -> BaseGeometry:
        return shapely.transform(geom, self.project, interleaved=False)

    def __repr__(self) -> str:
        return (
            f"WorldProjection({self.kind!r}, width={self.width:g}, "
            f"height={self.height:g}, scale={self.scale:.2f})"
        )
