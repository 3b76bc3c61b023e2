"""Geographic feature record."""
from __future__ import annotations

from dataclasses import dataclass

from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True)
class GeoFeature:
    """One country polygon (or multipolygon) in lon/lat."""

    feature_id: str             # join key against the observation entity code
    name: str                   # display name
    region: str                 # continent / region label, e.g. "Europe"
    geometry: BaseGeometry      # shapely geometry in WGS84 lon/lat

    def in_region(self, region: str) -> bool:
        """Case-insensitive exact match on the region label."""
        return self.region.lower() == region.lower()
