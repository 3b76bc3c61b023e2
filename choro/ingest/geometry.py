"""
GeoJSON feature loader.

Parses a FeatureCollection into immutable GeoFeature records with shapely
geometry in lon/lat.  The join id comes from a configurable property;
``"id"`` also accepts the top-level feature id used by many world files.

Usage
-----
    features = load_features("custom.geo.json", id_property="name",
                             region_property="continent")
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from shapely.errors import GeometryTypeError
from shapely.geometry import shape

from ..errors import DataLoadFailure
from ..geo.feature import GeoFeature
from . import Source, read_text

log = logging.getLogger(__name__)


def _property(feat: Dict[str, Any], key: str) -> Optional[str]:
    props = feat.get("properties") or {}
    value = props.get(key)
    if value is None and key == "id":
        value = feat.get("id")
    if value is None:
        return None
    return str(value).strip()


def _parse_feature(
    feat: Dict[str, Any],
    id_property: str,
    name_property: str,
    region_property: str,
) -> Optional[GeoFeature]:
    """Parse one GeoJSON feature; None when it has no usable geometry or id."""
    geom_json = feat.get("geometry")
    if not geom_json:
        return None
    try:
        geom = shape(geom_json)
    except (GeometryTypeError, KeyError, TypeError, ValueError) as exc:
        log.debug("Failed to parse feature geometry: %s", exc)
        return None
    if geom.is_empty:
        return None

    feature_id = _property(feat, id_property)
    if not feature_id:
        return None
    name = _property(feat, name_property) or feature_id
    region = _property(feat, region_property) or ""
    return GeoFeature(feature_id=feature_id, name=name, region=region, geometry=geom)


def parse_feature_collection(
    data: Dict[str, Any],
    id_property: str = "name",
    name_property: str = "name",
    region_property: str = "continent",
    source: str = "<geojson>",
) -> List[GeoFeature]:
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise DataLoadFailure(source, "not a GeoJSON FeatureCollection")

    features: List[GeoFeature] = []
    skipped = 0
    for feat in data.get("features", []):
        parsed = _parse_feature(feat, id_property, name_property, region_property)
        if parsed is None:
            skipped += 1
            continue
        features.append(parsed)

    if skipped:
        log.warning("%s: skipped %d features without geometry or id", source, skipped)
    if not features:
        raise DataLoadFailure(source, "no usable features")
    return features


def load_features(
    source: Source,
    id_property: str = "name",
    name_property: str = "name",
    region_property: str = "continent",
) -> List[GeoFeature]:
    """Load a GeoJSON FeatureCollection from a path or URL."""
    text = read_text(source)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadFailure(str(source), f"invalid JSON: {exc}") from exc

    features = parse_feature_collection(
        data, id_property, name_property, region_property, str(source),
    )
    regions = sorted({f.region for f in features if f.region})
    log.info(
        "Loaded %d features from %s (%d regions: %s)",
        len(features), source, len(regions), ", ".join(regions),
    )
    return features
