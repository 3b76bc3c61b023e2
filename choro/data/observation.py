"""
Observation data model.

One Observation is one row of the statistics table: a value for one
entity (country) under one category / measure / year.  A FilterKey
selects the slice the map is currently showing.

Example
-------
    obs = Observation("FRA", "France", "Life expectancy", "Years", 2020, 82.3)
    key = FilterKey("Life expectancy", "Years", 2020)
    obs.matches(key)   # True
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class FilterKey:
    """The (category, measure, year) tuple selecting the active data slice."""
    category: str
    measure: str
    year: int


@dataclass(frozen=True)
class Observation:
    """One row of the observation table."""

    entity_code: str            # join key, e.g. "FRA" (falls back to the name)
    entity_name: str            # display name, e.g. "France"
    category: str               # the "Variable" column
    measure: str
    year: int
    value: Optional[float] = None   # None = blank / non-numeric in the source

    @property
    def has_value(self) -> bool:
        return self.value is not None

    @property
    def key(self) -> FilterKey:
        return FilterKey(self.category, self.measure, self.year)

    def matches(self, key: FilterKey) -> bool:
        return (
            self.category == key.category
            and self.measure == key.measure
            and self.year == key.year
        )


def coerce_value(raw: Any) -> Optional[float]:
    """Coerce a raw cell to a finite float, or None.

    Blank strings, non-numeric text, NaN and infinities all mean "no data".
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value
