"""
In-memory index over the observation table.

The table is loaded once and never mutated.  The index groups rows by
FilterKey (for map slices) and by (entity, category, measure) (for trend
tooltips) so each selection change is a dict lookup rather than a scan.

Duplicate policy
----------------
When several rows share an entity and a FilterKey, the last row with a
numeric value wins, in original row order.  Rows whose value failed
numeric coercion never overwrite an earlier numeric row.  Duplicates are
counted and logged once when the index is built.

Usage
-----
    index = ObservationIndex(observations)
    values = index.query(FilterKey("X", "Rate", 2020))   # {"A": 10.0, ...}
    measures = index.distinct_values("measure", category="X")
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .observation import FilterKey, Observation

log = logging.getLogger(__name__)

# field name accepted by distinct_values() → Observation attribute
FIELDS = {
    "category": "category",
    "measure": "measure",
    "year": "year",
    "entity_code": "entity_code",
    "entity_name": "entity_name",
}


class ObservationIndex:
    """Fast lookups over an immutable set of observations."""

    def __init__(self, observations: Iterable[Observation]):
        self._rows: Tuple[Observation, ...] = tuple(observations)
        self._slices: Dict[FilterKey, Dict[str, float]] = defaultdict(dict)
        self._series: Dict[Tuple[str, str, str], List[Observation]] = defaultdict(list)
        self._names: Dict[str, str] = {}
        self.duplicate_count = 0

        seen = set()
        for obs in self._rows:
            slot = (obs.entity_code, obs.key)
            if slot in seen:
                self.duplicate_count += 1
            seen.add(slot)

            self._names.setdefault(obs.entity_code, obs.entity_name)
            self._series[(obs.entity_code, obs.category, obs.measure)].append(obs)
            if obs.value is not None:
                self._slices[obs.key][obs.entity_code] = obs.value

        if self.duplicate_count:
            log.warning(
                "Observation index: %d duplicate rows for the same entity and "
                "filter key (last numeric row wins)", self.duplicate_count,
            )
        log.info(
            "Observation index: %d rows, %d slices, %d entities",
            len(self._rows), len(self._slices), len(self._names),
        )

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> Tuple[Observation, ...]:
        return self._rows

    def query(self, key: FilterKey) -> Dict[str, float]:
        """Build the entity → value map for one slice.

        Returns a fresh dict; callers may keep or mutate it freely.
        """
        values = dict(self._slices.get(key, {}))
        log.debug(
            "query %s/%s/%d → %d values",
            key.category, key.measure, key.year, len(values),
        )
        return values

    def distinct_values(self, field: str, **partial: Any) -> List[Any]:
        """Distinct values of *field* in first-seen order.

        Keyword arguments restrict the rows by exact equality on other
        fields, e.g. ``distinct_values("year", category="X")``.
        """
        if field not in FIELDS:
            raise ValueError(f"Unknown observation field '{field}'")
        for name in partial:
            if name not in FIELDS:
                raise ValueError(f"Unknown observation field '{name}'")

        attr = FIELDS[field]
        filters = [(FIELDS[k], v) for k, v in partial.items()]
        out: Dict[Any, None] = {}
        for obs in self._rows:
            if all(getattr(obs, a) == v for a, v in filters):
                out.setdefault(getattr(obs, attr), None)
        return list(out)

    def entity_name(self, entity_code: str) -> Optional[str]:
        return self._names.get(entity_code)

    def series_rows(
        self, entity_code: str, category: str, measure: str,
    ) -> List[Observation]:
        """All rows for one entity under one category/measure, in row order."""
        return list(self._series.get((entity_code, category, measure), []))
