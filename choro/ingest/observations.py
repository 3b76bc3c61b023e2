"""
Observation table loader.

Reads a CSV of statistics into immutable Observation records.  Two layouts
are supported:

1. **Long** — one row per (entity, variable, measure, year):
   ``Entity/Country, Code, Variable, Measure, Year, Value``.
   Header aliases are resolved case-insensitively (``Country`` → Entity,
   ``Category`` → Variable, ...).  ``Code`` is optional; without it the
   entity name is the join key.  OECD tables carry both ``COU`` and
   ``Country`` while world GeoJSON is keyed by name, so loading with
   ``key="name"`` ignores the code column.

2. **Wide** — one row per entity with one numeric column per category
   (e.g. ``Entity, Code, smoking, secondhand_smoke``).  ``melt_wide``
   unpivots it with a fixed measure and year.

Values are coerced with ``pd.to_numeric(errors="coerce")``: blanks and
junk become None ("no data") silently.  Rows without a usable year are
dropped and counted.

Usage
-----
    obs = load_observations("HEALTH_LVNG.csv", key="name")
    obs = load_wide_observations("deaths_2019.csv",
                                 value_columns=["smoking", "secondhand_smoke"],
                                 measure="Deaths", year=2019)
"""
from __future__ import annotations

import io
import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..data.observation import Observation, coerce_value
from ..errors import DataLoadFailure
from . import Source, read_text

log = logging.getLogger(__name__)

# canonical column → accepted headers (lower case)
COLUMN_ALIASES: Dict[str, Sequence[str]] = {
    "entity": ("entity", "country", "country name", "location"),
    "code": ("code", "iso3", "iso_a3", "cou", "location code"),
    "variable": ("variable", "category", "indicator"),
    "measure": ("measure", "unit"),
    "year": ("year", "time"),
    "value": ("value", "obs_value"),
}

REQUIRED = ("entity", "variable", "measure", "year", "value")


def resolve_columns(columns: Sequence[str]) -> Dict[str, str]:
    """Map canonical names to the actual headers present in *columns*."""
    lookup = {c.strip().lower(): c for c in columns}
    found: Dict[str, str] = {}
    for canon, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lookup:
                found[canon] = lookup[alias]
                break
    return found


def _read_csv(source: Source) -> pd.DataFrame:
    text = read_text(source)
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise DataLoadFailure(str(source), f"unreadable CSV: {exc}") from exc
    df.columns = [str(c).strip() for c in df.columns]
    return df


OBSERVATION_KEYS = ("code", "name")


def _entity_key(code: str, name: str, key: str) -> str:
    if key == "name":
        return name
    code = (code or "").strip()
    return code if code else name


def frame_to_observations(
    df: pd.DataFrame,
    source: str = "<frame>",
    key: str = "code",
) -> List[Observation]:
    """Convert a long-format DataFrame to Observation records.

    *key* picks the join key: ``"code"`` uses the Code column (falling back
    to the entity name), ``"name"`` always uses the entity name.
    """
    if key not in OBSERVATION_KEYS:
        raise ValueError(f"Unknown observation key '{key}'")
    cols = resolve_columns(list(df.columns))
    missing = [c for c in REQUIRED if c not in cols]
    if missing:
        raise DataLoadFailure(
            source,
            f"missing column(s) {', '.join(missing)}; got {list(df.columns)}",
        )

    years = pd.to_numeric(df[cols["year"]], errors="coerce")
    values = pd.to_numeric(df[cols["value"]], errors="coerce")
    codes = df[cols["code"]] if "code" in cols else pd.Series([""] * len(df), index=df.index)

    out: List[Observation] = []
    dropped = 0
    for i in range(len(df)):
        year = years.iat[i]
        if pd.isna(year):
            dropped += 1
            continue
        name = str(df[cols["entity"]].iat[i]).strip()
        out.append(Observation(
            entity_code=_entity_key(str(codes.iat[i]), name, key),
            entity_name=name,
            category=str(df[cols["variable"]].iat[i]).strip(),
            measure=str(df[cols["measure"]].iat[i]).strip(),
            year=int(year),
            value=coerce_value(values.iat[i]),
        ))

    if dropped:
        log.warning("%s: dropped %d rows without a valid year", source, dropped)
    return out


def load_observations(source: Source, key: str = "code") -> List[Observation]:
    """Load a long-format observation CSV from a path or URL."""
    df = _read_csv(source)
    obs = frame_to_observations(df, str(source), key)
    if not obs:
        raise DataLoadFailure(str(source), "no usable observation rows")
    n_missing = sum(1 for o in obs if o.value is None)
    log.info(
        "Loaded %d observations from %s (%d without a numeric value)",
        len(obs), source, n_missing,
    )
    return obs


def melt_wide(
    df: pd.DataFrame,
    value_columns: Sequence[str],
    measure: str,
    year: int,
    entity_column: Optional[str] = None,
    code_column: Optional[str] = None,
) -> pd.DataFrame:
    """Unpivot one-column-per-category data into the long layout."""
    cols = resolve_columns(list(df.columns))
    entity_column = entity_column or cols.get("entity")
    code_column = code_column or cols.get("code")
    if entity_column is None:
        raise ValueError("Wide table has no entity column")
    absent = [c for c in value_columns if c not in df.columns]
    if absent:
        raise ValueError(f"Wide table is missing value column(s): {', '.join(absent)}")

    id_vars = [entity_column] + ([code_column] if code_column else [])
    long = df.melt(
        id_vars=id_vars, value_vars=list(value_columns),
        var_name="Variable", value_name="Value",
    )
    long = long.rename(columns={entity_column: "Entity"})
    if code_column:
        long = long.rename(columns={code_column: "Code"})
    long["Measure"] = measure
    long["Year"] = year
    return long


def load_wide_observations(
    source: Source,
    value_columns: Sequence[str],
    measure: str,
    year: int,
    key: str = "code",
) -> List[Observation]:
    """Load a wide CSV (one column per category) as observations."""
    df = _read_csv(source)
    try:
        long = melt_wide(df, value_columns, measure, year)
    except ValueError as exc:
        raise DataLoadFailure(str(source), str(exc)) from exc
    obs = frame_to_observations(long, str(source), key)
    if not obs:
        raise DataLoadFailure(str(source), "no usable observation rows")
    log.info(
        "Loaded %d observations (%d categories) from wide table %s",
        len(obs), len(value_columns), source,
    )
    return obs
