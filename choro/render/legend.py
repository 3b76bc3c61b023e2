"""Legend entries for the colour bar: one "No data" swatch plus one per bucket."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from .color_scale import ThresholdColorScale
from .joiner import NO_DATA_PATTERN


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: str
    bucket: Optional[int]           # None for the "No data" entry
    lower: Optional[float] = None
    upper: Optional[float] = None

    @property
    def is_no_data(self) -> bool:
        return self.bucket is None


def format_number(x: float) -> str:
    """Thousands separators, at most two decimals, never scientific notation."""
    if float(x).is_integer():
        return f"{int(x):,}"
    text = f"{x:,.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def build_legend(
    scale: Optional[ThresholdColorScale],
    no_data_fill: str = NO_DATA_PATTERN,
) -> List[LegendEntry]:
    """Legend for the active scale; only the "No data" entry when there is none."""
    entries = [LegendEntry("No data", no_data_fill, None)]
    if scale is None:
        return entries

    for i, color in enumerate(scale.palette):
        lower, upper = scale.range_of(i)
        if math.isinf(upper):
            label = f"≥ {format_number(lower)}"
        else:
            label = f"{format_number(lower)} – {format_number(upper)}"
        entries.append(LegendEntry(label, color, i, lower, upper))
    return entries
