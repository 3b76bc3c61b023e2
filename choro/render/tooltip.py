"""Hover tooltip payload."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..data.trend import TrendSeries
from .legend import format_number


@dataclass(frozen=True)
class TooltipPayload:
    """Everything the renderer needs to draw one hover tooltip.

    ``value`` is None when the entity has no data for the selected year; in
    that case no trend series is attached.
    """
    feature_id: str
    entity_name: str
    year: int
    measure: str
    value: Optional[float] = None
    series: Optional[TrendSeries] = None

    @property
    def has_value(self) -> bool:
        return self.value is not None

    @property
    def value_text(self) -> str:
        return format_number(self.value) if self.value is not None else "No data"

    @property
    def max_text(self) -> str:
        if self.series is None:
            return ""
        p = self.series.max_point
        return f"{format_number(p.value)} ({p.year})"
