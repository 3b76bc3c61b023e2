"""
Threshold colour scale.

A step function from a numeric value to one of an ordered set of colours.
The scale is described by ascending ``domain`` boundaries and a palette of
the same length:

    bucket 0      [domain[0], domain[1])   (values below domain[0] clamp here)
    bucket i      [domain[i], domain[i+1])
    bucket n-1    [domain[n-1], +inf)

so the buckets partition ``[domain_min, +inf)`` with no gaps.

Two construction modes:

* ``adaptive(values)`` — domain ``[0, step, ..., 5*step]`` with
  ``step = ceil(max(values) / 5)``, coloured with ColorBrewer Blues.
* ``fixed(domain, palette)`` — static configuration.
"""
from __future__ import annotations

import bisect
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import EmptyDistribution

log = logging.getLogger(__name__)

# ColorBrewer "Blues", keyed by class count.
BLUES: Dict[int, List[str]] = {
    3: ["#deebf7", "#9ecae1", "#3182bd"],
    4: ["#eff3ff", "#bdd7e7", "#6baed6", "#2171b5"],
    5: ["#eff3ff", "#bdd7e7", "#6baed6", "#3182bd", "#08519c"],
    6: ["#eff3ff", "#c6dbef", "#9ecae1", "#6baed6", "#3182bd", "#08519c"],
    7: ["#eff3ff", "#c6dbef", "#9ecae1", "#6baed6", "#4292c6", "#2171b5", "#084594"],
    8: ["#f7fbff", "#deebf7", "#c6dbef", "#9ecae1", "#6baed6", "#4292c6",
        "#2171b5", "#084594"],
    9: ["#f7fbff", "#deebf7", "#c6dbef", "#9ecae1", "#6baed6", "#4292c6",
        "#2171b5", "#08519c", "#08306b"],
}

PALETTES: Dict[str, Dict[int, List[str]]] = {
    "blues": BLUES,
}


def palette_for(n: int, palettes: Dict[int, List[str]] = BLUES) -> List[str]:
    """Return an *n*-class palette, trimming or padding the nearest scheme."""
    if n in palettes:
        return list(palettes[n])
    sizes = sorted(palettes)
    if n < sizes[0]:
        return list(palettes[sizes[0]][-n:])
    largest = list(palettes[sizes[-1]])
    return largest + [largest[-1]] * (n - len(largest))


class ThresholdColorScale:
    """Maps values to colour buckets via sorted boundaries."""

    def __init__(self, domain: Sequence[float], palette: Sequence[str]):
        domain = [float(d) for d in domain]
        if not domain:
            raise ValueError("Colour scale domain must not be empty")
        if len(palette) != len(domain):
            raise ValueError(
                f"Palette has {len(palette)} colours for {len(domain)} boundaries"
            )
        if any(b <= a for a, b in zip(domain, domain[1:])):
            raise ValueError(f"Colour scale domain must be strictly ascending: {domain}")
        self._domain = domain
        self._palette = list(palette)

    # ── construction ──────────────────────────────────────────────────

    @classmethod
    def adaptive(
        cls,
        values: Sequence[float],
        steps: int = 5,
        palettes: Dict[int, List[str]] = BLUES,
        strict: bool = False,
    ) -> "ThresholdColorScale":
        """Derive a 0-based equal-step domain from the value distribution.

        With no values (or a non-positive maximum) the scale degrades to a
        single flat bucket, unless *strict* is set, in which case an empty
        distribution raises EmptyDistribution.
        """
        if not values:
            if strict:
                raise EmptyDistribution("No numeric values to build a colour scale")
            log.debug("Adaptive scale on empty distribution — flat colour")
            return cls([0.0], palette_for(1, palettes))

        top = max(values)
        step = math.ceil(top / steps)
        if step <= 0:
            log.debug("Adaptive scale with max %.3f — flat colour", top)
            return cls([0.0], palette_for(1, palettes))

        domain = [float(step * i) for i in range(steps + 1)]
        return cls(domain, palette_for(len(domain), palettes))

    @classmethod
    def fixed(cls, domain: Sequence[float], palette: Sequence[str]) -> "ThresholdColorScale":
        return cls(domain, palette)

    # ── lookups ───────────────────────────────────────────────────────

    @property
    def domain(self) -> List[float]:
        return list(self._domain)

    @property
    def palette(self) -> List[str]:
        return list(self._palette)

    @property
    def n_buckets(self) -> int:
        return len(self._domain)

    @property
    def domain_min(self) -> float:
        return self._domain[0]

    @property
    def domain_max(self) -> float:
        """Lower bound of the unbounded top bucket (used for legend labels)."""
        return self._domain[-1]

    def bucket_of(self, value: float) -> int:
        return max(bisect.bisect_right(self._domain, value) - 1, 0)

    def color_of(self, value: float) -> str:
        return self._palette[self.bucket_of(value)]

    def range_of(self, bucket: int) -> Tuple[float, float]:
        """``[lower, upper)`` of a bucket; the top bucket's upper is ``inf``."""
        if not 0 <= bucket < len(self._domain):
            raise IndexError(f"Bucket {bucket} out of range 0..{len(self._domain) - 1}")
        lower = self._domain[bucket]
        if bucket == len(self._domain) - 1:
            return lower, math.inf
        return lower, self._domain[bucket + 1]

    def __repr__(self) -> str:
        return f"ThresholdColorScale(domain={self._domain!r})"


def scale_from_settings(
    mode: str,
    values: Sequence[float],
    steps: int = 5,
    palette_name: str = "blues",
    fixed_domain: Optional[Sequence[float]] = None,
    fixed_palette: Optional[Sequence[str]] = None,
) -> ThresholdColorScale:
    """Build the scale a session is configured for."""
    if mode == "fixed":
        if not fixed_domain or not fixed_palette:
            raise ValueError("Fixed colour scale needs fixed_domain and fixed_palette")
        return ThresholdColorScale.fixed(fixed_domain, fixed_palette)
    if mode == "adaptive":
        if palette_name not in PALETTES:
            raise ValueError(f"Unknown palette '{palette_name}'")
        return ThresholdColorScale.adaptive(values, steps=steps, palettes=PALETTES[palette_name])
    raise ValueError(f"Unknown colour scale mode '{mode}'")
