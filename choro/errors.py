"""Error taxonomy for the choropleth engine.

A missing value for one entity is not an error: it renders as "no data".
Everything else that can go wrong is a subclass of ``ChoroError`` and is
recoverable at the call site by falling back to a safe default view.
"""
from __future__ import annotations


class ChoroError(Exception):
    """Base class for all choro errors."""


class EmptyDistribution(ChoroError):
    """The active filter matched zero numeric observations."""


class NoGeometryInSubset(ChoroError):
    """A fit was requested for a feature subset with no geometry."""

    def __init__(self, region: str = ""):
        self.region = region
        msg = f"No geometry to fit for region '{region}'" if region else "No geometry to fit"
        super().__init__(msg)


class DataLoadFailure(ChoroError):
    """The startup load of geometry or observations failed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load {source}: {reason}")
