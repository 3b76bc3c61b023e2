"""Observation records, the per-slice index and trend series."""
