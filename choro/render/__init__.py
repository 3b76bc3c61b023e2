"""Colour scales, fill resolution, legend and tooltip payloads."""
