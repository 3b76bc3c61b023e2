"""
choro — interactive choropleth world maps driven by tabular statistics.

Entry point: python -m choro.gui.main

Provides:
- Observation table loading and indexing (ingest/, data/)
- Threshold colour scales, fill resolution, legend and tooltip payloads (render/)
- World projections and zoom-to-region camera fitting (geo/)
- The visualization session and year-by-year playback (session/)
- PyQt5 map shell (gui/)
"""
