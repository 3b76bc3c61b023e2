"""PyQt5 presentation shell for the visualization session."""
