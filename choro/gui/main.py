"""
Desktop shell: selectors, map, legend, trend tooltip and year playback.

Entry point: python -m choro.gui.main --geometry world.geo.json --observations data.csv

The window owns the selectors and forwards every change to the
VisualizationSession; the frames it gets back are pushed to the map
widget and legend.  Loading is done once before the window is built; a
failure is logged once, reported in a message box, and nothing is drawn.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt5 import QtCore, QtWidgets

from ..data.observation_index import ObservationIndex
from ..errors import DataLoadFailure
from ..ingest.geometry import load_features
from ..ingest.observations import load_observations, load_wide_observations
from ..logger import setup_logging
from ..render.joiner import RenderState
from ..session.engine import Frame, VisualizationSession
from ..session.sequencer import AnimationSequencer
from ..settings import Settings, load_settings
from .map_widget import ChoroplethMapWidget, LegendBar, TrendPanel

log = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="choro",
        description="Interactive choropleth world map for tabular statistics.",
    )
    parser.add_argument("--geometry", required=True,
                        help="GeoJSON FeatureCollection (path or URL)")
    parser.add_argument("--observations", required=True,
                        help="Observation CSV (path or URL)")
    parser.add_argument("--preset", default=None,
                        help="Settings preset from config/presets.json")
    parser.add_argument("--config", type=Path, default=None,
                        help="JSON file overriding preset settings")
    parser.add_argument("--wide-columns", default=None,
                        help="Comma-separated value columns of a wide table")
    parser.add_argument("--measure", default="Value",
                        help="Measure name for a wide table")
    parser.add_argument("--year", type=int, default=None,
                        help="Year for a wide table")
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--debug", action="store_true")
    return parser


def load_session(args: argparse.Namespace, settings: Settings) -> VisualizationSession:
    """Load both datasets and build the session.  Raises DataLoadFailure."""
    features = load_features(
        args.geometry,
        id_property=settings.join_property,
        name_property=settings.name_property,
        region_property=settings.region_property,
    )
    if args.wide_columns:
        if args.year is None:
            raise DataLoadFailure(args.observations, "--year is required with --wide-columns")
        columns = [c.strip() for c in args.wide_columns.split(",") if c.strip()]
        observations = load_wide_observations(
            args.observations, columns, measure=args.measure, year=args.year,
            key=settings.observation_key,
        )
    else:
        observations = load_observations(args.observations, key=settings.observation_key)
    return VisualizationSession(ObservationIndex(observations), features, settings)


class MainWindow(QtWidgets.QMainWindow):
    """Selectors + map + legend + trend panel."""

    def __init__(self, session: VisualizationSession, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.session = session
        self._frame: Optional[Frame] = None
        self.setWindowTitle("choro")

        self._category = QtWidgets.QComboBox()
        self._measure = QtWidgets.QComboBox()
        self._year = QtWidgets.QComboBox()
        self._region = QtWidgets.QComboBox()
        self._play = QtWidgets.QPushButton("See trend")

        self._title = QtWidgets.QLabel("")
        self._title.setStyleSheet("font-size: 16px; font-weight: bold;")
        self._subtitle = QtWidgets.QLabel("")

        self._map = ChoroplethMapWidget(
            session.features, session.fitter, session.settings.transition_ms,
        )
        self._legend = LegendBar()
        self._trend = TrendPanel()

        self._sequencer = AnimationSequencer(self)

        controls = QtWidgets.QHBoxLayout()
        for label, combo in (("Variable", self._category), ("Measure", self._measure),
                             ("Year", self._year), ("Region", self._region)):
            controls.addWidget(QtWidgets.QLabel(label))
            controls.addWidget(combo)
        controls.addWidget(self._play)
        controls.addStretch(1)

        body = QtWidgets.QHBoxLayout()
        body.addWidget(self._map)
        body.addWidget(self._trend, alignment=QtCore.Qt.AlignTop)

        root = QtWidgets.QVBoxLayout()
        root.addLayout(controls)
        root.addWidget(self._title)
        root.addWidget(self._subtitle)
        root.addLayout(body)
        root.addWidget(self._legend)
        central = QtWidgets.QWidget()
        central.setLayout(root)
        self.setCentralWidget(central)

        self._fill_combo(self._category, session.categories())
        self._fill_combo(self._region, session.regions())

        self._category.currentTextChanged.connect(self._on_category)
        self._measure.currentTextChanged.connect(lambda m: self._show(self.session.select(measure=m)))
        self._year.currentTextChanged.connect(self._on_year)
        self._region.currentTextChanged.connect(lambda r: self._show(self.session.select(region=r)))
        self._play.clicked.connect(self._on_play)
        self._map.feature_hovered.connect(self._on_hover)
        self._map.feature_left.connect(self._trend.clear)
        self._legend.bucket_hovered.connect(self._on_legend_hover)
        self._legend.bucket_left.connect(self._on_legend_left)

        self._on_category(self._category.currentText())

    # ── selectors ─────────────────────────────────────────────────────

    @staticmethod
    def _fill_combo(combo: QtWidgets.QComboBox, values: List) -> None:
        combo.blockSignals(True)
        combo.clear()
        combo.addItems([str(v) for v in values])
        combo.blockSignals(False)

    def _set_combo(self, combo: QtWidgets.QComboBox, value) -> None:
        combo.blockSignals(True)
        combo.setCurrentText(str(value))
        combo.blockSignals(False)

    def _on_category(self, category: str) -> None:
        if not category:
            return
        frame = self.session.select(category=category)
        self._fill_combo(self._measure, self.session.measures(category))
        self._fill_combo(self._year, self.session.years(category))
        self._set_combo(self._measure, frame.selection.measure)
        self._set_combo(self._year, frame.selection.year)
        self._show(frame)

    def _on_year(self, text: str) -> None:
        if text:
            self._show(self.session.select(year=int(text)))

    def _on_play(self) -> None:
        years = self.session.play_years()
        self._sequencer.start(years, self.session.settings.step_interval_ms, self._on_play_year)

    def _on_play_year(self, year: int) -> None:
        self._set_combo(self._year, year)
        self._show(self.session.select(year=year))

    # ── frame output ──────────────────────────────────────────────────

    def _show(self, frame: Frame) -> None:
        self._frame = frame
        self._title.setText(frame.title)
        self._subtitle.setText(frame.subtitle)
        self._map.apply_states(frame.states)
        self._legend.set_entries(frame.legend)
        if frame.camera_changed:
            self._map.set_camera(frame.camera, animate=True)

    def _on_hover(self, feature_id: str) -> None:
        self._trend.show_payload(self.session.tooltip(feature_id))

    def _on_legend_hover(self, bucket) -> None:
        states: List[RenderState] = self.session.emphasize(bucket)
        self._map.apply_states(states)

    def _on_legend_left(self) -> None:
        if self._frame is not None:
            self._map.apply_states(self._frame.states)

    def closeEvent(self, event):
        self._sequencer.shutdown()
        super().closeEvent(event)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    settings = load_settings(preset=args.preset, config_path=args.config)
    setup_logging(args.log_dir or settings.log_dir,
                  logging.DEBUG if args.debug else logging.INFO)

    app = QtWidgets.QApplication(sys.argv[:1])
    try:
        session = load_session(args, settings)
    except DataLoadFailure as exc:
        log.error("Error loading the data: %s", exc)
        QtWidgets.QMessageBox.critical(None, "choro", str(exc))
        return 1

    window = MainWindow(session)
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
