"""
Choropleth map widget — QGraphicsScene-based rendering of session frames.

Renders the projected country polygons and applies each Frame the session
produces:
  - per-feature fill / opacity from the RenderState list
  - hatch brush for "no data" (or a flat colour, depending on the preset)
  - animated camera transitions between CameraTransforms
  - hover signals for the trend tooltip
  - legend bar whose swatches emphasise one bucket on hover
  - trend panel (pyqtgraph) showing the hovered country's series

Coordinate system: viewport pixels produced by WorldProjection; the camera
transform is applied to a single root item, like a zoomable <g> element.
"""
from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional, Sequence

import pyqtgraph as pg
from PyQt5 import QtCore, QtGui, QtWidgets
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from ..geo.feature import GeoFeature
from ..geo.viewport import CameraTransform, ViewportFitter
from ..render.joiner import FillMode, RenderState
from ..render.legend import LegendEntry
from ..render.tooltip import TooltipPayload

log = logging.getLogger(__name__)

_PATTERN_PREFIX = "pattern:"


# ── Brush helpers ─────────────────────────────────────────────────────

def _brush_for(state: RenderState) -> QtGui.QBrush:
    if state.fill_mode is FillMode.SUPPRESSED or not state.color:
        return QtGui.QBrush(QtCore.Qt.NoBrush)
    if state.color.startswith(_PATTERN_PREFIX):
        return QtGui.QBrush(QtGui.QColor(0, 0, 0), QtCore.Qt.BDiagPattern)
    return QtGui.QBrush(QtGui.QColor(state.color))


def _polygon_path(path: QtGui.QPainterPath, poly: Polygon) -> None:
    rings = [poly.exterior] + list(poly.interiors)
    for ring in rings:
        pts = [QtCore.QPointF(x, y) for x, y in ring.coords]
        if len(pts) >= 3:
            path.addPolygon(QtGui.QPolygonF(pts))
            path.closeSubpath()


def geometry_to_path(geom: BaseGeometry) -> QtGui.QPainterPath:
    """Screen-space shapely (multi)polygon → QPainterPath."""
    path = QtGui.QPainterPath()
    path.setFillRule(QtCore.Qt.OddEvenFill)
    if isinstance(geom, Polygon):
        _polygon_path(path, geom)
    elif isinstance(geom, MultiPolygon):
        for poly in geom.geoms:
            _polygon_path(path, poly)
    else:
        log.debug("Skipping non-polygon geometry %s", geom.geom_type)
    return path


def _ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - pow(-2 * t + 2, 3) / 2


# ── Feature graphics item ─────────────────────────────────────────────

class FeatureItem(QtWidgets.QGraphicsPathItem):
    """One country polygon."""

    def __init__(self, feature: GeoFeature, path: QtGui.QPainterPath,
                 parent_widget: "ChoroplethMapWidget", parent_item=None):
        super().__init__(path, parent_item)
        self.feature = feature
        self._parent_widget = parent_widget
        pen = QtGui.QPen(QtGui.QColor(0, 0, 0))
        pen.setCosmetic(True)
        pen.setWidthF(0.5)
        self.setPen(pen)
        self.setAcceptHoverEvents(True)

    def hoverEnterEvent(self, event):
        pen = self.pen()
        pen.setWidthF(2.0)
        self.setPen(pen)
        self._parent_widget.feature_hovered.emit(self.feature.feature_id)
        super().hoverEnterEvent(event)

    def hoverLeaveEvent(self, event):
        pen = self.pen()
        pen.setWidthF(0.5)
        self.setPen(pen)
        self._parent_widget.feature_left.emit()
        super().hoverLeaveEvent(event)


# ── Main map widget ───────────────────────────────────────────────────

class ChoroplethMapWidget(QtWidgets.QWidget):
    """Interactive world map.

    Signals
    -------
    feature_hovered(str)
        Emitted when the pointer enters a feature (feature_id).
    feature_left()
        Emitted when the pointer leaves a feature.
    """

    feature_hovered = QtCore.pyqtSignal(str)
    feature_left = QtCore.pyqtSignal()

    _WHEEL_FACTOR = 1.12

    def __init__(
        self,
        features: Sequence[GeoFeature],
        fitter: ViewportFitter,
        transition_ms: int = 750,
        parent: Optional[QtWidgets.QWidget] = None,
    ):
        super().__init__(parent)
        self._fitter = fitter
        proj = fitter.projection
        self._width = proj.width
        self._height = proj.height

        self._scene = QtWidgets.QGraphicsScene(self)
        self._scene.setSceneRect(0, 0, self._width, self._height)
        self._scene.setBackgroundBrush(QtGui.QColor(255, 255, 255))
        self._view = QtWidgets.QGraphicsView(self._scene, self)
        self._view.setRenderHint(QtGui.QPainter.Antialiasing)
        self._view.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self._view.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self._view.setAlignment(QtCore.Qt.AlignLeft | QtCore.Qt.AlignTop)
        self._view.setFixedSize(int(self._width) + 2, int(self._height) + 2)

        # camera transforms apply to this root; features are its children
        self._root = QtWidgets.QGraphicsRectItem(0, 0, 0, 0)
        self._root.setPen(QtGui.QPen(QtCore.Qt.NoPen))
        self._scene.addItem(self._root)

        self._items: Dict[str, FeatureItem] = {}
        for feat in features:
            path = geometry_to_path(fitter.projected(feat))
            self._items[feat.feature_id] = FeatureItem(feat, path, self, self._root)
        log.info("Map widget: %d feature items", len(self._items))

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._view)

        # Camera animation state
        self._camera = CameraTransform.identity()
        self._anim_from: Optional[CameraTransform] = None
        self._anim_to: Optional[CameraTransform] = None
        self._anim_start_time = 0.0
        self._anim_duration = max(transition_ms, 1) / 1000.0
        self._anim_timer = QtCore.QTimer(self)
        self._anim_timer.setInterval(16)
        self._anim_timer.timeout.connect(self._animate_step)

    @property
    def camera(self) -> CameraTransform:
        return self._camera

    def item(self, feature_id: str) -> Optional[FeatureItem]:
        return self._items.get(feature_id)

    def apply_states(self, states: List[RenderState]) -> None:
        for st in states:
            item = self._items.get(st.feature_id)
            if item is None:
                continue
            item.setBrush(_brush_for(st))
            item.setOpacity(st.opacity)

    def set_camera(self, camera: CameraTransform, animate: bool = True) -> None:
        if not animate:
            self._anim_timer.stop()
            self._set_transform(camera)
            return
        self._anim_from = self._camera
        self._anim_to = camera
        self._anim_start_time = time.time()
        self._anim_timer.start()

    def _set_transform(self, camera: CameraTransform) -> None:
        self._camera = camera
        self._root.setTransform(QtGui.QTransform(
            camera.scale, 0.0, 0.0, camera.scale, camera.translate_x, camera.translate_y,
        ))

    def _animate_step(self) -> None:
        """One frame of the camera transition."""
        if self._anim_from is None or self._anim_to is None:
            self._anim_timer.stop()
            return

        elapsed = time.time() - self._anim_start_time
        t = min(elapsed / self._anim_duration, 1.0)
        ease = _ease_in_out_cubic(t)

        f, to = self._anim_from, self._anim_to
        self._set_transform(CameraTransform(
            f.scale + (to.scale - f.scale) * ease,
            f.translate_x + (to.translate_x - f.translate_x) * ease,
            f.translate_y + (to.translate_y - f.translate_y) * ease,
        ))
        if t >= 1.0:
            self._anim_timer.stop()

    def wheelEvent(self, event):
        """Zoom anchored under the cursor, clamped to the fitter's zoom extent."""
        c = self._camera
        factor = self._WHEEL_FACTOR if event.angleDelta().y() > 0 else 1.0 / self._WHEEL_FACTOR
        scale = max(self._fitter.min_scale, min(self._fitter.max_scale, c.scale * factor))
        pos = self._view.mapToScene(event.pos())
        k = scale / c.scale
        self._anim_timer.stop()
        self._set_transform(CameraTransform(
            scale,
            pos.x() - k * (pos.x() - c.translate_x),
            pos.y() - k * (pos.y() - c.translate_y),
        ))
        event.accept()


# ── Legend ────────────────────────────────────────────────────────────

class _Swatch(QtWidgets.QLabel):
    def __init__(self, entry: LegendEntry, bar: "LegendBar"):
        super().__init__(entry.label)
        self.entry = entry
        self._bar = bar
        self.setAlignment(QtCore.Qt.AlignCenter)
        self.setMinimumWidth(70)
        if entry.color.startswith(_PATTERN_PREFIX):
            style = "background: qlineargradient(x1:0, y1:0, x2:1, y2:1, stop:0 #ffffff, stop:1 #bbbbbb);"
        else:
            style = f"background: {entry.color};"
        self.setStyleSheet(style + " border: 1px solid #888; padding: 2px 4px; font-size: 10px;")

    def enterEvent(self, event):
        self._bar.bucket_hovered.emit(self.entry.bucket)
        super().enterEvent(event)

    def leaveEvent(self, event):
        self._bar.bucket_left.emit()
        super().leaveEvent(event)


class LegendBar(QtWidgets.QWidget):
    """Colour bar with a dedicated "No data" swatch.

    Signals
    -------
    bucket_hovered(object)
        Bucket index, or None for the "No data" swatch.
    bucket_left()
    """

    bucket_hovered = QtCore.pyqtSignal(object)
    bucket_left = QtCore.pyqtSignal()

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self._layout = QtWidgets.QHBoxLayout(self)
        self._layout.setContentsMargins(4, 4, 4, 4)
        self._layout.setSpacing(0)

    def set_entries(self, entries: List[LegendEntry]) -> None:
        while self._layout.count():
            w = self._layout.takeAt(0).widget()
            if w is not None:
                w.deleteLater()
        for entry in entries:
            self._layout.addWidget(_Swatch(entry, self))
        self._layout.addStretch(1)


# ── Trend tooltip panel ───────────────────────────────────────────────

class TrendPanel(QtWidgets.QWidget):
    """Country name, selected-year value and a line chart of the trend."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self._title = QtWidgets.QLabel("")
        self._title.setStyleSheet("font-weight: bold;")
        self._value = QtWidgets.QLabel("")
        self._plot = pg.PlotWidget(background="w")
        self._plot.setFixedSize(300, 200)
        self._plot.hideButtons()
        self._plot.setMouseEnabled(x=False, y=False)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.addWidget(self._title)
        layout.addWidget(self._value)
        layout.addWidget(self._plot)
        self.clear()

    def clear(self) -> None:
        self._title.setText("")
        self._value.setText("")
        self._plot.clear()
        self._plot.setVisible(False)

    def show_payload(self, payload: TooltipPayload) -> None:
        self._title.setText(f"{payload.entity_name}  {payload.year}")
        self._value.setText(f"{payload.value_text} {payload.measure}")
        self._plot.clear()

        series = payload.series
        if series is None:
            self._plot.setVisible(False)
            return

        years = [p.year for p in series.points]
        values = [p.value for p in series.points]
        self._plot.plot(years, values, pen=pg.mkPen("steelblue", width=2))
        self._plot.setYRange(0, max(series.max_point.value, 0.0))

        max_line = pg.InfiniteLine(
            pos=series.max_point.value, angle=0,
            pen=pg.mkPen("grey", style=QtCore.Qt.DotLine),
            label=payload.max_text, labelOpts={"position": 0.9, "color": "grey"},
        )
        self._plot.addItem(max_line)

        if payload.value is not None:
            self._plot.addItem(pg.InfiniteLine(
                pos=payload.year, angle=90,
                pen=pg.mkPen("grey", style=QtCore.Qt.DashLine),
            ))
            self._plot.plot(
                [payload.year], [payload.value],
                pen=None, symbol="o", symbolSize=10, symbolBrush="steelblue",
            )
        self._plot.setVisible(True)
