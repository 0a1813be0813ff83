import datetime
import logging
from typing import Optional

from PySide6.QtCore import Qt, QRect, QRectF, QPoint, QSize, Signal
from PySide6.QtGui import QBrush, QColor, QFont, QFontMetrics, QPainter, QPen
from PySide6.QtWidgets import QWidget

from timeselect.daylight import daylight_spans
from timeselect.interaction import DragTarget, SelectionController
from timeselect.layout import (
    DATE_LABEL_Y,
    HOUR_LABEL_Y,
    IntervalGeometry,
    LineKind,
    RulerLayout,
    TimelineFrame,
    interval_geometry,
    ruler_lines,
)
from timeselect.models import SelectorSettings, TimeInterval
from timeselect.utils import (
    DEFAULT_DISPLAY_MINUTES,
    DEFAULT_GRID_INTERVAL_MS,
    trunc_div,
)

logger = logging.getLogger(__name__)

# =========================
# Interval selector widget
# =========================


class TimeIntervalSelector(QWidget):
    """Select two points in time on a horizontal hour ruler.

    Drag a knob to move one end of the interval, drag the body to move both,
    drag anywhere else to pan. The wheel changes how many minutes are shown.
    """

    intervalChanged = Signal(object)
    displayMinutesChanged = Signal(int)
    windowChanged = Signal(object)

    def __init__(
        self,
        interval: Optional[TimeInterval] = None,
        display_minutes: int = DEFAULT_DISPLAY_MINUTES,
        parent=None,
    ):
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setMinimumSize(QSize(400, 35))
        self.setCursor(Qt.SizeAllCursor)

        self.controller = SelectionController(display_minutes, DEFAULT_GRID_INTERVAL_MS)
        # None follows the system zone rules for each instant
        self.tz: Optional[datetime.tzinfo] = None
        self._settings = SelectorSettings(display_minutes=display_minutes)
        self._interval: Optional[TimeInterval] = None

        # last paint output, kept for hit-testing and tests
        self.ruler: Optional[RulerLayout] = None
        self.border = 1

        # appearance
        self.background_color = QColor(255, 255, 255)
        self.disabled_background_color = QColor(235, 235, 235)
        self.knob_color = QColor.fromRgbF(0.2, 0.3, 0.4)
        self.interval_color = QColor.fromRgbF(0.8, 0.9, 1.0, 0.8)
        self.interval_border_color = QColor(50, 50, 50)
        self.interval_text_color = QColor(0, 0, 0)
        self.hour_line_color = QColor(150, 150, 150)
        self.half_hour_line_color = QColor(180, 180, 180)
        self.day_line_color = QColor(100, 100, 100)
        self.daylight_color = QColor(250, 235, 170, 110)
        self.date_font = QFont("Sans", 8, QFont.Bold)
        self.hour_font = QFont("Sans", 8)
        self.time_font = QFont("Sans", 7, QFont.Bold)

        if interval is not None:
            self.set_interval(interval)

    def sizeHint(self):
        return QSize(400, 35)

    # -------------------------
    # Public API
    # -------------------------

    def interval(self) -> Optional[TimeInterval]:
        return self._interval

    def set_interval(self, interval: Optional[TimeInterval]):
        if self._interval is not None:
            self._interval.remove_change_listener(self._on_interval_changed)
        self._interval = interval
        if self._interval is not None:
            self._interval.add_change_listener(self._on_interval_changed)
        if self.controller.set_interval(interval):
            logger.debug("Bound interval outside the window, re-centered")
            self.windowChanged.emit(self.window_start())
        self.update()

    def show_interval(self):
        """Move the visible window to start one hour before the interval."""
        if self._interval is None:
            return
        self.controller.show_interval()
        self.controller.geometry = None
        self.windowChanged.emit(self.window_start())
        self.update()

    def display_minutes(self) -> int:
        return self.controller.display_minutes

    def set_display_minutes(self, minutes: int):
        self.controller.set_display_minutes(minutes)
        self.controller.geometry = None
        self._settings.display_minutes = self.controller.display_minutes
        self.displayMinutesChanged.emit(self.controller.display_minutes)
        self.update()

    def grid_interval(self) -> int:
        return self.controller.grid_interval_ms

    def set_grid_interval(self, grid_interval_ms: int):
        self.controller.set_grid_interval(grid_interval_ms)
        self._settings.grid_interval_ms = self.controller.grid_interval_ms

    def window_start(self) -> datetime.datetime:
        return self.controller.window_start

    def window_end(self) -> datetime.datetime:
        return self.controller.window_end

    def set_window_start(self, start: datetime.datetime):
        self.controller.window_start = start
        self.controller.geometry = None
        self.windowChanged.emit(start)
        self.update()

    def settings(self) -> SelectorSettings:
        return self._settings.clone()

    def apply_settings(self, settings: SelectorSettings):
        sm = settings.normalized()
        self._settings = sm
        self.controller.set_grid_interval(sm.grid_interval_ms)
        if sm.display_minutes != self.controller.display_minutes:
            self.set_display_minutes(sm.display_minutes)
        self.update()

    def geometry_cache(self) -> Optional[IntervalGeometry]:
        return self.controller.geometry

    def changeEvent(self, event):
        super().changeEvent(event)
        if not self.isEnabled():
            self.controller.release()
        self.update()

    # -------------------------
    # Painting
    # -------------------------

    def _content_rect(self) -> QRect:
        return self.rect().adjusted(self.border, self.border, -self.border, -self.border)

    def _frame(self) -> TimelineFrame:
        return self.controller.frame(self._content_rect())

    def layout_pass(self):
        """Compute the ruler and interval geometry for the current state."""
        frame = self._frame()
        self.ruler = ruler_lines(frame, self.tz, self._settings.date_format)
        self.controller.geometry = interval_geometry(
            frame, self._interval, self._settings.time_format, self.tz
        )
        return frame

    def paintEvent(self, event):
        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing, False)
        if not self.isEnabled():
            p.fillRect(self.rect(), self.disabled_background_color)
            self._paint_border(p)
            return
        p.fillRect(self.rect(), self.background_color)

        frame = self.layout_pass()
        if self._settings.show_daylight:
            self._paint_daylight(p, frame)
        self._paint_ruler(p, frame)
        geom = self.controller.geometry
        if geom is not None:
            self._paint_interval(p, geom)
        self._paint_border(p)

    def _paint_daylight(self, p: QPainter, frame: TimelineFrame):
        spans = daylight_spans(
            frame.window_start,
            frame.window_end,
            self._settings.location_lat,
            self._settings.location_lon,
            self.tz,
        )
        p.save()
        p.setPen(Qt.NoPen)
        p.setBrush(self.daylight_color)
        for s, e in spans:
            x0 = frame.x_for(s)
            x1 = frame.x_for(e)
            p.drawRect(QRectF(x0, frame.rect.top(), x1 - x0, frame.rect.height()))
        p.restore()

    def _paint_ruler(self, p: QPainter, frame: TimelineFrame):
        tl = frame.rect
        for line in self.ruler.lines:
            top = tl.top()
            if line.kind == LineKind.DAY:
                p.setPen(self.day_line_color)
            elif line.kind == LineKind.HOUR:
                p.setPen(self.hour_line_color)
            else:
                top = tl.top() + DATE_LABEL_Y + 1
                p.setPen(self.half_hour_line_color)
            p.drawLine(line.x, top, line.x, tl.bottom())
            if line.label:
                p.setFont(self.hour_font)
                p.drawText(line.x + 2, tl.top() + HOUR_LABEL_Y, line.label)

        p.setPen(self.day_line_color)
        p.setFont(self.date_font)
        p.drawText(self.ruler.date_label_x, tl.top() + DATE_LABEL_Y, self.ruler.date_label)

    def _paint_interval(self, p: QPainter, geom: IntervalGeometry):
        p.setPen(Qt.NoPen)
        p.setBrush(QBrush(self.interval_color))
        p.drawRect(geom.body)
        p.setPen(QPen(self.interval_border_color, 1))
        p.setBrush(Qt.NoBrush)
        p.drawRect(geom.body)

        p.setPen(Qt.NoPen)
        p.setBrush(self.knob_color)
        p.drawRect(geom.start_knob)
        p.drawRect(geom.end_knob)

        metrics = QFontMetrics(self.time_font)
        p.setFont(self.time_font)
        p.setPen(self.interval_text_color)
        top = geom.body.top()
        p.drawText(
            geom.body.left() + geom.start_knob.width() + 2,
            top + metrics.height(),
            geom.start_label,
        )
        end_width = metrics.horizontalAdvance(geom.end_label)
        p.drawText(
            geom.body.left() + geom.body.width() - end_width - 15,
            top + 2 * metrics.height(),
            geom.end_label,
        )

    def _paint_border(self, p: QPainter):
        p.setPen(QPen(self.day_line_color, self.border))
        p.setBrush(Qt.NoBrush)
        p.drawRect(self.rect().adjusted(0, 0, -1, -1))

    # -------------------------
    # Hit testing & interactions
    # -------------------------

    def _ensure_geometry(self):
        if self.controller.geometry is None and self._interval is not None:
            self.layout_pass()

    def mouseMoveEvent(self, e):
        if not self.isEnabled():
            return
        pos = e.position().toPoint()
        if self.controller.dragging:
            self._handle_drag(pos)
            return
        self._ensure_geometry()
        self.setCursor(self.controller.cursor_for(pos))

    def mousePressEvent(self, e):
        if not self.isEnabled() or e.button() != Qt.LeftButton:
            return
        self._ensure_geometry()
        self.controller.press(e.position().toPoint())

    def mouseReleaseEvent(self, e):
        if e.button() == Qt.LeftButton:
            self.controller.release()

    def wheelEvent(self, e):
        if not self.isEnabled():
            return
        notches = trunc_div(-e.angleDelta().y(), 120)
        if notches and self.controller.wheel(notches):
            logger.debug("Display length changed to %d minutes", self.controller.display_minutes)
            self.controller.geometry = None
            self._settings.display_minutes = self.controller.display_minutes
            self.displayMinutesChanged.emit(self.controller.display_minutes)
            self.update()
        e.accept()

    def _handle_drag(self, pos: QPoint):
        window_before = self.controller.window_start
        if not self.controller.drag_to(pos, self._content_rect().width()):
            return
        if self.controller.target == DragTarget.COMPONENT or self.controller.window_start != window_before:
            self.windowChanged.emit(self.controller.window_start)
        self.layout_pass()
        self.update()

    def _on_interval_changed(self, interval: TimeInterval):
        self.controller.geometry = None
        self.intervalChanged.emit(interval)
        self.update()
