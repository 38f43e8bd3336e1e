from __future__ import annotations

from dataclasses import dataclass
from typing import List

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFontMetrics, QPainter, QPen
from PySide6.QtWidgets import QSlider, QStyle, QStyleOptionSlider


@dataclass
class TagMarker:
    time: float
    label: str


class TimelineSlider(QSlider):
    def __init__(self, orientation: Qt.Orientation = Qt.Horizontal, parent=None) -> None:
        super().__init__(orientation, parent)
        self._duration_seconds = 0.0
        self._markers: List[TagMarker] = []
        self._active_index: int | None = None
        self._colors = {
            "tag": "#667eea",
            "tag_active": "#f1c40f",
        }
        self._show_labels = True
        self._label_max_chars = 12

    def set_duration_seconds(self, seconds: float) -> None:
        self._duration_seconds = max(0.0, float(seconds))
        self.update()

    def set_markers(self, markers: List[TagMarker], active_index: int | None = None) -> None:
        self._markers = markers
        self._active_index = active_index
        self.update()

    def set_active_index(self, index: int | None) -> None:
        if index != self._active_index:
            self._active_index = index
            self.update()

    def set_config(self, colors: dict, show_labels: bool, label_max_chars: int) -> None:
        self._colors = dict(self._colors) | colors
        self._show_labels = bool(show_labels)
        self._label_max_chars = max(4, int(label_max_chars))
        self.update()

    def mousePressEvent(self, event) -> None:
        """Jump the playhead to a click anywhere on the groove, not just on the handle."""
        if event.button() == Qt.LeftButton:
            opt = QStyleOptionSlider()
            self.initStyleOption(opt)
            evt_point = event.position().toPoint()
            handle = self.style().subControlRect(QStyle.CC_Slider, opt, QStyle.SC_SliderHandle, self)
            if not handle.contains(evt_point):
                groove = self.style().subControlRect(QStyle.CC_Slider, opt, QStyle.SC_SliderGroove, self)
                if groove.contains(evt_point) and groove.width() > 0:
                    offset = max(0, min(groove.width(), evt_point.x() - groove.x()))
                    value = QStyle.sliderValueFromPosition(
                        self.minimum(),
                        self.maximum(),
                        int(offset),
                        groove.width(),
                        opt.upsideDown,
                    )
                    self.setSliderDown(True)
                    self.sliderPressed.emit()
                    self.setValue(value)
                    self.sliderMoved.emit(value)
                    event.accept()
                    return
        super().mousePressEvent(event)

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if self._duration_seconds <= 0 or not self._markers:
            return

        opt = QStyleOptionSlider()
        self.initStyleOption(opt)
        groove = self.style().subControlRect(QStyle.CC_Slider, opt, QStyle.SC_SliderGroove, self)
        if groove.width() <= 0:
            return

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        total = self._duration_seconds
        tag_color = QColor(self._colors.get("tag", "#667eea"))
        active_color = QColor(self._colors.get("tag_active", "#f1c40f"))
        fm = QFontMetrics(self.font())

        for idx, marker in enumerate(self._markers):
            seconds = min(max(0.0, marker.time), total)
            x = groove.x() + int((seconds / total) * groove.width())
            painter.setPen(QPen(active_color if idx == self._active_index else tag_color, 2))
            painter.drawLine(x, groove.top(), x, groove.bottom())
            if self._show_labels and marker.label:
                text = marker.label[: self._label_max_chars]
                text_width = fm.horizontalAdvance(text)
                text_x = max(0, min(x + 2, self.width() - text_width - 2))
                painter.drawText(text_x, groove.top() - 4, text)
        painter.end()
