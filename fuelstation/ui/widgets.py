from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QPainter
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from .theme import ACCENT_COLOR, ERROR_COLOR, TEXT_PRIMARY, TEXT_SECONDARY


class NavigationButton(QPushButton):
    def __init__(self, text: str, *, key: str, icon: Optional[str] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.key = key
        self.setText(f"{icon or ''}  {text}".strip())
        self.setCursor(Qt.PointingHandCursor)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setCheckable(True)
        self.setStyleSheet(
            f"""
            QPushButton {{
                text-align: left;
                padding: 12px 16px;
                border-radius: 12px;
                background: transparent;
                border: 1px solid transparent;
                color: {TEXT_SECONDARY};
            }}
            QPushButton:checked {{
                background: {ACCENT_COLOR};
                color: white;
            }}
            QPushButton:hover {{
                background: rgba(249,115,22,0.15);
                color: white;
            }}
            """
        )


class NavigationPanel(QFrame):
    page_selected = Signal(str)

    def __init__(self, title: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("Card")
        self.setMinimumWidth(240)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(18, 22, 18, 22)
        layout.setSpacing(10)

        logo = QLabel(f"⛽ {title}")
        logo.setStyleSheet("font-size: 20px; font-weight: 700;")
        layout.addWidget(logo)

        tagline = QLabel("Station management")
        tagline.setStyleSheet(f"color: {TEXT_SECONDARY}; font-size: 13px;")
        layout.addWidget(tagline)

        self.button_container = QVBoxLayout()
        self.button_container.setSpacing(4)
        layout.addLayout(self.button_container)
        layout.addStretch(1)

        self._buttons: Dict[str, NavigationButton] = {}

    def add_page(self, *, key: str, text: str, icon: Optional[str] = None) -> None:
        button = NavigationButton(text, key=key, icon=icon)
        button.toggled.connect(lambda checked, k=key: checked and self.page_selected.emit(k))
        self.button_container.addWidget(button)
        self._buttons[key] = button

    def set_current(self, key: str) -> None:
        for btn_key, button in self._buttons.items():
            button.blockSignals(True)
            button.setChecked(btn_key == key)
            button.blockSignals(False)

    def buttons(self) -> Iterable[NavigationButton]:
        return self._buttons.values()


class SectionTitle(QLabel):
    def __init__(self, text: str, *, large: bool = False, parent: Optional[QWidget] = None) -> None:
        super().__init__(text, parent)
        self.setWordWrap(True)
        self.setStyleSheet(
            "font-weight: 700; "
            + ("font-size: 24px;" if large else "font-size: 18px;")
        )


class PillLabel(QLabel):
    def __init__(self, text: str, *, color: str = ACCENT_COLOR, parent: Optional[QWidget] = None) -> None:
        super().__init__(text, parent)
        self.setAlignment(Qt.AlignCenter)
        self.set_color(color)

    def set_color(self, color: str) -> None:
        self.setStyleSheet(
            f"background-color: {color}; color: white; padding: 4px 12px; border-radius: 999px; font-weight: 600;"
        )


class FlowRow(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(10)


class MetricCard(QFrame):
    def __init__(self, title: str, *, accent: Optional[str] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("Card")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(6)

        title_label = QLabel(title)
        title_label.setStyleSheet(f"color: {TEXT_SECONDARY}; font-size: 13px;")
        layout.addWidget(title_label)

        self.value_label = QLabel("—")
        self.value_label.setStyleSheet(
            f"font-size: 26px; font-weight: 700; color: {accent or TEXT_PRIMARY};"
        )
        layout.addWidget(self.value_label)
        layout.addStretch(1)

    def set_value(self, text: str) -> None:
        self.value_label.setText(text)


class QrCodeView(QWidget):
    """Paints a QR module grid, black on white, scaled to the widget."""

    def __init__(self, size: int = 220, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.matrix: List[List[bool]] = []
        self.setFixedSize(size, size)

    def set_matrix(self, matrix: List[List[bool]]) -> None:
        self.matrix = matrix
        self.update()

    def clear(self) -> None:
        self.set_matrix([])

    def paintEvent(self, event) -> None:  # noqa: D401 - Qt override
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("white"))
        if self.matrix:
            count = len(self.matrix)
            cell = max(1, min(self.width(), self.height()) // count)
            offset_x = (self.width() - cell * count) // 2
            offset_y = (self.height() - cell * count) // 2
            dark = QColor("black")
            for y, row in enumerate(self.matrix):
                for x, filled in enumerate(row):
                    if filled:
                        painter.fillRect(offset_x + x * cell, offset_y + y * cell, cell, cell, dark)
        painter.end()


def danger_button(text: str) -> QPushButton:
    button = QPushButton(text)
    button.setStyleSheet(
        f"color: {ERROR_COLOR}; border: 1px solid {ERROR_COLOR}; border-radius: 10px; padding: 10px 16px;"
    )
    return button


def styled_button(text: str, kind: str = "primary") -> QPushButton:
    button = QPushButton(text)
    button.setProperty("class", kind)
    return button


class WindowNotifier:
    """Success goes to the status bar, errors to a warning box."""

    def __init__(self, window: QMainWindow) -> None:
        self.window = window

    def success(self, message: str) -> None:
        self.window.statusBar().showMessage(f"✅ {message}", 5000)

    def error(self, message: str) -> None:
        self.window.statusBar().showMessage(f"⚠️ {message}", 5000)
        QMessageBox.warning(self.window, "Error", message)
