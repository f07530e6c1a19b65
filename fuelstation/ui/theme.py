from __future__ import annotations

from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

PRIMARY_BG = "#0f172a"
SURFACE_BG = "#162036"
CARD_BG = "#1e293b"
ACCENT_COLOR = "#f97316"
ACCENT_COLOR_SOFT = "#fb923c"
ACCENT_HOVER = "#ea580c"
SUCCESS_COLOR = "#22c55e"
WARNING_COLOR = "#facc15"
ERROR_COLOR = "#ef4444"
MUTED_COLOR = "#64748b"
TEXT_PRIMARY = "#f8fafc"
TEXT_SECONDARY = "#cbd5e1"
BORDER_COLOR = "#334155"

STATUS_COLORS = {
    "completed": SUCCESS_COLOR,
    "pending": WARNING_COLOR,
    "failed": ERROR_COLOR,
    "cancelled": MUTED_COLOR,
}

ROLE_COLORS = {
    "admin": ERROR_COLOR,
    "manager": ACCENT_COLOR_SOFT,
    "cashier": MUTED_COLOR,
}


def apply_palette(app: QApplication) -> None:
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor(PRIMARY_BG))
    palette.setColor(QPalette.WindowText, QColor(TEXT_PRIMARY))
    palette.setColor(QPalette.Base, QColor(CARD_BG))
    palette.setColor(QPalette.AlternateBase, QColor(SURFACE_BG))
    palette.setColor(QPalette.Text, QColor(TEXT_PRIMARY))
    palette.setColor(QPalette.Button, QColor(SURFACE_BG))
    palette.setColor(QPalette.ButtonText, QColor(TEXT_PRIMARY))
    palette.setColor(QPalette.Highlight, QColor(ACCENT_COLOR))
    palette.setColor(QPalette.HighlightedText, QColor(PRIMARY_BG))
    app.setPalette(palette)
    app.setStyleSheet(
        f"""
        QWidget {{
            color: {TEXT_PRIMARY};
            font-family: 'Segoe UI', 'Inter', sans-serif;
            font-size: 14px;
        }}
        QFrame#Card {{
            background-color: {CARD_BG};
            border-radius: 14px;
            border: 1px solid {BORDER_COLOR};
        }}
        QPushButton {{
            border-radius: 10px;
            padding: 10px 16px;
            background-color: transparent;
            border: 1px solid transparent;
        }}
        QPushButton.primary {{
            background-color: {ACCENT_COLOR};
            border: 1px solid {ACCENT_COLOR};
            color: white;
            font-weight: 600;
        }}
        QPushButton.primary:hover {{
            background-color: {ACCENT_HOVER};
        }}
        QPushButton.outline {{
            border: 1px solid {ACCENT_COLOR_SOFT};
            color: {ACCENT_COLOR_SOFT};
        }}
        QPushButton.danger {{
            border: 1px solid {ERROR_COLOR};
            color: {ERROR_COLOR};
        }}
        QLineEdit, QComboBox, QDoubleSpinBox {{
            border-radius: 10px;
            padding: 8px 12px;
            background: {SURFACE_BG};
            border: 1px solid {BORDER_COLOR};
        }}
        QLineEdit:focus {{
            border-color: {ACCENT_COLOR};
        }}
        QTableWidget {{
            border: 1px solid {BORDER_COLOR};
            border-radius: 12px;
            gridline-color: {BORDER_COLOR};
            background: {SURFACE_BG};
        }}
        QHeaderView::section {{
            background: {CARD_BG};
            color: {TEXT_PRIMARY};
            border: none;
            padding: 10px;
            font-weight: 600;
        }}
        """
    )
