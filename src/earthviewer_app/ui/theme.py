"""Dark palette for the globe window."""
from __future__ import annotations

from PyQt6.QtGui import QColor, QPalette

TOOLBAR_STYLE = "QToolBar { border: none; spacing: 6px; padding: 4px; }"


def build_space_palette() -> QPalette:
    palette = QPalette()
    roles = {
        QPalette.ColorRole.Window: QColor(12, 14, 22),
        QPalette.ColorRole.WindowText: QColor(210, 216, 230),
        QPalette.ColorRole.Base: QColor(8, 10, 16),
        QPalette.ColorRole.AlternateBase: QColor(20, 24, 34),
        QPalette.ColorRole.Text: QColor(225, 230, 240),
        QPalette.ColorRole.Button: QColor(26, 30, 42),
        QPalette.ColorRole.ButtonText: QColor(225, 230, 240),
        QPalette.ColorRole.Highlight: QColor(46, 134, 222),
        QPalette.ColorRole.HighlightedText: QColor(255, 255, 255),
    }
    for role, color in roles.items():
        palette.setColor(role, color)
    return palette


def apply_space_theme(app) -> None:
    """Apply the palette and toolbar styling to the application."""
    app.setPalette(build_space_palette())
    app.setStyle("Fusion")
    app.setStyleSheet(TOOLBAR_STYLE)
