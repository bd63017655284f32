from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt
from PySide6.QtGui import QPalette, QColor

# -----------------------------------------------------------------------------
# COLOR CONSTANTS
# -----------------------------------------------------------------------------

PRIMARY_COLOR = QColor("#1976D2")
SECONDARY_COLOR = QColor("#424242")
ACCENT_COLOR = QColor("#FF4081")

DARK = {
    QPalette.Window: QColor(53, 53, 53),
    QPalette.WindowText: Qt.white,
    QPalette.Base: QColor(35, 35, 35),
    QPalette.AlternateBase: QColor(53, 53, 53),
    QPalette.ToolTipBase: Qt.white,
    QPalette.ToolTipText: Qt.black,
    QPalette.Text: Qt.white,
    QPalette.Button: QColor(66, 66, 66),
    QPalette.ButtonText: Qt.white,
    QPalette.BrightText: ACCENT_COLOR,
    QPalette.Link: QColor(42, 130, 218),
    QPalette.Highlight: PRIMARY_COLOR,
    QPalette.HighlightedText: Qt.white,
    QPalette.PlaceholderText: QColor(160, 160, 160),
}

LIGHT = {
    QPalette.Window: QColor(248, 249, 250),
    QPalette.WindowText: SECONDARY_COLOR,
    QPalette.Base: Qt.white,
    QPalette.AlternateBase: QColor(250, 251, 255),
    QPalette.ToolTipBase: QColor(255, 255, 220),
    QPalette.ToolTipText: Qt.black,
    QPalette.Text: SECONDARY_COLOR,
    QPalette.Button: QColor(233, 236, 239),
    QPalette.ButtonText: SECONDARY_COLOR,
    QPalette.BrightText: ACCENT_COLOR,
    QPalette.Link: PRIMARY_COLOR,
    QPalette.Highlight: PRIMARY_COLOR,
    QPalette.HighlightedText: Qt.white,
    QPalette.PlaceholderText: QColor(136, 136, 136),
}

DISABLED_TEXT_COLOR = QColor(127, 127, 127)

THEMES = {"dark": DARK, "light": LIGHT}

# -----------------------------------------------------------------------------
# PALETTE SETUP
# -----------------------------------------------------------------------------

def build_palette(theme: str) -> QPalette:
    palette = QPalette()
    for role, color in THEMES[theme].items():
        palette.setColor(role, color)
    # Disabled roles
    for role in (QPalette.Text, QPalette.ButtonText, QPalette.WindowText):
        palette.setColor(QPalette.Disabled, role, DISABLED_TEXT_COLOR)
    return palette


def apply_theme(app: QApplication, theme: str):
    """
    Apply the light or dark palette to the whole application.
    """
    app.setPalette(build_palette(theme))


def other_theme(theme: str) -> str:
    return "light" if theme == "dark" else "dark"
