import logging
import sys

from PySide6.QtWidgets import QApplication
from trashtalk.config import load_settings
from trashtalk.ui.main_window import TicTacToeWindow
from trashtalk.ui.theme import apply_theme

# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )

# -----------------------------------------------------------------------------
# ENTRY POINT
# -----------------------------------------------------------------------------

def main():
    settings = load_settings()
    setup_logging(settings.log_level)

    app = QApplication(sys.argv)
    app.setStyle('Fusion')
    apply_theme(app, settings.theme)

    window = TicTacToeWindow(settings)
    window.resize(560, 820)
    window.show()
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
