from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtCore import QSize, Signal, QPointF
from PySide6.QtGui import QPainter, QColor, QPen

from ..game_logic import Mark

X_COLOR = QColor("#1976D2")
O_COLOR = QColor("#FF4081")
GRID_COLOR = QColor("#9e9e9e")
WIN_COLOR = QColor(255, 193, 7, 90)


class BoardWidget(QWidget):
    """
    custom widget to draw and click on tic-tac-toe board
    """
    cell_clicked = Signal(int)  # emits cell index 0-8 on click

    def __init__(self, controller, parent=None):
        super().__init__(parent)
        self.controller = controller  # read-only view of the game
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(QSize(240, 240))
        self._accept_clicks = True      # toggle click handling

    def set_accept_clicks(self, accept):
        # enable/disable user input
        self._accept_clicks = accept

    def accepts_clicks(self):
        return self._accept_clicks and not self.controller.is_disabled

    def heightForWidth(self, width):
        # keep square shape
        return width

    def hasHeightForWidth(self):
        return True

    def _geometry(self):
        w, h = self.width(), self.height()
        side = min(w, h)
        return (w - side) / 2, (h - side) / 2, side

    def index_at(self, x, y):
        """
        map widget coords to a cell index, None outside the grid
        """
        ox, oy, side = self._geometry()
        if side <= 0 or not (ox <= x < ox + side and oy <= y < oy + side):
            return None
        cell = side / 3
        col = min(int((x - ox) // cell), 2)
        row = min(int((y - oy) // cell), 2)
        return row * 3 + col

    def paintEvent(self, event):
        """
        draw grid, X/O marks, and highlight winning line
        """
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        ox, oy, side = self._geometry()
        cell_size = side / 3
        painter.fillRect(self.rect(), self.palette().base())

        board = self.controller.board
        # winning cells first so marks paint on top
        line = self.controller.game_logic.winning_line()
        if line:
            for i in line:
                r, c = divmod(i, 3)
                painter.fillRect(int(ox + c * cell_size), int(oy + r * cell_size),
                                 int(cell_size), int(cell_size), WIN_COLOR)

        painter.setPen(QPen(GRID_COLOR, 2))
        for i in range(1, 3):
            x = ox + i * cell_size
            painter.drawLine(int(x), int(oy), int(x), int(oy + side))
            y = oy + i * cell_size
            painter.drawLine(int(ox), int(y), int(ox + side), int(y))

        for i, sym in enumerate(board):
            if sym == Mark.EMPTY:
                continue
            r, c = divmod(i, 3)
            cx = ox + c * cell_size + cell_size / 2
            cy = oy + r * cell_size + cell_size / 2
            rad = cell_size / 2 * 0.6
            if sym == Mark.X:
                painter.setPen(QPen(X_COLOR, 6))
                # two crossing lines
                painter.drawLine(QPointF(cx - rad, cy - rad), QPointF(cx + rad, cy + rad))
                painter.drawLine(QPointF(cx + rad, cy - rad), QPointF(cx - rad, cy + rad))
            else:
                painter.setPen(QPen(O_COLOR, 6))
                painter.drawEllipse(QPointF(cx, cy), rad, rad)
        painter.end()

    def mouseReleaseEvent(self, event):
        """
        handle clicks: map coords to board cell and emit
        """
        if not self.accepts_clicks():
            return
        index = self.index_at(event.position().x(), event.position().y())
        if index is None or self.controller.board[index] != Mark.EMPTY:
            return  # occupied cells are a no-op
        self.cell_clicked.emit(index)
