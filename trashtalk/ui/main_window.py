import logging

from ..commentary import GREETING, CommentaryWorker, terminal_taunt
from ..config import Settings
from ..controller import GameController
from ..game_logic import GameStatus, Mark
from .board_widget import BoardWidget
from .chat_widget import ChatWidget
from .theme import apply_theme, other_theme

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QPushButton, QLabel, QGroupBox, QSizePolicy
)
from PySide6.QtGui import QFont
from PySide6.QtCore import Qt, QThread, Signal, Slot

log = logging.getLogger(__name__)


class TicTacToeWindow(QMainWindow):
    """
    main window UI and game flow
    """
    commentary_dispatch = Signal(object)    # CommentaryRequest -> worker thread

    def __init__(self, settings=None):
        """
        init state, ui widgets, signals
        """
        super().__init__()
        self.settings = settings or Settings()
        self.theme = self.settings.theme
        self.controller = GameController(self.settings, parent=self)
        self.board_widget = BoardWidget(self.controller, parent=self)
        self.chat_widget = ChatWidget(parent=self)
        # commentary thread + worker placeholders
        self.commentary_thread = None; self.commentary_worker = None

        self._setup_ui()
        self._connect_controller()
        self._setup_and_start_worker()
        self.chat_widget.add_message("ai", GREETING)
        self._refresh_status()

    def _setup_ui(self):
        '''window look + layout'''
        self.setWindowTitle("Tic Tac Toe Trash Talk")
        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QVBoxLayout(self.central_widget)

        self._create_header()              # title + theme/restart
        self.main_layout.addWidget(self.header_widget)

        self.message_label = QLabel("")
        f = QFont(); f.setPointSize(13); f.setBold(True); self.message_label.setFont(f)
        self.message_label.setAlignment(Qt.AlignCenter)
        self.main_layout.addWidget(self.message_label)

        self.main_layout.addWidget(self.board_widget, 1)
        self.board_widget.cell_clicked.connect(self._on_cell_clicked)

        self._create_chat_section()        # taunts + error line
        self.main_layout.addWidget(self.chat_group)

    def _create_header(self):
        # title on the left, buttons on the right
        self.header_widget = QWidget()
        hl = QHBoxLayout(self.header_widget)
        title = QLabel("Tic Tac Toe Trash Talk")
        f = QFont(); f.setPointSize(20); f.setBold(True); title.setFont(f)
        title.setStyleSheet("color: #1976D2;")
        title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        self.theme_button = QPushButton(); self.theme_button.clicked.connect(self.toggle_theme)
        self.reset_button = QPushButton("Restart"); self.reset_button.clicked.connect(self.reset_game)
        self.reset_button.setStyleSheet(
            "background: #FF4081; color: #fff; font-weight: bold; padding: 6px 16px; border-radius: 8px;"
        )
        for w in (title, self.theme_button, self.reset_button):
            hl.addWidget(w)
        self._update_theme_button()

    def _create_chat_section(self):
        '''trash talk chat group'''
        self.chat_group = QGroupBox("Trash Talk Chat")
        layout = QVBoxLayout()
        layout.addWidget(self.chat_widget)
        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #FF4081;")
        self.error_label.setWordWrap(True)
        self.error_label.setVisible(False)
        layout.addWidget(self.error_label)
        self.chat_group.setLayout(layout)

    def _connect_controller(self):
        c = self.controller
        c.board_changed.connect(self.board_widget.update)
        c.board_changed.connect(self._refresh_status)
        c.thinking_changed.connect(lambda _thinking: self._refresh_status())
        c.status_changed.connect(lambda _status: self._refresh_status())
        c.commentary_requested.connect(self._on_commentary_requested)

    def _setup_and_start_worker(self):
        # create thread + worker + connect signals
        self.commentary_thread = QThread(self)
        self.commentary_worker = CommentaryWorker(self.settings)
        self.commentary_worker.moveToThread(self.commentary_thread)
        self.commentary_dispatch.connect(self.commentary_worker.produce)
        self.commentary_worker.taunt_ready.connect(self._on_taunt_ready)
        self.commentary_worker.error_changed.connect(self._on_commentary_error)
        self.commentary_thread.finished.connect(self.commentary_worker.deleteLater)
        self.commentary_thread.start()

    def status_text(self):
        """
        one-line status for the label above the board
        """
        status = self.controller.status
        if status is GameStatus.WON_BY_X:
            return "You win! 🎉"
        if status is GameStatus.WON_BY_O:
            return "AI wins! 🤖"
        if status is GameStatus.DRAW:
            return "It's a draw!"
        if self.controller.is_thinking:
            return "AI is thinking..."
        if self.controller.turn == Mark.X:
            return "Your turn (X)"
        return "AI's turn (O)"

    @Slot()
    def _refresh_status(self):
        self.message_label.setText(self.status_text())
        self.board_widget.set_accept_clicks(not self.controller.is_disabled)
        self.board_widget.update()

    @Slot(int)
    def _on_cell_clicked(self, index):
        # rejected clicks are silent no-ops
        result = self.controller.human_move(index)
        if not result.accepted:
            log.debug("click on %d ignored: %s", index, result.reason.value)

    @Slot(object)
    def _on_commentary_requested(self, request):
        if request.is_terminal:
            # closing line shows at once and replaces any roast still loading
            self.chat_widget.drop_pending()
            if self.commentary_worker:
                self.commentary_worker.cancel_before(request.epoch + 1)
            self.chat_widget.add_message("ai", terminal_taunt(request.outcome))
            return
        self.chat_widget.add_message("user", "My move!")
        if self.controller.status.is_terminal:
            return  # the closing line follows right away
        self.chat_widget.add_placeholder(request.ticket)
        self.commentary_dispatch.emit(request)

    @Slot(int, int, str)
    def _on_taunt_ready(self, ticket, epoch, text):
        # replies for an earlier round are dropped
        if epoch != self.controller.game_logic.epoch:
            return
        self.chat_widget.resolve(ticket, text)

    @Slot(int, str)
    def _on_commentary_error(self, epoch, err):
        if epoch != self.controller.game_logic.epoch:
            return
        self._show_error(err)

    def _show_error(self, err):
        self.error_label.setText(f"AI Chat error: {err}" if err else "")
        self.error_label.setVisible(bool(err))

    def _update_theme_button(self):
        self.theme_button.setText("🌙 Dark" if self.theme == "light" else "☀️ Light")

    @Slot()
    def toggle_theme(self):
        self.theme = other_theme(self.theme)
        app = QApplication.instance()
        if app is not None:
            apply_theme(app, self.theme)
        self._update_theme_button()
        self.board_widget.update()

    @Slot()
    def reset_game(self):
        # fresh board, fresh chat
        self.controller.reset()
        if self.commentary_worker:
            self.commentary_worker.cancel_before(self.controller.game_logic.epoch)
        self.chat_widget.clear()
        self.chat_widget.add_message("ai", GREETING)
        self._show_error("")
        self._refresh_status()

    def _stop_commentary_worker(self):
        # cancel the in-flight request, then stop the thread
        if self.commentary_worker:
            self.commentary_worker.shutdown()
        if self.commentary_thread and self.commentary_thread.isRunning():
            self.commentary_thread.quit()
            if not self.commentary_thread.wait(2000):
                log.warning("commentary thread did not stop in time, terminating")
                self.commentary_thread.terminate()
                self.commentary_thread.wait()
        self.commentary_thread = None; self.commentary_worker = None

    def closeEvent(self, event):
        # ensure cleanup on close
        self._stop_commentary_worker()
        event.accept()
