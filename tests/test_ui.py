import asyncio
import threading
import time

import pytest
from PySide6.QtCore import QPoint, Qt

from trashtalk import commentary
from trashtalk.commentary import API_ERROR_REPLY, GREETING, TERMINAL_TAUNTS, Taunt
from trashtalk.game_logic import GameStatus, Mark
from trashtalk.ui.board_widget import BoardWidget
from trashtalk.ui.chat_widget import PLACEHOLDER, ChatWidget
from trashtalk.ui.main_window import TicTacToeWindow
from trashtalk.ui.theme import build_palette, other_theme


@pytest.fixture
def window(qtbot, fast_settings):
    win = TicTacToeWindow(fast_settings)
    qtbot.addWidget(win)
    win.resize(500, 800)
    win.show()
    qtbot.waitExposed(win)
    return win


def click_cell(qtbot, board_widget, index):
    side = min(board_widget.width(), board_widget.height())
    ox = (board_widget.width() - side) / 2
    oy = (board_widget.height() - side) / 2
    r, c = divmod(index, 3)
    pos = QPoint(int(ox + (c + 0.5) * side / 3), int(oy + (r + 0.5) * side / 3))
    qtbot.mouseClick(board_widget, Qt.LeftButton, pos=pos)


def test_starts_with_greeting(window):
    assert window.chat_widget.messages() == [("ai", GREETING)]
    assert window.message_label.text() == "Your turn (X)"
    assert window.windowTitle() == "Tic Tac Toe Trash Talk"


def test_click_plays_and_opponent_answers(qtbot, window):
    click_cell(qtbot, window.board_widget, 0)

    assert window.controller.board[0] is Mark.X
    qtbot.waitUntil(lambda: window.controller.board[4] is Mark.O, timeout=2000)
    assert window.message_label.text() == "Your turn (X)"

    # offline settings: the roast fails and the fallback fills the placeholder
    qtbot.waitUntil(lambda: ("ai", API_ERROR_REPLY) in window.chat_widget.messages(), timeout=5000)
    messages = window.chat_widget.messages()
    assert ("user", "My move!") in messages
    assert ("ai", PLACEHOLDER) not in messages
    assert window.error_label.text().startswith("AI Chat error:")


def test_click_on_taken_cell_is_ignored(qtbot, window):
    click_cell(qtbot, window.board_widget, 0)
    qtbot.waitUntil(lambda: not window.controller.is_thinking, timeout=2000)
    before = window.controller.board

    click_cell(qtbot, window.board_widget, 4)

    assert window.controller.board == before


def test_game_over_freezes_board(qtbot, window):
    for cell in (0, 1, 6, 5):
        window.controller.human_move(cell)
        qtbot.waitUntil(lambda: not window.controller.is_thinking, timeout=2000)
    window.controller.human_move(7)

    assert window.controller.status is GameStatus.DRAW
    assert window.message_label.text() == "It's a draw!"
    assert not window.board_widget.accepts_clicks()
    qtbot.waitUntil(
        lambda: ("ai", TERMINAL_TAUNTS[GameStatus.DRAW]) in window.chat_widget.messages(),
        timeout=5000,
    )


def test_restart_clears_board_and_chat(qtbot, window):
    click_cell(qtbot, window.board_widget, 0)
    window.reset_button.click()

    assert window.controller.board == (Mark.EMPTY,) * 9
    assert window.chat_widget.messages() == [("ai", GREETING)]
    assert not window.error_label.isVisible()
    assert window.message_label.text() == "Your turn (X)"
    qtbot.wait(100)
    assert window.controller.board == (Mark.EMPTY,) * 9


def test_terminal_line_does_not_wait_for_a_slow_roast(qtbot, mocker, window):
    async def slow(*args):
        await asyncio.sleep(5)
        return Taunt("too late")

    mocker.patch.object(commentary, "produce_taunt", side_effect=slow)
    for cell in (0, 1, 6, 5):
        window.controller.human_move(cell)
        qtbot.waitUntil(lambda: not window.controller.is_thinking, timeout=2000)

    window.controller.human_move(7)

    messages = window.chat_widget.messages()
    assert messages[-1] == ("ai", TERMINAL_TAUNTS[GameStatus.DRAW])
    assert ("ai", PLACEHOLDER) not in messages


def test_old_round_replies_are_ignored_after_restart(qtbot, window):
    click_cell(qtbot, window.board_widget, 0)
    old_epoch = window.controller.game_logic.epoch
    window.reset_game()

    worker = window.commentary_worker
    worker.taunt_ready.emit(1, old_epoch, "stale roast")
    worker.error_changed.emit(old_epoch, "boom")

    assert window.chat_widget.messages() == [("ai", GREETING)]
    assert not window.error_label.isVisible()

    # the current round still gets through
    worker.error_changed.emit(window.controller.game_logic.epoch, "boom")
    assert window.error_label.text() == "AI Chat error: boom"


def test_close_cancels_in_flight_roast(qtbot, mocker, window):
    started = threading.Event()

    async def slow(*args):
        started.set()
        await asyncio.sleep(5)
        return Taunt("too late")

    mocker.patch.object(commentary, "produce_taunt", side_effect=slow)
    thread = window.commentary_thread
    window.controller.human_move(0)
    assert started.wait(2)

    t0 = time.monotonic()
    window.close()

    assert time.monotonic() - t0 < 1.5
    assert not thread.isRunning()
    assert window.commentary_thread is None


def test_theme_toggle(window):
    start = window.theme
    assert window.theme_button.text() in ("🌙 Dark", "☀️ Light")
    window.theme_button.click()
    assert window.theme == other_theme(start)
    window.theme_button.click()
    assert window.theme == start


def test_palettes_differ():
    assert build_palette("dark").window().color() != build_palette("light").window().color()


class TestChatWidget:
    def test_placeholder_resolution(self, qtbot):
        chat = ChatWidget()
        qtbot.addWidget(chat)
        chat.add_placeholder(1)
        chat.resolve(1, "Nice try.")
        assert chat.messages() == [("ai", "Nice try.")]

    def test_dropped_placeholder_ignores_late_reply(self, qtbot):
        chat = ChatWidget()
        qtbot.addWidget(chat)
        chat.add_message("user", "My move!")
        chat.add_placeholder(1)
        chat.drop_pending()
        chat.resolve(2, "Game over, loser.")
        chat.resolve(1, "late roast")
        assert chat.messages() == [("user", "My move!"), ("ai", "Game over, loser.")]


class TestBoardWidget:
    def test_index_mapping(self, qtbot, fast_settings):
        from trashtalk.controller import GameController

        widget = BoardWidget(GameController(fast_settings))
        qtbot.addWidget(widget)
        widget.resize(300, 300)
        assert widget.index_at(10, 10) == 0
        assert widget.index_at(150, 150) == 4
        assert widget.index_at(290, 290) == 8
        assert widget.index_at(290, 10) == 2
        assert widget.index_at(-1, 10) is None
