import logging
import random
from dataclasses import dataclass
from itertools import count
from typing import Optional, Tuple

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from .config import Settings
from .game_logic import GameLogic, GameStatus, Mark, MoveResult
from .opponent import choose_move

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentaryRequest:
    """
    what the commentary producer gets to see
    """
    board: Tuple[Mark, ...]
    last_move: Optional[int]
    is_terminal: bool
    outcome: Optional[GameStatus]
    epoch: int
    ticket: int


class GameController(QObject):
    """
    drives one human-vs-opponent game on the gui thread.

    the opponent reply is a single-shot timer tagged with the epoch it
    was scheduled in; reset stops the timer and bumps the epoch, and the
    timer callback re-checks the epoch before touching the board.
    """
    board_changed = Signal()
    status_changed = Signal(object)         # GameStatus
    thinking_changed = Signal(bool)
    commentary_requested = Signal(object)   # CommentaryRequest

    def __init__(self, settings: Optional[Settings] = None, rng=None, parent=None):
        super().__init__(parent)
        self.settings = settings or Settings()
        self.game_logic = GameLogic()
        self._rng = rng or random.Random()
        self._tickets = count(1)
        self._opponent_timer = QTimer(self)
        self._opponent_timer.setSingleShot(True)
        self._opponent_timer.timeout.connect(self._on_opponent_timer)
        self._scheduled_epoch = None

    # ---- read side for the renderer ----

    @property
    def board(self) -> Tuple[Mark, ...]:
        return self.game_logic.board

    @property
    def turn(self) -> Mark:
        return self.game_logic.turn

    @property
    def status(self) -> GameStatus:
        return self.game_logic.status

    @property
    def is_thinking(self) -> bool:
        return self.game_logic.opponent_pending

    @property
    def is_disabled(self) -> bool:
        # board frozen while the opponent is up or the game is over
        return self.game_logic.opponent_pending or self.game_logic.is_game_over

    # ---- moves ----

    @Slot(int)
    def human_move(self, index: int) -> MoveResult:
        """
        apply a click for X; on success narrate it and line up the reply
        """
        result = self.game_logic.apply_move(index, Mark.X)
        if not result.accepted:
            return result

        self.board_changed.emit()
        self._request_commentary(index, is_terminal=False, outcome=None)
        if result.status.is_terminal:
            self._finish(result.status)
        else:
            self._schedule_opponent()
        return result

    def think_delay_ms(self) -> int:
        s = self.settings
        return s.think_delay_min_ms + int(self._rng.random() * s.think_delay_spread_ms)

    def _schedule_opponent(self):
        self._scheduled_epoch = self.game_logic.begin_opponent_turn()
        delay = self.think_delay_ms()
        log.debug("opponent move scheduled in %d ms (epoch %d)", delay, self._scheduled_epoch)
        self._opponent_timer.start(delay)
        self.thinking_changed.emit(True)

    @Slot()
    def _on_opponent_timer(self):
        epoch, self._scheduled_epoch = self._scheduled_epoch, None
        if epoch is None:
            return
        self.play_opponent_move(epoch)

    def play_opponent_move(self, epoch: int) -> Optional[MoveResult]:
        """
        run the scheduled opponent move for `epoch`; stale epochs are dropped
        """
        if epoch != self.game_logic.epoch:
            log.debug("dropping stale opponent move (epoch %d, now %d)", epoch, self.game_logic.epoch)
            return None
        if self.game_logic.is_game_over:
            return None

        index = choose_move(self.game_logic.board, Mark.O)
        if index is None:
            return None
        result = self.game_logic.apply_move(index, Mark.O, epoch=epoch)
        self.thinking_changed.emit(False)
        if not result.accepted:
            log.warning("opponent move %d rejected: %s", index, result.reason.value)
            return result

        self.board_changed.emit()
        if result.status.is_terminal:
            self._finish(result.status)
        return result

    def _finish(self, status: GameStatus):
        log.info("game over: %s", status.value)
        self.status_changed.emit(status)
        self._request_commentary(None, is_terminal=True, outcome=status)

    def _request_commentary(self, last_move, is_terminal, outcome):
        request = CommentaryRequest(
            board=self.game_logic.board,
            last_move=last_move,
            is_terminal=is_terminal,
            outcome=outcome,
            epoch=self.game_logic.epoch,
            ticket=next(self._tickets),
        )
        self.commentary_requested.emit(request)

    @Slot()
    def reset(self):
        """
        cancel any pending reply and start a fresh round
        """
        self._opponent_timer.stop()
        self._scheduled_epoch = None
        was_thinking = self.game_logic.opponent_pending
        self.game_logic.reset_game()
        if was_thinking:
            self.thinking_changed.emit(False)
        self.board_changed.emit()
        self.status_changed.emit(self.game_logic.status)
