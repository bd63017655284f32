import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

log = logging.getLogger(__name__)

BOARD_CELLS = 9

# rows, cols, diags; order is the tie-break on impossible boards
WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


class Mark(str, Enum):
    """
    cell contents; X is the human, O the opponent
    """
    EMPTY = ""
    X = "X"
    O = "O"

    def opposite(self) -> "Mark":
        if self is Mark.X:
            return Mark.O
        if self is Mark.O:
            return Mark.X
        return Mark.EMPTY


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON_BY_X = "won_by_x"
    WON_BY_O = "won_by_o"
    DRAW = "draw"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.IN_PROGRESS


class MoveRejected(Enum):
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    CELL_OCCUPIED = "cell_occupied"
    OUT_OF_TURN = "out_of_turn"
    TERMINAL_GAME = "terminal_game"
    STALE_SCHEDULED_MOVE = "stale_scheduled_move"


@dataclass(frozen=True)
class MoveResult:
    """
    outcome of apply_move: snapshot + status, or the reject reason
    """
    accepted: bool
    board: Tuple[Mark, ...]
    status: GameStatus
    reason: Optional[MoveRejected] = None


def _as_mark(value) -> Optional[Mark]:
    # "X" and Mark.X are the same move; anything else is nobody's turn
    try:
        return Mark(value)
    except ValueError:
        return None


def winning_line(board: Sequence[Mark]) -> Optional[Tuple[int, int, int]]:
    """
    first fully marked line, or None
    """
    for a, b, c in WIN_LINES:
        if board[a] != Mark.EMPTY and board[a] == board[b] == board[c]:
            return (a, b, c)
    return None


def evaluate_terminal(board: Sequence[Mark]) -> GameStatus:
    """
    pure check: win, draw (full board), or still running
    """
    line = winning_line(board)
    if line is not None:
        return GameStatus.WON_BY_X if board[line[0]] == Mark.X else GameStatus.WON_BY_O
    if all(cell != Mark.EMPTY for cell in board):
        return GameStatus.DRAW
    return GameStatus.IN_PROGRESS


class GameLogic:
    """
    tic-tac-toe rules and state
    """
    def __init__(self):
        """
        init board and counters
        """
        self.epoch = 0                    # bumped on every reset
        self._new_round()

    def _new_round(self):
        # board, turn and status are always replaced together
        self.game_board = [Mark.EMPTY] * BOARD_CELLS
        self.turn = Mark.X                # human always starts
        self.status = GameStatus.IN_PROGRESS
        self.opponent_pending = False
        self.move_count = 0

    @property
    def board(self) -> Tuple[Mark, ...]:
        return tuple(self.game_board)

    @property
    def is_game_over(self) -> bool:
        return self.status.is_terminal

    @property
    def winner(self) -> Optional[Mark]:
        if self.status is GameStatus.WON_BY_X:
            return Mark.X
        if self.status is GameStatus.WON_BY_O:
            return Mark.O
        return None

    def winning_line(self) -> Optional[Tuple[int, int, int]]:
        return winning_line(self.game_board)

    def empty_cells(self):
        return [i for i, cell in enumerate(self.game_board) if cell == Mark.EMPTY]

    def _check_move(self, index, mark: Mark, epoch: Optional[int]) -> Optional[MoveRejected]:
        if epoch is not None and epoch != self.epoch:
            return MoveRejected.STALE_SCHEDULED_MOVE
        if self.status.is_terminal:
            return MoveRejected.TERMINAL_GAME
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < BOARD_CELLS:
            return MoveRejected.INDEX_OUT_OF_RANGE
        if self.game_board[index] != Mark.EMPTY:
            return MoveRejected.CELL_OCCUPIED
        if mark != self.turn:
            return MoveRejected.OUT_OF_TURN
        return None

    def apply_move(self, index, mark: Mark, epoch: Optional[int] = None) -> MoveResult:
        """
        place mark, flip turn, re-check status.
        rejected moves leave everything untouched.
        """
        raw, mark = mark, _as_mark(mark)
        reason = self._check_move(index, mark, epoch)
        if reason is not None:
            log.debug("rejected %r at %r: %s", raw, index, reason.value)
            return MoveResult(False, self.board, self.status, reason)

        self.game_board[index] = mark
        self.move_count += 1
        self.turn = mark.opposite()
        self.opponent_pending = False
        self.status = evaluate_terminal(self.game_board)
        log.info("%s -> cell %d (move %d, %s)", mark.value, index, self.move_count, self.status.value)
        return MoveResult(True, self.board, self.status)

    def begin_opponent_turn(self) -> int:
        """
        flag an opponent move as in flight, return the epoch it belongs to
        """
        if self.status.is_terminal or self.turn != Mark.O:
            raise ValueError("opponent can only move on its own turn in a running game")
        self.opponent_pending = True
        return self.epoch

    def reset_game(self):
        """
        fresh round; anything scheduled for the old epoch goes stale
        """
        self.epoch += 1
        self._new_round()
        log.info("game reset (epoch %d)", self.epoch)

