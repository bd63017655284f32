"""
Scripted opponent: one-ply heuristic, no look-ahead.

Priority: win now, block a win, take the centre, then corners before edges.
It never sees forks coming, so a careful human can beat it.
"""

from typing import Optional, Sequence

from .game_logic import BOARD_CELLS, WIN_LINES, Mark

CENTER = 4
PREFERRED_CELLS = (0, 2, 6, 8, 1, 3, 5, 7)  # corners, then edges


def _wins_with(board: Sequence[Mark], index: int, mark: Mark) -> bool:
    # try the mark in a scratch copy, only lines through the new cell count
    trial = list(board)
    trial[index] = mark
    return any(
        index in line and all(trial[j] == mark for j in line)
        for line in WIN_LINES
    )


def choose_move(board: Sequence[Mark], mark: Mark = Mark.O) -> Optional[int]:
    """
    pick a cell for `mark`, or None when the board is full
    """
    empty = [i for i in range(BOARD_CELLS) if board[i] == Mark.EMPTY]
    if not empty:
        return None

    for i in empty:
        if _wins_with(board, i, mark):
            return i
    rival = mark.opposite()
    for i in empty:
        if _wins_with(board, i, rival):
            return i

    if board[CENTER] == Mark.EMPTY:
        return CENTER
    for i in PREFERRED_CELLS:
        if board[i] == Mark.EMPTY:
            return i
    return None
