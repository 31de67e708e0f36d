from typing import Iterator, List, Optional, Sequence

from gridduel.models import Symbol


def _lines(board_size: int, win_condition: int) -> Iterator[List[int]]:
    """Yield every line long enough to hold a run, as lists of cell indices.

    Order: rows, columns, down-right diagonals, then up-right diagonals.
    Within each group lines are ordered by start row, then start column.
    """
    n = board_size

    for row in range(n):
        yield [row * n + col for col in range(n)]

    for col in range(n):
        yield [row * n + col for row in range(n)]

    # Down-right diagonals start on the top edge or the left edge
    starts = [(0, col) for col in range(n - win_condition + 1)]
    starts += [(row, 0) for row in range(1, n - win_condition + 1)]
    for start_row, start_col in sorted(starts):
        length = n - max(start_row, start_col)
        yield [(start_row + i) * n + (start_col + i) for i in range(length)]

    # Up-right diagonals, walked from their top end (down-left). They start on
    # the top edge or the right edge.
    starts = [(0, col) for col in range(win_condition - 1, n)]
    starts += [(row, n - 1) for row in range(1, n - win_condition + 1)]
    for start_row, start_col in sorted(starts):
        length = min(n - start_row, start_col + 1)
        yield [(start_row + i) * n + (start_col - i) for i in range(length)]


def _first_run(board: Sequence[Optional[Symbol]], line: List[int], win_condition: int) -> Optional[Symbol]:
    streak_symbol = None
    streak = 0
    for index in line:
        cell = board[index]
        if cell is not None and cell == streak_symbol:
            streak += 1
        else:
            streak_symbol = cell
            streak = 1 if cell is not None else 0
        if streak >= win_condition:
            return streak_symbol
    return None


def detect_winner(board: Sequence[Optional[Symbol]], board_size: int, win_condition: int) -> Optional[Symbol]:
    """Return the symbol owning a run of ``win_condition`` cells, or None.

    The board is a flat row-major sequence of ``board_size ** 2`` cells. Lines
    are scanned in a fixed order and the first run found wins, so results are
    deterministic even for boards holding more than one run.
    """
    for line in _lines(board_size, win_condition):
        winner = _first_run(board, line, win_condition)
        if winner is not None:
            return winner
    return None


def is_board_full(board: Sequence[Optional[Symbol]]) -> bool:
    return all(cell is not None for cell in board)
