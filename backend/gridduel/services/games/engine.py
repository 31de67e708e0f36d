from dataclasses import dataclass
from typing import List, Optional

from gridduel.errors import GameAlreadyOver, InvalidCell, InvalidGeometry, NotYourTurn
from gridduel.models import Draw, GameSession, PlayerIdentity, Terminal, Win
from .win_detector import detect_winner, is_board_full


@dataclass(frozen=True)
class MoveResult:
    board: List[Optional[str]]
    current_turn: PlayerIdentity
    terminal: Terminal


def validate_geometry(board_size, win_condition, min_size=3, max_size=None, min_win=3) -> None:
    """Reject board sizes and win conditions the engine cannot play.

    A ``max_size`` of None leaves the board size unbounded above.
    """
    for value in (board_size, win_condition):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidGeometry('Board size and win condition must be whole numbers')
    if board_size < min_size:
        raise InvalidGeometry(f'Board size must be at least {min_size}')
    if max_size is not None and board_size > max_size:
        raise InvalidGeometry(f'Board size must be at most {max_size}')
    if not min_win <= win_condition <= board_size:
        raise InvalidGeometry(f'Win condition must be between {min_win} and the board size')


class GameEngine:
    """Rules for a single game session: turn order, move validation and the
    terminal state. The engine mutates the session it wraps in place."""

    def __init__(self, session: GameSession):
        validate_geometry(session.board_size, session.win_condition)
        self.session = session

    def apply_move(self, player: PlayerIdentity, cell_index: int) -> MoveResult:
        session = self.session
        if session.is_over:
            raise GameAlreadyOver()
        if player.id != session.current_turn.id:
            raise NotYourTurn()
        if not 0 <= cell_index < len(session.board) or session.board[cell_index] is not None:
            raise InvalidCell()

        session.board[cell_index] = session.symbol_for(player)
        session.current_turn = session.opponent_of(player)

        winner = detect_winner(session.board, session.board_size, session.win_condition)
        if winner is not None:
            session.terminal = Win(winner)
        elif is_board_full(session.board):
            session.terminal = Draw()

        return MoveResult(
            board=session.serialize_board(),
            current_turn=session.current_turn,
            terminal=session.terminal,
        )
