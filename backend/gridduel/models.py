from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union
import random
import string
import uuid


class PlayerStatus(Enum):
    LOBBY = 'lobby'
    IN_GAME = 'in_game'


class Symbol(Enum):
    X = 'X'
    O = 'O'


@dataclass(frozen=True)
class Win:
    symbol: Symbol


@dataclass(frozen=True)
class Draw:
    pass


# None while the game is still being played
Terminal = Optional[Union[Win, Draw]]


@dataclass(eq=False)
class PlayerIdentity:
    name: str
    connection: str
    status: PlayerStatus = PlayerStatus.LOBBY
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status.value,
        }


def normalize_name(name: str) -> str:
    return name.strip().casefold()


@dataclass(frozen=True)
class ChallengeOffer:
    challenger: PlayerIdentity
    target: PlayerIdentity
    board_size: int
    win_condition: int

    def to_dict(self):
        return {
            'challenger': self.challenger.name,
            'boardSize': self.board_size,
            'winCondition': self.win_condition,
        }


@dataclass
class RematchState:
    offered: bool = False
    offered_by: Optional[PlayerIdentity] = None


@dataclass(eq=False)
class GameSession:
    id: str
    player1: PlayerIdentity
    player2: PlayerIdentity
    board_size: int
    win_condition: int
    board: List[Optional[Symbol]] = field(default_factory=list)
    current_turn: Optional[PlayerIdentity] = None
    terminal: Terminal = None
    rematch: RematchState = field(default_factory=RematchState)

    def __post_init__(self):
        if not self.board:
            self.board = [None] * (self.board_size * self.board_size)
        if self.current_turn is None:
            # Player 1 always moves first
            self.current_turn = self.player1

    @property
    def is_over(self) -> bool:
        return self.terminal is not None

    def has_player(self, player: PlayerIdentity) -> bool:
        return player.id in (self.player1.id, self.player2.id)

    def symbol_for(self, player: PlayerIdentity) -> Symbol:
        return Symbol.X if player.id == self.player1.id else Symbol.O

    def opponent_of(self, player: PlayerIdentity) -> PlayerIdentity:
        return self.player2 if player.id == self.player1.id else self.player1

    def serialize_board(self):
        return [cell.value if cell is not None else None for cell in self.board]

    def winner_symbol(self) -> Optional[str]:
        if isinstance(self.terminal, Win):
            return self.terminal.symbol.value
        return None

    def start_payload(self):
        return {
            'gameId': self.id,
            'player1': self.player1.name,
            'player2': self.player2.name,
            'board': self.serialize_board(),
            'currentTurn': self.current_turn.name,
            'boardSize': self.board_size,
            'winCondition': self.win_condition,
        }

    def update_payload(self):
        return {
            'board': self.serialize_board(),
            'currentTurn': self.current_turn.name,
        }

    def over_payload(self):
        return {
            'winner': self.winner_symbol(),
            'isDraw': isinstance(self.terminal, Draw),
            'board': self.serialize_board(),
        }

    def to_dict(self):
        data = self.start_payload()
        data.update({
            'winner': self.winner_symbol(),
            'isDraw': isinstance(self.terminal, Draw),
            'isOver': self.is_over,
        })
        return data


def generate_game_id(taken, length=6):
    """Generate a short game id not present in ``taken``."""
    while True:
        code = 'game_' + ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code
