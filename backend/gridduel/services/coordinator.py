"""Match coordination: challenges, game lifecycle, rematches and teardown.

The coordinator is the only component allowed to change a player's status
or to create and destroy game sessions. Every public method runs to
completion against in-memory state; callers are expected to invoke them one
at a time. Rejected requests raise a ``GameError`` before any state is
changed, and outbound messages go through the ``Publisher`` it was given.
"""

import logging
from typing import Dict, Optional, Protocol

from gridduel.errors import (
    NoRematchOffer,
    NoSuchChallenge,
    NotInGame,
    GameNotOver,
)
from gridduel.models import (
    ChallengeOffer,
    GameSession,
    PlayerIdentity,
    PlayerStatus,
    RematchState,
    Win,
    generate_game_id,
    normalize_name,
)
from gridduel.services.games import GameEngine
from gridduel.services.lobby import ChallengeBroker, SessionRegistry


class Publisher(Protocol):
    def send(self, connection: str, event: str, payload: dict) -> None:
        ...

    def broadcast(self, event: str, payload: dict) -> None:
        ...


class MatchCoordinator:
    def __init__(self, registry: SessionRegistry, broker: ChallengeBroker, publisher: Publisher, logger=None):
        self.registry = registry
        self.broker = broker
        self.publisher = publisher
        self.logger = logger or logging.getLogger(__name__)
        self._games: Dict[str, GameEngine] = {}
        self._game_by_player: Dict[str, str] = {}

    # ---- lookups ----

    def game_for(self, player: PlayerIdentity) -> Optional[GameSession]:
        engine = self._engine_for(player)
        return engine.session if engine else None

    def get_game(self, game_id: str) -> Optional[GameSession]:
        engine = self._games.get(game_id)
        return engine.session if engine else None

    def lobby(self):
        return self.registry.list_lobby()

    def _engine_for(self, player: PlayerIdentity) -> Optional[GameEngine]:
        game_id = self._game_by_player.get(player.id)
        return self._games.get(game_id) if game_id else None

    # ---- outbound helpers ----

    def _notify(self, player: PlayerIdentity, event: str, payload: Optional[dict] = None) -> None:
        if not self.registry.is_live(player):
            self.logger.info(f"[notify-skip] event={event} player={player.name} gone")
            return
        self.publisher.send(player.connection, event, payload or {})

    def _broadcast_lobby(self) -> None:
        self.publisher.broadcast('user_list', {'users': self.registry.list_lobby()})

    # ---- lobby ----

    def join(self, connection: str, name) -> PlayerIdentity:
        player = self.registry.register(connection, name)
        self.publisher.send(connection, 'join_success', {'name': player.name})
        self._broadcast_lobby()
        self.logger.info(f"[join] player={player.name} sid={connection} lobby={len(self.registry.list_lobby())}")
        return player

    def challenge(self, challenger: PlayerIdentity, target_name, board_size, win_condition) -> ChallengeOffer:
        offer = self.broker.offer(challenger, target_name, board_size, win_condition)
        self._notify(offer.target, 'challenge_received', offer.to_dict())
        self.logger.info(
            f"[challenge] {challenger.name} -> {offer.target.name} size={board_size} win={win_condition}"
        )
        return offer

    def accept_challenge(self, target: PlayerIdentity, challenger_name) -> GameSession:
        challenger = self.registry.find(challenger_name)
        if challenger is None:
            raise NoSuchChallenge()
        offer = self.broker.get(challenger)
        if offer is None or offer.target.id != target.id:
            raise NoSuchChallenge()
        if challenger.status is not PlayerStatus.LOBBY or target.status is not PlayerStatus.LOBBY:
            # One of them already started another game; the offer is stale
            self.broker.cancel(challenger)
            raise NoSuchChallenge('That challenge is no longer available')

        self.broker.consume(challenger, target)
        # Offers authored by either player cannot be honoured once they are playing
        self.broker.cancel(target)

        session = self._create_session(challenger, target, offer.board_size, offer.win_condition)
        self.registry.set_status(challenger, PlayerStatus.IN_GAME)
        self.registry.set_status(target, PlayerStatus.IN_GAME)

        payload = session.start_payload()
        self._notify(target, 'game_start', payload)
        self._notify(challenger, 'game_start', payload)
        self._broadcast_lobby()
        self.logger.info(f"[game-start] game={session.id} p1={challenger.name} p2={target.name}")
        return session

    def decline_challenge(self, target: PlayerIdentity, challenger_name) -> None:
        challenger = self.registry.find(challenger_name)
        if challenger is None or self.broker.consume(challenger, target) is None:
            raise NoSuchChallenge()
        self._notify(challenger, 'challenge_declined', {'target': target.name})
        self.logger.info(f"[decline] {target.name} declined {challenger.name}")

    # ---- game play ----

    def move(self, player: PlayerIdentity, cell_index: int):
        engine = self._engine_for(player)
        if engine is None:
            raise NotInGame()
        session = engine.session
        result = engine.apply_move(player, cell_index)

        if result.terminal is None:
            payload = session.update_payload()
            self._notify(session.player1, 'game_update', payload)
            self._notify(session.player2, 'game_update', payload)
        else:
            payload = session.over_payload()
            self._notify(session.player1, 'game_over', payload)
            self._notify(session.player2, 'game_over', payload)
            outcome = 'draw'
            if isinstance(result.terminal, Win):
                outcome = f"winner={result.terminal.symbol.value}"
            self.logger.info(f"[game-over] game={session.id} {outcome}")
        return result

    def offer_rematch(self, player: PlayerIdentity) -> None:
        session = self.game_for(player)
        if session is None:
            raise NotInGame()
        if not session.is_over:
            raise GameNotOver()
        session.rematch = RematchState(offered=True, offered_by=player)
        self._notify(session.opponent_of(player), 'rematch_offered', {'challenger': player.name})
        self.logger.info(f"[rematch-offer] game={session.id} by={player.name}")

    def accept_rematch(self, player: PlayerIdentity, offered_by_name) -> GameSession:
        old = self.game_for(player)
        if old is None:
            raise NotInGame()
        offered_by = old.rematch.offered_by
        if (
            not old.rematch.offered
            or offered_by is None
            or offered_by.id == player.id
            or not isinstance(offered_by_name, str)
            or offered_by.key != normalize_name(offered_by_name)
        ):
            raise NoRematchOffer()

        self._destroy_session(old)
        session = self._create_session(old.player1, old.player2, old.board_size, old.win_condition)
        payload = session.start_payload()
        self._notify(session.player1, 'game_start', payload)
        self._notify(session.player2, 'game_start', payload)
        self.logger.info(f"[rematch] old={old.id} new={session.id}")
        return session

    # ---- leaving ----

    def return_to_lobby(self, player: PlayerIdentity) -> None:
        self._leave_game(player, 'opponent_left')
        self.registry.set_status(player, PlayerStatus.LOBBY)
        self._broadcast_lobby()
        self.logger.info(f"[lobby] player={player.name} returned to lobby")

    def disconnect(self, connection: str) -> Optional[PlayerIdentity]:
        player = self.registry.by_connection(connection)
        if player is None:
            return None
        self._leave_game(player, 'opponent_disconnected')
        self.broker.cancel(player)
        self.registry.unregister(connection)
        self._broadcast_lobby()
        self.logger.info(f"[disconnect] player={player.name} sid={connection}")
        return player

    def _leave_game(self, player: PlayerIdentity, notice: str) -> None:
        session = self.game_for(player)
        if session is None:
            return
        opponent = session.opponent_of(player)
        if self.registry.is_live(opponent):
            self._notify(opponent, notice)
            self.registry.set_status(opponent, PlayerStatus.LOBBY)
        self._destroy_session(session)

    # ---- session bookkeeping ----

    def _create_session(self, player1, player2, board_size, win_condition) -> GameSession:
        session = GameSession(
            id=generate_game_id(self._games),
            player1=player1,
            player2=player2,
            board_size=board_size,
            win_condition=win_condition,
        )
        self._games[session.id] = GameEngine(session)
        self._game_by_player[player1.id] = session.id
        self._game_by_player[player2.id] = session.id
        return session

    def _destroy_session(self, session: GameSession) -> None:
        self._games.pop(session.id, None)
        for p in (session.player1, session.player2):
            if self._game_by_player.get(p.id) == session.id:
                del self._game_by_player[p.id]
