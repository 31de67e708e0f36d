from flask import current_app, request
from flask_socketio import emit
import threading

from gridduel.errors import GameError, MalformedPayload, NotJoined
from gridduel.services.coordinator import MatchCoordinator


class SocketIOPublisher:
    """Delivers coordinator messages through Socket.IO on one namespace."""

    def __init__(self, socketio, namespace: str):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, connection: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=connection, namespace=self.namespace)

    def broadcast(self, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, namespace=self.namespace)


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedPayload()
    return data


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedPayload(f'{key} is required')
    return value


def _require_int(data: dict, key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedPayload(f'{key} must be a whole number')
    return value


class EventRouter:
    """Translates inbound Socket.IO messages into coordinator calls.

    Handlers run one at a time under a dispatch lock, so every coordinator
    call completes before the next inbound event is looked at. Rejected
    requests get a single ``error`` message back on the same connection.
    """

    def __init__(self, coordinator: MatchCoordinator):
        self.coordinator = coordinator
        self._dispatch_lock = threading.RLock()

    def _dispatch(self, event: str, action, *, requires_join=True) -> None:
        sid = _get_sid()
        with self._dispatch_lock:
            try:
                if requires_join:
                    player = self.coordinator.registry.by_connection(sid)
                    if player is None:
                        raise NotJoined()
                    action(player)
                else:
                    action(sid)
            except GameError as exc:
                current_app.logger.info(f"[rejected] event={event} sid={sid} reason={exc.message}")
                emit('error', {'message': exc.message})

    # ---- connection lifecycle ----

    def handle_connect(self, *args):
        emit('connected', {'message': 'Connected to game server'})

    def handle_disconnect(self, *args):
        # A disconnect for a connection that never joined, or was already
        # cleaned up, is a no-op
        sid = _get_sid()
        with self._dispatch_lock:
            self.coordinator.disconnect(sid)

    def handle_ping(self, data=None):
        emit('pong', data or {})

    # ---- lobby ----

    def handle_join(self, data=None):
        def action(sid):
            # Older clients send the bare name instead of {name}
            name = data if isinstance(data, str) else _payload(data).get('name')
            self.coordinator.join(sid, name)

        self._dispatch('join', action, requires_join=False)

    def handle_challenge(self, data=None):
        def action(player):
            body = _payload(data)
            self.coordinator.challenge(
                player,
                _require_str(body, 'target'),
                _require_int(body, 'boardSize'),
                _require_int(body, 'winCondition'),
            )

        self._dispatch('challenge', action)

    def handle_accept_challenge(self, data=None):
        def action(player):
            self.coordinator.accept_challenge(player, _require_str(_payload(data), 'challenger'))

        self._dispatch('accept_challenge', action)

    def handle_decline_challenge(self, data=None):
        def action(player):
            self.coordinator.decline_challenge(player, _require_str(_payload(data), 'challenger'))

        self._dispatch('decline_challenge', action)

    # ---- game ----

    def handle_make_move(self, data=None):
        def action(player):
            self.coordinator.move(player, _require_int(_payload(data), 'cellIndex'))

        self._dispatch('make_move', action)

    def handle_offer_rematch(self, data=None):
        self._dispatch('offer_rematch', self.coordinator.offer_rematch)

    def handle_accept_rematch(self, data=None):
        def action(player):
            self.coordinator.accept_rematch(player, _require_str(_payload(data), 'challenger'))

        self._dispatch('accept_rematch', action)

    def handle_return_to_lobby(self, data=None):
        self._dispatch('return_to_lobby', self.coordinator.return_to_lobby)


def register_socketio_handlers(socketio, router: EventRouter, namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers for the router on ``namespace``."""
    handlers = {
        'connect': router.handle_connect,
        'disconnect': router.handle_disconnect,
        'ping': router.handle_ping,
        'join': router.handle_join,
        'challenge': router.handle_challenge,
        'accept_challenge': router.handle_accept_challenge,
        'decline_challenge': router.handle_decline_challenge,
        'make_move': router.handle_make_move,
        'offer_rematch': router.handle_offer_rematch,
        'accept_rematch': router.handle_accept_rematch,
        'return_to_lobby': router.handle_return_to_lobby,
    }
    for event, handler in handlers.items():
        socketio.on_event(event, handler, namespace=namespace)
