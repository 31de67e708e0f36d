import os
import sys
import pytest

# Ensure the backend root (containing the `gridduel` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gridduel import create_app, socketio
from gridduel.services.coordinator import MatchCoordinator
from gridduel.services.lobby import ChallengeBroker, SessionRegistry


NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['http://localhost:3000']
    SOCKETIO_NAMESPACE = NAMESPACE
    MIN_BOARD_SIZE = 3
    MAX_BOARD_SIZE = 10
    MIN_WIN_CONDITION = 3
    MAX_NAME_LENGTH = 20


class RecordingPublisher:
    """Collects outbound messages instead of sending them."""

    def __init__(self):
        self.sent = []
        self.broadcasts = []

    def send(self, connection, event, payload):
        self.sent.append((connection, event, payload))

    def broadcast(self, event, payload):
        self.broadcasts.append((event, payload))

    def events_for(self, connection):
        return [(event, payload) for sid, event, payload in self.sent if sid == connection]

    def names_for(self, connection):
        return [event for event, _ in self.events_for(connection)]

    def clear(self):
        self.sent.clear()
        self.broadcasts.clear()


@pytest.fixture()
def publisher():
    return RecordingPublisher()


@pytest.fixture()
def registry():
    return SessionRegistry(max_name_length=20)


@pytest.fixture()
def broker(registry):
    return ChallengeBroker(registry)


@pytest.fixture()
def coordinator(registry, broker, publisher):
    return MatchCoordinator(registry, broker, publisher)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for Socket.IO test clients connected to the game namespace."""
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()
