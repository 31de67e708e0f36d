from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Fresh in-memory state per app; nothing survives a restart
    from gridduel.services.lobby import ChallengeBroker, SessionRegistry
    from gridduel.services.coordinator import MatchCoordinator
    from gridduel.socketio_events import EventRouter, SocketIOPublisher, register_socketio_handlers

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    registry = SessionRegistry(max_name_length=flask_app.config.get('MAX_NAME_LENGTH', 20))
    broker = ChallengeBroker(
        registry,
        min_board_size=flask_app.config.get('MIN_BOARD_SIZE', 3),
        max_board_size=flask_app.config.get('MAX_BOARD_SIZE', 10),
        min_win_condition=flask_app.config.get('MIN_WIN_CONDITION', 3),
    )
    coordinator = MatchCoordinator(
        registry,
        broker,
        SocketIOPublisher(socketio, namespace),
        logger=flask_app.logger,
    )
    flask_app.extensions['gridduel'] = coordinator

    # Register Socket.IO event handlers
    register_socketio_handlers(socketio, EventRouter(coordinator), namespace=namespace)

    # Import and register blueprints here
    from gridduel.routes import main
    flask_app.register_blueprint(main)

    flask_app.logger.info(f"[startup] namespace={namespace} origins={allowed_origins}")
    return flask_app
