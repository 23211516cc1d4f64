from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or '*'

    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from tarama.routes import main
    flask_app.register_blueprint(main)

    # Game core: one registry and session per app
    from tarama.services.games.registry import RoomRegistry
    from tarama.services.games.session import GameSession
    from tarama.socketio_events import SocketIOTransport, register_socketio_handlers

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    registry = RoomRegistry.from_config(flask_app.config, logger=flask_app.logger)
    session = GameSession(registry, SocketIOTransport(socketio, namespace), logger=flask_app.logger)
    flask_app.extensions['tarama'] = session

    register_socketio_handlers(namespace)

    from tarama.services.games.scheduler import start_room_sweeper
    start_room_sweeper(flask_app, session)

    return flask_app
