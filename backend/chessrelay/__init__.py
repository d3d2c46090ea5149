from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from chessrelay.config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One store and controller per app; handlers reach them through extensions
    from chessrelay.channel import SocketIOChannel
    from chessrelay.services.store import SessionStore
    from chessrelay.services.controller import GameSessionController
    clock_seconds = flask_app.config.get('STARTING_CLOCK_SECONDS', 600)
    store = SessionStore(clock_seconds=clock_seconds)
    flask_app.extensions['game_sessions'] = GameSessionController(
        store, SocketIOChannel(socketio), clock_seconds=clock_seconds
    )

    from chessrelay.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers on the shared socketio instance
    from chessrelay.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app
