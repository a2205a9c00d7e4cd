from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from roomtimers.config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from roomtimers.main import main
    flask_app.register_blueprint(main)

    from roomtimers.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Handlers bind to the initialized socketio instance
    from roomtimers.socketio_events import register_socketio_handlers
    register_socketio_handlers(socketio, namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    from roomtimers.services.timers.ticker import start_ticker
    start_ticker(flask_app, socketio)

    return flask_app
