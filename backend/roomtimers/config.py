import os


def _csv(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = _csv(os.environ.get('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Interval between timer_update broadcasts (seconds)
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '0.1'))
    # The ticker is off under TESTING unless this is set
    ENABLE_TICKER_IN_TESTS = False
    HOST = os.environ.get('HOST', '127.0.0.1')
    PORT = int(os.environ.get('PORT', '3001'))


class ClientConfig:
    AUTHORITY_URL = os.environ.get('AUTHORITY_URL', 'http://localhost:3001')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    RECONNECT_DELAY_SEC = float(os.environ.get('RECONNECT_DELAY_SEC', '1'))
    RECONNECT_DELAY_MAX_SEC = float(os.environ.get('RECONNECT_DELAY_MAX_SEC', '5'))
