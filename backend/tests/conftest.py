import os
import sys
import pytest

# Ensure the backend root (containing the `roomtimers` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from roomtimers import create_app, socketio
from roomtimers.client import TimerClient
from roomtimers.client.session import ConnectionSession
from roomtimers.models import registry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    TICK_INTERVAL_SEC = 0.1
    ENABLE_TICKER_IN_TESTS = False


class FakeChannel:
    """Stands in for socketio.Client: records emits, delivers events by hand."""

    def __init__(self, connected=True, refuse_connect=False):
        self.connected = connected
        self.refuse_connect = refuse_connect
        self.connect_kwargs = None
        self.shutdowns = 0
        self.handlers = {}
        self.sent = []
        self.sid = 'fake-sid'

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler

    def emit(self, event, data=None, namespace=None):
        if not self.connected:
            from socketio.exceptions import BadNamespaceError
            raise BadNamespaceError(f'{namespace} is not a connected namespace.')
        self.sent.append((event, data))

    def connect(self, url, namespaces=None, wait_timeout=1, retry=False):
        self.connect_kwargs = {'namespaces': namespaces, 'wait_timeout': wait_timeout, 'retry': retry}
        if self.refuse_connect:
            from socketio.exceptions import ConnectionError as ChannelConnectionError
            raise ChannelConnectionError('Connection refused by the server')
        self.connected = True
        self.handlers['connect']()

    def disconnect(self):
        self.connected = False
        self.handlers['disconnect']()

    def shutdown(self):
        self.shutdowns += 1
        self.connected = False

    def deliver(self, event, *args):
        self.handlers[event](*args)


class SocketIOTestChannel:
    """Bridges the client engine to a Flask-SocketIO test client.

    Outbound emits go straight to the authority's handlers; `pump()` hands
    whatever the authority sent back to the registered client handlers, in
    arrival order.
    """

    def __init__(self, test_client):
        self.test_client = test_client
        self.handlers = {}
        self.sid = None

    @property
    def connected(self):
        return self.test_client.is_connected()

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler

    def emit(self, event, data=None, namespace=None):
        self.test_client.emit(event, data)

    def pump(self):
        packets = self.test_client.get_received()
        for packet in packets:
            handler = self.handlers.get(packet['name'])
            if handler is not None:
                handler(*packet['args'])
        return packets


@pytest.fixture()
def flask_app():
    registry.clear()
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    registry.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(flask_app)
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def channel():
    return FakeChannel()


@pytest.fixture()
def refusing_channel():
    """A channel whose authority is not up."""
    return FakeChannel(connected=False, refuse_connect=True)


@pytest.fixture()
def timer_client(channel):
    return TimerClient(session=ConnectionSession(url='http://authority.test', channel=channel))


@pytest.fixture()
def connected_client(make_sio_client):
    """A TimerClient wired to the in-process authority."""

    def _make():
        bridge = SocketIOTestChannel(make_sio_client())
        return TimerClient(session=ConnectionSession(url='http://authority.test', channel=bridge)), bridge

    return _make
