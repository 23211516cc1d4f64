import os
import sys
import pytest

# Ensure the backend root (containing the `tarama` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tarama import create_app, socketio
from tarama.services.games.registry import RoomRegistry
from tarama.services.games.session import GameSession


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/ws'
    BOARD_SIZE = 20
    WIN_LENGTH = 5
    CAPTURE_MODE = 'manual'
    ROOM_CODE_LENGTH = 6
    ROOM_IDLE_GRACE_SEC = 1800
    ROOM_MAX_LIFETIME_SEC = 7200
    DELETE_EMPTY_ROOMS_IMMEDIATELY = False


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingTransport:
    """Transport double that keeps everything the session layer emits."""

    def __init__(self):
        self.sent = []
        self.broadcasts = []
        self.joined = []
        self.left = []
        self.closed = []

    def send(self, sid, event, payload):
        self.sent.append((sid, event, payload))

    def broadcast(self, room_code, event, payload):
        self.broadcasts.append((room_code, event, payload))

    def join(self, sid, room_code):
        self.joined.append((sid, room_code))

    def leave(self, sid, room_code):
        self.left.append((sid, room_code))

    def close(self, room_code):
        self.closed.append(room_code)

    def sent_to(self, sid, event=None):
        return [p for s, e, p in self.sent if s == sid and (event is None or e == event)]

    def broadcast_events(self, room_code=None):
        return [e for c, e, _ in self.broadcasts if room_code is None or c == room_code]

    def clear(self):
        self.sent.clear()
        self.broadcasts.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def registry(clock):
    return RoomRegistry(clock=clock, board_size=20)


@pytest.fixture()
def session(registry, transport):
    return GameSession(registry, transport)
