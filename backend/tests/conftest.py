import os
import sys
import pytest

# Ensure the backend root (containing the `chessrelay` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from chessrelay import create_app, socketio
from chessrelay.services.controller import GameSessionController
from chessrelay.services.store import SessionStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    STARTING_CLOCK_SECONDS = 600
    CORS_ORIGINS = ['http://localhost:3000']
    LOG_LEVEL = 'DEBUG'


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start_ms=1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self):
        return self.now_ms

    def advance(self, seconds):
        self.now_ms += int(round(seconds * 1000))


class RecordingChannel:
    def __init__(self):
        self.emitted = []
        self.rooms = {}
        self.closed = []

    def emit(self, event, data=None, to=None, skip_sid=None):
        self.emitted.append({'event': event, 'data': data, 'to': to, 'skip_sid': skip_sid})

    def enter(self, sid, room):
        self.rooms.setdefault(room, set()).add(sid)

    def leave(self, sid, room):
        self.rooms.get(room, set()).discard(sid)

    def close(self, room):
        self.closed.append(room)
        self.rooms.pop(room, None)

    def events(self, name):
        return [e for e in self.emitted if e['event'] == name]

    def clear(self):
        self.emitted.clear()


@pytest.fixture()
def fake_clock():
    return FakeClock()


@pytest.fixture()
def channel():
    return RecordingChannel()


@pytest.fixture()
def controller(channel, fake_clock):
    return GameSessionController(SessionStore(), channel, clock_seconds=600, now=fake_clock)


@pytest.fixture()
def flask_app(fake_clock):
    application = create_app(TestConfig)
    application.extensions['game_sessions'].now = fake_clock
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients; all are disconnected at teardown."""
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except RuntimeError:
            pass
