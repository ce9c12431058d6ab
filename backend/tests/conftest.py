import os
import sys
import pytest

# Ensure the backend root (containing the `gamezone` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gamezone import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    LEADERBOARD_RESET_INTERVAL_SEC = 24 * 60 * 60
    LEADERBOARD_RETRY_DELAY_SEC = 60


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeWake:
    def __init__(self, timer, due, callback):
        self.timer = timer
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeTimer:
    """Records wake-ups instead of sleeping; tests fire them explicitly."""

    def __init__(self, clock):
        self.clock = clock
        self.started = []

    def start(self, delay, callback):
        wake = FakeWake(self, self.clock() + delay, callback)
        self.started.append(wake)
        return wake

    @property
    def pending(self):
        return [w for w in self.started if not w.cancelled]

    def fire_due(self):
        """Run every uncancelled wake-up whose due time has passed."""
        fired = 0
        while True:
            due = [w for w in self.pending if w.due <= self.clock()]
            if not due:
                return fired
            wake = min(due, key=lambda w: w.due)
            wake.cancelled = True
            wake.callback()
            fired += 1


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import gamezone.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


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
def timer(clock):
    return FakeTimer(clock)


@pytest.fixture()
def make_user(flask_app):
    from gamezone.models import User

    def _make(username, games_played=0, distinct_game_types=0, total_reward=0, is_admin=False, password='password'):
        user = User(
            username=username,
            display_name=username.title(),
            is_admin=is_admin,
            games_played=games_played,
            distinct_game_types=distinct_game_types,
            total_reward=total_reward,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture()
def signup(client):
    def _signup(username, password='password', display_name=None):
        payload = {'username': username, 'password': password}
        if display_name:
            payload['display_name'] = display_name
        return client.post('/api/signup', json=payload)

    return _signup
