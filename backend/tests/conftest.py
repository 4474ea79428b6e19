import os
import sys
import pytest

# Ensure the backend root (containing the `commander` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from commander import create_app, db, socketio
from commander.services.games.commands import Color
from commander.services.games.engine import RoundEngine
from commander.services.games.scheduler import ManualScheduler
from commander.services.games.summary import SessionSummary


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LEADERBOARD_SIZE = 15
    ANNOUNCE_DURATION_SEC = 1.0
    VICTORY_DELAY_SEC = 0.5


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import commander.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['commander']


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


# ---- Engine fakes ----

class ScriptedRandom:
    """Replays scripted commands; falls back to a plain RED UP afterwards.

    Mirrors the call order of the state machine: one ``choice`` for the
    side layout at session start, then per command one ``random`` for the
    negation draw and two ``choice`` calls for color and direction.
    """

    def __init__(self, commands=(), left_color=Color.RED):
        self._randoms = []
        self._choices = [left_color]
        for color, direction, negated in commands:
            self._randoms.append(0.0 if negated else 0.99)
            self._choices.extend([color, direction])

    def random(self):
        return self._randoms.pop(0) if self._randoms else 0.99

    def choice(self, seq):
        if self._choices and self._choices[0] in seq:
            return self._choices.pop(0)
        return seq[0]


class RecordingAnnouncer:
    def __init__(self):
        self.texts = []

    def announce(self, text):
        self.texts.append(text)


class RecordingStore:
    def __init__(self):
        self.saved = []

    def save(self, name, score, difficulty):
        self.saved.append((name, score, difficulty))

    def load(self):
        return [{'name': n, 'score': s, 'difficulty': d.value} for n, s, d in self.saved]


class StubCommentary:
    def __init__(self, text='Nice tentacle work.'):
        self.text = text
        self.calls = []

    def summarize(self, name, score, difficulty, won):
        self.calls.append((name, score, difficulty, won))
        return self.text


class DeferredSpawn:
    """Collects background jobs so tests decide when they finish."""

    def __init__(self):
        self.jobs = []

    def __call__(self, fn, *args):
        self.jobs.append((fn, args))

    def run_all(self):
        jobs, self.jobs = self.jobs, []
        for fn, args in jobs:
            fn(*args)


class EngineHarness:
    def __init__(self, commands=(), left_color=Color.RED, spawn=None):
        self.scheduler = ManualScheduler()
        self.announcer = RecordingAnnouncer()
        self.store = RecordingStore()
        self.commentary = StubCommentary()
        self.states = []
        self.engine = RoundEngine(
            'TEST',
            self.scheduler,
            announcer=self.announcer,
            summary=SessionSummary(self.store, self.commentary, spawn=spawn),
            on_change=self.states.append,
            rng=ScriptedRandom(commands, left_color=left_color),
            announce_delay=1.0,
            victory_delay=0.5,
        )

    @property
    def session(self):
        return self.engine.session

    def fire_next(self):
        """Advance the clock to the next pending timer and fire only it."""
        assert self.scheduler.fire_next() is not None, 'no pending timer'

    def press_correct(self):
        command = self.session.command
        if command.is_negated:
            return self.engine.submit_input(command.color.other, command.direction)
        return self.engine.submit_input(command.color, command.direction)


@pytest.fixture()
def harness():
    return EngineHarness()


@pytest.fixture()
def make_harness():
    return EngineHarness

