import random
import string
import threading
from typing import Dict, Optional

from .engine import RoundEngine
from .errors import SessionNotFound
from .scheduler import ManualScheduler, SocketIOScheduler
from .summary import SessionSummary


def generate_session_code(taken, length: int = 4) -> str:
    """Generate a short code not used by any live table."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code


class SessionRegistry:
    """Live tables for one Flask app, keyed by session code.

    Tables live in memory only; the leaderboard is the sole persisted state.
    Under TESTING (unless ENABLE_SCHEDULER_IN_TESTS is set) timers run on a
    ManualScheduler that tests advance explicitly.
    """

    def __init__(self, app, socketio):
        from commander.services.announcer import SocketIOAnnouncer
        from commander.services.commentary import CommentaryService
        from commander.services.leaderboard import LeaderboardStore

        self.app = app
        self.socketio = socketio
        self._announcer_cls = SocketIOAnnouncer
        self._tables: Dict[str, RoundEngine] = {}
        self._lock = threading.Lock()

        testing = app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS')
        if testing:
            self.scheduler = ManualScheduler()
        else:
            self.scheduler = SocketIOScheduler(socketio, heartbeat=float(app.config.get('TIMER_HEARTBEAT_SEC', 0)))

        self.store = LeaderboardStore(app, size=int(app.config.get('LEADERBOARD_SIZE', 15)))
        self.commentary = CommentaryService(
            api_key=app.config.get('OPENAI_API_KEY'),
            model=app.config.get('COMMENTARY_MODEL', 'gpt-4o-mini'),
            timeout=float(app.config.get('COMMENTARY_TIMEOUT_SEC', 10)),
        )
        spawn = None if app.config.get('TESTING') else socketio.start_background_task
        self.summary = SessionSummary(self.store, self.commentary, spawn=spawn)

    def create(self, rng=None) -> RoundEngine:
        with self._lock:
            code = generate_session_code(self._tables)
            announcer = self._announcer_cls(self.socketio, code)
            table = RoundEngine(
                code,
                self.scheduler,
                announcer=announcer,
                summary=self.summary,
                on_change=announcer.publish_state,
                rng=rng,
                announce_delay=float(self.app.config.get('ANNOUNCE_DURATION_SEC', 1.0)),
                victory_delay=float(self.app.config.get('VICTORY_DELAY_SEC', 0.5)),
            )
            self._tables[code] = table
        self.app.logger.info(f"[table-create] code={code}")
        return table

    def get(self, code: Optional[str]) -> Optional[RoundEngine]:
        if not code:
            return None
        return self._tables.get(str(code).upper())

    def require(self, code: Optional[str]) -> RoundEngine:
        table = self.get(code)
        if table is None:
            raise SessionNotFound('Session not found')
        return table

    def drop(self, code: str) -> bool:
        with self._lock:
            table = self._tables.pop(str(code).upper(), None)
        if table is None:
            return False
        table.close()
        self.app.logger.info(f"[table-drop] code={table.code}")
        return True

    def __len__(self):
        return len(self._tables)


def get_registry(app=None) -> SessionRegistry:
    if app is None:
        from flask import current_app
        app = current_app
    return app.extensions['commander']
