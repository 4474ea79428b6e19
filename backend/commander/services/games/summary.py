import logging
from typing import Callable, Optional

from commander.services.commentary import NO_SERVICE_FALLBACK


logger = logging.getLogger(__name__)


def _run_inline(fn, *args):
    fn(*args)


class SessionSummary:
    """Reports a finished session to the leaderboard and the commentator.

    The score is saved synchronously. Commentary is requested through
    ``spawn`` (a background task in production) and handed back through
    ``on_commentary(session_id, text)`` whenever it resolves.
    """

    def __init__(self, store, commentary=None, spawn: Optional[Callable] = None):
        self.store = store
        self.commentary = commentary
        self.spawn = spawn or _run_inline

    def record(self, session, won: bool, on_commentary: Optional[Callable[[str, str], None]] = None) -> None:
        name = session.player_name
        score = session.score
        difficulty = session.difficulty
        session_id = session.id
        logger.info(f"[summary] session={session_id[:8]} name={name} score={score:.1f} "
                    f"difficulty={difficulty.value} won={won}")
        self.store.save(name, score, difficulty)
        self.spawn(self._fetch_commentary, session_id, name, score, difficulty, won, on_commentary)

    def _fetch_commentary(self, session_id, name, score, difficulty, won, on_commentary) -> None:
        if self.commentary is None:
            text = NO_SERVICE_FALLBACK
        else:
            text = self.commentary.summarize(name, score, difficulty, won)
        if on_commentary is not None:
            on_commentary(session_id, text)
