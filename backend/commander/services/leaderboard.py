import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from commander import db
from commander.models import ScoreEntry
from commander.services.games.difficulty import parse_difficulty


logger = logging.getLogger(__name__)

DEFAULT_SIZE = 15


class LeaderboardStore:
    """Top scores across all sessions, kept in the score_entry table.

    Each call runs in its own app context so it can be used from timer
    threads. Database errors are logged and swallowed: ``load`` falls back to
    an empty board and ``save`` drops the entry.
    """

    def __init__(self, app, size: int = DEFAULT_SIZE):
        self.app = app
        self.size = size

    def _ranked(self):
        return ScoreEntry.query.order_by(ScoreEntry.score.desc(), ScoreEntry.id.asc())

    def load(self) -> List[dict]:
        with self.app.app_context():
            try:
                return [entry.to_dict() for entry in self._ranked().limit(self.size).all()]
            except SQLAlchemyError as exc:
                db.session.rollback()
                logger.error(f"[leaderboard] failed to load: {exc}")
                return []

    def save(self, name: str, score: float, difficulty) -> None:
        with self.app.app_context():
            try:
                entry = ScoreEntry(name=name, score=float(score), difficulty=parse_difficulty(difficulty).value)
                db.session.add(entry)
                db.session.flush()
                keep_ids = [row.id for row in self._ranked().with_entities(ScoreEntry.id).limit(self.size)]
                evicted = ScoreEntry.query.filter(ScoreEntry.id.not_in(keep_ids)).delete(synchronize_session=False)
                db.session.commit()
                logger.info(f"[leaderboard] saved name={name} score={score:.1f} evicted={evicted}")
            except SQLAlchemyError as exc:
                db.session.rollback()
                logger.error(f"[leaderboard] failed to save score for {name}: {exc}")

    def reset(self) -> None:
        with self.app.app_context():
            ScoreEntry.__table__.drop(db.engine, checkfirst=True)
            ScoreEntry.__table__.create(db.engine)
