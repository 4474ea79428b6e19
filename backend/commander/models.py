from datetime import datetime, timezone

from commander import db


def _utcnow():
    return datetime.now(timezone.utc)


class ScoreEntry(db.Model):
    __tablename__ = 'score_entry'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    score = db.Column(db.Float, nullable=False, default=0.0)
    difficulty = db.Column(db.String(16), nullable=False, index=True)  # EASY, NORMAL, HARD
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    @property
    def timestamp(self) -> str:
        created = self.created_at or _utcnow()
        # SQLite hands back naive datetimes
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return created.isoformat()

    def to_dict(self):
        return {
            'name': self.name,
            'score': self.score,
            'display_score': round(self.score or 0),
            'difficulty': self.difficulty,
            'timestamp': self.timestamp,
        }
