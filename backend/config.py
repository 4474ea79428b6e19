import os

basedir = os.path.abspath(os.path.dirname(__file__))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(basedir, 'commander.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Round pacing (seconds); per-tier limits live in the difficulty catalog
    ANNOUNCE_DURATION_SEC = float(os.environ.get('ANNOUNCE_DURATION_SEC', '1.0'))
    VICTORY_DELAY_SEC = float(os.environ.get('VICTORY_DELAY_SEC', '0.5'))
    # Leaderboard keeps only the top N scores
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', '15'))
    # Post-game commentary. Without a key the fallback line is used.
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    COMMENTARY_MODEL = os.environ.get('COMMENTARY_MODEL', 'gpt-4o-mini')
    COMMENTARY_TIMEOUT_SEC = float(os.environ.get('COMMENTARY_TIMEOUT_SEC', '10'))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = float(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
