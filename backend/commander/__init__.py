from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from commander.main import main
    flask_app.register_blueprint(main)

    from commander.api.games import games
    # Mount game routes under /api to match frontend API client
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Live tables, timers and collaborators for this app
    from commander.services.games.registry import SessionRegistry
    flask_app.extensions['commander'] = SessionRegistry(flask_app, socketio)

    from commander.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('leaderboard-reset')
    def leaderboard_reset_command():
        """Drops and recreates the leaderboard table."""
        import commander.models  # noqa: F401
        flask_app.extensions['commander'].store.reset()
        print('Leaderboard has been reset!')

    flask_app.cli.add_command(leaderboard_reset_command)

    return flask_app
