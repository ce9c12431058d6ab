from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://127.0.0.1:5500",
    "http://localhost:5500",
    "http://localhost:3000",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from gamezone.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from gamezone.api.stats import stats
    flask_app.register_blueprint(stats, url_prefix='/api/stats')

    from gamezone.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    from gamezone.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    from gamezone.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    _init_leaderboard(flask_app)

    from gamezone.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from gamezone.models import User
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            for name in ['testuser1', 'testuser2', 'testuser3', 'admin']:
                user = User(username=name, display_name=name, is_admin=(name == 'admin'))
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('leaderboard-status')
    def leaderboard_status_command():
        """Prints the persisted end time of the current leaderboard epoch."""
        from gamezone.services.leaderboard.service import to_iso
        with flask_app.app_context():
            epoch = flask_app.extensions['leaderboard'].store.load_epoch()
            if epoch is None:
                print('No leaderboard epoch has been persisted yet.')
            else:
                print(f'Current leaderboard epoch ends at {to_iso(epoch.end_time)}')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(leaderboard_status_command)

    return flask_app


def _init_leaderboard(flask_app):
    from gamezone.services.leaderboard.scheduler import ResetScheduler
    from gamezone.services.leaderboard.service import LeaderboardService
    from gamezone.services.leaderboard.store import AccountStore
    from gamezone.services.leaderboard.timer import SocketIOTimer

    def _broadcast_reset(end_time):
        socketio.emit('leaderboard_reset', {'end_time': end_time}, to='leaderboard', namespace='/ws')

    store = AccountStore()
    scheduler = ResetScheduler(
        store,
        SocketIOTimer(flask_app),
        interval_sec=int(flask_app.config.get('LEADERBOARD_RESET_INTERVAL_SEC', 24 * 60 * 60)),
        retry_delay_sec=int(flask_app.config.get('LEADERBOARD_RETRY_DELAY_SEC', 60)),
        on_reset=_broadcast_reset,
        logger=flask_app.logger,
    )
    flask_app.extensions['leaderboard'] = LeaderboardService(store, scheduler, logger=flask_app.logger)


def start_leaderboard_scheduler(flask_app):
    """Load or create the persisted epoch and arm the reset timer."""
    with flask_app.app_context():
        return flask_app.extensions['leaderboard'].scheduler.initialize()
