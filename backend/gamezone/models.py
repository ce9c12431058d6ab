from gamezone import db, bcrypt
from flask_login import UserMixin
from dataclasses import dataclass
import json

# Primary key of the single live leaderboard epoch row
EPOCH_SINGLETON_ID = 1


@dataclass(frozen=True)
class UserStatRecord:
    """Detached snapshot of one user's leaderboard counters."""
    id: int
    display_name: str
    games_played: int = 0
    distinct_game_types: int = 0
    total_reward: float = 0
    rank: int = 1


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(64), nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    # Play statistics, zeroed on every leaderboard reset
    games_played = db.Column(db.Integer, default=0, nullable=False)
    game_types = db.Column(db.Text, nullable=True)  # JSON-encoded list of game type ids
    distinct_game_types = db.Column(db.Integer, default=0, nullable=False)
    total_reward = db.Column(db.Float, default=0, nullable=False)
    rank = db.Column(db.Integer, default=1, nullable=False)  # cache only

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def game_type_list(self):
        try:
            return json.loads(self.game_types) if self.game_types else []
        except ValueError:
            return []

    def add_game_type(self, game_type):
        types = self.game_type_list
        if game_type not in types:
            types.append(game_type)
            self.game_types = json.dumps(types)
        self.distinct_game_types = len(types)

    def stat_record(self) -> UserStatRecord:
        return UserStatRecord(
            id=self.id,
            display_name=self.display_name,
            games_played=self.games_played or 0,
            distinct_game_types=self.distinct_game_types or 0,
            total_reward=self.total_reward or 0,
            rank=self.rank or 1,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'display_name': self.display_name,
            'is_admin': bool(self.is_admin),
        }

    def stats_dict(self):
        return {
            'games_played': self.games_played or 0,
            'distinct_game_types': self.distinct_game_types or 0,
            'total_reward': self.total_reward or 0,
            'game_types': self.game_type_list,
        }


class LeaderboardEpoch(db.Model):
    __tablename__ = 'leaderboard_epoch'
    id = db.Column(db.Integer, primary_key=True)
    end_time = db.Column(db.Float, nullable=False)  # UTC POSIX seconds

    def to_dict(self):
        return {
            'id': self.id,
            'end_time': self.end_time,
        }
