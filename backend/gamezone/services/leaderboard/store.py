from typing import List, Optional

from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from gamezone import db
from gamezone.models import EPOCH_SINGLETON_ID, LeaderboardEpoch, User, UserStatRecord
from .errors import PersistenceWriteFailed, StoreUnavailable

_UNREACHABLE = (OperationalError, DisconnectionError, PoolTimeoutError)


def _translate(exc: SQLAlchemyError, write: bool):
    if isinstance(exc, _UNREACHABLE) or not write:
        return StoreUnavailable(str(exc))
    return PersistenceWriteFailed(str(exc))


class AccountStore:
    """Leaderboard-facing view of the account tables.

    Every method works on the current Flask-SQLAlchemy session, so callers
    outside a request must hold an application context. Failures roll the
    session back and surface as StoreUnavailable / PersistenceWriteFailed.
    """

    def list_all_users(self) -> List[UserStatRecord]:
        try:
            users = User.query.order_by(User.id).all()
            return [u.stat_record() for u in users]
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise _translate(exc, write=False) from exc

    def load_epoch(self) -> Optional[LeaderboardEpoch]:
        try:
            return db.session.get(LeaderboardEpoch, EPOCH_SINGLETON_ID)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise _translate(exc, write=False) from exc

    def bulk_zero_stats(self) -> None:
        self._write(self._zero_stats)

    def upsert_epoch(self, end_time: float) -> None:
        self._write(lambda: self._merge_epoch(end_time))

    def reset_leaderboard(self, end_time: float) -> None:
        """Zero every user's stats and start the next epoch in one transaction."""
        def _both():
            self._zero_stats()
            self._merge_epoch(end_time)
        self._write(_both)

    def record_play(self, user: User, reward: float, game_type: str) -> User:
        def _record():
            user.total_reward = (user.total_reward or 0) + reward
            user.games_played = (user.games_played or 0) + 1
            user.add_game_type(game_type)
            db.session.add(user)
        self._write(_record)
        return user

    @staticmethod
    def _zero_stats():
        # Single UPDATE over the whole table, never per-row
        User.query.update({
            User.games_played: 0,
            User.distinct_game_types: 0,
            User.total_reward: 0,
            User.game_types: None,
            User.rank: 1,
        }, synchronize_session=False)

    @staticmethod
    def _merge_epoch(end_time: float):
        db.session.merge(LeaderboardEpoch(id=EPOCH_SINGLETON_ID, end_time=end_time))

    @staticmethod
    def _write(apply):
        try:
            apply()
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise _translate(exc, write=True) from exc
