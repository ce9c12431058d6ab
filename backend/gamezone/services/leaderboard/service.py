import logging
from datetime import datetime, timezone
from typing import List, Optional

from .errors import ConcurrentResetInProgress, LeaderboardError
from .ranking import LeaderboardRow, rank_records


def to_iso(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class LeaderboardService:
    """What the HTTP layer sees of the leaderboard: read, end time, manual reset."""

    def __init__(self, store, scheduler, logger: Optional[logging.Logger] = None):
        self.store = store
        self.scheduler = scheduler
        self.logger = logger or logging.getLogger(__name__)
        self._last_rows: List[LeaderboardRow] = []

    def get_leaderboard(self) -> List[LeaderboardRow]:
        try:
            records = self.store.list_all_users()
        except LeaderboardError as exc:
            self.logger.error(f"[leaderboard-read] store failed, serving last known board: {exc}")
            return list(self._last_rows)
        rows = rank_records(records)
        self._last_rows = rows
        return rows

    def get_epoch_end_time(self) -> float:
        return self.scheduler.current_end_time()

    def trigger_manual_reset(self, raise_errors: bool = False) -> bool:
        """Reset now and restart the epoch. False if nothing was reset.

        With ``raise_errors`` the ConcurrentResetInProgress / store errors
        propagate instead, so callers can tell the two apart.
        """
        try:
            end_time = self.scheduler.manual_reset()
        except ConcurrentResetInProgress:
            self.logger.info("[leaderboard-manual] reset already in progress, ignoring")
            if raise_errors:
                raise
            return False
        except LeaderboardError as exc:
            self.logger.error(f"[leaderboard-manual] reset failed: {exc}")
            if raise_errors:
                raise
            return False
        self.logger.info(f"[leaderboard-manual] reset done, next reset at {end_time}")
        self._last_rows = []
        return True
