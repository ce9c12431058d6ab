class LeaderboardError(Exception):
    """Base class for leaderboard store and scheduler failures."""


class StoreUnavailable(LeaderboardError):
    """The account store could not be reached. Transient; retry later."""


class EpochMissing(LeaderboardError):
    """No persisted epoch exists. Recovered by starting a fresh one."""


class ConcurrentResetInProgress(LeaderboardError):
    """Another reset is already running in this process; callers should no-op."""


class PersistenceWriteFailed(LeaderboardError):
    """A write during a reset failed and was rolled back."""
