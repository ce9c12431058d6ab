from dataclasses import dataclass
from numbers import Number
from typing import Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    display_name: str
    games_played: int
    distinct_game_types: int
    total_reward: float

    def to_dict(self):
        return {
            'rank': self.rank,
            'display_name': self.display_name,
            'games_played': self.games_played,
            'distinct_game_types': self.distinct_game_types,
            'total_reward': self.total_reward,
        }


def _counter(value) -> float:
    # Missing, non-numeric, NaN and negative counters all read as zero
    if isinstance(value, (bool, complex)) or not isinstance(value, Number):
        return 0
    return value if value > 0 else 0


def is_active(record) -> bool:
    return (
        _counter(getattr(record, 'games_played', 0)) > 0
        or _counter(getattr(record, 'distinct_game_types', 0)) > 0
        or _counter(getattr(record, 'total_reward', 0)) > 0
    )


def partition_records(records: Iterable) -> Tuple[list, list]:
    active, inactive = [], []
    for record in records:
        (active if is_active(record) else inactive).append(record)
    return active, inactive


def _row(record, rank: int) -> LeaderboardRow:
    return LeaderboardRow(
        rank=rank,
        display_name=getattr(record, 'display_name', None),
        games_played=_counter(getattr(record, 'games_played', 0)),
        distinct_game_types=_counter(getattr(record, 'distinct_game_types', 0)),
        total_reward=_counter(getattr(record, 'total_reward', 0)),
    )


def rank_records(records: Sequence) -> List[LeaderboardRow]:
    """Rank user stat records for the leaderboard.

    - If nobody is active (including no records at all) everyone shares
      rank 1 and input order is kept
    - Active users are ordered by total reward, highest first, and ranked
      positionally: equal rewards get consecutive ranks
    - Inactive users all share the rank just below the last active user

    Equal rewards keep their input order (the sort is stable). There is
    no secondary sort key.
    """
    active, inactive = partition_records(records)
    if not active:
        return [_row(r, 1) for r in inactive]

    ordered = sorted(active, key=lambda r: _counter(getattr(r, 'total_reward', 0)), reverse=True)
    rows = [_row(r, idx) for idx, r in enumerate(ordered, start=1)]
    shared_rank = len(ordered) + 1
    rows.extend(_row(r, shared_rank) for r in inactive)
    return rows
