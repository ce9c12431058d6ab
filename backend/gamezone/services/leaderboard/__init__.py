"""Leaderboard domain services: ranking and the periodic reset timer.

Ranking is a pure function over user stat snapshots. The reset scheduler
owns the persisted epoch and is the only thing that zeroes stats on a
timer; HTTP routes go through LeaderboardService.
"""
