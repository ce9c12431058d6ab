import logging
import threading
import time
from typing import Callable, Optional

from .errors import (
    ConcurrentResetInProgress,
    EpochMissing,
    PersistenceWriteFailed,
    StoreUnavailable,
)

DEFAULT_INTERVAL_SEC = 24 * 60 * 60
DEFAULT_RETRY_DELAY_SEC = 60

UNINITIALIZED = 'uninitialized'
ARMED = 'armed'
FIRING = 'firing'


class ResetScheduler:
    """Owns the leaderboard epoch and the single pending reset wake-up.

    The epoch end time is persisted through ``store`` so a restarted
    process resumes the same countdown. ``timer`` provides the wake-up:
    ``timer.start(delay, callback)`` returns a handle with ``cancel()``.
    ``clock`` returns POSIX seconds.

    Lifecycle: uninitialized -> armed -> firing -> armed -> ...

    - At most one wake-up is pending; arming again cancels the previous one
    - Resets never overlap: a second reset while one is running raises
      ConcurrentResetInProgress
    - A failed automatic reset is retried once after ``retry_delay_sec``;
      if that fails too a fresh epoch is started so the timer never stays
      stuck in the past
    """

    def __init__(self, store, timer, interval_sec: int = DEFAULT_INTERVAL_SEC,
                 retry_delay_sec: int = DEFAULT_RETRY_DELAY_SEC,
                 clock: Callable[[], float] = time.time,
                 on_reset: Optional[Callable[[float], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self.store = store
        self.timer = timer
        self.interval_sec = interval_sec
        self.retry_delay_sec = retry_delay_sec
        self.clock = clock
        self.on_reset = on_reset
        self.logger = logger or logging.getLogger(__name__)

        self._state = UNINITIALIZED
        self._end_time: Optional[float] = None
        self._generation = 0
        self._pending = None
        self._state_lock = threading.RLock()
        self._reset_lock = threading.Lock()

    @property
    def state(self) -> str:
        return self._state

    @property
    def end_time(self) -> Optional[float]:
        return self._end_time

    def initialize(self) -> float:
        with self._state_lock:
            now = self.clock()
            try:
                epoch = self.store.load_epoch()
                if epoch is None:
                    raise EpochMissing()
            except EpochMissing:
                self.logger.info("[leaderboard-init] no persisted epoch, starting a fresh one")
                return self._start_fresh_epoch(now)
            except StoreUnavailable as exc:
                # Provisional end time only; the persisted epoch must not be overwritten
                self._end_time = now + self.interval_sec
                self.logger.error(
                    f"[leaderboard-init] epoch load failed: {exc}; reloading in {self.retry_delay_sec}s"
                )
                self._schedule(self.retry_delay_sec, lambda token: self._on_reload(token))
                return self._end_time

            self._end_time = epoch.end_time
            if epoch.end_time <= now:
                self.logger.warning(
                    f"[leaderboard-init] epoch expired at {epoch.end_time} (now={now}), firing immediately"
                )
                self.arm(0)
            else:
                self.logger.info(f"[leaderboard-init] resuming epoch ending at {epoch.end_time}")
                self.arm(epoch.end_time - now)
            return self._end_time

    def arm(self, delay: float, attempt: int = 0) -> None:
        self.logger.info(f"[leaderboard-arm] delay={max(0.0, delay):.0f}s end_time={self._end_time} attempt={attempt}")
        self._schedule(delay, lambda token: self._on_wake(token, attempt))

    def _schedule(self, delay: float, on_fire) -> None:
        # Replaces the pending wake-up; on_fire receives the new generation token
        delay = max(0.0, delay)
        with self._state_lock:
            self._generation += 1
            token = self._generation
            if self._pending is not None:
                self._pending.cancel()
            self._state = ARMED
            self._pending = self.timer.start(delay, lambda: on_fire(token))

    def _on_reload(self, token: int) -> None:
        with self._state_lock:
            if token != self._generation:
                return
            self._pending = None
            self.logger.info("[leaderboard-init] retrying epoch load")
            self.initialize()

    def perform_reset(self) -> float:
        """Zero all user stats and persist the next epoch. Returns its end time."""
        if not self._reset_lock.acquire(blocking=False):
            raise ConcurrentResetInProgress()
        try:
            end_time = self.clock() + self.interval_sec
            self.store.reset_leaderboard(end_time)
            with self._state_lock:
                self._end_time = end_time
            self.logger.info(f"[leaderboard-reset] stats zeroed, next reset at {end_time}")
        finally:
            self._reset_lock.release()

        if self.on_reset is not None:
            try:
                self.on_reset(end_time)
            except Exception as exc:
                self.logger.warning(f"[leaderboard-reset] on_reset callback failed: {exc}")
        return end_time

    def manual_reset(self) -> float:
        end_time = self.perform_reset()
        self.arm(end_time - self.clock())
        return end_time

    def current_end_time(self) -> float:
        if self._state == UNINITIALIZED:
            with self._state_lock:
                if self._state == UNINITIALIZED:
                    self.initialize()
        return self._end_time

    def _start_fresh_epoch(self, now: float) -> float:
        end_time = now + self.interval_sec
        with self._state_lock:
            self._end_time = end_time
        try:
            self.store.upsert_epoch(end_time)
        except (StoreUnavailable, PersistenceWriteFailed) as exc:
            self.logger.error(f"[leaderboard-epoch] could not persist epoch end {end_time}: {exc}")
        self.arm(end_time - now)
        return end_time

    def _on_wake(self, token: int, attempt: int) -> None:
        with self._state_lock:
            if token != self._generation:
                self.logger.info(f"[leaderboard-skip] stale wake-up token={token}")
                return
            self._pending = None
            self._state = FIRING
        self.logger.info(f"[leaderboard-fire] token={token} end_time={self._end_time} attempt={attempt}")

        try:
            self.perform_reset()
        except ConcurrentResetInProgress:
            # The running reset re-arms on success; check back in case it fails
            self.logger.info("[leaderboard-fire] reset already in progress, rechecking later")
            self._rearm_unless_superseded(token, self.retry_delay_sec, attempt)
            return
        except Exception as exc:
            # Store errors and anything unexpected take the same retry-then-defer path
            if not isinstance(exc, (StoreUnavailable, PersistenceWriteFailed)):
                self.logger.exception(f"[leaderboard-fire] unexpected reset error: {exc!r}")
            if attempt == 0:
                self.logger.error(f"[leaderboard-fire] reset failed: {exc}; retrying in {self.retry_delay_sec}s")
                self._rearm_unless_superseded(token, self.retry_delay_sec, attempt + 1)
            else:
                self.logger.error(f"[leaderboard-fire] retry failed: {exc}; deferring to the next epoch")
                with self._state_lock:
                    if token == self._generation:
                        self._start_fresh_epoch(self.clock())
            return
        self._rearm_unless_superseded(token, self._end_time - self.clock())

    def _rearm_unless_superseded(self, token: int, delay: float, attempt: int = 0) -> None:
        # A manual reset that armed meanwhile owns the next wake-up
        with self._state_lock:
            if token != self._generation:
                return
            self.arm(delay, attempt)
