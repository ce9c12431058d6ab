import time

from gamezone import socketio

# Upper bound on one sleep so cancelled wakes exit promptly
POLL_SEC = 30


class PendingWake:
    def __init__(self, delay: float):
        self.delay = delay
        self.deadline = time.time() + delay
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOTimer:
    """Runs one delayed callback per start() on a Socket.IO background task.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - The callback runs inside an application context
    - A cancelled wake never calls back
    """

    def __init__(self, app):
        self.app = app

    def start(self, delay: float, callback) -> PendingWake:
        wake = PendingWake(delay)
        app = self.app
        if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
            app.logger.info(f"[timer-skip] testing mode, wake in {delay:.0f}s not started")
            return wake

        socketio.start_background_task(self._worker, wake, callback)
        return wake

    def _worker(self, wake: PendingWake, callback) -> None:
        app = self.app
        hb = int(app.config.get('TIMER_HEARTBEAT_SEC', 0) or 0)
        while not wake.cancelled:
            remaining = wake.deadline - time.time()
            if remaining <= 0:
                break
            step = min(hb if hb > 0 else POLL_SEC, remaining)
            time.sleep(step)
            if hb > 0 and not wake.cancelled:
                app.logger.info(f"[timer-heartbeat] remaining={max(0.0, wake.deadline - time.time()):.0f}s")
        if wake.cancelled:
            return
        with app.app_context():
            try:
                callback()
            except Exception:
                app.logger.exception("[timer-fire] wake-up callback raised")
