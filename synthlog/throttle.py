"""Records-per-second pacing using fixed one-second windows."""

import time


class Throttle:
    """Caps output at ``tps`` records per one-second window.

    Once a window's quota is used up, ``wait()`` sleeps out the rest of the
    window. ``tps == 0`` disables pacing.
    """

    def __init__(self, tps: int, time_func=None, sleep_func=None):
        self._tps = tps
        self._time_func = time_func or time.monotonic
        self._sleep_func = sleep_func or time.sleep
        self._count = 0
        self._window_start = self._time_func()

    def reset(self) -> None:
        """Start a fresh window now."""
        self._count = 0
        self._window_start = self._time_func()

    @property
    def enabled(self) -> bool:
        return self._tps > 0

    def wait(self) -> None:
        """Account for one record; block if the current window is full."""
        if not self.enabled:
            return

        now = self._time_func()
        if now - self._window_start >= 1.0:
            self._window_start = now
            self._count = 0

        self._count += 1
        if self._count >= self._tps:
            remaining = 1.0 - (now - self._window_start)
            if remaining > 0:
                self._sleep_func(remaining)
            self._window_start = self._time_func()
            self._count = 0
