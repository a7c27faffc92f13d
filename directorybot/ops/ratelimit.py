import threading
import time
from typing import Callable


class RateLimitedError(RuntimeError):
    """A call was rejected because its key is still inside the window."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Rate limited: {key}")
        self.key = key


class RateLimiter:
    """Fixed-window limiter keyed per caller (one entry per site).

    ``allow`` records the call time only when the call is accepted, so a
    rejected burst does not extend the window.
    """

    def __init__(
        self,
        window_sec: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_sec = max(0.0, window_sec)
        self._clock = clock
        self._last_call: dict[str, float] = {}
        # FastAPI runs sync endpoints in a thread pool.
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        with self._lock:
            now = self._clock()
            last = self._last_call.get(key)
            if last is not None and now - last < self.window_sec:
                return False
            self._last_call[key] = now
            return True

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._last_call.clear()
            else:
                self._last_call.pop(key, None)
