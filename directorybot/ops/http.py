import time
from typing import Callable, TypeVar

import requests

T = TypeVar("T")

_RATE_LIMIT_MARKERS = ("rate limit", "quota")


class HTTPStatusError(Exception):
    """Non-2xx response from a remote service."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body


def exponential_backoff(base_sec: float) -> Callable[[int], float]:
    """Delay of ``2**attempt * base_sec``, attempt counted from 0."""
    base = max(0.0, base_sec)
    return lambda attempt: (2**attempt) * base


def is_rate_limit_response(status_code: int, body: str) -> bool:
    if status_code == 429:
        return True
    low = body.lower()
    return any(marker in low for marker in _RATE_LIMIT_MARKERS)


def is_transient_transport_error(exc: BaseException) -> bool:
    return isinstance(
        exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
    )


def with_retry(
    operation: Callable[[int], T],
    *,
    max_attempts: int,
    backoff: Callable[[int], float],
    is_retryable: Callable[[Exception], bool],
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> T:
    """Run ``operation(attempt)`` until it returns or a failure is final.

    A failure is final when ``is_retryable`` rejects it or no attempts are
    left; in both cases the last exception propagates unchanged.
    """
    attempts = max(1, max_attempts)
    for attempt in range(attempts):
        try:
            return operation(attempt)
        except Exception as exc:
            if attempt >= attempts - 1 or not is_retryable(exc):
                raise
            delay = backoff(attempt)
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            sleep(delay)
    raise RuntimeError("Unexpected retry state in with_retry")
