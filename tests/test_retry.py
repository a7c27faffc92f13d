from pathlib import Path
import sys

import pytest
import requests

# Ensure tests can import project modules from this repo layout.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from directorybot.ops.http import (  # noqa: E402
    HTTPStatusError,
    exponential_backoff,
    is_rate_limit_response,
    is_transient_transport_error,
    with_retry,
)


class Flaky:
    def __init__(self, failures):
        self.failures = list(failures)
        self.attempts = []

    def __call__(self, attempt):
        self.attempts.append(attempt)
        if self.failures:
            raise self.failures.pop(0)
        return "ok"


def test_backoff_doubles_from_base():
    backoff = exponential_backoff(0.5)
    assert [backoff(i) for i in range(4)] == [0.5, 1.0, 2.0, 4.0]


def test_retries_retryable_failures_until_success():
    sleeps = []
    op = Flaky([ValueError("a"), ValueError("b")])
    result = with_retry(
        op,
        max_attempts=3,
        backoff=exponential_backoff(1.0),
        is_retryable=lambda exc: isinstance(exc, ValueError),
        sleep=sleeps.append,
    )
    assert result == "ok"
    assert op.attempts == [0, 1, 2]
    assert sleeps == [1.0, 2.0]


def test_non_retryable_failure_is_raised_immediately():
    sleeps = []
    op = Flaky([KeyError("boom")])
    with pytest.raises(KeyError):
        with_retry(
            op,
            max_attempts=3,
            backoff=exponential_backoff(1.0),
            is_retryable=lambda exc: isinstance(exc, ValueError),
            sleep=sleeps.append,
        )
    assert op.attempts == [0]
    assert sleeps == []


def test_last_failure_propagates_when_attempts_run_out():
    retried = []
    op = Flaky([ValueError("1"), ValueError("2"), ValueError("3")])
    with pytest.raises(ValueError, match="3"):
        with_retry(
            op,
            max_attempts=3,
            backoff=exponential_backoff(0.0),
            is_retryable=lambda exc: True,
            sleep=lambda _: None,
            on_retry=lambda attempt, exc, delay: retried.append(attempt),
        )
    assert retried == [0, 1]


def test_rate_limit_classification():
    assert is_rate_limit_response(429, "")
    assert is_rate_limit_response(403, "You exceeded your current quota")
    assert is_rate_limit_response(400, "Rate limit reached for requests")
    assert not is_rate_limit_response(500, "Internal error")


def test_transport_error_classification():
    assert is_transient_transport_error(requests.exceptions.ConnectionError())
    assert is_transient_transport_error(requests.exceptions.Timeout())
    assert not is_transient_transport_error(requests.exceptions.InvalidURL())
    assert not is_transient_transport_error(HTTPStatusError(500))
