import json
from pathlib import Path
import sys

import pytest

# Ensure tests can import project modules from this repo layout.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from directorybot.ops import logging as event_log  # noqa: E402
from directorybot.schemas import Profile  # noqa: E402


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instead of blocking."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, sec: float) -> None:
        self.sleeps.append(sec)
        self.now += sec


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else json.dumps(body)

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class ScriptedPost:
    """Stands in for ``requests.post``; replays responses or raises exceptions."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    def __call__(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def completion_body(answers) -> dict:
    content = answers if isinstance(answers, str) else json.dumps(answers)
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture(autouse=True)
def _isolated_event_log(tmp_path, monkeypatch):
    monkeypatch.setattr(event_log, "RUNS_DIR", tmp_path)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def profile():
    return Profile(
        name="Acme",
        url="https://acme.dev",
        type="saas",
        description="Acme turns spreadsheets into dashboards.",
        target_audience="Small finance teams",
        main_features=["Live dashboards", "CSV import"],
        tech_stack=["Python", "FastAPI"],
        email="hello@acme.dev",
        company_name="Acme Labs",
        contact_name="Jordan Lee",
        location="Berlin, Germany",
        github_url="https://github.com/acme",
        launch_date="2024-03-01",
        tagline="Dashboards in minutes",
        category="Productivity",
        linkedin_url="https://linkedin.com/company/acme",
        x_url="https://x.com/acme",
        is_released=True,
    )
