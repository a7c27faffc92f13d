"""Batch answers from an OpenAI-compatible chat completion endpoint.

Every failure mode of the remote call ends in a complete answer map: bad
responses and exhausted retries degrade the batch to fallback answers, and
ids missing from a good response are filled in one by one. The only error
that can leave ``resolve_batch`` is ``RateLimitedError`` under the
``raise`` rate-limit policy.
"""

import json
import time
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable

import requests

from directorybot.answers.fallback import FallbackAnswerGenerator
from directorybot.answers.prompts import build_batch_prompt
from directorybot.config import settings
from directorybot.ops.http import (
    HTTPStatusError,
    exponential_backoff,
    is_rate_limit_response,
    is_transient_transport_error,
    with_retry,
)
from directorybot.ops.logging import log_event
from directorybot.ops.metrics import (
    inc_completion_retries,
    inc_degraded_batch,
    inc_rate_limit_rejections,
    observe_completion_latency,
    timer,
)
from directorybot.ops.ratelimit import RateLimitedError, RateLimiter
from directorybot.schemas import Profile, Question

RATE_LIMIT_POLICIES = ("degrade", "raise")


@dataclass
class BatchState:
    attempts: int = 0
    retries: int = 0
    degraded: bool = False
    degrade_reason: str = ""
    fallback_ids: list[int] = field(default_factory=list)
    completion_sec: float = 0.0
    cache_hit: bool = False


def is_retryable_failure(exc: Exception) -> bool:
    if isinstance(exc, RateLimitedError):
        return True
    if isinstance(exc, HTTPStatusError):
        return is_rate_limit_response(exc.status_code, exc.body)
    return is_transient_transport_error(exc)


def _is_rate_limit_failure(exc: Exception) -> bool:
    if isinstance(exc, RateLimitedError):
        return True
    return isinstance(exc, HTTPStatusError) and is_rate_limit_response(
        exc.status_code, exc.body
    )


def message_content(body: Any) -> str:
    content = body["choices"][0]["message"]["content"]
    if not isinstance(content, str):
        raise ValueError("Completion content is not a string")
    return content


def parse_json_object(text: str) -> dict:
    text = text.strip()
    try:
        result = json.loads(text)
    except json.JSONDecodeError:
        # Some models wrap the object in prose or a code fence.
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end <= start:
            raise
        result = json.loads(text[start : end + 1])
    if not isinstance(result, dict):
        raise ValueError("Completion content is not a JSON object")
    return result


def _coerce_id(key: Any) -> int | None:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, float):
        return int(key) if key.is_integer() else None
    if isinstance(key, str):
        clean = key.strip()
        # isdigit() accepts "²" and "①", which int() rejects.
        if not clean.isdecimal():
            return None
        try:
            return int(clean)
        except ValueError:
            return None
    return None


def normalize_answers(raw: dict, known_ids: set[int]) -> dict[int, str]:
    """Keep pairs whose key is a known question id and value a non-blank string."""
    answers: dict[int, str] = {}
    for key, value in raw.items():
        qid = _coerce_id(key)
        if qid is None or qid not in known_ids:
            continue
        if not isinstance(value, str) or not value.strip():
            continue
        answers[qid] = value.strip()
    return answers


class CompletionClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        rate_limiter: RateLimiter | None = None,
        fallback: FallbackAnswerGenerator | None = None,
        max_attempts: int | None = None,
        backoff_base_sec: float | None = None,
        rate_limit_policy: str | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api_key = settings.COMPLETION_API_KEY if api_key is None else api_key.strip()
        self.base_url = (base_url or settings.COMPLETION_BASE_URL).rstrip("/")
        self.model = model or settings.COMPLETION_MODEL
        self.rate_limiter = rate_limiter or RateLimiter(settings.RATE_LIMIT_WINDOW_SEC)
        self.fallback = fallback or FallbackAnswerGenerator()
        self.max_attempts = max(
            1, settings.COMPLETION_MAX_ATTEMPTS if max_attempts is None else max_attempts
        )
        base = settings.COMPLETION_BACKOFF_BASE_SEC if backoff_base_sec is None else backoff_base_sec
        self.backoff = exponential_backoff(base)
        policy = (rate_limit_policy or settings.RATE_LIMIT_POLICY).strip().lower()
        if policy not in RATE_LIMIT_POLICIES:
            raise ValueError(
                f"Unknown rate limit policy '{policy}'. Use 'degrade' or 'raise'."
            )
        self.rate_limit_policy = policy
        self._sleep = sleep

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _payload(self, prompt: str) -> dict:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": settings.COMPLETION_MAX_TOKENS,
            "temperature": settings.COMPLETION_TEMPERATURE,
        }
        if settings.COMPLETION_JSON_MODE:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def _attempt(
        self, payload: dict, site_key: str, state: BatchState, attempt: int
    ) -> requests.Response:
        state.attempts = attempt + 1
        if not self.rate_limiter.allow(site_key):
            inc_rate_limit_rejections()
            raise RateLimitedError(site_key)
        response = requests.post(
            f"{self.base_url}/chat/completions",
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=settings.COMPLETION_TIMEOUT_SEC,
        )
        if not 200 <= response.status_code < 300:
            raise HTTPStatusError(response.status_code, response.text)
        return response

    def _log_attempt_failure(
        self, site_key: str, attempt: int, exc: Exception, will_retry: bool
    ) -> None:
        log_event(
            {
                "type": "completion_attempt_failed",
                "site": site_key,
                "attempt": attempt,
                "will_retry": will_retry,
                "error_type": type(exc).__name__,
                "status_code": getattr(exc, "status_code", None),
            }
        )

    def _on_retry(
        self, site_key: str, state: BatchState, attempt: int, exc: Exception, delay: float
    ) -> None:
        state.retries += 1
        inc_completion_retries()
        self._log_attempt_failure(site_key, attempt + 1, exc, will_retry=True)
        log_event(
            {
                "type": "completion_retry",
                "site": site_key,
                "attempt": attempt + 1,
                "delay_sec": delay,
                "error_type": type(exc).__name__,
                "status_code": getattr(exc, "status_code", None),
            }
        )

    def _fallback_for(
        self, questions: list[Question], profile: Profile, state: BatchState
    ) -> dict[int, str]:
        state.fallback_ids.extend(q.id for q in questions)
        return self.fallback.answer_all(questions, profile)

    def _degrade(
        self,
        questions: list[Question],
        profile: Profile,
        site_key: str,
        state: BatchState,
        reason: str,
        exc: Exception,
    ) -> dict[int, str]:
        state.degraded = True
        state.degrade_reason = reason
        inc_degraded_batch(reason)
        log_event(
            {
                "type": "completion_degraded",
                "site": site_key,
                "reason": reason,
                "attempts": state.attempts,
                "error_type": type(exc).__name__,
                "status_code": getattr(exc, "status_code", None),
            }
        )
        return self._fallback_for(questions, profile, state)

    def resolve_batch(
        self,
        questions: list[Question],
        profile: Profile,
        site_key: str,
        state: BatchState | None = None,
    ) -> dict[int, str]:
        state = state if state is not None else BatchState()
        if not questions:
            return {}
        if not self.enabled:
            return self._fallback_for(questions, profile, state)

        payload = self._payload(build_batch_prompt(profile, questions))
        failure: Exception | None = None
        with timer() as elapsed:
            try:
                response = with_retry(
                    partial(self._attempt, payload, site_key, state),
                    max_attempts=self.max_attempts,
                    backoff=self.backoff,
                    is_retryable=is_retryable_failure,
                    sleep=self._sleep,
                    on_retry=partial(self._on_retry, site_key, state),
                )
            except (RateLimitedError, HTTPStatusError, requests.exceptions.RequestException) as exc:
                failure = exc
        state.completion_sec = elapsed()
        observe_completion_latency(state.completion_sec)

        if failure is not None:
            self._log_attempt_failure(site_key, state.attempts, failure, will_retry=False)
            if _is_rate_limit_failure(failure):
                log_event({"type": "rate_limited", "site": site_key, "attempts": state.attempts})
                if self.rate_limit_policy == "raise":
                    raise RateLimitedError(site_key) from failure
                return self._degrade(questions, profile, site_key, state, "rate_limited", failure)
            if isinstance(failure, HTTPStatusError):
                reason = f"http_{failure.status_code}"
            else:
                reason = "transport"
            return self._degrade(questions, profile, site_key, state, reason, failure)

        try:
            raw = parse_json_object(message_content(response.json()))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            log_event(
                {
                    "type": "completion_parse_failed",
                    "site": site_key,
                    "error_type": type(exc).__name__,
                }
            )
            return self._degrade(questions, profile, site_key, state, "malformed", exc)

        answers = normalize_answers(raw, {q.id for q in questions})
        missing = [q for q in questions if q.id not in answers]
        if missing:
            log_event(
                {
                    "type": "completion_partial",
                    "site": site_key,
                    "missing_ids": [q.id for q in missing],
                }
            )
            answers.update(self._fallback_for(missing, profile, state))
        return {q.id: answers[q.id] for q in questions}
