"""Site analysis: numbered questions in, ordered answers out."""

import hashlib
import re
import time
from datetime import datetime, timezone
from typing import Callable
from urllib.parse import urlparse

from directorybot.answers.cache import AnswerCache
from directorybot.answers.fallback import FallbackAnswerGenerator
from directorybot.answers.generate import BatchState, CompletionClient
from directorybot.answers.sites import SiteEntry
from directorybot.answers.strategy import AnswerStrategy, select_strategy
from directorybot.config import settings
from directorybot.ops.logging import log_event
from directorybot.ops.metrics import (
    inc_analyses,
    inc_answers,
    inc_cache_hits,
    observe_analysis_latency,
    timer,
)
from directorybot.ops.ratelimit import RateLimiter
from directorybot.schemas import AnsweredQuestion, Profile, Question, SiteAnalysisResult


def site_name_from_url(site_url: str) -> str:
    clean = site_url.strip()
    try:
        host = urlparse(clean).hostname
    except ValueError:
        host = None
    if host:
        return re.sub(r"^www\.", "", host)
    return re.sub(r"/$", "", re.sub(r"^https?://", "", clean))


def number_questions(texts: list[str], limit: int) -> list[Question]:
    return [Question(id=i, question=text) for i, text in enumerate(texts[: max(0, limit)], start=1)]


def _short_hash(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


class AnswerPipeline:
    def __init__(
        self,
        strategy: AnswerStrategy,
        max_questions: int | None = None,
        cache: AnswerCache | None = None,
        model: str | None = None,
    ) -> None:
        self.strategy = strategy
        self.max_questions = settings.MAX_QUESTIONS_PER_SITE if max_questions is None else max_questions
        self.cache = cache
        self.model = model or settings.COMPLETION_MODEL

    @property
    def mode(self) -> str:
        return self.strategy.name

    def _resolve(
        self, questions: list[Question], profile: Profile, site_key: str, state: BatchState
    ) -> dict[int, str]:
        use_cache = self.cache is not None and self.mode == "completion"
        if use_cache:
            cached = self.cache.get(self.model, profile, questions)
            if cached is not None:
                state.cache_hit = True
                inc_cache_hits()
                return cached

        answers = self.strategy.resolve(questions, profile, site_key, state)
        if use_cache and not state.fallback_ids:
            self.cache.set(self.model, profile, questions, answers)
        return answers

    def analyze(self, site_url: str, questions: list[str], profile: Profile) -> SiteAnalysisResult:
        with timer() as elapsed:
            return self._analyze(site_url, questions, profile, elapsed)

    def _analyze(
        self,
        site_url: str,
        questions: list[str],
        profile: Profile,
        elapsed: Callable[[], float],
    ) -> SiteAnalysisResult:
        numbered = number_questions(questions, self.max_questions)
        site_key = site_url.strip()
        state = BatchState()
        log_event(
            {
                "type": "analysis_start",
                "site": site_key,
                "mode": self.mode,
                "question_count": len(numbered),
                "question_hashes": [_short_hash(q.question) for q in numbered],
                "question_lengths": [len(q.question) for q in numbered],
            }
        )

        answers = self._resolve(numbered, profile, site_key, state)

        fallback_count = len(set(state.fallback_ids))
        inc_analyses(self.mode)
        inc_answers("fallback", fallback_count)
        inc_answers("completion", len(numbered) - fallback_count)

        result = SiteAnalysisResult(
            site_url=site_url,
            site_name=site_name_from_url(site_url),
            questions=[
                AnsweredQuestion(id=q.id, question=q.question, answer=answers[q.id])
                for q in numbered
            ],
            meta={
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "mode": self.mode,
                "model": self.model if self.mode == "completion" else None,
                "prompt_version": settings.PROMPT_VERSION,
                "question_count": len(numbered),
                "truncated": len(questions) > len(numbered),
                "degraded": state.degraded,
                "degrade_reason": state.degrade_reason or None,
                "fallback_answers": fallback_count,
                "attempts": state.attempts,
                "retries": state.retries,
                "cache_hit": state.cache_hit,
            },
        )

        total = elapsed()
        observe_analysis_latency(total)
        log_event(
            {
                "type": "analysis_end",
                "site": site_key,
                "mode": self.mode,
                "total_sec": total,
                "completion_sec": state.completion_sec,
                "degraded": state.degraded,
                "fallback_answers": fallback_count,
                "cache_hit": state.cache_hit,
            }
        )
        return result

    def analyze_catalog(
        self,
        entries: list[SiteEntry],
        profile: Profile,
        delay_sec: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> list[SiteAnalysisResult]:
        """Analyze sites one at a time with a pause between remote batches."""
        delay = settings.INTER_SITE_DELAY_SEC if delay_sec is None else delay_sec
        results: list[SiteAnalysisResult] = []
        for index, entry in enumerate(entries):
            if index and delay > 0 and self.mode == "completion":
                sleep(delay)
            results.append(self.analyze(entry.site_url, entry.question_texts, profile))
        return results


def build_pipeline(
    rate_limiter: RateLimiter | None = None,
    mode: str | None = None,
) -> AnswerPipeline:
    generator = FallbackAnswerGenerator()
    client = CompletionClient(
        rate_limiter=rate_limiter or RateLimiter(settings.RATE_LIMIT_WINDOW_SEC),
        fallback=generator,
    )
    strategy = select_strategy(mode or settings.ANSWER_MODE, client, generator)
    cache = AnswerCache() if settings.ENABLE_CACHE else None
    return AnswerPipeline(strategy, cache=cache, model=client.model)
