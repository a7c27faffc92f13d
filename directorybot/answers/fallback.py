"""Deterministic, network-free answers built from the profile."""

import random

from directorybot.answers.matcher import match_field
from directorybot.config import settings
from directorybot.schemas import Profile, Question

ANSWER_TEMPLATES = (
    "{value}",
    "Here are the details: {value}",
    "{value} (as listed in our application profile)",
    "For this question, our answer is: {value}",
)

NOT_PROVIDED_PHRASES = (
    "This information is not provided in the application details.",
    "Not provided in the application profile.",
    "The application profile does not include this detail yet.",
)


class FallbackAnswerGenerator:
    """Wraps a matched profile value in a fixed template.

    Template choice may vary between calls, but the value inside is always
    the exact matched field. Unmatched or empty fields produce a
    "not provided" phrase, never an empty string.
    """

    def __init__(
        self,
        vary: bool | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.vary = settings.FALLBACK_VARIATION if vary is None else vary
        self._rng = rng or random.Random()

    def _pick(self, options: tuple[str, ...]) -> str:
        if not self.vary:
            return options[0]
        return self._rng.choice(options)

    def generate(self, question: str, profile: Profile) -> str:
        value = match_field(question, profile)
        if not value:
            return self._pick(NOT_PROVIDED_PHRASES)
        return self._pick(ANSWER_TEMPLATES).format(value=value)

    def answer_all(self, questions: list[Question], profile: Profile) -> dict[int, str]:
        return {q.id: self.generate(q.question, profile) for q in questions}
