from typing import Protocol

from directorybot.answers.fallback import FallbackAnswerGenerator
from directorybot.answers.generate import BatchState, CompletionClient
from directorybot.schemas import Profile, Question

ANSWER_MODES = ("auto", "deterministic", "completion")


class AnswerStrategy(Protocol):
    name: str

    def resolve(
        self,
        questions: list[Question],
        profile: Profile,
        site_key: str,
        state: BatchState,
    ) -> dict[int, str]: ...


class DeterministicStrategy:
    name = "deterministic"

    def __init__(self, generator: FallbackAnswerGenerator) -> None:
        self.generator = generator

    def resolve(
        self,
        questions: list[Question],
        profile: Profile,
        site_key: str,
        state: BatchState,
    ) -> dict[int, str]:
        state.fallback_ids.extend(q.id for q in questions)
        return self.generator.answer_all(questions, profile)


class CompletionStrategy:
    def __init__(self, client: CompletionClient) -> None:
        self.client = client

    @property
    def name(self) -> str:
        # A client without a credential never calls out.
        return "completion" if self.client.enabled else "deterministic"

    def resolve(
        self,
        questions: list[Question],
        profile: Profile,
        site_key: str,
        state: BatchState,
    ) -> dict[int, str]:
        return self.client.resolve_batch(questions, profile, site_key, state)


def select_strategy(
    mode: str,
    client: CompletionClient,
    generator: FallbackAnswerGenerator,
) -> AnswerStrategy:
    mode = mode.strip().lower()
    if mode not in ANSWER_MODES:
        raise ValueError(
            f"Unknown answer mode '{mode}'. Use one of: {', '.join(ANSWER_MODES)}."
        )
    if mode == "deterministic":
        return DeterministicStrategy(generator)
    if mode == "completion" or client.enabled:
        return CompletionStrategy(client)
    return DeterministicStrategy(generator)
