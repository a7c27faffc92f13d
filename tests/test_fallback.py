from pathlib import Path
import random
import sys

# Ensure tests can import project modules from this repo layout.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from directorybot.answers.fallback import (  # noqa: E402
    ANSWER_TEMPLATES,
    NOT_PROVIDED_PHRASES,
    FallbackAnswerGenerator,
)
from directorybot.schemas import Profile, Question  # noqa: E402


def test_github_answer_contains_exact_url():
    profile = Profile(name="Acme", github_url="https://github.com/acme")
    answer = FallbackAnswerGenerator(vary=False).generate("What is your GitHub repository?", profile)
    assert answer == "https://github.com/acme"


def test_empty_field_returns_not_provided_phrase():
    profile = Profile(name="Acme", github_url="https://github.com/acme")
    answer = FallbackAnswerGenerator().generate("Describe your product", profile)
    assert answer in NOT_PROVIDED_PHRASES


def test_unmatched_question_is_never_empty(profile):
    generator = FallbackAnswerGenerator(rng=random.Random(3))
    for _ in range(20):
        assert generator.generate("Anything else?", profile)


def test_varied_templates_always_carry_the_matched_value(profile):
    generator = FallbackAnswerGenerator(vary=True, rng=random.Random(7))
    answers = {generator.generate("Company name", profile) for _ in range(50)}
    assert all("Acme Labs" in answer for answer in answers)
    assert answers <= {t.format(value="Acme Labs") for t in ANSWER_TEMPLATES}


def test_answer_all_covers_every_id(profile):
    questions = [
        Question(id=1, question="Company name"),
        Question(id=2, question="Anything else?"),
        Question(id=3, question="Where are you located?"),
    ]
    answers = FallbackAnswerGenerator(vary=False).answer_all(questions, profile)
    assert list(answers) == [1, 2, 3]
    assert answers[1] == "Acme Labs"
    assert answers[2] == NOT_PROVIDED_PHRASES[0]
    assert answers[3] == "Berlin, Germany"
