import hashlib
import json
from pathlib import Path

from directorybot.config import settings
from directorybot.schemas import Profile, Question


def _key(model: str, profile: Profile, questions: list[Question]) -> str:
    raw = json.dumps(
        {
            "m": model,
            "p": settings.PROMPT_VERSION,
            "profile": profile.model_dump(),
            "q": [[q.id, q.question] for q in questions],
        },
        sort_keys=True,
    )
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class AnswerCache:
    def __init__(self, cache_dir: str | Path | None = None) -> None:
        self.cache_dir = Path(cache_dir or settings.CACHE_DIR)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def get(self, model: str, profile: Profile, questions: list[Question]) -> dict[int, str] | None:
        fp = self.cache_dir / f"{_key(model, profile, questions)}.json"
        if not fp.exists():
            return None
        try:
            stored = json.loads(fp.read_text(encoding="utf-8"))
            answers = {int(k): str(v) for k, v in stored.items()}
        except (OSError, ValueError, AttributeError):
            return None
        if set(answers) != {q.id for q in questions}:
            return None
        return answers

    def set(
        self, model: str, profile: Profile, questions: list[Question], answers: dict[int, str]
    ) -> None:
        fp = self.cache_dir / f"{_key(model, profile, questions)}.json"
        value = {str(k): v for k, v in answers.items()}
        fp.write_text(json.dumps(value, ensure_ascii=False, indent=2), encoding="utf-8")
