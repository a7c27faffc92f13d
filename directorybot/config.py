"""Runtime configuration loaded from environment variables."""

import os

from dotenv import load_dotenv

load_dotenv()


def _is_true(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


class Settings:
    API_HOST = os.getenv("API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("API_PORT", "8000"))
    API_KEY = os.getenv("API_KEY", "").strip()
    REQUIRE_API_KEY_ON_NON_LOCALHOST = _is_true("REQUIRE_API_KEY_ON_NON_LOCALHOST")

    COMPLETION_API_KEY = os.getenv("COMPLETION_API_KEY", "").strip()
    COMPLETION_BASE_URL = os.getenv(
        "COMPLETION_BASE_URL", "https://api.openai.com/v1"
    ).rstrip("/")
    COMPLETION_MODEL = os.getenv("COMPLETION_MODEL", "gpt-4o-mini")
    COMPLETION_MAX_TOKENS = int(os.getenv("COMPLETION_MAX_TOKENS", "1500"))
    COMPLETION_TEMPERATURE = float(os.getenv("COMPLETION_TEMPERATURE", "0.7"))
    COMPLETION_JSON_MODE = _is_true("COMPLETION_JSON_MODE")
    COMPLETION_TIMEOUT_SEC = int(os.getenv("COMPLETION_TIMEOUT_SEC", "60"))
    COMPLETION_MAX_ATTEMPTS = int(os.getenv("COMPLETION_MAX_ATTEMPTS", "3"))
    COMPLETION_BACKOFF_BASE_SEC = float(os.getenv("COMPLETION_BACKOFF_BASE_SEC", "1.0"))

    RATE_LIMIT_WINDOW_SEC = float(os.getenv("RATE_LIMIT_WINDOW_SEC", "1.0"))
    RATE_LIMIT_POLICY = os.getenv("RATE_LIMIT_POLICY", "degrade").strip().lower()

    ANSWER_MODE = os.getenv("ANSWER_MODE", "auto").strip().lower()
    MAX_QUESTIONS_PER_SITE = int(os.getenv("MAX_QUESTIONS_PER_SITE", "10"))
    ANSWER_MIN_WORDS = int(os.getenv("ANSWER_MIN_WORDS", "50"))
    ANSWER_MAX_WORDS = int(os.getenv("ANSWER_MAX_WORDS", "80"))
    FALLBACK_VARIATION = _is_true("FALLBACK_VARIATION")
    PROMPT_VERSION = os.getenv("PROMPT_VERSION", "v1")
    INTER_SITE_DELAY_SEC = float(os.getenv("INTER_SITE_DELAY_SEC", "1.0"))

    SITES_FILE = os.getenv("SITES_FILE", "data/sites.csv").strip()
    ENABLE_CACHE = _is_true("ENABLE_CACHE", "false")
    CACHE_DIR = os.getenv("CACHE_DIR", "data/cache")
    RUNS_DIR = os.getenv("RUNS_DIR", "data/runs")


settings = Settings()
