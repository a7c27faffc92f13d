from directorybot.config import settings
from directorybot.schemas import Profile, Question


def _list_text(values: list[str]) -> str:
    clean = [v.strip() for v in values if v.strip()]
    return ", ".join(clean) if clean else "Not provided"


def _value(text: str) -> str:
    return text.strip() or "Not provided"


def profile_lines(profile: Profile) -> list[str]:
    return [
        f"Name: {_value(profile.name)}",
        f"Website: {_value(profile.url)}",
        f"Type: {profile.type}",
        f"Tagline: {_value(profile.tagline)}",
        f"Category: {_value(profile.category)}",
        f"Description: {_value(profile.description)}",
        f"Target audience: {_value(profile.target_audience)}",
        f"Main features: {_list_text(profile.main_features)}",
        f"Tech stack: {_list_text(profile.tech_stack)}",
        f"Company: {_value(profile.company_name)}",
        f"Contact name: {_value(profile.contact_name)}",
        f"Email: {_value(profile.email)}",
        f"Location: {_value(profile.location)}",
        f"Launch date: {_value(profile.launch_date)}",
        f"Released: {'Yes' if profile.is_released else 'No'}",
        f"GitHub: {_value(profile.github_url)}",
        f"LinkedIn: {_value(profile.linkedin_url)}",
        f"X (Twitter): {_value(profile.x_url)}",
    ]


def build_batch_prompt(
    profile: Profile,
    questions: list[Question],
    min_words: int | None = None,
    max_words: int | None = None,
) -> str:
    """One instruction block answering every question in a single call."""
    low = settings.ANSWER_MIN_WORDS if min_words is None else min_words
    high = settings.ANSWER_MAX_WORDS if max_words is None else max_words
    low, high = min(low, high), max(low, high)

    profile_block = "\n".join(profile_lines(profile))
    question_block = "\n".join(f"{q.id}. {q.question.strip()}" for q in questions)
    example = ", ".join(f'"{q.id}": "..."' for q in questions[:2])
    return (
        "You are filling in a directory submission form for the application "
        "described below.\n\n"
        f"APPLICATION PROFILE:\n{profile_block}\n\n"
        f"QUESTIONS:\n{question_block}\n\n"
        "INSTRUCTIONS:\n"
        "- Answer every question using only the application profile.\n"
        f"- Keep each answer between {low} and {high} words.\n"
        "- If the profile does not contain the information, say it is not "
        "provided. Do not invent links, names, dates or numbers.\n"
        "- Respond with ONLY a JSON object. Keys are the question numbers as "
        "strings, values are the answer strings.\n"
        f"- Example: {{{example}}}"
    )
