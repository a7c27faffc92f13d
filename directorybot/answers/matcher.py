"""Keyword rules that map a directory question onto a profile field.

Rules are evaluated top to bottom and the first matching rule wins, even
when the field it points at is empty. Several rules overlap, so their order
is part of the behavior:

- ``tagline`` runs before ``description`` ("short description").
- ``company_name`` and ``contact_name`` run before ``app_name`` ("name").
- ``released`` runs before ``launch_date`` ("launched" vs "launch date").
- ``category_exact`` skips questions that mention "type" so they reach
  ``app_type``; the broad ``category`` rule runs last.
"""

from dataclasses import dataclass
from typing import Callable

from directorybot.schemas import Profile

Predicate = Callable[[str], bool]
Accessor = Callable[[Profile], str]

_APP_TYPE_LABELS = {
    "saas": "SaaS",
    "ecommerce": "E-commerce",
    "blog": "Blog",
    "portfolio": "Portfolio",
    "webapp": "Web App",
    "other": "Other",
}


@dataclass(frozen=True)
class MatchRule:
    name: str
    predicate: Predicate
    accessor: Accessor


def any_of(*words: str) -> Predicate:
    return lambda text: any(word in text for word in words)


def all_of(*words: str) -> Predicate:
    return lambda text: all(word in text for word in words)


def either(*predicates: Predicate) -> Predicate:
    return lambda text: any(p(text) for p in predicates)


def excluding(predicate: Predicate, *words: str) -> Predicate:
    return lambda text: predicate(text) and not any(word in text for word in words)


def _joined(values: list[str]) -> str:
    return ", ".join(v.strip() for v in values if v.strip())


def _app_type_label(profile: Profile) -> str:
    return _APP_TYPE_LABELS.get(profile.type, profile.type)


def _released(profile: Profile) -> str:
    return "Yes" if profile.is_released else "No"


RULES: tuple[MatchRule, ...] = (
    MatchRule("github", any_of("github"), lambda p: p.github_url),
    MatchRule("linkedin", any_of("linkedin"), lambda p: p.linkedin_url),
    MatchRule(
        "x",
        any_of("twitter", "x.com", "x handle", "x profile", "x account", "x url", "(x)"),
        lambda p: p.x_url,
    ),
    MatchRule("email", any_of("email", "e-mail"), lambda p: p.email),
    MatchRule(
        "tagline",
        any_of("tagline", "slogan", "one-liner", "one liner", "short description", "pitch"),
        lambda p: p.tagline,
    ),
    MatchRule(
        "company_name",
        either(
            all_of("company", "name"),
            # Questions about the company's site, place or age belong to
            # the url, location and launch_date rules further down.
            excluding(
                any_of("company", "organization", "organisation"),
                "what does",
                "describe",
                "website",
                "url",
                "link",
                "homepage",
                "where",
                "located",
                "location",
                "country",
                "city",
                "headquarter",
                "founded",
                "when",
                "launch",
                " date",
            ),
        ),
        lambda p: p.company_name,
    ),
    MatchRule(
        "contact_name",
        excluding(
            any_of("contact", "founder", "your name", "full name", "maker"),
            "email",
        ),
        lambda p: p.contact_name,
    ),
    MatchRule(
        "url",
        any_of("url", "website", "link", "homepage", "web address"),
        lambda p: p.url,
    ),
    MatchRule("app_name", any_of("name", "title"), lambda p: p.name),
    MatchRule(
        "location",
        any_of("location", "located", "country", "city", "headquarter", "where are you"),
        lambda p: p.location,
    ),
    MatchRule(
        "released",
        excluding(any_of("released", "launched", " live"), "date", "when"),
        _released,
    ),
    MatchRule(
        "launch_date",
        any_of("launch", "release date", "founded", " date"),
        lambda p: p.launch_date,
    ),
    MatchRule(
        "audience",
        any_of("audience", "target", "who is it for", "customer"),
        lambda p: p.target_audience,
    ),
    MatchRule("category_exact", excluding(any_of("category"), "type"), lambda p: p.category),
    MatchRule("app_type", any_of("type", "kind of"), _app_type_label),
    MatchRule(
        "features",
        any_of("feature", "functionality", "capabilit"),
        lambda p: _joined(p.main_features),
    ),
    MatchRule(
        "tech_stack",
        any_of("tech", "stack", "built with", "framework", "language"),
        lambda p: _joined(p.tech_stack),
    ),
    MatchRule(
        "description",
        any_of("describe", "description", "what does", "about", "overview", "summary"),
        lambda p: p.description,
    ),
    MatchRule(
        "category",
        any_of("category", "industry", "niche", "genre", "vertical"),
        lambda p: p.category,
    ),
)


def normalize_question(question: str) -> str:
    return " ".join(question.strip().lower().split())


def find_rule(question: str, rules: tuple[MatchRule, ...] = RULES) -> MatchRule | None:
    text = normalize_question(question)
    if not text:
        return None
    for rule in rules:
        if rule.predicate(text):
            return rule
    return None


def match_field(question: str, profile: Profile, rules: tuple[MatchRule, ...] = RULES) -> str:
    """Return the profile value for the first matching rule, or ""."""
    rule = find_rule(question, rules)
    if rule is None:
        return ""
    value = rule.accessor(profile)
    return value.strip() if isinstance(value, str) else ""
