from pathlib import Path
import sys

import pytest

# Ensure tests can import project modules from this repo layout.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from directorybot.answers.matcher import RULES, find_rule, match_field  # noqa: E402
from directorybot.schemas import Profile  # noqa: E402


@pytest.mark.parametrize(
    "question,rule_name",
    [
        ("What is your GitHub repository?", "github"),
        ("LinkedIn page", "linkedin"),
        ("What is your X (Twitter) handle?", "x"),
        ("Contact email", "email"),
        ("Give us a short description", "tagline"),
        ("What is your tagline?", "tagline"),
        ("What is your company name?", "company_name"),
        ("Which organization is behind the product?", "company_name"),
        ("Where is your company located?", "location"),
        ("When was your company founded?", "launch_date"),
        ("What is your company website?", "url"),
        ("What is your name?", "contact_name"),
        ("Founder", "contact_name"),
        ("What is your website URL?", "url"),
        ("Product name", "app_name"),
        ("Where are you located?", "location"),
        ("Is your product launched?", "released"),
        ("Is it live?", "released"),
        ("When did you launch?", "launch_date"),
        ("Who is your target audience?", "audience"),
        ("What category does it belong to?", "category_exact"),
        ("Category type", "app_type"),
        ("What type of app is it?", "app_type"),
        ("What are the main features?", "features"),
        ("What tech stack do you use?", "tech_stack"),
        ("Describe your product", "description"),
        ("What does your company do?", "description"),
        ("Which industry are you in?", "category"),
    ],
)
def test_rule_selection(question, rule_name):
    rule = find_rule(question)
    assert rule is not None
    assert rule.name == rule_name


def test_company_name_wins_over_app_name(profile):
    assert match_field("Enter your company name", profile) == "Acme Labs"
    assert match_field("Enter your product name", profile) == "Acme"


def test_company_questions_about_place_date_or_site_reach_their_fields(profile):
    assert match_field("Where is your company located?", profile) == "Berlin, Germany"
    assert match_field("When was your company founded?", profile) == "2024-03-01"
    assert match_field("What is your company website?", profile) == "https://acme.dev"


def test_category_excluding_type_runs_before_app_type(profile):
    assert match_field("Category", profile) == "Productivity"
    assert match_field("Category type", profile) == "SaaS"


def test_update_and_deliver_do_not_trigger_date_or_live_rules():
    assert find_rule("How often do you update?") is None
    assert find_rule("How do you deliver value?") is None


def test_list_fields_are_joined(profile):
    assert match_field("Key features", profile) == "Live dashboards, CSV import"
    assert match_field("Tech stack", profile) == "Python, FastAPI"


def test_released_flag_renders_yes_no(profile):
    assert match_field("Has it been released?", profile) == "Yes"
    assert match_field("Has it been released?", Profile(is_released=False)) == "No"


def test_first_match_wins_even_when_field_is_empty():
    assert match_field("Company name", Profile(name="Acme")) == ""


def test_no_rule_matches_returns_empty(profile):
    assert match_field("Anything else?", profile) == ""
    assert match_field("   ", profile) == ""


def test_match_is_case_and_whitespace_insensitive(profile):
    assert match_field("  WHAT IS YOUR   GITHUB?  ", profile) == "https://github.com/acme"


def test_match_is_deterministic(profile):
    questions = ["Describe your product", "Company name", "Anything else?"]
    first = [match_field(q, profile) for q in questions]
    second = [match_field(q, profile) for q in questions]
    assert first == second


def test_rule_names_are_unique():
    names = [rule.name for rule in RULES]
    assert len(names) == len(set(names))
