from pathlib import Path
import sys

import pytest

# Ensure tests can import project modules from this repo layout.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from directorybot.answers.sites import (  # noqa: E402
    find_site,
    load_site_catalog,
    parse_site_rows,
    site_urls,
    split_questions,
)


def test_split_questions_drops_blanks():
    assert split_questions(" Name? ,, Tagline ,") == ["Name?", "Tagline"]


def test_parse_rows_skips_header_and_empty_question_cells():
    rows = [
        ["url", "questions"],
        ["https://a.dev", "Name?, Tagline"],
        ["https://b.dev", ""],
        ["", "Email?"],
        ["https://c.dev"],
    ]
    entries = parse_site_rows(rows)

    assert [e.site_url for e in entries] == ["https://a.dev", "Unknown Site 3"]
    assert [(q.id, q.question) for q in entries[0].questions] == [(1, "Name?"), (2, "Tagline")]
    assert entries[1].question_texts == ["Email?"]


def test_site_urls_are_unique_in_first_seen_order():
    rows = [
        ["url", "questions"],
        ["https://b.dev", "Name?"],
        ["https://a.dev", "Name?"],
        ["https://b.dev", "Email?"],
    ]
    assert site_urls(parse_site_rows(rows)) == ["https://b.dev", "https://a.dev"]


def test_find_site():
    entries = parse_site_rows([["url", "questions"], ["https://a.dev", "Name?"]])
    assert find_site(entries, "https://a.dev") is entries[0]
    assert find_site(entries, "https://missing.dev") is None


def test_load_site_catalog_reads_quoted_csv(tmp_path):
    path = tmp_path / "sites.csv"
    path.write_text(
        'url,questions\nhttps://a.dev,"Name?, Tagline, Email?"\n', encoding="utf-8"
    )
    entries = load_site_catalog(path)
    assert entries[0].question_texts == ["Name?", "Tagline", "Email?"]


def test_load_site_catalog_missing_file(tmp_path):
    with pytest.raises(RuntimeError, match="site catalog"):
        load_site_catalog(tmp_path / "missing.csv")
