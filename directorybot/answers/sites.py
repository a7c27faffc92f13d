"""Site catalog: one row per directory site with its submission questions.

The catalog is a CSV export with a header row. Column A holds the site URL
and column B the site's questions separated by commas.
"""

import csv
from dataclasses import dataclass
from pathlib import Path

from directorybot.schemas import Question


@dataclass(frozen=True)
class SiteEntry:
    site_url: str
    questions: tuple[Question, ...]

    @property
    def question_texts(self) -> list[str]:
        return [q.question for q in self.questions]


def split_questions(cell: str) -> list[str]:
    return [part.strip() for part in cell.split(",") if part.strip()]


def parse_site_rows(rows: list[list[str]]) -> list[SiteEntry]:
    entries: list[SiteEntry] = []
    for row_index, row in enumerate(rows[1:]):
        site_url = row[0].strip() if row and row[0].strip() else f"Unknown Site {row_index + 1}"
        cell = row[1].strip() if len(row) > 1 else ""
        texts = split_questions(cell)
        if not texts:
            continue
        questions = tuple(Question(id=i, question=q) for i, q in enumerate(texts, start=1))
        entries.append(SiteEntry(site_url=site_url, questions=questions))
    return entries


def load_site_catalog(path: str | Path) -> list[SiteEntry]:
    path = Path(path).expanduser()
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
    except OSError as exc:
        raise RuntimeError(f"Failed to read site catalog at '{path}': {exc}") from exc
    return parse_site_rows(rows)


def site_urls(entries: list[SiteEntry]) -> list[str]:
    seen: dict[str, None] = {}
    for entry in entries:
        seen.setdefault(entry.site_url, None)
    return list(seen)


def find_site(entries: list[SiteEntry], site_url: str) -> SiteEntry | None:
    for entry in entries:
        if entry.site_url == site_url:
            return entry
    return None
