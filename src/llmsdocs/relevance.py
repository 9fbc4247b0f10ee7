"""Lexical relevance scoring over documentation sections.

Pure business logic: receives section strings, returns ranked results.
No knowledge of the cache, the fetcher, or MCP.

Two modes share the same section list:

- Search scoring ranks sections for a query. A full-query substring match is
  worth 10, each occurrence of each query word 2, and a query match in the
  heading line a further 5.
- Context scoring picks sections to hand to the completion model. Each
  question word longer than three characters that appears at all is worth 1;
  repetition and exact phrases are ignored.

Ties keep document order in both modes (``sorted`` is stable).
"""

from __future__ import annotations

import re
import string

from llmsdocs.models.docs import SearchResult
from llmsdocs.splitter import section_title

FULL_MATCH_BONUS = 10
WORD_OCCURRENCE_POINTS = 2
HEADING_MATCH_BONUS = 5

EXCERPT_RADIUS = 50
FALLBACK_EXCERPT_LENGTH = 150
FALLBACK_MIN_LINE_LENGTH = 20

CONTEXT_MIN_WORD_LENGTH = 3
CONTEXT_SEPARATOR = "\n\n---\n\n"

_SLUG_RE = re.compile(r"[^a-z0-9]+")


# ---------------------------------------------------------------------------
# Search scoring
# ---------------------------------------------------------------------------


def score_for_search(section: str, query: str) -> int:
    query_lower = query.lower()
    section_lower = section.lower()
    score = 0

    if query_lower in section_lower:
        score += FULL_MATCH_BONUS

    for word in query_lower.split():
        score += section_lower.count(word) * WORD_OCCURRENCE_POINTS

    first_line = section.split("\n", 1)[0]
    if query_lower in first_line.lower():
        score += HEADING_MATCH_BONUS

    return score


def search_sections(sections: list[str], query: str, limit: int = 5) -> list[SearchResult]:
    """Rank sections against ``query`` and return the top ``limit`` results."""
    scored = [(section, score_for_search(section, query)) for section in sections]
    ranked = sorted(
        ((section, score) for section, score in scored if score > 0),
        key=lambda item: item[1],
        reverse=True,
    )
    top = ranked[: max(0, limit)]
    return [extract_search_result(section, query, score) for section, score in top]


def extract_search_result(section: str, query: str, score: int) -> SearchResult:
    lines = section.split("\n")
    title = section_title(section)
    return SearchResult(
        title=title,
        path=infer_path(title, section),
        excerpt=_extract_excerpt(lines, query),
        score=score,
    )


def _extract_excerpt(lines: list[str], query: str) -> str:
    """Window around the first body-line match, else the first substantial line."""
    query_lower = query.lower()

    for line in lines[1:]:
        index = line.lower().find(query_lower)
        if index == -1:
            continue
        start = max(0, index - EXCERPT_RADIUS)
        end = min(len(line), index + len(query_lower) + EXCERPT_RADIUS)
        return f"...{line[start:end]}..."

    for line in lines:
        if len(line.strip()) > FALLBACK_MIN_LINE_LENGTH:
            return f"{line[:FALLBACK_EXCERPT_LENGTH]}..."

    return ""


def slugify(title: str) -> str:
    """``'Getting Started: API'`` → ``'getting-started-api'``."""
    return _SLUG_RE.sub("-", title.lower()).strip("-")


def infer_path(title: str, section: str) -> str:
    """Guess a documentation path for a section.

    Best-effort metadata only: the result is derived from keywords and may not
    correspond to a page that ``get_documentation_page`` can fetch.
    """
    slug = slugify(title)

    if "API" in section or "API" in title:
        return f"api-reference/{slug}"
    if "guide" in section or "Guide" in title:
        return f"guides/{slug}"
    if "tutorial" in section or "Tutorial" in title:
        return f"tutorials/{slug}"
    return slug


# ---------------------------------------------------------------------------
# Context scoring
# ---------------------------------------------------------------------------


def question_words(question: str) -> list[str]:
    """Lower-cased question tokens longer than three characters.

    Surrounding punctuation is stripped so ``'authentication?'`` matches
    ``'authentication'``.
    """
    words = (word.strip(string.punctuation) for word in question.lower().split())
    return [word for word in words if len(word) > CONTEXT_MIN_WORD_LENGTH]


def score_for_context(section: str, words: list[str]) -> int:
    section_lower = section.lower()
    return sum(1 for word in words if word in section_lower)


def select_context(sections: list[str], question: str, max_sections: int = 3) -> str:
    """Join the ``max_sections`` best-covering sections with CONTEXT_SEPARATOR."""
    words = question_words(question)
    scored = [(section, score_for_context(section, words)) for section in sections]
    ranked = sorted(
        ((section, score) for section, score in scored if score > 0),
        key=lambda item: item[1],
        reverse=True,
    )
    return CONTEXT_SEPARATOR.join(section for section, _ in ranked[: max(0, max_sections)])
