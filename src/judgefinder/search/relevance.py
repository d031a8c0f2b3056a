"""
Relevance scoring and result ordering.
"""

from __future__ import annotations

from src.judgefinder.models import SearchResult

EXACT_SCORE = 100.0
PREFIX_SCORE = 80.0
CONTAINS_SCORE = 60.0
WORD_MATCH_WEIGHT = 40.0


def relevance(query: str, text: str) -> float:
    """
    Score how well ``text`` matches ``query``, case-insensitively, in [0, 100].

    Exact match 100, prefix 80, substring 60; otherwise 40 times the share of
    query words that begin some word of ``text``.
    """
    q = query.casefold().strip()
    t = text.casefold()
    if not q:
        return 0.0
    if t == q:
        return EXACT_SCORE
    if t.startswith(q):
        return PREFIX_SCORE
    if q in t:
        return CONTAINS_SCORE

    query_words = q.split()
    text_words = t.split()
    matched = sum(1 for qw in query_words if any(tw.startswith(qw) for tw in text_words))
    return matched / len(query_words) * WORD_MATCH_WEIGHT


def sort_key(query: str):
    """
    Key function giving search results a total order.

    Titles starting with the query first, then higher relevance, then title
    (case-insensitive, with the raw title breaking case ties), then type and id.
    """
    folded = query.casefold()

    def key(result: SearchResult) -> tuple:
        title = result.title.casefold()
        return (
            not title.startswith(folded),
            -result.relevance_score,
            title,
            result.title,
            result.kind.value,
            result.id,
        )

    return key
