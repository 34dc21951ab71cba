"""
Search text helpers: query parsing and relevance scoring.
"""

import re

from meetme.constants.search import (
    EXACT_MATCH_SCORE,
    MIN_TERM_LENGTH,
    PARTIAL_MATCH_SCORE,
    STOP_WORDS,
    WORD_MATCH_SCORE,
)


def parse_query(query: str | None) -> list[str]:
    """
    Split a raw query into search terms.

    Terms shorter than two characters are dropped and duplicates are
    removed (case-sensitive), keeping the order of first occurrence.
    """
    if not query or not query.strip():
        return []

    terms = (fragment.strip() for fragment in query.split())
    return list(dict.fromkeys(term for term in terms if len(term) >= MIN_TERM_LENGTH))


def relevance_score(text: str | None, terms: list[str]) -> float:
    """
    Additive relevance of ``text`` for ``terms``.

    Per term: 100 when the whole text equals the term, 50 for a whole-word
    match, 25 for any other substring match (all case-insensitive).
    """
    if not text or not text.strip() or not terms:
        return 0.0

    text_lower = text.lower()
    score = 0.0

    for term in terms:
        term_lower = term.lower()
        if text_lower == term_lower:
            score += EXACT_MATCH_SCORE
        elif term_lower in text_lower:
            if re.search(rf"\b{re.escape(term_lower)}\b", text_lower):
                score += WORD_MATCH_SCORE
            else:
                score += PARTIAL_MATCH_SCORE

    return score


def tokenize_for_popularity(query: str | None) -> list[str]:
    """Lower-cased tokens of a recorded query, without stop words and short tokens."""
    if not query:
        return []
    return [
        token
        for token in query.lower().split()
        if len(token) >= MIN_TERM_LENGTH and token not in STOP_WORDS
    ]
