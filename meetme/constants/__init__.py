"""Constants package for MeetMe Search."""

from .search import (
    EXACT_MATCH_SCORE,
    FALLBACK_TERMS,
    MIN_TERM_LENGTH,
    PARTIAL_MATCH_SCORE,
    STOP_WORDS,
    WORD_MATCH_SCORE,
)

__all__ = [
    # Relevance tiers
    "EXACT_MATCH_SCORE",
    "WORD_MATCH_SCORE",
    "PARTIAL_MATCH_SCORE",
    # Query handling
    "MIN_TERM_LENGTH",
    "STOP_WORDS",
    "FALLBACK_TERMS",
]
