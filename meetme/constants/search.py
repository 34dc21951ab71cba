"""
Search Constants

Relevance tiers, stop words and fallback terms used by the search service.
"""

# Relevance tiers, summed per matching term.
# TODO: replace with a proper ranking function (e.g. BM25) once results need calibrated scores
EXACT_MATCH_SCORE = 100.0
WORD_MATCH_SCORE = 50.0
PARTIAL_MATCH_SCORE = 25.0

MIN_TERM_LENGTH = 2

# Words that carry no meaning in popular search analytics
STOP_WORDS = frozenset(
    {
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "from", "as", "is", "was", "are", "were", "be", "been", "have", "has", "had",
        "do", "does", "did", "will", "would", "should", "could", "can", "may", "might",
        "this", "that", "these", "those", "a", "an", "what", "when", "where", "who",
        "why", "how", "i", "you", "he", "she", "it", "we", "they", "me", "him", "her",
        "us", "them", "my", "your", "his", "our", "their", "about", "up", "down",
        "out", "off", "over", "under", "again", "further", "then", "once",
    }
)

# Used to pad popular terms while there is little search history
FALLBACK_TERMS = (
    "meeting",
    "discussion",
    "project",
    "team",
    "update",
    "review",
    "planning",
    "announcement",
    "feedback",
    "collaboration",
    "schedule",
    "agenda",
    "presentation",
    "workshop",
    "conference",
)
