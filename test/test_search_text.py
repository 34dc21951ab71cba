"""
Tests for search text helpers

Tests query parsing, relevance scoring and popularity tokenization.
"""

import pytest

from meetme.constants.search import EXACT_MATCH_SCORE, PARTIAL_MATCH_SCORE, WORD_MATCH_SCORE
from meetme.utils.search_text import parse_query, relevance_score, tokenize_for_popularity


class TestParseQuery:
    def test_drops_short_terms_and_duplicates(self):
        assert parse_query("ab a cd ab") == ["ab", "cd"]

    @pytest.mark.parametrize("raw", [None, "", "   ", "\t\n"])
    def test_blank_input_yields_no_terms(self, raw):
        assert parse_query(raw) == []

    def test_single_character_query_yields_no_terms(self):
        assert parse_query("a b c") == []

    def test_duplicates_are_case_sensitive(self):
        assert parse_query("Team team TEAM") == ["Team", "team", "TEAM"]

    def test_preserves_first_occurrence_order(self):
        assert parse_query("  planning   review planning agenda ") == ["planning", "review", "agenda"]

    def test_every_term_has_at_least_two_characters(self):
        terms = parse_query("x yy zzz q rr")
        assert terms == ["yy", "zzz", "rr"]
        assert all(len(term) >= 2 for term in terms)


class TestRelevanceScore:
    def test_exact_match_of_whole_text(self):
        assert relevance_score("Budget", ["budget"]) == EXACT_MATCH_SCORE

    def test_whole_word_match(self):
        assert relevance_score("Annual budget review", ["budget"]) == WORD_MATCH_SCORE

    def test_partial_substring_match(self):
        assert relevance_score("Budgeting session", ["budget"]) == PARTIAL_MATCH_SCORE

    def test_word_match_is_not_an_exact_match(self):
        assert relevance_score("Team Meeting", ["meeting"]) == 50.0
        assert relevance_score("meeting", ["meeting"]) == 100.0
        assert relevance_score("teammeetingroom", ["meeting"]) == 25.0

    def test_no_match_scores_zero(self):
        assert relevance_score("Quarterly planning", ["budget"]) == 0.0

    def test_scores_are_additive_across_terms(self):
        score = relevance_score("Team meeting about budgeting", ["team", "budget", "missing"])
        assert score == WORD_MATCH_SCORE + PARTIAL_MATCH_SCORE

    def test_blank_text_or_no_terms_scores_zero(self):
        assert relevance_score("", ["team"]) == 0.0
        assert relevance_score("   ", ["team"]) == 0.0
        assert relevance_score(None, ["team"]) == 0.0
        assert relevance_score("Team meeting", []) == 0.0

    def test_regex_characters_in_terms_are_literal(self):
        assert relevance_score("Learn c++ today", ["c++"]) == PARTIAL_MATCH_SCORE
        assert relevance_score("Version 1.5 notes", ["1.5"]) == WORD_MATCH_SCORE
        assert relevance_score("Version 125 notes", ["1.5"]) == 0.0

    def test_score_is_never_negative(self):
        for text in ["", "team", "teams", "the team", "nothing"]:
            assert relevance_score(text, ["team", "xx"]) >= 0


class TestTokenizeForPopularity:
    def test_lowercases_and_drops_stop_words(self):
        assert tokenize_for_popularity("The Team and the Budget") == ["team", "budget"]

    def test_drops_single_character_tokens(self):
        assert tokenize_for_popularity("a b project") == ["project"]

    def test_empty_query(self):
        assert tokenize_for_popularity("") == []
        assert tokenize_for_popularity(None) == []
