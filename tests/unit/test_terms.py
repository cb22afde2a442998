"""Unit tests for key-term extraction and textual heuristics."""

import pytest

from feedback_dedup.similarity.terms import (
    FEATURE_TERMS,
    STOP_WORDS,
    contains_substring,
    extract_key_terms,
    find_shared_feature_term,
    has_common_phrases,
    share_key_terms,
)

pytestmark = [pytest.mark.unit, pytest.mark.similarity]


class TestExtractKeyTerms:
    def test_drops_stop_words_short_tokens_and_punctuation(self):
        assert extract_key_terms("The login page is broken!") == ["login", "page", "broken"]

    def test_only_stop_words(self):
        assert extract_key_terms("a an of it it's") == []

    def test_tokens_emptied_by_punctuation_are_dropped(self):
        assert extract_key_terms("--- ok") == []

    def test_keeps_order_and_repeats(self):
        assert extract_key_terms("Export, export CSV") == ["export", "export", "csv"]

    def test_punctuation_removed_inside_tokens(self):
        assert extract_key_terms("sign-on e-mail") == ["signon", "email"]

    def test_empty_text(self):
        assert extract_key_terms("") == []

    def test_stop_word_list_has_contractions(self):
        assert "it's" in STOP_WORDS


class TestShareKeyTerms:
    def test_one_shared_term(self):
        assert share_key_terms("Dark mode?", "please add a dark theme") is True

    def test_min_shared_not_reached(self):
        assert share_key_terms("Dark mode?", "please add a dark theme", min_shared=2) is False

    def test_no_shared_terms(self):
        assert share_key_terms("Crash on save", "Slow startup") is False


class TestContainsSubstring:
    def test_case_insensitive_either_direction(self):
        assert contains_substring("Dark Mode", "please add dark mode support") is True
        assert contains_substring("please add dark mode support", "Dark Mode") is True

    def test_unrelated(self):
        assert contains_substring("abc", "xyz") is False


class TestHasCommonPhrases:
    def test_common_prefix(self):
        assert has_common_phrases("Export to CSV please", "Export to PDF") is True

    def test_common_suffix(self):
        assert has_common_phrases("crashes on startup", "app freezes on startup") is True

    def test_short_overlap_is_not_enough(self):
        assert has_common_phrases("abc", "abd") is False

    def test_custom_min_length(self):
        assert has_common_phrases("abcd", "abcx", min_length=3) is True


class TestFindSharedFeatureTerm:
    def test_multi_word_term(self):
        assert find_shared_feature_term("Add dark mode", "dark mode please") == "dark mode"

    def test_single_word_term(self):
        assert find_shared_feature_term("login broken", "cannot login") == "login"

    def test_dictionary_order_decides(self):
        assert find_shared_feature_term("user theme", "theme for every user") == "theme"

    def test_case_insensitive(self):
        assert find_shared_feature_term("DASHBOARD is slow", "my Dashboard") == "dashboard"

    def test_no_shared_term(self):
        assert find_shared_feature_term("crash on save", "slow startup") is None

    def test_term_in_only_one_text(self):
        assert find_shared_feature_term("export fails", "slow startup") is None

    def test_dictionary_starts_with_display_modes(self):
        assert FEATURE_TERMS[:3] == ("dark mode", "light mode", "theme")
