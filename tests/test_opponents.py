"""Tests for matchlog.opponents module."""

import pytest

from matchlog.opponents import (
    PARTIAL_MATCH_SCORE,
    find_best_match,
    names_match,
    normalize,
    similarity,
)


class TestNormalize:
    """Tests for opponent name normalization."""

    def test_lowercases_and_trims(self):
        assert normalize('  Titans  ') == 'titans'

    def test_collapses_whitespace(self):
        assert normalize('FC   North\tStars') == 'fc north stars'

    def test_strips_punctuation(self):
        assert normalize('St. Mary-Anne_United, Jr.') == 'st maryanneunited jr'

    def test_empty_and_none(self):
        assert normalize('') == ''
        assert normalize(None) == ''
        assert normalize('   ') == ''


class TestSimilarity:
    """Tests for opponent similarity scoring."""

    @pytest.mark.parametrize('a, b', [
        ('Titans', 'titans'),
        ('Titans', 'TITANS'),
        (' Red  Hawks ', 'red hawks'),
        ('F.C. Lions', 'FC Lions'),
        ('', ''),
        (None, ''),
    ])
    def test_equal_normalized_forms_score_one(self, a, b):
        assert similarity(a, b) == 1.0

    def test_one_empty_scores_zero(self):
        assert similarity('Titans', '') == 0.0
        assert similarity('', 'Titans') == 0.0
        assert similarity('Titans', None) == 0.0

    def test_substring_scores_partial(self):
        assert similarity('Titans FC', 'Titans') == PARTIAL_MATCH_SCORE == 0.8
        assert similarity('Titans', 'Titans FC') == 0.8

    def test_levenshtein_single_substitution(self):
        assert similarity('Kat', 'Cat') == pytest.approx(1 - 1 / 3)

    def test_levenshtein_relative_to_longer_name(self):
        # 'rovers' -> 'rangers': 3 edits, longer length 7
        assert similarity('Rovers', 'Rangers') == pytest.approx(1 - 3 / 7)

    def test_completely_different_not_negative(self):
        assert similarity('abc', 'xyz') == 0.0


class TestNamesMatch:
    """Tests for the threshold decision."""

    def test_case_difference_matches(self):
        assert names_match('Titans', 'TITANS') is True

    def test_typo_matches(self):
        # one edit in 8 characters
        assert names_match('Wildcats', 'Wildcatz') is True

    def test_different_opponents_do_not_match(self):
        assert names_match('Eagles', 'Sharks') is False

    def test_threshold_is_inclusive(self):
        assert names_match('Titans FC', 'Titans', threshold=0.8) is True
        assert names_match('Titans FC', 'Titans', threshold=0.81) is False


class TestFindBestMatch:
    """Tests for best candidate lookup."""

    def test_empty_input_or_candidates(self):
        assert find_best_match('', ['Titans']) is None
        assert find_best_match(None, ['Titans']) is None
        assert find_best_match('Titans', []) is None

    def test_returns_best_candidate(self):
        best = find_best_match('Titans', ['Titans FC', 'TITANS', 'Eagles'])
        assert best.name == 'TITANS'
        assert best.similarity == 1.0

    def test_below_threshold_returns_none(self):
        assert find_best_match('Titans', ['Eagles', 'Sharks']) is None

    def test_tie_keeps_first_seen(self):
        best = find_best_match('Titans', ['Titans FC', 'Titans United'])
        assert best.name == 'Titans FC'
        assert best.similarity == 0.8
