"""Tests for screening module."""

import pytest

from aurarisk.compliance.screening import (
    EXACT_MATCH,
    FUZZY_MATCH,
    fuzzy_match,
    full_name,
    levenshtein_distance,
    screen_against_watchlist,
)


class TestLevenshteinDistance:
    """Tests for levenshtein_distance function."""

    def test_known_distance(self) -> None:
        """Test the textbook kitten/sitting example."""
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_identical(self) -> None:
        """Test identical strings have distance 0."""
        assert levenshtein_distance("maria lopez", "maria lopez") == 0

    def test_empty(self) -> None:
        """Test distance to an empty string is the length."""
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3


class TestFuzzyMatch:
    """Tests for fuzzy_match function."""

    def test_one_edit(self) -> None:
        """Test similarity after one substitution."""
        assert fuzzy_match("maria lopez", "maria lopes") == pytest.approx(10 / 11)

    def test_symmetric(self) -> None:
        """Test argument order does not matter."""
        assert fuzzy_match("john", "jon") == fuzzy_match("jon", "john")

    def test_both_empty(self) -> None:
        """Test two empty strings are identical."""
        assert fuzzy_match("", "") == 1.0


class TestScreenAgainstWatchlist:
    """Tests for screen_against_watchlist function."""

    def test_full_name_lowercased(self) -> None:
        """Test names are normalised for comparison."""
        assert full_name({"first_name": "Maria", "last_name": "LOPEZ"}) == "maria lopez"

    def test_exact_match_case_insensitive(self) -> None:
        """Test exact matches ignore case."""
        entry = {"name": "MARIA LOPEZ"}

        result = screen_against_watchlist({"first_name": "Maria", "last_name": "Lopez"}, [entry])

        assert result.hit is True
        assert result.matches == [{"type": EXACT_MATCH, "confidence": 1.0, "entry": entry}]
        assert result.fuzzy_matches == []

    def test_fuzzy_match_above_threshold(self) -> None:
        """Test near matches above the threshold are reported as fuzzy."""
        result = screen_against_watchlist(
            {"first_name": "Maria", "last_name": "Lopez"}, [{"name": "Maria Lopes"}]
        )

        assert result.matches == []
        assert len(result.fuzzy_matches) == 1
        assert result.fuzzy_matches[0]["type"] == FUZZY_MATCH
        assert result.fuzzy_matches[0]["confidence"] == pytest.approx(10 / 11)

    def test_threshold_is_strict(self) -> None:
        """Test a similarity equal to the threshold is not a hit."""
        result = screen_against_watchlist(
            {"first_name": "Maria", "last_name": "Lopez"},
            [{"name": "Maria Lopes"}],
            threshold=10 / 11,
        )

        assert result.hit is False

    def test_unrelated_names(self) -> None:
        """Test dissimilar names are not reported."""
        result = screen_against_watchlist(
            {"first_name": "Maria", "last_name": "Lopez"}, [{"name": "Ivan Petrov"}]
        )

        assert result.hit is False

    def test_no_name_skips(self) -> None:
        """Test an applicant without a name produces no hits."""
        result = screen_against_watchlist({}, [{"name": "Ivan Petrov"}])

        assert result.to_dict() == {"matches": [], "fuzzy_matches": []}
