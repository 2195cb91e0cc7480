"""
Tests for year condition parsing and matching.
"""

import logging

import pytest
from formlogic.conditions import (
    YearCondition,
    is_inverted_range,
    is_well_formed,
    parse_year,
    parse_year_range,
    year_matches,
)


class TestYearConditionParse:
    """Test YearCondition.parse."""

    @pytest.mark.parametrize("raw,expected", [
        ("equals", YearCondition.EQUALS),
        ("year_equals", YearCondition.EQUALS),
        ("YEAR_LESS_EQUAL", YearCondition.LESS_EQUAL),
        ("greater_equal", YearCondition.GREATER_EQUAL),
        (YearCondition.BETWEEN, YearCondition.BETWEEN),
    ])
    def test_accepted_spellings(self, raw, expected):
        """Should accept plain, legacy and member spellings."""
        assert YearCondition.parse(raw) is expected

    def test_unknown_rejected(self):
        """Should raise ValueError for anything else."""
        with pytest.raises(ValueError):
            YearCondition.parse("year_not_equals")

    def test_legacy_name(self):
        """Should expose the year_-prefixed name."""
        assert YearCondition.BETWEEN.legacy_name == "year_between"


class TestParsing:
    """Test year and range parsing."""

    def test_parse_year(self):
        """Should parse ints and numeric strings, None otherwise."""
        assert parse_year(2024) == 2024
        assert parse_year(" 2024 ") == 2024
        assert parse_year("") is None
        assert parse_year("twenty") is None
        assert parse_year(None) is None

    def test_parse_range(self):
        """Should parse "low-high" with optional spaces."""
        assert parse_year_range("2020-2022") == (2020, 2022)
        assert parse_year_range("2020 - 2022") == (2020, 2022)

    def test_inverted_range_is_swapped(self):
        """Should normalize an inverted range."""
        assert parse_year_range("2025-2020") == (2020, 2025)
        assert is_inverted_range("2025-2020")
        assert not is_inverted_range("2020-2025")

    @pytest.mark.parametrize("raw", ["2020", "2020-", "a-b", "2020-2021-2022", 2020, None])
    def test_malformed_ranges(self, raw):
        """Should return None for anything but two years joined by "-"."""
        assert parse_year_range(raw) is None

    def test_is_well_formed(self):
        """Should check the value shape the condition expects."""
        assert is_well_formed(YearCondition.EQUALS, "2024")
        assert not is_well_formed(YearCondition.EQUALS, "2020-2024")
        assert is_well_formed(YearCondition.BETWEEN, "2020-2024")
        assert not is_well_formed(YearCondition.BETWEEN, "2024")


class TestYearMatches:
    """Test year_matches for each condition."""

    def test_equals(self):
        assert year_matches(YearCondition.EQUALS, "2024", 2024)
        assert year_matches(YearCondition.EQUALS, 2024, 2024)
        assert not year_matches(YearCondition.EQUALS, "2024", 2023)

    def test_less_equal(self):
        assert year_matches(YearCondition.LESS_EQUAL, "2020", 2020)
        assert year_matches(YearCondition.LESS_EQUAL, "2020", 2019)
        assert not year_matches(YearCondition.LESS_EQUAL, "2020", 2021)

    def test_greater_equal(self):
        assert year_matches(YearCondition.GREATER_EQUAL, "2020", 2020)
        assert year_matches(YearCondition.GREATER_EQUAL, "2020", 2030)
        assert not year_matches(YearCondition.GREATER_EQUAL, "2020", 2019)

    def test_between_is_inclusive(self):
        """Should include both ends of the range."""
        for year in (2021, 2022, 2023):
            assert year_matches(YearCondition.BETWEEN, "2021-2023", year)
        assert not year_matches(YearCondition.BETWEEN, "2021-2023", 2020)
        assert not year_matches(YearCondition.BETWEEN, "2021-2023", 2024)

    def test_between_inverted(self):
        """Should match an inverted range as if written low-high."""
        assert year_matches(YearCondition.BETWEEN, "2023-2021", 2022)

    def test_no_year_never_matches(self):
        """Should not match when no year was selected."""
        assert not year_matches(YearCondition.LESS_EQUAL, "2020", None)

    def test_malformed_value_does_not_match(self, caplog):
        """Should log and return False instead of raising."""
        with caplog.at_level(logging.WARNING, logger="formlogic.conditions"):
            assert not year_matches(YearCondition.EQUALS, "soon", 2024)
            assert not year_matches(YearCondition.BETWEEN, "2020", 2020)
        assert len(caplog.records) == 2
