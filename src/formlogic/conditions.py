"""
Year Condition System

Entry-year rules compare the respondent's declared year against a
configured value. The comparison kinds form a closed set: an unknown
condition type is rejected when the rule is built, never silently
treated as false.

Condition values stay raw strings/ints in the model. They are parsed
here, at match time, so that one malformed rule degrades to
"non-matching" instead of breaking resolution for the whole form.
"""

import logging
from enum import Enum
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

LEGACY_PREFIX = "year_"


class YearCondition(Enum):
    """
    Comparison kinds supported by year rules.

    Values:
        EQUALS: year == value
        LESS_EQUAL: year <= value
        GREATER_EQUAL: year >= value
        BETWEEN: low <= year <= high, value written "low-high"
    """

    EQUALS = "equals"
    LESS_EQUAL = "less_equal"
    GREATER_EQUAL = "greater_equal"
    BETWEEN = "between"

    @classmethod
    def parse(cls, value) -> "YearCondition":
        """
        Accept a member, its value, or the legacy ``year_``-prefixed spelling.

        Raises:
            ValueError: for any other value
        """
        if isinstance(value, cls):
            return value
        raw = str(value).strip().lower()
        if raw.startswith(LEGACY_PREFIX):
            raw = raw[len(LEGACY_PREFIX):]
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown year condition type {value!r} (expected one of: {allowed})")

    @property
    def legacy_name(self) -> str:
        return LEGACY_PREFIX + self.value


def parse_year(value: Union[int, str, None]) -> Optional[int]:
    """
    Parse a year from configuration or respondent input.

    Returns:
        The year as int, or None for a blank or non-numeric value
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_year_range(value: Union[int, str, None]) -> Optional[Tuple[int, int]]:
    """
    Parse a "low-high" BETWEEN value.

    An inverted range ("2025-2020") is normalized by swapping its ends.

    Returns:
        (low, high) or None when the value is not two years joined by "-"
    """
    if not isinstance(value, str) or "-" not in value:
        return None
    parts = value.split("-")
    if len(parts) != 2:
        return None
    low, high = parse_year(parts[0]), parse_year(parts[1])
    if low is None or high is None:
        return None
    if low > high:
        low, high = high, low
    return low, high


def is_inverted_range(value: Union[int, str, None]) -> bool:
    """True when a BETWEEN value is well formed but written high-low."""
    if not isinstance(value, str) or value.count("-") != 1:
        return False
    low_text, high_text = value.split("-")
    low, high = parse_year(low_text), parse_year(high_text)
    return low is not None and high is not None and low > high


def is_well_formed(condition: YearCondition, value: Union[int, str, None]) -> bool:
    if condition is YearCondition.BETWEEN:
        return parse_year_range(value) is not None
    return parse_year(value) is not None


def year_matches(condition: YearCondition, value: Union[int, str, None], year: Optional[int]) -> bool:
    """
    Evaluate one year condition.

    Args:
        condition: YearCondition kind
        value: Raw configured value
        year: Respondent's year (None never matches)

    Returns:
        True if the condition holds. A malformed value is logged and
        treated as non-matching.
    """
    if year is None:
        return False

    if condition is YearCondition.BETWEEN:
        bounds = parse_year_range(value)
        if bounds is None:
            logger.warning("Skipping year rule with malformed range %r", value)
            return False
        low, high = bounds
        return low <= year <= high

    target = parse_year(value)
    if target is None:
        logger.warning("Skipping year rule with malformed year %r", value)
        return False

    if condition is YearCondition.EQUALS:
        return year == target
    if condition is YearCondition.LESS_EQUAL:
        return year <= target
    if condition is YearCondition.GREATER_EQUAL:
        return year >= target
    raise TypeError(f"Unsupported year condition: {condition}")
