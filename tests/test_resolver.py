"""
Tests for the Eligibility Resolver.

Tests verify that resolution:
    - Unions year and role sections when both match
    - Falls back to every section only when no rule is configured
    - Returns nothing (not everything) for configured-but-unmatched selections
    - Ignores inactive rules, malformed rules and unknown section ids
    - Resolves management lists without looking at year rules
    - Orders visible questions with unassigned ones first
"""

import pytest
from formlogic.conditions import YearCondition
from formlogic.model import ManagementList, Question, Role, RoleRule, Section, YearRule
from formlogic.resolver import (
    ResolutionMode,
    resolve_management_sections,
    resolve_visible_questions,
    resolve_visible_sections,
    role_section_ids,
    year_section_ids,
)

ALL_SECTIONS = {1, 2, 3, 4, 5}


def year_rule(kind, value, ids, **kw):
    return YearRule(kind, value, section_ids=ids, **kw)


@pytest.fixture
def rules():
    """yearRule{equals 2024 -> 1,2} and roleRule{team_lead -> 2,3}."""
    return (
        [year_rule(YearCondition.EQUALS, "2024", {1, 2})],
        [RoleRule(Role.TEAM_LEAD, section_ids={2, 3})],
    )


class TestCombinationPolicy:
    """Test the year/role combination table."""

    def test_union_of_year_and_role(self, rules):
        """2024 + team_lead should reveal {1, 2, 3}."""
        years, roles = rules
        res = resolve_visible_sections(years, roles, 2024, Role.TEAM_LEAD, ALL_SECTIONS)
        assert res.section_ids == {1, 2, 3}
        assert res.mode is ResolutionMode.COMBINED
        assert res.year_section_ids == {1, 2}
        assert res.role_section_ids == {2, 3}

    def test_union_contains_each_operand(self):
        """Should never drop a section either operand revealed."""
        years = [
            year_rule(YearCondition.GREATER_EQUAL, "2020", {1}),
            year_rule(YearCondition.BETWEEN, "2019-2022", {4}),
        ]
        roles = [RoleRule(Role.EMPLOYEE, section_ids={5}), RoleRule(Role.EMPLOYEE, section_ids={2})]
        res = resolve_visible_sections(years, roles, 2021, Role.EMPLOYEE, ALL_SECTIONS)
        assert res.year_section_ids <= res.section_ids
        assert res.role_section_ids <= res.section_ids
        assert res.section_ids == {1, 2, 4, 5}

    def test_year_only(self, rules):
        """Should return year sections when the role reveals nothing."""
        years, _ = rules
        res = resolve_visible_sections(years, [], 2024, Role.EMPLOYEE, ALL_SECTIONS)
        assert res.section_ids == {1, 2}
        assert res.mode is ResolutionMode.YEAR_ONLY

    def test_role_only(self, rules):
        """Should return role sections when the year reveals nothing."""
        years, roles = rules
        res = resolve_visible_sections(years, roles, 2023, Role.TEAM_LEAD, ALL_SECTIONS)
        assert res.section_ids == {2, 3}
        assert res.mode is ResolutionMode.ROLE_ONLY

    def test_configured_but_no_match_is_empty(self, rules):
        """2023 + employee (no employee rule) should reveal nothing, not everything."""
        years, roles = rules
        res = resolve_visible_sections(years, roles, 2023, Role.EMPLOYEE, ALL_SECTIONS)
        assert res.section_ids == frozenset()
        assert res.mode is ResolutionMode.NO_MATCH
        assert res.no_matching_sections

    def test_year_rules_only_and_no_match(self):
        """Year rules configured, none matching, no role rules: empty set."""
        years = [year_rule(YearCondition.EQUALS, "2024", {1})]
        res = resolve_visible_sections(years, [], 2010, None, ALL_SECTIONS)
        assert res.section_ids == frozenset()
        assert res.no_matching_sections

    @pytest.mark.parametrize("year,role", [(None, None), (2024, Role.EMPLOYEE), (1999, Role.MANAGEMENT)])
    def test_unconditional_fallback(self, year, role):
        """No rules at all: every section, whatever the selection."""
        res = resolve_visible_sections([], [], year, role, ALL_SECTIONS)
        assert res.section_ids == ALL_SECTIONS
        assert res.is_unconditional
        assert not res.no_matching_sections

    def test_inactive_rules_do_not_count_as_configured(self):
        """Only inactive rules: behaves as a plain form."""
        years = [year_rule(YearCondition.EQUALS, "2024", {1}, is_active=False)]
        roles = [RoleRule(Role.EMPLOYEE, section_ids={2}, is_active=False)]
        res = resolve_visible_sections(years, roles, 2024, Role.EMPLOYEE, ALL_SECTIONS)
        assert res.is_unconditional

    def test_idempotent(self, rules):
        """Same inputs, same result."""
        years, roles = rules
        first = resolve_visible_sections(years, roles, 2024, Role.TEAM_LEAD, ALL_SECTIONS)
        second = resolve_visible_sections(years, roles, 2024, Role.TEAM_LEAD, ALL_SECTIONS)
        assert first == second


class TestRobustness:
    """Test tolerance of bad configuration."""

    def test_malformed_rule_skipped(self):
        """One malformed rule should not hide the others."""
        years = [
            year_rule(YearCondition.EQUALS, "not-a-year", {1}),
            year_rule(YearCondition.BETWEEN, "2020", {2}),
            year_rule(YearCondition.LESS_EQUAL, "2030", {3}),
        ]
        res = resolve_visible_sections(years, [], 2024, None, ALL_SECTIONS)
        assert res.section_ids == {3}

    def test_unknown_section_ids_contribute_nothing(self):
        """Ids naming no section are dropped before the policy applies."""
        years = [year_rule(YearCondition.EQUALS, "2024", {42})]
        roles = [RoleRule(Role.EMPLOYEE, section_ids={3, 43})]
        res = resolve_visible_sections(years, roles, 2024, Role.EMPLOYEE, ALL_SECTIONS)
        assert res.section_ids == {3}
        assert res.mode is ResolutionMode.ROLE_ONLY

    def test_operand_helpers(self):
        """Should union every matching rule and ignore missing selections."""
        years = [
            year_rule(YearCondition.GREATER_EQUAL, "2020", {1}),
            year_rule(YearCondition.LESS_EQUAL, "2025", {2}),
        ]
        assert year_section_ids(years, 2022) == {1, 2}
        assert year_section_ids(years, None) == frozenset()
        roles = [RoleRule(Role.TEAM_LEAD, section_ids={1}), RoleRule(Role.TEAM_LEAD, section_ids={4})]
        assert role_section_ids(roles, Role.TEAM_LEAD) == {1, 4}
        assert role_section_ids(roles, None) == frozenset()


class TestManagementSections:
    """Test resolution for management lists."""

    def test_only_list_sections(self):
        """Should use the list's sections, dropping unknown ids."""
        mlist = ManagementList(id=1, name="Heads", people=("A",), section_ids={4, 5, 99})
        res = resolve_management_sections(mlist, ALL_SECTIONS)
        assert res.section_ids == {4, 5}
        assert res.mode is ResolutionMode.MANAGEMENT

    def test_empty_list_sections(self):
        """A list without known sections resolves to nothing."""
        mlist = ManagementList(id=1, name="Heads", people=("A",), section_ids={99})
        res = resolve_management_sections(mlist, ALL_SECTIONS)
        assert res.no_matching_sections


class TestVisibleQuestions:
    """Test resolve_visible_questions."""

    def test_unassigned_first_then_section_order(self):
        """Unassigned questions always show; assigned ones only for visible sections."""
        sections = [
            Section(id=1, name="A", order_number=2),
            Section(id=2, name="B", order_number=1),
            Section(id=3, name="C", order_number=3),
        ]
        questions = [
            Question(id=10, section_id=1),
            Question(id=20, section_id=2, order_number=2),
            Question(id=21, section_id=2, order_number=1),
            Question(id=30, section_id=3),
            Question(id=90, order_number=2),
            Question(id=91, order_number=1),
            Question(id=99, section_id=77),
        ]
        visible = resolve_visible_questions(sections, questions, {1, 2, 77})
        assert [q.id for q in visible] == [91, 90, 21, 20, 10]

    def test_no_sections_leaves_base_questions(self):
        """An empty resolution still shows unassigned questions."""
        questions = [Question(id=1, section_id=1), Question(id=2)]
        visible = resolve_visible_questions([Section(id=1, name="A")], questions, set())
        assert [q.id for q in visible] == [2]
