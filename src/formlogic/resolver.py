"""
Eligibility Resolver

Decides which sections (and so which questions) a respondent sees,
from their declared entry year and role.

Year rules and role rules are resolved independently, then combined:

    year ids | role ids | result
    ---------+----------+----------------------------------------------
    non-empty| non-empty| union of both
    non-empty| empty    | year ids
    empty    | non-empty| role ids
    empty    | empty    | nothing, if any rule is configured
    (no active rules at all)  every section (plain form)

Management respondents do not go through this table: their sections come
only from the management list being evaluated (see
resolve_management_sections). Year rules never apply to them.

Every function here is pure: identical inputs give identical results.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional

from .conditions import year_matches
from .model import ManagementList, Question, Role, RoleRule, RuleModel, Section, YearRule

logger = logging.getLogger(__name__)


class ResolutionMode(Enum):
    """How a resolved section set came about."""

    UNCONDITIONAL = "unconditional"
    COMBINED = "combined"
    YEAR_ONLY = "year_only"
    ROLE_ONLY = "role_only"
    NO_MATCH = "no_match"
    MANAGEMENT = "management"


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving visible sections.

    Properties:
        section_ids: Sections to show
        mode: Which branch of the combination policy produced them
        year_section_ids / role_section_ids: The two operands, for diagnostics
    """

    section_ids: FrozenSet[int]
    mode: ResolutionMode
    year_section_ids: FrozenSet[int] = frozenset()
    role_section_ids: FrozenSet[int] = frozenset()

    @property
    def no_matching_sections(self) -> bool:
        """True when rules are configured but none revealed a section."""
        return not self.section_ids and self.mode in (ResolutionMode.NO_MATCH, ResolutionMode.MANAGEMENT)

    @property
    def is_unconditional(self) -> bool:
        return self.mode is ResolutionMode.UNCONDITIONAL


def year_section_ids(year_rules: Iterable[YearRule], selected_year: Optional[int]) -> FrozenSet[int]:
    """Union of section ids of every active year rule matching ``selected_year``."""
    ids = set()
    if selected_year is None:
        return frozenset()
    for rule in year_rules:
        if rule.is_active and year_matches(rule.condition_type, rule.condition_value, selected_year):
            ids.update(rule.section_ids)
    return frozenset(ids)


def role_section_ids(role_rules: Iterable[RoleRule], selected_role: Optional[Role]) -> FrozenSet[int]:
    """Union of section ids of every active role rule for ``selected_role``."""
    ids = set()
    if selected_role is None:
        return frozenset()
    for rule in role_rules:
        if rule.is_active and rule.role is selected_role:
            ids.update(rule.section_ids)
    return frozenset(ids)


def resolve_visible_sections(
    year_rules: Iterable[YearRule],
    role_rules: Iterable[RoleRule],
    selected_year: Optional[int],
    selected_role: Optional[Role],
    section_ids: Iterable[int],
) -> Resolution:
    """
    Resolve the visible section ids for a standard respondent.

    Args:
        year_rules: Configured year rules (inactive ones are ignored)
        role_rules: Configured role rules (inactive ones are ignored)
        selected_year: Respondent's entry year, or None
        selected_role: Respondent's role, or None
        section_ids: Every section id of the form. Rule ids outside this
            set contribute nothing; the full set is the unconditional result.

    Returns:
        Resolution with the visible ids and the policy branch taken
    """
    year_rules = [r for r in year_rules if r.is_active]
    role_rules = [r for r in role_rules if r.is_active]
    known = frozenset(section_ids)

    if not year_rules and not role_rules:
        logger.debug("No active rules configured; all %d sections visible", len(known))
        return Resolution(section_ids=known, mode=ResolutionMode.UNCONDITIONAL)

    by_year = year_section_ids(year_rules, selected_year) & known
    by_role = role_section_ids(role_rules, selected_role) & known

    if by_year and by_role:
        result, mode = by_year | by_role, ResolutionMode.COMBINED
    elif by_year:
        result, mode = by_year, ResolutionMode.YEAR_ONLY
    elif by_role:
        result, mode = by_role, ResolutionMode.ROLE_ONLY
    else:
        result, mode = frozenset(), ResolutionMode.NO_MATCH

    logger.debug(
        "Resolved year=%s role=%s -> %s (year=%s, role=%s)",
        selected_year,
        selected_role.value if selected_role else None,
        sorted(result),
        sorted(by_year),
        sorted(by_role),
    )
    return Resolution(
        section_ids=result,
        mode=mode,
        year_section_ids=by_year,
        role_section_ids=by_role,
    )


def resolve_management_sections(management_list: ManagementList, section_ids: Iterable[int]) -> Resolution:
    """
    Resolve the sections of one management list.

    Year rules and role rules play no part here.
    """
    ids = management_list.section_ids & frozenset(section_ids)
    return Resolution(section_ids=ids, mode=ResolutionMode.MANAGEMENT)


def resolve_visible_questions(
    sections: Iterable[Section],
    questions: Iterable[Question],
    visible_section_ids: Iterable[int],
) -> List[Question]:
    """
    Questions to show for a resolved section set.

    Unassigned questions are always included and come first. Assigned
    questions follow in section order, then question order, and only
    for visible sections.
    """
    visible = frozenset(visible_section_ids)
    section_rank = {
        s.id: rank
        for rank, s in enumerate(sorted(sections, key=lambda s: (s.order_number, s.id)))
    }
    base = []
    assigned = []
    for question in questions:
        if question.is_unassigned:
            base.append(question)
        elif question.section_id in visible and question.section_id in section_rank:
            assigned.append(question)
    base.sort(key=lambda q: (q.order_number, q.id))
    assigned.sort(key=lambda q: (section_rank[q.section_id], q.order_number, q.id))
    return base + assigned


def resolve(model: RuleModel, selected_year: Optional[int], selected_role: Optional[Role]) -> Resolution:
    """Resolve visible sections against a whole RuleModel."""
    return resolve_visible_sections(
        model.year_rules,
        model.role_rules,
        selected_year,
        selected_role,
        model.section_ids,
    )
