"""
Rule Model Analyzer — Early diagnostics of form configuration.

This module provides lightweight analysis of RuleModel objects:
    - Section and question inventory
    - Dangling section references in rules and lists
    - Malformed or inverted year conditions
    - Sections no rule can ever reveal
    - Management lists the round-robin flow would skip

IMPORTANT: This is read-only. It does NOT modify the model and it does
not affect resolution; it only produces reports for form authors.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Set

from formlogic.conditions import YearCondition, is_inverted_range, is_well_formed
from formlogic.model import Role, RuleModel


@dataclass
class RuleModelReport:
    """Comprehensive diagnostics report for one form."""

    form_name: str
    total_sections: int = 0
    total_questions: int = 0
    total_year_rules: int = 0
    total_role_rules: int = 0
    total_management_lists: int = 0

    # Questions
    unassigned_questions: int = 0
    required_questions: int = 0
    questions_in_unknown_sections: Set[int] = field(default_factory=set)
    empty_sections: Set[int] = field(default_factory=set)

    # Rules
    inactive_rules: int = 0
    malformed_year_rules: List[str] = field(default_factory=list)
    inverted_year_ranges: List[str] = field(default_factory=list)
    dangling_section_ids: Set[int] = field(default_factory=set)
    unreferenced_sections: Set[int] = field(default_factory=set)
    roles_without_rules: List[str] = field(default_factory=list)
    is_unconditional: bool = False

    # Management
    duplicate_people: Dict[str, List[str]] = field(default_factory=dict)
    untraversable_lists: List[str] = field(default_factory=list)
    uses_legacy_management_list: bool = False

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def _rule_label(name: str | None, index: int, kind: str) -> str:
    return name or f"{kind} #{index + 1}"


def analyze_rule_model(model: RuleModel) -> RuleModelReport:
    """
    Perform diagnostics on a RuleModel.

    Checks for:
    - Questions pointing at unknown sections, sections without questions
    - Year rules whose value cannot be parsed, or whose range is inverted
    - Rule/list section ids that name no section
    - Sections that no active rule or list can reveal
    - Repeated names and empty management lists

    Returns a RuleModelReport with metrics and warnings.
    """
    report = RuleModelReport(form_name=model.name)

    report.total_sections = len(model.sections)
    report.total_questions = len(model.questions)
    report.total_year_rules = len(model.year_rules)
    report.total_role_rules = len(model.role_rules)
    report.total_management_lists = len(model.management_lists)

    known = set(model.section_ids)

    # =========================================================================
    # 1. QUESTIONS
    # =========================================================================

    populated: Set[int] = set()
    for question in model.questions:
        if question.is_required:
            report.required_questions += 1
        if question.is_unassigned:
            report.unassigned_questions += 1
        elif question.section_id in known:
            populated.add(question.section_id)
        else:
            report.questions_in_unknown_sections.add(question.id)

    report.empty_sections = known - populated

    # =========================================================================
    # 2. RULES
    # =========================================================================

    referenced: Set[int] = set()

    for i, rule in enumerate(model.year_rules):
        label = _rule_label(rule.name, i, "year rule")
        if not rule.is_active:
            report.inactive_rules += 1
            continue
        if not is_well_formed(rule.condition_type, rule.condition_value):
            report.malformed_year_rules.append(label)
        elif rule.condition_type is YearCondition.BETWEEN and is_inverted_range(rule.condition_value):
            report.inverted_year_ranges.append(label)
        referenced.update(rule.section_ids)
        report.dangling_section_ids.update(rule.section_ids - known)

    roles_seen: Set[Role] = set()
    for rule in model.role_rules:
        if not rule.is_active:
            report.inactive_rules += 1
            continue
        roles_seen.add(rule.role)
        referenced.update(rule.section_ids)
        report.dangling_section_ids.update(rule.section_ids - known)

    lists, multiple = model.flow_management_lists()
    if lists:
        roles_seen.add(Role.MANAGEMENT)

    report.is_unconditional = not model.active_year_rules() and not model.active_role_rules()
    if model.active_role_rules():
        report.roles_without_rules = [r.value for r in Role if r not in roles_seen]

    # =========================================================================
    # 3. MANAGEMENT LISTS
    # =========================================================================

    report.uses_legacy_management_list = bool(lists) and not multiple

    for mlist in lists:
        referenced.update(mlist.section_ids)
        report.dangling_section_ids.update(mlist.section_ids - known)

        repeated = [name for name, count in Counter(mlist.people).items() if count > 1]
        if repeated:
            report.duplicate_people[mlist.name] = repeated

        if not mlist.people or not (mlist.section_ids & known):
            report.untraversable_lists.append(mlist.name)

    if not report.is_unconditional:
        report.unreferenced_sections = known - referenced

    # =========================================================================
    # 4. WARNING FLAGS
    # =========================================================================

    if report.questions_in_unknown_sections:
        report.add_warning(
            f"Questions in unknown sections: {', '.join(map(str, sorted(report.questions_in_unknown_sections)))}"
        )

    if report.empty_sections:
        report.add_warning(
            f"Sections without questions: {', '.join(map(str, sorted(report.empty_sections)))}"
        )

    if report.malformed_year_rules:
        report.add_warning(
            f"Year rules with malformed values (never match): {', '.join(report.malformed_year_rules)}"
        )

    if report.inverted_year_ranges:
        report.add_warning(
            f"Year ranges written high-low (treated as low-high): {', '.join(report.inverted_year_ranges)}"
        )

    if report.dangling_section_ids:
        report.add_warning(
            f"References to unknown sections: {', '.join(map(str, sorted(report.dangling_section_ids)))}"
        )

    if report.unreferenced_sections:
        report.add_warning(
            f"Sections no rule can reveal: {', '.join(map(str, sorted(report.unreferenced_sections)))}"
        )

    if report.roles_without_rules:
        report.add_warning(
            f"Roles with no rule (see no conditional sections): {', '.join(report.roles_without_rules)}"
        )

    for list_name, names in report.duplicate_people.items():
        report.add_warning(f"Repeated people in list {list_name!r}: {', '.join(names)}")

    if report.untraversable_lists:
        report.add_warning(
            f"Management lists with no people or no sections: {', '.join(report.untraversable_lists)}"
        )

    return report
