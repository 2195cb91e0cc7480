"""
Response Aggregator

Turns a finished ResponseStore into one submission payload.

Two shapes:
    standard:   responses = {question_id: value}
    management: management_responses =
                    {list: {person: {section: {question_id: value}}}}   multi-list
                    {person: {section: {question_id: value}}}           legacy single list

Groups are built by walking the known list/person/section/question
ordering and picking up whatever the store holds. Unanswered questions
are absent, never recorded as None; groups left empty are dropped.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from .model import Question, Role, RuleModel
from .responses import ResponseStore
from .scheduler import EvaluationCursor, ManagementPlan


@dataclass(frozen=True)
class RespondentInfo:
    """Who filled in the form (validated by the caller)."""

    name: str = ""
    email: str = ""


@dataclass
class SubmissionPayload:
    """
    Logical structure handed to the submission sink.

    Properties:
        respondent: RespondentInfo
        selected_year / selected_role: The respondent's selections
        responses: Standard answers (for management respondents, the
            unassigned base questions)
        management_responses: Nested management answers, or None
        evaluated_people: Plain names of everyone evaluated, across every
            list, in traversal order. Each name appears once, even when it
            is listed twice or in several lists.
        multiple_lists: False for the legacy single-list shape
    """

    respondent: RespondentInfo
    selected_year: Optional[int] = None
    selected_role: Optional[Role] = None
    responses: Dict[int, Any] = field(default_factory=dict)
    management_responses: Optional[Dict[str, Any]] = None
    evaluated_people: List[str] = field(default_factory=list)
    multiple_lists: bool = False

    @property
    def is_management(self) -> bool:
        return self.management_responses is not None


def unique_labels(names: Iterable[str]) -> List[str]:
    """
    Grouping keys for payload trees. Repeated names (people, sections or
    lists) get a counter so their answers stay apart:
    ["A", "B", "A"] -> ["A", "B", "A (2)"].
    """
    seen: Dict[str, int] = {}
    labels = []
    for name in names:
        seen[name] = seen.get(name, 0) + 1
        labels.append(name if seen[name] == 1 else f"{name} ({seen[name]})")
    return labels


def _collect(store: ResponseStore, cursor: Optional[EvaluationCursor], questions: Iterable[Question]) -> Dict[int, Any]:
    answers = {}
    for question in questions:
        value = store.get(cursor, question.id)
        if value is not None:
            answers[question.id] = value
    return answers


def aggregate_standard(
    store: ResponseStore,
    visible_questions: Iterable[Question],
    respondent: RespondentInfo,
    selected_year: Optional[int] = None,
    selected_role: Optional[Role] = None,
) -> SubmissionPayload:
    """Payload for a standard respondent: answers to the visible questions."""
    return SubmissionPayload(
        respondent=respondent,
        selected_year=selected_year,
        selected_role=selected_role,
        responses=_collect(store, None, visible_questions),
    )


def aggregate_management(
    store: ResponseStore,
    model: RuleModel,
    plan: ManagementPlan,
    respondent: RespondentInfo,
    selected_year: Optional[int] = None,
) -> SubmissionPayload:
    """
    Payload for a management respondent, grouped list -> person -> section.

    Lists, people and sections are keyed by unique_labels(), so groups
    sharing a display name never overwrite one another.
    """
    tree: Dict[str, Any] = {}
    evaluated: List[str] = []
    list_labels = unique_labels(list_plan.name for list_plan in plan.lists)

    for list_index, list_plan in enumerate(plan.lists):
        section_labels = unique_labels(section.name for section in list_plan.sections)
        people_tree: Dict[str, Any] = {}
        for person_index, label in enumerate(unique_labels(list_plan.people)):
            name = list_plan.people[person_index]
            if name not in evaluated:
                evaluated.append(name)
            sections_tree: Dict[str, Any] = {}
            for section_index, section in enumerate(list_plan.sections):
                cursor = EvaluationCursor(list_index, person_index, section_index)
                answers = _collect(store, cursor, model.questions_for_section(section.id))
                if answers:
                    sections_tree[section_labels[section_index]] = answers
            if sections_tree:
                people_tree[label] = sections_tree
        if not people_tree:
            continue
        if plan.multiple_lists:
            tree[list_labels[list_index]] = people_tree
        else:
            tree.update(people_tree)

    return SubmissionPayload(
        respondent=respondent,
        selected_year=selected_year,
        selected_role=Role.MANAGEMENT,
        responses=_collect(store, None, model.unassigned_questions()),
        management_responses=tree,
        evaluated_people=evaluated,
        multiple_lists=plan.multiple_lists,
    )


def format_answer(value: Any) -> str:
    """Render a stored answer for reports; selections are joined with ", "."""
    if value is None:
        return ""
    if isinstance(value, (set, frozenset)):
        return ", ".join(sorted(str(v) for v in value))
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def _question_label(question_id: int, index: Dict[int, Question]) -> str:
    question = index.get(question_id)
    if question is None or not question.text:
        return f"Question {question_id}"
    return question.text


def management_report_lines(payload: SubmissionPayload, model: RuleModel) -> List[str]:
    """
    One readable line per management answer:

        • Gibral (Leadership): How do you handle conflicts? → Calmly

    Multi-list payloads prefix the list name in brackets.
    """
    if not payload.is_management:
        return []
    index = model.question_index()
    lines = []

    def emit(prefix: str, people_tree: Dict[str, Any]) -> None:
        for person, sections in people_tree.items():
            for section_name, answers in sections.items():
                for question_id, value in answers.items():
                    lines.append(
                        f"• {prefix}{person} ({section_name}): "
                        f"{_question_label(question_id, index)} → {format_answer(value)}"
                    )

    if payload.multiple_lists:
        for list_name, people_tree in payload.management_responses.items():
            emit(f"[{list_name}] ", people_tree)
    else:
        emit("", payload.management_responses)
    return lines


def filter_submissions(
    payloads: Iterable[SubmissionPayload],
    role: Union[Role, str, None] = None,
    year: Union[int, str, None] = None,
) -> List[SubmissionPayload]:
    """Keep payloads whose selections match ``role`` and/or ``year`` (None: any)."""
    if isinstance(role, str):
        role = Role(role) if role else None
    year_text = None if year is None or year == "" else str(year).strip()

    kept = []
    for payload in payloads:
        if role is not None and payload.selected_role is not role:
            continue
        if year_text is not None and str(payload.selected_year) != year_text:
            continue
        kept.append(payload)
    return kept


def aggregate(
    store: ResponseStore,
    model: RuleModel,
    respondent: RespondentInfo,
    selected_year: Optional[int] = None,
    selected_role: Optional[Role] = None,
    plan: Optional[ManagementPlan] = None,
    visible_questions: Optional[Iterable[Question]] = None,
) -> SubmissionPayload:
    """
    Assemble the submission payload.

    A non-empty ``plan`` selects the management shape. Otherwise the
    standard shape is built from ``visible_questions`` (default: every
    question of the form).
    """
    if plan is not None and not plan.is_empty:
        return aggregate_management(store, model, plan, respondent, selected_year)
    if visible_questions is None:
        visible_questions = model.questions
    return aggregate_standard(store, visible_questions, respondent, selected_year, selected_role)
