"""
Respondent Session

One object per respondent filling in one form. It owns:
    - the RuleModel snapshot (read-only)
    - the resolution of the respondent's year/role selection
    - the round-robin scheduler, for management respondents
    - the ResponseStore

Nothing here is shared between sessions. Abandoning a session is just
dropping the object; nothing is persisted before submit().

Typical flow:

    session = RespondentSession(model, RespondentInfo("Ana", "ana@example.com"))
    session.select(year="2024", role="management")
    while True:
        step = session.current_step()
        for question in step.questions:
            session.record(question.id, ...)
        if not session.next():
            break
    payload = session.submit()
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple, Union

from .aggregator import RespondentInfo, SubmissionPayload, aggregate
from .conditions import parse_year
from .model import Question, Role, RuleModel, Section
from .resolver import (
    Resolution,
    ResolutionMode,
    resolve,
    resolve_visible_questions,
    resolve_visible_sections,
)
from .responses import ResponseKey, ResponseStore, check_required, selection_value
from .scheduler import EvaluationCursor, ManagementPlan, RoundRobinScheduler, plan_management_flow

logger = logging.getLogger(__name__)


class InvalidSelection(ValueError):
    """Raised for unusable respondent input or an operation the active flow does not support."""
    pass


def parse_selected_year(value: Union[int, str, None]) -> Optional[int]:
    """
    Parse the respondent's entry year.

    Blank means "not selected". Anything else must be a whole number.

    Raises:
        InvalidSelection
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    year = parse_year(value)
    if year is None:
        raise InvalidSelection(f"Entry year must be a number, got {value!r}")
    return year


def parse_selected_role(value: Union[Role, str, None]) -> Optional[Role]:
    """
    Parse the respondent's role.

    Raises:
        InvalidSelection: for a role outside employee/team_lead/management
    """
    if value is None or isinstance(value, Role):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return Role(text)
    except ValueError:
        raise InvalidSelection(f"Unknown role {value!r}")


@dataclass(frozen=True)
class Step:
    """
    What a management respondent is looking at.

    Properties:
        cursor: Position in the traversal
        list_name / person / section: The addressed triple
        questions: Questions of the section, in order
        position: 1-based step number
        total: Number of steps in the traversal
    """

    cursor: EvaluationCursor
    list_name: str
    person: str
    section: Section
    questions: Tuple[Question, ...]
    position: int
    total: int

    @property
    def is_last(self) -> bool:
        return self.position == self.total


class RespondentSession:
    """Session state for one respondent; see the module docstring."""

    def __init__(self, model: RuleModel, respondent: Optional[RespondentInfo] = None):
        self._model = model
        self.respondent = respondent or RespondentInfo()
        self.store = ResponseStore()
        self.selected_year: Optional[int] = None
        self.selected_role: Optional[Role] = None
        self.resolution: Resolution = resolve(model, None, None)
        self.plan: Optional[ManagementPlan] = None
        self.scheduler: Optional[RoundRobinScheduler] = None

    @property
    def model(self) -> RuleModel:
        return self._model

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(
        self,
        year: Union[int, str, None] = None,
        role: Union[Role, str, None] = None,
        list_ids: Optional[Iterable[int]] = None,
    ) -> Resolution:
        """
        Apply the respondent's entry year and role.

        Management respondents with at least one evaluable management
        list enter the round-robin flow. Year rules never apply to
        management respondents.

        Selecting again restarts the round-robin flow and drops its
        answers; standard answers are kept.

        Raises:
            InvalidSelection: for an unparseable year or unknown role
        """
        self.selected_year = parse_selected_year(year)
        self.selected_role = parse_selected_role(role)
        self.plan = None
        self.scheduler = None
        self.store.clear_management()

        if self.selected_role is Role.MANAGEMENT:
            plan = plan_management_flow(self._model, list_ids)
            if not plan.is_empty:
                self.plan = plan
                self.scheduler = RoundRobinScheduler(plan.lists)
                self.resolution = Resolution(
                    section_ids=frozenset(s.id for lp in plan.lists for s in lp.sections),
                    mode=ResolutionMode.MANAGEMENT,
                )
                logger.debug(
                    "Management flow: %d lists, %d steps",
                    len(plan.lists), self.scheduler.total_positions,
                )
                return self.resolution
            # year rules never apply to management respondents
            self.resolution = resolve_visible_sections(
                (), self._model.role_rules, None, self.selected_role, self._model.section_ids
            )
        else:
            self.resolution = resolve(self._model, self.selected_year, self.selected_role)

        if self.resolution.no_matching_sections:
            logger.info(
                "No sections match year=%s role=%s",
                self.selected_year,
                self.selected_role.value if self.selected_role else None,
            )
        return self.resolution

    @property
    def is_management_flow(self) -> bool:
        return self.scheduler is not None

    @property
    def no_matching_sections(self) -> bool:
        return self.resolution.no_matching_sections

    # ------------------------------------------------------------------
    # Questions and steps
    # ------------------------------------------------------------------

    def visible_questions(self) -> List[Question]:
        """
        Standard flow: every visible question, base questions first.
        Management flow: only the base (unassigned) questions, which are
        answered once rather than per evaluated person.
        """
        if self.is_management_flow:
            return self._model.unassigned_questions()
        return resolve_visible_questions(
            self._model.sections, self._model.questions, self.resolution.section_ids
        )

    def current_step(self) -> Optional[Step]:
        """The management step under the cursor, or None in the standard flow."""
        if not self.is_management_flow:
            return None
        scheduler = self.scheduler
        list_name, person, section = scheduler.describe()
        return Step(
            cursor=scheduler.cursor,
            list_name=list_name,
            person=person,
            section=section,
            questions=tuple(self._model.questions_for_section(section.id)),
            position=scheduler.position + 1,
            total=scheduler.total_positions,
        )

    def _require_management(self, action: str) -> RoundRobinScheduler:
        if self.scheduler is None:
            raise InvalidSelection(f"Cannot {action}: not in a management evaluation")
        return self.scheduler

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    def _cursor_for(self, question: Question) -> Optional[EvaluationCursor]:
        if question.is_unassigned:
            return None
        if not self.is_management_flow:
            if question.section_id in self.resolution.section_ids:
                return None
            raise InvalidSelection(f"Question {question.id} is not shown to this respondent")
        step = self.current_step()
        if question.section_id != step.section.id:
            raise InvalidSelection(
                f"Question {question.id} is not part of section {step.section.name!r}"
            )
        return step.cursor

    def record(self, question_id: int, value: Any) -> ResponseKey:
        """
        Record an answer.

        Base questions are stored once for the respondent. In the
        management flow, section questions are stored under the current
        (list, person, section) cursor.

        Raises:
            InvalidSelection: if the question is unknown or not on screen
        """
        question = self._model.get_question(question_id)
        if question is None:
            raise InvalidSelection(f"Unknown question {question_id}")
        if question.type.is_multi_valued:
            value = selection_value(value)
        return self.store.record(self._cursor_for(question), question_id, value)

    def answer(self, question_id: int, default: Any = None) -> Any:
        question = self._model.get_question(question_id)
        if question is None:
            return default
        return self.store.get(self._cursor_for(question), question_id, default)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next(self) -> bool:
        """
        Validate the current step and move forward.

        Returns:
            False when already at the last step (ready to submit)

        Raises:
            IncompleteRequiredAnswer: a required question on this step is unanswered
            InvalidSelection: in the standard flow
        """
        scheduler = self._require_management("advance")
        step = self.current_step()
        check_required(self.store, step.cursor, step.questions)
        return scheduler.advance()

    def previous(self) -> bool:
        """
        Move back one step. Answers already recorded are kept.

        Returns:
            False when already at the first step
        """
        return self._require_management("go back").retreat()

    @property
    def is_complete(self) -> bool:
        """True when nothing is left to step through."""
        if self.scheduler is None:
            return True
        return self.scheduler.is_terminal

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Check every required answer the respondent owes.

        Raises:
            IncompleteRequiredAnswer: for the first gap, in traversal order
        """
        check_required(self.store, None, self.visible_questions())
        if self.scheduler is None:
            return
        for cursor in self.scheduler.cursors():
            _, _, section = self.scheduler.describe(cursor)
            check_required(self.store, cursor, self._model.questions_for_section(section.id))

    def submit(self) -> SubmissionPayload:
        """
        Validate and assemble the submission payload.

        Raises:
            IncompleteRequiredAnswer
        """
        self.validate()
        payload = aggregate(
            self.store,
            self._model,
            self.respondent,
            selected_year=self.selected_year,
            selected_role=self.selected_role,
            plan=self.plan,
            visible_questions=self.visible_questions(),
        )
        logger.info(
            "Submission assembled for %r (%s, %d answers)",
            self.respondent.name,
            "management" if payload.is_management else "standard",
            len(self.store),
        )
        return payload
