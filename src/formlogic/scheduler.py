"""
Round-Robin Scheduler

Drives management respondents through every (list, person, section)
triple, person-first:

    for each list:            (slowest)
        for each person:
            for each section: (fastest)

A list is finished (every person across every section) before the next
list begins. Moves past either end are no-ops: advance() at the last
position and retreat() at the first both return False and leave the
cursor where it is.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .model import ManagementList, RuleModel, Section
from .resolver import resolve_management_sections

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class EvaluationCursor:
    """
    Position within a round-robin traversal.

    Ordering compares (list, person, section) lexicographically, which is
    exactly traversal order.
    """

    list_index: int = 0
    person_index: int = 0
    section_index: int = 0


@dataclass(frozen=True)
class ListPlan:
    """
    One management list with its resolved, ordered sections.

    Properties:
        management_list: The list being evaluated
        sections: Sections every person is evaluated on, in form order
    """

    management_list: ManagementList
    sections: Tuple[Section, ...]

    @property
    def name(self) -> str:
        return self.management_list.name

    @property
    def people(self) -> Tuple[str, ...]:
        return self.management_list.people

    @property
    def size(self) -> int:
        """Number of (person, section) steps in this list."""
        return len(self.people) * len(self.sections)

    @property
    def is_traversable(self) -> bool:
        return self.size > 0


@dataclass(frozen=True)
class ManagementPlan:
    """
    Every list a management respondent will step through.

    Properties:
        lists: Traversable list plans, in evaluation order
        skipped: Lists left out because they have no people or no sections
        multiple_lists: False for the legacy single-list shape
    """

    lists: Tuple[ListPlan, ...]
    skipped: Tuple[ManagementList, ...] = ()
    multiple_lists: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.lists


def plan_list(management_list: ManagementList, model: RuleModel) -> ListPlan:
    resolution = resolve_management_sections(management_list, model.section_ids)
    return ListPlan(
        management_list=management_list,
        sections=tuple(model.ordered_sections(resolution.section_ids)),
    )


def plan_management_flow(model: RuleModel, list_ids: Optional[Iterable[int]] = None) -> ManagementPlan:
    """
    Build the traversal plan for a management respondent.

    Args:
        model: Form configuration
        list_ids: Restrict to these management lists (in form order).
            None means every list. Ignored for the legacy single list.

    Returns:
        ManagementPlan; empty when nothing can be evaluated
    """
    lists, multiple = model.flow_management_lists()
    if list_ids is not None and multiple:
        wanted = set(list_ids)
        lists = [m for m in lists if m.id in wanted]

    plans = []
    skipped = []
    for mlist in lists:
        plan = plan_list(mlist, model)
        if plan.is_traversable:
            plans.append(plan)
        else:
            logger.warning(
                "Skipping management list %r: %d people, %d sections",
                mlist.name, len(plan.people), len(plan.sections),
            )
            skipped.append(mlist)
    return ManagementPlan(lists=tuple(plans), skipped=tuple(skipped), multiple_lists=multiple)


class RoundRobinScheduler:
    """
    Cursor automaton over a sequence of list plans.

    The cursor only changes through advance(), retreat(), seek() and
    reset(). Replaying the same calls from the same cursor always lands
    on the same cursor.
    """

    def __init__(self, lists: Sequence[ListPlan]):
        lists = tuple(lists)
        if not lists:
            raise ValueError("RoundRobinScheduler needs at least one list")
        for plan in lists:
            if not plan.is_traversable:
                raise ValueError(f"Management list {plan.name!r} has no people or no sections")
        self._lists = lists
        self._cursor = EvaluationCursor()

    @property
    def lists(self) -> Tuple[ListPlan, ...]:
        return self._lists

    @property
    def cursor(self) -> EvaluationCursor:
        return self._cursor

    @property
    def current_list(self) -> ListPlan:
        return self._lists[self._cursor.list_index]

    @property
    def current_person(self) -> str:
        return self.current_list.people[self._cursor.person_index]

    @property
    def current_section(self) -> Section:
        return self.current_list.sections[self._cursor.section_index]

    @property
    def total_positions(self) -> int:
        return sum(plan.size for plan in self._lists)

    @property
    def first_cursor(self) -> EvaluationCursor:
        return EvaluationCursor()

    @property
    def last_cursor(self) -> EvaluationCursor:
        last = self._lists[-1]
        return EvaluationCursor(len(self._lists) - 1, len(last.people) - 1, len(last.sections) - 1)

    @property
    def is_initial(self) -> bool:
        return self._cursor == self.first_cursor

    @property
    def is_terminal(self) -> bool:
        """True at the last position: evaluation is ready to submit."""
        return self._cursor == self.last_cursor

    @property
    def position(self) -> int:
        """0-based index of the cursor in traversal order."""
        return self.position_of(self._cursor)

    def position_of(self, cursor: EvaluationCursor) -> int:
        offset = sum(plan.size for plan in self._lists[:cursor.list_index])
        plan = self._lists[cursor.list_index]
        return offset + cursor.person_index * len(plan.sections) + cursor.section_index

    def advance(self) -> bool:
        """
        Move one step forward: next section, else next person, else next list.

        Returns:
            True if the cursor moved, False at the terminal position
        """
        c = self._cursor
        plan = self._lists[c.list_index]
        if c.section_index < len(plan.sections) - 1:
            moved = EvaluationCursor(c.list_index, c.person_index, c.section_index + 1)
        elif c.person_index < len(plan.people) - 1:
            moved = EvaluationCursor(c.list_index, c.person_index + 1, 0)
        elif c.list_index < len(self._lists) - 1:
            moved = EvaluationCursor(c.list_index + 1, 0, 0)
            logger.debug("Entering management list %r", self._lists[moved.list_index].name)
        else:
            return False
        self._cursor = moved
        return True

    def retreat(self) -> bool:
        """
        Move one step back: previous section, else the previous person's
        last section, else the previous list's last person and section.

        Returns:
            True if the cursor moved, False at the initial position
        """
        c = self._cursor
        if c.section_index > 0:
            moved = EvaluationCursor(c.list_index, c.person_index, c.section_index - 1)
        elif c.person_index > 0:
            plan = self._lists[c.list_index]
            moved = EvaluationCursor(c.list_index, c.person_index - 1, len(plan.sections) - 1)
        elif c.list_index > 0:
            prev = self._lists[c.list_index - 1]
            moved = EvaluationCursor(c.list_index - 1, len(prev.people) - 1, len(prev.sections) - 1)
            logger.debug("Returning to management list %r", prev.name)
        else:
            return False
        self._cursor = moved
        return True

    def seek(self, cursor: EvaluationCursor) -> EvaluationCursor:
        """Jump to ``cursor``, clamping each coordinate into range."""
        list_index = min(max(cursor.list_index, 0), len(self._lists) - 1)
        plan = self._lists[list_index]
        person_index = min(max(cursor.person_index, 0), len(plan.people) - 1)
        section_index = min(max(cursor.section_index, 0), len(plan.sections) - 1)
        self._cursor = EvaluationCursor(list_index, person_index, section_index)
        return self._cursor

    def reset(self) -> None:
        self._cursor = EvaluationCursor()

    def cursors(self) -> Iterator[EvaluationCursor]:
        """Every cursor of the traversal, in order."""
        for li, plan in enumerate(self._lists):
            for pi in range(len(plan.people)):
                for si in range(len(plan.sections)):
                    yield EvaluationCursor(li, pi, si)

    def describe(self, cursor: Optional[EvaluationCursor] = None) -> Tuple[str, str, Section]:
        """(list name, person, section) addressed by ``cursor`` (default: current)."""
        c = cursor or self._cursor
        plan = self._lists[c.list_index]
        return plan.name, plan.people[c.person_index], plan.sections[c.section_index]


def traversal_order(scheduler: RoundRobinScheduler) -> List[Tuple[str, str, str]]:
    """Readable (list, person, section name) triples in traversal order."""
    order = []
    for cursor in scheduler.cursors():
        list_name, person, section = scheduler.describe(cursor)
        order.append((list_name, person, section.name))
    return order
