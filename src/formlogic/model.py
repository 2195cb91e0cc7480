"""
Core Form Model Objects

Defines the configuration data the eligibility engine consumes.

These are pure data classes representing:
    - Sections (groups of questions)
    - Questions (answer slots)
    - Year rules (entry-year conditions revealing sections)
    - Role rules (respondent-role conditions revealing sections)
    - Management lists (people evaluated in a round-robin flow)
    - Rule models (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about persistence or transport
        - Are read-only for the engine
        - Are fully serializable
        - Represent configuration, not behavior
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from .conditions import YearCondition


class ConfigurationError(ValueError):
    """Raised when form configuration cannot be turned into model objects."""
    pass


class QuestionType(Enum):
    """
    Answer widgets a question can use.

    Only CHECKBOX collects more than one value; every other type stores
    a single scalar.
    """

    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    ASSESSMENT = "assessment"

    @property
    def is_multi_valued(self) -> bool:
        return self is QuestionType.CHECKBOX


class Role(Enum):
    """Respondent roles a role rule can be keyed on."""

    EMPLOYEE = "employee"
    TEAM_LEAD = "team_lead"
    MANAGEMENT = "management"


def parse_enum(enum_cls, value, what: str):
    """Coerce a raw configuration value into ``enum_cls``.

    Raises:
        ConfigurationError: if the value names no member
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"Unknown {what} {value!r} (expected one of: {allowed})")


_NUMBERING_RE = re.compile(r"^\d+\s*[.)]\s*")


def parse_people(text: Optional[str]) -> List[str]:
    """
    Parse a free-text block of names into an ordered list of people.

    One person per non-empty line. A leading "1." or "1)" numbering
    prefix is stripped. Repeated names are kept: each line is its own
    evaluation slot.

    Example:
        >>> parse_people("1. Gibral\\n\\n2. Ahmad")
        ['Gibral', 'Ahmad']
    """
    if not text:
        return []
    people = []
    for line in text.splitlines():
        name = _NUMBERING_RE.sub("", line.strip()).strip()
        if name:
            people.append(name)
    return people


def _freeze_ids(values: Optional[Iterable]) -> FrozenSet[int]:
    if values is None:
        return frozenset()
    try:
        return frozenset(int(v) for v in values)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Section ids must be integers, got {values!r}")


@dataclass(frozen=True)
class Section:
    """
    A named grouping of questions within a form.

    Properties:
        id: Unique section identifier
        name: Display name (used as the grouping key in submissions)
        order_number: Position of the section within the form
        description: Optional help text
    """

    id: int
    name: str
    order_number: int = 0
    description: Optional[str] = None


@dataclass(frozen=True)
class Question:
    """
    A single answer slot.

    Properties:
        id:
            Unique question identifier

        type:
            QuestionType of the widget

        section_id:
            Owning section, or None for an unassigned question.
            Unassigned questions always belong to the base question set
            and never to a conditional section.

        is_required:
            Whether an answer must be recorded before moving on

        order_number:
            Position within the section (or within the base set)

        text / options:
            Display metadata; options only matter for choice types
    """

    id: int
    type: QuestionType = QuestionType.TEXT
    section_id: Optional[int] = None
    is_required: bool = False
    order_number: int = 0
    text: str = ""
    options: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "type", parse_enum(QuestionType, self.type, "question type"))
        object.__setattr__(self, "options", tuple(self.options))

    @property
    def is_unassigned(self) -> bool:
        return self.section_id is None


@dataclass(frozen=True)
class YearRule:
    """
    Reveals sections when the respondent's entry year satisfies a condition.

    Properties:
        condition_type:
            YearCondition (equals, less_equal, greater_equal, between)

        condition_value:
            A single year for the comparison conditions, or a "low-high"
            string for BETWEEN. Kept raw: a malformed value makes the rule
            non-matching at resolution time, it is never rejected here.

        section_ids:
            Sections revealed when the rule matches (a set; duplicates collapse)

        name / is_active:
            Admin label and activation flag. Inactive rules are ignored.
    """

    condition_type: YearCondition
    condition_value: Union[int, str]
    section_ids: FrozenSet[int] = frozenset()
    name: Optional[str] = None
    is_active: bool = True

    def __post_init__(self):
        try:
            condition_type = YearCondition.parse(self.condition_type)
        except ValueError as e:
            raise ConfigurationError(str(e))
        object.__setattr__(self, "condition_type", condition_type)
        object.__setattr__(self, "section_ids", _freeze_ids(self.section_ids))


@dataclass(frozen=True)
class RoleRule:
    """
    Reveals sections for respondents who declare a given role.

    Properties:
        role: Role this rule applies to
        section_ids: Sections revealed for that role
        management_names:
            Free-text people list (legacy single-list management flow).
            Only meaningful on MANAGEMENT rules.
        name / is_active: Admin label and activation flag
    """

    role: Role
    section_ids: FrozenSet[int] = frozenset()
    management_names: Optional[str] = None
    name: Optional[str] = None
    is_active: bool = True

    def __post_init__(self):
        object.__setattr__(self, "role", parse_enum(Role, self.role, "role"))
        object.__setattr__(self, "section_ids", _freeze_ids(self.section_ids))


@dataclass(frozen=True)
class ManagementList:
    """
    A named group of people, each evaluated against the same sections.

    Properties:
        id: Unique list identifier
        name: Display name (grouping key in multi-list submissions)
        people: Ordered names; repeated names are separate slots
        section_ids: Sections every person in the list is evaluated on
    """

    id: int
    name: str
    people: Tuple[str, ...] = ()
    section_ids: FrozenSet[int] = frozenset()

    def __post_init__(self):
        people = self.people
        if isinstance(people, str):
            people = parse_people(people)
        object.__setattr__(self, "people", tuple(people))
        object.__setattr__(self, "section_ids", _freeze_ids(self.section_ids))

    @classmethod
    def from_text(cls, id: int, name: str, text: str, section_ids: Iterable[int] = ()) -> "ManagementList":
        """Build a list from the line-separated people text an admin types in."""
        return cls(id=id, name=name, people=tuple(parse_people(text)), section_ids=frozenset(section_ids))


LEGACY_LIST_ID = 0
LEGACY_LIST_NAME = "Management"


@dataclass
class RuleModel:
    """
    Root container for one form's conditional configuration.

    This is the snapshot a respondent session is built from. The engine
    never mutates it.

    Properties:
        name: Form title
        sections: All sections of the form
        questions: All questions, assigned or not
        year_rules: Entry-year rules
        role_rules: Role rules
        management_lists: Explicit management lists

    INVARIANTS:
        - Section ids referenced by rules and lists should exist in sections.
          Resolution ignores ids that do not (the analyzer reports them).
        - Question ids are unique.
    """

    name: str = ""
    sections: List[Section] = field(default_factory=list)
    questions: List[Question] = field(default_factory=list)
    year_rules: List[YearRule] = field(default_factory=list)
    role_rules: List[RoleRule] = field(default_factory=list)
    management_lists: List[ManagementList] = field(default_factory=list)

    def get_section(self, section_id: int) -> Optional[Section]:
        """
        Retrieve a section by ID.

        Returns:
            Section object or None if not found
        """
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def get_question(self, question_id: int) -> Optional[Question]:
        """
        Retrieve a question by ID.

        Returns:
            Question object or None if not found
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def get_management_list(self, list_id: int) -> Optional[ManagementList]:
        for mlist in self.management_lists:
            if mlist.id == list_id:
                return mlist
        return None

    @property
    def section_ids(self) -> FrozenSet[int]:
        return frozenset(s.id for s in self.sections)

    def ordered_sections(self, section_ids: Optional[Iterable[int]] = None) -> List[Section]:
        """Sections in form order, optionally restricted to ``section_ids``.

        Ids with no matching section contribute nothing.
        """
        wanted = None if section_ids is None else set(section_ids)
        chosen = [s for s in self.sections if wanted is None or s.id in wanted]
        return sorted(chosen, key=lambda s: (s.order_number, s.id))

    def questions_for_section(self, section_id: int) -> List[Question]:
        chosen = [q for q in self.questions if q.section_id == section_id]
        return sorted(chosen, key=lambda q: (q.order_number, q.id))

    def unassigned_questions(self) -> List[Question]:
        chosen = [q for q in self.questions if q.is_unassigned]
        return sorted(chosen, key=lambda q: (q.order_number, q.id))

    def active_year_rules(self) -> List[YearRule]:
        return [r for r in self.year_rules if r.is_active]

    def active_role_rules(self) -> List[RoleRule]:
        return [r for r in self.role_rules if r.is_active]

    def flow_management_lists(self) -> Tuple[List[ManagementList], bool]:
        """
        Management lists the round-robin flow works from.

        Explicit lists win. Without any, active MANAGEMENT role rules that
        carry ``management_names`` are folded into one synthetic list
        (people in rule order, section ids unioned).

        Returns:
            (lists, multiple_lists) where multiple_lists is False for the
            legacy single-list shape
        """
        if self.management_lists:
            return list(self.management_lists), True

        people: List[str] = []
        section_ids: set = set()
        for rule in self.active_role_rules():
            if rule.role is Role.MANAGEMENT and rule.management_names:
                people.extend(parse_people(rule.management_names))
                section_ids.update(rule.section_ids)
        if not people:
            return [], False
        legacy = ManagementList(
            id=LEGACY_LIST_ID,
            name=LEGACY_LIST_NAME,
            people=tuple(people),
            section_ids=frozenset(section_ids),
        )
        return [legacy], False

    def question_index(self) -> Dict[int, Question]:
        return {q.id: q for q in self.questions}
