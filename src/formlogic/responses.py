"""
Response Store

Holds a respondent's answers for the length of one session.

Management answers are addressed by the full cursor (list, person,
section) plus the question id; standard answers by the question id
alone. Person slots are addressed by index, so a name listed twice is
two independent slots.

Values:
    - multi-select (checkbox) answers are frozensets of strings; the
      session coerces them with selection_value(), which knows the type
    - sets are frozen, everything else is stored as given
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .scheduler import EvaluationCursor
from .model import Question


class IncompleteRequiredAnswer(Exception):
    """
    Raised when a required question has no usable answer.

    Attributes:
        question_id: The unanswered question
        key: ResponseKey the answer was expected under
        text: Question text, for the message shown to the respondent
    """

    def __init__(self, question_id: int, key: "ResponseKey", text: str = ""):
        self.question_id = question_id
        self.key = key
        self.text = text
        label = text or f"question {question_id}"
        super().__init__(f"Please answer: {label}")


@dataclass(frozen=True)
class ResponseKey:
    """
    Address of one stored answer.

    Standard answers leave list/person/section as None.
    """

    question_id: int
    list_index: Optional[int] = None
    person_index: Optional[int] = None
    section_index: Optional[int] = None

    @classmethod
    def standard(cls, question_id: int) -> "ResponseKey":
        return cls(question_id=question_id)

    @classmethod
    def at(cls, cursor: Optional[EvaluationCursor], question_id: int) -> "ResponseKey":
        if cursor is None:
            return cls.standard(question_id)
        return cls(
            question_id=question_id,
            list_index=cursor.list_index,
            person_index=cursor.person_index,
            section_index=cursor.section_index,
        )

    @property
    def is_standard(self) -> bool:
        return self.list_index is None

    @property
    def cursor(self) -> Optional[EvaluationCursor]:
        if self.is_standard:
            return None
        return EvaluationCursor(self.list_index, self.person_index, self.section_index)


def normalize_value(value: Any) -> Any:
    """Sets become frozensets of strings; everything else is stored as given."""
    if isinstance(value, (set, frozenset)):
        return frozenset(str(v) for v in value)
    return value


def selection_value(value: Any) -> frozenset:
    """
    Coerce a multi-select answer into a frozenset of strings.

    A bare string is a single selection; None is an empty one.
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset([value])
    if isinstance(value, (set, frozenset, list, tuple)):
        return frozenset(str(v) for v in value)
    return frozenset([str(value)])


def is_answered(value: Any) -> bool:
    """
    Whether a stored value counts as an answer to a required question.

    None, blank strings and empty collections do not.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (set, frozenset, list, tuple)):
        return bool(value)
    return True


class ResponseStore:
    """Key-value store of one respondent's answers."""

    def __init__(self):
        self._values: Dict[ResponseKey, Any] = {}

    def record(self, cursor: Optional[EvaluationCursor], question_id: int, value: Any) -> ResponseKey:
        """
        Store ``value`` for ``question_id`` at ``cursor``.

        Pass cursor=None for a standard (non-management) answer.
        Recording again overwrites the previous value.
        """
        key = ResponseKey.at(cursor, question_id)
        self._values[key] = normalize_value(value)
        return key

    def get(self, cursor: Optional[EvaluationCursor], question_id: int, default: Any = None) -> Any:
        return self._values.get(ResponseKey.at(cursor, question_id), default)

    def discard(self, cursor: Optional[EvaluationCursor], question_id: int) -> None:
        self._values.pop(ResponseKey.at(cursor, question_id), None)

    def has_answer(self, cursor: Optional[EvaluationCursor], question_id: int) -> bool:
        return is_answered(self.get(cursor, question_id))

    def answers_at(self, cursor: Optional[EvaluationCursor]) -> Dict[int, Any]:
        """Every answer recorded at ``cursor`` (None: the standard answers)."""
        answers = {}
        for key, value in self._values.items():
            if key.cursor == cursor:
                answers[key.question_id] = value
        return answers

    def standard_answers(self) -> Dict[int, Any]:
        return self.answers_at(None)

    def items(self) -> Iterator[Tuple[ResponseKey, Any]]:
        return iter(list(self._values.items()))

    def clear(self) -> None:
        self._values.clear()

    def clear_management(self) -> None:
        """Drop every cursor-addressed answer, keeping standard ones."""
        self._values = {k: v for k, v in self._values.items() if k.is_standard}

    def __contains__(self, key: ResponseKey) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)


def missing_required(
    store: ResponseStore,
    cursor: Optional[EvaluationCursor],
    questions: Iterable[Question],
) -> List[Question]:
    """Required questions among ``questions`` with no usable answer at ``cursor``."""
    return [
        q for q in questions
        if q.is_required and not store.has_answer(cursor, q.id)
    ]


def check_required(
    store: ResponseStore,
    cursor: Optional[EvaluationCursor],
    questions: Iterable[Question],
) -> None:
    """
    Raise for the first required question left unanswered at ``cursor``.

    Raises:
        IncompleteRequiredAnswer
    """
    missing = missing_required(store, cursor, questions)
    if missing:
        question = missing[0]
        raise IncompleteRequiredAnswer(question.id, ResponseKey.at(cursor, question.id), question.text)
