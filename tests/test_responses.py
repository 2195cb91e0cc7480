"""
Tests for the Response Store and required-answer checks.
"""

import pytest
from formlogic.model import Question
from formlogic.responses import (
    IncompleteRequiredAnswer,
    ResponseKey,
    ResponseStore,
    check_required,
    is_answered,
    missing_required,
    normalize_value,
    selection_value,
)
from formlogic.scheduler import EvaluationCursor

HERE = EvaluationCursor(0, 1, 0)
THERE = EvaluationCursor(0, 2, 0)


class TestValues:
    """Test value normalization and answered checks."""

    def test_sets_become_frozensets(self):
        """Should freeze sets into frozensets of strings."""
        assert normalize_value({"a", "b"}) == frozenset({"a", "b"})
        assert normalize_value({1, 2}) == frozenset({"1", "2"})

    def test_other_values_stored_as_given(self):
        """Lists and tuples are not selections unless the question says so."""
        assert normalize_value(["a", "b", "a"]) == ["a", "b", "a"]
        assert normalize_value((1, 2)) == (1, 2)
        assert normalize_value("a") == "a"
        assert normalize_value(3) == 3

    def test_selection_value(self):
        """Should coerce any multi-select input into a frozenset of strings."""
        assert selection_value(["a", "b", "a"]) == frozenset({"a", "b"})
        assert selection_value("HR") == frozenset({"HR"})
        assert selection_value(None) == frozenset()
        assert selection_value(3) == frozenset({"3"})

    @pytest.mark.parametrize("value", [None, "", "   ", frozenset(), [], ()])
    def test_unanswered(self, value):
        assert not is_answered(value)

    @pytest.mark.parametrize("value", ["x", 0, 3.5, False, frozenset({"a"})])
    def test_answered(self, value):
        """Zero and False are real answers."""
        assert is_answered(value)


class TestResponseKey:
    """Test ResponseKey addressing."""

    def test_standard_key(self):
        key = ResponseKey.standard(7)
        assert key.is_standard
        assert key.cursor is None
        assert ResponseKey.at(None, 7) == key

    def test_cursor_key(self):
        """Should carry the full cursor."""
        key = ResponseKey.at(HERE, 7)
        assert not key.is_standard
        assert key.cursor == HERE


class TestResponseStore:
    """Test recording and reading answers."""

    def test_same_question_per_cursor_is_independent(self):
        """One question answered for two people should keep both values."""
        store = ResponseStore()
        store.record(HERE, 5, 3)
        store.record(THERE, 5, 4)
        assert store.get(HERE, 5) == 3
        assert store.get(THERE, 5) == 4
        assert len(store) == 2

    def test_overwrite(self):
        """Recording again should replace the previous value."""
        store = ResponseStore()
        store.record(None, 1, "first")
        key = store.record(None, 1, "second")
        assert store.get(None, 1) == "second"
        assert key in store
        assert len(store) == 1

    def test_answers_at(self):
        """Should group answers by cursor."""
        store = ResponseStore()
        store.record(None, 1, "base")
        store.record(HERE, 2, "x")
        store.record(HERE, 3, {"a", "b"})
        store.record(THERE, 2, "y")
        assert store.standard_answers() == {1: "base"}
        assert store.answers_at(HERE) == {2: "x", 3: frozenset({"a", "b"})}

    def test_clear_management_keeps_standard_answers(self):
        store = ResponseStore()
        store.record(None, 1, "base")
        store.record(HERE, 2, "x")
        store.clear_management()
        assert store.standard_answers() == {1: "base"}
        assert store.get(HERE, 2) is None

    def test_discard_and_clear(self):
        store = ResponseStore()
        store.record(HERE, 2, "x")
        store.record(None, 1, "base")
        store.discard(HERE, 2)
        assert not store.has_answer(HERE, 2)
        store.clear()
        assert len(store) == 0


class TestRequired:
    """Test required-answer checks."""

    def _questions(self):
        return [
            Question(id=1, is_required=True, text="Your team?"),
            Question(id=2),
            Question(id=3, is_required=True),
        ]

    def test_missing_required(self):
        """Should list required questions without a usable answer."""
        store = ResponseStore()
        store.record(HERE, 1, "  ")
        store.record(HERE, 3, "ok")
        assert [q.id for q in missing_required(store, HERE, self._questions())] == [1]

    def test_answers_elsewhere_do_not_count(self):
        """An answer for another person should not satisfy this one."""
        store = ResponseStore()
        store.record(THERE, 1, "yes")
        store.record(THERE, 3, "yes")
        with pytest.raises(IncompleteRequiredAnswer) as excinfo:
            check_required(store, HERE, self._questions())
        assert excinfo.value.question_id == 1
        assert excinfo.value.key == ResponseKey.at(HERE, 1)
        assert str(excinfo.value) == "Please answer: Your team?"

    def test_message_without_text(self):
        """Should fall back to the question id."""
        store = ResponseStore()
        store.record(None, 1, "yes")
        with pytest.raises(IncompleteRequiredAnswer, match="question 3"):
            check_required(store, None, self._questions())

    def test_all_answered(self):
        store = ResponseStore()
        store.record(None, 1, "yes")
        store.record(None, 3, ["a"])
        check_required(store, None, self._questions())
