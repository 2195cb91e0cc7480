"""
Test the example annual-review forms.

Validates that the builders create the expected sections, rules and
management lists, and that the lists parse the admin-typed people text.
"""

from formlogic.examples import build_example_form, build_legacy_management_form
from formlogic.resolver import resolve
from formlogic.model import Role


def test_example_form_structure():
    form = build_example_form()

    assert [s.name for s in form.ordered_sections()] == [
        "Getting Started", "Onboarding", "Team Leadership", "Leadership Review", "Collaboration",
    ]
    assert [q.id for q in form.unassigned_questions()] == [100, 101]

    heads = form.get_management_list(1)
    assert heads.people == ("Gibral", "Ahmad")
    assert heads.section_ids == {4, 5}


def test_example_form_resolution_table():
    form = build_example_form()

    assert resolve(form, 2024, None).section_ids == {1, 2}
    assert resolve(form, 2022, Role.TEAM_LEAD).section_ids == {1, 3}
    assert resolve(form, 2019, Role.EMPLOYEE).section_ids == {5}
    assert resolve(form, 2030, None).section_ids == set()


def test_legacy_form_uses_role_rule_names():
    form = build_legacy_management_form()
    lists, multiple = form.flow_management_lists()

    assert not multiple
    assert lists[0].people == ("gibral", "Caroline", "Little Bina")
    # the plain variant is untouched
    assert build_example_form().management_lists
