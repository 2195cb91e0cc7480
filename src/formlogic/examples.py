"""
Example form builders.

Builds a small annual-review form with year rules, role rules and two
management lists, plus a variant that uses the legacy single-list
management configuration (names typed into a management role rule).
"""
from formlogic.conditions import YearCondition
from formlogic.model import (
    ManagementList,
    Question,
    QuestionType,
    Role,
    RoleRule,
    RuleModel,
    Section,
    YearRule,
)


def _sections():
    return [
        Section(id=1, name="Getting Started", order_number=1),
        Section(id=2, name="Onboarding", order_number=2),
        Section(id=3, name="Team Leadership", order_number=3),
        Section(id=4, name="Leadership Review", order_number=4),
        Section(id=5, name="Collaboration", order_number=5),
    ]


def _questions():
    return [
        Question(id=100, type=QuestionType.SELECT, is_required=True, order_number=1,
                 text="Which department do you work in?", options=("Finance", "Operations", "IT")),
        Question(id=101, type=QuestionType.TEXTAREA, order_number=2, text="Anything else to share?"),

        Question(id=110, section_id=1, type=QuestionType.RADIO, is_required=True, order_number=1,
                 text="How clear were your first-week goals?", options=("Clear", "Unclear")),
        Question(id=120, section_id=2, type=QuestionType.CHECKBOX, order_number=1,
                 text="Which onboarding sessions did you attend?", options=("HR", "Security", "Tools")),
        Question(id=121, section_id=2, type=QuestionType.TEXT, is_required=True, order_number=2,
                 text="Who was your onboarding buddy?"),
        Question(id=130, section_id=3, type=QuestionType.NUMBER, is_required=True, order_number=1,
                 text="How many people report to you?"),

        Question(id=140, section_id=4, type=QuestionType.ASSESSMENT, is_required=True, order_number=1,
                 text="What is their leadership style?"),
        Question(id=141, section_id=4, type=QuestionType.TEXTAREA, order_number=2,
                 text="Examples of strong leadership"),
        Question(id=150, section_id=5, type=QuestionType.ASSESSMENT, is_required=True, order_number=1,
                 text="How do they handle conflicts?"),
    ]


def build_example_form() -> RuleModel:
    """Annual review form with year rules, role rules and two management lists."""
    form = RuleModel(name="Annual Review")
    form.sections = _sections()
    form.questions = _questions()

    form.year_rules = [
        YearRule(YearCondition.EQUALS, "2024", section_ids={1, 2}, name="New joiners"),
        YearRule(YearCondition.BETWEEN, "2021-2023", section_ids={1}, name="Recent joiners"),
        YearRule(YearCondition.LESS_EQUAL, "2020", section_ids={5}, name="Long-standing staff"),
    ]
    form.role_rules = [
        RoleRule(Role.TEAM_LEAD, section_ids={3}, name="Team leads"),
        RoleRule(Role.EMPLOYEE, section_ids={5}, name="Employees"),
    ]
    form.management_lists = [
        ManagementList.from_text(1, "Department Heads", "1. Gibral\n2. Ahmad", section_ids={4, 5}),
        ManagementList.from_text(2, "Project Leads", "Caroline", section_ids={4}),
    ]
    return form


def build_legacy_management_form() -> RuleModel:
    """Same form, but management people come from a management role rule."""
    form = build_example_form()
    form.management_lists = []
    form.role_rules = form.role_rules + [
        RoleRule(
            Role.MANAGEMENT,
            section_ids={4, 5},
            management_names="gibral\nCaroline\nLittle Bina",
            name="Management review",
        ),
    ]
    return form
