"""
Serialization helpers for form configuration and submission payloads.

Form configuration arrives as a plain mapping (a database row set or an
API body) and is loaded through an explicit dict representation, with
JSON and YAML front-ends. Submission payloads go the other way only:
the sink stores them, the engine never reads them back.

Loading problems (missing keys, unknown enum values, non-integer ids)
raise ConfigurationError.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from formlogic.model import (
    ConfigurationError,
    ManagementList,
    Question,
    RoleRule,
    RuleModel,
    Section,
    YearRule,
)
from formlogic.aggregator import RespondentInfo, SubmissionPayload


def _require(d: Dict[str, Any], key: str, what: str) -> Any:
    try:
        return d[key]
    except (KeyError, TypeError):
        raise ConfigurationError(f"{what} is missing required field {key!r}: {d!r}")


def _int(value: Any, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{what} must be an integer, got {value!r}")


def _optional_int(value: Any, what: str) -> int | None:
    if value is None or value == "":
        return None
    return _int(value, what)


def section_to_dict(s: Section) -> Dict[str, Any]:
    return {"id": s.id, "name": s.name, "order_number": s.order_number, "description": s.description}


def section_from_dict(d: Dict[str, Any]) -> Section:
    return Section(
        id=_int(_require(d, "id", "Section"), "Section id"),
        name=d.get("name") or d.get("section_name") or "",
        order_number=_int(d.get("order_number", 0), "Section order_number"),
        description=d.get("description") or d.get("section_description"),
    )


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "id": q.id,
        "type": q.type.value,
        "section_id": q.section_id,
        "is_required": q.is_required,
        "order_number": q.order_number,
        "text": q.text,
        "options": list(q.options),
    }


def question_from_dict(d: Dict[str, Any]) -> Question:
    options = d.get("options") or []
    return Question(
        id=_int(_require(d, "id", "Question"), "Question id"),
        type=d.get("type") or d.get("question_type") or "text",
        section_id=_optional_int(d.get("section_id"), "Question section_id"),
        is_required=bool(d.get("is_required", False)),
        order_number=_int(d.get("order_number", 0), "Question order_number"),
        text=d.get("text") or d.get("question_text") or "",
        options=tuple(o["value"] if isinstance(o, dict) else o for o in options),
    )


def year_rule_to_dict(r: YearRule) -> Dict[str, Any]:
    return {
        "condition_type": r.condition_type.value,
        "condition_value": r.condition_value,
        "section_ids": sorted(r.section_ids),
        "name": r.name,
        "is_active": r.is_active,
    }


def year_rule_from_dict(d: Dict[str, Any]) -> YearRule:
    return YearRule(
        condition_type=_require(d, "condition_type", "Year rule"),
        condition_value=_require(d, "condition_value", "Year rule"),
        section_ids=d.get("section_ids") or [],
        name=d.get("name") or d.get("condition_name"),
        is_active=bool(d.get("is_active", True)),
    )


def role_rule_to_dict(r: RoleRule) -> Dict[str, Any]:
    return {
        "role": r.role.value,
        "section_ids": sorted(r.section_ids),
        "management_names": r.management_names,
        "name": r.name,
        "is_active": r.is_active,
    }


def role_rule_from_dict(d: Dict[str, Any]) -> RoleRule:
    # stored rows keep the role under condition_value
    role = d.get("role") or d.get("condition_value")
    if role is None:
        raise ConfigurationError(f"Role rule is missing required field 'role': {d!r}")
    return RoleRule(
        role=role,
        section_ids=d.get("section_ids") or [],
        management_names=d.get("management_names"),
        name=d.get("name") or d.get("condition_name"),
        is_active=bool(d.get("is_active", True)),
    )


def management_list_to_dict(m: ManagementList) -> Dict[str, Any]:
    return {
        "id": m.id,
        "name": m.name,
        "people": list(m.people),
        "section_ids": sorted(m.section_ids),
    }


def management_list_from_dict(d: Dict[str, Any]) -> ManagementList:
    # people may be a list or the raw line-separated text
    return ManagementList(
        id=_int(_require(d, "id", "Management list"), "Management list id"),
        name=d.get("name") or "",
        people=d.get("people") or d.get("names") or (),
        section_ids=d.get("section_ids") or [],
    )


def rule_model_to_dict(m: RuleModel) -> Dict[str, Any]:
    return {
        "name": m.name,
        "sections": [section_to_dict(s) for s in m.sections],
        "questions": [question_to_dict(q) for q in m.questions],
        "year_rules": [year_rule_to_dict(r) for r in m.year_rules],
        "role_rules": [role_rule_to_dict(r) for r in m.role_rules],
        "management_lists": [management_list_to_dict(ml) for ml in m.management_lists],
    }


def rule_model_from_dict(d: Dict[str, Any]) -> RuleModel:
    if not isinstance(d, dict):
        raise ConfigurationError(f"Form configuration must be a mapping, got {type(d).__name__}")
    m = RuleModel(name=d.get("name") or d.get("title") or "")
    m.sections = [section_from_dict(s) for s in d.get("sections") or []]
    m.questions = [question_from_dict(q) for q in d.get("questions") or []]
    m.year_rules = [year_rule_from_dict(r) for r in d.get("year_rules") or []]
    m.role_rules = [role_rule_from_dict(r) for r in d.get("role_rules") or []]
    m.management_lists = [management_list_from_dict(ml) for ml in d.get("management_lists") or []]
    return m


def rule_model_to_json(m: RuleModel) -> str:
    return json.dumps(rule_model_to_dict(m), sort_keys=True)


def rule_model_from_json(s: str) -> RuleModel:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON form configuration: {e}")
    return rule_model_from_dict(d)


def rule_model_to_yaml(m: RuleModel) -> str:
    return yaml.safe_dump(rule_model_to_dict(m), sort_keys=False)


def rule_model_from_yaml(s: str) -> RuleModel:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML form configuration: {e}")
    return rule_model_from_dict(d)


def answer_to_json_value(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return value


def _answers_to_dict(answers: Dict[int, Any]) -> Dict[str, Any]:
    return {str(qid): answer_to_json_value(v) for qid, v in answers.items()}


def _tree_to_dict(tree: Any, depth: int) -> Any:
    # depth counts the grouping levels above the {question_id: value} leaves
    if depth == 0:
        return _answers_to_dict(tree)
    return {key: _tree_to_dict(sub, depth - 1) for key, sub in tree.items()}


def respondent_to_dict(r: RespondentInfo) -> Dict[str, Any]:
    return {"name": r.name, "email": r.email}


def payload_to_dict(p: SubmissionPayload) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "respondent_info": respondent_to_dict(p.respondent),
        "selected_year": p.selected_year,
        "selected_role": p.selected_role.value if p.selected_role else None,
        "responses": _answers_to_dict(p.responses),
    }
    if p.is_management:
        depth = 3 if p.multiple_lists else 2
        d["management_responses"] = _tree_to_dict(p.management_responses, depth)
        d["evaluated_people"] = list(p.evaluated_people)
        d["multiple_lists"] = p.multiple_lists
    return d


def payload_to_json(p: SubmissionPayload) -> str:
    return json.dumps(payload_to_dict(p), sort_keys=True, ensure_ascii=False)
