#!/usr/bin/env python3
"""
Evaluation Demo: YAML config → RuleModel → Analysis → Sessions → Payloads

Shows the full workflow:
1. Load the form configuration from YAML
2. Analyze the configuration
3. Resolve sections for a few standard respondents
4. Walk a management respondent through every list, person and section
5. Serialize the submission and print the readable report
"""

import logging

from formlogic.aggregator import RespondentInfo, management_report_lines
from formlogic.analyzer import analyze_rule_model
from formlogic.examples import build_example_form
from formlogic.serialization import payload_to_json, rule_model_from_yaml, rule_model_to_yaml
from formlogic.session import RespondentSession


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 80)
    print("EVALUATION DEMO: YAML → RuleModel → Analysis → Sessions → Payloads")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Load configuration
    # =========================================================================
    print("\n1. LOADING CONFIGURATION...")
    form = rule_model_from_yaml(rule_model_to_yaml(build_example_form()))
    print(f"   ✓ Loaded form: {form.name}")
    print(f"   ✓ Sections: {len(form.sections)}")
    print(f"   ✓ Questions: {len(form.questions)}")
    print(f"   ✓ Year rules: {len(form.year_rules)}, role rules: {len(form.role_rules)}")
    print(f"   ✓ Management lists: {len(form.management_lists)}")

    # =========================================================================
    # STEP 2: Analyze
    # =========================================================================
    print("\n2. ANALYZING CONFIGURATION...")
    report = analyze_rule_model(form)
    print(f"   ✓ Unconditional: {report.is_unconditional}")
    print(f"   ✓ Required questions: {report.required_questions}")
    print(f"   ✓ Warnings: {len(report.warnings)}")
    for warning in report.warnings:
        print(f"      - {warning}")

    # =========================================================================
    # STEP 3: Standard respondents
    # =========================================================================
    print("\n3. RESOLVING STANDARD RESPONDENTS...")
    for year, role in [("2024", "team_lead"), ("2022", "employee"), ("2030", "")]:
        session = RespondentSession(form)
        resolution = session.select(year=year, role=role)
        names = [s.name for s in form.ordered_sections(resolution.section_ids)]
        print(f"   year={year or '-':>4} role={role or '-':<10} {resolution.mode.value:<10} {names}")

    # =========================================================================
    # STEP 4: Management respondent
    # =========================================================================
    print("\n4. MANAGEMENT EVALUATION...")
    session = RespondentSession(form, RespondentInfo("Dana", "dana@example.com"))
    session.select(role="management")
    session.record(100, "Operations")
    score = 3
    while True:
        step = session.current_step()
        print(f"   [{step.position}/{step.total}] {step.list_name} / {step.person} / {step.section.name}")
        for question in step.questions:
            if question.is_required:
                session.record(question.id, score)
                score = score % 5 + 1
        if not session.next():
            break

    # =========================================================================
    # STEP 5: Submission
    # =========================================================================
    print("\n5. SUBMISSION:")
    print("-" * 80)
    payload = session.submit()
    print(payload_to_json(payload))
    print()
    for line in management_report_lines(payload, form):
        print(f"   {line}")


if __name__ == "__main__":
    main()
