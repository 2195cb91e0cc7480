"""
Form Eligibility & Round-Robin Evaluation Engine

Decides which sections of a form a respondent sees, from their declared
entry year and role, and drives management respondents through every
(list, person, section) evaluation they owe.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Persistence
    - HTTP transport
    - Authentication
    - Spreadsheet or UI rendering

It consumes form configuration (RuleModel) and respondent choices, and
produces visible-question sets, a traversal driver, and a submission
payload. Everything else is the caller's concern.
"""

__version__ = "0.1.0"
