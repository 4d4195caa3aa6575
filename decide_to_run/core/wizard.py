"""
Decide to Run — Eligibility Wizard.

Three steps gate the office search: where the user lives, whether they meet
the basic requirements, and a final confirmation.
"""

from __future__ import annotations

import re

from decide_to_run.data.models import UserProfile

STEP_LOCATION = 0
STEP_ELIGIBILITY = 1
STEP_CONFIRM = 2
LAST_STEP = STEP_CONFIRM

MIN_CANDIDATE_AGE = 18

_NON_DIGITS = re.compile(r"\D")


def normalize_zip(text: str) -> str:
    """Strip non-digits and keep the first five."""
    return _NON_DIGITS.sub("", text or "")[:5]


def parse_age(text: str) -> int | None:
    """Parse a typed age; None for anything that isn't a whole number."""
    text = (text or "").strip()
    if not text.isdigit():
        return None
    return int(text)


def can_proceed(step: int, profile: UserProfile) -> bool:
    """Whether the profile satisfies the given wizard step."""
    if step == STEP_LOCATION:
        return len(profile.zip_code) == 5 and len(profile.state) > 0
    if step == STEP_ELIGIBILITY:
        return (
            profile.age is not None
            and profile.age >= MIN_CANDIDATE_AGE
            and profile.citizenship
            and profile.residency
        )
    return True
