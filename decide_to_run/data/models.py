"""
Decide to Run — Data Models.

Offices arrive from an external store (SQLite or the hosted backend) as loose
records and are coerced into the Office shape here, at the boundary. Plans
and checklist items are generated locally and never persisted; only the
per-user completion flags are.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterator, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)

Priority = Literal["critical", "high", "medium"]

# item id → completed flag, owned by one (user, office) pair
PlanProgress = dict[str, bool]


class Office(BaseModel):
    """An elected office a user may run for.

    Records from the store are duck-typed; absent optional fields become
    None instead of raising.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    state: str = ""
    district: str = ""
    office_type: str | None = None   # house | senate | stateSenate | stateHouse | cityCouncil | schoolBoard
    level: str | None = None         # federal | state | local
    filing_deadline: str | None = None   # ISO date YYYY-MM-DD
    estimated_cost: str | None = None    # free text, e.g. "$800,000 - $2,500,000"
    min_age: int | None = None
    incumbent: str | None = None
    next_election: str | None = None     # ISO date YYYY-MM-DD
    confidence: str | None = None        # verified | high | medium | low

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v))
        return v

    @field_validator("title", "state", "district", mode="before")
    @classmethod
    def _text_or_empty(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator(
        "office_type", "level", "estimated_cost", "incumbent", "confidence",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v: Any) -> str | None:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("filing_deadline", "next_election", mode="before")
    @classmethod
    def _date_to_iso(cls, v: Any) -> str | None:
        if isinstance(v, date):
            return v.isoformat()
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("min_age", mode="before")
    @classmethod
    def _coerce_age(cls, v: Any) -> int | None:
        if isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        if isinstance(v, float) and v.is_integer():
            return int(v)
        if isinstance(v, str) and v.strip().isdigit():
            return int(v.strip())
        return None


def coerce_office(record: dict[str, Any]) -> Office | None:
    """Validate a raw store record into an Office, or None if it has no id."""
    try:
        return Office.model_validate(record)
    except ValidationError as exc:
        logger.warning("Skipping malformed office record %r: %s", record.get("id"), exc)
        return None


@dataclass(frozen=True)
class ChecklistItem:
    """One task in a campaign plan.

    The id is stable within a single plan only; different categories reuse
    the same id (e.g. "target") with different task text.
    """

    id: str
    task: str
    priority: Priority


# Ordered plan groups: (attribute name, export heading)
PLAN_GROUPS: tuple[tuple[str, str], ...] = (
    ("pre_filing_essentials", "PRE-FILING ESSENTIALS (Do This First)"),
    ("filing", "FILING REQUIREMENTS"),
    ("first_30_days", "FIRST 30 DAYS"),
    ("fundraising", "FUNDRAISING CHECKLIST"),
    ("team", "TEAM TO BUILD"),
    ("field_work", "FIELD WORK & OUTREACH"),
    ("messaging", "MESSAGING & COMMUNICATIONS"),
)


@dataclass
class Plan:
    """A generated campaign plan: seven checklist groups plus a budget table."""

    pre_filing_essentials: list[ChecklistItem] = field(default_factory=list)
    filing: list[ChecklistItem] = field(default_factory=list)
    first_30_days: list[ChecklistItem] = field(default_factory=list)
    fundraising: list[ChecklistItem] = field(default_factory=list)
    team: list[ChecklistItem] = field(default_factory=list)
    field_work: list[ChecklistItem] = field(default_factory=list)
    messaging: list[ChecklistItem] = field(default_factory=list)
    budget: dict[str, str] | None = None  # None for the fallback category

    def groups(self) -> Iterator[tuple[str, list[ChecklistItem]]]:
        """Yield (group name, items) in plan order, including empty groups."""
        for name, _heading in PLAN_GROUPS:
            yield name, getattr(self, name)

    def all_items(self) -> list[ChecklistItem]:
        return [item for _name, items in self.groups() for item in items]


@dataclass
class PlanStatistics:
    """Completion counts derived from a plan and its progress mapping."""

    completed: int
    total: int
    percentage: int


@dataclass
class User:
    """A bot user. Progress and saved offices are scoped to this id."""

    telegram_user_id: int
    display_name: str
    created_at: str = ""


@dataclass
class UserProfile:
    """Answers collected by the eligibility wizard."""

    zip_code: str = ""
    state: str = ""
    age: int | None = None
    citizenship: bool = True
    residency: bool = True


@dataclass
class OfficeFilters:
    """Result-list filters: level, free-text search, sort order."""

    level: str = "all"          # all | federal | state | local
    search_term: str = ""
    sort_by: str = "deadline"   # deadline | title


@dataclass
class AssistantReply:
    """A canned answer from the campaign Q&A assistant."""

    message: str
    confidence: str                 # verified | high | medium | low
    related_questions: list[str] = field(default_factory=list)


@dataclass
class ChatMessage:
    role: str   # "user" | "assistant"
    content: str
    confidence: str | None = None
    related_questions: list[str] = field(default_factory=list)
