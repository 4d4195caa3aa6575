"""
Decide to Run — Campaign Plan Templates.

Turns an office into a campaign plan: a base checklist every candidate needs,
plus fixed fundraising / team / field-work content and a budget split for the
office's race category. Pure and deterministic: the same office always yields
an equal plan, and no field of the office can make this raise.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum

from decide_to_run.data.models import ChecklistItem, Office, Plan

logger = logging.getLogger(__name__)


class RaceCategory(str, Enum):
    FEDERAL_HOUSE = "federal-house"
    STATE_LEGISLATURE = "state-legislature"
    LOCAL = "local"
    FALLBACK = "fallback"


_STATE_LEGISLATURE_TYPES = {"stateSenate", "stateHouse"}
_LOCAL_TYPES = {"cityCouncil", "schoolBoard"}

# Federal House races are also recognized by their displayed cost range.
# Fragile: a reworded cost string silently drops the office out of this rule.
_FEDERAL_HOUSE_COST_MARKER = "800,000"


def classify_office(office: Office) -> RaceCategory:
    """Pick the race category for an office. First matching rule wins."""
    office_type = office.office_type
    level = office.level
    cost = office.estimated_cost or ""

    if office_type == "house" or (level == "federal" and _FEDERAL_HOUSE_COST_MARKER in cost):
        return RaceCategory.FEDERAL_HOUSE
    if office_type in _STATE_LEGISLATURE_TYPES or level == "state":
        return RaceCategory.STATE_LEGISLATURE
    if office_type in _LOCAL_TYPES or level == "local":
        return RaceCategory.LOCAL
    return RaceCategory.FALLBACK


def format_deadline(value: str | None) -> str:
    """Render an ISO date as "June 1, 2026"; empty string if unparseable."""
    if not value:
        return ""
    try:
        d = date.fromisoformat(value[:10])
    except ValueError:
        logger.debug("Unparseable filing deadline %r", value)
        return ""
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _item(item_id: str, task: str, priority: str) -> ChecklistItem:
    return ChecklistItem(id=item_id, task=task, priority=priority)


# ---------------------------------------------------------------------------
# Base template — shared by every category
# ---------------------------------------------------------------------------


def _base_plan(office: Office) -> Plan:
    state = _text(office.state)
    min_age = _text(office.min_age)
    deadline = format_deadline(office.filing_deadline)

    return Plan(
        pre_filing_essentials=[
            _item("research", f"Research filing requirements for {state}", "critical"),
            _item("eligibility", f"Verify eligibility (Age: {min_age}+, Citizenship, Residency)", "critical"),
            _item("bank", "Set up campaign bank account", "critical"),
            _item("deadline", f"Mark filing deadline: {deadline}", "critical"),
        ],
        filing=[
            _item("org", "File Statement of Organization", "critical"),
            _item("treasurer", "Designate campaign treasurer", "critical"),
            _item("candidacy", "File Declaration of Candidacy", "critical"),
        ],
        first_30_days=[
            _item("committee", "Form exploratory committee", "high"),
            _item("website", "Launch campaign website", "high"),
            _item("social", "Create social media accounts (Facebook, Twitter/X, Instagram)", "high"),
            _item("coffee", "Schedule 15-20 coffee meetings with community leaders", "medium"),
        ],
        messaging=[
            _item("bio", "Write candidate biography", "high"),
            _item("issues", "Identify 3-5 core issues", "high"),
            _item("talking", "Develop talking points", "medium"),
        ],
    )


# ---------------------------------------------------------------------------
# Category tables
# ---------------------------------------------------------------------------


def _federal_house(plan: Plan, office: Office) -> None:
    cost = _text(office.estimated_cost)
    plan.filing += [
        _item("fec", "Register with Federal Election Commission (FEC)", "critical"),
        _item("fecid", "Obtain FEC ID number", "critical"),
    ]
    plan.fundraising = [
        _item("target", f"Set fundraising target: {cost}", "critical"),
        _item("actblue", "Set up ActBlue/WinRed account", "critical"),
        _item("calltime", "Schedule daily call time (3-5 hours)", "critical"),
        _item("personal", "Personal network asks (Goal: $25,000 in first 30 days)", "high"),
        _item("events", "Plan quarterly fundraising events", "high"),
        _item("pacs", "Research endorsement opportunities from PACs", "medium"),
        _item("bundlers", "Recruit 10 bundlers (people who can raise $5K+ each)", "medium"),
        _item("recurring", "Set up recurring donor program", "medium"),
    ]
    plan.team = [
        _item("manager", "Hire Campaign Manager ($5,000-8,000/month)", "critical"),
        _item("finance", "Hire Finance Director ($4,000-6,000/month)", "critical"),
        _item("comms", "Hire Communications Director ($4,000-6,000/month)", "high"),
        _item("field", "Hire Field Director ($3,500-5,000/month)", "high"),
        _item("digital", "Hire Digital Director ($3,000-5,000/month)", "medium"),
        _item("volunteers", "Recruit Volunteer Coordinator", "medium"),
    ]
    plan.field_work = [
        _item("data", "Purchase voter file/VAN access", "critical"),
        _item("offices", "Secure campaign office space", "high"),
        _item("canvass", "Plan door-to-door canvassing schedule", "high"),
        _item("phones", "Set up phone banking operation", "high"),
        _item("events", "Plan community meet-and-greets (2-3 per week)", "medium"),
    ]
    plan.budget = {
        "Staff & Operations": "25-30%",
        "Media & Advertising": "35-45%",
        "Field Operations": "15-20%",
        "Fundraising Costs": "8-12%",
        "Other": "5-10%",
    }


def _state_legislature(plan: Plan, office: Office) -> None:
    state = _text(office.state)
    cost = _text(office.estimated_cost)
    plan.filing += [
        _item("state", f"Register with {state} State Board of Elections", "critical"),
        _item("signatures", "Collect petition signatures (typically 100-500)", "critical"),
    ]
    plan.fundraising = [
        _item("target", f"Set fundraising target: {cost}", "critical"),
        _item("limits", f"Research {state} contribution limits", "critical"),
        _item("actblue", "Set up ActBlue/WinRed account", "high"),
        _item("calltime", "Schedule 2-3 hours daily call time", "high"),
        _item("personal", "Personal network asks (Goal: $10,000 in first 30 days)", "high"),
        _item("local", "Approach local business owners and community leaders", "high"),
        _item("events", "Plan 3-4 fundraising house parties", "medium"),
        _item("endorsements", "Seek union and interest group endorsements", "medium"),
    ]
    plan.team = [
        _item("manager", "Hire Campaign Manager or Consultant ($3,000-5,000/month)", "critical"),
        _item("finance", "Hire Finance Director or Volunteer", "high"),
        _item("field", "Recruit Field Organizer", "high"),
        _item("volunteers", "Build volunteer team (20-50 people)", "high"),
        _item("comms", "Hire Communications person or consultant", "medium"),
    ]
    plan.field_work = [
        _item("data", "Get access to state voter file", "high"),
        _item("canvass", "Plan neighborhood canvassing (weekends)", "high"),
        _item("lit", "Design and print palm cards/literature", "high"),
        _item("endorsements", "Seek endorsements from local elected officials", "high"),
        _item("forums", "Attend community forums and debates", "medium"),
    ]
    plan.budget = {
        "Staff & Consultants": "20-25%",
        "Media & Advertising": "30-40%",
        "Field Operations": "20-25%",
        "Fundraising Costs": "10-15%",
        "Other": "5-10%",
    }


def _local(plan: Plan, office: Office) -> None:
    cost = _text(office.estimated_cost)
    plan.filing += [
        _item("local", "Register with City/County Clerk", "critical"),
        _item("signatures", "Collect petition signatures (typically 25-200)", "critical"),
    ]
    plan.fundraising = [
        _item("target", f"Set fundraising target: {cost}", "critical"),
        _item("limits", "Research local contribution limits", "high"),
        _item("personal", "Personal network asks (Goal: $2,000-5,000)", "high"),
        _item("events", "Plan 2-3 small fundraising house parties", "high"),
        _item("local", "Approach local business owners", "medium"),
        _item("online", "Set up online donation page", "medium"),
    ]
    plan.team = [
        _item("treasurer", "Recruit Campaign Treasurer (volunteer)", "critical"),
        _item("manager", "Campaign Manager (can be volunteer or part-time)", "high"),
        _item("volunteers", "Build volunteer team (10-25 people)", "high"),
        _item("social", "Recruit Social Media Manager (volunteer)", "medium"),
    ]
    plan.field_work = [
        _item("doors", "Plan door-to-door canvassing (every weekend)", "critical"),
        _item("lit", "Design and print palm cards", "high"),
        _item("yards", "Order yard signs", "high"),
        _item("neighborhood", "Attend neighborhood association meetings", "high"),
        _item("coffee", 'Host "Coffee with Candidate" events', "high"),
        _item("endorsements", "Seek endorsements from community leaders", "medium"),
        _item("newspaper", "Meet with local newspaper editorial board", "medium"),
    ]
    plan.budget = {
        "Literature & Signs": "30-35%",
        "Digital Advertising": "20-25%",
        "Field Operations": "20-25%",
        "Fundraising Events": "10-15%",
        "Other": "10-15%",
    }


_CATEGORY_BUILDERS = {
    RaceCategory.FEDERAL_HOUSE: _federal_house,
    RaceCategory.STATE_LEGISLATURE: _state_legislature,
    RaceCategory.LOCAL: _local,
}


def select_plan(office: Office) -> Plan:
    """Build a fresh campaign plan for an office.

    The base checklist is always present; the office's race category adds
    filing steps and fills fundraising, team, field work and budget. The
    fallback category returns the base checklist alone with no budget.
    """
    plan = _base_plan(office)
    builder = _CATEGORY_BUILDERS.get(classify_office(office))
    if builder is not None:
        builder(plan, office)
    return plan
