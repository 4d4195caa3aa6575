"""Tests for decide_to_run.core.plan_templates — race classification and plans."""

from decide_to_run.core.plan_templates import (
    RaceCategory,
    classify_office,
    format_deadline,
    select_plan,
)
from decide_to_run.data.models import Office


def _group_sizes(plan):
    return {name: len(items) for name, items in plan.groups()}


class TestClassifyOffice:
    def test_house_type_is_federal_house(self, house_office):
        assert classify_office(house_office) == RaceCategory.FEDERAL_HOUSE

    def test_house_type_wins_over_state_level(self):
        office = Office(id="1", office_type="house", level="state")
        assert classify_office(office) == RaceCategory.FEDERAL_HOUSE

    def test_federal_level_with_cost_marker(self):
        office = Office(id="1", level="federal", estimated_cost="$800,000 - $2,500,000")
        assert classify_office(office) == RaceCategory.FEDERAL_HOUSE

    def test_federal_level_without_cost_marker_falls_back(self):
        # A reworded cost range loses the federal-house classification
        office = Office(id="1", office_type="senate", level="federal", estimated_cost="$10M+")
        assert classify_office(office) == RaceCategory.FALLBACK

    def test_cost_marker_ignored_without_federal_level(self):
        office = Office(id="1", level="local", estimated_cost="$800,000")
        assert classify_office(office) == RaceCategory.LOCAL

    def test_state_types(self):
        assert classify_office(Office(id="1", office_type="stateSenate")) == RaceCategory.STATE_LEGISLATURE
        assert classify_office(Office(id="1", office_type="stateHouse")) == RaceCategory.STATE_LEGISLATURE

    def test_state_level(self):
        assert classify_office(Office(id="1", level="state")) == RaceCategory.STATE_LEGISLATURE

    def test_state_type_wins_over_local_level(self):
        office = Office(id="1", office_type="stateSenate", level="local")
        assert classify_office(office) == RaceCategory.STATE_LEGISLATURE

    def test_local_types(self):
        assert classify_office(Office(id="1", office_type="cityCouncil")) == RaceCategory.LOCAL
        assert classify_office(Office(id="1", office_type="schoolBoard")) == RaceCategory.LOCAL

    def test_local_level_without_type(self):
        assert classify_office(Office(id="1", level="local")) == RaceCategory.LOCAL

    def test_nothing_set_is_fallback(self, bare_office):
        assert classify_office(bare_office) == RaceCategory.FALLBACK


class TestFormatDeadline:
    def test_long_form(self):
        assert format_deadline("2026-06-01") == "June 1, 2026"

    def test_datetime_string(self):
        assert format_deadline("2026-11-03T00:00:00Z") == "November 3, 2026"

    def test_missing(self):
        assert format_deadline(None) == ""
        assert format_deadline("") == ""

    def test_garbage(self):
        assert format_deadline("next spring") == ""


class TestBaseTemplate:
    def test_fallback_has_base_groups_only(self, bare_office):
        plan = select_plan(bare_office)
        assert _group_sizes(plan) == {
            "pre_filing_essentials": 4,
            "filing": 3,
            "first_30_days": 4,
            "fundraising": 0,
            "team": 0,
            "field_work": 0,
            "messaging": 3,
        }
        assert plan.budget is None

    def test_interpolates_office_fields(self, house_office):
        tasks = [i.task for i in select_plan(house_office).pre_filing_essentials]
        assert tasks == [
            "Research filing requirements for CA",
            "Verify eligibility (Age: 25+, Citizenship, Residency)",
            "Set up campaign bank account",
            "Mark filing deadline: June 1, 2026",
        ]

    def test_missing_fields_render_empty(self, bare_office):
        tasks = [i.task for i in select_plan(bare_office).pre_filing_essentials]
        assert tasks[1] == "Verify eligibility (Age: +, Citizenship, Residency)"
        assert tasks[3] == "Mark filing deadline: "

    def test_base_items_are_critical_first(self, bare_office):
        plan = select_plan(bare_office)
        assert all(i.priority == "critical" for i in plan.pre_filing_essentials)
        assert [i.priority for i in plan.first_30_days] == ["high", "high", "high", "medium"]


class TestFederalHousePlan:
    def test_filing_has_fec_items(self, house_office):
        plan = select_plan(house_office)
        assert len(plan.filing) == 5
        assert [i.id for i in plan.filing[-2:]] == ["fec", "fecid"]

    def test_group_sizes(self, house_office):
        assert _group_sizes(select_plan(house_office)) == {
            "pre_filing_essentials": 4,
            "filing": 5,
            "first_30_days": 4,
            "fundraising": 8,
            "team": 6,
            "field_work": 5,
            "messaging": 3,
        }

    def test_target_uses_estimated_cost(self, house_office):
        target = select_plan(house_office).fundraising[0]
        assert target.id == "target"
        assert target.task == "Set fundraising target: $800,000 - $2,500,000"

    def test_budget(self, house_office):
        budget = select_plan(house_office).budget
        assert budget["Media & Advertising"] == "35-45%"
        assert list(budget) == [
            "Staff & Operations",
            "Media & Advertising",
            "Field Operations",
            "Fundraising Costs",
            "Other",
        ]

    def test_team_lists_salaries(self, house_office):
        team = select_plan(house_office).team
        assert team[0].task == "Hire Campaign Manager ($5,000-8,000/month)"


class TestStateLegislaturePlan:
    def test_filing_and_sizes(self, state_office):
        plan = select_plan(state_office)
        assert [i.task for i in plan.filing[-2:]] == [
            "Register with CA State Board of Elections",
            "Collect petition signatures (typically 100-500)",
        ]
        assert _group_sizes(plan)["fundraising"] == 8
        assert _group_sizes(plan)["team"] == 5
        assert _group_sizes(plan)["field_work"] == 5

    def test_contribution_limits_mentions_state(self, state_office):
        limits = select_plan(state_office).fundraising[1]
        assert limits.task == "Research CA contribution limits"

    def test_budget(self, state_office):
        assert select_plan(state_office).budget == {
            "Staff & Consultants": "20-25%",
            "Media & Advertising": "30-40%",
            "Field Operations": "20-25%",
            "Fundraising Costs": "10-15%",
            "Other": "5-10%",
        }


class TestLocalPlan:
    def test_filing_and_sizes(self, local_office):
        plan = select_plan(local_office)
        assert [i.id for i in plan.filing[-2:]] == ["local", "signatures"]
        sizes = _group_sizes(plan)
        assert (sizes["fundraising"], sizes["team"], sizes["field_work"]) == (6, 4, 7)

    def test_budget(self, local_office):
        assert select_plan(local_office).budget["Literature & Signs"] == "30-35%"

    def test_target_id_reused_with_different_text(self, local_office, house_office):
        local_target = select_plan(local_office).fundraising[0]
        house_target = select_plan(house_office).fundraising[0]
        assert local_target.id == house_target.id == "target"
        assert local_target.task != house_target.task


class TestDeterminism:
    def test_same_office_equal_plans(self, house_office, state_office, local_office, bare_office):
        for office in (house_office, state_office, local_office, bare_office):
            assert select_plan(office) == select_plan(office)

    def test_fresh_plan_each_call(self, house_office):
        first = select_plan(house_office)
        first.filing.append(first.filing[0])
        assert len(select_plan(house_office).filing) == 5
