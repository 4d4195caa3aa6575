"""Tests for decide_to_run.core.progress — toggles, statistics and the store."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from decide_to_run.core.plan_templates import select_plan
from decide_to_run.core.progress import (
    PlanProgressStore,
    compute_statistics,
    is_done,
    normalize_progress,
    toggle,
)
from decide_to_run.data.models import ChecklistItem, Plan
from decide_to_run.ports.progress_port import ProgressStoreError


class TestToggle:
    def test_checks_absent_item(self):
        assert toggle({}, "research") == {"research": True}

    def test_unchecks_checked_item(self):
        assert toggle({"research": True}, "research") == {"research": False}

    def test_does_not_mutate_input(self):
        progress = {"bank": True}
        toggle(progress, "research")
        assert progress == {"bank": True}

    def test_leaves_other_keys_alone(self):
        assert toggle({"bank": False, "org": True}, "research") == {
            "bank": False, "org": True, "research": True,
        }

    def test_twice_restores_start(self):
        for start in (
            {"bank": True},
            {"research": True, "bank": True},
            {"research": False, "bank": False},
        ):
            assert toggle(toggle(start, "research"), "research") == start

    def test_twice_from_absent_reads_unchecked(self):
        result = toggle(toggle({}, "research"), "research")
        assert not is_done(result, "research")

    def test_false_flag_treated_as_unchecked(self):
        assert toggle({"research": False}, "research") == {"research": True}

    def test_none_progress(self):
        assert toggle(None, "x") == {"x": True}


class TestHelpers:
    def test_normalize_keeps_booleans_only(self):
        assert normalize_progress({"a": True, "b": False, "c": "yes", "d": 1}) == {
            "a": True, "b": False,
        }

    def test_normalize_none(self):
        assert normalize_progress(None) == {}

    def test_is_done(self):
        assert is_done({"a": True}, "a")
        assert not is_done({"a": False}, "a")
        assert not is_done(None, "a")
        assert not is_done({}, "a")


class TestComputeStatistics:
    def test_federal_house_one_done(self, house_office):
        plan = select_plan(house_office)
        stats = compute_statistics(plan, toggle({}, "research"))
        assert (stats.completed, stats.total, stats.percentage) == (1, 35, 3)

    def test_fallback_empty_progress(self, bare_office):
        stats = compute_statistics(select_plan(bare_office), {})
        assert (stats.completed, stats.total, stats.percentage) == (0, 14, 0)

    def test_empty_plan(self):
        stats = compute_statistics(Plan(), {"a": True})
        assert (stats.completed, stats.total, stats.percentage) == (0, 0, 0)

    def test_rounds_half_up(self):
        items = [ChecklistItem(id=str(i), task=str(i), priority="high") for i in range(8)]
        plan = Plan(filing=items)
        # 1/8 = 12.5% -> 13
        assert compute_statistics(plan, {"0": True}).percentage == 13

    def test_all_done(self, local_office):
        plan = select_plan(local_office)
        progress = {item.id: True for item in plan.all_items()}
        stats = compute_statistics(plan, progress)
        assert stats.completed == stats.total
        assert stats.percentage == 100

    def test_ignores_ids_not_in_plan(self, bare_office):
        stats = compute_statistics(select_plan(bare_office), {"not-an-item": True})
        assert stats.completed == 0


class TestPlanProgressStoreLoad:
    @pytest.mark.asyncio
    async def test_no_user_returns_none_without_calling_port(self):
        port = AsyncMock()
        store = PlanProgressStore(port)
        assert await store.load(None, "ca-12") is None
        port.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_nothing_saved_returns_none(self):
        port = AsyncMock()
        port.get.return_value = None
        assert await PlanProgressStore(port).load(1, "ca-12") is None

    @pytest.mark.asyncio
    async def test_returns_normalized_progress(self):
        port = AsyncMock()
        port.get.return_value = {"research": True, "bank": False, "org": "yes"}
        assert await PlanProgressStore(port).load(1, "ca-12") == {"research": True, "bank": False}
        port.get.assert_awaited_once_with(1, "ca-12")

    @pytest.mark.asyncio
    async def test_backend_error_returns_none(self):
        port = AsyncMock()
        port.get.side_effect = ProgressStoreError("down")
        assert await PlanProgressStore(port).load(1, "ca-12") is None


class TestPlanProgressStorePersist:
    @pytest.mark.asyncio
    async def test_success(self):
        port = AsyncMock()
        ok = await PlanProgressStore(port).persist(1, "ca-12", {"research": True})
        assert ok is True
        port.put.assert_awaited_once_with(1, "ca-12", {"research": True})

    @pytest.mark.asyncio
    async def test_no_user_skips(self):
        port = AsyncMock()
        assert await PlanProgressStore(port).persist(None, "ca-12", {"a": True}) is False
        port.put.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_returns_false(self):
        port = AsyncMock()
        port.put.side_effect = ProgressStoreError("timeout")
        assert await PlanProgressStore(port).persist(1, "ca-12", {"a": True}) is False

    @pytest.mark.asyncio
    async def test_schedule_and_drain(self):
        port = AsyncMock()
        store = PlanProgressStore(port)
        task = store.schedule_persist(1, "ca-12", {"research": True})
        assert isinstance(task, asyncio.Task)
        await store.drain()
        assert task.result() is True
        port.put.assert_awaited_once_with(1, "ca-12", {"research": True})

    @pytest.mark.asyncio
    async def test_schedule_without_user(self):
        port = AsyncMock()
        store = PlanProgressStore(port)
        assert store.schedule_persist(None, "ca-12", {"a": True}) is None
        await store.drain()
        port.put.assert_not_called()

    @pytest.mark.asyncio
    async def test_scheduled_failure_is_absorbed(self):
        port = AsyncMock()
        port.put.side_effect = RuntimeError("boom")
        store = PlanProgressStore(port)
        task = store.schedule_persist(1, "ca-12", {"a": True})
        await store.drain()
        assert task.result() is False
