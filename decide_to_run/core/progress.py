"""
Decide to Run — Plan Progress.

Per-(user, office) checklist completion. Toggles are applied to the local
mapping immediately; persistence is an optimistic write-through that may
fail without ever rolling the toggle back.

A toggle flips exactly one key and leaves every other entry as it was, so
toggling an item twice restores its previous flag. Absent items read as
unchecked.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Mapping

from decide_to_run.data.models import Plan, PlanProgress, PlanStatistics

if TYPE_CHECKING:
    from decide_to_run.ports.progress_port import ProgressPort

logger = logging.getLogger(__name__)


def normalize_progress(raw: Mapping[str, Any] | None) -> PlanProgress:
    """Keep the boolean flags from a stored mapping; drop anything else."""
    if not raw:
        return {}
    return {str(item_id): done for item_id, done in raw.items() if isinstance(done, bool)}


def is_done(progress: Mapping[str, bool] | None, item_id: str) -> bool:
    return bool(progress) and progress.get(item_id) is True


def toggle(progress: Mapping[str, bool] | None, item_id: str) -> PlanProgress:
    """Return a copy of progress with item_id flipped. The input is not mutated."""
    new_progress = dict(progress or {})
    new_progress[item_id] = not is_done(progress, item_id)
    return new_progress


def compute_statistics(
    plan: Plan, progress: Mapping[str, bool] | None,
) -> PlanStatistics:
    """Count completed items across all seven groups.

    Items sharing an id inside one plan are completed together. Percentage
    rounds half up and is 0 for an empty plan.
    """
    items = plan.all_items()
    total = len(items)
    completed = sum(1 for item in items if is_done(progress, item.id))
    if total == 0:
        percentage = 0
    else:
        percentage = (200 * completed + total) // (2 * total)
    return PlanStatistics(completed=completed, total=total, percentage=percentage)


class PlanProgressStore:
    """Loads and persists progress through a ProgressPort.

    Every backend failure is logged and absorbed here; callers only ever see
    None from load() or False from persist().
    """

    def __init__(self, port: ProgressPort) -> None:
        self._port = port
        self._pending: set[asyncio.Task] = set()

    async def load(self, user_id: int | None, office_id: str) -> PlanProgress | None:
        """Fetch saved progress. None means "nothing saved" — render unchecked."""
        if user_id is None:
            return None
        try:
            raw = await self._port.get(user_id, office_id)
        except Exception as exc:
            logger.error(
                "Failed to load progress for user %s office %s: %s",
                user_id, office_id, exc,
            )
            return None
        if raw is None:
            return None
        return normalize_progress(raw)

    async def persist(
        self, user_id: int | None, office_id: str, progress: Mapping[str, bool],
    ) -> bool:
        """Best-effort write. Returns True on success, False otherwise."""
        if user_id is None:
            logger.debug("No authenticated user — skipping save for office %s", office_id)
            return False
        try:
            await self._port.put(user_id, office_id, normalize_progress(progress))
        except Exception as exc:
            logger.error(
                "Failed to save progress for user %s office %s: %s",
                user_id, office_id, exc,
            )
            return False
        logger.info(
            "Progress saved for user %s office %s (%d done)",
            user_id, office_id, sum(1 for done in progress.values() if done is True),
        )
        return True

    def schedule_persist(
        self, user_id: int | None, office_id: str, progress: Mapping[str, bool],
    ) -> asyncio.Task | None:
        """Fire-and-forget persist on the running loop. Never awaited by toggles."""
        if user_id is None:
            return None
        task = asyncio.create_task(
            self.persist(user_id, office_id, dict(progress)),
            name=f"persist-progress-{user_id}-{office_id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for all scheduled saves to finish (used on shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
