"""Progress port — abstract interface for persisting checklist progress.

Core modules depend on this protocol, never on a specific backend.
Records are keyed uniquely by the (user_id, office_id) pair.
"""

from __future__ import annotations

from typing import Protocol


class ProgressStoreError(Exception):
    """Raised when any progress backend operation fails."""


class ProgressPort(Protocol):
    """Abstract progress persistence used by the plan-progress store."""

    async def get(self, user_id: int, office_id: str) -> dict[str, bool] | None: ...

    async def put(
        self, user_id: int, office_id: str, progress: dict[str, bool]
    ) -> None: ...
