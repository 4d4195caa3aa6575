"""Office port — abstract interface for reading offices and saved offices.

Implementations coerce raw store records into Office models before
returning them, so callers never see loosely-typed rows.
"""

from __future__ import annotations

from typing import Protocol

from decide_to_run.data.models import Office


class OfficeProviderError(Exception):
    """Raised when any office provider operation fails."""


class OfficePort(Protocol):
    """Abstract office provider used by the bot and session effects."""

    async def list_by_state(self, state: str) -> list[Office]: ...

    async def get_office(self, office_id: str) -> Office | None: ...

    async def list_saved(self, user_id: int) -> list[Office]: ...

    async def save_office(self, user_id: int, office_id: str) -> None: ...

    async def unsave_office(self, user_id: int, office_id: str) -> None: ...
