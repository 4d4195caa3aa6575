"""SQLite adapters — implement OfficePort and ProgressPort on the local DB.

The DB classes are synchronous; these wrappers give them the async port
shape and translate sqlite errors into port errors.
"""

from __future__ import annotations

import logging
import sqlite3

from decide_to_run.data.db import OfficeDB, ProgressDB
from decide_to_run.data.models import Office
from decide_to_run.ports.office_port import OfficeProviderError
from decide_to_run.ports.progress_port import ProgressStoreError

logger = logging.getLogger(__name__)


class SQLiteOfficeAdapter:
    """SQLite implementation of OfficePort."""

    def __init__(self, db: OfficeDB | None = None) -> None:
        self._db = db or OfficeDB()

    async def list_by_state(self, state: str) -> list[Office]:
        try:
            return self._db.list_by_state(state)
        except sqlite3.Error as exc:
            raise OfficeProviderError(f"Failed to list offices for {state}: {exc}") from exc

    async def get_office(self, office_id: str) -> Office | None:
        try:
            return self._db.get_office(office_id)
        except sqlite3.Error as exc:
            raise OfficeProviderError(f"Failed to fetch office {office_id}: {exc}") from exc

    async def list_saved(self, user_id: int) -> list[Office]:
        try:
            return self._db.list_saved(user_id)
        except sqlite3.Error as exc:
            raise OfficeProviderError(f"Failed to list saved offices: {exc}") from exc

    async def save_office(self, user_id: int, office_id: str) -> None:
        try:
            self._db.save_office(user_id, office_id)
        except sqlite3.Error as exc:
            raise OfficeProviderError(f"Failed to save office {office_id}: {exc}") from exc

    async def unsave_office(self, user_id: int, office_id: str) -> None:
        try:
            self._db.unsave_office(user_id, office_id)
        except sqlite3.Error as exc:
            raise OfficeProviderError(f"Failed to unsave office {office_id}: {exc}") from exc


class SQLiteProgressAdapter:
    """SQLite implementation of ProgressPort."""

    def __init__(self, db: ProgressDB | None = None) -> None:
        self._db = db or ProgressDB()

    async def get(self, user_id: int, office_id: str) -> dict[str, bool] | None:
        try:
            return self._db.get_progress(user_id, office_id)
        except (sqlite3.Error, ValueError) as exc:
            raise ProgressStoreError(f"Failed to read progress: {exc}") from exc

    async def put(
        self, user_id: int, office_id: str, progress: dict[str, bool]
    ) -> None:
        try:
            self._db.upsert_progress(user_id, office_id, progress)
        except sqlite3.Error as exc:
            raise ProgressStoreError(f"Failed to write progress: {exc}") from exc
