"""
Decide to Run — Local Database.

SQLite storage for offices, saved offices, campaign-plan progress and bot
users. Used when the hosted backend isn't configured. Offices are loaded
with `python main.py import offices.json`.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any

from decide_to_run.data.models import Office, User, coerce_office

logger = logging.getLogger(__name__)

_OFFICE_COLUMNS = (
    "id", "title", "state", "district", "office_type", "level",
    "filing_deadline", "estimated_cost", "min_age", "incumbent",
    "next_election", "confidence",
)


class _SQLiteStore(ABC):
    """Shared connection handling for the table classes below."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from decide_to_run.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @abstractmethod
    def _init_db(self) -> None:
        """Create this store's tables; runs once per instance."""


class OfficeDB(_SQLiteStore):
    """SQLite-backed storage for offices and each user's saved offices."""

    def _init_db(self) -> None:
        """Create the offices tables if they don't exist, and migrate schema."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS offices (
                    id              TEXT PRIMARY KEY,
                    title           TEXT NOT NULL,
                    state           TEXT NOT NULL,
                    district        TEXT NOT NULL DEFAULT '',
                    office_type     TEXT,
                    level           TEXT,
                    filing_deadline TEXT,
                    estimated_cost  TEXT,
                    min_age         INTEGER
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS saved_offices (
                    user_id    INTEGER NOT NULL,
                    office_id  TEXT    NOT NULL,
                    created_at TEXT    NOT NULL,
                    PRIMARY KEY (user_id, office_id)
                )
            """)
            # Migrate existing DBs: add display columns if missing
            existing_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(offices)").fetchall()
            }
            for col in ("incumbent", "next_election", "confidence"):
                if col not in existing_cols:
                    conn.execute(f"ALTER TABLE offices ADD COLUMN {col} TEXT")
        logger.debug("Offices tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_office(row: sqlite3.Row) -> Office | None:
        return coerce_office(dict(row))

    def upsert_office(self, record: dict[str, Any]) -> Office | None:
        """Insert or replace an office from a raw record. Returns None if malformed."""
        office = coerce_office(record)
        if office is None:
            return None
        values = office.model_dump()
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT OR REPLACE INTO offices ({", ".join(_OFFICE_COLUMNS)})
                VALUES ({", ".join("?" for _ in _OFFICE_COLUMNS)})
                """,
                tuple(values[col] for col in _OFFICE_COLUMNS),
            )
        logger.info("Office upserted: %s '%s' (%s)", office.id, office.title, office.state)
        return office

    def get_office(self, office_id: str) -> Office | None:
        """Fetch a single office by ID."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM offices WHERE id = ?", (office_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_office(row)

    def list_by_state(self, state: str) -> list[Office]:
        """Return every office in a state, in insertion order."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM offices WHERE state = ? ORDER BY rowid",
                (state.strip().upper(),),
            ).fetchall()
        offices = (self._row_to_office(r) for r in rows)
        return [o for o in offices if o is not None]

    def save_office(self, user_id: int, office_id: str) -> bool:
        """Bookmark an office for a user. Saving twice is a no-op."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO saved_offices (user_id, office_id, created_at)
                VALUES (?, ?, ?)
                """,
                (user_id, office_id, datetime.now().isoformat()),
            )
        saved = cursor.rowcount > 0
        if saved:
            logger.info("Office %s saved for user %d", office_id, user_id)
        return saved

    def unsave_office(self, user_id: int, office_id: str) -> bool:
        """Remove a bookmark."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM saved_offices WHERE user_id = ? AND office_id = ?",
                (user_id, office_id),
            )
        removed = cursor.rowcount > 0
        if removed:
            logger.info("Office %s unsaved for user %d", office_id, user_id)
        return removed

    def list_saved(self, user_id: int) -> list[Office]:
        """Return a user's saved offices, oldest bookmark first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT o.* FROM saved_offices s
                JOIN offices o ON o.id = s.office_id
                WHERE s.user_id = ?
                ORDER BY s.created_at, s.rowid
                """,
                (user_id,),
            ).fetchall()
        offices = (self._row_to_office(r) for r in rows)
        return [o for o in offices if o is not None]

    def import_records(self, records: list[dict[str, Any]]) -> int:
        """Upsert a batch of raw office records. Returns how many were stored."""
        imported = sum(1 for r in records if self.upsert_office(r) is not None)
        skipped = len(records) - imported
        if skipped:
            logger.warning("Skipped %d malformed office records", skipped)
        return imported


class ProgressDB(_SQLiteStore):
    """SQLite-backed storage for checklist progress, one row per (user, office)."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS campaign_plans (
                    user_id         INTEGER NOT NULL,
                    office_id       TEXT    NOT NULL,
                    checkbox_states TEXT    NOT NULL DEFAULT '{}',
                    updated_at      TEXT    NOT NULL,
                    PRIMARY KEY (user_id, office_id)
                )
            """)
        logger.debug("Campaign plans table initialized at %s", self._db_path)

    def get_progress(self, user_id: int, office_id: str) -> dict[str, bool] | None:
        """Fetch saved checkbox states, or None if nothing was ever saved."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT checkbox_states FROM campaign_plans WHERE user_id = ? AND office_id = ?",
                (user_id, office_id),
            ).fetchone()
        if row is None:
            return None
        return json.loads(row["checkbox_states"])

    def upsert_progress(
        self, user_id: int, office_id: str, checkbox_states: dict[str, bool],
    ) -> None:
        """Insert or update the progress row for (user, office)."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO campaign_plans (user_id, office_id, checkbox_states, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (user_id, office_id) DO UPDATE SET
                    checkbox_states = excluded.checkbox_states,
                    updated_at      = excluded.updated_at
                """,
                (
                    user_id, office_id,
                    json.dumps(checkbox_states, sort_keys=True),
                    datetime.now().isoformat(),
                ),
            )
        logger.debug("Progress upserted for user %d office %s", user_id, office_id)


class UserDB(_SQLiteStore):
    """SQLite-backed storage for bot users who signed in."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    telegram_user_id INTEGER PRIMARY KEY,
                    display_name     TEXT NOT NULL,
                    created_at       TEXT NOT NULL
                )
            """)
        logger.debug("Users table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            telegram_user_id=row["telegram_user_id"],
            display_name=row["display_name"],
            created_at=row["created_at"],
        )

    def get_user(self, telegram_user_id: int) -> User | None:
        """Fetch a user by Telegram user ID."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE telegram_user_id = ?",
                (telegram_user_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_or_create_user(self, telegram_user_id: int, display_name: str) -> User:
        """Return the user record, registering it on first sign-in."""
        existing = self.get_user(telegram_user_id)
        if existing is not None:
            return existing

        now = datetime.now().isoformat()
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO users (telegram_user_id, display_name, created_at) VALUES (?, ?, ?)",
                (telegram_user_id, display_name, now),
            )
        logger.info("User registered: %d '%s'", telegram_user_id, display_name)
        return User(
            telegram_user_id=telegram_user_id,
            display_name=display_name,
            created_at=now,
        )
