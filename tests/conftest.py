"""Shared test fixtures and configuration.

Sets up fake environment variables so decide_to_run.config doesn't sys.exit(),
and provides common fixtures like temp DBs and sample offices.
"""

import os

# Patch env vars BEFORE any decide_to_run imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("ALLOWED_USER_IDS", "")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("OFFICE_BACKEND", "sqlite")
os.environ.setdefault("PROGRESS_BACKEND", "sqlite")

import pytest

from decide_to_run.data.models import Office


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_decide_to_run.db")


@pytest.fixture
def office_db(tmp_db_path):
    """Return an OfficeDB instance backed by a temp file."""
    from decide_to_run.data.db import OfficeDB
    return OfficeDB(db_path=tmp_db_path)


@pytest.fixture
def progress_db(tmp_path):
    """Return a ProgressDB instance backed by a temp file."""
    from decide_to_run.data.db import ProgressDB
    return ProgressDB(db_path=str(tmp_path / "test_progress.db"))


@pytest.fixture
def user_db(tmp_path):
    """Return a UserDB instance backed by a temp file."""
    from decide_to_run.data.db import UserDB
    return UserDB(db_path=str(tmp_path / "test_users.db"))


@pytest.fixture
def house_office():
    """A federal House seat."""
    return Office(
        id="ca-12",
        title="U.S. House - California District 12",
        state="CA",
        district="12",
        office_type="house",
        level="federal",
        filing_deadline="2026-06-01",
        estimated_cost="$800,000 - $2,500,000",
        min_age=25,
        incumbent="Nancy Pelosi",
    )


@pytest.fixture
def state_office():
    """A state legislative seat."""
    return Office(
        id="ca-sa-17",
        title="California State Assembly District 17",
        state="CA",
        district="17",
        office_type="stateHouse",
        level="state",
        filing_deadline="2026-03-06",
        estimated_cost="$25,000 - $400,000",
        min_age=18,
    )


@pytest.fixture
def local_office():
    """A city council seat."""
    return Office(
        id="sf-council-5",
        title="San Francisco Board of Supervisors District 5",
        state="CA",
        district="5",
        office_type="cityCouncil",
        level="local",
        filing_deadline="2026-08-07",
        estimated_cost="$15,000 - $50,000",
        min_age=18,
    )


@pytest.fixture
def bare_office():
    """An office with no type, level or cost — classifies as fallback."""
    return Office(id="x-1", title="Mystery Office", state="CA")
