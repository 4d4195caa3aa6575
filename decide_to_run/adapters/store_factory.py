"""Storage adapter factory — creates the right adapters based on config."""

from __future__ import annotations

from decide_to_run.config import settings
from decide_to_run.ports.office_port import OfficePort
from decide_to_run.ports.progress_port import ProgressPort


def create_office_adapter() -> OfficePort:
    """Return the office provider matching the OFFICE_BACKEND setting."""
    backend = settings.OFFICE_BACKEND.lower()

    if backend == "sqlite":
        from decide_to_run.adapters.sqlite_store import SQLiteOfficeAdapter

        return SQLiteOfficeAdapter()

    if backend == "supabase":
        from decide_to_run.adapters.supabase_rest import SupabaseOfficeAdapter

        return SupabaseOfficeAdapter(
            base_url=settings.SUPABASE_URL,
            api_key=settings.SUPABASE_KEY,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown OFFICE_BACKEND: {backend!r}")


def create_progress_adapter() -> ProgressPort:
    """Return the progress store matching the PROGRESS_BACKEND setting."""
    backend = settings.PROGRESS_BACKEND.lower()

    if backend == "sqlite":
        from decide_to_run.adapters.sqlite_store import SQLiteProgressAdapter

        return SQLiteProgressAdapter()

    if backend == "supabase":
        from decide_to_run.adapters.supabase_rest import SupabaseProgressAdapter

        return SupabaseProgressAdapter(
            base_url=settings.SUPABASE_URL,
            api_key=settings.SUPABASE_KEY,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown PROGRESS_BACKEND: {backend!r}")
