"""Hosted backend adapters — OfficePort and ProgressPort over PostgREST.

Talks to the hosted database's REST endpoint (/rest/v1/<table>) with httpx.
Progress rows are upserted on the (user_id, office_id) unique key, so
concurrent saves for the same pair resolve server-side as last write wins.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from decide_to_run.data.models import Office, coerce_office
from decide_to_run.ports.office_port import OfficeProviderError
from decide_to_run.ports.progress_port import ProgressStoreError

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 10.0


class _PostgrestClient:
    """Minimal PostgREST request helper shared by both adapters."""

    error_cls: type[Exception] = Exception

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        if not self._base_url or not self._api_key:
            raise self.error_cls("Hosted backend is not configured (SUPABASE_URL / SUPABASE_KEY)")

        url = f"{self._base_url}/rest/v1/{table}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(
                    method, url, params=params, json=json, headers=self._headers(prefer),
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise self.error_cls(f"{method} {table} failed: {exc}") from exc

        if not resp.content:
            return None
        return resp.json()


class SupabaseOfficeAdapter(_PostgrestClient):
    """Hosted-backend implementation of OfficePort."""

    error_cls = OfficeProviderError

    @staticmethod
    def _to_offices(rows: list[dict] | None) -> list[Office]:
        offices = (coerce_office(r) for r in rows or [] if r)
        return [o for o in offices if o is not None]

    async def list_by_state(self, state: str) -> list[Office]:
        rows = await self._request(
            "GET", "offices", params={"select": "*", "state": f"eq.{state}"},
        )
        offices = self._to_offices(rows)
        logger.info("Fetched %d offices for %s", len(offices), state)
        return offices

    async def get_office(self, office_id: str) -> Office | None:
        rows = await self._request(
            "GET", "offices",
            params={"select": "*", "id": f"eq.{office_id}", "limit": "1"},
        )
        offices = self._to_offices(rows)
        return offices[0] if offices else None

    async def list_saved(self, user_id: int) -> list[Office]:
        rows = await self._request(
            "GET", "saved_offices",
            params={"select": "office_id,offices(*)", "user_id": f"eq.{user_id}"},
        )
        return self._to_offices([row.get("offices") for row in rows or []])

    async def save_office(self, user_id: int, office_id: str) -> None:
        # Duplicate saves are ignored rather than rejected
        await self._request(
            "POST", "saved_offices",
            json={"user_id": user_id, "office_id": office_id},
            prefer="resolution=ignore-duplicates,return=minimal",
        )
        logger.info("Office %s saved for user %d", office_id, user_id)

    async def unsave_office(self, user_id: int, office_id: str) -> None:
        await self._request(
            "DELETE", "saved_offices",
            params={"user_id": f"eq.{user_id}", "office_id": f"eq.{office_id}"},
        )
        logger.info("Office %s unsaved for user %d", office_id, user_id)


class SupabaseProgressAdapter(_PostgrestClient):
    """Hosted-backend implementation of ProgressPort."""

    error_cls = ProgressStoreError

    async def get(self, user_id: int, office_id: str) -> dict[str, bool] | None:
        rows = await self._request(
            "GET", "campaign_plans",
            params={
                "select": "checkbox_states",
                "user_id": f"eq.{user_id}",
                "office_id": f"eq.{office_id}",
            },
        )
        if not rows:
            return None
        return rows[0].get("checkbox_states") or {}

    async def put(
        self, user_id: int, office_id: str, progress: dict[str, bool]
    ) -> None:
        await self._request(
            "POST", "campaign_plans",
            params={"on_conflict": "user_id,office_id"},
            json={
                "user_id": user_id,
                "office_id": office_id,
                "checkbox_states": progress,
            },
            prefer="resolution=merge-duplicates,return=minimal",
        )
