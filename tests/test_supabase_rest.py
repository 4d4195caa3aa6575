"""Tests for decide_to_run.adapters.supabase_rest — hosted backend over PostgREST."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from decide_to_run.adapters.supabase_rest import SupabaseOfficeAdapter, SupabaseProgressAdapter
from decide_to_run.ports.office_port import OfficeProviderError
from decide_to_run.ports.progress_port import ProgressStoreError

_CLIENT = "decide_to_run.adapters.supabase_rest.httpx.AsyncClient"
_BASE = "https://example.supabase.co"


def _mock_client(payload=None, error=None):
    mock_resp = MagicMock()
    mock_resp.content = b"" if payload is None else json.dumps(payload).encode()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    if error is not None:
        mock_client.request = AsyncMock(side_effect=error)
    else:
        mock_client.request = AsyncMock(return_value=mock_resp)
    return mock_client


class TestSupabaseOfficeAdapter:
    @pytest.mark.asyncio
    async def test_list_by_state(self):
        client = _mock_client([
            {"id": 12, "title": "House 12", "state": "CA", "min_age": "25", "created_at": "x"},
            {"title": "no id"},
        ])
        adapter = SupabaseOfficeAdapter(_BASE + "/", "anon-key")

        with patch(_CLIENT, return_value=client):
            offices = await adapter.list_by_state("CA")

        assert [o.id for o in offices] == ["12"]
        assert offices[0].min_age == 25
        method, url = client.request.call_args.args
        assert (method, url) == ("GET", f"{_BASE}/rest/v1/offices")
        kwargs = client.request.call_args.kwargs
        assert kwargs["params"] == {"select": "*", "state": "eq.CA"}
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["headers"]["Authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_get_office_missing(self):
        with patch(_CLIENT, return_value=_mock_client([])):
            assert await SupabaseOfficeAdapter(_BASE, "k").get_office("nope") is None

    @pytest.mark.asyncio
    async def test_list_saved_unwraps_embedded_office(self):
        client = _mock_client([
            {"office_id": "a", "offices": {"id": "a", "title": "A", "state": "CA"}},
            {"office_id": "gone", "offices": None},
        ])
        with patch(_CLIENT, return_value=client):
            offices = await SupabaseOfficeAdapter(_BASE, "k").list_saved(7)
        assert [o.id for o in offices] == ["a"]
        assert client.request.call_args.kwargs["params"]["user_id"] == "eq.7"

    @pytest.mark.asyncio
    async def test_save_ignores_duplicates(self):
        client = _mock_client()
        with patch(_CLIENT, return_value=client):
            await SupabaseOfficeAdapter(_BASE, "k").save_office(7, "a")
        kwargs = client.request.call_args.kwargs
        assert kwargs["json"] == {"user_id": 7, "office_id": "a"}
        assert kwargs["headers"]["Prefer"] == "resolution=ignore-duplicates,return=minimal"

    @pytest.mark.asyncio
    async def test_http_error_wrapped(self):
        client = _mock_client(error=httpx.ConnectError("refused"))
        with patch(_CLIENT, return_value=client):
            with pytest.raises(OfficeProviderError, match="refused"):
                await SupabaseOfficeAdapter(_BASE, "k").list_by_state("CA")

    @pytest.mark.asyncio
    async def test_not_configured(self):
        with pytest.raises(OfficeProviderError, match="not configured"):
            await SupabaseOfficeAdapter("", "").list_by_state("CA")


class TestSupabaseProgressAdapter:
    @pytest.mark.asyncio
    async def test_get_absent(self):
        with patch(_CLIENT, return_value=_mock_client([])):
            assert await SupabaseProgressAdapter(_BASE, "k").get(1, "ca-12") is None

    @pytest.mark.asyncio
    async def test_get_present(self):
        client = _mock_client([{"checkbox_states": {"research": True}}])
        with patch(_CLIENT, return_value=client):
            assert await SupabaseProgressAdapter(_BASE, "k").get(1, "ca-12") == {"research": True}
        params = client.request.call_args.kwargs["params"]
        assert params["user_id"] == "eq.1"
        assert params["office_id"] == "eq.ca-12"

    @pytest.mark.asyncio
    async def test_get_null_states_is_empty(self):
        with patch(_CLIENT, return_value=_mock_client([{"checkbox_states": None}])):
            assert await SupabaseProgressAdapter(_BASE, "k").get(1, "ca-12") == {}

    @pytest.mark.asyncio
    async def test_put_upserts(self):
        client = _mock_client()
        with patch(_CLIENT, return_value=client):
            await SupabaseProgressAdapter(_BASE, "k").put(1, "ca-12", {"research": True})
        method, url = client.request.call_args.args
        kwargs = client.request.call_args.kwargs
        assert (method, url) == ("POST", f"{_BASE}/rest/v1/campaign_plans")
        assert kwargs["params"] == {"on_conflict": "user_id,office_id"}
        assert kwargs["json"] == {
            "user_id": 1, "office_id": "ca-12", "checkbox_states": {"research": True},
        }
        assert kwargs["headers"]["Prefer"] == "resolution=merge-duplicates,return=minimal"

    @pytest.mark.asyncio
    async def test_status_error_wrapped(self):
        request = httpx.Request("POST", f"{_BASE}/rest/v1/campaign_plans")
        response = httpx.Response(401, request=request)
        client = _mock_client()
        client.request.return_value.raise_for_status.side_effect = httpx.HTTPStatusError(
            "401 Unauthorized", request=request, response=response,
        )
        with patch(_CLIENT, return_value=client):
            with pytest.raises(ProgressStoreError, match="401"):
                await SupabaseProgressAdapter(_BASE, "k").put(1, "ca-12", {})
