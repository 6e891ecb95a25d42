# tests/test_client.py
"""
Tests for the request gateway (kriptty.client).

Tests:
- URL joining and auth headers
- JSON bodies and query strings
- ApiError on non-2xx answers
- transport errors propagate untouched
"""

import httpx
import pytest

from kriptty.client import ApiError, KripttyClient

BOT = {"id": 1, "name": "BTC Grid", "lm": "n", "lwe": 2, "sm": "gs", "swe": 0.5}


class TestRequest:
    """Low-level request behaviour."""

    @pytest.mark.asyncio
    async def test_trailing_slash_is_not_doubled(self, api, client):
        api.add("GET", "/bots/1", {"data": BOT})
        await client.get_bot(1)
        assert str(api.last.url) == "https://api.test/v1/bots/1"

    @pytest.mark.asyncio
    async def test_auth_and_json_headers(self, api, client):
        api.add("GET", "/users", {"data": []})
        await client.list_users()
        headers = api.last.headers
        assert headers["authorization"] == "Bearer test-token"
        assert headers["accept"] == "application/json"
        assert headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self, api, client):
        api.add("POST", "/bots", {"data": BOT})
        await client.create_bot({"name": "BTC Grid", "lwe": 2})
        assert api.last.method == "POST"
        assert api.last_json() == {"name": "BTC Grid", "lwe": 2}

    @pytest.mark.asyncio
    async def test_get_sends_no_body(self, api, client):
        api.add("GET", "/bots/1", {"data": BOT})
        await client.get_bot(1)
        assert api.last.content == b""

    @pytest.mark.asyncio
    async def test_returns_decoded_json(self, api, client):
        api.add("GET", "/anything", {"data": {"x": 1}})
        assert await client.request("/anything") == {"data": {"x": 1}}


class TestApiError:
    """Non-2xx answers become ApiError."""

    @pytest.mark.asyncio
    async def test_404_carries_status_and_body(self, api, client):
        api.add("GET", "/bots/999", status=404, text='{"message":"No query results"}')
        with pytest.raises(ApiError) as exc_info:
            await client.get_bot(999)

        error = exc_info.value
        assert error.status == 404
        assert error.status_text == "Not Found"
        assert error.message == 'API request failed: 404 Not Found. {"message":"No query results"}'

    @pytest.mark.asyncio
    async def test_500_is_an_api_error_too(self, api, client):
        api.add("GET", "/users", status=500, text="boom")
        with pytest.raises(ApiError) as exc_info:
            await client.list_users()
        assert exc_info.value.status == 500
        assert exc_info.value.message.endswith(". boom")

    def test_default_message(self):
        error = ApiError(418, "I'm a teapot")
        assert error.message == "API Error: 418 I'm a teapot"
        assert str(error) == error.message


class TestTransportErrors:
    """Failures below HTTP are never turned into ApiError."""

    @pytest.mark.asyncio
    async def test_connect_error_propagates(self, settings):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = KripttyClient(settings, transport=httpx.MockTransport(refuse))
        with pytest.raises(httpx.ConnectError):
            await client.list_users()


class TestQueryParameters:
    """Optional filters are left out of the query string."""

    @pytest.mark.asyncio
    async def test_list_bots_only_sends_given_filter(self, api, client):
        api.add("GET", "/bots", {"data": []})
        await client.list_bots(exchange_id=4)
        assert dict(api.last.url.params) == {"exchange_id": "4"}

    @pytest.mark.asyncio
    async def test_list_trades_drops_empty_strings(self, api, client):
        api.add("GET", "/trades", {"data": [], "meta": {"total": 0}})
        await client.list_trades(3, symbol="BTCUSDT", from_date="", per_page=50, sort_order="asc")
        assert dict(api.last.url.params) == {
            "exchange_id": "3",
            "symbol": "BTCUSDT",
            "per_page": "50",
            "sort_order": "asc",
        }

    @pytest.mark.asyncio
    async def test_list_exchanges_filters_by_user(self, api, client):
        api.add("GET", "/exchanges", {"data": []})
        await client.list_exchanges(7)
        assert dict(api.last.url.params) == {"user_id": "7"}
