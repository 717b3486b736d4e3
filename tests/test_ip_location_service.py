"""Tests for services/ip_location_service.py — example MCP tool server."""
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from services.ip_location_service import IP_API_URL, ip_location_query, mcp


def _mock_http(response=None, error=None):
    client = MagicMock()
    client.get = AsyncMock(return_value=response, side_effect=error)
    client_cls = MagicMock()
    client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return client_cls, client


class TestIpLocationQuery:
    @pytest.mark.asyncio
    async def test_lookup(self):
        resp = MagicMock()
        resp.text = '{"status":"success","country":"United States","query":"8.8.8.8"}'
        client_cls, client = _mock_http(response=resp)

        with patch("services.ip_location_service.httpx.AsyncClient", client_cls):
            result = await ip_location_query("8.8.8.8")

        assert '"country":"United States"' in result
        client.get.assert_awaited_once_with(IP_API_URL + "8.8.8.8")

    @pytest.mark.asyncio
    async def test_ipv6_accepted(self):
        resp = MagicMock()
        resp.text = "{}"
        client_cls, client = _mock_http(response=resp)

        with patch("services.ip_location_service.httpx.AsyncClient", client_cls):
            await ip_location_query("2001:4860:4860::8888")

        client.get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_ip(self):
        client_cls, client = _mock_http()

        with patch("services.ip_location_service.httpx.AsyncClient", client_cls):
            with pytest.raises(ValueError, match="invalid IP address"):
                await ip_location_query("999.1.1.1")

        client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_failure(self):
        client_cls, _ = _mock_http(error=httpx.ConnectError("refused"))

        with patch("services.ip_location_service.httpx.AsyncClient", client_cls):
            with pytest.raises(RuntimeError, match="lookup failed"):
                await ip_location_query("1.1.1.1")


class TestServerTools:
    @pytest.mark.asyncio
    async def test_tool_registered(self):
        tools = await mcp.list_tools()
        assert [t.name for t in tools] == ["ip_location_query"]
        assert "ip" in tools[0].inputSchema["properties"]
        assert tools[0].inputSchema["required"] == ["ip"]
