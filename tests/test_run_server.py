"""Tests for run_server.py — startup checks."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import run_server
from bridge.config import Settings


class TestStartup:
    @pytest.mark.asyncio
    async def test_missing_api_key_refuses_to_start(self):
        incomplete = Settings(openai_api_key="", openai_base_url="https://api.example.com/v1", openai_model="gpt-4o-mini")
        connect = AsyncMock(return_value=([], []))
        serve = AsyncMock()

        with patch.object(run_server, "settings", incomplete), \
                patch.object(run_server, "connect_providers", connect), \
                patch.object(run_server, "start_websocket_server", serve):
            with pytest.raises(SystemExit, match="OPENAI_API_KEY"):
                await run_server.main()

        connect.assert_not_awaited()
        serve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_serves_without_provider_config(self, tmp_path):
        complete = Settings(
            openai_api_key="sk-test",
            openai_base_url="https://api.example.com/v1",
            openai_model="gpt-4o-mini",
            mcp_config_path=str(tmp_path / "absent.json"),
        )
        connect = AsyncMock(return_value=([], []))
        serve = AsyncMock()
        close = AsyncMock()

        with patch.object(run_server, "settings", complete), \
                patch.object(run_server, "connect_providers", connect), \
                patch.object(run_server, "start_websocket_server", serve), \
                patch.object(run_server, "close_providers", close), \
                patch.object(run_server, "get_client", MagicMock()):
            await run_server.main()

        assert connect.await_args.args[0].mcpServers == {}
        bridge = serve.await_args.args[0]
        assert bridge.model == "gpt-4o-mini"
        assert bridge.providers == []
        close.assert_awaited_once_with([])
