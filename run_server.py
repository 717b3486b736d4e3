#!/usr/bin/env python3
"""
MCP chat bridge launcher
Connects the configured tool servers, then serves the WebSocket chat endpoint
"""
import os
import sys

# Fix encoding issues on servers with ASCII locale
os.environ.setdefault('PYTHONIOENCODING', 'utf-8')

import asyncio
import logging
from bridge.config import settings, load_provider_config, ConfigError, ProvidersConfig
from bridge.llm import get_client
from bridge.providers import connect_providers, close_providers
from bridge.ws_server import Bridge, start_websocket_server

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main():
    missing = settings.missing_completion_settings()
    if missing:
        raise SystemExit(f"FATAL: missing required environment variables: {', '.join(missing)}")

    try:
        provider_config = load_provider_config(settings.mcp_config_path)
    except ConfigError as e:
        logger.error(str(e))
        provider_config = ProvidersConfig()

    providers, errors = await connect_providers(provider_config, timeout=settings.provider_connect_timeout)
    for err in errors:
        logger.error(err)
    logger.info(f"Connected {len(providers)}/{len(provider_config.mcpServers)} tool servers")

    bridge = Bridge(
        client=get_client(),
        model=settings.openai_model,
        providers=providers,
        query_timeout=settings.query_timeout,
    )

    logger.info(f"Python {sys.version}, model={settings.openai_model}")
    try:
        await start_websocket_server(bridge)
    finally:
        await close_providers(providers)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down")
