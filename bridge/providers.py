"""Tool providers — MCP client connections to external tool servers.

Each configured server is reached over one transport: a local process pipe
("stdio"), streamable HTTP ("http") or a server-push event stream ("sse").
Connections are opened once at startup and shared by every connection's queries.
"""
import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Any, Dict, List, Optional, Tuple

from mcp import ClientSession, StdioServerParameters
from mcp import types as mcp_types
from mcp.client.sse import sse_client
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client

from .config import ProviderConfig, ProvidersConfig
from .tools.registry import ToolDescriptor

logger = logging.getLogger(__name__)

CLIENT_VERSION = "1.0.0"


class ProviderError(Exception):
    """A tool provider could not be reached or reported a failed call."""


def render_content(content: List[Any]) -> str:
    """Flatten MCP content blocks to the text handed back to the model."""
    parts = []
    for block in content:
        if getattr(block, "type", None) == "text":
            parts.append(block.text)
        elif hasattr(block, "model_dump_json"):
            parts.append(block.model_dump_json(exclude_none=True))
        else:
            parts.append(str(block))
    return "\n".join(parts)


class ToolProvider:
    """Handle to one connected MCP server."""

    def __init__(self, name: str, config: ProviderConfig):
        self.name = name
        self.config = config
        self.server_info: Optional[mcp_types.Implementation] = None
        self._session: Optional[ClientSession] = None
        self._stack = AsyncExitStack()

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def connect(self):
        """Open the transport and run the MCP initialize handshake."""
        transport = self.config.transport
        try:
            if transport == "stdio":
                params = StdioServerParameters(command=self.config.command, args=self.config.args)
                read, write = await self._stack.enter_async_context(stdio_client(params))
            elif transport == "http":
                read, write, _ = await self._stack.enter_async_context(streamablehttp_client(self.config.command))
            elif transport == "sse":
                read, write = await self._stack.enter_async_context(sse_client(self.config.command))
            else:
                raise ProviderError(f"[{self.name}] unknown server type: {self.config.type}")

            session = await self._stack.enter_async_context(
                ClientSession(
                    read,
                    write,
                    client_info=mcp_types.Implementation(name=self.name, version=CLIENT_VERSION),
                )
            )
            init_result = await session.initialize()
        except ProviderError:
            await self._stack.aclose()
            raise
        except Exception as e:
            await self._stack.aclose()
            raise ProviderError(f"[{self.name}] connect failed: {e}") from e

        self._session = session
        self.server_info = init_result.serverInfo
        logger.info(f"[{self.name}] Connected to server: {init_result.serverInfo.name} {init_result.serverInfo.version}")

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise ProviderError(f"[{self.name}] not connected")
        return self._session

    async def list_tools(self) -> List[ToolDescriptor]:
        session = self._require_session()
        result = await session.list_tools()
        return [
            ToolDescriptor(
                name=tool.name,
                description=tool.description or "",
                input_schema=dict(tool.inputSchema or {}),
            )
            for tool in result.tools
        ]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> str:
        """Call a tool and return its textual content. Raises ProviderError on a tool error."""
        session = self._require_session()
        result = await session.call_tool(name, arguments)
        text = render_content(result.content)
        if result.isError:
            raise ProviderError(f"[{self.name}] tool {name} returned an error: {text}")
        return text

    async def close(self):
        self._session = None
        await self._stack.aclose()


async def connect_providers(
    config: ProvidersConfig, timeout: float = 30.0
) -> Tuple[List[ToolProvider], List[Exception]]:
    """Connect every configured server. Failures are collected, not raised.

    Runs in the caller's task: the MCP transports must be closed by the same task.
    """
    providers: List[ToolProvider] = []
    errors: List[Exception] = []
    pending: Optional[ToolProvider] = None

    try:
        async with asyncio.timeout(timeout):
            for name, entry in config.mcpServers.items():
                pending = ToolProvider(name, entry)
                logger.info(f"[{name}] Initializing client ({entry.type} {entry.command})...")
                try:
                    await pending.connect()
                except ProviderError as e:
                    errors.append(e)
                    pending = None
                    continue
                providers.append(pending)
                pending = None
    except TimeoutError:
        errors.append(ProviderError(f"Provider startup exceeded {timeout}s"))
        if pending is not None:
            await pending.close()

    return providers, errors


async def close_providers(providers: List[ToolProvider]):
    for provider in reversed(providers):
        try:
            await provider.close()
        except Exception as e:
            logger.warning(f"[{provider.name}] Close failed: {e}")
