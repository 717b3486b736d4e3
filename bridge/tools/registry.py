"""Tool registry — aggregates tools from every provider for one query."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass
class ToolDescriptor:
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = field(default_factory=dict)

    def to_openai(self) -> Dict[str, Any]:
        """Function-tool schema for the chat completion API."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema or {"type": "object", "properties": {}},
            },
        }


class ToolSource(Protocol):
    name: str

    async def list_tools(self) -> List[ToolDescriptor]: ...

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> str: ...


class ToolRegistry:
    """Flattened tool list plus a name → provider lookup.

    Names are assumed unique across providers; when two providers expose the
    same name the one registered last wins.
    """

    def __init__(self):
        self.tools: List[ToolDescriptor] = []
        self._providers: Dict[str, ToolSource] = {}

    def register(self, tool: ToolDescriptor, provider: ToolSource):
        self.tools.append(tool)
        previous = self._providers.get(tool.name)
        if previous is not None and previous is not provider:
            logger.debug(f"Tool {tool.name}: {previous.name} overridden by {provider.name}")
        self._providers[tool.name] = provider

    def provider_for(self, name: str) -> Optional[ToolSource]:
        return self._providers.get(name)

    def names(self) -> List[str]:
        return sorted(self._providers)

    def schemas(self) -> List[Dict[str, Any]]:
        return [tool.to_openai() for tool in self.tools]

    def __len__(self) -> int:
        return len(self.tools)


async def build_registry(providers: Iterable[ToolSource]) -> ToolRegistry:
    """List tools from every provider. A provider that fails to list is skipped."""
    registry = ToolRegistry()
    for provider in providers:
        try:
            tools = await provider.list_tools()
        except Exception as e:
            logger.warning(f"[{provider.name}] Failed to list tools: {e}")
            continue
        for tool in tools:
            registry.register(tool, provider)
    logger.info(f"Tool registry: {len(registry)} tools ({', '.join(registry.names()) or 'none'})")
    return registry
