"""Tests for bridge/tools/registry.py — tool aggregation across providers."""
import pytest

from bridge.tools.registry import ToolDescriptor, ToolRegistry, build_registry

from stubs import StubProvider


class TestToolDescriptor:
    def test_to_openai(self):
        tool = ToolDescriptor(
            name="ip_location_query",
            description="Look up an IP",
            input_schema={"type": "object", "properties": {"ip": {"type": "string"}}, "required": ["ip"]},
        )
        schema = tool.to_openai()
        assert schema["type"] == "function"
        assert schema["function"]["name"] == "ip_location_query"
        assert schema["function"]["parameters"]["required"] == ["ip"]

    def test_empty_schema_defaults_to_object(self):
        schema = ToolDescriptor(name="ping").to_openai()
        assert schema["function"]["parameters"] == {"type": "object", "properties": {}}


class TestBuildRegistry:
    @pytest.mark.asyncio
    async def test_flattens_all_providers(self):
        a = StubProvider("a", tools={"one": "1", "two": "2"})
        b = StubProvider("b", tools={"three": "3"})

        registry = await build_registry([a, b])

        assert [t.name for t in registry.tools] == ["one", "two", "three"]
        assert registry.provider_for("three") is b
        assert len(registry.schemas()) == 3

    @pytest.mark.asyncio
    async def test_duplicate_name_last_wins(self):
        first = StubProvider("first", tools={"ping": "pong-1"})
        second = StubProvider("second", tools={"ping": "pong-2"})

        registry = await build_registry([first, second])

        assert registry.provider_for("ping") is second
        assert registry.names() == ["ping"]

    @pytest.mark.asyncio
    async def test_failing_provider_skipped(self):
        down = StubProvider("down", tools={"lost": "x"}, fail_list=True)
        up = StubProvider("up", tools={"kept": "y"})

        registry = await build_registry([down, up])

        assert registry.names() == ["kept"]
        assert registry.provider_for("lost") is None

    @pytest.mark.asyncio
    async def test_no_providers(self):
        registry = await build_registry([])
        assert len(registry) == 0
        assert registry.schemas() == []


class TestToolRegistry:
    def test_unknown_name(self):
        assert ToolRegistry().provider_for("nope") is None
