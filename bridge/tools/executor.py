"""Tool executor — dispatches the model's tool calls to their providers."""
import json
import logging
import time
from typing import Any, Dict, List

from ..conversation import ToolCallRequest, ToolCallResult
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


def decode_arguments(raw: str) -> Dict[str, Any]:
    """Parse the model's JSON arguments. Anything but a JSON object becomes {}."""
    if not raw:
        return {}
    try:
        args = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Tool arguments are not valid JSON, using empty args: {raw[:200]!r}")
        return {}
    if not isinstance(args, dict):
        logger.warning(f"Tool arguments are not a JSON object, using empty args: {raw[:200]!r}")
        return {}
    return args


async def execute_tool(call: ToolCallRequest, registry: ToolRegistry):
    """Run one tool call. Returns a ToolCallResult, or None if the call was skipped."""
    args = decode_arguments(call.raw_arguments)

    provider = registry.provider_for(call.tool_name)
    if provider is None:
        logger.warning(f"Unknown tool: {call.tool_name} (call {call.id}), skipping")
        return None

    arg_str = ", ".join(f"{k}={v!r}" for k, v in args.items())
    logger.info(f"Executing tool: {provider.name}/{call.tool_name}({arg_str})")
    t0 = time.monotonic()

    try:
        content = await provider.call_tool(call.tool_name, args)
    except Exception as e:
        logger.error(f"Tool {call.tool_name} failed: {e}")
        return None

    logger.info(f"Tool {call.tool_name}: {time.monotonic() - t0:.1f}s -> {len(content)} chars")
    return ToolCallResult(tool_call_id=call.id, content=content)


async def dispatch_tool_calls(calls: List[ToolCallRequest], registry: ToolRegistry) -> List[ToolCallResult]:
    """Execute calls one after another; results keep the order of the requests."""
    results = []
    for call in calls:
        result = await execute_tool(call, registry)
        if result is not None:
            results.append(result)
    return results
