"""Completion invoker — chat completion calls against an OpenAI-compatible API."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from .config import settings
from .conversation import ToolCallRequest

logger = logging.getLogger(__name__)


@dataclass
class CompletionChoice:
    """One candidate answer: direct text, tool calls, or (rarely) both."""
    content: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)


_client: Optional[AsyncOpenAI] = None


def get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url or None,
        )
    return _client


def _parse_choice(choice) -> CompletionChoice:
    message = choice.message
    calls = []
    for call in message.tool_calls or []:
        function = getattr(call, "function", None)
        if function is None:
            continue
        calls.append(ToolCallRequest(
            id=call.id,
            tool_name=function.name,
            raw_arguments=function.arguments or "",
        ))
    return CompletionChoice(content=message.content or "", tool_calls=calls)


async def complete(
    client: AsyncOpenAI,
    model: str,
    messages: List[Dict[str, Any]],
    tools: Optional[List[Dict[str, Any]]] = None,
) -> List[CompletionChoice]:
    """Send the history (and optionally tool schemas). API errors propagate to the caller."""
    params: Dict[str, Any] = {"model": model, "messages": messages}
    if tools:
        params["tools"] = tools

    response = await client.chat.completions.create(**params)

    choices = [_parse_choice(choice) for choice in response.choices or []]
    logger.info(
        f"Completion ({model}): {len(messages)} messages, {len(tools or [])} tools -> "
        f"{len(choices)} choices, {sum(len(c.tool_calls) for c in choices)} tool calls"
    )
    return choices
