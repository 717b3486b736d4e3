"""Query pipeline — one user message through registry → completion → tools → completion.

At most two completion calls happen per tool-calling choice: the first with
tool schemas attached, the follow-up without, so tools are used for one round
only. Turns produced by a query are staged and committed to the conversation
only once every network call has succeeded.
"""
import asyncio
import logging
import time
from typing import List, Optional, Sequence

from openai import AsyncOpenAI

from .conversation import Conversation, ConversationTurn, StagedTurns
from .llm import complete
from .tools import build_registry, dispatch_tool_calls
from .tools.registry import ToolSource

logger = logging.getLogger(__name__)


async def process_query(
    user_input: str,
    conversation: Conversation,
    providers: Sequence[ToolSource],
    client: AsyncOpenAI,
    model: str,
    timeout: Optional[float] = None,
    session_id: str = "-",
) -> str:
    """Answer one user message and record the exchange in `conversation`.

    Raises whatever the completion API raises, or asyncio.TimeoutError when the
    whole query exceeds `timeout`; in both cases `conversation` is unchanged.
    """
    staged = conversation.stage()
    t0 = time.monotonic()

    run = _run_query(user_input, staged, providers, client, model, session_id)
    if timeout:
        reply = await asyncio.wait_for(run, timeout=timeout)
    else:
        reply = await run

    staged.commit()
    logger.info(f"[{session_id}] Query done: {len(staged.pending)} new turns ({time.monotonic() - t0:.1f}s)")
    return reply


async def _run_query(
    user_input: str,
    staged: StagedTurns,
    providers: Sequence[ToolSource],
    client: AsyncOpenAI,
    model: str,
    session_id: str,
) -> str:
    # Tools are re-listed on every query
    registry = await build_registry(providers)

    staged.append(ConversationTurn.user(user_input))

    choices = await complete(client, model, staged.messages(), tools=registry.schemas())

    final_text: List[str] = []

    for choice in choices:
        # Content and tool calls are normally exclusive; direct text wins
        if choice.content:
            final_text.append(choice.content)
            continue
        if not choice.tool_calls:
            continue

        logger.info(f"[{session_id}] Model requested {len(choice.tool_calls)} tool calls: "
                    f"{', '.join(call.tool_name for call in choice.tool_calls)}")
        results = await dispatch_tool_calls(choice.tool_calls, registry)

        # Every tool_call id on the assistant turn needs a matching tool turn
        answered = {result.tool_call_id for result in results}
        calls = [call for call in choice.tool_calls if call.id in answered]
        staged.append(ConversationTurn.assistant("", tool_calls=calls))
        staged.extend([ConversationTurn.tool(result) for result in results])

        next_choices = await complete(client, model, staged.messages())
        for next_choice in next_choices:
            if next_choice.content:
                final_text.append(next_choice.content)

    response = "\n".join(final_text)
    staged.append(ConversationTurn.assistant(response))
    return response
