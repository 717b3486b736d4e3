"""Conversation state — ordered chat turns carried across queries on one connection."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"


@dataclass(frozen=True)
class ToolCallRequest:
    id: str
    tool_name: str
    raw_arguments: str = ""

    def to_message(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.tool_name, "arguments": self.raw_arguments},
        }


@dataclass(frozen=True)
class ToolCallResult:
    tool_call_id: str
    content: str


@dataclass(frozen=True)
class ConversationTurn:
    role: str  # "user" | "assistant" | "tool"
    content: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    tool_call_id: str = ""

    @classmethod
    def user(cls, text: str) -> "ConversationTurn":
        return cls(role=ROLE_USER, content=text)

    @classmethod
    def assistant(cls, text: str, tool_calls: Optional[List[ToolCallRequest]] = None) -> "ConversationTurn":
        return cls(role=ROLE_ASSISTANT, content=text, tool_calls=list(tool_calls or []))

    @classmethod
    def tool(cls, result: ToolCallResult) -> "ConversationTurn":
        return cls(role=ROLE_TOOL, content=result.content, tool_call_id=result.tool_call_id)

    def to_message(self) -> Dict[str, Any]:
        """Chat-completion message dict for this turn."""
        message: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.role == ROLE_ASSISTANT and self.tool_calls:
            message["tool_calls"] = [call.to_message() for call in self.tool_calls]
        if self.role == ROLE_TOOL:
            message["tool_call_id"] = self.tool_call_id
        return message


class Conversation:
    """Append-only turn history. No truncation: it grows for the connection's lifetime."""

    def __init__(self, turns: Optional[List[ConversationTurn]] = None):
        self._turns: List[ConversationTurn] = list(turns or [])

    def __len__(self) -> int:
        return len(self._turns)

    @property
    def turns(self) -> List[ConversationTurn]:
        return list(self._turns)

    def append(self, turn: ConversationTurn):
        self._turns.append(turn)

    def extend(self, turns: List[ConversationTurn]):
        self._turns.extend(turns)

    def messages(self) -> List[Dict[str, Any]]:
        return [turn.to_message() for turn in self._turns]

    def copy(self) -> "Conversation":
        return Conversation(self._turns)

    def stage(self) -> "StagedTurns":
        return StagedTurns(self)


class StagedTurns:
    """Turns produced by one query, held back until the query succeeds.

    messages() shows the committed history followed by the staged turns, which
    is what the completion API must see mid-query.
    """

    def __init__(self, conversation: Conversation):
        self._conversation = conversation
        self._pending: List[ConversationTurn] = []
        self.committed = False

    @property
    def pending(self) -> List[ConversationTurn]:
        return list(self._pending)

    def append(self, turn: ConversationTurn):
        if self.committed:
            raise RuntimeError("Staged turns already committed")
        self._pending.append(turn)

    def extend(self, turns: List[ConversationTurn]):
        for turn in turns:
            self.append(turn)

    def messages(self) -> List[Dict[str, Any]]:
        return self._conversation.messages() + [turn.to_message() for turn in self._pending]

    def commit(self):
        self._conversation.extend(self._pending)
        self.committed = True
        logger.debug(f"Committed {len(self._pending)} turns ({len(self._conversation)} total)")
