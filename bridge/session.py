"""Session state for one WebSocket connection."""
import time
import uuid

from .conversation import Conversation


class Session:
    """Per-connection state: id, conversation history, query count."""

    def __init__(self, remote: str = ""):
        self.remote = remote
        self.session_id = str(uuid.uuid4())[:8]
        self.conversation = Conversation()
        self.queries = 0
        self.connected_at = time.monotonic()

    def duration_seconds(self) -> float:
        """Seconds since the connection was opened."""
        return time.monotonic() - self.connected_at
