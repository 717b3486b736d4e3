"""WebSocket server — connection lifecycle + sequential message handling.

Each inbound binary frame is a protobuf ChatMessage. Messages on one
connection are answered strictly one at a time, in arrival order.
"""
import asyncio
import functools
import logging
import time
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Optional, Sequence
from urllib.parse import urlsplit

from openai import AsyncOpenAI
from websockets.asyncio.server import ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from .config import settings
from .pipeline import process_query
from .protocol import ROLE_ASSISTANT, decode_message, encode_message
from .session import Session
from .tools.registry import ToolSource

logger = logging.getLogger(__name__)

WS_SEND_TIMEOUT = 5.0  # seconds


@dataclass
class Bridge:
    """What every connection shares: tool providers and the completion client."""
    client: AsyncOpenAI
    model: str
    providers: Sequence[ToolSource] = field(default_factory=list)
    query_timeout: Optional[float] = None


async def ws_send_safe(ws: ServerConnection, data, session: Session, label: str = "") -> bool:
    """Send data via WebSocket with timeout. Returns True on success."""
    try:
        await asyncio.wait_for(ws.send(data), timeout=WS_SEND_TIMEOUT)
        return True
    except asyncio.TimeoutError:
        logger.error(f"[{session.session_id}] ws.send() timed out ({WS_SEND_TIMEOUT}s) {label}")
        return False
    except ConnectionClosed as e:
        logger.warning(f"[{session.session_id}] ws.send() failed {label}: {type(e).__name__}: {e}")
        return False


async def handle_message(ws: ServerConnection, session: Session, bridge: Bridge, message) -> bool:
    """Answer one inbound frame. Returns True if a reply was sent."""
    sid = session.session_id

    if isinstance(message, str):
        logger.warning(f"[{sid}] Text frame dropped ({len(message)} chars), expected binary ChatMessage")
        return False

    msg = decode_message(message)
    if msg is None:
        logger.warning(f"[{sid}] Failed to unmarshal {len(message)} bytes, dropping")
        return False

    logger.info(f"[{sid}] Received ({msg.role or 'user'}): {msg.content[:200]!r}")

    t0 = time.monotonic()
    try:
        reply = await process_query(
            msg.content,
            session.conversation,
            bridge.providers,
            bridge.client,
            bridge.model,
            timeout=bridge.query_timeout,
            session_id=sid,
        )
    except asyncio.TimeoutError:
        logger.error(f"[{sid}] Query timed out after {bridge.query_timeout}s")
        return False
    except Exception as e:
        logger.error(f"[{sid}] Query failed: {type(e).__name__}: {e}")
        return False
    session.queries += 1

    logger.info(f"[{sid}] Reply ({time.monotonic() - t0:.1f}s): {reply[:200]!r}")
    return await ws_send_safe(ws, encode_message(ROLE_ASSISTANT, reply), session, "reply")


async def handle_client(ws: ServerConnection, bridge: Bridge):
    """Main WebSocket connection handler — message loop and cleanup."""
    session = Session(remote=str(ws.remote_address))
    logger.info(f"[{session.session_id}] New connection from {ws.remote_address}, path: {ws.request.path}")

    try:
        async for message in ws:
            await handle_message(ws, session, bridge, message)
    except ConnectionClosed:
        logger.info(f"[{session.session_id}] Client disconnected")
    finally:
        logger.info(
            f"[{session.session_id}] Session ended: {session.queries} queries, "
            f"{len(session.conversation)} turns, {session.duration_seconds():.0f}s"
        )


def check_path(connection: ServerConnection, request: Request) -> Optional[Response]:
    """Only the chat endpoint is served."""
    if urlsplit(request.path).path != settings.ws_path:
        return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")
    return None


async def start_websocket_server(bridge: Bridge, host: str = "", port: int = 0):
    """Start the WebSocket server and serve until cancelled."""
    host = host or settings.ws_host
    port = port or settings.ws_port
    logger.info(f"Starting WebSocket server on {host}:{port}")

    async with serve(
        functools.partial(handle_client, bridge=bridge),
        host,
        port,
        process_request=check_path,
    ):
        logger.info(f"WebSocket server listening on ws://{host}:{port}{settings.ws_path}")
        await asyncio.Future()
