"""Shared fixtures."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from bridge.conversation import Conversation
from bridge.session import Session

from stubs import StubProvider


@pytest.fixture
def conversation():
    return Conversation()


@pytest.fixture
def session():
    return Session("127.0.0.1:50000")


@pytest.fixture
def x_provider():
    """Provider exposing tool "X", which answers "4"."""
    return StubProvider("calc", tools={"X": "4"})


@pytest.fixture
def mock_ws():
    ws = MagicMock()
    ws.send = AsyncMock()
    ws.remote_address = ("127.0.0.1", 50000)
    ws.request.path = "/ws"
    return ws
