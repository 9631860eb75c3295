"""Shared fakes and fixtures."""

from itertools import count
from typing import Any, Dict, List, Optional

import pytest

from backend.lobby import SessionCoordinator
from lobbychat.store import MessageStore


class FakeWebSocket:
    def __init__(self, fail: bool = False) -> None:
        self.accepted = False
        self.fail = fail
        self.sent: List[Dict[str, Any]] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, payload: Dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)

    def events(self, event_type: str) -> List[Any]:
        return [frame["payload"] for frame in self.sent if frame["type"] == event_type]


class FakeProvider:
    def __init__(self, reply: Optional[str] = "Welcome, adventurer!", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[tuple] = []

    async def complete(self, credential: str, system_prompt: str, user_content: str) -> Optional[str]:
        self.calls.append((credential, system_prompt, user_content))
        if self.error is not None:
            raise self.error
        return self.reply


def counting_clock(start: int = 1_700_000_000_000):
    ticks = count(start)
    return lambda: next(ticks)


@pytest.fixture
def store():
    store = MessageStore()
    store.open()
    yield store
    store.close()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def coordinator(store, provider):
    return SessionCoordinator(store=store, provider=provider, clock=counting_clock())
