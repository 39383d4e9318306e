from __future__ import annotations

import asyncio
from typing import Callable, List

import pytest

from tango_rpc import BroadcastChannel, Client, Server


class MyApi:
    def __init__(self) -> None:
        self.listeners: List[Callable[[str], None]] = []

    async def add(self, a, b):
        return a + b

    async def greet(self, name: str) -> str:
        return f"Hello, {name}!"

    async def process_items(self, items, callback) -> None:
        for item in items:
            callback(item.upper())

    async def trigger_two_callbacks(self, echo1, echo2, callback1, callback2) -> None:
        callback1(echo1)
        callback2(echo2)

    async def subscribe_to_events(self, callback) -> None:
        self.listeners.append(callback)

    async def trigger_event(self, event: str) -> None:
        for listener in self.listeners:
            listener(event)

    async def error_prone(self) -> None:
        raise RuntimeError("Something went wrong!")

    async def slow_echo(self, delay: float, value):
        await asyncio.sleep(delay)
        return value

    def sync_multiply(self, a, b):
        return a * b

    def unencodable(self):
        return object()

    def _secret(self):
        return "hidden"

    version = "1.0"


@pytest.fixture
def channel() -> BroadcastChannel:
    return BroadcastChannel(record=True)


@pytest.fixture
def api() -> MyApi:
    return MyApi()


@pytest.fixture
def server(channel: BroadcastChannel, api: MyApi):
    srv = Server(channel, api)
    yield srv
    srv.cleanup()


@pytest.fixture
def client(channel: BroadcastChannel, server: Server):
    cl = Client(channel)
    yield cl
    cl.cleanup()
