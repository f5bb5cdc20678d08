"""Shared fixtures and fakes for dronelink tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest

from dronelink.core.system import ActorSystem
from dronelink.errors import Direction
from dronelink.link import Address

PEER: Address = ("10.0.0.1", 8889)


class FakeLink:
    """In-memory ``DatagramLink`` whose sends and receives the test drives.

    With ``auto_complete`` every send succeeds immediately; otherwise each
    send waits until the test resolves it with ``complete_next``.
    """

    def __init__(self, remote_addr: Address = PEER, *, auto_complete: bool = False) -> None:
        self.remote_addr = remote_addr
        self.auto_complete = auto_complete
        self.sent: list[bytes] = []
        self.pending: asyncio.Queue[tuple[bytes, asyncio.Future[None]]] = asyncio.Queue()
        self.inbox: asyncio.Queue[tuple[bytes, Address] | Exception] = asyncio.Queue()
        self.in_flight = 0
        self.max_in_flight = 0
        self.receives_armed = 0
        self.closed = False

    async def send(self, payload: bytes) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.auto_complete:
                await asyncio.sleep(0)
            else:
                done: asyncio.Future[None] = asyncio.get_running_loop().create_future()
                await self.pending.put((payload, done))
                await done
            self.sent.append(payload)
        finally:
            self.in_flight -= 1

    async def receive(self) -> tuple[bytes, Address]:
        self.receives_armed += 1
        item = await self.inbox.get()
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

    def deliver(self, data: bytes, addr: Address | None = None) -> None:
        self.inbox.put_nowait((data, addr or self.remote_addr))

    def fail_receive(self, error: Exception) -> None:
        self.inbox.put_nowait(error)

    async def complete_next(self, error: Exception | None = None, *, timeout: float = 1.0) -> bytes:
        payload, done = await asyncio.wait_for(self.pending.get(), timeout=timeout)
        if error is None:
            done.set_result(None)
        else:
            done.set_exception(error)
        return payload


class Recorder:
    """Collects observer callbacks."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.errors: list[tuple[Direction, str]] = []

    def on_message(self, text: str) -> None:
        self.messages.append(text)

    def on_error(self, direction: Direction, message: str) -> None:
        self.errors.append((direction, message))


async def eventually(predicate: Callable[[], Any], *, timeout: float = 1.0) -> None:
    """Poll *predicate* until it is truthy or fail after *timeout* seconds."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
async def system() -> AsyncIterator[ActorSystem]:
    async with ActorSystem("test") as sys:
        yield sys


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
