"""Unbounded actor mailbox."""

from __future__ import annotations

import asyncio


class Mailbox[M]:
    """Async FIFO of messages waiting for an actor's message loop.

    Examples
    --------
    >>> mb = Mailbox[str]()
    >>> mb.put("hello")
    >>> await mb.get()
    'hello'
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[M] = asyncio.Queue()

    def put(self, msg: M) -> None:
        self._queue.put_nowait(msg)

    async def get(self) -> M:
        """Dequeue the next message, waiting if the mailbox is empty."""
        return await self._queue.get()
