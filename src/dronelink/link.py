"""Awaitable datagram link to a single fixed peer.

``UdpLink`` wraps an asyncio datagram endpoint so the connection actor can
await one receive or one send at a time and get the outcome back as a
value or a ``LinkError``.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import Protocol, runtime_checkable

from dronelink.errors import SocketReceiveError, SocketSendError

logger = logging.getLogger("dronelink.link")

type Address = tuple[str, int]

DEFAULT_BUFFER_SIZE = 1518
INBOX_LIMIT = 256


@runtime_checkable
class DatagramLink(Protocol):
    """What the connection actor needs from a datagram socket.

    Any object with these members satisfies the protocol; tests use an
    in-memory fake whose completions they control.
    """

    @property
    def remote_addr(self) -> Address: ...

    async def send(self, payload: bytes) -> None:
        """Write one datagram to the peer. Raises ``SocketSendError``."""
        ...

    async def receive(self) -> tuple[bytes, Address]:
        """Wait for one datagram. Raises ``SocketReceiveError``."""
        ...

    def close(self) -> None: ...


class _LinkProtocol(asyncio.DatagramProtocol):
    """Turns datagram callbacks into an awaitable inbox.

    Datagrams that arrive while the receive side is halted (after it
    reported an error, until the next receive) are dropped, and the inbox
    holds at most ``INBOX_LIMIT`` unread items.
    """

    def __init__(self) -> None:
        self.transport: asyncio.DatagramTransport | None = None
        self._inbox: asyncio.Queue[tuple[bytes, Address] | Exception] = asyncio.Queue(INBOX_LIMIT)
        self._writable = asyncio.Event()
        self._writable.set()
        self._sending = False
        self._flushing = False
        self._halted = False
        self._send_error: Exception | None = None
        self._lost: Exception | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: Address) -> None:
        if self._halted:
            logger.debug("Dropping %d bytes from %s:%d, not receiving", len(data), *addr)
            return
        self._put((data, addr))

    def error_received(self, exc: Exception) -> None:
        # A failing sendto() is reported here synchronously, while the send
        # is still on the stack. A datagram that was buffered and fails on a
        # later flush is reported from the writer callback instead.
        if self._sending:
            self._send_error = exc
        elif self._flushing:
            self._flushing = self._buffered()
            logger.warning("Buffered send failed: %s", exc)
        else:
            self._put(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self._lost = exc or ConnectionAbortedError("link closed")
        self._halted = False
        self._put(self._lost)
        self._writable.set()

    def pause_writing(self) -> None:
        self._writable.clear()

    def resume_writing(self) -> None:
        self._writable.set()

    def _put(self, item: tuple[bytes, Address] | Exception) -> None:
        try:
            self._inbox.put_nowait(item)
        except asyncio.QueueFull:
            logger.debug("Inbox full, dropping %r", item)

    def _buffered(self) -> bool:
        return self.transport is not None and self.transport.get_write_buffer_size() > 0

    async def next_item(self) -> tuple[bytes, Address] | Exception:
        self._halted = False
        if self._lost is not None and self._inbox.empty():
            return self._lost
        item = await self._inbox.get()
        if isinstance(item, Exception):
            self._halted = self._lost is None
        return item

    async def wait_writable(self) -> None:
        await self._writable.wait()

    def begin_send(self) -> None:
        self._sending = True
        self._send_error = None

    def end_send(self) -> Exception | None:
        self._sending = False
        self._flushing = self._buffered()
        error, self._send_error = self._send_error, None
        return error


class UdpLink:
    """A UDP socket bound locally and aimed at one remote address.

    Use ``UdpLink.open`` to create one; the remote host is resolved once,
    up front, so sends never block on name resolution.
    """

    def __init__(
        self,
        transport: asyncio.DatagramTransport,
        protocol: _LinkProtocol,
        remote_addr: Address,
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        self._transport = transport
        self._protocol = protocol
        self._remote_addr = remote_addr
        self._buffer_size = buffer_size

    @classmethod
    async def open(
        cls,
        local_addr: Address,
        remote_addr: Address,
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> UdpLink:
        loop = asyncio.get_running_loop()
        infos = await loop.getaddrinfo(
            remote_addr[0], remote_addr[1], family=socket.AF_INET, type=socket.SOCK_DGRAM
        )
        if not infos:
            msg = f"Cannot resolve {remote_addr[0]}"
            raise OSError(msg)
        resolved: Address = infos[0][4][:2]

        transport, protocol = await loop.create_datagram_endpoint(
            _LinkProtocol,
            local_addr=local_addr,
            family=socket.AF_INET,
        )
        link = cls(transport, protocol, resolved, buffer_size=buffer_size)
        logger.info(
            "Link open %s -> %s:%d", link.local_addr, resolved[0], resolved[1]
        )
        return link

    @property
    def remote_addr(self) -> Address:
        return self._remote_addr

    @property
    def local_addr(self) -> Address:
        return self._transport.get_extra_info("sockname")[:2]

    async def send(self, payload: bytes) -> None:
        if self._transport.is_closing():
            raise SocketSendError("link is closed")
        await self._protocol.wait_writable()

        self._protocol.begin_send()
        try:
            self._transport.sendto(payload, self._remote_addr)
        except OSError as exc:
            self._protocol.end_send()
            raise SocketSendError(str(exc), cause=exc) from exc
        error = self._protocol.end_send()
        if error is not None:
            raise SocketSendError(str(error), cause=error)

    async def receive(self) -> tuple[bytes, Address]:
        item = await self._protocol.next_item()
        if isinstance(item, Exception):
            raise SocketReceiveError(str(item), cause=item)
        data, addr = item
        # Anything past the buffer is cut off, as recvfrom() into a fixed buffer would.
        return data[: self._buffer_size], addr

    def close(self) -> None:
        if not self._transport.is_closing():
            self._transport.close()
