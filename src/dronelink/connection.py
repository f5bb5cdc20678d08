"""Connection actor: the single-peer UDP command channel.

The actor owns one ``DatagramLink`` and one ``OutboundQueue`` and runs two
independent loops on them:

- the receive loop, armed at startup and re-armed after every datagram,
  stopping only when a receive fails;
- the drain chain, started by the was-empty handoff in ``Connection.send``
  and continued after each completed send for as long as the queue holds
  payloads.

Each awaited receive and send runs in a task owned by the actor cell.
Its outcome comes back through ``pipe_to_self`` as a message, so every
state transition happens inside the actor's message loop. At most one
send is in flight: the payload stays at the front of the queue until its
send completes, so a concurrent enqueue never sees an empty queue and
never starts a second chain.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from dronelink.core.behavior import Behavior
from dronelink.errors import Direction, LinkError
from dronelink.link import Address, DatagramLink, UdpLink
from dronelink.outbound import OutboundQueue

if TYPE_CHECKING:
    from dronelink.config import LinkConfig
    from dronelink.core.context import ActorContext
    from dronelink.core.ref import ActorRef
    from dronelink.core.system import ActorSystem

logger = logging.getLogger("dronelink.connection")

type MessageObserver = Callable[[str], None]
type ErrorObserver = Callable[[Direction, str], None]


# ============================================================================
# MESSAGES
# ============================================================================


@dataclass(frozen=True)
class StartReceiving:
    """Arm the receive loop. No-op while it is already listening."""


@dataclass(frozen=True)
class LinkStatus:
    """Snapshot of the connection's state and counters."""

    pending: int
    draining: bool
    listening: bool
    sent: int
    received: int
    send_errors: int
    receive_errors: int


@dataclass(frozen=True)
class GetStatus:
    reply_to: ActorRef[LinkStatus]


@dataclass(frozen=True)
class _Drain:
    pass


@dataclass(frozen=True)
class _Sent:
    pass


@dataclass(frozen=True)
class _SendFailed:
    error: Exception


@dataclass(frozen=True)
class _Received:
    data: bytes
    addr: Address


@dataclass(frozen=True)
class _ReceiveFailed:
    error: Exception


type ConnectionMsg = (
    StartReceiving | GetStatus | _Drain | _Sent | _SendFailed | _Received | _ReceiveFailed
)


# ============================================================================
# OBSERVERS
# ============================================================================


def log_message(text: str) -> None:
    logger.info("%s", text)


def log_error(direction: Direction, message: str) -> None:
    logger.error("error %s: %s", "sending" if direction is Direction.send else "receiving", message)


def _error_text(error: Exception) -> str:
    match error:
        case LinkError(message=message):
            return message
        case _:
            return str(error) or type(error).__name__


# ============================================================================
# BEHAVIOR
# ============================================================================


@dataclass(frozen=True)
class _State:
    draining: bool = False
    listening: bool = False
    sent: int = 0
    received: int = 0
    send_errors: int = 0
    receive_errors: int = 0


def connection_actor(
    link: DatagramLink,
    queue: OutboundQueue,
    *,
    on_message: MessageObserver = log_message,
    on_error: ErrorObserver = log_error,
    accept_any_source: bool = False,
    resume_on_send_error: bool = True,
) -> Behavior[ConnectionMsg]:
    """Create the connection actor behavior.

    Parameters
    ----------
    link : DatagramLink
        Open link to the peer. The actor closes it when it stops.
    queue : OutboundQueue
        Queue shared with the ``Connection`` handle that feeds it.
    on_message : MessageObserver
        Called with each inbound datagram decoded as UTF-8.
    on_error : ErrorObserver
        Called with the direction and text of each link failure.
    accept_any_source : bool
        When false, datagrams from hosts other than the peer are dropped.
    resume_on_send_error : bool
        When true, a failed send skips its payload and the chain moves on
        to the next one. When false the chain stops at the failure.
    """
    peer_host = link.remote_addr[0]

    def notify(ctx: ActorContext[ConnectionMsg], fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception:
            ctx.log.exception("Observer failed")

    def arm_receive(ctx: ActorContext[ConnectionMsg]) -> None:
        ctx.pipe_to_self(
            link.receive(),
            lambda result: _Received(*result),
            on_failure=_ReceiveFailed,
        )

    def drain_step(ctx: ActorContext[ConnectionMsg]) -> None:
        payload = queue.peek()
        ctx.pipe_to_self(
            link.send(payload),
            lambda _: _Sent(),
            on_failure=_SendFailed,
        )

    def continue_or_idle(ctx: ActorContext[ConnectionMsg], state: _State) -> _State:
        if queue.is_empty():
            return replace(state, draining=False)
        drain_step(ctx)
        return replace(state, draining=True)

    def active(state: _State) -> Behavior[ConnectionMsg]:
        async def receive(
            ctx: ActorContext[ConnectionMsg], msg: ConnectionMsg
        ) -> Behavior[ConnectionMsg]:
            match msg:
                case _Drain():
                    # A chain is already running; it will reach the new payload.
                    if state.draining or queue.is_empty():
                        return Behavior.same()
                    drain_step(ctx)
                    return active(replace(state, draining=True))

                case _Sent():
                    queue.dequeue()
                    return active(continue_or_idle(ctx, replace(state, sent=state.sent + 1)))

                case _SendFailed(error=error):
                    queue.dequeue()
                    notify(ctx, lambda: on_error(Direction.send, _error_text(error)))
                    failed = replace(state, send_errors=state.send_errors + 1)
                    if resume_on_send_error:
                        return active(continue_or_idle(ctx, failed))
                    return active(replace(failed, draining=False))

                case StartReceiving():
                    if state.listening:
                        return Behavior.same()
                    arm_receive(ctx)
                    return active(replace(state, listening=True))

                case _Received(data=data, addr=addr):
                    arm_receive(ctx)
                    if not accept_any_source and addr[0] != peer_host:
                        ctx.log.debug("Dropping %d bytes from %s:%d", len(data), *addr)
                        return Behavior.same()
                    text = data.decode("utf-8", errors="replace")
                    notify(ctx, lambda: on_message(text))
                    return active(replace(state, received=state.received + 1))

                case _ReceiveFailed(error=error):
                    notify(ctx, lambda: on_error(Direction.receive, _error_text(error)))
                    return active(
                        replace(
                            state,
                            listening=False,
                            receive_errors=state.receive_errors + 1,
                        )
                    )

                case GetStatus(reply_to=reply_to):
                    reply_to.tell(
                        LinkStatus(
                            pending=len(queue),
                            draining=state.draining,
                            listening=state.listening,
                            sent=state.sent,
                            received=state.received,
                            send_errors=state.send_errors,
                            receive_errors=state.receive_errors,
                        )
                    )
                    return Behavior.same()

            return Behavior.unhandled()

        return Behavior.receive(receive)

    async def setup(ctx: ActorContext[ConnectionMsg]) -> Behavior[ConnectionMsg]:
        async def close_link() -> None:
            link.close()

        ctx.on_stop(close_link)
        arm_receive(ctx)
        return active(_State(listening=True))

    return Behavior.setup(setup)


# ============================================================================
# HANDLE
# ============================================================================


class Connection:
    """Driver-facing handle to a running connection actor.

    ``send`` appends to the outbound queue and, when it finds the queue
    empty, kicks the actor to start a drain chain. It never blocks and
    never raises for link failures; those go to the error observer. It may
    be called from any thread.
    """

    def __init__(
        self,
        system: ActorSystem,
        ref: ActorRef[ConnectionMsg],
        queue: OutboundQueue,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._system = system
        self._ref = ref
        self._queue = queue
        self._loop = loop

    @property
    def ref(self) -> ActorRef[ConnectionMsg]:
        return self._ref

    @property
    def pending(self) -> int:
        return len(self._queue)

    def send(self, text: str) -> None:
        if self._queue.enqueue(text.encode("utf-8", errors="replace")):
            self._tell(_Drain())

    def start_receiving(self) -> None:
        self._tell(StartReceiving())

    async def status(self, *, timeout: float = 1.0) -> LinkStatus:
        return await self._system.ask(
            self._ref, lambda r: GetStatus(reply_to=r), timeout=timeout
        )

    def _tell(self, msg: ConnectionMsg) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._ref.tell(msg)
        else:
            self._loop.call_soon_threadsafe(self._ref.tell, msg)


def spawn_connection(
    system: ActorSystem,
    link: DatagramLink,
    *,
    name: str = "connection",
    on_message: MessageObserver = log_message,
    on_error: ErrorObserver = log_error,
    accept_any_source: bool = False,
    resume_on_send_error: bool = True,
) -> Connection:
    """Spawn a connection actor over an already open link."""
    queue = OutboundQueue()
    ref = system.spawn(
        connection_actor(
            link,
            queue,
            on_message=on_message,
            on_error=on_error,
            accept_any_source=accept_any_source,
            resume_on_send_error=resume_on_send_error,
        ),
        name,
    )
    return Connection(system, ref, queue, asyncio.get_running_loop())


async def open_connection(
    system: ActorSystem,
    config: LinkConfig,
    *,
    name: str = "connection",
    on_message: MessageObserver = log_message,
    on_error: ErrorObserver = log_error,
) -> Connection:
    """Bind a UDP link as described by *config* and spawn its actor."""
    link = await UdpLink.open(
        config.local_addr,
        config.remote_addr,
        buffer_size=config.receive_buffer_size,
    )
    return spawn_connection(
        system,
        link,
        name=name,
        on_message=on_message,
        on_error=on_error,
        accept_any_source=config.accept_any_source,
        resume_on_send_error=config.resume_on_send_error,
    )
