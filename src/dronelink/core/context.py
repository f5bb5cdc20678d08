"""Actor context protocol.

Defines what a behavior handler can reach: its own ref, the system, a
logger, stop hooks, periodic self-messages and pipe-to-self. Also defines ``System``, the part of
the actor system visible from behaviors.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol, overload, TYPE_CHECKING

if TYPE_CHECKING:
    from dronelink.core.behavior import Behavior
    from dronelink.core.ref import ActorRef


class System(Protocol):
    """Protocol exposing the actor system's public API to behaviors."""

    @property
    def name(self) -> str: ...

    def spawn[M](self, behavior: Behavior[M], name: str) -> ActorRef[M]: ...

    async def ask[M, R](
        self,
        ref: ActorRef[M],
        msg_factory: Callable[[ActorRef[R]], M],
        *,
        timeout: float,
    ) -> R: ...

    async def shutdown(self) -> None: ...


class ActorContext[M](Protocol):
    """Protocol for the context available to actor behavior handlers."""

    @property
    def self(self) -> ActorRef[M]: ...

    @property
    def system(self) -> System: ...

    @property
    def log(self) -> logging.Logger: ...

    def on_stop(self, callback: Callable[[], Awaitable[None]]) -> None: ...

    def every(self, interval: float, message: M) -> None:
        """Send *message* to self every *interval* seconds until the actor stops."""
        ...

    @overload
    def pipe_to_self(
        self,
        coro: Awaitable[M],
        *,
        on_failure: Callable[[Exception], M] | None = None,
    ) -> None: ...

    @overload
    def pipe_to_self[T](
        self,
        coro: Awaitable[T],
        mapper: Callable[[T], M],
        on_failure: Callable[[Exception], M] | None = None,
    ) -> None: ...

    def pipe_to_self[T](
        self,
        coro: Awaitable[T],
        mapper: Callable[[T], M] | None = None,
        on_failure: Callable[[Exception], M] | None = None,
    ) -> None: ...
