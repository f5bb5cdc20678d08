"""Typed actor references for fire-and-forget messaging."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

type ActorId = str


class ActorRef[M](Protocol):
    """Typed handle to an actor, used for fire-and-forget messaging."""

    @property
    def id(self) -> ActorId: ...

    def tell(self, msg: M) -> None: ...


@dataclass(frozen=True)
class LocalActorRef[M]:
    """In-process actor reference that delivers via direct callback.

    ``tell`` must be called from the event loop thread. Other threads go
    through ``loop.call_soon_threadsafe(ref.tell, msg)``.
    """

    id: ActorId
    _deliver: Callable[[Any], None]

    def tell(self, msg: M) -> None:
        self._deliver(msg)
