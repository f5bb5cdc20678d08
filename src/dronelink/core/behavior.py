"""What an actor does with its next message.

A ``Behavior`` is one of three things:

- a message handler, built with ``Behavior.receive``;
- a setup coroutine, built with ``Behavior.setup``, that runs when the
  actor starts (or switches to it) and returns the behavior to continue
  with;
- a directive returned from a handler: keep the current handler
  (``same``), stop the actor (``stopped``), or log the message as
  unhandled and keep going (``unhandled``).

Actors are written as functions that close over their state and return
a new behavior when the state changes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from dronelink.core.context import ActorContext

type Handler[M] = Callable[[ActorContext[M], M], Awaitable[Behavior[M]]]
type Setup[M] = Callable[[ActorContext[M]], Awaitable[Behavior[M]]]


class Directive(Enum):
    keep = "keep"
    stop = "stop"
    unhandled = "unhandled"


@dataclass(frozen=True, slots=True)
class Behavior[M]:
    handler: Handler[M] | None = None
    factory: Setup[M] | None = None
    directive: Directive | None = None

    @staticmethod
    def receive[T](handler: Handler[T]) -> Behavior[T]:
        return Behavior(handler=handler)

    @staticmethod
    def setup[T](factory: Setup[T]) -> Behavior[T]:
        return Behavior(factory=factory)

    @staticmethod
    def same() -> Behavior[Any]:
        return _KEEP

    @staticmethod
    def stopped() -> Behavior[Any]:
        return _STOP

    @staticmethod
    def unhandled() -> Behavior[Any]:
        return _UNHANDLED


_KEEP: Behavior[Any] = Behavior(directive=Directive.keep)
_STOP: Behavior[Any] = Behavior(directive=Directive.stop)
_UNHANDLED: Behavior[Any] = Behavior(directive=Directive.unhandled)
