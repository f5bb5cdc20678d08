"""Error kinds raised and reported by the command link."""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    """Which half of the link an error belongs to."""

    send = "send"
    receive = "receive"


class LinkError(Exception):
    """An OS-level failure on the datagram link."""

    direction: Direction

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.__cause__ = cause


class SocketSendError(LinkError):
    """A send completed with an error. The payload is not retried."""

    direction = Direction.send


class SocketReceiveError(LinkError):
    """A receive completed with an error. The receive loop stops."""

    direction = Direction.receive


class EmptyQueueError(LookupError):
    """``dequeue`` or ``peek`` was called on an empty outbound queue."""
