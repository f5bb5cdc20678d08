"""Thread-safe FIFO of outbound datagrams.

``enqueue`` reports whether the queue was empty before the call. That bit
is the was-empty handoff: only the caller that moves the queue from empty
to non-empty starts a drain chain, everyone else just appends.
"""

from __future__ import annotations

import threading
from collections import deque

from dronelink.errors import EmptyQueueError


class OutboundQueue:
    """Ordered payloads waiting to be written to the link.

    Examples
    --------
    >>> q = OutboundQueue()
    >>> q.enqueue(b"command")
    True
    >>> q.enqueue(b"takeoff")
    False
    >>> q.dequeue()
    b'command'
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: deque[bytes] = deque()

    def enqueue(self, payload: bytes) -> bool:
        """Append *payload* and return whether the queue was empty before."""
        with self._lock:
            was_empty = not self._items
            self._items.append(payload)
            return was_empty

    def peek(self) -> bytes:
        """Return the front payload without removing it.

        Raises
        ------
        EmptyQueueError
            If the queue is empty.
        """
        with self._lock:
            if not self._items:
                raise EmptyQueueError("peek on empty outbound queue")
            return self._items[0]

    def dequeue(self) -> bytes:
        """Remove and return the front payload.

        Raises
        ------
        EmptyQueueError
            If the queue is empty.
        """
        with self._lock:
            if not self._items:
                raise EmptyQueueError("dequeue on empty outbound queue")
            return self._items.popleft()

    def is_empty(self) -> bool:
        # Snapshot only; another thread may enqueue right after.
        with self._lock:
            return not self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
