"""Actor system entry point for spawning and managing top-level actors.

Provides ``ActorSystem``, the runtime container that owns root actors,
handles request-reply (``ask``) and graceful shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, cast, TYPE_CHECKING

from dronelink.core.actor import ActorCell
from dronelink.core.behavior import Behavior
from dronelink.core.ref import ActorRef, LocalActorRef

if TYPE_CHECKING:
    from dronelink.core.context import System


class ActorSystem:
    """Main entry point for creating and managing actors.

    Use as an async context manager for automatic shutdown.
    """

    def __init__(self, name: str = "dronelink") -> None:
        self._name = name
        self._root_cells: dict[str, ActorCell[Any]] = {}
        self._logger = logging.getLogger(f"dronelink.system.{name}")

    @property
    def name(self) -> str:
        return self._name

    async def __aenter__(self) -> ActorSystem:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.shutdown()

    def spawn[M](self, behavior: Behavior[M], name: str) -> ActorRef[M]:
        """Spawn a root-level actor in this system."""
        if name in self._root_cells:
            raise ValueError(f"Root actor '{name}' already exists")

        cell: ActorCell[M] = ActorCell(
            behavior=behavior,
            id=name,
            system=cast("System", self),
        )
        self._root_cells[name] = cell
        asyncio.get_running_loop().create_task(cell.start())
        self._logger.debug("Spawning root actor: %s", name)
        return cell.ref

    async def ask[M, R](
        self,
        ref: ActorRef[M],
        msg_factory: Callable[[ActorRef[R]], M],
        *,
        timeout: float,
    ) -> R:
        """Send a message and wait for a reply (request-reply pattern)."""
        future: asyncio.Future[R] = asyncio.get_running_loop().create_future()

        def on_reply(msg: Any) -> None:
            if not future.done():
                future.set_result(msg)

        temp_ref: ActorRef[R] = LocalActorRef(id=f"_ask/{id(future)}", _deliver=on_reply)
        ref.tell(msg_factory(temp_ref))
        return await asyncio.wait_for(future, timeout=timeout)

    async def stop(self, ref: ActorRef[Any]) -> None:
        """Stop a root actor and forget it."""
        cell = self._root_cells.pop(ref.id, None)
        if cell is not None:
            await cell.stop()

    async def shutdown(self) -> None:
        """Stop every root actor, most recently spawned first."""
        self._logger.debug("Shutting down (%d root actors)", len(self._root_cells))
        for cell in reversed(list(self._root_cells.values())):
            await cell.stop()
        self._root_cells.clear()
