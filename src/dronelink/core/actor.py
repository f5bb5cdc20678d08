"""ActorCell built on the Behavior primitive.

Owns the mailbox, runs the message loop and tracks the background tasks a
behavior starts through ``pipe_to_self``. Stopping the cell cancels those
tasks and runs the stop hooks the behavior registered.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, cast, overload, TYPE_CHECKING

from dronelink.core.behavior import Behavior, Directive
from dronelink.core.mailbox import Mailbox
from dronelink.core.ref import ActorId, ActorRef, LocalActorRef

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from dronelink.core.context import System


class CellContext[M]:
    """Concrete ActorContext implementation backed by an ActorCell."""

    def __init__(self, cell: ActorCell[M]) -> None:
        self._cell = cell

    @property
    def self(self) -> ActorRef[M]:
        return self._cell.ref

    @property
    def system(self) -> System:
        if self._cell.system is None:
            msg = "No system available in this context"
            raise RuntimeError(msg)
        return self._cell.system

    @property
    def log(self) -> logging.Logger:
        return self._cell.logger

    def on_stop(self, callback: Callable[[], Awaitable[None]]) -> None:
        self._cell.add_stop_hook(callback)

    def every(self, interval: float, message: M) -> None:
        ref = self._cell.ref

        async def tick() -> None:
            while True:
                await asyncio.sleep(interval)
                ref.tell(message)

        self._cell.track(asyncio.get_running_loop().create_task(tick()))

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
    ) -> None:
        ref = self._cell.ref

        async def run() -> None:
            try:
                result = await coro
            except Exception as exc:
                if on_failure is not None:
                    ref.tell(on_failure(exc))
                else:
                    self._cell.logger.warning(
                        "pipe_to_self failed (no on_failure handler): %s",
                        exc,
                    )
                return
            if mapper is not None:
                ref.tell(mapper(result))
            else:
                ref.tell(cast(M, result))

        self._cell.track(asyncio.get_running_loop().create_task(run()))


class ActorCell[M]:
    """Runtime engine for one actor."""

    def __init__(
        self,
        behavior: Behavior[M],
        id: ActorId,
        system: System | None = None,
    ) -> None:
        self._initial_behavior = behavior
        self._id = id
        self._system = system
        self._mailbox: Mailbox[Any] = Mailbox()
        self._logger = logging.getLogger(f"dronelink.actor.{id}")

        self._stopped = False
        self._current_handler: Callable[..., Awaitable[Behavior[M]]] | None = None
        self._loop_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._stop_hooks: list[Callable[[], Awaitable[None]]] = []

        self._ctx: CellContext[M] = CellContext(self)
        self._ref: ActorRef[M] = LocalActorRef(id=id, _deliver=self._deliver)

    @property
    def id(self) -> ActorId:
        return self._id

    @property
    def ref(self) -> ActorRef[M]:
        return self._ref

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def system(self) -> System | None:
        return self._system

    def add_stop_hook(self, hook: Callable[[], Awaitable[None]]) -> None:
        self._stop_hooks.append(hook)

    def track(self, task: asyncio.Task[None]) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _deliver(self, msg: M) -> None:
        if self._stopped:
            self._logger.debug("Dead letter: %r", msg)
            return
        self._mailbox.put(msg)

    async def start(self) -> None:
        await self._initialize(self._initial_behavior)
        self._loop_task = asyncio.get_running_loop().create_task(self._run_loop())
        self._logger.debug("Started")

    async def _initialize(self, behavior: Behavior[M]) -> None:
        match behavior:
            case Behavior(factory=factory) if factory is not None:
                await self._initialize(await factory(self._ctx))
            case Behavior(handler=handler, directive=None) if handler is not None:
                self._current_handler = handler
            case _:
                msg = f"Cannot initialize with behavior: {behavior}"
                raise TypeError(msg)

    async def _run_loop(self) -> None:
        while not self._stopped:
            try:
                msg = await self._mailbox.get()
                if self._stopped:
                    break

                if self._current_handler is None:
                    continue

                try:
                    next_behavior = await self._current_handler(self._ctx, msg)
                except Exception:
                    self._logger.exception("Actor %s failed", self._id)
                    await self._do_stop()
                    break

                await self._apply(next_behavior, msg)

            except asyncio.CancelledError:
                break
            except Exception:
                self._logger.exception("Unexpected error in message loop")
                break

    async def _apply(self, behavior: Behavior[M], msg: M) -> None:
        match behavior.directive:
            case Directive.keep:
                pass
            case Directive.stop:
                await self._do_stop()
            case Directive.unhandled:
                self._logger.debug("Unhandled message: %r", msg)
            case None:
                await self._initialize(behavior)

    async def _do_stop(self) -> None:
        if self._stopped:
            return

        self._stopped = True
        self._logger.debug("Stopping")

        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        for hook in reversed(self._stop_hooks):
            try:
                await hook()
            except Exception:
                self._logger.exception("Error in stop hook")

    async def stop(self) -> None:
        if self._stopped:
            return

        await self._do_stop()

        if self._loop_task is not None and not self._loop_task.done():
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
