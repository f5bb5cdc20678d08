"""Gamepad driver actor.

Polls a ``GamepadSource`` on a fixed tick, turns the connected device's
state into commands and hands them to a ``CommandSink`` (normally a
``Connection``). Device hot-plugging arrives as explicit
``DeviceConnected`` / ``DeviceDisconnected`` events folded into a
``DeviceState`` value owned by the actor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TYPE_CHECKING

from dronelink.commands import COMMAND, LAND, NEUTRAL_RC, TAKEOFF, RcCommand
from dronelink.core.behavior import Behavior

if TYPE_CHECKING:
    from dronelink.config import DriverConfig
    from dronelink.core.context import ActorContext


@dataclass(frozen=True)
class GamepadState:
    """One snapshot of a device's buttons and normalized axes."""

    buttons: tuple[bool, ...] = ()
    axes: tuple[float, ...] = ()

    def pressed(self, index: int) -> bool:
        return 0 <= index < len(self.buttons) and self.buttons[index]

    def axis(self, index: int) -> float:
        if 0 <= index < len(self.axes):
            return self.axes[index]
        return 0.0


@dataclass(frozen=True)
class DeviceConnected:
    device_id: int


@dataclass(frozen=True)
class DeviceDisconnected:
    device_id: int


type DeviceEvent = DeviceConnected | DeviceDisconnected


@dataclass(frozen=True)
class DeviceState:
    """Which device, if any, the driver reads from."""

    device_id: int | None = None

    @property
    def connected(self) -> bool:
        return self.device_id is not None

    def apply(self, event: DeviceEvent) -> DeviceState:
        match event:
            case DeviceConnected(device_id=device_id) if not self.connected:
                return DeviceState(device_id)
            case DeviceDisconnected(device_id=device_id) if device_id == self.device_id:
                return DeviceState()
            case _:
                return self


class GamepadSource(Protocol):
    def poll_events(self) -> list[DeviceEvent]: ...

    def read_state(self, device_id: int) -> GamepadState | None: ...

    def close(self) -> None: ...


class CommandSink(Protocol):
    def send(self, text: str) -> None: ...


@dataclass(frozen=True)
class ControlMapping:
    """Button and axis indices used to build commands."""

    command_button: int = 0
    takeoff_button: int = 1
    land_button: int = 2
    axes: tuple[int, int, int, int] = (2, 3, 1, 0)

    @classmethod
    def from_config(cls, config: DriverConfig) -> ControlMapping:
        return cls(
            command_button=config.command_button,
            takeoff_button=config.takeoff_button,
            land_button=config.land_button,
            axes=config.axes,
        )


def commands_for(state: GamepadState, mapping: ControlMapping) -> list[str]:
    """Commands for one tick: pressed buttons first, then the stick command.

    >>> commands_for(GamepadState(buttons=(False, True), axes=(0.0,) * 4), ControlMapping())
    ['takeoff', 'rc 0 0 0 0']
    """
    commands: list[str] = []
    if state.pressed(mapping.command_button):
        commands.append(COMMAND)
    if state.pressed(mapping.takeoff_button):
        commands.append(TAKEOFF)
    if state.pressed(mapping.land_button):
        commands.append(LAND)
    a, b, c, d = (state.axis(i) for i in mapping.axes)
    commands.append(str(RcCommand.from_axes(a, b, c, d)))
    return commands


@dataclass(frozen=True)
class Tick:
    pass


type DriverMsg = Tick


def driver(
    source: GamepadSource,
    sink: CommandSink,
    *,
    mapping: ControlMapping = ControlMapping(),
    interval: float = 0.01,
) -> Behavior[DriverMsg]:
    """Create the driver behavior.

    On every ``Tick`` (sent to itself every *interval* seconds) the driver drains device events, then reads the
    connected device and sends its commands. Nothing is sent while no
    device is connected; losing the device sends one neutral ``rc`` so
    the vehicle does not keep the last stick values.
    """

    def track(ctx: ActorContext[DriverMsg], device: DeviceState) -> DeviceState:
        for event in source.poll_events():
            updated = device.apply(event)
            match (event, updated is device):
                case (DeviceConnected(device_id=device_id), False):
                    ctx.log.info("joystick %d connected", device_id)
                case (DeviceDisconnected(device_id=device_id), False):
                    ctx.log.info("joystick %d disconnected", device_id)
                    ctx.log.debug("command: %s", NEUTRAL_RC)
                    sink.send(str(NEUTRAL_RC))
                case _:
                    ctx.log.debug("ignoring %s", event)
            device = updated
        return device

    def polling(device: DeviceState) -> Behavior[DriverMsg]:
        async def receive(ctx: ActorContext[DriverMsg], msg: DriverMsg) -> Behavior[DriverMsg]:
            match msg:
                case Tick():
                    current = track(ctx, device)
                    if current.device_id is not None:
                        state = source.read_state(current.device_id)
                        if state is not None:
                            for command in commands_for(state, mapping):
                                ctx.log.debug("command: %s", command)
                                sink.send(command)
                    if current == device:
                        return Behavior.same()
                    return polling(current)

            return Behavior.unhandled()

        return Behavior.receive(receive)

    async def setup(ctx: ActorContext[DriverMsg]) -> Behavior[DriverMsg]:
        async def close_source() -> None:
            source.close()

        ctx.on_stop(close_source)

        device = track(ctx, DeviceState())
        if not device.connected:
            ctx.log.warning("no joystick connected")

        ctx.every(interval, Tick())
        return polling(device)

    return Behavior.setup(setup)
