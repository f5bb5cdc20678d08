"""dronelink: asynchronous UDP command link for Tello-style drones.

Commands go out through a single-peer ``Connection`` backed by an actor
that keeps sends strictly ordered and one at a time, while a receive loop
delivers telemetry to an observer.
"""

from dronelink.core import (
    ActorContext,
    ActorRef,
    ActorSystem,
    Behavior,
)
from dronelink.commands import COMMAND, LAND, NEUTRAL_RC, TAKEOFF, RcCommand, rc
from dronelink.config import (
    DriverConfig,
    DroneLinkConfig,
    LinkConfig,
    LoggingConfig,
    discover_config,
    load_config,
)
from dronelink.connection import (
    Connection,
    GetStatus,
    LinkStatus,
    StartReceiving,
    connection_actor,
    open_connection,
    spawn_connection,
)
from dronelink.driver import (
    ControlMapping,
    DeviceConnected,
    DeviceDisconnected,
    DeviceState,
    GamepadSource,
    GamepadState,
    commands_for,
    driver,
)
from dronelink.errors import (
    Direction,
    EmptyQueueError,
    LinkError,
    SocketReceiveError,
    SocketSendError,
)
from dronelink.link import DatagramLink, UdpLink
from dronelink.outbound import OutboundQueue

__version__ = "0.1.0"

__all__ = [
    "COMMAND",
    "LAND",
    "NEUTRAL_RC",
    "TAKEOFF",
    "ActorContext",
    "ActorRef",
    "ActorSystem",
    "Behavior",
    "Connection",
    "ControlMapping",
    "DatagramLink",
    "DeviceConnected",
    "DeviceDisconnected",
    "DeviceState",
    "Direction",
    "DriverConfig",
    "DroneLinkConfig",
    "EmptyQueueError",
    "GamepadSource",
    "GamepadState",
    "GetStatus",
    "LinkConfig",
    "LinkError",
    "LinkStatus",
    "LoggingConfig",
    "OutboundQueue",
    "RcCommand",
    "SocketReceiveError",
    "SocketSendError",
    "StartReceiving",
    "UdpLink",
    "commands_for",
    "connection_actor",
    "discover_config",
    "driver",
    "load_config",
    "open_connection",
    "rc",
    "spawn_connection",
]
