"""TOML-based configuration for dronelink.

Provides ``load_config`` / ``discover_config`` for loading ``dronelink.toml``
and a small hierarchy of frozen dataclasses for the link, the driver and
logging.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


__all__ = [
    "CONFIG_FILENAME",
    "DriverConfig",
    "DroneLinkConfig",
    "LinkConfig",
    "LoggingConfig",
    "discover_config",
    "load_config",
]

CONFIG_FILENAME = "dronelink.toml"


@dataclass(frozen=True)
class LinkConfig:
    """UDP link settings.

    Parameters
    ----------
    local_host : str
        Address the socket binds to.
    local_port : int
        Port the socket binds to. Telemetry replies arrive here.
    remote_host : str
        Host of the single peer commands are sent to.
    remote_port : int
        Port of the peer.
    receive_buffer_size : int
        Largest datagram accepted, in bytes. Longer datagrams are truncated.
    accept_any_source : bool
        Deliver datagrams from any host, not only from ``remote_host``.
    resume_on_send_error : bool
        Keep draining the outbound queue after a failed send.

    Examples
    --------
    >>> LinkConfig(remote_host="127.0.0.1", remote_port=9999).remote_addr
    ('127.0.0.1', 9999)
    """

    local_host: str = "0.0.0.0"
    local_port: int = 9000
    remote_host: str = "192.168.10.1"
    remote_port: int = 8889
    receive_buffer_size: int = 1518
    accept_any_source: bool = False
    resume_on_send_error: bool = True

    @property
    def local_addr(self) -> tuple[str, int]:
        return (self.local_host, self.local_port)

    @property
    def remote_addr(self) -> tuple[str, int]:
        return (self.remote_host, self.remote_port)


@dataclass(frozen=True)
class DriverConfig:
    """Gamepad driver settings.

    Parameters
    ----------
    interval : float
        Seconds between polls of the gamepad.
    command_button : int
        Button index that sends ``command``.
    takeoff_button : int
        Button index that sends ``takeoff``.
    land_button : int
        Button index that sends ``land``.
    axes : tuple[int, int, int, int]
        Axis indices feeding the four fields of ``rc a b c d``.

    Examples
    --------
    >>> DriverConfig(interval=0.02).axes
    (2, 3, 1, 0)
    """

    interval: float = 0.01
    command_button: int = 0
    takeoff_button: int = 1
    land_button: int = 2
    axes: tuple[int, int, int, int] = (2, 3, 1, 0)


@dataclass(frozen=True)
class LoggingConfig:
    """Logging settings.

    Parameters
    ----------
    level : str
        Level name for the ``dronelink`` loggers.
    file : str | None
        Log file path. ``None`` logs to the console only.
    color : bool
        Colorize console output when stderr is a terminal.
    """

    level: str = "INFO"
    file: str | None = None
    color: bool = True


@dataclass(frozen=True)
class DroneLinkConfig:
    """Top-level configuration container.

    Examples
    --------
    >>> config = DroneLinkConfig()
    >>> config.link.remote_addr
    ('192.168.10.1', 8889)

    >>> config = load_config(Path("dronelink.toml"))
    """

    link: LinkConfig = field(default_factory=LinkConfig)
    driver: DriverConfig = field(default_factory=DriverConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def discover_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for ``dronelink.toml``.

    Returns
    -------
    Path | None
        Path to the discovered config file, or ``None`` if not found.
    """
    current = start or Path.cwd()
    current = current.resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _driver_config(raw: dict[str, Any]) -> DriverConfig:
    raw = dict(raw)
    buttons: dict[str, int] = raw.pop("buttons", {})
    kwargs: dict[str, Any] = {f"{name}_button": index for name, index in buttons.items()}
    if "axes" in raw:
        axes = tuple(raw.pop("axes"))
        if len(axes) != 4:
            msg = f"driver.axes needs 4 entries, got {len(axes)}"
            raise ValueError(msg)
        kwargs["axes"] = axes
    return DriverConfig(**raw, **kwargs)


def load_config(path: Path | None = None) -> DroneLinkConfig:
    """Load a ``DroneLinkConfig`` from a TOML file.

    If *path* is ``None``, auto-discovers ``dronelink.toml`` by walking up
    from the current working directory. Returns the default config if no
    file is found.

    Raises
    ------
    FileNotFoundError
        If an explicit *path* is given but does not exist.
    TypeError
        If a section holds a key the matching dataclass does not have.
    """
    if path is None:
        discovered = discover_config()
        if discovered is None:
            return DroneLinkConfig()
        path = discovered

    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as f:
        raw = tomllib.load(f)

    return DroneLinkConfig(
        link=LinkConfig(**raw.get("link", {})),
        driver=_driver_config(raw.get("driver", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
    )
