"""Text command vocabulary understood by the remote device.

Every command is one newline-free ASCII string sent as one datagram.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

COMMAND = "command"
TAKEOFF = "takeoff"
LAND = "land"

STICK_MIN = -100
STICK_MAX = 100


def clamp_stick(value: int) -> int:
    """Clamp a scaled stick value into ``[-100, 100]``.

    >>> clamp_stick(150), clamp_stick(-150), clamp_stick(42)
    (100, -100, 42)
    """
    return max(STICK_MIN, min(STICK_MAX, value))


def scale_axis(value: float) -> int:
    """Scale a normalized device axis by 100, truncating toward zero.

    NaN and infinite readings count as a centered stick.
    """
    if not math.isfinite(value):
        return 0
    return clamp_stick(int(value * 100))


@dataclass(frozen=True)
class RcCommand:
    """Four-channel stick command: ``rc <a> <b> <c> <d>``."""

    a: int = 0
    b: int = 0
    c: int = 0
    d: int = 0

    @classmethod
    def from_axes(cls, a: float, b: float, c: float, d: float) -> RcCommand:
        return cls(scale_axis(a), scale_axis(b), scale_axis(c), scale_axis(d))

    def __str__(self) -> str:
        return f"rc {self.a} {self.b} {self.c} {self.d}"

    def encode(self) -> bytes:
        return str(self).encode("ascii")


NEUTRAL_RC = RcCommand()


def rc(a: int, b: int, c: int, d: int) -> str:
    """Format an ``rc`` command, clamping each field.

    >>> rc(10, -5, 0, 100)
    'rc 10 -5 0 100'
    """
    return str(RcCommand(clamp_stick(a), clamp_stick(b), clamp_stick(c), clamp_stick(d)))
