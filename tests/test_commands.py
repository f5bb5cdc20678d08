from __future__ import annotations

import pytest

from dronelink.commands import NEUTRAL_RC, RcCommand, clamp_stick, rc, scale_axis


@pytest.mark.parametrize(
    ("value", "expected"),
    [(150, 100), (-150, -100), (42, 42), (100, 100), (-100, -100)],
)
def test_clamp_stick(value: int, expected: int) -> None:
    assert clamp_stick(value) == expected


def test_scale_axis_truncates_toward_zero() -> None:
    assert scale_axis(0.999) == 99
    assert scale_axis(-0.999) == -99
    assert scale_axis(1.0) == 100
    assert scale_axis(-1.2) == -100


def test_rc_formats_and_clamps() -> None:
    assert rc(10, -5, 0, 100) == "rc 10 -5 0 100"
    assert rc(150, -150, 0, 0) == "rc 100 -100 0 0"


def test_rc_command_from_axes() -> None:
    command = RcCommand.from_axes(0.5, -0.25, 1.0, 0.0)
    assert command == RcCommand(50, -25, 100, 0)
    assert str(command) == "rc 50 -25 100 0"
    assert command.encode() == b"rc 50 -25 100 0"


def test_neutral() -> None:
    assert str(NEUTRAL_RC) == "rc 0 0 0 0"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_scale_axis_non_finite_is_centered(value: float) -> None:
    assert scale_axis(value) == 0
