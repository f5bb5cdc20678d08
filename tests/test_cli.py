from __future__ import annotations

from pathlib import Path

import pytest

from dronelink.cli import apply_overrides, build_parser
from dronelink.config import DroneLinkConfig


def test_parser_requires_mode() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_reads_common_options() -> None:
    args = build_parser().parse_args(
        ["--config", "dl.toml", "--remote-host", "127.0.0.1", "--remote-port", "9999", "repl"]
    )
    assert args.mode == "repl"
    assert args.config == Path("dl.toml")
    assert args.remote_port == 9999


def test_flags_override_config() -> None:
    args = build_parser().parse_args(
        ["--local-port", "9100", "--remote-host", "10.0.0.5", "--log-level", "DEBUG", "--log-file", "x.log", "gamepad"]
    )
    config = apply_overrides(DroneLinkConfig(), args)

    assert config.link.local_port == 9100
    assert config.link.remote_addr == ("10.0.0.5", 8889)
    assert config.logging.level == "DEBUG"
    assert config.logging.file == "x.log"


def test_absent_flags_keep_config() -> None:
    args = build_parser().parse_args(["repl"])
    assert apply_overrides(DroneLinkConfig(), args) == DroneLinkConfig()
