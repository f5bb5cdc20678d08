from __future__ import annotations

from pathlib import Path

import pytest

from dronelink.config import (
    DriverConfig,
    DroneLinkConfig,
    LinkConfig,
    LoggingConfig,
    discover_config,
    load_config,
)


# ---------------------------------------------------------------------------
# Config dataclass defaults
# ---------------------------------------------------------------------------


class TestLinkConfig:
    def test_defaults(self) -> None:
        cfg = LinkConfig()
        assert cfg.local_addr == ("0.0.0.0", 9000)
        assert cfg.remote_addr == ("192.168.10.1", 8889)
        assert cfg.receive_buffer_size == 1518
        assert cfg.accept_any_source is False
        assert cfg.resume_on_send_error is True

    def test_frozen(self) -> None:
        cfg = LinkConfig()
        with pytest.raises(AttributeError):
            cfg.remote_port = 1  # type: ignore[misc]


class TestDriverConfig:
    def test_defaults(self) -> None:
        cfg = DriverConfig()
        assert cfg.interval == 0.01
        assert (cfg.command_button, cfg.takeoff_button, cfg.land_button) == (0, 1, 2)
        assert cfg.axes == (2, 3, 1, 0)


class TestLoggingConfig:
    def test_defaults(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.file is None


# ---------------------------------------------------------------------------
# TOML loading
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_full_config(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "dronelink.toml"
        toml_file.write_text("""\
[link]
local_port = 9001
remote_host = "127.0.0.1"
remote_port = 8890
accept_any_source = true

[driver]
interval = 0.02
buttons = { command = 3, land = 4 }
axes = [0, 1, 2, 3]

[logging]
level = "DEBUG"
file = "tello.log"
""")
        cfg = load_config(toml_file)
        assert cfg.link.local_addr == ("0.0.0.0", 9001)
        assert cfg.link.remote_addr == ("127.0.0.1", 8890)
        assert cfg.link.accept_any_source is True
        assert cfg.driver.interval == 0.02
        assert cfg.driver.command_button == 3
        assert cfg.driver.takeoff_button == 1
        assert cfg.driver.land_button == 4
        assert cfg.driver.axes == (0, 1, 2, 3)
        assert cfg.logging.level == "DEBUG"
        assert cfg.logging.file == "tello.log"

    def test_minimal_config(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "dronelink.toml"
        toml_file.write_text("")
        assert load_config(toml_file) == DroneLinkConfig()

    def test_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.toml")

    def test_unknown_key_raises(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "dronelink.toml"
        toml_file.write_text('[link]\nremote_hots = "10.0.0.1"\n')
        with pytest.raises(TypeError):
            load_config(toml_file)

    def test_axes_need_four_entries(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "dronelink.toml"
        toml_file.write_text("[driver]\naxes = [0, 1]\n")
        with pytest.raises(ValueError, match="4 entries"):
            load_config(toml_file)


# ---------------------------------------------------------------------------
# Auto-discovery
# ---------------------------------------------------------------------------


class TestDiscoverConfig:
    def test_finds_in_cwd(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "dronelink.toml"
        toml_file.write_text("[link]\nremote_port = 1")
        assert discover_config(tmp_path) == toml_file

    def test_walks_up(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "dronelink.toml"
        toml_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert discover_config(child) == toml_file

    def test_not_found_returns_none(self, tmp_path: Path) -> None:
        child = tmp_path / "isolated"
        child.mkdir()
        assert discover_config(child) is None

    def test_load_config_no_args_auto_discovery(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "dronelink.toml").write_text('[link]\nremote_host = "10.1.1.1"')
        monkeypatch.chdir(tmp_path)
        assert load_config().link.remote_host == "10.1.1.1"

    def test_load_config_no_args_no_file_returns_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == DroneLinkConfig()
