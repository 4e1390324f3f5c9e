from __future__ import annotations

from pathlib import Path

import pytest

from backlight_toggle.config import ConfigError, load, normalize, validate
from backlight_toggle.paths import default_config_path


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "config.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults_when_no_config_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    cfg = load()
    assert cfg["backlight"] == {"root": "/sys/class/backlight", "power_file": "bl_power"}
    assert cfg["dbus"]["bus"] == "session"
    assert cfg["logging"].get("level") is None


def test_default_location_is_used_when_present(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    p = default_config_path()
    p.parent.mkdir(parents=True)
    p.write_text("backlight:\n  root: /tmp/fake\n", encoding="utf-8")

    cfg = load()
    assert cfg["backlight"]["root"] == "/tmp/fake"
    assert cfg["backlight"]["power_file"] == "bl_power"


def test_load_normalizes_values(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        "backlight:\n  root: '  /tmp/bl  '\n  power_file: ' power '\n"
        "logging:\n  level: debug\n"
        "dbus:\n  bus: System\n",
    )
    cfg = load(p)
    assert cfg["backlight"] == {"root": "/tmp/bl", "power_file": "power"}
    assert cfg["logging"]["level"] == "DEBUG"
    assert cfg["dbus"]["bus"] == "system"


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    cfg = load(_write(tmp_path, ""))
    assert cfg["backlight"]["power_file"] == "bl_power"


def test_missing_explicit_file_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load(tmp_path / "nope.yaml")


def test_invalid_yaml_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load(_write(tmp_path, "backlight: [unclosed\n"))


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load(_write(tmp_path, "- a\n- b\n"))


def test_section_must_be_mapping() -> None:
    with pytest.raises(ConfigError):
        normalize({"backlight": "/sys/class/backlight"})


@pytest.mark.parametrize("power_file", ["", "a/bl_power", "/etc/passwd", "..", 3])
def test_power_file_must_be_single_name(power_file: object) -> None:
    cfg = normalize({"backlight": {"power_file": power_file}})
    with pytest.raises(ConfigError):
        validate(cfg)


def test_unknown_log_level_rejected() -> None:
    cfg = normalize({"logging": {"level": "chatty"}})
    with pytest.raises(ConfigError):
        validate(cfg)


def test_unknown_bus_rejected() -> None:
    cfg = normalize({"dbus": {"bus": "tcp"}})
    with pytest.raises(ConfigError):
        validate(cfg)
