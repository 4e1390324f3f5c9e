from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from backlight_toggle.paths import default_config_path
from backlight_toggle.system.backlight import BL_POWER
from backlight_toggle.system.discovery import BACKLIGHT_PATH

logger = logging.getLogger(__name__)

_BUSES = ("session", "system")


class ConfigError(ValueError):
    pass


def _section(cfg: dict[str, Any], key: str) -> dict[str, Any]:
    value = cfg.setdefault(key, {})
    if value is None:
        value = cfg[key] = {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping")
    return value


def load(path: str | Path | None = None) -> dict[str, Any]:
    """Load, normalize and validate the config file.

    With no ``path`` the default location is used if a file exists there;
    a missing default file gives the built-in defaults.
    """

    if path is None:
        p = default_config_path()
        if not p.is_file():
            logger.debug("no config file at %s, using defaults", p)
            return normalize({})
    else:
        p = Path(path)

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {p}: {e.strerror or e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Top-level config must be a mapping")

    normalize(data)
    validate(data)
    return data


def normalize(cfg: dict[str, Any]) -> dict[str, Any]:
    """Fill in defaults and strip stray whitespace from string values."""

    backlight = _section(cfg, "backlight")
    backlight.setdefault("root", str(BACKLIGHT_PATH))
    backlight.setdefault("power_file", BL_POWER)
    for key in ("root", "power_file"):
        if isinstance(backlight[key], str):
            backlight[key] = backlight[key].strip()

    log_cfg = _section(cfg, "logging")
    level = log_cfg.get("level")
    if isinstance(level, str):
        log_cfg["level"] = level.strip().upper()

    dbus = _section(cfg, "dbus")
    dbus.setdefault("bus", "session")
    if isinstance(dbus["bus"], str):
        dbus["bus"] = dbus["bus"].strip().lower()

    return cfg


def validate(cfg: dict[str, Any]) -> None:
    backlight = _section(cfg, "backlight")

    root = backlight.get("root")
    if not isinstance(root, str) or not root:
        raise ConfigError("backlight.root must be a non-empty path")

    power_file = backlight.get("power_file")
    if not isinstance(power_file, str) or not power_file:
        raise ConfigError("backlight.power_file must be a non-empty file name")
    if "/" in power_file or power_file in (".", ".."):
        raise ConfigError(f"backlight.power_file must be a single file name: {power_file}")

    level = _section(cfg, "logging").get("level")
    if level is not None and not isinstance(logging.getLevelName(str(level)), int):
        raise ConfigError(f"logging.level is not a logging level: {level}")

    bus = _section(cfg, "dbus").get("bus")
    if bus not in _BUSES:
        raise ConfigError(f"dbus.bus must be one of {', '.join(_BUSES)}: {bus}")
