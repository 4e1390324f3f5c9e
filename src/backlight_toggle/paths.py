from __future__ import annotations

import os
from pathlib import Path


def default_config_path(app_name: str = "backlight-toggle") -> Path:
    """Return where the optional config file is looked up.

    Uses XDG_CONFIG_HOME when available, else ~/.config. The file itself
    need not exist.
    """

    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        root = Path(base)
    else:
        root = Path.home() / ".config"
    return root / app_name / "config.yaml"
