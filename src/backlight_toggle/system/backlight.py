from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from backlight_toggle.errors import DeviceIOError, MalformedDataError

logger = logging.getLogger(__name__)

BL_POWER = "bl_power"

_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


def read_int(path: Path) -> int:
    """Read a sysfs attribute holding a single decimal integer.

    The trimmed text must be ASCII digits with an optional sign and fit a
    signed 32-bit int. Raises DeviceIOError when the file cannot be read and
    MalformedDataError when it can but does not parse.
    """

    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise DeviceIOError(path, e) from e
    text = content.strip()
    if not _INT_RE.fullmatch(text):
        raise MalformedDataError(path, content)
    value = int(text)
    if not _INT_MIN <= value <= _INT_MAX:
        raise MalformedDataError(path, content)
    return value


def write_int(path: Path, value: int) -> None:
    logger.debug("sysfs.write %s <- %s", path, value)
    try:
        # Replaces the whole file; sysfs accepts the value without a newline.
        path.write_text(str(int(value)), encoding="utf-8")
    except OSError as e:
        raise DeviceIOError(path, e) from e


@dataclass(frozen=True)
class Device:
    """A backlight class device that can be toggled on and off.

    Constructing a Device never touches the filesystem and never fails. The
    power control path is derived once as ``path / power_file``. Callers pass
    a single file name as ``power_file``; an absolute path, a name with a
    separator or an empty string would point outside the device directory.
    """

    path: Path
    power_file: str = BL_POWER
    power_control_path: Path = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        path = Path(self.path)
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "power_control_path", path / self.power_file)

    @property
    def name(self) -> str:
        return self.path.name

    def power(self) -> int:
        return read_int(self.power_control_path)

    def toggle(self) -> int:
        """Flip the power state between 0 and 1 and return the new value.

        Any nonzero value reads as set and flips to 0. The read and the write
        are separate filesystem calls: two toggles racing on the same device
        can lose an update.
        """

        old = read_int(self.power_control_path)
        new = 1 if old == 0 else 0
        write_int(self.power_control_path, new)
        logger.debug("toggled %s: %s -> %s", self.path, old, new)
        return new
