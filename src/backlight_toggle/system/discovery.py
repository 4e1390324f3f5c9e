from __future__ import annotations

import logging
import os
from pathlib import Path

from backlight_toggle.errors import DeviceIOError
from backlight_toggle.system.backlight import BL_POWER, Device

logger = logging.getLogger(__name__)

BACKLIGHT_PATH = Path("/sys/class/backlight")


def _is_device_dir(path: Path, power_file: str) -> bool:
    try:
        return (path / power_file).is_file()
    except OSError as e:
        logger.debug("skipping %s: %s", path, e)
        return False


class DeviceIter:
    """Single-pass iterator over the backlight devices found in ``root``.

    An entry is a device when it holds a regular ``power_file``. Entries are
    produced in directory listing order, one check per advance; entries that
    fail to list or check are skipped.

    A root that cannot be opened gives an empty iterator unless ``strict`` is
    set, in which case DeviceIOError is raised here. Once exhausted the
    iterator stays exhausted; scan again with a new instance. Use it as a
    context manager, or call close(), to release the listing early.
    """

    def __init__(
        self,
        root: str | os.PathLike[str] = BACKLIGHT_PATH,
        power_file: str = BL_POWER,
        *,
        strict: bool = False,
    ) -> None:
        self.root = Path(root)
        self.power_file = power_file
        self._listing: os.ScandirIterator[str] | None
        try:
            self._listing = os.scandir(self.root)
        except OSError as e:
            if strict:
                raise DeviceIOError(self.root, e) from e
            logger.debug("cannot list %s: %s", self.root, e)
            self._listing = None

    def __iter__(self) -> DeviceIter:
        return self

    def __next__(self) -> Device:
        while self._listing is not None:
            try:
                entry = next(self._listing)
            except StopIteration:
                self.close()
                break
            except OSError as e:
                # The listing is closed by the failing call; the next advance ends it.
                logger.debug("error listing %s: %s", self.root, e)
                continue

            path = Path(entry.path)
            if _is_device_dir(path, self.power_file):
                logger.debug("found backlight device %s", path)
                return Device(path, self.power_file)

        raise StopIteration

    def close(self) -> None:
        if self._listing is not None:
            self._listing.close()
            self._listing = None

    def __enter__(self) -> DeviceIter:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


def iterate_devices(
    root: str | os.PathLike[str] = BACKLIGHT_PATH,
    power_file: str = BL_POWER,
) -> DeviceIter:
    """Open ``root`` now and return an iterator over its devices.

    Raises DeviceIOError when ``root`` cannot be listed. Use ``DeviceIter``
    directly to get an empty iterator instead.
    """

    return DeviceIter(root, power_file, strict=True)
