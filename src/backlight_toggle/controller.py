from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from backlight_toggle.dbus_service import BacklightInterface, Callbacks, serve
from backlight_toggle.errors import BacklightError
from backlight_toggle.system.backlight import Device
from backlight_toggle.system.discovery import DeviceIter, iterate_devices

logger = logging.getLogger(__name__)


@dataclass
class Controller:
    cfg: dict[str, Any]

    def __post_init__(self) -> None:
        backlight = self.cfg["backlight"]
        self.root = Path(backlight["root"])
        self.power_file = str(backlight["power_file"])
        self._bus = None

    def device(self, path: str | os.PathLike[str]) -> Device:
        return Device(Path(path), self.power_file)

    def devices(self, *, strict: bool = True) -> DeviceIter:
        """Scan the root once. Strict scans raise if the root cannot be listed."""

        if strict:
            return iterate_devices(self.root, self.power_file)
        return DeviceIter(self.root, self.power_file)

    def find(self, name_or_path: str) -> Device:
        """Return the discovered device matching a directory name or path."""

        wanted = Path(name_or_path)
        scan = self.devices(strict=False)
        try:
            for device in scan:
                if device.path == wanted or device.name == name_or_path:
                    return device
        finally:
            scan.close()
        raise BacklightError(f"no backlight device {name_or_path!r} under {self.root}")

    def toggle_each(
        self,
        devices: Iterable[Device] | None = None,
        *,
        strict: bool = True,
        announce: Callable[[Device], None] | None = None,
    ) -> Iterator[tuple[Device, int]]:
        """Toggle devices one at a time, yielding each with its new value.

        Stops at the first failure; devices toggled before it stay toggled.
        With no ``devices`` the root is scanned, and that scan is closed once
        toggling ends, fails or is abandoned. ``announce`` is called with each
        device before it is toggled.
        """

        scan: DeviceIter | None = None
        if devices is None:
            scan = self.devices(strict=strict)
            devices = scan
        try:
            for device in devices:
                if announce is not None:
                    announce(device)
                new = device.toggle()
                logger.info("%s -> %s", device.path, new)
                yield device, new
        finally:
            if scan is not None:
                scan.close()

    def list_devices(self) -> list[str]:
        return [str(d.path) for d in self.devices(strict=False)]

    def toggle(self, name_or_path: str) -> int:
        return self.find(name_or_path).toggle()

    def toggle_all(self) -> int:
        return sum(1 for _ in self.toggle_each(strict=False))

    async def start(self) -> None:
        cb = Callbacks(
            list_devices=self.list_devices,
            toggle=self.toggle,
            toggle_all=self.toggle_all,
        )
        iface = BacklightInterface(cb)
        bus = str(self.cfg.get("dbus", {}).get("bus", "session"))
        self._bus = await serve(iface, system=(bus == "system"))
        logger.info("serving backlight devices under %s on the %s bus", self.root, bus)

    async def stop(self) -> None:
        if self._bus:
            self._bus.disconnect()
            self._bus = None

    async def run(self) -> None:
        await self.start()
        try:
            await self._bus.wait_for_disconnect()
        finally:
            await self.stop()
