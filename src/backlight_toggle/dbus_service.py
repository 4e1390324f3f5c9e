from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from dbus_next.aio import MessageBus
from dbus_next.constants import BusType
from dbus_next.errors import DBusError
from dbus_next.service import ServiceInterface, method

from backlight_toggle.errors import BacklightError, DeviceIOError, MalformedDataError

# Optional surface used only by `backlight-toggle serve`; the `system` core never imports it.
# dbus-next uses signature strings ("s", "as") in annotations.
# Ruff tries to treat these as Python types.


BUS_NAME = "io.github.backlight_toggle"
OBJ_PATH = "/io/github/backlight_toggle"

ERROR_IO = f"{BUS_NAME}.Error.IO"
ERROR_MALFORMED = f"{BUS_NAME}.Error.MalformedData"
ERROR_FAILED = f"{BUS_NAME}.Error.Failed"


@dataclass(frozen=True)
class Callbacks:
    list_devices: Callable[[], list[str]]
    toggle: Callable[[str], int]
    toggle_all: Callable[[], int]


def to_dbus_error(exc: Exception) -> DBusError:
    if isinstance(exc, DeviceIOError):
        return DBusError(ERROR_IO, str(exc))
    if isinstance(exc, MalformedDataError):
        return DBusError(ERROR_MALFORMED, str(exc))
    return DBusError(ERROR_FAILED, str(exc))


class BacklightInterface(ServiceInterface):
    def __init__(self, cb: Callbacks):
        super().__init__(BUS_NAME)
        self._cb = cb

    @method()
    def ListDevices(self) -> "as":  # noqa: N802
        return self._cb.list_devices()

    @method()
    def Toggle(self, device: "s") -> "i":  # noqa: N802
        try:
            return self._cb.toggle(device)
        except (BacklightError, ValueError) as e:
            raise to_dbus_error(e) from e

    @method()
    def ToggleAll(self) -> "i":  # noqa: N802
        try:
            return self._cb.toggle_all()
        except BacklightError as e:
            raise to_dbus_error(e) from e


async def serve(iface: BacklightInterface, system: bool = False) -> MessageBus:
    bus_type = BusType.SYSTEM if system else BusType.SESSION
    bus = await MessageBus(bus_type=bus_type).connect()
    bus.export(OBJ_PATH, iface)
    await bus.request_name(BUS_NAME)
    return bus
