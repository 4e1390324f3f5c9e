from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any

from backlight_toggle import __version__
from backlight_toggle.config import ConfigError, load, normalize, validate
from backlight_toggle.controller import Controller
from backlight_toggle.errors import BacklightError
from backlight_toggle.system.backlight import Device

logger = logging.getLogger(__name__)

PROG = "backlight-toggle"


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Toggle the power of every backlight device found in sysfs.",
    )
    ap.add_argument("--version", action="version", version=__version__)
    ap.add_argument("-c", "--config", help="YAML config file")
    ap.add_argument("--root", help="directory holding backlight devices")
    ap.add_argument("--power-file", help="name of the power control file in each device")
    ap.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    ap.set_defaults(devices=[])

    sub = ap.add_subparsers(dest="cmd")

    toggle = sub.add_parser("toggle", help="Toggle devices (the default)")
    toggle.add_argument(
        "devices",
        nargs="*",
        metavar="DEVICE",
        help="device directories to toggle instead of scanning the root",
    )

    sub.add_parser("list", help="List devices and their current power value")
    sub.add_parser("serve", help="Serve list/toggle over D-Bus")

    return ap


def _load_config(args: argparse.Namespace) -> dict[str, Any]:
    cfg = load(args.config)
    backlight = cfg["backlight"]
    if args.root:
        backlight["root"] = args.root
    if args.power_file:
        backlight["power_file"] = args.power_file
    normalize(cfg)
    validate(cfg)
    return cfg


def _configure_logging(cfg: dict[str, Any], verbose: bool, default: int) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = cfg["logging"].get("level") or default
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _toggle(ctl: Controller, paths: list[str]) -> int:
    devices = [ctl.device(p) for p in paths] if paths else None

    def announce(device: Device) -> None:
        print(device.path, flush=True)

    for _device, new in ctl.toggle_each(devices, announce=announce):
        print(f"  -> {new}")
    return 0


def _list(ctl: Controller) -> int:
    with ctl.devices() as scan:
        for device in scan:
            try:
                value = str(device.power())
            except BacklightError as e:
                logger.warning("cannot read %s: %s", device.power_control_path, e)
                value = "?"
            print(f"{device.path}\t{value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    cmd = args.cmd or "toggle"

    try:
        cfg = _load_config(args)
    except ConfigError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        return 2

    _configure_logging(
        cfg,
        verbose=args.verbose,
        default=logging.INFO if cmd == "serve" else logging.WARNING,
    )
    ctl = Controller(cfg)

    try:
        if cmd == "list":
            return _list(ctl)
        if cmd == "serve":
            asyncio.run(ctl.run())
            return 0
        return _toggle(ctl, args.devices)
    except BacklightError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return 130
    except Exception as exc:
        logger.exception("Unhandled error: %s", exc)
        return 1
