from __future__ import annotations

import argparse
import asyncio
import colorsys
import json
import logging
import sys
from typing import Any

from hue_bridge.bridge import Bridge
from hue_bridge.config import ClientConfig
from hue_bridge.discovery import (
    DiscoveredBridge,
    discover_nupnp,
    enrich_with_description,
    mdns_discover,
    merge_discovered,
    ssdp_discover,
)
from hue_bridge.errors import HueError
from hue_bridge.models import LightCommand
from hue_bridge.registration import pair

logger = logging.getLogger("hue_bridge")


def rgb_to_hsv(r: int, g: int, b: int) -> tuple[int, int, int]:
    """Convert 0-255 RGB to the bridge's hue (0-65535), sat and bri (0-254)."""
    h, s, v = colorsys.rgb_to_hsv(r / 255.0, g / 255.0, b / 255.0)
    return int(round(h * 65535)), int(round(s * 254)), int(round(v * 254))


def build_light_command(action: str, values: list[int]) -> LightCommand:
    cmd = LightCommand()
    if action == "on":
        return cmd.on()
    if action == "off":
        return cmd.off()

    arity = {"bri": 1, "hue": 1, "sat": 1, "hsv": 3, "rgb": 3, "mired": 2, "kelvin": 2}
    if action not in arity:
        raise ValueError(f"Unknown light action: {action}")
    if len(values) != arity[action]:
        raise ValueError(f"{action} takes {arity[action]} value(s)")

    if action == "bri":
        return cmd.with_bri(values[0])
    if action == "hue":
        return cmd.with_hue(values[0])
    if action == "sat":
        return cmd.with_sat(values[0])
    if action == "hsv":
        return cmd.with_hue(values[0]).with_sat(values[1]).with_bri(values[2])
    if action == "rgb":
        hue, sat, bri = rgb_to_hsv(*values)
        return cmd.with_hue(hue).with_sat(sat).with_bri(bri)
    if action == "mired":
        return cmd.with_ct(values[0]).with_bri(values[1]).with_sat(254)
    # kelvin
    if values[0] <= 0:
        raise ValueError("kelvin must be positive")
    return cmd.with_ct(1_000_000 // values[0]).with_bri(values[1]).with_sat(254)


def _parse_ids(value: str) -> list[int]:
    try:
        ids = [int(item) for item in value.split(",") if item.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid light id list: {value!r}")
    if not ids or any(i < 0 for i in ids):
        raise argparse.ArgumentTypeError(f"invalid light id list: {value!r}")
    return ids


def _print_bridges(bridges: list[DiscoveredBridge], *, json_out: bool) -> None:
    if json_out:
        print(
            json.dumps(
                [
                    {"ip": b.ip, "source": b.source, "bridgeId": b.bridge_id, "location": b.location}
                    for b in bridges
                ],
                indent=2,
            )
        )
        return
    if not bridges:
        print("No Hue bridges discovered.")
        return
    for i, b in enumerate(bridges, start=1):
        print(f"{i}) {b.ip} - {b.friendly_name or b.bridge_id or 'Hue Bridge'} ({b.source})")


async def _discover(args: argparse.Namespace, config: ClientConfig) -> list[DiscoveredBridge]:
    found: list[DiscoveredBridge] = []
    if not args.no_nupnp:
        try:
            found.extend(await discover_nupnp(url=config.discovery_url))
        except HueError as err:
            logger.warning("cloud discovery failed: %s", err)
    if not args.no_ssdp:
        found.extend(await asyncio.to_thread(ssdp_discover, timeout_seconds=args.timeout_seconds))
    if not args.no_mdns:
        found.extend(await asyncio.to_thread(mdns_discover, timeout_seconds=args.timeout_seconds))
    bridges = merge_discovered(found)
    if args.no_enrich:
        return bridges
    return list(await asyncio.gather(*(enrich_with_description(b) for b in bridges)))


def _print_rows(rows: list[Any]) -> None:
    for row in rows:
        print(row)


async def _run(args: argparse.Namespace, config: ClientConfig) -> int:
    if args.command == "discover":
        _print_bridges(await _discover(args, config), json_out=args.json)
        return 0

    if not args.bridge_host:
        print("Missing bridge host. Pass --bridge-host or set HUE_BRIDGE_HOST.", file=sys.stderr)
        return 2

    if args.command == "pair":
        print("Press the link button on the bridge now.")
        username = await pair(
            args.bridge_host,
            args.devicetype,
            timeout_seconds=args.timeout_seconds,
            interval_seconds=args.interval_ms / 1000.0,
        )
        print(f"Username: {username}")
        return 0

    if not args.username:
        print("Missing username. Pass --username or set HUE_USERNAME.", file=sys.stderr)
        return 2

    async with Bridge.connect(
        args.bridge_host, args.username, timeout_seconds=config.request_timeout_seconds
    ) as bridge:
        if args.command == "lights":
            lights = await bridge.get_all_lights()
            for light_id, light in sorted(lights.items()):
                on = "on" if light.state.on else "off"
                print(f"{light_id:>3} {light.name:<24} {on:<3} bri={light.state.bri}")
            return 0

        if args.command == "scenes":
            scenes = await bridge.get_all_scenes()
            name_len = max([4] + [len(s.name) for s in scenes.values()])
            id_len = max([2] + [len(i) for i in scenes])
            print(f"{'id':<{id_len}} {'name':<{name_len}} recycle locked lights")
            for scene_id, scene in sorted(scenes.items()):
                print(
                    f"{scene_id:<{id_len}} {scene.name:<{name_len}} {scene.recycle!s:<7} "
                    f"{scene.locked!s:<6} {scene.lights}"
                )
            return 0

        if args.command == "set-light":
            try:
                cmd = build_light_command(args.action, args.values)
            except ValueError as exc:
                print(str(exc), file=sys.stderr)
                return 2
            # Sequential, with a pause between lights, to avoid flooding the bridge.
            for light_id in args.lights:
                _print_rows(await bridge.set_light_state(light_id, cmd))
                await asyncio.sleep(args.delay_ms / 1000.0)
            return 0

        if args.command == "recall-scene":
            _print_rows(await bridge.recall_scene_in_group(args.group_id, args.scene_id))
            return 0

    return 2


def build_parser(config: ClientConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hue-bridge")
    parser.add_argument("--bridge-host", default=config.bridge_host)
    parser.add_argument("--username", default=config.username)
    parser.add_argument("--log-level", default=config.log_level)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("discover", help="Find bridges on the network")
    p.add_argument("--timeout-seconds", type=float, default=3.0)
    p.add_argument("--json", action="store_true")
    p.add_argument("--no-nupnp", action="store_true", help="Skip cloud discovery")
    p.add_argument("--no-ssdp", action="store_true", help="Skip SSDP/UPnP discovery")
    p.add_argument("--no-mdns", action="store_true", help="Skip mDNS/zeroconf discovery")
    p.add_argument("--no-enrich", action="store_true", help="Skip reading description.xml for names")

    p = sub.add_parser("pair", help="Register a new username (press the link button)")
    p.add_argument("--devicetype", default=config.devicetype)
    p.add_argument("--timeout-seconds", type=float, default=60.0)
    p.add_argument("--interval-ms", type=int, default=1500)

    sub.add_parser("lights", help="List lights")
    sub.add_parser("scenes", help="List scenes")

    p = sub.add_parser("set-light", help="Change the state of one or more lights")
    p.add_argument("lights", type=_parse_ids, help="Comma separated light ids, e.g. 1,2,3")
    p.add_argument("action", choices=["on", "off", "bri", "hue", "sat", "hsv", "rgb", "mired", "kelvin"])
    p.add_argument("values", type=int, nargs="*")
    p.add_argument("--delay-ms", type=int, default=config.command_delay_ms)

    p = sub.add_parser("recall-scene", help="Recall a scene in a group")
    p.add_argument("group_id", type=int)
    p.add_argument("scene_id")
    return parser


def main(argv: list[str] | None = None) -> None:
    config = ClientConfig.from_env()
    args = build_parser(config).parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        code = asyncio.run(_run(args, config))
    except HueError as err:
        print(f"Error ({err.kind}): {err}", file=sys.stderr)
        raise SystemExit(1)
    except ValueError as err:
        print(f"Invalid argument: {err}", file=sys.stderr)
        raise SystemExit(2)
    raise SystemExit(code)


if __name__ == "__main__":
    main()
